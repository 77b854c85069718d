"""
API路由模块
"""

from .admin import router as admin_router
from .invite_codes import router as invite_codes_router

__all__ = [
    "admin_router",
    "invite_codes_router",
]
