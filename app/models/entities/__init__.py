"""
实体模型模块
数据库后端使用的表模型
"""

from .admin import Admin
from .invite_code import InviteCode, InviteCodeUsage

__all__ = [
    "Admin",
    "InviteCode",
    "InviteCodeUsage",
]
