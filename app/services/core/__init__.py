"""
核心服务模块
包含本地键值存储等基础功能
"""

from .local_storage import LocalStorage

__all__ = [
    "LocalStorage",
]
