"""
数据模型模块
"""

# 基础模块
from .base import (
    get_engine, reset_engine, init_db, db_session_context
)

# 实体模型
from .entities import (
    Admin, InviteCode, InviteCodeUsage
)

__all__ = [
    # 基础模型
    "get_engine",
    "reset_engine",
    "init_db",
    "db_session_context",

    # 实体模型
    "Admin",
    "InviteCode",
    "InviteCodeUsage",
]
