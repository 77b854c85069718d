"""
数据库基础模块
包含数据库连接、会话管理等基础功能
"""

from .database import (
    get_engine, reset_engine, init_db, db_session_context
)

__all__ = [
    "get_engine",
    "reset_engine",
    "init_db",
    "db_session_context",
]
