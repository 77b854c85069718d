"""
数据库连接和会话管理
数据库后端为可选项：未配置 DATABASE_URL 时不创建引擎
"""

import logging
import os
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import SQLModel, Session as SQLModelSession

from app.core.exceptions import BackendUnavailableError, PersistenceError
from config.config import settings

# 降低 SQLAlchemy 内部 logger 的日志级别，压缩冗长 SQL 输出
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

_engine: Optional[Engine] = None
_engine_lock = threading.Lock()


def _build_engine(database_url: str) -> Engine:
    """根据连接串创建引擎"""
    if "sqlite" in database_url:
        db_path = database_url.split("///", 1)[-1]
        db_dir = os.path.dirname(db_path)
        if db_dir and db_path != ":memory:":
            os.makedirs(db_dir, exist_ok=True)
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    connect_args = {}
    if "mysql" in database_url:
        connect_args = {"charset": "utf8mb4"}

    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
        pool_pre_ping=True,  # 自动重连检测
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


def get_engine() -> Engine:
    """获取数据库引擎（懒加载）

    Raises:
        BackendUnavailableError: 未配置 DATABASE_URL
    """
    global _engine
    if _engine is None:
        with _engine_lock:
            if _engine is None:
                if not settings.DATABASE_URL:
                    raise BackendUnavailableError("数据库未配置（DATABASE_URL 为空）")
                _engine = _build_engine(settings.DATABASE_URL)
                logger.info("数据库引擎已创建")
    return _engine


def reset_engine() -> None:
    """释放当前引擎，下次访问时按最新配置重建"""
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None


def init_db() -> None:
    """初始化数据库表"""
    # 导入模型以确保它们被注册
    from app.models import entities  # noqa: F401

    try:
        SQLModel.metadata.create_all(bind=get_engine())
        logger.info(f"数据库表创建成功 | 表: {sorted(SQLModel.metadata.tables)}")
    except OperationalError as e:
        logger.error(f"❌ 数据库表创建失败: {e}")
        raise BackendUnavailableError("数据库连接失败", original_exception=e) from e


@contextmanager
def db_session_context() -> Generator[SQLModelSession, None, None]:
    """数据库会话上下文管理器

    成功时提交，异常时回滚；连接类错误转换为 BackendUnavailableError，
    其余数据库错误转换为 PersistenceError
    """
    with SQLModelSession(get_engine()) as session:
        try:
            yield session
            session.commit()
        except OperationalError as e:
            session.rollback()
            logger.error(f"数据库连接失败: {e}")
            raise BackendUnavailableError("数据库连接失败", original_exception=e) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"数据库会话操作失败: {e}")
            raise PersistenceError(f"数据库写入失败: {e}", original_exception=e) from e
        except Exception:
            session.rollback()
            raise
