"""
管理员 DAO 层
负责 admins 表的数据库操作
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.constants.invite_code_types import AdminRoles
from app.core.exceptions import ConflictError, PersistenceError
from app.models.base.database import db_session_context
from app.models.entities import Admin
from app.models.schemas import AdminUserInfo


def to_admin_info(row: Admin) -> AdminUserInfo:
    """表记录转换为统一的数据结构（需在会话内调用）"""
    return AdminUserInfo(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        role=row.role,
        created_at=row.created_at,
        last_login_at=row.last_login_at,
    )


class AdminDAO:
    """管理员数据访问对象"""

    def find_by_username(self, username: str, active_only: bool = False) -> Optional[AdminUserInfo]:
        """
        根据用户名查询管理员

        Args:
            username: 用户名
            active_only: 只查询启用的账号

        Returns:
            管理员信息
        """
        with db_session_context() as session:
            statement = select(Admin).where(Admin.username == username)
            if active_only:
                statement = statement.where(Admin.is_active == True)  # noqa: E712
            admin = session.exec(statement).first()
            return to_admin_info(admin) if admin else None

    def count(self) -> int:
        """管理员总数"""
        with db_session_context() as session:
            return session.exec(select(func.count(Admin.id))).one()

    def create(self, username: str, password_hash: str) -> AdminUserInfo:
        """
        创建管理员，角色按创建时已有的管理员数量决定

        Raises:
            ConflictError: 用户名已存在
        """
        try:
            with db_session_context() as session:
                existing_count = session.exec(select(func.count(Admin.id))).one()
                admin = Admin(
                    username=username,
                    password_hash=password_hash,
                    role=AdminRoles.role_for_new_admin(existing_count),
                    is_active=True,
                )
                session.add(admin)
                session.flush()
                return to_admin_info(admin)
        except PersistenceError as e:
            if isinstance(e.original_exception, IntegrityError):
                raise ConflictError(f"用户名已存在: {username}") from e
            raise

    def update_last_login(self, admin_id: str) -> Optional[AdminUserInfo]:
        """
        更新最后登录时间

        Args:
            admin_id: 管理员ID

        Returns:
            更新后的管理员信息
        """
        with db_session_context() as session:
            admin = session.get(Admin, admin_id)
            if not admin:
                return None

            admin.last_login_at = datetime.now()
            session.add(admin)
            session.flush()
            return to_admin_info(admin)


# 全局 DAO 实例
admin_dao = AdminDAO()
