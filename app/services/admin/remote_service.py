"""数据库版管理员账户服务

封装管理员账户业务逻辑，调用 DAO 层进行数据库操作。
"""

from typing import Optional

from loguru import logger

from app.core.exceptions import ConflictError
from app.dao.admin_dao import AdminDAO, admin_dao
from app.models.schemas import AdminUserInfo
from app.services.admin.base import AdminAccountBackend
from app.utils.auth import get_password_hash, verify_password


class DatabaseAdminService(AdminAccountBackend):
    """管理员账户保存在 admins 表中"""

    def __init__(self, dao: Optional[AdminDAO] = None):
        self.dao = dao or admin_dao

    def create_admin_user(self, username: str, password: str) -> AdminUserInfo:
        try:
            if self.dao.find_by_username(username):
                raise ConflictError(f"用户名已存在: {username}")

            admin = self.dao.create(username, get_password_hash(password))
            logger.info(f"管理员创建成功: {username} (角色: {admin.role})")
            return admin
        except ConflictError:
            # 业务校验类错误直接抛出，由上层处理
            raise
        except Exception as e:
            logger.error(f"创建管理员失败: {e}")
            raise

    def admin_login(self, username: str, password: str) -> Optional[AdminUserInfo]:
        admin = self.dao.find_by_username(username, active_only=True)

        if admin is None or not verify_password(password, admin.password_hash):
            logger.warning(f"管理员登录失败: {username}")
            return None

        updated = self.dao.update_last_login(admin.id)
        logger.info(f"管理员登录成功: {username}")
        return updated or admin

    def needs_admin_initialization(self) -> bool:
        return self.dao.count() == 0
