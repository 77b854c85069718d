"""本地存储版管理员账户服务"""

from datetime import datetime
from typing import Optional

from loguru import logger

from app.constants.invite_code_types import AdminRoles
from app.core.exceptions import ConflictError
from app.dao.local_dataset_dao import LocalDatasetDAO
from app.models.schemas import AdminUserInfo
from app.services.admin.base import AdminAccountBackend
from app.utils.auth import get_password_hash, verify_password
from app.utils.key_generator import generate_record_id


class LocalAdminService(AdminAccountBackend):
    """管理员账户保存在本地数据集的 admins 列表中"""

    def __init__(self, dataset_dao: LocalDatasetDAO):
        self.dataset_dao = dataset_dao

    def create_admin_user(self, username: str, password: str) -> AdminUserInfo:
        data = self.dataset_dao.load()

        if any(a.username == username for a in data.admins):
            raise ConflictError(f"用户名已存在: {username}")

        admin = AdminUserInfo(
            id=generate_record_id("admin"),
            username=username,
            password_hash=get_password_hash(password),
            role=AdminRoles.role_for_new_admin(len(data.admins)),
            created_at=datetime.now(),
        )
        data.admins.append(admin)
        self.dataset_dao.save(data)

        logger.info(f"管理员创建成功: {username} (角色: {admin.role})")
        return admin

    def admin_login(self, username: str, password: str) -> Optional[AdminUserInfo]:
        data = self.dataset_dao.load()
        admin = next((a for a in data.admins if a.username == username), None)

        if admin is None or not verify_password(password, admin.password_hash):
            logger.warning(f"管理员登录失败: {username}")
            return None

        admin.last_login_at = datetime.now()
        self.dataset_dao.save(data)

        logger.info(f"管理员登录成功: {username}")
        return admin

    def needs_admin_initialization(self) -> bool:
        return len(self.dataset_dao.load().admins) == 0
