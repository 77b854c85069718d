"""邀请码系统适配器

每次调用时根据配置选择数据库或本地存储实现，并原样转发。
用户自己的邀请码（读取、保存、检查）始终走本地存储。
"""

from typing import Callable, List, Optional

from app.constants.invite_code_types import DEFAULT_CREATED_BY
from app.dao.local_dataset_dao import LocalDatasetDAO
from app.models.schemas import (
    AdminUserInfo,
    InviteCodeGenerateOptions,
    InviteCodeInfo,
    InviteCodeStats,
    InviteCodeUsageInfo,
    InviteCodeValidation,
)
from app.services.admin.base import AdminAccountBackend
from app.services.admin.local_service import LocalAdminService
from app.services.admin.remote_service import DatabaseAdminService
from app.services.admin.session_service import AdminSessionService
from app.services.core.local_storage import LocalStorage
from app.services.invite_code.base import InviteCodeBackend
from app.services.invite_code.local_service import LocalInviteCodeService
from app.services.invite_code.remote_service import DatabaseInviteCodeService
from app.services.invite_code.user_code_store import UserInviteCodeStore
from app.utils.key_generator import DEFAULT_CODE_LENGTH, generate_random_code
from config.config import settings


class InviteCodeAdapter:
    """根据配置选择后端的邀请码系统入口"""

    def __init__(
        self,
        storage: Optional[LocalStorage] = None,
        use_database: Optional[Callable[[], bool]] = None,
    ):
        storage = storage or LocalStorage()
        self._use_database = use_database or settings.is_remote_backend_configured

        dataset_dao = LocalDatasetDAO(storage)
        self.user_code_store = UserInviteCodeStore(storage)
        self.sessions = AdminSessionService(storage)

        self.local_codes = LocalInviteCodeService(dataset_dao, self.user_code_store)
        self.local_admins = LocalAdminService(dataset_dao)
        self.database_codes = DatabaseInviteCodeService(self.user_code_store)
        self.database_admins = DatabaseAdminService()

    # ========== 后端选择 ==========

    def is_using_database(self) -> bool:
        return self._use_database()

    def get_backend_type(self) -> str:
        return "database" if self.is_using_database() else "local"

    def _codes(self) -> InviteCodeBackend:
        return self.database_codes if self.is_using_database() else self.local_codes

    def _admins(self) -> AdminAccountBackend:
        return self.database_admins if self.is_using_database() else self.local_admins

    # ========== 邀请码 ==========

    def generate_random_code(self, length: int = DEFAULT_CODE_LENGTH, prefix: Optional[str] = None) -> str:
        return generate_random_code(length, prefix)

    def create_invite_code(
        self, options: InviteCodeGenerateOptions, created_by: str = DEFAULT_CREATED_BY
    ) -> InviteCodeInfo:
        return self._codes().create_invite_code(options, created_by)

    def batch_create_invite_codes(
        self, count: int, options: InviteCodeGenerateOptions, created_by: str = DEFAULT_CREATED_BY
    ) -> List[InviteCodeInfo]:
        return self._codes().batch_create_invite_codes(count, options, created_by)

    def validate_invite_code(self, code: str) -> InviteCodeValidation:
        return self._codes().validate_invite_code(code)

    def use_invite_code(
        self,
        code: str,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        return self._codes().use_invite_code(code, session_id, user_agent, ip_address)

    def get_all_invite_codes(self) -> List[InviteCodeInfo]:
        return self._codes().get_all_invite_codes()

    def get_invite_code(self, code_id: str) -> InviteCodeInfo:
        return self._codes().get_invite_code(code_id)

    def get_invite_code_stats(self) -> InviteCodeStats:
        return self._codes().get_invite_code_stats()

    def update_invite_code_status(self, code_id: str, status: str) -> bool:
        return self._codes().update_invite_code_status(code_id, status)

    def delete_invite_code(self, code_id: str) -> bool:
        return self._codes().delete_invite_code(code_id)

    def get_invite_code_usages(self, code_id: str) -> List[InviteCodeUsageInfo]:
        return self._codes().get_invite_code_usages(code_id)

    def export_invite_codes_csv(self) -> str:
        return self._codes().export_invite_codes_csv()

    # ========== 管理员 ==========

    def admin_login(self, username: str, password: str) -> Optional[AdminUserInfo]:
        return self._admins().admin_login(username, password)

    def create_admin_user(self, username: str, password: str) -> AdminUserInfo:
        return self._admins().create_admin_user(username, password)

    def needs_admin_initialization(self) -> bool:
        return self._admins().needs_admin_initialization()

    # ========== 用户邀请码（始终本地） ==========

    def get_user_invite_code(self) -> Optional[str]:
        return self.user_code_store.get()

    def save_user_invite_code(self, code: str) -> None:
        self.user_code_store.save(code)

    def has_valid_user_invite_code(self) -> bool:
        code = self.user_code_store.get()
        if not code:
            return False
        return self.local_codes.validate_invite_code(code).valid


# 全局适配器实例
invite_code_adapter = InviteCodeAdapter()
