"""数据库版邀请码管理服务

封装邀请码业务逻辑，调用 DAO 层进行数据库操作。
未配置数据库时所有操作抛出 BackendUnavailableError。
"""

from typing import List, Optional

from loguru import logger

from app.constants.invite_code_types import DEFAULT_CREATED_BY, InviteCodeStatus
from app.core.exceptions import NotFoundError
from app.dao.invite_code_dao import InviteCodeDAO, invite_code_dao
from app.models.schemas import (
    InviteCodeGenerateOptions,
    InviteCodeInfo,
    InviteCodeStats,
    InviteCodeUsageInfo,
    InviteCodeValidation,
)
from app.services.invite_code.base import InviteCodeBackend
from app.services.invite_code.user_code_store import UserInviteCodeStore

RECENT_USAGE_LIMIT = 10


class DatabaseInviteCodeService(InviteCodeBackend):
    """数据库版邀请码管理"""

    backend_type = "database"

    def __init__(self, user_code_store: UserInviteCodeStore, dao: Optional[InviteCodeDAO] = None):
        super().__init__(user_code_store)
        self.dao = dao or invite_code_dao

    def code_exists(self, code: str) -> bool:
        return self.dao.exists(code)

    def create_invite_code(
        self,
        options: InviteCodeGenerateOptions,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> InviteCodeInfo:
        try:
            code = self.generate_unique_code(options)
            invite_code = self.dao.create(
                code=code,
                code_type=options.type,
                max_uses=options.resolved_max_uses(),
                expires_at=options.expires_at,
                created_by=created_by,
                note=options.note,
                metadata=options.metadata,
            )
            logger.info(f"邀请码创建成功: {invite_code.code} (类型: {invite_code.type}, 创建人: {created_by})")
            return invite_code
        except Exception as e:
            logger.error(f"创建邀请码失败: {e}")
            raise

    def validate_invite_code(self, code: str) -> InviteCodeValidation:
        validation = self.dao.validate(code)
        if not validation.valid:
            logger.debug(f"邀请码验证未通过: {code} ({validation.reason})")
        return validation

    def use_invite_code(
        self,
        code: str,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        success, reason = self.dao.consume(code, session_id, user_agent, ip_address)
        if not success:
            logger.info(f"邀请码使用失败: {code} ({reason})")
            return False

        self.remember_user_code(code)
        logger.info(f"邀请码已使用: {code}, 会话: {session_id}")
        return True

    def get_all_invite_codes(self) -> List[InviteCodeInfo]:
        return self.dao.list_all()

    def get_invite_code(self, code_id: str) -> InviteCodeInfo:
        invite_code = self.dao.find_by_id(code_id)
        if invite_code is None:
            raise NotFoundError(f"邀请码不存在: {code_id}")
        return invite_code

    def get_invite_code_stats(self) -> InviteCodeStats:
        counts = self.dao.count_by_status()
        return InviteCodeStats(
            total_codes=sum(counts.values()),
            active_codes=counts.get(InviteCodeStatus.ACTIVE, 0),
            used_codes=counts.get(InviteCodeStatus.USED, 0),
            expired_codes=counts.get(InviteCodeStatus.EXPIRED, 0),
            disabled_codes=counts.get(InviteCodeStatus.DISABLED, 0),
            total_usages=self.dao.count_usages(),
            recent_usages=self.dao.list_recent_usages(RECENT_USAGE_LIMIT),
        )

    def update_invite_code_status(self, code_id: str, status: str) -> bool:
        if not InviteCodeStatus.is_valid_status(status):
            raise ValueError(f"无效的邀请码状态: {status}")

        invite_code = self.dao.update_status(code_id, status)
        if invite_code:
            logger.info(f"邀请码状态已更新: {invite_code.code} -> {status}")
        return invite_code is not None

    def delete_invite_code(self, code_id: str) -> bool:
        success = self.dao.delete(code_id)
        if success:
            logger.info(f"邀请码已删除: ID={code_id}")
        return success

    def get_invite_code_usages(self, code_id: str) -> List[InviteCodeUsageInfo]:
        return self.dao.list_usages(code_id)
