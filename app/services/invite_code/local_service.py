"""本地存储版邀请码管理服务

所有数据保存在本地存储的一个 JSON 文档里。每个操作都是一次
读取-修改-写回，没有锁，并发写入时后写者覆盖先写者。
"""

from datetime import datetime
from typing import List, Optional

from loguru import logger

from app.constants.invite_code_types import DEFAULT_CREATED_BY, REASON_NOT_FOUND, InviteCodeStatus
from app.core.exceptions import NotFoundError
from app.dao.local_dataset_dao import LocalDatasetDAO
from app.models.schemas import (
    AdminStorageData,
    InviteCodeGenerateOptions,
    InviteCodeInfo,
    InviteCodeStats,
    InviteCodeUsageInfo,
    InviteCodeValidation,
)
from app.services.invite_code.base import InviteCodeBackend
from app.services.invite_code.rules import classify_invite_code, consume
from app.services.invite_code.user_code_store import UserInviteCodeStore
from app.utils.key_generator import generate_record_id

RECENT_USAGE_LIMIT = 10


def _find_by_code(data: AdminStorageData, code: str) -> Optional[InviteCodeInfo]:
    return next((c for c in data.invite_codes if c.code == code), None)


def _find_by_id(data: AdminStorageData, code_id: str) -> Optional[InviteCodeInfo]:
    return next((c for c in data.invite_codes if c.id == code_id), None)


class LocalInviteCodeService(InviteCodeBackend):
    """本地存储版邀请码管理"""

    backend_type = "local"

    def __init__(self, dataset_dao: LocalDatasetDAO, user_code_store: UserInviteCodeStore):
        super().__init__(user_code_store)
        self.dataset_dao = dataset_dao

    def code_exists(self, code: str) -> bool:
        return _find_by_code(self.dataset_dao.load(), code) is not None

    def create_invite_code(
        self,
        options: InviteCodeGenerateOptions,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> InviteCodeInfo:
        code = self.generate_unique_code(options)

        data = self.dataset_dao.load()
        new_code = InviteCodeInfo(
            id=generate_record_id("invite"),
            code=code,
            type=options.type,
            max_uses=options.resolved_max_uses(),
            used_count=0,
            status=InviteCodeStatus.ACTIVE,
            created_at=datetime.now(),
            expires_at=options.expires_at,
            created_by=created_by,
            note=options.note,
            metadata=options.metadata,
        )
        data.invite_codes.append(new_code)
        self.dataset_dao.save(data)

        logger.info(f"邀请码创建成功: {new_code.code} (类型: {new_code.type}, 创建人: {created_by})")
        return new_code

    def _validate_in(self, data: AdminStorageData, code: str) -> InviteCodeValidation:
        """在已加载的数据集上验证，必要时写回修正后的状态"""
        invite_code = _find_by_code(data, code)
        if invite_code is None:
            return InviteCodeValidation(valid=False, reason=REASON_NOT_FOUND)

        result = classify_invite_code(invite_code)
        if result.corrected_status:
            invite_code.status = result.corrected_status
            self.dataset_dao.save(data)
            logger.info(f"邀请码状态自动更新: {invite_code.code} -> {result.corrected_status}")

        return InviteCodeValidation(valid=result.valid, code=invite_code, reason=result.reason)

    def validate_invite_code(self, code: str) -> InviteCodeValidation:
        return self._validate_in(self.dataset_dao.load(), code)

    def use_invite_code(
        self,
        code: str,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        data = self.dataset_dao.load()
        validation = self._validate_in(data, code)
        if not validation.valid or validation.code is None:
            logger.info(f"邀请码使用失败: {code} ({validation.reason})")
            return False

        invite_code = validation.code
        invite_code.used_count, invite_code.status = consume(invite_code.max_uses, invite_code.used_count)

        data.usages.append(InviteCodeUsageInfo(
            id=generate_record_id("usage"),
            code_id=invite_code.id,
            code=invite_code.code,
            used_at=datetime.now(),
            session_id=session_id,
            user_agent=user_agent,
            ip_address=ip_address,
        ))
        self.dataset_dao.save(data)

        self.remember_user_code(code)
        logger.info(f"邀请码已使用: {code} ({invite_code.used_count}/{invite_code.max_uses}), 会话: {session_id}")
        return True

    def get_all_invite_codes(self) -> List[InviteCodeInfo]:
        data = self.dataset_dao.load()
        return sorted(data.invite_codes, key=lambda c: c.created_at, reverse=True)

    def get_invite_code(self, code_id: str) -> InviteCodeInfo:
        invite_code = _find_by_id(self.dataset_dao.load(), code_id)
        if invite_code is None:
            raise NotFoundError(f"邀请码不存在: {code_id}")
        return invite_code

    def get_invite_code_stats(self) -> InviteCodeStats:
        data = self.dataset_dao.load()
        statuses = [c.status for c in data.invite_codes]
        recent = sorted(data.usages, key=lambda u: u.used_at, reverse=True)[:RECENT_USAGE_LIMIT]
        return InviteCodeStats(
            total_codes=len(statuses),
            active_codes=statuses.count(InviteCodeStatus.ACTIVE),
            used_codes=statuses.count(InviteCodeStatus.USED),
            expired_codes=statuses.count(InviteCodeStatus.EXPIRED),
            disabled_codes=statuses.count(InviteCodeStatus.DISABLED),
            total_usages=len(data.usages),
            recent_usages=recent,
        )

    def update_invite_code_status(self, code_id: str, status: str) -> bool:
        if not InviteCodeStatus.is_valid_status(status):
            raise ValueError(f"无效的邀请码状态: {status}")

        data = self.dataset_dao.load()
        invite_code = _find_by_id(data, code_id)
        if invite_code is None:
            return False

        invite_code.status = status
        self.dataset_dao.save(data)
        logger.info(f"邀请码状态已更新: {invite_code.code} -> {status}")
        return True

    def delete_invite_code(self, code_id: str) -> bool:
        data = self.dataset_dao.load()
        remaining = [c for c in data.invite_codes if c.id != code_id]
        if len(remaining) == len(data.invite_codes):
            return False

        data.invite_codes = remaining
        self.dataset_dao.save(data)
        logger.info(f"邀请码已删除: ID={code_id}")
        return True

    def get_invite_code_usages(self, code_id: str) -> List[InviteCodeUsageInfo]:
        data = self.dataset_dao.load()
        usages = [u for u in data.usages if u.code_id == code_id]
        return sorted(usages, key=lambda u: u.used_at, reverse=True)
