"""邀请码管理服务接口

本地存储与数据库两种后端实现同一组能力，由适配器在运行时选择。
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from loguru import logger

from app.constants.invite_code_types import DEFAULT_CREATED_BY, MAX_GENERATION_ATTEMPTS
from app.core.exceptions import GenerationExhaustedError
from app.models.schemas import (
    InviteCodeGenerateOptions,
    InviteCodeInfo,
    InviteCodeStats,
    InviteCodeUsageInfo,
    InviteCodeValidation,
)
from app.services.invite_code.csv_export import render_invite_codes_csv
from app.services.invite_code.user_code_store import UserInviteCodeStore
from app.utils.key_generator import generate_random_code


class InviteCodeBackend(ABC):
    """邀请码管理能力集合"""

    backend_type: str = ""

    def __init__(self, user_code_store: UserInviteCodeStore):
        self.user_code_store = user_code_store

    # ========== 子类实现 ==========

    @abstractmethod
    def code_exists(self, code: str) -> bool:
        """邀请码字符串是否已存在"""

    @abstractmethod
    def create_invite_code(
        self,
        options: InviteCodeGenerateOptions,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> InviteCodeInfo:
        """创建邀请码，生成失败抛出 GenerationExhaustedError"""

    @abstractmethod
    def validate_invite_code(self, code: str) -> InviteCodeValidation:
        """验证邀请码

        注意：这不是纯读操作，发现过期或用完时会先把状态写回存储
        """

    @abstractmethod
    def use_invite_code(
        self,
        code: str,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        """使用邀请码（记录使用），成功返回 True"""

    @abstractmethod
    def get_all_invite_codes(self) -> List[InviteCodeInfo]:
        """所有邀请码，按创建时间倒序"""

    @abstractmethod
    def get_invite_code(self, code_id: str) -> InviteCodeInfo:
        """按ID获取邀请码，不存在抛出 NotFoundError"""

    @abstractmethod
    def get_invite_code_stats(self) -> InviteCodeStats:
        """按状态统计数量、总使用次数、最近 10 条使用记录"""

    @abstractmethod
    def update_invite_code_status(self, code_id: str, status: str) -> bool:
        """更新邀请码状态，ID 不存在返回 False"""

    @abstractmethod
    def delete_invite_code(self, code_id: str) -> bool:
        """删除邀请码，ID 不存在返回 False"""

    @abstractmethod
    def get_invite_code_usages(self, code_id: str) -> List[InviteCodeUsageInfo]:
        """某个邀请码的使用记录，按使用时间倒序"""

    # ========== 通用实现 ==========

    def generate_unique_code(self, options: InviteCodeGenerateOptions) -> str:
        """生成存储中不存在的邀请码，最多尝试 MAX_GENERATION_ATTEMPTS 次"""
        for _ in range(MAX_GENERATION_ATTEMPTS):
            candidate = generate_random_code(options.length, options.prefix)
            if not self.code_exists(candidate):
                return candidate
        logger.warning(f"邀请码生成冲突次数过多: prefix={options.prefix}, length={options.length}")
        raise GenerationExhaustedError(MAX_GENERATION_ATTEMPTS)

    def batch_create_invite_codes(
        self,
        count: int,
        options: InviteCodeGenerateOptions,
        created_by: str = DEFAULT_CREATED_BY,
    ) -> List[InviteCodeInfo]:
        """批量生成邀请码，单个失败只记录日志，返回成功创建的部分"""
        codes = []
        for i in range(count):
            try:
                codes.append(self.create_invite_code(options, created_by))
            except Exception as e:
                logger.error(f"第 {i + 1} 个邀请码生成失败: {e}")
        logger.info(f"批量生成邀请码完成: 请求 {count} 个, 成功 {len(codes)} 个")
        return codes

    def export_invite_codes_csv(self) -> str:
        """导出所有邀请码为 CSV 文本"""
        return render_invite_codes_csv(self.get_all_invite_codes())

    def remember_user_code(self, code: str) -> None:
        """记录为当前客户端自己的邀请码"""
        self.user_code_store.save(code)
