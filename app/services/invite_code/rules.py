"""
邀请码状态规则

纯函数，不访问存储：判定邀请码是否可用，以及需要补写的状态。
两种后端的 validate / use 都基于这里的判定，再各自负责持久化。
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from app.constants.invite_code_types import (
    InviteCodeStatus,
    InviteCodeTypes,
    REASON_EXPIRED,
    REASON_INACTIVE,
    REASON_LIMIT_REACHED,
)


@dataclass(frozen=True)
class Classification:
    """验证判定结果

    corrected_status 不为 None 时，调用方需要把状态写回存储（惰性状态修正）
    """
    valid: bool
    reason: Optional[str] = None
    corrected_status: Optional[str] = None


def is_limit_reached(max_uses: int, used_count: int) -> bool:
    """是否已达到使用上限，-1 表示无限次"""
    return max_uses != InviteCodeTypes.UNLIMITED_USES and used_count >= max_uses


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """带时区的时间转换为本地无时区时间，存储统一使用本地时间"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def classify_invite_code(record, now: Optional[datetime] = None) -> Classification:
    """判定一条邀请码记录

    检查顺序：状态 -> 过期 -> 使用次数

    Args:
        record: 具有 status / expires_at / max_uses / used_count 属性的邀请码
        now: 当前时间，默认 datetime.now()
    """
    now = now or datetime.now()

    if record.status != InviteCodeStatus.ACTIVE:
        return Classification(valid=False, reason=REASON_INACTIVE)

    expires_at = to_local_naive(record.expires_at)
    if expires_at is not None and expires_at < now:
        return Classification(
            valid=False, reason=REASON_EXPIRED, corrected_status=InviteCodeStatus.EXPIRED
        )

    if is_limit_reached(record.max_uses, record.used_count):
        return Classification(
            valid=False, reason=REASON_LIMIT_REACHED, corrected_status=InviteCodeStatus.USED
        )

    return Classification(valid=True)


def consume(max_uses: int, used_count: int) -> Tuple[int, str]:
    """计算一次使用之后的 (used_count, status)"""
    new_count = used_count + 1
    if is_limit_reached(max_uses, new_count):
        return new_count, InviteCodeStatus.USED
    return new_count, InviteCodeStatus.ACTIVE
