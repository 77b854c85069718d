"""
邀请码数据访问层（数据库后端）
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlmodel import select

from app.constants.invite_code_types import REASON_NOT_FOUND, InviteCodeStatus
from app.models.base.database import db_session_context
from app.models.entities import InviteCode, InviteCodeUsage
from app.models.schemas import InviteCodeInfo, InviteCodeUsageInfo, InviteCodeValidation
from app.services.invite_code.rules import classify_invite_code, consume


def to_invite_code_info(row: InviteCode) -> InviteCodeInfo:
    """表记录转换为统一的数据结构（需在会话内调用）"""
    return InviteCodeInfo(
        id=row.id,
        code=row.code,
        type=row.type,
        max_uses=row.max_uses,
        used_count=row.used_count,
        status=row.status,
        created_at=row.created_at,
        expires_at=row.expires_at,
        created_by=row.created_by or "",
        note=row.note,
        metadata=row.meta,
    )


def to_usage_info(row: InviteCodeUsage) -> InviteCodeUsageInfo:
    return InviteCodeUsageInfo(
        id=row.id,
        code_id=row.code_id,
        code=row.code,
        used_at=row.used_at,
        session_id=row.session_id,
        user_agent=row.user_agent,
        ip_address=row.ip_address,
    )


class InviteCodeDAO:
    """邀请码数据访问对象"""

    def exists(self, code: str) -> bool:
        """邀请码字符串是否已存在"""
        with db_session_context() as session:
            statement = select(InviteCode.id).where(InviteCode.code == code)
            return session.exec(statement).first() is not None

    def create(
        self,
        code: str,
        code_type: str,
        max_uses: int,
        expires_at: Optional[datetime] = None,
        created_by: Optional[str] = None,
        note: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> InviteCodeInfo:
        """创建邀请码"""
        with db_session_context() as session:
            invite_code = InviteCode(
                code=code,
                type=code_type,
                max_uses=max_uses,
                used_count=0,
                status=InviteCodeStatus.ACTIVE,
                expires_at=expires_at,
                created_by=created_by,
                note=note,
                meta=metadata,
            )
            session.add(invite_code)
            session.flush()
            return to_invite_code_info(invite_code)

    def find_by_id(self, code_id: str) -> Optional[InviteCodeInfo]:
        """根据ID查询"""
        with db_session_context() as session:
            invite_code = session.get(InviteCode, code_id)
            return to_invite_code_info(invite_code) if invite_code else None

    def validate(self, code: str) -> InviteCodeValidation:
        """在一个事务内验证邀请码，并写回过期/用完状态"""
        with db_session_context() as session:
            statement = select(InviteCode).where(InviteCode.code == code)
            invite_code = session.exec(statement).first()
            if not invite_code:
                return InviteCodeValidation(valid=False, reason=REASON_NOT_FOUND)

            result = classify_invite_code(invite_code)
            if result.corrected_status:
                invite_code.status = result.corrected_status
                session.add(invite_code)
                session.flush()

            return InviteCodeValidation(
                valid=result.valid,
                code=to_invite_code_info(invite_code),
                reason=result.reason,
            )

    def consume(
        self,
        code: str,
        session_id: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Tuple[bool, Optional[str]]:
        """使用邀请码：验证、计数加一、写使用记录，在同一事务中完成

        计数更新以读取到的 used_count 为条件（比较并交换），
        并发使用同一邀请码时只有一个请求能成功写入

        Returns:
            (是否成功, 失败原因)
        """
        with db_session_context() as session:
            statement = select(InviteCode).where(InviteCode.code == code)
            invite_code = session.exec(statement).first()
            if not invite_code:
                return False, REASON_NOT_FOUND

            result = classify_invite_code(invite_code)
            if not result.valid:
                if result.corrected_status:
                    invite_code.status = result.corrected_status
                    session.add(invite_code)
                return False, result.reason

            seen_count = invite_code.used_count
            new_count, new_status = consume(invite_code.max_uses, seen_count)
            swap = session.execute(
                update(InviteCode)
                .where(InviteCode.id == invite_code.id)
                .where(InviteCode.used_count == seen_count)
                .where(InviteCode.status == InviteCodeStatus.ACTIVE)
                .values(used_count=new_count, status=new_status)
                .execution_options(synchronize_session=False)
            )
            if swap.rowcount != 1:
                return False, "邀请码正在被使用，请重试"

            session.add(InviteCodeUsage(
                code_id=invite_code.id,
                code=invite_code.code,
                session_id=session_id,
                user_agent=user_agent,
                ip_address=ip_address,
            ))
            return True, None

    def list_all(self) -> List[InviteCodeInfo]:
        """所有邀请码，按创建时间倒序"""
        with db_session_context() as session:
            statement = select(InviteCode).order_by(InviteCode.created_at.desc())
            return [to_invite_code_info(row) for row in session.exec(statement).all()]

    def count_by_status(self) -> Dict[str, int]:
        """按状态统计邀请码数量"""
        with db_session_context() as session:
            statement = select(InviteCode.status, func.count(InviteCode.id)).group_by(InviteCode.status)
            return {status: count for status, count in session.exec(statement).all()}

    def count_usages(self) -> int:
        """使用记录总数"""
        with db_session_context() as session:
            return session.exec(select(func.count(InviteCodeUsage.id))).one()

    def list_recent_usages(self, limit: int = 10) -> List[InviteCodeUsageInfo]:
        """最近的使用记录"""
        with db_session_context() as session:
            statement = select(InviteCodeUsage).order_by(InviteCodeUsage.used_at.desc()).limit(limit)
            return [to_usage_info(row) for row in session.exec(statement).all()]

    def list_usages(self, code_id: str) -> List[InviteCodeUsageInfo]:
        """某个邀请码的使用记录，按使用时间倒序"""
        with db_session_context() as session:
            statement = (
                select(InviteCodeUsage)
                .where(InviteCodeUsage.code_id == code_id)
                .order_by(InviteCodeUsage.used_at.desc())
            )
            return [to_usage_info(row) for row in session.exec(statement).all()]

    def update_status(self, code_id: str, status: str) -> Optional[InviteCodeInfo]:
        """更新邀请码状态"""
        with db_session_context() as session:
            invite_code = session.get(InviteCode, code_id)
            if not invite_code:
                return None

            invite_code.status = status
            session.add(invite_code)
            session.flush()
            return to_invite_code_info(invite_code)

    def delete(self, code_id: str) -> bool:
        """删除邀请码（使用记录保留）"""
        with db_session_context() as session:
            invite_code = session.get(InviteCode, code_id)
            if not invite_code:
                return False

            session.delete(invite_code)
            return True


# 全局单例
invite_code_dao = InviteCodeDAO()
