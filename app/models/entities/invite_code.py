"""
邀请码模型
用于控制测评入口，只有持有有效邀请码才能开始测评
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


def _new_uuid() -> str:
    return str(uuid.uuid4())


class InviteCode(SQLModel, table=True):
    """邀请码表

    管理员生成邀请码，用户开始测评时需要提供有效邀请码
    """
    __tablename__ = "invite_codes"

    id: str = Field(default_factory=_new_uuid, primary_key=True, max_length=36, description="邀请码ID")

    # 邀请码信息
    code: str = Field(
        index=True,
        unique=True,
        max_length=64,
        description="邀请码（唯一）"
    )
    type: str = Field(
        max_length=16,
        description="类型：single / multiple / unlimited"
    )

    # 使用限制
    max_uses: int = Field(
        default=1,
        description="最大使用次数，-1表示无限制"
    )
    used_count: int = Field(
        default=0,
        description="已使用次数"
    )

    # 状态
    status: str = Field(
        default="active",
        index=True,
        max_length=16,
        description="状态：active / used / expired / disabled"
    )

    # 有效期（时间字段统一存本地无时区时间）
    expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime, nullable=True),
        description="过期时间，null表示永不过期"
    )

    # 关联信息
    created_by: Optional[str] = Field(
        default=None,
        max_length=64,
        description="创建者"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=500,
        description="备注说明"
    )
    meta: Optional[Dict[str, Any]] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True),
        description="额外元数据"
    )

    # 时间戳
    created_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False, index=True),
        description="创建时间"
    )


class InviteCodeUsage(SQLModel, table=True):
    """邀请码使用记录表

    每次成功使用邀请码写入一条，正常流程中不修改不删除
    """
    __tablename__ = "invite_code_usages"

    id: str = Field(default_factory=_new_uuid, primary_key=True, max_length=36, description="记录ID")
    code_id: str = Field(index=True, max_length=36, description="邀请码ID")
    code: str = Field(max_length=64, description="邀请码（冗余）")
    used_at: datetime = Field(
        default_factory=datetime.now,
        sa_column=Column(DateTime, nullable=False, index=True),
        description="使用时间"
    )
    session_id: str = Field(max_length=128, description="关联的测评会话ID")
    user_agent: Optional[str] = Field(default=None, max_length=512, description="客户端UA")
    ip_address: Optional[str] = Field(default=None, max_length=64, description="客户端IP")
