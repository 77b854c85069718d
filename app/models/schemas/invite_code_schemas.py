"""
邀请码系统数据结构（Pydantic）
本地存储与数据库两种后端统一返回这些模型
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from app.constants.invite_code_types import ADMIN_STORAGE_VERSION, InviteCodeTypes

InviteCodeTypeName = Literal["single", "multiple", "unlimited"]
InviteCodeStatusName = Literal["active", "used", "expired", "disabled"]
AdminRoleName = Literal["super-admin", "admin"]


class InviteCodeInfo(BaseModel):
    """邀请码"""

    id: str = Field(..., description="邀请码ID")
    code: str = Field(..., description="邀请码")
    type: InviteCodeTypeName = Field(..., description="类型")
    max_uses: int = Field(..., description="最大使用次数（-1 表示无限）")
    used_count: int = Field(0, ge=0, description="已使用次数")
    status: InviteCodeStatusName = Field("active", description="状态")
    created_at: datetime = Field(..., description="创建时间")
    expires_at: Optional[datetime] = Field(None, description="过期时间")
    created_by: str = Field("", description="创建者")
    note: Optional[str] = Field(None, description="备注")
    metadata: Optional[Dict[str, Any]] = Field(None, description="额外元数据")

    @property
    def is_unlimited(self) -> bool:
        return self.max_uses == InviteCodeTypes.UNLIMITED_USES


class InviteCodeUsageInfo(BaseModel):
    """邀请码使用记录"""

    id: str
    code_id: str
    code: str
    used_at: datetime
    session_id: str = Field(..., description="关联的测评会话ID")
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class AdminUserInfo(BaseModel):
    """管理员账户"""

    id: str
    username: str
    password_hash: str
    role: AdminRoleName
    created_at: datetime
    last_login_at: Optional[datetime] = None


class InviteCodeStats(BaseModel):
    """邀请码统计"""

    total_codes: int = 0
    active_codes: int = 0
    used_codes: int = 0
    expired_codes: int = 0
    disabled_codes: int = 0
    total_usages: int = 0
    recent_usages: List[InviteCodeUsageInfo] = Field(default_factory=list)


class AdminStorageData(BaseModel):
    """本地存储的整体数据（一个 JSON 文档）"""

    invite_codes: List[InviteCodeInfo] = Field(default_factory=list)
    usages: List[InviteCodeUsageInfo] = Field(default_factory=list)
    admins: List[AdminUserInfo] = Field(default_factory=list)
    version: str = ADMIN_STORAGE_VERSION


class InviteCodeValidation(BaseModel):
    """邀请码验证结果，验证失败是正常返回值而不是异常"""

    valid: bool
    code: Optional[InviteCodeInfo] = None
    reason: Optional[str] = None


class InviteCodeGenerateOptions(BaseModel):
    """邀请码生成选项"""

    type: InviteCodeTypeName = Field(..., description="类型")
    max_uses: Optional[int] = Field(None, description="最大使用次数，不填按类型默认")
    expires_at: Optional[datetime] = Field(None, description="过期时间，不填永不过期")
    note: Optional[str] = Field(None, max_length=500, description="备注")
    prefix: Optional[str] = Field(None, max_length=16, pattern=r"^[A-Za-z0-9-]*$", description="自定义前缀")
    length: int = Field(12, ge=1, le=64, description="随机部分长度")
    metadata: Optional[Dict[str, Any]] = Field(None, description="额外元数据")

    @field_validator("max_uses")
    @classmethod
    def _check_max_uses(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < -1:
            raise ValueError("max_uses 不能小于 -1")
        return value

    @field_validator("prefix")
    @classmethod
    def _upper_prefix(cls, value: Optional[str]) -> Optional[str]:
        # 用户端提交的邀请码会转成大写
        return value.upper() if value else value

    @field_validator("expires_at")
    @classmethod
    def _to_local_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        # 存储统一使用本地无时区时间
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    def resolved_max_uses(self) -> int:
        return InviteCodeTypes.resolve_max_uses(self.type, self.max_uses)
