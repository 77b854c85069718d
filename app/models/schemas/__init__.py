"""
Pydantic模型定义
邀请码系统在两种后端之间共享的数据结构
"""

from .invite_code_schemas import (
    InviteCodeInfo,
    InviteCodeUsageInfo,
    AdminUserInfo,
    InviteCodeStats,
    AdminStorageData,
    InviteCodeValidation,
    InviteCodeGenerateOptions,
)

__all__ = [
    'InviteCodeInfo',
    'InviteCodeUsageInfo',
    'AdminUserInfo',
    'InviteCodeStats',
    'AdminStorageData',
    'InviteCodeValidation',
    'InviteCodeGenerateOptions',
]
