"""
邀请码相关常量定义
"""


class InviteCodeTypes:
    """邀请码类型常量"""

    SINGLE = "single"
    MULTIPLE = "multiple"
    UNLIMITED = "unlimited"

    ALL_TYPES = [SINGLE, MULTIPLE, UNLIMITED]

    # 无限次使用的 max_uses 标记
    UNLIMITED_USES = -1

    # 未指定 max_uses 时的默认值
    DEFAULT_MAX_USES = {
        SINGLE: 1,
        MULTIPLE: 10,
        UNLIMITED: UNLIMITED_USES,
    }

    CHINESE_NAMES = {
        SINGLE: "单次",
        MULTIPLE: "多次",
        UNLIMITED: "无限",
    }

    @classmethod
    def is_valid_type(cls, code_type: str) -> bool:
        """验证邀请码类型是否有效"""
        return code_type in cls.ALL_TYPES

    @classmethod
    def resolve_max_uses(cls, code_type: str, max_uses=None) -> int:
        """根据类型和显式值确定最大使用次数

        unlimited 固定为 -1；未指定或为 0 时使用类型默认值
        """
        if code_type == cls.UNLIMITED:
            return cls.UNLIMITED_USES
        if max_uses:
            return max_uses
        return cls.DEFAULT_MAX_USES[code_type]

    @classmethod
    def get_chinese_name(cls, code_type: str) -> str:
        """获取类型的中文名称"""
        return cls.CHINESE_NAMES.get(code_type, code_type)


class InviteCodeStatus:
    """邀请码状态常量"""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    DISABLED = "disabled"

    ALL_STATUSES = [ACTIVE, USED, EXPIRED, DISABLED]

    CHINESE_NAMES = {
        ACTIVE: "激活",
        USED: "已用",
        EXPIRED: "过期",
        DISABLED: "禁用",
    }

    @classmethod
    def is_valid_status(cls, status: str) -> bool:
        """验证状态是否有效"""
        return status in cls.ALL_STATUSES

    @classmethod
    def get_chinese_name(cls, status: str) -> str:
        """获取状态的中文名称"""
        return cls.CHINESE_NAMES.get(status, status)


class AdminRoles:
    """管理员角色常量"""

    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"

    @classmethod
    def role_for_new_admin(cls, existing_admin_count: int) -> str:
        """第一个注册的管理员为超级管理员，之后均为普通管理员"""
        return cls.SUPER_ADMIN if existing_admin_count == 0 else cls.ADMIN


# 验证失败原因
REASON_NOT_FOUND = "邀请码不存在"
REASON_INACTIVE = "邀请码已失效"
REASON_EXPIRED = "邀请码已过期"
REASON_LIMIT_REACHED = "邀请码使用次数已达上限"

# 本地存储键
ADMIN_STORAGE_KEY = "sri_admin_data"
USER_INVITE_KEY = "sri_user_invite_code"
ADMIN_SESSION_KEY = "sri_admin_session"
ADMIN_REVOKED_SESSIONS_KEY = "sri_admin_revoked_sessions"

# 本地数据结构版本
ADMIN_STORAGE_VERSION = "1.0.0"

# 唯一邀请码生成最大尝试次数
MAX_GENERATION_ATTEMPTS = 100

# 默认创建者
DEFAULT_CREATED_BY = "admin"
