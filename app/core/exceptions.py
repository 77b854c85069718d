"""
统一异常类型定义
"""


class InviteCodeSystemError(Exception):
    """邀请码系统异常基类"""

    error_code = "INTERNAL_ERROR"


class NotFoundError(InviteCodeSystemError):
    """记录不存在（邀请码ID、邀请码、用户名）"""

    error_code = "NOT_FOUND"


class ConflictError(InviteCodeSystemError):
    """唯一性冲突（用户名重复等）"""

    error_code = "CONFLICT"


class GenerationExhaustedError(ConflictError):
    """多次尝试后仍无法生成唯一的邀请码"""

    error_code = "GENERATION_EXHAUSTED"

    def __init__(self, attempts: int):
        super().__init__(f"无法生成唯一的邀请码，请重试（已尝试 {attempts} 次）")
        self.attempts = attempts


class BackendUnavailableError(InviteCodeSystemError):
    """数据库后端未配置或无法连接"""

    error_code = "BACKEND_UNAVAILABLE"

    def __init__(self, message: str = "数据库未配置", original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception


class PersistenceError(InviteCodeSystemError):
    """写入存储失败"""

    error_code = "PERSISTENCE_FAILURE"

    def __init__(self, message: str, original_exception: Exception = None):
        super().__init__(message)
        self.original_exception = original_exception


__all__ = [
    "InviteCodeSystemError",
    "NotFoundError",
    "ConflictError",
    "GenerationExhaustedError",
    "BackendUnavailableError",
    "PersistenceError",
]
