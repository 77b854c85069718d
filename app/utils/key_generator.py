"""
唯一标识生成工具
统一生成邀请码和各类记录ID
"""

import secrets
import time
from typing import Optional

# 邀请码字符集：大写字母 + 数字
INVITE_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DEFAULT_CODE_LENGTH = 12


def generate_unique_key(length: int = 12) -> str:
    """
    生成随机唯一标识

    Args:
        length: 标识长度（十六进制字符数，必须为偶数）

    Returns:
        随机十六进制字符串
    """
    byte_length = length // 2
    return secrets.token_hex(byte_length)


def generate_random_code(length: int = DEFAULT_CODE_LENGTH, prefix: Optional[str] = None) -> str:
    """
    生成随机邀请码

    每个字符独立均匀地取自 A-Z0-9，不保证唯一，重复由调用方重试处理

    Args:
        length: 随机部分长度（不含前缀）
        prefix: 自定义前缀

    Returns:
        prefix + length 个随机字符
    """
    body = "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))
    return f"{prefix or ''}{body}"


def generate_record_id(kind: str) -> str:
    """生成本地存储记录ID，形如 invite_1700000000000_a1b2c3d4e5"""
    return f"{kind}_{int(time.time() * 1000)}_{generate_unique_key(10)}"
