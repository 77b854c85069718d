"""
认证工具
管理员密码哈希（bcrypt，每次随机盐）与会话令牌（JWT）
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

from config.config import settings

SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
SESSION_TTL = timedelta(hours=settings.ADMIN_SESSION_HOURS)

password_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return password_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验密码，哈希格式无法识别时视为不匹配"""
    try:
        return password_context.verify(plain_password, hashed_password)
    except ValueError as e:
        logger.error(f"密码哈希无法识别: {e}")
        return False


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    签发会话令牌

    Args:
        claims: 令牌内容（管理员ID放在 sub 中）
        expires_delta: 有效期，默认 ADMIN_SESSION_HOURS 小时

    Returns:
        JWT 字符串
    """
    payload = dict(claims)
    # jose 要求 sub 为字符串
    if payload.get("sub") is not None:
        payload["sub"] = str(payload["sub"])
    payload["exp"] = datetime.now(timezone.utc) + (expires_delta if expires_delta is not None else SESSION_TTL)
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """解码会话令牌，签名无效或已过期返回 None"""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"会话令牌无效: {e}")
        return None
