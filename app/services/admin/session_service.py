"""管理员会话

登录成功后签发 24 小时有效的令牌，并作为“当前管理员会话”保存在本地存储。
每次读取都会检查过期时间，过期的会话直接丢弃。
退出登录的令牌记入吊销列表，到期前都不能再使用。
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from app.constants.invite_code_types import ADMIN_REVOKED_SESSIONS_KEY, ADMIN_SESSION_KEY
from app.models.schemas import AdminUserInfo
from app.services.core.local_storage import LocalStorage
from app.utils.auth import create_access_token, decode_access_token


def issue_session_token(admin: AdminUserInfo) -> str:
    """为管理员签发会话令牌"""
    return create_access_token({
        "sub": admin.id,
        "username": admin.username,
        "role": admin.role,
        "jti": uuid.uuid4().hex,
    })


def read_session_token(token: str) -> Optional[Dict[str, Any]]:
    """解析会话令牌，无效或过期返回 None"""
    payload = decode_access_token(token)
    if not payload:
        return None
    return {
        "admin_id": payload.get("sub"),
        "username": payload.get("username"),
        "role": payload.get("role"),
        "session_id": payload.get("jti"),
        "expires_at": datetime.fromtimestamp(payload["exp"], tz=timezone.utc).isoformat(),
    }


class AdminSessionService:
    """当前管理员会话的保存、读取、清除与吊销"""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def save_admin_session(self, admin: AdminUserInfo) -> str:
        token = issue_session_token(admin)
        self.storage.set_item(ADMIN_SESSION_KEY, token)
        logger.info(f"管理员会话已保存: {admin.username}")
        return token

    def get_admin_session(self) -> Optional[Dict[str, Any]]:
        token = self.storage.get_item(ADMIN_SESSION_KEY)
        if not token:
            return None

        session = read_session_token(token)
        if session is None:
            self.storage.remove_item(ADMIN_SESSION_KEY)
            logger.info("管理员会话已过期，已清除")
        return session

    def clear_admin_session(self) -> None:
        self.storage.remove_item(ADMIN_SESSION_KEY)

    def _load_revoked(self) -> Dict[str, str]:
        raw = self.storage.get_item(ADMIN_REVOKED_SESSIONS_KEY)
        if not raw:
            return {}
        try:
            revoked = json.loads(raw)
        except ValueError:
            logger.warning("会话吊销列表格式错误，已重置")
            return {}
        return revoked if isinstance(revoked, dict) else {}

    def revoke_session(self, session: Dict[str, Any]) -> None:
        """
        吊销一个会话（退出登录）

        吊销记录保存到令牌过期为止，已过期的记录在每次吊销时顺带清理。
        如果它同时是本地保存的当前会话，也一并清除。
        """
        session_id = session.get("session_id")
        if not session_id:
            return

        now = datetime.now(timezone.utc)
        revoked = {
            sid: expires_at
            for sid, expires_at in self._load_revoked().items()
            if datetime.fromisoformat(expires_at) > now
        }
        revoked[session_id] = session["expires_at"]
        self.storage.set_item(ADMIN_REVOKED_SESSIONS_KEY, json.dumps(revoked))

        current = self.get_admin_session()
        if current is not None and current.get("session_id") == session_id:
            self.clear_admin_session()
        logger.info(f"管理员会话已吊销: {session.get('username')}")

    def is_session_revoked(self, session: Dict[str, Any]) -> bool:
        session_id = session.get("session_id")
        return bool(session_id) and session_id in self._load_revoked()
