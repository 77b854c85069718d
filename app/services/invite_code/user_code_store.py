"""
用户自己的邀请码（客户端标记）

无论使用哪种后端，用户用过的邀请码始终保存在本地存储
"""

from typing import Optional

from loguru import logger

from app.constants.invite_code_types import USER_INVITE_KEY
from app.core.exceptions import PersistenceError
from app.services.core.local_storage import LocalStorage


class UserInviteCodeStore:
    """读写用户的邀请码"""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def save(self, code: str) -> None:
        """保存用户使用的邀请码，写入失败只记录日志"""
        try:
            self.storage.set_item(USER_INVITE_KEY, code)
        except PersistenceError as e:
            logger.error(f"保存用户邀请码失败: {e}")

    def get(self) -> Optional[str]:
        """获取用户的邀请码"""
        return self.storage.get_item(USER_INVITE_KEY)
