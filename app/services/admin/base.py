"""管理员账户服务接口"""

from abc import ABC, abstractmethod
from typing import Optional

from app.models.schemas import AdminUserInfo


class AdminAccountBackend(ABC):
    """管理员注册、登录、初始化检查"""

    @abstractmethod
    def create_admin_user(self, username: str, password: str) -> AdminUserInfo:
        """创建管理员，用户名已存在抛出 ConflictError"""

    @abstractmethod
    def admin_login(self, username: str, password: str) -> Optional[AdminUserInfo]:
        """登录成功返回账户并记录登录时间；用户不存在和密码错误都返回 None"""

    @abstractmethod
    def needs_admin_initialization(self) -> bool:
        """是否还没有任何管理员"""
