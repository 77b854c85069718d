"""
本地数据集访问层
邀请码、使用记录、管理员账户整体保存为本地存储中的一个 JSON 文档
"""

from pydantic import ValidationError
from loguru import logger

from app.constants.invite_code_types import ADMIN_STORAGE_KEY
from app.models.schemas import AdminStorageData
from app.services.core.local_storage import LocalStorage


class LocalDatasetDAO:
    """本地数据集的读取与保存

    每次操作显式 load -> 修改 -> save，不保留内存中的全局副本
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def load(self) -> AdminStorageData:
        """读取数据集，不存在或损坏时返回空数据集"""
        raw = self.storage.get_item(ADMIN_STORAGE_KEY)
        if not raw:
            return AdminStorageData()
        try:
            return AdminStorageData.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"本地管理数据解析失败，使用空数据集: {e}")
            return AdminStorageData()

    def save(self, data: AdminStorageData) -> None:
        """保存数据集，写入失败抛出 PersistenceError"""
        self.storage.set_item(ADMIN_STORAGE_KEY, data.model_dump_json())
