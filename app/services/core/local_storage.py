"""
本地键值存储
以单个 JSON 文件保存若干字符串键值，语义上对应浏览器的 localStorage
"""

import json
import os
import tempfile
import threading
from typing import Dict, Optional

from loguru import logger

from app.core.exceptions import PersistenceError
from config.config import settings


class LocalStorage:
    """基于 JSON 文件的键值存储"""

    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or settings.LOCAL_STORAGE_FILE
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                logger.warning(f"本地存储文件格式错误，已忽略: {self.file_path}")
                return {}
            return data
        except (OSError, ValueError) as e:
            logger.error(f"读取本地存储失败 {self.file_path}: {e}")
            return {}

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.file_path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".local_storage_", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"写入本地存储失败 {self.file_path}: {e}")
            raise PersistenceError("无法保存本地数据", original_exception=e) from e
        finally:
            # 写入失败时清理临时文件
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def get_item(self, key: str) -> Optional[str]:
        """读取键值，不存在返回 None"""
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        """写入键值"""
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        """删除键值，不存在时忽略"""
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)

    def clear(self) -> None:
        """清空所有键值"""
        with self._lock:
            self._write_all({})
