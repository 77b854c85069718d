"""
测试配置和公共fixtures
"""

import os
import tempfile

# 导入应用之前设置测试环境变量
_TEST_DIR = tempfile.mkdtemp(prefix="sri_test_")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-invite-codes")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["DATA_DIR"] = _TEST_DIR
os.environ["LOCAL_STORAGE_FILE"] = os.path.join(_TEST_DIR, "local_storage.json")
os.environ["LOG_FILE"] = os.path.join(_TEST_DIR, "logs", "test.log")
os.environ.pop("DATABASE_URL", None)
os.environ.pop("INVITE_BACKEND", None)

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from app.models import init_db, reset_engine
from app.services.core.local_storage import LocalStorage
from app.services.invite_code.adapter import InviteCodeAdapter
from app.utils.api_utils import get_invite_code_adapter
from config.config import settings
from main import app


@pytest.fixture(scope="function")
def storage(tmp_path) -> LocalStorage:
    """临时本地存储"""
    return LocalStorage(str(tmp_path / "local_storage.json"))


@pytest.fixture(scope="function")
def sqlite_db(tmp_path, monkeypatch) -> Generator[str, None, None]:
    """临时 SQLite 数据库，作为数据库后端"""
    database_url = f"sqlite:///{tmp_path / 'invite_codes.db'}"
    monkeypatch.setattr(settings, "DATABASE_URL", database_url)
    reset_engine()
    init_db()
    yield database_url
    reset_engine()


@pytest.fixture(scope="function")
def local_adapter(storage) -> InviteCodeAdapter:
    """使用本地存储的适配器"""
    return InviteCodeAdapter(storage, use_database=lambda: False)


@pytest.fixture(scope="function")
def db_adapter(storage, sqlite_db) -> InviteCodeAdapter:
    """使用 SQLite 数据库的适配器"""
    return InviteCodeAdapter(storage, use_database=lambda: True)


@pytest.fixture(params=["local", "database"])
def adapter(request, storage) -> InviteCodeAdapter:
    """两种后端各跑一遍"""
    if request.param == "database":
        request.getfixturevalue("sqlite_db")
    use_database = request.param == "database"
    return InviteCodeAdapter(storage, use_database=lambda: use_database)


@pytest.fixture(scope="function")
def client(local_adapter) -> Generator[TestClient, None, None]:
    """创建测试客户端"""
    app.dependency_overrides[get_invite_code_adapter] = lambda: local_adapter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_token(client) -> str:
    """初始化第一个管理员并登录，返回令牌"""
    client.post("/api/admin/init", json={"username": "root", "password": "secret123"})
    response = client.post("/api/admin/login", json={"username": "root", "password": "secret123"})
    return response.json()["data"]["access_token"]


@pytest.fixture
def auth_headers(admin_token) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}
