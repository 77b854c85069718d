"""
DAO层测试
测试数据库后端与本地数据集的数据访问
"""

import importlib

import pytest
from sqlmodel import select

from app.constants.invite_code_types import ADMIN_STORAGE_KEY
from app.core.exceptions import BackendUnavailableError, ConflictError
from app.dao.admin_dao import AdminDAO
from app.dao.invite_code_dao import InviteCodeDAO
from app.dao.local_dataset_dao import LocalDatasetDAO
from app.models import db_session_context, reset_engine
from app.models.entities import Admin, InviteCode, InviteCodeUsage
from app.models.schemas import AdminStorageData
from config.config import settings

# app.dao 包导出的同名实例会遮蔽子模块属性，这里直接取模块对象
invite_code_dao_module = importlib.import_module("app.dao.invite_code_dao")


class TestInviteCodeDAO:
    """邀请码DAO测试类"""

    def test_create_and_find(self, sqlite_db):
        dao = InviteCodeDAO()
        created = dao.create(code="DAO000000001", code_type="multiple", max_uses=3, note="测试")

        assert dao.exists("DAO000000001") is True
        assert dao.exists("DAO000000002") is False

        found = dao.find_by_id(created.id)
        assert found.code == "DAO000000001"
        assert found.max_uses == 3
        assert found.note == "测试"
        assert dao.find_by_id("missing") is None

    def test_naive_datetimes_stored(self, sqlite_db):
        from datetime import datetime, timedelta

        from sqlalchemy import DateTime

        for column in ("created_at", "expires_at"):
            column_type = InviteCode.__table__.c[column].type
            assert isinstance(column_type, DateTime)
            assert column_type.timezone is False

        expires_at = datetime.now().replace(microsecond=0) + timedelta(days=3)
        dao = InviteCodeDAO()
        created = dao.create(code="TIME00000001", code_type="single", max_uses=1, expires_at=expires_at)

        found = dao.find_by_id(created.id)
        assert found.expires_at == expires_at
        assert found.expires_at.tzinfo is None
        assert found.created_at.tzinfo is None

    def test_metadata_round_trip(self, sqlite_db):
        dao = InviteCodeDAO()
        created = dao.create(code="META00000001", code_type="single", max_uses=1, metadata={"channel": "wechat"})
        assert dao.find_by_id(created.id).metadata == {"channel": "wechat"}

    def test_duplicate_code_rejected(self, sqlite_db):
        from app.core.exceptions import PersistenceError

        dao = InviteCodeDAO()
        dao.create(code="DUP000000001", code_type="single", max_uses=1)
        with pytest.raises(PersistenceError):
            dao.create(code="DUP000000001", code_type="single", max_uses=1)

    def test_consume_writes_usage_record(self, sqlite_db):
        dao = InviteCodeDAO()
        created = dao.create(code="USE000000001", code_type="single", max_uses=1)

        success, reason = dao.consume("USE000000001", "session-1", "agent", "10.0.0.1")
        assert success is True
        assert reason is None

        with db_session_context() as session:
            usages = session.exec(select(InviteCodeUsage)).all()
            assert len(usages) == 1
            assert usages[0].code_id == created.id
            assert usages[0].ip_address == "10.0.0.1"

        assert dao.find_by_id(created.id).status == "used"

    def test_concurrent_consume_loses_race(self, sqlite_db, monkeypatch):
        """另一个请求在读取之后抢先写入时，本次使用失败且不写使用记录"""
        dao = InviteCodeDAO()
        created = dao.create(code="RACE00000001", code_type="multiple", max_uses=5)
        original_consume = invite_code_dao_module.consume

        def racing_consume(max_uses, used_count):
            with db_session_context() as other:
                row = other.get(InviteCode, created.id)
                row.used_count += 1
                other.add(row)
            return original_consume(max_uses, used_count)

        monkeypatch.setattr(invite_code_dao_module, "consume", racing_consume)

        success, reason = dao.consume("RACE00000001", "session-1")
        assert success is False
        assert reason
        assert dao.find_by_id(created.id).used_count == 1
        assert dao.list_usages(created.id) == []

    def test_count_by_status(self, sqlite_db):
        dao = InviteCodeDAO()
        first = dao.create(code="CNT000000001", code_type="single", max_uses=1)
        dao.create(code="CNT000000002", code_type="single", max_uses=1)
        dao.update_status(first.id, "disabled")

        assert dao.count_by_status() == {"active": 1, "disabled": 1}
        assert dao.count_usages() == 0

    def test_unconfigured_database(self, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", None)
        reset_engine()

        with pytest.raises(BackendUnavailableError):
            InviteCodeDAO().exists("ANY")


class TestAdminDAO:
    """管理员DAO测试类"""

    def test_role_follows_admin_count(self, sqlite_db):
        dao = AdminDAO()
        assert dao.count() == 0
        assert dao.create("root", "hash-1").role == "super-admin"
        assert dao.create("helper", "hash-2").role == "admin"
        assert dao.count() == 2

    def test_duplicate_username_is_conflict(self, sqlite_db):
        dao = AdminDAO()
        dao.create("root", "hash-1")
        with pytest.raises(ConflictError):
            dao.create("root", "hash-2")

    def test_inactive_admin_hidden_from_login_lookup(self, sqlite_db):
        dao = AdminDAO()
        dao.create("root", "hash-1")

        with db_session_context() as session:
            admin = session.exec(select(Admin).where(Admin.username == "root")).one()
            admin.is_active = False
            session.add(admin)

        assert dao.find_by_username("root") is not None
        assert dao.find_by_username("root", active_only=True) is None

    def test_update_last_login(self, sqlite_db):
        dao = AdminDAO()
        admin = dao.create("root", "hash-1")
        assert admin.last_login_at is None

        updated = dao.update_last_login(admin.id)
        assert updated.last_login_at is not None
        assert dao.update_last_login("missing") is None


class TestLocalDatasetDAO:
    """本地数据集DAO测试类"""

    def test_empty_storage_loads_empty_dataset(self, storage):
        data = LocalDatasetDAO(storage).load()
        assert data.invite_codes == []
        assert data.usages == []
        assert data.admins == []
        assert data.version == "1.0.0"

    def test_save_and_load(self, storage):
        dao = LocalDatasetDAO(storage)
        dao.save(AdminStorageData(version="1.0.0"))
        assert storage.get_item(ADMIN_STORAGE_KEY) is not None
        assert dao.load().version == "1.0.0"

    def test_invalid_blob_loads_empty_dataset(self, storage):
        storage.set_item(ADMIN_STORAGE_KEY, '{"invite_codes": "broken"}')
        assert LocalDatasetDAO(storage).load().invite_codes == []
