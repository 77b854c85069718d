"""
集成测试
测试适配器在两种后端之间的选择，以及用户邀请码始终保存在本地
"""

import pytest

from app.core.exceptions import BackendUnavailableError
from app.models import reset_engine
from app.models.schemas import InviteCodeGenerateOptions
from app.services.invite_code.adapter import InviteCodeAdapter
from config.config import settings


class TestBackendSelection:
    """后端选择测试类"""

    def test_local_when_database_not_configured(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", None)
        adapter = InviteCodeAdapter(storage)
        assert adapter.is_using_database() is False
        assert adapter.get_backend_type() == "local"

    def test_database_when_configured(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "sqlite:///unused.db")
        monkeypatch.setattr(settings, "INVITE_BACKEND", "auto")
        adapter = InviteCodeAdapter(storage)
        assert adapter.is_using_database() is True
        assert adapter.get_backend_type() == "database"

    def test_forced_local_backend(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", "sqlite:///unused.db")
        monkeypatch.setattr(settings, "INVITE_BACKEND", "local")
        assert InviteCodeAdapter(storage).get_backend_type() == "local"

    def test_selection_is_evaluated_per_call(self, storage, sqlite_db, monkeypatch):
        """切换配置后，后续调用立即走另一种后端"""
        adapter = InviteCodeAdapter(storage)
        options = InviteCodeGenerateOptions(type="single")

        db_code = adapter.create_invite_code(options)
        assert adapter.get_backend_type() == "database"

        monkeypatch.setattr(settings, "INVITE_BACKEND", "local")
        assert adapter.get_backend_type() == "local"
        assert adapter.get_all_invite_codes() == []
        assert adapter.validate_invite_code(db_code.code).reason == "邀请码不存在"

    def test_unconfigured_database_raises(self, storage, monkeypatch):
        monkeypatch.setattr(settings, "DATABASE_URL", None)
        reset_engine()
        adapter = InviteCodeAdapter(storage, use_database=lambda: True)

        with pytest.raises(BackendUnavailableError):
            adapter.create_invite_code(InviteCodeGenerateOptions(type="single"))

    def test_backends_do_not_share_data(self, storage, sqlite_db):
        local = InviteCodeAdapter(storage, use_database=lambda: False)
        database = InviteCodeAdapter(storage, use_database=lambda: True)

        local.create_invite_code(InviteCodeGenerateOptions(type="single"))
        assert len(local.get_all_invite_codes()) == 1
        assert database.get_all_invite_codes() == []


class TestUserInviteCode:
    """用户邀请码测试类"""

    def test_no_code_saved(self, local_adapter: InviteCodeAdapter):
        assert local_adapter.get_user_invite_code() is None
        assert local_adapter.has_valid_user_invite_code() is False

    def test_local_code_stays_valid_until_disabled(self, local_adapter: InviteCodeAdapter):
        code = local_adapter.create_invite_code(InviteCodeGenerateOptions(type="multiple"))
        local_adapter.use_invite_code(code.code, "session-1")

        assert local_adapter.has_valid_user_invite_code() is True
        local_adapter.update_invite_code_status(code.id, "disabled")
        assert local_adapter.has_valid_user_invite_code() is False

    def test_single_use_code_is_no_longer_valid(self, local_adapter: InviteCodeAdapter):
        code = local_adapter.create_invite_code(InviteCodeGenerateOptions(type="single"))
        local_adapter.use_invite_code(code.code, "session-1")

        assert local_adapter.get_user_invite_code() == code.code
        assert local_adapter.has_valid_user_invite_code() is False

    def test_check_always_uses_local_backend(self, db_adapter: InviteCodeAdapter):
        """数据库后端下，用户邀请码仍按本地数据检查"""
        code = db_adapter.create_invite_code(InviteCodeGenerateOptions(type="unlimited"))
        assert db_adapter.use_invite_code(code.code, "session-1") is True

        assert db_adapter.get_user_invite_code() == code.code
        assert db_adapter.validate_invite_code(code.code).valid is True
        assert db_adapter.has_valid_user_invite_code() is False

    def test_manual_save(self, local_adapter: InviteCodeAdapter):
        local_adapter.save_user_invite_code("MANUAL000001")
        assert local_adapter.get_user_invite_code() == "MANUAL000001"
