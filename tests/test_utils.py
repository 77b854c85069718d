"""
工具类测试
测试邀请码生成、状态规则、本地存储、认证工具
"""

import json
import os
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.constants.invite_code_types import InviteCodeTypes
from app.services.core.local_storage import LocalStorage
from app.services.invite_code.rules import classify_invite_code, consume, is_limit_reached, to_local_naive
from app.utils.auth import create_access_token, decode_access_token, get_password_hash, verify_password
from app.utils.key_generator import (
    INVITE_CODE_ALPHABET,
    generate_random_code,
    generate_record_id,
    generate_unique_key,
)


def _record(**overrides):
    values = {"status": "active", "expires_at": None, "max_uses": 1, "used_count": 0}
    values.update(overrides)
    return SimpleNamespace(**values)


class TestKeyGenerator:
    """邀请码生成测试类"""

    def test_default_code_shape(self):
        """默认 12 位，只包含大写字母和数字"""
        for _ in range(50):
            code = generate_random_code()
            assert len(code) == 12
            assert all(ch in INVITE_CODE_ALPHABET for ch in code)

    def test_custom_length_and_prefix(self):
        code = generate_random_code(6, "SRI-")
        assert code.startswith("SRI-")
        assert len(code) == 10
        assert all(ch in INVITE_CODE_ALPHABET for ch in code[4:])

    def test_codes_are_random(self):
        codes = {generate_random_code() for _ in range(200)}
        assert len(codes) == 200

    def test_unique_key_is_hex(self):
        key = generate_unique_key(10)
        assert len(key) == 10
        int(key, 16)

    def test_record_id_format(self):
        record_id = generate_record_id("invite")
        kind, millis, suffix = record_id.split("_")
        assert kind == "invite"
        assert millis.isdigit()
        assert len(suffix) == 10


class TestInviteCodeRules:
    """邀请码状态规则测试类"""

    def test_active_code_is_valid(self):
        result = classify_invite_code(_record())
        assert result.valid is True
        assert result.corrected_status is None

    def test_non_active_status_is_invalid_without_correction(self):
        for status in ("used", "expired", "disabled"):
            result = classify_invite_code(_record(status=status))
            assert result.valid is False
            assert result.reason == "邀请码已失效"
            assert result.corrected_status is None

    def test_past_expiry_is_corrected_to_expired(self):
        now = datetime(2024, 6, 1, 12, 0, 0)
        result = classify_invite_code(_record(expires_at=now - timedelta(seconds=1)), now=now)
        assert result.valid is False
        assert result.reason == "邀请码已过期"
        assert result.corrected_status == "expired"

    def test_expiry_checked_before_limit(self):
        """同时过期且用完时，先判定为过期"""
        now = datetime(2024, 6, 1)
        record = _record(expires_at=now - timedelta(days=1), used_count=1)
        assert classify_invite_code(record, now=now).corrected_status == "expired"

    def test_limit_reached_is_corrected_to_used(self):
        result = classify_invite_code(_record(max_uses=3, used_count=3))
        assert result.valid is False
        assert result.reason == "邀请码使用次数已达上限"
        assert result.corrected_status == "used"

    def test_unlimited_never_reaches_limit(self):
        assert is_limit_reached(InviteCodeTypes.UNLIMITED_USES, 10_000) is False
        assert classify_invite_code(_record(max_uses=-1, used_count=10_000)).valid is True

    def test_consume_marks_used_on_last_use(self):
        assert consume(2, 0) == (1, "active")
        assert consume(2, 1) == (2, "used")
        assert consume(-1, 99) == (100, "active")

    def test_aware_expiry_converted_to_local_time(self):
        aware = datetime(2024, 1, 1, tzinfo=timezone.utc)
        naive = to_local_naive(aware)
        assert naive.tzinfo is None
        assert naive == aware.astimezone().replace(tzinfo=None)

    def test_resolve_max_uses_defaults(self):
        assert InviteCodeTypes.resolve_max_uses("single") == 1
        assert InviteCodeTypes.resolve_max_uses("multiple") == 10
        assert InviteCodeTypes.resolve_max_uses("multiple", 0) == 10
        assert InviteCodeTypes.resolve_max_uses("multiple", 3) == 3
        assert InviteCodeTypes.resolve_max_uses("unlimited", 5) == -1


class TestLocalStorage:
    """本地键值存储测试类"""

    def test_set_get_remove(self, storage: LocalStorage):
        assert storage.get_item("missing") is None
        storage.set_item("key", "value")
        assert storage.get_item("key") == "value"
        storage.remove_item("key")
        assert storage.get_item("key") is None

    def test_values_survive_new_instance(self, storage: LocalStorage):
        storage.set_item("key", "值")
        assert LocalStorage(storage.file_path).get_item("key") == "值"

    def test_corrupt_file_reads_as_empty(self, storage: LocalStorage):
        with open(storage.file_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        assert storage.get_item("key") is None

        storage.set_item("key", "value")
        with open(storage.file_path, "r", encoding="utf-8") as f:
            assert json.load(f) == {"key": "value"}

    def test_failed_write_leaves_no_temp_file(self, storage: LocalStorage, monkeypatch):
        from app.core.exceptions import PersistenceError

        storage.set_item("key", "value")

        def broken_dump(*args, **kwargs):
            raise TypeError("not serializable")

        with monkeypatch.context() as m:
            m.setattr(json, "dump", broken_dump)
            with pytest.raises(PersistenceError):
                storage.set_item("key", "other")

        directory = os.path.dirname(storage.file_path)
        assert [name for name in os.listdir(directory) if name.endswith(".tmp")] == []
        assert storage.get_item("key") == "value"

    def test_clear(self, storage: LocalStorage):
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.clear()
        assert storage.get_item("a") is None
        assert os.path.exists(storage.file_path)


class TestAuthUtils:
    """认证工具测试类"""

    def test_password_hash_is_salted(self):
        first = get_password_hash("secret123")
        second = get_password_hash("secret123")
        assert first != second
        assert verify_password("secret123", first)
        assert verify_password("secret123", second)
        assert not verify_password("wrong", first)

    def test_verify_against_garbage_hash(self):
        assert verify_password("secret123", "not-a-hash") is False

    def test_token_round_trip(self):
        token = create_access_token({"sub": "admin-1", "username": "root"})
        payload = decode_access_token(token)
        assert payload["sub"] == "admin-1"
        assert payload["username"] == "root"

    def test_expired_token_is_rejected(self):
        token = create_access_token({"sub": "admin-1"}, expires_delta=timedelta(seconds=-1))
        assert decode_access_token(token) is None
