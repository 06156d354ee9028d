from ini_guard.utils import (
    _canon,
    _checksum_of_config,
    _redact_for_log,
    _require_reset_env,
    _stable_serialize_for_checksum,
)


def test_stable_serialize_and_checksum_are_stable():
    a = {"b": {"y": "2", "x": "1"}, "a": {}}
    b = {"a": {}, "b": {"x": "1", "y": "2"}}
    assert _stable_serialize_for_checksum(a) == _stable_serialize_for_checksum(b)
    assert _checksum_of_config(a) == _checksum_of_config(b)


def test_checksum_different_for_different_data():
    assert _checksum_of_config({"a": {"x": "1"}}) != _checksum_of_config({"a": {"x": "2"}})


def test_checksum_algorithm():
    assert len(_checksum_of_config({}, "sha256")) == 64
    assert len(_checksum_of_config({}, "md5")) == 32


def test_require_reset_env(monkeypatch):
    monkeypatch.delenv("ALLOW_CONFIG_RESET", raising=False)
    assert _require_reset_env() is False
    monkeypatch.setenv("ALLOW_CONFIG_RESET", "0")
    assert _require_reset_env() is False
    monkeypatch.setenv("ALLOW_CONFIG_RESET", "1")
    assert _require_reset_env() is True


def test_redact_for_log():
    assert _redact_for_log("db_password", "hunter2") == "***"
    assert _redact_for_log("API_TOKEN", "abc") == "***"
    assert _redact_for_log("host", "localhost") == "'localhost'"


def test_canon():
    assert _canon("MiXeD", True) == "MiXeD"
    assert _canon("MiXeD", False) == "mixed"
    assert _canon("Straße", False) == _canon("STRASSE", False)
