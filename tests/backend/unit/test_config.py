"""
Unit tests for config helpers.
"""
from bloogle.config import _env_flag, _env_list, settings


def test_env_list_splits_and_strips(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", " https://a.example , https://b.example,, ")
    assert _env_list("CORS_ORIGINS", "http://unused") == ["https://a.example", "https://b.example"]


def test_env_list_uses_default_when_unset(monkeypatch):
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    assert _env_list("CORS_ORIGINS", "http://localhost:3000") == ["http://localhost:3000"]


def test_env_flag(monkeypatch):
    monkeypatch.setenv("GENERATE_SCHEMAS", "Yes")
    assert _env_flag("GENERATE_SCHEMAS") is True
    monkeypatch.setenv("GENERATE_SCHEMAS", "off")
    assert _env_flag("GENERATE_SCHEMAS") is False


def test_settings_has_no_server_bind_options():
    assert settings.CORS_ORIGINS
    assert not hasattr(settings, "host")
    assert not hasattr(settings, "port")
