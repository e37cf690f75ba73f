import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env,expected",
    [
        ("production", "config.production"),
        ("prod", "config.production"),
        ("Testing", "config.testing"),
        ("test", "config.testing"),
        ("development", "config.development"),
        ("anything-else", "config.development"),
    ],
)
def test_settings_module_selection(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == expected


def test_default_is_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"


def test_settings_expose_db_config_and_log_level():
    for name in ("config.development", "config.testing", "config.production"):
        settings = importlib.import_module(name)
        assert {"host", "port", "user", "password", "database"} <= set(settings.DB_CONFIG)
        assert settings.LOG_LEVEL
