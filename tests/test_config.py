"""
Configuration Tests
"""

import pytest

from guestbook.config import AppConfig, Environment


def test_defaults():
    config = AppConfig.for_environment(Environment.PRODUCTION)
    assert config.web.port == 4001
    assert config.guestbook.tick_interval == 5.0
    assert config.guestbook.standalone_cap == 20
    assert config.guestbook.component_cap == 15
    assert config.logging.level == "INFO"
    assert not config.debug


def test_testing_environment():
    config = AppConfig.for_environment(Environment.TESTING)
    assert config.web.port == 4002
    assert config.web.host == "127.0.0.1"
    assert config.logging.level == "WARNING"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GUESTBOOK_ENV", "production")
    monkeypatch.setenv("GUESTBOOK_PORT", "8080")
    monkeypatch.setenv("GUESTBOOK_HOST", "localhost")
    monkeypatch.setenv("GUESTBOOK_LOG_LEVEL", "debug")
    monkeypatch.setenv("GUESTBOOK_TICK_INTERVAL", "0.5")
    monkeypatch.setenv("GUESTBOOK_SECRET_KEY", "s3cret")
    monkeypatch.setenv("GUESTBOOK_DEBUG", "true")

    config = AppConfig.from_environment()
    assert config.environment == Environment.PRODUCTION
    assert config.web.port == 8080
    assert config.web.host == "localhost"
    assert config.logging.level == "DEBUG"
    assert config.guestbook.tick_interval == 0.5
    assert config.secret_key == "s3cret"
    assert config.debug and config.web.debug


def test_unknown_environment(monkeypatch):
    monkeypatch.setenv("GUESTBOOK_ENV", "staging")
    with pytest.raises(ValueError):
        AppConfig.from_environment()


def test_generated_secret_is_stable():
    config = AppConfig()
    key = config.secret_key
    assert len(key) == 64
    assert config.secret_key == key


def test_dict_round_trip():
    config = AppConfig.for_environment(Environment.TESTING)
    config.guestbook.view_ttl = 42
    restored = AppConfig.from_dict(config.to_dict())
    assert restored.environment == Environment.TESTING
    assert restored.guestbook.view_ttl == 42
    assert restored.web.port == 4002
