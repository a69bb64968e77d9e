"""
Unit tests for environment-based settings.
"""

import pytest

from content_dual_store.coordinator import ConsistencyPolicy
from contentstore.config import Settings, get_settings


@pytest.fixture
def env(monkeypatch, mock_dsn):
    monkeypatch.setenv("PRIMARY_DATABASE_URL", mock_dsn)
    monkeypatch.setenv("SECONDARY_DATABASE_URL", mock_dsn.replace("testdb", "indexdb"))
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


def test_defaults(env):
    s = Settings(_env_file=None)
    assert s.APP_ENV == "development"
    assert s.DUAL_STORAGE_STRICT is None
    assert s.policy_resolver().resolve() is ConsistencyPolicy.BEST_EFFORT


def test_production_is_strict(env):
    env.setenv("APP_ENV", "production")
    s = Settings(_env_file=None)
    assert s.policy_resolver().resolve() is ConsistencyPolicy.REQUIRED


def test_explicit_flag_wins(env):
    env.setenv("APP_ENV", "production")
    env.setenv("DUAL_STORAGE_STRICT", "false")
    s = Settings(_env_file=None)
    assert s.policy_resolver().resolve() is ConsistencyPolicy.BEST_EFFORT


def test_store_configs(env):
    env.setenv("STATEMENT_TIMEOUT_MS", "1500")
    s = Settings(_env_file=None)
    primary = s.primary_config()
    secondary = s.secondary_config()
    assert primary["dsn"].endswith("/testdb")
    assert secondary["dsn"].endswith("/indexdb")
    assert primary["statement_timeout_ms"] == 1500
    assert primary["app_name"] != secondary["app_name"]


def test_get_settings_cached(env):
    assert get_settings() is get_settings()
