"""Tests for configuration module."""

from __future__ import annotations

from liftcoach.config import Settings, _ENV_PROFILES, get_settings


def test_settings_defaults():
    s = Settings()
    assert s.app_env == "dev"
    assert s.stall_min_sessions == 3
    assert s.stall_improvement_pct == 1.0
    assert s.stall_high_rpe == 9.0
    assert s.reduced_rpe_cap == 7.5
    assert s.optional_cutoff_minutes == 45
    assert s.minutes_per_set == 3


def test_settings_frozen():
    s = Settings()
    try:
        s.stall_min_sessions = 5
        assert False, "Should raise"
    except AttributeError:
        pass


def test_settings_is_production():
    s = Settings(app_env="production")
    assert s.is_production is True
    assert s.is_dev is False


def test_settings_is_dev():
    s = Settings(app_env="dev")
    assert s.is_dev is True
    assert s.is_production is False


def test_env_profiles_exist():
    assert "dev" in _ENV_PROFILES
    assert "staging" in _ENV_PROFILES
    assert "production" in _ENV_PROFILES


def test_dev_profile_debug_logging():
    assert _ENV_PROFILES["dev"]["log_level"] == "DEBUG"


def test_get_settings_profile_defaults(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("CORS_ORIGINS", raising=False)
    s = get_settings()
    assert s.is_production is True
    assert s.log_level == "WARNING"
    assert s.cors_origins == ()


def test_get_settings_threshold_overrides(monkeypatch):
    monkeypatch.setenv("STALL_IMPROVEMENT_PCT", "2.5")
    monkeypatch.setenv("MINUTES_PER_SET", "4")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    s = get_settings()
    assert s.stall_improvement_pct == 2.5
    assert s.minutes_per_set == 4
    assert s.cors_origins == ("http://a.test", "http://b.test")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
