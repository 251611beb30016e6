"""
Unit tests for configuration management (flat Settings).

Tests cover:
- Default values (library imports without an .env file)
- Settings loading from environment variables
- Validation (retry attempts, jitter, backends)
- Derived properties
- Cached singleton behavior
"""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from finsync.core.config import Settings, get_settings
from finsync.core.enums import Environment


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestEnvironmentEnum:
    """Test Environment enum."""

    def test_environment_values(self):
        """Test that all expected environments are defined."""
        assert Environment.DEVELOPMENT == "development"
        assert Environment.TESTING == "testing"
        assert Environment.CI == "ci"
        assert Environment.PRODUCTION == "production"


@pytest.mark.unit
class TestSettingsDefaults:
    """Test Settings defaults with an empty environment."""

    def test_defaults_select_in_process_backends(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.environment == Environment.DEVELOPMENT
        assert settings.database_url is None
        assert settings.redis_url is None
        assert settings.lock_backend == "memory"
        assert settings.gate_storage == "memory"

    def test_sync_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings()

        assert settings.lock_ttl_seconds == 300
        assert settings.lock_renew_interval_seconds is None
        assert settings.sync_default_window_days == 30
        assert settings.retry_max_attempts == 5
        assert settings.retry_base_delay_seconds == 2.0
        assert settings.retry_max_delay_seconds == 60.0
        assert settings.gate_max_concurrent_requests == 10
        assert settings.large_purchase_threshold == Decimal("1000")


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Test loading values from environment variables."""

    def test_values_are_parsed(self):
        env_values = {
            "ENVIRONMENT": "production",
            "DATABASE_URL": "postgresql+asyncpg://u:p@db/finsync",
            "LOCK_BACKEND": "redis",
            "REDIS_URL": "redis://cache:6379/0",
            "RETRY_MAX_ATTEMPTS": "3",
            "GATE_REFILL_RATE": "120",
            "LARGE_PURCHASE_THRESHOLD": "250.50",
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env_values, clear=True):
            settings = get_settings()

        assert settings.environment == Environment.PRODUCTION
        assert settings.database_url == "postgresql+asyncpg://u:p@db/finsync"
        assert settings.lock_backend == "redis"
        assert settings.retry_max_attempts == 3
        assert settings.gate_refill_rate == 120.0
        assert settings.large_purchase_threshold == Decimal("250.50")
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("RETRY_MAX_ATTEMPTS", "0"),
            ("GATE_MAX_CONCURRENT_REQUESTS", "0"),
            ("RETRY_JITTER", "1.5"),
            ("LOCK_BACKEND", "zookeeper"),
        ],
    )
    def test_invalid_values_rejected(self, name, value):
        with patch.dict(os.environ, {name: value}, clear=True):
            with pytest.raises(ValidationError):
                Settings()


@pytest.mark.unit
class TestDerivedProperties:
    """Test environment-derived properties."""

    def test_development_renders_console_logs(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "development"}, clear=True):
            settings = Settings()

        assert settings.is_development
        assert not settings.is_testing
        assert settings.use_json_logs is False

    def test_non_development_renders_json_logs(self):
        with patch.dict(os.environ, {"ENVIRONMENT": "testing"}, clear=True):
            settings = Settings()

        assert settings.is_testing
        assert settings.use_json_logs is True

    def test_log_json_overrides_environment(self):
        env_values = {"ENVIRONMENT": "production", "LOG_JSON": "false"}
        with patch.dict(os.environ, env_values, clear=True):
            settings = Settings()

        assert settings.use_json_logs is False


@pytest.mark.unit
class TestGetSettings:
    """Test the cached settings accessor."""

    def test_returns_same_instance(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_settings() is get_settings()
