"""
Unit Tests for Configuration Settings

Tests defaults, environment overrides, validation and the nested views.
"""

import pytest
from pydantic import ValidationError

from qa_platform.core.config.constants import CacheStrategyName
from qa_platform.core.config.settings import Settings, get_settings, reload_settings


@pytest.mark.unit
class TestDefaults:

    def test_cache_defaults(self, settings):
        assert settings.cache.CACHE_DEFAULT_STRATEGY == CacheStrategyName.TTL.value
        assert settings.cache.CACHE_TTL_DEFAULT_SECONDS == 3600
        assert settings.cache.CACHE_ASIDE_DEFAULT_TTL_SECONDS == 1800
        assert settings.cache.CACHE_KEY_PREFIX == "cache"
        assert settings.cache.CACHE_KEY_SEPARATOR == ":"

    def test_metrics_defaults(self, settings):
        assert settings.metrics.METRICS_ENABLED is True
        assert settings.metrics.METRICS_EXCLUDED_ROUTES == ["/metrics", "/health", "/favicon.ico"]
        assert settings.metrics.METRICS_SAMPLE_RATE == 1.0
        assert settings.metrics.SYSTEM_METRICS_INTERVAL_SECONDS == 5.0

    def test_app_defaults(self, settings):
        assert settings.app.APP_NAME == "question-answer-platform"
        assert settings.app.API_PORT == 3000

    def test_redis_defaults(self, settings):
        assert settings.redis.REDIS_HOST == "localhost"
        assert settings.redis.REDIS_PORT == 6379
        assert settings.redis.REDIS_URL is None
        assert settings.redis.REDIS_RECONNECT_INTERVAL_SECONDS == 5.0


@pytest.mark.unit
class TestEnvironmentOverrides:

    def test_env_overrides_values(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_DEFAULT_SECONDS", "120")
        monkeypatch.setenv("METRICS_SAMPLE_RATE", "0.25")
        monkeypatch.setenv("REDIS_HOST", "redis.internal")

        settings = Settings(_env_file=None)

        assert settings.cache.CACHE_TTL_DEFAULT_SECONDS == 120
        assert settings.metrics.METRICS_SAMPLE_RATE == 0.25
        assert settings.redis.REDIS_HOST == "redis.internal"

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings(_env_file=None).logging.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_is_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_sample_rate_out_of_range_is_rejected(self, monkeypatch):
        monkeypatch.setenv("METRICS_SAMPLE_RATE", "1.5")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_non_positive_ttl_is_rejected(self, monkeypatch):
        monkeypatch.setenv("CACHE_ASIDE_DEFAULT_TTL_SECONDS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


@pytest.mark.unit
class TestSingleton:

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_instance(self):
        before = get_settings()
        after = reload_settings()

        assert after is not before
        assert get_settings() is after
