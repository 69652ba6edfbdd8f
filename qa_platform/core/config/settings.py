#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
question-answer platform's caching and metrics core. All configuration is
centralized here to ensure consistency across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: Platform Team
Date: 2025-12-05
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from qa_platform.core.config.constants import (
    CACHE_ASIDE_DEFAULT_TTL,
    CACHE_KEY_DEFAULT_PREFIX,
    CACHE_KEY_DEFAULT_SEPARATOR,
    DEFAULT_CACHE_STRATEGY,
    DEFAULT_EXCLUDED_ROUTES,
    SYSTEM_METRICS_INTERVAL_SECONDS,
    TTL_STRATEGY_DEFAULT_TTL,
)


class RedisSettings(BaseSettings):
    """
    Redis configuration for the key-value store backing the cache.

    STAGE-0.1: Redis connection configuration

    REDIS_URL takes precedence over host/port/db when set.
    """

    REDIS_URL: str | None = Field(default=None, description="Full Redis URL (redis://...)")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(
        default=5, description="Connection timeout in seconds"
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, description="Health check interval in seconds"
    )
    REDIS_RECONNECT_INTERVAL_SECONDS: float = Field(
        default=5.0, ge=0, description="Minimum delay between reconnect attempts"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Caching configuration for the strategy-based cache service.

    STAGE-2: Cache TTL configuration

    Different strategies carry different default expirations:
    - TTL: read-heavy, rarely-changing data (1 hour)
    - CACHE_ASIDE: data recomputed on miss (30 minutes)
    - WRITE_THROUGH: no default expiry
    """

    CACHE_DEFAULT_STRATEGY: str = Field(
        default=DEFAULT_CACHE_STRATEGY, description="Strategy used when none is requested"
    )
    CACHE_TTL_DEFAULT_SECONDS: int = Field(
        default=TTL_STRATEGY_DEFAULT_TTL, gt=0, description="TTL strategy default (1 hour)"
    )
    CACHE_ASIDE_DEFAULT_TTL_SECONDS: int = Field(
        default=CACHE_ASIDE_DEFAULT_TTL, gt=0, description="Cache-aside strategy default (30 minutes)"
    )
    CACHE_KEY_PREFIX: str = Field(
        default=CACHE_KEY_DEFAULT_PREFIX, description="Prefix for generated cache keys"
    )
    CACHE_KEY_SEPARATOR: str = Field(
        default=CACHE_KEY_DEFAULT_SEPARATOR, description="Separator between cache key parts"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class MetricsSettings(BaseSettings):
    """
    Metrics configuration for Prometheus instrumentation.

    STAGE-M: Metrics configuration

    The /metrics, /health and /favicon.ico paths are excluded from HTTP
    instrumentation so scrapes and probes do not measure themselves.
    """

    METRICS_ENABLED: bool = Field(default=True, description="Enable HTTP metrics collection")
    METRICS_EXCLUDED_ROUTES: list[str] = Field(
        default=list(DEFAULT_EXCLUDED_ROUTES),
        description="Paths skipped by HTTP instrumentation",
    )
    METRICS_EXCLUDED_METHODS: list[str] = Field(
        default=[], description="HTTP methods skipped by HTTP instrumentation"
    )
    METRICS_SAMPLE_RATE: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Fraction of requests instrumented (0.0-1.0)"
    )
    METRICS_DEFAULT_COLLECTORS: bool = Field(
        default=True, description="Register process/platform/gc collectors"
    )
    SYSTEM_METRICS_INTERVAL_SECONDS: float = Field(
        default=SYSTEM_METRICS_INTERVAL_SECONDS, gt=0, description="System metrics sampling interval"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="question-answer-platform", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=3000, description="API port")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from qa_platform.core.config.settings import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        default_ttl = settings.cache.CACHE_TTL_DEFAULT_SECONDS
    """

    # Redis settings
    REDIS_URL: str | None = Field(default=None, description="Full Redis URL (redis://...)")
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(
        default=5, description="Connection timeout in seconds"
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, description="Health check interval in seconds"
    )
    REDIS_RECONNECT_INTERVAL_SECONDS: float = Field(
        default=5.0, ge=0, description="Minimum delay between reconnect attempts"
    )

    # Cache settings
    CACHE_DEFAULT_STRATEGY: str = Field(
        default=DEFAULT_CACHE_STRATEGY, description="Strategy used when none is requested"
    )
    CACHE_TTL_DEFAULT_SECONDS: int = Field(
        default=TTL_STRATEGY_DEFAULT_TTL, gt=0, description="TTL strategy default (1 hour)"
    )
    CACHE_ASIDE_DEFAULT_TTL_SECONDS: int = Field(
        default=CACHE_ASIDE_DEFAULT_TTL, gt=0, description="Cache-aside strategy default (30 minutes)"
    )
    CACHE_KEY_PREFIX: str = Field(
        default=CACHE_KEY_DEFAULT_PREFIX, description="Prefix for generated cache keys"
    )
    CACHE_KEY_SEPARATOR: str = Field(
        default=CACHE_KEY_DEFAULT_SEPARATOR, description="Separator between cache key parts"
    )

    # Metrics settings
    METRICS_ENABLED: bool = Field(default=True, description="Enable HTTP metrics collection")
    METRICS_EXCLUDED_ROUTES: list[str] = Field(
        default=list(DEFAULT_EXCLUDED_ROUTES),
        description="Paths skipped by HTTP instrumentation",
    )
    METRICS_EXCLUDED_METHODS: list[str] = Field(
        default=[], description="HTTP methods skipped by HTTP instrumentation"
    )
    METRICS_SAMPLE_RATE: float = Field(
        default=1.0, ge=0.0, le=1.0, description="Fraction of requests instrumented (0.0-1.0)"
    )
    METRICS_DEFAULT_COLLECTORS: bool = Field(
        default=True, description="Register process/platform/gc collectors"
    )
    SYSTEM_METRICS_INTERVAL_SECONDS: float = Field(
        default=SYSTEM_METRICS_INTERVAL_SECONDS, gt=0, description="System metrics sampling interval"
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="question-answer-platform", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=3000, description="API port")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration views
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_URL=self.REDIS_URL,
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
            REDIS_RECONNECT_INTERVAL_SECONDS=self.REDIS_RECONNECT_INTERVAL_SECONDS,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_DEFAULT_STRATEGY=self.CACHE_DEFAULT_STRATEGY,
            CACHE_TTL_DEFAULT_SECONDS=self.CACHE_TTL_DEFAULT_SECONDS,
            CACHE_ASIDE_DEFAULT_TTL_SECONDS=self.CACHE_ASIDE_DEFAULT_TTL_SECONDS,
            CACHE_KEY_PREFIX=self.CACHE_KEY_PREFIX,
            CACHE_KEY_SEPARATOR=self.CACHE_KEY_SEPARATOR,
        )

    @property
    def metrics(self) -> MetricsSettings:
        """Get metrics settings."""
        return MetricsSettings(
            METRICS_ENABLED=self.METRICS_ENABLED,
            METRICS_EXCLUDED_ROUTES=self.METRICS_EXCLUDED_ROUTES,
            METRICS_EXCLUDED_METHODS=self.METRICS_EXCLUDED_METHODS,
            METRICS_SAMPLE_RATE=self.METRICS_SAMPLE_RATE,
            METRICS_DEFAULT_COLLECTORS=self.METRICS_DEFAULT_COLLECTORS,
            SYSTEM_METRICS_INTERVAL_SECONDS=self.SYSTEM_METRICS_INTERVAL_SECONDS,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
