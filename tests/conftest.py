"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import fnmatch
import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


# ============================================================================
# Fakes
# ============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryStore:
    """
    In-memory KeyValueStore with TTL support.

    Expiry is evaluated against the injected clock, so tests move time
    forward with clock.advance() instead of sleeping.
    """

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self.data: dict[str, str] = {}
        self.expires_at: dict[str, float] = {}
        self.ttls: dict[str, int | None] = {}
        self.healthy = True

    def _purge(self, key: str) -> None:
        deadline = self.expires_at.get(key)
        if deadline is not None and self._clock() >= deadline:
            self.data.pop(key, None)
            self.expires_at.pop(key, None)

    async def get(self, key):
        self._purge(key)
        return self.data.get(key)

    async def set(self, key, value, ttl=None):
        self.data[key] = value
        self.ttls[key] = ttl
        if ttl:
            self.expires_at[key] = self._clock() + ttl
        else:
            self.expires_at.pop(key, None)
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            self._purge(key)
            if key in self.data:
                del self.data[key]
                self.expires_at.pop(key, None)
                removed += 1
        return removed

    async def exists(self, *keys):
        count = 0
        for key in keys:
            self._purge(key)
            if key in self.data:
                count += 1
        return count

    async def keys(self, pattern="*"):
        for key in list(self.data):
            self._purge(key)
        return [key for key in self.data if fnmatch.fnmatchcase(key, pattern)]

    async def ping(self):
        return self.healthy


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Settings built from defaults only (no .env file)."""
    from qa_platform.core.config.settings import Settings

    return Settings(_env_file=None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock)


@pytest.fixture
def metrics_registry(settings):
    """Fresh registry per test so counters start at zero."""
    from qa_platform.infrastructure.monitoring.metrics_registry import MetricsRegistry

    return MetricsRegistry(settings=settings, default_collectors=False)


@pytest.fixture
def cache_service(store, settings):
    from qa_platform.infrastructure.cache.cache_service import CacheService

    return CacheService.from_store(store, settings)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop process-wide singletons between tests."""
    yield
    from qa_platform.infrastructure.cache.cache_service import close_cache_service
    from qa_platform.infrastructure.monitoring.metrics_registry import reset_metrics_registry

    close_cache_service()
    reset_metrics_registry()
