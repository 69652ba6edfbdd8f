"""
Unit Tests for CacheService

Tests strategy resolution, delegation, get_or_set (cache-aside) and the
fan-out clear across strategies.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from qa_platform.core.exceptions import (
    CacheKeyError,
    CacheStrategyNotFoundError,
    ConfigurationError,
)
from qa_platform.infrastructure.cache.cache_service import (
    CacheService,
    close_cache_service,
    get_cache_service,
    init_cache_service,
)
from qa_platform.infrastructure.cache.key_builder import CacheKeyBuilder
from qa_platform.infrastructure.cache.strategies import (
    BaseCacheStrategy,
    CacheAsideStrategy,
    CacheOptions,
    TtlCacheStrategy,
)


@pytest.mark.unit
class TestStrategyResolution:

    def test_default_strategy_is_ttl(self, cache_service):
        assert cache_service.default_strategy == "TTL"
        assert isinstance(cache_service.get_strategy(), TtlCacheStrategy)

    def test_registered_strategies(self, cache_service):
        assert cache_service.registered_strategies() == ["TTL", "CACHE_ASIDE", "WRITE_THROUGH"]

    async def test_unknown_strategy_raises_and_lists_names(self, cache_service):
        with pytest.raises(CacheStrategyNotFoundError) as exc_info:
            await cache_service.get("k", CacheOptions(strategy="LRU"))

        message = str(exc_info.value)
        assert '"LRU"' in message
        for name in ("TTL", "CACHE_ASIDE", "WRITE_THROUGH"):
            assert name in message
        assert exc_info.value.details["available"] == ["TTL", "CACHE_ASIDE", "WRITE_THROUGH"]

    def test_not_found_is_a_configuration_error(self):
        assert issubclass(CacheStrategyNotFoundError, ConfigurationError)

    async def test_unknown_strategy_does_not_fall_back_to_default(self, cache_service, store):
        with pytest.raises(CacheStrategyNotFoundError):
            await cache_service.set("k", 1, CacheOptions(strategy="MISSING"))
        assert store.data == {}

    async def test_named_strategy_is_used(self, cache_service, store):
        await cache_service.set("k", 1, CacheOptions(strategy="CACHE_ASIDE"))
        assert store.ttls["k"] == 1800

    async def test_register_strategy_overwrites_by_name(self, cache_service, store):
        class ShortTtl(BaseCacheStrategy):
            name = "TTL"
            default_ttl = 5

        cache_service.register_strategy(ShortTtl(store))
        await cache_service.set("k", 1)

        assert store.ttls["k"] == 5
        assert cache_service.registered_strategies().count("TTL") == 1

    async def test_register_new_strategy(self, cache_service):
        class Session(BaseCacheStrategy):
            name = "SESSION"
            default_ttl = 900

        cache_service.register_strategy(Session(AsyncMock()))

        assert "SESSION" in cache_service.registered_strategies()

    def test_custom_default_strategy(self, store):
        service = CacheService([TtlCacheStrategy(store)], default_strategy="TTL")
        assert service.default_strategy == "TTL"


@pytest.mark.unit
class TestDelegation:

    async def test_round_trip(self, cache_service):
        await cache_service.set("cache:user:1", {"name": "Ann"})

        assert await cache_service.exists("cache:user:1") is True
        assert await cache_service.get("cache:user:1") == {"name": "Ann"}
        assert await cache_service.delete("cache:user:1") is True
        assert await cache_service.get("cache:user:1") is None

    async def test_ttl_expiry_scenario(self, cache_service, clock):
        await cache_service.set("user:1", {"name": "Ann"}, CacheOptions(ttl=1))
        assert await cache_service.get("user:1") == {"name": "Ann"}

        clock.advance(2)

        assert await cache_service.get("user:1") is None

    def test_key_builder_accessor(self):
        assert CacheService.key_builder() is CacheKeyBuilder
        assert CacheService.key_builder().for_entity("user", 1) == "cache:user:1"


@pytest.mark.unit
class TestGetOrSet:

    async def test_factory_called_once_across_sequential_calls(self, cache_service):
        factory = AsyncMock(return_value={"id": 42})

        first = await cache_service.get_or_set("cache:question:42", factory)
        second = await cache_service.get_or_set("cache:question:42", factory)

        assert first == second == {"id": 42}
        factory.assert_awaited_once()

    async def test_sync_factory_is_accepted(self, cache_service):
        factory = MagicMock(return_value=[1, 2, 3])

        assert await cache_service.get_or_set("k", factory) == [1, 2, 3]
        assert await cache_service.get_or_set("k", factory) == [1, 2, 3]
        factory.assert_called_once()

    async def test_result_stored_with_same_options(self, cache_service, store):
        await cache_service.get_or_set(
            "k", lambda: "v", CacheOptions(strategy="CACHE_ASIDE", ttl=99)
        )
        assert store.ttls["k"] == 99

    async def test_factory_error_propagates_and_nothing_is_cached(self, cache_service, store):
        async def failing():
            raise LookupError("question not found")

        with pytest.raises(LookupError, match="question not found"):
            await cache_service.get_or_set("k", failing)

        assert store.data == {}

    async def test_cached_falsy_value_skips_factory(self, cache_service):
        await cache_service.set("count", 0)
        factory = MagicMock(return_value=10)

        assert await cache_service.get_or_set("count", factory) == 0
        factory.assert_not_called()

    async def test_store_failure_still_returns_factory_value(self):
        store = AsyncMock()
        store.get.side_effect = CacheKeyError("down")
        store.set.side_effect = CacheKeyError("down")
        service = CacheService([TtlCacheStrategy(store)], default_strategy="TTL")

        assert await service.get_or_set("k", lambda: "fresh") == "fresh"


@pytest.mark.unit
class TestClearAndInvalidate:

    async def test_clear_removes_keys_written_by_all_strategies(self, cache_service, store):
        await cache_service.set("a", 1, CacheOptions(strategy="TTL"))
        await cache_service.set("b", 2, CacheOptions(strategy="CACHE_ASIDE"))
        await cache_service.set("c", 3, CacheOptions(strategy="WRITE_THROUGH"))

        await cache_service.clear()

        for key in ("a", "b", "c"):
            assert await cache_service.exists(key) is False

    async def test_clear_with_strategy_name_only_clears_that_strategy(self):
        ttl_store, aside_store = AsyncMock(), AsyncMock()
        ttl_store.keys.return_value = []
        aside_store.keys.return_value = []
        service = CacheService(
            [TtlCacheStrategy(ttl_store), CacheAsideStrategy(aside_store)], default_strategy="TTL"
        )

        await service.clear("cache:*", strategy_name="CACHE_ASIDE")

        aside_store.keys.assert_awaited_once_with("cache:*")
        ttl_store.keys.assert_not_awaited()

    async def test_clear_unknown_strategy_raises(self, cache_service):
        with pytest.raises(CacheStrategyNotFoundError):
            await cache_service.clear(strategy_name="NOPE")

    async def test_clear_runs_every_strategy_before_raising(self):
        failing_store, healthy_store = AsyncMock(), AsyncMock()
        failing_store.keys.side_effect = CacheKeyError("scan failed")
        healthy_store.keys.return_value = ["x"]
        healthy_store.delete.return_value = 1
        service = CacheService(
            [TtlCacheStrategy(failing_store), CacheAsideStrategy(healthy_store)],
            default_strategy="TTL",
        )

        with pytest.raises(CacheKeyError, match="scan failed"):
            await service.clear()

        healthy_store.delete.assert_awaited_once_with("x")

    async def test_invalidate_pattern(self, cache_service, store):
        await cache_service.set("cache:question:1", 1)
        await cache_service.set("cache:question:2", 2)
        await cache_service.set("cache:user:1", 3)

        await cache_service.invalidate("cache:question:*")

        assert list(store.data) == ["cache:user:1"]


@pytest.mark.unit
class TestGlobalInstance:

    def test_get_before_init_raises(self):
        with pytest.raises(RuntimeError):
            get_cache_service()

    def test_init_then_get(self, store, settings):
        service = init_cache_service(store, settings)

        assert get_cache_service() is service

        close_cache_service()
        with pytest.raises(RuntimeError):
            get_cache_service()
