#!/usr/bin/env python3
"""
Cache Service - Strategy-based Cache Facade

Architecture:
    CacheService (Public API)
        ├── strategy registry (name -> BaseCacheStrategy)
        │   ├── TtlCacheStrategy
        │   ├── CacheAsideStrategy
        │   └── WriteThroughCacheStrategy
        └── CacheKeyBuilder (static key helpers)

Every call resolves one strategy from ``options.strategy`` (or the default
strategy when no name is given) and delegates to it. An unknown name is a
configuration error and is raised immediately, never silently replaced by
the default.

Author: Platform Team
Date: 2025-12-14
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.exceptions import CacheStrategyNotFoundError
from qa_platform.core.interfaces import KeyValueStore
from qa_platform.core.logging.logger import get_logger, log_stage
from qa_platform.infrastructure.cache.key_builder import CacheKeyBuilder
from qa_platform.infrastructure.cache.strategies import (
    BaseCacheStrategy,
    CacheOptions,
    build_default_strategies,
)

logger = get_logger(__name__)

T = TypeVar("T")


class CacheService:
    """
    Facade over the registered cache strategies.

    Usage:
        service = CacheService(build_default_strategies(redis_client))

        key = CacheService.key_builder().for_entity("user", 1)
        await service.set(key, {"name": "Ann"})
        user = await service.get(key)

        question = await service.get_or_set(
            CacheService.key_builder().for_entity("question", 42),
            lambda: repository.find_question(42),
            CacheOptions(strategy="CACHE_ASIDE"),
        )
    """

    def __init__(
        self,
        strategies: Iterable[BaseCacheStrategy],
        default_strategy: str | None = None,
    ):
        self._strategies: dict[str, BaseCacheStrategy] = {}
        for strategy in strategies:
            self._strategies[strategy.get_strategy_name()] = strategy

        self._default_strategy = default_strategy or get_settings().CACHE_DEFAULT_STRATEGY

        logger.info(
            "Cache service initialized",
            stage="CACHE.INIT",
            strategies=self.registered_strategies(),
            default_strategy=self._default_strategy,
        )

    @classmethod
    def from_store(cls, store: KeyValueStore, settings: Settings | None = None) -> "CacheService":
        """Build a service with the three built-in strategies over ``store``."""
        settings = settings or get_settings()
        return cls(
            build_default_strategies(store, settings),
            default_strategy=settings.cache.CACHE_DEFAULT_STRATEGY,
        )

    # -------------------------------------------------------------------------
    # Strategy registry
    # -------------------------------------------------------------------------

    @property
    def default_strategy(self) -> str:
        return self._default_strategy

    def register_strategy(self, strategy: BaseCacheStrategy) -> None:
        """Add a strategy, replacing any strategy registered under the same name."""
        name = strategy.get_strategy_name()
        replaced = name in self._strategies
        self._strategies[name] = strategy
        logger.info(
            "Cache strategy registered", stage="CACHE.REGISTER", strategy=name, replaced=replaced
        )

    def registered_strategies(self) -> list[str]:
        return list(self._strategies)

    def get_strategy(self, name: str | None = None) -> BaseCacheStrategy:
        """
        Resolve a strategy by name (None = default).

        Raises:
            CacheStrategyNotFoundError: If the name is not registered
        """
        resolved = name or self._default_strategy
        strategy = self._strategies.get(resolved)
        if strategy is None:
            available = ", ".join(self._strategies)
            raise CacheStrategyNotFoundError(
                f'Cache strategy "{resolved}" not found. Available strategies: {available}',
                details={"strategy": resolved, "available": self.registered_strategies()},
            )
        return strategy

    def _resolve(self, options: CacheOptions | None) -> BaseCacheStrategy:
        return self.get_strategy(options.strategy if options else None)

    # -------------------------------------------------------------------------
    # Delegated operations
    # -------------------------------------------------------------------------

    async def get(self, key: str, options: CacheOptions | None = None) -> Any | None:
        return await self._resolve(options).get(key)

    async def set(self, key: str, value: Any, options: CacheOptions | None = None) -> bool:
        return await self._resolve(options).set(key, value, options)

    async def delete(self, key: str, options: CacheOptions | None = None) -> bool:
        return await self._resolve(options).delete(key)

    async def exists(self, key: str, options: CacheOptions | None = None) -> bool:
        return await self._resolve(options).exists(key)

    async def clear(self, pattern: str | None = None, strategy_name: str | None = None) -> None:
        """
        Clear keys matching ``pattern``.

        With a strategy name, only that strategy is cleared. Without one, every
        registered strategy is cleared concurrently; all of them run to
        completion and the first failure is then raised.
        """
        if strategy_name:
            await self.get_strategy(strategy_name).clear(pattern)
            return

        results = await asyncio.gather(
            *(strategy.clear(pattern) for strategy in self._strategies.values()),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def invalidate(self, pattern: str, strategy_name: str | None = None) -> None:
        """Invalidate every key matching ``pattern``; same fan-out as clear()."""
        log_stage(
            logger,
            "CACHE.INVALIDATE",
            "Invalidating cache keys",
            pattern=pattern,
            strategy=strategy_name,
        )
        await self.clear(pattern, strategy_name)

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[T]] | Callable[[], T],
        options: CacheOptions | None = None,
    ) -> T:
        """
        Return the cached value, computing and storing it on a miss.

        STAGE-CACHE.ASIDE: cache-aside read

        The factory may be sync or async. Its errors propagate unchanged and
        nothing is cached. Concurrent misses on the same key each call the
        factory.
        """
        strategy = self._resolve(options)

        cached = await strategy.get(key)
        if cached is not None:
            return cached

        value = factory()
        if inspect.isawaitable(value):
            value = await value

        await strategy.set(key, value, options)
        return value

    @staticmethod
    def key_builder() -> type[CacheKeyBuilder]:
        return CacheKeyBuilder


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache_service: CacheService | None = None


def get_cache_service() -> CacheService:
    """
    Get the global cache service.

    Raises:
        RuntimeError: If init_cache_service() has not been called
    """
    if _cache_service is None:
        raise RuntimeError("Cache service not initialized; call init_cache_service() first")
    return _cache_service


def init_cache_service(store: KeyValueStore, settings: Settings | None = None) -> CacheService:
    """Build the global cache service over ``store``."""
    global _cache_service
    _cache_service = CacheService.from_store(store, settings)
    return _cache_service


def close_cache_service() -> None:
    global _cache_service
    _cache_service = None
