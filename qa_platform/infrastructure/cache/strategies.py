"""
Cache Strategies

Three named policies over one KeyValueStore:

    TTL            - expire after CACHE_TTL_DEFAULT_SECONDS (1 hour)
    CACHE_ASIDE    - expire after CACHE_ASIDE_DEFAULT_TTL_SECONDS (30 minutes);
                     callers populate on miss via CacheService.get_or_set
    WRITE_THROUGH  - no default expiry; the caller writes the source of truth
                     and the cache in the same flow

Values are stored as JSON text (orjson). Transient store failures are
absorbed here: reads degrade to a miss, writes report False. Only clear()
lets errors through so bulk invalidation never silently half-succeeds.

Author: Platform Team
Date: 2025-12-14
"""

import asyncio
from abc import ABC
from typing import Any, ClassVar

import orjson
from pydantic import BaseModel, ConfigDict, Field

from qa_platform.core.config.constants import (
    CACHE_ASIDE_DEFAULT_TTL,
    CACHE_MATCH_ALL_PATTERN,
    TTL_STRATEGY_DEFAULT_TTL,
    CacheStrategyName,
)
from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.exceptions import CacheSerializationError
from qa_platform.core.interfaces import KeyValueStore
from qa_platform.core.logging.logger import get_logger

logger = get_logger(__name__)


class CacheOptions(BaseModel):
    """
    Per-call cache options.

    Attributes:
        strategy: Registered strategy name (None = service default)
        ttl: Explicit expiry in seconds; overrides the strategy default

    Unknown keyword options are kept as extras for custom strategies.
    """

    model_config = ConfigDict(extra="allow")

    strategy: str | None = None
    ttl: int | None = Field(default=None, gt=0)


# =============================================================================
# SERIALIZATION
# =============================================================================


def _default(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def serialize(value: Any) -> str:
    try:
        return orjson.dumps(value, default=_default).decode("utf-8")
    except TypeError as e:
        # orjson.JSONEncodeError subclasses TypeError
        raise CacheSerializationError(
            f"Cannot serialize cache value: {e}",
            details={"value_type": type(value).__name__},
        ) from e


def deserialize(raw: str | bytes) -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise CacheSerializationError(f"Cannot deserialize cache value: {e}") from e


# =============================================================================
# STRATEGIES
# =============================================================================


class BaseCacheStrategy(ABC):
    """
    Shared behavior of every cache strategy.

    Subclasses fix ``name`` and ``default_ttl``; the TTL written for a key is
    the explicit ``options.ttl``, else the strategy default, else none.
    Strategies hold no per-key state and can be shared freely.
    """

    name: ClassVar[str]
    default_ttl: ClassVar[int | None] = None

    def __init__(self, store: KeyValueStore, default_ttl: int | None = None):
        self._store = store
        if default_ttl is not None:
            self._default_ttl = default_ttl
        else:
            self._default_ttl = type(self).default_ttl

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def get_strategy_name(self) -> str:
        return self.name

    def effective_ttl(self, options: CacheOptions | None = None) -> int | None:
        if options is not None and options.ttl is not None:
            return options.ttl
        return self._default_ttl

    async def get(self, key: str) -> Any | None:
        """Return the decoded value, or None on miss or any failure."""
        try:
            raw = await self._store.get(key)
            if not raw:
                return None
            return deserialize(raw)
        except Exception as e:
            logger.error(
                "Cache get failed",
                stage="CACHE.GET",
                strategy=self.name,
                key=key,
                error=str(e),
            )
            return None

    async def set(self, key: str, value: Any, options: CacheOptions | None = None) -> bool:
        ttl = self.effective_ttl(options)
        try:
            payload = serialize(value)
            await self._store.set(key, payload, ttl=ttl)
            return True
        except Exception as e:
            logger.error(
                "Cache set failed",
                stage="CACHE.SET",
                strategy=self.name,
                key=key,
                ttl=ttl,
                error=str(e),
            )
            return False

    async def delete(self, key: str) -> bool:
        try:
            return await self._store.delete(key) > 0
        except Exception as e:
            logger.error(
                "Cache delete failed", stage="CACHE.DEL", strategy=self.name, key=key, error=str(e)
            )
            return False

    async def exists(self, key: str) -> bool:
        try:
            return await self._store.exists(key) == 1
        except Exception as e:
            logger.error(
                "Cache exists failed",
                stage="CACHE.EXISTS",
                strategy=self.name,
                key=key,
                error=str(e),
            )
            return False

    async def clear(self, pattern: str | None = None) -> None:
        """
        Delete every key matching ``pattern`` (default: all keys).

        Keys are deleted individually and concurrently. Errors are logged and
        re-raised.
        """
        match = pattern or CACHE_MATCH_ALL_PATTERN
        try:
            keys = await self._store.keys(match)
            await asyncio.gather(*(self._store.delete(key) for key in keys))
        except Exception as e:
            logger.error(
                "Cache clear failed",
                stage="CACHE.CLEAR",
                strategy=self.name,
                pattern=match,
                error=str(e),
            )
            raise

        logger.info(
            "Cache cleared", stage="CACHE.CLEAR", strategy=self.name, pattern=match, keys=len(keys)
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(default_ttl={self._default_ttl})"


class TtlCacheStrategy(BaseCacheStrategy):
    """Time-boxed entries for read-heavy data."""

    name = CacheStrategyName.TTL.value
    default_ttl = TTL_STRATEGY_DEFAULT_TTL


class CacheAsideStrategy(BaseCacheStrategy):
    """Lazily populated entries; pair with CacheService.get_or_set."""

    name = CacheStrategyName.CACHE_ASIDE.value
    default_ttl = CACHE_ASIDE_DEFAULT_TTL


class WriteThroughCacheStrategy(BaseCacheStrategy):
    """
    Entries written alongside the source of truth.

    Writing the backing store is the caller's job; this strategy only keeps
    entries without a default expiry.
    """

    name = CacheStrategyName.WRITE_THROUGH.value
    default_ttl = None


def build_default_strategies(
    store: KeyValueStore, settings: Settings | None = None
) -> list[BaseCacheStrategy]:
    """Construct the three built-in strategies with configured defaults."""
    cfg = (settings or get_settings()).cache
    return [
        TtlCacheStrategy(store, default_ttl=cfg.CACHE_TTL_DEFAULT_SECONDS),
        CacheAsideStrategy(store, default_ttl=cfg.CACHE_ASIDE_DEFAULT_TTL_SECONDS),
        WriteThroughCacheStrategy(store),
    ]
