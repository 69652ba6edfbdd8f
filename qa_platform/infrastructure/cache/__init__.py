"""
Cache Module

Strategy-based caching over a Redis key-value store.
"""

from qa_platform.infrastructure.cache.cache_service import (
    CacheService,
    close_cache_service,
    get_cache_service,
    init_cache_service,
)
from qa_platform.infrastructure.cache.key_builder import CacheKeyBuilder, CacheKeyOptions
from qa_platform.infrastructure.cache.strategies import (
    BaseCacheStrategy,
    CacheAsideStrategy,
    CacheOptions,
    TtlCacheStrategy,
    WriteThroughCacheStrategy,
    build_default_strategies,
)

__all__ = [
    "BaseCacheStrategy",
    "CacheAsideStrategy",
    "CacheKeyBuilder",
    "CacheKeyOptions",
    "CacheOptions",
    "CacheService",
    "TtlCacheStrategy",
    "WriteThroughCacheStrategy",
    "build_default_strategies",
    "close_cache_service",
    "get_cache_service",
    "init_cache_service",
]
