"""
Cache Key Builder

Deterministic cache key construction:

    build(["user", 1])                          -> "cache:user:1"
    for_entity("question", 42)                  -> "cache:question:42"
    for_list("question", {"tag": "py", "page": 2})
                                                -> "cache:question:list:page:2:tag:py"

List filters are sorted by name so the same filter set always maps to the
same key regardless of insertion order.

Author: Platform Team
Date: 2025-12-14
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from qa_platform.core.config.constants import (
    CACHE_KEY_DEFAULT_PREFIX,
    CACHE_KEY_DEFAULT_SEPARATOR,
    CACHE_KEY_LIST_SEGMENT,
)
from qa_platform.core.config.settings import Settings, get_settings


class CacheKeyOptions(BaseModel):
    """Prefix and separator used when joining key parts."""

    model_config = ConfigDict(frozen=True)

    prefix: str = CACHE_KEY_DEFAULT_PREFIX
    separator: str = CACHE_KEY_DEFAULT_SEPARATOR

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CacheKeyOptions":
        cfg = (settings or get_settings()).cache
        return cls(prefix=cfg.CACHE_KEY_PREFIX, separator=cfg.CACHE_KEY_SEPARATOR)


class CacheKeyBuilder:
    """
    Pure static helpers; no instance state.

    Without explicit options the prefix and separator come from
    CACHE_KEY_PREFIX / CACHE_KEY_SEPARATOR in the current settings.
    """

    @staticmethod
    def build(parts: Iterable[Any], options: CacheKeyOptions | None = None) -> str:
        opts = options or CacheKeyOptions.from_settings()
        return opts.separator.join([opts.prefix, *(str(part) for part in parts)])

    @staticmethod
    def for_entity(
        entity_name: str, entity_id: str | int, options: CacheKeyOptions | None = None
    ) -> str:
        return CacheKeyBuilder.build([entity_name, entity_id], options)

    @staticmethod
    def for_list(
        entity_name: str,
        filters: Mapping[str, Any] | None = None,
        options: CacheKeyOptions | None = None,
    ) -> str:
        """
        Build a key for a filtered listing.

        Each filter renders as ``name:value`` and the pairs are ordered by
        name, so permuting the mapping never changes the key.
        """
        filter_parts = [f"{name}:{value}" for name, value in sorted((filters or {}).items())]
        return CacheKeyBuilder.build([entity_name, CACHE_KEY_LIST_SEGMENT, *filter_parts], options)
