"""
Key-Value Store Protocol

This module defines the protocol the cache strategies consume, enabling
dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- RedisClient is the production implementation
- Tests use an in-memory implementation with a controllable clock

Author: Platform Team
Date: 2025-12-08
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Protocol for the string key-value store behind the cache strategies.

    Values are opaque strings (JSON text written by the strategies). A key
    written with a TTL is treated as absent once the TTL elapses.
    """

    async def get(self, key: str) -> str | None:
        """Return the stored string, or None when the key is absent."""
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        Store a value, replacing any previous value and TTL.

        Args:
            key: Cache key
            value: String value
            ttl: Expiry in seconds (None = no expiry)
        """
        ...

    async def delete(self, *keys: str) -> int:
        """Delete keys and return how many were removed."""
        ...

    async def exists(self, *keys: str) -> int:
        """Return how many of the given keys exist."""
        ...

    async def keys(self, pattern: str = "*") -> list[str]:
        """Return keys matching a glob-style pattern."""
        ...
