"""
Cache-Related Exceptions

All exceptions related to caching operations (Redis store, strategies, service).

Author: Platform Team
Date: 2025-12-08
"""

from qa_platform.core.exceptions.base import ConfigurationError, QAPlatformError


class CacheError(QAPlatformError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the key-value store (Redis).

    Common causes:
    - Redis server is down
    - Client used before connect()
    - Incorrect host/port configuration
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a store operation on a key fails.

    Strategies absorb this error and report a miss or False.
    """
    pass


class CacheSerializationError(CacheError):
    """Raised when a value cannot be encoded to or decoded from JSON."""
    pass


class CacheStrategyNotFoundError(ConfigurationError):
    """
    Raised when a cache strategy name is not registered.

    The message lists the registered strategy names.
    """
    pass
