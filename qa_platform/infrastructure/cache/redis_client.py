"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API, implements KeyValueStore)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Command execution with error handling)
        └── HealthMonitor (Health checks)

The cache strategies only see the KeyValueStore surface (get, set, delete,
exists, keys). expire/ttl are kept for callers that manage expiry directly.

A client that could not reach Redis keeps working in degraded mode: every
operation raises CacheConnectionError (which the strategies absorb as misses)
and the next call after REDIS_RECONNECT_INTERVAL_SECONDS tries to connect again.

Author: Platform Team
Date: 2025-12-13
"""

import time
from collections.abc import Callable
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.exceptions import CacheConnectionError, CacheKeyError
from qa_platform.core.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    REDIS_URL wins over host/port/db when configured. After a failed connect
    the manager retries lazily from ensure_connected(), at most once per
    REDIS_RECONNECT_INTERVAL_SECONDS.
    """

    def __init__(self, settings: Settings, clock: Callable[[], float] = time.monotonic):
        self._settings = settings
        self._clock = clock
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False
        self._last_attempt: float | None = None

    def _build_pool(self) -> ConnectionPool:
        cfg = self._settings.redis
        common = dict(
            max_connections=cfg.REDIS_MAX_CONNECTIONS,
            socket_connect_timeout=cfg.REDIS_SOCKET_CONNECT_TIMEOUT,
            socket_timeout=cfg.REDIS_SOCKET_TIMEOUT,
            retry_on_timeout=True,
            health_check_interval=cfg.REDIS_HEALTH_CHECK_INTERVAL,
            decode_responses=True,
        )
        if cfg.REDIS_URL:
            return ConnectionPool.from_url(cfg.REDIS_URL, **common)
        return ConnectionPool(
            host=cfg.REDIS_HOST,
            port=cfg.REDIS_PORT,
            db=cfg.REDIS_DB,
            password=cfg.REDIS_PASSWORD,
            **common,
        )

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        STAGE-REDIS.2: Connection establishment

        Raises:
            CacheConnectionError: If the pool cannot reach the server
        """
        if self._is_connected and self._client:
            return self._client

        self._last_attempt = self._clock()

        try:
            self._pool = self._build_pool()
            self._client = redis.Redis(connection_pool=self._pool)

            # Fail fast instead of on the first cache read
            await self._client.ping()

            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage="REDIS.2",
                host=self._settings.redis.REDIS_HOST,
                port=self._settings.redis.REDIS_PORT,
                max_connections=self._settings.redis.REDIS_MAX_CONNECTIONS,
            )

            return self._client

        except RedisError as e:
            logger.error("Failed to connect to Redis", stage="REDIS.2", error=str(e))
            await self._release()
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={
                    "host": self._settings.redis.REDIS_HOST,
                    "port": self._settings.redis.REDIS_PORT,
                },
            ) from e

    async def ensure_connected(self) -> redis.Redis | None:
        """
        Return the live client, reconnecting if the retry interval has passed.

        STAGE-REDIS.RECONNECT

        Returns:
            The client, or None while Redis stays unreachable
        """
        if self._is_connected and self._client:
            return self._client

        interval = self._settings.redis.REDIS_RECONNECT_INTERVAL_SECONDS
        if self._last_attempt is not None and self._clock() - self._last_attempt < interval:
            return None

        try:
            return await self.connect()
        except CacheConnectionError:
            return None

    async def _release(self) -> None:
        client, pool = self._client, self._pool
        self._client = None
        self._pool = None
        self._is_connected = False

        try:
            if client:
                await client.aclose()
            if pool:
                await pool.disconnect()
        except RedisError as e:
            logger.warning("Redis cleanup failed", stage="REDIS.3", error=str(e))

    async def disconnect(self) -> None:
        """STAGE-REDIS.3: Close the client and every pooled connection."""
        await self._release()
        self._last_attempt = None

        logger.info("Redis disconnected", stage="REDIS.3")

    async def ping(self) -> bool:
        client = await self.ensure_connected()
        if client is None:
            return False
        try:
            await client.ping()
            return True
        except RedisError as e:
            logger.warning("Redis ping failed", stage="REDIS.PING", error=str(e))
        return False

    def get_pool(self) -> ConnectionPool | None:
        return self._pool

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTION
# =============================================================================


class OperationExecutor:
    """
    Executes Redis operations with consistent error handling.

    Every RedisError is logged with its stage and re-raised as CacheKeyError
    carrying the affected key(s) in details.
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        """STAGE-REDIS.GET"""
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.error("Redis GET failed", stage="REDIS.GET", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis GET failed: {e}", details={"key": key}) from e

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """
        STAGE-REDIS.SET

        Args:
            ttl: Expiry in seconds; None keeps the key until evicted
        """
        try:
            result = await self._redis.set(key, value, ex=ttl)
            return bool(result)
        except RedisError as e:
            logger.error("Redis SET failed", stage="REDIS.SET", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis SET failed: {e}", details={"key": key}) from e

    async def delete(self, *keys: str) -> int:
        """STAGE-REDIS.DEL: returns the number of keys removed."""
        if not keys:
            return 0
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            logger.error("Redis DELETE failed", stage="REDIS.DEL", keys=keys, error=str(e))
            raise CacheKeyError(
                message=f"Redis DELETE failed: {e}", details={"keys": list(keys)}
            ) from e

    async def exists(self, *keys: str) -> int:
        try:
            return await self._redis.exists(*keys)
        except RedisError as e:
            logger.error("Redis EXISTS failed", stage="REDIS.EXISTS", keys=keys, error=str(e))
            raise CacheKeyError(
                message=f"Redis EXISTS failed: {e}", details={"keys": list(keys)}
            ) from e

    async def keys(self, pattern: str = "*") -> list[str]:
        """
        STAGE-REDIS.SCAN: collect keys matching a glob pattern.

        SCAN is used instead of KEYS so large keyspaces do not block the server.
        """
        try:
            return [key async for key in self._redis.scan_iter(match=pattern)]
        except RedisError as e:
            logger.error("Redis SCAN failed", stage="REDIS.SCAN", pattern=pattern, error=str(e))
            raise CacheKeyError(
                message=f"Redis SCAN failed: {e}", details={"pattern": pattern}
            ) from e

    async def expire(self, key: str, ttl: int) -> bool:
        try:
            return bool(await self._redis.expire(key, ttl))
        except RedisError as e:
            logger.error("Redis EXPIRE failed", stage="REDIS.EXPIRE", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis EXPIRE failed: {e}", details={"key": key}) from e

    async def ttl(self, key: str) -> int:
        """
        Returns:
            TTL in seconds, -1 if no TTL, -2 if key doesn't exist
        """
        try:
            return await self._redis.ttl(key)
        except RedisError as e:
            logger.error("Redis TTL failed", stage="REDIS.TTL", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis TTL failed: {e}", details={"key": key}) from e


# =============================================================================
# LAYER 3: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """Ping latency and pool sizing for the /health endpoint."""

    def __init__(self, connection_manager: ConnectionManager, settings: Settings):
        self._conn_mgr = connection_manager
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """
        STAGE-REDIS.HEALTH: Redis health check

        Returns:
            Dict with status, connection flag, ping latency and pool size
        """
        health: dict[str, Any] = {
            "status": "healthy",
            "connected": False,
            "host": self._settings.redis.REDIS_HOST,
            "port": self._settings.redis.REDIS_PORT,
            "pool_size": 0,
            "ping_latency_ms": None,
        }

        client = await self._conn_mgr.ensure_connected()
        if client is None:
            health["status"] = "unhealthy"
            health["error"] = "Client not connected"
            return health

        health["connected"] = True

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            logger.warning("Redis health check failed", stage="REDIS.HEALTH", error=str(e))
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        pool = self._conn_mgr.get_pool()
        if pool:
            health["pool_size"] = pool.max_connections

        return health


# =============================================================================
# LAYER 4: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling and health checks.

    Implements the KeyValueStore protocol consumed by the cache strategies.

    Usage:
        client = RedisClient()
        await client.connect()

        await client.set("cache:user:1", '{"name":"Ann"}', ttl=3600)
        value = await client.get("cache:user:1")

        await client.disconnect()
    """

    def __init__(
        self, settings: Settings | None = None, clock: Callable[[], float] = time.monotonic
    ):
        """STAGE-REDIS.1: Client initialization"""
        self._settings = settings or get_settings()
        self._conn_mgr = ConnectionManager(self._settings, clock=clock)
        self._executor: OperationExecutor | None = None
        self._health_monitor = HealthMonitor(self._conn_mgr, self._settings)

        logger.info(
            "Redis client initialized",
            stage="REDIS.1",
            host=self._settings.redis.REDIS_HOST,
            port=self._settings.redis.REDIS_PORT,
        )

    async def connect(self) -> None:
        """
        STAGE-REDIS.2: Connection establishment

        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()
        self._executor = None

    async def ping(self) -> bool:
        return await self._conn_mgr.ping()

    def is_connected(self) -> bool:
        return self._conn_mgr.is_connected()

    async def _get_executor(self) -> OperationExecutor:
        """
        Raises:
            CacheConnectionError: While Redis is unreachable
        """
        client = await self._conn_mgr.ensure_connected()
        if client is None:
            self._executor = None
            raise CacheConnectionError(
                "Redis client is not connected",
                details={"host": self._settings.redis.REDIS_HOST},
            )
        if self._executor is None:
            self._executor = OperationExecutor(client)
        return self._executor

    async def get(self, key: str) -> str | None:
        return await (await self._get_executor()).get(key)

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        return await (await self._get_executor()).set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        return await (await self._get_executor()).delete(*keys)

    async def exists(self, *keys: str) -> int:
        return await (await self._get_executor()).exists(*keys)

    async def keys(self, pattern: str = "*") -> list[str]:
        return await (await self._get_executor()).keys(pattern)

    async def expire(self, key: str, ttl: int) -> bool:
        return await (await self._get_executor()).expire(key, ttl)

    async def ttl(self, key: str) -> int:
        return await (await self._get_executor()).ttl(key)

    async def health_check(self) -> dict[str, Any]:
        return await self._health_monitor.health_check()


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_redis_client: RedisClient | None = None


def get_redis_client() -> RedisClient:
    """Get the global Redis client instance (singleton)."""
    global _redis_client

    if _redis_client is None:
        _redis_client = RedisClient()

    return _redis_client


async def init_redis() -> RedisClient:
    """Initialize and connect the global Redis client."""
    client = get_redis_client()
    await client.connect()
    return client


async def close_redis() -> None:
    """Close the global Redis client."""
    global _redis_client

    if _redis_client:
        await _redis_client.disconnect()
        _redis_client = None
