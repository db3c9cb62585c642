"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle)
        └── OperationExecutor (Command execution with error handling)

Values are stored as raw bytes (``decode_responses=False``): the facade's
serializer owns the encoding, the client only moves bytes.
"""

from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from tiercache.core.config.settings import get_settings
from tiercache.core.exceptions import CacheConnectionError, CacheKeyError
from tiercache.core.logging.logger import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Responsibility: Connection establishment, pooling, and cleanup.

    Pool Configuration:
    - Socket timeouts: short, so an absent server fails discovery quickly
    - Retry on timeout: Enabled
    """

    def __init__(self, settings):
        """
        Initialize connection manager.

        Args:
            settings: Application settings
        """
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis with connection pooling.

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If the server is unreachable or rejects the
                handshake (bad database index, protected mode, auth)
        """
        if self._is_connected and self._client:
            return self._client

        backend = self._settings.backend
        try:
            self._pool = ConnectionPool(
                host=backend.REDIS_HOST,
                port=backend.REDIS_PORT,
                db=backend.REDIS_DB,
                password=backend.REDIS_PASSWORD,
                socket_connect_timeout=backend.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=backend.REDIS_SOCKET_TIMEOUT,
                retry_on_timeout=True,
                decode_responses=False,
            )
            self._client = redis.Redis(connection_pool=self._pool)

            # Verify the server actually answers before reporting success
            await self._client.ping()

            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage="REDIS.2",
                host=backend.REDIS_HOST,
                port=backend.REDIS_PORT,
                db=backend.REDIS_DB,
            )

            return self._client

        except (RedisError, OSError) as e:
            logger.warning("Failed to connect to Redis", stage="REDIS.2", error=str(e))
            await self._release()
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": backend.REDIS_HOST, "port": backend.REDIS_PORT},
            )

    async def _release(self) -> None:
        if self._client:
            await self._client.aclose()
        if self._pool:
            await self._pool.disconnect()
        self._client = None
        self._pool = None
        self._is_connected = False

    async def disconnect(self) -> None:
        """Close Redis connection and pool."""
        await self._release()
        logger.info("Redis disconnected", stage="REDIS.3")

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if healthy, False otherwise
        """
        try:
            if self._client and self._is_connected:
                await self._client.ping()
                return True
        except (RedisError, OSError):
            pass
        return False

    def get_client(self) -> redis.Redis | None:
        """Get the Redis client instance."""
        return self._client

    def is_connected(self) -> bool:
        """Check if connected to Redis."""
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# =============================================================================


class OperationExecutor:
    """
    Executes Redis operations with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError exceptions
    - Log error with context (stage, key)
    - Raise CacheKeyError with details
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get(self, key: str) -> bytes | None:
        """Get value from Redis."""
        try:
            return await self._redis.get(key)
        except RedisError as e:
            logger.error("Redis GET failed", stage="REDIS.GET", cache_key=key, error=str(e))
            raise CacheKeyError(message=f"Redis GET failed: {e}", details={"key": key})

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> bool:
        """
        Set value in Redis.

        Args:
            key: Redis key
            value: Value to set
            ttl: Time-to-live in seconds (None = no expiry)

        Returns:
            True if set successfully
        """
        try:
            result = await self._redis.set(key, value, ex=ttl)
            return bool(result)
        except RedisError as e:
            logger.error("Redis SET failed", stage="REDIS.SET", cache_key=key, error=str(e))
            raise CacheKeyError(message=f"Redis SET failed: {e}", details={"key": key})

    async def delete(self, *keys: str) -> int:
        """Delete keys from Redis."""
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            logger.error("Redis DELETE failed", stage="REDIS.DEL", keys=list(keys), error=str(e))
            raise CacheKeyError(message=f"Redis DELETE failed: {e}", details={"keys": list(keys)})

    async def exists(self, *keys: str) -> int:
        """Count how many of keys exist."""
        try:
            return await self._redis.exists(*keys)
        except RedisError as e:
            logger.error("Redis EXISTS failed", stage="REDIS.EXISTS", keys=list(keys), error=str(e))
            raise CacheKeyError(message=f"Redis EXISTS failed: {e}", details={"keys": list(keys)})

    async def flushdb(self) -> bool:
        """Delete every key of the selected database."""
        try:
            return bool(await self._redis.flushdb())
        except RedisError as e:
            logger.error("Redis FLUSHDB failed", stage="REDIS.FLUSHDB", error=str(e))
            raise CacheKeyError(message=f"Redis FLUSHDB failed: {e}")


# =============================================================================
# PUBLIC CLIENT
# =============================================================================


class RedisClient:
    """
    Async Redis client with connection pooling.

    Usage:
        client = RedisClient()
        await client.connect()

        await client.set("key", b"value", ttl=3600)
        value = await client.get("key")

        await client.disconnect()
    """

    def __init__(self, settings=None):
        self._settings = settings or get_settings()
        self._conn_mgr = ConnectionManager(self._settings)
        self._executor: OperationExecutor | None = None

    async def connect(self) -> None:
        """
        Establish connection to Redis.

        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        """Close Redis connection and pool."""
        await self._conn_mgr.disconnect()
        self._executor = None

    async def ping(self) -> bool:
        """Check Redis connection health."""
        return await self._conn_mgr.ping()

    def is_connected(self) -> bool:
        return self._conn_mgr.is_connected()

    def _require_executor(self) -> OperationExecutor:
        if self._executor is None:
            raise CacheConnectionError(message="Redis client is not connected")
        return self._executor

    # -------------------------------------------------------------------------
    # Delegate to OperationExecutor
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        return await self._require_executor().get(key)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        return await self._require_executor().set(key, value, ttl)

    async def delete(self, *keys: str) -> int:
        return await self._require_executor().delete(*keys)

    async def exists(self, *keys: str) -> int:
        return await self._require_executor().exists(*keys)

    async def flushdb(self) -> bool:
        return await self._require_executor().flushdb()
