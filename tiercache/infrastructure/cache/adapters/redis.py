"""
Redis Adapter

Binds the facade's backend protocol to an already-connected RedisClient.
The backend selector connects the client during discovery; a client that
fails to connect never becomes an adapter.
"""

from tiercache.core.config.constants import BackendName
from tiercache.infrastructure.cache.redis_client import RedisClient


class RedisAdapter:
    """Redis storage backend (bytes in, bytes out)."""

    name = BackendName.REDIS.value
    requires_safe_keys = False
    uses_process_tier = True
    serializes_values = False

    def __init__(self, client: RedisClient):
        self._client = client

    @property
    def client(self) -> RedisClient:
        return self._client

    def installed(self) -> bool:
        """Available while the client holds a live connection."""
        return self._client.is_connected()

    async def get(self, key: str) -> bytes | None:
        return await self._client.get(key)

    async def set(self, key: str, data: bytes) -> bool:
        return await self._client.set(key, data)

    async def set_expired(self, key: str, data: bytes, ttl: int) -> bool:
        # Redis rejects EX 0; a zero TTL means "no expiry"
        return await self._client.set(key, data, ttl=ttl or None)

    async def remove(self, key: str) -> bool:
        return await self._client.delete(key) > 0

    async def remove_all(self) -> bool:
        return await self._client.flushdb()

    async def exists(self, key: str) -> bool:
        return await self._client.exists(key) > 0

    async def close(self) -> None:
        await self._client.disconnect()
