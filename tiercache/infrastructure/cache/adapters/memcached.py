"""
Memcached Adapter

Two flavours share one implementation:
- ``memcached``: pymemcache PooledClient (thread-safe connection pool)
- ``memcache``: pymemcache single-connection Client (legacy fallback)

The client pickles values itself (pickle_serde), so the facade pairs this
adapter with the no-op serializer instead of pickling twice.

Memcached rejects keys longer than 250 bytes or containing whitespace,
control or non-ASCII characters; such keys are replaced by a stable hash.

The server reads an expiry above 30 days as an absolute Unix timestamp, so
longer TTLs are sent as one.
"""

import asyncio
import hashlib
import time
from collections.abc import Callable

from pymemcache import serde
from pymemcache.client.base import Client, PooledClient
from pymemcache.exceptions import MemcacheError

from tiercache.core.config.constants import BackendName
from tiercache.core.exceptions import CacheKeyError
from tiercache.core.logging.logger import get_logger

logger = get_logger(__name__)

MAX_KEY_LENGTH = 250
MAX_RELATIVE_EXPIRE = 60 * 60 * 24 * 30


def memcached_key(key: str) -> str:
    """Return key unchanged when memcached accepts it, else a hashed stand-in."""
    raw = key.encode("utf-8")
    if len(raw) <= MAX_KEY_LENGTH and not any(byte <= 32 or byte >= 127 for byte in raw):
        return key
    return "h:" + hashlib.sha256(raw).hexdigest()


class MemcachedAdapter:
    """
    Memcached storage backend.

    pymemcache is blocking, every call runs in a worker thread.

    Usage:
        adapter = MemcachedAdapter.pooled("127.0.0.1", 11211)
        if adapter.installed():
            await adapter.set("key", {"any": "value"})
    """

    requires_safe_keys = False
    uses_process_tier = True
    serializes_values = True

    def __init__(
        self,
        client,
        name: str = BackendName.MEMCACHED.value,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize memcached adapter.

        Args:
            client: pymemcache Client or PooledClient
            name: Adapter name reported to the facade
            clock: Current Unix time, used for expiries beyond 30 days
        """
        self._client = client
        self.name = name
        self._clock = clock

    def _expire(self, ttl: int) -> int:
        ttl = int(ttl)
        if ttl > MAX_RELATIVE_EXPIRE:
            return int(self._clock()) + ttl
        return ttl

    @classmethod
    def pooled(cls, host: str, port: int, timeout: float = 2.0) -> "MemcachedAdapter":
        """Adapter over a pooled client."""
        client = PooledClient(
            (host, port),
            serde=serde.pickle_serde,
            connect_timeout=timeout,
            timeout=timeout,
            no_delay=True,
        )
        return cls(client, name=BackendName.MEMCACHED.value)

    @classmethod
    def single(cls, host: str, port: int, timeout: float = 2.0) -> "MemcachedAdapter":
        """Adapter over a single-connection client."""
        client = Client(
            (host, port),
            serde=serde.pickle_serde,
            connect_timeout=timeout,
            timeout=timeout,
            no_delay=True,
        )
        return cls(client, name=BackendName.MEMCACHE.value)

    def installed(self) -> bool:
        """
        Probe the server with a VERSION command.

        Blocking; the backend selector runs it in a worker thread.
        """
        try:
            self._client.version()
            return True
        except (MemcacheError, OSError) as e:
            logger.warning("Memcached probe failed", adapter=self.name, error=str(e))
            return False

    async def _run(self, operation: str, key: str | None, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except (MemcacheError, OSError) as e:
            logger.error("Memcached operation failed", operation=operation, cache_key=key, error=str(e))
            raise CacheKeyError(
                message=f"Memcached {operation} failed: {e}",
                details={"key": key, "adapter": self.name},
            )

    async def get(self, key: str):
        return await self._run("GET", key, self._client.get, memcached_key(key))

    async def set(self, key: str, data) -> bool:
        return await self._run("SET", key, self._client.set, memcached_key(key), data, expire=0, noreply=False)

    async def set_expired(self, key: str, data, ttl: int) -> bool:
        return await self._run(
            "SET", key, self._client.set, memcached_key(key), data, expire=self._expire(ttl), noreply=False
        )

    async def remove(self, key: str) -> bool:
        return await self._run("DELETE", key, self._client.delete, memcached_key(key), noreply=False)

    async def remove_all(self) -> bool:
        return await self._run("FLUSH", None, self._client.flush_all, noreply=False)

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def close(self) -> None:
        await asyncio.to_thread(self._client.close)
