"""
Shared-Memory Adapter

diskcache store rooted in the shared-memory filesystem (``/dev/shm`` on
Linux), so every process on the host sees the same entries without a server.

Two flavours:
- ``shm``: single diskcache.Cache
- ``shm-fanout``: diskcache.FanoutCache, sharded to reduce writer contention
"""

import asyncio
import sqlite3
from pathlib import Path

from diskcache import Cache, FanoutCache, Timeout

from tiercache.core.config.constants import SHM_SUBDIRECTORY, BackendName
from tiercache.core.exceptions import CacheKeyError
from tiercache.core.logging.logger import get_logger

logger = get_logger(__name__)

_PROBE_KEY = "__tiercache_probe__"
_STORE_ERRORS = (OSError, sqlite3.Error, Timeout)


class SharedMemoryAdapter:
    """
    diskcache-backed adapter.

    The store is opened lazily by installed(), which also verifies that the
    directory is writable with a probe write.
    """

    requires_safe_keys = False
    uses_process_tier = True
    serializes_values = False

    def __init__(self, shm_dir: str | Path, fanout: bool = False, shards: int = 8, timeout: float = 1.0):
        """
        Initialize shared-memory adapter.

        Args:
            shm_dir: Shared-memory filesystem root
            fanout: Use a sharded FanoutCache
            shards: Number of shards (fanout only)
            timeout: SQLite lock timeout in seconds
        """
        self.name = BackendName.SHM_FANOUT.value if fanout else BackendName.SHM.value
        suffix = f"{SHM_SUBDIRECTORY}-fanout" if fanout else SHM_SUBDIRECTORY
        self._directory = Path(shm_dir) / suffix
        self._fanout = fanout
        self._shards = shards
        self._timeout = timeout
        self._store: Cache | FanoutCache | None = None

    @property
    def directory(self) -> Path:
        return self._directory

    def _open(self) -> Cache | FanoutCache:
        if self._store is None:
            if self._fanout:
                self._store = FanoutCache(str(self._directory), shards=self._shards, timeout=self._timeout)
            else:
                self._store = Cache(str(self._directory), timeout=self._timeout)
        return self._store

    def installed(self) -> bool:
        """Available when the shared-memory root exists and the store accepts writes."""
        if not self._directory.parent.is_dir():
            return False
        try:
            store = self._open()
            store.set(_PROBE_KEY, b"1")
            store.delete(_PROBE_KEY)
            return True
        except _STORE_ERRORS as e:
            logger.warning("Shared-memory store unavailable", adapter=self.name, path=str(self._directory), error=str(e))
            self._store = None
            return False

    async def _run(self, operation: str, key: str | None, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except _STORE_ERRORS as e:
            logger.error("Shared-memory operation failed", operation=operation, cache_key=key, error=str(e))
            raise CacheKeyError(
                message=f"Shared-memory {operation} failed: {e}",
                details={"key": key, "path": str(self._directory)},
            )

    async def get(self, key: str) -> bytes | None:
        return await self._run("GET", key, self._open().get, key)

    async def set(self, key: str, data: bytes) -> bool:
        return await self._run("SET", key, self._open().set, key, data)

    async def set_expired(self, key: str, data: bytes, ttl: int) -> bool:
        return await self._run("SET", key, self._open().set, key, data, expire=ttl or None)

    async def remove(self, key: str) -> bool:
        return await self._run("DELETE", key, self._open().delete, key)

    async def remove_all(self) -> bool:
        await self._run("CLEAR", None, self._open().clear)
        return True

    async def exists(self, key: str) -> bool:
        store = self._open()
        return await self._run("EXISTS", key, store.__contains__, key)

    async def close(self) -> None:
        if self._store is not None:
            await asyncio.to_thread(self._store.close)
            self._store = None
