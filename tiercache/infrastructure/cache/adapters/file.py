"""
File Adapter

Stores one file per key inside a cache directory.

File layout:
    <expires_at>\\n<payload>

``expires_at`` is a unix timestamp (0 = never). Expired files are treated as
absent and removed on read. Writes go to a temporary file in the same
directory and are moved into place with os.replace, so readers never see a
half-written file.

Keys become file names, so this adapter reports ``requires_safe_keys`` and the
facade sanitizes keys before they get here.
"""

import asyncio
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from tiercache.core.config.constants import FILE_CACHE_SUFFIX, BackendName
from tiercache.core.exceptions import CacheKeyError
from tiercache.core.logging.logger import get_logger

logger = get_logger(__name__)


class FileAdapter:
    """
    Blocking file I/O runs in worker threads via asyncio.to_thread.
    """

    name = BackendName.FILE.value
    requires_safe_keys = True
    uses_process_tier = True
    serializes_values = False

    def __init__(self, cache_dir: str | Path, clock: Callable[[], float] = time.time):
        """
        Initialize file adapter.

        Args:
            cache_dir: Directory holding the cache files (created on demand)
            clock: Returns the current time in seconds
        """
        self._dir = Path(cache_dir)
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        return self._dir

    def installed(self) -> bool:
        """Available when the cache directory exists (or can be created) and is writable."""
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("File cache directory unavailable", path=str(self._dir), error=str(e))
            return False
        return os.access(self._dir, os.W_OK | os.X_OK)

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}{FILE_CACHE_SUFFIX}"

    # -------------------------------------------------------------------------
    # Blocking helpers (run in worker threads)
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None

        header, _, payload = raw.partition(b"\n")
        try:
            expires_at = int(header)
        except ValueError:
            logger.warning("Corrupt cache file removed", cache_key=key)
            path.unlink(missing_ok=True)
            return None

        if expires_at and self._clock() > expires_at:
            path.unlink(missing_ok=True)
            return None

        return payload

    def _write(self, key: str, data: bytes, ttl: int) -> bool:
        self._dir.mkdir(parents=True, exist_ok=True)
        expires_at = int(self._clock() + ttl) if ttl else 0
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(f"{expires_at}\n".encode("ascii"))
                handle.write(data)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return True

    def _unlink(self, key: str) -> bool:
        try:
            self._path(key).unlink()
            return True
        except FileNotFoundError:
            return False

    def _clear(self) -> bool:
        if not self._dir.exists():
            return True
        for path in self._dir.glob(f"*{FILE_CACHE_SUFFIX}"):
            path.unlink(missing_ok=True)
        return True

    # -------------------------------------------------------------------------
    # Adapter API
    # -------------------------------------------------------------------------

    async def _run(self, operation: str, key: str | None, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except OSError as e:
            logger.error("File cache operation failed", operation=operation, cache_key=key, error=str(e))
            raise CacheKeyError(
                message=f"File cache {operation} failed: {e}",
                details={"key": key, "path": str(self._dir)},
            )

    async def get(self, key: str) -> bytes | None:
        return await self._run("GET", key, self._read, key)

    async def set(self, key: str, data: bytes) -> bool:
        return await self._run("SET", key, self._write, key, data, 0)

    async def set_expired(self, key: str, data: bytes, ttl: int) -> bool:
        return await self._run("SET", key, self._write, key, data, ttl)

    async def remove(self, key: str) -> bool:
        return await self._run("DELETE", key, self._unlink, key)

    async def remove_all(self) -> bool:
        return await self._run("CLEAR", None, self._clear)

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def close(self) -> None:
        return None
