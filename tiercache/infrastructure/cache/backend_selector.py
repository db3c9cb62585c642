"""
Backend Discovery

Picks the storage adapter a facade binds to when none is given explicitly.

Candidates are probed in priority order; the first one whose probe returns
an adapter that reports ``installed()`` wins and later candidates are never
probed. The choice is memoized per selector, and ``get_backend_selector()``
holds the process-wide selector.

Priority:
    1. memcached   (pymemcache PooledClient)
    2. memcache    (pymemcache Client)
    3. redis       (redis.asyncio)
    4. shm         (diskcache in the shared-memory filesystem)
    5. shm-fanout  (sharded diskcache in the shared-memory filesystem)
    6. file        (one file per key)
    7. memory      (always available)

Probes never raise: an unreachable backend is logged at warning level, its
client is closed and discovery moves on.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from tiercache.core.config.constants import BackendName, Stage
from tiercache.core.config.settings import get_settings
from tiercache.core.exceptions import CacheConnectionError
from tiercache.core.interfaces import BackendAdapter
from tiercache.core.logging.logger import get_logger, log_stage
from tiercache.infrastructure.cache.adapters import (
    FileAdapter,
    MemcachedAdapter,
    MemoryAdapter,
    RedisAdapter,
    SharedMemoryAdapter,
)
from tiercache.infrastructure.cache.redis_client import RedisClient

logger = get_logger(__name__)

Probe = Callable[[], Awaitable[BackendAdapter | None]]


@dataclass(frozen=True)
class BackendCandidate:
    """One entry of the discovery list."""

    name: str
    probe: Probe


# =============================================================================
# DEFAULT PROBES
# =============================================================================


def default_candidates(settings=None) -> list[BackendCandidate]:
    """
    Build the default discovery list from settings.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        Candidates in priority order
    """
    settings = settings or get_settings()
    backend = settings.backend
    cache = settings.cache

    async def probe_memcached() -> BackendAdapter | None:
        return MemcachedAdapter.pooled(backend.MEMCACHED_HOST, backend.MEMCACHED_PORT, backend.MEMCACHED_TIMEOUT)

    async def probe_memcache() -> BackendAdapter | None:
        return MemcachedAdapter.single(backend.MEMCACHED_HOST, backend.MEMCACHED_PORT, backend.MEMCACHED_TIMEOUT)

    async def probe_redis() -> BackendAdapter | None:
        client = RedisClient(settings)
        try:
            await client.connect()
        except CacheConnectionError:
            return None
        return RedisAdapter(client)

    async def probe_shm() -> BackendAdapter | None:
        return SharedMemoryAdapter(cache.CACHE_SHM_DIR)

    async def probe_shm_fanout() -> BackendAdapter | None:
        return SharedMemoryAdapter(cache.CACHE_SHM_DIR, fanout=True)

    async def probe_file() -> BackendAdapter | None:
        return FileAdapter(cache.CACHE_FILE_DIR)

    async def probe_memory() -> BackendAdapter | None:
        return MemoryAdapter()

    return [
        BackendCandidate(BackendName.MEMCACHED.value, probe_memcached),
        BackendCandidate(BackendName.MEMCACHE.value, probe_memcache),
        BackendCandidate(BackendName.REDIS.value, probe_redis),
        BackendCandidate(BackendName.SHM.value, probe_shm),
        BackendCandidate(BackendName.SHM_FANOUT.value, probe_shm_fanout),
        BackendCandidate(BackendName.FILE.value, probe_file),
        BackendCandidate(BackendName.MEMORY.value, probe_memory),
    ]


# =============================================================================
# SELECTOR
# =============================================================================


class BackendSelector:
    """
    Ordered probing with a memoized result.

    Usage:
        selector = BackendSelector()
        adapter = await selector.select_available_backend()

    Concurrent first calls share one probe run (asyncio.Lock around the memo).
    """

    def __init__(self, candidates: Sequence[BackendCandidate] | None = None):
        """
        Initialize selector.

        Args:
            candidates: Discovery list (defaults to default_candidates())
        """
        self._candidates = list(candidates) if candidates is not None else None
        self._selected: BackendAdapter | None = None
        self._lock = asyncio.Lock()

    @property
    def candidates(self) -> list[BackendCandidate]:
        if self._candidates is None:
            self._candidates = default_candidates()
        return self._candidates

    def get_selected(self) -> BackendAdapter | None:
        """Memoized adapter, None before the first selection."""
        return self._selected

    async def select_available_backend(self) -> BackendAdapter:
        """
        Return the first working adapter, probing only on first use.

        Returns:
            BackendAdapter: Selected adapter (in-memory if nothing else works)
        """
        if self._selected is not None:
            return self._selected

        async with self._lock:
            if self._selected is None:
                self._selected = await self._probe_candidates()
        return self._selected

    async def _probe_candidates(self) -> BackendAdapter:
        for candidate in self.candidates:
            adapter = await self._try_candidate(candidate)
            if adapter is not None:
                log_stage(logger, Stage.BACKEND_SELECTED, "Cache backend selected", level="info", adapter=candidate.name)
                return adapter

        logger.warning("No cache backend available, using in-memory fallback", stage=Stage.BACKEND_SELECTED.value)
        return MemoryAdapter()

    async def _try_candidate(self, candidate: BackendCandidate) -> BackendAdapter | None:
        log_stage(logger, Stage.BACKEND_PROBE, "Probing cache backend", adapter=candidate.name)
        try:
            adapter = await candidate.probe()
        except Exception as e:
            self._log_probe_failure(candidate.name, e)
            return None

        if adapter is None:
            logger.warning("Cache backend unavailable", stage=Stage.BACKEND_PROBE.value, adapter=candidate.name)
            return None

        try:
            if await asyncio.to_thread(adapter.installed):
                return adapter
            logger.warning("Cache backend not installed", stage=Stage.BACKEND_PROBE.value, adapter=candidate.name)
        except Exception as e:
            self._log_probe_failure(candidate.name, e)

        await self._discard(adapter, candidate.name)
        return None

    @staticmethod
    def _log_probe_failure(name: str, error: Exception) -> None:
        logger.warning(
            "Cache backend probe failed",
            stage=Stage.BACKEND_PROBE.value,
            adapter=name,
            error=str(error),
            error_type=type(error).__name__,
        )

    @staticmethod
    async def _discard(adapter: BackendAdapter, name: str) -> None:
        try:
            await adapter.close()
        except Exception as e:
            logger.warning("Failed to close rejected backend", adapter=name, error=str(e))

    async def reset(self) -> None:
        """Drop the memo so the next selection probes again."""
        async with self._lock:
            self._selected = None


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_backend_selector: BackendSelector | None = None


def get_backend_selector() -> BackendSelector:
    """
    Get the process-wide selector (singleton).

    Returns:
        BackendSelector: Global selector instance
    """
    global _backend_selector

    if _backend_selector is None:
        _backend_selector = BackendSelector()

    return _backend_selector
