#!/usr/bin/env python3
"""
Multi-Tier Cache Facade

Architecture:
    CacheFacade (Public API)
        ├── KeyCodec (prefix + key -> storage key)
        ├── ProcessLocalTier (promoted values, shared per process)
        ├── BackendAdapter + Serializer (the remote / shared tier)
        └── CacheObserver (Metrics & logging)

Read path:
    1. Tier lookup (fresh promoted value -> done, backend untouched)
    2. Backend read + unserialize
    3. Count the read; promote once the hit counter reaches the threshold,
       unless the key was written or removed while the backend read was pending

Write path:
    1. Serialize + backend write (with TTL when given)
    2. Once the backend confirms, overwrite an already-promoted tier value and
       record the expiry in one step so a promoted value is never served past it
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Literal

from tiercache.core.config.constants import Stage
from tiercache.core.config.settings import get_settings
from tiercache.core.exceptions import CacheError, InvalidArgumentError
from tiercache.core.interfaces import BackendAdapter, Serializer
from tiercache.core.logging.logger import get_logger, log_stage
from tiercache.infrastructure.cache.activation import ActivationContext, compute_activation
from tiercache.infrastructure.cache.backend_selector import BackendSelector, get_backend_selector
from tiercache.infrastructure.cache.key_codec import compute_storage_key
from tiercache.infrastructure.cache.process_tier import ProcessLocalTier, get_process_tier
from tiercache.infrastructure.cache.serializers import default_serializer_for

logger = get_logger(__name__)

ReadSource = Literal["tier", "backend", "miss"]


# =============================================================================
# OBSERVABILITY
# =============================================================================


class CacheObserver:
    """
    Tracks cache performance metrics and logs operations.

    Responsibility: All side effects (logging, metrics).

    Metrics Tracked:
    - Tier hits, backend hits, misses
    - Promotions into the process tier
    - Backend errors
    """

    def __init__(self, logger_instance=None):
        self._logger = logger_instance or logger

        self._tier_hits = 0
        self._backend_hits = 0
        self._misses = 0
        self._promotions = 0
        self._errors = 0

    def record_read(self, source: ReadSource, key: str) -> None:
        """
        Record a read for metrics and logging.

        Args:
            source: Which tier answered ('tier', 'backend', 'miss')
            key: Storage key
        """
        if source == "tier":
            self._tier_hits += 1
            log_stage(self._logger, Stage.TIER_HIT, "Process tier hit", cache_key=key)
        elif source == "backend":
            self._backend_hits += 1
            log_stage(self._logger, Stage.BACKEND_HIT, "Backend hit", cache_key=key)
        else:
            self._misses += 1
            log_stage(self._logger, Stage.CACHE_MISS, "Cache miss", cache_key=key)

    def record_promotion(self, key: str, threshold: int) -> None:
        self._promotions += 1
        log_stage(self._logger, Stage.PROMOTION, "Value promoted to process tier", cache_key=key, threshold=threshold)

    def record_set(self, key: str, ttl: int) -> None:
        log_stage(self._logger, Stage.CACHE_SET, "Cache set", cache_key=key, ttl=ttl)

    def record_invalidation(self, key: str | None) -> None:
        if key is None:
            log_stage(self._logger, Stage.INVALIDATION, "Cache cleared")
        else:
            log_stage(self._logger, Stage.INVALIDATION, "Cache invalidated", cache_key=key)

    def record_error(self, operation: str, key: str | None, error: CacheError) -> None:
        self._errors += 1
        self._logger.warning(
            "Cache backend operation failed",
            stage=Stage.BACKEND_ERROR.value,
            operation=operation,
            cache_key=key,
            **error.to_dict(),
        )

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dict with counters and hit rates
        """
        total = self._tier_hits + self._backend_hits + self._misses
        hit_rate = (self._tier_hits + self._backend_hits) / total if total > 0 else 0.0

        return {
            "tier_hits": self._tier_hits,
            "backend_hits": self._backend_hits,
            "misses": self._misses,
            "promotions": self._promotions,
            "errors": self._errors,
            "total_requests": total,
            "hit_rate": round(hit_rate, 3),
            "tier_hit_rate": round(self._tier_hits / total, 3) if total > 0 else 0.0,
        }


# =============================================================================
# FACADE
# =============================================================================


class CacheFacade:
    """
    Cache with a process-local tier over a pluggable backend.

    Usage:
        cache = CacheFacade()
        await cache.initialize()

        await cache.set("user:42", profile, ttl=300)
        profile = await cache.get("user:42")

        await cache.set_at_date("report", data, tomorrow)
        await cache.remove("user:42")

        stats = cache.stats()

    An inactive or non-ready facade turns every operation into a no-op:
    reads return None, writes, removes and exists return False.
    """

    def __init__(
        self,
        adapter: BackendAdapter | None = None,
        serializer: Serializer | None = None,
        check_for_user: bool | None = None,
        cache_enabled: bool | None = None,
        is_admin_session: bool = False,
        context: ActivationContext | None = None,
        tier: ProcessLocalTier | None = None,
        settings=None,
        selector: BackendSelector | None = None,
    ):
        """
        Initialize cache facade.

        Args:
            adapter: Backend adapter (auto-selected by initialize() when None)
            serializer: Value serializer (paired with the adapter when None)
            check_for_user: Apply the per-caller activation check
            cache_enabled: Explicit enable switch
            is_admin_session: The caller is an admin
            context: Caller context for the activation check
            tier: Process-local tier (defaults to the shared process tier)
            settings: Application settings
            selector: Backend selector used by initialize()
        """
        self._settings = settings or get_settings()
        cache_settings = self._settings.cache

        if cache_enabled is None:
            cache_enabled = cache_settings.CACHE_ENABLED
        if check_for_user is None:
            check_for_user = cache_settings.CACHE_CHECK_FOR_USER
        if is_admin_session:
            context = replace(context or ActivationContext.for_current_process(), is_admin_session=True)

        self._active = compute_activation(cache_enabled, check_for_user, context)
        self._prefix = (
            cache_settings.CACHE_PREFIX
            if cache_settings.CACHE_PREFIX is not None
            else self._settings.namespace.default_prefix()
        )
        self._static_cache_hit_counter = cache_settings.STATIC_CACHE_HIT_COUNTER
        self._falsy_is_absent = cache_settings.CACHE_FALSY_IS_ABSENT

        self._tier = tier or get_process_tier()
        self._selector = selector
        self._observer = CacheObserver()

        self._adapter: BackendAdapter | None = None
        self._serializer: Serializer | None = None
        self._ready = False
        if adapter is not None:
            self._bind(adapter, serializer)
        else:
            self._serializer = serializer

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Cache facade created",
            level="info",
            active=self._active,
            adapter=self.get_used_adapter_name(),
            static_cache_hit_counter=self._static_cache_hit_counter,
        )

    def _bind(self, adapter: BackendAdapter, serializer: Serializer | None) -> None:
        self._adapter = adapter
        self._serializer = serializer or default_serializer_for(adapter)
        self._ready = self._adapter is not None and self._serializer is not None

    async def initialize(self) -> None:
        """
        Select a backend when none was given and pair its serializer.

        Idempotent: an already-bound facade is left untouched.
        """
        if self._adapter is not None:
            return

        selector = self._selector or get_backend_selector()
        adapter = await selector.select_available_backend()
        self._bind(adapter, self._serializer)

        log_stage(
            logger,
            Stage.INITIALIZATION,
            "Cache facade ready",
            level="info",
            adapter=self.get_used_adapter_name(),
            serializer=self.get_used_serializer_name(),
            active=self._active,
        )

    async def shutdown(self) -> None:
        """Release the adapter's client resources."""
        if self._adapter is not None:
            await self._adapter.close()
        self._ready = False
        logger.info("Cache facade shutdown", stage=Stage.INITIALIZATION.value)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _enabled(self) -> bool:
        return self._active and self._ready

    def _uses_tier(self) -> bool:
        return self._adapter.uses_process_tier

    def _storage_key(self, key: str) -> str:
        storage_key = compute_storage_key(self._prefix, key, self._adapter.requires_safe_keys)
        log_stage(logger, Stage.KEY_DERIVATION, "Storage key derived", cache_key=storage_key)
        return storage_key

    def _is_absent(self, raw: Any) -> bool:
        if self._falsy_is_absent:
            return not raw
        return raw is None

    def _now(self) -> float:
        return self._tier.now()

    def _ttl_seconds(self, ttl: int | timedelta | Any) -> int:
        """Convert an int or duration (timedelta, relativedelta) into seconds."""
        if isinstance(ttl, (int, float)):
            return int(ttl)
        now = datetime.fromtimestamp(self._now())
        return int(((now + ttl) - now).total_seconds())

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    async def get(self, key: str, force_static_cache_hit_counter: int = 0) -> Any:
        """
        Get a value, serving it from the process tier when promoted.

        Args:
            key: Logical cache key
            force_static_cache_hit_counter: Promotion threshold for this read
                (0 = facade default)

        Returns:
            Cached value or None if not found

        Raises:
            InvalidArgumentError: If force_static_cache_hit_counter is negative
        """
        if force_static_cache_hit_counter < 0:
            raise InvalidArgumentError(
                message="Static cache hit counter must not be negative",
                details={"key": key, "counter": force_static_cache_hit_counter},
            )

        if not self._enabled():
            return None

        storage_key = self._storage_key(key)
        use_tier = self._uses_tier()

        generation = None
        if use_tier:
            hit, value, generation = self._tier.begin_read(storage_key)
            if hit:
                self._observer.record_read("tier", storage_key)
                return value

        try:
            raw = await self._adapter.get(storage_key)
        except CacheError as e:
            self._observer.record_error("get", storage_key, e)
            return None

        present = not self._is_absent(raw)
        value = self._serializer.unserialize(raw) if present else None

        if use_tier:
            threshold = force_static_cache_hit_counter or self._static_cache_hit_counter
            if self._tier.record_backend_read(storage_key, value, present, threshold, generation):
                self._observer.record_promotion(storage_key, threshold)

        self._observer.record_read("backend" if present else "miss", storage_key)
        return value

    async def set(self, key: str, value: Any, ttl: int | timedelta = 0) -> bool:
        """
        Store a value.

        Args:
            key: Logical cache key
            value: Any value the serializer accepts
            ttl: Seconds or a duration; 0 = never expires

        Returns:
            True if the backend stored the value
        """
        if not self._enabled():
            return False

        ttl_seconds = self._ttl_seconds(ttl)
        storage_key = self._storage_key(key)
        data = self._serializer.serialize(value)

        try:
            if ttl_seconds:
                stored = await self._adapter.set_expired(storage_key, data, ttl_seconds)
            else:
                stored = await self._adapter.set(storage_key, data)
        except CacheError as e:
            self._observer.record_error("set", storage_key, e)
            return False

        if stored and self._uses_tier():
            self._tier.record_write(storage_key, value, ttl_seconds)

        self._observer.record_set(storage_key, ttl_seconds)
        return bool(stored)

    async def set_at_date(self, key: str, value: Any, when: datetime) -> bool:
        """
        Store a value that expires at an absolute date.

        Args:
            key: Logical cache key
            value: Value to store
            when: Expiry date (naive dates are local time)

        Returns:
            True if the backend stored the value

        Raises:
            InvalidArgumentError: If when is not in the future
        """
        now = datetime.fromtimestamp(self._now(), tz=when.tzinfo)
        seconds = (when - now).total_seconds()
        if seconds <= 0:
            raise InvalidArgumentError(
                message="Expiry date must be in the future",
                details={"key": key, "when": when.isoformat(), "now": now.isoformat()},
            ).with_suggestion("Use set() with ttl=0 for values that never expire")

        return await self.set(key, value, math.ceil(seconds))

    async def remove(self, key: str) -> bool:
        """
        Delete a key from the backend and forget everything the tier knows about it.

        Returns:
            True if the backend deleted the key
        """
        if not self._enabled():
            return False

        storage_key = self._storage_key(key)
        if self._uses_tier():
            self._tier.discard(storage_key)

        try:
            removed = await self._adapter.remove(storage_key)
        except CacheError as e:
            self._observer.record_error("remove", storage_key, e)
            return False
        finally:
            # A read that overlapped the backend delete may have promoted the old value
            if self._uses_tier():
                self._tier.discard(storage_key)

        self._observer.record_invalidation(storage_key)
        return bool(removed)

    async def remove_all(self) -> bool:
        """
        Clear the process tier and the whole backend.

        Returns:
            True on success
        """
        if not self._enabled():
            return False

        if self._uses_tier():
            self._tier.clear()

        try:
            cleared = await self._adapter.remove_all()
        except CacheError as e:
            self._observer.record_error("remove_all", None, e)
            return False
        finally:
            if self._uses_tier():
                self._tier.clear()

        self._observer.record_invalidation(None)
        return bool(cleared)

    async def exists(self, key: str) -> bool:
        """Check the tier first, then the backend, without unserializing."""
        if not self._enabled():
            return False

        storage_key = self._storage_key(key)
        if self._uses_tier() and self._tier.contains(storage_key):
            return True

        try:
            return bool(await self._adapter.exists(storage_key))
        except CacheError as e:
            self._observer.record_error("exists", storage_key, e)
            return False

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def get_prefix(self) -> str:
        return self._prefix

    def set_prefix(self, prefix: str) -> None:
        """Change the key prefix. Data stored under the old prefix is not migrated."""
        logger.warning("Cache prefix changed, existing entries become unreachable", old=self._prefix, new=prefix)
        self._prefix = prefix

    def get_static_cache_hit_counter(self) -> int:
        return self._static_cache_hit_counter

    def set_static_cache_hit_counter(self, counter: int) -> None:
        """
        Change the default promotion threshold (0 disables promotion).

        Raises:
            InvalidArgumentError: If counter is negative
        """
        counter = int(counter)
        if counter < 0:
            raise InvalidArgumentError(
                message="Static cache hit counter must not be negative",
                details={"counter": counter},
            ).with_suggestion("Use 0 to disable promotion")
        self._static_cache_hit_counter = counter

    def get_cache_is_ready(self) -> bool:
        return self._ready

    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        """Operator override of the activation policy."""
        self._active = bool(active)
        logger.info("Cache activation changed", active=self._active)

    def get_used_adapter_name(self) -> str | None:
        return self._adapter.name if self._adapter is not None else None

    def get_used_serializer_name(self) -> str | None:
        return self._serializer.name if self._serializer is not None else None

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dict with hit counters, tier size and facade state
        """
        return {
            **self._observer.get_stats(),
            "tier_size": self._tier.get_size(),
            "adapter": self.get_used_adapter_name(),
            "serializer": self.get_used_serializer_name(),
            "ready": self._ready,
            "active": self._active,
            "static_cache_hit_counter": self._static_cache_hit_counter,
        }


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_cache_facade: CacheFacade | None = None


def get_cache_facade() -> CacheFacade:
    """
    Get the global cache facade instance (singleton).

    Returns:
        CacheFacade: Global facade instance (call init_cache() to bind a backend)
    """
    global _cache_facade

    if _cache_facade is None:
        _cache_facade = CacheFacade()

    return _cache_facade


async def init_cache() -> CacheFacade:
    """
    Initialize the global cache facade.

    Returns:
        CacheFacade: Initialized facade
    """
    facade = get_cache_facade()
    await facade.initialize()
    return facade


async def close_cache() -> None:
    """Shutdown the global cache facade."""
    global _cache_facade

    if _cache_facade:
        await _cache_facade.shutdown()
        _cache_facade = None
