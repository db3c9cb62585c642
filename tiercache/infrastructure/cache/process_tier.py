"""
Process-Local Cache Tier

In-process store of already-deserialized values, shared by every facade that
is handed the same tier instance.

Responsibility: skip the backend entirely once a key has been read often
enough, while never serving a value past its known expiry.

Each storage key owns one TierEntry:
- value: promoted value (only meaningful when has_value is set)
- expires_at: absolute expiry timestamp, None for "never"
- hit_count: number of backend reads of this key
- generation: tier generation of the last write to this key

Thread-Safety:
- One coarse threading.Lock guards every operation
- No operation awaits while holding the lock, so the tier is safe for both
  asyncio tasks and worker threads

Read Generations:
    A backend read spans an await, so a write or removal of the same key can
    land between the tier lookup and the promotion. begin_read() hands out the
    current generation; record_backend_read() still counts the hit but refuses
    to promote (or drop) a value once the key was written, discarded or the
    tier cleared after that generation.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any


@dataclass(slots=True)
class TierEntry:
    """Bookkeeping for one storage key."""

    value: Any = None
    has_value: bool = False
    expires_at: float | None = None
    hit_count: int = 0
    generation: int = 0

    def is_fresh(self, now: float) -> bool:
        """True while the entry holds a value that has not expired."""
        return self.has_value and (self.expires_at is None or now <= self.expires_at)


class ProcessLocalTier:
    """
    Shared process-wide mapping from storage key to TierEntry.

    Usage:
        tier = ProcessLocalTier()
        hit, value, generation = tier.begin_read("prefix_key")
        if not hit:
            value = await backend_read()
            tier.record_backend_read("prefix_key", value, present=True, threshold=10, generation=generation)
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize an empty tier.

        Args:
            clock: Returns the current time in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: dict[str, TierEntry] = {}
        self._lock = threading.Lock()
        self._generation = 0
        # Generation of the most recent discard or clear
        self._dropped_at = 0

    def now(self) -> float:
        """Current time according to the tier's clock."""
        return self._clock()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_stale(self, key: str, generation: int) -> bool:
        if self._dropped_at > generation:
            return True
        entry = self._entries.get(key)
        return entry is not None and entry.generation > generation

    def begin_read(self, key: str) -> tuple[bool, Any, int]:
        """
        Serve a key from the tier if it holds a fresh value.

        A tier hit does not count as a backend read.

        Returns:
            (hit, value, generation) where generation is passed back to
            record_backend_read() after a backend read
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_fresh(self._clock()):
                return True, entry.value, self._generation
            return False, None, self._generation

    def lookup(self, key: str) -> tuple[bool, Any]:
        """Serve a key from the tier. Returns (hit, value)."""
        hit, value, _ = self.begin_read(key)
        return hit, value

    def contains(self, key: str) -> bool:
        """Check for a fresh value without returning it."""
        return self.lookup(key)[0]

    def record_backend_read(
        self,
        key: str,
        value: Any,
        present: bool,
        threshold: int,
        generation: int | None = None,
    ) -> bool:
        """
        Count a backend read and promote the value once the threshold is met.

        A threshold of 0 disables promotion. When the backend reported the key
        as absent, any stale value held for it is dropped instead.

        Args:
            key: Storage key
            value: Value just read from the backend
            present: Whether the backend had the key
            threshold: Effective promotion threshold for this read
            generation: Generation returned by begin_read() before the backend
                read; when the key changed since, only the hit is counted

        Returns:
            True if the value was promoted
        """
        with self._lock:
            stale = generation is not None and self._is_stale(key, generation)
            entry = self._entries.setdefault(key, TierEntry())
            entry.hit_count += 1

            if stale:
                return False

            if not present:
                entry.value = None
                entry.has_value = False
                return False

            if threshold != 0 and entry.hit_count >= threshold:
                entry.value = value
                entry.has_value = True
                return True

            return False

    def record_write(self, key: str, value: Any, ttl: float) -> bool:
        """
        Apply a confirmed backend write to the tier.

        The expiry is recorded on every write, promoted or not, so a later
        promotion inherits the correct expiry; a ttl of 0 means "never". The
        value is only replaced when the key is already promoted. Both happen
        under one lock acquisition, so readers never see the new value with
        the old expiry.

        Returns:
            True if the tier held the key and its value was updated
        """
        with self._lock:
            entry = self._entries.setdefault(key, TierEntry())
            entry.generation = self._next_generation()
            entry.expires_at = self._clock() + ttl if ttl else None
            if not entry.has_value:
                return False
            entry.value = value
            return True

    def discard(self, key: str) -> None:
        """Drop value, hit counter and expiry of one key."""
        with self._lock:
            self._dropped_at = self._next_generation()
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._dropped_at = self._next_generation()
            self._entries.clear()

    def get_entry(self, key: str) -> TierEntry | None:
        """Get a copy of the bookkeeping for a key (None if untracked)."""
        with self._lock:
            entry = self._entries.get(key)
            return replace(entry) if entry is not None else None

    def get_size(self) -> int:
        """Get number of promoted values."""
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.has_value)

    def get_keys(self) -> list[str]:
        """Get all tracked storage keys."""
        with self._lock:
            return list(self._entries.keys())


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_process_tier: ProcessLocalTier | None = None
_process_tier_lock = threading.Lock()


def get_process_tier() -> ProcessLocalTier:
    """
    Get the process-wide tier shared by default by every facade.

    Returns:
        ProcessLocalTier: Global tier instance
    """
    global _process_tier

    with _process_tier_lock:
        if _process_tier is None:
            _process_tier = ProcessLocalTier()
        return _process_tier
