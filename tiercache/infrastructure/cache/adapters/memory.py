"""
In-Memory Adapter

Pure in-process fallback, chosen only when no shared backend is available.

Note: This is NOT shared between processes and NOT persistent. Because it
already lives in process memory, the facade does not layer the process-local
tier on top of it.
"""

import time
from collections.abc import Callable
from typing import Any

from tiercache.core.config.constants import BackendName


class MemoryAdapter:
    """
    Dictionary-backed adapter with lazy TTL expiry.

    Expired keys are dropped the next time they are read or checked.
    """

    name = BackendName.MEMORY.value
    requires_safe_keys = False
    uses_process_tier = False
    serializes_values = False

    def __init__(self, clock: Callable[[], float] = time.time):
        self._store: dict[str, Any] = {}
        self._expires: dict[str, float] = {}
        self._clock = clock

    def installed(self) -> bool:
        """Always available."""
        return True

    def _expire_if_needed(self, key: str) -> None:
        expires_at = self._expires.get(key)
        if expires_at is not None and self._clock() > expires_at:
            self._store.pop(key, None)
            self._expires.pop(key, None)

    async def get(self, key: str) -> Any:
        """Get value from in-memory store."""
        self._expire_if_needed(key)
        return self._store.get(key)

    async def set(self, key: str, data: Any) -> bool:
        """Set value without expiry."""
        self._store[key] = data
        self._expires.pop(key, None)
        return True

    async def set_expired(self, key: str, data: Any, ttl: int) -> bool:
        """Set value with TTL in seconds."""
        self._store[key] = data
        self._expires[key] = self._clock() + ttl
        return True

    async def remove(self, key: str) -> bool:
        """Delete key from in-memory store."""
        self._expires.pop(key, None)
        existed = key in self._store
        self._store.pop(key, None)
        return existed

    async def remove_all(self) -> bool:
        """Clear the store."""
        self._store.clear()
        self._expires.clear()
        return True

    async def exists(self, key: str) -> bool:
        """Check if key exists."""
        self._expire_if_needed(key)
        return key in self._store

    async def close(self) -> None:
        """Nothing to release."""
        return None
