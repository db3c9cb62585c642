"""
Cache Backend and Serializer Protocols

This module defines the protocols every storage adapter and serializer
implements, enabling dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- Enables multiple backend implementations (memcached, Redis, shared memory, files, in-memory)
- Facilitates testing with fake implementations
- Capability flags replace type checks in the facade
- Type-safe interface with runtime checking
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BackendAdapter(Protocol):
    """
    Protocol defining the interface for cache backend adapters.

    Capability flags:
    - requires_safe_keys: keys must be sanitized into filesystem-safe names
    - uses_process_tier: the facade may layer the process-local tier on top
    - serializes_values: the client marshals values itself, so the facade
      pairs it with the no-op serializer

    Implementations:
    - MemcachedAdapter: memcached via pymemcache (pooled or single client)
    - RedisAdapter: Redis via redis.asyncio
    - SharedMemoryAdapter: diskcache rooted in the shared-memory filesystem
    - FileAdapter: one file per key
    - MemoryAdapter: in-process dictionary fallback
    """

    name: str
    requires_safe_keys: bool
    uses_process_tier: bool
    serializes_values: bool

    def installed(self) -> bool:
        """
        Report whether the backend is usable in this environment.

        Returns:
            bool: True if the adapter can serve requests
        """
        ...

    async def get(self, key: str) -> Any:
        """
        Get the stored representation for a key.

        Args:
            key: Storage key

        Returns:
            Stored bytes (or the client's own object) or None if absent

        Raises:
            CacheKeyError: If the operation fails
        """
        ...

    async def set(self, key: str, data: Any) -> bool:
        """
        Store a value without expiry.

        Returns:
            bool: True if stored
        """
        ...

    async def set_expired(self, key: str, data: Any, ttl: int) -> bool:
        """
        Store a value that expires after ttl seconds.

        Returns:
            bool: True if stored
        """
        ...

    async def remove(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            bool: True if the key was deleted
        """
        ...

    async def remove_all(self) -> bool:
        """
        Delete every key of this backend.

        Returns:
            bool: True on success
        """
        ...

    async def exists(self, key: str) -> bool:
        """Check whether a key is stored."""
        ...

    async def close(self) -> None:
        """Release client resources."""
        ...


@runtime_checkable
class Serializer(Protocol):
    """
    Protocol for value serializers.

    Serializers are stateless: serialize(Any) -> bytes and back.
    """

    name: str

    def serialize(self, value: Any) -> Any:
        """Encode a value into its storable representation."""
        ...

    def unserialize(self, data: Any) -> Any:
        """Decode a stored representation back into a value."""
        ...
