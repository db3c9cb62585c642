"""
Cache-Related Exceptions

All exceptions raised by the facade, the adapters and the serializers.
"""

from tiercache.core.exceptions.base import TierCacheError


class CacheError(TierCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when an adapter cannot reach its backend.

    Common causes:
    - Server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Cache directory not writable
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a single cache operation fails on a reachable backend.

    Common causes:
    - Invalid key format for the backend
    - Key too long
    - Operation timeout
    """
    pass


class InvalidArgumentError(CacheError, ValueError):
    """
    Raised when an absolute expiry date is not in the future.

    The facade refuses to store values that would already be expired.
    """
    pass


class SerializationError(CacheError):
    """Raised by a serializer that cannot encode or decode a value."""
    pass
