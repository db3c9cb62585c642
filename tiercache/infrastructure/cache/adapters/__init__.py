"""
Backend Adapters

One adapter per storage backend, all implementing BackendAdapter.
"""

from tiercache.infrastructure.cache.adapters.file import FileAdapter
from tiercache.infrastructure.cache.adapters.memcached import MemcachedAdapter
from tiercache.infrastructure.cache.adapters.memory import MemoryAdapter
from tiercache.infrastructure.cache.adapters.redis import RedisAdapter
from tiercache.infrastructure.cache.adapters.shared_memory import SharedMemoryAdapter

__all__ = [
    "FileAdapter",
    "MemcachedAdapter",
    "MemoryAdapter",
    "RedisAdapter",
    "SharedMemoryAdapter",
]
