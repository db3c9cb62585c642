"""
tiercache

Multi-tier cache facade: a process-local tier that absorbs repeated reads on
top of one shared backend (memcached, Redis, shared memory, files or memory),
selected automatically at startup.

Usage:
------
```python
from tiercache import init_cache

cache = await init_cache()
await cache.set("user:42", {"name": "Ada"}, ttl=300)
user = await cache.get("user:42")
```
"""

from tiercache.core.exceptions import (
    CacheError,
    InvalidArgumentError,
    SerializationError,
    TierCacheError,
)
from tiercache.infrastructure.cache import (
    ActivationContext,
    BackendSelector,
    CacheFacade,
    ProcessLocalTier,
    close_cache,
    get_cache_facade,
    init_cache,
)

__version__ = "1.0.0"

__all__ = [
    "CacheFacade",
    "get_cache_facade",
    "init_cache",
    "close_cache",
    "ActivationContext",
    "BackendSelector",
    "ProcessLocalTier",
    "TierCacheError",
    "CacheError",
    "InvalidArgumentError",
    "SerializationError",
]
