"""
Exception Module

Structured exception hierarchy for the tiered cache.

Module Structure:
-----------------
- **base.py**: TierCacheError base class
- **cache.py**: Cache-related exceptions (adapters, serializers, arguments)

Usage:
------
```python
from tiercache.core.exceptions import CacheConnectionError, InvalidArgumentError

try:
    await cache.set_at_date("key", value, yesterday)
except InvalidArgumentError:
    ...
```
"""

# Base exception
from tiercache.core.exceptions.base import TierCacheError

# Cache exceptions
from tiercache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    InvalidArgumentError,
    SerializationError,
)

__all__ = [
    # Base
    "TierCacheError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "InvalidArgumentError",
    "SerializationError",
]
