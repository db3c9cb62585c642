"""
Configuration Module

Centralized, type-safe configuration for the tiered cache.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Stage identifiers, backend names and default values

Usage:
------
```python
from tiercache.core.config import get_settings
from tiercache.core.config.constants import BackendName, Stage

settings = get_settings()
threshold = settings.cache.STATIC_CACHE_HIT_COUNTER
prefix = settings.namespace.default_prefix()
```

Environment Variables:
---------------------
```bash
CACHE_ENABLED=true
STATIC_CACHE_HIT_COUNTER=10
MEMCACHED_HOST=127.0.0.1
REDIS_HOST=127.0.0.1
SERVER_NAME=example.org
LOG_LEVEL=INFO
```

Testing:
-------
```python
import os
from tiercache.core.config import reload_settings

os.environ["STATIC_CACHE_HIT_COUNTER"] = "3"
settings = reload_settings()
```
"""

from tiercache.core.config.constants import (
    DEFAULT_STATIC_CACHE_HIT_COUNTER,
    BackendName,
    Stage,
)
from tiercache.core.config.settings import get_settings, reload_settings

__all__ = [
    # Settings
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "BackendName",
    # Defaults
    "DEFAULT_STATIC_CACHE_HIT_COUNTER",
]
