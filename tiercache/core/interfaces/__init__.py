"""
Core Interfaces Module

Protocols for the pluggable parts of the cache, enabling dependency
injection, testability and loose coupling.

Components:
-----------
- **cache.py**: BackendAdapter and Serializer protocols

Usage:
------
```python
from tiercache.core.interfaces import BackendAdapter, Serializer

def describe(adapter: BackendAdapter) -> str:
    return f"{adapter.name} (installed={adapter.installed()})"
```
"""

from tiercache.core.interfaces.cache import BackendAdapter, Serializer

__all__ = [
    "BackendAdapter",
    "Serializer",
]
