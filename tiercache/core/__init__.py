"""
Core Module

Foundational components: configuration, logging, exceptions and interfaces.
"""

from .exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    InvalidArgumentError,
    SerializationError,
    TierCacheError,
)
from .interfaces import BackendAdapter, Serializer
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_id",
    "get_request_id",
    "clear_request_id",
    "log_stage",
    "TierCacheError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "InvalidArgumentError",
    "SerializationError",
    "BackendAdapter",
    "Serializer",
]
