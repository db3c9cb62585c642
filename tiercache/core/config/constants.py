"""
System Constants and Enumerations

This module defines constants and enumerations used across the tiered
cache library.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage identifiers and backend names
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache processing stages for structured logging.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    Examples:
        stage="C.2_TIER_HIT"
        stage="S.1_BACKEND_PROBE"
    """

    # Facade lifecycle
    INITIALIZATION = "C.0_INITIALIZATION"
    KEY_DERIVATION = "C.1_KEY_DERIVATION"

    # Read path
    TIER_HIT = "C.2_TIER_HIT"
    BACKEND_HIT = "C.3_BACKEND_HIT"
    CACHE_MISS = "C.4_CACHE_MISS"
    PROMOTION = "C.5_PROMOTION"

    # Write path
    CACHE_SET = "C.6_CACHE_SET"
    INVALIDATION = "C.7_INVALIDATION"

    # Backend discovery
    BACKEND_PROBE = "S.1_BACKEND_PROBE"
    BACKEND_SELECTED = "S.2_BACKEND_SELECTED"

    # Cross-cutting
    BACKEND_ERROR = "E_BACKEND_ERROR"


# ============================================================================
# Backend Names
# ============================================================================


class BackendName(str, Enum):
    """
    Names of the shipped backend adapters, in discovery priority order.
    """

    MEMCACHED = "memcached"
    MEMCACHE = "memcache"
    REDIS = "redis"
    SHM = "shm"
    SHM_FANOUT = "shm-fanout"
    FILE = "file"
    MEMORY = "memory"


# ============================================================================
# Process-Local Tier
# ============================================================================

# Backend reads of one key before its value is promoted into the process tier
DEFAULT_STATIC_CACHE_HIT_COUNTER = 10

# ============================================================================
# Default Endpoints
# ============================================================================

DEFAULT_MEMCACHED_HOST = "127.0.0.1"
DEFAULT_MEMCACHED_PORT = 11211
DEFAULT_MEMCACHED_TIMEOUT = 2.0

DEFAULT_REDIS_HOST = "127.0.0.1"
DEFAULT_REDIS_PORT = 6379
DEFAULT_REDIS_TIMEOUT = 2.0

DEFAULT_SHM_DIR = "/dev/shm"
SHM_SUBDIRECTORY = "tiercache"
FILE_CACHE_SUBDIRECTORY = "tiercache"
FILE_CACHE_SUFFIX = ".cache"

# ============================================================================
# Key Sanitization
# ============================================================================

# Characters that are unsafe in file names, each mapped to a distinct placeholder
RESERVED_KEY_CHARACTERS = ('"', "*", ":", "<", ">", "?", "'", "|")
RESERVED_KEY_PLACEHOLDERS = tuple("-" + "+-" * n for n in range(1, len(RESERVED_KEY_CHARACTERS) + 1))

# Log fields never carry more than this many characters of a cache key
LOG_KEY_MAX_LENGTH = 40
