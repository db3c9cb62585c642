"""
Cache Module

Provides the tiered cache: a process-local tier over a pluggable backend.
"""

from .activation import ActivationContext, compute_activation, is_cache_active_for_current_user
from .backend_selector import BackendCandidate, BackendSelector, default_candidates, get_backend_selector
from .cache_facade import (
    CacheFacade,
    CacheObserver,
    close_cache,
    get_cache_facade,
    init_cache,
)
from .key_codec import clean_store_key, compute_storage_key
from .process_tier import ProcessLocalTier, TierEntry, get_process_tier
from .serializers import NoopSerializer, OrjsonSerializer, PickleSerializer, default_serializer_for

__all__ = [
    "CacheFacade",
    "CacheObserver",
    "get_cache_facade",
    "init_cache",
    "close_cache",
    "BackendCandidate",
    "BackendSelector",
    "default_candidates",
    "get_backend_selector",
    "ProcessLocalTier",
    "TierEntry",
    "get_process_tier",
    "ActivationContext",
    "compute_activation",
    "is_cache_active_for_current_user",
    "clean_store_key",
    "compute_storage_key",
    "PickleSerializer",
    "OrjsonSerializer",
    "NoopSerializer",
    "default_serializer_for",
]
