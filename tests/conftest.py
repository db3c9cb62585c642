"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import pytest

from tests.test_fixtures import CacheTestFactory, FakeClock

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """
    Real Settings instance with the per-caller activation check disabled.

    Prefix "test_", promotion threshold 10, falsy values treated as absent.
    """
    return CacheTestFactory.settings()


@pytest.fixture(autouse=True)
def reset_singletons():
    """Drop process-wide singletons between tests."""
    import tiercache.core.config.settings as settings_module
    import tiercache.infrastructure.cache.backend_selector as selector_module
    import tiercache.infrastructure.cache.cache_facade as facade_module
    import tiercache.infrastructure.cache.process_tier as tier_module

    yield

    settings_module._settings = None
    selector_module._backend_selector = None
    facade_module._cache_facade = None
    tier_module._process_tier = None


# ============================================================================
# Time and Storage Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    """Manually advanced clock (seconds)."""
    return FakeClock()


@pytest.fixture
def tier(fake_clock):
    """Fresh process-local tier driven by the fake clock."""
    from tiercache.infrastructure.cache.process_tier import ProcessLocalTier

    return ProcessLocalTier(clock=fake_clock)


@pytest.fixture
def recording_adapter(fake_clock):
    """Dictionary-backed adapter that counts calls, sharing the fake clock."""
    return CacheTestFactory.recording_adapter(clock=fake_clock)


# ============================================================================
# Facade Fixtures
# ============================================================================


@pytest.fixture
def make_facade(tier, test_settings):
    """
    Factory for facades bound to the test tier and settings.

    Usage:
        cache = make_facade(adapter, static_cache_hit_counter=3)
    """
    from tiercache.infrastructure.cache.cache_facade import CacheFacade

    def _make(adapter=None, static_cache_hit_counter: int | None = None, **kwargs):
        kwargs.setdefault("tier", tier)
        kwargs.setdefault("settings", test_settings)
        facade = CacheFacade(adapter=adapter, **kwargs)
        if static_cache_hit_counter is not None:
            facade.set_static_cache_hit_counter(static_cache_hit_counter)
        return facade

    return _make


@pytest.fixture
def cache(make_facade, recording_adapter):
    """Active facade over the recording adapter with the pickle serializer."""
    return make_facade(recording_adapter)


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if a real Redis server should be used for integration tests."""
    import os

    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")


@pytest.fixture(scope="session")
def use_real_memcached():
    """Check if a real memcached server should be used for integration tests."""
    import os

    return os.getenv("USE_REAL_MEMCACHED", "0").lower() in ("1", "true", "yes")
