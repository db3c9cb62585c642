"""
Integration Tests against Live Backends

Skipped unless USE_REAL_REDIS / USE_REAL_MEMCACHED is set; the servers are
expected at the configured endpoints (127.0.0.1 by default).
"""

import pytest

from tiercache.core.config.settings import Settings
from tiercache.infrastructure.cache.adapters import MemcachedAdapter, RedisAdapter
from tiercache.infrastructure.cache.cache_facade import CacheFacade
from tiercache.infrastructure.cache.redis_client import RedisClient


@pytest.mark.integration
class TestRedisBackend:
    """Facade over a real Redis server."""

    @pytest.mark.asyncio
    async def test_round_trip(self, use_real_redis, tier):
        if not use_real_redis:
            pytest.skip("USE_REAL_REDIS not set")

        settings = Settings(CACHE_CHECK_FOR_USER=False, CACHE_PREFIX="tiercache_it_")
        client = RedisClient(settings)
        await client.connect()
        cache = CacheFacade(adapter=RedisAdapter(client), tier=tier, settings=settings)
        try:
            assert await cache.set("k", {"a": 1}, ttl=30) is True
            assert await cache.get("k") == {"a": 1}
            assert await cache.exists("k") is True
            assert await cache.remove("k") is True
            assert await cache.get("k") is None
        finally:
            await cache.shutdown()


@pytest.mark.integration
class TestMemcachedBackend:
    """Facade over a real memcached server."""

    @pytest.mark.asyncio
    async def test_round_trip(self, use_real_memcached, tier):
        if not use_real_memcached:
            pytest.skip("USE_REAL_MEMCACHED not set")

        settings = Settings(CACHE_CHECK_FOR_USER=False, CACHE_PREFIX="tiercache_it_")
        backend = settings.backend
        adapter = MemcachedAdapter.pooled(backend.MEMCACHED_HOST, backend.MEMCACHED_PORT, backend.MEMCACHED_TIMEOUT)
        assert adapter.installed() is True

        cache = CacheFacade(adapter=adapter, tier=tier, settings=settings)
        try:
            assert cache.get_used_serializer_name() == "noop"
            assert await cache.set("k", [1, 2, 3], ttl=30) is True
            assert await cache.get("k") == [1, 2, 3]
            assert await cache.remove("k") is True
        finally:
            await cache.shutdown()
