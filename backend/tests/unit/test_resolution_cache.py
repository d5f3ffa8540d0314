"""
Unit tests for the tenant resolution cache.
"""
import pytest
import redis.asyncio as redis

from shopcore.services.resolution_cache import ResolutionCache

TENANT_ID = "00000000-0000-0000-0000-000000000001"


class TestMemoryLevel:
    """Test the in-process level on its own."""

    @pytest.mark.asyncio
    async def test_set_then_get(self, memory_cache):
        await memory_cache.set("sub:acme", TENANT_ID)

        assert await memory_cache.get("sub:acme") == TENANT_ID
        assert memory_cache.memory_entries == 1

    @pytest.mark.asyncio
    async def test_miss(self, memory_cache):
        assert await memory_cache.get("sub:nobody") is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_dropped(self, memory_cache):
        await memory_cache.set("sub:acme", TENANT_ID)
        memory_cache._memory["sub:acme"] = (TENANT_ID, 0.0)

        assert await memory_cache.get("sub:acme") is None
        assert memory_cache.memory_entries == 0

    @pytest.mark.asyncio
    async def test_invalidate_tenant_drops_every_lookup(self, memory_cache):
        await memory_cache.set("sub:acme", TENANT_ID)
        await memory_cache.set("domain:shop.acme.test", TENANT_ID)
        await memory_cache.set("sub:globex", "other-id")

        await memory_cache.invalidate_tenant(TENANT_ID)

        assert await memory_cache.get("sub:acme") is None
        assert await memory_cache.get("domain:shop.acme.test") is None
        assert await memory_cache.get("sub:globex") == "other-id"

    @pytest.mark.asyncio
    async def test_disabled_cache_stores_nothing(self):
        cache = ResolutionCache(redis_url="", enabled=False)
        await cache.set("sub:acme", TENANT_ID)

        assert await cache.get("sub:acme") is None
        assert cache.memory_entries == 0


class TestRedisLevel:
    """Test the Redis level with a mocked client."""

    @pytest.fixture
    def cache(self, mock_redis):
        cache = ResolutionCache(redis_url="redis://test:6379/0", enabled=True)
        cache._redis = mock_redis
        return cache

    @pytest.mark.asyncio
    async def test_set_writes_entry_and_index(self, cache, mock_redis):
        await cache.set("sub:acme", TENANT_ID)

        mock_redis.pipe.set.assert_called_once_with(
            "tenant:resolve:sub:acme", TENANT_ID, ex=cache.ttl_seconds
        )
        mock_redis.pipe.sadd.assert_called_once_with(
            f"tenant:resolve:index:{TENANT_ID}", "sub:acme"
        )
        mock_redis.pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_hit_populates_memory(self, cache, mock_redis):
        mock_redis.get.return_value = TENANT_ID

        assert await cache.get("sub:acme") == TENANT_ID
        assert cache.memory_entries == 1

        # Second read is served from memory
        await cache.get("sub:acme")
        mock_redis.get.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_redis_error_is_a_miss(self, cache, mock_redis):
        mock_redis.get.side_effect = redis.ConnectionError("down")

        assert await cache.get("sub:acme") is None

    @pytest.mark.asyncio
    async def test_invalidate_deletes_indexed_keys(self, cache, mock_redis):
        mock_redis.smembers.return_value = {"sub:acme"}

        await cache.invalidate_tenant(TENANT_ID)

        mock_redis.delete.assert_awaited_once_with(
            "tenant:resolve:sub:acme",
            f"tenant:resolve:index:{TENANT_ID}",
        )

    @pytest.mark.asyncio
    async def test_close_releases_client(self, cache, mock_redis):
        await cache.close()

        mock_redis.close.assert_awaited_once()
        assert cache._redis is None
