"""
Tenant resolution cache.

Two levels, mirroring the storefront's bootstrap cache:
- L1: in-process dict with a short TTL
- L2: Redis (optional) with a longer TTL

Entries map a lookup key (``sub:<subdomain>``, ``domain:<host>``,
``id:<uuid>``) to a tenant id. Each tenant keeps a reverse index of its keys
so a status or domain change can drop all of them at once.
"""

import logging
import time
from typing import Optional

import redis.asyncio as redis

from shopcore.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "tenant:resolve"


class ResolutionCache:
    """Identifier -> tenant id cache with per-tenant invalidation."""

    def __init__(
        self,
        redis_url: str | None = None,
        ttl_seconds: int | None = None,
        memory_ttl_seconds: int | None = None,
        enabled: bool | None = None,
    ):
        self.redis_url = (
            redis_url if redis_url is not None else settings.RESOLUTION_CACHE_REDIS_URL
        )
        self.ttl_seconds = ttl_seconds or settings.RESOLUTION_CACHE_TTL_SECONDS
        self.memory_ttl_seconds = (
            memory_ttl_seconds or settings.RESOLUTION_CACHE_MEMORY_TTL_SECONDS
        )
        self.enabled = settings.RESOLUTION_CACHE_ENABLED if enabled is None else enabled
        self._memory: dict[str, tuple[str, float]] = {}
        self._memory_index: dict[str, set[str]] = {}
        self._redis: Optional[redis.Redis] = None

    async def get_redis(self) -> redis.Redis | None:
        """Get or create Redis connection; None when L2 is disabled."""
        if not self.redis_url:
            return None
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.close()
            self._redis = None

    def _entry_key(self, lookup: str) -> str:
        return f"{KEY_PREFIX}:{lookup}"

    def _index_key(self, tenant_id: str) -> str:
        return f"{KEY_PREFIX}:index:{tenant_id}"

    async def get(self, lookup: str) -> str | None:
        """L1 memory -> L2 Redis -> None."""
        if not self.enabled:
            return None

        entry = self._memory.get(lookup)
        if entry is not None:
            tenant_id, expires = entry
            if expires > time.monotonic():
                return tenant_id
            self._forget_memory(lookup)

        client = await self.get_redis()
        if client is None:
            return None
        try:
            tenant_id = await client.get(self._entry_key(lookup))
        except redis.RedisError as e:
            logger.warning(f"Resolution cache GET failed for {lookup}: {e}")
            return None

        if tenant_id is not None:
            self._remember_memory(lookup, tenant_id)
        return tenant_id

    async def set(self, lookup: str, tenant_id: str) -> None:
        """Write to both levels."""
        if not self.enabled:
            return
        self._remember_memory(lookup, tenant_id)

        client = await self.get_redis()
        if client is None:
            return
        try:
            pipe = client.pipeline()
            pipe.set(self._entry_key(lookup), tenant_id, ex=self.ttl_seconds)
            pipe.sadd(self._index_key(tenant_id), lookup)
            pipe.expire(self._index_key(tenant_id), self.ttl_seconds)
            await pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Resolution cache SET failed for {lookup}: {e}")

    async def discard(self, lookup: str) -> None:
        """Drop a single lookup key from both levels."""
        self._forget_memory(lookup)
        client = await self.get_redis()
        if client is None:
            return
        try:
            await client.delete(self._entry_key(lookup))
        except redis.RedisError as e:
            logger.warning(f"Resolution cache DEL failed for {lookup}: {e}")

    async def invalidate_tenant(self, tenant_id) -> None:
        """Drop every cached lookup that points at the tenant."""
        tenant_id = str(tenant_id)
        for lookup in list(self._memory_index.get(tenant_id, ())):
            self._forget_memory(lookup)
        self._memory_index.pop(tenant_id, None)

        client = await self.get_redis()
        if client is None:
            return
        try:
            lookups = await client.smembers(self._index_key(tenant_id))
            keys = [self._entry_key(lookup) for lookup in lookups]
            keys.append(self._index_key(tenant_id))
            await client.delete(*keys)
        except redis.RedisError as e:
            logger.error(f"Resolution cache invalidation failed for tenant {tenant_id}: {e}")

    def _remember_memory(self, lookup: str, tenant_id: str) -> None:
        self._memory[lookup] = (tenant_id, time.monotonic() + self.memory_ttl_seconds)
        self._memory_index.setdefault(tenant_id, set()).add(lookup)

    def _forget_memory(self, lookup: str) -> None:
        entry = self._memory.pop(lookup, None)
        if entry is not None:
            keys = self._memory_index.get(entry[0])
            if keys is not None:
                keys.discard(lookup)

    @property
    def memory_entries(self) -> int:
        return len(self._memory)


# Global cache instance
_resolution_cache: Optional[ResolutionCache] = None


def get_resolution_cache() -> ResolutionCache:
    """Get the global resolution cache instance."""
    global _resolution_cache
    if _resolution_cache is None:
        _resolution_cache = ResolutionCache()
    return _resolution_cache


async def close_resolution_cache():
    """Close the global resolution cache."""
    global _resolution_cache
    if _resolution_cache:
        await _resolution_cache.close()
        _resolution_cache = None
