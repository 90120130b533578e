# src/cache/redis_store.py — v1
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Out-of-process backend for multi-instance deployments; it shares the key
space but does not coordinate in-flight work across instances.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from policylens.cache.base_cache_store import BaseCacheStore, CacheKeyNotFound
from policylens.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_KEY_PREFIX = "policylens:cache:"
_INDEX_KEY = "policylens:cache:__index__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for distributed deployments."""

    def __init__(self, redis_url: str, ttl_s: int | None = None) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)
        self._ttl_s = ttl_s

    async def get(self, key: str) -> CacheEntry:
        """Retrieve cache entry by key."""
        data = self._client.get(f"{_KEY_PREFIX}{key}")
        if data is None:
            raise CacheKeyNotFound(key)
        try:
            return CacheEntry.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize cache entry: %s", e)
            raise CacheKeyNotFound(key) from e

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry."""
        redis_key = f"{_KEY_PREFIX}{key}"
        if self._ttl_s:
            self._client.set(redis_key, entry.model_dump_json(), ex=self._ttl_s)
        else:
            self._client.set(redis_key, entry.model_dump_json())
        # Index of all keys for list_entries
        self._client.sadd(_INDEX_KEY, key)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        self._client.delete(f"{_KEY_PREFIX}{key}")
        self._client.srem(_INDEX_KEY, key)

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries (expired keys are skipped)."""
        entries: list[CacheEntry] = []
        for key in sorted(self._client.smembers(_INDEX_KEY)):
            try:
                entries.append(await self.get(key))
            except CacheKeyNotFound:
                continue
        return entries

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
