# src/cache/memory_store.py — v1
"""In-process cache store (default CACHE_BACKEND=memory).

A plain dict behind a single reader/writer lock. The lock is held only for
the map operation itself. Entries are copied on the way in and out so
callers never share a mutable alias with the store.
"""

from __future__ import annotations

import logging

from policylens.cache.base_cache_store import BaseCacheStore, CacheKeyNotFound
from policylens.cache.locks import ReadWriteLock
from policylens.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class InMemoryCacheStore(BaseCacheStore):
    """Concurrency-safe in-memory map of cache key to CacheEntry."""

    def __init__(self) -> None:
        self._db: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()

    async def get(self, key: str) -> CacheEntry:
        """Retrieve cache entry by key."""
        with self._lock.read():
            entry = self._db.get(key)
        if entry is None:
            raise CacheKeyNotFound(key)
        return entry.model_copy()

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry."""
        stored = entry.model_copy()
        with self._lock.write():
            self._db[key] = stored
        logger.debug("Registered cache entry -> %s", entry.artifact_ref)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        with self._lock.write():
            self._db.pop(key, None)

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        with self._lock.read():
            entries = list(self._db.values())
        return [e.model_copy() for e in entries]

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._db)
