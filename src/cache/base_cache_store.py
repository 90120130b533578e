# src/cache/base_cache_store.py — v1
"""Abstract cache store interface.

Implementations map a cache key to a CacheEntry (an artifact reference).
The in-process store is the default; out-of-process backends (JSON files,
Redis) plug in through the same interface without changing the
orchestrator. See cache_factory.create_cache_store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from policylens.cache.models import CacheEntry


class CacheKeyNotFound(KeyError):
    """Raised by get() when a key has no registered entry."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry:
        """Retrieve the entry for key.

        Raises:
            CacheKeyNotFound: If the key is not registered.
        """

    @abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store an entry. Last write wins."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove an entry. Missing keys are ignored."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List all registered entries."""

    async def contains(self, key: str) -> bool:
        try:
            await self.get(key)
        except CacheKeyNotFound:
            return False
        return True
