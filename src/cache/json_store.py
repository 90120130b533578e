# src/cache/json_store.py — v1
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores one JSON file per entry under CACHE_ROOT, named by the artifact
digest of the key so file names stay fixed-length and path-safe. Entries
survive restarts and can be shared by processes on one host.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from policylens.cache.base_cache_store import BaseCacheStore, CacheKeyNotFound
from policylens.cache.keys import artifact_digest
from policylens.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: str | Path) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> CacheEntry:
        """Retrieve cache entry by key. Unreadable entries count as absent."""
        path = self._entry_path(key)
        if not path.exists():
            raise CacheKeyNotFound(key)
        try:
            entry = CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            raise CacheKeyNotFound(key) from e
        if entry.cache_key != key:
            # Digest collision: the file belongs to another key.
            raise CacheKeyNotFound(key)
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store a cache entry (write to temp file, then atomic replace)."""
        path = self._entry_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(f".{os.getpid()}.tmp")
        tmp.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)

    async def delete(self, key: str) -> None:
        """Remove a cache entry."""
        path = self._entry_path(key)
        if path.exists():
            path.unlink()

    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""
        entries: list[CacheEntry] = []
        if not self._root.is_dir():
            return entries

        for path in sorted(self._root.glob("*.json")):
            try:
                entries.append(CacheEntry(**json.loads(path.read_text(encoding="utf-8"))))
            except (OSError, ValueError, ValidationError):
                continue

        return entries

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        return self._root / f"{artifact_digest(key)}.json"
