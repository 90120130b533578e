# src/cache/models.py — v1
"""Cache domain models: CacheEntry."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """Links a cache key to where its findings are durably stored.

    The store never holds the findings themselves, only ``artifact_ref``,
    so the artifact backend can change without touching the key space.
    """

    cache_key: str
    artifact_ref: str
    policy_ref: str = ""
    target_ref: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
