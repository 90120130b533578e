# src/cache/keys.py — v1
"""Cache key derivation.

Two forms exist for one (policy, target) pair:
  1. the logical cache key: the literal concatenation ``policy + target``,
     used for lookups. Order-sensitive, never normalized or hashed.
  2. the artifact digest: first 10 hex chars of SHA-256 of the cache key,
     used only to name the persisted artifact (fixed length, path-safe).
"""

from __future__ import annotations

import hashlib

ARTIFACT_DIGEST_LENGTH = 10
ARTIFACT_SUFFIX = ".txt"


def derive_cache_key(policy_ref: str, target_ref: str) -> str:
    """Return the lookup key for a (policy, target) pair, policy first."""
    return policy_ref + target_ref


def artifact_digest(cache_key: str) -> str:
    """Truncated SHA-256 hex digest of the cache key."""
    return hashlib.sha256(cache_key.encode("utf-8")).hexdigest()[:ARTIFACT_DIGEST_LENGTH]


def artifact_name(cache_key: str, directory: str = "asset") -> str:
    """Artifact path relative to the artifact store root, e.g. ``asset/1a2b3c4d5e.txt``."""
    name = f"{artifact_digest(cache_key)}{ARTIFACT_SUFFIX}"
    directory = directory.rstrip("/")
    return f"{directory}/{name}" if directory else name
