# src/storage/base_artifact_store.py — v1
"""Abstract artifact store interface.

An artifact is the durable copy of one analysis result, addressed by a
digest-derived name (see cache.keys.artifact_name).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseArtifactStore(ABC):
    """Unified interface for artifact storage backends."""

    @abstractmethod
    async def write(self, name: str, content: bytes | str) -> bool:
        """Write content, creating the artifact exclusively if absent.

        If the artifact already exists (e.g. a concurrent writer got there
        first) it is reopened and rewritten instead of failing.

        Returns:
            True if this call created the artifact, False if it reopened it.
        """

    @abstractmethod
    async def read(self, name: str) -> bytes:
        """Read artifact content."""

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Check if an artifact exists."""

    @abstractmethod
    async def delete(self, name: str) -> None:
        """Remove an artifact. Missing artifacts are ignored."""
