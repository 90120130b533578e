# src/storage/local_store.py — v1
"""Local filesystem artifact store (default backend)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from policylens.storage.base_artifact_store import BaseArtifactStore

logger = logging.getLogger(__name__)

_FILE_MODE = 0o644


class LocalArtifactStore(BaseArtifactStore):
    """Write artifacts to the local filesystem."""

    def __init__(self, base_path: str | Path | None = None) -> None:
        """Initialize with optional base path.

        Args:
            base_path: Root directory for all artifacts. If None, names are
                resolved against the working directory.
        """
        self._base = Path(base_path).expanduser() if base_path else None

    def _resolve(self, name: str) -> Path:
        """Resolve an artifact name relative to base_path."""
        if self._base is not None:
            return self._base / name
        return Path(name)

    def resolve(self, name: str) -> Path:
        return self._resolve(name)

    async def write(self, name: str, content: bytes | str) -> bool:
        """Exclusive-create the file; reopen and rewrite it if it exists."""
        path = self._resolve(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content

        created = True
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, _FILE_MODE)
        except FileExistsError:
            created = False
            logger.debug("Artifact %s exists, reopening for write", name)
            fd = os.open(path, os.O_WRONLY | os.O_TRUNC)

        with os.fdopen(fd, "wb") as f:
            f.write(data)
        return created

    async def read(self, name: str) -> bytes:
        """Read content from a local file path."""
        return self._resolve(name).read_bytes()

    async def exists(self, name: str) -> bool:
        """Check if a local path exists."""
        return self._resolve(name).is_file()

    async def delete(self, name: str) -> None:
        self._resolve(name).unlink(missing_ok=True)
