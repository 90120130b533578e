# src/storage/artifact_factory.py — v1
"""Factory: instantiate artifact store from configuration."""

from __future__ import annotations

from policylens.config.settings import Settings
from policylens.storage.base_artifact_store import BaseArtifactStore
from policylens.storage.local_store import LocalArtifactStore


def create_artifact_store(settings: Settings) -> BaseArtifactStore:
    """Create the artifact store selected by ARTIFACT_BACKEND.

    Raises:
        ValueError: If the backend is not supported or misconfigured.
    """
    if settings.artifact_backend == "local":
        return LocalArtifactStore()

    if settings.artifact_backend == "s3":
        from policylens.storage.s3_store import S3ArtifactStore
        if not settings.artifact_s3_bucket:
            raise ValueError(
                "ARTIFACT_S3_BUCKET must be set when ARTIFACT_BACKEND=s3"
            )
        return S3ArtifactStore(
            bucket=settings.artifact_s3_bucket,
            prefix=settings.artifact_s3_prefix,
            region=settings.artifact_s3_region or None,
            endpoint_url=settings.artifact_s3_endpoint_url or None,
        )

    raise ValueError(f"Unsupported artifact backend: {settings.artifact_backend!r}")
