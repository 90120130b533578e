# src/storage/s3_store.py — v1
"""S3-compatible artifact store (ARTIFACT_BACKEND=s3).

Supports AWS S3, MinIO, and other S3-compatible storage.
Requires 'boto3' package: pip install boto3.
Exclusive creation uses a conditional put (If-None-Match: *).
"""

from __future__ import annotations

import logging

from policylens.storage.base_artifact_store import BaseArtifactStore

logger = logging.getLogger(__name__)

_PRECONDITION_CODES = {"PreconditionFailed", "412"}


class S3ArtifactStore(BaseArtifactStore):
    """Write artifacts to S3-compatible object storage."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "policylens/",
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        """Initialize S3 store.

        Args:
            bucket: S3 bucket name.
            prefix: Key prefix for all objects (e.g. "policylens/").
            region: AWS region (optional, uses boto3 default if not set).
            endpoint_url: Custom endpoint for MinIO/compatible storage.
        """
        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for S3 artifacts: pip install boto3"
            ) from e

        kwargs: dict = {}
        if region:
            kwargs["region_name"] = region
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url

        self._s3 = boto3.client("s3", **kwargs)
        self._bucket = bucket
        self._prefix = prefix.rstrip("/") + "/" if prefix else ""

    def _full_key(self, name: str) -> str:
        """Build the full S3 key from an artifact name."""
        return f"{self._prefix}{name}"

    async def write(self, name: str, content: bytes | str) -> bool:
        """Conditional put; overwrite when the object already exists."""
        key = self._full_key(name)
        body = content.encode("utf-8") if isinstance(content, str) else content
        try:
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=body, IfNoneMatch="*")
        except self._s3.exceptions.ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code not in _PRECONDITION_CODES:
                raise
            logger.debug("S3 artifact %s exists, overwriting", key)
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=body)
            return False
        logger.debug("S3 write: s3://%s/%s (%d bytes)", self._bucket, key, len(body))
        return True

    async def read(self, name: str) -> bytes:
        """Read content from S3."""
        response = self._s3.get_object(Bucket=self._bucket, Key=self._full_key(name))
        return response["Body"].read()

    async def exists(self, name: str) -> bool:
        """Check if an S3 object exists."""
        try:
            self._s3.head_object(Bucket=self._bucket, Key=self._full_key(name))
            return True
        except self._s3.exceptions.ClientError:
            return False

    async def delete(self, name: str) -> None:
        self._s3.delete_object(Bucket=self._bucket, Key=self._full_key(name))
