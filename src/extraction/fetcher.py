# src/extraction/fetcher.py — v1
"""HTTP document fetcher using httpx.

Requires the 'httpx' package.
"""

from __future__ import annotations

import logging

import httpx

from policylens.extraction.base_extractor import BaseDocumentFetcher, DocumentFetchError

logger = logging.getLogger(__name__)


class HttpDocumentFetcher(BaseDocumentFetcher):
    """Fetch documents over HTTP(S) with a bounded body size."""

    def __init__(
        self,
        timeout: float = 30.0,
        max_bytes: int = 10 * 1024 * 1024,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._client = client

    async def fetch(self, reference: str) -> bytes:
        """GET the reference and return its body.

        Raises:
            DocumentFetchError: On transport errors, non-2xx status, or an
                oversized body.
        """
        owns_client = self._client is None
        client = self._client or httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=True,
        )
        try:
            response = await client.get(reference)
            response.raise_for_status()
            content = response.content
        except httpx.HTTPStatusError as exc:
            raise DocumentFetchError(
                reference, f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DocumentFetchError(reference, str(exc) or type(exc).__name__) from exc
        finally:
            if owns_client:
                await client.aclose()

        if self._max_bytes and len(content) > self._max_bytes:
            raise DocumentFetchError(
                reference, f"body exceeds {self._max_bytes} bytes"
            )

        logger.debug("Fetched %s (%d bytes)", reference, len(content))
        return content

    async def aclose(self) -> None:
        """Close an injected client."""
        if self._client is not None:
            await self._client.aclose()
