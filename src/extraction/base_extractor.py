# src/extraction/base_extractor.py — v1
"""Abstract interfaces for document extraction and fetching."""

from __future__ import annotations

from abc import ABC, abstractmethod

from policylens.core.models import ExtractedContent


class DocumentFetchError(Exception):
    """Raised when a document reference cannot be retrieved."""

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Failed to fetch {reference!r}: {reason}")


class BaseExtractor(ABC):
    """Turns raw document bytes into ordered, deduplicated segments."""

    @abstractmethod
    def extract(self, raw: bytes | str, reference: str = "") -> ExtractedContent:
        """Extract content. Must never raise for malformed input."""


class BaseDocumentFetcher(ABC):
    """Transport that resolves a document reference to raw bytes."""

    @abstractmethod
    async def fetch(self, reference: str) -> bytes:
        """Return the raw document body.

        Raises:
            DocumentFetchError: If the document is unreachable.
        """
