# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

SegmentCategory = Literal["heading", "paragraph", "list", "table"]


# === EXTRACTION MODELS ===


class Segment(BaseModel):
    """One trimmed text block extracted from a document.

    List and table blocks are already flattened: list items joined by
    newlines, table cells by tabs and rows by newlines.
    """

    model_config = ConfigDict(frozen=True)

    category: SegmentCategory
    text: str


class ExtractedContent(BaseModel):
    """Ordered, per-category deduplicated segments of one document."""

    model_config = ConfigDict(frozen=True)

    reference: str = ""
    segments: tuple[Segment, ...] = ()

    def texts(self) -> list[str]:
        """Segment texts in document order."""
        return [s.text for s in self.segments]

    def by_category(self, category: SegmentCategory) -> list[str]:
        return [s.text for s in self.segments if s.category == category]

    def render(self) -> str:
        """Render for prompt embedding: segments separated by blank lines."""
        return "\n\n".join(self.texts())

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def __len__(self) -> int:
        return len(self.segments)


# === ANALYSIS MODELS ===


class AnalysisResult(BaseModel):
    """Findings produced for one (policy, target) pair. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    cache_key: str
    findings: tuple[str, ...]
    artifact_ref: str | None = None
    cached: bool = False

    def response_text(self) -> str:
        """Findings joined by single spaces (same on cache hit and miss)."""
        return " ".join(self.findings)
