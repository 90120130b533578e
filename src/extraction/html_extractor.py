# src/extraction/html_extractor.py — v1
"""HTML content extractor built on BeautifulSoup.

Walks every element in document order and keeps headings, paragraphs,
list blocks and table blocks. Duplicates are dropped per category (first
occurrence wins) so repeated navigation or footer text does not inflate the
prompt, while document order is preserved for the analyzer.
"""

from __future__ import annotations

import logging
from typing import Iterable

from bs4 import BeautifulSoup
from bs4.element import Tag

from policylens.core.models import ExtractedContent, Segment, SegmentCategory
from policylens.extraction.base_extractor import BaseExtractor

logger = logging.getLogger(__name__)

DEFAULT_HEADING_TAGS: tuple[str, ...] = ("h2", "h3")
LIST_TAGS: tuple[str, ...] = ("ul", "ol")


def parse_document(raw: bytes | str | None) -> BeautifulSoup:
    """Parse raw markup. html.parser is lenient, so this does not raise."""
    if raw is None:
        raw = ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return BeautifulSoup(raw, "html.parser")


def _text(element: Tag) -> str:
    return element.get_text().strip()


def _flatten_list(element: Tag) -> str:
    return "\n".join(_text(li) for li in element.find_all("li"))


def _flatten_table(element: Tag) -> str:
    rows = []
    for tr in element.find_all("tr"):
        cells = [_text(cell) for cell in tr.find_all(["th", "td"])]
        rows.append("\t".join(cells))
    return "\n".join(rows)


def _candidates(
    document: BeautifulSoup, heading_tags: Iterable[str]
) -> Iterable[tuple[SegmentCategory, str]]:
    """Yield (category, text) for every relevant element in document order."""
    headings = set(heading_tags)
    for element in document.find_all(True):
        name = element.name
        if name in headings:
            yield "heading", _text(element)
        elif name == "p":
            yield "paragraph", _text(element)
        elif name in LIST_TAGS:
            yield "list", _flatten_list(element)
        elif name == "table":
            yield "table", _flatten_table(element)


def extract_content(
    document: BeautifulSoup | None,
    reference: str = "",
    heading_tags: Iterable[str] = DEFAULT_HEADING_TAGS,
) -> ExtractedContent:
    """Extract ordered, per-category unique segments from a parsed document.

    Args:
        document: Parsed element tree. None yields empty content.
        reference: Source reference recorded on the result.
        heading_tags: Tag names treated as headings.

    Returns:
        ExtractedContent whose segments keep document order.
    """
    if document is None:
        return ExtractedContent(reference=reference)

    seen: dict[SegmentCategory, set[str]] = {
        "heading": set(), "paragraph": set(), "list": set(), "table": set(),
    }
    segments: list[Segment] = []

    for category, text in _candidates(document, heading_tags):
        if not text.strip():
            continue
        if text in seen[category]:
            continue
        seen[category].add(text)
        segments.append(Segment(category=category, text=text))

    logger.debug(
        "Extracted %d segments from %s", len(segments), reference or "<document>",
    )
    return ExtractedContent(reference=reference, segments=tuple(segments))


class HtmlExtractor(BaseExtractor):
    """Extractor for HTML pages fetched from a URL."""

    def __init__(self, heading_tags: Iterable[str] = DEFAULT_HEADING_TAGS) -> None:
        self._heading_tags = tuple(t.lower() for t in heading_tags)

    @property
    def heading_tags(self) -> tuple[str, ...]:
        return self._heading_tags

    def extract(self, raw: bytes | str, reference: str = "") -> ExtractedContent:
        """Parse then extract. Malformed markup yields whatever html.parser recovers."""
        return extract_content(
            parse_document(raw), reference=reference, heading_tags=self._heading_tags,
        )
