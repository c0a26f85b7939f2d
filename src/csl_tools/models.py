"""Data models for citation extraction and formatting."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

Span = Tuple[int, int]


@dataclass(frozen=True)
class CitationItem:
    """One cited work inside a cluster."""

    id: str
    locator: Optional[str] = None
    label: Optional[str] = None
    url: Optional[str] = None

    def to_csl(self) -> Dict[str, Any]:
        """Return the item as sent to the CSL engine (the URL is never sent)."""
        item: Dict[str, Any] = {"id": self.id}
        if self.locator is not None:
            item["locator"] = self.locator
        if self.label is not None:
            item["label"] = self.label
        return item


@dataclass(frozen=True)
class Citation:
    """Represents a single `[@id]` marker found in the source text."""

    id: str
    locator: Optional[str] = None
    label: Optional[str] = None
    url: Optional[str] = None
    span: Span = (0, 0)

    def to_item(self) -> CitationItem:
        return CitationItem(id=self.id, locator=self.locator, label=self.label, url=self.url)


@dataclass(frozen=True)
class CitationCluster:
    """One or more citation items rendered together as a single unit."""

    items: List[CitationItem] = field(default_factory=list)
    span: Span = (0, 0)

    def ids(self) -> List[str]:
        return [item.id for item in self.items]


@dataclass(frozen=True)
class ProcessedCitation:
    """Formatted text for a span of the original document."""

    original_span: Span
    formatted: str
