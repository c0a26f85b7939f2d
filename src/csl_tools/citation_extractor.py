"""Utilities for detecting in-text citation markers in Markdown."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .locator import parse_locator
from .models import Citation, CitationCluster, CitationItem, Span

logger = logging.getLogger(__name__)


class CitationExtractor:
    """Extract `[@id]` markers and group them into citation clusters.

    Supported syntax:

    * ``[@id]``, ``[@id, p. 42]`` and ``[@id](https://...)``
    * Pandoc groups such as ``[@a; @b, ch. 3; @c]``

    Markers separated only by spaces or tabs (``[@a] [@b]``) are fused into
    one cluster; a Pandoc group is always a cluster of its own.
    """

    CITATION_PATTERN = re.compile(
        r"\[@(?P<id>[^\]\[,]+)(?:,\s*(?P<locator>[^\]]+))?\](?:\((?P<url>[^)]+)\))?"
    )
    PANDOC_GROUP_PATTERN = re.compile(r"\[(?P<inner>@[^\]]+;[^\]]*)\]")
    ADJACENT_SEPARATORS = frozenset(" \t")

    def extract(self, text: str) -> List[Citation]:
        """Return every single-citation marker in document order."""
        citations: List[Citation] = []
        for match in self.CITATION_PATTERN.finditer(text):
            locator, label = None, None
            if match.group("locator") is not None:
                locator, label = parse_locator(match.group("locator"))
            citations.append(
                Citation(
                    id=match.group("id").strip(),
                    locator=locator,
                    label=label,
                    url=match.group("url"),
                    span=(match.start(), match.end()),
                )
            )
        return citations

    def extract_pandoc_groups(self, text: str) -> List[CitationCluster]:
        """Return clusters written with the Pandoc ``[@a; @b]`` syntax."""
        clusters: List[CitationCluster] = []
        for match in self.PANDOC_GROUP_PATTERN.finditer(text):
            items = self._parse_pandoc_items(match.group("inner"))
            if items:
                clusters.append(CitationCluster(items=items, span=(match.start(), match.end())))
        return clusters

    def extract_clusters(self, text: str) -> List[CitationCluster]:
        """Return all clusters in the document, ordered by position.

        Pandoc groups win over adjacency grouping: single markers that start
        inside a Pandoc group are dropped before the adjacency pass.
        """
        pandoc_clusters = self.extract_pandoc_groups(text)
        claimed = [cluster.span for cluster in pandoc_clusters]
        simple = [
            citation
            for citation in self.extract(text)
            if not _starts_within(citation.span, claimed)
        ]

        clusters = pandoc_clusters + self._group_adjacent(text, simple)
        clusters.sort(key=lambda cluster: cluster.span[0])
        logger.debug(
            "Found %d citation cluster(s) (%d Pandoc group(s))", len(clusters), len(pandoc_clusters)
        )
        return clusters

    def extract_cited(self, text: str) -> List[Citation]:
        """Return cited works in document order, without adjacency grouping.

        Markers are read one by one as in :meth:`extract`, except that a
        Pandoc group contributes each of its items, in group order, at the
        group's position.
        """
        pandoc_clusters = self.extract_pandoc_groups(text)
        claimed = [cluster.span for cluster in pandoc_clusters]
        entries = [
            (citation.span[0], [citation])
            for citation in self.extract(text)
            if not _starts_within(citation.span, claimed)
        ]
        for cluster in pandoc_clusters:
            entries.append(
                (
                    cluster.span[0],
                    [
                        Citation(id=item.id, locator=item.locator, label=item.label, span=cluster.span)
                        for item in cluster.items
                    ],
                )
            )
        entries.sort(key=lambda entry: entry[0])
        return [citation for _, group in entries for citation in group]

    def _group_adjacent(self, text: str, citations: List[Citation]) -> List[CitationCluster]:
        clusters: List[CitationCluster] = []
        run: List[Citation] = []
        for citation in citations:
            if run and not self._is_adjacent(text[run[-1].span[1]:citation.span[0]]):
                clusters.append(_cluster_from_run(run))
                run = []
            run.append(citation)
        if run:
            clusters.append(_cluster_from_run(run))
        return clusters

    def _is_adjacent(self, between: str) -> bool:
        return all(ch in self.ADJACENT_SEPARATORS for ch in between)

    @staticmethod
    def _parse_pandoc_items(inner: str) -> List[CitationItem]:
        items: List[CitationItem] = []
        for part in (seg.strip() for seg in inner.split(";")):
            if not part.startswith("@"):
                continue
            body = part[1:]
            if "," in body:
                ref_id, locator_text = body.split(",", 1)
                locator, label = parse_locator(locator_text)
                items.append(CitationItem(id=ref_id.strip(), locator=locator, label=label))
            else:
                items.append(CitationItem(id=body.strip()))
        return items


def _starts_within(span: Span, claimed: Iterable[Span]) -> bool:
    return any(start <= span[0] < end for start, end in claimed)


def _cluster_from_run(run: List[Citation]) -> CitationCluster:
    return CitationCluster(
        items=[citation.to_item() for citation in run],
        span=(run[0].span[0], run[-1].span[1]),
    )


_default_extractor = CitationExtractor()


def extract_citations(text: str) -> List[Citation]:
    return _default_extractor.extract(text)


def extract_pandoc_grouped_citations(text: str) -> List[CitationCluster]:
    return _default_extractor.extract_pandoc_groups(text)


def extract_citation_clusters(text: str) -> List[CitationCluster]:
    return _default_extractor.extract_clusters(text)


def cited_ids(citations: Iterable[Citation]) -> List[str]:
    """Return citation ids without duplicates, in order of first appearance."""
    seen: set[str] = set()
    ordered: List[str] = []
    for citation in citations:
        if citation.id not in seen:
            seen.add(citation.id)
            ordered.append(citation.id)
    return ordered


def extract_cited_citations(text: str) -> List[Citation]:
    return _default_extractor.extract_cited(text)
