"""Citation and bibliography formatting through a CSL engine.

The engine is any object with ``format_citation_clusters(style,
references_json, grouped_items)`` and ``format_bibliography(style,
references_json)``; see :class:`csl_tools.engine.CiteprocEngine`.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Sequence

from .citation_extractor import cited_ids
from .engine import EngineError
from .models import Citation, CitationCluster, ProcessedCitation, Span
from .references import reference_ids

logger = logging.getLogger(__name__)


class ProcessorError(Exception):
    """Base class for formatting failures."""


class ReferenceNotFoundError(ProcessorError):
    def __init__(self, reference_id: str):
        super().__init__(f"Reference not found: {reference_id}")
        self.reference_id = reference_id


class InvalidJsonError(ProcessorError):
    def __init__(self, message: str):
        super().__init__(f"Invalid JSON: {message}")


class CslProcessingError(ProcessorError):
    def __init__(self, message: str):
        super().__init__(f"CSL processing error: {message}")


def _parse_refs(refs_json: str) -> List[Any]:
    try:
        refs = json.loads(refs_json)
    except json.JSONDecodeError as exc:
        raise InvalidJsonError(str(exc)) from exc
    if not isinstance(refs, list):
        raise InvalidJsonError("References must be a JSON array")
    return refs


def validate_cited_ids(ids: Sequence[str], refs: List[Any]) -> None:
    """Raise ReferenceNotFoundError for the first id missing from ``refs``."""
    available = reference_ids(refs)
    for ref_id in ids:
        if ref_id not in available:
            raise ReferenceNotFoundError(ref_id)


def _format_groups(
    groups: List[List[Dict[str, Any]]], spans: List[Span], refs_json: str, style: str, engine
) -> List[ProcessedCitation]:
    try:
        output = engine.format_citation_clusters(style, refs_json, groups)
    except EngineError as exc:
        raise CslProcessingError(str(exc)) from exc

    lines = output.splitlines()
    if len(lines) != len(spans):
        logger.warning("Engine returned %d line(s) for %d citation group(s)", len(lines), len(spans))
    return [
        ProcessedCitation(original_span=span, formatted=lines[i] if i < len(lines) else "")
        for i, span in enumerate(spans)
    ]


def format_citations(
    citations: Sequence[Citation], refs_json: str, style: str, engine
) -> List[ProcessedCitation]:
    """Format every citation on its own, one result per citation."""
    if not citations:
        return []
    refs = _parse_refs(refs_json)
    validate_cited_ids([c.id for c in citations], refs)
    groups = [[citation.to_item().to_csl()] for citation in citations]
    return _format_groups(groups, [c.span for c in citations], refs_json, style, engine)


def format_citations_clusters(
    clusters: Sequence[CitationCluster], refs_json: str, style: str, engine
) -> List[ProcessedCitation]:
    """Format each cluster as one unit, e.g. "(1,2,3)" rather than "(1) (2) (3)"."""
    if not clusters:
        return []
    refs = _parse_refs(refs_json)
    validate_cited_ids([item.id for cluster in clusters for item in cluster.items], refs)
    groups = [[item.to_csl() for item in cluster.items] for cluster in clusters]
    logger.debug("Formatting %d citation cluster(s)", len(groups))
    return _format_groups(groups, [cluster.span for cluster in clusters], refs_json, style, engine)


def format_bibliography(citations: Sequence[Citation], refs_json: str, style: str, engine) -> str:
    """Format the bibliography for the cited references.

    References are passed to the engine in order of first citation; styles
    with their own bibliography sort reorder them.
    """
    if not citations:
        return ""
    refs = _parse_refs(refs_json)
    by_id: Dict[str, Any] = {}
    for ref in refs:
        if isinstance(ref, dict) and isinstance(ref.get("id"), str):
            by_id.setdefault(ref["id"], ref)

    cited_refs = [by_id[ref_id] for ref_id in cited_ids(citations) if ref_id in by_id]
    if not cited_refs:
        return ""

    try:
        return engine.format_bibliography(style, json.dumps(cited_refs, ensure_ascii=False))
    except EngineError as exc:
        raise CslProcessingError(str(exc)) from exc
