"""CSL engine backed by citeproc-py.

The engine is the only component that evaluates CSL styles. It exposes two
operations working on plain strings: format groups of citation items, and
format a bibliography for a set of references.
"""
from __future__ import annotations

import copy
import json
import logging
from io import BytesIO
from typing import Any, Dict, List, Sequence, Tuple

from citeproc import CitationStylesBibliography, CitationStylesStyle, formatter
from citeproc import Citation as CslCitation
from citeproc import CitationItem as CslCitationItem
from citeproc.source import Locator
from citeproc.source.json import CiteProcJSON

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = {
    "html": formatter.html,
    "text": formatter.plain,
}
DEFAULT_LOCATOR_LABEL = "page"


class EngineError(Exception):
    """Raised when the CSL engine cannot process a style or reference set."""


class CiteprocEngine:
    """Format citations and bibliographies with citeproc-py."""

    def __init__(self, output_format: str = "html"):
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format {output_format!r}; choose from {', '.join(OUTPUT_FORMATS)}"
            )
        self.output_format = output_format

    def format_citation_clusters(
        self, style: str, references_json: str, grouped_items: Sequence[Sequence[Dict[str, Any]]]
    ) -> str:
        """Return one formatted line per group of ``{id, locator?, label?}`` items."""
        try:
            bibliography, _ = self._bibliography(style, references_json)
            citations = [
                CslCitation([self._citation_item(item) for item in group]) for group in grouped_items
            ]
            # Register everything first so citation numbers follow document order.
            for citation in citations:
                bibliography.register(citation)
            lines = [str(bibliography.cite(citation, self._warn)) for citation in citations]
        except Exception as exc:
            raise EngineError(str(exc)) from exc
        return "\n".join(line.replace("\n", " ") for line in lines)

    def format_bibliography(self, style: str, references_json: str) -> str:
        """Return the bibliography for every reference in ``references_json``."""
        try:
            bibliography, references = self._bibliography(style, references_json)
            if not self._has_bibliography(bibliography.style):
                logger.debug("Style defines no bibliography layout")
                return ""
            for reference in references:
                bibliography.register(CslCitation([CslCitationItem(reference["id"])]))
            bibliography.sort()
            entries = [str(entry) for entry in bibliography.bibliography()]
        except Exception as exc:
            raise EngineError(str(exc)) from exc
        return self._join_entries(entries)

    def _bibliography(
        self, style: str, references_json: str
    ) -> Tuple[CitationStylesBibliography, List[Dict[str, Any]]]:
        references = json.loads(references_json)
        if not isinstance(references, list):
            raise EngineError("References must be a JSON array")
        for reference in references:
            self._check_reference(reference)
        csl_style = CitationStylesStyle(BytesIO(style.encode("utf-8")), validate=False)
        # CiteProcJSON consumes the records it is given.
        source = CiteProcJSON(copy.deepcopy(references))
        return (
            CitationStylesBibliography(csl_style, source, OUTPUT_FORMATS[self.output_format]),
            references,
        )

    @staticmethod
    def _check_reference(reference: Any) -> None:
        # citeproc-py fails with an unrelated error on records missing these fields.
        if not isinstance(reference, dict) or not isinstance(reference.get("id"), str):
            raise EngineError(f"Reference {reference!r} has no string 'id'")
        if not reference.get("type"):
            raise EngineError(f"Reference '{reference['id']}' has no 'type'")

    @staticmethod
    def _citation_item(item: Dict[str, Any]) -> CslCitationItem:
        locator = item.get("locator")
        if locator is None:
            return CslCitationItem(item["id"])
        label = item.get("label") or DEFAULT_LOCATOR_LABEL
        return CslCitationItem(item["id"], locator=Locator(label, locator))

    @staticmethod
    def _has_bibliography(style: CitationStylesStyle) -> bool:
        return style.root.find("{http://purl.org/net/xbiblio/csl}bibliography") is not None

    def _join_entries(self, entries: List[str]) -> str:
        if not entries:
            return ""
        if self.output_format == "html":
            body = "\n".join(f'  <div class="csl-entry">{entry}</div>' for entry in entries)
            return f'<div class="csl-bib-body">\n{body}\n</div>'
        return "\n\n".join(entries)

    @staticmethod
    def _warn(citation_item: CslCitationItem) -> None:
        logger.warning("Reference with key %r not found in the bibliography", citation_item.key)
