"""Splicing formatted citations back into the text and assembling the document."""
from __future__ import annotations

from typing import List, Optional, Sequence

from .models import ProcessedCitation

DEFAULT_BIB_HEADER = "## References"


def replace_citations(text: str, processed: Sequence[ProcessedCitation]) -> str:
    """Replace each processed span of ``text`` with its formatted string.

    Spans must not overlap and must index into the original ``text``.
    Replacements are applied from the last span to the first so that the
    offsets of spans not yet handled stay valid.
    """
    if not processed:
        return text

    pieces: List[str] = []
    tail = len(text)
    for citation in sorted(processed, key=lambda c: c.original_span[0], reverse=True):
        start, end = citation.original_span
        pieces.append(text[end:tail])
        pieces.append(citation.formatted)
        tail = start
    pieces.append(text[:tail])
    return "".join(reversed(pieces))


def generate_output(content: str, bibliography: Optional[str], bib_header: str = DEFAULT_BIB_HEADER) -> str:
    """Return the body followed by the bibliography section, if there is one."""
    output = content.rstrip()
    if bibliography:
        output = f"{output}\n\n{bib_header}\n\n{bibliography}"
    return output
