"""High-level orchestrator for formatting citations in Markdown documents."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .citation_extractor import CitationExtractor
from .engine import CiteprocEngine
from .models import CitationCluster, ProcessedCitation
from .output import DEFAULT_BIB_HEADER, generate_output, replace_citations
from .processor import format_bibliography, format_citations_clusters
from .references import load_refs
from .styles import resolve_style

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


class InputFileError(OSError):
    """Raised when the Markdown input cannot be read."""


@dataclass
class ProcessResult:
    """Container for the outcome of processing one document."""

    output: str
    content: str
    bibliography: Optional[str] = None
    clusters: List[CitationCluster] = field(default_factory=list)
    processed: List[ProcessedCitation] = field(default_factory=list)


class CitationProcessorApp:
    """Coordinates extraction, formatting and output assembly."""

    def __init__(
        self,
        engine=None,
        bib_header: str = DEFAULT_BIB_HEADER,
        include_bibliography: bool = True,
    ):
        self.extractor = CitationExtractor()
        self.engine = engine or CiteprocEngine()
        self.bib_header = bib_header
        self.include_bibliography = include_bibliography

    def process_text(self, markdown: str, refs_json: str, style: str) -> ProcessResult:
        clusters = self.extractor.extract_clusters(markdown)
        processed = format_citations_clusters(clusters, refs_json, style, self.engine)
        content = replace_citations(markdown, processed)

        bibliography = None
        if self.include_bibliography:
            # The bibliography follows first appearance, not the cluster order.
            citations = self.extractor.extract_cited(markdown)
            bibliography = format_bibliography(citations, refs_json, style, self.engine) or None

        logger.info("Formatted %d citation cluster(s)", len(processed))
        return ProcessResult(
            output=generate_output(content, bibliography, self.bib_header),
            content=content,
            bibliography=bibliography,
            clusters=clusters,
            processed=processed,
        )

    def process_file(self, input_path: str | Path, bib_path: str | Path, style_value: str) -> ProcessResult:
        """Read the input (``"-"`` for stdin), references and style, then process."""
        markdown = self.read_input(input_path)
        refs_json = load_refs(bib_path)
        style = resolve_style(style_value)
        return self.process_text(markdown, refs_json, style)

    @staticmethod
    def read_input(input_path: str | Path) -> str:
        if str(input_path) == STDIN_PATH:
            try:
                return sys.stdin.read()
            except OSError as exc:
                raise InputFileError(f"failed to read from stdin: {exc}") from exc
        path = Path(input_path)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InputFileError(f"'{path}': {exc}") from exc
