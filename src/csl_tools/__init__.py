"""Citation formatting for Markdown documents using CSL styles."""

__version__ = "0.1.0"

from .app import CitationProcessorApp, ProcessResult
from .citation_extractor import (
    CitationExtractor,
    extract_citation_clusters,
    extract_citations,
    extract_pandoc_grouped_citations,
)
from .engine import CiteprocEngine, EngineError
from .locator import parse_locator
from .models import Citation, CitationCluster, CitationItem, ProcessedCitation
from .output import generate_output, replace_citations
from .processor import (
    ProcessorError,
    ReferenceNotFoundError,
    format_bibliography,
    format_citations,
    format_citations_clusters,
)
from .references import RefsError, load_refs
from .styles import StyleError, builtin_style, builtin_style_names, load_style, resolve_style

__all__ = [
    "CitationProcessorApp",
    "ProcessResult",
    "CitationExtractor",
    "extract_citation_clusters",
    "extract_citations",
    "extract_pandoc_grouped_citations",
    "CiteprocEngine",
    "EngineError",
    "parse_locator",
    "Citation",
    "CitationCluster",
    "CitationItem",
    "ProcessedCitation",
    "generate_output",
    "replace_citations",
    "ProcessorError",
    "ReferenceNotFoundError",
    "format_bibliography",
    "format_citations",
    "format_citations_clusters",
    "RefsError",
    "load_refs",
    "StyleError",
    "builtin_style",
    "builtin_style_names",
    "load_style",
    "resolve_style",
]
