"""Processing summary utilities."""
from __future__ import annotations

from .app import ProcessResult


def render_report(result: ProcessResult) -> str:
    """Return a human-readable summary of a processed document."""

    citation_count = sum(len(cluster.items) for cluster in result.clusters)
    lines = [
        "Citation Processing Report",
        f"Citations detected: {citation_count}",
        f"Clusters formatted: {len(result.processed)}",
    ]
    grouped = [cluster for cluster in result.clusters if len(cluster.items) > 1]
    if grouped:
        lines.append(f"Grouped clusters: {len(grouped)}")
    if result.bibliography:
        lines.append("Bibliography: included")
    else:
        lines.append("Bibliography: none")

    empty = [p for p in result.processed if not p.formatted]
    if empty:
        lines.append("Warnings:")
        for citation in empty:
            start, end = citation.original_span
            lines.append(f"[WARNING] empty-citation: no formatted output for span {start}-{end}")
    return "\n".join(lines)
