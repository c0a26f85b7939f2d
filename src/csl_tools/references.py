"""CSL-JSON reference loading.

References are accepted either as a JSON array or as JSONL (one JSON
object per line) and are always handed on as a JSON array string.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Set

logger = logging.getLogger(__name__)


class RefsError(ValueError):
    """Raised when a reference file cannot be read or is not valid CSL-JSON."""


def load_refs(path: str | Path) -> str:
    """Read a CSL-JSON or JSONL file and return a JSON array string."""
    refs_path = Path(path)
    try:
        content = refs_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise RefsError(f"Failed to read file: {exc}") from exc
    refs_json = normalize_refs(content)
    logger.debug("Loaded references from %s", refs_path)
    return refs_json


def normalize_refs(content: str) -> str:
    trimmed = content.strip()
    if not trimmed:
        return "[]"

    if trimmed.startswith("["):
        try:
            value = json.loads(trimmed)
        except json.JSONDecodeError as exc:
            raise RefsError(f"Invalid JSON: {exc}") from exc
        if not isinstance(value, list):
            raise RefsError("References must be a JSON array")
        return json.dumps(value, ensure_ascii=False)

    refs: List[Any] = []
    for line_number, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            refs.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise RefsError(f"Invalid JSONL at line {line_number}: {exc}") from exc
    return json.dumps(refs, ensure_ascii=False)


def reference_ids(refs: List[Any]) -> Set[str]:
    """Return the string ids present in a parsed reference array."""
    return {ref["id"] for ref in refs if isinstance(ref, dict) and isinstance(ref.get("id"), str)}
