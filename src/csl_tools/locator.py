"""Locator parsing for citation suffixes such as "p. 42" or "ch. 3"."""
from __future__ import annotations

from typing import Optional, Tuple

# Longer prefixes come first so "pp." is not read as "p." and "pages" not as "page".
LOCATOR_PREFIXES = (
    ("pp.", "page"),
    ("p.", "page"),
    ("ch.", "chapter"),
    ("sec.", "section"),
    ("pages", "page"),
    ("page", "page"),
    ("chapter", "chapter"),
    ("section", "section"),
)


def parse_locator(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Split a locator into ``(value, label)``.

    Unrecognized text is kept verbatim as the value with no label, and a
    bare prefix with nothing after it ("pages") is treated the same way.
    """
    trimmed = text.strip()
    if not trimmed:
        return None, None

    for prefix, label in LOCATOR_PREFIXES:
        if trimmed.startswith(prefix):
            value = trimmed[len(prefix):].strip()
            if value:
                return value, label
            break

    return trimmed, None
