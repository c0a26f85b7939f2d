"""CSL style loading: built-in styles, local files and remote URLs."""
from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Callable, List, Optional

import httpx

logger = logging.getLogger(__name__)

STYLE_SUFFIX = ".csl"
DEFAULT_TIMEOUT = 10.0


class StyleError(ValueError):
    """Raised when a CSL style cannot be found or read."""


def _style_dir():
    return resources.files(__package__).joinpath("styles")


def builtin_style_names() -> List[str]:
    return sorted(
        entry.name[: -len(STYLE_SUFFIX)]
        for entry in _style_dir().iterdir()
        if entry.name.endswith(STYLE_SUFFIX)
    )


def builtin_style(name: str) -> Optional[str]:
    """Return the CSL XML of a built-in style, or None if there is no such style."""
    if name not in builtin_style_names():
        return None
    return _style_dir().joinpath(f"{name}{STYLE_SUFFIX}").read_text(encoding="utf-8")


def load_style(path: str | Path) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise StyleError(f"Failed to read file: {exc}") from exc


def fetch_style(url: str, client: httpx.Client | None = None, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Download a CSL style, e.g. from the Zotero style repository."""
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(url, headers={"User-Agent": "csl-tools/0.1"})
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise StyleError(f"Failed to download style from {url}: {exc}") from exc
    finally:
        if client is None:
            http.close()
    logger.debug("Downloaded style from %s (%d bytes)", url, len(response.content))
    return response.text


def is_style_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


def resolve_style(value: str, fetcher: Callable[[str], str] | None = None) -> str:
    """Resolve a built-in style name, URL or file path to CSL XML."""
    builtin = builtin_style(value)
    if builtin is not None:
        logger.debug("Using builtin style %r", value)
        return builtin

    if is_style_url(value):
        return (fetcher or fetch_style)(value)

    style_path = Path(value)
    if not style_path.exists():
        raise StyleError(
            f"'{value}' is not a builtin style name and no file with this path exists"
        )
    try:
        return load_style(style_path)
    except StyleError as exc:
        raise StyleError(f"invalid CSL style '{value}': {exc}") from exc
