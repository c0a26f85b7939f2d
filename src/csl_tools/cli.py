"""Command line interface for formatting citations in Markdown documents."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .app import CitationProcessorApp, InputFileError
from .engine import OUTPUT_FORMATS, CiteprocEngine
from .output import DEFAULT_BIB_HEADER
from .processor import ProcessorError, ReferenceNotFoundError
from .references import RefsError, load_refs
from .styles import StyleError, builtin_style_names, resolve_style

logger = logging.getLogger("csl_tools")


class AppError(Exception):
    """An error reported to the user with an exit code and a hint."""

    exit_code = 1
    hint: str | None = None

    def __str__(self) -> str:
        message = super().__str__()
        hint = self.describe_hint()
        return f"{message}\n  {hint}" if hint else message

    def describe_hint(self) -> str | None:
        return f"hint: {self.hint}" if self.hint else None


class InputFileAppError(AppError):
    exit_code = 10
    hint = "verify the file path is correct"


class BibFileAppError(AppError):
    exit_code = 11
    hint = "the file must be a JSON array of CSL-JSON objects, or JSONL (one object per line)"


class StyleAppError(AppError):
    exit_code = 12

    def describe_hint(self) -> str:
        names = ", ".join(builtin_style_names())
        return (
            f"available builtin styles: {names}\n"
            "  hint: provide a path to a .csl file, a URL, or use a builtin style name"
        )


class ReferenceNotFoundAppError(AppError):
    exit_code = 13
    hint = "check that this citation key exists in your bibliography file"


class CslProcessingAppError(AppError):
    exit_code = 14


class OutputFileAppError(AppError):
    exit_code = 15
    hint = "check that the output directory exists and is writable"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csl-tools",
        description="Format citations and bibliographies in Markdown documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  csl-tools process article.md --bib refs.json --csl style.csl\n"
            "  csl-tools process article.md --bib refs.json --csl minimal -o output.md\n"
            "  echo '[@key]' | csl-tools process - --bib refs.json --csl minimal\n"
            "  csl-tools styles"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser(
        "process",
        help="Process a Markdown file with citations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Citation syntax: [@key], [@key](url), [@key, p. 42], [@a; @b; @c]",
    )
    process.add_argument("input", help="Input Markdown file (use '-' for stdin)")
    process.add_argument(
        "-b", "--bib", type=Path, required=True, help="Bibliography file (CSL-JSON array or JSONL)"
    )
    process.add_argument(
        "-c",
        "--csl",
        required=True,
        help="CSL style: path to a .csl file, a URL, or a builtin name (see 'styles')",
    )
    process.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    process.add_argument("--no-bib", action="store_true", help="Don't include the bibliography")
    process.add_argument(
        "--bib-header", default=DEFAULT_BIB_HEADER, help="Header placed above the bibliography"
    )
    process.add_argument(
        "--format",
        default="html",
        choices=sorted(OUTPUT_FORMATS),
        help="Markup used for formatted citations and the bibliography",
    )

    commands.add_parser("styles", help="List available builtin CSL styles")
    return parser


def process_command(args: argparse.Namespace) -> None:
    app = CitationProcessorApp(
        engine=CiteprocEngine(output_format=args.format),
        bib_header=args.bib_header,
        include_bibliography=not args.no_bib,
    )

    try:
        markdown = app.read_input(args.input)
    except InputFileError as exc:
        raise InputFileAppError(str(exc)) from exc

    try:
        refs_json = load_refs(args.bib)
    except RefsError as exc:
        raise BibFileAppError(f"'{args.bib}': {exc}") from exc

    try:
        style = resolve_style(args.csl)
    except StyleError as exc:
        raise StyleAppError(str(exc)) from exc

    try:
        result = app.process_text(markdown, refs_json, style)
    except ReferenceNotFoundError as exc:
        raise ReferenceNotFoundAppError(str(exc)) from exc
    except ProcessorError as exc:
        raise CslProcessingAppError(str(exc)) from exc

    if args.output:
        try:
            args.output.write_text(result.output, encoding="utf-8")
        except OSError as exc:
            raise OutputFileAppError(f"'{args.output}': {exc}") from exc
        print(
            f"processed {len(result.processed)} citation(s), wrote {args.output}",
            file=sys.stderr,
        )
    else:
        try:
            sys.stdout.write(result.output)
            sys.stdout.flush()
        except OSError as exc:
            raise OutputFileAppError(f"stdout: {exc}") from exc


def styles_command() -> None:
    for name in builtin_style_names():
        print(name)


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.command == "process":
            process_command(args)
        else:
            styles_command()
    except AppError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
