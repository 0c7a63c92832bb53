"""Command line interface: ``document-reader {info,text,stats,sections,search} FILE``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from document_reader.api import load_document
from document_reader.detector import format_info
from document_reader.exceptions import DocumentReaderError, UnsupportedTypeError
from document_reader.extractor import OfficeExtractor
from document_reader.formatting import format_file_size, format_reading_time
from document_reader.logger import setup_logging
from document_reader.models import DocumentFormat, ExtractedContent, ViewMode
from document_reader.search import search
from document_reader.sections import parse_sections
from document_reader.stats import calculate_stats


def _content_text(path: str, content: ExtractedContent) -> str:
    """Text for a loaded document; PDFs are run through the extractor."""
    if content.view_mode is ViewMode.TEXT:
        return content.text
    if content.source_format is DocumentFormat.PDF:
        return OfficeExtractor().extract(Path(path).read_bytes(), Path(path).name)
    raise UnsupportedTypeError(f"No text available for {content.source_format.value} documents")


def _cmd_info(args, content: ExtractedContent) -> None:
    info = format_info(content.source_format)
    print(f"File: {Path(args.file).name}")
    print(f"Format: {content.source_format.value} ({info.label})")
    print(f"Size: {format_file_size(Path(args.file).stat().st_size)}")
    print(f"View mode: {content.view_mode.value}")
    print(f"Capabilities: {', '.join(info.capabilities)}")


def _cmd_text(args, content: ExtractedContent) -> None:
    print(_content_text(args.file, content))


def _cmd_stats(args, content: ExtractedContent) -> None:
    stats = calculate_stats(_content_text(args.file, content))
    print(f"Words: {stats.words:,}")
    print(f"Characters: {stats.characters:,}")
    print(f"Characters (no spaces): {stats.characters_no_spaces:,}")
    print(f"Lines: {stats.lines:,}")
    print(f"Paragraphs: {stats.paragraphs:,}")
    print(f"Estimated read time: {format_reading_time(stats.estimated_read_minutes)}")


def _cmd_sections(args, content: ExtractedContent) -> None:
    for section in parse_sections(_content_text(args.file, content)):
        print(f"## {section.header or '(untitled)'}")
        print(section.body)
        print()


def _cmd_search(args, content: ExtractedContent) -> None:
    matches = search(_content_text(args.file, content), args.query, args.context)
    for match in matches:
        context = match.context.replace("\n", " ")
        print(f"{match.line_number}:{match.offset}: {context}")
    print(f"{len(matches)} match(es)", file=sys.stderr)


COMMANDS = {
    "info": _cmd_info,
    "text": _cmd_text,
    "stats": _cmd_stats,
    "sections": _cmd_sections,
    "search": _cmd_search,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="document-reader",
        description="Load, inspect and search PDF, Word, Excel, CSV and text documents.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("info", "Show detected format and view mode"),
        ("text", "Print extracted text"),
        ("stats", "Print word/line/paragraph statistics"),
        ("sections", "Print header/body sections"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("file", help="Path to the document")

    search_cmd = sub.add_parser("search", help="Search the document text")
    search_cmd.add_argument("file", help="Path to the document")
    search_cmd.add_argument("query", help="Literal, case-insensitive search text")
    search_cmd.add_argument("--context", type=int, default=50, help="Context characters per side (default: 50)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        content = load_document(file_path=args.file)
        COMMANDS[args.command](args, content)
    except DocumentReaderError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
