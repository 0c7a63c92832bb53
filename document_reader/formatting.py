"""Human-readable formatting helpers and generated placeholder text."""

from datetime import datetime
from typing import Optional

from document_reader.detector import format_info
from document_reader.models import Document, DocumentFormat, DocumentStats

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_RULE = "─" * 64


def format_file_size(size_bytes: int) -> str:
    """Format a byte count, e.g. ``1536`` -> ``"1.5 KB"``."""
    if size_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while size_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(size_bytes / (1024**exponent), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[exponent]}"


def format_reading_time(minutes: int) -> str:
    if minutes < 1:
        return "Less than 1 min"
    if minutes < 60:
        return f"{minutes} min{'s' if minutes > 1 else ''}"
    hours, remaining = divmod(minutes, 60)
    return f"{hours}h {remaining}m"


def format_date(value: datetime) -> str:
    return value.date().isoformat()


def processing_placeholder(document: Document, fmt: DocumentFormat) -> str:
    """Text shown when a Word/Excel document could not be extracted.

    Depends only on the document metadata, so repeated loads render
    identically.
    """
    title = "Document Processing Required"
    lines = [
        title,
        "=" * len(title),
        "",
        f"File: {document.display_name}",
        f"Type: {fmt.value.upper()} Document",
        f"Size: {format_file_size(document.size_bytes)}",
        f"Uploaded: {format_date(document.uploaded_at)}",
        "",
        "This document contains structured data that requires processing.",
        "",
        "To view the content:",
        "1. Go to Training Plans → Upload Plans",
        "2. Select this document for processing",
        "3. The processed content will be readable",
        "",
        "Current Status: Raw binary data cannot be displayed directly.",
    ]
    return "\n".join(lines)


def clipboard_text(
    document: Document,
    fmt: DocumentFormat,
    content: str,
    stats: Optional[DocumentStats] = None,
    copied_at: Optional[datetime] = None,
) -> str:
    """Render loaded content with a metadata header for copying."""
    parts = [
        f"DOCUMENT: {document.display_name}",
        f"TYPE: {format_info(fmt).label}",
        f"SIZE: {format_file_size(document.size_bytes)}",
        f"UPLOADED: {format_date(document.uploaded_at)}",
        "",
        _RULE,
        "",
        "CONTENT",
        "",
        content,
        "",
        _RULE,
    ]
    if stats is not None:
        parts += [
            "",
            "STATISTICS",
            f"Words: {stats.words:,}",
            f"Lines: {stats.lines:,}",
            f"Estimated Read Time: {format_reading_time(stats.estimated_read_minutes)}",
        ]
    if copied_at is not None:
        parts += ["", f"Copied from Document Viewer • {format_date(copied_at)}"]
    return "\n".join(parts).strip()
