"""Document format classification."""

from dataclasses import dataclass
from typing import Optional

from document_reader.models import DocumentFormat

# Checked in order; first substring hit wins.
MIME_RULES: tuple[tuple[tuple[str, ...], DocumentFormat], ...] = (
    (("pdf",), DocumentFormat.PDF),
    (("word", "document"), DocumentFormat.WORD),
    (("excel", "sheet"), DocumentFormat.EXCEL),
    (("csv",), DocumentFormat.CSV),
    (("text", "plain"), DocumentFormat.TEXT),
)

EXTENSION_RULES: tuple[tuple[tuple[str, ...], DocumentFormat], ...] = (
    ((".pdf",), DocumentFormat.PDF),
    ((".docx", ".doc"), DocumentFormat.WORD),
    ((".xlsx", ".xls"), DocumentFormat.EXCEL),
    ((".csv",), DocumentFormat.CSV),
    ((".txt",), DocumentFormat.TEXT),
)


@dataclass(frozen=True)
class FormatInfo:
    label: str
    capabilities: tuple[str, ...]


FORMAT_INFO: dict[DocumentFormat, FormatInfo] = {
    DocumentFormat.PDF: FormatInfo("PDF Document", ("view", "search", "bookmark", "share")),
    DocumentFormat.WORD: FormatInfo("Word Document", ("view", "search", "share")),
    DocumentFormat.EXCEL: FormatInfo("Spreadsheet", ("view", "download")),
    DocumentFormat.CSV: FormatInfo("Text Document", ("view", "search", "edit", "bookmark", "share")),
    DocumentFormat.TEXT: FormatInfo("Text Document", ("view", "search", "edit", "bookmark", "share")),
    DocumentFormat.IMAGE: FormatInfo("Image File", ("view", "zoom", "share")),
    DocumentFormat.ARCHIVE: FormatInfo("Archive File", ("download",)),
    DocumentFormat.VIDEO: FormatInfo("Video File", ("play", "share")),
    DocumentFormat.AUDIO: FormatInfo("Audio File", ("play", "share")),
    DocumentFormat.UNKNOWN: FormatInfo("Document", ("download",)),
}


def classify_format(mime_type: Optional[str], file_name: Optional[str]) -> DocumentFormat:
    """Classify a document by MIME type, falling back to its file extension.

    MIME type matches always take priority over the extension, so
    ``classify_format("application/pdf", "notes.txt")`` is ``pdf``.
    Total over all inputs; never raises.
    """
    mime = (mime_type or "").lower()
    name = (file_name or "").lower()

    if mime:
        for needles, fmt in MIME_RULES:
            if any(needle in mime for needle in needles):
                return fmt

    for suffixes, fmt in EXTENSION_RULES:
        if name.endswith(suffixes):
            return fmt

    return DocumentFormat.UNKNOWN


def format_info(fmt: DocumentFormat) -> FormatInfo:
    return FORMAT_INFO.get(fmt, FORMAT_INFO[DocumentFormat.UNKNOWN])
