"""Data models for document reader."""

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class DocumentFormat(str, Enum):
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    CSV = "csv"
    TEXT = "text"
    IMAGE = "image"
    ARCHIVE = "archive"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


class ViewMode(str, Enum):
    TEXT = "text"
    WEB = "web"
    DOWNLOAD = "download"
    UNSUPPORTED = "unsupported"


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    DECODE_ERROR = "DecodeError"
    EXTRACTION_FAILED = "ExtractionFailed"
    UNSUPPORTED = "Unsupported"


class LoadState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ScrubVisibility(str, Enum):
    HIDDEN = "hidden"
    VISIBLE = "visible"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Document:
    """An uploaded document.

    Exactly one of ``local_path`` (native file system) or ``data``
    (in-memory buffer) is normally set. Re-uploads create a new instance.
    """

    id: str
    display_name: str
    mime_type: str
    size_bytes: int
    uploaded_at: datetime = field(default_factory=_utcnow)
    local_path: Optional[str] = None
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(
        cls,
        path: str,
        document_id: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> "Document":
        """Build a document that references a file on disk."""
        file_path = Path(path)
        stat = file_path.stat()
        if not mime_type:
            guessed, _ = mimetypes.guess_type(file_path.name)
            mime_type = guessed or ""
        return cls(
            id=document_id or file_path.name,
            display_name=file_path.name,
            mime_type=mime_type,
            size_bytes=stat.st_size,
            uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            local_path=str(file_path),
        )

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        file_name: str,
        document_id: Optional[str] = None,
        mime_type: Optional[str] = None,
        uploaded_at: Optional[datetime] = None,
    ) -> "Document":
        """Build a document backed by an in-memory byte buffer."""
        if not mime_type:
            guessed, _ = mimetypes.guess_type(file_name)
            mime_type = guessed or ""
        return cls(
            id=document_id or file_name,
            display_name=file_name,
            mime_type=mime_type,
            size_bytes=len(data),
            uploaded_at=uploaded_at or _utcnow(),
            data=data,
        )


@dataclass(frozen=True)
class ExtractedContent:
    """Result of loading a document for display."""

    document_id: str
    text: str
    source_format: DocumentFormat
    view_mode: ViewMode
    reference: Optional[str] = None  # data:/file: URL for binary rendering
    generation: int = 0


@dataclass(frozen=True)
class SearchMatch:
    offset: int
    length: int
    line_number: int
    context_before: str
    context_after: str
    text: str = ""

    @property
    def context(self) -> str:
        return self.context_before + self.text + self.context_after


@dataclass(frozen=True)
class Bookmark:
    id: str
    offset: int
    created_at: datetime
    preview_text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "offset": self.offset,
            "createdAt": self.created_at.isoformat(),
            "previewText": self.preview_text,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bookmark":
        return cls(
            id=str(data["id"]),
            offset=int(data["offset"]),
            created_at=datetime.fromisoformat(data["createdAt"]),
            preview_text=str(data.get("previewText", "")),
        )


@dataclass(frozen=True)
class Section:
    header: str
    body: str
    order: int


@dataclass(frozen=True)
class DocumentStats:
    words: int
    characters: int
    characters_no_spaces: int
    lines: int
    paragraphs: int
    estimated_read_minutes: int


@dataclass(frozen=True)
class ReadingState:
    document_id: str
    scroll_offset: float = 0.0
    content_height: float = 0.0
    viewport_height: float = 0.0
    progress_fraction: float = 0.0
    dragging: bool = False
    visibility: ScrubVisibility = ScrubVisibility.HIDDEN


@dataclass(frozen=True)
class ScrollCommand:
    """Scroll instruction for the rendering layer."""

    offset: float
    animated: bool
