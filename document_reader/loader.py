"""Content loading orchestration."""

import asyncio
import base64
import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF

from document_reader.config import ExtractorConfig
from document_reader.detector import classify_format
from document_reader.exceptions import (
    DecodingError,
    DocumentNotFoundError,
    DocumentReaderError,
    ExtractionError,
)
from document_reader.extractor import OfficeExtractor, TextExtractor
from document_reader.formatting import processing_placeholder
from document_reader.logger import Timer, get_logger, set_document_context
from document_reader.models import (
    Document,
    DocumentFormat,
    ExtractedContent,
    LoadState,
    ViewMode,
)

logger = get_logger(__name__)

_OFFICE_SUFFIXES = (".docx", ".doc", ".xlsx", ".xls")

# Checked in order; the xlsx type also contains "officedocument"
_MIME_SUFFIXES = (
    ("spreadsheetml", ".xlsx"),
    ("ms-excel", ".xls"),
    ("wordprocessingml", ".docx"),
    ("msword", ".doc"),
)

_DEFAULT_SUFFIXES = {
    DocumentFormat.WORD: ".docx",
    DocumentFormat.EXCEL: ".xlsx",
}


@dataclass(frozen=True)
class Capabilities:
    """Platform capabilities consulted once per load."""

    can_access_file_system: bool
    can_render_embedded_binary: bool
    is_web: bool = False

    @classmethod
    def native(cls, can_render_embedded_binary: bool = False) -> "Capabilities":
        return cls(can_access_file_system=True, can_render_embedded_binary=can_render_embedded_binary)

    @classmethod
    def web(cls) -> "Capabilities":
        return cls(can_access_file_system=False, can_render_embedded_binary=True, is_web=True)


class LoadStrategy:
    """How raw bytes and binary references are obtained on a platform."""

    name = "base"

    async def read_bytes(self, document: Document) -> bytes:
        raise NotImplementedError

    def binary_reference(self, document: Document, data: bytes) -> str:
        raise NotImplementedError


class NativeLoadStrategy(LoadStrategy):
    """Reads documents from the local file system."""

    name = "native"

    async def read_bytes(self, document: Document) -> bytes:
        if not document.local_path:
            raise DocumentNotFoundError("Document file path not found")
        path = Path(document.local_path)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            logger.warning(
                "Failed to read document from disk",
                extra_data={"path": str(path), "error_type": type(exc).__name__, "error": str(exc)},
            )
            raise DocumentNotFoundError("Document file no longer exists on device") from exc

    def binary_reference(self, document: Document, data: bytes) -> str:
        return Path(document.local_path).resolve().as_uri()


class WebLoadStrategy(LoadStrategy):
    """Uses the in-memory byte buffer captured at upload time."""

    name = "web"

    async def read_bytes(self, document: Document) -> bytes:
        if document.data is None:
            raise DocumentNotFoundError(
                "No file data available for this document. Try re-uploading the file."
            )
        return document.data

    def binary_reference(self, document: Document, data: bytes) -> str:
        return f"data:application/pdf;base64,{base64.b64encode(data).decode('ascii')}"


def select_strategy(document: Document, capabilities: Capabilities) -> LoadStrategy:
    """Web platforms always use the upload buffer, even for documents with a path."""
    if capabilities.is_web or not capabilities.can_access_file_system or not document.local_path:
        return WebLoadStrategy()
    return NativeLoadStrategy()


class ContentLoader:
    """Turns a ``Document`` into renderable ``ExtractedContent``.

    Word and Excel documents always produce text: when extraction fails a
    placeholder describing the document is shown instead. Only missing
    files (``DocumentNotFoundError``) and undecodable bytes
    (``DecodingError``) are raised to the caller.

    Every call to ``load`` takes a new generation number. A load that
    finishes after a newer one started returns ``None`` and leaves
    ``content``, ``error`` and ``state`` alone.
    """

    def __init__(
        self,
        extractor: Optional[TextExtractor] = None,
        extractor_config: Optional[ExtractorConfig] = None,
    ) -> None:
        self.extractor = extractor or OfficeExtractor(config=extractor_config)
        self.state = LoadState.IDLE
        self.content: Optional[ExtractedContent] = None
        self.error: Optional[DocumentReaderError] = None
        self._generation = 0
        self._last_request: Optional[tuple[Document, Capabilities]] = None

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def load(self, document: Document, capabilities: Capabilities) -> Optional[ExtractedContent]:
        """Load ``document``; returns ``None`` if superseded by a newer load.

        Raises:
            DocumentNotFoundError: If the file or buffer is missing
            DecodingError: If text is not UTF-8 or a PDF cannot be opened
        """
        self._generation += 1
        generation = self._generation
        self._last_request = (document, capabilities)
        self.state = LoadState.LOADING
        self.error = None
        set_document_context(document.id)

        fmt = classify_format(document.mime_type, document.display_name)
        strategy = select_strategy(document, capabilities)
        logger.info(
            "Loading document",
            extra_data={
                "file_name": document.display_name,
                "format": fmt.value,
                "strategy": strategy.name,
                "generation": generation,
            },
        )

        try:
            with Timer("load") as timer:
                content = await self._load(document, fmt, capabilities, strategy, generation)
        except DocumentReaderError as exc:
            if not self.is_current(generation):
                self._log_discarded(generation)
                return None
            self.state = LoadState.FAILED
            self.error = exc
            logger.warning(
                "Document load failed",
                extra_data={"error_kind": exc.kind.value, "error": str(exc), "generation": generation},
            )
            raise
        except Exception as exc:
            if not self.is_current(generation):
                self._log_discarded(generation)
                return None
            self.state = LoadState.FAILED
            logger.error(
                "Unexpected error while loading document",
                extra_data={"error_type": type(exc).__name__, "error": str(exc), "generation": generation},
            )
            raise

        if not self.is_current(generation):
            self._log_discarded(generation)
            return None

        self.content = content
        self.state = LoadState.LOADED
        logger.info(
            "Document loaded",
            extra_data={
                "view_mode": content.view_mode.value,
                "character_count": len(content.text),
                "load_time_ms": timer.get_elapsed_ms(),
                "generation": generation,
            },
        )
        return content

    async def retry(self) -> Optional[ExtractedContent]:
        """Re-run the most recent load with a fresh generation."""
        if self._last_request is None:
            raise RuntimeError("retry() called before any load()")
        document, capabilities = self._last_request
        return await self.load(document, capabilities)

    def _log_discarded(self, generation: int) -> None:
        logger.debug(
            "Discarding result of superseded load",
            extra_data={"generation": generation, "current_generation": self._generation},
        )

    async def _load(
        self,
        document: Document,
        fmt: DocumentFormat,
        capabilities: Capabilities,
        strategy: LoadStrategy,
        generation: int,
    ) -> ExtractedContent:
        def result(text: str, view_mode: ViewMode, reference: Optional[str] = None) -> ExtractedContent:
            return ExtractedContent(
                document_id=document.id,
                text=text,
                source_format=fmt,
                view_mode=view_mode,
                reference=reference,
                generation=generation,
            )

        if fmt in (DocumentFormat.TEXT, DocumentFormat.CSV):
            data = await strategy.read_bytes(document)
            return result(self._decode_text(document, data), ViewMode.TEXT)

        if fmt in (DocumentFormat.WORD, DocumentFormat.EXCEL):
            data = await strategy.read_bytes(document)
            return result(await self._extract_or_placeholder(document, fmt, data), ViewMode.TEXT)

        if fmt is DocumentFormat.PDF:
            data = await strategy.read_bytes(document)
            await asyncio.to_thread(self._validate_pdf, document, data)
            reference = strategy.binary_reference(document, data)
            if capabilities.can_render_embedded_binary:
                return result("", ViewMode.WEB, reference)
            return result("", ViewMode.DOWNLOAD, reference)

        logger.info(
            "No renderer for document format",
            extra_data={"format": fmt.value, "mime_type": document.mime_type},
        )
        return result("", ViewMode.UNSUPPORTED)

    @staticmethod
    def _decode_text(document: Document, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error(
                "Failed to decode text document as UTF-8",
                extra_data={"file_name": document.display_name, "file_size_bytes": len(data)},
            )
            raise DecodingError("Unable to decode text file (not valid UTF-8)") from exc

    @staticmethod
    def _validate_pdf(document: Document, data: bytes) -> None:
        try:
            pdf = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.error(
                "Failed to open PDF document",
                extra_data={"file_name": document.display_name, "error": str(exc)},
            )
            raise DecodingError(f"Unable to read PDF: {exc}") from exc
        try:
            if pdf.page_count == 0:
                raise DecodingError("PDF has no pages")
        finally:
            pdf.close()

    async def _extract_or_placeholder(self, document: Document, fmt: DocumentFormat, data: bytes) -> str:
        file_name = _extraction_name(document.display_name, document.mime_type, fmt)
        try:
            with Timer("extraction") as timer:
                if inspect.iscoroutinefunction(self.extractor.extract):
                    text = await self.extractor.extract(data, file_name)
                else:
                    text = await asyncio.to_thread(self.extractor.extract, data, file_name)
            if not text or not text.strip():
                raise ExtractionError("Unable to extract text content from the provided file")
        except Exception as exc:
            logger.warning(
                "Extraction failed, showing processing placeholder",
                extra_data={
                    "file_name": document.display_name,
                    "format": fmt.value,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return processing_placeholder(document, fmt)

        logger.debug(
            "Extraction succeeded",
            extra_data={"character_count": len(text), "extraction_time_ms": timer.get_elapsed_ms()},
        )
        return text


def _extraction_name(file_name: str, mime_type: str, fmt: DocumentFormat) -> str:
    """Give the extractor a name with an office extension it can dispatch on.

    A name that already has one is kept as is. Otherwise the extension comes
    from the MIME type, falling back to the detected format's default.
    """
    if file_name.lower().endswith(_OFFICE_SUFFIXES):
        return file_name
    mime = (mime_type or "").lower()
    for needle, suffix in _MIME_SUFFIXES:
        if needle in mime:
            return f"{file_name}{suffix}"
    return f"{file_name}{_DEFAULT_SUFFIXES[fmt]}"
