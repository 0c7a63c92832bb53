"""Text extraction for Word, Excel and PDF documents."""

import io
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import fitz  # PyMuPDF
import pymupdf4llm
from docx import Document as DocxDocument

from document_reader.config import ExtractorConfig
from document_reader.exceptions import ExtractionError, UnsupportedTypeError
from document_reader.logger import Timer, get_logger

logger = get_logger(__name__)


class TextExtractor(Protocol):
    """Extraction collaborator used by ``ContentLoader``.

    Implementations may be slow and may raise; the loader calls them from a
    worker thread and treats any exception as an extraction failure.
    """

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        ...


def _cell_to_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class OfficeExtractor:
    """Extracts plain/markdown text from office documents and PDFs.

    Uses python-docx for DOCX, openpyxl for XLSX, xlrd for XLS, system
    converters (textutil or LibreOffice) for legacy DOC and pymupdf4llm for
    PDF. Dispatch is by file extension.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        """Extract text from document bytes.

        Raises:
            UnsupportedTypeError: If no extractor handles the file extension
            ExtractionError: If extraction fails
        """
        suffix = Path(file_name).suffix.lower()
        handlers = {
            ".docx": self._extract_docx,
            ".doc": self._extract_doc,
            ".xlsx": self._extract_xlsx,
            ".xls": self._extract_xls,
            ".pdf": self._extract_pdf,
        }
        handler = handlers.get(suffix)
        if handler is None:
            raise UnsupportedTypeError(f"No extractor for '{suffix or file_name}'")

        logger.debug(
            "Starting document extraction",
            extra_data={
                "file_name": file_name,
                "file_extension": suffix,
                "file_size_bytes": len(file_bytes),
            },
        )
        try:
            with Timer("extraction") as timer:
                text = handler(file_bytes)
        except ExtractionError:
            raise
        except Exception as exc:
            logger.error(
                "Document extraction failed",
                extra_data={
                    "file_name": file_name,
                    "file_extension": suffix,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            raise ExtractionError(f"Failed to extract {file_name}: {exc}") from exc

        logger.info(
            "Extraction completed",
            extra_data={
                "file_name": file_name,
                "characters_extracted": len(text),
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )
        return text

    def _extract_pdf(self, file_bytes: bytes) -> str:
        doc = fitz.open(stream=file_bytes, filetype="pdf")
        try:
            md_text = pymupdf4llm.to_markdown(
                doc,
                table_strategy=self.config.table_strategy,
                force_text=self.config.force_text,
                write_images=False,
                ignore_images=True,
                fontsize_limit=self.config.fontsize_limit,
            )
        finally:
            doc.close()
        return md_text.strip()

    def _extract_docx(self, file_bytes: bytes) -> str:
        doc = DocxDocument(io.BytesIO(file_bytes))

        parts = [p.text.strip() for p in doc.paragraphs if p.text.strip()]

        for table in doc.tables:
            rows = []
            for i, row in enumerate(table.rows):
                cells = [cell.text.strip() for cell in row.cells]
                rows.append(" | ".join(cells))
                if i == 0:
                    rows.append(" | ".join(["---"] * len(cells)))
            if rows:
                parts.append("\n".join(rows))

        return "\n\n".join(parts)

    def _extract_doc(self, file_bytes: bytes) -> str:
        """Convert legacy .doc through textutil (macOS) or LibreOffice."""
        with tempfile.TemporaryDirectory() as tmp_dir:
            source = Path(tmp_dir) / "source.doc"
            source.write_bytes(file_bytes)
            timeout = self.config.soffice_timeout_s

            if shutil.which("textutil"):
                result = subprocess.run(
                    ["textutil", "-convert", "txt", str(source), "-stdout"],
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
                if result.returncode == 0 and result.stdout.strip():
                    return result.stdout.strip()

            soffice = shutil.which("soffice") or shutil.which("libreoffice")
            if soffice:
                out_dir = Path(tmp_dir) / "out"
                conversion = subprocess.run(
                    [soffice, "--headless", "--convert-to", "txt:Text", str(source), "--outdir", str(out_dir)],
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
                out_path = out_dir / "source.txt"
                if conversion.returncode == 0 and out_path.exists():
                    return out_path.read_text(encoding="utf-8", errors="ignore").strip()

        raise ExtractionError(
            "Failed to extract .doc file. Install textutil (macOS) or LibreOffice, or convert to DOCX."
        )

    def _extract_xlsx(self, file_bytes: bytes) -> str:
        from openpyxl import load_workbook

        workbook = load_workbook(io.BytesIO(file_bytes), data_only=True, read_only=True)
        try:
            parts: list[str] = []
            for sheet in workbook.worksheets:
                parts.append(f"## Sheet: {sheet.title}")
                for row in sheet.iter_rows(values_only=True):
                    parts.append(" | ".join(_cell_to_str(v) for v in row))
        finally:
            workbook.close()
        return "\n".join(parts).strip()

    def _extract_xls(self, file_bytes: bytes) -> str:
        import xlrd

        workbook = xlrd.open_workbook(file_contents=file_bytes)
        parts: list[str] = []
        for sheet in workbook.sheets():
            parts.append(f"## Sheet: {sheet.name}")
            for row_idx in range(sheet.nrows):
                parts.append(" | ".join(_cell_to_str(v) for v in sheet.row_values(row_idx)))
        return "\n".join(parts).strip()
