"""
Unit tests for office and PDF text extraction.
"""

import io

import pytest
from docx import Document as DocxDocument

from document_reader import ExtractionError, ExtractorConfig, OfficeExtractor, UnsupportedTypeError


def _docx_bytes() -> bytes:
    doc = DocxDocument()
    doc.add_paragraph("WARM UP")
    doc.add_paragraph("400 easy swim")
    doc.add_paragraph("   ")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Set"
    table.cell(0, 1).text = "Distance"
    table.cell(1, 0).text = "Main"
    table.cell(1, 1).text = "800"
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def extractor() -> OfficeExtractor:
    return OfficeExtractor(ExtractorConfig())


class TestOfficeExtractor:
    def test_docx_paragraphs_and_tables(self, extractor):
        text = extractor.extract(_docx_bytes(), "plan.docx")

        assert text.startswith("WARM UP\n\n400 easy swim")
        assert "Set | Distance\n--- | ---\nMain | 800" in text

    def test_xlsx_rows(self, extractor, xlsx_bytes):
        text = extractor.extract(xlsx_bytes, "plan.XLSX")

        assert text.splitlines() == ["## Sheet: Week 1", "Set | Distance", "Main | 800"]

    def test_pdf_text(self, extractor, pdf_bytes):
        assert "Swim session plan" in extractor.extract(pdf_bytes, "plan.pdf")

    def test_corrupt_docx_raises_extraction_error(self, extractor):
        with pytest.raises(ExtractionError):
            extractor.extract(b"definitely not a zip", "plan.docx")

    def test_unknown_extension(self, extractor):
        with pytest.raises(UnsupportedTypeError):
            extractor.extract(b"data", "notes.rtf")
