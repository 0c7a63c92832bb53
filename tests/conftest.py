"""
Pytest configuration and fixtures for document-reader tests.
"""

import io
from datetime import datetime, timezone

import fitz
import pytest
from openpyxl import Workbook

from document_reader import Document, InMemoryKeyValueStore
from document_reader.exceptions import ExtractionError

UPLOADED_AT = datetime(2024, 3, 5, 9, 30, tzinfo=timezone.utc)


class StaticExtractor:
    """Extractor returning fixed text and recording calls."""

    def __init__(self, text: str):
        self.text = text
        self.calls = []

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        self.calls.append(file_name)
        return self.text


class FailingExtractor:
    """Extractor that always fails like an unavailable service."""

    def __init__(self, exc: Exception = None):
        self.exc = exc or ExtractionError("service unavailable")
        self.calls = 0

    def extract(self, file_bytes: bytes, file_name: str) -> str:
        self.calls += 1
        raise self.exc


@pytest.fixture
def static_extractor():
    """Factory for extractors returning fixed text."""
    return StaticExtractor


@pytest.fixture
def failing_extractor() -> FailingExtractor:
    return FailingExtractor()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def make_document():
    """Factory for in-memory documents with a fixed upload date."""

    def _make(data: bytes, name: str, mime_type: str = "", document_id: str = "doc-1") -> Document:
        return Document.from_bytes(
            data, name, document_id=document_id, mime_type=mime_type, uploaded_at=UPLOADED_AT
        )

    return _make


@pytest.fixture(scope="session")
def pdf_bytes() -> bytes:
    """A one-page PDF."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Swim session plan")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def session_text() -> str:
    return (
        "Coach notes for Tuesday\n"
        "\n"
        "WARM UP\n"
        "400 easy swim\n"
        "Main Set (aerobic)\n"
        "8x100 free on 1:40\n"
        "4x50 kick\n"
        "Cool-down\n"
        "200 easy\n"
    )


@pytest.fixture(scope="session")
def xlsx_bytes() -> bytes:
    """A one-sheet workbook with a header row and one data row."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Week 1"
    sheet.append(["Set", "Distance"])
    sheet.append(["Main", 800])
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
