"""
Unit tests for content loading.
"""

import asyncio
import base64

import pytest

from document_reader import (
    Capabilities,
    ContentLoader,
    DecodingError,
    Document,
    DocumentFormat,
    DocumentNotFoundError,
    ErrorKind,
    LoadState,
    ViewMode,
)
from document_reader.formatting import format_file_size
from document_reader.loader import NativeLoadStrategy, WebLoadStrategy, select_strategy

WEB = Capabilities.web()
NATIVE = Capabilities.native()

XLS_MIME = "application/vnd.ms-excel"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class GatedExtractor:
    """Async extractor that blocks until released."""

    def __init__(self, text: str):
        self.text = text
        self.started = asyncio.Event()
        self.gate = asyncio.Event()

    async def extract(self, file_bytes: bytes, file_name: str) -> str:
        self.started.set()
        await self.gate.wait()
        return self.text


class TestStrategySelection:
    def test_native_with_path(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("x")
        assert isinstance(select_strategy(Document.from_path(str(path)), NATIVE), NativeLoadStrategy)

    def test_web_or_missing_path_uses_buffer(self, make_document):
        document = make_document(b"x", "plan.txt")
        assert isinstance(select_strategy(document, WEB), WebLoadStrategy)
        assert isinstance(select_strategy(document, NATIVE), WebLoadStrategy)

    def test_web_platform_ignores_local_path(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("x")
        capabilities = Capabilities(can_access_file_system=True, can_render_embedded_binary=True, is_web=True)
        assert isinstance(select_strategy(Document.from_path(str(path)), capabilities), WebLoadStrategy)


class TestTextLoading:
    def test_utf8_text(self, make_document):
        loader = ContentLoader()
        content = asyncio.run(loader.load(make_document("Warm up ✓".encode(), "plan.txt"), WEB))

        assert content.text == "Warm up ✓"
        assert content.view_mode is ViewMode.TEXT
        assert content.source_format is DocumentFormat.TEXT
        assert loader.state is LoadState.LOADED
        assert loader.content is content

    def test_csv_is_text(self, make_document):
        content = asyncio.run(ContentLoader().load(make_document(b"a,b\n1,2", "sets.csv"), WEB))
        assert content.source_format is DocumentFormat.CSV
        assert content.text == "a,b\n1,2"

    def test_native_reads_from_disk(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("from disk", encoding="utf-8")
        content = asyncio.run(ContentLoader().load(Document.from_path(str(path)), NATIVE))
        assert content.text == "from disk"

    def test_invalid_utf8_raises_decode_error(self, make_document):
        loader = ContentLoader()
        with pytest.raises(DecodingError) as exc_info:
            asyncio.run(loader.load(make_document(b"\xff\xfe\x00bad", "plan.txt"), WEB))

        assert exc_info.value.kind is ErrorKind.DECODE_ERROR
        assert exc_info.value.retryable
        assert loader.state is LoadState.FAILED
        assert loader.error is exc_info.value


class TestNotFound:
    def test_web_without_buffer(self):
        document = Document(id="d", display_name="plan.txt", mime_type="text/plain", size_bytes=10)
        loader = ContentLoader()
        with pytest.raises(DocumentNotFoundError) as exc_info:
            asyncio.run(loader.load(document, WEB))
        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert loader.state is LoadState.FAILED

    def test_native_file_removed(self, tmp_path):
        path = tmp_path / "gone.txt"
        path.write_text("soon gone")
        document = Document.from_path(str(path))
        path.unlink()
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(ContentLoader().load(document, NATIVE))

    def test_missing_word_buffer_is_not_found(self, static_extractor):
        document = Document(id="d", display_name="plan.docx", mime_type="", size_bytes=10)
        with pytest.raises(DocumentNotFoundError):
            asyncio.run(ContentLoader(extractor=static_extractor("x")).load(document, WEB))

    def test_retry_after_restore(self, tmp_path):
        path = tmp_path / "plan.txt"
        path.write_text("first")
        document = Document.from_path(str(path))
        path.unlink()
        loader = ContentLoader()

        with pytest.raises(DocumentNotFoundError):
            asyncio.run(loader.load(document, NATIVE))
        path.write_text("restored")
        content = asyncio.run(loader.retry())

        assert content.text == "restored"
        assert loader.state is LoadState.LOADED
        assert loader.error is None

    def test_unreadable_path_is_not_found(self, tmp_path):
        parent = tmp_path / "plan.txt"
        parent.write_text("a file, not a directory")
        document = Document(
            id="d",
            display_name="b.txt",
            mime_type="text/plain",
            size_bytes=0,
            local_path=str(parent / "b.txt"),
        )
        loader = ContentLoader()

        with pytest.raises(DocumentNotFoundError) as exc_info:
            asyncio.run(loader.load(document, NATIVE))

        assert isinstance(exc_info.value.__cause__, NotADirectoryError)
        assert loader.state is LoadState.FAILED
        assert loader.error is exc_info.value

    def test_unexpected_error_marks_load_failed(self, make_document, monkeypatch):
        def broken_decode(document, data):
            raise RuntimeError("decoder crashed")

        monkeypatch.setattr(ContentLoader, "_decode_text", staticmethod(broken_decode))
        loader = ContentLoader()

        with pytest.raises(RuntimeError, match="decoder crashed"):
            asyncio.run(loader.load(make_document(b"x", "plan.txt"), WEB))
        assert loader.state is LoadState.FAILED

    def test_retry_before_load(self):
        with pytest.raises(RuntimeError):
            asyncio.run(ContentLoader().retry())


class TestOfficeLoading:
    def test_extracted_text(self, make_document, static_extractor):
        extractor = static_extractor("WARM UP\n400 easy")
        content = asyncio.run(ContentLoader(extractor=extractor).load(make_document(b"PK", "plan.docx"), WEB))

        assert content.text == "WARM UP\n400 easy"
        assert content.view_mode is ViewMode.TEXT
        assert content.source_format is DocumentFormat.WORD
        assert extractor.calls == ["plan.docx"]

    @pytest.mark.parametrize(
        "name,mime_type,expected",
        [
            ("plan.xlsx", XLSX_MIME, "plan.xlsx"),
            ("Sheet.XLS", XLS_MIME, "Sheet.XLS"),
            ("plan.docx", XLSX_MIME, "plan.docx"),
            ("export", XLSX_MIME, "export.xlsx"),
            ("export", XLS_MIME, "export.xls"),
            ("notes", DOCX_MIME, "notes.docx"),
            ("notes", "application/msword", "notes.doc"),
            ("notes", "application/vnd.oasis.opendocument.text", "notes.docx"),
        ],
    )
    def test_extractor_file_name(self, make_document, static_extractor, name, mime_type, expected):
        extractor = static_extractor("rows")
        document = make_document(b"data", name, mime_type=mime_type)
        asyncio.run(ContentLoader(extractor=extractor).load(document, WEB))
        assert extractor.calls == [expected]

    def test_standard_xlsx_type_is_extracted_as_workbook(self, make_document, xlsx_bytes):
        document = make_document(xlsx_bytes, "plan.xlsx", mime_type=XLSX_MIME)
        content = asyncio.run(ContentLoader().load(document, WEB))

        assert content.text.splitlines() == ["## Sheet: Week 1", "Set | Distance", "Main | 800"]

    def test_failure_yields_placeholder(self, make_document, failing_extractor):
        document = make_document(b"x" * 2048, "Week 3 plan.docx")
        loader = ContentLoader(extractor=failing_extractor)

        content = asyncio.run(loader.load(document, WEB))

        assert content.view_mode is ViewMode.TEXT
        assert "Document Processing Required" in content.text
        assert "Week 3 plan.docx" in content.text
        assert format_file_size(2048) in content.text
        assert loader.state is LoadState.LOADED
        assert loader.error is None

    def test_placeholder_is_deterministic(self, make_document, failing_extractor):
        document = make_document(b"x" * 10, "sheet.xls", mime_type=XLS_MIME)
        loader = ContentLoader(extractor=failing_extractor)
        first = asyncio.run(loader.load(document, WEB)).text
        second = asyncio.run(loader.load(document, WEB)).text
        assert first == second
        assert failing_extractor.calls == 2

    def test_unexpected_exception_yields_placeholder(self, make_document):
        class Crashing:
            def extract(self, file_bytes, file_name):
                raise RuntimeError("boom")

        content = asyncio.run(ContentLoader(extractor=Crashing()).load(make_document(b"x", "a.docx"), WEB))
        assert content.text.startswith("Document Processing Required")

    def test_empty_extraction_yields_placeholder(self, make_document, static_extractor):
        content = asyncio.run(
            ContentLoader(extractor=static_extractor("  \n ")).load(make_document(b"x", "a.docx"), WEB)
        )
        assert content.text.startswith("Document Processing Required")


class TestPdfLoading:
    def test_web_embeds_data_url(self, make_document, pdf_bytes):
        content = asyncio.run(ContentLoader().load(make_document(pdf_bytes, "plan.pdf"), WEB))

        assert content.view_mode is ViewMode.WEB
        assert content.text == ""
        prefix = "data:application/pdf;base64,"
        assert content.reference.startswith(prefix)
        assert base64.b64decode(content.reference[len(prefix):]) == pdf_bytes

    def test_native_without_embedding_offers_download(self, tmp_path, pdf_bytes):
        path = tmp_path / "plan.pdf"
        path.write_bytes(pdf_bytes)
        content = asyncio.run(ContentLoader().load(Document.from_path(str(path)), NATIVE))

        assert content.view_mode is ViewMode.DOWNLOAD
        assert content.reference == path.resolve().as_uri()

    def test_native_with_embedding_renders_inline(self, tmp_path, pdf_bytes):
        path = tmp_path / "plan.pdf"
        path.write_bytes(pdf_bytes)
        capabilities = Capabilities.native(can_render_embedded_binary=True)
        content = asyncio.run(ContentLoader().load(Document.from_path(str(path)), capabilities))
        assert content.view_mode is ViewMode.WEB

    def test_corrupt_pdf_raises_decode_error(self, make_document):
        loader = ContentLoader()
        with pytest.raises(DecodingError):
            asyncio.run(loader.load(make_document(b"not a pdf", "plan.pdf"), WEB))
        assert loader.state is LoadState.FAILED


class TestUnsupported:
    @pytest.mark.parametrize(
        "name,mime_type",
        [("photo.png", "image/png"), ("clip.mp4", "video/mp4"), ("blob.bin", "")],
    )
    def test_other_formats_are_unsupported(self, make_document, name, mime_type):
        content = asyncio.run(ContentLoader().load(make_document(b"\x00\x01", name, mime_type), WEB))
        assert content.view_mode is ViewMode.UNSUPPORTED
        assert content.text == ""


class TestSupersededLoads:
    def test_slow_load_result_is_discarded(self, make_document):
        extractor = GatedExtractor("slow word text")
        loader = ContentLoader(extractor=extractor)
        slow_document = make_document(b"PK", "slow.docx", document_id="slow")
        fast_document = make_document(b"fast text", "fast.txt", document_id="fast")

        async def scenario():
            slow = asyncio.create_task(loader.load(slow_document, WEB))
            await extractor.started.wait()
            fast_content = await loader.load(fast_document, WEB)
            extractor.gate.set()
            return await slow, fast_content

        slow_result, fast_content = asyncio.run(scenario())

        assert slow_result is None
        assert loader.content is fast_content
        assert loader.content.document_id == "fast"
        assert loader.state is LoadState.LOADED
        assert loader.generation == 2

    def test_stale_failure_is_discarded(self, make_document):
        loader = ContentLoader()
        broken = make_document(b"not a pdf", "broken.pdf", document_id="broken")
        ok = make_document(b"ok", "ok.txt", document_id="ok")

        async def scenario():
            stale = asyncio.create_task(loader.load(broken, WEB))
            await asyncio.sleep(0)
            ok_content = await loader.load(ok, WEB)
            return await stale, ok_content

        stale_result, ok_content = asyncio.run(scenario())

        assert stale_result is None
        assert loader.error is None
        assert loader.state is LoadState.LOADED
        assert loader.content is ok_content
