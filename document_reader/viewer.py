"""Viewer session tying loading, search, bookmarks and progress together."""

import asyncio
import time
from dataclasses import fields, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from document_reader.bookmarks import BookmarkStore
from document_reader.config import ReaderConfig
from document_reader.detector import classify_format
from document_reader.formatting import clipboard_text
from document_reader.loader import Capabilities, ContentLoader
from document_reader.logger import get_logger
from document_reader.models import (
    Bookmark,
    Document,
    DocumentStats,
    ExtractedContent,
    ScrollCommand,
    Section,
    ViewMode,
)
from document_reader.preferences import (
    HistoryEntry,
    ViewerPreferences,
    ViewingHistory,
    load_preferences,
    save_preferences,
)
from document_reader.progress import ReadingProgressTracker
from document_reader.search import SearchSession
from document_reader.sections import parse_sections
from document_reader.stats import calculate_stats
from document_reader.storage import KeyValueStore

logger = get_logger(__name__)


class DocumentViewer:
    """State owned by one open document.

    Derived views (statistics, sections, search index) are recomputed
    whenever a load produces new content and are never mutated in place.
    """

    def __init__(
        self,
        document: Document,
        store: KeyValueStore,
        capabilities: Capabilities,
        loader: Optional[ContentLoader] = None,
        config: Optional[ReaderConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.document = document
        self.store = store
        self.capabilities = capabilities
        self.config = config or ReaderConfig()
        self.format = classify_format(document.mime_type, document.display_name)
        self.loader = loader or ContentLoader(extractor_config=self.config.extractor)
        self.bookmark_store = BookmarkStore(store, document.id, self.config.viewer)
        self.history = ViewingHistory(store, self.config.viewer)
        self.preferences = ViewerPreferences()
        self.search = SearchSession("", self.config.viewer, clock)
        self.progress = ReadingProgressTracker(document.id, self.config.scrub, clock)
        self.stats: Optional[DocumentStats] = None
        self.sections: list[Section] = []

    @property
    def content(self) -> Optional[ExtractedContent]:
        return self.loader.content

    @property
    def text(self) -> str:
        return self.content.text if self.content else ""

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        return self.bookmark_store.bookmarks

    async def open(self) -> Optional[ExtractedContent]:
        """Load preferences, bookmarks and content.

        Raises the loader's ``DocumentNotFoundError``/``DecodingError``;
        preferences and bookmarks are loaded either way.
        """
        self.preferences, _ = await asyncio.gather(
            load_preferences(self.store), self.bookmark_store.load()
        )
        return self._apply(await self.loader.load(self.document, self.capabilities))

    async def reload(self) -> Optional[ExtractedContent]:
        return self._apply(await self.loader.retry())

    def _apply(self, content: Optional[ExtractedContent]) -> Optional[ExtractedContent]:
        if content is None:
            return None
        if content.view_mode is ViewMode.TEXT:
            self.stats = calculate_stats(content.text, self.config.viewer.words_per_minute)
            self.sections = parse_sections(content.text)
        else:
            self.stats = None
            self.sections = []
        self.search.set_text(content.text)
        return content

    async def toggle_bookmark(self, offset: int) -> Optional[Bookmark]:
        return await self.bookmark_store.toggle(offset, self.text)

    async def update_preferences(self, **changes: Any) -> ViewerPreferences:
        known = {f.name for f in fields(ViewerPreferences)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown preference(s): {', '.join(sorted(unknown))}")
        self.preferences = replace(self.preferences, **changes)
        await save_preferences(self.store, self.preferences)
        return self.preferences

    def search_scroll_target(self) -> Optional[float]:
        return self.search.scroll_target(self.preferences.font_size, self.preferences.line_spacing)

    async def snapshot(self) -> list[HistoryEntry]:
        """Write the current reading position to the viewing history."""
        return await self.history.record(self.document, self.progress.state)

    async def restore_position(self) -> Optional[ScrollCommand]:
        offset = await self.history.last_position(self.document.id)
        if not offset:
            return None
        return self.progress.restore(offset)

    def clipboard_text(self, copied_at: Optional[datetime] = None) -> str:
        return clipboard_text(
            self.document,
            self.format,
            self.text,
            self.stats,
            copied_at or datetime.now(timezone.utc),
        )
