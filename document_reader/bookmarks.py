"""Per-document bookmarks persisted through a key-value store."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from document_reader.config import ViewerConfig
from document_reader.logger import get_logger
from document_reader.models import Bookmark
from document_reader.storage import KeyValueStore, bookmarks_key, read_json, write_json

logger = get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BookmarkStore:
    """Sorted bookmark list for one document.

    Offsets closer than ``bookmark_tolerance`` characters count as the same
    bookmark: toggling near an existing bookmark removes it. Every change is
    written through to the store under ``bookmarks_<document_id>``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        document_id: str,
        config: Optional[ViewerConfig] = None,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self.store = store
        self.document_id = document_id
        self.config = config or ViewerConfig()
        self._id_factory = id_factory
        self._clock = clock
        self._bookmarks: list[Bookmark] = []

    @property
    def key(self) -> str:
        return bookmarks_key(self.document_id)

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        return tuple(self._bookmarks)

    async def load(self) -> tuple[Bookmark, ...]:
        """Read the persisted list; missing or corrupt records load as empty."""
        raw = await read_json(self.store, self.key, [])
        bookmarks: list[Bookmark] = []
        if isinstance(raw, list):
            for item in raw:
                try:
                    bookmarks.append(Bookmark.from_dict(item))
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning(
                        "Skipping malformed bookmark record",
                        extra_data={"document_id": self.document_id, "error": str(exc)},
                    )
        else:
            logger.warning(
                "Bookmark record is not a list, starting empty",
                extra_data={"document_id": self.document_id},
            )
        self._bookmarks = sorted(bookmarks, key=lambda b: b.offset)
        return self.bookmarks

    def find_near(self, offset: int) -> Optional[Bookmark]:
        for bookmark in self._bookmarks:
            if abs(bookmark.offset - offset) < self.config.bookmark_tolerance:
                return bookmark
        return None

    async def toggle(self, offset: int, text: str = "") -> Optional[Bookmark]:
        """Remove the bookmark near ``offset`` or add one there.

        Returns the added bookmark, or ``None`` when one was removed.
        """
        existing = self.find_near(offset)
        added: Optional[Bookmark] = None
        if existing is not None:
            bookmarks = [b for b in self._bookmarks if b is not existing]
            logger.info(
                "Bookmark removed",
                extra_data={"document_id": self.document_id, "offset": existing.offset},
            )
        else:
            added = Bookmark(
                id=self._id_factory(),
                offset=offset,
                created_at=self._clock(),
                preview_text=text[offset:offset + self.config.bookmark_preview_chars],
            )
            bookmarks = sorted([*self._bookmarks, added], key=lambda b: b.offset)
            logger.info(
                "Bookmark added",
                extra_data={"document_id": self.document_id, "offset": offset},
            )

        await write_json(self.store, self.key, [b.to_dict() for b in bookmarks])
        self._bookmarks = bookmarks
        return added
