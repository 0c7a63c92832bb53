"""Viewer preferences and viewing history."""

from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from document_reader.config import ViewerConfig
from document_reader.logger import get_logger
from document_reader.models import Document, ReadingState
from document_reader.storage import HISTORY_KEY, PREFERENCES_KEY, KeyValueStore, read_json, write_json

logger = get_logger(__name__)


@dataclass
class ViewerPreferences:
    font_size: int = 16
    dark_mode: bool = False
    line_spacing: float = 1.5
    text_wrap: bool = True
    show_line_numbers: bool = False

    _STORED_NAMES = {
        "font_size": "fontSize",
        "dark_mode": "darkMode",
        "line_spacing": "lineSpacing",
        "text_wrap": "textWrap",
        "show_line_numbers": "showLineNumbers",
    }

    def to_dict(self) -> dict[str, Any]:
        return {self._STORED_NAMES[name]: value for name, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Any) -> "ViewerPreferences":
        """Build preferences from a stored record, defaulting unknown or bad values."""
        prefs = cls()
        if not isinstance(data, dict):
            return prefs
        for f in fields(cls):
            stored = data.get(cls._STORED_NAMES[f.name])
            default = getattr(prefs, f.name)
            if stored is None or isinstance(stored, bool) != isinstance(default, bool):
                continue
            if isinstance(stored, (int, float)):
                setattr(prefs, f.name, type(default)(stored))
        return prefs


async def load_preferences(store: KeyValueStore) -> ViewerPreferences:
    return ViewerPreferences.from_dict(await read_json(store, PREFERENCES_KEY, {}))


async def save_preferences(store: KeyValueStore, prefs: ViewerPreferences) -> None:
    await write_json(store, PREFERENCES_KEY, prefs.to_dict())


@dataclass(frozen=True)
class HistoryEntry:
    document_id: str
    document_name: str
    viewed_at: datetime
    reading_progress: float
    scroll_position: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "documentName": self.document_name,
            "viewedAt": self.viewed_at.isoformat(),
            "readingProgress": self.reading_progress,
            "scrollPosition": self.scroll_position,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        viewed_at = datetime.fromisoformat(data["viewedAt"])
        if viewed_at.tzinfo is None:
            viewed_at = viewed_at.replace(tzinfo=timezone.utc)
        return cls(
            document_id=str(data["documentId"]),
            document_name=str(data.get("documentName", "")),
            viewed_at=viewed_at,
            reading_progress=float(data.get("readingProgress", 0.0)),
            scroll_position=float(data.get("scrollPosition", 0.0)),
        )


class ViewingHistory:
    """Most-recent-first list of viewed documents, one entry per document."""

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[ViewerConfig] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store
        self.config = config or ViewerConfig()
        self._clock = clock

    async def entries(self) -> list[HistoryEntry]:
        raw = await read_json(self.store, HISTORY_KEY, [])
        entries: list[HistoryEntry] = []
        for item in raw if isinstance(raw, list) else []:
            try:
                entries.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed history entry", extra_data={"error": str(exc)})
        return entries

    async def record(self, document: Document, state: ReadingState) -> list[HistoryEntry]:
        """Snapshot the reading position of ``document`` at the head of the history."""
        entry = HistoryEntry(
            document_id=document.id,
            document_name=document.display_name,
            viewed_at=self._clock(),
            reading_progress=state.progress_fraction,
            scroll_position=state.scroll_offset,
        )
        # Stored entries are already most-recent-first
        others = [e for e in await self.entries() if e.document_id != document.id]
        history = [entry, *others][: self.config.history_limit]
        await write_json(self.store, HISTORY_KEY, [e.to_dict() for e in history])
        return history

    async def last_position(self, document_id: str) -> Optional[float]:
        for entry in await self.entries():
            if entry.document_id == document_id:
                return entry.scroll_position
        return None
