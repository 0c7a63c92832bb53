"""Key-value persistence for bookmarks, preferences and viewing history."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, DateTime, String, Text, create_engine, delete
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from document_reader.logger import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def bookmarks_key(document_id: str) -> str:
    return f"bookmarks_{document_id}"


PREFERENCES_KEY = "documentViewerPrefs"
HISTORY_KEY = "documentViewingHistory"


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"
    key = Column(String, primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime)


class KeyValueStore:
    """
    Abstract string key-value store. Methods are coroutines so callers on
    the event loop never block on I/O.
    """

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """
    Dictionary-backed store for local runs and tests.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SqlAlchemyKeyValueStore(KeyValueStore):
    """
    SQL-backed store using SQLAlchemy. Works with SQLite/Postgres URLs.
    Session work runs in a worker thread.
    """

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    def _get(self, key: str) -> Optional[str]:
        with self._session() as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry else None

    def _set(self, key: str, value: str) -> None:
        with self._session() as session:
            session.merge(KeyValueEntry(key=key, value=value, updated_at=datetime.now(timezone.utc)))
            session.commit()

    def _delete(self, key: str) -> None:
        with self._session() as session:
            session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
            session.commit()

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._set, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    def close(self) -> None:
        self.engine.dispose()


async def read_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """Read and decode a JSON value, substituting ``default`` on any failure."""
    try:
        raw = await store.get(key)
    except Exception as exc:
        logger.warning(
            "Store read failed, using default",
            extra_data={"key": key, "error_type": type(exc).__name__, "error": str(exc)},
        )
        return default
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning(
            "Stored value is not valid JSON, using default",
            extra_data={"key": key, "error": str(exc)},
        )
        return default


async def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    await store.set(key, json.dumps(value, ensure_ascii=False))
