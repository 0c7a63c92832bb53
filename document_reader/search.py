"""Full-text search over extracted content."""

import re
import time
from typing import Callable, Optional

from document_reader.config import ViewerConfig
from document_reader.logger import Timer, get_logger
from document_reader.models import SearchMatch

logger = get_logger(__name__)

DEFAULT_CONTEXT_CHARS = 50


def search(text: str, query: str, context_chars: int = DEFAULT_CONTEXT_CHARS) -> list[SearchMatch]:
    """Find every literal, case-insensitive occurrence of ``query`` in ``text``.

    Matches are non-overlapping and ordered by offset; scanning resumes
    right after each match. Regex metacharacters in ``query`` match
    themselves. An empty query returns no matches.
    """
    if not query or not text:
        return []

    pattern = re.compile(re.escape(query), re.IGNORECASE)
    matches: list[SearchMatch] = []
    line_number = 1
    counted_to = 0

    for found in pattern.finditer(text):
        start, end = found.span()
        # Incremental newline count keeps this linear in len(text)
        line_number += text.count("\n", counted_to, start)
        counted_to = start
        matches.append(
            SearchMatch(
                offset=start,
                length=end - start,
                line_number=line_number,
                context_before=text[max(0, start - context_chars):start],
                context_after=text[end:end + context_chars],
                text=found.group(0),
            )
        )

    return matches


class SearchSession:
    """Debounced query state plus next/previous navigation over matches.

    ``update_query`` only records the query; it is indexed once no newer
    query arrived for ``search_debounce_ms``. The caller drives the timer by
    calling ``poll`` (e.g. on every frame) or ``flush`` to index at once.
    """

    def __init__(
        self,
        text: str = "",
        config: Optional[ViewerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ViewerConfig()
        self._clock = clock
        self._text = text
        self._query = ""
        self._pending_query: Optional[str] = None
        self._deadline: Optional[float] = None
        self._matches: list[SearchMatch] = []
        self._index = 0
        self.passes = 0

    @property
    def query(self) -> str:
        return self._query

    @property
    def matches(self) -> list[SearchMatch]:
        return list(self._matches)

    @property
    def pending(self) -> bool:
        return self._pending_query is not None

    @property
    def position(self) -> int:
        """Index of the current match, or -1 when there are none."""
        return self._index if self._matches else -1

    @property
    def current(self) -> Optional[SearchMatch]:
        return self._matches[self._index] if self._matches else None

    def set_text(self, text: str) -> None:
        """Replace the searched text and re-run the settled query."""
        self._text = text
        self._run(self._query)

    def update_query(self, query: str, now: Optional[float] = None) -> None:
        now = self._clock() if now is None else now
        self._pending_query = query
        self._deadline = now + self.config.search_debounce_ms / 1000.0

    def poll(self, now: Optional[float] = None) -> bool:
        """Index the pending query if its debounce window elapsed."""
        if self._pending_query is None or self._deadline is None:
            return False
        now = self._clock() if now is None else now
        if now < self._deadline:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        if self._pending_query is None:
            return
        query = self._pending_query
        self._pending_query = None
        self._deadline = None
        self._run(query)

    def _run(self, query: str) -> None:
        with Timer("search") as timer:
            self._matches = search(self._text, query, self.config.search_context_chars)
        self._query = query
        self._index = 0
        self.passes += 1
        logger.debug(
            "Search completed",
            extra_data={
                "query_length": len(query),
                "match_count": len(self._matches),
                "search_time_ms": timer.get_elapsed_ms(),
            },
        )

    def next(self) -> Optional[SearchMatch]:
        if not self._matches:
            return None
        self._index = (self._index + 1) % len(self._matches)
        return self._matches[self._index]

    def prev(self) -> Optional[SearchMatch]:
        if not self._matches:
            return None
        self._index = (self._index - 1) % len(self._matches)
        return self._matches[self._index]

    def scroll_target(self, font_size: float, line_spacing: float) -> Optional[float]:
        """Approximate scroll offset that brings the current match into view."""
        match = self.current
        if match is None:
            return None
        return max(0.0, match.line_number * font_size * line_spacing - self.config.search_scroll_margin)
