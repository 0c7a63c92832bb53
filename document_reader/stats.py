"""Document statistics."""

import math
import re

from document_reader.models import DocumentStats

WORDS_PER_MINUTE = 225

_WHITESPACE = re.compile(r"\s")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def estimated_read_minutes(word_count: int, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    return math.ceil(word_count / words_per_minute)


def calculate_stats(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> DocumentStats:
    """Compute word, character, line and paragraph counts for ``text``."""
    text = text or ""
    words = text.split()
    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]

    return DocumentStats(
        words=len(words),
        characters=len(text),
        characters_no_spaces=len(_WHITESPACE.sub("", text)),
        lines=len(text.split("\n")),
        paragraphs=len(paragraphs),
        estimated_read_minutes=estimated_read_minutes(len(words), words_per_minute),
    )
