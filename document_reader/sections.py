"""Heuristic segmentation of training-session text into sections.

Each line is tested against ``HEADER_RULES`` in order and the first
matching rule makes it a header. Everything else is body text for the
current section. A section is emitted only once it has body text, so a
header followed directly by another header is dropped.
"""

import re
from typing import Callable, NamedTuple, Optional

from document_reader.models import Section

SESSION_PHRASE_PATTERN = re.compile(
    r"^(Warm[- ]?up|Technical Drill|Main Set|Kick Set|Conditioning Game|Special Drill"
    r"|Gameplay|Cool[- ]?down|IM Set|Starts?/Turns?)\s*(\(.*\))?$",
    re.IGNORECASE,
)
NUMBERED_HEADING_PATTERN = re.compile(r"^\d+\.\s+[A-Z]")
COLON_LABEL_PATTERN = re.compile(r"^[A-Z][^:]{3,30}:\s*$")

MAX_CAPS_HEADER_LENGTH = 50


class HeaderRule(NamedTuple):
    name: str
    predicate: Callable[[str], bool]


def is_all_caps(line: str) -> bool:
    return 0 < len(line) < MAX_CAPS_HEADER_LENGTH and line == line.upper()


def is_session_phrase(line: str) -> bool:
    return SESSION_PHRASE_PATTERN.match(line) is not None


def is_numbered_heading(line: str) -> bool:
    return NUMBERED_HEADING_PATTERN.match(line) is not None


def is_colon_label(line: str) -> bool:
    return COLON_LABEL_PATTERN.match(line) is not None


HEADER_RULES: tuple[HeaderRule, ...] = (
    HeaderRule("all_caps", is_all_caps),
    HeaderRule("session_phrase", is_session_phrase),
    HeaderRule("numbered", is_numbered_heading),
    HeaderRule("colon_label", is_colon_label),
)


def match_header(line: str, rules: tuple[HeaderRule, ...] = HEADER_RULES) -> Optional[str]:
    """Return the name of the first rule treating ``line`` as a header."""
    trimmed = line.strip()
    if not trimmed:
        return None
    for rule in rules:
        if rule.predicate(trimmed):
            return rule.name
    return None


def parse_sections(text: str, rules: tuple[HeaderRule, ...] = HEADER_RULES) -> list[Section]:
    """Split ``text`` into ordered header/body sections.

    >>> [(s.header, s.body) for s in parse_sections("WARM UP\\nJog 5 min")]
    [('WARM UP', 'Jog 5 min')]
    """
    sections: list[Section] = []
    header = ""
    body: list[str] = []

    def flush() -> None:
        if body:
            sections.append(Section(header=header, body="\n".join(body), order=len(sections)))

    for line in (text or "").split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        if match_header(trimmed, rules) is not None:
            flush()
            header, body = trimmed, []
        else:
            body.append(trimmed)

    flush()
    return sections
