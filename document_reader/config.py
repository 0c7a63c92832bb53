"""Configuration classes for document reader."""

from dataclasses import dataclass, field


@dataclass
class ExtractorConfig:
    """Configuration for the office/PDF text extractor.

    Examples:
        >>> # Default configuration
        >>> config = ExtractorConfig()

        >>> # Keep tables that have no ruling lines
        >>> config = ExtractorConfig(table_strategy="text")
    """

    table_strategy: str = "lines_strict"
    """pymupdf4llm table detection strategy. Default: "lines_strict"
    (only tables drawn with visible lines)."""

    fontsize_limit: int = 3
    """Ignore PDF text smaller than this many points."""

    force_text: bool = True
    """Extract PDF text even when it overlaps images."""

    soffice_timeout_s: float = 60.0
    """Timeout for legacy .doc conversion through textutil/soffice."""


@dataclass
class ViewerConfig:
    """Constants for search, bookmarks and statistics.

    The defaults are product constants; change them only for tests.
    """

    search_context_chars: int = 50
    """Characters of context kept before and after each search match."""

    search_debounce_ms: int = 300
    """Query changes inside this window collapse into one indexing pass."""

    search_scroll_margin: float = 100.0
    """Offset subtracted from the estimated scroll position of a match."""

    bookmark_tolerance: int = 100
    """Bookmarks closer than this many characters are the same bookmark."""

    bookmark_preview_chars: int = 100
    """Characters captured from the bookmark offset as preview text."""

    words_per_minute: int = 225
    """Average reading speed used for the read time estimate."""

    history_limit: int = 50
    """Maximum number of entries kept in the viewing history."""


@dataclass
class ScrubConfig:
    """Constants for the reading progress scrub control."""

    overscroll_allowance: float = 200.0
    """Extra scroll range past the end of content (K)."""

    show_after_offset: float = 100.0
    """Scroll offset after which the scrub control may appear."""

    min_overflow: float = 200.0
    """Content must exceed the viewport by this much to show the control."""

    idle_hide_ms: int = 1000
    """Hide the control after this long without scroll samples."""

    post_drag_hide_ms: int = 2000
    """Hide timer armed when a drag is released."""

    height_coalesce_delta: float = 50.0
    """Content height changes at or below this are ignored."""

    momentum_threshold: float = 0.5
    """Release velocity above which one momentum step is applied."""

    momentum_damping: float = 400.0
    """Multiplier converting release velocity to a scroll distance."""


@dataclass
class ReaderConfig:
    """Top-level configuration bundle."""

    viewer: ViewerConfig = field(default_factory=ViewerConfig)
    scrub: ScrubConfig = field(default_factory=ScrubConfig)
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
