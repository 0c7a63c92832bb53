"""Document reader: loading, search, bookmarks and reading progress."""

from document_reader.api import load_document
from document_reader.bookmarks import BookmarkStore
from document_reader.config import ExtractorConfig, ReaderConfig, ScrubConfig, ViewerConfig
from document_reader.detector import classify_format, format_info
from document_reader.exceptions import (
    DecodingError,
    DocumentNotFoundError,
    DocumentReaderError,
    ExtractionError,
    UnsupportedTypeError,
)
from document_reader.extractor import OfficeExtractor
from document_reader.loader import (
    Capabilities,
    ContentLoader,
    NativeLoadStrategy,
    WebLoadStrategy,
)
from document_reader.models import (
    Bookmark,
    Document,
    DocumentFormat,
    DocumentStats,
    ErrorKind,
    ExtractedContent,
    LoadState,
    ReadingState,
    ScrollCommand,
    ScrubVisibility,
    SearchMatch,
    Section,
    ViewMode,
)
from document_reader.preferences import ViewerPreferences, ViewingHistory
from document_reader.progress import ReadingProgressTracker, progress_fraction
from document_reader.search import SearchSession, search
from document_reader.sections import HEADER_RULES, match_header, parse_sections
from document_reader.stats import calculate_stats
from document_reader.storage import InMemoryKeyValueStore, KeyValueStore, SqlAlchemyKeyValueStore
from document_reader.viewer import DocumentViewer

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "load_document",
    "DocumentViewer",
    # Core components
    "classify_format",
    "format_info",
    "ContentLoader",
    "Capabilities",
    "NativeLoadStrategy",
    "WebLoadStrategy",
    "OfficeExtractor",
    "search",
    "SearchSession",
    "BookmarkStore",
    "ReadingProgressTracker",
    "progress_fraction",
    "calculate_stats",
    "parse_sections",
    "match_header",
    "HEADER_RULES",
    # Persistence
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SqlAlchemyKeyValueStore",
    "ViewerPreferences",
    "ViewingHistory",
    # Data models
    "Document",
    "DocumentFormat",
    "ExtractedContent",
    "ViewMode",
    "SearchMatch",
    "Bookmark",
    "Section",
    "DocumentStats",
    "ReadingState",
    "ScrollCommand",
    "ScrubVisibility",
    "LoadState",
    "ErrorKind",
    # Configuration
    "ReaderConfig",
    "ViewerConfig",
    "ScrubConfig",
    "ExtractorConfig",
    # Exceptions
    "DocumentReaderError",
    "DocumentNotFoundError",
    "DecodingError",
    "ExtractionError",
    "UnsupportedTypeError",
]
