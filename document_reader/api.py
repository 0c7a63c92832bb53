"""High-level API for loading documents."""

import asyncio
from pathlib import Path
from typing import Optional

from document_reader.config import ExtractorConfig
from document_reader.exceptions import DocumentNotFoundError
from document_reader.loader import Capabilities, ContentLoader
from document_reader.models import Document, ExtractedContent


def load_document(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    file_name: Optional[str] = None,
    mime_type: Optional[str] = None,
    capabilities: Optional[Capabilities] = None,
    extractor_config: Optional[ExtractorConfig] = None,
) -> ExtractedContent:
    """Load a document and return its renderable content.

    Synchronous convenience wrapper around ``ContentLoader`` for scripts and
    the CLI. Accepts either a file path or raw bytes.

    Args:
        file_path: Path to document file (alternative to file_bytes)
        file_bytes: Raw document bytes (alternative to file_path)
        file_name: Original filename (required if using file_bytes)
        mime_type: MIME type hint (guessed from the name if not provided)
        capabilities: Platform capabilities. Defaults to native file system
            access for paths and web-style in-memory loading for bytes.
        extractor_config: Options for the Word/Excel/PDF extractor

    Raises:
        ValueError: If neither or both of file_path and file_bytes are given,
            or file_bytes is given without file_name
        DocumentNotFoundError: If file_path does not exist
        DecodingError: If a text file is not UTF-8 or a PDF is unreadable
        RuntimeError: If the load was superseded by another load on the same loader

    Examples:
        >>> content = load_document(file_path="plan.docx")
        >>> print(content.view_mode, content.text[:80])

        >>> with open("notes.txt", "rb") as f:
        ...     content = load_document(file_bytes=f.read(), file_name="notes.txt")
    """
    if file_path and file_bytes is not None:
        raise ValueError("Provide either file_path or file_bytes, not both")

    if file_path:
        if not Path(file_path).is_file():
            raise DocumentNotFoundError(f"File not found: {file_path}")
        document = Document.from_path(file_path, mime_type=mime_type)
        capabilities = capabilities or Capabilities.native()
    elif file_bytes is not None:
        if not file_name:
            raise ValueError("file_name is required when using file_bytes")
        document = Document.from_bytes(file_bytes, file_name, mime_type=mime_type)
        capabilities = capabilities or Capabilities.web()
    else:
        raise ValueError("Must provide either file_path or file_bytes")

    loader = ContentLoader(extractor_config=extractor_config)
    content = asyncio.run(loader.load(document, capabilities))
    if content is None:
        raise RuntimeError("Document load was superseded before it completed")
    return content
