"""Custom exceptions for document reader."""

from document_reader.models import ErrorKind


class DocumentReaderError(Exception):
    """Base exception for document reader errors."""

    kind: ErrorKind = ErrorKind.EXTRACTION_FAILED

    @property
    def retryable(self) -> bool:
        """Whether the caller should offer a retry action for this error."""
        return self.kind in (ErrorKind.NOT_FOUND, ErrorKind.DECODE_ERROR)


class DocumentNotFoundError(DocumentReaderError):
    """Raised when the document file or in-memory buffer is missing."""

    kind = ErrorKind.NOT_FOUND


class DecodingError(DocumentReaderError):
    """Raised when document bytes cannot be decoded (e.g., UTF-8, PDF)."""

    kind = ErrorKind.DECODE_ERROR


class ExtractionError(DocumentReaderError):
    """Raised when text extraction fails."""

    kind = ErrorKind.EXTRACTION_FAILED


class UnsupportedTypeError(DocumentReaderError):
    """Raised when document type has no extractor."""

    kind = ErrorKind.UNSUPPORTED
