class DocumentServiceError(Exception):
    """Base exception for all document service errors."""


class DocumentValidationError(DocumentServiceError):
    """Raised when a request is invalid. Never retried."""

    code = "ValidationError"


class MissingFileError(DocumentValidationError):
    """Raised when an upload carries no file."""

    code = "MissingFile"


class InvalidFileTypeError(DocumentValidationError):
    """Raised when an uploaded file is neither PDF nor DOCX."""

    code = "InvalidFileType"


class FileTooLargeError(DocumentValidationError):
    """Raised when an upload exceeds the configured size limit."""

    code = "FileTooLarge"


class UnsupportedExtractionError(DocumentValidationError):
    """Raised when extraction is requested for a non-PDF document."""

    code = "UnsupportedExtraction"


class StorageError(DocumentServiceError):
    """Raised when the blob store or record store fails during a request."""
