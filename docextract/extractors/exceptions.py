class ExtractionError(Exception):
    """Raised when content cannot be extracted from a document."""


class UnsupportedFileTypeError(ExtractionError):
    """Raised when an extractor is given a file type it cannot read."""
