class ExtractionStateError(Exception):
    """Base exception for extraction lifecycle violations."""


class InvalidTransitionError(ExtractionStateError):
    """Raised when an event is not allowed from the current state."""


class ExtractionInProgressError(InvalidTransitionError):
    """Raised when extraction is requested while one is already running."""


class NotExtractableError(ExtractionStateError):
    """Raised when extraction is requested for a file type that cannot be extracted."""


class InvalidPayloadError(ExtractionStateError):
    """Raised when extracted data or an error would be stored in the wrong state."""
