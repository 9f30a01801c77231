class RecordStoreError(Exception):
    """Raised when the document record store cannot complete an operation."""


class DocumentNotFoundError(RecordStoreError):
    """Raised when a document does not exist or is not owned by the caller."""
