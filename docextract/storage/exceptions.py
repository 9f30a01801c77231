class BlobStoreError(Exception):
    """Raised when the blob store cannot complete an operation."""


class BlobNotFoundError(BlobStoreError):
    """Raised when no blob exists under the requested key."""


class InvalidBlobKeyError(BlobStoreError):
    """Raised when a key does not name a blob inside the store."""
