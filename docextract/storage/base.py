from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for durable storage of uploaded file bytes."""

    @abstractmethod
    def store(self, data: bytes, suffix: str = "") -> str:
        """Persist bytes and return an opaque key for them.

        Raises:
            BlobStoreError: if the bytes cannot be written.
        """

    @abstractmethod
    def read(self, key: str) -> bytes:
        """Return the bytes stored under ``key``.

        Raises:
            BlobNotFoundError: if nothing is stored under ``key``.
            BlobStoreError: on any other read failure.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the blob under ``key``. Missing blobs are ignored.

        Raises:
            BlobStoreError: if the blob exists but cannot be removed.
        """
