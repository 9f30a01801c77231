import re
import uuid
from pathlib import Path

from docextract.logging.logger import Log
from docextract.storage.base import BaseBlobStore
from docextract.storage.exceptions import (
    BlobNotFoundError,
    BlobStoreError,
    InvalidBlobKeyError,
)

_KEY_PATTERN = re.compile(r"[0-9a-f]{32}(\.[a-z0-9]{1,10})?")


class LocalBlobStore(BaseBlobStore):
    """Stores blobs as flat files under a root directory: {root}/{uuid}{suffix}"""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def store(self, data: bytes, suffix: str = "") -> str:
        key = f"{uuid.uuid4().hex}{suffix.lower()}"
        path = self._resolve_path(key)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise BlobStoreError(f"Could not write blob {key}: {exc}") from exc
        Log.debug(f"Stored {len(data)} bytes as blob {key}")
        return key

    def read(self, key: str) -> bytes:
        path = self._resolve_path(key)
        if not path.exists():
            raise BlobNotFoundError(f"Blob not found: {key}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise BlobStoreError(f"Could not read blob {key}: {exc}") from exc

    def delete(self, key: str) -> None:
        path = self._resolve_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise BlobStoreError(f"Could not delete blob {key}: {exc}") from exc

    def _resolve_path(self, key: str) -> Path:
        if not _KEY_PATTERN.fullmatch(key):
            raise InvalidBlobKeyError(f"Invalid blob key: {key!r}")
        return self._root / key
