from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class FileType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"

    @classmethod
    def from_filename(cls, filename: str) -> "FileType | None":
        """Resolve the file type from the filename extension, case-insensitively."""
        _, dot, extension = filename.rpartition(".")
        if not dot:
            return None
        try:
            return cls(extension.lower())
        except ValueError:
            return None


class ExtractionState(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class DocumentRecord:
    """Represents a row from the documents table."""

    id: str
    owner_id: str
    display_name: str
    original_filename: str
    file_type: FileType
    blob_key: str
    file_size_bytes: int
    extraction_state: ExtractionState = ExtractionState.PENDING
    extracted_data: dict[str, Any] | None = None
    last_error: str | None = None
    extraction_attempt: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
