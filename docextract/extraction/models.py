from dataclasses import dataclass

from docextract.database.models import DocumentRecord, FileType


@dataclass(frozen=True)
class ExtractionJob:
    """One admitted extraction attempt for a document."""

    document_id: str
    blob_key: str
    file_type: FileType
    attempt: int

    @classmethod
    def for_record(cls, record: DocumentRecord) -> "ExtractionJob":
        return cls(
            document_id=record.id,
            blob_key=record.blob_key,
            file_type=record.file_type,
            attempt=record.extraction_attempt,
        )


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of asking the scheduler to extract a document."""

    document_id: str
    accepted: bool
    reason: str | None = None

    @classmethod
    def admitted(cls, document_id: str) -> "SubmitResult":
        return cls(document_id=document_id, accepted=True)

    @classmethod
    def rejected(cls, document_id: str, reason: str) -> "SubmitResult":
        return cls(document_id=document_id, accepted=False, reason=reason)
