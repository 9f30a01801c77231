from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from docextract.database.models import DocumentRecord


class DocumentSummary(BaseModel):
    id: str
    name: str
    original_filename: str
    file_type: str
    file_size_bytes: int
    extraction_state: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentSummary":
        return cls(
            id=record.id,
            name=record.display_name,
            original_filename=record.original_filename,
            file_type=record.file_type.value,
            file_size_bytes=record.file_size_bytes,
            extraction_state=record.extraction_state.value,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class DocumentDetail(DocumentSummary):
    last_error: Optional[str] = None
    extraction_attempt: int = 0

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "DocumentDetail":
        summary = DocumentSummary.from_record(record)
        return cls(
            **summary.model_dump(),
            last_error=record.last_error,
            extraction_attempt=record.extraction_attempt,
        )


class DocumentEnvelope(BaseModel):
    document: DocumentSummary


class DocumentDetailEnvelope(BaseModel):
    document: DocumentDetail


class DocumentListResponse(BaseModel):
    count: int
    documents: list[DocumentSummary]


class ExtractionDataResponse(BaseModel):
    data: dict[str, Any]


class ExtractionStatusResponse(BaseModel):
    status: str
    error: Optional[str] = None


class ProcessAcceptedResponse(BaseModel):
    documentId: str


class DeleteResponse(BaseModel):
    deleted: bool = True
    id: str


class ErrorResponse(BaseModel):
    error: str
    message: str = ""
