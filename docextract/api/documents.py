"""
Document upload, status and result endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse

from docextract.api.dependencies import get_current_user_id, get_service
from docextract.api.schemas import (
    DeleteResponse,
    DocumentDetail,
    DocumentDetailEnvelope,
    DocumentEnvelope,
    DocumentListResponse,
    DocumentSummary,
    ErrorResponse,
    ExtractionDataResponse,
    ExtractionStatusResponse,
    ProcessAcceptedResponse,
)
from docextract.database.models import ExtractionState
from docextract.documents.service import DocumentService

documents_router = APIRouter(prefix="/documents", tags=["documents"])


@documents_router.post("", status_code=201, response_model=DocumentEnvelope)
def upload_document(
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    """Upload a PDF or DOCX. PDFs start extracting in the background."""
    file_bytes = file.file.read() if file is not None else None
    filename = file.filename if file is not None else None
    record = service.upload(user_id, file_bytes, filename, declared_name=name)
    return DocumentEnvelope(document=DocumentSummary.from_record(record))


@documents_router.get("", response_model=DocumentListResponse)
def list_documents(
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    records = service.list_records(user_id)
    return DocumentListResponse(
        count=len(records),
        documents=[DocumentSummary.from_record(r) for r in records],
    )


@documents_router.get("/{document_id}", response_model=DocumentDetailEnvelope)
def get_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    record = service.get_record(user_id, document_id)
    return DocumentDetailEnvelope(document=DocumentDetail.from_record(record))


@documents_router.get(
    "/{document_id}/data",
    response_model=ExtractionDataResponse,
    responses={202: {"model": ExtractionStatusResponse}, 400: {"model": ExtractionStatusResponse}},
)
def get_document_data(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    """200 with data once completed, 202 while pending/processing, 400 when failed."""
    view = service.get_extraction_result(user_id, document_id)
    if view.status is ExtractionState.COMPLETED:
        return ExtractionDataResponse(data=view.data or {})
    if view.status is ExtractionState.FAILED:
        body = ExtractionStatusResponse(status=view.status.value, error=view.error)
        return JSONResponse(status_code=400, content=body.model_dump())
    body = ExtractionStatusResponse(status=view.status.value)
    return JSONResponse(status_code=202, content=body.model_dump(exclude_none=True))


@documents_router.post(
    "/{document_id}/process",
    status_code=202,
    response_model=ProcessAcceptedResponse,
    responses={409: {"model": ErrorResponse}},
)
def process_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    result = service.request_extraction(user_id, document_id)
    if not result.accepted:
        body = ErrorResponse(error="AlreadyProcessing", message=result.reason or "")
        return JSONResponse(status_code=409, content=body.model_dump())
    return ProcessAcceptedResponse(documentId=result.document_id)


@documents_router.delete("/{document_id}", response_model=DeleteResponse)
def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    service: DocumentService = Depends(get_service),
):
    service.delete(user_id, document_id)
    return DeleteResponse(id=document_id)
