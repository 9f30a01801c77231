import uuid

from docextract.database.exceptions import DocumentNotFoundError
from docextract.database.models import DocumentRecord, ExtractionState, FileType
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.documents.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    MissingFileError,
    StorageError,
    UnsupportedExtractionError,
)
from docextract.documents.models import ExtractionResultView
from docextract.extraction.exceptions import NotExtractableError
from docextract.extraction.models import SubmitResult
from docextract.extraction.scheduler import ExtractionScheduler
from docextract.extraction.state_machine import is_extractable
from docextract.logging.logger import Log
from docextract.storage.base import BaseBlobStore


class DocumentService:
    """Public document operations, scoped to the calling owner.

    A record owned by someone else is reported exactly like a missing one
    (DocumentNotFoundError) so callers cannot probe for other users' IDs.
    """

    def __init__(
        self,
        doc_repo: BaseDocumentRepository,
        blob_store: BaseBlobStore,
        scheduler: ExtractionScheduler,
        max_upload_bytes: int,
    ) -> None:
        self._doc_repo = doc_repo
        self._blob_store = blob_store
        self._scheduler = scheduler
        self._max_upload_bytes = max_upload_bytes

    def upload(
        self,
        owner_id: str,
        file_bytes: bytes | None,
        original_filename: str | None,
        declared_name: str | None = None,
    ) -> DocumentRecord:
        """Store an uploaded file and create its record in pending.

        PDF uploads start extraction in the background; the outcome of that
        request is logged and never affects the upload.

        Raises:
            MissingFileError: no file bytes or filename were supplied.
            InvalidFileTypeError: the extension is not pdf or docx.
            FileTooLargeError: the file exceeds the upload limit.
            StorageError: the blob or the record could not be stored.
        """
        if file_bytes is None or not original_filename:
            raise MissingFileError("No file uploaded")

        file_type = FileType.from_filename(original_filename)
        if file_type is None:
            raise InvalidFileTypeError("Invalid file type. Only PDF and DOCX files are allowed.")

        if len(file_bytes) > self._max_upload_bytes:
            raise FileTooLargeError(
                f"File is {len(file_bytes)} bytes, the limit is {self._max_upload_bytes} bytes"
            )

        try:
            blob_key = self._blob_store.store(file_bytes, suffix=f".{file_type.value}")
        except Exception as exc:
            raise StorageError(f"Could not store uploaded file: {exc}") from exc

        record = DocumentRecord(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            display_name=(declared_name or "").strip() or original_filename,
            original_filename=original_filename,
            file_type=file_type,
            blob_key=blob_key,
            file_size_bytes=len(file_bytes),
            extraction_state=ExtractionState.PENDING,
        )
        try:
            record = self._doc_repo.insert(record)
        except Exception as exc:
            self._delete_blob_quietly(blob_key)
            raise StorageError(f"Could not create document record: {exc}") from exc

        Log.info(
            f"Document {record.id} uploaded by {owner_id}: "
            f"{original_filename} ({record.file_size_bytes} bytes, {file_type.value})"
        )
        if is_extractable(file_type):
            self._submit_in_background(record)
        return record

    def list_records(self, owner_id: str) -> list[DocumentRecord]:
        return self._doc_repo.list_for_owner(owner_id)

    def get_record(self, owner_id: str, document_id: str) -> DocumentRecord:
        return self._doc_repo.find_for_owner(document_id, owner_id)

    def request_extraction(self, owner_id: str, document_id: str) -> SubmitResult:
        """Ask for (re-)extraction of a PDF document.

        Raises:
            DocumentNotFoundError: missing or not owned.
            UnsupportedExtractionError: the document is not a PDF.
        """
        record = self._doc_repo.find_for_owner(document_id, owner_id)
        if not is_extractable(record.file_type):
            raise UnsupportedExtractionError("Only PDF documents can be processed")
        try:
            return self._scheduler.submit(document_id, owner_id=owner_id)
        except NotExtractableError as exc:
            raise UnsupportedExtractionError(str(exc)) from exc

    def get_extraction_result(self, owner_id: str, document_id: str) -> ExtractionResultView:
        record = self._doc_repo.find_for_owner(document_id, owner_id)
        return ExtractionResultView.from_record(record)

    def delete(self, owner_id: str, document_id: str) -> None:
        """Delete the blob best effort, then the record regardless of the blob outcome."""
        record = self._doc_repo.find_for_owner(document_id, owner_id)
        self._delete_blob_quietly(record.blob_key)
        if not self._doc_repo.delete(record.id):
            raise DocumentNotFoundError(f"Document {document_id} not found")
        Log.info(f"Document {record.id} deleted by {owner_id}")

    def _submit_in_background(self, record: DocumentRecord) -> None:
        try:
            result = self._scheduler.submit(record.id)
        except Exception as exc:
            Log.error(f"Background extraction for document {record.id} could not start: {exc}")
            return
        if not result.accepted:
            Log.warning(f"Background extraction for document {record.id} rejected: {result.reason}")

    def _delete_blob_quietly(self, blob_key: str) -> None:
        try:
            self._blob_store.delete(blob_key)
        except Exception as exc:
            Log.warning(f"Could not delete blob {blob_key}: {exc}")
