from typing import Any

from docextract.database.models import DocumentRecord
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.extraction.models import ExtractionJob
from docextract.extraction.state_machine import ExtractionEvent, sources_for, target_for
from docextract.extractors.base import BaseContentExtractor
from docextract.extractors.exceptions import ExtractionError
from docextract.logging.logger import Log
from docextract.storage.base import BaseBlobStore


class ExtractionJobRunner:
    """Run one extraction job and always resolve it to a terminal state."""

    def __init__(
        self,
        doc_repo: BaseDocumentRepository,
        blob_store: BaseBlobStore,
        extractor: BaseContentExtractor,
    ) -> None:
        self._doc_repo = doc_repo
        self._blob_store = blob_store
        self._extractor = extractor

    def run(self, job: ExtractionJob) -> None:
        """Execute a single job. Never raises."""
        Log.info(f"Running extraction for document {job.document_id} (attempt {job.attempt})")
        try:
            data = self._extract(job)
        except Exception as exc:
            self.fail(job, str(exc) or type(exc).__name__)
            return

        try:
            record = self._doc_repo.compare_and_set_state(
                job.document_id,
                sources_for(ExtractionEvent.SUCCEEDED),
                target_for(ExtractionEvent.SUCCEEDED),
                expected_attempt=job.attempt,
                extracted_data=data,
            )
        except Exception as exc:
            Log.error(f"Could not store extraction result for document {job.document_id}: {exc}")
            self.fail(job, f"Failed to persist extraction result: {exc}")
            return

        self._log_outcome(job, record, "completed")

    def fail(self, job: ExtractionJob, message: str) -> None:
        """Resolve the job's document to failed. Never raises.

        When the store itself is unavailable the document stays in processing
        until the stale extraction sweeper picks it up.
        """
        Log.error(f"Extraction failed for document {job.document_id}: {message}")
        try:
            record = self._doc_repo.compare_and_set_state(
                job.document_id,
                sources_for(ExtractionEvent.FAILED),
                target_for(ExtractionEvent.FAILED),
                expected_attempt=job.attempt,
                last_error=message,
            )
        except Exception as exc:
            Log.error(
                f"Could not record failure for document {job.document_id}, "
                f"leaving it in processing: {exc}"
            )
            return
        self._log_outcome(job, record, "failed")

    def _extract(self, job: ExtractionJob) -> dict[str, Any]:
        file_bytes = self._blob_store.read(job.blob_key)
        Log.info(f"Loaded {len(file_bytes)} bytes for document {job.document_id}")
        data = self._extractor.extract(file_bytes, job.file_type)
        if not isinstance(data, dict):
            raise ExtractionError(
                f"Extractor returned {type(data).__name__}, expected a mapping"
            )
        return data

    @staticmethod
    def _log_outcome(job: ExtractionJob, record: DocumentRecord | None, state: str) -> None:
        if record is None:
            Log.warning(
                f"Discarded {state} result for document {job.document_id} attempt "
                f"{job.attempt}: record was deleted or superseded"
            )
            return
        Log.info(f"Document {job.document_id} marked as {state}")
