import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures

from docextract.database.models import DocumentRecord
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.extraction.job_runner import ExtractionJobRunner
from docextract.extraction.models import ExtractionJob, SubmitResult
from docextract.extraction.state_machine import (
    ExtractionEvent,
    ensure_extractable,
    sources_for,
    target_for,
)
from docextract.logging.logger import Log

ALREADY_PROCESSING = "already processing"


class ExtractionScheduler:
    """Admit extraction requests and run them on a worker pool.

    Admission is a compare-and-set on the record store, so at most one
    extraction is active per document even across service instances. The
    caller only waits for that write; the extraction itself runs on the pool.
    """

    def __init__(
        self,
        doc_repo: BaseDocumentRepository,
        job_runner: ExtractionJobRunner,
        max_workers: int = 4,
    ) -> None:
        self._doc_repo = doc_repo
        self._job_runner = job_runner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="extraction"
        )
        self._in_flight: dict[str, Future[None]] = {}
        self._lock = threading.Lock()

    def submit(self, document_id: str, owner_id: str | None = None) -> SubmitResult:
        """Move a document to processing and dispatch its extraction.

        Raises:
            DocumentNotFoundError: if the document is missing or not owned by ``owner_id``.
            NotExtractableError: if the document is not a PDF.
        """
        record = self._load(document_id, owner_id)
        ensure_extractable(record.file_type)

        claimed = self._doc_repo.compare_and_set_state(
            document_id,
            sources_for(ExtractionEvent.REQUESTED),
            target_for(ExtractionEvent.REQUESTED),
            start_attempt=True,
        )
        if claimed is None:
            # Lost the race or already processing; re-read to tell the two apart.
            self._load(document_id, owner_id)
            Log.info(f"Rejected extraction for document {document_id}: {ALREADY_PROCESSING}")
            return SubmitResult.rejected(document_id, ALREADY_PROCESSING)

        job = ExtractionJob.for_record(claimed)
        Log.info(f"Document {document_id} marked as processing (attempt {job.attempt})")
        self._dispatch(job)
        return SubmitResult.admitted(document_id)

    def in_flight(self) -> set[str]:
        """IDs of documents with an extraction running in this process."""
        with self._lock:
            return set(self._in_flight)

    def wait_for_idle(self, timeout: float | None = None) -> bool:
        """Block until every in-flight job has finished. Returns False on timeout."""
        with self._lock:
            futures = list(self._in_flight.values())
        _done, not_done = wait_futures(futures, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        Log.info("Extraction scheduler shutting down")
        self._executor.shutdown(wait=wait)

    def _load(self, document_id: str, owner_id: str | None) -> DocumentRecord:
        if owner_id is None:
            return self._doc_repo.find_by_id(document_id)
        return self._doc_repo.find_for_owner(document_id, owner_id)

    def _dispatch(self, job: ExtractionJob) -> None:
        try:
            future = self._executor.submit(self._job_runner.run, job)
        except RuntimeError as exc:
            # Pool is shut down; the claimed record must not stay in processing.
            self._job_runner.fail(job, f"Extraction could not be scheduled: {exc}")
            return

        with self._lock:
            self._in_flight[job.document_id] = future
        future.add_done_callback(lambda done: self._on_job_done(job, done))

    def _on_job_done(self, job: ExtractionJob, future: Future[None]) -> None:
        with self._lock:
            if self._in_flight.get(job.document_id) is future:
                del self._in_flight[job.document_id]

        if future.cancelled():
            self._job_runner.fail(job, "Extraction was cancelled before it started")
            return
        exc = future.exception()
        if exc is not None:
            Log.error(f"Extraction worker crashed for document {job.document_id}: {exc}")
            self._job_runner.fail(job, str(exc) or type(exc).__name__)
