import threading
from datetime import datetime, timedelta, timezone

from docextract.database.repositories.base import BaseDocumentRepository
from docextract.logging.logger import Log


class StaleExtractionSweeper:
    """Poll loop: sweep -> sleep. Fails extractions stuck in processing.

    Jobs are not persisted across restarts, so a process crash leaves its
    documents in processing. Anything not updated within the timeout is
    failed so the owner can request extraction again.
    """

    def __init__(
        self,
        doc_repo: BaseDocumentRepository,
        timeout_seconds: int,
        interval_seconds: int,
    ) -> None:
        self._doc_repo = doc_repo
        self._timeout_seconds = timeout_seconds
        self._interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def enabled(self) -> bool:
        return self._timeout_seconds > 0

    def start(self) -> None:
        """Run the poll loop in a daemon thread."""
        if not self.enabled:
            Log.info("Stale extraction sweeper disabled")
            return
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, name="extraction-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def run(self, max_sweeps: int | None = None) -> None:
        """Main poll loop. Runs until stopped.

        If max_sweeps is set, stop after that many sweeps (for testing).
        """
        Log.info(
            f"Sweeper started: timeout={self._timeout_seconds}s "
            f"interval={self._interval_seconds}s"
        )
        sweeps = 0
        while not self._stop_event.is_set():
            self._try_sweep()
            sweeps += 1
            if max_sweeps is not None and sweeps >= max_sweeps:
                break
            self._stop_event.wait(self._interval_seconds)
        Log.info("Sweeper stopped")

    def sweep_once(self, now: datetime | None = None) -> list[str]:
        """Fail processing records older than the timeout. Returns their IDs."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(seconds=self._timeout_seconds)
        failed = self._doc_repo.fail_stale_extractions(
            cutoff,
            f"Extraction timed out after {self._timeout_seconds} seconds",
        )
        for document_id in failed:
            Log.warning(f"Document {document_id} marked as failed: extraction timed out")
        return failed

    def _try_sweep(self) -> None:
        """Run one sweep. Store errors are logged and retried on the next tick."""
        try:
            self.sweep_once()
        except Exception as exc:
            Log.warning(f"Stale extraction sweep failed, will retry: {exc}")
