from dataclasses import dataclass
from pathlib import Path

from docextract.auth.identity import TokenIdentityProvider
from docextract.config.settings import Settings
from docextract.database.connection import close_pool, init_pool
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.database.repositories.document_repository import PostgresDocumentRepository
from docextract.database.repositories.factory import DocumentRepositoryFactory
from docextract.database.schema import create_schema
from docextract.documents.service import DocumentService
from docextract.extraction.job_runner import ExtractionJobRunner
from docextract.extraction.scheduler import ExtractionScheduler
from docextract.extraction.sweeper import StaleExtractionSweeper
from docextract.extractors.base import BaseContentExtractor
from docextract.extractors.factory import ContentExtractorFactory
from docextract.logging.logger import Log
from docextract.storage.base import BaseBlobStore
from docextract.storage.local_adapter import LocalBlobStore


@dataclass
class Container:
    """Every long-lived collaborator of the running service."""

    settings: Settings
    doc_repo: BaseDocumentRepository
    blob_store: BaseBlobStore
    scheduler: ExtractionScheduler
    sweeper: StaleExtractionSweeper
    service: DocumentService
    identity: TokenIdentityProvider

    @property
    def uses_database(self) -> bool:
        return isinstance(self.doc_repo, PostgresDocumentRepository)

    def start(self) -> None:
        """Open the pool when needed and start background work."""
        if self.uses_database:
            init_pool(self.settings)
            create_schema()
        self.sweeper.start()
        Log.info("Document service started")

    def stop(self) -> None:
        self.sweeper.stop(timeout=5)
        self.scheduler.shutdown(wait=True)
        if self.uses_database:
            close_pool()
        Log.info("Document service stopped")


def build_container(
    settings: Settings,
    *,
    doc_repo: BaseDocumentRepository | None = None,
    blob_store: BaseBlobStore | None = None,
    extractor: BaseContentExtractor | None = None,
    blob_root: Path | None = None,
) -> Container:
    """Build the service graph from settings; any collaborator may be overridden."""
    doc_repo = doc_repo or DocumentRepositoryFactory.create(settings)
    blob_store = blob_store or LocalBlobStore(blob_root or Path(settings.blob_storage_root))
    extractor = extractor or ContentExtractorFactory.create(settings)

    job_runner = ExtractionJobRunner(doc_repo, blob_store, extractor)
    scheduler = ExtractionScheduler(
        doc_repo, job_runner, max_workers=settings.extraction_max_workers
    )
    sweeper = StaleExtractionSweeper(
        doc_repo,
        timeout_seconds=settings.processing_timeout_seconds,
        interval_seconds=settings.sweep_interval_seconds,
    )
    service = DocumentService(
        doc_repo, blob_store, scheduler, max_upload_bytes=settings.max_upload_bytes
    )
    return Container(
        settings=settings,
        doc_repo=doc_repo,
        blob_store=blob_store,
        scheduler=scheduler,
        sweeper=sweeper,
        service=service,
        identity=TokenIdentityProvider.from_settings(settings),
    )
