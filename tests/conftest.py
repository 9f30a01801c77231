import copy
import io
import threading
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docextract.bootstrap import Container, build_container
from docextract.config.settings import Settings
from docextract.database.models import DocumentRecord, ExtractionState, FileType
from docextract.database.repositories.memory_repository import InMemoryDocumentRepository
from docextract.extractors.base import BaseContentExtractor
from docextract.storage.local_adapter import LocalBlobStore


class StubExtractor(BaseContentExtractor):
    """Returns a fixed payload or raises; can be held open with a gate."""

    def __init__(self) -> None:
        self.result: dict[str, Any] = {"pages": 3}
        self.error: Exception | None = None
        self.gate: threading.Event | None = None
        self.started = threading.Event()
        self.calls = 0

    def hold(self) -> threading.Event:
        """Block every extraction until the returned event is set."""
        self.gate = threading.Event()
        return self.gate

    def _extract_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        self.calls += 1
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        record_store="memory",
        processing_timeout_seconds=0,
        extraction_max_workers=4,
        auth_secret_key="test-secret",
    )


@pytest.fixture()
def doc_repo() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture()
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture()
def stub_extractor() -> Generator[StubExtractor, None, None]:
    extractor = StubExtractor()
    yield extractor
    if extractor.gate is not None:
        extractor.gate.set()


@pytest.fixture()
def container(
    test_settings: Settings,
    doc_repo: InMemoryDocumentRepository,
    blob_store: LocalBlobStore,
    stub_extractor: StubExtractor,
) -> Generator[Container, None, None]:
    built = build_container(
        test_settings,
        doc_repo=doc_repo,
        blob_store=blob_store,
        extractor=stub_extractor,
    )
    yield built
    if stub_extractor.gate is not None:
        stub_extractor.gate.set()
    built.scheduler.shutdown(wait=True)


@pytest.fixture()
def make_record(
    doc_repo: InMemoryDocumentRepository,
    blob_store: LocalBlobStore,
):
    """Insert a record whose blob exists; returns the stored record."""
    counter = iter(range(1, 10_000))

    def _make(
        owner_id: str = "user-1",
        file_type: FileType = FileType.PDF,
        content: bytes = b"%PDF-1.4 stub",
    ) -> DocumentRecord:
        key = blob_store.store(content, suffix=f".{file_type.value}")
        number = next(counter)
        record = DocumentRecord(
            id=f"doc-{number}",
            owner_id=owner_id,
            display_name=f"file-{number}",
            original_filename=f"file-{number}.{file_type.value}",
            file_type=file_type,
            blob_key=key,
            file_size_bytes=len(content),
            extraction_state=ExtractionState.PENDING,
        )
        return doc_repo.insert(record)

    return _make
