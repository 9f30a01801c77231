import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from docextract.config.settings import Settings
from docextract.database.connection import close_pool, get_connection, init_pool
from docextract.database.exceptions import RecordStoreError
from docextract.database.models import DocumentRecord, ExtractionState, FileType
from docextract.database.repositories.document_repository import PostgresDocumentRepository
from docextract.database.schema import create_schema
from docextract.storage.local_adapter import LocalBlobStore


def _integration_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docextract_test")
    os.environ.setdefault("DB_CONNECT_TIMEOUT_SECONDS", "3")
    return Settings(record_store="postgres")


@pytest.fixture(scope="session")
def integration_settings() -> Settings:
    return _integration_settings()


@pytest.fixture(scope="session")
def integration_pool(integration_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(integration_settings)
    except RecordStoreError as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a scratch database"
        )
    create_schema()
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def pg_repo(integration_pool: None) -> PostgresDocumentRepository:
    return PostgresDocumentRepository()


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
        conn.commit()


@pytest.fixture
def pg_blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def seed_document(
    pg_repo: PostgresDocumentRepository,
    pg_blob_store: LocalBlobStore,
    integration_cleanup: list[str],
) -> Callable[..., DocumentRecord]:
    """Insert a document row whose blob exists; rows are removed after the test."""

    def _seed(
        owner_id: str = "user-1",
        file_type: FileType = FileType.PDF,
        content: bytes = b"%PDF-1.4 stub",
    ) -> DocumentRecord:
        key = pg_blob_store.store(content, suffix=f".{file_type.value}")
        record = DocumentRecord(
            id=key.split(".")[0],
            owner_id=owner_id,
            display_name="seeded",
            original_filename=f"seeded.{file_type.value}",
            file_type=file_type,
            blob_key=key,
            file_size_bytes=len(content),
            extraction_state=ExtractionState.PENDING,
        )
        integration_cleanup.append(record.id)
        return pg_repo.insert(record)

    return _seed
