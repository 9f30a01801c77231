from collections.abc import Collection
from datetime import datetime
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from docextract.database.connection import get_connection
from docextract.database.exceptions import DocumentNotFoundError
from docextract.database.models import DocumentRecord, ExtractionState, FileType
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.extraction.state_machine import validate_payload

_COLUMNS = """
    id, owner_id, display_name, original_filename, file_type, blob_key,
    file_size_bytes, extraction_state, extracted_data, last_error,
    extraction_attempt, created_at, updated_at
"""


def _row_to_record(row: dict[str, Any]) -> DocumentRecord:
    return DocumentRecord(
        id=row["id"],
        owner_id=row["owner_id"],
        display_name=row["display_name"],
        original_filename=row["original_filename"],
        file_type=FileType(row["file_type"]),
        blob_key=row["blob_key"],
        file_size_bytes=row["file_size_bytes"],
        extraction_state=ExtractionState(row["extraction_state"]),
        extracted_data=row["extracted_data"],
        last_error=row["last_error"],
        extraction_attempt=row["extraction_attempt"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresDocumentRepository(BaseDocumentRepository):
    """Database operations for the documents table."""

    def insert(self, record: DocumentRecord) -> DocumentRecord:
        validate_payload(record.extraction_state, record.extracted_data, record.last_error)
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO documents
                    (id, owner_id, display_name, original_filename, file_type,
                     blob_key, file_size_bytes, extraction_state)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_COLUMNS}
                    """,
                    (
                        record.id,
                        record.owner_id,
                        record.display_name,
                        record.original_filename,
                        record.file_type.value,
                        record.blob_key,
                        record.file_size_bytes,
                        record.extraction_state.value,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise DocumentNotFoundError(f"Document {record.id} was not inserted")
        return _row_to_record(row)

    def find_by_id(self, document_id: str) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _row_to_record(row)

    def find_for_owner(self, document_id: str, owner_id: str) -> DocumentRecord:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM documents WHERE id = %s AND owner_id = %s",
                    (document_id, owner_id),
                )
                row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document {document_id} not found")
        return _row_to_record(row)

    def list_for_owner(self, owner_id: str) -> list[DocumentRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM documents
                    WHERE owner_id = %s
                    ORDER BY created_at DESC
                    """,
                    (owner_id,),
                )
                rows = cur.fetchall()
        return [_row_to_record(row) for row in rows]

    def delete(self, document_id: str) -> bool:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def compare_and_set_state(
        self,
        document_id: str,
        expected: Collection[ExtractionState],
        new_state: ExtractionState,
        *,
        expected_attempt: int | None = None,
        extracted_data: dict[str, Any] | None = None,
        last_error: str | None = None,
        start_attempt: bool = False,
    ) -> DocumentRecord | None:
        validate_payload(new_state, extracted_data, last_error)
        attempt_guard = "" if expected_attempt is None else "AND extraction_attempt = %(expected_attempt)s"
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    UPDATE documents
                    SET extraction_state = %(new_state)s,
                        extracted_data = %(extracted_data)s,
                        last_error = %(last_error)s,
                        extraction_attempt = extraction_attempt + %(attempt_increment)s,
                        updated_at = NOW()
                    WHERE id = %(id)s
                      AND extraction_state = ANY(%(expected)s)
                      {attempt_guard}
                    RETURNING {_COLUMNS}
                    """,
                    {
                        "id": document_id,
                        "new_state": new_state.value,
                        "extracted_data": Jsonb(extracted_data) if extracted_data is not None else None,
                        "last_error": last_error,
                        "attempt_increment": 1 if start_attempt else 0,
                        "expected": [state.value for state in expected],
                        "expected_attempt": expected_attempt,
                    },
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return None
        return _row_to_record(row)

    def fail_stale_extractions(self, older_than: datetime, last_error: str) -> list[str]:
        validate_payload(ExtractionState.FAILED, None, last_error)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE documents
                    SET extraction_state = %s,
                        extracted_data = NULL,
                        last_error = %s,
                        updated_at = NOW()
                    WHERE extraction_state = %s
                      AND updated_at < %s
                    RETURNING id
                    """,
                    (
                        ExtractionState.FAILED.value,
                        last_error,
                        ExtractionState.PROCESSING.value,
                        older_than,
                    ),
                )
                rows = cur.fetchall()
            conn.commit()
        return [row[0] for row in rows]
