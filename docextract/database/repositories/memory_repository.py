import copy
import threading
from collections.abc import Collection
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from docextract.database.exceptions import DocumentNotFoundError, RecordStoreError
from docextract.database.models import DocumentRecord, ExtractionState
from docextract.database.repositories.base import BaseDocumentRepository
from docextract.extraction.state_machine import validate_payload


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDocumentRepository(BaseDocumentRepository):
    """Process-local record store keyed by document ID.

    A single lock makes every check-and-set atomic. Records are copied on the
    way in and out so callers never share mutable state with the store. Only
    safe for a single service instance.
    """

    def __init__(self) -> None:
        self._records: dict[str, DocumentRecord] = {}
        self._lock = threading.Lock()

    def insert(self, record: DocumentRecord) -> DocumentRecord:
        validate_payload(record.extraction_state, record.extracted_data, record.last_error)
        now = _utcnow()
        stored = replace(
            record,
            extracted_data=copy.deepcopy(record.extracted_data),
            created_at=record.created_at or now,
            updated_at=record.updated_at or now,
        )
        with self._lock:
            if stored.id in self._records:
                raise RecordStoreError(f"Document {stored.id} already exists")
            self._records[stored.id] = stored
            return self._copy(stored)

    def find_by_id(self, document_id: str) -> DocumentRecord:
        with self._lock:
            record = self._records.get(document_id)
            if record is None:
                raise DocumentNotFoundError(f"Document {document_id} not found")
            return self._copy(record)

    def find_for_owner(self, document_id: str, owner_id: str) -> DocumentRecord:
        with self._lock:
            record = self._records.get(document_id)
            if record is None or record.owner_id != owner_id:
                raise DocumentNotFoundError(f"Document {document_id} not found")
            return self._copy(record)

    def list_for_owner(self, owner_id: str) -> list[DocumentRecord]:
        with self._lock:
            owned = [r for r in self._records.values() if r.owner_id == owner_id]
            owned.sort(key=lambda r: r.created_at or _utcnow(), reverse=True)
            return [self._copy(r) for r in owned]

    def delete(self, document_id: str) -> bool:
        with self._lock:
            return self._records.pop(document_id, None) is not None

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
        with self._lock:
            current = self._records.get(document_id)
            if current is None or current.extraction_state not in expected:
                return None
            if expected_attempt is not None and current.extraction_attempt != expected_attempt:
                return None
            updated = replace(
                current,
                extraction_state=new_state,
                extracted_data=copy.deepcopy(extracted_data),
                last_error=last_error,
                extraction_attempt=current.extraction_attempt + (1 if start_attempt else 0),
                updated_at=_utcnow(),
            )
            self._records[document_id] = updated
            return self._copy(updated)

    def fail_stale_extractions(self, older_than: datetime, last_error: str) -> list[str]:
        validate_payload(ExtractionState.FAILED, None, last_error)
        failed: list[str] = []
        with self._lock:
            for document_id, record in self._records.items():
                if record.extraction_state is not ExtractionState.PROCESSING:
                    continue
                if record.updated_at is not None and record.updated_at >= older_than:
                    continue
                self._records[document_id] = replace(
                    record,
                    extraction_state=ExtractionState.FAILED,
                    extracted_data=None,
                    last_error=last_error,
                    updated_at=_utcnow(),
                )
                failed.append(document_id)
        return failed

    @staticmethod
    def _copy(record: DocumentRecord) -> DocumentRecord:
        return replace(record, extracted_data=copy.deepcopy(record.extracted_data))
