from abc import ABC, abstractmethod
from collections.abc import Collection
from datetime import datetime
from typing import Any

from docextract.database.models import DocumentRecord, ExtractionState


class BaseDocumentRepository(ABC):
    """Contract for document record stores.

    Extraction state is only ever changed through ``compare_and_set_state`` and
    ``fail_stale_extractions``. Both write the state and its payload in a single
    atomic operation so readers never observe one without the other.
    """

    @abstractmethod
    def insert(self, record: DocumentRecord) -> DocumentRecord:
        """Persist a new record and return it with timestamps filled in."""

    @abstractmethod
    def find_by_id(self, document_id: str) -> DocumentRecord:
        """Find a record by ID.

        Raises:
            DocumentNotFoundError: if no record with this ID exists.
        """

    @abstractmethod
    def find_for_owner(self, document_id: str, owner_id: str) -> DocumentRecord:
        """Find a record by ID scoped to its owner.

        Raises:
            DocumentNotFoundError: if the record is missing or owned by someone else.
        """

    @abstractmethod
    def list_for_owner(self, owner_id: str) -> list[DocumentRecord]:
        """Return the owner's records, newest first."""

    @abstractmethod
    def delete(self, document_id: str) -> bool:
        """Delete a record. Returns False when nothing was deleted."""

    @abstractmethod
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
        """Atomically move a record to ``new_state`` if its state is in ``expected``.

        Args:
            document_id: Target record ID.
            expected: States the record must currently be in.
            new_state: State to write.
            expected_attempt: When set, the record's extraction_attempt must match.
            extracted_data: Payload stored with the new state (completed only).
            last_error: Error stored with the new state (failed only).
            start_attempt: Increment extraction_attempt as part of the write.

        Returns:
            The updated record, or None when the guard did not match.

        Raises:
            InvalidPayloadError: if the payload does not fit ``new_state``.
        """

    @abstractmethod
    def fail_stale_extractions(self, older_than: datetime, last_error: str) -> list[str]:
        """Fail every processing record not updated since ``older_than``.

        Returns:
            IDs of the records that were failed.
        """
