from dataclasses import dataclass
from typing import Any

from docextract.database.models import DocumentRecord, ExtractionState


@dataclass(frozen=True)
class ExtractionResultView:
    """Point-in-time view of a document's extraction outcome."""

    status: ExtractionState
    data: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def from_record(cls, record: DocumentRecord) -> "ExtractionResultView":
        if record.extraction_state is ExtractionState.COMPLETED:
            return cls(status=record.extraction_state, data=record.extracted_data)
        if record.extraction_state is ExtractionState.FAILED:
            return cls(
                status=record.extraction_state,
                error=record.last_error or "Unknown error",
            )
        return cls(status=record.extraction_state)
