"""Extraction lifecycle rules.

States move ``pending -> processing -> completed | failed``. ``completed`` and
``failed`` are terminal for one attempt only: a new request restarts the
record at ``processing``. A request while ``processing`` is rejected, never
queued. Nothing in this module touches storage; the record stores use
``sources_for`` and ``target_for`` to build their compare-and-set writes.
"""
from enum import Enum
from typing import Any

from docextract.database.models import ExtractionState, FileType
from docextract.extraction.exceptions import (
    ExtractionInProgressError,
    InvalidPayloadError,
    InvalidTransitionError,
    NotExtractableError,
)


class ExtractionEvent(str, Enum):
    REQUESTED = "requested"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


EXTRACTABLE_FILE_TYPES: frozenset[FileType] = frozenset({FileType.PDF})

_TRANSITIONS: dict[ExtractionEvent, tuple[frozenset[ExtractionState], ExtractionState]] = {
    ExtractionEvent.REQUESTED: (
        frozenset(
            {
                ExtractionState.PENDING,
                ExtractionState.COMPLETED,
                ExtractionState.FAILED,
            }
        ),
        ExtractionState.PROCESSING,
    ),
    ExtractionEvent.SUCCEEDED: (
        frozenset({ExtractionState.PROCESSING}),
        ExtractionState.COMPLETED,
    ),
    ExtractionEvent.FAILED: (
        frozenset({ExtractionState.PROCESSING}),
        ExtractionState.FAILED,
    ),
    ExtractionEvent.TIMED_OUT: (
        frozenset({ExtractionState.PROCESSING}),
        ExtractionState.FAILED,
    ),
}


def sources_for(event: ExtractionEvent) -> frozenset[ExtractionState]:
    """States from which ``event`` may fire."""
    return _TRANSITIONS[event][0]


def target_for(event: ExtractionEvent) -> ExtractionState:
    return _TRANSITIONS[event][1]


def transition(current: ExtractionState, event: ExtractionEvent) -> ExtractionState:
    """Return the state reached by applying ``event`` to ``current``.

    Raises:
        ExtractionInProgressError: extraction requested while already processing.
        InvalidTransitionError: any other event not allowed from ``current``.
    """
    sources, target = _TRANSITIONS[event]
    if current in sources:
        return target
    if event is ExtractionEvent.REQUESTED and current is ExtractionState.PROCESSING:
        raise ExtractionInProgressError("already processing")
    raise InvalidTransitionError(
        f"Event '{event.value}' is not allowed from state '{current.value}'"
    )


def is_extractable(file_type: FileType) -> bool:
    return file_type in EXTRACTABLE_FILE_TYPES


def ensure_extractable(file_type: FileType) -> None:
    """Raise NotExtractableError unless documents of ``file_type`` can be extracted."""
    if not is_extractable(file_type):
        raise NotExtractableError(
            f"Only PDF documents can be processed, got '{file_type.value}'"
        )


def validate_payload(
    state: ExtractionState,
    extracted_data: dict[str, Any] | None,
    last_error: str | None,
) -> None:
    """Check that data is only stored with ``completed`` and errors only with ``failed``."""
    if state is ExtractionState.COMPLETED:
        if extracted_data is None:
            raise InvalidPayloadError("A completed extraction requires extracted data")
        if last_error is not None:
            raise InvalidPayloadError("A completed extraction cannot carry an error")
        return
    if state is ExtractionState.FAILED:
        if not last_error:
            raise InvalidPayloadError("A failed extraction requires an error message")
        if extracted_data is not None:
            raise InvalidPayloadError("A failed extraction cannot carry extracted data")
        return
    if extracted_data is not None or last_error is not None:
        raise InvalidPayloadError(
            f"State '{state.value}' cannot carry extracted data or an error"
        )
