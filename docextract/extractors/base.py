from abc import ABC, abstractmethod
from typing import Any

from docextract.database.models import FileType
from docextract.extractors.exceptions import UnsupportedFileTypeError


class BaseContentExtractor(ABC):
    """Contract for all content extraction adapters."""

    SUPPORTED_FILE_TYPES: frozenset[FileType] = frozenset({FileType.PDF})

    def extract(self, file_bytes: bytes, file_type: FileType) -> dict[str, Any]:
        """Extract structured content from a stored file.

        Args:
            file_bytes: Raw file content.
            file_type: Declared type of the file.

        Returns:
            JSON-serializable dict with ``page_count``, ``text``, ``pages``
            (one ``{"page_number", "text"}`` entry per page) and ``metadata``.

        Raises:
            UnsupportedFileTypeError: if the adapter cannot read ``file_type``.
            ExtractionError: if extraction fails for any other reason.
        """
        if file_type not in self.SUPPORTED_FILE_TYPES:
            raise UnsupportedFileTypeError(
                f"{type(self).__name__} cannot extract '{file_type.value}' files"
            )
        return self._extract_pdf(file_bytes)

    @abstractmethod
    def _extract_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        raise NotImplementedError


def build_payload(page_texts: list[str], metadata: dict[str, Any]) -> dict[str, Any]:
    """Assemble the extraction payload shared by all PDF adapters."""
    pages = [
        {"page_number": number, "text": text.strip()}
        for number, text in enumerate(page_texts, start=1)
    ]
    return {
        "page_count": len(pages),
        "text": "\n".join(page["text"] for page in pages).strip(),
        "pages": pages,
        "metadata": {
            key: value
            for key, value in metadata.items()
            if isinstance(value, str) and value
        },
    }
