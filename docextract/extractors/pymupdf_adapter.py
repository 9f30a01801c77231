from typing import Any

import pymupdf

from docextract.extractors.base import BaseContentExtractor, build_payload
from docextract.extractors.exceptions import ExtractionError


class PyMuPdfAdapter(BaseContentExtractor):
    """Extracts page text and document info using PyMuPDF."""

    def _extract_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                page_texts = [page.get_text() for page in doc]
                metadata = dict(doc.metadata or {})
            return build_payload(page_texts, metadata)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"pymupdf extraction failed: {exc}") from exc
