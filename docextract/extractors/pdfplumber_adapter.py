import io
from typing import Any

import pdfplumber

from docextract.extractors.base import BaseContentExtractor, build_payload
from docextract.extractors.exceptions import ExtractionError


class PdfPlumberAdapter(BaseContentExtractor):
    """Extracts page text and document info using pdfplumber."""

    def _extract_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                page_texts = [page.extract_text() or "" for page in pdf.pages]
                metadata = dict(pdf.metadata or {})
            return build_payload(page_texts, metadata)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(f"pdfplumber extraction failed: {exc}") from exc
