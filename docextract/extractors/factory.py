from docextract.config.settings import Settings
from docextract.extractors.base import BaseContentExtractor
from docextract.extractors.pdfplumber_adapter import PdfPlumberAdapter
from docextract.extractors.pymupdf_adapter import PyMuPdfAdapter


class ContentExtractorFactory:
    """Creates the content extractor selected by settings."""

    ADAPTERS: dict[str, type[BaseContentExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseContentExtractor:
        engine = settings.extraction_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown extraction engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
