from po_processor.text_extraction.base import BaseTextExtractor
from po_processor.text_extraction.pdfplumber_adapter import PdfPlumberAdapter
from po_processor.text_extraction.plaintext_adapter import PlainTextAdapter
from po_processor.text_extraction.pymupdf_adapter import PyMuPdfAdapter


class TextExtractorFactory:
    """Creates the text extractor named by the ``text_engine`` setting."""

    ADAPTERS: dict[str, type[BaseTextExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
        "plaintext": PlainTextAdapter,
    }

    @classmethod
    def create(cls, engine: str) -> BaseTextExtractor:
        key = engine.lower()
        adapter_cls = cls.ADAPTERS.get(key)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown text engine '{key}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
