import pymupdf

from po_processor.text_extraction.base import PdfTextExtractor
from po_processor.text_extraction.exceptions import TextExtractionError


class PyMuPdfAdapter(PdfTextExtractor):
    """Extracts text from PDF using PyMuPDF."""

    name = "pymupdf"

    def extract(self, document_bytes: bytes) -> str:
        try:
            with pymupdf.open(stream=document_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
            return "\n".join(pages).strip()
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"pymupdf extraction failed: {exc}") from exc
