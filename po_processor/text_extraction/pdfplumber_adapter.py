import io

import pdfplumber

from po_processor.text_extraction.base import PdfTextExtractor
from po_processor.text_extraction.exceptions import TextExtractionError


class PdfPlumberAdapter(PdfTextExtractor):
    """Extracts text from PDF using pdfplumber, preserving line layout."""

    name = "pdfplumber"

    def extract(self, document_bytes: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(document_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n".join(pages).strip()
        except TextExtractionError:
            raise
        except Exception as exc:
            raise TextExtractionError(f"pdfplumber extraction failed: {exc}") from exc
