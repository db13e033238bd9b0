from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for all document text extraction adapters."""

    name: str = "base"

    @abstractmethod
    def extract(self, document_bytes: bytes) -> str:
        """Extract plain text from a document.

        Args:
            document_bytes: Raw file content.

        Returns:
            Extracted text as a single normalized string.

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """

    @abstractmethod
    def supports(self, document_bytes: bytes) -> bool:
        """Whether this adapter can read the given document type at all."""


class PdfTextExtractor(BaseTextExtractor, ABC):
    """Shared document-type check for PDF engines."""

    PDF_MAGIC = b"%PDF-"

    def supports(self, document_bytes: bytes) -> bool:
        return document_bytes.lstrip()[:5] == self.PDF_MAGIC
