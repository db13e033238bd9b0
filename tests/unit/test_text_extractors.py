import pytest

from po_processor.text_extraction.exceptions import TextExtractionError
from po_processor.text_extraction.factory import TextExtractorFactory
from po_processor.text_extraction.pdfplumber_adapter import PdfPlumberAdapter
from po_processor.text_extraction.plaintext_adapter import PlainTextAdapter
from po_processor.text_extraction.pymupdf_adapter import PyMuPdfAdapter


class TestPdfPlumberAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        result = PdfPlumberAdapter().extract(sample_pdf_bytes)
        assert "Hello PDF World" in result

    def test_extract_multi_page(self, multi_page_pdf_bytes: bytes) -> None:
        result = PdfPlumberAdapter().extract(multi_page_pdf_bytes)
        assert "Page one content" in result
        assert "Page two content" in result

    def test_extract_empty_pdf_returns_empty_string(self, empty_pdf_bytes: bytes) -> None:
        assert PdfPlumberAdapter().extract(empty_pdf_bytes) == ""

    def test_extract_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(TextExtractionError):
            PdfPlumberAdapter().extract(b"%PDF-1.4 truncated garbage")

    def test_supports_only_pdf(self, sample_pdf_bytes: bytes) -> None:
        adapter = PdfPlumberAdapter()
        assert adapter.supports(sample_pdf_bytes) is True
        assert adapter.supports(b"PK\x03\x04 docx archive") is False


class TestPyMuPdfAdapter:
    def test_extract_returns_text(self, sample_pdf_bytes: bytes) -> None:
        result = PyMuPdfAdapter().extract(sample_pdf_bytes)
        assert "Hello PDF World" in result

    def test_extract_raises_on_invalid_bytes(self) -> None:
        with pytest.raises(TextExtractionError):
            PyMuPdfAdapter().extract(b"not a pdf")


class TestPlainTextAdapter:
    def test_extract_normalizes_newlines(self) -> None:
        result = PlainTextAdapter().extract(b"\xef\xbb\xbfPO Number: 1\r\nTotal: 2\r\n")
        assert result == "PO Number: 1\nTotal: 2"

    def test_rejects_binary(self) -> None:
        adapter = PlainTextAdapter()
        assert adapter.supports(b"\x00\x01\x02") is False
        assert adapter.supports(b"\xff\xfe\xfd") is False
        assert adapter.supports(b"plain text") is True


class TestTextExtractorFactory:
    def test_creates_pdfplumber(self) -> None:
        assert isinstance(TextExtractorFactory.create("pdfplumber"), PdfPlumberAdapter)

    def test_creates_pymupdf_case_insensitive(self) -> None:
        assert isinstance(TextExtractorFactory.create("PyMuPDF"), PyMuPdfAdapter)

    def test_creates_plaintext(self) -> None:
        assert isinstance(TextExtractorFactory.create("plaintext"), PlainTextAdapter)

    def test_unknown_engine_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown text engine"):
            TextExtractorFactory.create("tesseract")
