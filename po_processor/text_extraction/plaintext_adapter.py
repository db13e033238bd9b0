from po_processor.text_extraction.base import BaseTextExtractor
from po_processor.text_extraction.exceptions import TextExtractionError


class PlainTextAdapter(BaseTextExtractor):
    """Reads UTF-8 text exports (e.g. EDI or e-mail bodies saved as .txt)."""

    name = "plaintext"

    def supports(self, document_bytes: bytes) -> bool:
        if b"\x00" in document_bytes[:1024]:
            return False
        try:
            document_bytes.decode("utf-8")
        except UnicodeDecodeError:
            return False
        return True

    def extract(self, document_bytes: bytes) -> str:
        try:
            text = document_bytes.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise TextExtractionError(f"plaintext decoding failed: {exc}") from exc
        return text.replace("\r\n", "\n").strip()
