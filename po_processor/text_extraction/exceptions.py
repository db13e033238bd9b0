class TextExtractionError(Exception):
    """Raised when a document's text cannot be extracted."""
