from abc import ABC, abstractmethod

from po_processor.structuring.models import StructuringResult


class BaseStructurer(ABC):
    """Capability that turns extracted document text into a candidate record."""

    @abstractmethod
    def structure(self, text: str) -> StructuringResult:
        """Structure purchase-order text.

        Args:
            text: Plain text from the extraction stage.

        Returns:
            StructuringResult with the candidate record and token usage, if any.

        Raises:
            StructuringError: on an empty, malformed or unreachable response.
        """
