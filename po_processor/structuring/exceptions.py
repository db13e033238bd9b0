from po_processor.structuring.models import TokenUsage


class StructuringError(Exception):
    """Raised when the structuring collaborator returns unusable output."""

    def __init__(
        self,
        message: str,
        response: str | None = None,
        token_usage: TokenUsage | None = None,
    ) -> None:
        super().__init__(message)
        self.response = response
        self.token_usage = token_usage


class StructuringNetworkError(StructuringError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
