from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TokenUsage:
    """Token counters reported by the model provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ChatCompletion:
    """Provider response reduced to its text and usage."""

    content: str
    token_usage: TokenUsage | None = None


@dataclass(frozen=True)
class StructuringResult:
    """Output of the structuring stage: a candidate record, not yet validated."""

    candidate: dict[str, Any] = field(default_factory=dict)
    token_usage: TokenUsage | None = None
    raw_response: str | None = None
