"""Closed failure taxonomy for the ingestion pipeline.

Every fault that leaves a pipeline stage is one of six variants below. Each
variant carries a ``kind`` tag; consumers dispatch on the tag, never on the
variant's Python type.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from po_processor.structuring.models import TokenUsage
    from po_processor.validation.models import ValidationIssue, ValidationResult


class FailureKind(str, Enum):
    """Tag shared by all failure variants."""

    VALIDATION = "validation"
    PROCESSING = "processing"
    CONFIGURATION = "configuration"
    FEATURE = "feature"
    LLM = "llm"
    PARSING = "parsing"


class RecoveryStrategy(str, Enum):
    """Caller-facing action derived from a failure kind."""

    RETRY = "retry"
    FALLBACK = "fallback"
    MANUAL = "manual"
    ABORT = "abort"


@dataclass(frozen=True)
class ValidationFailure:
    """Candidate record failed the acceptability check."""

    kind: FailureKind = field(default=FailureKind.VALIDATION, init=False)
    message: str = "Validation failed"
    result: "ValidationResult | None" = None

    @property
    def issues(self) -> "tuple[ValidationIssue, ...]":
        if self.result is None:
            return ()
        return self.result.errors

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "validation": self.result.to_dict() if self.result is not None else None,
        }


@dataclass(frozen=True)
class OperationalFailure:
    """A stage failed for operational reasons (I/O, unexpected shape, crash)."""

    kind: FailureKind = field(default=FailureKind.PROCESSING, init=False)
    message: str = "Processing failed"
    cause: BaseException | None = None
    metrics: Mapping[str, float | int | str] = field(default_factory=dict)

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
            "metrics": dict(self.metrics),
        }


@dataclass(frozen=True)
class ConfigurationFailure:
    """The processor was built with an invalid or incomplete configuration."""

    kind: FailureKind = field(default=FailureKind.CONFIGURATION, init=False)
    message: str = "Invalid configuration"

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class FeatureFailure:
    """A requested capability is disabled or unsupported."""

    kind: FailureKind = field(default=FailureKind.FEATURE, init=False)
    message: str = "Feature unavailable"
    feature: str | None = None

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "feature": self.feature}


@dataclass(frozen=True)
class LLMFailure:
    """The structuring model call failed or returned unusable output."""

    kind: FailureKind = field(default=FailureKind.LLM, init=False)
    message: str = "Structuring failed"
    response: str | None = None
    token_usage: "TokenUsage | None" = None

    def describe(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "response": self.response,
            "token_usage": self.token_usage.to_dict() if self.token_usage is not None else None,
        }


@dataclass(frozen=True)
class ParsingFailure:
    """Document text could not be parsed into the target shape."""

    kind: FailureKind = field(default=FailureKind.PARSING, init=False)
    message: str = "Parsing failed"
    raw_content: str | None = None

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "raw_content": self.raw_content}


ProcessingFailure = (
    ValidationFailure
    | OperationalFailure
    | ConfigurationFailure
    | FeatureFailure
    | LLMFailure
    | ParsingFailure
)
