from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ValidationIssue:
    """A single finding against a field path such as ``buyerInfo.email``."""

    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    """Blocking errors, non-blocking warnings and informational notes.

    A result is acceptable iff ``errors`` is empty; warnings and info never
    block persistence.
    """

    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()
    info: tuple[ValidationIssue, ...] = ()

    @property
    def is_acceptable(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
            info=self.info + other.info,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "acceptable": self.is_acceptable,
            "errors": [_issue_to_dict(i) for i in self.errors],
            "warnings": [_issue_to_dict(i) for i in self.warnings],
            "info": [_issue_to_dict(i) for i in self.info],
        }


@dataclass
class ValidationCollector:
    """Accumulates issues while a candidate record is being checked."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    info: list[ValidationIssue] = field(default_factory=list)

    def error(self, field_path: str, message: str) -> None:
        self.errors.append(ValidationIssue(field_path, message))

    def warning(self, field_path: str, message: str) -> None:
        self.warnings.append(ValidationIssue(field_path, message))

    def note(self, field_path: str, message: str) -> None:
        self.info.append(ValidationIssue(field_path, message))

    def result(self) -> ValidationResult:
        return ValidationResult(
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            info=tuple(self.info),
        )


def _issue_to_dict(issue: ValidationIssue) -> dict[str, str]:
    return {"field": issue.field, "message": issue.message}
