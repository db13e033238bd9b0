from collections.abc import Mapping

from po_processor.failures.models import (
    FailureKind,
    OperationalFailure,
    ProcessingFailure,
    RecoveryStrategy,
)
from po_processor.failures.resolver import resolve_strategy


class ProcessingFailureError(Exception):
    """Carries a taxonomy failure across stage boundaries."""

    def __init__(self, failure: ProcessingFailure) -> None:
        super().__init__(failure.message)
        self.failure = failure

    @property
    def kind(self) -> FailureKind:
        return self.failure.kind

    @property
    def strategy(self) -> RecoveryStrategy:
        return resolve_strategy(self.failure)


def as_processing_failure(
    exc: BaseException,
    stage: str,
    metrics: Mapping[str, float | int | str] | None = None,
) -> ProcessingFailureError:
    """Wrap an arbitrary exception as a ``processing`` failure.

    Taxonomy errors pass through untouched so a stage never reclassifies
    a failure raised deeper down.
    """
    if isinstance(exc, ProcessingFailureError):
        return exc
    merged: dict[str, float | int | str] = {"stage": stage}
    if metrics:
        merged.update(metrics)
    return ProcessingFailureError(
        OperationalFailure(
            message=f"Stage '{stage}' failed: {exc}",
            cause=exc,
            metrics=merged,
        )
    )
