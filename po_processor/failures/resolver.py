from po_processor.failures.models import FailureKind, ProcessingFailure, RecoveryStrategy


def resolve_strategy(failure: ProcessingFailure) -> RecoveryStrategy:
    """Map a failure to the action the caller should take next.

    Pure and total: the answer depends on ``failure.kind`` alone, and any
    kind outside the known set falls back to manual review.
    """
    kind = getattr(failure, "kind", None)
    if kind == FailureKind.LLM:
        return RecoveryStrategy.RETRY
    if kind == FailureKind.VALIDATION:
        return RecoveryStrategy.MANUAL
    if kind == FailureKind.PROCESSING:
        return RecoveryStrategy.FALLBACK
    if kind in (FailureKind.CONFIGURATION, FailureKind.FEATURE):
        return RecoveryStrategy.ABORT
    return RecoveryStrategy.MANUAL
