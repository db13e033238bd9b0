from enum import Enum


class POStatus(str, Enum):
    """Lifecycle states of a purchase order, from upload through delivery."""

    UPLOADED = "uploaded"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    INVOICED = "invoiced"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class InvalidStatusTransitionError(ValueError):
    """Raised when a status change is not allowed by the workflow."""


def allowed_transitions(status: POStatus) -> frozenset[POStatus]:
    """Statuses reachable from ``status`` in one step."""
    if status == POStatus.UPLOADED:
        return frozenset({POStatus.CONFIRMED, POStatus.CANCELLED})
    if status == POStatus.CONFIRMED:
        return frozenset({POStatus.SHIPPED, POStatus.CANCELLED})
    if status == POStatus.SHIPPED:
        return frozenset({POStatus.INVOICED, POStatus.CANCELLED})
    if status == POStatus.INVOICED:
        return frozenset({POStatus.DELIVERED, POStatus.CANCELLED})
    return frozenset()


def is_terminal(status: POStatus) -> bool:
    return not allowed_transitions(status)


def parse_status(raw: object, default: POStatus = POStatus.UPLOADED) -> POStatus:
    """Read a status from a candidate record; case-insensitive, empty means default."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if not isinstance(raw, str):
        raise ValueError(f"status must be a string, got {type(raw).__name__}")
    try:
        return POStatus(raw.strip().lower())
    except ValueError as exc:
        allowed = [s.value for s in POStatus]
        raise ValueError(f"Unknown status '{raw}'. Choose from: {allowed}") from exc
