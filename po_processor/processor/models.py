from dataclasses import dataclass, field

from po_processor.failures import ProcessingFailure, ProcessingFailureError, RecoveryStrategy
from po_processor.failures import resolve_strategy
from po_processor.purchase_order.models import PurchaseOrder
from po_processor.validation.models import ValidationResult


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded document held in memory; not yet on scratch storage."""

    content: bytes
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one ``Processor.process`` call: a purchase order or a failure."""

    purchase_order: PurchaseOrder | None = None
    failure: ProcessingFailure | None = None
    validation: ValidationResult = field(default_factory=ValidationResult)
    metrics: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if (self.purchase_order is None) == (self.failure is None):
            raise ValueError("ProcessResult needs exactly one of purchase_order or failure")

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def strategy(self) -> RecoveryStrategy | None:
        """Recovery strategy for the failure, recomputed on every access."""
        if self.failure is None:
            return None
        return resolve_strategy(self.failure)

    def unwrap(self) -> PurchaseOrder:
        """Return the purchase order or raise the failure."""
        if self.failure is not None:
            raise ProcessingFailureError(self.failure)
        assert self.purchase_order is not None
        return self.purchase_order
