from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from po_processor.purchase_order.status import (
    InvalidStatusTransitionError,
    POStatus,
    allowed_transitions,
)

# Totals are kept to cents; anything within half a cent reconciles.
TOTAL_EPSILON = 0.005


@dataclass(frozen=True)
class BuyerInfo:
    """Buyer contact as printed on the purchase order."""

    first_name: str
    last_name: str
    email: str
    original_format: str | None = None

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class DeliveryLocation:
    """Receiving location (distribution centre) for the order."""

    name: str
    address: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class DeliveryInfo:
    date: str | None = None
    instructions: str | None = None


@dataclass(frozen=True)
class POHeader:
    po_number: str
    buyer: BuyerInfo
    location: DeliveryLocation
    status: POStatus = POStatus.UPLOADED
    order_date: str | None = None
    oc_number: str | None = None
    delivery: DeliveryInfo = field(default_factory=DeliveryInfo)


@dataclass(frozen=True)
class LineItem:
    """A single ordered product."""

    code: str
    quantity: float
    unit_cost: float
    line_total: float
    description: str = ""
    item_code: str | None = None
    pack_size: str | None = None


@dataclass(frozen=True)
class Weights:
    gross: float
    net: float


@dataclass(frozen=True)
class HistoryEntry:
    """One status transition in the order's append-only history."""

    status: POStatus
    timestamp: datetime
    user: str
    notes: str = ""


@dataclass(frozen=True)
class PurchaseOrder:
    """Structured purchase order produced by the extraction pipeline.

    Instances are immutable. Edits go through ``with_line_items``,
    ``with_notes`` and ``transition_to``, each of which returns a new record.
    """

    header: POHeader
    line_items: tuple[LineItem, ...]
    weights: Weights
    total: float
    revision: int = 1
    revision_info: str = "Initial version"
    notes: str = ""
    history: tuple[HistoryEntry, ...] = ()

    def __post_init__(self) -> None:
        if not self.header.po_number or not self.header.po_number.strip():
            raise ValueError("PurchaseOrder requires a non-empty PO number")
        if self.revision < 1:
            raise ValueError(f"revision must be >= 1, got {self.revision}")
        if abs(self.total - self.line_items_total) > TOTAL_EPSILON:
            raise ValueError(
                f"total {self.total} must equal the sum of line totals {self.line_items_total}"
            )

    @property
    def po_number(self) -> str:
        return self.header.po_number

    @property
    def status(self) -> POStatus:
        return self.header.status

    @property
    def line_items_total(self) -> float:
        return round(sum(item.line_total for item in self.line_items), 2)

    def with_line_items(
        self,
        line_items: list[LineItem] | tuple[LineItem, ...],
        revision_info: str = "",
    ) -> "PurchaseOrder":
        """Replace the line items; bumps the revision and recomputes the total."""
        items = tuple(line_items)
        new_revision = self.revision + 1
        return replace(
            self,
            line_items=items,
            total=round(sum(item.line_total for item in items), 2),
            revision=new_revision,
            revision_info=revision_info or f"Revision {new_revision}",
        )

    def with_notes(self, notes: str) -> "PurchaseOrder":
        return replace(self, notes=notes)

    def transition_to(
        self,
        status: POStatus,
        user: str,
        notes: str = "",
        at: datetime | None = None,
    ) -> "PurchaseOrder":
        """Move to ``status`` and append the change to the history."""
        if status not in allowed_transitions(self.header.status):
            raise InvalidStatusTransitionError(
                f"Invalid transition: {self.header.status.value} -> {status.value}"
            )
        entry = HistoryEntry(
            status=status,
            timestamp=at or datetime.now(timezone.utc),
            user=user,
            notes=notes,
        )
        return replace(
            self,
            header=replace(self.header, status=status),
            history=(*self.history, entry),
        )

    def to_record(self) -> dict[str, Any]:
        """Render the camelCase record consumed by the persistence layer."""
        header = self.header
        return {
            "header": {
                "poNumber": header.po_number,
                "ocNumber": header.oc_number,
                "status": header.status.value,
                "orderDate": header.order_date,
                "buyerInfo": {
                    "firstName": header.buyer.first_name,
                    "lastName": header.buyer.last_name,
                    "email": header.buyer.email,
                    "originalFormat": header.buyer.original_format,
                },
                "syscoLocation": {
                    "name": header.location.name,
                    "address": header.location.address,
                    "region": header.location.region,
                },
                "deliveryInfo": {
                    "date": header.delivery.date,
                    "instructions": header.delivery.instructions,
                },
            },
            "products": [
                {
                    "supc": item.code,
                    "itemCode": item.item_code,
                    "description": item.description,
                    "packSize": item.pack_size,
                    "quantity": item.quantity,
                    "fobCost": item.unit_cost,
                    "total": item.line_total,
                }
                for item in self.line_items
            ],
            "weights": {
                "grossWeight": self.weights.gross,
                "netWeight": self.weights.net,
            },
            "totalCost": self.total,
            "revision": self.revision,
            "revisionInfo": self.revision_info,
            "notes": self.notes,
            "history": [
                {
                    "status": entry.status.value,
                    "timestamp": entry.timestamp.isoformat(),
                    "user": entry.user,
                    "notes": entry.notes,
                }
                for entry in self.history
            ],
        }
