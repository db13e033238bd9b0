import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from po_processor.config.settings import Settings


@dataclass(frozen=True)
class FieldFormat:
    """Format constraint for one field path.

    ``date`` fields must parse with one of the rule set's date formats;
    ``pattern`` fields must match the regex. Non-blocking formats only warn.
    """

    description: str
    pattern: re.Pattern[str] | None = None
    date: bool = False
    blocking: bool = True


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_HEADER_FORMATS: dict[str, FieldFormat] = {
    "orderDate": FieldFormat("Order date in ISO format", date=True),
    "deliveryInfo.date": FieldFormat("Delivery date in ISO format", date=True),
    "buyerInfo.email": FieldFormat("Valid email address", pattern=EMAIL_PATTERN),
    "poNumber": FieldFormat(
        "PO number (6-10 digits)", pattern=re.compile(r"^\d{6,10}$"), blocking=False
    ),
}

DEFAULT_LINE_ITEM_FORMATS: dict[str, FieldFormat] = {
    "supc": FieldFormat("SUPC (6-8 digits)", pattern=re.compile(r"^\d{6,8}$"), blocking=False),
}


@dataclass(frozen=True)
class ValidationRules:
    """Rule set applied by the validate/normalize stage."""

    required_header_fields: tuple[str, ...] = (
        "poNumber",
        "buyerInfo.firstName",
        "buyerInfo.lastName",
        "buyerInfo.email",
        "syscoLocation.name",
    )
    required_line_item_fields: tuple[str, ...] = ("supc", "quantity", "fobCost", "total")
    required_weight_fields: tuple[str, ...] = ("grossWeight", "netWeight")
    optional_header_fields: tuple[str, ...] = (
        "ocNumber",
        "orderDate",
        "deliveryInfo.date",
        "deliveryInfo.instructions",
    )
    require_line_items: bool = True
    header_formats: Mapping[str, FieldFormat] = field(
        default_factory=lambda: dict(DEFAULT_HEADER_FORMATS)
    )
    line_item_formats: Mapping[str, FieldFormat] = field(
        default_factory=lambda: dict(DEFAULT_LINE_ITEM_FORMATS)
    )
    date_formats: tuple[str, ...] = ("%Y-%m-%d", "%m/%d/%Y", "%d.%m.%Y", "%B %d, %Y", "%b %d, %Y")
    total_tolerance: float = 0.01
    line_total_tolerance: float = 0.01
    default_revision_info: str = "Initial version"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ValidationRules":
        return cls(total_tolerance=settings.total_tolerance)
