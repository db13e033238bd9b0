from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from po_processor.purchase_order.models import (
    BuyerInfo,
    DeliveryInfo,
    DeliveryLocation,
    HistoryEntry,
    LineItem,
    POHeader,
    PurchaseOrder,
    Weights,
)
from po_processor.purchase_order.status import POStatus
from po_processor.validation.coercion import coerce_number, get_path, normalize_date, text_or_none
from po_processor.validation.rules import ValidationRules

SYSTEM_USER = "system"


def build_purchase_order(
    candidate: Mapping[str, Any],
    rules: ValidationRules,
    source_name: str = "",
    now: datetime | None = None,
) -> PurchaseOrder:
    """Normalize an accepted candidate record into a PurchaseOrder.

    Expects ``candidate`` to have passed ``validate_candidate`` without
    blocking errors: numbers are coerced, dates are rewritten to ISO, and
    the record starts its history in the ``uploaded`` state. The total is
    the sum of the line totals; the candidate's own ``totalCost`` is only
    checked by the validator.
    """
    timestamp = now or datetime.now(timezone.utc)
    header = candidate.get("header") or {}
    line_items = tuple(_build_line_item(item) for item in candidate.get("products") or [])
    weights = candidate.get("weights") or {}
    revision = candidate.get("revision")
    if isinstance(revision, bool) or not isinstance(revision, int) or revision < 1:
        revision = 1

    return PurchaseOrder(
        header=_build_header(header, rules),
        line_items=line_items,
        weights=Weights(
            gross=_number(weights.get("grossWeight")),
            net=_number(weights.get("netWeight")),
        ),
        total=round(sum(item.line_total for item in line_items), 2),
        revision=revision,
        revision_info=text_or_none(candidate.get("revisionInfo")) or rules.default_revision_info,
        notes=text_or_none(candidate.get("notes")) or "",
        history=(
            HistoryEntry(
                status=POStatus.UPLOADED,
                timestamp=timestamp,
                user=SYSTEM_USER,
                notes=f"Extracted from {source_name}" if source_name else "Extracted from upload",
            ),
        ),
    )


def _build_header(header: Mapping[str, Any], rules: ValidationRules) -> POHeader:
    return POHeader(
        po_number=str(header.get("poNumber")).strip(),
        oc_number=text_or_none(header.get("ocNumber")),
        order_date=normalize_date(header.get("orderDate"), rules.date_formats),
        status=POStatus.UPLOADED,
        buyer=BuyerInfo(
            first_name=text_or_none(get_path(header, "buyerInfo.firstName")) or "",
            last_name=text_or_none(get_path(header, "buyerInfo.lastName")) or "",
            email=(text_or_none(get_path(header, "buyerInfo.email")) or "").lower(),
            original_format=text_or_none(get_path(header, "buyerInfo.originalFormat")),
        ),
        location=DeliveryLocation(
            name=text_or_none(get_path(header, "syscoLocation.name")) or "",
            address=text_or_none(get_path(header, "syscoLocation.address")),
            region=text_or_none(get_path(header, "syscoLocation.region")),
        ),
        delivery=DeliveryInfo(
            date=normalize_date(get_path(header, "deliveryInfo.date"), rules.date_formats),
            instructions=text_or_none(get_path(header, "deliveryInfo.instructions")),
        ),
    )


def _build_line_item(item: Mapping[str, Any]) -> LineItem:
    return LineItem(
        code=str(item.get("supc")).strip(),
        item_code=text_or_none(item.get("itemCode")),
        description=text_or_none(item.get("description")) or "",
        pack_size=text_or_none(item.get("packSize")),
        quantity=_number(item.get("quantity")),
        unit_cost=_number(item.get("fobCost")),
        line_total=_number(item.get("total")),
    )


def _number(value: Any) -> float:
    number, _converted = coerce_number(value)
    return number if number is not None else 0.0
