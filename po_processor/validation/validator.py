"""Checks a candidate purchase-order record before it becomes a PurchaseOrder.

Field paths in issues follow the record's sections: header fields are
relative to the header (``buyerInfo.email``), line items are indexed
(``products[2].fobCost``), and root fields stand alone (``totalCost``).
"""

from collections.abc import Mapping
from typing import Any

from po_processor.purchase_order.status import POStatus, parse_status
from po_processor.validation.coercion import coerce_number, get_path, is_blank, normalize_date
from po_processor.validation.models import ValidationCollector, ValidationResult
from po_processor.validation.rules import FieldFormat, ValidationRules

_LINE_ITEM_NUMBERS = ("quantity", "fobCost", "total")


def validate_candidate(candidate: Any, rules: ValidationRules) -> ValidationResult:
    """Validate a candidate record and collect every issue found.

    Never raises for bad data; the caller decides what to do with a result
    that is not acceptable.
    """
    collector = ValidationCollector()
    if not isinstance(candidate, Mapping):
        collector.error("record", "Candidate record must be an object")
        return collector.result()

    _check_header(candidate.get("header"), rules, collector)
    line_totals = _check_line_items(candidate.get("products"), rules, collector)
    _check_weights(candidate.get("weights"), rules, collector)
    _check_total(candidate.get("totalCost"), line_totals, rules, collector)
    _check_revision(candidate.get("revision"), collector)
    return collector.result()


def _check_header(header: Any, rules: ValidationRules, collector: ValidationCollector) -> None:
    if not isinstance(header, Mapping):
        collector.error("header", "Required section missing: header")
        return

    for field_path in rules.required_header_fields:
        if is_blank(get_path(header, field_path)):
            collector.error(field_path, f"Required field missing: {field_path}")

    for field_path, fmt in rules.header_formats.items():
        value = get_path(header, field_path)
        if not is_blank(value):
            _check_format(field_path, value, fmt, rules, collector)

    for field_path in rules.optional_header_fields:
        if is_blank(get_path(header, field_path)):
            collector.note(field_path, f"Optional field not present: {field_path}")

    raw_status = header.get("status")
    try:
        status = parse_status(raw_status)
    except ValueError as exc:
        collector.warning("status", f"{exc}; new orders start as uploaded")
        return
    if status != POStatus.UPLOADED:
        collector.note("status", f"Status '{status.value}' ignored; new orders start as uploaded")


def _check_format(
    field_path: str,
    value: Any,
    fmt: FieldFormat,
    rules: ValidationRules,
    collector: ValidationCollector,
) -> None:
    report = collector.error if fmt.blocking else collector.warning
    if fmt.date:
        normalized = normalize_date(value, rules.date_formats)
        if normalized is None:
            report(field_path, f"Invalid date for {field_path}: {value!r} ({fmt.description})")
        elif normalized != str(value).strip():
            collector.note(field_path, f"Date {value!r} normalized to {normalized}")
        return
    if fmt.pattern is not None and not fmt.pattern.match(str(value).strip()):
        report(field_path, f"Invalid format for {field_path}: {value!r} ({fmt.description})")


def _check_line_items(
    raw: Any,
    rules: ValidationRules,
    collector: ValidationCollector,
) -> list[float] | None:
    """Validate line items; return their totals when every one is numeric."""
    if raw is None:
        if rules.require_line_items:
            collector.error("products", "Required field missing: products")
        return [] if not rules.require_line_items else None
    if not isinstance(raw, list):
        collector.error("products", "Invalid type for products: expected array")
        return None
    if not raw and rules.require_line_items:
        collector.error("products", "At least one line item is required")
        return []

    totals: list[float] | None = []
    for index, item in enumerate(raw):
        line_total = _check_line_item(item, index, rules, collector)
        if line_total is None or totals is None:
            totals = None
        else:
            totals.append(line_total)
    return totals


def _check_line_item(
    item: Any,
    index: int,
    rules: ValidationRules,
    collector: ValidationCollector,
) -> float | None:
    prefix = f"products[{index}]"
    if not isinstance(item, Mapping):
        collector.error(prefix, f"Line item at index {index} must be an object")
        return None

    for name in rules.required_line_item_fields:
        if is_blank(item.get(name)):
            collector.error(f"{prefix}.{name}", f"Required field missing: {prefix}.{name}")

    numbers: dict[str, float] = {}
    for name in _LINE_ITEM_NUMBERS:
        value = item.get(name)
        if is_blank(value):
            continue
        number = _read_number(f"{prefix}.{name}", value, collector)
        if number is not None:
            numbers[name] = number

    quantity = numbers.get("quantity")
    unit_cost = numbers.get("fobCost")
    line_total = numbers.get("total")
    if quantity is not None and quantity <= 0:
        collector.error(f"{prefix}.quantity", "Product quantity must be greater than 0")
    if unit_cost is not None and unit_cost < 0:
        collector.error(f"{prefix}.fobCost", "FOB cost cannot be negative")
    if (
        quantity is not None
        and unit_cost is not None
        and line_total is not None
        and abs(quantity * unit_cost - line_total) > rules.line_total_tolerance
    ):
        collector.warning(
            f"{prefix}.total",
            f"Line total {line_total:.2f} differs from quantity * FOB cost "
            f"({quantity * unit_cost:.2f})",
        )

    for name, fmt in rules.line_item_formats.items():
        value = item.get(name)
        if not is_blank(value):
            _check_format(f"{prefix}.{name}", value, fmt, rules, collector)
    return line_total


def _check_weights(raw: Any, rules: ValidationRules, collector: ValidationCollector) -> None:
    if not rules.required_weight_fields:
        return
    if not isinstance(raw, Mapping):
        collector.error("weights", "Required section missing: weights")
        return

    values: dict[str, float] = {}
    for name in rules.required_weight_fields:
        field_path = f"weights.{name}"
        value = raw.get(name)
        if is_blank(value):
            collector.error(field_path, f"Required field missing: {field_path}")
            continue
        number = _read_number(field_path, value, collector)
        if number is not None:
            values[name] = number

    gross = values.get("grossWeight")
    net = values.get("netWeight")
    if gross is not None and net is not None and gross <= net:
        collector.warning("weights", "Gross weight must be greater than net weight")


def _check_total(
    raw: Any,
    line_totals: list[float] | None,
    rules: ValidationRules,
    collector: ValidationCollector,
) -> None:
    if is_blank(raw):
        collector.error("totalCost", "Required field missing: totalCost")
        return
    total = _read_number("totalCost", raw, collector)
    if total is None or line_totals is None:
        return
    expected = sum(line_totals)
    if abs(total - expected) > rules.total_tolerance:
        collector.error(
            "totalCost",
            f"Total cost {total:.2f} must equal sum of product totals ({expected:.2f})",
        )
    elif round(total, 2) != round(expected, 2):
        collector.warning(
            "totalCost",
            f"Total cost {total:.2f} differs from sum of product totals ({expected:.2f}); "
            "the sum is used",
        )


def _check_revision(raw: Any, collector: ValidationCollector) -> None:
    if raw is None:
        collector.note("revision", "Revision not present; defaulting to 1")
        return
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
        collector.warning("revision", f"Invalid revision {raw!r}; defaulting to 1")


def _read_number(field_path: str, value: Any, collector: ValidationCollector) -> float | None:
    number, converted = coerce_number(value)
    if number is None:
        collector.error(field_path, f"Invalid type for {field_path}: expected number")
        return None
    if converted:
        collector.warning(field_path, f"Converted {value!r} to number {number}")
    return number
