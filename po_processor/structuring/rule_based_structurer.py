"""Deterministic, pattern-based structuring.

A cheaper stand-in for the model stage. It reads the labelled header lines
and tabular product rows that purchase-order exports print, and leaves any
field it cannot find out of the candidate so validation reports it.
"""

import re
from typing import Any, ClassVar

from po_processor.failures import ParsingFailure, ProcessingFailureError
from po_processor.logging.logger import Log
from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.models import StructuringResult
from po_processor.validation.coercion import coerce_number

_MAX_RAW_CONTENT = 2000


class RuleBasedStructurer(BaseStructurer):
    """Extracts header fields and line items with regular expressions."""

    _FLAGS: ClassVar[int] = re.IGNORECASE | re.MULTILINE

    _PO_NUMBER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:P\.?\s?O\.?|Purchase\s+Order)\s*(?:Number|No\.?|#)?\s*[:#]?\s*([A-Z0-9][A-Z0-9-]{3,})\s*$",
        _FLAGS,
    )
    _OC_NUMBER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*O\.?\s?C\.?\s*(?:Number|No\.?|#)\s*[:#]?\s*([A-Z0-9-]+)\s*$", _FLAGS
    )
    _ORDER_DATE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*Order\s+Date\s*:?\s*(.+?)\s*$", _FLAGS
    )
    _BUYER_RE: ClassVar[re.Pattern[str]] = re.compile(r"^\s*Buyer\s*:?\s*(.+?)\s*$", _FLAGS)
    _EMAIL_RE: ClassVar[re.Pattern[str]] = re.compile(r"[\w.\-+]+@[\w.\-]+\.\w{2,}")
    _LOCATION_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:Ship\s+To|Deliver\s+To|Location)\s*:?\s*(.+?)\s*$", _FLAGS
    )
    _DELIVERY_DATE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:Delivery|Ship)\s+Date\s*:?\s*(.+?)\s*$", _FLAGS
    )
    _INSTRUCTIONS_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:Delivery\s+)?Instructions\s*:?\s*(.+?)\s*$", _FLAGS
    )
    _GROSS_WEIGHT_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*Gross\s+(?:Weight|Wt\.?)\s*:?\s*([\d,]+(?:\.\d+)?)", _FLAGS
    )
    _NET_WEIGHT_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*Net\s+(?:Weight|Wt\.?)\s*:?\s*([\d,]+(?:\.\d+)?)", _FLAGS
    )
    _TOTAL_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(?:Grand\s+)?Total(?:\s+Cost)?\s*:?\s*\$?\s*([\d,]+(?:\.\d{1,2})?)\s*$", _FLAGS
    )
    _LINE_ITEM_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"^\s*(\d{6,8})\s+(.+?)\s+(\d+(?:\.\d+)?)\s+\$?([\d,]+\.\d{2,4})\s+\$?([\d,]+\.\d{2})\s*$",
        re.MULTILINE,
    )

    def structure(self, text: str) -> StructuringResult:
        header = self._extract_header(text)
        products = self._extract_products(text)
        if "poNumber" not in header and not products:
            raise ProcessingFailureError(
                ParsingFailure(
                    message="No purchase-order fields recognized in document text",
                    raw_content=text[:_MAX_RAW_CONTENT],
                )
            )

        candidate: dict[str, Any] = {"header": header, "products": products}
        weights = self._extract_weights(text)
        if weights:
            candidate["weights"] = weights
        total = self._first_number(self._TOTAL_RE, text)
        if total is not None:
            candidate["totalCost"] = total

        Log.info(
            f"Rule-based structuring found {len(header)} header fields "
            f"and {len(products)} line items"
        )
        return StructuringResult(candidate=candidate)

    def _extract_header(self, text: str) -> dict[str, Any]:
        header: dict[str, Any] = {}
        self._put(header, "poNumber", self._first(self._PO_NUMBER_RE, text))
        self._put(header, "ocNumber", self._first(self._OC_NUMBER_RE, text))
        self._put(header, "orderDate", self._first(self._ORDER_DATE_RE, text))

        buyer = self._buyer_info(text)
        if buyer:
            header["buyerInfo"] = buyer

        location = self._first(self._LOCATION_RE, text)
        if location:
            header["syscoLocation"] = {"name": location}

        delivery: dict[str, Any] = {}
        self._put(delivery, "date", self._first(self._DELIVERY_DATE_RE, text))
        self._put(delivery, "instructions", self._first(self._INSTRUCTIONS_RE, text))
        if delivery:
            header["deliveryInfo"] = delivery
        return header

    def _buyer_info(self, text: str) -> dict[str, Any]:
        buyer: dict[str, Any] = {}
        raw_name = self._first(self._BUYER_RE, text)
        if raw_name:
            raw_name = self._EMAIL_RE.sub("", raw_name).strip(" ,<>()")
        if raw_name:
            buyer["originalFormat"] = raw_name
            if "," in raw_name:
                last, _, first = raw_name.partition(",")
            else:
                first, _, last = raw_name.rpartition(" ")
                if not first:
                    first, last = last, ""
            self._put(buyer, "firstName", first.strip())
            self._put(buyer, "lastName", last.strip())
        email = self._EMAIL_RE.search(text)
        if email:
            buyer["email"] = email.group(0)
        return buyer

    def _extract_products(self, text: str) -> list[dict[str, Any]]:
        products: list[dict[str, Any]] = []
        for match in self._LINE_ITEM_RE.finditer(text):
            supc, description, quantity, unit_cost, line_total = match.groups()
            products.append(
                {
                    "supc": supc,
                    "description": description.strip(),
                    "quantity": coerce_number(quantity)[0],
                    "fobCost": coerce_number(unit_cost)[0],
                    "total": coerce_number(line_total)[0],
                }
            )
        return products

    def _extract_weights(self, text: str) -> dict[str, Any]:
        weights: dict[str, Any] = {}
        self._put(weights, "grossWeight", self._first_number(self._GROSS_WEIGHT_RE, text))
        self._put(weights, "netWeight", self._first_number(self._NET_WEIGHT_RE, text))
        return weights

    @staticmethod
    def _first(pattern: re.Pattern[str], text: str) -> str | None:
        match = pattern.search(text)
        return match.group(1).strip() if match else None

    @classmethod
    def _first_number(cls, pattern: re.Pattern[str], text: str) -> float | None:
        raw = cls._first(pattern, text)
        return coerce_number(raw)[0] if raw is not None else None

    @staticmethod
    def _put(target: dict[str, Any], key: str, value: Any) -> None:
        if value not in (None, ""):
            target[key] = value
