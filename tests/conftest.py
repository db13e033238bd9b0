import copy
import io
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

PURCHASE_ORDER_LINES = [
    "PURCHASE ORDER",
    "PO Number: 1000001",
    "Order Date: 01/15/2025",
    "Buyer: Smith, Jane",
    "Email: jane.smith@example.com",
    "Ship To: Example Distribution Center",
    "Delivery Date: 2025-01-22",
    "Instructions: Dock 4",
    "1234567 Tomato Sauce 2 10.50 21.00",
    "7654321 Olive Oil 1 15.25 15.25",
    "Gross Weight: 40.5",
    "Net Weight: 36.0",
    "Total Cost: $36.25",
]

VALID_CANDIDATE: dict[str, Any] = {
    "header": {
        "poNumber": "1000001",
        "orderDate": "2025-01-15",
        "buyerInfo": {
            "firstName": "Jane",
            "lastName": "Smith",
            "email": "Jane.Smith@Example.com",
        },
        "syscoLocation": {"name": "Example Distribution Center"},
        "deliveryInfo": {"date": "2025-01-22", "instructions": "Dock 4"},
    },
    "products": [
        {"supc": "1234567", "description": "Tomato Sauce", "quantity": 2, "fobCost": 10.5, "total": 21.0},
        {"supc": "7654321", "description": "Olive Oil", "quantity": 1, "fobCost": 15.25, "total": 15.25},
    ],
    "weights": {"grossWeight": 40.5, "netWeight": 36.0},
    "totalCost": 36.25,
    "revision": 1,
}


def _render_pdf(lines: list[str]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    y = 740
    for line in lines:
        c.drawString(72, y, line)
        y -= 20
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _render_pdf(["Hello PDF World"])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def purchase_order_text() -> str:
    return "\n".join(PURCHASE_ORDER_LINES)


@pytest.fixture()
def purchase_order_pdf_bytes() -> bytes:
    """A one-page purchase order laid out as labelled lines and product rows."""
    return _render_pdf(PURCHASE_ORDER_LINES)


@pytest.fixture()
def valid_candidate() -> dict[str, Any]:
    """A candidate record that passes validation with no errors."""
    return copy.deepcopy(VALID_CANDIDATE)
