import pytest

from po_processor.failures import FailureKind, ProcessingFailureError, RecoveryStrategy
from po_processor.structuring.rule_based_structurer import RuleBasedStructurer
from po_processor.validation.rules import ValidationRules
from po_processor.validation.validator import validate_candidate


class TestRuleBasedStructurer:
    def test_extracts_header(self, purchase_order_text: str) -> None:
        header = RuleBasedStructurer().structure(purchase_order_text).candidate["header"]
        assert header["poNumber"] == "1000001"
        assert header["orderDate"] == "01/15/2025"
        assert header["syscoLocation"] == {"name": "Example Distribution Center"}
        assert header["deliveryInfo"] == {"date": "2025-01-22", "instructions": "Dock 4"}

    def test_splits_last_first_buyer_name(self, purchase_order_text: str) -> None:
        buyer = RuleBasedStructurer().structure(purchase_order_text).candidate["header"]["buyerInfo"]
        assert buyer == {
            "originalFormat": "Smith, Jane",
            "firstName": "Jane",
            "lastName": "Smith",
            "email": "jane.smith@example.com",
        }

    def test_splits_first_last_buyer_name(self) -> None:
        text = "PO Number: 1000001\nBuyer: Jane Smith"
        buyer = RuleBasedStructurer().structure(text).candidate["header"]["buyerInfo"]
        assert buyer["firstName"] == "Jane"
        assert buyer["lastName"] == "Smith"

    def test_extracts_line_items(self, purchase_order_text: str) -> None:
        products = RuleBasedStructurer().structure(purchase_order_text).candidate["products"]
        assert products == [
            {"supc": "1234567", "description": "Tomato Sauce", "quantity": 2.0, "fobCost": 10.5, "total": 21.0},
            {"supc": "7654321", "description": "Olive Oil", "quantity": 1.0, "fobCost": 15.25, "total": 15.25},
        ]

    def test_extracts_weights_and_total(self, purchase_order_text: str) -> None:
        candidate = RuleBasedStructurer().structure(purchase_order_text).candidate
        assert candidate["weights"] == {"grossWeight": 40.5, "netWeight": 36.0}
        assert candidate["totalCost"] == 36.25

    def test_candidate_passes_validation(self, purchase_order_text: str) -> None:
        candidate = RuleBasedStructurer().structure(purchase_order_text).candidate
        result = validate_candidate(candidate, ValidationRules())
        assert result.errors == ()

    def test_reports_no_token_usage(self, purchase_order_text: str) -> None:
        assert RuleBasedStructurer().structure(purchase_order_text).token_usage is None

    def test_missing_fields_are_left_out(self) -> None:
        candidate = RuleBasedStructurer().structure("PO Number: 1000001").candidate
        assert candidate == {"header": {"poNumber": "1000001"}, "products": []}

    def test_unrecognized_text_is_parsing_failure(self) -> None:
        with pytest.raises(ProcessingFailureError) as exc_info:
            RuleBasedStructurer().structure("Dear team, see you on Monday 3pm.")
        assert exc_info.value.kind == FailureKind.PARSING
        assert exc_info.value.strategy == RecoveryStrategy.MANUAL
        assert exc_info.value.failure.raw_content == "Dear team, see you on Monday 3pm."  # type: ignore[union-attr]
