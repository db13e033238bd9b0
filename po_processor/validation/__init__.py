from po_processor.validation.builder import build_purchase_order
from po_processor.validation.models import ValidationIssue, ValidationResult
from po_processor.validation.rules import FieldFormat, ValidationRules
from po_processor.validation.validator import validate_candidate

__all__ = [
    "FieldFormat",
    "ValidationIssue",
    "ValidationResult",
    "ValidationRules",
    "build_purchase_order",
    "validate_candidate",
]
