from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.factory import StructurerFactory
from po_processor.structuring.llm_structurer import LLMStructurer
from po_processor.structuring.models import StructuringResult, TokenUsage
from po_processor.structuring.rule_based_structurer import RuleBasedStructurer

__all__ = [
    "BaseStructurer",
    "LLMStructurer",
    "RuleBasedStructurer",
    "StructurerFactory",
    "StructuringResult",
    "TokenUsage",
]
