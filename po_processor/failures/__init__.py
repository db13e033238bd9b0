from po_processor.failures.exceptions import ProcessingFailureError, as_processing_failure
from po_processor.failures.models import (
    ConfigurationFailure,
    FailureKind,
    FeatureFailure,
    LLMFailure,
    OperationalFailure,
    ParsingFailure,
    ProcessingFailure,
    RecoveryStrategy,
    ValidationFailure,
)
from po_processor.failures.resolver import resolve_strategy

__all__ = [
    "ConfigurationFailure",
    "FailureKind",
    "FeatureFailure",
    "LLMFailure",
    "OperationalFailure",
    "ParsingFailure",
    "ProcessingFailure",
    "ProcessingFailureError",
    "RecoveryStrategy",
    "ValidationFailure",
    "as_processing_failure",
    "resolve_strategy",
]
