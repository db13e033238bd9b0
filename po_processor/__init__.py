from po_processor.failures import (
    FailureKind,
    ProcessingFailureError,
    RecoveryStrategy,
    resolve_strategy,
)
from po_processor.processor.factory import ProcessorConfig, ProcessorFactory, build_processor
from po_processor.processor.models import ProcessResult, UploadedFile
from po_processor.processor.processor import Processor

__all__ = [
    "FailureKind",
    "ProcessResult",
    "ProcessingFailureError",
    "Processor",
    "ProcessorConfig",
    "ProcessorFactory",
    "RecoveryStrategy",
    "UploadedFile",
    "build_processor",
    "resolve_strategy",
]
