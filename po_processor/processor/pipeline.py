import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from po_processor.failures import ProcessingFailureError, as_processing_failure
from po_processor.logging.logger import Log
from po_processor.purchase_order.models import PurchaseOrder
from po_processor.structuring.models import StructuringResult
from po_processor.validation.models import ValidationResult


@dataclass(slots=True)
class PipelineContext:
    scratch_path: Path
    filename: str = ""
    raw_bytes: bytes = b""
    extracted_text: str = ""
    structuring: StructuringResult | None = None
    validation: ValidationResult = field(default_factory=ValidationResult)
    purchase_order: PurchaseOrder | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)


class PipelineStep(ABC):
    name: str = "step"

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError


class ExtractionPipeline:
    """Runs a fixed, ordered list of steps over one scratch file.

    Holds no per-run state; every run gets its own ``PipelineContext``.
    The only exception type that escapes is ``ProcessingFailureError``.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = tuple(steps)

    @property
    def steps(self) -> tuple[PipelineStep, ...]:
        return self._steps

    def run(self, scratch_path: Path) -> PurchaseOrder:
        context = self.run_with_context(scratch_path)
        assert context.purchase_order is not None
        return context.purchase_order

    def run_with_context(self, scratch_path: Path, filename: str = "") -> PipelineContext:
        context = PipelineContext(scratch_path=scratch_path, filename=filename or scratch_path.name)
        for step in self._steps:
            started = time.monotonic()
            try:
                context = step.run(context)
            except ProcessingFailureError as exc:
                Log.warning(f"Step '{step.name}' failed with {exc.kind.value}: {exc}")
                raise
            except Exception as exc:
                elapsed_ms = round((time.monotonic() - started) * 1000, 3)
                Log.exception(f"Step '{step.name}' crashed: {exc}")
                raise as_processing_failure(
                    exc, stage=step.name, metrics={"elapsed_ms": elapsed_ms, "attempts": 1}
                ) from exc
            context.stage_timings[step.name] = round((time.monotonic() - started) * 1000, 3)

        if context.purchase_order is None:
            raise as_processing_failure(
                RuntimeError("pipeline finished without a purchase order"), stage="pipeline"
            )
        return context
