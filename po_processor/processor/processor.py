import time

from po_processor.failures import (
    FailureKind,
    ProcessingFailureError,
    ValidationFailure,
    as_processing_failure,
)
from po_processor.logging.logger import Log
from po_processor.processor.models import ProcessResult, UploadedFile
from po_processor.processor.pipeline import ExtractionPipeline, PipelineContext
from po_processor.storage.temp_file_manager import TempFileManager
from po_processor.validation.models import ValidationResult


class Processor:
    """Turns one uploaded file into a purchase order or a classified failure.

    Pipeline: save scratch -> load -> extract text -> structure -> validate
    -> delete scratch. The scratch file is released on every exit path. The
    processor keeps no per-call state, so one instance serves many uploads.
    """

    def __init__(
        self,
        files: TempFileManager,
        pipeline: ExtractionPipeline,
        collect_metrics: bool = False,
    ) -> None:
        self._files = files
        self._pipeline = pipeline
        self._collect_metrics = collect_metrics

    @property
    def pipeline(self) -> ExtractionPipeline:
        return self._pipeline

    def process(self, upload: UploadedFile) -> ProcessResult:
        """Run one extraction attempt; never raises for pipeline failures."""
        Log.info(f"Processing upload {upload.filename} ({upload.size} bytes)")
        started = time.monotonic()
        context: PipelineContext | None = None
        try:
            with self._files.scratch_file(upload.content, upload.filename) as scratch_path:
                context = self._pipeline.run_with_context(scratch_path, filename=upload.filename)
        except ProcessingFailureError as exc:
            return self._failed(upload, exc, started)
        except Exception as exc:
            Log.exception(f"Unexpected error while processing {upload.filename}: {exc}")
            return self._failed(upload, as_processing_failure(exc, stage="process"), started)

        assert context.purchase_order is not None
        Log.info(
            f"Upload {upload.filename} processed as PO {context.purchase_order.po_number} "
            f"in {self._elapsed_ms(started)} ms"
        )
        return ProcessResult(
            purchase_order=context.purchase_order,
            validation=context.validation,
            metrics=self._metrics(upload, started, context.stage_timings),
        )

    def _failed(
        self,
        upload: UploadedFile,
        exc: ProcessingFailureError,
        started: float,
    ) -> ProcessResult:
        failure = exc.failure
        validation = ValidationResult()
        if failure.kind == FailureKind.VALIDATION and isinstance(failure, ValidationFailure):
            validation = failure.result or ValidationResult()
        Log.warning(
            f"Upload {upload.filename} failed ({failure.kind.value}, "
            f"strategy={exc.strategy.value}): {failure.message}"
        )
        return ProcessResult(
            failure=failure,
            validation=validation,
            metrics=self._metrics(upload, started, {}),
        )

    def _metrics(
        self,
        upload: UploadedFile,
        started: float,
        stage_timings: dict[str, float],
    ) -> dict[str, float]:
        if not self._collect_metrics:
            return {}
        metrics: dict[str, float] = {f"{name}_ms": ms for name, ms in stage_timings.items()}
        metrics["total_ms"] = self._elapsed_ms(started)
        metrics["file_size_bytes"] = float(upload.size)
        return metrics

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return round((time.monotonic() - started) * 1000, 3)
