import re
from collections.abc import Mapping
from pathlib import Path

from po_processor.failures import (
    FeatureFailure,
    LLMFailure,
    ParsingFailure,
    ProcessingFailureError,
    ValidationFailure,
)
from po_processor.logging.logger import Log
from po_processor.processor.pipeline import PipelineContext, PipelineStep
from po_processor.storage.temp_file_manager import TempFileManager
from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.exceptions import StructuringError
from po_processor.structuring.models import StructuringResult
from po_processor.text_extraction.base import BaseTextExtractor
from po_processor.text_extraction.exceptions import TextExtractionError
from po_processor.validation.builder import build_purchase_order
from po_processor.validation.rules import ValidationRules
from po_processor.validation.validator import validate_candidate

MAX_RAW_CONTENT_CHARS = 2000

# A line holding both a word and a number: labels with values, table rows.
_STRUCTURE_HINT_RE = re.compile(r"[A-Za-z]{2,}[^\n]*\d|\d[^\n]*[A-Za-z]{2,}")


class LoadStep(PipelineStep):
    name = "load"

    def __init__(self, files: TempFileManager) -> None:
        self._files = files

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_bytes = self._files.read(context.scratch_path)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes from {context.scratch_path.name}")
        return context


class ExtractTextStep(PipelineStep):
    name = "extract_text"

    def __init__(self, extractor: BaseTextExtractor) -> None:
        self._extractor = extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        raw = context.raw_bytes
        if not raw:
            raise ProcessingFailureError(
                ParsingFailure(message="Uploaded document is empty", raw_content="")
            )
        if not self._extractor.supports(raw):
            suffix = Path(context.filename).suffix.lower() or "unknown"
            raise ProcessingFailureError(
                FeatureFailure(
                    message=(
                        f"Text engine '{self._extractor.name}' cannot read "
                        f"'{suffix}' documents"
                    ),
                    feature=f"{self._extractor.name}:{suffix}",
                )
            )

        try:
            text = self._extractor.extract(raw)
        except TextExtractionError as exc:
            raise ProcessingFailureError(
                ParsingFailure(message=str(exc), raw_content=_best_effort_text(raw))
            ) from exc

        if not text.strip():
            raise ProcessingFailureError(
                ParsingFailure(
                    message="No text could be extracted from the document",
                    raw_content=_best_effort_text(raw),
                )
            )
        if not _STRUCTURE_HINT_RE.search(text):
            raise ProcessingFailureError(
                ParsingFailure(
                    message="Extracted text contains no recognizable structure",
                    raw_content=text[:MAX_RAW_CONTENT_CHARS],
                )
            )

        context.extracted_text = text
        Log.info(f"Extracted {len(text)} chars from {context.filename}")
        return context


class StructureStep(PipelineStep):
    name = "structure"

    def __init__(self, structurer: BaseStructurer) -> None:
        self._structurer = structurer

    def run(self, context: PipelineContext) -> PipelineContext:
        try:
            result = self._structurer.structure(context.extracted_text)
        except ProcessingFailureError:
            raise
        except StructuringError as exc:
            raise ProcessingFailureError(
                LLMFailure(message=str(exc), response=exc.response, token_usage=exc.token_usage)
            ) from exc
        except Exception as exc:
            raise ProcessingFailureError(
                LLMFailure(message=f"Structuring collaborator failed: {exc}")
            ) from exc

        if not isinstance(result, StructuringResult) or not isinstance(result.candidate, Mapping):
            raise ProcessingFailureError(
                LLMFailure(
                    message=f"Structurer returned no candidate record: {type(result).__name__}"
                )
            )
        context.structuring = result
        Log.info(
            f"Structured {context.filename}: "
            f"{len(result.candidate.get('products') or [])} line items in candidate"
        )
        return context


class ValidateStep(PipelineStep):
    name = "validate"

    def __init__(self, rules: ValidationRules) -> None:
        self._rules = rules

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.structuring is None:
            raise ValueError("PipelineContext.structuring must be set before validation")
        candidate = context.structuring.candidate
        result = validate_candidate(candidate, self._rules)
        context.validation = result
        if not result.is_acceptable:
            raise ProcessingFailureError(
                ValidationFailure(
                    message=f"Validation failed with {len(result.errors)} blocking error(s)",
                    result=result,
                )
            )

        context.purchase_order = build_purchase_order(
            candidate, self._rules, source_name=context.filename
        )
        Log.info(
            f"Validated PO {context.purchase_order.po_number}: "
            f"{len(result.warnings)} warnings, {len(result.info)} notes"
        )
        return context


def _best_effort_text(raw: bytes) -> str:
    return raw[: MAX_RAW_CONTENT_CHARS * 4].decode("utf-8", errors="replace")[
        :MAX_RAW_CONTENT_CHARS
    ]
