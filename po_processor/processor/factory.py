import os
from dataclasses import dataclass, field
from pathlib import Path

from po_processor.config.settings import Settings
from po_processor.failures import ConfigurationFailure, FeatureFailure, ProcessingFailureError
from po_processor.logging.logger import Log
from po_processor.processor.pipeline import ExtractionPipeline
from po_processor.processor.processor import Processor
from po_processor.processor.steps import ExtractTextStep, LoadStep, StructureStep, ValidateStep
from po_processor.storage.temp_file_manager import TempFileManager
from po_processor.structuring.base import BaseStructurer
from po_processor.structuring.exceptions import StructuringError
from po_processor.structuring.factory import StructurerFactory
from po_processor.structuring.rule_based_structurer import RuleBasedStructurer
from po_processor.text_extraction.base import BaseTextExtractor
from po_processor.text_extraction.factory import TextExtractorFactory
from po_processor.text_extraction.pdfplumber_adapter import PdfPlumberAdapter
from po_processor.validation.rules import ValidationRules

LLM_STRUCTURING = "llm_structuring"
RULE_BASED_STRUCTURING = "rule_based_structuring"
PROCESSING_METRICS = "processing_metrics"

KNOWN_FEATURES = frozenset({LLM_STRUCTURING, RULE_BASED_STRUCTURING, PROCESSING_METRICS})


@dataclass(frozen=True)
class ProcessorConfig:
    temp_directory: Path | None = None
    structurer: BaseStructurer | None = None
    feature_flags: frozenset[str] = frozenset({LLM_STRUCTURING})
    validation_rules: ValidationRules = field(default_factory=ValidationRules)
    text_extractor: BaseTextExtractor | None = None
    scratch_max_age_seconds: float | None = None


class ProcessorFactory:
    """Builds a ready ``Processor`` from a ``ProcessorConfig``.

    Every configuration problem is reported here, before any upload is
    accepted: unknown feature flags raise a ``feature`` failure, anything
    else a ``configuration`` failure.
    With ``scratch_max_age_seconds`` set, scratch files left behind by an
    earlier run are swept once the directory is ready.
    """

    @classmethod
    def create(cls, config: ProcessorConfig) -> Processor:
        flags = frozenset(config.feature_flags)
        cls._check_flags(flags)
        if LLM_STRUCTURING in flags and config.structurer is None:
            raise _configuration_error("llm_structuring is enabled but no model client is configured")

        files = cls._prepare_storage(config.temp_directory)
        if config.scratch_max_age_seconds is not None:
            files.cleanup_expired(config.scratch_max_age_seconds)
        structurer = config.structurer
        if structurer is None:
            structurer = RuleBasedStructurer()
        extractor = config.text_extractor or PdfPlumberAdapter()

        pipeline = ExtractionPipeline(
            [
                LoadStep(files),
                ExtractTextStep(extractor),
                StructureStep(structurer),
                ValidateStep(config.validation_rules),
            ]
        )
        Log.info(
            f"Processor ready: scratch={files.directory}, text engine={extractor.name}, "
            f"structurer={type(structurer).__name__}, flags={sorted(flags)}"
        )
        return Processor(files, pipeline, collect_metrics=PROCESSING_METRICS in flags)

    @staticmethod
    def _check_flags(flags: frozenset[str]) -> None:
        unknown = sorted(flags - KNOWN_FEATURES)
        if unknown:
            raise ProcessingFailureError(
                FeatureFailure(
                    message=f"Unsupported feature flag(s): {', '.join(unknown)}",
                    feature=unknown[0],
                )
            )
        llm = LLM_STRUCTURING in flags
        rule_based = RULE_BASED_STRUCTURING in flags
        if llm and rule_based:
            raise _configuration_error(
                "llm_structuring and rule_based_structuring are mutually exclusive"
            )
        if not llm and not rule_based:
            raise _configuration_error(
                "Enable exactly one of llm_structuring or rule_based_structuring"
            )

    @staticmethod
    def _prepare_storage(temp_directory: Path | None) -> TempFileManager:
        if temp_directory is None or not str(temp_directory).strip():
            raise _configuration_error("temp_directory is required")
        files = TempFileManager(Path(temp_directory))
        files.ensure_directory()
        if not files.directory.is_dir() or not os.access(files.directory, os.W_OK | os.X_OK):
            raise _configuration_error(f"Scratch directory {files.directory} is not writable")
        return files


def build_processor(settings: Settings, structurer: BaseStructurer | None = None) -> Processor:
    """Wire a processor from environment settings.

    ``structurer`` overrides the provider named in the settings, which lets
    callers share one model client between processors.
    """
    flags = frozenset(settings.feature_flags)
    try:
        extractor = TextExtractorFactory.create(settings.text_engine)
        if structurer is None and LLM_STRUCTURING in flags:
            structurer = StructurerFactory.create(settings)
    except (ValueError, StructuringError) as exc:
        raise _configuration_error(str(exc)) from exc

    return ProcessorFactory.create(
        ProcessorConfig(
            temp_directory=settings.temp_directory,
            structurer=structurer,
            feature_flags=flags,
            validation_rules=ValidationRules.from_settings(settings),
            text_extractor=extractor,
            scratch_max_age_seconds=settings.scratch_max_age_seconds,
        )
    )


def _configuration_error(message: str) -> ProcessingFailureError:
    return ProcessingFailureError(ConfigurationFailure(message=message))
