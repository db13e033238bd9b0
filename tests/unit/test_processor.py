import json
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from po_processor.failures import (
    FailureKind,
    OperationalFailure,
    ProcessingFailureError,
    RecoveryStrategy,
)
from po_processor.processor.factory import ProcessorConfig, ProcessorFactory
from po_processor.processor.models import ProcessResult, UploadedFile
from po_processor.processor.processor import Processor
from po_processor.storage.temp_file_manager import TempFileManager
from po_processor.structuring.example_client_adapter import ExampleClientAdapter
from po_processor.structuring.llm_structurer import LLMStructurer
from po_processor.structuring.models import ChatCompletion, StructuringResult, TokenUsage
from po_processor.text_extraction.plaintext_adapter import PlainTextAdapter
from po_processor.validation.rules import ValidationRules


def _structurer_returning(candidate: dict[str, Any]) -> MagicMock:
    structurer = MagicMock()
    structurer.structure.return_value = StructuringResult(candidate=candidate)
    return structurer


def _llm_structurer(content: str, usage: TokenUsage | None = None) -> LLMStructurer:
    client = MagicMock()
    client.create_chat_completion.return_value = ChatCompletion(content=content, token_usage=usage)
    return LLMStructurer(client=client, model="gpt-test")


def _processor(
    scratch: Path,
    structurer: Any,
    flags: frozenset[str] = frozenset({"llm_structuring"}),
    plaintext: bool = True,
) -> Processor:
    return ProcessorFactory.create(
        ProcessorConfig(
            temp_directory=scratch,
            structurer=structurer,
            feature_flags=flags,
            text_extractor=PlainTextAdapter() if plaintext else None,
        )
    )


def _upload(text: str, filename: str = "order.txt") -> UploadedFile:
    return UploadedFile(content=text.encode("utf-8"), filename=filename)


def _scratch_entries(scratch: Path) -> list[Path]:
    return list(scratch.iterdir())


class TestSuccessfulProcessing:
    def test_returns_purchase_order(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(tmp_path, _structurer_returning(valid_candidate))

        result = processor.process(_upload(purchase_order_text))

        assert result.ok
        assert result.strategy is None
        assert result.unwrap().po_number == "1000001"
        assert result.validation.is_acceptable
        assert result.metrics == {}

    def test_scratch_file_removed(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(tmp_path, _structurer_returning(valid_candidate))
        processor.process(_upload(purchase_order_text))
        assert _scratch_entries(tmp_path) == []

    def test_structurer_sees_extracted_text(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        structurer = _structurer_returning(valid_candidate)
        _processor(tmp_path, structurer).process(_upload(purchase_order_text))
        structurer.structure.assert_called_once_with(purchase_order_text)

    def test_record_is_json_serializable(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        result = _processor(tmp_path, _structurer_returning(valid_candidate)).process(
            _upload(purchase_order_text)
        )
        record = json.loads(json.dumps(result.unwrap().to_record()))
        assert record["header"]["buyerInfo"]["email"] == "jane.smith@example.com"

    def test_collects_metrics_when_enabled(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(
            tmp_path,
            _structurer_returning(valid_candidate),
            flags=frozenset({"llm_structuring", "processing_metrics"}),
        )

        result = processor.process(_upload(purchase_order_text))

        assert {"load_ms", "extract_text_ms", "structure_ms", "validate_ms", "total_ms"} <= set(
            result.metrics
        )
        assert result.metrics["file_size_bytes"] == len(purchase_order_text.encode("utf-8"))

    def test_total_comes_from_line_items_under_loose_tolerance(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        valid_candidate["totalCost"] = 40.0
        processor = ProcessorFactory.create(
            ProcessorConfig(
                temp_directory=tmp_path,
                structurer=_structurer_returning(valid_candidate),
                validation_rules=ValidationRules(total_tolerance=5.0),
                text_extractor=PlainTextAdapter(),
            )
        )

        result = processor.process(_upload(purchase_order_text))

        po = result.unwrap()
        assert po.total == po.line_items_total == 36.25
        assert "totalCost" in [issue.field for issue in result.validation.warnings]


class TestFailureOutcomes:
    def test_missing_buyer_email_is_validation_failure(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        del valid_candidate["header"]["buyerInfo"]["email"]
        processor = _processor(tmp_path, _structurer_returning(valid_candidate))

        result = processor.process(_upload(purchase_order_text))

        assert not result.ok
        assert result.failure is not None
        assert result.failure.kind == FailureKind.VALIDATION
        assert result.strategy == RecoveryStrategy.MANUAL
        assert [issue.field for issue in result.validation.errors] == ["buyerInfo.email"]
        assert _scratch_entries(tmp_path) == []

    def test_empty_model_response_with_usage(self, tmp_path: Path, purchase_order_text: str) -> None:
        usage = TokenUsage(prompt_tokens=120, completion_tokens=0, total_tokens=120)
        processor = _processor(tmp_path, _llm_structurer("", usage))

        result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.LLM
        assert result.failure.token_usage == usage  # type: ignore[union-attr]
        assert result.strategy == RecoveryStrategy.RETRY
        assert _scratch_entries(tmp_path) == []

    def test_empty_model_response_without_usage(
        self, tmp_path: Path, purchase_order_text: str
    ) -> None:
        processor = _processor(tmp_path, _llm_structurer("   "))

        result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.LLM
        assert result.failure.token_usage is None  # type: ignore[union-attr]
        assert result.strategy == RecoveryStrategy.RETRY

    @pytest.mark.parametrize(
        "returned",
        [None, StructuringResult(candidate=["not", "a", "record"]), {"header": {}}],  # type: ignore[arg-type]
    )
    def test_malformed_structurer_result_is_llm_failure(
        self, tmp_path: Path, purchase_order_text: str, returned: Any
    ) -> None:
        structurer = MagicMock()
        structurer.structure.return_value = returned
        processor = _processor(tmp_path, structurer)

        result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.LLM
        assert result.strategy == RecoveryStrategy.RETRY
        assert _scratch_entries(tmp_path) == []

    def test_unstructured_pdf_is_parsing_failure(
        self, tmp_path: Path, sample_pdf_bytes: bytes, valid_candidate: dict[str, Any]
    ) -> None:
        structurer = _structurer_returning(valid_candidate)
        processor = _processor(tmp_path, structurer, plaintext=False)

        result = processor.process(UploadedFile(content=sample_pdf_bytes, filename="hello.pdf"))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.PARSING
        assert result.strategy == RecoveryStrategy.MANUAL
        assert "Hello PDF World" in (result.failure.raw_content or "")  # type: ignore[union-attr]
        structurer.structure.assert_not_called()
        assert _scratch_entries(tmp_path) == []

    def test_unsupported_document_type_is_feature_failure(
        self, tmp_path: Path, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(tmp_path, _structurer_returning(valid_candidate), plaintext=False)

        result = processor.process(UploadedFile(content=b"PK\x03\x04 zip", filename="order.docx"))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.FEATURE
        assert result.strategy == RecoveryStrategy.ABORT

    def test_disk_full_leaves_nothing_behind(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(tmp_path, _structurer_returning(valid_candidate))

        def write_half(path: Path, data: bytes) -> None:
            path.write_bytes(data[: len(data) // 2])
            raise OSError(28, "No space left on device")

        with patch.object(TempFileManager, "_write", side_effect=write_half):
            result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.PROCESSING
        assert result.strategy == RecoveryStrategy.FALLBACK
        assert _scratch_entries(tmp_path) == []

    def test_crashing_step_is_processing_failure(
        self, tmp_path: Path, purchase_order_text: str
    ) -> None:
        structurer = MagicMock()
        structurer.structure.return_value = "not a structuring result"
        processor = _processor(tmp_path, structurer)

        result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.kind == FailureKind.PROCESSING
        assert _scratch_entries(tmp_path) == []

    def test_release_failure_after_success_is_reported(
        self, tmp_path: Path, purchase_order_text: str, valid_candidate: dict[str, Any]
    ) -> None:
        processor = _processor(tmp_path, _structurer_returning(valid_candidate))
        release_error = ProcessingFailureError(OperationalFailure(message="Failed to delete"))

        with patch.object(TempFileManager, "delete", side_effect=release_error):
            result = processor.process(_upload(purchase_order_text))

        assert result.failure is not None
        assert result.failure.message == "Failed to delete"
        assert result.strategy == RecoveryStrategy.FALLBACK

    def test_cancellation_still_releases_scratch(
        self, tmp_path: Path, purchase_order_text: str
    ) -> None:
        structurer = MagicMock()
        structurer.structure.side_effect = KeyboardInterrupt
        processor = _processor(tmp_path, structurer)

        with pytest.raises(KeyboardInterrupt):
            processor.process(_upload(purchase_order_text))

        assert _scratch_entries(tmp_path) == []

    def test_failures_carry_metrics_when_enabled(
        self, tmp_path: Path, purchase_order_text: str
    ) -> None:
        processor = _processor(
            tmp_path,
            _llm_structurer(""),
            flags=frozenset({"llm_structuring", "processing_metrics"}),
        )
        result = processor.process(_upload(purchase_order_text))
        assert "total_ms" in result.metrics


class TestScratchLifecycle:
    @pytest.mark.parametrize("outcome", ["success", "validation", "llm", "parsing"])
    def test_exactly_one_delete_per_save(
        self,
        outcome: str,
        tmp_path: Path,
        purchase_order_text: str,
        valid_candidate: dict[str, Any],
    ) -> None:
        text = purchase_order_text
        if outcome == "success":
            structurer: Any = _structurer_returning(valid_candidate)
        elif outcome == "validation":
            valid_candidate["totalCost"] = 1.0
            structurer = _structurer_returning(valid_candidate)
        elif outcome == "llm":
            structurer = _llm_structurer("not json")
        else:
            structurer = _structurer_returning(valid_candidate)
            text = "nothing useful here"
        processor = _processor(tmp_path, structurer)

        with (
            patch.object(TempFileManager, "save", autospec=True, side_effect=TempFileManager.save) as save,
            patch.object(
                TempFileManager, "delete", autospec=True, side_effect=TempFileManager.delete
            ) as delete,
        ):
            processor.process(_upload(text))

        assert save.call_count == 1
        assert delete.call_count == 1
        assert delete.call_args.args[1].parent == tmp_path
        assert _scratch_entries(tmp_path) == []


class TestConcurrency:
    def test_parallel_uploads_share_one_processor(
        self, tmp_path: Path, purchase_order_text: str
    ) -> None:
        structurer = LLMStructurer(client=ExampleClientAdapter(), model="example")
        processor = _processor(tmp_path, structurer)
        uploads = [_upload(purchase_order_text, filename=f"order-{i}.txt") for i in range(16)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results: list[ProcessResult] = list(pool.map(processor.process, uploads))

        assert all(result.ok for result in results)
        notes = sorted(result.unwrap().history[0].notes for result in results)
        assert notes == sorted(f"Extracted from order-{i}.txt" for i in range(16))
        assert _scratch_entries(tmp_path) == []
