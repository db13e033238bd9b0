import time
from collections.abc import Callable

from po_processor.config.settings import Settings
from po_processor.failures import RecoveryStrategy
from po_processor.logging.logger import Log
from po_processor.processor.models import ProcessResult, UploadedFile
from po_processor.processor.processor import Processor


class UploadRunner:
    """Run one upload and retry the outcomes classified as ``retry``."""

    def __init__(
        self,
        processor: Processor,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._processor = processor
        self._max_attempts = max_attempts
        self._backoff_seconds = max(0.0, backoff_seconds)
        self._sleep = sleep

    @classmethod
    def from_settings(cls, processor: Processor, settings: Settings) -> "UploadRunner":
        return cls(
            processor,
            max_attempts=settings.max_upload_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )

    def run(self, upload: UploadedFile) -> ProcessResult:
        """Process ``upload``, retrying with exponential backoff while allowed."""
        attempt = 1
        while True:
            Log.info(f"Running upload {upload.filename} (attempt {attempt})")
            result = self._processor.process(upload)
            if result.ok:
                Log.info(f"Upload {upload.filename} completed on attempt {attempt}")
                return result

            if result.strategy != RecoveryStrategy.RETRY:
                Log.error(
                    f"Upload {upload.filename} failed with strategy "
                    f"{result.strategy.value}; not retrying"
                )
                return result
            if attempt >= self._max_attempts:
                Log.error(
                    f"Upload {upload.filename} permanently failed after {attempt} attempts"
                )
                return result

            delay = self._backoff_seconds * 2 ** (attempt - 1)
            Log.warning(
                f"Upload {upload.filename} will be retried in {delay:.2f}s "
                f"(attempt {attempt + 1})"
            )
            self._sleep(delay)
            attempt += 1
