import os
import re
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from po_processor.failures import ConfigurationFailure, OperationalFailure, ProcessingFailureError
from po_processor.logging.logger import Log
from po_processor.storage.models import CleanupReport, FileStat

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_MAX_NAME_LENGTH = 120


def sanitize_filename(original_name: str) -> str:
    """Reduce an uploaded file name to a safe basename."""
    basename = re.split(r"[\\/]", original_name or "")[-1]
    cleaned = _UNSAFE_NAME_CHARS.sub("_", basename).strip("._")
    if not cleaned:
        return "upload"
    return cleaned[-_MAX_NAME_LENGTH:]


def scratch_filename(original_name: str) -> str:
    """Build ``{time_ns}-{token}-{name}``; unique across concurrent uploads."""
    return f"{time.time_ns()}-{uuid.uuid4().hex[:8]}-{sanitize_filename(original_name)}"


class TempFileManager:
    """Owns uploaded files on scratch storage from save to delete.

    The manager never retries; every operation either succeeds or raises a
    ``processing`` failure the caller may retry on its own.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def ensure_directory(self) -> None:
        """Create the scratch directory if it does not exist yet."""
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProcessingFailureError(
                ConfigurationFailure(
                    message=f"Cannot create scratch directory {self._directory}: {exc}"
                )
            ) from exc

    def save(self, data: bytes, original_name: str) -> Path:
        """Write ``data`` to a freshly named scratch file and return its path."""
        path = self._directory / scratch_filename(original_name)
        try:
            self._write(path, data)
        except FileExistsError as exc:
            # The existing file belongs to another upload; leave it in place.
            Log.error(f"Scratch file name collision: {path.name}")
            raise ProcessingFailureError(
                OperationalFailure(
                    message=f"Scratch file already exists: {path.name}",
                    cause=exc,
                    metrics={"stage": "save", "bytes": len(data)},
                )
            ) from exc
        except OSError as exc:
            path.unlink(missing_ok=True)
            Log.error(f"Failed to save scratch file {path.name}: {exc}")
            raise ProcessingFailureError(
                OperationalFailure(
                    message=f"Failed to save scratch file: {exc}",
                    cause=exc,
                    metrics={"stage": "save", "bytes": len(data)},
                )
            ) from exc
        Log.info(f"Saved scratch file {path.name} ({len(data)} bytes)")
        return path

    def read(self, path: Path) -> bytes:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ProcessingFailureError(
                OperationalFailure(
                    message=f"Failed to read scratch file {path}: {exc}",
                    cause=exc,
                    metrics={"stage": "read"},
                )
            ) from exc
        Log.debug(f"Read {len(data)} bytes from {Path(path).name}")
        return data

    def delete(self, path: Path) -> None:
        """Remove a scratch file. Deleting a file that is already gone is a no-op."""
        try:
            removed = self._unlink(Path(path))
        except OSError as exc:
            Log.error(f"Failed to delete scratch file {path}: {exc}")
            raise ProcessingFailureError(
                OperationalFailure(
                    message=f"Failed to delete scratch file {path}: {exc}",
                    cause=exc,
                    metrics={"stage": "delete"},
                )
            ) from exc
        if removed:
            Log.info(f"Deleted scratch file {Path(path).name}")
        else:
            Log.warning(f"Scratch file already removed: {path}")

    def stat(self, path: Path) -> FileStat:
        try:
            st = Path(path).stat()
        except OSError as exc:
            raise ProcessingFailureError(
                OperationalFailure(
                    message=f"Failed to stat scratch file {path}: {exc}",
                    cause=exc,
                    metrics={"stage": "stat"},
                )
            ) from exc
        created = getattr(st, "st_birthtime", st.st_ctime)
        return FileStat(
            size=st.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            is_regular_file=Path(path).is_file(),
        )

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def list_files(self) -> list[Path]:
        """Regular files currently in the scratch directory, sorted by name."""
        try:
            return sorted(p for p in self._directory.iterdir() if p.is_file())
        except FileNotFoundError:
            return []

    def cleanup_all(self, directory: Path | None = None) -> CleanupReport:
        """Delete every entry in ``directory``; one failure never stops the rest."""
        target = Path(directory) if directory is not None else self._directory
        report = CleanupReport()
        for entry in self._entries(target):
            self._cleanup_entry(entry, report)
        Log.info(
            f"Cleaned scratch directory {target}: {len(report.deleted)} deleted, "
            f"{len(report.missing)} already gone, {len(report.failed)} failed"
        )
        return report

    def cleanup_expired(self, max_age_seconds: float, now: float | None = None) -> CleanupReport:
        """Delete entries whose modification time is older than ``max_age_seconds``."""
        current = time.time() if now is None else now
        report = CleanupReport()
        for entry in self._entries(self._directory):
            try:
                age = current - entry.stat().st_mtime
            except FileNotFoundError:
                report.missing.append(entry)
                continue
            except OSError as exc:
                report.failed.append((entry, str(exc)))
                continue
            if age > max_age_seconds:
                self._cleanup_entry(entry, report)
        Log.info(
            f"Expired scratch cleanup: {len(report.deleted)} deleted, "
            f"{len(report.failed)} failed"
        )
        return report

    @contextmanager
    def scratch_file(self, data: bytes, original_name: str) -> Iterator[Path]:
        """Save ``data`` for the duration of the block; always delete it afterwards.

        If the block raises, a failing delete is logged and the block's
        exception wins. On a clean exit a failing delete propagates.
        """
        path = self.save(data, original_name)
        try:
            yield path
        except BaseException:
            self._release_quietly(path)
            raise
        self.delete(path)

    def _release_quietly(self, path: Path) -> None:
        try:
            self.delete(path)
        except ProcessingFailureError as exc:
            Log.error(f"Scratch file {path} leaked during error handling: {exc}")

    def _cleanup_entry(self, entry: Path, report: CleanupReport) -> None:
        try:
            if self._unlink(entry):
                report.deleted.append(entry)
            else:
                report.missing.append(entry)
                Log.debug(f"Scratch entry vanished during cleanup: {entry.name}")
        except OSError as exc:
            report.failed.append((entry, str(exc)))
            Log.warning(f"Could not delete scratch entry {entry.name}: {exc}")

    @staticmethod
    def _entries(directory: Path) -> list[Path]:
        try:
            return list(directory.iterdir())
        except FileNotFoundError:
            Log.warning(f"Scratch directory does not exist: {directory}")
            return []
        except OSError as exc:
            Log.error(f"Cannot list scratch directory {directory}: {exc}")
            return []

    @staticmethod
    def _unlink(path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        with path.open("xb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
