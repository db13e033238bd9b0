from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class FileStat:
    """Filesystem metadata for a scratch file."""

    size: int
    created_at: datetime
    modified_at: datetime
    is_regular_file: bool


@dataclass
class CleanupReport:
    """Outcome of a bulk cleanup; one entry per directory entry attempted."""

    deleted: list[Path] = field(default_factory=list)
    missing: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.deleted) + len(self.missing) + len(self.failed)
