"""Typed outcomes of batch imports and scheduled ticks."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class ImportOutcome(StrEnum):
    """What happened to one batch directory."""

    IMPORTED = "imported"
    NO_FILES = "no_files"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureKind(StrEnum):
    """Pipeline step that failed."""

    STAGING_IO = "staging_io"
    TRANSFORM_ENGINE = "transform_engine"
    ARCHIVAL_IO = "archival_io"


class JobStatus(StrEnum):
    """Outcome of one scheduled tick."""

    COMPLETED = "completed"
    LOCK_UNAVAILABLE = "lock_unavailable"
    MIGRATION_NOT_IDLE = "migration_not_idle"


@dataclass
class ImportResult:
    """Outcome of passing one batch directory through the pipeline."""

    batch_dir: Path
    outcome: ImportOutcome
    failure_kind: FailureKind | None = None
    error: str | None = None
    files_staged: int = 0
    archived_to: Path | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != ImportOutcome.FAILED

    @classmethod
    def failed(
        cls,
        batch_dir: Path,
        kind: FailureKind,
        error: Exception,
        files_staged: int = 0,
    ) -> "ImportResult":
        return cls(
            batch_dir=batch_dir,
            outcome=ImportOutcome.FAILED,
            failure_kind=kind,
            error=str(error),
            files_staged=files_staged,
        )


@dataclass
class JobReport:
    """Outcome of one scheduled tick."""

    status: JobStatus
    results: list[ImportResult] = field(default_factory=list)

    @property
    def failed(self) -> list[ImportResult]:
        return [r for r in self.results if r.outcome == ImportOutcome.FAILED]

    @property
    def imported(self) -> list[ImportResult]:
        return [r for r in self.results if r.outcome == ImportOutcome.IMPORTED]

    @property
    def ok(self) -> bool:
        return self.status == JobStatus.COMPLETED and not self.failed
