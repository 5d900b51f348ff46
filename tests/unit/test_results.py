"""
Unit tests for import result types.
"""

from pathlib import Path

from sf_import.exceptions import ArchivalIOError
from sf_import.importer.results import (
    FailureKind,
    ImportOutcome,
    ImportResult,
    JobReport,
    JobStatus,
)


def _result(outcome: ImportOutcome) -> ImportResult:
    return ImportResult(batch_dir=Path(outcome.value), outcome=outcome)


class TestImportResult:
    """Tests for per-batch results."""

    def test_failed_constructor(self):
        result = ImportResult.failed(
            Path("b1"), FailureKind.ARCHIVAL_IO, ArchivalIOError("busy"), files_staged=2
        )

        assert result.ok is False
        assert result.failure_kind == FailureKind.ARCHIVAL_IO
        assert result.error == "busy"
        assert result.files_staged == 2

    def test_non_failures_are_ok(self):
        for outcome in (ImportOutcome.IMPORTED, ImportOutcome.NO_FILES, ImportOutcome.SKIPPED):
            assert _result(outcome).ok


class TestJobReport:
    """Tests for tick reports."""

    def test_partitions_results(self):
        report = JobReport(
            status=JobStatus.COMPLETED,
            results=[
                _result(ImportOutcome.IMPORTED),
                _result(ImportOutcome.FAILED),
                _result(ImportOutcome.NO_FILES),
            ],
        )

        assert [r.outcome for r in report.imported] == [ImportOutcome.IMPORTED]
        assert [r.outcome for r in report.failed] == [ImportOutcome.FAILED]
        assert report.ok is False

    def test_refusal_is_not_ok(self):
        assert JobReport(status=JobStatus.LOCK_UNAVAILABLE).ok is False
        assert JobReport(status=JobStatus.MIGRATION_NOT_IDLE).ok is False

    def test_empty_completed_is_ok(self):
        assert JobReport(status=JobStatus.COMPLETED).ok is True
