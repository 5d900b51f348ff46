"""
Scheduled import job.

One tick of the job takes the import lock, checks that the migration group
is idle, imports every waiting batch directory, then releases the lock.
"""

from datetime import UTC, datetime
from pathlib import Path

from sf_import.config import MIGRATE_GROUP, ImporterConfig
from sf_import.importer.database import init_database
from sf_import.importer.engine import (
    CommandTransformEngine,
    TransformEngine,
    UnavailableTransformEngine,
)
from sf_import.importer.health import MigrationHealthChecker
from sf_import.importer.history import ImportHistory
from sf_import.importer.lock import LockManager
from sf_import.importer.migrations import MigrationRegistry
from sf_import.importer.orchestrator import ExecutionContext, ImportOrchestrator
from sf_import.importer.results import ImportResult, JobReport, JobStatus
from sf_import.importer.stager import FileStager
from sf_import.utils.logging import get_logger, log_error, log_import_summary

logger = get_logger(__name__)


class ScheduledImportJob:
    """
    Composes the lock, the health check and the orchestrator.

    Lock unavailability and a busy migration group are refusals, reported in
    the returned ``JobReport`` rather than raised. Batch failures are results
    too; a failed batch does not stop the remaining ones. The next tick is the
    retry.
    """

    def __init__(
        self,
        lock: LockManager,
        health: MigrationHealthChecker,
        stager: FileStager,
        orchestrator: ImportOrchestrator,
        history: ImportHistory | None = None,
        group: str = MIGRATE_GROUP,
    ):
        self.lock = lock
        self.health = health
        self.stager = stager
        self.orchestrator = orchestrator
        self.history = history
        self.group = group

    def tick(self) -> JobReport:
        """Run one scheduled import."""
        with self.lock.held() as acquired:
            if not acquired:
                logger.info("Import already running, skipping tick", lock_name=self.lock.name)
                return JobReport(status=JobStatus.LOCK_UNAVAILABLE)

            if not self.health.check_group_status(self.group):
                return JobReport(status=JobStatus.MIGRATION_NOT_IDLE)

            report = JobReport(status=JobStatus.COMPLETED)
            try:
                batch_dirs = self.stager.list_batch_directories()
            except OSError as e:
                log_error(
                    logger, e, "list_batch_directories", source_root=str(self.stager.source_root)
                )
                batch_dirs = []

            for batch_dir in batch_dirs:
                report.results.append(self._run_batch(batch_dir))

        log_import_summary(
            logger,
            status=report.status.value,
            batches=len(report.results),
            imported=len(report.imported),
            failed=len(report.failed),
        )
        return report

    def run_single(self, batch_dir: str | Path) -> JobReport:
        """Import one batch directory under the same lock and health gate."""
        with self.lock.held() as acquired:
            if not acquired:
                return JobReport(status=JobStatus.LOCK_UNAVAILABLE)
            if not self.health.check_group_status(self.group):
                return JobReport(status=JobStatus.MIGRATION_NOT_IDLE)
            return JobReport(status=JobStatus.COMPLETED, results=[self._run_batch(batch_dir)])

    def _run_batch(self, batch_dir: str | Path) -> ImportResult:
        started_at = datetime.now(UTC).replace(tzinfo=None)
        result = self.orchestrator.run(batch_dir)
        if self.history is not None:
            self.history.record(result, started_at=started_at)
        return result


def create_import_job(
    config: ImporterConfig,
    context: ExecutionContext = ExecutionContext.BATCH,
) -> ScheduledImportJob:
    """
    Wire a scheduled import job from configuration.

    Outside batch context the transform engine is replaced by
    ``UnavailableTransformEngine``; the orchestrator skips imports there anyway.

    Args:
        config: Loaded configuration
        context: Execution context of the caller

    Returns:
        Ready-to-run job
    """
    database_url = config.state.database_url
    init_database(database_url, config.state)

    registry = MigrationRegistry(database_url)

    engine: TransformEngine
    if context == ExecutionContext.BATCH and config.engine.command:
        engine = CommandTransformEngine(
            config.engine.command,
            registry=registry,
            timeout=config.engine.timeout,
            cwd=config.engine.working_dir,
        )
    else:
        engine = UnavailableTransformEngine()

    stager = FileStager(config.settings, config.paths, engine, group=config.engine.group)

    return ScheduledImportJob(
        lock=LockManager(database_url, name=config.lock.name, timeout=config.lock.timeout),
        health=MigrationHealthChecker(registry),
        stager=stager,
        orchestrator=ImportOrchestrator(config.settings, stager, context=context),
        history=ImportHistory(database_url),
        group=config.engine.group,
    )
