"""
Import orchestrator.

Runs one batch directory through the stager when imports are enabled and
the caller is a batch job. It never raises: every failure becomes a result.
"""

from enum import StrEnum
from pathlib import Path

from sf_import.config import ImportSettings
from sf_import.importer.results import ImportOutcome, ImportResult
from sf_import.importer.stager import FileStager
from sf_import.utils.logging import get_logger, log_error

logger = get_logger(__name__)


class ExecutionContext(StrEnum):
    """Where the orchestrator is being driven from."""

    BATCH = "batch"
    INTERACTIVE = "interactive"


class ImportOrchestrator:
    """
    Best-effort runner for single batch imports.

    Imports only run in ``ExecutionContext.BATCH``; an interactive caller
    gets a skipped result, so an import is never triggered synchronously
    from user-facing request handling.

    The orchestrator does not take the import lock or check migration
    health. Callers must do both around ``run``; see ``ScheduledImportJob``.
    """

    def __init__(
        self,
        settings: ImportSettings,
        stager: FileStager,
        context: ExecutionContext = ExecutionContext.BATCH,
    ):
        self.settings = settings
        self.stager = stager
        self.context = context

    @property
    def can_run(self) -> bool:
        return self.settings.enabled and self.context == ExecutionContext.BATCH

    def run(self, batch_dir: str | Path) -> ImportResult:
        """
        Import one batch directory.

        Args:
            batch_dir: Batch directory under the source root

        Returns:
            Outcome of the import; ``skipped`` when disabled or not in batch context
        """
        batch_dir = Path(batch_dir)

        if not self.can_run:
            logger.debug(
                "Import skipped",
                batch_dir=str(batch_dir),
                enabled=self.settings.enabled,
                context=self.context.value,
            )
            return ImportResult(batch_dir=batch_dir, outcome=ImportOutcome.SKIPPED)

        try:
            return self.stager.stage_and_import(batch_dir)
        except Exception as e:
            log_error(logger, e, context="import_batch", batch_dir=str(batch_dir))
            # Stager failures are already typed; this is anything it let through
            return ImportResult(
                batch_dir=batch_dir,
                outcome=ImportOutcome.FAILED,
                error=str(e),
            )
