"""
Import history.

Records the outcome of every batch passed through the pipeline so operators
can see what was imported, skipped or left behind after a failure.
"""

from datetime import UTC, datetime

from sqlalchemy import desc, select

from sf_import.importer.database import get_session
from sf_import.importer.models import ImportRun
from sf_import.importer.results import ImportResult
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


class ImportHistory:
    """Stores and lists ``ImportRun`` rows."""

    def __init__(self, database_url: str):
        self.database_url = database_url

    def record(self, result: ImportResult, started_at: datetime | None = None) -> int | None:
        """
        Store one batch outcome.

        History is informational: a failure to write it is logged and never
        affects the import.

        Returns:
            Row id, or None if the write failed
        """
        now = datetime.now(UTC).replace(tzinfo=None)
        try:
            with get_session(self.database_url) as session:
                run = ImportRun(
                    batch_name=result.batch_dir.name,
                    outcome=result.outcome.value,
                    failure_kind=result.failure_kind.value if result.failure_kind else None,
                    error_message=result.error,
                    files_staged=result.files_staged,
                    archived_to=str(result.archived_to) if result.archived_to else None,
                    started_at=started_at or now,
                    completed_at=now,
                )
                session.add(run)
                session.flush()
                return run.id
        except Exception as e:
            logger.warning("Failed to record import history", error=str(e))
            return None

    def recent(self, limit: int = 20) -> list[ImportRun]:
        """Most recent runs first."""
        with get_session(self.database_url) as session:
            return list(
                session.execute(
                    select(ImportRun)
                    .order_by(desc(ImportRun.started_at), desc(ImportRun.id))
                    .limit(limit)
                ).scalars()
            )
