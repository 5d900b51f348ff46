"""
Registry of migration definitions and their statuses.

The transform engine owns the migrations; this module only records which
migrations belong to which group and what state each one is in, so the
health check can tell whether it is safe to start an import.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import IntEnum

from sqlalchemy import select, update

from sf_import.exceptions import StateError
from sf_import.importer.database import get_session
from sf_import.importer.models import MigrationDefinition
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationStatus(IntEnum):
    """Execution status of a migration definition."""

    IDLE = 0
    IMPORTING = 1
    ROLLING_BACK = 2
    STOPPING = 3
    DISABLED = 4

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    MigrationStatus.IDLE: "Idle",
    MigrationStatus.IMPORTING: "Importing",
    MigrationStatus.ROLLING_BACK: "Rolling back",
    MigrationStatus.STOPPING: "Stopping",
    MigrationStatus.DISABLED: "Disabled",
}


@dataclass(frozen=True)
class MigrationHandle:
    """Snapshot of one migration definition."""

    migration_id: str
    migration_group: str
    status: MigrationStatus
    label: str | None = None
    last_imported_at: datetime | None = None

    def get_status(self) -> MigrationStatus:
        return self.status

    def get_status_label(self) -> str:
        return self.status.label

    @property
    def is_idle(self) -> bool:
        return self.status == MigrationStatus.IDLE


class MigrationRegistry:
    """
    Database-backed registry of migration definitions.

    Usage:
        registry = MigrationRegistry(database_url)
        registry.register("sf_sessions", group="sf_import")
        ids = registry.list_ids("sf_import")
        for migration_id, migration in registry.create_instances(ids).items():
            print(migration_id, migration.get_status_label())
    """

    def __init__(self, database_url: str):
        self.database_url = database_url

    def list_ids(self, group: str) -> list[str]:
        """
        List migration identifiers tagged with a group.

        Args:
            group: Migration group identifier

        Returns:
            Migration ids ordered by id
        """
        with get_session(self.database_url) as session:
            return list(
                session.execute(
                    select(MigrationDefinition.migration_id)
                    .where(MigrationDefinition.migration_group == group)
                    .order_by(MigrationDefinition.migration_id)
                ).scalars()
            )

    def create_instances(self, migration_ids: list[str]) -> dict[str, MigrationHandle]:
        """
        Load migration definitions by id.

        Unknown ids are skipped. The result keeps the order of ``migration_ids``.

        Args:
            migration_ids: Migration identifiers

        Returns:
            Mapping of migration id to handle
        """
        if not migration_ids:
            return {}

        with get_session(self.database_url) as session:
            rows = session.execute(
                select(MigrationDefinition).where(
                    MigrationDefinition.migration_id.in_(migration_ids)
                )
            ).scalars()
            by_id = {row.migration_id: _to_handle(row) for row in rows}

        return {mid: by_id[mid] for mid in migration_ids if mid in by_id}

    def get(self, migration_id: str) -> MigrationHandle | None:
        return self.create_instances([migration_id]).get(migration_id)

    def register(
        self,
        migration_id: str,
        group: str,
        label: str | None = None,
    ) -> MigrationHandle:
        """
        Add a migration definition, or move an existing one to ``group``.

        New definitions start idle; an existing definition keeps its status.
        """
        with get_session(self.database_url) as session:
            row = session.execute(
                select(MigrationDefinition).where(MigrationDefinition.migration_id == migration_id)
            ).scalar_one_or_none()

            if row is None:
                row = MigrationDefinition(
                    migration_id=migration_id,
                    migration_group=group,
                    label=label,
                    status=int(MigrationStatus.IDLE),
                )
                session.add(row)
                logger.info("Registered migration", migration_id=migration_id, group=group)
            else:
                row.migration_group = group
                if label is not None:
                    row.label = label

            session.flush()
            return _to_handle(row)

    def set_status(self, migration_id: str, status: MigrationStatus) -> None:
        """
        Set the status of one migration.

        Raises:
            StateError: If the migration is not registered
        """
        with get_session(self.database_url) as session:
            updated = session.execute(
                update(MigrationDefinition)
                .where(MigrationDefinition.migration_id == migration_id)
                .values(status=int(status))
            ).rowcount

        if not updated:
            raise StateError(f"Unknown migration: {migration_id}")

        logger.debug("Migration status set", migration_id=migration_id, status=status.label)

    def set_group_status(
        self, group: str, status: MigrationStatus, mark_imported: bool = False
    ) -> int:
        """
        Set the status of every migration in a group.

        Args:
            group: Migration group identifier
            status: New status
            mark_imported: Also stamp ``last_imported_at`` with the current time

        Returns:
            Number of migrations updated
        """
        values: dict = {"status": int(status)}
        if mark_imported:
            values["last_imported_at"] = datetime.now(UTC).replace(tzinfo=None)

        with get_session(self.database_url) as session:
            return session.execute(
                update(MigrationDefinition)
                .where(MigrationDefinition.migration_group == group)
                .values(**values)
            ).rowcount

    def reset_status(self, migration_id: str) -> None:
        """Force a stuck migration back to idle."""
        self.set_status(migration_id, MigrationStatus.IDLE)
        logger.warning("Migration status reset to idle", migration_id=migration_id)


def _to_handle(row: MigrationDefinition) -> MigrationHandle:
    return MigrationHandle(
        migration_id=row.migration_id,
        migration_group=row.migration_group,
        status=MigrationStatus(row.status),
        label=row.label,
        last_imported_at=row.last_imported_at,
    )
