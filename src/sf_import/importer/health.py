"""
Pre-flight health check of the migration group.

An import may only start when no migration of the group is running, rolling
back, stopping or disabled.
"""

from sf_import.importer.migrations import MigrationHandle, MigrationRegistry
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


class MigrationHealthChecker:
    """Checks that every migration in a group is idle."""

    def __init__(self, registry: MigrationRegistry):
        self.registry = registry

    def check_group_status(self, group_id: str) -> bool:
        """
        Check whether it is safe to import the group.

        Stops at the first migration that is not idle. A failure to read the
        migrations counts as not safe.

        Args:
            group_id: Migration group identifier

        Returns:
            True only if every migration in the group is idle
        """
        try:
            migration_ids = self.registry.list_ids(group_id)
            migrations = self.registry.create_instances(migration_ids)

            for migration_id, migration in migrations.items():
                if not migration.is_idle:
                    logger.error(
                        f"Migration {migration_id} has status {migration.get_status_label()}.",
                        migration_id=migration_id,
                        status=migration.get_status_label(),
                        group=group_id,
                    )
                    return False

        except Exception as e:
            logger.error(f"Impossible to get migrations statuses: {e}", group=group_id)
            return False

        logger.debug("Migration group is idle", group=group_id, migrations=len(migrations))
        return True

    def group_statuses(self, group_id: str) -> list[MigrationHandle]:
        """All migrations of a group with their current status."""
        ids = self.registry.list_ids(group_id)
        return list(self.registry.create_instances(ids).values())
