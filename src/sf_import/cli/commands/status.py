"""
Status commands.

This module provides read-only views of the import: settings, lock,
migration statuses, waiting batches and history.
"""

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import handle_errors, pass_context, requires_config
from sf_import.cli.utils import echo_info, format_timestamp, print_table
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@click.command(name="status")
@pass_context
@requires_config
@handle_errors
def status(ctx: ImportContext) -> None:
    """Show import settings, lock state, migrations and waiting batches.

    Examples:

        sf-import status --config config.yaml
    """
    config = ctx.config
    job = ctx.job

    print_table(
        "Import Settings",
        ["Setting", "Value"],
        [
            ["Enabled", config.settings.enabled],
            ["Backup JSON", config.settings.backup_json],
            ["Backup Limit", config.settings.backup_limit],
            ["Lock", "held" if job.lock.is_locked() else "free"],
        ],
    )

    migrations = ctx.health.group_statuses(job.group)
    if migrations:
        print_table(
            f"Migrations ({job.group})",
            ["Migration", "Status", "Last Imported"],
            [
                [m.migration_id, m.get_status_label(), format_timestamp(m.last_imported_at)]
                for m in migrations
            ],
        )
    else:
        echo_info(f"No migrations registered in group {job.group}.")

    batches = job.stager.list_batch_directories()
    if batches:
        print_table("Waiting Batches", ["Batch"], [[b.name] for b in batches])
    else:
        echo_info("No batch directories waiting.")


@click.command(name="history")
@click.option("--limit", type=int, default=20, help="Number of runs to show")
@pass_context
@requires_config
@handle_errors
def history(ctx: ImportContext, limit: int) -> None:
    """Show recent batch import outcomes.

    Examples:

        sf-import history --limit 50 --config config.yaml
    """
    runs = ctx.history.recent(limit)
    if not runs:
        echo_info("No imports recorded yet.")
        return

    print_table(
        "Import History",
        ["Started", "Batch", "Outcome", "Files", "Failure", "Error"],
        [
            [
                format_timestamp(run.started_at),
                run.batch_name,
                run.outcome,
                run.files_staged,
                run.failure_kind or "-",
                run.error_message or "",
            ]
            for run in runs
        ],
    )
