"""
Backup commands.

This module provides commands to inspect and prune archived batch
directories.
"""

from datetime import datetime

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import handle_errors, pass_context, requires_config
from sf_import.cli.utils import echo_info, echo_success, format_timestamp, print_table
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="backups")
def backups() -> None:
    """Archived batch commands."""
    pass


@backups.command(name="list")
@pass_context
@requires_config
@handle_errors
def list_backups(ctx: ImportContext) -> None:
    """List archived batch directories, oldest first.

    Examples:

        sf-import backups list --config config.yaml
    """
    entries = ctx.job.stager.list_backups()
    if not entries:
        echo_info("No backups.")
        return

    print_table(
        f"Backups (limit {ctx.config.settings.backup_limit})",
        ["Backup", "Archived"],
        [
            [entry.name, format_timestamp(datetime.fromtimestamp(entry.stat().st_mtime))]
            for entry in entries
        ],
    )


@backups.command(name="prune")
@pass_context
@requires_config
@handle_errors
def prune(ctx: ImportContext) -> None:
    """Delete the oldest backups beyond import.backup_limit.

    Examples:

        sf-import backups prune --config config.yaml
    """
    removed = ctx.job.stager.prune_backups()
    if removed:
        echo_success(f"Pruned {len(removed)} backups: {', '.join(p.name for p in removed)}")
    else:
        echo_info("Nothing to prune.")
