"""
Migration registry commands.

This module provides commands to register migrations in the import group
and to reset migrations left in a non-idle state.
"""

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import handle_errors, pass_context, requires_config
from sf_import.cli.utils import echo_error, echo_success
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="migrations")
def migrations() -> None:
    """Migration registry commands.

    Manage which migrations belong to the import group and their status.
    """
    pass


@migrations.command(name="register")
@click.argument("migration_id")
@click.option("--group", default=None, help="Migration group (defaults to engine.group)")
@click.option("--label", default=None, help="Human-readable name")
@pass_context
@requires_config
@handle_errors
def register(ctx: ImportContext, migration_id: str, group: str | None, label: str | None) -> None:
    """Register a migration in the import group.

    Examples:

        sf-import migrations register sf_sessions --label "Sessions" --config config.yaml
    """
    handle = ctx.registry.register(migration_id, group or ctx.config.engine.group, label=label)
    echo_success(f"Migration {handle.migration_id} registered in group {handle.migration_group}")


@migrations.command(name="reset")
@click.argument("migration_id")
@pass_context
@requires_config
@handle_errors
def reset(ctx: ImportContext, migration_id: str) -> None:
    """Reset a stuck migration to idle.

    Use after an import process died and left a migration importing.

    Examples:

        sf-import migrations reset sf_sessions --config config.yaml
    """
    if ctx.registry.get(migration_id) is None:
        echo_error(f"Unknown migration: {migration_id}")
        raise click.exceptions.Exit(1)

    ctx.registry.reset_status(migration_id)
    echo_success(f"Migration {migration_id} reset to Idle")
