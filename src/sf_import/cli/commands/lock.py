"""
Lock commands.
"""

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import (
    confirm_action,
    handle_errors,
    pass_context,
    requires_config,
)
from sf_import.cli.utils import echo_info, echo_success
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="lock")
def lock() -> None:
    """Import lock commands."""
    pass


@lock.command(name="release")
@click.option("--yes", is_flag=True, help="Skip confirmation prompt")
@pass_context
@requires_config
@confirm_action("This removes the import lock even if an import is running. Continue?")
@handle_errors
def release(ctx: ImportContext, yes: bool) -> None:
    """Remove the import lock, whoever holds it.

    Only needed when an import process died while holding the lock and you
    do not want to wait for it to expire.

    Examples:

        sf-import lock release --yes --config config.yaml
    """
    if ctx.job.lock.force_release():
        echo_success("Import lock released")
    else:
        echo_info("Import lock was not held")
