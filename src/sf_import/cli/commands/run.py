"""
Import commands.

This module provides the commands that actually import: a single scheduled
tick, one batch directory, and the long-running scheduler.
"""

from pathlib import Path

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import handle_errors, pass_context, requires_config
from sf_import.cli.utils import echo_info, echo_success, echo_warning, print_results
from sf_import.importer.results import JobReport, JobStatus
from sf_import.scheduler import ImportScheduler
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


def _report(report: JobReport, strict: bool) -> None:
    if report.status == JobStatus.LOCK_UNAVAILABLE:
        echo_warning("Another import is running; nothing done.")
    elif report.status == JobStatus.MIGRATION_NOT_IDLE:
        echo_warning("Migrations in the import group are not idle; nothing done.")
    elif not report.results:
        echo_info("No batch directories waiting.")
    else:
        print_results(report.results)
        if report.failed:
            echo_warning(f"{len(report.failed)} of {len(report.results)} batches failed.")
        else:
            echo_success(f"Processed {len(report.results)} batches.")

    if strict and not report.ok:
        raise click.exceptions.Exit(1)


@click.command(name="run")
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 on a refusal or any failed batch",
)
@pass_context
@requires_config
@handle_errors
def run(ctx: ImportContext, strict: bool) -> None:
    """Run one scheduled import tick.

    Takes the import lock, checks that every migration in the group is
    idle, then imports every batch directory under the source root.
    Meant to be called from cron.

    Examples:

        sf-import run --config config.yaml
    """
    if not ctx.config.settings.enabled:
        echo_warning("Import is disabled (import.enabled is false); batches will be skipped.")

    _report(ctx.job.tick(), strict)


@click.command(name="import-dir")
@click.argument(
    "batch_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 on a refusal or a failed import",
)
@pass_context
@requires_config
@handle_errors
def import_dir(ctx: ImportContext, batch_dir: Path, strict: bool) -> None:
    """Import a single batch directory.

    Uses the same lock and health check as a scheduled tick.

    Examples:

        sf-import import-dir private/salesforce_import/json/20240101_0100 --config config.yaml
    """
    _report(ctx.job.run_single(batch_dir), strict)


@click.command(name="schedule")
@pass_context
@requires_config
@handle_errors
def schedule(ctx: ImportContext) -> None:
    """Run imports periodically until interrupted.

    The interval comes from scheduler.interval_minutes.

    Examples:

        sf-import schedule --config config.yaml
    """
    interval = ctx.config.scheduler.interval_minutes
    echo_info(f"Importing every {interval} minutes. Press Ctrl+C to stop.")
    ImportScheduler(ctx.job, ctx.config.scheduler).start()
