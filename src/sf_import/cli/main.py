"""
Main CLI entry point for SF Import.

This module provides the command-line interface for importing fetched
Salesforce JSON batches.
"""

import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from sf_import import __version__
from sf_import.cli.commands import backups as backup_commands
from sf_import.cli.commands import config as config_commands
from sf_import.cli.commands import lock as lock_commands
from sf_import.cli.commands import migrations as migration_commands
from sf_import.cli.commands import run as run_commands
from sf_import.cli.commands import status as status_commands
from sf_import.cli.context import ImportContext
from sf_import.config import LoggingConfig
from sf_import.utils.logging import configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="sf-import")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
    envvar="SF_IMPORT_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Console logging level (defaults to logging.level from the configuration)",
    envvar="SF_IMPORT_LOG_LEVEL",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Log file (defaults to logging.file from the configuration)",
    envvar="SF_IMPORT_LOG_FILE",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    log_level: str | None,
    log_file: Path | None,
) -> None:
    """SF Import - Import fetched Salesforce JSON batches.

    Each fetch leaves a directory of JSON files under the source root.
    A scheduled tick takes the import lock, checks that every migration
    in the group is idle, stages the JSON files, runs the transform
    engine, then archives or deletes each batch.

    Examples:

        # One tick (from cron)
        sf-import run --config config.yaml

        # Keep running on an interval
        sf-import schedule --config config.yaml

        # Show settings, lock and migration statuses
        sf-import status --config config.yaml
    """
    import_ctx = ImportContext(
        config_path=config,
        log_level=log_level,
        log_file=log_file,
    )

    logging_config = LoggingConfig(file=None)
    if config is not None:
        try:
            logging_config = import_ctx.config.logging
        except Exception as e:
            # Reported by the command that needs the configuration
            logger.debug("Configuration not loaded for logging setup", error=str(e))

    configure_logging(
        level=log_level or logging_config.level,
        log_format=logging_config.format,
        log_file=str(log_file) if log_file else logging_config.file,
        file_level=logging_config.file_level,
    )

    ctx.obj = import_ctx

    logger.debug(
        "CLI initialized",
        config=str(config) if config else None,
        log_level=log_level,
    )


# Register command groups
cli.add_command(config_commands.config)
cli.add_command(migration_commands.migrations)
cli.add_command(lock_commands.lock)
cli.add_command(backup_commands.backups)

# Register standalone commands
cli.add_command(run_commands.run)
cli.add_command(run_commands.import_dir)
cli.add_command(run_commands.schedule)
cli.add_command(status_commands.status)
cli.add_command(status_commands.history)


def main() -> int:
    """Main entry point for CLI.

    Without standalone mode click returns the code of a ``ctx.exit`` or
    ``Exit`` instead of raising it.
    """
    try:
        rv = cli(standalone_mode=False)
        return rv if isinstance(rv, int) else 0
    except click.exceptions.Exit as e:
        return e.exit_code
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except Exception as e:
        logger.error("Unexpected error", error=str(e), exc_info=True)
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
