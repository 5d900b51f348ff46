"""
Configuration management commands.

This module provides commands for validating and displaying the import
configuration.
"""

from pathlib import Path

import click

from sf_import.cli.context import ImportContext
from sf_import.cli.decorators import handle_errors, pass_context, requires_config
from sf_import.cli.utils import echo_error, echo_info, echo_success, echo_warning, print_table
from sf_import.config import ImporterConfig, save_config_to_yaml
from sf_import.importer.database import validate_database_connection
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)


@click.group(name="config")
def config() -> None:
    """Configuration management commands.

    Validate and display import configuration files.
    """
    pass


@config.command(name="validate")
@pass_context
@requires_config
@handle_errors
def validate(ctx: ImportContext) -> None:
    """Validate import configuration.

    Checks that:
    - the file parses and all values are in range
    - the source, staging and backup directories exist or can be created
    - the state database is reachable

    Examples:

        sf-import config validate --config config.yaml
    """
    echo_info(f"Validating configuration: {ctx.config_path}")

    config = ctx.config

    click.echo()
    _display_config_summary(config)

    click.echo()
    echo_info("Validating paths...")
    _validate_paths(config)

    echo_info("Validating state database...")
    if not validate_database_connection(config.state.database_url):
        echo_error(f"Cannot connect to state database: {config.state.db_path}")
        raise click.ClickException("State database is not reachable")
    echo_success("State database is reachable")

    if config.settings.backup_json and config.settings.backup_limit == 0:
        echo_warning("backup_json is on but backup_limit is 0: every backup is pruned at once")

    click.echo()
    echo_success("Configuration is valid!")


def _display_config_summary(config: ImporterConfig) -> None:
    """Display configuration summary."""
    rows = [
        ["Import Enabled", config.settings.enabled],
        ["Backup JSON", config.settings.backup_json],
        ["Backup Limit", config.settings.backup_limit],
        ["Source Directory", config.paths.source_dir],
        ["Staging Directory", config.paths.staging_dir],
        ["Backup Directory", config.paths.backup_dir],
        ["Migration Group", config.engine.group],
        ["Engine Command", " ".join(config.engine.command) or "-"],
        ["Lock Timeout (s)", config.lock.timeout],
        ["State DB", config.state.db_path],
        ["Interval (min)", config.scheduler.interval_minutes],
    ]

    print_table("Configuration Summary", ["Setting", "Value"], rows)


def _validate_paths(config: ImporterConfig) -> None:
    """Validate file paths in configuration."""
    for label, path in (
        ("Source", config.paths.source_path),
        ("Staging", config.paths.staging_path),
        ("Backup", config.paths.backup_path),
    ):
        if path.exists() and not path.is_dir():
            echo_error(f"{label} path is not a directory: {path}")
            raise click.ClickException(f"Invalid {label.lower()} directory: {path}")

        if not path.exists():
            try:
                path.mkdir(parents=True, exist_ok=True)
                echo_success(f"Created {label.lower()} directory: {path}")
            except OSError as e:
                echo_error(f"Cannot create {label.lower()} directory: {path}")
                raise click.ClickException(f"Failed to create {path}: {e}") from e
        else:
            echo_success(f"{label} directory exists: {path}")

    if "://" not in config.state.db_path:
        Path(config.state.db_path).parent.mkdir(parents=True, exist_ok=True)

    echo_success("All paths are valid")


@config.command(name="show")
@pass_context
@requires_config
@handle_errors
def show(ctx: ImportContext) -> None:
    """Display current configuration.

    Examples:

        sf-import config show --config config.yaml
    """
    config = ctx.config

    _display_config_summary(config)

    click.echo("\nLogging Configuration:")
    click.echo(f"  Level: {config.logging.level}")
    click.echo(f"  File: {config.logging.file or '-'}")
    click.echo(f"  Format: {config.logging.format}")


@config.command(name="init")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@handle_errors
def init(output: Path, force: bool) -> None:
    """Write a configuration file with default values.

    Imports stay disabled until import.enabled is set and engine.command
    is filled in.

    Examples:

        sf-import config init config.yaml
    """
    if output.exists() and not force:
        echo_error(f"File already exists: {output}")
        raise click.exceptions.Exit(1)

    save_config_to_yaml(ImporterConfig(), output)
    echo_success(f"Configuration written to {output}")
