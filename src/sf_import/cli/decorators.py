"""
Decorators shared by the CLI commands.

Stack them in this order under the click decorators:

    @pass_context
    @requires_config
    @handle_errors
"""

import functools
from collections.abc import Callable

import click

from sf_import.cli.context import ImportContext
from sf_import.exceptions import ConfigurationError, StateError
from sf_import.utils.logging import get_logger

logger = get_logger(__name__)

EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_STATE = 5

# Exception type -> (exit code, heading, hint)
_KNOWN_ERRORS: list[tuple[type[Exception], int, str, str]] = [
    (
        ConfigurationError,
        EXIT_CONFIG,
        "Configuration Error",
        "Check the configuration file and the state.db_path setting.",
    ),
    (
        StateError,
        EXIT_STATE,
        "State Error",
        "The state database (lock, migrations, history) could not be read or written.",
    ),
]


def pass_context(f: Callable) -> Callable:
    """Call the command with the ``ImportContext`` instead of click's context."""

    @click.pass_context
    @functools.wraps(f)
    def wrapper(click_ctx: click.Context, *args, **kwargs):
        return f(click_ctx.obj, *args, **kwargs)

    return wrapper


def handle_errors(f: Callable) -> Callable:
    """
    Turn exceptions escaping a command into exit codes.

    Exit codes:
        1: Unexpected error
        2: Configuration error
        5: State database error

    click's own exits and usage errors pass through unchanged.
    """

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.exceptions.Exit, click.ClickException):
            raise
        except Exception as e:
            for error_type, exit_code, heading, hint in _KNOWN_ERRORS:
                if isinstance(e, error_type):
                    logger.error(heading, error=str(e))
                    click.echo(f"{heading}: {e}\n\n{hint}", err=True)
                    raise click.exceptions.Exit(exit_code) from e

            logger.error("Unexpected error", error=str(e), exc_info=True)
            click.echo(f"Unexpected Error: {e}\n\nSee the log file for details.", err=True)
            raise click.exceptions.Exit(EXIT_ERROR) from e

    return wrapper


def requires_config(f: Callable) -> Callable:
    """Load the configuration up front; exit 2 if it is missing or invalid."""

    @functools.wraps(f)
    def wrapper(ctx: ImportContext, *args, **kwargs):
        if ctx.config_path is None:
            click.echo(
                "Error: --config is required (or set SF_IMPORT_CONFIG).",
                err=True,
            )
            raise click.exceptions.Exit(EXIT_CONFIG)

        try:
            _ = ctx.config
        except Exception as e:
            click.echo(f"Error loading configuration {ctx.config_path}: {e}", err=True)
            raise click.exceptions.Exit(EXIT_CONFIG) from e

        return f(ctx, *args, **kwargs)

    return wrapper


def confirm_action(message: str) -> Callable:
    """Ask before running the command unless it was given ``--yes``."""

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            if not click.get_current_context().params.get("yes") and not click.confirm(message):
                click.echo("Operation cancelled.")
                raise click.exceptions.Exit(0)
            return f(*args, **kwargs)

        return wrapper

    return decorator
