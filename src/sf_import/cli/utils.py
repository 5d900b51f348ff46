"""
Utility functions for CLI commands.

This module provides helpers for formatted console output.
"""

from datetime import datetime
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from sf_import.importer.results import ImportOutcome, ImportResult

console = Console()


def echo_success(message: str) -> None:
    """Print success message in green."""
    click.secho(f"✓ {message}", fg="green")


def echo_error(message: str) -> None:
    """Print error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def echo_warning(message: str) -> None:
    """Print warning message in yellow."""
    click.secho(f"⚠ {message}", fg="yellow")


def echo_info(message: str) -> None:
    """Print info message in blue."""
    click.secho(f"ℹ {message}", fg="blue")


def format_timestamp(dt: datetime | None) -> str:
    """
    Format timestamp in human-readable format.

    Args:
        dt: Datetime object, or None

    Returns:
        Formatted timestamp string, "-" for None
    """
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def print_table(
    title: str,
    columns: list[str],
    rows: list[list[Any]],
    show_header: bool = True,
) -> None:
    """
    Print a formatted table using rich.

    Args:
        title: Table title
        columns: Column headers
        rows: List of row data
        show_header: Whether to show header row
    """
    table = Table(title=title, show_header=show_header)

    for col in columns:
        table.add_column(col)

    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)


_OUTCOME_COLORS = {
    ImportOutcome.IMPORTED: "green",
    ImportOutcome.NO_FILES: "white",
    ImportOutcome.SKIPPED: "yellow",
    ImportOutcome.FAILED: "red",
}


def print_results(results: list[ImportResult]) -> None:
    """Print one table row per batch outcome."""
    rows = []
    for result in results:
        color = _OUTCOME_COLORS[result.outcome]
        rows.append(
            [
                result.batch_dir.name,
                f"[{color}]{result.outcome.value}[/{color}]",
                result.files_staged,
                result.archived_to or "-",
                result.error or "",
            ]
        )
    print_table("Batch Imports", ["Batch", "Outcome", "Files", "Archived To", "Error"], rows)
