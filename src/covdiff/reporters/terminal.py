"""Terminal reporter with rich output formatting."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from covdiff.reporters.csv_reporter import format_percent

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rich.status import Status

    from covdiff.models.difference import CoverageDifference

# Diagnostics go to stderr so stdout only ever carries the report.
console = Console(stderr=True)

_GOOD_COVERAGE = 80.0
_FAIR_COVERAGE = 50.0


def _coverage_color(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if math.isnan(percentage):
        return "dim"
    if percentage >= _GOOD_COVERAGE:
        return "green"
    if percentage >= _FAIR_COVERAGE:
        return "yellow"
    return "red"


class CLIReporter:
    """Rich terminal output for progress messages and the table report."""

    def __init__(self, err_console: Console | None = None) -> None:
        self.console = err_console or console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {message}", highlight=False, soft_wrap=True)

    def print_warning(self, message: str) -> None:
        """Print a warning message."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def create_status(self, message: str) -> Status:
        """Create a Rich Status spinner for long-running operations."""
        return self.console.status(message)


def build_difference_table(
    differences: Mapping[str, CoverageDifference],
    suite1: str,
    suite2: str,
) -> Table:
    """Build a table with one row per file, sorted by path."""
    table = Table(title=f"{suite1} vs {suite2}", show_lines=False)
    table.add_column("Path", style="cyan")
    table.add_column(f"{suite1} only", justify="right")
    table.add_column(f"{suite2} only", justify="right")
    table.add_column("Both", justify="right")
    table.add_column("Covered", justify="right")
    table.add_column("Coverable", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Coverage %", justify="right")

    for path in sorted(differences):
        difference = differences[path]
        percentage = difference.percent(difference.covered_count)
        color = _coverage_color(percentage)
        shown = format_percent(percentage) if math.isnan(percentage) else f"{percentage:.1f}"
        table.add_row(
            path,
            str(difference.suite1_only_count),
            str(difference.suite2_only_count),
            str(difference.both_count),
            str(difference.covered_count),
            str(difference.coverable_count),
            str(difference.line_count),
            f"[{color}]{shown}[/{color}]",
        )

    return table


# Singleton instance for easy import
reporter = CLIReporter()
