"""Reporters for outputting suite coverage differences."""

from __future__ import annotations

from covdiff.reporters.csv_reporter import format_csv
from covdiff.reporters.json_reporter import JSONReporter
from covdiff.reporters.terminal import build_difference_table, reporter

__all__ = [
    "JSONReporter",
    "build_difference_table",
    "format_csv",
    "reporter",
]
