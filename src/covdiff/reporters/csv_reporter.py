"""CSV report of per-file suite coverage differences."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covdiff.models.difference import CoverageDifference

_SEPARATOR = ", "


def format_percent(value: float) -> str:
    """Render a percentage; non-finite values keep a stable spelling."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


def _quote(path: str) -> str:
    escaped = path.replace('"', '""')
    return f'"{escaped}"'


def csv_header(suite1: str, suite2: str) -> str:
    """Return the header line naming both suites."""
    return _SEPARATOR.join(
        [
            "path",
            f"{suite1} only",
            f"{suite2} only",
            "both",
            "total covered",
            "total coverable",
            "total lines",
            f"{suite1}-only percent",
            f"{suite2}-only percent",
            "coverage percent",
        ]
    )


def csv_row(path: str, difference: CoverageDifference) -> str:
    """Return the CSV row for one file."""
    return _SEPARATOR.join(
        [
            _quote(path),
            str(difference.suite1_only_count),
            str(difference.suite2_only_count),
            str(difference.both_count),
            str(difference.covered_count),
            str(difference.coverable_count),
            str(difference.line_count),
            format_percent(difference.percent(difference.suite1_only_count)),
            format_percent(difference.percent(difference.suite2_only_count)),
            format_percent(difference.percent(difference.covered_count)),
        ]
    )


def format_csv(
    differences: Mapping[str, CoverageDifference],
    suite1: str,
    suite2: str,
) -> str:
    """Render every difference as CSV, rows sorted by path.

    Percentages are ``100 * count / coverable``; files with no coverable
    lines report ``NaN``.
    """
    lines = [csv_header(suite1, suite2)]
    lines.extend(csv_row(path, differences[path]) for path in sorted(differences))
    return "\n".join(lines) + "\n"
