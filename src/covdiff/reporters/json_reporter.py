"""JSON reporter: machine-readable suite coverage differences."""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covdiff.models.difference import CoverageDifference


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def _file_entry(difference: CoverageDifference) -> dict[str, Any]:
    return {
        "suite1Only": difference.suite1_only_count,
        "suite2Only": difference.suite2_only_count,
        "both": difference.both_count,
        "covered": difference.covered_count,
        "coverable": difference.coverable_count,
        "notRun": difference.not_run_count,
        "notCovered": difference.not_covered_count,
        "lines": difference.line_count,
        "suite1OnlyPercent": _finite_or_none(difference.percent(difference.suite1_only_count)),
        "suite2OnlyPercent": _finite_or_none(difference.percent(difference.suite2_only_count)),
        "coveragePercent": _finite_or_none(difference.percent(difference.covered_count)),
    }


def build_report(
    differences: Mapping[str, CoverageDifference],
    *,
    changeset: str,
    suite1: str,
    suite2: str,
) -> dict[str, Any]:
    """Build the JSON report structure.

    Percentages that are undefined (no coverable lines) become ``null``.
    """
    return {
        "changeset": changeset,
        "suites": {"suite1": suite1, "suite2": suite2},
        "files": {path: _file_entry(differences[path]) for path in sorted(differences)},
    }


class JSONReporter:
    """Serialise coverage differences as JSON."""

    def __init__(self, changeset: str, suite1: str, suite2: str) -> None:
        self._changeset = changeset
        self._suite1 = suite1
        self._suite2 = suite2

    def generate_string(self, differences: Mapping[str, CoverageDifference]) -> str:
        """Return the report as a JSON string."""
        report = build_report(
            differences,
            changeset=self._changeset,
            suite1=self._suite1,
            suite2=self._suite2,
        )
        return json.dumps(report, indent=2, ensure_ascii=False)
