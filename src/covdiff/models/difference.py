"""Per-file diff results between two suites."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LineCoverage(Enum):
    """Classification of a single source line across two suites."""

    NOT_RUN = "not_run"
    NOT_COVERED = "not_covered"
    SUITE1_ONLY = "suite1_only"
    SUITE2_ONLY = "suite2_only"
    BOTH = "both"


@dataclass(frozen=True)
class CoverageDifference:
    """Line-by-line comparison of one file between two suites."""

    line_classifications: tuple[LineCoverage, ...]
    """One classification per compared line."""

    line_count: int
    """Number of lines compared."""

    coverable_count: int
    """Compared lines that are not ``NOT_RUN``."""

    covered_count: int
    """Lines covered by at least one suite."""

    suite1_only_count: int
    """Lines covered only by the first suite."""

    suite2_only_count: int
    """Lines covered only by the second suite."""

    both_count: int
    """Lines covered by both suites."""

    @property
    def not_run_count(self) -> int:
        return self.line_count - self.coverable_count

    @property
    def not_covered_count(self) -> int:
        return self.coverable_count - self.covered_count

    def percent(self, count: int) -> float:
        """Return *count* as a percentage of the coverable lines.

        A file with no coverable lines yields NaN instead of raising.
        """
        if self.coverable_count == 0:
            return float("nan") if count == 0 else float("inf")
        return 100.0 * count / self.coverable_count
