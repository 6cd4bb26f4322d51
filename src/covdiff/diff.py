"""Line-by-line comparison of two suites' coverage.

Each line is classified from the pair of hit counts the two suites report
for it:

====================  ====================  ===============
suite 1               suite 2               classification
====================  ====================  ===============
-1                    -1                    ``NOT_RUN``
0                     0                     ``NOT_COVERED``
> 0                   <= 0                  ``SUITE1_ONLY``
<= 0                  > 0                   ``SUITE2_ONLY``
anything else                               ``BOTH``
====================  ====================  ===============

The "anything else" row also absorbs mixed sentinels such as ``(-1, 0)``,
which are counted as ``BOTH``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covdiff.models.coverage import NOT_RUN_HIT_COUNT
from covdiff.models.difference import CoverageDifference, LineCoverage

if TYPE_CHECKING:
    from collections.abc import Sequence

    from covdiff.models.coverage import CoverageMap, CoverageNode

logger = logging.getLogger(__name__)


def classify_line(suite1_hits: int, suite2_hits: int) -> LineCoverage:
    """Classify one line from its two hit counts."""
    if suite1_hits == NOT_RUN_HIT_COUNT and suite2_hits == NOT_RUN_HIT_COUNT:
        return LineCoverage.NOT_RUN
    if suite1_hits == 0 and suite2_hits == 0:
        return LineCoverage.NOT_COVERED
    if suite1_hits > 0 and suite2_hits <= 0:
        return LineCoverage.SUITE1_ONLY
    if suite1_hits <= 0 and suite2_hits > 0:
        return LineCoverage.SUITE2_ONLY
    return LineCoverage.BOTH


def classify_file(
    suite1_lines: Sequence[int],
    suite2_lines: Sequence[int],
    path: str = "",
) -> CoverageDifference:
    """Compare two per-line hit count sequences for the same file.

    When the lengths differ only the common prefix is compared and a warning
    is logged; trailing lines of the longer sequence are dropped.

    Args:
        suite1_lines: Hit counts reported by the first suite.
        suite2_lines: Hit counts reported by the second suite.
        path: File path, used only in the mismatch warning.
    """
    line_count = min(len(suite1_lines), len(suite2_lines))
    if len(suite1_lines) != len(suite2_lines):
        logger.warning(
            "Line counts differ for %s (%d vs %d); comparing the first %d lines",
            path or "<unknown>",
            len(suite1_lines),
            len(suite2_lines),
            line_count,
        )

    classifications = tuple(
        classify_line(hits1, hits2)
        for hits1, hits2 in zip(suite1_lines[:line_count], suite2_lines[:line_count], strict=True)
    )

    not_run = classifications.count(LineCoverage.NOT_RUN)
    suite1_only = classifications.count(LineCoverage.SUITE1_ONLY)
    suite2_only = classifications.count(LineCoverage.SUITE2_ONLY)
    both = classifications.count(LineCoverage.BOTH)

    return CoverageDifference(
        line_classifications=classifications,
        line_count=line_count,
        coverable_count=line_count - not_run,
        covered_count=suite1_only + suite2_only + both,
        suite1_only_count=suite1_only,
        suite2_only_count=suite2_only,
        both_count=both,
    )


def synthesize_uncovered(lines: Sequence[int]) -> list[int]:
    """Build a zero-hit sequence shaped like *lines*.

    Lines that were not run in *lines* stay not run; every other line gets a
    hit count of ``0``. Used for the suite that has no data for a file.
    """
    return [NOT_RUN_HIT_COUNT if hits == NOT_RUN_HIT_COUNT else 0 for hits in lines]


def _file_coverage(node: CoverageNode | None) -> tuple[int, ...] | None:
    if node is None or not node.is_file:
        return None
    return node.coverage


def diff(suite1: CoverageMap, suite2: CoverageMap) -> dict[str, CoverageDifference]:
    """Compare every file present in either suite.

    Directories are ignored. A file missing from one suite is compared
    against an uncovered sequence synthesized from the other suite's data.
    A path present in both maps without file coverage on either side is
    skipped.

    Returns:
        Differences keyed by path, in ascending path order.
    """
    result: dict[str, CoverageDifference] = {}

    for path, node in suite1.items():
        lines1 = _file_coverage(node)
        if lines1 is None:
            continue
        if path in suite2:
            lines2 = _file_coverage(suite2[path])
            if lines2 is None:
                logger.debug("Skipping %s: no file coverage in the second suite", path)
                continue
        else:
            logger.debug("%s missing from the second suite; treating it as uncovered", path)
            lines2 = tuple(synthesize_uncovered(lines1))
        result[path] = classify_file(lines1, lines2, path)

    for path, node in suite2.items():
        if path in suite1:
            continue
        lines2 = _file_coverage(node)
        if lines2 is None:
            continue
        logger.debug("%s missing from the first suite; treating it as uncovered", path)
        result[path] = classify_file(synthesize_uncovered(lines2), lines2, path)

    return dict(sorted(result.items()))
