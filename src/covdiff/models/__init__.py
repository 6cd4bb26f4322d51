"""Data models for covdiff."""

from covdiff.models.coverage import CoverageMap, CoverageNode, NodeType
from covdiff.models.difference import CoverageDifference, LineCoverage

__all__ = [
    "CoverageDifference",
    "CoverageMap",
    "CoverageNode",
    "LineCoverage",
    "NodeType",
]
