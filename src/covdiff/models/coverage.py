"""Coverage tree models parsed from the coverage service."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from covdiff.errors import CoverageParseError

NOT_RUN_HIT_COUNT = -1
"""Hit count sentinel for lines that were not instrumented or not run."""


class NodeType(Enum):
    """Kind of path in a coverage tree."""

    FILE = "file"
    DIRECTORY = "directory"


def _require(data: dict[str, Any], key: str, expected: type | tuple[type, ...]) -> Any:
    if key not in data:
        raise CoverageParseError(f"Coverage document is missing '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it as a count.
    if isinstance(value, bool) or not isinstance(value, expected):
        raise CoverageParseError(
            f"Coverage field '{key}' has unexpected type {type(value).__name__}"
        )
    return value


def _parse_hit_counts(raw: Any) -> tuple[int, ...]:
    if not isinstance(raw, list):
        raise CoverageParseError("Coverage field 'coverage' must be a list")
    hits: list[int] = []
    for item in raw:
        if isinstance(item, bool) or not isinstance(item, int):
            raise CoverageParseError(f"Invalid hit count in 'coverage': {item!r}")
        hits.append(item)
    return tuple(hits)


def _parse_children(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        raise CoverageParseError("Coverage field 'children' must be a list")
    paths: list[str] = []
    for child in raw:
        if not isinstance(child, dict) or not isinstance(child.get("path"), str):
            raise CoverageParseError("Every child entry must carry a string 'path'")
        paths.append(child["path"])
    return tuple(paths)


@dataclass(frozen=True)
class CoverageNode:
    """One path (file or directory) in a suite's coverage tree."""

    path: str
    """Path relative to the source tree root."""

    name: str
    """Last path component."""

    node_type: NodeType
    """Whether this is a file or a directory."""

    coverage_percent: float = 0.0
    """Coverage percentage reported by the service."""

    lines_covered: int = 0
    """Number of covered lines."""

    lines_missed: int = 0
    """Number of instrumented lines that were not hit."""

    lines_total: int = 0
    """Number of instrumented lines."""

    coverage: tuple[int, ...] | None = None
    """Per-line hit counts (files only); ``-1`` marks a line that was not run."""

    children: tuple[str, ...] = field(default_factory=tuple)
    """Child paths (directories only)."""

    changeset: str = ""
    """Changeset the document was produced for (required in service documents)."""

    @property
    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE

    @property
    def is_directory(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    @classmethod
    def from_dict(cls, data: Any) -> CoverageNode:
        """Build a node from a decoded service document.

        Raises:
            CoverageParseError: If required fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise CoverageParseError("Coverage document must be a JSON object")

        raw_type = _require(data, "type", str)
        try:
            node_type = NodeType(raw_type)
        except ValueError as exc:
            raise CoverageParseError(f"Unknown coverage node type: {raw_type!r}") from exc

        coverage: tuple[int, ...] | None = None
        raw_coverage = data.get("coverage")
        if raw_coverage is not None and node_type is NodeType.FILE:
            coverage = _parse_hit_counts(raw_coverage)

        children: tuple[str, ...] = ()
        raw_children = data.get("children")
        if isinstance(raw_children, list):
            children = _parse_children(raw_children)

        return cls(
            path=_require(data, "path", str),
            name=_require(data, "name", str),
            node_type=node_type,
            coverage_percent=float(_require(data, "coveragePercent", (int, float))),
            lines_covered=_require(data, "linesCovered", int),
            lines_missed=_require(data, "linesMissed", int),
            lines_total=_require(data, "linesTotal", int),
            coverage=coverage,
            children=children,
            changeset=_require(data, "changeset", str),
        )

    @classmethod
    def from_json(cls, text: str) -> CoverageNode:
        """Parse a raw response body."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CoverageParseError(f"Invalid coverage JSON: {exc}") from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the service schema."""
        result: dict[str, Any] = {
            "changeset": self.changeset,
            "coveragePercent": self.coverage_percent,
            "linesCovered": self.lines_covered,
            "linesMissed": self.lines_missed,
            "linesTotal": self.lines_total,
            "name": self.name,
            "path": self.path,
            "type": self.node_type.value,
        }
        if self.is_directory:
            result["children"] = [{"path": child} for child in self.children]
        if self.coverage is not None:
            result["coverage"] = list(self.coverage)
        return result


CoverageMap = dict[str, CoverageNode]
"""Flat mapping of path to node for one suite."""
