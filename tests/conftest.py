"""Shared fixtures: a scripted transport and coverage document builders."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from covdiff.errors import TransportError


def file_doc(path: str, coverage: list[int] | None, changeset: str = "abc123") -> dict[str, Any]:
    """Build a file document as the coverage service returns it."""
    counts = [hits for hits in coverage or [] if isinstance(hits, int)]
    covered = sum(1 for hits in counts if hits > 0)
    total = sum(1 for hits in counts if hits >= 0)
    doc: dict[str, Any] = {
        "changeset": changeset,
        "coveragePercent": round(100.0 * covered / total, 2) if total else 0.0,
        "linesCovered": covered,
        "linesMissed": total - covered,
        "linesTotal": total,
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "type": "file",
    }
    if coverage is not None:
        doc["coverage"] = coverage
    return doc


def dir_doc(path: str, children: list[str], changeset: str = "abc123") -> dict[str, Any]:
    """Build a directory document whose children are minimal entries."""
    return {
        "changeset": changeset,
        "children": [
            {
                "children": 0,
                "coveragePercent": 0.0,
                "linesCovered": 0,
                "linesMissed": 0,
                "linesTotal": 0,
                "name": child.rsplit("/", 1)[-1],
                "path": child,
                "type": "file",
            }
            for child in children
        ],
        "coveragePercent": 0.0,
        "linesCovered": 0,
        "linesMissed": 0,
        "linesTotal": 0,
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "type": "directory",
    }


class FakeTransport:
    """Serve canned JSON bodies keyed by ``(suite, path)`` and record every call."""

    def __init__(self, bodies: Mapping[tuple[str, str], str] | None = None) -> None:
        self.bodies: dict[tuple[str, str], str] = dict(bodies or {})
        self.calls: list[tuple[str, dict[str, str]]] = []
        self.closed = False

    def get(self, url: str, params: Mapping[str, str]) -> str:
        self.calls.append((url, dict(params)))
        key = (params.get("suite", ""), params["path"])
        if key not in self.bodies:
            raise TransportError(f"GET {url} failed (HTTP 404): no coverage for {key}")
        return self.bodies[key]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()
