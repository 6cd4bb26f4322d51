"""End-to-end tests: HTTP service -> disk cache -> walk -> diff -> report."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
import responses
from click.testing import CliRunner

from covdiff.cli import cli
from covdiff.diff import diff
from covdiff.models import LineCoverage
from covdiff.store import CoverageStore
from covdiff.utils.cache import DiskCache
from covdiff.utils.http import RequestsTransport
from covdiff.walker import walk
from tests.conftest import dir_doc, file_doc
from tests.integration.conftest import register_documents, write_json

_BASE = "https://coverage.example.test/v2"
_URL = f"{_BASE}/path"

_WPT_DOCS = {
    "dom": dir_doc("dom", ["dom/base", "dom/events.js"]),
    "dom/base": dir_doc("dom/base", ["dom/base/Node.cpp"]),
    "dom/base/Node.cpp": file_doc("dom/base/Node.cpp", [-1, 4, 0, 0, 1]),
    "dom/events.js": file_doc("dom/events.js", [2, 2, -1]),
}

_MOCHI_DOCS = {
    "dom": dir_doc("dom", ["dom/base", "dom/fetch.js"]),
    "dom/base": dir_doc("dom/base", ["dom/base/Node.cpp"]),
    "dom/base/Node.cpp": file_doc("dom/base/Node.cpp", [-1, 1, 0, 3, 1, 9]),
    "dom/fetch.js": file_doc("dom/fetch.js", [0, 5]),
}

pytestmark = pytest.mark.integration


@pytest.fixture()
def service() -> Iterator[responses.RequestsMock]:
    with responses.RequestsMock() as rsps:
        register_documents(rsps, _URL, "abc123", "wpt", _WPT_DOCS)
        register_documents(rsps, _URL, "abc123", "mochitest", _MOCHI_DOCS)
        yield rsps


def _store(cache_root: Path) -> CoverageStore:
    return CoverageStore(RequestsTransport(timeout_seconds=5), DiskCache(cache_root), _BASE)


def test_full_pipeline(service: responses.RequestsMock, tmp_path: Path) -> None:
    store = _store(tmp_path / "data")

    wpt = walk(store, "abc123", "wpt", ["dom"])
    mochi = walk(store, "abc123", "mochitest", ["dom"])
    result = diff(wpt, mochi)

    assert list(result) == ["dom/base/Node.cpp", "dom/events.js", "dom/fetch.js"]

    node = result["dom/base/Node.cpp"]
    # Line 6 exists only in the mochitest data and is not compared.
    assert node.line_count == 5
    assert node.line_classifications == (
        LineCoverage.NOT_RUN,
        LineCoverage.BOTH,
        LineCoverage.NOT_COVERED,
        LineCoverage.SUITE2_ONLY,
        LineCoverage.BOTH,
    )

    events = result["dom/events.js"]
    assert (events.suite1_only_count, events.coverable_count) == (2, 2)

    fetch = result["dom/fetch.js"]
    assert (fetch.suite2_only_count, fetch.suite1_only_count) == (1, 0)

    assert len(service.calls) == 8
    cached = sorted(p.name for p in (tmp_path / "data" / "abc123" / "wpt").iterdir())
    assert cached == ["dom-base-Node.cpp.json", "dom-base.json", "dom-events.js.json", "dom.json"]


def test_cache_replaces_network(tmp_path: Path) -> None:
    root = tmp_path / "data"
    for path, doc in _WPT_DOCS.items():
        write_json(root, f"abc123/wpt/{path.replace('/', '-')}.json", doc)

    with responses.RequestsMock() as rsps:
        result = walk(_store(root), "abc123", "wpt", ["dom"])
        assert len(rsps.calls) == 0

    assert set(result) == set(_WPT_DOCS)


def test_cli_end_to_end(
    service: responses.RequestsMock,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(
        cli,
        [
            "diff",
            "abc123",
            "--base-url",
            _BASE,
            "--suite1",
            "wpt",
            "--suite2",
            "mochitest",
            "--format",
            "json",
        ],
    )

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["files"]["dom/base/Node.cpp"]["lines"] == 5
    assert report["files"]["dom/base/Node.cpp"]["coveragePercent"] == 75.0
    assert (tmp_path / "data" / "abc123" / "mochitest" / "dom-fetch.js.json").is_file()
