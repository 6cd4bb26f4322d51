"""Tests for the CSV, JSON and terminal reporters."""

from __future__ import annotations

import json

import pytest
from rich.console import Console

from covdiff.diff import classify_file
from covdiff.models import CoverageDifference
from covdiff.reporters import JSONReporter, build_difference_table, format_csv
from covdiff.reporters.csv_reporter import csv_header, csv_row, format_percent
from covdiff.reporters.json_reporter import build_report
from covdiff.reporters.terminal import CLIReporter


@pytest.fixture()
def differences() -> dict[str, CoverageDifference]:
    return {
        "dom/z.js": classify_file([1, 1, 0, 0], [0, 1, 0, 1]),
        "dom/a.js": classify_file([-1, 0, 3, 0, 5], [-1, 0, 0, 2, 5]),
        "dom/empty.js": classify_file([-1, -1], [-1, -1]),
    }


# ── CSV ──────────────────────────────────────────────────────────


def test_csv_header_names_both_suites() -> None:
    assert csv_header("web-platform-tests", "mochitest-plain-chunked") == (
        "path, web-platform-tests only, mochitest-plain-chunked only, both, total covered, "
        "total coverable, total lines, web-platform-tests-only percent, "
        "mochitest-plain-chunked-only percent, coverage percent"
    )


def test_csv_row(differences: dict[str, CoverageDifference]) -> None:
    assert csv_row("dom/a.js", differences["dom/a.js"]) == (
        '"dom/a.js", 1, 1, 1, 3, 4, 5, 25.0, 25.0, 75.0'
    )


def test_csv_row_without_coverable_lines_reports_nan(
    differences: dict[str, CoverageDifference],
) -> None:
    assert csv_row("dom/empty.js", differences["dom/empty.js"]) == (
        '"dom/empty.js", 0, 0, 0, 0, 0, 2, NaN, NaN, NaN'
    )


def test_csv_quotes_embedded_quotes() -> None:
    row = csv_row('dom/odd"name.js', classify_file([1], [1]))
    assert row.startswith('"dom/odd""name.js", ')


def test_format_csv_sorted_rows(differences: dict[str, CoverageDifference]) -> None:
    lines = format_csv(differences, "wpt", "mochitest").splitlines()

    assert lines[0].startswith("path, wpt only, mochitest only")
    assert [line.split(",")[0] for line in lines[1:]] == [
        '"dom/a.js"',
        '"dom/empty.js"',
        '"dom/z.js"',
    ]


def test_format_csv_empty() -> None:
    assert format_csv({}, "wpt", "mochitest") == csv_header("wpt", "mochitest") + "\n"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (float("nan"), "NaN"),
        (float("inf"), "inf"),
        (float("-inf"), "-inf"),
        (100.0, "100.0"),
        (100.0 / 3, "33.333333333333336"),
    ],
)
def test_format_percent(value: float, expected: str) -> None:
    assert format_percent(value) == expected


# ── JSON ─────────────────────────────────────────────────────────


def test_json_report_structure(differences: dict[str, CoverageDifference]) -> None:
    report = build_report(differences, changeset="abc123", suite1="wpt", suite2="mochitest")

    assert report["changeset"] == "abc123"
    assert report["suites"] == {"suite1": "wpt", "suite2": "mochitest"}
    assert list(report["files"]) == ["dom/a.js", "dom/empty.js", "dom/z.js"]
    assert report["files"]["dom/a.js"] == {
        "suite1Only": 1,
        "suite2Only": 1,
        "both": 1,
        "covered": 3,
        "coverable": 4,
        "notRun": 1,
        "notCovered": 1,
        "lines": 5,
        "suite1OnlyPercent": 25.0,
        "suite2OnlyPercent": 25.0,
        "coveragePercent": 75.0,
    }


def test_json_undefined_percentages_become_null(
    differences: dict[str, CoverageDifference],
) -> None:
    text = JSONReporter("abc123", "wpt", "mochitest").generate_string(differences)

    entry = json.loads(text)["files"]["dom/empty.js"]
    assert entry["coveragePercent"] is None
    assert entry["suite1OnlyPercent"] is None
    assert "NaN" not in text


# ── Terminal ─────────────────────────────────────────────────────


def test_difference_table_rows(differences: dict[str, CoverageDifference]) -> None:
    table = build_difference_table(differences, "wpt", "mochitest")

    assert table.row_count == 3
    headers = [column.header for column in table.columns]
    assert headers[:3] == ["Path", "wpt only", "mochitest only"]

    console = Console(record=True, width=160)
    console.print(table)
    output = console.export_text()
    assert "dom/a.js" in output
    assert "75.0" in output
    assert "NaN" in output


def test_cli_reporter_writes_to_given_console() -> None:
    console = Console(record=True, width=120)
    reporter = CLIReporter(console)

    reporter.print_error("Transport: boom")
    reporter.print_success("done")

    output = console.export_text()
    assert "Transport: boom" in output
    assert "done" in output
