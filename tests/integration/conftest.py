"""Shared fixtures for integration tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import responses
from responses import matchers

# ── Marker registration ──────────────────────────────────────────


def pytest_configure(config: pytest.Config) -> None:
    """Register the ``integration`` marker."""
    config.addinivalue_line("markers", "integration: integration tests")


# ── Service and cache helpers ────────────────────────────────────


def register_documents(
    rsps: responses.RequestsMock,
    url: str,
    changeset: str,
    suite: str,
    documents: dict[str, dict[str, Any]],
) -> None:
    """Serve each document for its exact ``path``/``suite``/``changeset`` query."""
    for path, doc in documents.items():
        rsps.add(
            responses.GET,
            url,
            json=doc,
            status=200,
            match=[
                matchers.query_param_matcher(
                    {"path": path, "suite": suite, "changeset": changeset}
                )
            ],
        )


def write_json(root: Path, rel: str, data: dict[str, Any]) -> None:
    """Write a JSON file under *root*, creating parent directories."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(json.dumps(data, indent=2), encoding="utf-8")
