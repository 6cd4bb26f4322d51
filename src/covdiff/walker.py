"""Collect a suite's coverage tree into a flat path -> node map."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covdiff.models.coverage import CoverageMap
    from covdiff.store import CoverageStore

logger = logging.getLogger(__name__)


def walk(
    store: CoverageStore,
    changeset: str,
    suite: str,
    root_paths: Iterable[str],
) -> CoverageMap:
    """Fetch every node reachable from *root_paths*.

    Uses an explicit stack, so siblings come back in reverse order; callers
    must not rely on visitation order. The service is trusted to return a
    tree: a node listing itself as a child would loop forever.

    Args:
        store: Source of coverage nodes.
        changeset: Revision to read coverage for.
        suite: Test suite name.
        root_paths: Paths to start from (``""`` is the tree root).

    Returns:
        Every visited node, files and directories alike, keyed by the path
        that was requested.
    """
    result: CoverageMap = {}
    stack: list[str] = list(root_paths)

    while stack:
        path = stack.pop()
        node = store.fetch(changeset, suite, path)
        if node.is_directory:
            stack.extend(node.children)
        result[path] = node

    logger.info("Collected %d coverage nodes for suite %s", len(result), suite)
    return dict(sorted(result.items()))
