"""Caches for raw coverage documents.

Coverage for a historical changeset never changes, so entries are written
once and never invalidated. Keys are ``(changeset, suite, path)`` triples.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from covdiff.errors import CacheError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_PATH_SEPARATOR = "/"
_FLAT_SEPARATOR = "-"


class CacheKey(NamedTuple):
    """Identifies one coverage document."""

    changeset: str
    suite: str
    path: str


def flatten_path(path: str) -> str:
    """Turn a source path into a flat file name (``dom/base`` -> ``dom-base.json``)."""
    return f"{path.replace(_PATH_SEPARATOR, _FLAT_SEPARATOR)}.json"


class CoverageCache:
    """Base class for raw document caches.

    Subclasses implement ``get`` and ``put``; ``get_or_fetch`` is shared.
    """

    def get(self, key: CacheKey) -> str | None:
        raise NotImplementedError

    def put(self, key: CacheKey, body: str) -> None:
        raise NotImplementedError

    def get_or_fetch(self, key: CacheKey, fetch: Callable[[], str]) -> str:
        """Return the cached body for *key*, fetching and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s/%s/%s", key.changeset, key.suite, key.path)
            return cached
        logger.debug("Cache miss for %s/%s/%s", key.changeset, key.suite, key.path)
        body = fetch()
        self.put(key, body)
        return body


class MemoryCache(CoverageCache):
    """Process-local cache, used when on-disk caching is disabled."""

    def __init__(self) -> None:
        self._store: dict[CacheKey, str] = {}

    def get(self, key: CacheKey) -> str | None:
        return self._store.get(key)

    def put(self, key: CacheKey, body: str) -> None:
        self._store[key] = body

    def clear(self) -> None:
        """Remove all entries."""
        self._store.clear()

    @property
    def size(self) -> int:
        """Number of entries currently held."""
        return len(self._store)


class DiskCache(CoverageCache):
    """One JSON file per key under ``root/{changeset}/{suite}/``.

    Files are written to a temporary name in the same directory and then
    renamed, so an interrupted write never leaves a truncated entry behind.

    Args:
        root: Cache root directory (``data`` by default in the CLI).
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def path_for(self, key: CacheKey) -> Path:
        """Return the file that holds *key*."""
        return self._root / key.changeset / key.suite / flatten_path(key.path)

    def get(self, key: CacheKey) -> str | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CacheError(f"Failed to read cache file {path}: {exc}") from exc

    def put(self, key: CacheKey, body: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        except OSError as exc:
            raise CacheError(f"Failed to prepare cache directory {path.parent}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(body)
            Path(tmp_name).replace(path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheError(f"Failed to write cache file {path}: {exc}") from exc
        logger.debug("Cached %s", path)
