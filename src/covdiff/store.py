"""Coverage store client: cached access to the coverage service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covdiff.errors import CoverageParseError
from covdiff.models.coverage import CoverageNode
from covdiff.utils.cache import CacheKey, CoverageCache

if TYPE_CHECKING:
    from covdiff.utils.http import Transport

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.coverage.testing.moz.tools/v2"
_PATH_ENDPOINT = "/path"


def normalize_base_url(url: str) -> str:
    """Trim whitespace and trailing slashes from a configured service URL."""
    return url.strip().rstrip("/")


class CoverageStore:
    """Fetch coverage tree nodes, reading through a cache.

    Args:
        transport: Issues the HTTP requests.
        cache: Holds raw response bodies keyed by changeset, suite and path.
        base_url: Coverage service root (``.../v2``).
    """

    def __init__(
        self,
        transport: Transport,
        cache: CoverageCache,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._transport = transport
        self._cache = cache
        self._base_url = normalize_base_url(base_url)

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}{_PATH_ENDPOINT}"

    def fetch(self, changeset: str, suite: str, path: str) -> CoverageNode:
        """Return the node for *path* in *suite* at *changeset*.

        The raw body is cached before it is parsed, so a cached entry is
        never requested again.

        Raises:
            TransportError: If the request fails.
            CacheError: If the cache cannot be read or written.
            CoverageParseError: If the body is not a valid coverage document.
        """
        key = CacheKey(changeset=changeset, suite=suite, path=path)

        def _download() -> str:
            params = {"path": path, "suite": suite, "changeset": changeset}
            logger.debug("GET %s %s", self.endpoint, params)
            return self._transport.get(self.endpoint, params)

        body = self._cache.get_or_fetch(key, _download)
        return CoverageNode.from_json(body)

    def latest_changeset(self) -> str:
        """Ask the service for the most recent changeset with coverage data.

        Raises:
            TransportError: If the request fails.
            CoverageParseError: If the root document carries no changeset.
        """
        logger.debug("GET %s (latest changeset)", self.endpoint)
        body = self._transport.get(self.endpoint, {"path": ""})
        changeset = CoverageNode.from_json(body).changeset.strip()
        if not changeset:
            raise CoverageParseError("Root coverage document has an empty 'changeset'")
        logger.info("Resolved latest changeset %s", changeset)
        return changeset
