"""HTTP transport used to talk to the coverage service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import requests

from covdiff.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

_HTTP_SUCCESS_MIN = 200
_HTTP_SUCCESS_MAX = 300
_MAX_ERROR_BODY = 300


class Transport(Protocol):
    """Anything that can issue a GET and return the response body."""

    def get(self, url: str, params: Mapping[str, str]) -> str:
        """Return the body of ``GET url?params``.

        Raises:
            TransportError: On connection failure or a non-success status.
        """
        ...


class RequestsTransport:
    """``Transport`` backed by a ``requests.Session``."""

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout_seconds

    def get(self, url: str, params: Mapping[str, str]) -> str:
        try:
            response = self._session.get(url, params=dict(params), timeout=self._timeout)
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        logger.debug("GET %s -> HTTP %s", response.url, response.status_code)
        if response.status_code < _HTTP_SUCCESS_MIN or response.status_code >= _HTTP_SUCCESS_MAX:
            message = response.text.strip()[:_MAX_ERROR_BODY]
            raise TransportError(
                f"GET {response.url} failed (HTTP {response.status_code}): {message}"
            )
        return response.text

    def close(self) -> None:
        self._session.close()
