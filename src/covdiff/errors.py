"""Exception hierarchy for covdiff.

Every failure propagates to the CLI, which reports the error kind and
exits non-zero. Nothing in the pipeline retries or recovers.
"""

from __future__ import annotations


class CovdiffError(Exception):
    """Base class for all covdiff failures."""

    kind = "Error"


class TransportError(CovdiffError):
    """Raised when an HTTP request fails or returns a non-success status."""

    kind = "Transport"


class CoverageParseError(CovdiffError):
    """Raised when a coverage document is not valid JSON or has the wrong shape."""

    kind = "Parse"


class CacheError(CovdiffError):
    """Raised when the coverage cache cannot be read or written."""

    kind = "FileSystem"


class ConfigError(CovdiffError):
    """Raised when the configuration file cannot be loaded."""

    kind = "Config"
