"""Configuration parsing from ``.covdiff.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covdiff.errors import ConfigError
from covdiff.store import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".covdiff.yml"
REPORT_FORMATS = ("csv", "json", "table")

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_URL_SCHEMES = ("http://", "https://")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    return value if isinstance(value, dict) else {}


@dataclass
class ServiceConfig:
    """Coverage service connection settings."""

    base_url: str = DEFAULT_BASE_URL
    """Root URL of the coverage API (supports ${ENV_VAR} expansion)."""

    timeout: float = 30.0
    """Request timeout in seconds."""


@dataclass
class CacheConfig:
    """On-disk cache settings."""

    dir: str = "data"
    """Cache root; documents live under ``{dir}/{changeset}/{suite}/``."""

    enabled: bool = True
    """Keep documents on disk between runs."""


@dataclass
class SuitesConfig:
    """The two suites being compared."""

    suite1: str = "web-platform-tests"
    """First suite name."""

    suite2: str = "mochitest-plain-chunked"
    """Second suite name."""


@dataclass
class ReportConfig:
    """Report output settings."""

    format: str = "csv"
    """Output format: csv, json or table."""


@dataclass
class CovdiffConfig:
    """Complete covdiff configuration."""

    service: ServiceConfig = field(default_factory=ServiceConfig)
    """Coverage service settings."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    """Cache settings."""

    suites: SuitesConfig = field(default_factory=SuitesConfig)
    """Suites to compare."""

    paths: list[str] = field(default_factory=lambda: ["dom"])
    """Root paths to scan."""

    report: ReportConfig = field(default_factory=ReportConfig)
    """Report settings."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML for debugging."""


def _normalize_path(value: str) -> str:
    # "/" names the tree root, which the service addresses as "".
    return value.strip().strip("/")


def _parse_paths(value: Any) -> list[str]:
    if isinstance(value, str):
        return split_paths(value)
    if isinstance(value, list):
        return [_normalize_path(str(item)) for item in value if str(item).strip()]
    return ["dom"]


def split_paths(value: str) -> list[str]:
    """Split a comma-separated path list, dropping blanks.

    Surrounding slashes are removed, so ``/`` selects the tree root.
    """
    return [_normalize_path(part) for part in value.split(",") if part.strip()]


def load_config(path: str | Path | None = None) -> CovdiffConfig:
    """Load ``.covdiff.yml`` from *path* (a file or a directory).

    A missing file yields defaults, with ``COVDIFF_BASE_URL`` and
    ``COVDIFF_CACHE_DIR`` consulted for unset values.

    Raises:
        ConfigError: If the file exists but cannot be read or parsed.
    """
    config_path = Path(path) if path is not None else Path.cwd()
    if config_path.is_dir():
        config_path = config_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.is_file():
        try:
            parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Failed to load {config_path}: {exc}") from exc
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        elif parsed is not None:
            raise ConfigError(f"{config_path} must contain a mapping at the top level")
        logger.debug("Loaded configuration from %s", config_path)

    service_raw = _section(raw, "service")
    cache_raw = _section(raw, "cache")
    suites_raw = _section(raw, "suites")
    report_raw = _section(raw, "report")

    try:
        service = ServiceConfig(
            base_url=str(
                service_raw.get("base_url", os.environ.get("COVDIFF_BASE_URL", DEFAULT_BASE_URL))
            ),
            timeout=float(service_raw.get("timeout", 30.0)),
        )
        cache = CacheConfig(
            dir=str(cache_raw.get("dir", os.environ.get("COVDIFF_CACHE_DIR", "data"))),
            enabled=bool(cache_raw.get("enabled", True)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value in {config_path}: {exc}") from exc

    suites = SuitesConfig(
        suite1=str(suites_raw.get("suite1", "web-platform-tests")),
        suite2=str(suites_raw.get("suite2", "mochitest-plain-chunked")),
    )

    return CovdiffConfig(
        service=service,
        cache=cache,
        suites=suites,
        paths=_parse_paths(raw.get("paths", ["dom"])),
        report=ReportConfig(format=str(report_raw.get("format", "csv")).lower()),
        raw=raw,
    )


def validate_config(config: CovdiffConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.service.base_url.strip().startswith(_URL_SCHEMES):
        errors.append(
            f"service.base_url must start with http:// or https:// "
            f"(got: {config.service.base_url!r})"
        )

    if config.service.timeout <= 0:
        errors.append(f"service.timeout must be positive (got: {config.service.timeout})")

    if config.cache.enabled and not config.cache.dir.strip():
        errors.append("cache.dir is required when cache.enabled is true")

    if not config.suites.suite1.strip():
        errors.append("suites.suite1 must not be empty")
    if not config.suites.suite2.strip():
        errors.append("suites.suite2 must not be empty")

    if not config.paths:
        errors.append("paths must list at least one root path")

    if config.report.format not in REPORT_FORMATS:
        errors.append(
            f"report.format must be one of {', '.join(REPORT_FORMATS)} "
            f"(got: {config.report.format!r})"
        )

    return errors
