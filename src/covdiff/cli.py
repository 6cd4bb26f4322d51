"""covdiff CLI: top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypedDict, Unpack

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from covdiff import __version__
from covdiff.config import REPORT_FORMATS, load_config, split_paths, validate_config
from covdiff.diff import diff
from covdiff.errors import CovdiffError
from covdiff.reporters import JSONReporter, build_difference_table, format_csv, reporter
from covdiff.store import CoverageStore
from covdiff.utils.cache import CoverageCache, DiskCache, MemoryCache
from covdiff.utils.http import RequestsTransport
from covdiff.walker import walk

if TYPE_CHECKING:
    from covdiff.config import CovdiffConfig
    from covdiff.models.difference import CoverageDifference

logger = logging.getLogger(__name__)


class _DiffKwargs(TypedDict):
    """Keyword arguments for the diff CLI command."""

    changeset: str | None
    suite1: str | None
    suite2: str | None
    paths: str | None
    cache_dir: str | None
    no_cache: bool
    base_url: str | None
    output_format: str | None
    output_path: str | None


def _configure_logging(*, verbose: bool) -> None:
    root = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        root.addHandler(RichHandler(console=reporter.console, show_path=False, show_time=False))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    # urllib3 is chatty at DEBUG and adds nothing over our own request logs.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _fail(exc: Exception) -> click.Abort:
    kind = exc.kind if isinstance(exc, CovdiffError) else "Generic"
    reporter.print_error(escape(f"{kind}: {exc}"))
    logger.debug("Failure details", exc_info=exc)
    return click.Abort()


def _load_checked_config(config_path: str | None) -> CovdiffConfig:
    try:
        return load_config(config_path)
    except CovdiffError as exc:
        raise _fail(exc) from exc


def _apply_overrides(config: CovdiffConfig, kwargs: _DiffKwargs) -> CovdiffConfig:
    """Layer command-line options over the loaded configuration."""
    if kwargs["suite1"]:
        config.suites.suite1 = kwargs["suite1"]
    if kwargs["suite2"]:
        config.suites.suite2 = kwargs["suite2"]
    if kwargs["paths"] is not None:
        config.paths = split_paths(kwargs["paths"])
    if kwargs["cache_dir"]:
        config.cache.dir = kwargs["cache_dir"]
    if kwargs["no_cache"]:
        config.cache.enabled = False
    if kwargs["base_url"]:
        config.service.base_url = kwargs["base_url"]
    if kwargs["output_format"]:
        config.report.format = kwargs["output_format"]
    return config


def _build_store(config: CovdiffConfig, transport: RequestsTransport) -> CoverageStore:
    cache: CoverageCache = DiskCache(config.cache.dir) if config.cache.enabled else MemoryCache()
    return CoverageStore(transport, cache, config.service.base_url)


def _emit_report(
    config: CovdiffConfig,
    differences: dict[str, CoverageDifference],
    changeset: str,
    output_path: str | None,
) -> None:
    suite1, suite2 = config.suites.suite1, config.suites.suite2

    if config.report.format == "table":
        table = build_difference_table(differences, suite1, suite2)
        if output_path is None:
            Console().print(table)
            return
        with Path(output_path).open("w", encoding="utf-8") as handle:
            Console(file=handle, width=200).print(table)
        return

    if config.report.format == "json":
        text = JSONReporter(changeset, suite1, suite2).generate_string(differences) + "\n"
    else:
        text = format_csv(differences, suite1, suite2)

    if output_path is None:
        click.echo(text, nl=False)
    else:
        Path(output_path).write_text(text, encoding="utf-8")
        reporter.print_info(f"Report written to {output_path}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log requests and cache activity.")
@click.version_option(version=__version__, prog_name="covdiff")
def cli(*, verbose: bool) -> None:
    """covdiff: compare per-line coverage of two test suites."""
    _configure_logging(verbose=verbose)


@cli.command("diff")
@click.argument("changeset", required=False)
@click.option("--suite1", default=None, help="First suite (default: web-platform-tests).")
@click.option("--suite2", default=None, help="Second suite (default: mochitest-plain-chunked).")
@click.option(
    "--paths",
    default=None,
    help="Comma-separated root paths to scan; / is the tree root (default: dom).",
)
@click.option(
    "--cache-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory for cached coverage documents (default: data).",
)
@click.option("--no-cache", is_flag=True, help="Keep fetched documents in memory only.")
@click.option("--base-url", default=None, help="Coverage service URL.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(REPORT_FORMATS),
    default=None,
    help="Report format (default: csv).",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Configuration file or directory containing .covdiff.yml.",
)
def diff_command(config_path: str | None, **kwargs: Unpack[_DiffKwargs]) -> None:
    """Compare coverage of two suites at CHANGESET (default: latest).

    Example:
      covdiff diff --paths dom,layout
      covdiff diff 4b2b3e1f --suite1 web-platform-tests --suite2 xpcshell
    """
    config = _apply_overrides(_load_checked_config(config_path), kwargs)
    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort

    transport = RequestsTransport(timeout_seconds=config.service.timeout)
    store = _build_store(config, transport)
    suite1, suite2 = config.suites.suite1, config.suites.suite2

    try:
        changeset = kwargs["changeset"] or store.latest_changeset()
        reporter.print_info(f"Changeset {changeset}; scanning {', '.join(config.paths)}")

        with reporter.create_status(f"Fetching {suite1} coverage..."):
            suite1_map = walk(store, changeset, suite1, config.paths)
        with reporter.create_status(f"Fetching {suite2} coverage..."):
            suite2_map = walk(store, changeset, suite2, config.paths)

        differences = diff(suite1_map, suite2_map)
        _emit_report(config, differences, changeset, kwargs["output_path"])
    except Exception as exc:
        raise _fail(exc) from exc
    finally:
        transport.close()

    if not differences:
        reporter.print_warning(f"No files with line coverage under {', '.join(config.paths)}")
        return
    reporter.print_success(f"Compared {len(differences)} files")


@cli.command("latest")
@click.option("--base-url", default=None, help="Coverage service URL.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Configuration file or directory containing .covdiff.yml.",
)
def latest(base_url: str | None, config_path: str | None) -> None:
    """Print the latest changeset that has coverage data."""
    config = _load_checked_config(config_path)
    if base_url:
        config.service.base_url = base_url

    transport = RequestsTransport(timeout_seconds=config.service.timeout)
    store = CoverageStore(transport, MemoryCache(), config.service.base_url)
    try:
        click.echo(store.latest_changeset())
    except CovdiffError as exc:
        raise _fail(exc) from exc
    finally:
        transport.close()


@cli.group("config")
def config_group() -> None:
    """Inspect `.covdiff.yml` configuration."""


def _config_to_dict(config: CovdiffConfig) -> dict[str, Any]:
    """Convert CovdiffConfig to a dictionary for display."""
    result = asdict(config)
    result.pop("raw", None)
    return result


@config_group.command("show")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Configuration file or directory containing .covdiff.yml.",
)
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(config_path: str | None, *, as_json: bool) -> None:
    """Display the resolved configuration."""
    config_dict = _config_to_dict(_load_checked_config(config_path))
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Configuration file or directory containing .covdiff.yml.",
)
def config_validate(config_path: str | None) -> None:
    """Validate `.covdiff.yml`.

    Example:
      covdiff config validate
    """
    errors = validate_config(_load_checked_config(config_path))

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    for idx, error in enumerate(errors, start=1):
        reporter.console.print(f"  {idx}. [red]{error}[/red]")
    raise click.Abort


def main() -> None:
    """Console script entry point."""
    cli()
