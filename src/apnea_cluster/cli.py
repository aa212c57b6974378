"""
Command-line interface for apnea-cluster.

Provides commands for analyzing OSCAR details exports and managing
clustering configuration.
"""

import logging

from datetime import datetime
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Any

import click

from pydantic import ValidationError

from apnea_cluster.analysis.config import AVAILABLE_PRESETS, DEFAULT_PRESET
from apnea_cluster.analysis.normalization import collect_channel_samples, normalize_rows
from apnea_cluster.analysis.service import ClusterAnalysisService
from apnea_cluster.analysis.summaries import (
    format_cluster_report,
    format_false_negative_report,
    summarize_cluster,
)
from apnea_cluster.config import (
    CLUSTERING_SECTION,
    get_config_path,
    load_config,
    resolve_clustering_config,
    set_clustering_setting,
    unset_clustering_setting,
)
from apnea_cluster.constants import SUMMARY_CHANNELS
from apnea_cluster.logging_config import setup_logging
from apnea_cluster.parsers.details_csv import read_details_csv

logger = logging.getLogger(__name__)

try:
    __version__ = get_version("apnea-cluster")
except PackageNotFoundError:
    __version__ = "dev"


def _format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into a single readable line."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        message = detail["msg"]
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


@click.group()
@click.version_option(__version__, prog_name="apnea-cluster")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """apnea-cluster: Apnea cluster and false-negative analysis for OSCAR exports"""
    setup_logging(verbose=verbose, console_format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("details_csv", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Only analyze rows from this date (YYYY-MM-DD)",
)
@click.option(
    "--preset",
    type=click.Choice(list(AVAILABLE_PRESETS)),
    help=f"Threshold preset. Default: config file, else {DEFAULT_PRESET}",
)
@click.option(
    "--gap-sec", type=float, help="Max gap between annotation events (seconds)"
)
@click.option("--bridge-threshold", type=float, help="Min FLG level for bridging")
@click.option(
    "--bridge-gap-sec", type=float, help="Max gap within an FLG cluster (seconds)"
)
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
def analyze(
    details_csv: str,
    date: datetime | None,
    preset: str | None,
    gap_sec: float | None,
    bridge_threshold: float | None,
    bridge_gap_sec: float | None,
    as_json: bool,
) -> None:
    """Detect apnea clusters and false negatives in a details CSV export."""
    overrides: dict[str, Any] = {
        "gap_sec": gap_sec,
        "bridge_threshold": bridge_threshold,
        "bridge_gap_sec": bridge_gap_sec,
    }
    try:
        config = resolve_clustering_config(preset=preset, overrides=overrides)
    except ValidationError as e:
        raise click.ClickException(
            f"Invalid clustering configuration: {_format_validation_error(e)}"
        ) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    date_str = date.strftime("%Y-%m-%d") if date else None
    try:
        rows = read_details_csv(Path(details_csv), date=date_str)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot read {details_csv}: {e}") from e

    normalized = normalize_rows(rows)
    logger.info(
        f"Parsed {len(normalized.annotations)} apnea events, "
        f"{len(normalized.flg_readings)} FLG readings"
    )

    result = ClusterAnalysisService(config).analyze(
        normalized.annotations, normalized.flg_readings
    )

    if as_json:
        click.echo(result.model_dump_json(indent=2))
        return

    scope = f" for {date_str}" if date_str else ""
    if result.clusters:
        channels = collect_channel_samples(rows, SUMMARY_CHANNELS)
        summaries = [summarize_cluster(cluster, channels) for cluster in result.clusters]
        click.echo(f"Detected apnea clusters{scope}:")
        click.echo(format_cluster_report(summaries))
    else:
        click.echo(
            f"No apnea clusters (≥{config.min_cluster_events} events and "
            f"≥{config.min_cluster_total_duration_sec:g}s total) found{scope}"
        )

    click.echo("")
    if result.false_negatives:
        click.echo(f"Potential false negatives{scope}:")
        click.echo(format_false_negative_report(result.false_negatives))
    else:
        click.echo(f"No potential false negatives found{scope}")


@cli.command()
def presets() -> None:
    """List threshold presets and their values."""
    for name, preset_config in AVAILABLE_PRESETS.items():
        marker = " (default)" if name == DEFAULT_PRESET else ""
        click.echo(f"{name}{marker}")
        for key, value in preset_config.model_dump().items():
            click.echo(f"  {key} = {value}")

    click.echo(
        "\nNote: bridge_threshold and edge_threshold are shared by all presets, "
        "so clustering is the same under each one. Presets differ only in "
        "false_neg_confidence_min and false_neg_duration_min_sec. Set "
        "bridge_threshold explicitly to change the FLG level used for "
        "false negatives."
    )


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("show")
def show_config_cmd() -> None:
    """Show all configuration settings."""
    config_path = get_config_path()
    if not config_path.exists():
        click.echo(f"No config file: {config_path}")
        return

    click.echo(f"Config file: {config_path}\n")
    config_data = load_config()
    if not config_data:
        click.echo("Configuration is empty.")
        return

    click.echo("Settings:")
    for section, values in config_data.items():
        if not isinstance(values, dict):
            click.echo(f"  {section} = {values!r}")
            continue
        click.echo(f"  [{section}]")
        for key, value in values.items():
            click.echo(f"    {key} = {value!r}")


@config.command("set")
@click.argument("key")
@click.argument("value")
def set_config_cmd(key: str, value: str) -> None:
    """Set a [clustering] value (preset or a threshold name)."""
    try:
        stored = set_clustering_setting(key, value)
    except ValidationError as e:
        raise click.ClickException(
            f"Invalid value for {key}: {_format_validation_error(e)}"
        ) from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✓ {CLUSTERING_SECTION}.{key} = {stored!r}")
    click.echo(f"  Config: {get_config_path()}")


@config.command("unset")
@click.argument("key")
def unset_config_cmd(key: str) -> None:
    """Remove a [clustering] value."""
    if unset_clustering_setting(key):
        click.echo(f"✓ Removed {CLUSTERING_SECTION}.{key}")
    else:
        click.echo(f"{CLUSTERING_SECTION}.{key} was not set.")


if __name__ == "__main__":
    cli()
