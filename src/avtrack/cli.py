"""
Command-line interface for AVTRACK.

Provides commands for analyzing extracted wave events and managing detector
threshold overrides.
"""

import json
import logging
import sys

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

import click

from avtrack.analysis.service import AnalysisService
from avtrack.analysis.summaries import format_report
from avtrack.analysis.thresholds import DEFAULT_THRESHOLDS, THRESHOLD_NAMES
from avtrack.config import (
    THRESHOLDS_SECTION,
    get_config_path,
    load_config,
    load_thresholds,
    reset_threshold,
    set_threshold,
)
from avtrack.constants import Urgency
from avtrack.logging_config import setup_logging
from avtrack.parsers.events import InvalidInputShape, load_payload

logger = logging.getLogger(__name__)

EMERGENT_EXIT_CODE = 2

try:
    __version__ = get_version("avtrack")
except PackageNotFoundError:
    __version__ = "dev"


def version_callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Show version."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"avtrack, version {__version__}")
    ctx.exit()


@click.group()
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """AVTRACK: AV Conduction Analysis Tool"""
    setup_logging(verbose=verbose, console_format="%(levelname)s: %(message)s")


@cli.command()
@click.argument("path", type=click.Path(dir_okay=False, allow_dash=True))
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.option(
    "--fail-on-emergent",
    is_flag=True,
    help=f"Exit with status {EMERGENT_EXIT_CODE} when the result is EMERGENT",
)
def analyze(path: str, as_json: bool, fail_on_emergent: bool) -> None:
    """Analyze a JSON wave-event payload (use - for stdin)."""
    try:
        with click.open_file(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e

    service = AnalysisService.from_config()
    try:
        result = service.analyze(load_payload(text))
    except InvalidInputShape as e:
        raise click.ClickException(f"Invalid input: {e}") from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(format_report(result))

    if fail_on_emergent and result.assessment.urgency == Urgency.EMERGENT:
        logger.debug("Emergent result with --fail-on-emergent; exiting non-zero")
        sys.exit(EMERGENT_EXIT_CODE)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("show")
def show_config_cmd() -> None:
    """Show threshold settings and their sources."""
    config_path = get_config_path()
    if config_path.exists():
        click.echo(f"Config file: {config_path}\n")
    else:
        click.echo(f"No config file: {config_path} (using defaults)\n")

    overrides = load_config().get(THRESHOLDS_SECTION, {})
    if not isinstance(overrides, dict):
        overrides = {}
    thresholds = load_thresholds()

    click.echo("Thresholds:")
    for name in THRESHOLD_NAMES:
        value = getattr(thresholds, name)
        if name in overrides and value != getattr(DEFAULT_THRESHOLDS, name):
            source = f"override, default {getattr(DEFAULT_THRESHOLDS, name)}"
        else:
            source = "default"
        click.echo(f"  {name} = {value}  ({source})")


@config.command("set-threshold")
@click.argument("name", type=click.Choice(THRESHOLD_NAMES))
@click.argument("value", type=float)
def set_threshold_cmd(name: str, value: float) -> None:
    """Override a detector threshold."""
    try:
        thresholds = set_threshold(name, value)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"✓ {name} = {getattr(thresholds, name)}")
    click.echo(f"  Config: {get_config_path()}")


@config.command("reset-threshold")
@click.argument("name", type=click.Choice(THRESHOLD_NAMES))
def reset_threshold_cmd(name: str) -> None:
    """Restore a detector threshold to its default."""
    reset_threshold(name)
    click.echo(f"✓ {name} reset to default ({getattr(DEFAULT_THRESHOLDS, name)})")


if __name__ == "__main__":
    cli()
