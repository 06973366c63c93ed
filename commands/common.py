"""Shared helpers for CLI commands.

Builds the HueState each command works on, waits for background work and
reports failures in a consistent way.
"""

from concurrent.futures import Future

import click

from core.config import CONFIG_FILE, JsonFileStore
from core.state import HueState
from models.color import RGBColor
from models.types import BridgeConfig
from models.utils import find_by_name, find_similar_strings


def get_state() -> HueState:
    """Create application state backed by the user's config file."""
    return HueState(JsonFileStore(CONFIG_FILE))


def fail(message: str):
    """Print an error and exit with status 1."""
    click.secho(f"✗ {message}", fg='red', err=True)
    raise SystemExit(1)


def require_bridge(state: HueState) -> BridgeConfig:
    """Return the current bridge or exit with setup instructions."""
    current = state.registry.current
    if current is None:
        click.echo("No bridge configured.", err=True)
        click.echo("Run 'huetrek configure' to discover and pair a bridge,", err=True)
        click.echo("or 'huetrek demo --on' to try the demo bridge.", err=True)
        raise SystemExit(1)
    return current


def wait_for(state: HueState, futures: list[Future] | Future, timeout: float = 30.0):
    """Wait for sync operations and exit if the synchroniser reported an error."""
    if isinstance(futures, Future):
        futures = [futures]
    try:
        state.wait_all(futures, timeout)
    except TimeoutError:
        fail("Timed out waiting for the bridge")
    if state.sync.error is not None:
        fail(state.sync.error.message)


def resolve(items, reference: str, kind: str):
    """Find a light/group/bridge by id or name, or exit with suggestions."""
    item = find_by_name(items, reference)
    if item is not None:
        return item

    click.echo(f"Error: {kind.capitalize()} '{reference}' not found.", err=True)
    suggestions = find_similar_strings(reference, [i.name for i in items], limit=3)
    if suggestions:
        click.secho("Did you mean one of these?", fg='yellow', err=True)
        for suggestion in suggestions:
            click.secho(f"  • {suggestion}", fg='green', err=True)
    raise SystemExit(1)


def parse_colour(value: str) -> RGBColor:
    """Parse '#RRGGBB' or 'R,G,B' with channels 0-255."""
    if ',' in value:
        parts = value.split(',')
        try:
            channels = [int(part.strip()) for part in parts]
        except ValueError:
            raise click.BadParameter(f"Invalid colour: {value}") from None
        if len(channels) != 3 or not all(0 <= c <= 255 for c in channels):
            raise click.BadParameter(f"Invalid colour: {value}")
        return RGBColor(*(c / 255 for c in channels))

    try:
        return RGBColor.from_hex(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None


def format_power(power: bool | None) -> str:
    if power is None:
        return click.style('--', fg='bright_black')
    return click.style('ON ', fg='green', bold=True) if power else click.style('OFF', fg='red')
