"""
Setup commands for the HueTrek CLI.

Contains the custom Click group class with typo suggestions, plus bridge
discovery, pairing, first-time configuration and demo mode.
"""

import click

from commands.common import fail, get_state
from core.config import CONFIG_FILE, save_setting
from core.discovery import FOUND
from core.errors import HueError, LinkButtonNotPressed, describe_error
from core.state import PAIRED, WAITING_FOR_BUTTON, HueState
from models.utils import similarity_score


class SuggestingGroup(click.Group):
    """Click group that suggests similar commands when one is mistyped."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            if 'No such command' not in str(e):
                raise
            cmd_name = args[0] if args else ''
            suggestions = self._get_suggestions(ctx, cmd_name)
            if not suggestions:
                raise

            error_msg = f"No such command '{cmd_name}'.\n\n"
            error_msg += click.style("Did you mean one of these?\n", fg='yellow')
            for suggestion in suggestions:
                error_msg += click.style(f"  • {suggestion}\n", fg='green')
            raise click.UsageError(error_msg, ctx) from None

    def _get_suggestions(self, ctx, cmd_name, max_suggestions=3):
        if not cmd_name:
            return []

        scored = []
        for command in self.list_commands(ctx):
            cmd_obj = self.get_command(ctx, command)
            if cmd_obj and not cmd_obj.hidden:
                score = similarity_score(cmd_name, command)
                if score > 0:
                    scored.append((score, command))

        scored.sort(reverse=True, key=lambda x: x[0])
        return [command for _, command in scored[:max_suggestions]]


def discover_address(state: HueState) -> str | None:
    """Run discovery in the foreground. Returns the address or None."""
    click.echo("Discovering Hue bridges...")
    future = state.start_discovery()
    state.wait(future)

    if state.discovery.status == FOUND:
        click.secho(f"✓ Found bridge at {state.discovery.address}", fg='green')
        return state.discovery.address

    click.secho(f"⚠ {state.discovery.error}", fg='yellow')
    return None


def pair_interactive(state: HueState, address: str, name: str | None, attempts: int) -> bool:
    """Pair with the user pressing Enter after each link button press."""
    for attempt in range(1, attempts + 1):
        click.echo()
        click.secho("Press the LINK BUTTON on your Hue Bridge", fg='yellow', bold=True)
        click.pause("Press Enter when ready...")
        click.echo(f"Pairing with {address}... (attempt {attempt}/{attempts})")

        state.wait(state.start_pairing(address, name))

        if state.pairing_status == PAIRED:
            return True
        click.secho(f"✗ {state.pairing_error}", fg='red')
        if state.pairing_status != WAITING_FOR_BUTTON:
            return False

    return False


def pair_polling(state: HueState, address: str, name: str | None, attempts: int) -> bool:
    """Pair by polling the bridge once a second until the button is pressed."""
    click.secho("Press the LINK BUTTON on your Hue Bridge now", fg='yellow', bold=True)
    try:
        result = state.pairing.pair_until_linked(address, attempts=attempts)
    except LinkButtonNotPressed:
        click.secho(f"✗ Link button was not pressed after {attempts} attempts", fg='red')
        return False
    except HueError as e:
        click.secho(f"✗ {describe_error(e, 'pairing')}", fg='red')
        return False

    state.registry.add(result.to_config(name or state.registry.next_default_name()))
    return True


def _report_paired(state: HueState):
    current = state.registry.current
    click.echo()
    click.secho(f"✓ Paired with {current.name} ({current.address})", fg='green', bold=True)
    click.echo(f"Configuration saved to {CONFIG_FILE}")


@click.command(name='discover')
def discover_command():
    """Find a Hue bridge on the local network.

    Asks the Philips discovery service first, then falls back to an SSDP
    search on the local network.
    """
    with get_state() as state:
        if not discover_address(state):
            raise SystemExit(1)


@click.command(name='pair')
@click.option('--address', '-a', help='Bridge address (discovered if omitted)')
@click.option('--name', '-n', help='Display name for the bridge')
@click.option('--attempts', default=3, show_default=True, help='Number of pairing attempts')
@click.option('--poll', is_flag=True, help='Poll the bridge instead of waiting for Enter')
def pair_command(address: str | None, name: str | None, attempts: int, poll: bool):
    """Pair with a bridge using its link button.

    \b
    Examples:
      huetrek pair
      huetrek pair --address 192.168.1.20 --name "Main Bridge"
      huetrek pair -a 192.168.1.20 --poll --attempts 30
    """
    with get_state() as state:
        address = address or discover_address(state)
        if not address:
            fail("No bridge address. Use --address to enter one manually.")

        paired = (pair_polling if poll else pair_interactive)(state, address, name, attempts)
        if not paired:
            raise SystemExit(1)
        _report_paired(state)


@click.command(name='configure')
def configure_command():
    """Interactive first-time setup: discover, pair and save a bridge."""
    with get_state() as state:
        click.echo()
        click.secho("HueTrek bridge setup", fg='cyan', bold=True)
        click.echo()

        address = discover_address(state)
        if address:
            if not click.confirm("Use this bridge?", default=True):
                address = None
        if not address:
            if not click.confirm("Enter bridge address manually?", default=True):
                click.echo("Setup cancelled.")
                return
            address = click.prompt("Bridge address", type=str)

        name = click.prompt("Bridge name", default=state.registry.next_default_name())

        if not pair_interactive(state, address, name, attempts=3):
            fail("Failed to pair with bridge")
        _report_paired(state)

        state.wait_all(state.sync.fetch_all(), timeout=30)
        click.echo(f"  {len(state.sync.lights)} lights, {len(state.sync.groups)} groups, "
                   f"{len(state.sync.sensors)} sensors")


@click.command(name='demo')
@click.option('--on/--off', default=True, help='Enable or disable the demo bridge')
def demo_command(on: bool):
    """Use the built-in demo bridge when no real bridge is selected."""
    with get_state() as state:
        save_setting(state.registry.store, 'demo_fallback', on)
    status = "enabled" if on else "disabled"
    click.secho(f"✓ Demo mode {status}", fg='green')
