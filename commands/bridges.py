"""
Bridge registry commands.

List, add, rename, remove and switch between paired bridges.
"""

import click

from commands.common import fail, get_state, resolve


@click.command(name='bridges')
def bridges_command():
    """List paired bridges. The current bridge is marked with *."""
    with get_state() as state:
        registry = state.registry
        configs = registry.configs

        if not configs:
            current = registry.current
            if current is not None and current.is_demo:
                click.echo(f"* {current.name} (offline demo)")
            else:
                click.echo("No bridges configured. Run 'huetrek configure' to add one.")
            return

        for config in configs:
            marker = '*' if config.id == registry.current_id else ' '
            line = f"{marker} {config.name}  {click.style(config.address, fg='cyan')}"
            click.echo(f"{line}  {click.style(config.id, fg='bright_black')}")


@click.command(name='add-bridge')
@click.argument('name')
@click.argument('address')
@click.argument('credential')
def add_bridge_command(name: str, address: str, credential: str):
    """Add a bridge whose credential you already have, and select it.

    \b
    Examples:
      huetrek add-bridge "Office" 192.168.1.30 1a2b3c4d5e6f
    """
    with get_state() as state:
        config = state.registry.create(name, address, credential)
    click.secho(f"✓ Added {config.name} ({config.address})", fg='green')


@click.command(name='rename-bridge')
@click.argument('bridge')
@click.argument('new_name')
def rename_bridge_command(bridge: str, new_name: str):
    """Rename a bridge (by id or current name)."""
    if not new_name.strip():
        fail("Bridge name cannot be empty")
    with get_state() as state:
        config = resolve(state.registry.configs, bridge, 'bridge')
        state.registry.rename(config.id, new_name)
    click.secho(f"✓ Renamed {config.name} to {new_name}", fg='green')


@click.command(name='remove-bridge')
@click.argument('bridge')
@click.option('--yes', '-y', is_flag=True, help='Skip confirmation prompt')
def remove_bridge_command(bridge: str, yes: bool):
    """Forget a bridge. If it was current, another bridge is selected."""
    with get_state() as state:
        config = resolve(state.registry.configs, bridge, 'bridge')
        if not yes and not click.confirm(f"Remove {config.name} ({config.address})?"):
            click.echo("Cancelled.")
            return

        state.registry.remove(config.id)
        click.secho(f"✓ Removed {config.name}", fg='green')

        current = state.registry.current
        if current is not None:
            click.echo(f"Current bridge is now {current.name}")


@click.command(name='switch-bridge')
@click.argument('bridge')
def switch_bridge_command(bridge: str):
    """Select the bridge used by the other commands."""
    with get_state() as state:
        config = resolve(state.registry.configs, bridge, 'bridge')
        state.registry.switch(config.id)
    click.secho(f"✓ Switched to {config.name} ({config.address})", fg='green')
