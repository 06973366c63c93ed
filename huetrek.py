#!/usr/bin/env python3
"""
HueTrek CLI
Discover, pair with and control Philips Hue bridges: lights, rooms, zones and sensors.
"""

import click

from commands.setup import (
    SuggestingGroup,
    configure_command,
    demo_command,
    discover_command,
    pair_command,
)
from commands.bridges import (
    add_bridge_command,
    bridges_command,
    remove_bridge_command,
    rename_bridge_command,
    switch_bridge_command,
)
from commands.control import (
    brightness_command,
    colour_command,
    group_brightness_command,
    group_colour_command,
    group_toggle_command,
    groups_command,
    lights_command,
    sensors_command,
    toggle_command,
)


@click.group(
    cls=SuggestingGroup,
    context_settings={'help_option_names': ['-h', '--help']},
)
@click.version_option(version='0.1.0', prog_name='HueTrek')
def cli():
    """HueTrek - discover, pair and control your Philips Hue bridges.

Run 'configure' for first-time setup, or 'demo --on' to explore the
built-in demo bridge without any hardware.

Use 'COMMAND -h' or 'COMMAND --help' for help on a specific command."""


# Register setup commands
cli.add_command(discover_command)
cli.add_command(pair_command)
cli.add_command(configure_command)
cli.add_command(demo_command)

# Register bridge registry commands
cli.add_command(bridges_command)
cli.add_command(add_bridge_command)
cli.add_command(rename_bridge_command)
cli.add_command(remove_bridge_command)
cli.add_command(switch_bridge_command)

# Register control commands
cli.add_command(lights_command)
cli.add_command(groups_command)
cli.add_command(sensors_command)
cli.add_command(toggle_command)
cli.add_command(brightness_command)
cli.add_command(colour_command)
cli.add_command(group_toggle_command)
cli.add_command(group_brightness_command)
cli.add_command(group_colour_command)


if __name__ == '__main__':
    cli()
