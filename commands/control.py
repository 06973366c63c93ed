"""
Control commands for lights, groups and sensors.

Listing commands fetch the current bridge's state; control commands apply
the change locally, send it to the bridge and re-fetch to confirm.
"""

import click

from commands.common import (
    format_power,
    get_state,
    parse_colour,
    require_bridge,
    resolve,
    wait_for,
)
from models.types import Light


def _colour_swatch(light: Light) -> str:
    colour = light.derived_color
    if colour is None:
        return ''
    hex_value = colour.to_rgb().to_hex()
    return click.style(hex_value, fg='magenta')


@click.command(name='lights')
def lights_command():
    """List lights on the current bridge."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_lights())

        lights = state.sync.lights
        if not lights:
            click.echo("No lights found.")
            return

        width = max(len(light.name) for light in lights)
        for light in lights:
            brightness = '---' if light.brightness is None else f"{light.brightness:>3}"
            line = f"  {light.name:<{width}}  {format_power(light.power)}  bri {brightness}/254"
            swatch = _colour_swatch(light)
            if swatch:
                line += f"  {swatch}"
            if not light.reachable:
                line += click.style('  (unreachable)', fg='yellow')
            click.echo(line)


@click.command(name='groups')
def groups_command():
    """List rooms and zones on the current bridge."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_groups())

        groups = state.sync.groups
        if not groups:
            click.echo("No groups found.")
            return

        width = max(len(group.name) for group in groups)
        for group in groups:
            if group.all_on:
                status = click.style('ALL ON ', fg='green', bold=True)
            elif group.any_on:
                status = click.style('SOME ON', fg='yellow')
            else:
                status = click.style('OFF    ', fg='red')
            kind = group.group_class or group.group_type
            click.echo(f"  {group.name:<{width}}  {status}  {len(group.light_ids)} lights  {kind}")


@click.command(name='sensors')
def sensors_command():
    """List sensors with battery level and last update."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_sensors())

        sensors = state.sync.sensors
        if not sensors:
            click.echo("No sensors found.")
            return

        width = max(len(sensor.name) for sensor in sensors)
        for sensor in sensors:
            battery_colour = 'red' if sensor.battery < 20 else 'green'
            battery = click.style(f"{sensor.battery:>3}%", fg=battery_colour)
            line = f"  {sensor.name:<{width}}  {battery}  {sensor.product_name}"
            if sensor.last_updated:
                line += f"  updated {sensor.last_updated}"
            if sensor.rotary and sensor.rotary.expected_rotation is not None:
                line += f"  rotation {sensor.rotary.expected_rotation}"
            if not sensor.reachable:
                line += click.style('  (unreachable)', fg='yellow')
            click.echo(line)


@click.command(name='toggle')
@click.argument('light_name')
def toggle_command(light_name: str):
    """Turn a light on if it is off, or off if it is on."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_lights())
        light = resolve(state.sync.lights, light_name, 'light')

        wait_for(state, state.sync.toggle_light(light.id))
        light = state.sync.light(light.id)
        click.echo(f"✓ {light.name} turned {'ON' if light.power else 'OFF'}")


@click.command(name='brightness')
@click.argument('light_name')
@click.argument('brightness', type=click.IntRange(0, 254))
def brightness_command(light_name: str, brightness: int):
    """Set brightness of a light (0-254)."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_lights())
        light = resolve(state.sync.lights, light_name, 'light')

        wait_for(state, state.sync.set_light_brightness(light.id, brightness))
        click.echo(f"✓ {light.name} brightness set to {brightness}/254")


@click.command(name='colour')
@click.argument('light_name')
@click.argument('colour')
def colour_command(light_name: str, colour: str):
    """Set a light's colour from '#RRGGBB' or 'R,G,B' (0-255).

    \b
    Examples:
      huetrek colour "Ready Room" "#ff8800"
      huetrek colour "Ready Room" 255,136,0
    """
    rgb = parse_colour(colour)
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_lights())
        light = resolve(state.sync.lights, light_name, 'light')

        wait_for(state, state.sync.set_light_color(light.id, rgb))
        click.echo(f"✓ {light.name} colour set to {rgb.to_hex()}")


@click.command(name='group-toggle')
@click.argument('group_name')
def group_toggle_command(group_name: str):
    """Turn every light in a room or zone on or off."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_groups())
        group = resolve(state.sync.groups, group_name, 'group')

        wait_for(state, state.sync.toggle_group(group.id))
        group = state.sync.group(group.id)
        click.echo(f"✓ {group.name} turned {'ON' if group.action.power else 'OFF'}")


@click.command(name='group-brightness')
@click.argument('group_name')
@click.argument('brightness', type=click.IntRange(0, 254))
def group_brightness_command(group_name: str, brightness: int):
    """Set brightness for a whole room or zone (0-254)."""
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_groups())
        group = resolve(state.sync.groups, group_name, 'group')

        wait_for(state, state.sync.set_group_brightness(group.id, brightness))
        click.echo(f"✓ {group.name} brightness set to {brightness}/254")


@click.command(name='group-colour')
@click.argument('group_name')
@click.argument('colour')
def group_colour_command(group_name: str, colour: str):
    """Set colour for a whole room or zone from '#RRGGBB' or 'R,G,B'."""
    rgb = parse_colour(colour)
    with get_state() as state:
        require_bridge(state)
        wait_for(state, state.sync.fetch_groups())
        group = resolve(state.sync.groups, group_name, 'group')

        wait_for(state, state.sync.set_group_color(group.id, rgb))
        click.echo(f"✓ {group.name} colour set to {rgb.to_hex()}")
