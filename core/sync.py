"""In-memory mirror of a bridge's lights, groups and sensors.

Fetches run on the executor and hand their results back through the update
queue, where each collection is replaced in a single assignment. Mutations
change the local record immediately, then a background job sends the PUT
and re-fetches the collection to reconcile with the bridge.

A failed fetch never clears a collection. It records an ErrorState whose
retry callable repeats the same operation. A failed mutation keeps its
optimistic value until the next successful fetch.
"""

import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Callable

import click

from core.config import DEFAULT_SETTINGS
from core.dispatch import Observable, UpdateQueue, completed
from core.errors import HueError, describe_error
from core.registry import BridgeRegistry
from core.transport import BridgeTransport, DemoTransport, TransportPolicy
from models.color import RGBColor, rgb_to_bridge
from models.types import BridgeConfig, Group, Light, Sensor
from models.wire import decode_groups, decode_lights, decode_sensors, parse_replies

LIGHTS = 'lights'
GROUPS = 'groups'
SENSORS = 'sensors'

DECODERS = {
    LIGHTS: decode_lights,
    GROUPS: decode_groups,
    SENSORS: decode_sensors,
}

# Wire key -> record attribute for the writable light/group fields
STATE_FIELDS = {
    'on': 'power',
    'bri': 'brightness',
    'hue': 'hue',
    'sat': 'saturation',
}


@dataclass(frozen=True)
class ErrorState:
    """A dismissable failure with a way to try again."""
    kind: str
    message: str
    retry: Callable[[], Future]


def make_transport_factory(settings: dict | None = None, policy: TransportPolicy | None = None):
    """Return the default factory: demo data for the demo bridge, HTTP otherwise."""
    settings = {**DEFAULT_SETTINGS, **(settings or {})}

    def factory(config: BridgeConfig):
        if config.is_demo:
            return DemoTransport()
        return BridgeTransport(config.address, config.credential, policy=policy,
                               timeout=settings['request_timeout'])

    return factory


def _apply_fields(target, body: dict):
    for key, value in body.items():
        attribute = STATE_FIELDS.get(key)
        if attribute:
            setattr(target, attribute, value)


def _validate_brightness(brightness: int):
    if not 0 <= brightness <= 254:
        raise ValueError(f"Brightness must be between 0 and 254, got {brightness}")


class StateSynchronizer(Observable):
    """Owns the lights, groups and sensors of the current bridge.

    Every public method must be called from the update context (the thread
    draining ``updates``). Observers are notified with 'lights', 'groups',
    'sensors' or 'error'.
    """

    def __init__(self, registry: BridgeRegistry, updates: UpdateQueue, executor: Executor,
                 transport_factory=None, settings: dict | None = None):
        super().__init__()
        self.registry = registry
        self.updates = updates
        self.executor = executor
        self.settings = {**DEFAULT_SETTINGS, **(settings or {})}
        self.transport_factory = transport_factory or make_transport_factory(self.settings)

        self.lights: list[Light] = []
        self.groups: list[Group] = []
        self.sensors: list[Sensor] = []
        self.error: ErrorState | None = None

        self._transports = {}
        current = registry.current
        self._bridge_id = current.id if current else None
        self._poll_stop: threading.Event | None = None
        self._poll_thread: threading.Thread | None = None

        registry.subscribe(self._registry_changed)

    # Bridge selection

    def _registry_changed(self, topic: str):
        current = self.registry.current
        self._evict_transports(self.registry.configs + ([current] if current else []))

        bridge_id = current.id if current else None
        if bridge_id == self._bridge_id:
            return

        self._bridge_id = bridge_id
        self.lights = []
        self.groups = []
        self.sensors = []
        self.error = None
        for kind in (LIGHTS, GROUPS, SENSORS, 'error'):
            self.notify(kind)

        if current is not None:
            self.fetch_all()

    def _evict_transports(self, configs: list[BridgeConfig]):
        """Close cached transports whose bridge is gone or was re-keyed."""
        live = {(config.id, config.address, config.credential) for config in configs}
        for key in [key for key in self._transports if key not in live]:
            self._transports.pop(key).close()

    def _transport(self, config: BridgeConfig):
        key = (config.id, config.address, config.credential)
        transport = self._transports.get(key)
        if transport is None:
            transport = self.transport_factory(config)
            self._transports[key] = transport
        return transport

    # Fetching

    def fetch_lights(self) -> Future:
        return self._submit(LIGHTS)

    def fetch_groups(self) -> Future:
        return self._submit(GROUPS)

    def fetch_sensors(self) -> Future:
        return self._submit(SENSORS)

    def fetch_all(self) -> list[Future]:
        return [self._submit(kind) for kind in (LIGHTS, GROUPS, SENSORS)]

    def dismiss_error(self):
        if self.error is not None:
            self.error = None
            self.notify('error')

    def _submit(self, kind: str, path: str | None = None, body: dict | None = None) -> Future:
        config = self.registry.current
        if config is None:
            return completed()
        transport = self._transport(config)
        return self.executor.submit(self._job, kind, config.id, transport, path, body)

    def _job(self, kind: str, bridge_id: str, transport, path: str | None, body: dict | None):
        """Runs on the executor. Never touches shared state directly."""
        if path is not None:
            try:
                parse_replies(transport.put(path, body))
            except HueError as e:
                self.updates.post(self._fail, kind, bridge_id, e,
                                  lambda: self._submit(kind, path, body))
                return None

        try:
            items = DECODERS[kind](transport.get(kind))
        except HueError as e:
            self.updates.post(self._fail, kind, bridge_id, e, lambda: self._submit(kind))
            return None

        self.updates.post(self._replace, kind, bridge_id, items)
        return items

    def _replace(self, kind: str, bridge_id: str, items: list):
        if bridge_id != self._bridge_id:
            return
        setattr(self, kind, items)
        if self.error is not None and self.error.kind == kind:
            self.error = None
            self.notify('error')
        self.notify(kind)

    def _fail(self, kind: str, bridge_id: str, error: HueError, retry: Callable[[], Future]):
        if bridge_id != self._bridge_id:
            return
        click.echo(f"Failed to sync {kind}: {error}", err=True)
        self.error = ErrorState(kind, describe_error(error), retry)
        self.notify('error')

    # Lookup

    def light(self, light_id: str) -> Light:
        for light in self.lights:
            if light.id == light_id:
                return light
        raise KeyError(light_id)

    def group(self, group_id: str) -> Group:
        for group in self.groups:
            if group.id == group_id:
                return group
        raise KeyError(group_id)

    def sensor(self, sensor_id: str) -> Sensor:
        for sensor in self.sensors:
            if sensor.id == sensor_id:
                return sensor
        raise KeyError(sensor_id)

    # Light mutations

    def toggle_light(self, light_id: str) -> Future:
        """Invert a light's power. A light with unknown power is turned on."""
        return self.set_light_power(light_id, not self.light(light_id).power)

    def set_light_power(self, light_id: str, on: bool) -> Future:
        return self._mutate_light(light_id, {'on': on})

    def set_light_brightness(self, light_id: str, brightness: int) -> Future:
        _validate_brightness(brightness)
        return self._mutate_light(light_id, {'bri': brightness})

    def set_light_color(self, light_id: str, color: RGBColor) -> Future:
        bridge = rgb_to_bridge(*color)
        return self._mutate_light(light_id, {'hue': bridge.hue, 'sat': bridge.sat, 'bri': bridge.bri})

    def _mutate_light(self, light_id: str, body: dict) -> Future:
        _apply_fields(self.light(light_id), body)
        self.notify(LIGHTS)
        return self._submit(LIGHTS, f"lights/{light_id}/state", body)

    # Group mutations

    def toggle_group(self, group_id: str) -> Future:
        return self.set_group_power(group_id, not self.group(group_id).action.power)

    def set_group_power(self, group_id: str, on: bool) -> Future:
        return self._mutate_group(group_id, {'on': on})

    def set_group_brightness(self, group_id: str, brightness: int) -> Future:
        _validate_brightness(brightness)
        return self._mutate_group(group_id, {'bri': brightness})

    def set_group_color(self, group_id: str, color: RGBColor) -> Future:
        bridge = rgb_to_bridge(*color)
        return self._mutate_group(group_id, {'hue': bridge.hue, 'sat': bridge.sat, 'bri': bridge.bri})

    def _mutate_group(self, group_id: str, body: dict) -> Future:
        group = self.group(group_id)
        _apply_fields(group.action, body)
        if 'on' in body:
            group.all_on = group.any_on = body['on']
        self.notify(GROUPS)
        return self._submit(GROUPS, f"groups/{group_id}/action", body)

    # Polling

    @property
    def is_polling(self) -> bool:
        return self._poll_thread is not None

    def start_polling(self, interval: float | None = None):
        """Re-fetch everything every interval seconds until stop_polling()."""
        if self._poll_thread is not None:
            return
        interval = interval or self.settings['poll_interval']
        stop = threading.Event()

        def run():
            while not stop.wait(interval):
                self.updates.post(self.fetch_all)

        self._poll_stop = stop
        self._poll_thread = threading.Thread(target=run, name='huetrek-poll', daemon=True)
        self._poll_thread.start()

    def stop_polling(self):
        if self._poll_thread is None:
            return
        self._poll_stop.set()
        self._poll_thread.join(timeout=1.0)
        self._poll_thread = None
        self._poll_stop = None

    def close(self):
        self.stop_polling()
        for transport in self._transports.values():
            transport.close()
        self._transports.clear()
