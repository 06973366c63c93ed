"""Type definitions for the HueTrek bridge client.

Bridge configurations are pydantic models so they can be validated when
loaded back from storage. Light, group and sensor records are plain
dataclasses owned by the state synchroniser and mutated in place for
optimistic updates.

Fields typed ``X | None`` are None when the bridge has not reported a
value. None is never used to mean "off" or zero.
"""

import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from models.color import HSBColor, bridge_to_unit

DEMO_BRIDGE_ID = 'demo'


class BridgeConfig(BaseModel):
    """A paired bridge: where it is and the credential to talk to it."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    address: str = Field(..., min_length=1)
    credential: str = Field(..., min_length=1)

    @property
    def is_demo(self) -> bool:
        return self.id == DEMO_BRIDGE_ID


# Offline configuration served from canned data, never from the network
DEMO_BRIDGE = BridgeConfig(
    id=DEMO_BRIDGE_ID,
    name='Demo Bridge',
    address='demo.invalid',
    credential='demo',
)


@dataclass(frozen=True)
class DiscoveryResult:
    """Address of a bridge found on the local network."""
    address: str


@dataclass
class Light:
    id: str
    name: str
    reachable: bool = False
    power: bool | None = None
    brightness: int | None = None
    hue: int | None = None
    saturation: int | None = None

    @property
    def derived_color(self) -> HSBColor | None:
        """Unit HSB colour computed from hue/saturation/brightness.

        Recomputed on every access so it can never disagree with the
        bridge-scale fields.
        """
        if self.hue is None or self.saturation is None or self.brightness is None:
            return None
        return bridge_to_unit(self.hue, self.saturation, self.brightness)


@dataclass
class GroupAction:
    """Last commanded state for a whole group.

    effect/xy/color_temperature/alert/color_mode are carried through from
    the bridge untouched.
    """
    power: bool | None = None
    brightness: int | None = None
    hue: int | None = None
    saturation: int | None = None
    effect: str | None = None
    xy: list[float] | None = None
    color_temperature: int | None = None
    alert: str | None = None
    color_mode: str | None = None

    @property
    def derived_color(self) -> HSBColor | None:
        if self.hue is None or self.saturation is None or self.brightness is None:
            return None
        return bridge_to_unit(self.hue, self.saturation, self.brightness)


@dataclass
class Group:
    """A room or zone."""
    id: str
    name: str
    light_ids: list[str] = field(default_factory=list)
    group_type: str = ''
    group_class: str = ''
    all_on: bool = False
    any_on: bool = False
    action: GroupAction = field(default_factory=GroupAction)


@dataclass
class RotaryState:
    rotary_event: int | None = None
    expected_rotation: int | None = None
    expected_event_duration: int | None = None


@dataclass
class Sensor:
    id: str
    name: str
    type: str
    manufacturer: str
    product_name: str
    battery: int
    reachable: bool
    enabled: bool = True
    last_updated: str | None = None
    rotary: RotaryState | None = None
