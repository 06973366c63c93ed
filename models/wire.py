"""Schemas for the bridge's v1 JSON API and the discovery service.

Each resource endpoint returns a mapping of bridge-assigned id to record.
Records are validated one at a time so a single malformed entry can be
skipped without losing the rest of the collection.
"""

from typing import Callable, TypeVar

import click
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import BridgeProtocolError, DecodingError
from models.types import Group, GroupAction, Light, RotaryState, Sensor

T = TypeVar('T')


class DiscoveredBridge(BaseModel):
    """Bridge record from the cloud discovery service."""
    id: str
    internalipaddress: str
    port: int | None = None


class BridgeErrorBody(BaseModel):
    type: int
    description: str = ''
    address: str | None = None


class BridgeReply(BaseModel):
    """One element of the list the bridge returns for POST/PUT requests."""
    success: dict | None = None
    error: BridgeErrorBody | None = None


class LightStateRecord(BaseModel):
    on: bool | None = None
    bri: int | None = None
    hue: int | None = None
    sat: int | None = None
    reachable: bool


class LightRecord(BaseModel):
    name: str
    state: LightStateRecord

    def to_light(self, light_id: str) -> Light:
        return Light(
            id=light_id,
            name=self.name,
            reachable=self.state.reachable,
            power=self.state.on,
            brightness=self.state.bri,
            hue=self.state.hue,
            saturation=self.state.sat,
        )


class GroupStateRecord(BaseModel):
    all_on: bool
    any_on: bool


class GroupActionRecord(BaseModel):
    on: bool | None = None
    bri: int | None = None
    hue: int | None = None
    sat: int | None = None
    effect: str | None = None
    xy: list[float] | None = None
    ct: int | None = None
    alert: str | None = None
    colormode: str | None = None


class GroupRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    lights: list[str] = Field(default_factory=list)
    type: str = ''
    group_class: str = Field('', alias='class')
    state: GroupStateRecord
    action: GroupActionRecord

    def to_group(self, group_id: str) -> Group:
        action = self.action
        return Group(
            id=group_id,
            name=self.name,
            light_ids=list(self.lights),
            group_type=self.type,
            group_class=self.group_class,
            all_on=self.state.all_on,
            any_on=self.state.any_on,
            action=GroupAction(
                power=action.on,
                brightness=action.bri,
                hue=action.hue,
                saturation=action.sat,
                effect=action.effect,
                xy=action.xy,
                color_temperature=action.ct,
                alert=action.alert,
                color_mode=action.colormode,
            ),
        )


class SensorStateRecord(BaseModel):
    rotaryevent: int | None = None
    expectedrotation: int | None = None
    expectedeventduration: int | None = None
    lastupdated: str | None = None


class SensorConfigRecord(BaseModel):
    on: bool
    battery: int
    reachable: bool


class SensorRecord(BaseModel):
    name: str
    type: str
    manufacturername: str
    productname: str
    state: SensorStateRecord
    config: SensorConfigRecord

    def to_sensor(self, sensor_id: str) -> Sensor:
        state = self.state
        rotary = None
        if state.rotaryevent is not None or state.expectedrotation is not None:
            rotary = RotaryState(
                rotary_event=state.rotaryevent,
                expected_rotation=state.expectedrotation,
                expected_event_duration=state.expectedeventduration,
            )
        return Sensor(
            id=sensor_id,
            name=self.name,
            type=self.type,
            manufacturer=self.manufacturername,
            product_name=self.productname,
            battery=self.config.battery,
            reachable=self.config.reachable,
            enabled=self.config.on,
            last_updated=state.lastupdated,
            rotary=rotary,
        )


def raise_for_bridge_errors(payload) -> None:
    """Raise BridgeProtocolError if payload is a list of bridge error objects.

    The bridge answers with ``[{"error": {...}}]`` both for failed writes
    and for reads made with an unknown credential.
    """
    if not isinstance(payload, list):
        return
    for item in payload:
        if isinstance(item, dict) and 'error' in item:
            try:
                error = BridgeErrorBody.model_validate(item['error'])
            except ValidationError as e:
                raise DecodingError(f"Malformed bridge error: {e}") from e
            raise BridgeProtocolError(error.type, error.description, error.address)


def parse_replies(payload) -> list[BridgeReply]:
    """Validate a POST/PUT reply list, raising on any bridge error entry."""
    raise_for_bridge_errors(payload)
    if not isinstance(payload, list):
        raise DecodingError(f"Expected a list of replies, got {type(payload).__name__}")
    try:
        return [BridgeReply.model_validate(item) for item in payload]
    except ValidationError as e:
        raise DecodingError(f"Malformed bridge reply: {e}") from e


def decode_collection(payload, record_type: type[BaseModel],
                      convert: Callable[[BaseModel, str], T], kind: str = 'entry') -> list[T]:
    """Decode an id -> record mapping, skipping entries that fail validation.

    Args:
        payload: Parsed JSON from a collection endpoint
        record_type: pydantic model for a single record
        convert: Builds the domain object from (record, id)
        kind: Resource name used in diagnostics

    Returns:
        Domain objects for every entry that validated, sorted by name
        (code-point ordinal, so 'Zeta' sorts before 'mango').

    Raises:
        BridgeProtocolError: payload is a bridge error list
        DecodingError: payload is not an id -> record mapping
    """
    raise_for_bridge_errors(payload)
    if not isinstance(payload, dict):
        raise DecodingError(f"Expected a mapping of {kind}s, got {type(payload).__name__}")

    items = []
    for item_id, raw in payload.items():
        try:
            record = record_type.model_validate(raw)
        except ValidationError as e:
            click.echo(f"Skipping {kind} {item_id}: {e.error_count()} invalid field(s)", err=True)
            continue
        items.append(convert(record, str(item_id)))

    return sorted(items, key=lambda item: item.name)


def decode_lights(payload) -> list[Light]:
    return decode_collection(payload, LightRecord, LightRecord.to_light, 'light')


def decode_groups(payload) -> list[Group]:
    return decode_collection(payload, GroupRecord, GroupRecord.to_group, 'group')


def decode_sensors(payload) -> list[Sensor]:
    return decode_collection(payload, SensorRecord, SensorRecord.to_sensor, 'sensor')
