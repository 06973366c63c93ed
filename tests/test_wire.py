"""Tests for bridge response decoding in models/wire.py"""

import pytest

from core.errors import BridgeProtocolError, DecodingError
from models.demo import demo_bridge_data
from models.wire import (
    BridgeReply,
    decode_groups,
    decode_lights,
    decode_sensors,
    parse_replies,
)


def light(name, **state):
    return {'name': name, 'state': {'reachable': True, **state}}


class TestDecodeLights:
    """Tests for decode_lights."""

    def test_skips_entry_missing_required_field(self):
        """One malformed light out of five leaves the other four."""
        payload = {
            '1': light('Alpha', on=True, bri=100),
            '2': light('Bravo', on=False),
            '3': {'name': 'Charlie', 'state': {'on': True}},
            '4': light('Delta'),
            '5': light('Echo', on=True, bri=1, hue=100, sat=20),
        }
        lights = decode_lights(payload)
        assert [l.name for l in lights] == ['Alpha', 'Bravo', 'Delta', 'Echo']

    def test_sorted_by_code_point(self):
        """Uppercase sorts before lowercase."""
        payload = {'1': light('Zeta'), '2': light('Alpha'), '3': light('mango')}
        assert [l.name for l in decode_lights(payload)] == ['Alpha', 'Zeta', 'mango']

    def test_missing_optional_fields_are_unknown(self):
        """Absent on/bri are None, never False or zero."""
        (result,) = decode_lights({'7': light('Lamp')})
        assert result.id == '7'
        assert result.power is None
        assert result.brightness is None
        assert result.derived_color is None

    def test_reported_off_is_false(self):
        (result,) = decode_lights({'1': light('Lamp', on=False, bri=0)})
        assert result.power is False
        assert result.brightness == 0

    def test_derived_color_tracks_fields(self):
        (result,) = decode_lights({'1': light('Lamp', on=True, bri=254, hue=32768, sat=255)})
        assert result.derived_color.hue == 0.5
        result.hue = 0
        assert result.derived_color.hue == 0.0

    def test_wrong_type_entry_skipped(self):
        payload = {'1': light('Good'), '2': {'name': 'Bad', 'state': {'reachable': 'maybe'}}}
        assert [l.name for l in decode_lights(payload)] == ['Good']

    def test_bridge_error_list_raises(self):
        payload = [{'error': {'type': 1, 'address': '/lights', 'description': 'unauthorized user'}}]
        with pytest.raises(BridgeProtocolError) as exc_info:
            decode_lights(payload)
        assert exc_info.value.error_type == 1
        assert exc_info.value.user_message == 'unauthorized user'

    def test_non_mapping_raises(self):
        with pytest.raises(DecodingError):
            decode_lights('not a mapping')


class TestDecodeGroups:
    """Tests for decode_groups."""

    def test_demo_groups(self):
        groups = decode_groups(demo_bridge_data()['groups'])
        assert [g.name for g in groups] == ['Deck 12', 'Main Bridge']

        main = groups[1]
        assert main.light_ids == ['1', '2']
        assert main.group_type == 'Room'
        assert main.group_class == 'Living room'
        assert main.all_on is True
        assert main.action.color_temperature == 153
        assert main.action.color_mode == 'hs'

    def test_group_without_state_skipped(self):
        payload = demo_bridge_data()['groups']
        del payload['2']['state']
        assert [g.id for g in decode_groups(payload)] == ['1']


class TestDecodeSensors:
    """Tests for decode_sensors."""

    def test_demo_sensors(self):
        sensors = decode_sensors(demo_bridge_data()['sensors'])
        assert [s.name for s in sensors] == ["Captain's Dial", 'Turbolift Motion']

        dial, motion = sensors
        assert dial.battery == 87
        assert dial.rotary.expected_rotation == 45
        assert motion.rotary is None
        assert motion.last_updated == '2025-04-13T19:58:40'

    def test_sensor_without_battery_skipped(self):
        """Daylight and other virtual sensors have no battery."""
        payload = demo_bridge_data()['sensors']
        payload['1'] = {
            'name': 'Daylight', 'type': 'Daylight', 'manufacturername': 'Signify',
            'productname': 'Daylight', 'state': {}, 'config': {'on': True},
        }
        assert len(decode_sensors(payload)) == 2


class TestParseReplies:
    """Tests for parse_replies."""

    def test_success_list(self):
        replies = parse_replies([{'success': {'/lights/1/state/on': True}}])
        assert len(replies) == 1
        assert isinstance(replies[0], BridgeReply)
        assert replies[0].success == {'/lights/1/state/on': True}
        assert replies[0].error is None

    def test_error_entry_raises(self):
        payload = [{'error': {'type': 101, 'address': '', 'description': 'link button not pressed'}}]
        with pytest.raises(BridgeProtocolError) as exc_info:
            parse_replies(payload)
        assert exc_info.value.error_type == 101

    def test_non_list_raises(self):
        with pytest.raises(DecodingError):
            parse_replies({'success': {}})
