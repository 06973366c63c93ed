"""Canned bridge data for demo mode.

Shaped exactly like the bridge's v1 responses so it goes through the same
decoding path as real data.
"""


def _light(name: str, on: bool, bri: int, hue: int | None = None, sat: int | None = None,
           reachable: bool = True) -> dict:
    state = {'on': on, 'bri': bri, 'reachable': reachable}
    if hue is not None:
        state['hue'] = hue
        state['sat'] = sat
    return {'name': name, 'type': 'Extended color light' if hue is not None else 'Dimmable light',
            'state': state}


def demo_bridge_data() -> dict:
    """Return a fresh copy of the demo bridge's lights, groups and sensors."""
    return {
        'lights': {
            '1': _light('Bridge Console', True, 254, 46920, 254),
            '2': _light('Ready Room', True, 180, 8418, 140),
            '3': _light('Corridor', False, 120),
            '4': _light('Engineering', True, 200, 0, 254),
            '5': _light('Holodeck', False, 90, 25500, 200, reachable=False),
        },
        'groups': {
            '1': {
                'name': 'Main Bridge',
                'lights': ['1', '2'],
                'type': 'Room',
                'class': 'Living room',
                'state': {'all_on': True, 'any_on': True},
                'action': {'on': True, 'bri': 254, 'hue': 46920, 'sat': 254,
                           'effect': 'none', 'xy': [0.1532, 0.0475], 'ct': 153,
                           'alert': 'none', 'colormode': 'hs'},
            },
            '2': {
                'name': 'Deck 12',
                'lights': ['3', '4', '5'],
                'type': 'Zone',
                'class': 'Other',
                'state': {'all_on': False, 'any_on': True},
                'action': {'on': True, 'bri': 200, 'alert': 'none'},
            },
        },
        'sensors': {
            '10': {
                'name': 'Captain\'s Dial',
                'type': 'ZLLRelativeRotary',
                'manufacturername': 'Signify Netherlands B.V.',
                'productname': 'Hue tap dial switch',
                'state': {'rotaryevent': 2, 'expectedrotation': 45,
                          'expectedeventduration': 400,
                          'lastupdated': '2025-04-13T20:15:02'},
                'config': {'on': True, 'battery': 87, 'reachable': True},
            },
            '11': {
                'name': 'Turbolift Motion',
                'type': 'ZLLPresence',
                'manufacturername': 'Signify Netherlands B.V.',
                'productname': 'Hue motion sensor',
                'state': {'presence': False, 'lastupdated': '2025-04-13T19:58:40'},
                'config': {'on': True, 'battery': 12, 'reachable': True},
            },
        },
    }
