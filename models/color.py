"""Colour conversion between the bridge's HSB scale, unit HSB and RGB.

The bridge reports hue on a 0-65535 scale, saturation on 0-255 and
brightness on 0-254. Reads divide hue by 65536 while writes multiply by
65535; the asymmetry is kept so values round-trip the same way existing
bridge clients do.
"""

import colorsys
from typing import NamedTuple

HUE_READ_SCALE = 65536
HUE_WRITE_SCALE = 65535
SAT_SCALE = 255
BRI_SCALE = 254


class RGBColor(NamedTuple):
    """RGB colour with each channel in [0.0, 1.0]."""
    red: float
    green: float
    blue: float

    @classmethod
    def from_hex(cls, value: str) -> 'RGBColor':
        """Parse '#RRGGBB' or 'RRGGBB'."""
        text = value.strip().lstrip('#')
        if len(text) != 6:
            raise ValueError(f"Invalid hex colour: {value!r}")
        try:
            channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
        except ValueError:
            raise ValueError(f"Invalid hex colour: {value!r}") from None
        return cls(*(c / 255 for c in channels))

    def to_hsb(self) -> 'HSBColor':
        return rgb_to_hsb(*self)

    def to_hex(self) -> str:
        return '#' + ''.join(f"{round(c * 255):02x}" for c in self)


class HSBColor(NamedTuple):
    """HSB colour with each channel in [0.0, 1.0]."""
    hue: float
    saturation: float
    brightness: float

    def to_rgb(self) -> RGBColor:
        return RGBColor(*colorsys.hsv_to_rgb(self.hue, self.saturation, self.brightness))


class BridgeColor(NamedTuple):
    """HSB colour on the bridge's integer scales."""
    hue: int
    sat: int
    bri: int

    def to_unit(self) -> HSBColor:
        return bridge_to_unit(self.hue, self.sat, self.bri)


def bridge_to_unit(hue: int, sat: int, bri: int) -> HSBColor:
    """Convert bridge-scale hue/sat/bri to unit HSB.

    Hue is divided by 65536, so the result is always strictly below 1.0.
    """
    return HSBColor(hue / HUE_READ_SCALE, sat / SAT_SCALE, bri / BRI_SCALE)


def hue_degrees(red: float, green: float, blue: float) -> float:
    """Return the hue of an RGB triple in degrees, within [0, 360)."""
    max_colour = max(red, green, blue)
    delta = max_colour - min(red, green, blue)

    if delta == 0:
        return 0.0

    if max_colour == red:
        hue = (green - blue) / delta
    elif max_colour == green:
        hue = 2 + (blue - red) / delta
    else:
        hue = 4 + (red - green) / delta

    hue *= 60
    if hue < 0:
        hue += 360
    # A tiny negative value plus 360 can round up to exactly 360.0
    if hue >= 360:
        hue -= 360
    return hue


def rgb_to_hsb(red: float, green: float, blue: float) -> HSBColor:
    """Convert unit RGB to unit HSB using the max/min/delta formula."""
    for channel in (red, green, blue):
        if not 0.0 <= channel <= 1.0:
            raise ValueError(f"RGB channel out of range: {channel}")

    max_colour = max(red, green, blue)
    delta = max_colour - min(red, green, blue)
    saturation = delta / max_colour if max_colour != 0 else 0.0

    return HSBColor(hue_degrees(red, green, blue) / 360, saturation, max_colour)


def unit_to_bridge(colour: HSBColor) -> BridgeColor:
    """Scale unit HSB to the bridge's integer ranges for outgoing writes."""
    for channel in colour:
        if not 0.0 <= channel <= 1.0:
            raise ValueError(f"HSB channel out of range: {channel}")

    return BridgeColor(
        hue=round(colour.hue * HUE_WRITE_SCALE),
        sat=round(colour.saturation * SAT_SCALE),
        bri=round(colour.brightness * BRI_SCALE),
    )


def rgb_to_bridge(red: float, green: float, blue: float) -> BridgeColor:
    """Convenience wrapper: unit RGB straight to bridge scale."""
    return unit_to_bridge(RGBColor(red, green, blue).to_hsb())
