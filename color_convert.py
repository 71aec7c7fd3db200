#!/usr/bin/env python3
"""
Color value type and RGB / hex / HSV conversions.

Hue is normalized to [0, 1), saturation and value to [0, 1].
"""

import math
import operator
import re
from dataclasses import dataclass


HEX_PATTERN = re.compile(r'^#?([0-9a-fA-F]{6})$')
MAX_RGB_DISTANCE = math.sqrt(3 * 255 ** 2)  # ~441.67, black to white


class InvalidColorError(ValueError):
    """Raised for malformed hex strings or out-of-range channel values."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _check_channel(value) -> int:
    if isinstance(value, bool):
        raise InvalidColorError(f"Channel must be an integer, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError:
        raise InvalidColorError(f"Channel must be an integer, got {value!r}")
    if not 0 <= value <= 255:
        raise InvalidColorError(f"Channel out of range 0-255: {value}")
    return value


# =============================================================================
# Color Conversion
# =============================================================================

def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB channels (0-255) to '#rrggbb'."""
    r, g, b = _check_channel(r), _check_channel(g), _check_channel(b)
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_color: str) -> tuple:
    """Parse '#rrggbb' (leading '#' optional) into an (r, g, b) tuple."""
    if not isinstance(hex_color, str):
        raise InvalidColorError(f"Hex color must be a string, got {hex_color!r}")
    match = HEX_PATTERN.match(hex_color.strip())
    if not match:
        raise InvalidColorError(f"Not a 6-digit hex color: {hex_color!r}")

    value = int(match.group(1), 16)
    return ((value >> 16) & 255, (value >> 8) & 255, value & 255)


def normalize_hex(hex_color: str) -> str:
    """Return the canonical lowercase '#rrggbb' form of a hex color."""
    return rgb_to_hex(*hex_to_rgb(hex_color))


def rgb_to_hsv(r: int, g: int, b: int) -> tuple:
    """
    Convert RGB (0-255) to HSV.

    Returns:
        (h, s, v) with h in [0, 1) and s, v in [0, 1]
    """
    r, g, b = r / 255, g / 255, b / 255

    max_c = max(r, g, b)
    min_c = min(r, g, b)
    delta = max_c - min_c

    v = max_c
    s = 0.0 if max_c == 0 else delta / max_c

    if delta == 0:
        h = 0.0  # achromatic
    else:
        if max_c == r:
            h = math.fmod((g - b) / delta, 6)
        elif max_c == g:
            h = (b - r) / delta + 2
        else:
            h = (r - g) / delta + 4

        h /= 6
        if h < 0:
            h += 1

    return h, s, v


def hsv_to_rgb(h: float, s: float, v: float) -> tuple:
    """Convert HSV (all 0-1) to an (r, g, b) tuple of 0-255 integers."""
    i = math.floor(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    sector = i % 6
    if sector == 0:
        r, g, b = v, t, p
    elif sector == 1:
        r, g, b = q, v, p
    elif sector == 2:
        r, g, b = p, v, t
    elif sector == 3:
        r, g, b = p, q, v
    elif sector == 4:
        r, g, b = t, p, v
    else:
        r, g, b = v, p, q

    return (_round_half_up(r * 255), _round_half_up(g * 255), _round_half_up(b * 255))


def hsv_to_hex(h: float, s: float, v: float) -> str:
    return rgb_to_hex(*hsv_to_rgb(h, s, v))


# =============================================================================
# Color Utilities
# =============================================================================

def color_distance(rgb1: tuple, rgb2: tuple) -> float:
    """Euclidean distance between two RGB triples (0 to ~441.67)."""
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(rgb1, rgb2)))


@dataclass(frozen=True)
class Color:
    """An sRGB color with 0-255 integer channels."""
    r: int
    g: int
    b: int

    def __post_init__(self):
        # Normalizes numpy integer scalars to plain ints
        object.__setattr__(self, 'r', _check_channel(self.r))
        object.__setattr__(self, 'g', _check_channel(self.g))
        object.__setattr__(self, 'b', _check_channel(self.b))

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    @property
    def rgb(self) -> tuple:
        return (self.r, self.g, self.b)

    @classmethod
    def from_hex(cls, hex_color: str) -> 'Color':
        return cls(*hex_to_rgb(hex_color))

    def to_hsv(self) -> tuple:
        return rgb_to_hsv(self.r, self.g, self.b)
