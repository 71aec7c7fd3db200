#!/usr/bin/env python3
"""
Generate a UI color theme from one base color.

Secondary and accent colors come from an HSV harmony rule (hue rotation plus
saturation/value scaling). Background, surface and the semantic colors are
the same for every rule. Themes export to a generic JSON shape and to the
Power BI report theme format.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from color_convert import hex_to_rgb, hsv_to_hex, normalize_hex, rgb_to_hsv


# =============================================================================
# Constants
# =============================================================================

DEFAULT_BASE_COLOR = '#3498db'
THEME_NAME = 'Custom Theme'

# Fixed semantic colors, independent of harmony
SEMANTIC_COLORS = [
    ('error', '#e74c3c', 'Error messages and alerts'),
    ('warning', '#f39c12', 'Warning messages and notifications'),
    ('success', '#2ecc71', 'Success messages and confirmations'),
    ('text', '#333333', 'Primary text color'),
    ('textSecondary', '#666666', 'Secondary text color for less emphasis'),
]

# Power BI field per theme color name; names not listed are dropped on export
POWERBI_FIELDS = {
    'primary': 'dataColors',
    'secondary': 'dataColors',
    'accent': 'dataColors',
    'success': 'dataColors',
    'warning': 'dataColors',
    'error': 'dataColors',
    'background': 'background',
    'surface': 'tableAccent',
    'text': 'foreground',
    'textSecondary': 'secondaryForeground',
}

POWERBI_DEFAULTS = {
    'background': '#ffffff',
    'foreground': '#333333',
    'tableAccent': '#f0f0f0',
    'secondaryForeground': '#666666',
}

SECONDARY_ROLE = 'Secondary color for accents and contrasting elements'
ACCENT_ROLE = 'Accent color for special elements and calls to action'
ACCENT2_ROLE = 'Additional accent color for complex designs'


class HarmonyType(str, Enum):
    COMPLEMENTARY = 'complementary'
    ANALOGOUS = 'analogous'
    TRIADIC = 'triadic'
    TETRADIC = 'tetradic'
    MONOCHROMATIC = 'monochromatic'


HARMONY_DESCRIPTIONS = {
    HarmonyType.COMPLEMENTARY: 'Complementary colors are opposite each other on the color wheel, '
                               'providing high contrast and visual impact.',
    HarmonyType.ANALOGOUS: 'Analogous colors are adjacent to each other on the color wheel, '
                           'creating a harmonious and cohesive look.',
    HarmonyType.TRIADIC: 'Triadic colors are evenly spaced around the color wheel (120° apart), '
                         'offering visual contrast while maintaining harmony.',
    HarmonyType.TETRADIC: 'Tetradic (rectangle) harmony uses four colors arranged in two '
                          'complementary pairs, offering rich color possibilities.',
    HarmonyType.MONOCHROMATIC: 'Monochromatic schemes use variations in lightness and saturation '
                               'of a single color, creating a cohesive and elegant look.',
}


# =============================================================================
# Harmony Rules
# =============================================================================

@dataclass(frozen=True)
class HueShift:
    """
    One derived color of a harmony rule.

    hue = (h + dh) mod 1
    s = clamp(s * s_scale, s_min, s_max)
    v = clamp(v * v_scale, v_min, v_max)
    """
    name: str
    role: str
    dh: float = 0.0
    s_scale: float = 1.0
    v_scale: float = 1.0
    s_min: float = 0.0
    s_max: float = 1.0
    v_min: float = 0.0
    v_max: float = 1.0

    def apply(self, h: float, s: float, v: float) -> tuple:
        return (
            (h + self.dh) % 1.0,
            max(self.s_min, min(self.s_max, s * self.s_scale)),
            max(self.v_min, min(self.v_max, v * self.v_scale)),
        )


HARMONY_RULES = {
    HarmonyType.COMPLEMENTARY: (
        HueShift('secondary', SECONDARY_ROLE, dh=0.50),
        HueShift('accent', ACCENT_ROLE, dh=0.58),  # 30° past the complement
    ),
    HarmonyType.ANALOGOUS: (
        HueShift('secondary', SECONDARY_ROLE, dh=0.08, s_scale=0.9),
        HueShift('accent', ACCENT_ROLE, dh=0.16, s_scale=0.8),
    ),
    HarmonyType.TRIADIC: (
        HueShift('secondary', SECONDARY_ROLE, dh=0.33),
        HueShift('accent', ACCENT_ROLE, dh=0.66),
    ),
    HarmonyType.TETRADIC: (
        HueShift('secondary', SECONDARY_ROLE, dh=0.25),
        HueShift('accent', ACCENT_ROLE, dh=0.50),
        HueShift('accent2', ACCENT2_ROLE, dh=0.75),
    ),
    HarmonyType.MONOCHROMATIC: (
        HueShift('secondary', SECONDARY_ROLE, s_scale=0.7, s_min=0.1),
        HueShift('accent', ACCENT_ROLE, v_scale=0.7, v_min=0.2, v_max=0.9),
    ),
}

# Rule used for any harmony type not in HARMONY_RULES
DEFAULT_HARMONY = HarmonyType.COMPLEMENTARY


def harmony_rule(harmony_type) -> tuple:
    """Look up the derived-color rule for a harmony type, falling back to DEFAULT_HARMONY."""
    try:
        key = HarmonyType(harmony_type)
    except ValueError:
        key = DEFAULT_HARMONY
    return HARMONY_RULES[key]


# =============================================================================
# Theme
# =============================================================================

@dataclass(frozen=True)
class ThemeColor:
    name: str
    hex: str
    role: str


@dataclass(frozen=True)
class Theme:
    """A generated theme: base color, harmony used, and ordered named colors."""
    base_color: str
    harmony_type: str
    colors: tuple = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.colors]

    def get(self, name: str) -> Optional[ThemeColor]:
        for color in self.colors:
            if color.name == name:
                return color
        return None

    def as_dict(self) -> dict:
        """Map color name to hex; later entries win on repeated names."""
        return {c.name: c.hex for c in self.colors}

    def with_color(self, name: str, hex_color: str) -> 'Theme':
        """
        Return a copy with one color's hex replaced (user customization).

        Raises:
            KeyError: If the theme has no color with that name
            InvalidColorError: If hex_color is malformed
        """
        if self.get(name) is None:
            raise KeyError(f"Theme has no color named {name!r}")
        new_hex = normalize_hex(hex_color)
        colors = tuple(
            replace(c, hex=new_hex) if c.name == name else c
            for c in self.colors
        )
        return replace(self, colors=colors)


def build_theme(base_color: str, harmony_type=DEFAULT_HARMONY) -> Theme:
    """
    Derive a full theme from a base color.

    Args:
        base_color: '#rrggbb' hex string
        harmony_type: HarmonyType or its string value; unknown values use
            the complementary rule

    Returns:
        Theme with 10 colors, or 11 for tetradic (extra 'accent2')
    """
    base_color = normalize_hex(base_color)
    h, s, v = rgb_to_hsv(*hex_to_rgb(base_color))

    colors = [ThemeColor('primary', base_color, 'Primary color for buttons, links, and highlights')]

    for shift in harmony_rule(harmony_type):
        colors.append(ThemeColor(shift.name, hsv_to_hex(*shift.apply(h, s, v)), shift.role))

    colors.append(ThemeColor(
        'background',
        hsv_to_hex(h, max(0, s - 0.7), min(0.98, v + 0.3)),
        'Main background color',
    ))
    colors.append(ThemeColor(
        'surface',
        hsv_to_hex(h, max(0, s - 0.6), min(0.95, v + 0.2)),
        'Card and surface background color',
    ))
    colors.extend(ThemeColor(name, hex_value, role) for name, hex_value, role in SEMANTIC_COLORS)

    if isinstance(harmony_type, HarmonyType):
        harmony_type = harmony_type.value
    return Theme(base_color=base_color, harmony_type=str(harmony_type), colors=tuple(colors))


class ThemeGenerator:
    """
    Holds the base color and harmony selection between generations.

    Not safe for concurrent mutation; use one instance per session.
    """

    def __init__(self, base_color: str = DEFAULT_BASE_COLOR,
                 harmony_type: str = DEFAULT_HARMONY.value):
        self.base_color = normalize_hex(base_color)
        self.harmony_type = harmony_type
        self.theme: Optional[Theme] = None

    def set_base_color(self, hex_color: str) -> None:
        # Validate before assigning so a bad value leaves state unchanged
        self.base_color = normalize_hex(hex_color)

    def set_harmony_type(self, harmony_type: str) -> None:
        if isinstance(harmony_type, HarmonyType):
            harmony_type = harmony_type.value
        self.harmony_type = harmony_type

    def generate(self) -> Theme:
        theme = build_theme(self.base_color, self.harmony_type)
        self.theme = theme
        return theme


# =============================================================================
# Export
# =============================================================================

def export_to_json(theme: Theme) -> str:
    """Serialize as {name, baseColor, colors: {name: hex}}."""
    data = {
        'name': THEME_NAME,
        'baseColor': theme.base_color,
        'colors': theme.as_dict(),
    }
    return json.dumps(data, indent=2)


def export_to_powerbi(theme: Theme) -> str:
    """
    Serialize as a Power BI report theme.

    primary/secondary/accent/success/warning/error fill dataColors in theme
    order. Names without a Power BI field (e.g. accent2) are dropped.
    """
    data = {'name': THEME_NAME, 'dataColors': [], **POWERBI_DEFAULTS}

    for color in theme.colors:
        target = POWERBI_FIELDS.get(color.name)
        if target == 'dataColors':
            data['dataColors'].append(color.hex)
        elif target:
            data[target] = color.hex

    return json.dumps(data, indent=2)


@dataclass(frozen=True)
class FontSettings:
    """Typography paired with a theme in the dashboard preview."""
    heading_font: str = 'sans-serif'
    body_font: str = 'sans-serif'
    base_font_size: int = 16
    scale_ratio: float = 1.2


def export_typography(settings: FontSettings) -> str:
    data = {
        'headingFont': settings.heading_font,
        'bodyFont': settings.body_font,
        'baseFontSize': settings.base_font_size,
        'scaleRatio': settings.scale_ratio,
    }
    return json.dumps(data, indent=2)
