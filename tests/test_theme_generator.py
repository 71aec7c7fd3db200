"""Tests for harmony rules, theme generation and theme exports."""

from __future__ import annotations

import colorsys
import json

import pytest

from color_convert import InvalidColorError, hex_to_rgb, rgb_to_hsv
from theme_generator import (
    DEFAULT_HARMONY,
    HARMONY_DESCRIPTIONS,
    HARMONY_RULES,
    FontSettings,
    HarmonyType,
    HueShift,
    Theme,
    ThemeColor,
    ThemeGenerator,
    build_theme,
    export_to_json,
    export_to_powerbi,
    export_typography,
    harmony_rule,
)

BASE = "#3498db"
SEMANTIC = {
    "error": "#e74c3c",
    "warning": "#f39c12",
    "success": "#2ecc71",
    "text": "#333333",
    "textSecondary": "#666666",
}
COMMON_NAMES = ["background", "surface", "error", "warning", "success", "text", "textSecondary"]


def _generate(base: str = BASE, harmony: str = "complementary") -> Theme:
    generator = ThemeGenerator()
    generator.set_base_color(base)
    generator.set_harmony_type(harmony)
    return generator.generate()


# ---------------------------------------------------------------------------
# Harmony rules in isolation
# ---------------------------------------------------------------------------


class TestHueShift:
    def test_hue_wraps(self) -> None:
        h, s, v = HueShift("x", "", dh=0.5).apply(0.75, 0.4, 0.6)
        assert h == pytest.approx(0.25)
        assert (s, v) == (0.4, 0.6)

    def test_scaling_and_clamping(self) -> None:
        shift = HueShift("x", "", s_scale=0.7, s_min=0.1, v_scale=0.7, v_min=0.2, v_max=0.9)
        assert shift.apply(0.1, 0.1, 0.2)[1:] == pytest.approx((0.1, 0.2))
        assert shift.apply(0.1, 1.0, 1.0)[1:] == pytest.approx((0.7, 0.7))


class TestHarmonyRules:
    def test_every_harmony_type_has_a_rule(self) -> None:
        assert set(HARMONY_RULES) == set(HarmonyType)
        assert set(HARMONY_DESCRIPTIONS) == set(HarmonyType)

    def test_unknown_type_uses_default_rule(self) -> None:
        assert DEFAULT_HARMONY is HarmonyType.COMPLEMENTARY
        assert harmony_rule("foo") is HARMONY_RULES[HarmonyType.COMPLEMENTARY]
        assert harmony_rule(None) is HARMONY_RULES[HarmonyType.COMPLEMENTARY]

    @pytest.mark.parametrize(
        ("harmony", "offsets"),
        [
            ("complementary", [0.50, 0.58]),
            ("analogous", [0.08, 0.16]),
            ("triadic", [0.33, 0.66]),
            ("tetradic", [0.25, 0.50, 0.75]),
            ("monochromatic", [0.0, 0.0]),
        ],
    )
    def test_hue_offsets(self, harmony: str, offsets: list[float]) -> None:
        assert [shift.dh for shift in harmony_rule(harmony)] == offsets

    def test_analogous_desaturates(self) -> None:
        secondary, accent = harmony_rule("analogous")
        assert secondary.apply(0.0, 0.5, 0.5) == pytest.approx((0.08, 0.45, 0.5))
        assert accent.apply(0.0, 0.5, 0.5) == pytest.approx((0.16, 0.4, 0.5))

    def test_monochromatic_keeps_hue(self) -> None:
        secondary, accent = harmony_rule("monochromatic")
        assert secondary.apply(0.3, 0.1, 0.5) == pytest.approx((0.3, 0.1, 0.5))
        assert accent.apply(0.3, 0.8, 0.1) == pytest.approx((0.3, 0.8, 0.2))
        assert accent.apply(0.3, 0.8, 1.0) == pytest.approx((0.3, 0.8, 0.7))


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_complementary_layout(self) -> None:
        theme = _generate()
        assert theme.names == ["primary", "secondary", "accent", *COMMON_NAMES]
        assert theme.get("primary").hex == BASE
        assert theme.base_color == BASE
        assert theme.harmony_type == "complementary"

    def test_tetradic_adds_accent2(self) -> None:
        theme = _generate(harmony="tetradic")
        assert len(theme) == 11
        assert theme.names[:4] == ["primary", "secondary", "accent", "accent2"]

    @pytest.mark.parametrize("harmony", ["complementary", "analogous", "triadic", "monochromatic"])
    def test_ten_entries_without_accent2(self, harmony: str) -> None:
        theme = _generate(harmony=harmony)
        assert len(theme) == 10
        assert "accent2" not in theme.names

    @pytest.mark.parametrize("harmony", [h.value for h in HarmonyType] + ["foo"])
    def test_semantic_colors_fixed(self, harmony: str) -> None:
        colors = _generate(base="#8e44ad", harmony=harmony).as_dict()
        for name, hex_value in SEMANTIC.items():
            assert colors[name] == hex_value

    def test_complementary_secondary_is_half_turn(self) -> None:
        theme = _generate()
        assert theme.get("secondary").hex == "#db7734"

        # Independent HSV rotation with the standard library
        r, g, b = (c / 255 for c in hex_to_rgb(BASE))
        h, s, v = colorsys.rgb_to_hsv(r, g, b)
        expected = colorsys.hsv_to_rgb((h + 0.5) % 1.0, s, v)
        actual = hex_to_rgb(theme.get("secondary").hex)
        assert all(abs(a - round(e * 255)) <= 1 for a, e in zip(actual, expected))

        sh, ss, sv = rgb_to_hsv(*actual)
        bh, bs, bv = rgb_to_hsv(*hex_to_rgb(BASE))
        assert sh == pytest.approx((bh + 0.5) % 1.0, abs=0.01)
        assert ss == pytest.approx(bs, abs=0.01)
        assert sv == pytest.approx(bv, abs=0.01)

    def test_background_and_surface(self) -> None:
        theme = _generate()
        assert theme.get("background").hex == "#eaf4fa"
        bh, bs, bv = rgb_to_hsv(*hex_to_rgb(theme.get("background").hex))
        sh, ss, sv = rgb_to_hsv(*hex_to_rgb(theme.get("surface").hex))
        assert bv == pytest.approx(0.98, abs=0.005)
        assert sv == pytest.approx(0.95, abs=0.005)
        assert bs < ss

    def test_grey_base_background_floors_saturation(self) -> None:
        theme = _generate(base="#c0c0c0")
        assert theme.get("background").hex == "#fafafa"
        assert theme.get("surface").hex == "#f2f2f2"
        assert theme.get("secondary").hex == "#c0c0c0"

    def test_unknown_harmony_matches_complementary(self) -> None:
        unknown = _generate(harmony="foo")
        complementary = _generate(harmony="complementary")
        assert unknown.colors == complementary.colors
        assert unknown.harmony_type == "foo"

    def test_enum_and_string_are_interchangeable(self) -> None:
        assert build_theme(BASE, HarmonyType.TRIADIC) == build_theme(BASE, "triadic")

    def test_generate_records_current_theme(self) -> None:
        generator = ThemeGenerator()
        assert generator.theme is None
        theme = generator.generate()
        assert generator.theme is theme
        assert theme.base_color == "#3498db"


class TestGeneratorState:
    def test_setters_do_not_regenerate(self) -> None:
        generator = ThemeGenerator()
        first = generator.generate()
        generator.set_base_color("#ff0000")
        generator.set_harmony_type("triadic")
        assert generator.theme is first
        assert generator.generate().get("primary").hex == "#ff0000"

    def test_base_color_normalized(self) -> None:
        generator = ThemeGenerator()
        generator.set_base_color("ABCDEF")
        assert generator.base_color == "#abcdef"

    def test_invalid_base_color_leaves_state(self) -> None:
        generator = ThemeGenerator()
        generator.set_base_color("#112233")
        with pytest.raises(InvalidColorError):
            generator.set_base_color("#12345z")
        assert generator.base_color == "#112233"

    def test_enum_harmony_stored_as_value(self) -> None:
        generator = ThemeGenerator()
        generator.set_harmony_type(HarmonyType.TETRADIC)
        assert generator.harmony_type == "tetradic"


# ---------------------------------------------------------------------------
# Theme value
# ---------------------------------------------------------------------------


class TestTheme:
    def test_with_color_overrides_one_hex(self) -> None:
        theme = _generate()
        custom = theme.with_color("accent", "#ABCDEF")
        assert custom.get("accent").hex == "#abcdef"
        assert custom.get("accent").role == theme.get("accent").role
        assert custom.names == theme.names
        assert [c for c in custom if c.name != "accent"] == [c for c in theme if c.name != "accent"]
        # Original theme unchanged
        assert theme.get("accent").hex != "#abcdef"

    def test_with_color_unknown_name(self) -> None:
        with pytest.raises(KeyError):
            _generate().with_color("accent2", "#000000")

    def test_with_color_bad_hex(self) -> None:
        with pytest.raises(InvalidColorError):
            _generate().with_color("accent", "blue")

    def test_as_dict_last_write_wins(self) -> None:
        theme = Theme(BASE, "complementary", (
            ThemeColor("primary", "#000000", ""),
            ThemeColor("primary", "#ffffff", ""),
        ))
        assert theme.as_dict() == {"primary": "#ffffff"}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExportJson:
    def test_shape(self) -> None:
        theme = _generate()
        data = json.loads(export_to_json(theme))
        assert list(data) == ["name", "baseColor", "colors"]
        assert data["name"] == "Custom Theme"
        assert data["baseColor"] == BASE
        assert list(data["colors"]) == theme.names
        assert data["colors"]["secondary"] == "#db7734"

    def test_two_space_indent(self) -> None:
        text = export_to_json(_generate())
        assert text.startswith('{\n  "name": "Custom Theme",\n  "baseColor": "#3498db",')
        assert '\n    "primary": "#3498db"' in text

    def test_reflects_overrides(self) -> None:
        theme = _generate().with_color("text", "#000000")
        assert json.loads(export_to_json(theme))["colors"]["text"] == "#000000"


class TestExportPowerBI:
    def test_complementary_mapping(self) -> None:
        theme = _generate()
        data = json.loads(export_to_powerbi(theme))
        colors = theme.as_dict()
        assert list(data) == [
            "name", "dataColors", "background", "foreground", "tableAccent", "secondaryForeground",
        ]
        assert data["name"] == "Custom Theme"
        # Theme order: primary, secondary, accent, then error, warning, success
        assert data["dataColors"] == [
            colors["primary"],
            colors["secondary"],
            colors["accent"],
            "#e74c3c",
            "#f39c12",
            "#2ecc71",
        ]
        assert data["background"] == colors["background"]
        assert data["tableAccent"] == colors["surface"]
        assert data["foreground"] == "#333333"
        assert data["secondaryForeground"] == "#666666"

    def test_accent2_dropped(self) -> None:
        theme = _generate(harmony="tetradic")
        data = json.loads(export_to_powerbi(theme))
        assert len(data["dataColors"]) == 6
        assert theme.get("accent2").hex not in data["dataColors"]

    def test_defaults_when_fields_missing(self) -> None:
        theme = Theme(BASE, "complementary", (ThemeColor("primary", BASE, ""),))
        data = json.loads(export_to_powerbi(theme))
        assert data == {
            "name": "Custom Theme",
            "dataColors": [BASE],
            "background": "#ffffff",
            "foreground": "#333333",
            "tableAccent": "#f0f0f0",
            "secondaryForeground": "#666666",
        }

    def test_two_space_indent(self) -> None:
        text = export_to_powerbi(_generate())
        assert text.startswith('{\n  "name": "Custom Theme",\n  "dataColors": [\n    "#3498db",')


class TestTypography:
    def test_defaults(self) -> None:
        data = json.loads(export_typography(FontSettings()))
        assert data == {
            "headingFont": "sans-serif",
            "bodyFont": "sans-serif",
            "baseFontSize": 16,
            "scaleRatio": 1.2,
        }
