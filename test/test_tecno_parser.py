"""Tests for the Tecno watermark JSON parser."""

import json

import pytest

from watermarks import (
    EmptyTemplate,
    MalformedSyntax,
    MissingRequiredField,
    Orientation,
    Point,
    RelyRef,
    get_mode,
    parse_tecno_modes,
)
from watermarks.tecno import RenderDirection, parse_mode


class TestParseTecnoModes:
    """Tests for parse_tecno_modes."""

    def test_modes_per_orientation(self, tecno_config_bytes):
        modes = parse_tecno_modes(tecno_config_bytes)

        assert set(modes) == {
            ("MODE_A", Orientation.PORTRAIT),
            ("MODE_B", Orientation.PORTRAIT),
            ("MODE_A", Orientation.LANDSCAPE),
        }
        assert get_mode(modes, "MODE_B", Orientation.LANDSCAPE) is None
        assert get_mode(modes, "MODE_A", Orientation.LANDSCAPE) is get_mode(modes, "MODE_A", Orientation.PORTRAIT)

    def test_mode_contents(self, tecno_config_bytes):
        mode = get_mode(parse_tecno_modes(tecno_config_bytes), "MODE_A", Orientation.PORTRAIT)

        assert mode.bar_color == (250.0, 250.0, 250.0)
        assert mode.bar_size == (1080.0, 113.0)
        assert mode.reference_width == 1080.0
        assert mode.backdrop.file_name == "backdrop.png"
        assert mode.brand_is_text and mode.brand_name == "TECNO"

        logo, pin = mode.icons
        assert logo.coordinate == Point(60, 56)
        assert logo.size == (40, 40)
        assert logo.rely is None
        assert pin.rely == RelyRef(3, anchor_on_target_left=True)

        assert len(mode.texts) == 4
        assert mode.texts[0].font.file_name == "Tecno-Bold.ttf"
        assert mode.texts[0].font.size == 29.0
        assert mode.texts[1].render_direction == RenderDirection.RIGHT_TO_LEFT
        assert mode.texts[1].is_rtl
        assert mode.texts[2].rely == RelyRef(0, anchor_on_target_left=False)

    def test_missing_fields_use_defaults(self, tecno_config_bytes):
        mode = get_mode(parse_tecno_modes(tecno_config_bytes), "MODE_B", Orientation.PORTRAIT)

        assert mode.bar_size == (1080.0, 150.0)
        assert mode.bar_color == (255.0, 255.0, 255.0)
        assert mode.backdrop is None
        assert mode.icons == [] and mode.texts == []

    def test_listed_mode_without_definition_is_skipped(self, tecno_config):
        tecno_config["WATERMARK"]["WM_LAYOUTS"][1].append("MODE_MISSING")
        modes = parse_tecno_modes(json.dumps(tecno_config))

        assert ("MODE_MISSING", Orientation.LANDSCAPE) not in modes

    def test_invalid_json(self):
        with pytest.raises(MalformedSyntax):
            parse_tecno_modes(b"{not json")

    def test_root_must_be_object(self):
        with pytest.raises(MalformedSyntax):
            parse_tecno_modes("[1, 2]")

    def test_missing_watermark(self):
        with pytest.raises(MissingRequiredField):
            parse_tecno_modes('{"OTHER": {}}')

    def test_missing_layouts(self):
        with pytest.raises(MissingRequiredField):
            parse_tecno_modes('{"WATERMARK": {"MODE_A": {}}}')

    def test_no_usable_modes(self):
        with pytest.raises(EmptyTemplate):
            parse_tecno_modes('{"WATERMARK": {"WM_LAYOUTS": [["MODE_A"], []]}}')


class TestParseMode:
    """Tests for the per-mode defaults."""

    def test_wrong_types_fall_back(self):
        mode = parse_mode(
            "X",
            {
                "BAR_SIZE": "wide",
                "BAR_COLOR": [10, "red", 30],
                "TEXT_PROFILES": [{"TEXT_COORDINATE": [5]}, "junk"],
                "BRAND_PROFILE": {"TYPE_TEXT": True},
            },
        )

        assert mode.bar_size == (1080.0, 113.0)
        assert mode.bar_color == (10.0, 255.0, 30.0)
        assert len(mode.texts) == 1
        assert mode.texts[0].coordinate == Point(0, 0)
        assert mode.texts[0].font is None
        assert mode.brand_name == "TECNO"

    def test_image_brand_has_no_name(self):
        mode = parse_mode("X", {"BRAND_PROFILE": {"TYPE_TEXT": False, "TEXT_BRAND_NAME": "TECNO"}})
        assert not mode.brand_is_text
        assert mode.brand_name == ""

    def test_rely_requires_flag(self):
        mode = parse_mode(
            "X",
            {"TEXT_PROFILES": [{"RELY_PROFILE": {"RELY_INDEX": 0}}]},
        )
        assert mode.texts[0].rely is None
