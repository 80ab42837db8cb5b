"""Tests for the configuration system."""

import json
from pathlib import Path

import pytest

from utils.config import Config, ConfigValidationError, PreviewSettings, load_config


class TestPreviewSettings:
    """Tests for PreviewSettings dataclass."""

    def test_default_values(self):
        """Test default preview values."""
        preview = PreviewSettings()
        assert preview.max_workers == 4
        assert preview.thumbnail_size == 256
        assert preview.max_pixels == 10_000_000

    def test_from_dict_ignores_unknown_keys(self):
        """Test that unknown keys are dropped."""
        preview = PreviewSettings.from_dict({"max_workers": 2, "unknown": True})
        assert preview.max_workers == 2
        assert preview.thumbnail_size == 256

    def test_validate(self):
        """Test that non-positive and non-integer values are reported."""
        errors = PreviewSettings(max_workers=0, thumbnail_size="big").validate()
        assert len(errors) == 2
        assert any("max_workers" in e for e in errors)
        assert any("thumbnail_size" in e for e in errors)


class TestConfig:
    """Tests for Config dataclass."""

    def test_default_values(self):
        """Test default config values."""
        config = Config()
        assert config.asset_root == "."
        assert config.font_dirs == ["assets/fonts"]
        assert config.image_dirs == ["assets/watermark"]
        assert config.device == "auto"
        assert config.save_quality == 95
        config.validate()

    def test_from_dict(self):
        """Test creating config from dictionary."""
        data = {
            "asset_root": "/data/assets",
            "font_dirs": ["fonts", "/usr/share/fonts"],
            "device": "cpu",
            "preview": {"max_workers": 8},
        }
        config = Config.from_dict(data)

        assert config.asset_root == "/data/assets"
        assert config.font_dirs == ["fonts", "/usr/share/fonts"]
        assert config.image_dirs == ["assets/watermark"]
        assert config.device == "cpu"
        assert config.preview.max_workers == 8

    def test_from_dict_ignores_unknown_fields(self):
        """Test that unknown fields are ignored."""
        config = Config.from_dict({"steps": 500, "save_quality": 80})
        assert config.save_quality == 80

    def test_json_roundtrip(self, temp_dir):
        """Test saving and loading config from JSON."""
        config_path = temp_dir / "config.json"
        config = Config(asset_root="assets", save_quality=90, preview=PreviewSettings(thumbnail_size=128))
        config.to_json(config_path)

        loaded = Config.from_json(config_path)
        assert loaded == config

    def test_resolve_dirs(self):
        """Test that relative directories are resolved against the asset root."""
        config = Config(asset_root="/data")
        assert config.resolve_dirs(["fonts", "/abs/fonts"]) == [Path("/data/fonts"), Path("/abs/fonts")]


class TestConfigValidation:
    """Tests for config validation."""

    def test_invalid_device(self):
        with pytest.raises(ConfigValidationError, match="device"):
            Config(device="tpu").validate()

    def test_invalid_quality(self):
        with pytest.raises(ConfigValidationError, match="save_quality"):
            Config(save_quality=0).validate()

    def test_dirs_must_be_string_lists(self):
        with pytest.raises(ConfigValidationError, match="font_dirs"):
            Config(font_dirs="fonts").validate()

    def test_collects_all_errors(self):
        """Test that every problem is reported at once."""
        with pytest.raises(ConfigValidationError) as exc_info:
            Config(device="tpu", save_quality=101, preview=PreviewSettings(max_workers=-1)).validate()

        message = str(exc_info.value)
        assert "device" in message
        assert "save_quality" in message
        assert "preview.max_workers" in message

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Config(asset_root="").validate()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_default_config(self):
        """Test loading default config when no path provided."""
        config = load_config()
        assert config == Config()

    def test_load_from_file(self, temp_dir):
        """Test loading config from file."""
        config_path = temp_dir / "config.json"
        with open(config_path, "w") as f:
            json.dump({"device": "cpu", "preview": {"thumbnail_size": 64}}, f)

        config = load_config(config_path)
        assert config.device == "cpu"
        assert config.preview.thumbnail_size == 64

    def test_load_invalid_file(self, temp_dir):
        """Test that invalid files fail validation."""
        config_path = temp_dir / "config.json"
        with open(config_path, "w") as f:
            json.dump({"device": "tpu"}, f)

        with pytest.raises(ConfigValidationError):
            load_config(config_path)

        config = load_config(config_path, validate=False)
        assert config.device == "tpu"
