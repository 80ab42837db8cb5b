"""Configuration for asset locations, preview generation and output."""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import List, Literal, get_args

DeviceType = Literal["auto", "cpu", "cuda", "mps"]

VALID_DEVICES = get_args(DeviceType)


class ConfigValidationError(ValueError):
    """Raised when config validation fails."""

    pass


@dataclass
class PreviewSettings:
    """Settings for batch LUT preview rendering."""

    max_workers: int = 4
    thumbnail_size: int = 256
    max_pixels: int = 10_000_000

    @classmethod
    def from_dict(cls, data: dict) -> "PreviewSettings":
        valid_fields = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered_data)

    def validate(self) -> List[str]:
        errors = []
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                errors.append(f"preview.{f.name} must be an integer, got {type(value).__name__}")
            elif value <= 0:
                errors.append(f"preview.{f.name} must be positive, got {value}")
        return errors


@dataclass
class Config:
    """Configuration for LUT decoding and watermark rendering."""

    asset_root: str = "."
    font_dirs: List[str] = field(default_factory=lambda: ["assets/fonts"])
    image_dirs: List[str] = field(default_factory=lambda: ["assets/watermark"])
    device: DeviceType = "auto"
    save_quality: int = 95
    preview: PreviewSettings = field(default_factory=PreviewSettings)

    def validate(self) -> None:
        errors = []

        if not isinstance(self.asset_root, str) or not self.asset_root:
            errors.append(f"asset_root must be a non-empty string, got {self.asset_root!r}")

        for name in ("font_dirs", "image_dirs"):
            value = getattr(self, name)
            if not isinstance(value, list):
                errors.append(f"{name} must be a list, got {type(value).__name__}")
            elif not all(isinstance(item, str) for item in value):
                errors.append(f"{name} must only contain strings")

        if self.device not in VALID_DEVICES:
            errors.append(f"device must be one of {VALID_DEVICES}, got '{self.device}'")

        if not isinstance(self.save_quality, int):
            errors.append(f"save_quality must be an integer, got {type(self.save_quality).__name__}")
        elif not 1 <= self.save_quality <= 100:
            errors.append(f"save_quality must be in [1, 100], got {self.save_quality}")

        errors.extend(self.preview.validate())

        if errors:
            raise ConfigValidationError("Config validation failed:\n  - " + "\n  - ".join(errors))

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        preview = PreviewSettings.from_dict(data.get("preview", {}))

        config_fields = {f.name for f in fields(cls)}
        simple_fields = config_fields - {"preview"}
        kwargs = {k: v for k, v in data.items() if k in simple_fields}

        return cls(preview=preview, **kwargs)

    @classmethod
    def from_json(cls, file_path: str | Path, validate: bool = True) -> "Config":
        with open(file_path, "r") as f:
            data = json.load(f)
        config = cls.from_dict(data)
        if validate:
            config.validate()
        return config

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self, file_path: str | Path) -> None:
        with open(file_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def resolve_dirs(self, dirs: List[str]) -> List[Path]:
        """Resolve relative directories against ``asset_root``."""
        root = Path(self.asset_root)
        return [Path(d) if Path(d).is_absolute() else root / d for d in dirs]


def load_config(config_path: str | Path | None = None, validate: bool = True) -> Config:
    if config_path is None:
        config = Config()
        if validate:
            config.validate()
        return config
    return Config.from_json(config_path, validate=validate)
