"""Shared utilities: assets, caching, configuration, colors and image helpers."""

from .assets import AssetProvider, FileAssetProvider
from .cache import AssetCache
from .colors import parse_argb_int, parse_hex_color, rgb_triplet
from .config import Config, ConfigValidationError, PreviewSettings, load_config
from .constants import MAX_LUT_SIZE, MIN_LUT_SIZE
from .device import get_device
from .image import (
    limit_pixels,
    load_image,
    make_thumbnail,
    pil_to_tensor,
    save_image,
    tensor_to_pil,
)
from .io import write_cube_file
from .transforms import apply_lut, identity_lut

__all__ = [
    # Assets
    "AssetProvider",
    "FileAssetProvider",
    "AssetCache",
    # Config
    "Config",
    "ConfigValidationError",
    "PreviewSettings",
    "load_config",
    # Constants
    "MAX_LUT_SIZE",
    "MIN_LUT_SIZE",
    # Colors
    "parse_argb_int",
    "parse_hex_color",
    "rgb_triplet",
    # Image conversion
    "limit_pixels",
    "load_image",
    "make_thumbnail",
    "pil_to_tensor",
    "save_image",
    "tensor_to_pil",
    # LUT I/O and application
    "write_cube_file",
    "apply_lut",
    "identity_lut",
    # Device
    "get_device",
]
