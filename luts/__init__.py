"""Decoders that normalise vendor LUT formats into a ColorCube."""

from .binary import decode_binary, detect_layout
from .cube import ColorCube
from .decoder import decode, decode_bytes, is_lut_asset, lut_extension
from .errors import (
    DecodeError,
    InvalidHeader,
    SizeMismatch,
    TruncatedData,
    UnsupportedExtension,
)
from .image import decode_image_lut
from .text import decode_cube_text

__all__ = [
    # Model
    "ColorCube",
    # Decoding
    "decode",
    "decode_bytes",
    "decode_binary",
    "decode_cube_text",
    "decode_image_lut",
    "detect_layout",
    "is_lut_asset",
    "lut_extension",
    # Errors
    "DecodeError",
    "InvalidHeader",
    "SizeMismatch",
    "TruncatedData",
    "UnsupportedExtension",
]
