"""Parsing of the color notations used by watermark templates."""

import logging
from typing import Sequence, Tuple

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)


def parse_hex_color(color_str: str, default: RGBA = BLACK) -> RGBA:
    """
    Parse '#RRGGBB' or '#AARRGGBB' into an RGBA tuple.

    Falls back to ``default`` when the string is not a valid hex color.
    """
    s = color_str.strip().lstrip("#")
    try:
        if len(s) == 6:
            return (int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16), 255)
        if len(s) == 8:
            return (int(s[2:4], 16), int(s[4:6], 16), int(s[6:8], 16), int(s[0:2], 16))
    except ValueError:
        pass
    logger.debug(f"Unparseable color '{color_str}', using default")
    return default


def parse_argb_int(value: int) -> RGBA:
    """
    Convert an Android color int (signed 32-bit ARGB) to RGBA.

    A zero alpha byte is treated as fully opaque, matching how bar colors
    are written without an alpha component.
    """
    argb = value & 0xFFFFFFFF
    alpha = (argb >> 24) & 0xFF
    if alpha == 0:
        alpha = 255
    return ((argb >> 16) & 0xFF, (argb >> 8) & 0xFF, argb & 0xFF, alpha)


def rgb_triplet(values: Sequence[float], alpha: float = 1.0) -> RGBA:
    """Convert an [r, g, b] list of 0-255 values and a 0-1 alpha to RGBA."""
    r, g, b = (int(round(max(0.0, min(255.0, float(v))))) for v in values[:3])
    return (r, g, b, int(round(max(0.0, min(1.0, alpha)) * 255)))


def gray(level: float) -> RGBA:
    v = int(round(max(0.0, min(1.0, level)) * 255))
    return (v, v, v, 255)
