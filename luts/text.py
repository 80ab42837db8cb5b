"""Parser for Adobe/Resolve style .cube text LUTs."""

import logging

import numpy as np

from .cube import ColorCube
from .errors import InvalidHeader, SizeMismatch

logger = logging.getLogger(__name__)

SKIPPED_PREFIXES = ("#", "TITLE", "DOMAIN_")


def decode_cube_text(data: bytes | str) -> ColorCube:
    """
    Parse .cube text into a ColorCube.

    Blank lines, comments, TITLE and DOMAIN_* lines are skipped. Any other
    line with at least three numeric fields contributes one sample, clamped
    to [0, 1]; lines that do not parse are ignored.

    Args:
        data: Raw file bytes (UTF-8) or already decoded text

    Returns:
        ColorCube with size taken from LUT_3D_SIZE

    Raises:
        InvalidHeader: Text is not UTF-8 or LUT_3D_SIZE is missing
        SizeMismatch: Sample count differs from LUT_3D_SIZE^3
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidHeader(f"Cube file is not valid UTF-8: {e}") from e
    else:
        text = data

    lut_size = None
    values = []

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith(SKIPPED_PREFIXES):
            continue

        if line.startswith("LUT_3D_SIZE"):
            parts = line.split()
            if len(parts) >= 2:
                try:
                    lut_size = int(parts[1])
                except ValueError:
                    logger.debug(f"Ignoring unreadable size line: {line}")
            continue

        parts = line.split()
        if len(parts) < 3:
            continue
        try:
            values.append([float(parts[0]), float(parts[1]), float(parts[2])])
        except ValueError:
            continue

    if lut_size is None:
        raise InvalidHeader("LUT_3D_SIZE not found in cube file")
    if lut_size < 2:
        raise InvalidHeader(f"LUT_3D_SIZE must be at least 2, got {lut_size}")

    expected = lut_size**3
    if len(values) != expected:
        raise SizeMismatch(f"Expected {expected} entries, got {len(values)}")

    return ColorCube(lut_size, np.array(values, dtype=np.float32))
