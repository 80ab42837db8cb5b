"""Decoding of LUTs stored as HALD or strip images."""

import io
import logging

import numpy as np
from PIL import Image, UnidentifiedImageError

from utils.constants import MAX_LUT_SIZE, MIN_LUT_SIZE

from .cube import ColorCube
from .errors import InvalidHeader, SizeMismatch

logger = logging.getLogger(__name__)

HALD_FALLBACK_SIZES = (16, 32, 64)


def load_rgba(data: bytes) -> np.ndarray:
    """Decode image bytes into an (H, W, 4) uint8 array in RGBA order."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidHeader(f"Cannot decode LUT image: {e}") from e


def hald_size(width: int, height: int) -> int | None:
    """
    Return the cube size of a square HALD image, or None.

    A HALD of cube size N is tiled t x t with t = sqrt(N), each tile N x N
    pixels, so the image side is N * t.
    """
    if width != height:
        return None

    candidates = (int(round(width ** (2.0 / 3.0))),) + HALD_FALLBACK_SIZES
    for size in candidates:
        if size <= 1:
            continue
        tiles_per_row = int(round(size**0.5))
        if tiles_per_row * tiles_per_row == size and size * tiles_per_row == width:
            return size
    return None


def _lattice(size: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    # Flattened in C order this gives red fastest, then green, then blue
    axis = np.arange(size)
    return np.meshgrid(axis, axis, axis, indexing="ij")


def _gather(pixels: np.ndarray, size: int, xs: np.ndarray, ys: np.ndarray) -> ColorCube:
    rgb = pixels[ys.reshape(-1), xs.reshape(-1), :3]
    return ColorCube(size, rgb.astype(np.float32) / 255.0)


def decode_image_lut(data: bytes) -> ColorCube:
    """
    Decode a HALD, horizontal strip or vertical strip LUT image.

    Shapes are tried in that order:

    - HALD: square, blue picks the tile, green the row in the tile, red the column
    - Strip A: width == height^2, pixel (r + g*N, b)
    - Strip B: height == width^2, pixel (r, b*N + g)

    Raises:
        InvalidHeader: Bytes are not a decodable image
        SizeMismatch: Image dimensions match none of the layouts
    """
    pixels = load_rgba(data)
    height, width = pixels.shape[:2]

    size = hald_size(width, height)
    if size is not None:
        b, g, r = _lattice(size)
        tile = width // int(round(size**0.5))
        tiles_per_row = width // tile
        xs = (b % tiles_per_row) * tile + r
        ys = (b // tiles_per_row) * tile + g
        logger.debug(f"Decoding {width}x{height} HALD image as size {size}")
        return _gather(pixels, size, xs, ys)

    if MIN_LUT_SIZE <= height <= MAX_LUT_SIZE and width == height * height:
        size = height
        b, g, r = _lattice(size)
        logger.debug(f"Decoding {width}x{height} horizontal strip as size {size}")
        return _gather(pixels, size, r + g * size, b)

    if MIN_LUT_SIZE <= width <= MAX_LUT_SIZE and height == width * width:
        size = width
        b, g, r = _lattice(size)
        logger.debug(f"Decoding {width}x{height} vertical strip as size {size}")
        return _gather(pixels, size, r, b * size + g)

    raise SizeMismatch(f"{width}x{height} image is neither a HALD nor a strip LUT")
