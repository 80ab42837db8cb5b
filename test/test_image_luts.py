"""Tests for HALD and strip image LUT decoding."""

import numpy as np
import pytest

from luts import InvalidHeader, SizeMismatch, decode_image_lut
from luts.image import hald_size


def _lattice_colors(size):
    """(b, g, r) index grids and the uint8 color of every lattice point."""
    b, g, r = np.meshgrid(np.arange(size), np.arange(size), np.arange(size), indexing="ij")
    scale = 255.0 / (size - 1)
    colors = np.stack([r * scale, g * scale, b * scale], axis=-1).round().astype(np.uint8)
    return b, g, r, colors


def _assert_identity(cube, size):
    assert cube.size == size
    assert cube.sample(0, 0, 0) == (0.0, 0.0, 0.0)
    assert cube.sample(size - 1, 0, 0) == (1.0, 0.0, 0.0)
    assert cube.sample(0, size - 1, 0) == (0.0, 1.0, 0.0)
    assert cube.sample(0, 0, size - 1) == (0.0, 0.0, 1.0)
    assert cube.sample(size - 1, size - 1, size - 1) == (1.0, 1.0, 1.0)


class TestHaldSize:
    """Tests for recognising HALD dimensions."""

    @pytest.mark.parametrize("side,expected", [(64, 16), (512, 64), (27, 9)])
    def test_valid_sides(self, side, expected):
        assert hald_size(side, side) == expected

    def test_non_square(self):
        assert hald_size(64, 32) is None

    def test_unmatched_side(self):
        assert hald_size(100, 100) is None


class TestImageDecoding:
    """Tests for decoding LUT images."""

    def test_hald(self, png_bytes):
        size, tiles = 16, 4
        b, g, r, colors = _lattice_colors(size)
        pixels = np.zeros((size * tiles, size * tiles, 3), dtype=np.uint8)
        pixels[(b // tiles) * size + g, (b % tiles) * size + r] = colors

        cube = decode_image_lut(png_bytes(pixels))

        _assert_identity(cube, size)
        np.testing.assert_allclose(cube.sample(0, 0, 0), pixels[0, 0] / 255.0)

    def test_horizontal_strip(self, png_bytes):
        size = 32
        b, g, r, colors = _lattice_colors(size)
        pixels = np.zeros((size, size * size, 3), dtype=np.uint8)
        pixels[b, r + g * size] = colors

        _assert_identity(decode_image_lut(png_bytes(pixels)), size)

    def test_vertical_strip(self, png_bytes):
        size = 33
        b, g, r, colors = _lattice_colors(size)
        pixels = np.zeros((size * size, size, 3), dtype=np.uint8)
        pixels[b * size + g, r] = colors

        cube = decode_image_lut(png_bytes(pixels))

        _assert_identity(cube, size)
        np.testing.assert_allclose(cube.sample(5, 6, 7), colors[7, 6, 5] / 255.0, rtol=1e-6)

    def test_unsupported_dimensions(self, png_bytes):
        with pytest.raises(SizeMismatch):
            decode_image_lut(png_bytes(np.zeros((50, 100, 3), dtype=np.uint8)))

    def test_not_an_image(self):
        with pytest.raises(InvalidHeader):
            decode_image_lut(b"definitely not a png")
