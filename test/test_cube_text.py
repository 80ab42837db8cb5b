"""Tests for the .cube text decoder and writer."""

import numpy as np
import pytest

from luts import ColorCube, InvalidHeader, SizeMismatch, decode, decode_cube_text
from utils.io import write_cube_file


def _cube_text(size, rows, header="LUT_3D_SIZE {size}\n"):
    lines = [header.format(size=size)] + [" ".join(str(v) for v in row) + "\n" for row in rows]
    return "".join(lines)


class TestCubeTextDecoding:
    """Tests for parsing .cube text."""

    def test_write_and_decode_roundtrip(self, temp_dir):
        """Writing a cube and decoding it back preserves every sample."""
        rng = np.random.default_rng(0)
        cube = ColorCube(5, rng.random((125, 3), dtype=np.float32))
        path = temp_dir / "random.cube"

        write_cube_file(path, cube, title="Random")
        decoded = decode(str(path))

        assert decoded.size == 5
        np.testing.assert_allclose(decoded.samples, cube.samples, atol=1e-6)

    def test_red_varies_fastest(self):
        """Sample lines are read red fastest, then green, then blue."""
        rows = [(r, g, b) for b in (0, 1) for g in (0, 1) for r in (0, 1)]
        cube = decode_cube_text(_cube_text(2, rows))

        assert cube.sample(1, 0, 0) == (1.0, 0.0, 0.0)
        assert cube.sample(0, 1, 0) == (0.0, 1.0, 0.0)
        assert cube.sample(0, 0, 1) == (0.0, 0.0, 1.0)

    def test_skips_metadata_and_comments(self):
        """TITLE, DOMAIN_* lines, comments and blank lines are ignored."""
        text = (
            '# exported by a camera vendor\n'
            'TITLE "Classic Chrome"\n'
            "DOMAIN_MIN 0.0 0.0 0.0\n"
            "DOMAIN_MAX 1.0 1.0 1.0\n"
            "\n"
            "LUT_3D_SIZE 2\n"
            + "".join("0.5 0.5 0.5\n" for _ in range(8))
        )
        cube = decode_cube_text(text.encode("utf-8"))

        assert cube.size == 2
        assert np.all(cube.samples == 0.5)

    def test_uses_first_three_values_and_clamps(self):
        """Extra columns are ignored and values are clamped to [0, 1]."""
        rows = [(1.5, -0.25, 0.5, 9.0)] + [(0, 0, 0)] * 7
        cube = decode_cube_text(_cube_text(2, rows))

        assert cube.sample(0, 0, 0) == (1.0, 0.0, 0.5)

    def test_ignores_unparseable_lines(self):
        """Lines that are not numeric triples do not count as samples."""
        rows = [(0, 0, 0)] * 8
        text = _cube_text(2, rows) + "LUT_1D_INPUT_RANGE a b c\n"
        assert decode_cube_text(text).size == 2

    def test_missing_size_raises_invalid_header(self):
        with pytest.raises(InvalidHeader):
            decode_cube_text("0 0 0\n1 1 1\n")

    def test_wrong_sample_count_raises_size_mismatch(self):
        with pytest.raises(SizeMismatch):
            decode_cube_text(_cube_text(2, [(0, 0, 0)] * 7))

    def test_invalid_utf8_raises_invalid_header(self):
        with pytest.raises(InvalidHeader):
            decode_cube_text(b"LUT_3D_SIZE 2\n\xff\xfe\xfa")


class TestCubeWriter:
    """Tests for write_cube_file."""

    def test_header_and_line_count(self, temp_dir):
        path = temp_dir / "identity.cube"
        write_cube_file(path, ColorCube.identity(3), title="Identity")

        lines = path.read_text().splitlines()
        assert lines[0] == 'TITLE "Identity"'
        assert "LUT_3D_SIZE 3" in lines
        data = [line for line in lines if line and line[0].isdigit()]
        assert len(data) == 27
        assert data[1] == "0.500000 0.000000 0.000000"
