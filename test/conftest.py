"""Pytest configuration and shared fixtures for LUT decoding and watermark tests."""

import io
import json
import struct
import tempfile
from pathlib import Path

import numpy as np
import pytest
import torch
from PIL import Image

from watermarks.fonts import FontSpec, TextMetrics


class FakeMeasurer:
    """
    Deterministic text measurer.

    Every character is half an em wide; ascent is 0.8 em and descent 0.2 em,
    so a run of text is exactly one font size tall.
    """

    def __init__(self):
        self.calls = []

    def measure(self, text: str, font: FontSpec) -> TextMetrics:
        self.calls.append((text, font))
        return TextMetrics(0.5 * font.size * len(text), 0.8 * font.size, 0.2 * font.size)


def identity_values(size: int) -> np.ndarray:
    """(size^3, 3) uint8 identity samples, red fastest."""
    levels = np.round(np.arange(size) * 255.0 / (size - 1)).astype(np.uint8)
    b, g, r = np.meshgrid(levels, levels, levels, indexing="ij")
    return np.stack([r, g, b], axis=-1).reshape(-1, 3)


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def measurer():
    """Provide a measurer with predictable metrics."""
    return FakeMeasurer()


@pytest.fixture
def identity_bytes():
    """
    Build raw identity LUT payloads.

    Returns:
        Callable(size, channels=3, bgr=False) -> bytes
    """

    def build(size: int, channels: int = 3, bgr: bool = False) -> bytes:
        rgb = identity_values(size)
        if bgr:
            rgb = rgb[:, ::-1]
        if channels == 4:
            alpha = np.full((rgb.shape[0], 1), 255, dtype=np.uint8)
            rgb = np.concatenate([rgb, alpha], axis=1)
        return np.ascontiguousarray(rgb, dtype=np.uint8).tobytes()

    return build


@pytest.fixture
def identity_float_bytes():
    """Build float32 identity payloads: Callable(size) -> bytes."""

    def build(size: int) -> bytes:
        coords = np.linspace(0.0, 1.0, size, dtype=np.float32)
        b, g, r = np.meshgrid(coords, coords, coords, indexing="ij")
        return np.stack([r, g, b], axis=-1).reshape(-1, 3).astype("<f4").tobytes()

    return build


@pytest.fixture
def lut3_bytes(identity_bytes):
    """Build a LUT3 file: Callable(size, header_size=None, header_entries=None) -> bytes."""

    def build(size: int, header_size=None, header_entries=None) -> bytes:
        header_size = size if header_size is None else header_size
        header_entries = size**3 if header_entries is None else header_entries
        return b"LUT3" + struct.pack("<II", header_size, header_entries) + identity_bytes(size)

    return build


@pytest.fixture
def ms_lut_header():
    """Build a 48 byte .MS-LUT header: Callable(size, offset=48, hint=0) -> bytes."""

    def build(size: int, offset: int = 48, hint: int = 0) -> bytes:
        header = bytearray(offset)
        header[0:8] = b".MS-LUT "
        struct.pack_into("<I", header, 0x0C, size)
        header[0x10] = hint
        struct.pack_into("<I", header, 0x28, offset)
        return bytes(header)

    return build


@pytest.fixture
def png_bytes():
    """Encode an (H, W, 3) uint8 array as PNG: Callable(array) -> bytes."""

    def encode(pixels: np.ndarray) -> bytes:
        buffer = io.BytesIO()
        Image.fromarray(pixels.astype(np.uint8), "RGB").save(buffer, format="PNG")
        return buffer.getvalue()

    return encode


@pytest.fixture
def sample_photo():
    """A 120x80 mid-gray photo."""
    return Image.new("RGB", (120, 80), color=(128, 128, 128))


@pytest.fixture
def gradient_image():
    """
    Create a synthetic gradient test image.

    Returns:
        torch.Tensor: Image tensor of shape (3, H, W) with values in [0, 1]
    """
    width, height = 64, 64
    r = torch.linspace(0, 1, width).unsqueeze(0).expand(height, -1)
    g = torch.linspace(0, 1, height).unsqueeze(1).expand(-1, width)
    b = (r + g) / 2.0
    return torch.stack([r, g, b], dim=0)


VIVO_TEMPLATE = """\
<frametype>zeiss</frametype>
<isadaptive>true</isadaptive>
<basecolor>-1</basecolor>
<templatewidth>1080</templatewidth>
<templateheight>1719</templateheight>
<marginstart>8</marginstart>
<marginend>8</marginend>
PATHSETIN
<point>(0,0)(1080,0)(1080,1395)(0,1395)</point>
PATHCLOSE
PARAMSETIN
<group>
<groupgravity>center_vertical</groupgravity>
<subgroup>
<subgroupnum>0</subgroupnum>
<subgroupvisible>true</subgroupvisible>
<line>
<linemarginbottom>2</linemarginbottom>
<picparam>
<piclinenum>1</piclinenum>
<picgravity>end</picgravity>
<picpoint>(300,10)(350,30)</picpoint>
<pic>zeiss_logo.png</pic>
</picparam>
<textparam>
<linenum>1</linenum>
<textgravity>start</textgravity>
<textpoint>(20,10)(120,30)</textpoint>
<text>vivo X100</text>
<textsize>14</textsize>
<textcolor>#FF222222</textcolor>
<typeface>4</typeface>
<texttype>1</texttype>
</textparam>
</line>
</subgroup>
</group>
PARAMCLOSE
"""


@pytest.fixture
def vivo_template_text():
    """A small but complete Vivo template."""
    return VIVO_TEMPLATE


@pytest.fixture
def tecno_config():
    """A Tecno watermark JSON document as a dict."""
    return {
        "WATERMARK": {
            "WM_LAYOUTS": [["MODE_A", "MODE_B"], ["MODE_A"]],
            "MODE_A": {
                "BAR_COLOR": [250, 250, 250],
                "BAR_SIZE": [1080, 113],
                "BACKDROP_IS_VALID": True,
                "BACKDROP_PROFILE": {
                    "ICON_FILE_NAME": "backdrop.png",
                    "ICON_COORDINATE": [0, 0],
                    "ICON_SIZE": [1080, 113],
                },
                "BRAND_PROFILE": {"TYPE_TEXT": True, "TEXT_BRAND_NAME": "TECNO"},
                "ICON_PROFILES": [
                    {
                        "ICON_FILE_NAME": "logo.png",
                        "ICON_COORDINATE": [60, 56],
                        "ICON_SIZE": [40, 40],
                    },
                    {
                        "ICON_FILE_NAME": "pin.png",
                        "ICON_SIZE": [20, 20],
                        "RELY_ON_ELEM": True,
                        "RELY_PROFILE": {"RELY_TYPE": 1, "RELY_INDEX": 3, "RELT_ON_LEFT_X": True},
                    },
                ],
                "TEXT_PROFILES": [
                    {
                        "FONT_PROFILE": {"FONT_FILE_NAME": "Tecno-Bold.ttf", "FONT_SIZE": 29.0},
                        "TEXT_COORDINATE": [100, 72],
                    },
                    {
                        "FONT_PROFILE": {"FONT_FILE_NAME": "Tecno-Regular.ttf", "FONT_SIZE": 20.0},
                        "TEXT_COORDINATE": [1041, 72],
                        "RENDER_DIRECTION": 1,
                    },
                    {
                        "FONT_PROFILE": {"FONT_FILE_NAME": "Tecno-Regular.ttf", "FONT_SIZE": 20.0},
                        "TEXT_COORDINATE": [12, 0],
                        "RELY_ON_ELEM": True,
                        "RELY_PROFILE": {"RELY_INDEX": 0, "RELT_ON_LEFT_X": False},
                    },
                    {
                        "FONT_PROFILE": {"FONT_FILE_NAME": "Tecno-Regular.ttf", "FONT_SIZE": 20.0},
                        "TEXT_COORDINATE": [1041, 100],
                        "RENDER_DIRECTION": 1,
                    },
                ],
            },
            "MODE_B": {"BAR_SIZE": [1080, 150]},
        }
    }


@pytest.fixture
def tecno_config_bytes(tecno_config):
    return json.dumps(tecno_config).encode("utf-8")
