"""Tests for color parsing, device selection and image helpers."""

import pytest
import torch
from PIL import Image

from utils.colors import BLACK, gray, parse_argb_int, parse_hex_color, rgb_triplet
from utils.device import get_device
from utils.image import limit_pixels, make_thumbnail, pil_to_tensor, save_image, tensor_to_pil


class TestColors:
    """Tests for the template color notations."""

    def test_hex_rgb(self):
        assert parse_hex_color("#1A2B3C") == (0x1A, 0x2B, 0x3C, 255)

    def test_hex_argb(self):
        assert parse_hex_color("#80FF0000") == (255, 0, 0, 128)

    @pytest.mark.parametrize("value", ["", "#12345", "#GGGGGG", "red"])
    def test_hex_invalid_uses_default(self, value):
        assert parse_hex_color(value) == BLACK
        assert parse_hex_color(value, default=(1, 2, 3, 4)) == (1, 2, 3, 4)

    def test_argb_int(self):
        assert parse_argb_int(-1) == (255, 255, 255, 255)
        assert parse_argb_int(-65794) == (254, 254, 254, 255)
        assert parse_argb_int(0x7F102030) == (0x10, 0x20, 0x30, 0x7F)

    def test_argb_int_without_alpha_is_opaque(self):
        assert parse_argb_int(0x00FF00) == (0, 255, 0, 255)

    def test_rgb_triplet(self):
        assert rgb_triplet([250, 300, -4]) == (250, 255, 0, 255)
        assert rgb_triplet([0, 0, 0], alpha=0.5) == (0, 0, 0, 128)

    def test_gray(self):
        assert gray(0.46) == (117, 117, 117, 255)


class TestDevice:
    """Tests for get_device."""

    def test_cpu(self):
        assert get_device("cpu") == torch.device("cpu")

    def test_unavailable_falls_back_to_cpu(self, monkeypatch):
        monkeypatch.setattr(torch.cuda, "is_available", lambda: False)
        assert get_device("cuda") == torch.device("cpu")

    def test_auto_without_accelerators(self, monkeypatch):
        monkeypatch.setattr(torch.cuda, "is_available", lambda: False)
        monkeypatch.setattr(torch.backends.mps, "is_available", lambda: False)
        assert get_device("auto") == torch.device("cpu")


class TestImageHelpers:
    """Tests for image conversion and resizing."""

    def test_limit_pixels(self):
        image = Image.new("RGB", (400, 200))
        assert limit_pixels(image, 100_000) is image

        limited = limit_pixels(image, 20_000)
        assert limited.width * limited.height <= 20_000
        assert limited.width == 2 * limited.height

    def test_make_thumbnail(self):
        thumb = make_thumbnail(Image.new("RGB", (400, 200)), 100)
        assert thumb.size == (100, 50)

    def test_tensor_roundtrip(self, sample_photo):
        tensor = pil_to_tensor(sample_photo)
        assert tensor.shape == (3, 80, 120)
        assert list(tensor_to_pil(tensor).getdata()) == list(sample_photo.getdata())

    def test_save_jpeg_flattens_alpha(self, temp_dir):
        path = temp_dir / "out.jpg"
        save_image(Image.new("RGBA", (10, 10), (255, 0, 0, 128)), path, quality=80)
        with Image.open(path) as saved:
            assert saved.mode == "RGB"
