"""Image loading, conversion and saving helpers."""

import logging
import math
from pathlib import Path

import numpy as np
import torch
from PIL import Image, ImageOps

logger = logging.getLogger(__name__)


def load_image(path: str | Path, max_pixels: int | None = None) -> Image.Image:
    """
    Open a photo, apply its EXIF orientation and convert it to RGB.

    Args:
        path: Image file path
        max_pixels: Downscale so width * height stays under this bound

    Returns:
        Upright RGB PIL Image
    """
    with Image.open(path) as image:
        image = ImageOps.exif_transpose(image).convert("RGB")
    if max_pixels is not None:
        image = limit_pixels(image, max_pixels)
    return image


def limit_pixels(image: Image.Image, max_pixels: int) -> Image.Image:
    """Downscale ``image`` preserving aspect ratio so it has at most ``max_pixels``."""
    width, height = image.size
    if width * height <= max_pixels:
        return image
    factor = math.sqrt(max_pixels / (width * height))
    new_size = (max(1, int(width * factor)), max(1, int(height * factor)))
    logger.debug(f"Downscaling {width}x{height} to {new_size[0]}x{new_size[1]}")
    return image.resize(new_size, Image.Resampling.LANCZOS)


def make_thumbnail(image: Image.Image, max_side: int) -> Image.Image:
    """Return a copy of ``image`` whose longer side is at most ``max_side``."""
    thumb = image.copy()
    thumb.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
    return thumb


def pil_to_tensor(image: Image.Image) -> torch.Tensor:
    """
    Convert a PIL Image to a (C, H, W) float tensor in [0, 1].
    """
    image_array = np.array(image.convert("RGB"))
    return torch.from_numpy(image_array).permute(2, 0, 1).float() / 255.0


def tensor_to_pil(tensor: torch.Tensor) -> Image.Image:
    """
    Convert a (C, H, W) tensor in [0, 1] to an RGB PIL Image.
    """
    img_array = tensor.permute(1, 2, 0).clamp(0, 1).cpu().numpy()
    return Image.fromarray((img_array * 255).round().astype(np.uint8))


def save_image(image: Image.Image, path: str | Path, quality: int = 95) -> None:
    """
    Save ``image``, using ``quality`` for lossy formats.

    JPEG cannot store alpha, so RGBA images are flattened first.
    """
    path = Path(path)
    if path.suffix.lower() in (".jpg", ".jpeg"):
        if image.mode != "RGB":
            image = image.convert("RGB")
        image.save(path, quality=quality)
    elif path.suffix.lower() == ".webp":
        image.save(path, quality=quality)
    else:
        image.save(path)
