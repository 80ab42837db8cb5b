"""Font lookup and text measurement with Pillow."""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, Tuple

from PIL import ImageFont

from utils.assets import AssetProvider, FileAssetProvider
from utils.colors import BLACK, RGBA

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontSpec:
    """A font request: file name, pixel size, weight, color and extra spacing."""

    file_name: str
    size: float
    weight: int = 400
    color: RGBA = BLACK
    letter_spacing: float = 0.0


@dataclass(frozen=True)
class TextMetrics:
    """Width of a run of text plus the ascent/descent of its font, in pixels."""

    width: float
    ascent: float
    descent: float

    @property
    def height(self) -> float:
        return self.ascent + self.descent


class TextMeasurer(Protocol):
    def measure(self, text: str, font: FontSpec) -> TextMetrics: ...


class FontBook:
    """
    Load fonts from a list of directories and measure text with them.

    Fonts are cached per (file, pixel size). A file that cannot be found in
    any directory, or that Pillow cannot read, falls back to Pillow's bundled
    default font at the same size.

    Args:
        font_dirs: Directories searched in order
        provider: Byte source for font files (handles .enc assets)
    """

    def __init__(self, font_dirs: Sequence[str | Path] = (), provider: Optional[AssetProvider] = None):
        self.font_dirs = [Path(d) for d in font_dirs]
        self.provider = provider or FileAssetProvider()
        self._fonts: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}
        self._missing: set = set()

    def _read_font_bytes(self, file_name: str) -> Optional[bytes]:
        if not file_name:
            return None
        for font_dir in self.font_dirs:
            try:
                return self.provider.read_bytes(str(font_dir / file_name))
            except FileNotFoundError:
                continue
        return None

    def get(self, font: FontSpec) -> ImageFont.FreeTypeFont:
        size = max(1, int(round(font.size)))
        key = (font.file_name, size)
        if key in self._fonts:
            return self._fonts[key]

        loaded = None
        data = self._read_font_bytes(font.file_name)
        if data is not None:
            try:
                loaded = ImageFont.truetype(io.BytesIO(data), size=size)
            except OSError as e:
                if font.file_name not in self._missing:
                    logger.warning(f"Font '{font.file_name}' could not be read ({e}), using default font")
                    self._missing.add(font.file_name)
        elif font.file_name not in self._missing:
            logger.warning(f"Font '{font.file_name}' not found, using default font")
            self._missing.add(font.file_name)
        if loaded is None:
            loaded = ImageFont.load_default(size=size)

        self._fonts[key] = loaded
        return loaded

    def measure(self, text: str, font: FontSpec) -> TextMetrics:
        pil_font = self.get(font)
        width = pil_font.getlength(text)
        if len(text) > 1:
            width += font.letter_spacing * (len(text) - 1)
        ascent, descent = pil_font.getmetrics()
        return TextMetrics(float(width), float(ascent), float(descent))
