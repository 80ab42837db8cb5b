"""Draw resolved watermark layouts onto photos with Pillow."""

import io
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from PIL import Image, ImageDraw, UnidentifiedImageError

from utils.assets import AssetProvider, FileAssetProvider
from utils.colors import BLACK, gray
from utils.constants import VIVO_DIVIDER_GRAY

from .content import RuntimeContent
from .fonts import FontBook
from .layout import ElementKind, ResolvedElement, ResolvedLayout, resolve
from .tecno import WatermarkModeConfig
from .vivo import WatermarkTemplate

logger = logging.getLogger(__name__)


class WatermarkCompositor:
    """
    Composite a photo with a bar and the elements of a ResolvedLayout.

    The canvas is the photo with ``layout.bar_height`` rows added below it.
    Elements are drawn in list order; images that cannot be loaded are
    skipped, except dividers which fall back to a filled rectangle.

    Args:
        provider: Byte source for watermark images
        fonts: FontBook used to draw text (must match the layout's measurer)
        image_dirs: Directories searched for watermark images
    """

    def __init__(
        self,
        provider: Optional[AssetProvider] = None,
        fonts: Optional[FontBook] = None,
        image_dirs: Sequence[Union[str, Path]] = (),
    ):
        self.provider = provider or FileAssetProvider()
        self.fonts = fonts or FontBook()
        self.image_dirs = [Path(d) for d in image_dirs]
        self._images: Dict[str, Optional[Image.Image]] = {}

    def load_image(self, name: str) -> Optional[Image.Image]:
        """Find ``name`` (or ``stem.png``) under the image directories."""
        if name in self._images:
            return self._images[name]

        candidates = [name]
        stem_png = str(Path(name).with_suffix(".png"))
        if stem_png != name:
            candidates.append(stem_png)

        image = None
        for image_dir in self.image_dirs or [Path(".")]:
            for candidate in candidates:
                try:
                    data = self.provider.read_bytes(str(image_dir / candidate))
                except FileNotFoundError:
                    continue
                try:
                    with Image.open(io.BytesIO(data)) as opened:
                        image = opened.convert("RGBA")
                except (UnidentifiedImageError, OSError) as e:
                    logger.warning(f"Cannot decode watermark image {candidate}: {e}")
                    continue
                break
            if image is not None:
                break

        if image is None:
            logger.debug(f"Watermark image '{name}' not found")
        self._images[name] = image
        return image

    def composite(self, photo: Image.Image, layout: ResolvedLayout) -> Image.Image:
        photo = photo.convert("RGB")
        if photo.size != (layout.image_width, layout.image_height):
            raise ValueError(
                f"Layout was resolved for {layout.image_width}x{layout.image_height}, "
                f"photo is {photo.width}x{photo.height}"
            )

        canvas = Image.new("RGB", layout.canvas_size, layout.bar_color[:3])
        canvas.paste(photo, (0, 0))
        draw = ImageDraw.Draw(canvas, "RGBA")

        for element in layout.elements:
            if element.kind == ElementKind.TEXT:
                self._draw_text(draw, element)
            else:
                self._draw_image(canvas, draw, element)
        return canvas

    def _draw_image(self, canvas: Image.Image, draw: ImageDraw.ImageDraw, element: ResolvedElement) -> None:
        width = int(round(element.width))
        height = int(round(element.height))
        x, y = int(round(element.x)), int(round(element.y))

        image = self.load_image(element.asset) if element.asset else None
        if image is None:
            if element.divider_fallback:
                color = BLACK if "black" in (element.asset or "").lower() else gray(VIVO_DIVIDER_GRAY)
                draw.rectangle([x, y, x + max(1, width) - 1, y + max(1, height) - 1], fill=color)
            return
        if width <= 0 or height <= 0:
            return

        resized = image.resize((width, height), Image.Resampling.LANCZOS)
        canvas.paste(resized, (x, y), resized)

    def _draw_text(self, draw: ImageDraw.ImageDraw, element: ResolvedElement) -> None:
        font_spec = element.font
        font = self.fonts.get(font_spec)
        if not font_spec.letter_spacing:
            draw.text((element.x, element.y), element.text, font=font, fill=font_spec.color, anchor="la")
            return

        x = element.x
        for char in element.text:
            draw.text((x, element.y), char, font=font, fill=font_spec.color, anchor="la")
            x += font.getlength(char) + font_spec.letter_spacing


def apply_watermark(
    photo: Image.Image,
    template: Optional[Union[WatermarkTemplate, WatermarkModeConfig]],
    content: RuntimeContent,
    compositor: WatermarkCompositor,
) -> Image.Image:
    """
    Resolve ``template`` for ``photo`` and composite it.

    Returns the photo unchanged when there is no template or the layout has
    no bar.
    """
    photo = photo.convert("RGB")
    if template is None:
        return photo

    layout = resolve(template, content, photo.width, photo.height, compositor.fonts)
    if layout.bar_height <= 0 and not layout.elements:
        return photo
    return compositor.composite(photo, layout)
