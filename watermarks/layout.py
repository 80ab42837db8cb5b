"""
Resolve watermark templates into absolute pixel geometry.

Both vendors describe their watermark as a bar appended below the photo with
images and text placed in a reference coordinate space. Resolution scales
that space to the output width (``scale = output_width / reference_width``),
computes the bar height and returns the elements in drawing order.

Elements may be positioned relative to a sibling text (a rely reference). Those
are resolved in a second pass once their target has been placed and measured.
Elements that cannot be resolved are skipped rather than failing the layout.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from utils.colors import RGBA, parse_argb_int, parse_hex_color, rgb_triplet
from utils.constants import (
    TECNO_DEFAULT_BRAND,
    TECNO_ICON_GAP,
    TECNO_ICON_VERTICAL_NUDGE,
    VIVO_DEFAULT_CONTENT_BOTTOM,
    VIVO_DEFAULT_FONT_FILE,
    VIVO_FONT_FILES,
    VIVO_TEMPLATE_DPI,
)

from .content import RuntimeContent, resolve_tecno_text, resolve_vivo_text
from .fonts import FontBook, FontSpec, TextMeasurer
from .geometry import Point
from .tecno import FontProfile, RenderDirection, TextProfile, WatermarkModeConfig
from .vivo import Group, ImageElement, Line, Subgroup, TextElement, WatermarkTemplate

logger = logging.getLogger(__name__)

# Subgroup number to use for each (lens, time, location) availability
VARIANT_SUBGROUPS = {
    (True, True, True): 0,
    (True, True, False): 5,
    (True, False, True): 6,
    (True, False, False): 1,
    (False, True, True): 4,
    (False, True, False): 3,
    (False, False, True): 2,
    (False, False, False): 7,
}


class ElementKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    BACKDROP = "backdrop"


@dataclass(frozen=True)
class ResolvedElement:
    """
    One drawable element in output pixels.

    For text, (x, y) is the top-left of the text box: the baseline sits
    ``font ascent`` below y.
    """

    kind: ElementKind
    x: float
    y: float
    width: float
    height: float
    text: Optional[str] = None
    asset: Optional[str] = None
    font: Optional[FontSpec] = None
    divider_fallback: bool = False

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class ResolvedLayout:
    image_width: int
    image_height: int
    scale: float
    bar_height: int
    bar_color: RGBA
    elements: List[ResolvedElement] = field(default_factory=list)

    @property
    def bar_top(self) -> int:
        return self.image_height

    @property
    def canvas_size(self) -> tuple[int, int]:
        return (self.image_width, self.image_height + self.bar_height)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _rely_x(target: ResolvedElement, anchor_on_left: bool, offset_px: float, own_width: float) -> float:
    # Left anchors place the element before the target, right anchors after it
    if anchor_on_left:
        return target.x + offset_px - own_width
    return target.right + offset_px


# Vivo


def content_bottom(template: WatermarkTemplate) -> float:
    """Lowest y of the photo area path, in template pixels."""
    if template.paths and template.paths[0]:
        return max(p.y for p in template.paths[0])
    return VIVO_DEFAULT_CONTENT_BOTTOM


def select_subgroup(group: Group, content: RuntimeContent) -> Optional[Subgroup]:
    """
    Pick the subgroup variant to draw for the available runtime content.

    Groups whose subgroups are not marked as visibility variants use their
    first visible subgroup. Otherwise the variant number is chosen from which
    of lens, time and location are present, falling back to subgroup 0.
    """
    if not group.subgroups:
        return None
    if len(group.subgroups) == 1:
        return group.subgroups[0]

    default = next((s for s in group.subgroups if s.number == 0), None)
    has_variants = sum(1 for s in group.subgroups if not s.visible) > 1
    if not has_variants:
        return next((s for s in group.subgroups if s.visible), default)

    by_number = {s.number: s for s in group.subgroups}
    wanted = VARIANT_SUBGROUPS[(content.has_lens, content.has_time, content.has_location)]
    return by_number.get(wanted) or by_number.get(0) or default


def vivo_font(text: TextElement, scale: float) -> FontSpec:
    size = text.text_size * scale
    return FontSpec(
        file_name=VIVO_FONT_FILES.get(text.typeface, VIVO_DEFAULT_FONT_FILE),
        size=size,
        weight=text.font_weight,
        color=parse_hex_color(text.color),
        letter_spacing=text.letter_spacing * size,
    )


class _VivoResolver:
    def __init__(self, template, content, width, height, measurer, scale):
        frame = template.frame
        self.content = content
        self.width = width
        self.bar_top = height
        self.measurer = measurer
        self.scale = scale
        self.reference_width = frame.reference_width
        self.margin_start_px = frame.marginstart * scale
        self.margin_end_px = frame.marginend * scale

    def line_offsets(self, subgroup: Subgroup, bar_ref_height: float) -> Dict[int, float]:
        """Vertical base per line number so the stack of lines is centred in the bar."""
        extents = {}
        for line in subgroup.lines:
            rects = [e.rect for e in (*line.images, *line.texts) if e.rect is not None]
            if rects:
                top = min(r.top for r in rects)
                bottom = max(r.bottom for r in rects)
                extents[line.line_num] = (top, bottom, line.margin_bottom)

        order = sorted(extents)
        total = sum(extents[n][1] - extents[n][0] for n in order)
        total += sum(extents[n][2] for n in order[:-1])

        offsets = {}
        running = bar_ref_height / 2 - total / 2
        for num in order:
            top, bottom, margin = extents[num]
            offsets[num] = running - top
            running += (bottom - top) + margin
        return offsets

    def resolve_subgroup(self, subgroup: Subgroup, bar_ref_height: float) -> List[ResolvedElement]:
        offsets = self.line_offsets(subgroup, bar_ref_height)
        elements = []
        for line in subgroup.lines:
            if line.line_num not in offsets:
                continue
            elements.extend(self.resolve_line(line, offsets[line.line_num]))
        return elements

    def resolve_line(self, line: Line, y_base: float) -> List[ResolvedElement]:
        independent: Dict[int, ResolvedElement] = {}
        for i, text in enumerate(line.texts):
            if text.rely is None:
                resolved = self.text(text, y_base, independent)
                if resolved is not None:
                    independent[i] = resolved

        texts = dict(independent)
        for i, text in enumerate(line.texts):
            if text.rely is not None:
                resolved = self.text(text, y_base, independent)
                if resolved is not None:
                    texts[i] = resolved

        images = [self.image(img, y_base, independent) for img in line.images]
        return [e for e in images if e is not None] + [texts[i] for i in sorted(texts)]

    @staticmethod
    def _target(element, targets: Dict[int, ResolvedElement]) -> Optional[ResolvedElement]:
        # Only independently placed texts can be targets
        target = targets.get(element.rely.target_index)
        if target is None:
            logger.debug(f"Rely target {element.rely.target_index} unavailable, skipping element")
        return target

    def image(self, img: ImageElement, y_base: float, targets) -> Optional[ResolvedElement]:
        rect = img.rect
        if rect is None or (not img.pic and not img.is_divider):
            return None

        s = self.scale
        w, h = rect.width * s, rect.height * s
        if img.rely is not None:
            target = self._target(img, targets)
            if target is None:
                return None
            x = _rely_x(target, img.rely.anchor_on_target_left, img.margin_start * s, w)
        elif img.gravity == "end":
            x = self.width - self.margin_end_px - (self.reference_width - rect.right) * s
        elif img.gravity == "center" and img.is_divider:
            # Dividers centre on the output, not on their rect
            x = self.width / 2 - w / 2
        elif img.gravity == "center":
            x = rect.center_x * s - w / 2
        else:
            x = self.margin_start_px + (rect.left + img.margin_start) * s

        y = self.bar_top + (y_base + rect.top) * s
        return ResolvedElement(
            ElementKind.IMAGE, x, y, w, h, asset=img.pic, divider_fallback=img.is_divider
        )

    def text(self, text: TextElement, y_base: float, targets) -> Optional[ResolvedElement]:
        rect = text.rect
        value = resolve_vivo_text(text.content_type, text.text, self.content)
        if rect is None or not value:
            return None

        s = self.scale
        font = vivo_font(text, s)
        if font.size <= 0:
            logger.debug(f"Skipping text '{value}' with size {text.text_size}")
            return None
        metrics = self.measurer.measure(value, font)

        if text.rely is not None:
            target = self._target(text, targets)
            if target is None:
                return None
            x = _rely_x(target, text.rely.anchor_on_target_left, text.margin_start * s, metrics.width)
        elif text.gravity == "end":
            x = self.width - self.margin_end_px - metrics.width
        elif text.gravity == "center":
            x = self.width / 2 - metrics.width / 2
        else:
            x = self.margin_start_px + (rect.left + text.margin_start) * s

        center_y = self.bar_top + (y_base + rect.center_y) * s
        y = center_y - metrics.height / 2
        return ResolvedElement(
            ElementKind.TEXT, x, y, metrics.width, metrics.height, text=value, font=font
        )


def resolve_vivo(
    template: WatermarkTemplate,
    content: RuntimeContent,
    width: int,
    height: int,
    measurer: TextMeasurer,
) -> ResolvedLayout:
    """
    Lay out a Vivo template below a ``width`` x ``height`` photo.

    Element rectangles are in a reference space ``templatewidth / 3`` units
    wide. The bar height comes from the gap between the photo area path and
    the template height.
    """
    frame = template.frame
    scale = width / frame.reference_width
    bar_ref_height = max(0.0, (frame.templateheight - content_bottom(template)) / VIVO_TEMPLATE_DPI)
    bar_height = round_half_up(bar_ref_height * scale)

    resolver = _VivoResolver(template, content, width, height, measurer, scale)
    elements = []
    for group in template.groups:
        subgroup = select_subgroup(group, content)
        if subgroup is not None:
            elements.extend(resolver.resolve_subgroup(subgroup, bar_ref_height))

    return ResolvedLayout(width, height, scale, bar_height, parse_argb_int(frame.basecolor), elements)


# Tecno


def _tecno_text(
    index: int,
    profile: TextProfile,
    x: float,
    mode: WatermarkModeConfig,
    content: RuntimeContent,
    bar_top: int,
    scale: float,
    measurer: TextMeasurer,
) -> Optional[ResolvedElement]:
    value = resolve_tecno_text(index, content, mode.brand_name or None)
    if not value or profile.font is None:
        return None

    size = profile.font.size * scale
    font = FontSpec(
        file_name=profile.font.file_name,
        size=size,
        color=rgb_triplet(profile.font.color, profile.font.intensity),
        letter_spacing=profile.character_distance_ratio * size,
    )
    metrics = measurer.measure(value, font)
    if profile.is_rtl:
        x -= metrics.width
    baseline = bar_top + profile.coordinate.y * scale
    return ResolvedElement(
        ElementKind.TEXT, x, baseline - metrics.ascent, metrics.width, metrics.height, text=value, font=font
    )


def resolve_tecno(
    mode: WatermarkModeConfig,
    content: RuntimeContent,
    width: int,
    height: int,
    measurer: TextMeasurer,
) -> ResolvedLayout:
    """
    Lay out a Tecno mode below a ``width`` x ``height`` photo.

    Text coordinates are baselines (right edges for right-to-left text), icon
    coordinates are centres and the backdrop coordinate is its top-left.
    """
    scale = width / mode.reference_width
    bar_height = round_half_up(mode.bar_size[1] * scale)
    bar_top = height
    elements: List[ResolvedElement] = []

    backdrop = mode.backdrop
    if mode.backdrop_valid and backdrop is not None and backdrop.file_name:
        elements.append(
            ResolvedElement(
                ElementKind.BACKDROP,
                backdrop.coordinate.x * scale,
                bar_top + backdrop.coordinate.y * scale,
                backdrop.size[0] * scale,
                backdrop.size[1] * scale,
                asset=backdrop.file_name,
            )
        )

    texts: Dict[int, ResolvedElement] = {}
    for i, profile in enumerate(mode.texts):
        if profile.rely is None:
            resolved = _tecno_text(i, profile, profile.coordinate.x * scale, mode, content, bar_top, scale, measurer)
            if resolved is not None:
                texts[i] = resolved
    independent = dict(texts)

    for i, profile in enumerate(mode.texts):
        if profile.rely is None:
            continue
        target = independent.get(profile.rely.target_index)
        if target is None:
            logger.debug(f"Text {i}: rely target {profile.rely.target_index} unavailable")
            continue
        anchor = target.x if profile.rely.anchor_on_target_left else target.right
        resolved = _tecno_text(
            i, profile, anchor + profile.coordinate.x * scale, mode, content, bar_top, scale, measurer
        )
        if resolved is not None:
            texts[i] = resolved

    for icon in mode.icons:
        w, h = icon.size[0] * scale, icon.size[1] * scale
        if not icon.file_name or w <= 0 or h <= 0:
            continue
        if icon.rely is not None:
            target = independent.get(icon.rely.target_index)
            if target is None:
                logger.debug(f"Icon {icon.file_name}: rely target unavailable")
                continue
            left = icon.rely.anchor_on_target_left
            gap = -TECNO_ICON_GAP if left else TECNO_ICON_GAP
            x = _rely_x(target, left, gap * scale, w)
            center_y = target.y + target.height / 2 + TECNO_ICON_VERTICAL_NUDGE * h
            y = center_y - h / 2
        else:
            x = icon.coordinate.x * scale - w / 2
            y = bar_top + icon.coordinate.y * scale - h / 2
        elements.append(ResolvedElement(ElementKind.IMAGE, x, y, w, h, asset=icon.file_name))

    elements.extend(texts[i] for i in sorted(texts))
    return ResolvedLayout(width, height, scale, bar_height, rgb_triplet(mode.bar_color), elements)


def basic_tecno_mode() -> WatermarkModeConfig:
    """Plain white bar with the device name on the left and the time on the right."""
    font = FontProfile()
    return WatermarkModeConfig(
        name="BASIC",
        brand_name=TECNO_DEFAULT_BRAND,
        texts=[
            TextProfile(font=font, coordinate=Point(39.0, 72.0)),
            TextProfile(
                font=font,
                coordinate=Point(1041.0, 72.0),
                render_direction=RenderDirection.RIGHT_TO_LEFT,
            ),
        ],
    )


def resolve(
    template: Union[WatermarkTemplate, WatermarkModeConfig],
    content: RuntimeContent,
    width: int,
    height: int,
    measurer: Optional[TextMeasurer] = None,
) -> ResolvedLayout:
    """
    Resolve a Vivo template or Tecno mode for a ``width`` x ``height`` photo.

    Args:
        template: Parsed WatermarkTemplate or WatermarkModeConfig
        content: Runtime values (device, lens, time, location)
        width: Output photo width in pixels
        height: Output photo height in pixels
        measurer: Text measurer (defaults to Pillow's default font)

    Returns:
        ResolvedLayout whose elements are in drawing order
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Output size must be positive, got {width}x{height}")
    if measurer is None:
        measurer = FontBook()

    if isinstance(template, WatermarkTemplate):
        return resolve_vivo(template, content, width, height, measurer)
    if isinstance(template, WatermarkModeConfig):
        return resolve_tecno(template, content, width, height, measurer)
    raise TypeError(f"Cannot resolve layout for {type(template).__name__}")
