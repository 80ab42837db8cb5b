"""
Tecno watermark modes.

Tecno describes its watermarks in a single JSON document. ``WATERMARK.WM_LAYOUTS``
lists the mode names available in portrait (index 0) and landscape (index 1);
each mode is an object under ``WATERMARK`` with the bar, backdrop, icon and text
profiles. Coordinates are in a 1080 px wide reference space.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from utils.constants import TECNO_DEFAULT_BAR_SIZE, TECNO_DEFAULT_BRAND, TECNO_REFERENCE_WIDTH

from .errors import EmptyTemplate, MalformedSyntax, MissingRequiredField
from .geometry import Point, RelyRef

logger = logging.getLogger(__name__)


class Orientation(IntEnum):
    PORTRAIT = 0
    LANDSCAPE = 1


class RenderDirection(IntEnum):
    LEFT_TO_RIGHT = 0
    RIGHT_TO_LEFT = 1


@dataclass(frozen=True)
class FontProfile:
    file_name: str = ""
    size: float = 29.0
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    intensity: float = 1.0


@dataclass(frozen=True)
class IconProfile:
    file_name: str = ""
    coordinate: Point = Point(0.0, 0.0)
    size: Tuple[float, float] = (0.0, 0.0)
    tuning: Point = Point(0.0, 0.0)
    rely: Optional[RelyRef] = None


@dataclass(frozen=True)
class TextProfile:
    font: Optional[FontProfile] = None
    space_ratio: float = 0.42
    character_distance_ratio: float = 0.0
    coordinate: Point = Point(0.0, 0.0)
    tuning: Point = Point(0.0, 0.0)
    render_direction: RenderDirection = RenderDirection.LEFT_TO_RIGHT
    rely: Optional[RelyRef] = None

    @property
    def is_rtl(self) -> bool:
        return self.render_direction == RenderDirection.RIGHT_TO_LEFT


@dataclass(frozen=True)
class WatermarkModeConfig:
    name: str
    bar_color: Tuple[float, float, float] = (255.0, 255.0, 255.0)
    bar_size: Tuple[float, float] = TECNO_DEFAULT_BAR_SIZE
    backdrop_valid: bool = True
    backdrop: Optional[IconProfile] = None
    brand_is_text: bool = True
    brand_name: str = ""
    icons: List[IconProfile] = field(default_factory=list)
    texts: List[TextProfile] = field(default_factory=list)

    @property
    def reference_width(self) -> float:
        return TECNO_REFERENCE_WIDTH


ModeKey = Tuple[str, Orientation]


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _triple(value: Any, default: Tuple[float, float, float]) -> Tuple[float, float, float]:
    if not isinstance(value, list):
        return default
    return tuple(_number(value[i], default[i]) if i < len(value) else default[i] for i in range(3))


def _pair(value: Any, default: Tuple[float, float] = (0.0, 0.0)) -> Tuple[float, float]:
    if not isinstance(value, list) or len(value) < 2:
        return default
    return (_number(value[0], default[0]), _number(value[1], default[1]))


def _point(value: Any) -> Point:
    return Point(*_pair(value))


def _object(value: Any) -> Optional[Dict[str, Any]]:
    return value if isinstance(value, dict) else None


def _rely(obj: Dict[str, Any]) -> Optional[RelyRef]:
    profile = _object(obj.get("RELY_PROFILE"))
    if not _flag(obj.get("RELY_ON_ELEM"), False) or profile is None:
        return None
    index = profile.get("RELY_INDEX", 0)
    if not isinstance(index, int) or isinstance(index, bool):
        index = 0
    return RelyRef(index, _flag(profile.get("RELT_ON_LEFT_X"), False))


def _icon(obj: Dict[str, Any]) -> IconProfile:
    name = obj.get("ICON_FILE_NAME")
    return IconProfile(
        file_name=name if isinstance(name, str) else "",
        coordinate=_point(obj.get("ICON_COORDINATE")),
        size=_pair(obj.get("ICON_SIZE")),
        tuning=_point(obj.get("TUNING_COORDINATE")),
        rely=_rely(obj),
    )


def _font(obj: Dict[str, Any]) -> FontProfile:
    name = obj.get("FONT_FILE_NAME")
    return FontProfile(
        file_name=name if isinstance(name, str) else "",
        size=_number(obj.get("FONT_SIZE"), 29.0),
        color=_triple(obj.get("FONT_COLOR"), (0.0, 0.0, 0.0)),
        intensity=_number(obj.get("FONT_INTENSITY"), 1.0),
    )


def _text(obj: Dict[str, Any]) -> TextProfile:
    font = _object(obj.get("FONT_PROFILE"))
    direction = obj.get("RENDER_DIRECTION")
    return TextProfile(
        font=_font(font) if font is not None else None,
        space_ratio=_number(obj.get("SPACE_RATIO"), 0.42),
        character_distance_ratio=_number(obj.get("CHARACTER_DISTANCE_RATIO"), 0.0),
        coordinate=_point(obj.get("TEXT_COORDINATE")),
        tuning=_point(obj.get("TUNING_COORDINATE")),
        render_direction=RenderDirection.RIGHT_TO_LEFT if direction == 1 else RenderDirection.LEFT_TO_RIGHT,
        rely=_rely(obj),
    )


def parse_mode(name: str, mode: Dict[str, Any]) -> WatermarkModeConfig:
    """Build a WatermarkModeConfig from one mode object, defaulting bad fields."""
    brand = _object(mode.get("BRAND_PROFILE"))
    brand_is_text = _flag(brand.get("TYPE_TEXT"), True) if brand else True
    brand_name = ""
    if brand is not None and brand_is_text:
        value = brand.get("TEXT_BRAND_NAME")
        brand_name = value if isinstance(value, str) else TECNO_DEFAULT_BRAND

    backdrop = _object(mode.get("BACKDROP_PROFILE"))
    icons = mode.get("ICON_PROFILES")
    texts = mode.get("TEXT_PROFILES")

    return WatermarkModeConfig(
        name=name,
        bar_color=_triple(mode.get("BAR_COLOR"), (255.0, 255.0, 255.0)),
        bar_size=_pair(mode.get("BAR_SIZE"), TECNO_DEFAULT_BAR_SIZE),
        backdrop_valid=_flag(mode.get("BACKDROP_IS_VALID"), True),
        backdrop=_icon(backdrop) if backdrop is not None else None,
        brand_is_text=brand_is_text,
        brand_name=brand_name,
        icons=[_icon(o) for o in icons if isinstance(o, dict)] if isinstance(icons, list) else [],
        texts=[_text(o) for o in texts if isinstance(o, dict)] if isinstance(texts, list) else [],
    )


def parse_tecno_modes(data: bytes | str) -> Dict[ModeKey, WatermarkModeConfig]:
    """
    Parse the Tecno watermark JSON into mode configs keyed by (name, orientation).

    Raises:
        MalformedSyntax: Not JSON, or the root is not an object
        MissingRequiredField: WATERMARK or WM_LAYOUTS is absent
        EmptyTemplate: No listed mode has a usable definition
    """
    try:
        root = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedSyntax(f"Invalid watermark JSON: {e}") from e

    if not isinstance(root, dict):
        raise MalformedSyntax("Watermark JSON root must be an object")
    watermark = _object(root.get("WATERMARK"))
    if watermark is None:
        raise MissingRequiredField("WATERMARK object is missing")
    layouts = watermark.get("WM_LAYOUTS")
    if not isinstance(layouts, list):
        raise MissingRequiredField("WATERMARK.WM_LAYOUTS list is missing")

    modes: Dict[ModeKey, WatermarkModeConfig] = {}
    parsed: Dict[str, WatermarkModeConfig] = {}
    for orientation in Orientation:
        if orientation >= len(layouts) or not isinstance(layouts[orientation], list):
            continue
        for name in layouts[orientation]:
            if not isinstance(name, str):
                continue
            mode = _object(watermark.get(name))
            if mode is None:
                logger.warning(f"Mode '{name}' is listed but has no definition")
                continue
            if name not in parsed:
                parsed[name] = parse_mode(name, mode)
            modes[(name, orientation)] = parsed[name]

    if not modes:
        raise EmptyTemplate("No watermark modes could be parsed")

    logger.debug(f"Parsed {len(parsed)} Tecno mode(s)")
    return modes


def get_mode(
    modes: Dict[ModeKey, WatermarkModeConfig], name: str, orientation: Orientation
) -> Optional[WatermarkModeConfig]:
    """Return mode ``name`` if it is offered for ``orientation``."""
    return modes.get((name, orientation))
