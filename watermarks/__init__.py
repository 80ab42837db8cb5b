"""Watermark template parsing, layout resolution and compositing."""

from .compositor import WatermarkCompositor, apply_watermark
from .content import ContentType, RuntimeContent
from .errors import EmptyTemplate, MalformedSyntax, MissingRequiredField, ParseError
from .fonts import FontBook, FontSpec, TextMeasurer, TextMetrics
from .geometry import Point, Rect, RelyRef
from .layout import (
    ElementKind,
    ResolvedElement,
    ResolvedLayout,
    basic_tecno_mode,
    resolve,
    resolve_tecno,
    resolve_vivo,
    select_subgroup,
)
from .tecno import Orientation, WatermarkModeConfig, get_mode, parse_tecno_modes
from .vivo import WatermarkTemplate, parse_vivo

__all__ = [
    # Content
    "ContentType",
    "RuntimeContent",
    # Parsing
    "WatermarkTemplate",
    "parse_vivo",
    "Orientation",
    "WatermarkModeConfig",
    "get_mode",
    "parse_tecno_modes",
    # Geometry
    "Point",
    "Rect",
    "RelyRef",
    # Layout
    "ElementKind",
    "ResolvedElement",
    "ResolvedLayout",
    "basic_tecno_mode",
    "resolve",
    "resolve_tecno",
    "resolve_vivo",
    "select_subgroup",
    # Rendering
    "FontBook",
    "FontSpec",
    "TextMeasurer",
    "TextMetrics",
    "WatermarkCompositor",
    "apply_watermark",
    # Errors
    "EmptyTemplate",
    "MalformedSyntax",
    "MissingRequiredField",
    "ParseError",
]
