"""Runtime content substituted into watermark templates."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from utils.constants import TECNO_DEFAULT_BRAND


@dataclass(frozen=True)
class RuntimeContent:
    """Per-photo values. Any field may be missing."""

    device_name: Optional[str] = None
    lens_info: Optional[str] = None
    time_text: Optional[str] = None
    location_text: Optional[str] = None

    @property
    def has_lens(self) -> bool:
        return bool(self.lens_info)

    @property
    def has_time(self) -> bool:
        return bool(self.time_text)

    @property
    def has_location(self) -> bool:
        return bool(self.location_text)


class ContentType(IntEnum):
    """What a Vivo text element displays."""

    LITERAL = 0
    DEVICE = 1
    LENS_0 = 2
    LENS_1 = 3
    LENS_2 = 4
    LENS_3 = 5
    TIME = 6
    LOCATION = 7
    LENS = 10
    CUSTOM = 13
    DEVICE_ZEISS = 14

    @classmethod
    def from_code(cls, code: int) -> "ContentType":
        try:
            return cls(code)
        except ValueError:
            return cls.LITERAL


def lens_token(lens_info: Optional[str], index: int) -> Optional[str]:
    """Return the ``index``-th whitespace separated token of ``lens_info``."""
    if not lens_info:
        return None
    tokens = lens_info.split()
    return tokens[index] if index < len(tokens) else None


def resolve_vivo_text(content_type: ContentType, literal: str, content: RuntimeContent) -> str:
    """
    Pick the string a Vivo text element shows.

    Runtime values replace the template literal; a missing value falls back
    to the literal.
    """
    if content_type == ContentType.DEVICE:
        value = content.device_name
    elif ContentType.LENS_0 <= content_type <= ContentType.LENS_3:
        value = lens_token(content.lens_info, content_type - ContentType.LENS_0)
    elif content_type == ContentType.TIME:
        value = content.time_text
    elif content_type == ContentType.LOCATION:
        value = content.location_text
    elif content_type == ContentType.LENS:
        value = content.lens_info
    elif content_type == ContentType.DEVICE_ZEISS:
        return f"{content.device_name} | ZEISS" if content.device_name else "ZEISS"
    else:
        value = None
    return value if value is not None else literal


def resolve_tecno_text(index: int, content: RuntimeContent, brand_name: Optional[str]) -> str:
    """
    Pick the string for the Tecno text profile at ``index``.

    Profile 0 is the device line (brand name when no device is known),
    then time, lens and location. Later profiles repeat the device name.
    """
    if index == 1:
        return content.time_text or ""
    if index == 2:
        return content.lens_info or ""
    if index == 3:
        return content.location_text or ""
    if index == 0:
        return content.device_name or brand_name or TECNO_DEFAULT_BRAND
    return content.device_name or ""
