"""
Vivo watermark templates.

Vivo ships its watermark layouts in a line oriented tag markup::

    <templatewidth>1080</templatewidth>
    <point>(0,0)(1080,0)(1080,1395)(0,1395)</point>
    <group>
    <subgroup>
    <line>
    <textparam>
    <texttype>1</texttype>
    <textpoint>(24,20)(120,36)</textpoint>
    </textparam>
    </line>
    </subgroup>
    </group>

Every field sits on its own line as ``<name>value</name>``. Blocks nest as
group > subgroup > line > picparam | textparam, and the bare markers SETIN,
PATHSETIN, PARAMSETIN, CLOSE, PATHCLOSE and PARAMCLOSE commit whatever is
open.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from utils.constants import VIVO_DEFAULT_BAR_COLOR, VIVO_TEMPLATE_DPI

from .content import ContentType
from .errors import EmptyTemplate, MalformedSyntax, MissingRequiredField
from .geometry import Point, Rect, RelyRef

logger = logging.getLogger(__name__)

POINT_PATTERN = re.compile(r"\((-?\d+\.?\d*),(-?\d+\.?\d*)\)")

SECTION_MARKERS = {"SETIN", "PATHSETIN", "PARAMSETIN", "CLOSE", "PATHCLOSE", "PARAMCLOSE"}


@dataclass
class FrameConfig:
    frametype: str = ""
    subtype: int = 0
    isneedvivologo: bool = False
    iscameraborder: bool = False
    isadaptive: bool = False
    isfixed: bool = False
    isallwrap: bool = False
    isneeddefaultparam: bool = False
    basecolor: int = VIVO_DEFAULT_BAR_COLOR
    baseboard: str = ""
    templatewidth: float = 1080.0
    templateheight: float = 1719.0
    marginstart: float = 0.0
    marginend: float = 0.0

    @property
    def reference_width(self) -> float:
        """Width of the density independent space element rects live in."""
        return self.templatewidth / VIVO_TEMPLATE_DPI


@dataclass
class ImageElement:
    line_num: int = 0
    gravity: str = "start"
    rect: Optional[Rect] = None
    planb_rect: Optional[Rect] = None
    margin_start: float = 0.0
    margin_end: float = 0.0
    pic: str = ""
    is_svg: bool = False
    is_camera_pic: bool = False
    side_type: int = 0
    pic_id: str = ""
    antialias: bool = True
    force_divider: bool = False
    rely_index: Optional[int] = None
    rely_on_left: bool = False

    @property
    def rely(self) -> Optional[RelyRef]:
        if self.rely_index is None:
            return None
        return RelyRef(self.rely_index, self.rely_on_left)

    @property
    def is_divider(self) -> bool:
        return self.force_divider or "divider" in self.pic.lower()


@dataclass
class TextElement:
    line_num: int = 0
    gravity: str = "start"
    rect: Optional[Rect] = None
    planb_rect: Optional[Rect] = None
    text: str = ""
    text_size: float = 0.0
    font_weight: int = 400
    color: str = "#FF000000"
    letter_spacing: float = 0.0
    typeface: int = 0
    content_type: ContentType = ContentType.LITERAL
    is_custom_text: bool = False
    time_type: int = -2
    margin_start: float = 0.0
    margin_end: float = 0.0
    rely_index: Optional[int] = None
    rely_on_left: bool = False

    @property
    def rely(self) -> Optional[RelyRef]:
        if self.rely_index is None:
            return None
        return RelyRef(self.rely_index, self.rely_on_left)


@dataclass
class Line:
    margin_bottom: float = 0.0
    images: List[ImageElement] = field(default_factory=list)
    texts: List[TextElement] = field(default_factory=list)

    @property
    def line_num(self) -> int:
        """Line number used for vertical packing: first text, else first image, else 0."""
        if self.texts:
            return self.texts[0].line_num
        if self.images:
            return self.images[0].line_num
        return 0


@dataclass
class Subgroup:
    number: int = 0
    visible: bool = True
    debug_info: str = ""
    lines: List[Line] = field(default_factory=list)


@dataclass
class Group:
    gravity: str = "center_vertical"
    margin_end: float = 0.0
    subgroups: List[Subgroup] = field(default_factory=list)


@dataclass
class WatermarkTemplate:
    frame: FrameConfig = field(default_factory=FrameConfig)
    paths: List[List[Point]] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)


class Block(Enum):
    """Blocks the parser can have open."""

    GROUP = "group"
    SUBGROUP = "subgroup"
    LINE = "line"
    PICPARAM = "picparam"
    TEXTPARAM = "textparam"


# Nesting depth of each block; both parameter blocks live inside a line
BLOCK_DEPTH = {
    Block.GROUP: 1,
    Block.SUBGROUP: 2,
    Block.LINE: 3,
    Block.PICPARAM: 4,
    Block.TEXTPARAM: 4,
}

BLOCK_TAGS = {block.value: block for block in Block}


def extract_value(line: str) -> str:
    """Text between the first '>' and the last '<' of a single line tag."""
    start = line.find(">")
    end = line.rfind("<")
    if start == -1 or end <= start:
        return ""
    return line[start + 1 : end]


def parse_points(value: str) -> List[Point]:
    return [Point(float(x), float(y)) for x, y in POINT_PATTERN.findall(value)]


def parse_rect(value: str) -> Optional[Rect]:
    return Rect.from_points(parse_points(value))


def _as_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _number(kind: Callable) -> Callable[[str, object], object]:
    def convert(value: str, default):
        try:
            return kind(value.strip())
        except ValueError:
            logger.debug(f"Unparseable number '{value}', keeping {default}")
            return default

    return convert


_int = _number(int)
_float = _number(float)


def _text(value: str, default) -> str:
    return value


def _flag(value: str, default) -> bool:
    return _as_bool(value)


def _rect(value: str, default) -> Optional[Rect]:
    return parse_rect(value)


def _content_type(value: str, default) -> ContentType:
    code = _int(value, None)
    return ContentType.from_code(code) if code is not None else default


# tag -> (owning block or None for the frame, attribute, converter)
FieldSpec = Tuple[Optional[Block], str, Callable]

FIELD_TAGS: Dict[str, FieldSpec] = {
    # Frame
    "frametype": (None, "frametype", _text),
    "subtype": (None, "subtype", _int),
    "isneedvivologo": (None, "isneedvivologo", _flag),
    "iscameraborder": (None, "iscameraborder", _flag),
    "isadaptive": (None, "isadaptive", _flag),
    "isfixed": (None, "isfixed", _flag),
    "isallwrap": (None, "isallwrap", _flag),
    "isneeddefaultparam": (None, "isneeddefaultparam", _flag),
    "basecolor": (None, "basecolor", _int),
    "baseboard": (None, "baseboard", _text),
    "templatewidth": (None, "templatewidth", _float),
    "templateheight": (None, "templateheight", _float),
    "marginstart": (None, "marginstart", _float),
    "marginend": (None, "marginend", _float),
    # Group / subgroup / line
    "groupgravity": (Block.GROUP, "gravity", _text),
    "groupmarginend": (Block.GROUP, "margin_end", _float),
    "subgroupnum": (Block.SUBGROUP, "number", _int),
    "subgroupvisible": (Block.SUBGROUP, "visible", _flag),
    "debuginfo": (Block.SUBGROUP, "debug_info", _text),
    "linemarginbottom": (Block.LINE, "margin_bottom", _float),
    # Image parameters
    "piclinenum": (Block.PICPARAM, "line_num", _int),
    "picgravity": (Block.PICPARAM, "gravity", _text),
    "picpoint": (Block.PICPARAM, "rect", _rect),
    "picmarginstart": (Block.PICPARAM, "margin_start", _float),
    "picmarginend": (Block.PICPARAM, "margin_end", _float),
    "pic": (Block.PICPARAM, "pic", _text),
    "issvg": (Block.PICPARAM, "is_svg", _flag),
    "iscamerapic": (Block.PICPARAM, "is_camera_pic", _flag),
    "picparamsidetype": (Block.PICPARAM, "side_type", _int),
    "picid": (Block.PICPARAM, "pic_id", _text),
    "isneedantialias": (Block.PICPARAM, "antialias", _flag),
    "isforcedrawdivider": (Block.PICPARAM, "force_divider", _flag),
    # Text parameters
    "linenum": (Block.TEXTPARAM, "line_num", _int),
    "textgravity": (Block.TEXTPARAM, "gravity", _text),
    "textpoint": (Block.TEXTPARAM, "rect", _rect),
    "textplanbpoint": (Block.TEXTPARAM, "planb_rect", _rect),
    "text": (Block.TEXTPARAM, "text", _text),
    "textsize": (Block.TEXTPARAM, "text_size", _float),
    "textfontweight": (Block.TEXTPARAM, "font_weight", _int),
    "textcolor": (Block.TEXTPARAM, "color", _text),
    "letterspacing": (Block.TEXTPARAM, "letter_spacing", _float),
    "typeface": (Block.TEXTPARAM, "typeface", _int),
    "texttype": (Block.TEXTPARAM, "content_type", _content_type),
    "iscustomtext": (Block.TEXTPARAM, "is_custom_text", _flag),
    "timetype": (Block.TEXTPARAM, "time_type", _int),
    "textmarginstart": (Block.TEXTPARAM, "margin_start", _float),
    "textmarginend": (Block.TEXTPARAM, "margin_end", _float),
}

# Tags valid in both parameter blocks
SHARED_PARAM_TAGS: Dict[str, Tuple[str, Callable]] = {
    "relyindex": ("rely_index", _int),
    "relyonleft": ("rely_on_left", _flag),
}

BLOCK_FACTORIES = {
    Block.GROUP: Group,
    Block.SUBGROUP: Subgroup,
    Block.LINE: Line,
    Block.PICPARAM: ImageElement,
    Block.TEXTPARAM: TextElement,
}


class _VivoParser:
    """State machine over the stack of open blocks."""

    def __init__(self):
        self.template = WatermarkTemplate()
        self.stack: List[Tuple[Block, object]] = []

    @property
    def depth(self) -> int:
        return BLOCK_DEPTH[self.stack[-1][0]] if self.stack else 0

    def open_object(self, block: Block) -> Optional[object]:
        for open_block, obj in reversed(self.stack):
            if open_block is block:
                return obj
        return None

    def commit_top(self) -> None:
        block, obj = self.stack.pop()
        parent = self.stack[-1][1] if self.stack else None
        if block is Block.GROUP:
            self.template.groups.append(obj)
        elif block is Block.SUBGROUP:
            parent.subgroups.append(obj)
        elif block is Block.LINE:
            parent.lines.append(obj)
        elif block is Block.PICPARAM:
            parent.images.append(obj)
        else:
            parent.texts.append(obj)

    def commit_to_depth(self, depth: int) -> None:
        while self.stack and self.depth > depth:
            self.commit_top()

    def open_block(self, block: Block, line_no: int) -> None:
        # A sibling that was never closed is committed first
        self.commit_to_depth(BLOCK_DEPTH[block] - 1)
        if self.depth != BLOCK_DEPTH[block] - 1:
            raise MalformedSyntax(
                f"line {line_no}: <{block.value}> is not inside its parent block"
            )
        self.stack.append((block, BLOCK_FACTORIES[block]()))

    def close_block(self, block: Block, line_no: int) -> None:
        if self.open_object(block) is None:
            raise MalformedSyntax(f"line {line_no}: </{block.value}> without matching open tag")
        while self.stack:
            top, _ = self.stack[-1]
            self.commit_top()
            if top is block:
                break

    def set_field(self, tag: str, value: str) -> None:
        if tag == "point":
            self.template.paths.append(parse_points(value))
            return

        if tag in SHARED_PARAM_TAGS:
            attr, convert = SHARED_PARAM_TAGS[tag]
            target = self.stack[-1][1] if self.stack and self.depth == BLOCK_DEPTH[Block.PICPARAM] else None
        elif tag in FIELD_TAGS:
            block, attr, convert = FIELD_TAGS[tag]
            target = self.template.frame if block is None else self.open_object(block)
        elif tag == "picplanbpoint":
            element = self.open_object(Block.PICPARAM)
            if element is not None:
                element.planb_rect = element.rect = parse_rect(value)
            return
        else:
            logger.debug(f"Ignoring unknown tag <{tag}>")
            return

        if target is None:
            logger.debug(f"Ignoring <{tag}> outside its block")
            return
        setattr(target, attr, convert(value, getattr(target, attr)))

    def feed(self, text: str) -> WatermarkTemplate:
        for line_no, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue

            if line in SECTION_MARKERS:
                self.commit_to_depth(0)
                continue

            if line.startswith("</") and line.endswith(">") and line[2:-1] in BLOCK_TAGS:
                self.close_block(BLOCK_TAGS[line[2:-1]], line_no)
                continue

            if line.startswith("<") and line.endswith(">") and line[1:-1] in BLOCK_TAGS:
                self.open_block(BLOCK_TAGS[line[1:-1]], line_no)
                continue

            if line.startswith("<"):
                tag = line[1 : line.find(">")] if ">" in line else line[1:]
                self.set_field(tag, extract_value(line))

        self.commit_to_depth(0)
        return self.template


def parse_vivo(data: bytes | str) -> WatermarkTemplate:
    """
    Parse a Vivo watermark template.

    Args:
        data: Template bytes (UTF-8) or text

    Returns:
        The parsed WatermarkTemplate

    Raises:
        MalformedSyntax: Input is not UTF-8 or blocks are nested illegally
        MissingRequiredField: templatewidth is not positive
        EmptyTemplate: Neither paths nor groups were found
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedSyntax(f"Template is not valid UTF-8: {e}") from e

    template = _VivoParser().feed(data)

    if template.frame.templatewidth <= 0:
        raise MissingRequiredField(
            f"templatewidth must be positive, got {template.frame.templatewidth}"
        )
    if not template.paths and not template.groups:
        raise EmptyTemplate("Template has no paths and no groups")

    logger.debug(f"Parsed Vivo template with {len(template.groups)} group(s)")
    return template
