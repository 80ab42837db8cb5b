"""
Detection and decoding of raw binary LUTs.

Vendors ship three families of binary LUT payloads:

- "LUT3" files with a 12 byte header (size, entry count) followed by RGB bytes
- ".MS-LUT " files with a 48+ byte header pointing at 3/4 channel bytes or
  float32 triples
- headerless dumps whose layout must be inferred from the file size

Channel order is not recorded anywhere, so BGR payloads are recognised by
looking at which channel ramps along the first few red-axis entries.
"""

import logging
import struct
from dataclasses import dataclass

import numpy as np

from utils.constants import MAX_LUT_SIZE, MIN_LUT_SIZE

from .cube import ColorCube
from .errors import InvalidHeader, SizeMismatch, TruncatedData

logger = logging.getLogger(__name__)

LUT3_MAGIC = b"LUT3"
MS_LUT_MAGIC = b".MS-LUT "
LUT3_HEADER_SIZE = 12
MS_LUT_MIN_HEADER = 0x30
MS_LUT_FORMAT_HINT_OFFSET = 0x10
MS_LUT_MIN_OFFSET = 48
MS_LUT_MAX_OFFSET = 4096
FLOAT_SAMPLE_BYTES = 12

# Known vendor payload sizes: byte count -> (size, channels)
KNOWN_PAYLOAD_SIZES = {
    16384: (16, 4),
    131072: (32, 4),
    98304: (32, 3),
    12288: (16, 3),
}


@dataclass(frozen=True)
class BinaryLayout:
    """Where and how the samples of a binary LUT are stored."""

    size: int
    channels: int
    offset: int
    is_float: bool

    @property
    def bytes_per_sample(self) -> int:
        return FLOAT_SAMPLE_BYTES if self.is_float else self.channels


def _u32(data: bytes, offset: int) -> int:
    return struct.unpack_from("<I", data, offset)[0]


def _cube_root(value: float) -> int:
    return int(round(value ** (1.0 / 3.0)))


def _in_size_range(size: int) -> bool:
    return MIN_LUT_SIZE <= size <= MAX_LUT_SIZE


def size_from_byte_count(byte_count: int) -> tuple[int, int]:
    """
    Infer (size, channels) for an unheadered byte payload.

    Known vendor sizes are looked up first, then the cube root is solved for
    four channels and then three channels.

    Raises:
        SizeMismatch: No layout reproduces the byte count exactly
    """
    if byte_count in KNOWN_PAYLOAD_SIZES:
        return KNOWN_PAYLOAD_SIZES[byte_count]

    for channels in (4, 3):
        size = _cube_root(byte_count // channels)
        if size > 1 and size**3 * channels == byte_count:
            return size, channels

    raise SizeMismatch(f"Cannot infer a cube layout from {byte_count} bytes")


def _lut3_layout(data: bytes) -> BinaryLayout:
    if len(data) < LUT3_HEADER_SIZE:
        raise InvalidHeader("LUT3 header is truncated")

    size = _u32(data, 4)
    entries = _u32(data, 8)
    if _in_size_range(size) and entries == size**3:
        return BinaryLayout(size, 3, LUT3_HEADER_SIZE, False)

    logger.debug(f"LUT3 header inconsistent (size={size}, entries={entries}), using payload size")
    size, _ = size_from_byte_count(len(data) - LUT3_HEADER_SIZE)
    if not _in_size_range(size):
        raise InvalidHeader(f"LUT3 size {size} outside [{MIN_LUT_SIZE}, {MAX_LUT_SIZE}]")
    return BinaryLayout(size, 3, LUT3_HEADER_SIZE, False)


def _ms_lut_layout(data: bytes) -> BinaryLayout:
    if len(data) <= MS_LUT_MIN_HEADER:
        raise InvalidHeader("MS-LUT header is truncated")

    size = _u32(data, 0x0C)
    offset = _u32(data, 0x28)
    if _in_size_range(size) and MS_LUT_MIN_OFFSET <= offset <= MS_LUT_MAX_OFFSET:
        data_size = len(data) - offset
        pixels = size**3
        if data_size == pixels * 4:
            channels, is_float = 4, False
        elif data_size >= pixels * FLOAT_SAMPLE_BYTES:
            channels, is_float = 3, True
        else:
            channels, is_float = 3, False
    else:
        logger.debug(f"MS-LUT header inconsistent (size={size}, offset={offset}), using file size")
        size, channels = size_from_byte_count(len(data))
        offset, is_float = 0, False

    # The format hint byte overrides the channel guess for float payloads
    if len(data) > 0x14:
        hint = data[MS_LUT_FORMAT_HINT_OFFSET]
        if hint == 3 or (len(data) - offset) // size**3 >= FLOAT_SAMPLE_BYTES:
            channels, is_float = 3, True

    return BinaryLayout(size, channels, offset, is_float)


def _headerless_layout(data: bytes) -> BinaryLayout:
    length = len(data)
    if length % FLOAT_SAMPLE_BYTES == 0:
        size = _cube_root(length // FLOAT_SAMPLE_BYTES)
        if _in_size_range(size) and size**3 * FLOAT_SAMPLE_BYTES == length:
            return BinaryLayout(size, 3, 0, True)

    size, channels = size_from_byte_count(length)
    return BinaryLayout(size, channels, 0, False)


def detect_layout(data: bytes) -> BinaryLayout:
    """Work out size, channel count, data offset and sample type."""
    if data.startswith(LUT3_MAGIC):
        return _lut3_layout(data)
    if data.startswith(MS_LUT_MAGIC):
        return _ms_lut_layout(data)
    return _headerless_layout(data)


def is_bgr(data: bytes, layout: BinaryLayout) -> bool:
    """
    Guess whether samples are stored blue first.

    Walks the first few entries along the red axis. In an RGB payload the
    first channel ramps there, so if the third channel ramps more the
    payload is BGR.
    """
    first, third = [], []
    for r in range(min(4, layout.size)):
        if layout.is_float:
            index = layout.offset + r * FLOAT_SAMPLE_BYTES
            if index + FLOAT_SAMPLE_BYTES > len(data):
                continue
            c0, _, c2 = struct.unpack_from("<3f", data, index)
        else:
            index = layout.offset + r * layout.channels
            if index + 3 > len(data):
                continue
            c0, c2 = data[index], data[index + 2]
        first.append(c0)
        third.append(c2)

    if len(first) < 2:
        return False
    return (third[-1] - third[0]) > (first[-1] - first[0])


def decode_binary(data: bytes) -> ColorCube:
    """
    Decode a raw binary LUT payload.

    Raises:
        TruncatedData: Payload is empty or shorter than its layout
        InvalidHeader: Header is unusable
        SizeMismatch: No layout fits the payload size
    """
    if not data:
        raise TruncatedData("Binary LUT is empty")

    layout = detect_layout(data)
    pixels = layout.size**3
    required = layout.offset + pixels * layout.bytes_per_sample
    if required > len(data):
        raise TruncatedData(f"Need {required} bytes for a {layout.size}^3 cube, got {len(data)}")

    if layout.is_float:
        samples = np.frombuffer(data, dtype="<f4", count=pixels * 3, offset=layout.offset)
        samples = samples.reshape(pixels, 3).astype(np.float32)
    else:
        raw = np.frombuffer(data, dtype=np.uint8, count=pixels * layout.channels, offset=layout.offset)
        samples = raw.reshape(pixels, layout.channels)[:, :3].astype(np.float32) / 255.0

    if is_bgr(data, layout):
        samples = samples[:, ::-1]

    logger.debug(
        f"Decoded binary LUT: size={layout.size} channels={layout.channels} "
        f"offset={layout.offset} float={layout.is_float}"
    )
    return ColorCube(layout.size, samples)
