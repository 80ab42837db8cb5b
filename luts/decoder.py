"""Extension based dispatch to the individual LUT decoders."""

import logging
from pathlib import PurePath

from utils.assets import AssetProvider, FileAssetProvider
from utils.constants import (
    BINARY_LUT_EXTENSIONS,
    CUBE_EXTENSIONS,
    ENCRYPTED_SUFFIX,
    IMAGE_LUT_EXTENSIONS,
)

from .binary import decode_binary
from .cube import ColorCube
from .errors import UnsupportedExtension
from .image import decode_image_lut
from .text import decode_cube_text

logger = logging.getLogger(__name__)


def lut_extension(asset_key: str) -> str:
    """Lower-case extension of ``asset_key``, ignoring a trailing .enc."""
    name = PurePath(asset_key).name
    if name.lower().endswith(ENCRYPTED_SUFFIX):
        name = name[: -len(ENCRYPTED_SUFFIX)]
    return PurePath(name).suffix.lower()


def is_lut_asset(asset_key: str) -> bool:
    ext = lut_extension(asset_key)
    return ext in CUBE_EXTENSIONS or ext in IMAGE_LUT_EXTENSIONS or ext in BINARY_LUT_EXTENSIONS


def decode_bytes(data: bytes, extension: str) -> ColorCube:
    """
    Decode LUT bytes given the asset extension.

    Args:
        data: Raw (already decrypted) asset bytes
        extension: Extension including the dot, or "" for extensionless assets

    Raises:
        UnsupportedExtension: No decoder handles ``extension``
        DecodeError: The selected decoder rejected the payload
    """
    ext = extension.lower()
    if ext in CUBE_EXTENSIONS:
        return decode_cube_text(data)
    if ext in IMAGE_LUT_EXTENSIONS:
        return decode_image_lut(data)
    if ext in BINARY_LUT_EXTENSIONS:
        return decode_binary(data)
    raise UnsupportedExtension(f"Unsupported LUT extension: '{extension}'")


def decode(asset_key: str, provider: AssetProvider | None = None) -> ColorCube:
    """
    Load and decode the LUT stored under ``asset_key``.

    Args:
        asset_key: Asset path, resolved by ``provider``
        provider: Byte source (defaults to reading ``asset_key`` from disk)

    Returns:
        The decoded ColorCube

    Raises:
        DecodeError: The asset is not a usable LUT
        FileNotFoundError: The provider has no such asset
    """
    ext = lut_extension(asset_key)
    # Reject before touching the provider
    if not is_lut_asset(asset_key):
        raise UnsupportedExtension(f"Unsupported LUT extension: '{ext}' ({asset_key})")

    if provider is None:
        provider = FileAssetProvider()

    data = provider.read_bytes(asset_key)
    cube = decode_bytes(data, ext)
    logger.debug(f"Decoded {asset_key}: size {cube.size}")
    return cube
