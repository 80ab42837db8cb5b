"""Byte access to bundled assets, with optional pass-through for .enc files."""

import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from .constants import ENCRYPTED_SUFFIX

logger = logging.getLogger(__name__)


class AssetProvider(Protocol):
    """Anything that can hand back the bytes stored under an asset key."""

    def read_bytes(self, key: str) -> bytes: ...


class FileAssetProvider:
    """
    Read assets from the filesystem.

    Keys are resolved against ``root``. When ``key`` is missing, ``key + ".enc"``
    is tried next. Payloads read from ``.enc`` files are passed through
    ``decryptor`` (identity by default).

    Args:
        root: Directory keys are relative to (None means keys are paths)
        decryptor: Callable applied to the bytes of ``.enc`` assets
    """

    def __init__(
        self,
        root: str | Path | None = None,
        decryptor: Optional[Callable[[bytes], bytes]] = None,
    ):
        self.root = Path(root) if root is not None else None
        self.decryptor = decryptor

    def resolve(self, key: str) -> Path | None:
        """Return the path that holds ``key`` or None if nothing does."""
        path = self.root / key if self.root is not None else Path(key)
        if path.is_file():
            return path
        encrypted = path.with_name(path.name + ENCRYPTED_SUFFIX)
        if not path.name.endswith(ENCRYPTED_SUFFIX) and encrypted.is_file():
            return encrypted
        return None

    def exists(self, key: str) -> bool:
        return self.resolve(key) is not None

    def read_bytes(self, key: str) -> bytes:
        path = self.resolve(key)
        if path is None:
            raise FileNotFoundError(f"Asset not found: {key}")

        data = path.read_bytes()
        if path.name.endswith(ENCRYPTED_SUFFIX) and self.decryptor is not None:
            logger.debug(f"Decrypting {path}")
            data = self.decryptor(data)
        return data
