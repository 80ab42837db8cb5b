"""Canonical in-memory 3D LUT."""

from dataclasses import dataclass

import numpy as np
import torch

from .errors import SizeMismatch


@dataclass(frozen=True)
class ColorCube:
    """
    A normalized N x N x N color lookup table.

    Samples are stored as an (N^3, 3) float32 array ordered red fastest, then
    green, then blue, so the entry for lattice point (r, g, b) lives at
    index r + g*N + b*N*N. Values are clamped to [0, 1] and the array is
    read-only.
    """

    size: int
    samples: np.ndarray

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float32).reshape(-1, 3)
        if self.size < 2:
            raise SizeMismatch(f"Cube size must be at least 2, got {self.size}")
        expected = self.size**3
        if samples.shape[0] != expected:
            raise SizeMismatch(f"Expected {expected} samples, got {samples.shape[0]}")

        samples = np.clip(np.nan_to_num(samples, nan=0.0), 0.0, 1.0)
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    @classmethod
    def identity(cls, size: int) -> "ColorCube":
        coords = np.linspace(0.0, 1.0, size, dtype=np.float32)
        b, g, r = np.meshgrid(coords, coords, coords, indexing="ij")
        return cls(size, np.stack([r, g, b], axis=-1).reshape(-1, 3))

    def sample(self, r: int, g: int, b: int) -> tuple[float, float, float]:
        """Return the RGB output stored at lattice point (r, g, b)."""
        n = self.size
        value = self.samples[r + g * n + b * n * n]
        return float(value[0]), float(value[1]), float(value[2])

    def to_tensor(self) -> torch.Tensor:
        """
        Convert to the (N, N, N, 3) tensor layout used by apply_lut.

        Because red varies fastest in the flat array, a C-order reshape
        yields [B][G][R] spatial indexing with RGB values.
        """
        n = self.size
        return torch.from_numpy(self.samples.reshape(n, n, n, 3).copy())

    def to_rgba(self) -> np.ndarray:
        """Return (N^3, 4) float32 samples with an opaque alpha channel."""
        alpha = np.ones((self.samples.shape[0], 1), dtype=np.float32)
        return np.concatenate([self.samples, alpha], axis=1)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColorCube):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.samples, other.samples)

    __hash__ = None
