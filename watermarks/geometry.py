"""Small geometry types shared by the template models and the layout."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2

    @classmethod
    def from_points(cls, points: list[Point]) -> Optional["Rect"]:
        """Rectangle spanned by the first and last point, or None for fewer than two."""
        if len(points) < 2:
            return None
        first, last = points[0], points[-1]
        return cls(first.x, first.y, last.x, last.y)


@dataclass(frozen=True)
class RelyRef:
    """
    Positions an element relative to a sibling text element.

    Attributes:
        target_index: Index of the target among the sibling texts
        anchor_on_target_left: Anchor on the target's left edge instead of its right
    """

    target_index: int
    anchor_on_target_left: bool = False
