from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class Box:
    """Axis-aligned bounding box in playfield units (y grows downward)."""

    left: float
    top: float
    right: float
    bottom: float

    @staticmethod
    def at(x: float, y: float, w: float, h: float) -> "Box":
        return Box(left=x, top=y, right=x + w, bottom=y + h)

    def inset(self, dx: float, dy: float | None = None) -> "Box":
        dy = dx if dy is None else dy
        return Box(left=self.left + dx, top=self.top + dy, right=self.right - dx, bottom=self.bottom - dy)

    @property
    def center(self) -> tuple[float, float]:
        return ((self.left + self.right) / 2, (self.top + self.bottom) / 2)


def overlaps(a: Box, b: Box) -> bool:
    """Strict intersection: boxes that only share an edge do not overlap."""

    return a.right > b.left and a.left < b.right and a.bottom > b.top and a.top < b.bottom


def touches(a: Box, b: Box) -> bool:
    """Inclusive intersection: shared edges count."""

    return not (a.right < b.left or a.left > b.right or a.bottom < b.top or a.top > b.bottom)


def bounce_axis(mover: Box, obstacle: Box) -> Literal["x", "y"]:
    """Pick the velocity component to invert after `mover` hit `obstacle`.

    The smallest of the four penetration depths wins. When a horizontal depth
    equals the minimum the horizontal axis is chosen, so ties always invert x.
    """

    overlap_left = mover.right - obstacle.left
    overlap_right = obstacle.right - mover.left
    overlap_top = mover.bottom - obstacle.top
    overlap_bottom = obstacle.bottom - mover.top

    smallest = min(overlap_left, overlap_right, overlap_top, overlap_bottom)
    if smallest == overlap_left or smallest == overlap_right:
        return "x"
    return "y"


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return ((ax - bx) ** 2 + (ay - by) ** 2) ** 0.5


def wrap_column(x: int, width: int) -> int:
    """Single-step tunnel teleport for a grid column that just left the board."""

    if x < 0:
        return width - 1
    if x >= width:
        return 0
    return x
