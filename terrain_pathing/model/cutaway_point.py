"""CutawayPoint - A point in cutaway space.

Cutaway space is the vertical cross-section along a travel segment:
x is the distance along the segment from its (padded) start and y is the
elevation in the same linear unit.
"""

from __future__ import annotations

from dataclasses import dataclass

from terrain_pathing.constants import CutawayConfig


@dataclass(frozen=True)
class CutawayPoint:
    """A 2D point in cutaway space.

    Attributes:
        x: Distance along the travel segment
        y: Elevation
    """

    x: float
    y: float

    def almost_equal(self, other: CutawayPoint, tol: float = CutawayConfig.EPSILON) -> bool:
        """True if both coordinates match within tolerance."""
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol

    def midpoint(self, other: CutawayPoint) -> CutawayPoint:
        """Point halfway between this point and another."""
        return CutawayPoint(x=(self.x + other.x) / 2, y=(self.y + other.y) / 2)

    @property
    def coords(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"CutawayPoint(x={self.x:.3f}, y={self.y:.3f})"
