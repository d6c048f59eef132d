"""ElevatedPoint - The world-space geometry atom of the path planner.

An ElevatedPoint is a location on the scene's ground plane plus an elevation.
Path endpoints come in as ElevatedPoints and constructed paths go out as lists
of them.

Used by:
- CutawayTransform (projection to and from cutaway space)
- TerrainRegion (ground-plane containment, surface elevation)
- TerrainPathBuilder (inputs and outputs)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from terrain_pathing.constants import CutawayConfig


@dataclass(frozen=True)
class ElevatedPoint:
    """A point on the ground plane with an elevation.

    Attributes:
        x: Horizontal scene coordinate
        y: Vertical scene coordinate (ground plane, not height)
        elevation: Height above the scene datum, same linear unit as x/y

    Example:
        point = ElevatedPoint(x=100.0, y=250.0, elevation=20.0)
    """

    x: float
    y: float
    elevation: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if not np.all(np.isfinite([self.x, self.y, self.elevation])):
            raise ValueError(
                f"ElevatedPoint requires finite coordinates, got ({self.x}, {self.y}, {self.elevation})"
            )

    @property
    def xy(self) -> tuple[float, float]:
        """Return (x, y) ground-plane tuple."""
        return (self.x, self.y)

    def with_elevation(self, elevation: float) -> ElevatedPoint:
        """Copy of this point at a different elevation."""
        return ElevatedPoint(x=self.x, y=self.y, elevation=elevation)

    def xy_equal(self, other: ElevatedPoint, tol: float = CutawayConfig.EPSILON) -> bool:
        """True if both points share the same ground-plane location."""
        return abs(self.x - other.x) <= tol and abs(self.y - other.y) <= tol

    def almost_equal(self, other: ElevatedPoint, tol: float = CutawayConfig.EPSILON) -> bool:
        """True if both points coincide in all three coordinates."""
        return self.xy_equal(other, tol=tol) and abs(self.elevation - other.elevation) <= tol

    def __repr__(self) -> str:
        return f"ElevatedPoint(x={self.x:.2f}, y={self.y:.2f}, elev={self.elevation:.2f})"
