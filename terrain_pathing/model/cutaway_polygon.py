"""CutawayPolygon - A solid cross-section of terrain in cutaway space.

Polygons are produced by terrain regions (one per piece of the travel segment
inside the region), by the floor-filler synthesis and by the boolean union
that merges everything together. They are immutable: every edit returns a new
polygon.

Orientation convention after `oriented()`:
- Exterior ring clockwise, interior rings counterclockwise
- Solid terrain is therefore always on the right-hand side of travel
- Walking the top surface left-to-right follows the ring order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from shapely.geometry import LinearRing, Polygon
from shapely.geometry.polygon import orient

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.model.cutaway_point import CutawayPoint


@dataclass(frozen=True)
class CutawayPolygon:
    """Closed, non-self-intersecting polygon in cutaway space.

    Attributes:
        points: Exterior ring vertices (not closed; first point is not repeated)
        interiors: Interior ring vertices, one tuple per hole in the solid
        is_hole: True if the whole polygon subtracts from the solid
    """

    points: tuple[CutawayPoint, ...]
    interiors: tuple[tuple[CutawayPoint, ...], ...] = field(default_factory=tuple)
    is_hole: bool = False

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if len(self.points) < 3:
            raise ValueError(f"CutawayPolygon needs at least 3 vertices, got {len(self.points)}")

    @classmethod
    def from_coords(cls, coords: list[tuple[float, float]], is_hole: bool = False) -> CutawayPolygon:
        """Build from a flat list of (x, y) tuples."""
        return cls(points=tuple(CutawayPoint(x=x, y=y) for x, y in coords), is_hole=is_hole)

    @classmethod
    def from_shapely(cls, polygon: Polygon) -> CutawayPolygon:
        """Build from a shapely polygon, dropping the closing vertex of each ring."""
        exterior = tuple(CutawayPoint(x=x, y=y) for x, y in polygon.exterior.coords[:-1])
        interiors = tuple(
            tuple(CutawayPoint(x=x, y=y) for x, y in ring.coords[:-1]) for ring in polygon.interiors
        )
        return cls(points=exterior, interiors=interiors)

    def to_shapely(self) -> Polygon:
        return Polygon(
            [pt.coords for pt in self.points],
            holes=[[pt.coords for pt in ring] for ring in self.interiors],
        )

    @property
    def rings(self) -> tuple[tuple[CutawayPoint, ...], ...]:
        """Exterior ring followed by interior rings."""
        return (self.points, *self.interiors)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Bounding box as (min_x, min_y, max_x, max_y)."""
        xs = [pt.x for pt in self.points]
        ys = [pt.y for pt in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    @property
    def exterior_ring(self) -> LinearRing:
        return LinearRing([pt.coords for pt in self.points])

    @property
    def signed_area(self) -> float:
        """Area of the exterior ring; negative when clockwise."""
        ring = self.exterior_ring
        area = Polygon(ring).area
        return area if ring.is_ccw else -area

    @property
    def is_clockwise(self) -> bool:
        return not self.exterior_ring.is_ccw

    def oriented(self) -> CutawayPolygon:
        """Copy with clockwise exterior and counterclockwise interiors."""
        oriented = CutawayPolygon.from_shapely(orient(self.to_shapely(), sign=-1.0))
        return CutawayPolygon(points=oriented.points, interiors=oriented.interiors, is_hole=self.is_hole)

    def without_duplicate_points(self, tol: float = CutawayConfig.EPSILON) -> CutawayPolygon:
        """Copy with consecutive (near-)duplicate vertices removed from every ring.

        Duplicate points produce zero-length edges, which break the boundary walk.
        """
        return CutawayPolygon(
            points=_dedupe_ring(self.points, tol=tol),
            interiors=tuple(_dedupe_ring(ring, tol=tol) for ring in self.interiors),
            is_hole=self.is_hole,
        )

    def edges(self) -> Iterator[tuple[CutawayPoint, CutawayPoint]]:
        """Iterate (A, B) edges of every ring, closing each ring."""
        for ring in self.rings:
            n = len(ring)
            for i in range(n):
                yield ring[i], ring[(i + 1) % n]


def _dedupe_ring(ring: tuple[CutawayPoint, ...], tol: float) -> tuple[CutawayPoint, ...]:
    deduped: list[CutawayPoint] = []
    for pt in ring:
        if deduped and pt.almost_equal(deduped[-1], tol=tol):
            continue
        deduped.append(pt)
    # Closing vertex may duplicate the first one
    while len(deduped) > 1 and deduped[-1].almost_equal(deduped[0], tol=tol):
        deduped.pop()
    return tuple(deduped)
