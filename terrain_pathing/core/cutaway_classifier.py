"""Cutaway classification - where is a point relative to the terrain cross-section?

Provides two layers:
- CutawayHandler: classification against one merged cutaway polygon
- CutawayClassifier: classification against the whole merged polygon set

Classification works on the vertical column through the point's x. The
column is cut at every boundary crossing; each stretch between two crossings
is solid (interior or a left vertical edge) or open (exterior or a right
vertical edge). Rules, in priority order:
1. x outside the polygon's horizontal extent → OUTSIDE
2. strictly interior → BELOW
3. on a vertical edge: top endpoint → GROUND, otherwise BELOW on a left
   edge and ABOVE on a right edge
4. on a top surface (solid below, open above) → GROUND
5. otherwise → ABOVE (or OUTSIDE when lower than all solid)

Underside edges (solid above, open below) are not walking surfaces: a point
on one classifies as BELOW and rises through the solid.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shapely.geometry import Point

from terrain_pathing.core.geometry import CutawayGeometry
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevation_location import ElevationLocation, VerticalSide

logger = logging.getLogger(__name__)


class _Stretch(Enum):
    """Kind of column stretch between two boundary crossings."""

    INSIDE = "inside"
    OUTSIDE = "outside"
    LEFT = "left"  # Along a climbing vertical edge
    RIGHT = "right"  # Along a dropping vertical edge

    @property
    def is_solid(self) -> bool:
        return self in (_Stretch.INSIDE, _Stretch.LEFT)


@dataclass(frozen=True)
class ElevationReading:
    """Classification of a cutaway point against a polygon.

    Attributes:
        location: Where the point sits relative to the terrain
        floor: Elevation upon entry (support elevation); -inf if unsupported
        vertical_side: Vertical edge kind the point lies on, if any
    """

    location: ElevationLocation
    floor: float
    vertical_side: VerticalSide = VerticalSide.NONE


OUTSIDE_READING = ElevationReading(location=ElevationLocation.OUTSIDE, floor=-math.inf)


@dataclass(frozen=True)
class Support:
    """Nearest support for a point across the merged polygon set.

    Attributes:
        handler: Polygon handler providing the support (None when OUTSIDE)
        location: Location of the point relative to the terrain
        elevation: Elevation to move to (the point's own elevation on GROUND)
        vertical_side: Vertical edge kind the point lies on, if any
    """

    handler: Optional[CutawayHandler]
    location: ElevationLocation
    elevation: float
    vertical_side: VerticalSide = VerticalSide.NONE


@dataclass(frozen=True)
class SegmentPiece:
    """Stretch of a segment between two consecutive boundary intersections.

    Attributes:
        start: First point of the stretch
        end: Last point of the stretch
        inside_count: Number of polygons strictly containing the stretch midpoint
        location: Classification of the stretch midpoint
    """

    start: CutawayPoint
    end: CutawayPoint
    inside_count: int
    location: ElevationLocation


class CutawayHandler:
    """Classification and surface queries against one cutaway polygon.

    The wrapped polygon is normalized to clockwise orientation so that the
    top surface runs left-to-right in ring order.
    """

    def __init__(self, polygon: CutawayPolygon) -> None:
        self.polygon = polygon if polygon.is_clockwise else polygon.oriented()
        self.shape = self.polygon.to_shapely()
        self.min_x, self.min_y, self.max_x, self.max_y = self.polygon.bounds
        self._edges = list(self.polygon.edges())

    def __repr__(self) -> str:
        return (
            f"CutawayHandler(x=[{self.min_x:.2f}, {self.max_x:.2f}], "
            f"y=[{self.min_y:.2f}, {self.max_y:.2f}], vertices={len(self.polygon.points)})"
        )

    # ==========================================================================
    # Bounds and containment
    # ==========================================================================

    def in_x_range(self, x: float) -> bool:
        return CutawayGeometry.almost_between(x, self.min_x, self.max_x)

    def contains(self, pt: CutawayPoint) -> bool:
        """Strict containment; boundary points are not contained."""
        if not (self.min_x < pt.x < self.max_x and self.min_y < pt.y < self.max_y):
            return False
        return self.shape.contains(Point(pt.x, pt.y))

    def edges(self) -> list[tuple[CutawayPoint, CutawayPoint]]:
        return self._edges

    def rings(self) -> tuple[tuple[CutawayPoint, ...], ...]:
        return self.polygon.rings

    # ==========================================================================
    # Column analysis
    # ==========================================================================

    def _column(self, x: float) -> tuple[list[float], list[_Stretch]]:
        """Boundary crossings of the vertical line at x and the stretches between them."""
        crossings: list[float] = []
        verticals: list[tuple[float, float, _Stretch]] = []
        for a, b in self._edges:
            if CutawayGeometry.is_vertical(a, b):
                if CutawayGeometry.almost_equal(a.x, x):
                    crossings.extend((a.y, b.y))
                    side = _Stretch.LEFT if a.y < b.y else _Stretch.RIGHT
                    verticals.append((min(a.y, b.y), max(a.y, b.y), side))
                continue
            if CutawayGeometry.almost_between(x, a.x, b.x):
                t = min(1.0, max(0.0, (x - a.x) / (b.x - a.x)))
                crossings.append(a.y + (b.y - a.y) * t)

        crossings.sort()
        ys: list[float] = []
        for y in crossings:
            if ys and CutawayGeometry.almost_equal(y, ys[-1]):
                continue
            ys.append(y)

        stretches: list[_Stretch] = []
        for lo, hi in zip(ys, ys[1:]):
            kind = None
            for v_lo, v_hi, side in verticals:
                if CutawayGeometry.almost_ge(lo, v_lo) and CutawayGeometry.almost_ge(v_hi, hi):
                    kind = side
                    break
            if kind is None:
                mid = CutawayPoint(x=x, y=(lo + hi) / 2)
                kind = _Stretch.INSIDE if self.shape.contains(Point(mid.x, mid.y)) else _Stretch.OUTSIDE
            stretches.append(kind)
        return ys, stretches

    @staticmethod
    def _stretch_below(k: int, stretches: list[_Stretch]) -> _Stretch:
        return stretches[k - 1] if k > 0 else _Stretch.OUTSIDE

    @staticmethod
    def _stretch_above(k: int, stretches: list[_Stretch]) -> _Stretch:
        return stretches[k] if k < len(stretches) else _Stretch.OUTSIDE

    @classmethod
    def _is_top_surface(cls, k: int, stretches: list[_Stretch]) -> bool:
        return cls._stretch_below(k, stretches).is_solid and not cls._stretch_above(k, stretches).is_solid

    @staticmethod
    def _top_of_solid(k: int, ys: list[float], stretches: list[_Stretch]) -> float:
        """Elevation where the solid run starting at crossing k ends."""
        j = k
        while j < len(stretches) and stretches[j].is_solid:
            j += 1
        return ys[j]

    @classmethod
    def _surface_at_or_below(cls, k: int, ys: list[float], stretches: list[_Stretch]) -> float:
        """Highest top surface at crossing k or lower; -inf if none."""
        for j in range(k, -1, -1):
            if cls._is_top_surface(j, stretches):
                return ys[j]
        return -math.inf

    # ==========================================================================
    # Classification
    # ==========================================================================

    def reading(self, pt: CutawayPoint) -> ElevationReading:
        """Classify a point and compute its elevation upon entry."""
        if not self.in_x_range(pt.x):
            return OUTSIDE_READING
        ys, stretches = self._column(pt.x)
        if not ys:
            return OUTSIDE_READING

        for k, y in enumerate(ys):
            if CutawayGeometry.almost_equal(pt.y, y):
                return self._reading_at_crossing(k=k, ys=ys, stretches=stretches)

        if pt.y < ys[0]:
            return OUTSIDE_READING
        if pt.y > ys[-1]:
            return ElevationReading(
                location=ElevationLocation.ABOVE,
                floor=self._surface_at_or_below(len(ys) - 1, ys, stretches),
            )

        # Strictly inside stretch k, between crossings k and k + 1
        k = max(i for i, y in enumerate(ys) if y < pt.y)
        kind = stretches[k]
        if kind.is_solid:
            return ElevationReading(
                location=ElevationLocation.BELOW,
                floor=self._top_of_solid(k, ys, stretches),
                vertical_side=VerticalSide.LEFT if kind is _Stretch.LEFT else VerticalSide.NONE,
            )
        return ElevationReading(
            location=ElevationLocation.ABOVE,
            floor=self._surface_at_or_below(k, ys, stretches),
            vertical_side=VerticalSide.RIGHT if kind is _Stretch.RIGHT else VerticalSide.NONE,
        )

    def _reading_at_crossing(self, k: int, ys: list[float], stretches: list[_Stretch]) -> ElevationReading:
        below = self._stretch_below(k, stretches)
        above = self._stretch_above(k, stretches)
        y = ys[k]

        if below.is_solid and not above.is_solid:
            side = VerticalSide.NONE
            if below is _Stretch.LEFT:
                side = VerticalSide.LEFT
            elif above is _Stretch.RIGHT:
                side = VerticalSide.RIGHT
            return ElevationReading(location=ElevationLocation.GROUND, floor=y, vertical_side=side)

        if below is _Stretch.RIGHT and above is _Stretch.OUTSIDE:
            # Top endpoint of a dropping edge
            return ElevationReading(location=ElevationLocation.GROUND, floor=y, vertical_side=VerticalSide.RIGHT)

        if above.is_solid:
            return ElevationReading(
                location=ElevationLocation.BELOW,
                floor=self._top_of_solid(k, ys, stretches),
                vertical_side=VerticalSide.LEFT if above is _Stretch.LEFT else VerticalSide.NONE,
            )

        side = VerticalSide.RIGHT if _Stretch.RIGHT in (below, above) else VerticalSide.NONE
        return ElevationReading(
            location=ElevationLocation.ABOVE,
            floor=self._surface_at_or_below(k - 1, ys, stretches),
            vertical_side=side,
        )

    def elevation_type(self, pt: CutawayPoint) -> ElevationLocation:
        return self.reading(pt).location

    def elevation_upon_entry(self, pt: CutawayPoint) -> float:
        """Elevation of the surface a point would move to when entering this polygon.

        Rising from inside solid returns the top of the solid column, falling
        from open air returns the nearest top surface below, and a point on
        a vertical edge moves to the edge's far end. Returns -inf when
        nothing supports the point.
        """
        return self.reading(pt).floor


class CutawayClassifier:
    """Classification against the full set of merged cutaway polygons.

    Merged polygons never overlap, so a point can be BELOW in at most one of
    them. Priority when combining: BELOW, then GROUND, then the highest
    supporting floor among ABOVE readings.
    """

    def __init__(self, polygons: list[CutawayPolygon]) -> None:
        self.handlers = [CutawayHandler(polygon=polygon) for polygon in polygons]
        logger.debug(f"Classifier built over {len(self.handlers)} cutaway polygons")

    @property
    def is_empty(self) -> bool:
        return not self.handlers

    def nearest_support(self, pt: CutawayPoint, exclude: Optional[CutawayHandler] = None) -> Support:
        """Locate the point and the surface that supports it.

        Args:
            pt: Cutaway point to test
            exclude: Handler to ignore

        Returns:
            Support whose elevation is the point's own y on GROUND, the top of
            the solid when BELOW, or the highest floor underneath when ABOVE.
        """
        ground: Optional[Support] = None
        above: Optional[Support] = None
        for handler in self.handlers:
            if handler is exclude:
                continue
            reading = handler.reading(pt)
            if reading.location is ElevationLocation.BELOW:
                return Support(
                    handler=handler,
                    location=ElevationLocation.BELOW,
                    elevation=reading.floor,
                    vertical_side=reading.vertical_side,
                )
            if reading.location is ElevationLocation.GROUND and ground is None:
                ground = Support(
                    handler=handler,
                    location=ElevationLocation.GROUND,
                    elevation=pt.y,
                    vertical_side=reading.vertical_side,
                )
            elif reading.location is ElevationLocation.ABOVE and math.isfinite(reading.floor):
                if above is None or reading.floor > above.elevation:
                    above = Support(
                        handler=handler,
                        location=ElevationLocation.ABOVE,
                        elevation=reading.floor,
                        vertical_side=reading.vertical_side,
                    )
        if ground is not None:
            return ground
        if above is not None:
            return above
        return Support(handler=None, location=ElevationLocation.OUTSIDE, elevation=-math.inf)

    def classify(self, pt: CutawayPoint) -> ElevationReading:
        """Location of a point relative to the merged terrain."""
        support = self.nearest_support(pt)
        return ElevationReading(
            location=support.location,
            floor=support.elevation,
            vertical_side=support.vertical_side,
        )

    def elevation_upon_entry(self, pt: CutawayPoint) -> float:
        return self.nearest_support(pt).elevation

    def contains(self, pt: CutawayPoint) -> bool:
        """True if the point is strictly inside any polygon."""
        return any(handler.contains(pt) for handler in self.handlers)

    def segment_pieces(self, a: CutawayPoint, b: CutawayPoint) -> list[SegmentPiece]:
        """Split a→b at its ordered boundary intersections and classify each stretch."""
        params = CutawayGeometry.boundary_intersection_params(
            a=a,
            b=b,
            polygons=[handler.shape for handler in self.handlers],
        )
        pieces = []
        for t0, t1 in zip(params, params[1:]):
            start = CutawayGeometry.lerp(a, b, t0)
            end = CutawayGeometry.lerp(a, b, t1)
            mid = start.midpoint(end)
            pieces.append(
                SegmentPiece(
                    start=start,
                    end=end,
                    inside_count=sum(1 for handler in self.handlers if handler.contains(mid)),
                    location=self.nearest_support(mid).location,
                )
            )
        return pieces
