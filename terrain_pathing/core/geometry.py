"""Geometry primitives for cutaway space.

Thin helpers over numpy and shapely used by the classifier, the boundary
walker and the shortcut optimizer:
- Tolerant comparisons (almost equal, almost greater-or-equal)
- Segment helpers (closest point, interpolation at x, line intersection)
- Ordered boundary intersections of a segment against polygons
- Collinear waypoint removal
"""

from typing import Iterable, Optional

import numpy as np
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.model.cutaway_point import CutawayPoint

EPSILON = CutawayConfig.EPSILON


class CutawayGeometry:
    """Static geometry helpers operating on CutawayPoints."""

    @staticmethod
    def almost_equal(a: float, b: float, tol: float = EPSILON) -> bool:
        return abs(a - b) <= tol

    @staticmethod
    def almost_ge(a: float, b: float, tol: float = EPSILON) -> bool:
        """a >= b within tolerance."""
        return a > b or abs(a - b) <= tol

    @staticmethod
    def almost_between(value: float, a: float, b: float, tol: float = EPSILON) -> bool:
        """value within [min(a, b), max(a, b)], tolerance inclusive."""
        return min(a, b) - tol <= value <= max(a, b) + tol

    @staticmethod
    def is_vertical(a: CutawayPoint, b: CutawayPoint, tol: float = EPSILON) -> bool:
        return abs(a.x - b.x) <= tol

    @staticmethod
    def y_at_x(a: CutawayPoint, b: CutawayPoint, x: float) -> float:
        """Elevation of the non-vertical edge a→b at distance x."""
        t = (x - a.x) / (b.x - a.x)
        return a.y + (b.y - a.y) * t

    @staticmethod
    def point_on_segment(p: CutawayPoint, a: CutawayPoint, b: CutawayPoint, tol: float = EPSILON) -> bool:
        """True if p lies on segment a→b within tolerance."""
        closest = CutawayGeometry.closest_point_on_segment(p=p, a=a, b=b)
        return closest.almost_equal(p, tol=tol)

    @staticmethod
    def closest_point_on_segment(p: CutawayPoint, a: CutawayPoint, b: CutawayPoint) -> CutawayPoint:
        """Point on segment a→b closest to p."""
        ab = np.array([b.x - a.x, b.y - a.y])
        denom = float(ab @ ab)
        if denom == 0:
            return a
        t = float(np.array([p.x - a.x, p.y - a.y]) @ ab) / denom
        t = min(1.0, max(0.0, t))
        return CutawayPoint(x=a.x + ab[0] * t, y=a.y + ab[1] * t)

    @staticmethod
    def segment_intersection(
        a: CutawayPoint,
        b: CutawayPoint,
        c: CutawayPoint,
        d: CutawayPoint,
    ) -> Optional[CutawayPoint]:
        """Intersection of segments a→b and c→d, or None.

        Parallel (including collinear) segments return None.
        """
        r = np.array([b.x - a.x, b.y - a.y])
        s = np.array([d.x - c.x, d.y - c.y])
        denom = r[0] * s[1] - r[1] * s[0]
        if abs(denom) <= EPSILON * EPSILON:
            return None
        qp = np.array([c.x - a.x, c.y - a.y])
        t = (qp[0] * s[1] - qp[1] * s[0]) / denom
        u = (qp[0] * r[1] - qp[1] * r[0]) / denom
        if not (-EPSILON <= t <= 1 + EPSILON and -EPSILON <= u <= 1 + EPSILON):
            return None
        return CutawayPoint(x=float(a.x + r[0] * t), y=float(a.y + r[1] * t))

    @staticmethod
    def boundary_intersection_params(
        a: CutawayPoint,
        b: CutawayPoint,
        polygons: Iterable[Polygon],
    ) -> list[float]:
        """Sorted, deduplicated parameters t in [0, 1] where a→b meets any polygon boundary.

        Overlapping stretches contribute both of their endpoints. The segment
        endpoints (t = 0 and t = 1) are always included.
        """
        segment = LineString([a.coords, b.coords])
        length = segment.length
        params = [0.0, 1.0]
        if length == 0:
            return params
        for polygon in polygons:
            hit = segment.intersection(polygon.boundary)
            for x, y in _coords_of(hit):
                params.append(segment.project(Point(x, y)) / length)
        params.sort()
        deduped = [params[0]]
        for t in params[1:]:
            if t - deduped[-1] > EPSILON / max(length, 1.0):
                deduped.append(t)
        if deduped[-1] < 1.0:
            deduped[-1] = 1.0
        return deduped

    @staticmethod
    def lerp(a: CutawayPoint, b: CutawayPoint, t: float) -> CutawayPoint:
        return CutawayPoint(x=a.x + (b.x - a.x) * t, y=a.y + (b.y - a.y) * t)

    @staticmethod
    def is_collinear(a: CutawayPoint, b: CutawayPoint, c: CutawayPoint, tol: float = EPSILON) -> bool:
        """True if b lies on the straight segment a→c."""
        cross = (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)
        scale = max(np.hypot(c.x - a.x, c.y - a.y), 1.0)
        if abs(cross) / scale > tol:
            return False
        return CutawayGeometry.point_on_segment(p=b, a=a, b=c, tol=tol)

    @staticmethod
    def drop_collinear(points: list[CutawayPoint]) -> list[CutawayPoint]:
        """Remove interior waypoints that lie on the straight move between their neighbours."""
        if len(points) < 3:
            return list(points)
        kept = [points[0]]
        for i in range(1, len(points) - 1):
            if CutawayGeometry.is_collinear(a=kept[-1], b=points[i], c=points[i + 1]):
                continue
            kept.append(points[i])
        kept.append(points[-1])
        return kept


def _coords_of(geometry: BaseGeometry) -> list[tuple[float, float]]:
    """All vertex coordinates of a (possibly multi-part) shapely geometry."""
    if geometry.is_empty:
        return []
    if hasattr(geometry, "geoms"):
        coords: list[tuple[float, float]] = []
        for part in geometry.geoms:
            coords.extend(_coords_of(part))
        return coords
    return [(x, y) for x, y in geometry.coords]
