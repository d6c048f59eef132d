"""Boundary walker - follow a cutaway polygon's top surface toward a target x.

The walk starts at a point on the polygon boundary and emits consecutive
boundary vertices in ring order (clockwise, so the top surface runs
left-to-right) until:
- the boundary passes the target x, where the walk is clipped exactly, or
- the next edge turns backward (decreasing x), where the walk stops short.

When the walk climbed a left vertical edge straight into an overhang, the
backward edge is the overhang's underside; the walk then cuts up through the
solid to the elevation upon entry and resumes from there.

boundary_route follows the ring in either direction, backward edges
included, for callers that must stay outside the solid.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Optional

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.core.geometry import CutawayGeometry
from terrain_pathing.model.cutaway_point import CutawayPoint

if TYPE_CHECKING:
    from terrain_pathing.core.cutaway_classifier import CutawayHandler

logger = logging.getLogger(__name__)

EPSILON = CutawayConfig.EPSILON


class BoundaryWalker:
    """Static surface-walking algorithm over a single cutaway polygon.

    The walker never moves backward in x: cutaway polygons can be locally
    non-monotonic (the underside of an overhang), and following such edges
    would route the agent beneath solid terrain.
    """

    # Nested cut-throughs allowed within one walk
    MAX_CUT_THROUGHS = 100

    @staticmethod
    def surface_walk(
        a2d: CutawayPoint,
        b2d: CutawayPoint,
        handler: CutawayHandler,
    ) -> list[CutawayPoint]:
        """Walk the boundary of `handler`'s polygon from a2d toward b2d.x.

        Args:
            a2d: Starting point, on the polygon boundary
            b2d: Target; only its x is reached, its y matters for a vertical
                edge located exactly at b2d.x
            handler: Polygon to walk

        Returns:
            Boundary points starting with the walk's first point. Empty if
            a2d is not on the boundary or no forward progress is possible.
        """
        return BoundaryWalker._walk(a2d=a2d, b2d=b2d, handler=handler, depth=0)

    @staticmethod
    def _walk(a2d: CutawayPoint, b2d: CutawayPoint, handler: CutawayHandler, depth: int) -> list[CutawayPoint]:
        start = BoundaryWalker._starting_edge(a2d=a2d, handler=handler)
        if start is None:
            logger.debug(f"Walk start {a2d} is not on {handler}")
            return []
        ring, index = start
        n = len(ring)
        if BoundaryWalker._is_backward(a2d, ring[(index + 1) % n]):
            return BoundaryWalker._cut_through(pt=a2d, b2d=b2d, handler=handler, depth=depth)

        pts: list[CutawayPoint] = [a2d]
        prior_climb = False
        for k in range(n):
            a = a2d if k == 0 else ring[(index + k) % n]
            b = ring[(index + k + 1) % n]
            if k:
                _push(pts, a)

            if BoundaryWalker._is_backward(a, b):
                if prior_climb:
                    for pt in BoundaryWalker._cut_through(pt=a, b2d=b2d, handler=handler, depth=depth):
                        _push(pts, pt)
                return pts

            ending = BoundaryWalker._ending_points(a=a, b=b, b2d=b2d, following=ring[(index + k + 2) % n])
            if ending is not None:
                for pt in ending:
                    _push(pts, pt)
                return pts

            prior_climb = CutawayGeometry.is_vertical(a, b) and a.y < b.y

        logger.warning(f"Walk from {a2d} circled {handler} without reaching x={b2d.x:.3f}")
        return pts

    @staticmethod
    def _cut_through(
        pt: CutawayPoint,
        b2d: CutawayPoint,
        handler: CutawayHandler,
        depth: int,
    ) -> list[CutawayPoint]:
        """Rise from pt through the solid to the surface above and walk on from there."""
        if depth >= BoundaryWalker.MAX_CUT_THROUGHS:
            logger.warning(f"Walk gave up after {depth} cut-throughs at {pt}")
            return []
        entry = handler.elevation_upon_entry(pt)
        if not math.isfinite(entry) or entry <= pt.y + EPSILON:
            return []
        return BoundaryWalker._walk(a2d=CutawayPoint(x=pt.x, y=entry), b2d=b2d, handler=handler, depth=depth + 1)

    @staticmethod
    def boundary_route(a2d: CutawayPoint, b2d: CutawayPoint, handler: CutawayHandler) -> Optional[list[CutawayPoint]]:
        """Shorter way along the polygon boundary from a2d to b2d.

        Both ring directions are traced; backward edges are followed as well,
        so the route goes around overhang lips instead of through them.

        Returns:
            Boundary vertices strictly between a2d and b2d (empty when both lie
            on one edge), or None if the points do not share a ring.
        """
        routes = []
        for ring in handler.rings():
            for candidate in (ring, ring[::-1]):
                route = BoundaryWalker._ring_route(a2d=a2d, b2d=b2d, ring=candidate)
                if route is not None:
                    routes.append(route)
        if not routes:
            return None
        return min(routes, key=lambda route: _length([a2d, *route, b2d]))

    @staticmethod
    def _ring_route(
        a2d: CutawayPoint,
        b2d: CutawayPoint,
        ring: tuple[CutawayPoint, ...],
    ) -> Optional[list[CutawayPoint]]:
        index = _ring_index(a2d, ring)
        if index is None:
            return None
        n = len(ring)
        route: list[CutawayPoint] = []
        a = a2d
        for k in range(n):
            b = ring[(index + k + 1) % n]
            if CutawayGeometry.point_on_segment(p=b2d, a=a, b=b):
                return route
            route.append(b)
            a = b
        return None

    @staticmethod
    def _is_backward(a: CutawayPoint, b: CutawayPoint) -> bool:
        return a.x > b.x + EPSILON

    @staticmethod
    def _starting_edge(
        a2d: CutawayPoint,
        handler: CutawayHandler,
    ) -> Optional[tuple[tuple[CutawayPoint, ...], int]]:
        """Ring and edge index where the walk starts.

        A point on a vertex starts on the vertex's outgoing edge; otherwise
        the edge containing the point is used.
        """
        rings = handler.rings()
        for ring in rings:
            for i, vertex in enumerate(ring):
                if vertex.almost_equal(a2d):
                    return ring, i
        for ring in rings:
            index = _ring_index(a2d, ring)
            if index is not None:
                return ring, index
        return None

    @staticmethod
    def _ending_points(
        a: CutawayPoint,
        b: CutawayPoint,
        b2d: CutawayPoint,
        following: Optional[CutawayPoint] = None,
    ) -> Optional[list[CutawayPoint]]:
        """Points closing the walk if edge a→b reaches b2d.x, else None.

        `following` is the vertex after b; a vertical edge b→following standing
        exactly at b2d.x still belongs to the walk.
        """
        if b.x < b2d.x - EPSILON:
            return None

        if CutawayGeometry.is_vertical(a, b):
            if not CutawayGeometry.almost_equal(a.x, b2d.x):
                return [a]
            if CutawayGeometry.almost_equal(b2d.y, a.y):
                return [a]
            if min(a.y, b.y) < b2d.y < max(a.y, b.y):
                return [a, CutawayPoint(x=a.x, y=b2d.y)]
            return [a, b]

        if CutawayGeometry.almost_ge(a.x, b2d.x):
            return [a]
        if (
            following is not None
            and CutawayGeometry.almost_equal(b.x, b2d.x)
            and CutawayGeometry.is_vertical(b, following)
        ):
            return [a, *BoundaryWalker._ending_points(a=b, b=following, b2d=b2d)]
        return [a, CutawayPoint(x=b2d.x, y=CutawayGeometry.y_at_x(a, b, b2d.x))]


def _ring_index(pt: CutawayPoint, ring: tuple[CutawayPoint, ...]) -> Optional[int]:
    """Index of the vertex at pt, else of the edge containing pt."""
    for i, vertex in enumerate(ring):
        if vertex.almost_equal(pt):
            return i
    n = len(ring)
    for i in range(n):
        if CutawayGeometry.point_on_segment(p=pt, a=ring[i], b=ring[(i + 1) % n]):
            return i
    return None


def _length(points: list[CutawayPoint]) -> float:
    return sum(math.hypot(b.x - a.x, b.y - a.y) for a, b in zip(points, points[1:]))


def _push(pts: list[CutawayPoint], pt: CutawayPoint) -> None:
    """Append unless pt duplicates the last point."""
    if pts and pts[-1].almost_equal(pt):
        return
    pts.append(pt)
