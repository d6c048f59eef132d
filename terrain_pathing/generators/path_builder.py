"""TerrainPathBuilder - Straight-line movement paths over terrain regions.

Builds the waypoints an agent passes through when moving in a straight line
across terrain, for one of three movement disciplines:

**Walking:**
    Stays on supporting surfaces. Falls when walking off an edge, climbs
    walls at their base. Driven by MovementStateMachine over the boundary
    walk of the merged cutaway polygons.

**Burrowing:**
    Walking path followed by BurrowingShortcuts: detours over terrain are
    replaced by straight moves through solid.

**Flying:**
    Walking path followed by FlyingShortcuts: detours are replaced by
    straight moves through open air. An end point hanging over an overhang
    is reached by walking backward from it and joining both paths.

Fast paths skip the cutaway entirely: identical points, unbound agents
(FLYING | BURROWING), purely vertical moves and segments crossing no terrain.

Reference: DESIGN.md "Path builder"
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from terrain_pathing.constants import CutawayConfig, PathConfig
from terrain_pathing.core.boundary_walker import BoundaryWalker
from terrain_pathing.core.cutaway_classifier import CutawayClassifier, Support
from terrain_pathing.core.cutaway_projector import CutawayProjector
from terrain_pathing.core.cutaway_transform import CutawayTransform
from terrain_pathing.core.geometry import CutawayGeometry
from terrain_pathing.generators.movement_state import MovementStateMachine, WalkContext
from terrain_pathing.generators.shortcut_optimizer import BurrowingShortcuts, FlyingShortcuts
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.elevated_point import ElevatedPoint
from terrain_pathing.model.elevation_location import ElevationLocation, MovementDiscipline
from terrain_pathing.model.straight_line_path import StraightLinePath
from terrain_pathing.model.terrain_region import TerrainRegion

logger = logging.getLogger(__name__)

EPSILON = CutawayConfig.EPSILON
UNBOUND = MovementDiscipline.FLYING | MovementDiscipline.BURROWING


class PathVerificationError(ValueError):
    """Raised when a constructed cutaway path is unusable."""


@dataclass(frozen=True)
class CutawayFrame:
    """Cutaway space of one travel segment.

    Attributes:
        start: Travel start (world)
        end: Travel end (world)
        padded_start: Segment start extended backward, cutaway x = 0
        padded_end: Segment end extended forward
        classifier: Classifier over the merged cutaway polygons
    """

    start: ElevatedPoint
    end: ElevatedPoint
    padded_start: ElevatedPoint
    padded_end: ElevatedPoint
    classifier: CutawayClassifier

    def to_2d(self, point: ElevatedPoint) -> CutawayPoint:
        return CutawayTransform.to_2d(point=point, start=self.padded_start, end=self.padded_end)

    def from_2d(self, point2d: CutawayPoint) -> ElevatedPoint:
        return CutawayTransform.from_2d(point2d=point2d, start=self.padded_start, end=self.padded_end)

    @property
    def a2d(self) -> CutawayPoint:
        return self.to_2d(self.start)

    @property
    def b2d(self) -> CutawayPoint:
        return self.to_2d(self.end)


class TerrainPathBuilder:
    """Builds straight-line paths over a fixed set of terrain regions.

    Example:
        builder = TerrainPathBuilder(regions=[plateau], scene_floor=0.0)
        path = builder.construct_path(start, end, MovementDiscipline.WALKING)
    """

    def __init__(
        self,
        regions: Iterable[TerrainRegion],
        scene_floor: float = 0.0,
        max_iterations: int = PathConfig.MAX_ITER,
    ) -> None:
        if not math.isfinite(scene_floor):
            raise ValueError(f"Scene floor must be finite, got {scene_floor}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {max_iterations}")
        self.regions = list(regions)
        self.scene_floor = scene_floor
        self.max_iterations = max_iterations

    def __repr__(self) -> str:
        return f"TerrainPathBuilder(regions={len(self.regions)}, scene_floor={self.scene_floor})"

    # ==========================================================================
    # Public API
    # ==========================================================================

    def construct_path(
        self,
        start: ElevatedPoint,
        end: ElevatedPoint,
        discipline: MovementDiscipline = MovementDiscipline.WALKING,
        can_end_below: bool = True,
    ) -> StraightLinePath:
        """Waypoints of a straight move from start to end.

        Args:
            start: Travel start
            end: Travel end
            discipline: How the agent treats solid terrain
            can_end_below: Whether a burrowing agent may finish inside solid

        Returns:
            Path from start to the reached end. Consecutive waypoints are
            straight 3D moves; seen from above they all lie on start→end.
        """
        if start.almost_equal(end):
            return StraightLinePath.direct(start, end)

        if UNBOUND in discipline:
            if not can_end_below and self._is_buried(end):
                end = end.with_elevation(self.nearest_ground_elevation(end))
            return StraightLinePath.direct(start, end)

        if start.xy_equal(end):
            if MovementDiscipline.FLYING in discipline:
                return StraightLinePath.direct(start, end)
            burrowing = MovementDiscipline.BURROWING in discipline
            ground = self.nearest_ground_elevation(end, burrowing=burrowing and can_end_below)
            return StraightLinePath.direct(start, end.with_elevation(ground))

        frame = self.cutaway(start=start, end=end)
        if frame is None:
            return StraightLinePath.direct(start, end)

        try:
            if MovementDiscipline.BURROWING in discipline:
                path2d = self.construct_burrowing_path_2d(frame=frame, can_end_below=can_end_below)
            elif MovementDiscipline.FLYING in discipline:
                path2d = self.construct_flying_path_2d(frame=frame)
            else:
                path2d = self.construct_walking_path_2d(classifier=frame.classifier, a2d=frame.a2d, b2d=frame.b2d)
            self.verify_path_2d(path2d)
        except PathVerificationError as err:
            logger.error(f"Path from {start} to {end} ({discipline}) failed verification: {err}; using direct line")
            return StraightLinePath.direct(start, end)

        path2d = CutawayGeometry.drop_collinear(path2d)
        return self._to_world(frame=frame, path2d=path2d)

    def cutaway(self, start: ElevatedPoint, end: ElevatedPoint) -> Optional[CutawayFrame]:
        """Project the regions along start→end; None when no terrain is crossed."""
        padded_start, padded_end = CutawayTransform.padded_segment(start=start, end=end)
        polygons = CutawayProjector.project(
            start=padded_start,
            end=padded_end,
            regions=self.regions,
            scene_floor=self.scene_floor,
        )
        if not polygons:
            logger.debug(f"No terrain between {start} and {end}")
            return None
        return CutawayFrame(
            start=start,
            end=end,
            padded_start=padded_start,
            padded_end=padded_end,
            classifier=CutawayClassifier(polygons=polygons),
        )

    def nearest_ground_elevation(self, point: ElevatedPoint, burrowing: bool = False) -> float:
        """Elevation a point settles at when standing at its ground-plane location.

        Falls to the highest region surface at or below the point (never below
        the scene floor), then climbs out of any region that still contains it
        until it rests on top. A burrowing point inside a region stays put.
        """
        covering = [region for region in self.regions if region.covers_xy(point.x, point.y)]
        if burrowing and any(region.contains(point) for region in covering):
            return point.elevation

        reference = max(point.elevation, self.scene_floor)
        elevation = self.scene_floor
        for region in covering:
            surface = region.elevation_at(point.x, point.y)
            if surface <= reference + EPSILON:
                elevation = max(elevation, surface)

        for _ in range(self.max_iterations):
            sample = point.with_elevation(elevation)
            containing = [region for region in covering if region.contains(sample)]
            if not containing:
                return elevation
            elevation = max(region.elevation_at(point.x, point.y) for region in containing)
        logger.error(f"Ground search at {point} hit the iteration cap of {self.max_iterations}")
        return elevation

    @staticmethod
    def verify_path_2d(path: list[CutawayPoint]) -> None:
        """Raise PathVerificationError if a cutaway path is unusable."""
        if not path:
            raise PathVerificationError("path is empty")
        if len(path) > PathConfig.MAX_WAYPOINTS:
            raise PathVerificationError(f"path has {len(path)} waypoints (max {PathConfig.MAX_WAYPOINTS})")
        coords = np.array([pt.coords for pt in path], dtype=float)
        if np.isnan(coords).any():
            raise PathVerificationError("path contains NaN coordinates")
        if (np.abs(coords[:, 1]) > PathConfig.MAX_ABS_ELEVATION).any():
            raise PathVerificationError(f"path leaves the elevation range +/-{PathConfig.MAX_ABS_ELEVATION:g}")

    # ==========================================================================
    # Walking
    # ==========================================================================

    def construct_walking_path_2d(
        self,
        classifier: CutawayClassifier,
        a2d: CutawayPoint,
        b2d: CutawayPoint,
    ) -> list[CutawayPoint]:
        """Walk the cutaway from a2d until reaching b2d.x.

        Each iteration settles the agent on its nearest support (falling or
        rising through the state machine) and then walks that polygon's
        boundary. Stalls and the iteration cap end the walk early with the
        partial path.
        """
        sm = MovementStateMachine(context=WalkContext(waypoints=[a2d]))
        ctx = sm.context
        reached = False
        for iteration in range(self.max_iterations + 1):
            current = ctx.current
            if CutawayGeometry.almost_ge(current.x, b2d.x):
                reached = True
                break
            if iteration == self.max_iterations:
                logger.error(
                    f"Walking path from {a2d} to {b2d} hit the iteration cap of {self.max_iterations}; "
                    f"returning partial path"
                )
                break
            n_waypoints = len(ctx.waypoints)

            support = classifier.nearest_support(current)
            if support.location is ElevationLocation.OUTSIDE:
                logger.warning(f"Nothing supports {current}; walking path stops at x={current.x:.3f}")
                break
            if support.location is not ElevationLocation.GROUND:
                sm.locate(support.location)
                sm.settle(support.elevation)

            walk = BoundaryWalker.surface_walk(a2d=ctx.current, b2d=b2d, handler=support.handler)
            if len(walk) > 1:
                sm.try_transition("walk", points=walk[1:])
            elif not self._drop_off(sm=sm, classifier=classifier, support=support):
                logger.warning(f"Walking path stalled at {ctx.current}")
                break

            if len(ctx.waypoints) == n_waypoints and ctx.current.almost_equal(current):
                logger.warning(f"Walking path made no progress at {current}")
                break
        path = self._adjust_endpoint(waypoints=ctx.waypoints, b2d=b2d)
        if reached:
            path = self._settle_endpoint(classifier=classifier, path=path)
        return path

    @staticmethod
    def _drop_off(sm: MovementStateMachine, classifier: CutawayClassifier, support: Support) -> bool:
        """Fall to another polygon when the current one offers no forward edge."""
        current = sm.context.current
        lower = classifier.nearest_support(current, exclude=support.handler)
        if lower.location is not ElevationLocation.ABOVE or lower.elevation >= current.y - EPSILON:
            return False
        return sm.locate(ElevationLocation.ABOVE) and sm.settle(lower.elevation)

    @staticmethod
    def _settle_endpoint(classifier: CutawayClassifier, path: list[CutawayPoint]) -> list[CutawayPoint]:
        """Move a final waypoint left inside solid or hanging in the air onto its support.

        The walk clips at the end's x, which can leave it at the foot of a riser
        or the bottom of an overhang's outer face.
        """
        if not path:
            return path
        last = path[-1]
        support = classifier.nearest_support(last)
        if support.location not in (ElevationLocation.BELOW, ElevationLocation.ABOVE):
            return path
        if not math.isfinite(support.elevation) or CutawayGeometry.almost_equal(support.elevation, last.y):
            return path
        logger.debug(f"Walk ends {support.location.name} at {last}; settling at y={support.elevation:.3f}")
        return [*path, CutawayPoint(x=last.x, y=support.elevation)]

    @staticmethod
    def _adjust_endpoint(waypoints: list[CutawayPoint], b2d: CutawayPoint) -> list[CutawayPoint]:
        """Substitute the true end for the last waypoint when it lies on the last move."""
        path = list(waypoints)
        if len(path) < 2:
            return path
        if not CutawayGeometry.point_on_segment(p=b2d, a=path[-2], b=path[-1]):
            return path
        if b2d.almost_equal(path[-2]):
            path.pop()
        path[-1] = b2d
        return path

    # ==========================================================================
    # Burrowing and flying
    # ==========================================================================

    def construct_burrowing_path_2d(self, frame: CutawayFrame, can_end_below: bool = True) -> list[CutawayPoint]:
        a2d, b2d = frame.a2d, frame.b2d
        optimizer = BurrowingShortcuts(classifier=frame.classifier, max_iterations=self.max_iterations)
        end_location = frame.classifier.classify(b2d).location
        if (can_end_below or end_location is not ElevationLocation.BELOW) and optimizer.is_legal(a2d, b2d):
            return [a2d, b2d]
        path = self.construct_walking_path_2d(classifier=frame.classifier, a2d=a2d, b2d=b2d)
        path = optimizer.optimize(path, end=b2d, allow_end=can_end_below)
        if not can_end_below:
            path = self._settle_endpoint(classifier=frame.classifier, path=path)
        return path

    def construct_flying_path_2d(self, frame: CutawayFrame) -> list[CutawayPoint]:
        a2d, b2d = frame.a2d, frame.b2d
        optimizer = FlyingShortcuts(classifier=frame.classifier, max_iterations=self.max_iterations)
        if optimizer.is_legal(a2d, b2d):
            return [a2d, b2d]
        path = self.construct_walking_path_2d(classifier=frame.classifier, a2d=a2d, b2d=b2d)
        end_location = frame.classifier.classify(b2d).location
        if (
            end_location is ElevationLocation.ABOVE
            and b2d.y > path[-1].y + EPSILON
            and not optimizer.can_reach_end(path, b2d)
        ):
            try:
                path = self.connect_paths(frame=frame, forward=path)
            except PathVerificationError as err:
                logger.warning(f"Could not join reverse path toward {b2d}: {err}")
        path = optimizer.route_around_solid(path)
        return optimizer.optimize(path, end=b2d)

    def connect_paths(self, frame: CutawayFrame, forward: list[CutawayPoint]) -> list[CutawayPoint]:
        """Join the forward walking path with a walking path built backward from the end.

        The reverse path reaches end points that hang above terrain the
        forward walk passes underneath. Both paths are joined at the first
        crossing along the forward path.

        Raises:
            PathVerificationError: If the reverse path is empty or never crosses the forward path.
        """
        reverse_frame = self.cutaway(start=frame.end, end=frame.start)
        if reverse_frame is None:
            raise PathVerificationError("no terrain along the reverse segment")
        reverse = self.construct_walking_path_2d(
            classifier=reverse_frame.classifier,
            a2d=reverse_frame.a2d,
            b2d=reverse_frame.b2d,
        )
        backward = [frame.to_2d(reverse_frame.from_2d(pt)) for pt in reverse]
        if len(backward) < 2:
            raise PathVerificationError("reverse walking path is empty")

        for i in range(len(forward) - 1):
            best: Optional[tuple[float, int, CutawayPoint]] = None
            for j in range(len(backward) - 1):
                ix = CutawayGeometry.segment_intersection(forward[i], forward[i + 1], backward[j], backward[j + 1])
                if ix is None:
                    continue
                dist = float(np.hypot(ix.x - forward[i].x, ix.y - forward[i].y))
                if best is None or dist < best[0]:
                    best = (dist, j, ix)
            if best is None:
                continue
            _, j, ix = best
            joined = forward[: i + 1] + [ix] + backward[j::-1]
            deduped = [joined[0]]
            for pt in joined[1:]:
                if not pt.almost_equal(deduped[-1]):
                    deduped.append(pt)
            logger.debug(f"Joined reverse path at {ix}")
            return deduped
        raise PathVerificationError("reverse path never crosses the forward path")

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _is_buried(self, point: ElevatedPoint) -> bool:
        return any(region.contains(point) for region in self.regions)

    @staticmethod
    def _to_world(frame: CutawayFrame, path2d: list[CutawayPoint]) -> StraightLinePath:
        """Map a cutaway path back to world points, snapping the exact endpoints."""
        points = [frame.from_2d(pt) for pt in path2d]
        if points[0].almost_equal(frame.start):
            points[0] = frame.start
        if points[-1].almost_equal(frame.end):
            points[-1] = frame.end
        return StraightLinePath(points)
