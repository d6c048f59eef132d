"""TerrainRegion - Vertical terrain volumes overlaid on the ground plane.

A region is a ground-plane shape extruded between a bottom elevation and a
top surface. The path builder only ever sees a region through two queries:
- cross_section: the solid cutaway polygons along a travel segment
- elevation_upon_entry: the top surface elevation at a cutaway position

Region kinds:
- PlateauRegion: flat top at a fixed elevation
- RampRegion: top inclined along a direction, continuous or in stairs

Reference: DESIGN.md "Terrain regions"
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from shapely.geometry import LineString, Point, Polygon
from shapely.geometry.base import BaseGeometry

from terrain_pathing.constants import CutawayConfig, RampConfig
from terrain_pathing.core.cutaway_transform import CutawayTransform
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevated_point import ElevatedPoint

logger = logging.getLogger(__name__)

EPSILON = CutawayConfig.EPSILON


@dataclass(frozen=True, kw_only=True)
class TerrainRegion(ABC):
    """Base class for terrain volumes.

    Attributes:
        shape: Ground-plane footprint (may contain holes)
        bottom: Elevation of the volume's underside
        name: Label used in log messages
    """

    shape: Polygon
    bottom: float = CutawayConfig.MIN_ELEV
    name: str = "region"

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if self.shape.is_empty or self.shape.area <= 0:
            raise ValueError(f"{self.name}: region shape must have a positive area")
        if not math.isfinite(self.bottom):
            raise ValueError(f"{self.name}: bottom must be finite, got {self.bottom}")

    @abstractmethod
    def elevation_at(self, x: float, y: float) -> float:
        """Top surface elevation at a ground-plane location (not checked for containment)."""

    # ==========================================================================
    # Ground-plane queries
    # ==========================================================================

    def covers_xy(self, x: float, y: float) -> bool:
        """True if the footprint covers the location, boundary included."""
        return self.shape.covers(Point(x, y))

    def intersects_segment(self, start: ElevatedPoint, end: ElevatedPoint) -> bool:
        if start.xy_equal(end):
            return self.covers_xy(start.x, start.y)
        return self.shape.intersects(LineString([start.xy, end.xy]))

    def contains(self, point: ElevatedPoint) -> bool:
        """True if the point lies inside the volume, below its top surface.

        A point resting exactly on the top surface is not contained.
        """
        if not self.covers_xy(point.x, point.y):
            return False
        return self.bottom <= point.elevation < self.elevation_at(point.x, point.y) - EPSILON

    # ==========================================================================
    # Cutaway queries
    # ==========================================================================

    def cross_section(self, start: ElevatedPoint, end: ElevatedPoint) -> list[CutawayPolygon]:
        """Solid cutaway polygons of this region along start→end.

        One polygon per stretch of the segment inside the footprint. Each
        polygon runs clockwise: top profile left to right, then back along
        the bottom.
        """
        length = CutawayTransform.segment_length(start=start, end=end)
        if length <= EPSILON:
            return []
        segment = LineString([start.xy, end.xy])
        polygons = []
        for piece in _line_pieces(segment.intersection(self.shape)):
            d0, d1 = sorted(segment.project(Point(coord)) for coord in (piece.coords[0], piece.coords[-1]))
            if d1 - d0 <= EPSILON:
                continue
            top = self._top_profile(start=start, end=end, d0=d0, d1=d1)
            coords = top + [(d1, self.bottom), (d0, self.bottom)]
            polygons.append(CutawayPolygon.from_coords(coords).without_duplicate_points())
        logger.debug(f"{self.name}: {len(polygons)} cross-section(s) along segment of length {length:.2f}")
        return polygons

    def elevation_upon_entry(self, point2d: CutawayPoint, start: ElevatedPoint, end: ElevatedPoint) -> float:
        """Top surface elevation at a cutaway position; -inf outside the footprint."""
        location = CutawayTransform.from_2d(point2d=point2d, start=start, end=end)
        if not self.covers_xy(location.x, location.y):
            return -math.inf
        return self.elevation_at(location.x, location.y)

    def _top_profile(
        self,
        start: ElevatedPoint,
        end: ElevatedPoint,
        d0: float,
        d1: float,
    ) -> list[tuple[float, float]]:
        """Top boundary of the cross-section between distances d0 and d1, left to right.

        Planar tops only need the two ends; stepped tops insert their jumps.
        """
        return [
            (d, self.elevation_at(*CutawayTransform.from_2d(CutawayPoint(x=d, y=0.0), start, end).xy))
            for d in (d0, d1)
        ]


@dataclass(frozen=True, kw_only=True)
class PlateauRegion(TerrainRegion):
    """Region with a flat top.

    Example:
        PlateauRegion(shape=box(10, -10, 50, 10), elevation=20.0)
    """

    elevation: float

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.bottom >= self.elevation:
            raise ValueError(f"{self.name}: bottom {self.bottom} must be below elevation {self.elevation}")

    def elevation_at(self, x: float, y: float) -> float:
        return self.elevation


@dataclass(frozen=True, kw_only=True)
class RampRegion(TerrainRegion):
    """Region whose top rises from `ramp_floor` to `plateau_elevation` along a direction.

    The ramp spans the footprint's full extent along the direction: the
    lowest vertex projection sits at the floor and the highest at the
    plateau. A positive `step_size` turns the ramp into stairs.

    Attributes:
        ramp_floor: Elevation at the low edge
        plateau_elevation: Elevation at the high edge
        direction_deg: Direction of increasing elevation, degrees counterclockwise from +x
        step_size: Stair rise; 0 for a continuous ramp

    Stairs example (floor 10, plateau 25):
        step 5 -> 15, 20, 25 at t = 1/4, 2/4, 3/4
        step 4 -> 14, 18, 22, 25 at t = 1/5 ... 4/5
    """

    ramp_floor: float
    plateau_elevation: float
    direction_deg: float = RampConfig.DEFAULT_DIRECTION_DEG
    step_size: float = RampConfig.DEFAULT_STEP_SIZE

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.plateau_elevation < self.ramp_floor:
            raise ValueError(
                f"{self.name}: plateau {self.plateau_elevation} must not be below ramp floor {self.ramp_floor}"
            )
        if self.step_size < 0:
            raise ValueError(f"{self.name}: step size must be >= 0, got {self.step_size}")
        if self.bottom >= self.ramp_floor:
            raise ValueError(f"{self.name}: bottom {self.bottom} must be below ramp floor {self.ramp_floor}")

    @property
    def direction(self) -> np.ndarray:
        """Unit vector of increasing elevation."""
        theta = math.radians(self.direction_deg)
        return np.array([math.cos(theta), math.sin(theta)])

    @property
    def extent(self) -> tuple[float, float]:
        """Min and max projection of the footprint's exterior onto the direction."""
        projections = np.asarray(self.shape.exterior.coords) @ self.direction
        return float(projections.min()), float(projections.max())

    def ramp_fraction(self, x: float, y: float, clamp: bool = True) -> float:
        """Position along the ramp, 0 at the floor edge and 1 at the plateau edge."""
        t_min, t_max = self.extent
        t = float((np.array([x, y]) @ self.direction - t_min) / (t_max - t_min))
        return min(1.0, max(0.0, t)) if clamp else t

    def ideal_cutpoints(self) -> list[tuple[float, float]]:
        """Stair cutpoints as (fraction, elevation from that fraction on)."""
        if not self.step_size:
            return []
        delta = self.plateau_elevation - self.ramp_floor
        n_splits = math.ceil(delta / self.step_size)
        return [
            ((i + 1) / (n_splits + 1), min(self.ramp_floor + (i + 1) * self.step_size, self.plateau_elevation))
            for i in range(n_splits)
        ]

    def elevation_at(self, x: float, y: float) -> float:
        t = self.ramp_fraction(x, y)
        if abs(t) <= EPSILON:
            return self.ramp_floor
        if abs(t - 1) <= EPSILON:
            return self.plateau_elevation
        if self.step_size:
            return self._stair_elevation(t)
        return self.ramp_floor + t * (self.plateau_elevation - self.ramp_floor)

    def _stair_elevation(self, t: float) -> float:
        elevation = self.ramp_floor
        for cut_t, cut_elevation in self.ideal_cutpoints():
            if cut_t < t or abs(cut_t - t) <= EPSILON:
                elevation = cut_elevation
        return elevation

    def _top_profile(
        self,
        start: ElevatedPoint,
        end: ElevatedPoint,
        d0: float,
        d1: float,
    ) -> list[tuple[float, float]]:
        profile = super()._top_profile(start=start, end=end, d0=d0, d1=d1)
        cutpoints = self.ideal_cutpoints()
        if not cutpoints:
            return profile

        # Ramp fraction is linear in distance along the segment
        t_start = self.ramp_fraction(start.x, start.y, clamp=False)
        t_min, t_max = self.extent
        unit = np.array([end.x - start.x, end.y - start.y]) / CutawayTransform.segment_length(start, end)
        dt = float(unit @ self.direction) / (t_max - t_min)
        if abs(dt) <= EPSILON:
            return profile

        levels = [self.ramp_floor] + [elevation for _, elevation in cutpoints]
        steps: list[tuple[float, float, float]] = []
        for i, (cut_t, _) in enumerate(cutpoints):
            d = (cut_t - t_start) / dt
            if not (d0 + EPSILON < d < d1 - EPSILON):
                continue
            before, after = (levels[i], levels[i + 1]) if dt > 0 else (levels[i + 1], levels[i])
            steps.append((d, before, after))
        steps.sort()

        top = [profile[0]]
        for d, before, after in steps:
            top.extend([(d, before), (d, after)])
        top.append(profile[-1])
        return top


def _line_pieces(geometry: BaseGeometry) -> list[LineString]:
    """Linear parts of a shapely intersection result."""
    if geometry.is_empty:
        return []
    if geometry.geom_type == "LineString":
        return [geometry]
    if hasattr(geometry, "geoms"):
        return [line for part in geometry.geoms for line in _line_pieces(part)]
    return []
