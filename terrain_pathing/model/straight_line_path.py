"""StraightLinePath - Waypoints of a path that is straight in the ground plane.

Waypoints may change elevation, but seen from above they all lie on one
line from start to end. Consecutive duplicate waypoints are dropped on
insertion.
"""

from __future__ import annotations

from typing import Iterable, Optional, SupportsIndex

import numpy as np

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.model.elevated_point import ElevatedPoint


class StraightLinePath(list[ElevatedPoint]):
    """List of ElevatedPoints with duplicate suppression and elevation lookup.

    Example:
        path = StraightLinePath([start, start, end])  # -> [start, end]
        path.elevation_at(x=5.0, y=0.0)
    """

    def __init__(self, points: Iterable[ElevatedPoint] = ()) -> None:
        super().__init__()
        self.extend(points)

    def append(self, point: ElevatedPoint) -> None:
        if self and self[-1].almost_equal(point):
            return
        super().append(point)

    def extend(self, points: Iterable[ElevatedPoint]) -> None:
        for point in points:
            self.append(point)

    @classmethod
    def direct(cls, start: ElevatedPoint, end: ElevatedPoint) -> StraightLinePath:
        """Two-waypoint path; both waypoints are kept even when they coincide."""
        path = cls([start])
        super(StraightLinePath, path).append(end)
        return path

    def insert(self, index: SupportsIndex, point: ElevatedPoint) -> None:
        raise TypeError("StraightLinePath only supports appending waypoints")

    @property
    def start(self) -> Optional[ElevatedPoint]:
        """First waypoint of the path."""
        return self[0] if self else None

    @property
    def end(self) -> Optional[ElevatedPoint]:
        """Last waypoint of the path."""
        return self[-1] if self else None

    def elevation_at(self, x: float, y: float) -> float:
        """Elevation of the path above a ground-plane location.

        The location is projected onto the path's line. Between two waypoints
        the elevation is interpolated by distance; where the path changes
        elevation in place (a vertical step) the higher elevation is returned.

        Raises:
            ValueError: If the path is empty.
        """
        if not self:
            raise ValueError("Cannot look up elevation on an empty path")
        start, end = self[0], self[-1]
        tol = CutawayConfig.EPSILON
        if abs(start.x - x) <= tol and abs(start.y - y) <= tol:
            return start.elevation
        if abs(end.x - x) <= tol and abs(end.y - y) <= tol:
            return end.elevation

        origin = np.array(start.xy)
        axis = np.array(end.xy) - origin
        axis_len = float(np.linalg.norm(axis))
        if axis_len <= tol:
            return max(pt.elevation for pt in self)
        direction = axis / axis_len
        target = float(np.clip((np.array([x, y]) - origin) @ direction, 0.0, axis_len))
        dists = [float((np.array(pt.xy) - origin) @ direction) for pt in self]

        i = 0
        while i < len(self) and dists[i] < target - tol:
            i += 1
        if i == 0:
            return self[0].elevation
        if i == len(self):
            return self[-1].elevation

        if abs(dists[i] - target) <= tol:
            # Vertical steps share a distance; take the highest of them
            elevation = self[i].elevation
            j = i + 1
            while j < len(self) and abs(dists[j] - target) <= tol:
                elevation = max(elevation, self[j].elevation)
                j += 1
            return elevation

        a, b = self[i - 1], self[i]
        if a.elevation == b.elevation:
            return a.elevation
        t = (target - dists[i - 1]) / (dists[i] - dists[i - 1])
        return a.elevation + (b.elevation - a.elevation) * t
