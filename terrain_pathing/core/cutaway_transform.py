"""Coordinate transform between world space and cutaway space.

Provides the bidirectional mapping used by the path builder:
- to_2d: project a world point onto the start→end line (x = distance, y = elevation)
- from_2d: interpolate back along the line direction
- padded_segment: extend a travel segment on both ends before projecting

The two mappings are exact inverses for points lying on the line.
"""

import numpy as np

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.elevated_point import ElevatedPoint


class CutawayTransform:
    """Static methods mapping between world points and cutaway points.

    All methods take the segment endpoints explicitly; nothing is cached.
    A segment whose endpoints share the same ground-plane location has no
    direction, so every point maps to x = 0.
    """

    @staticmethod
    def segment_length(start: ElevatedPoint, end: ElevatedPoint) -> float:
        """Ground-plane length of the segment."""
        return float(np.hypot(end.x - start.x, end.y - start.y))

    @staticmethod
    def _unit_direction(start: ElevatedPoint, end: ElevatedPoint) -> np.ndarray:
        delta = np.array([end.x - start.x, end.y - start.y], dtype=float)
        length = np.linalg.norm(delta)
        if length <= CutawayConfig.EPSILON:
            return np.zeros(2)
        return delta / length

    @staticmethod
    def to_2d(point: ElevatedPoint, start: ElevatedPoint, end: ElevatedPoint) -> CutawayPoint:
        """Project a world point into the cutaway space of start→end.

        Args:
            point: World point to project
            start: Segment start (x = 0)
            end: Segment end

        Returns:
            CutawayPoint with x = position along the line parameterization
            (signed distance of the point's projection from start) and
            y = the point's elevation.
        """
        direction = CutawayTransform._unit_direction(start=start, end=end)
        offset = np.array([point.x - start.x, point.y - start.y], dtype=float)
        return CutawayPoint(x=float(offset @ direction), y=point.elevation)

    @staticmethod
    def from_2d(point2d: CutawayPoint, start: ElevatedPoint, end: ElevatedPoint) -> ElevatedPoint:
        """Map a cutaway point back onto the start→end line.

        Args:
            point2d: Cutaway point (x = distance from start, y = elevation)
            start: Segment start
            end: Segment end

        Returns:
            World point at distance x along the line with elevation y.
        """
        direction = CutawayTransform._unit_direction(start=start, end=end)
        x, y = np.array([start.x, start.y], dtype=float) + direction * point2d.x
        return ElevatedPoint(x=float(x), y=float(y), elevation=point2d.y)

    @staticmethod
    def padded_segment(
        start: ElevatedPoint,
        end: ElevatedPoint,
        padding: float = CutawayConfig.SEGMENT_PADDING,
    ) -> tuple[ElevatedPoint, ElevatedPoint]:
        """Extend a segment by `padding` on both ends, keeping endpoint elevations.

        Degenerate segments (same ground-plane location) are first given an
        arbitrary +x direction so that a cutaway surface exists.
        """
        direction = CutawayTransform._unit_direction(start=start, end=end)
        if not direction.any():
            direction = np.array([1.0, 0.0])
        padded_start = ElevatedPoint(
            x=float(start.x - direction[0] * padding),
            y=float(start.y - direction[1] * padding),
            elevation=start.elevation,
        )
        padded_end = ElevatedPoint(
            x=float(end.x + direction[0] * padding),
            y=float(end.y + direction[1] * padding),
            elevation=end.elevation,
        )
        return padded_start, padded_end
