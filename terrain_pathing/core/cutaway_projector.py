"""Cutaway projector - merge terrain cross-sections along a travel segment.

Builds the solid cutaway shape the path builder walks on:
1. Collect the cross-sections of every region the segment crosses
2. Synthesize scene-floor fillers wherever no cross-section reaches down
   to the scene floor
3. Union everything (shapely), subtract hole polygons
4. Orient clockwise and strip duplicate consecutive vertices
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from shapely.geometry import Polygon, box
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.core.cutaway_transform import CutawayTransform
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevated_point import ElevatedPoint

if TYPE_CHECKING:
    from terrain_pathing.model.terrain_region import TerrainRegion

logger = logging.getLogger(__name__)

# Merged pieces smaller than this are numerical slivers
MIN_POLYGON_AREA = CutawayConfig.EPSILON


@dataclass(frozen=True)
class _FloorEvent:
    """A cross-section's left or right bound met while scanning for floor gaps."""

    x: float
    moving_in: bool
    is_hole: bool


class CutawayProjector:
    """Static methods turning regions into merged cutaway polygons."""

    @staticmethod
    def project(
        start: ElevatedPoint,
        end: ElevatedPoint,
        regions: Iterable[TerrainRegion],
        scene_floor: float,
    ) -> list[CutawayPolygon]:
        """Merged cutaway polygons of all regions crossed by start→end.

        Args:
            start: Segment start (cutaway x = 0)
            end: Segment end
            regions: Candidate terrain regions
            scene_floor: Scene-wide floor elevation

        Returns:
            Clockwise, duplicate-free polygons; empty if no region is crossed
            or the merge leaves nothing solid.
        """
        cross_sections: list[CutawayPolygon] = []
        for region in regions:
            if not region.intersects_segment(start=start, end=end):
                continue
            cross_sections.extend(region.cross_section(start=start, end=end))
        if not cross_sections:
            return []
        length = CutawayTransform.segment_length(start=start, end=end)
        return CutawayProjector.merge(cross_sections=cross_sections, length=length, scene_floor=scene_floor)

    @staticmethod
    def merge(
        cross_sections: list[CutawayPolygon],
        length: float,
        scene_floor: float,
    ) -> list[CutawayPolygon]:
        """Union cross-sections with floor fillers and remove holes.

        Args:
            cross_sections: Region cross-sections in cutaway space
            length: Cutaway x extent (segment length)
            scene_floor: Scene-wide floor elevation

        Returns:
            Merged polygons, or empty if the merge collapses.
        """
        fillers = CutawayProjector.floor_fillers(
            cross_sections=cross_sections, length=length, scene_floor=scene_floor
        )
        solids = [poly.to_shapely() for poly in cross_sections if not poly.is_hole]
        solids.extend(poly.to_shapely() for poly in fillers)
        holes = [poly.to_shapely() for poly in cross_sections if poly.is_hole]
        if not solids:
            logger.debug("Cutaway has only hole cross-sections")
            return []

        merged = unary_union(solids)
        if holes:
            merged = merged.difference(unary_union(holes))

        polygons = []
        for part in _polygons_of(merged):
            if part.area <= MIN_POLYGON_AREA:
                continue
            polygons.append(CutawayPolygon.from_shapely(part).oriented().without_duplicate_points())
        logger.debug(
            f"Merged {len(cross_sections)} cross-section(s) and {len(fillers)} floor filler(s) "
            f"into {len(polygons)} polygon(s)"
        )
        return polygons

    @staticmethod
    def floor_fillers(
        cross_sections: list[CutawayPolygon],
        length: float,
        scene_floor: float,
    ) -> list[CutawayPolygon]:
        """Rectangles filling [MIN_ELEV, scene_floor] wherever no cross-section reaches the floor.

        Only cross-sections whose bottom is at or below the scene floor block
        a filler. Holes count inversely: entering a hole is like leaving solid.
        """
        events: list[_FloorEvent] = []
        inside = 0
        for poly in cross_sections:
            min_x, min_y, max_x, _ = poly.bounds
            if min_y > scene_floor:
                continue
            if min_x > 0:
                events.append(_FloorEvent(x=min_x, moving_in=True, is_hole=poly.is_hole))
            else:
                inside += -1 if poly.is_hole else 1
            if max_x < length:
                events.append(_FloorEvent(x=max_x, moving_in=False, is_hole=poly.is_hole))
        events.sort(key=lambda event: event.x)

        fillers = []
        prev_x = 0.0
        for event in events:
            if event.is_hole ^ event.moving_in:
                if inside <= 0:
                    fillers.extend(_filler(prev_x, event.x, scene_floor))
                inside += 1
            else:
                inside -= 1
                if inside == 0:
                    prev_x = event.x
        if inside <= 0 and prev_x < length:
            fillers.extend(_filler(prev_x, length, scene_floor))
        return fillers


def _filler(x0: float, x1: float, scene_floor: float) -> list[CutawayPolygon]:
    if x1 - x0 <= CutawayConfig.EPSILON or scene_floor <= CutawayConfig.MIN_ELEV:
        return []
    rect = box(x0, CutawayConfig.MIN_ELEV, x1, scene_floor)
    return [CutawayPolygon.from_shapely(rect)]


def _polygons_of(geometry: BaseGeometry) -> list[Polygon]:
    """Polygon parts of a shapely overlay result."""
    if geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if hasattr(geometry, "geoms"):
        return [poly for part in geometry.geoms for poly in _polygons_of(part)]
    return []
