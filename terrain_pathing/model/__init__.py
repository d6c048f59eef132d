"""Data model classes for cutaway path planning.

Separates world space from cutaway space:
- ElevatedPoint: World geometry atom (x, y, elevation)
- CutawayPoint: Cutaway geometry atom (distance along segment, elevation)
- CutawayPolygon: Solid cross-section in cutaway space
- ElevationLocation / VerticalSide / MovementDiscipline: Classification enums
- TerrainRegion: Terrain volumes (PlateauRegion, RampRegion)
- StraightLinePath: Resulting waypoints
"""

from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevated_point import ElevatedPoint
from terrain_pathing.model.elevation_location import (
    ElevationLocation,
    MovementDiscipline,
    VerticalSide,
)
from terrain_pathing.model.straight_line_path import StraightLinePath
from terrain_pathing.model.terrain_region import (
    PlateauRegion,
    RampRegion,
    TerrainRegion,
)

__all__ = [
    "ElevatedPoint",
    "CutawayPoint",
    "CutawayPolygon",
    "ElevationLocation",
    "VerticalSide",
    "MovementDiscipline",
    "TerrainRegion",
    "PlateauRegion",
    "RampRegion",
    "StraightLinePath",
]
