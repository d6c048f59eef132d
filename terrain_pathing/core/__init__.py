"""Core cutaway geometry.

This module provides the geometric backbone of the path builder:
- CutawayTransform: World <-> cutaway coordinate mapping
- CutawayGeometry: Tolerant comparisons and segment helpers (shapely/numpy)
- CutawayProjector: Merged cross-sections with scene-floor fillers
- CutawayHandler / CutawayClassifier: Ground / Above / Below / Outside classification
- BoundaryWalker: Forward walk along a polygon's top surface
"""

from terrain_pathing.core.boundary_walker import BoundaryWalker
from terrain_pathing.core.cutaway_classifier import (
    CutawayClassifier,
    CutawayHandler,
    ElevationReading,
    SegmentPiece,
    Support,
)
from terrain_pathing.core.cutaway_projector import CutawayProjector
from terrain_pathing.core.cutaway_transform import CutawayTransform
from terrain_pathing.core.geometry import CutawayGeometry

__all__ = [
    # Coordinates
    "CutawayTransform",
    "CutawayGeometry",
    # Projection
    "CutawayProjector",
    # Classification
    "CutawayHandler",
    "CutawayClassifier",
    "ElevationReading",
    "SegmentPiece",
    "Support",
    # Walking
    "BoundaryWalker",
]
