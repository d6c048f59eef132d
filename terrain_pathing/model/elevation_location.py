"""Elevation classification enums.

- ElevationLocation: where a cutaway point sits relative to the terrain
- VerticalSide: which kind of vertical cutaway edge a point lies on
- MovementDiscipline: how the agent treats solid terrain
"""

from enum import Enum, Flag, auto


class ElevationLocation(Enum):
    """Location of a cutaway point relative to the terrain cross-section."""

    OUTSIDE = "outside"  # Beyond the horizontal extent of the terrain
    BELOW = "below"  # Inside solid terrain (burrowing)
    GROUND = "ground"  # On a walking surface
    ABOVE = "above"  # In open air over a supporting surface (flying)


class VerticalSide(Enum):
    """Kind of vertical cutaway edge a point lies on.

    Cutaway polygons run clockwise, so a LEFT edge climbs (lower endpoint
    first, solid to its right) and a RIGHT edge drops (upper endpoint first).
    """

    NONE = "none"
    LEFT = "left"
    RIGHT = "right"


class MovementDiscipline(Flag):
    """Movement discipline for a single path build.

    FLYING | BURROWING describes an agent unbound by terrain.
    """

    WALKING = auto()
    FLYING = auto()
    BURROWING = auto()
