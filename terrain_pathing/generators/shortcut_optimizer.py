"""Anchor-based shortcut pass for burrowing and flying paths.

The walking path follows the terrain boundary. Burrowing and flying agents
may cut corners: whenever a straight move from an earlier waypoint (an
anchor) to the current waypoint is legal for the discipline, every waypoint
in between is dropped.

Moves are typed by direction:
- GROUND: forward in x (along a surface or diagonal)
- BELOW: straight up (rising out of solid)
- ABOVE: straight down (falling through air)

Burrowing records anchors on GROUND and BELOW moves and tests shortcuts on
GROUND and ABOVE moves. Flying mirrors it: anchors on GROUND and ABOVE
moves, tests on GROUND and BELOW moves. Before its pass, flying replaces
walking moves that rise through an overhang with the route around it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Optional

from terrain_pathing.constants import PathConfig
from terrain_pathing.core.boundary_walker import BoundaryWalker
from terrain_pathing.core.cutaway_classifier import CutawayClassifier
from terrain_pathing.core.geometry import CutawayGeometry
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.elevation_location import ElevationLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Anchor:
    """Waypoint recorded as a candidate start of a later shortcut.

    Attributes:
        index: Position of the waypoint in the path
        point: The waypoint itself, used to detect stale indices
    """

    index: int
    point: CutawayPoint

    def is_valid(self, path: list[CutawayPoint]) -> bool:
        """True if the path still holds this anchor's point at its index."""
        return 0 <= self.index < len(path) and path[self.index].almost_equal(self.point)


def move_type(a: CutawayPoint, b: CutawayPoint) -> ElevationLocation:
    """Direction of the move a→b as the location it starts from."""
    if not CutawayGeometry.is_vertical(a, b) and b.x > a.x:
        return ElevationLocation.GROUND
    if b.y > a.y:
        return ElevationLocation.BELOW
    return ElevationLocation.ABOVE


class ShortcutOptimizer(ABC):
    """Base anchor pass; subclasses define which moves anchor, test and are legal."""

    ANCHOR_MOVES: ClassVar[frozenset[ElevationLocation]] = frozenset()
    TEST_MOVES: ClassVar[frozenset[ElevationLocation]] = frozenset()
    END_LOCATION: ClassVar[Optional[ElevationLocation]] = None

    def __init__(self, classifier: CutawayClassifier, max_iterations: int = PathConfig.MAX_ITER) -> None:
        self.classifier = classifier
        self.max_iterations = max_iterations

    @abstractmethod
    def is_legal(self, a: CutawayPoint, b: CutawayPoint) -> bool:
        """True if the straight move a→b is allowed for the discipline."""
        raise NotImplementedError

    def can_reach_end(self, path: list[CutawayPoint], end: CutawayPoint) -> bool:
        """True if the end point lies off-surface and a direct move from the path end reaches it."""
        if not path or path[-1].almost_equal(end):
            return False
        if self.classifier.classify(end).location is not self.END_LOCATION:
            return False
        return self.is_legal(path[-1], end)

    def optimize(
        self,
        path: list[CutawayPoint],
        end: Optional[CutawayPoint] = None,
        allow_end: bool = True,
    ) -> list[CutawayPoint]:
        """Replace boundary detours with legal straight moves.

        Args:
            path: Walking path in cutaway space
            end: Target point; appended first when it is off-surface and reachable
            allow_end: Whether an off-surface end may be appended

        Returns:
            New, shortcut path. The input list is not modified.
        """
        path = list(path)
        if end is not None and allow_end and self.can_reach_end(path, end):
            path.append(end)
        if len(path) < 3:
            return path

        anchors: list[Anchor] = []
        start_location = self.classifier.classify(path[0]).location
        if start_location in self.ANCHOR_MOVES:
            anchors.append(Anchor(index=0, point=path[0]))

        i = 1
        for _ in range(self.max_iterations):
            if i >= len(path):
                break
            move = move_type(path[i - 1], path[i])
            if move in self.TEST_MOVES:
                anchor = self._oldest_legal_anchor(anchors=anchors, path=path, i=i)
                if anchor is not None:
                    logger.debug(f"Shortcut {anchor.point} -> {path[i]} drops {i - anchor.index - 1} waypoint(s)")
                    del path[anchor.index + 1 : i]
                    anchors = [a for a in anchors if a.index <= anchor.index]
                    i = anchor.index + 1
                    move = move_type(path[i - 1], path[i])
            if move in self.ANCHOR_MOVES and not (anchors and anchors[-1].index == i - 1):
                anchors.append(Anchor(index=i - 1, point=path[i - 1]))
            i += 1
        else:
            logger.error(
                f"Shortcut pass hit the iteration cap of {self.max_iterations} "
                f"from {path[0]} to {path[-1]}; keeping partial result"
            )
        return path

    def _oldest_legal_anchor(self, anchors: list[Anchor], path: list[CutawayPoint], i: int) -> Optional[Anchor]:
        for anchor in anchors:
            if anchor.index >= i - 1 or not anchor.is_valid(path):
                continue
            if self.is_legal(anchor.point, path[i]):
                return anchor
        return None


class BurrowingShortcuts(ShortcutOptimizer):
    """Shortcuts that stay within solid terrain or on its surface."""

    ANCHOR_MOVES = frozenset({ElevationLocation.GROUND, ElevationLocation.BELOW})
    TEST_MOVES = frozenset({ElevationLocation.GROUND, ElevationLocation.ABOVE})
    END_LOCATION = ElevationLocation.BELOW

    def is_legal(self, a: CutawayPoint, b: CutawayPoint) -> bool:
        """Every stretch between boundary crossings is inside a polygon or on its boundary."""
        for piece in self.classifier.segment_pieces(a, b):
            if piece.inside_count >= 1:
                continue
            if piece.location in (ElevationLocation.GROUND, ElevationLocation.BELOW):
                continue
            return False
        return True


class FlyingShortcuts(ShortcutOptimizer):
    """Shortcuts through open air, grazing surfaces allowed."""

    ANCHOR_MOVES = frozenset({ElevationLocation.GROUND, ElevationLocation.ABOVE})
    TEST_MOVES = frozenset({ElevationLocation.GROUND, ElevationLocation.BELOW})
    END_LOCATION = ElevationLocation.ABOVE

    def is_legal(self, a: CutawayPoint, b: CutawayPoint) -> bool:
        """No stretch between boundary crossings lies in solid."""
        return all(
            piece.inside_count == 0 and piece.location is not ElevationLocation.BELOW
            for piece in self.classifier.segment_pieces(a, b)
        )

    def route_around_solid(self, path: list[CutawayPoint]) -> list[CutawayPoint]:
        """Replace moves through solid with the boundary around the solid.

        Walking paths cut straight up through overhangs; a flying agent
        instead follows the lip's underside and outer face to the same point.
        Moves that start off the boundary are kept as they are.
        """
        if not path:
            return []
        routed = [path[0]]
        for a, b in zip(path, path[1:]):
            if not self.is_legal(a, b):
                detour = self._detour(a, b)
                if detour is None:
                    logger.warning(f"No boundary route around the solid between {a} and {b}")
                elif detour:
                    logger.debug(f"Flying around the solid between {a} and {b} via {len(detour)} waypoint(s)")
                    routed.extend(detour)
            routed.append(b)
        return routed

    def _detour(self, a: CutawayPoint, b: CutawayPoint) -> Optional[list[CutawayPoint]]:
        for handler in self.classifier.handlers:
            route = BoundaryWalker.boundary_route(a2d=a, b2d=b, handler=handler)
            if route is not None:
                return route
        return None
