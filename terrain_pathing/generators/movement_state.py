"""State machine for the walking path builder.

Uses python-statemachine to keep the agent's vertical situation explicit:

States:
    GROUND: Standing on a walking surface (initial)
    ABOVE: In open air over a supporting surface
    BELOW: Inside solid terrain

Transitions:
    GROUND -> ABOVE: lose_footing (the walk ended at a drop)
    GROUND -> BELOW: sink (the walk ended against a wall or under an overhang)
    ABOVE -> GROUND: fall (vertical move down to the support)
    BELOW -> GROUND: rise (vertical move up to the surface)
    GROUND -> GROUND: walk (extend the path along the boundary)

Waypoints are collected on the WalkContext model by the before_* hooks, so
the builder only decides which event to send.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.elevation_location import ElevationLocation

logger = logging.getLogger(__name__)


@dataclass
class WalkContext:
    """Model of the walking state machine.

    Attributes:
        waypoints: Cutaway path built so far (first element is the start)
        falls: Number of vertical moves down
        rises: Number of vertical moves up

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: Optional[str] = None
    waypoints: list[CutawayPoint] = field(default_factory=list)
    falls: int = 0
    rises: int = 0

    @property
    def current(self) -> CutawayPoint:
        return self.waypoints[-1]

    def push(self, point: CutawayPoint) -> None:
        """Append a waypoint unless it duplicates the last one."""
        if self.waypoints and self.waypoints[-1].almost_equal(point):
            return
        self.waypoints.append(point)

    def __repr__(self) -> str:
        return (
            f"WalkContext(state={self.state}, waypoints={len(self.waypoints)}, "
            f"falls={self.falls}, rises={self.rises})"
        )


class MovementStateMachine(StateMachine):
    """Ground / Above / Below state machine driving the walking loop.

    States:
        ground: On a walking surface
        above: Over a support, must fall
        below: Inside solid, must rise
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    ground = State("Ground", initial=True)
    above = State("Above")
    below = State("Below")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    lose_footing = ground.to(above)
    sink = ground.to(below)
    fall = above.to(ground)
    rise = below.to(ground)
    walk = ground.to(ground)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_ground(self) -> bool:
        return self.ground.is_active

    @property
    def is_above(self) -> bool:
        return self.above.is_active

    @property
    def is_below(self) -> bool:
        return self.below.is_active

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_fall(self, elevation: float) -> None:
        """Action before falling: vertical move down to the support."""
        current = self.context.current
        self.context.push(CutawayPoint(x=current.x, y=elevation))
        self.context.falls += 1

    def before_rise(self, elevation: float) -> None:
        """Action before rising: vertical move up to the top of the solid."""
        current = self.context.current
        self.context.push(CutawayPoint(x=current.x, y=elevation))
        self.context.rises += 1

    def before_walk(self, points: list[CutawayPoint]) -> None:
        """Action before walking: extend the path with boundary points."""
        for point in points:
            self.context.push(point)

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: Optional[WalkContext] = None, start_value: Optional[str] = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value
        """
        model = context or WalkContext()
        super().__init__(model=model, start_value=start_value)

    @property
    def context(self) -> WalkContext:
        """Alias for model."""
        return self.model

    def locate(self, location: ElevationLocation) -> bool:
        """Move from GROUND to the state matching a classification.

        Returns:
            True if a transition happened or none was needed.
        """
        if location is ElevationLocation.ABOVE:
            return self.try_transition("lose_footing")
        if location is ElevationLocation.BELOW:
            return self.try_transition("sink")
        return self.is_ground

    def settle(self, elevation: float) -> bool:
        """Move back to GROUND from ABOVE or BELOW at the given elevation."""
        if self.is_above:
            return self.try_transition("fall", elevation=elevation)
        if self.is_below:
            return self.try_transition("rise", elevation=elevation)
        return True

    def get_state_name(self) -> str:
        return self.current_state.name

    def __repr__(self) -> str:
        return f"MovementStateMachine(state={self.get_state_name()}, model={self.context!r})"

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False
