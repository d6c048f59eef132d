"""Path construction for walking, burrowing and flying agents.

Provides the TerrainPathBuilder facade and its building blocks:
- MovementStateMachine: Ground / Above / Below walking loop states
- ShortcutOptimizer: Anchor passes (BurrowingShortcuts, FlyingShortcuts)
"""

from terrain_pathing.generators.movement_state import MovementStateMachine, WalkContext
from terrain_pathing.generators.path_builder import (
    CutawayFrame,
    PathVerificationError,
    TerrainPathBuilder,
)
from terrain_pathing.generators.shortcut_optimizer import (
    Anchor,
    BurrowingShortcuts,
    FlyingShortcuts,
    ShortcutOptimizer,
)

__all__ = [
    # Facade
    "TerrainPathBuilder",
    "CutawayFrame",
    "PathVerificationError",
    # Walking loop
    "MovementStateMachine",
    "WalkContext",
    # Shortcuts
    "Anchor",
    "ShortcutOptimizer",
    "BurrowingShortcuts",
    "FlyingShortcuts",
]
