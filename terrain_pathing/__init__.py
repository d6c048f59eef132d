"""Terrain Pathing - Straight-line movement paths over vertical terrain.

Computes the waypoints an agent passes through when moving in a straight
line across plateaus, ramps and stairs:
- Cutaway projection of terrain regions along the travel segment
- Point classification against the merged cross-section
- Boundary walking with a python-statemachine driven walking loop
- Anchor shortcuts for burrowing and flying agents

Modules:
    core: Cutaway geometry (transform, projector, classifier, boundary walker)
    model: Data structures (ElevatedPoint, CutawayPolygon, TerrainRegion, StraightLinePath)
    generators: Path construction (TerrainPathBuilder, state machine, shortcut passes)

Example:
    from terrain_pathing.generators import TerrainPathBuilder
    from terrain_pathing.model import ElevatedPoint, MovementDiscipline, PlateauRegion
"""
