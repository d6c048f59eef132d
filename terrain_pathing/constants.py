"""Configuration constants for Terrain Pathing.

All tunable parameters of the cutaway path planner are centralized here.

Classes:
    CutawayConfig: Cutaway space sentinels and numeric tolerance
    PathConfig: Path construction limits and verification bounds
    RampConfig: Defaults for ramp and stairs regions
"""


class CutawayConfig:
    """Cutaway space parameters (x = distance along segment, y = elevation)."""

    # Sentinel elevations for unbounded region bottoms/tops and floor fillers
    MIN_ELEV = -1e6
    MAX_ELEV = 1e6

    # Distance the travel segment is extended on both ends before projection.
    # Keeps the cutaway wider than the path so the walk never hits the cutoff.
    SEGMENT_PADDING = 1.0

    # Absolute tolerance for coordinate comparisons in cutaway space
    EPSILON = 1e-6


class PathConfig:
    """Path construction limits."""

    # Iteration cap for the walking loop and the anchor passes
    MAX_ITER = 10_000

    # Verification bounds for a constructed 2D path
    MAX_WAYPOINTS = 9_999
    MAX_ABS_ELEVATION = 1e5


class RampConfig:
    """Ramp and stairs defaults."""

    # Direction of increasing elevation, degrees counterclockwise from +x
    DEFAULT_DIRECTION_DEG = 0.0

    # Zero step size = continuous ramp (no stairs)
    DEFAULT_STEP_SIZE = 0.0


# Sanity checks (module-level assertion)
assert CutawayConfig.MIN_ELEV < -PathConfig.MAX_ABS_ELEVATION, "Floor sentinel must sit below valid path elevations"
assert CutawayConfig.MAX_ELEV > PathConfig.MAX_ABS_ELEVATION, "Ceiling sentinel must sit above valid path elevations"
assert CutawayConfig.SEGMENT_PADDING > CutawayConfig.EPSILON
