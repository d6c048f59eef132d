"""Shared pytest fixtures for terrain_pathing tests.

Provides reusable regions, cutaway polygons and builders for all tests.
All fixtures use explicit values with documented rationale.

COORDINATE SYSTEM:
    Travel segments run along the world x axis at y = 0, so the cutaway x
    of a world point is simply its x plus the segment padding (1.0). The
    scene floor sits at elevation 0 unless noted.
"""

import pytest
from shapely.geometry import box

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.core.cutaway_classifier import CutawayClassifier, CutawayHandler
from terrain_pathing.generators.path_builder import TerrainPathBuilder
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevated_point import ElevatedPoint
from terrain_pathing.model.terrain_region import PlateauRegion, RampRegion

MIN_ELEV = CutawayConfig.MIN_ELEV


# =============================================================================
# REGIONS
# =============================================================================


@pytest.fixture
def plateau() -> PlateauRegion:
    """Flat plateau spanning x in [10, 50] at elevation 20.

    Straddles the y = 0 travel line so every test segment crosses it.
    """
    return PlateauRegion(shape=box(10, -10, 50, 10), elevation=20.0, name="plateau")


@pytest.fixture
def second_plateau() -> PlateauRegion:
    """Plateau spanning x in [70, 90] at elevation 15, leaving a floor gap [50, 70]."""
    return PlateauRegion(shape=box(70, -10, 90, 10), elevation=15.0, name="second plateau")


@pytest.fixture
def floating_platform() -> PlateauRegion:
    """Platform hovering over the floor: x in [40, 60], solid between 15 and 25."""
    return PlateauRegion(shape=box(40, -10, 60, 10), elevation=25.0, bottom=15.0, name="platform")


@pytest.fixture
def ramp() -> RampRegion:
    """Continuous ramp over x in [10, 30], rising eastward from 0 to 10."""
    return RampRegion(shape=box(10, -10, 30, 10), ramp_floor=0.0, plateau_elevation=10.0, name="ramp")


@pytest.fixture
def stairs() -> RampRegion:
    """Stairs over x in [10, 30], floor 10 to plateau 25 in steps of 5.

    Cutpoints at t = 1/4, 2/4, 3/4 -> x = 15, 20, 25 with elevations 15, 20, 25.
    """
    return RampRegion(
        shape=box(10, -10, 30, 10),
        ramp_floor=10.0,
        plateau_elevation=25.0,
        step_size=5.0,
        name="stairs",
    )


@pytest.fixture
def low_stairs() -> RampRegion:
    """Stairs over x in [10, 30] rising from the floor: treads 0, 5, 10, 15 with risers at x = 15, 20, 25."""
    return RampRegion(
        shape=box(10, -10, 30, 10),
        ramp_floor=0.0,
        plateau_elevation=15.0,
        step_size=5.0,
        name="low stairs",
    )


@pytest.fixture
def ledge_base() -> PlateauRegion:
    """Plateau at elevation 18 over x in [40, 60], tucked under the ledge."""
    return PlateauRegion(shape=box(40, -10, 60, 10), elevation=18.0, name="ledge base")


@pytest.fixture
def ledge() -> PlateauRegion:
    """Slab between 15 and 25 over x in [30, 70], overlapping the ledge base top.

    Merged with the base it overhangs on both sides: the left lip spans x in
    [30, 40] above open air.
    """
    return PlateauRegion(shape=box(30, -10, 70, 10), elevation=25.0, bottom=15.0, name="ledge")


# =============================================================================
# CUTAWAY POLYGONS
# =============================================================================


@pytest.fixture
def terrace_polygon() -> CutawayPolygon:
    """Plateau cutaway merged with its floor: the plateau fixture seen along y = 0.

    Top surface: (0, 0) -> (11, 0) -> (11, 20) -> (51, 20) -> (51, 0) -> (62, 0)
    """
    return CutawayPolygon.from_coords(
        [(0, 0), (11, 0), (11, 20), (51, 20), (51, 0), (62, 0), (62, MIN_ELEV), (0, MIN_ELEV)]
    )


@pytest.fixture
def overhang_polygon() -> CutawayPolygon:
    """Block with a lip overhanging its left wall.

    The wall at x = 20 rises from 0 to 10, where the lip underside turns
    back to x = 10. The lip top at 20 spans x in [10, 40].
    """
    return CutawayPolygon.from_coords(
        [
            (0, 0),
            (20, 0),
            (20, 10),
            (10, 10),
            (10, 20),
            (40, 20),
            (40, 0),
            (50, 0),
            (50, MIN_ELEV),
            (0, MIN_ELEV),
        ]
    )


@pytest.fixture
def terrace_handler(terrace_polygon: CutawayPolygon) -> CutawayHandler:
    return CutawayHandler(polygon=terrace_polygon)


@pytest.fixture
def terrace_classifier(terrace_polygon: CutawayPolygon) -> CutawayClassifier:
    return CutawayClassifier(polygons=[terrace_polygon])


# =============================================================================
# BUILDERS AND POINTS
# =============================================================================


@pytest.fixture
def plateau_builder(plateau: PlateauRegion) -> TerrainPathBuilder:
    """Builder over the single plateau with the scene floor at 0."""
    return TerrainPathBuilder(regions=[plateau], scene_floor=0.0)


@pytest.fixture
def two_plateau_builder(plateau: PlateauRegion, second_plateau: PlateauRegion) -> TerrainPathBuilder:
    return TerrainPathBuilder(regions=[plateau, second_plateau], scene_floor=0.0)


@pytest.fixture
def ledge_builder(ledge_base: PlateauRegion, ledge: PlateauRegion) -> TerrainPathBuilder:
    return TerrainPathBuilder(regions=[ledge_base, ledge], scene_floor=0.0)


@pytest.fixture
def low_stairs_builder(low_stairs: RampRegion) -> TerrainPathBuilder:
    return TerrainPathBuilder(regions=[low_stairs], scene_floor=0.0)


@pytest.fixture
def origin() -> ElevatedPoint:
    return ElevatedPoint(x=0.0, y=0.0, elevation=0.0)
