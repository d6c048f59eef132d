"""Tests for terrain_pathing path generators.

Tests: MovementStateMachine, BurrowingShortcuts, FlyingShortcuts, TerrainPathBuilder
Focus: Walking, burrowing and flying paths over plateaus, stairs and floating platforms

Note: Fixtures are defined in conftest.py (plateau, floating_platform, terrace_classifier).
"""

import logging
import math

import pytest
from hypothesis import given, settings, strategies as st
from shapely.geometry import box
from statemachine.exceptions import TransitionNotAllowed

from terrain_pathing.constants import CutawayConfig
from terrain_pathing.core.cutaway_classifier import CutawayClassifier
from terrain_pathing.generators.movement_state import MovementStateMachine, WalkContext
from terrain_pathing.generators.path_builder import PathVerificationError, TerrainPathBuilder
from terrain_pathing.generators.shortcut_optimizer import (
    Anchor,
    BurrowingShortcuts,
    FlyingShortcuts,
    ShortcutOptimizer,
    move_type,
)
from terrain_pathing.model.cutaway_point import CutawayPoint
from terrain_pathing.model.cutaway_polygon import CutawayPolygon
from terrain_pathing.model.elevated_point import ElevatedPoint
from terrain_pathing.model.elevation_location import ElevationLocation, MovementDiscipline
from terrain_pathing.model.terrain_region import PlateauRegion, RampRegion

WALKING = MovementDiscipline.WALKING
FLYING = MovementDiscipline.FLYING
BURROWING = MovementDiscipline.BURROWING


def P(x: float, y: float) -> CutawayPoint:
    return CutawayPoint(x=x, y=y)


def along_x(x: float, elevation: float = 0.0) -> ElevatedPoint:
    return ElevatedPoint(x=x, y=0.0, elevation=elevation)


def world_path(path: list[ElevatedPoint]) -> list[tuple[float, float]]:
    """(x, elevation) pairs of a path along the y = 0 line, rounded for comparison."""
    return [(round(pt.x, 6), round(pt.elevation, 6)) for pt in path]


TERRACE_WALK = [P(1, 0), P(11, 0), P(11, 20), P(51, 20), P(51, 0), P(61, 0)]


# =============================================================================
# MOVEMENT STATE MACHINE
# =============================================================================


class TestMovementStateMachine:
    """MovementStateMachine - ground / above / below transitions."""

    @pytest.fixture
    def sm(self) -> MovementStateMachine:
        return MovementStateMachine(context=WalkContext(waypoints=[P(0, 10)]))

    def test_starts_on_ground(self, sm: MovementStateMachine) -> None:
        assert sm.is_ground
        assert sm.get_state_name() == "Ground"

    def test_fall_pushes_vertical_waypoint(self, sm: MovementStateMachine) -> None:
        assert sm.locate(ElevationLocation.ABOVE)
        assert sm.is_above
        assert sm.settle(0.0)
        assert sm.is_ground
        assert sm.context.waypoints == [P(0, 10), P(0, 0.0)]
        assert sm.context.falls == 1

    def test_rise_pushes_vertical_waypoint(self, sm: MovementStateMachine) -> None:
        assert sm.locate(ElevationLocation.BELOW)
        assert sm.is_below
        assert sm.settle(20.0)
        assert sm.is_ground
        assert sm.context.current == P(0, 20.0)
        assert sm.context.rises == 1

    def test_locate_ground_needs_no_transition(self, sm: MovementStateMachine) -> None:
        assert sm.locate(ElevationLocation.GROUND)
        assert sm.is_ground

    def test_settle_on_ground_is_noop(self, sm: MovementStateMachine) -> None:
        assert sm.settle(5.0)
        assert sm.context.waypoints == [P(0, 10)]

    def test_walk_extends_without_duplicates(self, sm: MovementStateMachine) -> None:
        assert sm.try_transition("walk", points=[P(0, 10), P(5, 10), P(5, 10), P(8, 12)])
        assert sm.context.waypoints == [P(0, 10), P(5, 10), P(8, 12)]

    def test_fall_from_ground_not_allowed(self, sm: MovementStateMachine) -> None:
        with pytest.raises(TransitionNotAllowed):
            sm.fall(elevation=0.0)

    def test_walk_while_above_not_allowed(self, sm: MovementStateMachine) -> None:
        sm.locate(ElevationLocation.ABOVE)
        with pytest.raises(TransitionNotAllowed):
            sm.walk(points=[P(5, 10)])

    def test_try_transition_reports_failure(self, sm: MovementStateMachine) -> None:
        assert not sm.try_transition("rise", elevation=5.0)
        assert sm.is_ground
        assert sm.context.waypoints == [P(0, 10)]

    def test_repr_names_state(self, sm: MovementStateMachine) -> None:
        assert "Ground" in repr(sm)


# =============================================================================
# SHORTCUT OPTIMIZER
# =============================================================================


class TestMoveType:
    """move_type - direction of a single move."""

    def test_forward_is_ground(self) -> None:
        assert move_type(P(0, 0), P(5, 10)) is ElevationLocation.GROUND

    def test_up_is_below(self) -> None:
        assert move_type(P(5, 0), P(5, 10)) is ElevationLocation.BELOW

    def test_down_is_above(self) -> None:
        assert move_type(P(5, 10), P(5, 0)) is ElevationLocation.ABOVE


class TestAnchor:
    """Anchor - stale anchors are detected by point mismatch."""

    def test_valid_anchor(self) -> None:
        assert Anchor(index=1, point=P(11, 0)).is_valid(TERRACE_WALK)

    def test_stale_anchor(self) -> None:
        assert not Anchor(index=2, point=P(11, 0)).is_valid(TERRACE_WALK)
        assert not Anchor(index=10, point=P(11, 0)).is_valid(TERRACE_WALK)


class TestBurrowingShortcuts:
    """BurrowingShortcuts - straight moves through solid."""

    def test_legal_through_solid(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert optimizer.is_legal(P(11, 0), P(51, 20))
        assert optimizer.is_legal(P(1, 0), P(61, 0))

    def test_illegal_through_air(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert not optimizer.is_legal(P(1, 0), P(51, 20))
        assert not optimizer.is_legal(P(1, 30), P(61, 30))

    def test_tunnels_through_plateau(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert optimizer.optimize(TERRACE_WALK) == [P(1, 0), P(61, 0)]

    def test_input_not_modified(self, terrace_classifier: CutawayClassifier) -> None:
        walk = list(TERRACE_WALK)
        BurrowingShortcuts(classifier=terrace_classifier).optimize(walk)
        assert walk == TERRACE_WALK

    def test_end_below_is_reachable(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert optimizer.can_reach_end([P(1, 0), P(31, 20)], P(31, 5))

    def test_end_above_is_not_appended(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert not optimizer.can_reach_end([P(1, 0), P(31, 20)], P(31, 30))

    def test_short_path_returned_unchanged(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = BurrowingShortcuts(classifier=terrace_classifier)
        assert optimizer.optimize([P(1, 0), P(5, 0)]) == [P(1, 0), P(5, 0)]


class TestFlyingShortcuts:
    """FlyingShortcuts - straight moves through open air."""

    def test_grazing_surface_is_legal(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = FlyingShortcuts(classifier=terrace_classifier)
        assert optimizer.is_legal(P(1, 20), P(61, 20))
        assert optimizer.is_legal(P(1, 30), P(61, 30))

    def test_illegal_through_solid(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = FlyingShortcuts(classifier=terrace_classifier)
        assert not optimizer.is_legal(P(1, 0), P(61, 0))
        assert not optimizer.is_legal(P(11, 20), P(61, 0))

    def test_cuts_corners_over_plateau(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = FlyingShortcuts(classifier=terrace_classifier)
        assert optimizer.optimize(TERRACE_WALK) == [P(1, 0), P(11, 20), P(51, 20), P(61, 0)]

    def test_appends_reachable_end(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = FlyingShortcuts(classifier=terrace_classifier)
        path = optimizer.optimize(TERRACE_WALK, end=P(61, 10))
        assert path[-1] == P(61, 10)
        assert path[:3] == [P(1, 0), P(11, 20), P(51, 20)]

    def test_routes_around_overhang_lip(self, overhang_polygon: CutawayPolygon) -> None:
        """The walking rise through the lip becomes a climb around its underside and outer face."""
        optimizer = FlyingShortcuts(classifier=CutawayClassifier(polygons=[overhang_polygon]))
        walk = [P(1, 0), P(20, 0), P(20, 10), P(20, 20), P(40, 20), P(40, 0), P(45, 0)]
        assert not optimizer.is_legal(P(20, 10), P(20, 20))
        assert optimizer.route_around_solid(walk) == [
            P(1, 0),
            P(20, 0),
            P(20, 10),
            P(10, 10),
            P(10, 20),
            P(20, 20),
            P(40, 20),
            P(40, 0),
            P(45, 0),
        ]

    def test_route_keeps_boundary_moves(self, terrace_classifier: CutawayClassifier) -> None:
        optimizer = FlyingShortcuts(classifier=terrace_classifier)
        assert optimizer.route_around_solid(TERRACE_WALK) == TERRACE_WALK

    def test_base_class_is_abstract(self, terrace_classifier: CutawayClassifier) -> None:
        """The base pass has no legality rule and cannot be instantiated."""
        with pytest.raises(TypeError):
            ShortcutOptimizer(classifier=terrace_classifier)


# =============================================================================
# PATH BUILDER
# =============================================================================


class TestTerrainPathBuilder:
    """TerrainPathBuilder - walking, burrowing and flying over one plateau."""

    def test_rejects_non_finite_floor(self, plateau: PlateauRegion) -> None:
        with pytest.raises(ValueError):
            TerrainPathBuilder(regions=[plateau], scene_floor=math.nan)

    def test_rejects_zero_iterations(self, plateau: PlateauRegion) -> None:
        with pytest.raises(ValueError):
            TerrainPathBuilder(regions=[plateau], max_iterations=0)

    def test_walking_climbs_and_descends(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(0.0), along_x(60.0), WALKING)
        assert world_path(path) == [(0, 0), (10, 0), (10, 20), (50, 20), (50, 0), (60, 0)]

    def test_walking_keeps_exact_endpoints(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(0.0), along_x(60.0)
        path = plateau_builder.construct_path(start, end, WALKING)
        assert path[0] is start
        assert path[-1] is end

    def test_walking_falls_from_start(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(0.0, 30.0), along_x(60.0), WALKING)
        assert world_path(path) == [(0, 30), (0, 0), (10, 0), (10, 20), (50, 20), (50, 0), (60, 0)]

    def test_walking_rises_out_of_solid(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(30.0, 5.0), along_x(60.0), WALKING)
        assert world_path(path) == [(30, 5), (30, 20), (50, 20), (50, 0), (60, 0)]

    def test_walking_ends_on_surface(self, plateau_builder: TerrainPathBuilder) -> None:
        """End elevation is ignored by walking: the agent stays on the plateau top."""
        path = plateau_builder.construct_path(along_x(0.0), along_x(30.0, 40.0), WALKING)
        assert world_path(path)[-1] == (30, 20)

    def test_flying_above_terrain_is_direct(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(0.0, 30.0), along_x(60.0, 30.0)
        path = plateau_builder.construct_path(start, end, FLYING)
        assert path == [start, end]

    def test_flying_cuts_corners(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(0.0), along_x(60.0), FLYING)
        assert world_path(path) == [(0, 0), (10, 20), (50, 20), (60, 0)]

    def test_burrowing_at_floor_is_direct(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(0.0), along_x(60.0)
        path = plateau_builder.construct_path(start, end, BURROWING)
        assert path == [start, end]

    def test_burrowing_ends_inside_solid(self, plateau_builder: TerrainPathBuilder) -> None:
        end = along_x(30.0, 5.0)
        path = plateau_builder.construct_path(along_x(0.0), end, BURROWING)
        assert world_path(path) == [(0, 0), (10, 0), (30, 5)]
        assert path[-1] is end

    def test_burrowing_cannot_end_below(self, plateau: PlateauRegion, plateau_builder: TerrainPathBuilder) -> None:
        """Without can_end_below the path surfaces on the plateau top."""
        path = plateau_builder.construct_path(along_x(0.0), along_x(30.0, 5.0), BURROWING, can_end_below=False)
        assert world_path(path) == [(0, 0), (10, 0), (30, 20)]
        assert not plateau.contains(path[-1])


class TestTerrainPathBuilderFastPaths:
    """TerrainPathBuilder - cases answered without a cutaway."""

    def test_identical_points(self, plateau_builder: TerrainPathBuilder) -> None:
        point = along_x(30.0, 20.0)
        path = plateau_builder.construct_path(point, point, WALKING)
        assert path == [point, point]

    def test_unbound_agent_goes_straight(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(0.0), along_x(30.0, 5.0)
        assert plateau_builder.construct_path(start, end, FLYING | BURROWING) == [start, end]

    def test_unbound_agent_surfaces_when_not_ending_below(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(0.0), along_x(30.0, 5.0), FLYING | BURROWING, can_end_below=False)
        assert world_path(path) == [(0, 0), (30, 20)]

    def test_vertical_walking_drops_to_ground(self, plateau_builder: TerrainPathBuilder) -> None:
        path = plateau_builder.construct_path(along_x(30.0, 40.0), along_x(30.0, 50.0), WALKING)
        assert world_path(path) == [(30, 40), (30, 20)]

    def test_vertical_flying_keeps_end(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(30.0, 40.0), along_x(30.0, 50.0)
        assert plateau_builder.construct_path(start, end, FLYING) == [start, end]

    def test_vertical_burrowing_into_solid(self, plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(30.0, 40.0), along_x(30.0, 5.0)
        assert plateau_builder.construct_path(start, end, BURROWING) == [start, end]
        surfaced = plateau_builder.construct_path(start, end, BURROWING, can_end_below=False)
        assert world_path(surfaced) == [(30, 40), (30, 20)]

    def test_no_terrain_crossed(self) -> None:
        builder = TerrainPathBuilder(regions=[PlateauRegion(shape=box(100, 100, 110, 110), elevation=5.0)])
        start, end = along_x(0.0), along_x(60.0, 30.0)
        assert builder.construct_path(start, end, WALKING) == [start, end]
        assert builder.cutaway(start, end) is None

    def test_no_regions(self) -> None:
        start, end = along_x(0.0, 10.0), along_x(60.0)
        assert TerrainPathBuilder(regions=[]).construct_path(start, end, WALKING) == [start, end]


class TestTerrainPathBuilderScenes:
    """TerrainPathBuilder - multi-region scenes."""

    def test_walking_over_two_plateaus(self, two_plateau_builder: TerrainPathBuilder) -> None:
        path = two_plateau_builder.construct_path(along_x(0.0), along_x(100.0), WALKING)
        assert world_path(path) == [
            (0, 0),
            (10, 0),
            (10, 20),
            (50, 20),
            (50, 0),
            (70, 0),
            (70, 15),
            (90, 15),
            (90, 0),
            (100, 0),
        ]

    def test_burrowing_under_two_plateaus(self, two_plateau_builder: TerrainPathBuilder) -> None:
        start, end = along_x(0.0), along_x(100.0)
        assert two_plateau_builder.construct_path(start, end, BURROWING) == [start, end]

    def test_walking_up_stairs(self, stairs: RampRegion) -> None:
        builder = TerrainPathBuilder(regions=[stairs], scene_floor=10.0)
        path = builder.construct_path(along_x(0.0, 10.0), along_x(40.0, 10.0), WALKING)
        assert world_path(path) == [
            (0, 10),
            (15, 10),
            (15, 15),
            (20, 15),
            (20, 20),
            (25, 20),
            (25, 25),
            (30, 25),
            (30, 10),
            (40, 10),
        ]

    def test_walking_off_floating_platform(self, floating_platform: PlateauRegion) -> None:
        builder = TerrainPathBuilder(regions=[floating_platform])
        path = builder.construct_path(along_x(45.0, 25.0), along_x(80.0), WALKING)
        assert world_path(path) == [(45, 25), (60, 25), (60, 0), (80, 0)]

    def test_iteration_cap_returns_partial_path(
        self, floating_platform: PlateauRegion, caplog: pytest.LogCaptureFixture
    ) -> None:
        builder = TerrainPathBuilder(regions=[floating_platform], max_iterations=1)
        with caplog.at_level(logging.ERROR):
            path = builder.construct_path(along_x(45.0, 25.0), along_x(80.0), WALKING)
        assert world_path(path) == [(45, 25), (60, 25), (60, 15)]
        assert "iteration cap" in caplog.text

    def test_flying_onto_floating_platform(self, floating_platform: PlateauRegion) -> None:
        """The end hangs over a platform the forward walk passes under; a reverse walk reaches it."""
        builder = TerrainPathBuilder(regions=[floating_platform])
        end = along_x(50.0, 30.0)
        path = builder.construct_path(along_x(0.0), end, FLYING)
        assert world_path(path) == [(0, 0), (40, 25), (50, 30)]
        assert path[-1] is end


class TestLedgeAndStairsEndpoints:
    """TerrainPathBuilder - overhanging ledges and ends placed exactly on a riser."""

    def test_walking_cuts_through_ledge(self, ledge_builder: TerrainPathBuilder) -> None:
        path = ledge_builder.construct_path(along_x(0.0), along_x(80.0), WALKING)
        assert world_path(path) == [(0, 0), (40, 0), (40, 25), (70, 25), (70, 0), (80, 0)]

    def test_flying_goes_around_ledge(self, ledge_builder: TerrainPathBuilder) -> None:
        """The flight climbs past the lip's outer corner instead of rising through it."""
        start, end = along_x(0.0), along_x(80.0)
        path = ledge_builder.construct_path(start, end, FLYING)
        assert world_path(path) == [(0, 0), (30, 25), (70, 25), (80, 0)]

        frame = ledge_builder.cutaway(start, end)
        assert frame is not None
        for a, b in zip(path, path[1:]):
            mid = frame.to_2d(a).midpoint(frame.to_2d(b))
            assert frame.classifier.classify(mid).location is not ElevationLocation.BELOW

    @pytest.mark.parametrize("end_elev", [0.0, 2.0, 7.0])
    def test_walking_to_riser_ends_on_tread(self, low_stairs_builder: TerrainPathBuilder, end_elev: float) -> None:
        """An end at the riser x = 20 climbs the riser instead of stopping at its foot."""
        path = low_stairs_builder.construct_path(along_x(0.0), along_x(20.0, end_elev), WALKING)
        assert world_path(path) == [(0, 0), (15, 0), (15, 5), (20, 5), (20, 10)]

    def test_burrowing_to_riser_surfaces(self, low_stairs_builder: TerrainPathBuilder, low_stairs: RampRegion) -> None:
        end = along_x(20.0, 2.0)
        path = low_stairs_builder.construct_path(along_x(0.0), end, BURROWING, can_end_below=False)
        assert world_path(path) == [(0, 0), (15, 0), (20, 5), (20, 10)]
        assert not low_stairs.contains(path[-1])

        frame = low_stairs_builder.cutaway(along_x(0.0), end)
        assert frame is not None
        assert frame.classifier.classify(frame.to_2d(path[-1])).location is ElevationLocation.GROUND

    def test_burrowing_to_riser_may_end_below(self, low_stairs_builder: TerrainPathBuilder) -> None:
        end = along_x(20.0, 2.0)
        path = low_stairs_builder.construct_path(along_x(0.0), end, BURROWING)
        assert world_path(path) == [(0, 0), (15, 0), (20, 2)]
        assert path[-1] is end


class TestNearestGroundElevation:
    """TerrainPathBuilder.nearest_ground_elevation - settling a point vertically."""

    def test_falls_to_plateau_top(self, plateau_builder: TerrainPathBuilder) -> None:
        assert plateau_builder.nearest_ground_elevation(along_x(30.0, 50.0)) == 20.0

    def test_falls_to_scene_floor(self, plateau_builder: TerrainPathBuilder) -> None:
        assert plateau_builder.nearest_ground_elevation(along_x(5.0, 50.0)) == 0.0

    def test_climbs_out_of_solid(self, plateau_builder: TerrainPathBuilder) -> None:
        assert plateau_builder.nearest_ground_elevation(along_x(30.0, 5.0)) == 20.0

    def test_burrowing_stays_inside(self, plateau_builder: TerrainPathBuilder) -> None:
        assert plateau_builder.nearest_ground_elevation(along_x(30.0, 5.0), burrowing=True) == 5.0

    def test_under_floating_platform(self, floating_platform: PlateauRegion) -> None:
        builder = TerrainPathBuilder(regions=[floating_platform])
        assert builder.nearest_ground_elevation(along_x(50.0, 10.0)) == 0.0
        assert builder.nearest_ground_elevation(along_x(50.0, 40.0)) == 25.0


class TestPathVerification:
    """TerrainPathBuilder.verify_path_2d and the direct-line fallback."""

    def test_empty_path(self) -> None:
        with pytest.raises(PathVerificationError):
            TerrainPathBuilder.verify_path_2d([])

    def test_nan_coordinates(self) -> None:
        with pytest.raises(PathVerificationError):
            TerrainPathBuilder.verify_path_2d([P(0, 0), P(math.nan, 0)])

    def test_elevation_out_of_range(self) -> None:
        with pytest.raises(PathVerificationError):
            TerrainPathBuilder.verify_path_2d([P(0, 0), P(1, CutawayConfig.MIN_ELEV)])

    def test_too_many_waypoints(self) -> None:
        with pytest.raises(PathVerificationError):
            TerrainPathBuilder.verify_path_2d([P(i, 0) for i in range(10_000)])

    def test_valid_path_passes(self) -> None:
        TerrainPathBuilder.verify_path_2d(TERRACE_WALK)

    def test_failed_verification_falls_back_to_direct_line(
        self,
        plateau_builder: TerrainPathBuilder,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.setattr(plateau_builder, "construct_walking_path_2d", lambda classifier, a2d, b2d: [])
        start, end = along_x(0.0), along_x(60.0)
        with caplog.at_level(logging.ERROR):
            path = plateau_builder.construct_path(start, end, WALKING)
        assert path == [start, end]
        assert "failed verification" in caplog.text


class TestTerrainPathBuilderHypothesis:
    """Property-based tests using Hypothesis.

    Note: These tests don't use fixtures since Hypothesis doesn't work well
    with function-scoped pytest fixtures. The plateau is built inline.
    """

    @staticmethod
    def _builder() -> TerrainPathBuilder:
        plateau = PlateauRegion(shape=box(10, -10, 50, 10), elevation=20.0)
        return TerrainPathBuilder(regions=[plateau], scene_floor=0.0)

    @given(
        start_elev=st.floats(min_value=0.0, max_value=40.0),
        end_elev=st.floats(min_value=0.0, max_value=40.0),
        discipline=st.sampled_from([WALKING, FLYING, BURROWING]),
    )
    @settings(max_examples=30, deadline=None)
    def test_progress_is_monotonic(self, start_elev: float, end_elev: float, discipline: MovementDiscipline) -> None:
        """Waypoints never step back along the segment and reach the end's ground location."""
        start, end = along_x(0.0, start_elev), along_x(60.0, end_elev)
        path = self._builder().construct_path(start, end, discipline)
        assert path[0] is start
        assert all(b.x >= a.x - 1e-6 for a, b in zip(path, path[1:]))
        assert path[-1].x == pytest.approx(60.0)

    @given(
        start_elev=st.floats(min_value=0.0, max_value=40.0),
        end_elev=st.floats(min_value=0.0, max_value=40.0),
    )
    @settings(max_examples=30, deadline=None)
    def test_flying_never_enters_solid(self, start_elev: float, end_elev: float) -> None:
        builder = self._builder()
        start, end = along_x(0.0, start_elev), along_x(60.0, end_elev)
        path = builder.construct_path(start, end, FLYING)
        frame = builder.cutaway(start, end)
        assert frame is not None
        for a, b in zip(path, path[1:]):
            a2d, b2d = frame.to_2d(a), frame.to_2d(b)
            for t in (0.25, 0.5, 0.75):
                sample = P(a2d.x + (b2d.x - a2d.x) * t, a2d.y + (b2d.y - a2d.y) * t)
                assert frame.classifier.classify(sample).location is not ElevationLocation.BELOW

    @given(
        end_x=st.floats(min_value=10.0, max_value=95.0),
        end_elev=st.floats(min_value=0.0, max_value=40.0),
    )
    @settings(max_examples=30, deadline=None)
    def test_burrowing_never_leaves_ground(self, end_x: float, end_elev: float) -> None:
        """Without can_end_below, a burrow from the floor never crosses open air and ends on a surface."""
        builder = self._builder()
        start, end = along_x(0.0), along_x(end_x, end_elev)
        path = builder.construct_path(start, end, BURROWING, can_end_below=False)
        frame = builder.cutaway(start, end)
        assert frame is not None
        for a, b in zip(path, path[1:]):
            a2d, b2d = frame.to_2d(a), frame.to_2d(b)
            for t in (0.25, 0.5, 0.75):
                sample = P(a2d.x + (b2d.x - a2d.x) * t, a2d.y + (b2d.y - a2d.y) * t)
                assert frame.classifier.classify(sample).location is not ElevationLocation.ABOVE
        assert frame.classifier.classify(frame.to_2d(path[-1])).location is not ElevationLocation.BELOW

    @given(
        end_x=st.floats(min_value=45.0, max_value=95.0),
        end_elev=st.floats(min_value=0.0, max_value=40.0),
    )
    @settings(max_examples=30, deadline=None)
    def test_flying_never_enters_ledge(self, end_x: float, end_elev: float) -> None:
        """Flights past an overhanging ledge stay out of the solid."""
        base = PlateauRegion(shape=box(40, -10, 60, 10), elevation=18.0)
        ledge = PlateauRegion(shape=box(30, -10, 70, 10), elevation=25.0, bottom=15.0)
        builder = TerrainPathBuilder(regions=[base, ledge], scene_floor=0.0)
        start, end = along_x(0.0), along_x(end_x, end_elev)
        path = builder.construct_path(start, end, FLYING)
        frame = builder.cutaway(start, end)
        assert frame is not None
        for a, b in zip(path, path[1:]):
            a2d, b2d = frame.to_2d(a), frame.to_2d(b)
            for t in (0.25, 0.5, 0.75):
                sample = P(a2d.x + (b2d.x - a2d.x) * t, a2d.y + (b2d.y - a2d.y) * t)
                assert frame.classifier.classify(sample).location is not ElevationLocation.BELOW

    @given(
        end_x=st.sampled_from([10.0, 15.0, 20.0, 25.0, 30.0]),
        end_elev=st.floats(min_value=0.0, max_value=20.0),
        discipline=st.sampled_from([WALKING, BURROWING]),
    )
    @settings(max_examples=30, deadline=None)
    def test_stair_ends_rest_on_a_tread(self, end_x: float, end_elev: float, discipline: MovementDiscipline) -> None:
        """Ends placed on a riser's x finish on a surface, never inside the stairs."""
        stairs = RampRegion(shape=box(10, -10, 30, 10), ramp_floor=0.0, plateau_elevation=15.0, step_size=5.0)
        builder = TerrainPathBuilder(regions=[stairs], scene_floor=0.0)
        start, end = along_x(0.0), along_x(end_x, end_elev)
        path = builder.construct_path(start, end, discipline, can_end_below=False)
        frame = builder.cutaway(start, end)
        assert frame is not None
        assert path[-1].x == pytest.approx(end_x)
        assert frame.classifier.classify(frame.to_2d(path[-1])).location is not ElevationLocation.BELOW
