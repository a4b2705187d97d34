"""Tests for modular_assembly.domain.cell module."""

from __future__ import annotations

import math

import pytest

from modular_assembly.config.constants import CONNECTION_POINT_ORDER, STEM_HEX_FACTOR
from modular_assembly.domain.cell import (
    TRANSITIONS,
    Cell,
    ConnectionPoint,
    ConnectionPointOccupiedError,
    Mode,
    Pose,
    SensorState,
)


def _assert_history_is_legal(cell: Cell) -> None:
    history = cell.mode_history
    for before, after in zip(history, history[1:]):
        assert after in TRANSITIONS[before]


class TestTransitionTable:
    def test_every_mode_has_an_entry(self) -> None:
        assert set(TRANSITIONS) == set(Mode)

    def test_no_self_loops(self) -> None:
        for mode, targets in TRANSITIONS.items():
            assert mode not in targets

    def test_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            TRANSITIONS[Mode.IDLE] = frozenset()  # type: ignore[index]

    def test_known_edges(self) -> None:
        assert TRANSITIONS[Mode.IDLE] == {Mode.ATTRACT_HOME, Mode.IN_TRANSIT}
        assert TRANSITIONS[Mode.HARVEST] == {Mode.RIGID, Mode.RELEASE}
        assert Mode.IDLE not in TRANSITIONS[Mode.RIGID]


class TestModeMachine:
    def test_defaults(self) -> None:
        cell = Cell(1)
        assert cell.mode is Mode.IDLE
        assert cell.mode_history == (Mode.IDLE,)
        assert cell.structural_role == "reserve"
        assert cell.force_ownership == "idle"
        assert cell.hardware_target.magnet_grade == "N42"
        assert cell.sensor_state.field_strength == [0.0, 0.0, 0.0]

    def test_legal_transition_applies(self) -> None:
        cell = Cell(1)
        assert cell.can_transition(Mode.ATTRACT_HOME)
        assert cell.transition("attract-home") is True
        assert cell.mode is Mode.ATTRACT_HOME

    def test_illegal_transition_is_refused(self) -> None:
        cell = Cell(1)
        assert not cell.can_transition(Mode.RIGID)
        assert cell.transition(Mode.RIGID) is False
        assert cell.mode is Mode.IDLE
        assert cell.mode_history == (Mode.IDLE,)

    def test_unknown_mode_name_is_refused(self) -> None:
        cell = Cell(1, mode=Mode.RIGID)
        assert cell.can_transition("flying") is False
        assert cell.transition("flying") is False
        assert cell.mode is Mode.RIGID

    def test_self_transition_is_refused(self) -> None:
        cell = Cell(1, mode=Mode.FLEX)
        assert cell.transition(Mode.FLEX) is False


class TestTransitionPath:
    def test_already_there(self) -> None:
        assert Cell(1, mode=Mode.RIGID).transition_path(Mode.RIGID) == []

    def test_idle_to_rigid_goes_through_attract_home(self) -> None:
        assert Cell(1).transition_path(Mode.RIGID) == [Mode.ATTRACT_HOME, Mode.RIGID]

    def test_rigid_to_idle_goes_through_release(self) -> None:
        assert Cell(1, mode=Mode.RIGID).transition_path("idle") == [Mode.RELEASE, Mode.IDLE]

    def test_flex_to_harvest(self) -> None:
        assert Cell(1, mode=Mode.FLEX).transition_path(Mode.HARVEST) == [Mode.RIGID, Mode.HARVEST]

    def test_unknown_target(self) -> None:
        assert Cell(1).transition_path("flying") is None

    @pytest.mark.parametrize("start", list(Mode))
    def test_every_mode_reaches_every_other(self, start: Mode) -> None:
        for goal in Mode:
            cell = Cell(1, mode=start)
            assert cell.drive_to(goal) is True
            assert cell.mode is goal
            _assert_history_is_legal(cell)

    def test_drive_to_unknown_changes_nothing(self) -> None:
        cell = Cell(1, mode=Mode.SENSE)
        assert cell.drive_to("flying") is False
        assert cell.mode_history == (Mode.SENSE,)


class TestGeometry:
    def test_unrotated_points(self) -> None:
        cell = Cell(1, pose=Pose(10.0, 5.0, 0.0))
        left = cell.connection_world_position(ConnectionPoint.LEFT, 25.0)
        right = cell.connection_world_position("right", 25.0)
        stem = cell.connection_world_position(ConnectionPoint.STEM_TIP, 25.0)
        assert left == pytest.approx((-2.5, 5.0))
        assert right == pytest.approx((22.5, 5.0))
        assert stem == pytest.approx((10.0, 5.0 - 0.5 * 25.0 * STEM_HEX_FACTOR))

    def test_rotation_quarter_turn(self) -> None:
        cell = Cell(1, pose=Pose(0.0, 0.0, math.pi / 2))
        left = cell.connection_world_position(ConnectionPoint.LEFT, 20.0)
        assert left is not None
        assert left.x == pytest.approx(0.0, abs=1e-9)
        assert left.z == pytest.approx(-10.0)

    def test_stem_follows_extension(self) -> None:
        cell = Cell(1, sensor_state=SensorState(stem_extension=1.0))
        stem = cell.connection_world_position(ConnectionPoint.STEM_TIP, 10.0)
        assert stem is not None
        assert stem.z == pytest.approx(-10.0 * STEM_HEX_FACTOR)

    def test_unknown_point_returns_none(self) -> None:
        assert Cell(1).connection_world_position("elbow", 25.0) is None


class TestConnect:
    def test_link_is_symmetric(self) -> None:
        a, b = Cell(1), Cell(2)
        a.connect(b, ConnectionPoint.RIGHT, ConnectionPoint.LEFT, 0.9)
        assert a.neighbors[2].local_point is ConnectionPoint.RIGHT
        assert a.neighbors[2].remote_point is ConnectionPoint.LEFT
        assert b.neighbors[1].local_point is ConnectionPoint.LEFT
        assert b.neighbors[1].remote_point is ConnectionPoint.RIGHT
        assert a.neighbors[2].strength == b.neighbors[1].strength == 0.9
        assert a.connection_points[ConnectionPoint.RIGHT] == 2
        assert b.connection_points[ConnectionPoint.LEFT] == 1
        assert a.free_points() == [ConnectionPoint.LEFT, ConnectionPoint.STEM_TIP]

    def test_occupied_point_raises_and_changes_nothing(self) -> None:
        a, b, c = Cell(1), Cell(2), Cell(3)
        a.connect(b, "right", "left")
        with pytest.raises(ConnectionPointOccupiedError):
            a.connect(c, "right", "left")
        assert list(a.neighbors) == [2]
        assert not c.neighbors
        assert not c.is_occupied(ConnectionPoint.LEFT)

    def test_remote_occupied_point_raises(self) -> None:
        a, b, c = Cell(1), Cell(2), Cell(3)
        b.connect(c, "left", "right")
        with pytest.raises(ConnectionPointOccupiedError):
            a.connect(b, "right", "left")
        assert not a.neighbors

    def test_duplicate_link_raises(self) -> None:
        a, b = Cell(1), Cell(2)
        a.connect(b, "right", "left")
        with pytest.raises(ConnectionPointOccupiedError, match="already linked"):
            b.connect(a, "stem_tip", "stem_tip")

    def test_self_link_raises(self) -> None:
        a = Cell(1)
        with pytest.raises(ValueError, match="itself"):
            a.connect(a, "left", "right")

    @pytest.mark.parametrize("strength", [0.0, -0.5, 1.5])
    def test_strength_out_of_range_raises(self, strength: float) -> None:
        with pytest.raises(ValueError, match="strength"):
            Cell(1).connect(Cell(2), "left", "right", strength)

    def test_neighbors_view_is_read_only(self) -> None:
        a, b = Cell(1), Cell(2)
        a.connect(b, "right", "left")
        with pytest.raises(TypeError):
            a.neighbors[3] = a.neighbors[2]  # type: ignore[index]

    def test_neighbor_ids_sorted(self) -> None:
        a = Cell(5)
        for other, point in ((Cell(9), "left"), (Cell(2), "right"), (Cell(7), "stem_tip")):
            a.connect(other, point, "left")
        assert a.neighbor_ids() == [2, 7, 9]


    def test_free_points_follow_scan_order(self) -> None:
        a = Cell(1)
        assert [p.value for p in a.free_points()] == list(CONNECTION_POINT_ORDER)
        a.connect(Cell(2), "left", "right")
        assert [p.value for p in a.free_points()] == ["right", "stem_tip"]


class TestDisconnect:
    def test_disconnect_drops_local_half_only(self) -> None:
        a, b = Cell(1), Cell(2)
        a.connect(b, "right", "left")
        a.disconnect(2)
        assert 2 not in a.neighbors
        assert not a.is_occupied("right")
        assert 1 in b.neighbors

    def test_disconnect_absent_is_noop(self) -> None:
        a = Cell(1)
        a.disconnect(42)
        assert not a.neighbors

    def test_clear_links_frees_every_point(self) -> None:
        a, b, c = Cell(1), Cell(2), Cell(3)
        a.connect(b, "right", "left")
        a.connect(c, "left", "right")
        a.clear_links()
        assert not a.neighbors
        assert a.free_points() == list(ConnectionPoint)


class TestSnapshot:
    def test_snapshot_is_detached(self) -> None:
        a, b = Cell(1, mode=Mode.RIGID), Cell(2)
        a.connect(b, "right", "left")
        snap = a.snapshot()
        snap.sensor_state.field_strength[0] = 9.0
        snap.pose.x = 100.0
        assert a.sensor_state.field_strength[0] == 0.0
        assert a.pose.x == 0.0
        assert snap.mode is Mode.RIGID
        assert [c.cell_id for c in snap.neighbors] == [2]

    def test_snapshot_is_idempotent(self) -> None:
        a = Cell(1, mode=Mode.SENSE, polygon_id=3, slot_index=2)
        assert a.snapshot() == a.snapshot()

    def test_snapshot_neighbors_sorted(self) -> None:
        a = Cell(1)
        a.connect(Cell(8), "left", "right")
        a.connect(Cell(3), "right", "left")
        assert [c.cell_id for c in a.snapshot().neighbors] == [3, 8]
