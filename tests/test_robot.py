"""
Tests for robot state and the command handle.

Commands change robot state immediately; malformed commands are ignored.
"""

import pytest

from robotarena.bot_runtime.control import BaseControl, RobotControl
from robotarena.core.geometry import Bearing, Coordinates
from robotarena.core.robot import Robot, RobotCommands, Timeout


@pytest.fixture
def robot():
    return Robot(id="A", position=Coordinates(5, 5), control=BaseControl())


class TestRobotDefaults:

    def test_new_robot_state(self, robot):
        assert robot.hit_points == 100
        assert robot.velocity == 0
        assert robot.bearing is Bearing.NORTH
        assert robot.target is None
        assert robot.timeouts == []
        assert not robot.obstacle_warning_delivered

    def test_symbol_is_first_character(self):
        robot = Robot(id="Zeta", position=Coordinates(0, 0), control=BaseControl())
        assert robot.symbol == "Z"

    def test_eliminated_at_zero_or_below(self, robot):
        robot.hit_points = 1
        assert not robot.is_eliminated
        robot.hit_points = 0
        assert robot.is_eliminated
        robot.hit_points = -5
        assert robot.is_eliminated

    def test_begin_turn_reports_first_turn_once(self, robot):
        assert robot.begin_turn(1) is True
        assert robot.begin_turn(2) is False
        assert robot.tick == 2

    def test_no_start_after_the_first_game_tick(self, robot):
        assert robot.begin_turn(3) is False
        assert robot.begin_turn(4) is False
        assert not robot.started


class TestForward:

    @pytest.mark.parametrize("velocity", [0, 1, 3, 5])
    def test_accepts_valid_velocity(self, robot, velocity):
        robot.commands.forward(velocity)
        assert robot.velocity == velocity

    @pytest.mark.parametrize("velocity", [-1, 6, 100, 2.5, "3", None, True])
    def test_ignores_invalid_velocity(self, robot, velocity):
        robot.commands.forward(2)
        robot.commands.forward(velocity)
        assert robot.velocity == 2

    def test_halt_stops(self, robot):
        robot.commands.forward(4)
        robot.commands.halt()
        assert robot.velocity == 0


class TestTurn:

    def test_turn_sets_bearing(self, robot):
        robot.commands.turn(Bearing.WEST)
        assert robot.bearing is Bearing.WEST

    def test_turn_clears_obstacle_warning(self, robot):
        robot.obstacle_warning_delivered = True
        robot.commands.turn(robot.bearing)
        assert not robot.obstacle_warning_delivered

    def test_turn_ignores_non_bearing(self, robot):
        robot.obstacle_warning_delivered = True
        robot.commands.turn("EAST")
        assert robot.bearing is Bearing.NORTH
        assert robot.obstacle_warning_delivered


class TestFireAt:

    def test_later_target_overwrites_earlier(self, robot):
        robot.commands.fire_at(Coordinates(1, 1))
        robot.commands.fire_at(Coordinates(2, 2))
        assert robot.target == Coordinates(2, 2)

    def test_ignores_non_coordinates(self, robot):
        robot.commands.fire_at(Coordinates(1, 1))
        robot.commands.fire_at((3, 3))
        assert robot.target == Coordinates(1, 1)

    def test_take_target_clears(self, robot):
        robot.commands.fire_at(Coordinates(1, 1))
        assert robot.take_target() == Coordinates(1, 1)
        assert robot.target is None
        assert robot.take_target() is None


class TestTimeouts:

    def test_due_tick_is_current_tick_plus_delay(self, robot):
        robot.begin_turn(4)
        robot.commands.request_timeout(3, "scan")
        assert robot.timeouts == [Timeout(7, "scan")]

    def test_ignores_negative_delay(self, robot):
        robot.commands.request_timeout(-1, "never")
        assert robot.timeouts == []

    def test_pop_due_keeps_scheduling_order(self, robot):
        robot.begin_turn(1)
        robot.commands.request_timeout(2, "first")
        robot.commands.request_timeout(5, "later")
        robot.commands.request_timeout(2, "second")

        robot.begin_turn(3)
        due = robot.pop_due_timeouts()

        assert [t.state for t in due] == ["first", "second"]
        assert [t.state for t in robot.timeouts] == ["later"]

    def test_pop_due_with_nothing_due(self, robot):
        robot.begin_turn(1)
        robot.commands.request_timeout(5, "later")
        assert robot.pop_due_timeouts() == []
        assert len(robot.timeouts) == 1

    def test_missed_timeout_is_dropped_without_firing(self, robot):
        robot.begin_turn(1)
        robot.commands.request_timeout(0, "missed")
        robot.commands.request_timeout(3, "later")

        robot.begin_turn(2)
        assert robot.pop_due_timeouts() == []
        assert [t.state for t in robot.timeouts] == ["later"]

    def test_payload_is_passed_through_untouched(self, robot):
        payload = {"enemy": Coordinates(3, 4)}
        robot.commands.request_timeout(0, payload)
        assert robot.timeouts[0].state is payload


class TestCommandHandle:

    def test_exposes_only_the_five_commands(self, robot):
        public = sorted(name for name in dir(robot.commands) if not name.startswith("_"))
        assert public == ["fire_at", "forward", "halt", "request_timeout", "turn"]

    def test_cannot_grow_new_attributes(self, robot):
        with pytest.raises(AttributeError):
            robot.commands.hit_points = 1000

    def test_handle_type(self, robot):
        assert isinstance(robot.commands, RobotCommands)

    def test_base_control_satisfies_control_protocol(self):
        assert isinstance(BaseControl(), RobotControl)


class TestSnapshot:

    def test_snapshot_is_read_only_copy(self, robot):
        robot.commands.forward(3)
        robot.commands.request_timeout(2, "x")
        snap = robot.snapshot()

        assert snap.id == "A"
        assert snap.velocity == 3
        assert snap.pending_timeouts == ((2, "x"),)
        with pytest.raises(AttributeError):
            snap.hit_points = 0

        robot.commands.halt()
        assert snap.velocity == 3
