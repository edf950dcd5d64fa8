"""
Game engine for Robot Arena - discrete, turn-based combat simulation.

This module implements the per-tick scheduler: it orders the robots,
resolves simultaneous movement and collisions, dispatches policy events,
resolves blasts and enemy detection, and removes eliminated robots.

Each call to step() advances exactly one tick. Nothing runs in the
background; the driver decides when the next tick happens.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from robotarena.config import get_settings
from robotarena.core.control_manager import ControlManager
from robotarena.core.frame import BLAST_SYMBOL, DrawColor, Frame, FrameRecorder
from robotarena.core.geometry import Coordinates, Rectangle
from robotarena.core.robot import Robot, RobotSnapshot

logger = logging.getLogger(__name__)


class ArenaConfigError(ValueError):
    """Raised when a game is set up with invalid dimensions or robots."""
    pass


@dataclass
class GameState:
    """Complete state of a running game."""
    arena: Rectangle
    robots: List[Robot] = field(default_factory=list)
    tick: int = 0


class GameEngine:
    """
    Turn-based arena engine.

    Owns the robots and the arena, and advances the simulation one tick at
    a time when step() is called.

    Usage:
        engine = GameEngine(80, 40)
        engine.add_robot("A", MyPolicy())
        engine.add_template_robot("B", "wanderer")
        while not engine.is_finished:
            engine.step()
            render(engine.frame)
    """

    def __init__(self, width: int, height: int, rng: Optional[random.Random] = None):
        """
        Initialize the engine with an empty arena.

        Args:
            width: Arena width in cells
            height: Arena height in cells
            rng: Random source for robot placement (a fresh one if omitted)

        Raises:
            ArenaConfigError: If either dimension is not a positive integer
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ArenaConfigError(f"Arena {name} must be a positive integer, got {value!r}")

        self.settings = get_settings()
        self.controls = ControlManager()
        self.rng = rng or random.Random()

        self.state = GameState(
            arena=Rectangle(Coordinates(0, 0), Coordinates(width - 1, height - 1))
        )
        self._recorder = FrameRecorder(self.state.arena)

    # Setup

    def add_robot(self, robot_id: str, control: Any) -> RobotSnapshot:
        """
        Register a robot at a random free cell.

        Args:
            robot_id: Unique identifier; its first character is the robot's symbol
            control: Policy object implementing the six event handlers

        Returns:
            Snapshot of the new robot

        Raises:
            ArenaConfigError: If the id is empty or taken, or the arena is full
        """
        if not isinstance(robot_id, str) or not robot_id:
            raise ArenaConfigError(f"Robot id must be a non-empty string, got {robot_id!r}")
        if any(r.id == robot_id for r in self.state.robots):
            raise ArenaConfigError(f"Robot id '{robot_id}' is already in use")
        if len(self.state.robots) >= self.state.arena.area:
            raise ArenaConfigError("Arena is full")

        occupied = {r.position for r in self.state.robots}
        position = self.state.arena.random_coordinates(self.rng)
        while position in occupied:
            position = self.state.arena.random_coordinates(self.rng)

        robot = Robot(id=robot_id, position=position, control=control)
        self.state.robots.append(robot)
        logger.info(f"Robot {robot_id} joined at {position.to_tuple()}")
        return robot.snapshot()

    def add_code_robot(self, robot_id: str, code: str, class_name: str) -> RobotSnapshot:
        """
        Register a robot whose policy is given as source code.

        Raises:
            ControlError: If the policy code cannot be loaded
            ArenaConfigError: As for add_robot()
        """
        return self.add_robot(robot_id, self.controls.load_control(code, class_name))

    def add_template_robot(self, robot_id: str, template_id: str) -> RobotSnapshot:
        """Register a robot driven by one of the bundled policy templates."""
        return self.add_robot(robot_id, self.controls.load_template(template_id))

    # Observation

    @property
    def tick(self) -> int:
        return self.state.tick

    @property
    def arena(self) -> Rectangle:
        return self.state.arena

    @property
    def robots(self) -> Tuple[RobotSnapshot, ...]:
        """Read-only snapshots of the live robots, in registration order."""
        return tuple(r.snapshot() for r in self.state.robots)

    @property
    def frame(self) -> Frame:
        """Draw events recorded by the last step()."""
        return self._recorder.frame

    @property
    def is_finished(self) -> bool:
        """True once at most one robot is left standing."""
        return len(self.state.robots) <= 1

    @property
    def winner(self) -> Optional[str]:
        if len(self.state.robots) == 1:
            return self.state.robots[0].id
        return None

    def get_robot(self, robot_id: str) -> Optional[RobotSnapshot]:
        for robot in self.state.robots:
            if robot.id == robot_id:
                return robot.snapshot()
        return None

    # Tick

    def step(self) -> None:
        """Advance the simulation by exactly one tick."""
        self.state.tick += 1
        tick = self.state.tick
        self._recorder.begin(tick)

        # Stable sort: equal velocities keep registration order
        ordered = sorted(self.state.robots, key=lambda r: r.velocity, reverse=True)

        for robot in ordered:
            if robot.begin_turn(tick):
                self.controls.deliver(robot, "on_start")

        self._move(ordered)

        for robot in ordered:
            self._recorder.draw(robot.position, robot.symbol, DrawColor.BODY)

        self._process_timeouts(ordered)
        self._resolve_fire(ordered)
        self._resolve_detection(ordered)
        self._remove_eliminated(ordered)

        logger.debug(f"Tick {tick} complete: {len(self.state.robots)} robots alive")

    def _move(self, ordered: List[Robot]) -> None:
        """
        Resolve this tick's movement.

        Movement runs in velocity bands from the fastest robot's speed down
        to 1. In each band every robot whose current velocity reaches the
        band takes one step, in tick order, so faster robots finish their
        extra steps before slower robots start. A robot stopped by a
        collision sits out the remaining bands.
        """
        probe_distance = self.settings.robot.RANGE_FINDER_DISTANCE
        for robot in ordered:
            probe = robot.position.move(probe_distance, robot.bearing)
            if not self.state.arena.contains(probe) and not robot.obstacle_warning_delivered:
                robot.deliver_obstacle_ahead_warning = True

        top_velocity = max((r.velocity for r in ordered), default=0)
        combat = self.settings.combat

        for band in range(top_velocity, 0, -1):
            for robot in ordered:
                if robot.velocity < band:
                    continue

                new_position = robot.position.move(1, robot.bearing)
                occupant = self._robot_at(new_position)
                if occupant is not None:
                    robot.collided(combat.RAM_DAMAGE)
                    occupant.collided(combat.RAMMED_DAMAGE)
                    logger.debug(f"Robot {robot.id} rammed robot {occupant.id} at {new_position.to_tuple()}")
                elif not self.state.arena.contains(new_position):
                    robot.collided(combat.WALL_DAMAGE)
                    logger.debug(f"Robot {robot.id} hit the arena edge at {robot.position.to_tuple()}")
                else:
                    robot.position = new_position

        for robot in ordered:
            self._process_move_flags(robot)

    def _robot_at(self, position: Coordinates) -> Optional[Robot]:
        for robot in self.state.robots:
            if robot.position == position:
                return robot
        return None

    def _process_move_flags(self, robot: Robot) -> None:
        if robot.deliver_collided_warning:
            self.controls.deliver(robot, "on_collided")
        elif robot.deliver_obstacle_ahead_warning:
            robot.obstacle_warning_delivered = True
            self.controls.deliver(robot, "on_obstacle_ahead")
        robot.deliver_collided_warning = False
        robot.deliver_obstacle_ahead_warning = False

    def _process_timeouts(self, ordered: List[Robot]) -> None:
        for robot in ordered:
            for timeout in robot.pop_due_timeouts():
                self.controls.deliver(robot, "on_timeout", timeout.state)

    def _resolve_fire(self, ordered: List[Robot]) -> None:
        """Turn every pending target into a blast and apply its damage."""
        targets = []
        for robot in ordered:
            target = robot.take_target()
            if target is not None:
                targets.append(target)

        combat = self.settings.combat
        for target in targets:
            self._recorder.draw(target, BLAST_SYMBOL, DrawColor.BLAST)
            blast_range = Rectangle.around(target, combat.BLAST_RADIUS)

            for robot in ordered:
                if blast_range.contains(robot.position):
                    robot.take_hit(combat.BLAST_DAMAGE)
                    logger.debug(f"Robot {robot.id} caught in blast at {target.to_tuple()}, {robot.hit_points} HP left")
                    self.controls.deliver(robot, "on_hit")
                    self._recorder.draw(robot.position, robot.symbol, DrawColor.BLAST)

    def _resolve_detection(self, ordered: List[Robot]) -> None:
        radius = self.settings.combat.DETECTION_RADIUS
        for robot in ordered:
            detection_range = Rectangle.around(robot.position, radius)
            for candidate in ordered:
                if candidate is robot:
                    continue
                if detection_range.contains(candidate.position):
                    self.controls.deliver(robot, "on_enemy_detected", candidate.position)

    def _remove_eliminated(self, ordered: List[Robot]) -> None:
        for robot in ordered:
            if robot.is_eliminated:
                logger.info(f"Robot {robot.id} eliminated on tick {self.state.tick}")
        self.state.robots = [r for r in self.state.robots if not r.is_eliminated]

    def get_state_snapshot(self) -> Dict:
        """
        Get current game state as JSON-serializable dict.

        Returns:
            Dictionary containing the arena, tick, robots and last frame
        """
        arena = self.state.arena
        frame = self.frame
        return {
            'tick': self.state.tick,
            'arena': {'width': arena.width, 'height': arena.height},
            'robots': {
                robot.id: {
                    'position': {'x': robot.position.x, 'y': robot.position.y},
                    'bearing': robot.bearing.name,
                    'velocity': robot.velocity,
                    'hit_points': robot.hit_points,
                    'pending_timeouts': len(robot.timeouts),
                    'control_error': robot.control_error,
                }
                for robot in self.state.robots
            },
            'frame': {
                'cleared': [c.to_tuple() for c in frame.cleared],
                'draws': [
                    {'x': d.coordinates.x, 'y': d.coordinates.y, 'symbol': d.symbol, 'color': d.color.value}
                    for d in frame.draws
                ],
            },
            'winner': self.winner if self.is_finished else None,
        }


def create_game(width: int, height: int, rng: Optional[random.Random] = None) -> GameEngine:
    """Create an empty game with an arena of the given size."""
    return GameEngine(width, height, rng=rng)
