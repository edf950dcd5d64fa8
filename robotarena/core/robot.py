"""
Robot entity state and the command handle given to control policies.

The engine owns every Robot. A policy never sees the Robot itself: each
callback receives the robot's RobotCommands facade, which exposes only the
five command operations. Commands change the robot's state immediately;
their consequences (movement, damage, further events) are realized by the
engine's later tick phases.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from robotarena.config import get_settings
from robotarena.core.geometry import Bearing, Coordinates

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Timeout(Generic[T]):
    """A policy-requested wake-up carrying an opaque payload."""
    due_tick: int
    state: T


@dataclass(eq=False)
class Robot:
    """Complete mutable state for a single robot."""
    id: str
    position: Coordinates
    control: Any
    hit_points: int = field(default_factory=lambda: get_settings().robot.START_HIT_POINTS)
    bearing: Bearing = Bearing.NORTH
    velocity: int = 0
    target: Optional[Coordinates] = None
    timeouts: List[Timeout] = field(default_factory=list)

    # Tick bookkeeping
    tick: int = 0  # Tick of the robot's last begin-turn
    started: bool = False  # on_start delivered

    # Move flags (reset after every move-flag dispatch)
    deliver_collided_warning: bool = False
    deliver_obstacle_ahead_warning: bool = False
    # Set once an obstacle warning is delivered, cleared by turn()
    obstacle_warning_delivered: bool = False

    # Policy failure (policy is disconnected once set)
    control_error: Optional[str] = None

    def __post_init__(self):
        self.commands = RobotCommands(self)

    @property
    def symbol(self) -> str:
        """Character used to draw this robot."""
        return self.id[0]

    @property
    def is_eliminated(self) -> bool:
        return self.hit_points <= 0

    def begin_turn(self, tick: int) -> bool:
        """
        Record the current game tick.

        on_start belongs to the game's first tick only, so a robot that
        joins later never receives it.

        Returns:
            True if on_start is due for this robot
        """
        self.tick = tick
        if self.started or tick != 1:
            return False
        self.started = True
        return True

    def collided(self, damage: int) -> None:
        """Apply a movement collision: damage, full stop, collided flag."""
        self.deliver_collided_warning = True
        self.hit_points -= damage
        self.velocity = 0

    def take_hit(self, damage: int) -> None:
        self.hit_points -= damage

    def pop_due_timeouts(self) -> List[Timeout]:
        """
        Remove and return the timeouts due on the current tick, in scheduling order.

        Timeouts whose tick has already passed are dropped without firing.
        """
        due = [t for t in self.timeouts if t.due_tick == self.tick]
        self.timeouts = [t for t in self.timeouts if t.due_tick > self.tick]
        return due

    def take_target(self) -> Optional[Coordinates]:
        target, self.target = self.target, None
        return target

    # Commands

    def fire_at(self, target: Coordinates) -> None:
        if not isinstance(target, Coordinates):
            logger.debug(f"Robot {self.id} ignored fire_at({target!r})")
            return
        self.target = target

    def forward(self, velocity: int) -> None:
        max_velocity = get_settings().robot.MAX_VELOCITY
        if isinstance(velocity, bool) or not isinstance(velocity, int) or not 0 <= velocity <= max_velocity:
            logger.debug(f"Robot {self.id} ignored forward({velocity!r})")
            return
        self.velocity = velocity

    def halt(self) -> None:
        self.velocity = 0

    def turn(self, new_bearing: Bearing) -> None:
        if not isinstance(new_bearing, Bearing):
            logger.debug(f"Robot {self.id} ignored turn({new_bearing!r})")
            return
        self.obstacle_warning_delivered = False
        self.bearing = new_bearing

    def request_timeout(self, delay: int, state: Any = None) -> None:
        if isinstance(delay, bool) or not isinstance(delay, int) or delay < 0:
            logger.debug(f"Robot {self.id} ignored request_timeout({delay!r})")
            return
        self.timeouts.append(Timeout(self.tick + delay, state))

    def snapshot(self) -> 'RobotSnapshot':
        return RobotSnapshot(
            id=self.id,
            position=self.position,
            bearing=self.bearing,
            velocity=self.velocity,
            hit_points=self.hit_points,
            target=self.target,
            pending_timeouts=tuple((t.due_tick, t.state) for t in self.timeouts),
            control_error=self.control_error,
        )


class RobotCommands:
    """
    Command handle bound to one robot.

    This is the only object a policy receives, and the only way it can
    affect the simulation.
    """

    __slots__ = ("_robot",)

    def __init__(self, robot: Robot):
        self._robot = robot

    def fire_at(self, target: Coordinates) -> None:
        """Queue a blast centred on `target` for this tick's fire phase."""
        self._robot.fire_at(target)

    def forward(self, velocity: int) -> None:
        """Set speed in cells per tick; values outside 0..5 are ignored."""
        self._robot.forward(velocity)

    def halt(self) -> None:
        self._robot.halt()

    def turn(self, new_bearing: Bearing) -> None:
        self._robot.turn(new_bearing)

    def request_timeout(self, delay: int, state: Any = None) -> None:
        """Ask for on_timeout(state) `delay` ticks from now."""
        self._robot.request_timeout(delay, state)


@dataclass(frozen=True)
class RobotSnapshot:
    """
    Read-only view of a robot for drivers, renderers and tests.
    """
    id: str
    position: Coordinates
    bearing: Bearing
    velocity: int
    hit_points: int
    target: Optional[Coordinates]
    pending_timeouts: Tuple[Tuple[int, Any], ...]
    control_error: Optional[str]
