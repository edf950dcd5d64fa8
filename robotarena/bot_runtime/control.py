"""
Control policy interface.

A robot delegates every decision to a control policy. The engine calls the
policy's event handlers; the policy answers by issuing commands through the
handle passed into each call. Handlers must return promptly: the engine
waits for them before moving on to the next tick phase.
"""

from typing import Any, Protocol, runtime_checkable

from robotarena.core.geometry import Bearing, Coordinates


class Commands(Protocol):
    """Operations a policy may perform on its own robot."""

    def fire_at(self, target: Coordinates) -> None: ...

    def forward(self, velocity: int) -> None: ...

    def halt(self) -> None: ...

    def turn(self, new_bearing: Bearing) -> None: ...

    def request_timeout(self, delay: int, state: Any = None) -> None: ...


@runtime_checkable
class RobotControl(Protocol):
    """Event handlers every control policy implements."""

    def on_start(self, commands: Commands) -> None: ...

    def on_collided(self, commands: Commands) -> None: ...

    def on_timeout(self, commands: Commands, state: Any) -> None: ...

    def on_obstacle_ahead(self, commands: Commands) -> None: ...

    def on_hit(self, commands: Commands) -> None: ...

    def on_enemy_detected(self, commands: Commands, enemy_position: Coordinates) -> None: ...


class BaseControl:
    """
    Convenience base for policies: every handler is a no-op.

    Policies may subclass this and override only the events they care
    about, or implement all six handlers themselves.

    Example:
        class Sentry(BaseControl):
            def on_start(self, commands):
                commands.request_timeout(10, "patrol")

            def on_enemy_detected(self, commands, enemy_position):
                commands.fire_at(enemy_position)
    """

    def on_start(self, commands: Commands) -> None:
        """
        Called once, on the first tick of the game. Robots that join
        later never receive it.

        Use this to pick an initial bearing and speed.
        """
        pass

    def on_collided(self, commands: Commands) -> None:
        """
        Called after the movement phase when the robot ran into another
        robot or the arena edge, or was run into. The robot has already
        been stopped.
        """
        pass

    def on_timeout(self, commands: Commands, state: Any) -> None:
        """
        Called when a timeout requested with request_timeout() is due.

        Args:
            commands: Command handle for this robot
            state: The payload given to request_timeout()
        """
        pass

    def on_obstacle_ahead(self, commands: Commands) -> None:
        """
        Called when the arena edge is close ahead. Delivered once per
        heading: turning (to any bearing) re-arms the warning.
        """
        pass

    def on_hit(self, commands: Commands) -> None:
        """Called once for every blast that caught the robot."""
        pass

    def on_enemy_detected(self, commands: Commands, enemy_position: Coordinates) -> None:
        """
        Called for each other robot within detection range after the
        fire phase.

        Args:
            commands: Command handle for this robot
            enemy_position: Where the detected robot currently is
        """
        pass
