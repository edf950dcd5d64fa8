"""
Sentry - Template Policy

Stays put and sweeps its bearing clockwise every few ticks using timeouts.
Fires at every enemy it detects. When hit, it sidesteps one cell and stops
again on the next tick.

Loaded through the sandbox: Bearing and GuardedControlBase are provided
by the sandbox namespace.
"""


class Sentry(GuardedControlBase):
    """Stationary policy driven by timeouts."""

    def __init__(self):
        self.name = "Sentry"
        self.sweep_interval = 5
        self.facing = Bearing.NORTH

    def on_start(self, commands):
        commands.halt()
        commands.request_timeout(self.sweep_interval, "sweep")

    def on_timeout(self, commands, state):
        if state == "sweep":
            self.facing = self.facing.clockwise90()
            commands.turn(self.facing)
            commands.request_timeout(self.sweep_interval, "sweep")
        elif state == "stop":
            commands.halt()

    def on_hit(self, commands):
        commands.forward(1)
        commands.request_timeout(1, "stop")

    def on_collided(self, commands):
        commands.halt()

    def on_enemy_detected(self, commands, enemy_position):
        commands.fire_at(enemy_position)
