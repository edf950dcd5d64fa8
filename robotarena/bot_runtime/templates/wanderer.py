"""
Wanderer - Template Policy

Roams the arena heading south at a steady speed. Turns left or right at
random when a wall is close ahead, reverses after any collision, and fires
at detected enemies, leading the shot by the enemy's last observed movement.

Loaded through the sandbox: Bearing and GuardedControlBase are provided
by the sandbox namespace.
"""

import random


class Wanderer(GuardedControlBase):
    """Roaming policy with predictive fire."""

    def __init__(self):
        self.name = "Wanderer"
        self.speed = 2
        self.current_bearing = Bearing.NORTH
        self.rng = random.Random()
        self.last_enemy_position = None

    def on_start(self, commands):
        self.turn(Bearing.SOUTH, commands)
        commands.forward(self.speed)

    def on_collided(self, commands):
        self.turn(self.current_bearing.opposite(), commands)
        commands.forward(self.speed)

    def on_obstacle_ahead(self, commands):
        if self.rng.randint(0, 1) == 0:
            self.turn(self.current_bearing.clockwise90(), commands)
        else:
            self.turn(self.current_bearing.counter_clockwise90(), commands)

    def on_enemy_detected(self, commands, enemy_position):
        if self.last_enemy_position is not None:
            # Assume the enemy keeps moving the way it just did
            movement = self.last_enemy_position.distance_to(enemy_position)
            commands.fire_at(enemy_position.move(movement))
        else:
            commands.fire_at(enemy_position)
        self.last_enemy_position = enemy_position

    def turn(self, new_bearing, commands):
        self.current_bearing = new_bearing
        commands.turn(new_bearing)
