"""
Grid geometry for the robot arena.

Integer value types used by the engine:
- Vector: a displacement between two cells
- Coordinates: a cell in the arena
- Bearing: one of the four cardinal directions
- Rectangle: an inclusive axis-aligned region (arena bounds and footprints)

Coordinate system:
- (0, 0) is top-left
- x increases to the right
- y increases downward
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Vector:
    """Integer displacement (dx, dy)."""
    x: int
    y: int

    def __mul__(self, scalar: int) -> 'Vector':
        return Vector(self.x * scalar, self.y * scalar)


@dataclass(frozen=True)
class Coordinates:
    """Immutable integer cell position (x, y)."""
    x: int
    y: int

    def distance_to(self, other: 'Coordinates') -> Vector:
        """Return the vector leading from this cell to `other`."""
        return Vector(other.x - self.x, other.y - self.y)

    def move(self, by: Union[Vector, int], bearing: Optional['Bearing'] = None) -> 'Coordinates':
        """
        Return a new position moved from this one.

        Accepts either a vector, or a distance together with a bearing:

            position.move(Vector(1, 2))
            position.move(3, Bearing.SOUTH)

        Args:
            by: Vector to add, or a distance when `bearing` is given
            bearing: Direction to move `by` cells in

        Returns:
            The moved coordinates
        """
        if bearing is None:
            return Coordinates(self.x + by.x, self.y + by.y)
        return bearing.move(self, by)

    def to_tuple(self):
        """Convert to tuple (x, y)."""
        return (self.x, self.y)


class Bearing(Enum):
    """
    Cardinal movement directions.

    Members are declared in clockwise order; rotations are index
    arithmetic over that 4-cycle.
    """
    NORTH = (0, -1)
    EAST = (1, 0)
    SOUTH = (0, 1)
    WEST = (-1, 0)

    @property
    def vector(self) -> Vector:
        """Unit vector for this bearing."""
        dx, dy = self.value
        return Vector(dx, dy)

    def _rotate(self, quarter_turns: int) -> 'Bearing':
        cycle = list(Bearing)
        return cycle[(cycle.index(self) + quarter_turns) % len(cycle)]

    def clockwise90(self) -> 'Bearing':
        return self._rotate(1)

    def counter_clockwise90(self) -> 'Bearing':
        return self._rotate(-1)

    def opposite(self) -> 'Bearing':
        return self._rotate(2)

    def move(self, coordinates: Coordinates, distance: int) -> Coordinates:
        """Move `coordinates` by `distance` cells along this bearing."""
        return coordinates.move(self.vector * distance)


class Rectangle:
    """
    Axis-aligned rectangle with inclusive bounds on all four edges.

    Used both for the arena itself and for blast/detection footprints.
    """

    def __init__(self, top_left: Coordinates, bottom_right: Coordinates):
        self.top = top_left.y
        self.left = top_left.x
        self.bottom = bottom_right.y
        self.right = bottom_right.x

    @classmethod
    def around(cls, center: Coordinates, radius: int) -> 'Rectangle':
        """
        Build the square footprint reaching `radius` cells from `center`
        in each cardinal direction (a (2r+1) x (2r+1) square).
        """
        top_left = center.move(radius, Bearing.NORTH).move(radius, Bearing.WEST)
        bottom_right = center.move(radius, Bearing.SOUTH).move(radius, Bearing.EAST)
        return cls(top_left, bottom_right)

    @property
    def width(self) -> int:
        return self.right - self.left + 1

    @property
    def height(self) -> int:
        return self.bottom - self.top + 1

    @property
    def area(self) -> int:
        return self.width * self.height

    def contains(self, coordinates: Coordinates) -> bool:
        return (self.left <= coordinates.x <= self.right
                and self.top <= coordinates.y <= self.bottom)

    def random_coordinates(self, rng: random.Random) -> Coordinates:
        """Sample a cell uniformly from the inclusive integer grid."""
        return Coordinates(rng.randint(self.left, self.right), rng.randint(self.top, self.bottom))

    def __repr__(self) -> str:
        return (f"Rectangle(top={self.top}, left={self.left}, "
                f"bottom={self.bottom}, right={self.right})")
