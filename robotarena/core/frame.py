"""
Draw events handed to an external renderer.

The engine never draws anything itself. During a tick it records what a
renderer should paint; the finished Frame lists the cells painted in the
previous frame (to be cleared first) followed by this tick's draws in order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from robotarena.core.geometry import Coordinates, Rectangle


BLAST_SYMBOL = "*"


class DrawColor(Enum):
    """Background colour of a drawn cell."""
    BODY = "black"
    BLAST = "red"


@dataclass(frozen=True)
class DrawEvent:
    coordinates: Coordinates
    symbol: str
    color: DrawColor


@dataclass
class Frame:
    """Everything a renderer needs to repaint the arena for one tick."""
    tick: int
    cleared: Tuple[Coordinates, ...] = ()
    draws: List[DrawEvent] = field(default_factory=list)

    @property
    def occupied(self) -> Tuple[Coordinates, ...]:
        """Cells painted by this frame, in draw order, without repeats."""
        return tuple(dict.fromkeys(d.coordinates for d in self.draws))

    @property
    def blasts(self) -> List[Coordinates]:
        return [d.coordinates for d in self.draws if d.symbol == BLAST_SYMBOL and d.color is DrawColor.BLAST]


class FrameRecorder:
    """
    Collects draw events for the current tick.

    Draws outside the arena are dropped, so the next frame's cleanup list
    only ever names cells inside it.
    """

    def __init__(self, arena: Rectangle):
        self.arena = arena
        self.frame = Frame(tick=0)

    def begin(self, tick: int) -> None:
        self.frame = Frame(tick=tick, cleared=self.frame.occupied)

    def draw(self, coordinates: Coordinates, symbol: str, color: DrawColor) -> None:
        if not self.arena.contains(coordinates):
            return
        self.frame.draws.append(DrawEvent(coordinates, symbol, color))
