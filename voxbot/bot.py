"""
Bots — identity, seed pool and position.

Position arithmetic is checked: a move or target cell that would leave
the cube [0, r) on any axis raises BoundsFault instead of wrapping.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .difference import Difference
from .faults import BoundsFault, ContractFault


@dataclass(frozen=True)
class Position:
    x: int = 0
    y: int = 0
    z: int = 0

    @classmethod
    def zero(cls) -> Position:
        return cls(0, 0, 0)

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.z})"


def position_after(position: Position, diff: Difference, r: int) -> Position:
    """Return `position` moved by `diff`, which must stay inside [0, r)."""
    x = position.x + diff.dx
    y = position.y + diff.dy
    z = position.z + diff.dz
    if not (0 <= x < r and 0 <= y < r and 0 <= z < r):
        raise BoundsFault(x, y, z, r)
    return Position(x, y, z)


@dataclass
class Bot:
    index: int
    seeds: List[int] = field(default_factory=list)
    position: Position = field(default_factory=Position.zero)

    @classmethod
    def initial(cls, bot_count: int) -> Bot:
        """The starting bot: identity 1 at the origin, holding seeds 2..bot_count."""
        if bot_count < 1:
            raise ContractFault(f"bot_count must be >= 1, got {bot_count}")
        return cls(1, list(range(2, bot_count + 1)), Position.zero())

    def position_after(self, diff: Difference, r: int) -> Position:
        return position_after(self.position, diff, r)

    def apply_position_diff(self, diff: Difference, r: int):
        """Move this bot in place; on BoundsFault the position is unchanged."""
        self.position = position_after(self.position, diff, r)
