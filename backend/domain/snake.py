"""
Snake entity for the game engine.
"""

from collections import deque
from typing import Iterable, List, Tuple

from .constants import OPPOSITE_MOVES, RIGHT, VALID_MOVES
from .grid import Point


class Snake:
    """
    Represents a snake on the board (the player or the boss).

    Attributes:
        positions: deque of Points from head at index 0 to tail at the end
        direction: the direction used on the last movement tick
        next_direction: the buffered direction that will be committed on the next tick
    """

    def __init__(self, positions: Iterable[Tuple[int, int]], direction: str = RIGHT):
        self.positions = deque(Point(*p) for p in positions)
        if not self.positions:
            raise ValueError("A snake needs at least one segment.")
        self.direction = direction
        self.next_direction = direction

    @property
    def head(self) -> Point:
        """Return the head position (first element)."""
        return self.positions[0]

    def __len__(self) -> int:
        return len(self.positions)

    def occupies(self, point: Tuple[int, int]) -> bool:
        return point in self.positions

    def queue_direction(self, direction: str) -> bool:
        """
        Buffer a direction for the next tick.

        Unknown directions and exact reversals of the current direction are
        ignored. Returns True when the buffer changed.
        """
        if direction not in VALID_MOVES:
            return False
        if OPPOSITE_MOVES[self.direction] == direction:
            return False
        self.next_direction = direction
        return True

    def commit_direction(self) -> str:
        self.direction = self.next_direction
        return self.direction

    def advance(self, new_head: Point, grow: bool = False) -> None:
        """Push a new head and drop the tail unless growing."""
        self.positions.appendleft(new_head)
        if not grow:
            self.positions.pop()

    def segments(self) -> List[Point]:
        return list(self.positions)
