"""
Power-up entities: the collectible item on the board and the effect applied to the player.
"""

from dataclasses import dataclass

from .grid import Point


@dataclass
class PowerUpItem:
    """An uncollected power-up lying on the board."""

    position: Point
    kind: str
    spawn_time: float

    def age(self, current_time: float) -> float:
        return current_time - self.spawn_time


@dataclass
class ActiveEffect:
    """The power-up currently applied to the player."""

    kind: str
    expiry_time: float

    def expired(self, current_time: float) -> bool:
        return current_time > self.expiry_time
