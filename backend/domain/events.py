"""
Typed notifications emitted by the engine.

Listeners registered with SnakeGame.subscribe() receive these synchronously
from inside the tick that produced them. Anything slow (generator requests,
analytics) belongs to the listener, never to the engine.
"""

from dataclasses import dataclass
from typing import Optional

from .grid import Point


@dataclass(frozen=True)
class GameEvent:
    pass


@dataclass(frozen=True)
class FoodEaten(GameEvent):
    position: Point
    score: int


@dataclass(frozen=True)
class FoodStolen(GameEvent):
    position: Point


@dataclass(frozen=True)
class PowerUpCollected(GameEvent):
    kind: str
    score: int


@dataclass(frozen=True)
class PowerUpActivated(GameEvent):
    kind: str
    expiry_time: float


@dataclass(frozen=True)
class PowerUpExpired(GameEvent):
    kind: str


@dataclass(frozen=True)
class CloseCall(GameEvent):
    count: int
    score: int


@dataclass(frozen=True)
class PlayerDied(GameEvent):
    reason: str
    score: int
    close_calls: int


@dataclass(frozen=True)
class ChallengeIssued(GameEvent):
    challenge_id: str
    goal_type: str


@dataclass(frozen=True)
class ChallengeResolved(GameEvent):
    challenge_id: str
    goal_type: str
    success: bool
    reward_points: int
    reward_power_up: Optional[str] = None


@dataclass(frozen=True)
class BossSpawned(GameEvent):
    head: Point
