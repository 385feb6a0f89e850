"""
Challenge entity - a time-boxed objective issued by the objective generator.

The generator only proposes a challenge; progress, expiry and completion are
owned by the engine once it has been issued.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import CHALLENGE_REWARD_POINTS, GOAL_TYPES, POWER_UP_KINDS


@dataclass
class Reward:
    points: int = CHALLENGE_REWARD_POINTS
    power_up: Optional[str] = None


@dataclass
class Challenge:
    """
    Attributes:
        id: unique identifier
        title, description: player-facing text
        goal_type: one of GOAL_TYPES, decides how the challenge resolves
        target_value: goal-specific target (pellets to eat, points to gain, seconds to survive)
        time_limit_seconds: deadline measured from start_time
        reward: points and optional power-up granted on success
        failure_condition: free-text hint from the generator (e.g. 'DIE', 'TIME_UP')
        active: True while the engine tracks it
        progress: goal-specific progress counter
        start_time: engine time (ms) at issuance
    """

    title: str
    description: str
    goal_type: str
    target_value: int
    time_limit_seconds: float
    reward: Reward = field(default_factory=Reward)
    failure_condition: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    active: bool = False
    progress: int = 0
    start_time: float = 0.0

    REQUIRED_FIELDS = ("title", "description", "goalType", "targetValue", "timeLimitSeconds")

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        default_reward_points: int = CHALLENGE_REWARD_POINTS,
    ) -> "Challenge":
        """
        Build a Challenge from generator output.

        Accepts camelCase keys (as produced by the generator prompt) or their
        snake_case equivalents. Missing rewards fall back to default_reward_points.

        Raises:
            ValueError: if a required field is missing or the goal type is unknown.
        """
        def pick(camel: str, snake: str, default: Any = None) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        missing = [
            name for name in cls.REQUIRED_FIELDS
            if pick(name, _snake_case(name)) is None
        ]
        if missing:
            raise ValueError(f"Challenge payload is missing fields: {', '.join(missing)}")

        goal_type = str(pick("goalType", "goal_type")).upper()
        if goal_type not in GOAL_TYPES:
            raise ValueError(f"Unknown challenge goal type '{goal_type}'.")

        try:
            target_value = int(pick("targetValue", "target_value"))
            time_limit = float(pick("timeLimitSeconds", "time_limit_seconds"))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Challenge payload has non-numeric targets: {exc}") from exc
        if time_limit <= 0:
            raise ValueError(f"Challenge time limit must be positive, got {time_limit}.")

        raw_reward = data.get("reward") or {}
        power_up = raw_reward.get("powerUp", raw_reward.get("power_up"))
        if power_up is not None and power_up not in POWER_UP_KINDS:
            power_up = None
        reward = Reward(
            points=int(raw_reward.get("points", default_reward_points)),
            power_up=power_up,
        )

        challenge = cls(
            title=str(data["title"]),
            description=str(data["description"]),
            goal_type=goal_type,
            target_value=target_value,
            time_limit_seconds=time_limit,
            reward=reward,
            failure_condition=str(pick("failureCondition", "failure_condition", "")),
        )
        if data.get("id"):
            challenge.id = str(data["id"])
        return challenge

    def elapsed_seconds(self, current_time: float) -> float:
        return (current_time - self.start_time) / 1000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "goal_type": self.goal_type,
            "target_value": self.target_value,
            "time_limit_seconds": self.time_limit_seconds,
            "reward": {"points": self.reward.points, "power_up": self.reward.power_up},
            "failure_condition": self.failure_condition,
            "active": self.active,
            "progress": self.progress,
            "start_time": self.start_time,
        }


def _snake_case(name: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in name)
