"""
Game session orchestrator.

Sits between the frame loop and the engine: forwards frames to
SnakeGame.update(), listens to the engine's events and turns them into
objective-generator requests and analytics calls. Requests run on a thread
pool; their results are applied on the caller's thread during a later tick,
so the engine itself is only ever touched from one thread.
"""

import logging
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from domain.challenge import Challenge
from domain.constants import (
    CHALLENGE_INITIAL_DELAY_MS,
    CHALLENGE_REWARD_POINTS,
    DEFAULT_THEME,
    PLAYING,
    THEMES,
)
from domain.events import (
    ChallengeResolved,
    CloseCall,
    FoodEaten,
    GameEvent,
    PlayerDied,
    PowerUpCollected,
)
from services.analytics import AnalyticsService
from services.objective_generator import ObjectiveGenerator

logger = logging.getLogger(__name__)

CHALLENGE = "challenge"
TRIVIA = "trivia"
COMMENTARY = "commentary"
ANALYTICS = "analytics"


class GameSession:
    """
    Attributes:
        game: the SnakeGame engine being driven
        generator: objective generator used for challenges, trivia and commentary
        analytics: optional AnalyticsService
        theme: current theme tag for trivia requests
        generation: bumped on every start(); results from older generations are dropped
        facts, comments: generator output collected for the UI
        challenges_won, challenges_lost: per-session counters
    """

    def __init__(
        self,
        game,
        generator: ObjectiveGenerator,
        analytics: Optional[AnalyticsService] = None,
        executor: Optional[Executor] = None,
        theme: str = DEFAULT_THEME,
        challenge_delay_ms: float = CHALLENGE_INITIAL_DELAY_MS,
        auto_challenges: bool = True,
    ):
        self.game = game
        self.generator = generator
        self.analytics = analytics
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="objective-generator"
        )
        self.theme = theme if theme in THEMES else DEFAULT_THEME
        self.challenge_delay_ms = challenge_delay_ms
        self.auto_challenges = auto_challenges

        self.session_id: Optional[str] = None
        self.generation = 0
        self.facts: List[str] = []
        self.comments: List[str] = []
        self.challenges_won = 0
        self.challenges_lost = 0

        self._events: List[GameEvent] = []
        self._pending: List[Tuple[str, int, Future]] = []
        self._challenge_due_at: Optional[float] = None
        self._challenge_requested = False

        game.subscribe(self._events.append)

    # ------------------------------------------------------------------
    # Driver API
    # ------------------------------------------------------------------
    def start(self, now: float):
        """(Re)start the game; anything still in flight from the last session is ignored."""
        self.generation += 1
        self.session_id = str(uuid.uuid4())
        self._events.clear()
        self.facts = []
        self.comments = []
        self.challenges_won = 0
        self.challenges_lost = 0
        self._challenge_requested = False
        self._challenge_due_at = now + self.challenge_delay_ms

        self.game.start(now)
        logger.info("Session %s started (generation %d)", self.session_id, self.generation)
        self._track("track_game_start", self.game.game_speed)

    def tick(self, now: float):
        """Per-frame entry point."""
        self.game.update(now)
        self._dispatch_events(now)

        if self._challenge_due_at is not None and now >= self._challenge_due_at:
            self._challenge_due_at = None
            self.request_challenge()

        self._collect_results(now)

    def request_challenge(self) -> bool:
        """Ask the generator for a challenge unless one is active or already on its way."""
        if self.game.phase != PLAYING:
            return False
        if self.game.active_challenge is not None or self._challenge_requested:
            return False

        self._challenge_requested = True
        self._submit(CHALLENGE, self.generator.generate_challenge, self._challenge_context())
        self._track("track_ai_feature_used", CHALLENGE)
        return True

    def cycle_theme(self) -> str:
        idx = THEMES.index(self.theme)
        self.theme = THEMES[(idx + 1) % len(THEMES)]
        return self.theme

    def summary(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "phase": self.game.phase,
            "score": self.game.score,
            "death_reason": self.game.death_reason,
            "close_calls": self.game.close_calls,
            "snake_length": len(self.game.snake),
            "boss_active": self.game.boss_active,
            "challenges_won": self.challenges_won,
            "challenges_lost": self.challenges_lost,
            "theme": self.theme,
            "facts": list(self.facts),
            "comments": list(self.comments),
        }

    def close(self, wait: bool = True):
        if self._owns_executor:
            self.executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _challenge_context(self) -> Dict[str, Any]:
        game = self.game
        return {
            "score": game.score,
            "snake_length": len(game.snake),
            "boss_active": game.boss_active,
            "active_power_up": game.active_power_up,
            "close_calls": game.close_calls,
            "theme": self.theme,
        }

    def _submit(self, kind: str, fn: Callable, *args):
        future = self.executor.submit(fn, *args)
        self._pending.append((kind, self.generation, future))

    def _track(self, method_name: str, *args):
        if self.analytics is None:
            return
        self._submit(ANALYTICS, getattr(self.analytics, method_name), *args)

    def _dispatch_events(self, now: float):
        events = list(self._events)
        self._events.clear()

        for event in events:
            if isinstance(event, FoodEaten):
                self._submit(TRIVIA, self.generator.generate_trivia, self.theme)
            elif isinstance(event, CloseCall):
                self._submit(COMMENTARY, self.generator.generate_commentary, "Close Call", event.score)
            elif isinstance(event, PlayerDied):
                self._submit(COMMENTARY, self.generator.generate_commentary, "Game Over", event.score)
                self._track("track_game_over", event.score, event.reason, event.close_calls)
            elif isinstance(event, PowerUpCollected):
                self._track("track_power_up_collected", event.kind, event.score)
            elif isinstance(event, ChallengeResolved):
                if event.success:
                    self.challenges_won += 1
                else:
                    self.challenges_lost += 1
                if self.auto_challenges and self.game.phase == PLAYING:
                    self._challenge_due_at = now + self.challenge_delay_ms

    def _collect_results(self, now: float):
        still_pending = []
        for kind, generation, future in self._pending:
            if not future.done():
                still_pending.append((kind, generation, future))
                continue

            if generation != self.generation:
                logger.debug("Discarding %s result from an earlier session", kind)
                continue

            try:
                result = future.result()
            except Exception as exc:  # noqa: BLE001 - collaborator failures never reach the engine
                logger.warning("%s request failed: %s", kind, exc)
                if kind == CHALLENGE:
                    self._challenge_requested = False
                continue

            self._apply_result(kind, result, now)
        self._pending = still_pending

    def _apply_result(self, kind: str, result: Any, now: float):
        if kind == CHALLENGE:
            self._challenge_requested = False
            try:
                challenge = Challenge.from_dict(result, default_reward_points=CHALLENGE_REWARD_POINTS)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Dropping malformed challenge: %s", exc)
                return
            self.game.issue_challenge(challenge, now)
        elif kind == TRIVIA:
            self.facts.append(result)
        elif kind == COMMENTARY:
            self.comments.append(result)
