"""
Tests for the GameSession orchestrator.

Executors are replaced with synchronous fakes so results are ready (or held
back) deterministically; the engine is the real SnakeGame.
"""

import os
import sys
import random
from concurrent.futures import Future

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from main import SnakeGame  # noqa: E402
from domain.constants import EAT_TARGET, GAME_OVER, PLAYING, RIGHT, WALL  # noqa: E402
from domain.grid import Point  # noqa: E402
from domain.snake import Snake  # noqa: E402
from services.game_session import GameSession  # noqa: E402


class QuietRandom(random.Random):
    """Never rolls a power-up spawn."""

    def random(self):
        return 0.999

    def getrandbits(self, k):
        return super().getrandbits(k)


class ImmediateExecutor:
    """Runs submitted work inline and hands back an already-completed Future."""

    def submit(self, fn, *args):
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as exc:  # noqa: BLE001
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True):
        pass


class DeferredExecutor:
    """Holds submitted work until run_all() is called."""

    def __init__(self):
        self.queue = []

    def submit(self, fn, *args):
        future = Future()
        self.queue.append((future, fn, args))
        return future

    def run_all(self):
        queue, self.queue = self.queue, []
        for future, fn, args in queue:
            future.set_result(fn(*args))

    def shutdown(self, wait=True):
        pass


class RecordingGenerator:
    def __init__(self, challenge=None, challenge_error=None):
        self.challenge = challenge or {
            "title": "Snack Attack",
            "description": "Eat 2 pellets",
            "goalType": EAT_TARGET,
            "targetValue": 2,
            "timeLimitSeconds": 20,
            "reward": {"points": 100},
        }
        self.challenge_error = challenge_error
        self.calls = []

    def generate_challenge(self, context):
        self.calls.append(("challenge", context))
        if self.challenge_error:
            raise self.challenge_error
        return dict(self.challenge)

    def generate_trivia(self, theme):
        self.calls.append(("trivia", theme))
        return f"fact about {theme}"

    def generate_commentary(self, event, score):
        self.calls.append(("commentary", event, score))
        return f"{event}!"


class RecordingAnalytics:
    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if not name.startswith("track_"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name,) + args)
            return True
        return record


FAR_FOOD = Point(700, 500)


def make_session(generator=None, executor=None, analytics=None, **kwargs):
    game = SnakeGame(800, 600, 20, rng=QuietRandom(5))
    session = GameSession(
        game,
        generator or RecordingGenerator(),
        analytics=analytics,
        executor=executor or ImmediateExecutor(),
        **kwargs,
    )
    return session


def start(session, now=0.0):
    session.start(now)
    session.game.food = FAR_FOOD
    return session


class TestChallengeScheduling:
    def test_first_challenge_waits_for_delay(self):
        session = start(make_session())
        session.tick(1000)
        assert session.game.active_challenge is None
        assert session.generator.calls == []

        session.tick(2000)
        challenge = session.game.active_challenge
        assert challenge is not None
        assert challenge.title == "Snack Attack"
        assert challenge.start_time == 2000

    def test_context_describes_the_game(self):
        session = start(make_session(theme="lava"))
        session.tick(2000)
        kind, context = session.generator.calls[0]
        assert kind == "challenge"
        assert context["theme"] == "lava"
        assert context["snake_length"] == 1
        assert context["boss_active"] is False

    def test_no_request_while_challenge_active(self):
        session = start(make_session())
        session.tick(2000)
        assert session.request_challenge() is False

    def test_no_request_outside_playing(self):
        session = make_session()
        assert session.game.phase != PLAYING
        assert session.request_challenge() is False

    def test_no_duplicate_request_while_in_flight(self):
        executor = DeferredExecutor()
        session = start(make_session(executor=executor))
        assert session.request_challenge() is True
        assert session.request_challenge() is False

    def test_resolution_schedules_next_challenge(self):
        session = start(make_session())
        session.tick(2000)
        session.game.complete_challenge(True)

        session.tick(2100)
        assert session.challenges_won == 1
        assert session.game.active_challenge is None

        session.tick(4100)
        assert session.game.active_challenge is not None

    def test_auto_challenges_can_be_disabled(self):
        session = start(make_session(auto_challenges=False))
        session.tick(2000)
        session.game.complete_challenge(False)
        session.tick(2100)
        session.tick(6000)
        assert session.challenges_lost == 1
        assert session.game.active_challenge is None


class TestGeneratorFailures:
    def test_generator_error_allows_retry(self):
        generator = RecordingGenerator(challenge_error=RuntimeError("offline"))
        session = start(make_session(generator=generator))
        session.tick(2000)

        assert session.game.active_challenge is None
        assert session.game.phase == PLAYING
        assert session.request_challenge() is True

    def test_malformed_challenge_is_dropped(self):
        generator = RecordingGenerator(challenge={"title": "half a challenge"})
        session = start(make_session(generator=generator))
        session.tick(2000)

        assert session.game.active_challenge is None
        assert session.request_challenge() is True

    def test_results_from_previous_session_are_discarded(self):
        executor = DeferredExecutor()
        session = start(make_session(executor=executor))
        session.tick(2000)
        assert executor.queue

        start(session, now=5000)
        executor.run_all()
        session.tick(5001)

        assert session.game.active_challenge is None
        assert session.generation == 2


class TestEventDispatch:
    def test_food_triggers_trivia(self):
        session = start(make_session(theme="jungle"))
        session.game.food = Point(120, 100)
        session.tick(100)

        assert session.game.score == 10
        assert session.facts == ["fact about jungle"]

    def test_death_triggers_commentary_and_analytics(self):
        analytics = RecordingAnalytics()
        session = start(make_session(analytics=analytics))
        session.game.snake = Snake([(780, 100)], direction=RIGHT)
        session.tick(100)

        assert session.game.phase == GAME_OVER
        assert session.comments == ["Game Over!"]
        assert ("track_game_over", 0, WALL, 0) in analytics.calls
        assert analytics.calls[0][0] == "track_game_start"

    def test_close_call_triggers_commentary(self):
        session = start(make_session())
        session.game.snake = Snake([(760, 100)], direction=RIGHT)
        session.tick(100)

        assert session.game.close_calls == 1
        assert session.comments == ["Close Call!"]

    def test_missing_analytics_is_fine(self):
        session = start(make_session(analytics=None))
        session.game.snake = Snake([(780, 100)], direction=RIGHT)
        session.tick(100)
        assert session.summary()["death_reason"] == WALL


class TestSessionHelpers:
    def test_cycle_theme_wraps(self):
        session = make_session()
        assert [session.cycle_theme() for _ in range(3)] == ["jungle", "lava", "neon"]

    def test_unknown_theme_defaults_to_neon(self):
        assert make_session(theme="desert").theme == "neon"

    def test_start_clears_previous_output(self):
        session = start(make_session())
        session.facts.append("old")
        start(session, now=1000)
        assert session.facts == []
        assert session.session_id is not None

    @pytest.mark.parametrize("key", [
        "session_id", "phase", "score", "close_calls", "snake_length",
        "boss_active", "challenges_won", "challenges_lost", "theme",
    ])
    def test_summary_keys(self, key):
        assert key in start(make_session()).summary()
