"""
Tests for the domain entities (Grid, Snake, Challenge, GameState).
"""

import os
import sys
import random
from collections import deque

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domain import GameState, Grid, Point, Snake  # noqa: E402
from domain.challenge import Challenge  # noqa: E402
from domain.constants import (  # noqa: E402
    CHALLENGE_REWARD_POINTS, DOWN, EAT_TARGET, LEFT, RIGHT, SLOW_MOTION, SURVIVE, UP,
)


class TestGrid:
    def test_dimensions(self):
        grid = Grid(800, 600, 20)
        assert grid.cols == 40
        assert grid.rows == 30
        assert grid.cell_count == 1200

    def test_cell_to_pixel(self):
        grid = Grid(800, 600, 20)
        assert grid.to_pixel(5, 5) == Point(100, 100)

    @pytest.mark.parametrize("point,inside", [
        ((0, 0), True),
        ((780, 580), True),
        ((800, 0), False),
        ((0, 600), False),
        ((-20, 100), False),
    ])
    def test_contains(self, point, inside):
        assert Grid(800, 600, 20).contains(point) is inside

    def test_random_cell_is_aligned(self):
        grid = Grid(800, 600, 20)
        rng = random.Random(7)
        for _ in range(50):
            cell = grid.random_cell(rng)
            assert grid.contains(cell)
            assert cell.x % 20 == 0 and cell.y % 20 == 0

    def test_invalid_geometry_raises(self):
        with pytest.raises(ValueError):
            Grid(800, 600, 0)
        with pytest.raises(ValueError):
            Grid(10, 10, 20)


class TestSnake:
    """Tests for the Snake class."""

    def test_snake_initialization(self):
        snake = Snake([(5, 5), (4, 5), (3, 5)])
        assert list(snake.positions) == [(5, 5), (4, 5), (3, 5)]
        assert isinstance(snake.positions, deque)
        assert snake.head == Point(5, 5)
        assert snake.direction == RIGHT
        assert len(snake) == 3

    def test_empty_snake_rejected(self):
        with pytest.raises(ValueError):
            Snake([])

    def test_advance_without_growth_keeps_length(self):
        snake = Snake([(40, 0), (20, 0)])
        snake.advance(Point(60, 0))
        assert snake.segments() == [Point(60, 0), Point(40, 0)]

    def test_advance_with_growth(self):
        snake = Snake([(40, 0), (20, 0)])
        snake.advance(Point(60, 0), grow=True)
        assert len(snake) == 3

    def test_queue_direction_rejects_reversal(self):
        snake = Snake([(40, 0)], direction=UP)
        assert snake.queue_direction(DOWN) is False
        assert snake.queue_direction(LEFT) is True
        assert snake.commit_direction() == LEFT


class TestChallenge:
    """Tests for Challenge.from_dict and helpers."""

    def test_from_camel_case_payload(self):
        challenge = Challenge.from_dict({
            "title": "Speed Freak",
            "description": "Survive!",
            "goalType": "survive",
            "targetValue": 15,
            "timeLimitSeconds": 15,
            "reward": {"points": 500, "powerUp": SLOW_MOTION},
            "failureCondition": "DIE",
        })
        assert challenge.goal_type == SURVIVE
        assert challenge.target_value == 15
        assert challenge.reward.points == 500
        assert challenge.reward.power_up == SLOW_MOTION
        assert challenge.active is False
        assert challenge.id

    def test_from_snake_case_payload_with_default_reward(self):
        challenge = Challenge.from_dict({
            "title": "Snack",
            "description": "Eat",
            "goal_type": EAT_TARGET,
            "target_value": "3",
            "time_limit_seconds": 20,
        })
        assert challenge.target_value == 3
        assert challenge.reward.points == CHALLENGE_REWARD_POINTS
        assert challenge.reward.power_up is None

    def test_unknown_reward_power_up_is_dropped(self):
        challenge = Challenge.from_dict({
            "title": "t", "description": "d", "goalType": SURVIVE,
            "targetValue": 1, "timeLimitSeconds": 5,
            "reward": {"points": 10, "powerUp": "INFINITE_LIVES"},
        })
        assert challenge.reward.power_up is None

    @pytest.mark.parametrize("payload", [
        {"title": "t", "description": "d", "goalType": SURVIVE, "targetValue": 1},
        {"title": "t", "description": "d", "goalType": "WIN_THE_LOTTERY", "targetValue": 1, "timeLimitSeconds": 5},
        {"title": "t", "description": "d", "goalType": SURVIVE, "targetValue": "lots", "timeLimitSeconds": 5},
        {"title": "t", "description": "d", "goalType": SURVIVE, "targetValue": 1, "timeLimitSeconds": 0},
    ])
    def test_invalid_payloads_raise(self, payload):
        with pytest.raises(ValueError):
            Challenge.from_dict(payload)

    def test_elapsed_seconds(self):
        challenge = Challenge("t", "d", SURVIVE, 1, 10, start_time=2000)
        assert challenge.elapsed_seconds(5000) == 3


class TestGameState:
    def _state(self, **overrides):
        fields = dict(
            phase="PLAYING",
            score=20,
            snake_positions=[(40, 20), (20, 20)],
            boss_positions=[],
            food=(80, 80),
            power_up_item=None,
            active_power_up=None,
            direction=RIGHT,
            game_speed=98,
            death_reason=None,
            challenge=None,
            close_calls=0,
            width=100,
            height=100,
            grid_size=20,
        )
        fields.update(overrides)
        return GameState(**fields)

    def test_print_board_layout(self):
        board = self._state().print_board().split("\n")
        # 5 rows plus the label row
        assert len(board) == 6
        assert board[1] == " 1 . s H . ."
        assert board[4] == " 4 . . . . F"

    def test_print_board_shows_boss_and_power_up(self):
        state = self._state(
            boss_positions=[(0, 60), (0, 80)],
            power_up_item={"position": (60, 0), "kind": "MAGNET", "spawn_time": 0},
        )
        board = state.print_board()
        assert "B" in board and "b" in board and "P" in board

    def test_repr(self):
        assert "score=20" in repr(self._state())
