"""
Domain entities for the snake arcade engine.

This module contains the core game entities that are independent of
infrastructure concerns (LLM calls, analytics, rendering).
"""

from .constants import UP, DOWN, LEFT, RIGHT, VALID_MOVES, MENU, PLAYING, GAME_OVER
from .grid import Grid, Point
from .snake import Snake
from .challenge import Challenge, Reward
from .power_ups import PowerUpItem, ActiveEffect
from .game_state import GameState

__all__ = [
    'UP', 'DOWN', 'LEFT', 'RIGHT', 'VALID_MOVES',
    'MENU', 'PLAYING', 'GAME_OVER',
    'Grid', 'Point',
    'Snake',
    'Challenge', 'Reward',
    'PowerUpItem', 'ActiveEffect',
    'GameState',
]
