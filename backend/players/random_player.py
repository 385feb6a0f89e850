"""
Random player implementation - picks random safe moves.
"""

import random
from typing import Dict, List, Optional, Tuple

from domain.constants import MOVE_VECTORS, OPPOSITE_MOVES
from domain.game_state import GameState
from .base import Player


def next_positions(game_state: GameState) -> Dict[str, Tuple[int, int]]:
    """Map each direction to the head position it would produce."""
    head_x, head_y = game_state.snake_positions[0]
    g = game_state.grid_size
    return {
        move: (head_x + dx * g, head_y + dy * g)
        for move, (dx, dy) in MOVE_VECTORS.items()
    }


def safe_moves(game_state: GameState) -> List[str]:
    """
    Directions that don't hit a wall, any snake segment (the engine checks
    the new head against the body before the tail moves), or the boss, and
    that aren't a reversal.
    """
    snake_positions = game_state.snake_positions
    blocked = set(snake_positions) | set(game_state.boss_positions)

    valid_moves: List[str] = []
    for move, (new_x, new_y) in next_positions(game_state).items():
        if move == OPPOSITE_MOVES[game_state.direction] and len(snake_positions) > 1:
            continue

        # Check wall collisions
        if (new_x < 0 or new_x >= game_state.width or
                new_y < 0 or new_y >= game_state.height):
            continue

        if (new_x, new_y) in blocked:
            continue

        valid_moves.append(move)
    return valid_moves


class RandomPlayer(Player):
    """
    A random AI that picks a valid direction that avoids walls, itself and the boss.
    """

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_move(self, game_state: GameState) -> str:
        valid_moves = safe_moves(game_state)

        # If no valid moves, keep going (we'll die anyway)
        if not valid_moves:
            return game_state.direction

        return self.rng.choice(valid_moves)
