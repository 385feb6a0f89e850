"""
Greedy player implementation - walks toward the food along safe cells.
"""

from domain.game_state import GameState
from .base import Player
from .random_player import next_positions, safe_moves


class GreedyPlayer(Player):
    """
    Picks the safe move that minimises Manhattan distance to the food.
    Ties keep the current direction when possible, so the snake doesn't zigzag.
    """

    name = "greedy"

    def get_move(self, game_state: GameState) -> str:
        candidates = safe_moves(game_state)
        if not candidates:
            return game_state.direction

        fx, fy = game_state.food
        targets = next_positions(game_state)

        def score(move: str):
            x, y = targets[move]
            distance = abs(fx - x) + abs(fy - y)
            return distance, move != game_state.direction

        return min(candidates, key=score)
