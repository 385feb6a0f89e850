"""
Base player interface for autopilot drivers.
"""

from domain.game_state import GameState


class Player:
    """
    Base class/interface for autopilot logic.

    A player looks at a GameState snapshot and returns the direction it wants
    buffered for the next tick. The engine still rejects reversals.
    """

    name = "player"

    def get_move(self, game_state: GameState) -> str:
        """
        Return a move direction given the current game state.

        Args:
            game_state: Current state of the game

        Returns:
            One of: "UP", "DOWN", "LEFT", "RIGHT"
        """
        raise NotImplementedError
