"""
GameState entity - a snapshot of the engine at a point in time.
"""

from typing import Any, Dict, List, Optional, Tuple


class GameState:
    """
    A read-only snapshot of the game, handed to rendering/UI code and autopilot players.

    Attributes:
        phase: MENU, PLAYING or GAME_OVER
        score: current score
        snake_positions: list of (x, y) pixel positions, head first
        boss_positions: list of (x, y) for the boss, empty when inactive
        food: (x, y) of the food
        power_up_item: dict with position/kind/spawn_time, or None
        active_power_up: kind of the active effect, or None
        direction: direction used on the last movement tick
        game_speed: milliseconds per cell
        death_reason: 'wall', 'self', 'boss' or None
        challenge: snapshot dict of the active challenge, or None
        close_calls: close-call counter
        width, height, grid_size: board geometry in pixels
    """

    def __init__(
        self,
        phase: str,
        score: int,
        snake_positions: List[Tuple[int, int]],
        boss_positions: List[Tuple[int, int]],
        food: Tuple[int, int],
        power_up_item: Optional[Dict[str, Any]],
        active_power_up: Optional[str],
        direction: str,
        game_speed: float,
        death_reason: Optional[str],
        challenge: Optional[Dict[str, Any]],
        close_calls: int,
        width: int,
        height: int,
        grid_size: int,
    ):
        self.phase = phase
        self.score = score
        self.snake_positions = snake_positions
        self.boss_positions = boss_positions
        self.food = food
        self.power_up_item = power_up_item
        self.active_power_up = active_power_up
        self.direction = direction
        self.game_speed = game_speed
        self.death_reason = death_reason
        self.challenge = challenge
        self.close_calls = close_calls
        self.width = width
        self.height = height
        self.grid_size = grid_size

    def print_board(self) -> str:
        """
        Returns a string representation of the board with:
        . = empty space
        F = food
        P = power-up item
        H = snake head, s = snake body
        B = boss head, b = boss body
        Rows are printed top to bottom (pixel y grows downward).
        """
        cols = self.width // self.grid_size
        rows = self.height // self.grid_size
        board = [['.' for _ in range(cols)] for _ in range(rows)]

        def place(point, mark):
            col, row = point[0] // self.grid_size, point[1] // self.grid_size
            if 0 <= col < cols and 0 <= row < rows:
                board[row][col] = mark

        place(self.food, 'F')
        if self.power_up_item:
            place(self.power_up_item["position"], 'P')

        for idx, pos in enumerate(self.boss_positions):
            place(pos, 'B' if idx == 0 else 'b')

        for idx, pos in enumerate(self.snake_positions):
            place(pos, 'H' if idx == 0 else 's')

        result = [f"{row:2d} {' '.join(board[row])}" for row in range(rows)]
        # Column labels, last digit only to keep the grid aligned
        result.append("   " + " ".join(str(col % 10) for col in range(cols)))

        return "\n".join(result)

    def __repr__(self):
        return (
            f"<GameState phase={self.phase}, score={self.score}, "
            f"length={len(self.snake_positions)}, food={self.food}, "
            f"boss={'on' if self.boss_positions else 'off'}>"
        )
