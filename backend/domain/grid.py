"""
Grid model: board dimensions, cell size and coordinate conversion.
"""

import random
from typing import NamedTuple, Tuple

from .constants import DEFAULT_BOARD_HEIGHT, DEFAULT_BOARD_WIDTH, DEFAULT_GRID_SIZE


class Point(NamedTuple):
    """A cell position in pixel coordinates (always a multiple of the cell size)."""

    x: int
    y: int


class Grid:
    """
    Board geometry.

    Attributes:
        width, height: board size in pixels
        cell_size: edge length of one cell in pixels
        cols, rows: number of whole cells along each axis
    """

    def __init__(
        self,
        width: int = DEFAULT_BOARD_WIDTH,
        height: int = DEFAULT_BOARD_HEIGHT,
        cell_size: int = DEFAULT_GRID_SIZE,
    ):
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}.")
        if width < cell_size or height < cell_size:
            raise ValueError(
                f"Board {width}x{height} is smaller than a single {cell_size}px cell."
            )
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self.cols = width // cell_size
        self.rows = height // cell_size

    @property
    def cell_count(self) -> int:
        return self.cols * self.rows

    def to_pixel(self, col: int, row: int) -> Point:
        return Point(col * self.cell_size, row * self.cell_size)

    def contains(self, point: Tuple[int, int]) -> bool:
        """True when the point lies inside [0, width) x [0, height)."""
        x, y = point
        return 0 <= x < self.width and 0 <= y < self.height

    def offset(self, point: Tuple[int, int], dx: int, dy: int) -> Point:
        """Move a point by whole cells."""
        return Point(point[0] + dx * self.cell_size, point[1] + dy * self.cell_size)

    def random_cell(self, rng: random.Random) -> Point:
        return self.to_pixel(rng.randrange(self.cols), rng.randrange(self.rows))

    def __repr__(self):
        return f"<Grid {self.width}x{self.height} cell={self.cell_size}>"
