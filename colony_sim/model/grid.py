"""Tile grid for the colony simulation."""

from enum import IntEnum
from typing import Iterator, List, Tuple

import numpy as np


Position = Tuple[int, int]

# Fixed neighbor order (down, up, right, left) shared by pathfinding and
# exploration so that every tie-break is reproducible.
DIRECTIONS: Tuple[Position, ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))


class Tile(IntEnum):
    """Content of a single cell."""
    EMPTY = 0
    OBSTACLE = 1
    ENERGY = 2
    ORE = 3
    SCIENCE_SITE = 4
    STATION = 5


class Grid:
    """
    Tile matrix with obstacle and bounds queries.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Anything outside the grid reads as an obstacle.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.tiles = np.full((height, width), Tile.EMPTY, dtype=np.uint8)

    @classmethod
    def from_rows(cls, rows: List[List[Tile]]) -> "Grid":
        """Build a grid from a list of rows (rows[y][x])."""
        grid = cls(len(rows[0]), len(rows))
        grid.tiles[:, :] = np.array(rows, dtype=np.uint8)
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Tile:
        """Return tile at position; out of bounds reads as OBSTACLE."""
        if not self.in_bounds(x, y):
            return Tile.OBSTACLE
        return Tile(int(self.tiles[y, x]))

    def set(self, x: int, y: int, tile: Tile) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Position ({x}, {y}) outside {self.width}x{self.height} grid")
        self.tiles[y, x] = tile

    def is_obstacle(self, x: int, y: int) -> bool:
        """Check if cell is out of bounds or an obstacle."""
        if not self.in_bounds(x, y):
            return True
        return self.tiles[y, x] == Tile.OBSTACLE

    def reachable_neighbors(self, x: int, y: int) -> List[Position]:
        """Return passable 4-neighbors in the fixed direction order."""
        neighbors = []
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if not self.is_obstacle(nx, ny):
                neighbors.append((nx, ny))
        return neighbors

    def positions_of(self, tile: Tile) -> Iterator[Position]:
        """Yield positions holding the given tile in row-major order."""
        ys, xs = np.nonzero(self.tiles == tile)
        for x, y in zip(xs, ys):
            yield int(x), int(y)

    def count(self, tile: Tile) -> int:
        return int(np.count_nonzero(self.tiles == tile))

    def copy(self) -> "Grid":
        clone = Grid(self.width, self.height)
        clone.tiles = self.tiles.copy()
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.tiles, other.tiles))

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height})"
