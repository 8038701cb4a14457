"""Procedural map generation: noise obstacles, run limiting, resources, station."""

import logging
from dataclasses import dataclass
from typing import Dict, Tuple, Union, TYPE_CHECKING

import numpy as np
from scipy import ndimage

from .grid import Grid, Tile, Position, DIRECTIONS
from .noise import PerlinNoise

if TYPE_CHECKING:
    from ..config import MapConfig

logger = logging.getLogger(__name__)

# Seeds are drawn from, and must fit in, an unsigned 64-bit range
MAX_SEED = 2 ** 64 - 1


class MapGenerationError(ValueError):
    """Raised when a map cannot satisfy its placement requirements."""


def random_seed() -> int:
    return int(np.random.default_rng().integers(0, MAX_SEED, dtype=np.uint64))


def resolve_seed(value: Union[int, str, None]) -> int:
    """
    Turn an optional seed input into a usable seed.

    Missing values get a fresh random seed; malformed or out-of-range values
    are logged and replaced by one.
    """
    if value is None:
        return random_seed()
    try:
        seed = int(str(value).strip())
    except ValueError:
        seed = -1
    if not 0 <= seed <= MAX_SEED:
        fallback = random_seed()
        logger.warning("Invalid seed %r, using random seed %d instead", value, fallback)
        return fallback
    return seed


@dataclass(frozen=True)
class GeneratedMap:
    grid: Grid
    station: Position
    seed: int


def place_obstacles(grid: Grid, seed: int, threshold: float, scale: float) -> None:
    """Mark cells whose noise value exceeds threshold as obstacles."""
    field = PerlinNoise(seed).grid(grid.width, grid.height, scale)
    grid.tiles[field > threshold] = Tile.OBSTACLE


def limit_obstacle_runs(grid: Grid, max_run: int) -> None:
    """
    Trim obstacle runs so that no axis-aligned run exceeds max_run cells.

    Every obstacle cell (row-major scan) walks outward in each direction,
    counting contiguous obstacles including itself. Each cell reached after
    the count exceeds max_run is cleared; the walk carries on through the
    remainder of the run.
    """
    tiles = grid.tiles
    for y in range(grid.height):
        for x in range(grid.width):
            if tiles[y, x] != Tile.OBSTACLE:
                continue
            for dx, dy in DIRECTIONS:
                run_length = 1
                nx, ny = x + dx, y + dy
                while grid.in_bounds(nx, ny) and tiles[ny, nx] == Tile.OBSTACLE:
                    run_length += 1
                    if run_length > max_run:
                        tiles[ny, nx] = Tile.EMPTY
                    nx += dx
                    ny += dy


def scatter_resources(grid: Grid, rng: np.random.Generator,
                      probabilities: Dict[Tile, int]) -> None:
    """
    Draw a value in [0, 100) for every empty cell (row-major) and map it
    through the cumulative probability table.
    """
    empty_mask = grid.tiles == Tile.EMPTY
    n_empty = int(np.count_nonzero(empty_mask))
    if n_empty == 0 or not probabilities:
        return

    draws = rng.integers(0, 100, size=n_empty)
    tiles = list(probabilities.keys())
    bounds = np.cumsum([probabilities[t] for t in tiles])

    # searchsorted(side='right') maps draw d to the first bucket with bound > d
    bucket = np.searchsorted(bounds, draws, side='right')
    lookup = np.array([int(t) for t in tiles] + [int(Tile.EMPTY)], dtype=np.uint8)
    grid.tiles[empty_mask] = lookup[bucket]


def place_station(grid: Grid, rng: np.random.Generator) -> Position:
    """Draw random cells until an empty one is found; mark it as the station."""
    if grid.count(Tile.EMPTY) == 0:
        raise MapGenerationError("No empty cell available for the station")
    while True:
        x = int(rng.integers(0, grid.width))
        y = int(rng.integers(0, grid.height))
        if grid.tiles[y, x] == Tile.EMPTY:
            grid.tiles[y, x] = Tile.STATION
            return (x, y)


def generate_map(config: "MapConfig", seed: int) -> GeneratedMap:
    """
    Build a grid from a seed.

    Identical (config, seed) pairs always produce identical tiles and station
    position.
    """
    grid = Grid(config.width, config.height)
    rng = np.random.default_rng(seed)

    place_obstacles(grid, seed, config.obstacle_threshold, config.noise_scale)
    limit_obstacle_runs(grid, config.max_obstacle_run)
    scatter_resources(grid, rng, config.resource_probabilities)
    station = place_station(grid, rng)

    logger.info("Map %dx%d generated from seed %d, station at %s",
                grid.width, grid.height, seed, station)
    return GeneratedMap(grid=grid, station=station, seed=seed)


def describe_map(grid: Grid) -> Dict[str, int]:
    """Tile counts plus 4-connected obstacle cluster statistics."""
    stats = {tile.name.lower(): grid.count(tile) for tile in Tile}

    labels, n_clusters = ndimage.label(grid.tiles == Tile.OBSTACLE)
    stats['obstacle_clusters'] = int(n_clusters)
    if n_clusters:
        sizes = np.bincount(labels.ravel())[1:]
        stats['largest_obstacle_cluster'] = int(sizes.max())
    else:
        stats['largest_obstacle_cluster'] = 0
    return stats


def longest_obstacle_run(grid: Grid) -> Tuple[int, int]:
    """Return the longest (horizontal, vertical) run of contiguous obstacles."""
    mask = grid.tiles == Tile.OBSTACLE

    def _longest(rows: np.ndarray) -> int:
        best = 0
        for row in rows:
            current = 0
            for cell in row:
                current = current + 1 if cell else 0
                best = max(best, current)
        return best

    return _longest(mask), _longest(mask.T)
