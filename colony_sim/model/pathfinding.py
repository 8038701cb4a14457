"""Breadth-first shortest paths on the tile grid."""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from .grid import Grid, Position, DIRECTIONS


def find_path(grid: Grid, start: Position, goal: Position) -> Optional[List[Position]]:
    """
    Shortest 4-connected path from start to goal, both ends included.

    Returns None when either end is an obstacle (or out of bounds) or when the
    goal cannot be reached. Ties between equally short paths are broken by
    the fixed neighbor order, so results are reproducible.
    """
    if start == goal:
        return [start]
    if grid.is_obstacle(*start) or grid.is_obstacle(*goal):
        return None

    came_from: Dict[Position, Optional[Position]] = {start: None}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current == goal:
            path = []
            node: Optional[Position] = current
            while node is not None:
                path.append(node)
                node = came_from[node]
            path.reverse()
            return path

        x, y = current
        for dx, dy in DIRECTIONS:
            nxt = (x + dx, y + dy)
            if nxt not in came_from and not grid.is_obstacle(*nxt):
                came_from[nxt] = current
                queue.append(nxt)

    return None


class PathfindingPool:
    """
    Runs find_path on a worker thread and blocks for the result.

    Each search reads its own copy of the grid, so the caller may keep
    mutating the live grid once the call returns.
    """

    def __init__(self, max_workers: int = 1):
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="pathfinding")

    def find_path(self, grid: Grid, start: Position,
                  goal: Position) -> Optional[List[Position]]:
        future = self._executor.submit(find_path, grid.copy(), start, goal)
        return future.result()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
