"""Shared fixtures for colony simulation tests."""

from __future__ import annotations

from typing import Callable, List, Optional

import numpy as np
import pytest

from colony_sim.model.agent import UpdateContext
from colony_sim.model.depot import StationDepot
from colony_sim.model.events import EventLog
from colony_sim.model.grid import Grid, Tile
from colony_sim.model.spawner import SpawnController

_ASCII_TILES = {
    ".": Tile.EMPTY,
    "#": Tile.OBSTACLE,
    "E": Tile.ENERGY,
    "O": Tile.ORE,
    "*": Tile.SCIENCE_SITE,
    "S": Tile.STATION,
}


@pytest.fixture
def make_grid() -> Callable[[List[str]], Grid]:
    """Build a grid from ASCII rows; rows[y][x], see _ASCII_TILES."""

    def _make(rows: List[str]) -> Grid:
        return Grid.from_rows([[_ASCII_TILES[c] for c in row] for row in rows])

    return _make


class World:
    """Grid, depot, spawner and event log wired the way the engine wires them."""

    def __init__(self, grid: Grid, discovery_threshold: int = 2, seed: int = 0):
        self.grid = grid
        self.station = next(grid.positions_of(Tile.STATION))
        self.spawner = SpawnController(self.station)
        self.depot = StationDepot(self.spawner)
        self.events = EventLog()
        self.rng = np.random.default_rng(seed)
        self.discovery_threshold = discovery_threshold
        self.tick = 0

    def context(self) -> UpdateContext:
        self.tick += 1
        return UpdateContext(
            grid=self.grid,
            station=self.station,
            depot=self.depot,
            rng=self.rng,
            events=self.events,
            tick=self.tick,
            discovery_threshold=self.discovery_threshold,
        )

    def run(self, agent, ticks: int = 1) -> None:
        for _ in range(ticks):
            agent.update(self.context())

    def event_kinds(self) -> List[str]:
        return [e.kind for e in self.events.drain()]


@pytest.fixture
def make_world(make_grid) -> Callable[..., World]:
    def _make(rows: List[str], discovery_threshold: int = 2,
              seed: Optional[int] = 0) -> World:
        return World(make_grid(rows), discovery_threshold, seed)

    return _make
