"""Simulation engine for the colony simulation."""

import logging
import numpy as np
from typing import Dict, List, Optional, Any, TYPE_CHECKING

from .grid import Tile
from .mapgen import generate_map, describe_map, resolve_seed
from .pathfinding import find_path, PathfindingPool
from .agent import Agent, Role, UpdateContext
from .depot import StationDepot
from .spawner import SpawnController
from .events import EventLog, SimEvent
from .state import SimulationState, AgentSnapshot

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Owns the world and drives the agent-update pass.

    Implements:
    1. Map generation from the configured seed
    2. Initial roster creation at the station
    3. Rate-limited ticks through step(dt)
    4. Sequential agent updates with shared grid and depot
    5. State snapshot generation
    """

    def __init__(self, config: "SimulationConfig"):
        self.config = config
        self.seed = resolve_seed(config.seed)
        self.current_step = 0
        self._elapsed = 0.0

        # Map and behavior streams are independent but both follow the seed
        behavior_seed = np.random.SeedSequence(self.seed).spawn(1)[0]
        self.rng = np.random.default_rng(behavior_seed)

        generated = generate_map(config.map, self.seed)
        self.grid = generated.grid
        self.station = generated.station
        self.map_stats = describe_map(self.grid)

        self.spawner = SpawnController(self.station)
        self.depot = StationDepot(self.spawner, config.behavior.spawn_threshold)
        self.events = EventLog()

        self._pool: Optional[PathfindingPool] = None
        if config.behavior.async_pathfinding:
            self._pool = PathfindingPool(config.behavior.pathfinding_workers)

        self._spawn_roster()
        self.initial_agent_count = len(self.spawner.agents)

    @property
    def agents(self) -> List[Agent]:
        return self.spawner.agents

    def _spawn_roster(self) -> None:
        """Create the initial agents at the station."""
        roster = self.config.roster
        for _ in range(roster.explorers):
            self.spawner.spawn_explorer()
        for _ in range(roster.energy_collectors):
            self.spawner.spawn_collector(Tile.ENERGY)
        for _ in range(roster.ore_collectors):
            self.spawner.spawn_collector(Tile.ORE)
        logger.info("Roster created: %d agents at station %s",
                    len(self.spawner.agents), self.station)

    def step(self, dt: Optional[float] = None) -> Optional[SimulationState]:
        """
        Advance the simulation.

        Without dt, runs exactly one tick. With dt (seconds since the last
        call), runs one tick once step_interval has accumulated and returns
        None otherwise.
        """
        if dt is None:
            return self.tick()

        self._elapsed += dt
        if self._elapsed < self.config.step_interval:
            return None
        self._elapsed -= self.config.step_interval
        return self.tick()

    def tick(self) -> SimulationState:
        """
        Execute one agent-update pass.

        Agents act in creation order and see each other's grid and depot
        changes immediately. Agents spawned during the pass act next tick.
        """
        self.current_step += 1

        ctx = UpdateContext(
            grid=self.grid,
            station=self.station,
            depot=self.depot,
            rng=self.rng,
            events=self.events,
            tick=self.current_step,
            discovery_threshold=self.config.behavior.discovery_threshold,
            pathfinder=self._pool.find_path if self._pool else find_path,
        )
        for agent in list(self.spawner.agents):
            agent.update(ctx)

        return self._create_state_snapshot(self.events.drain())

    def snapshot(self) -> SimulationState:
        """Current state without advancing."""
        return self._create_state_snapshot([])

    def _create_state_snapshot(self, events: List[SimEvent]) -> SimulationState:
        agent_snapshots = [
            AgentSnapshot(
                agent_id=a.agent_id,
                x=a.position[0],
                y=a.position[1],
                role=a.role.value,
                state=a.state.value,
                specialization=a.specialization.name if a.specialization else None,
                cargo=a.cargo[0].name if a.cargo else None,
                stalled=a.stalled
            )
            for a in self.spawner.agents
        ]

        metrics = {
            'total_agents': len(self.spawner.agents),
            'explorers': sum(1 for a in self.spawner.agents
                             if a.role == Role.EXPLORER),
            'collectors': sum(1 for a in self.spawner.agents
                              if a.role == Role.COLLECTOR),
            'stalled_agents': sum(1 for a in self.spawner.agents if a.stalled),
            'deposits': self.depot.deposits,
            'conflicts': self.depot.conflicts,
            'energy_remaining': self.grid.count(Tile.ENERGY),
            'ore_remaining': self.grid.count(Tile.ORE),
        }

        return SimulationState(
            step=self.current_step,
            tiles=self.grid.tiles.copy(),
            station=self.station,
            agents=agent_snapshots,
            stock=self.depot.stock_levels(),
            ledger_size=len(self.depot),
            events=events,
            metrics=metrics
        )

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return self.current_step >= self.config.max_steps

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the simulation."""
        return {
            'seed': self.seed,
            'total_steps': self.current_step,
            'agents_total': len(self.spawner.agents),
            'agents_spawned': len(self.spawner.agents) - self.initial_agent_count,
            'deposits': self.depot.deposits,
            'conflicts': self.depot.conflicts,
            'ledger_size': len(self.depot),
            'stock': self.depot.stock_levels(),
            'events_total': self.events.total,
            'map': dict(self.map_stats),
        }

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
