"""Agents and their role-specific behavior state machine."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Set, Tuple, TYPE_CHECKING

import numpy as np

from .grid import Grid, Tile, Position
from .events import (
    EventLog, AgentMoved, DiscoveryReported, DiscoveryRegistered,
    LedgerConflict, TargetClaimed, TargetAbandoned, ResourceCollected,
    ResourceDeposited, AgentSpawned, AgentStalled,
)
from .pathfinding import find_path

if TYPE_CHECKING:
    from .depot import StationDepot

logger = logging.getLogger(__name__)


class Role(Enum):
    EXPLORER = "explorer"
    COLLECTOR = "collector"


class AgentState(Enum):
    """Each role reads these two states in its own way."""
    EXPLORING = "exploring"
    RETURNING = "returning"


class Capability(Enum):
    """Specialized modules installed on an agent."""
    CHEMICAL_ANALYSIS = "chemical_analysis"  # collects energy
    DRILLING = "drilling"                    # collects ore
    HIGH_RES_IMAGING = "high_res_imaging"    # explorer detection


CAPABILITY_RESOURCES = {
    Capability.CHEMICAL_ANALYSIS: Tile.ENERGY,
    Capability.DRILLING: Tile.ORE,
}
RESOURCE_CAPABILITIES = {tile: cap for cap, tile in CAPABILITY_RESOURCES.items()}

# Explorers report these; science sites are deliberately not reported.
DETECTABLE_RESOURCES = (Tile.ENERGY, Tile.ORE)


def complementary(resource: Tile) -> Tile:
    """Energy surplus buys an ore collector and vice versa."""
    if resource == Tile.ENERGY:
        return Tile.ORE
    if resource == Tile.ORE:
        return Tile.ENERGY
    raise ValueError(f"{resource.name} is not a collectable resource")


@dataclass(frozen=True)
class Discovery:
    resource: Tile
    position: Position


PathFunc = Callable[[Grid, Position, Position], Optional[List[Position]]]


@dataclass
class UpdateContext:
    """Shared simulation state handed to each agent during a tick."""
    grid: Grid
    station: Position
    depot: "StationDepot"
    rng: np.random.Generator
    events: EventLog
    tick: int = 0
    discovery_threshold: int = 2
    pathfinder: PathFunc = find_path


@dataclass(eq=False)
class Agent:
    """
    A single robot on the map.

    Explorers wander towards unvisited cells, queue discoveries and report
    them at the station. Collectors claim ledger entries matching their
    specialization, fetch the resource and deposit it at the station.
    """
    agent_id: int
    position: Position
    role: Role
    capabilities: Set[Capability] = field(default_factory=set)
    state: AgentState = AgentState.EXPLORING
    discoveries: List[Discovery] = field(default_factory=list)
    cargo: Optional[Tuple[Tile, Position]] = None
    target: Optional[Position] = None
    visited: Set[Position] = field(default_factory=set)
    stalled: bool = False

    @property
    def specialization(self) -> Optional[Tile]:
        """Resource this agent collects, if any."""
        for capability in sorted(self.capabilities, key=lambda c: c.value):
            resource = CAPABILITY_RESOURCES.get(capability)
            if resource is not None:
                return resource
        return None

    def update(self, ctx: UpdateContext) -> None:
        """Advance this agent by one tick."""
        if self.role == Role.EXPLORER:
            if self.state == AgentState.EXPLORING:
                self._explore(ctx)
            else:
                self._report(ctx)
        else:
            if self.state == AgentState.EXPLORING:
                self._seek_resource(ctx)
            else:
                self._deliver(ctx)

    # -- movement helpers -------------------------------------------------

    def _move_to(self, ctx: UpdateContext, destination: Position) -> None:
        if destination != self.position:
            ctx.events.record(AgentMoved(ctx.tick, self.agent_id,
                                         self.position, destination))
            self.position = destination

    def _advance(self, ctx: UpdateContext, destination: Position) -> bool:
        """Take one step along the shortest path; False when none exists."""
        path = ctx.pathfinder(ctx.grid, self.position, destination)
        if path is None:
            return False
        if len(path) > 1:
            self._move_to(ctx, path[1])
        return True

    def _head_to_station(self, ctx: UpdateContext) -> None:
        if self._advance(ctx, ctx.station):
            self.stalled = False
            return
        if not self.stalled:
            logger.debug("Agent %d stalled at %s: no path to station %s",
                         self.agent_id, self.position, ctx.station)
            ctx.events.record(AgentStalled(ctx.tick, self.agent_id,
                                           self.position, ctx.station))
        self.stalled = True

    # -- explorer ---------------------------------------------------------

    def _explore(self, ctx: UpdateContext) -> None:
        self.visited.add(self.position)

        reachable = ctx.grid.reachable_neighbors(*self.position)
        unvisited = [p for p in reachable if p not in self.visited]
        candidates = unvisited or reachable
        if candidates:
            choice = candidates[int(ctx.rng.integers(len(candidates)))]
            self._move_to(ctx, choice)

        tile = ctx.grid.get(*self.position)
        if tile not in DETECTABLE_RESOURCES:
            return
        if any(d.position == self.position for d in self.discoveries):
            return

        self.discoveries.append(Discovery(tile, self.position))
        ctx.events.record(DiscoveryReported(ctx.tick, self.agent_id,
                                            tile.name, self.position))
        logger.debug("Explorer %d detected %s at %s",
                     self.agent_id, tile.name, self.position)
        if len(self.discoveries) >= ctx.discovery_threshold:
            self.state = AgentState.RETURNING

    def _report(self, ctx: UpdateContext) -> None:
        if self.position != ctx.station:
            self._head_to_station(ctx)
            return

        for discovery in self.discoveries:
            outcome = ctx.depot.register_discovery(discovery.resource,
                                                   discovery.position)
            ctx.events.record(DiscoveryRegistered(
                ctx.tick, discovery.resource.name, discovery.position,
                outcome.value))
            kept = ctx.depot.entry_at(discovery.position)
            if kept is not None and kept.resource != discovery.resource:
                ctx.events.record(LedgerConflict(
                    ctx.tick, discovery.position, discovery.resource.name,
                    kept.resource.name))
        self.discoveries.clear()
        self.state = AgentState.EXPLORING

    # -- collector --------------------------------------------------------

    def _seek_resource(self, ctx: UpdateContext) -> None:
        resource = self.specialization
        if resource is None:
            return

        if self.position == ctx.station and self.target is None:
            claimed = ctx.depot.claim(resource, ctx.grid)
            if claimed is not None:
                self.target = claimed.position
                ctx.events.record(TargetClaimed(ctx.tick, self.agent_id,
                                                resource.name, claimed.position))
                logger.debug("Collector %d heads for %s at %s",
                             self.agent_id, resource.name, claimed.position)

        if self.target is None:
            return

        if not self._advance(ctx, self.target):
            logger.debug("Collector %d cannot reach %s, target abandoned",
                         self.agent_id, self.target)
            ctx.events.record(TargetAbandoned(ctx.tick, self.agent_id, self.target))
            self.target = None
            self.state = AgentState.RETURNING
            return

        if self.position != self.target:
            return

        if ctx.grid.get(*self.target) == resource:
            ctx.grid.set(*self.target, Tile.EMPTY)
            self.cargo = (resource, self.target)
            ctx.events.record(ResourceCollected(ctx.tick, self.agent_id,
                                                resource.name, self.target))
        else:
            logger.debug("Collector %d found %s already emptied",
                         self.agent_id, self.target)
        self.target = None
        self.state = AgentState.RETURNING

    def _deliver(self, ctx: UpdateContext) -> None:
        if self.position != ctx.station:
            self._head_to_station(ctx)
            return

        if self.cargo is not None:
            resource, _ = self.cargo
            self.cargo = None
            spawned = ctx.depot.deposit(resource)
            ctx.events.record(ResourceDeposited(ctx.tick, self.agent_id,
                                                resource.name,
                                                ctx.depot.stock(resource)))
            if spawned is not None:
                specialization = spawned.specialization
                ctx.events.record(AgentSpawned(
                    ctx.tick, spawned.agent_id, spawned.role.value,
                    specialization.name if specialization else None))
        self.state = AgentState.EXPLORING

    def __repr__(self) -> str:
        return (f"Agent(id={self.agent_id}, role={self.role.value}, "
                f"pos={self.position}, state={self.state.value})")
