"""Station depot: discovery ledger, resource stock and spawn trigger."""

import logging
from collections import Counter
from enum import Enum
from typing import Dict, Optional, Tuple, TYPE_CHECKING

from .grid import Grid, Tile, Position
from .agent import Agent, Discovery, RESOURCE_CAPABILITIES, complementary

if TYPE_CHECKING:
    from .spawner import SpawnController

logger = logging.getLogger(__name__)


class RegistrationOutcome(Enum):
    INSERTED = "inserted"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"


class StationDepot:
    """
    Ledger of reported discoveries keyed by position, plus stock counters.

    At most one ledger entry exists per position; the first report for a
    position wins over any later report of a different resource.
    """

    def __init__(self, spawner: Optional["SpawnController"] = None,
                 spawn_threshold: int = 3):
        self.spawner = spawner
        self.spawn_threshold = spawn_threshold
        self._ledger: Dict[Position, Discovery] = {}
        self._stock: Counter = Counter()
        self.conflicts = 0
        self.deposits = 0

    @property
    def ledger(self) -> Tuple[Discovery, ...]:
        return tuple(self._ledger.values())

    def entry_at(self, position: Position) -> Optional[Discovery]:
        return self._ledger.get(position)

    def stock(self, resource: Tile) -> int:
        return self._stock[resource]

    def stock_levels(self) -> Dict[str, int]:
        return {tile.name.lower(): self._stock[tile] for tile in RESOURCE_CAPABILITIES}

    def register_discovery(self, resource: Tile, position: Position) -> RegistrationOutcome:
        existing = self._ledger.get(position)
        if existing is None:
            self._ledger[position] = Discovery(resource, position)
            return RegistrationOutcome.INSERTED
        if existing.resource == resource:
            return RegistrationOutcome.DUPLICATE

        self.conflicts += 1
        logger.warning("Ledger conflict at %s: %s reported over recorded %s, keeping %s",
                       position, resource.name, existing.resource.name,
                       existing.resource.name)
        return RegistrationOutcome.CONFLICT

    def claim(self, resource: Tile, grid: Grid) -> Optional[Discovery]:
        """Remove and return the oldest entry of this type whose tile still holds it."""
        for position, discovery in self._ledger.items():
            if discovery.resource == resource and grid.get(*position) == resource:
                del self._ledger[position]
                return discovery
        return None

    def deposit(self, resource: Tile) -> Optional[Agent]:
        """
        Add one unit of resource to stock.

        When the counter reaches the spawn threshold it is reduced by the
        threshold and one collector of the complementary resource is spawned.
        Returns the new agent, if any.
        """
        if resource not in RESOURCE_CAPABILITIES:
            raise ValueError(f"Cannot deposit {resource.name}")

        self._stock[resource] += 1
        self.deposits += 1
        if self._stock[resource] < self.spawn_threshold:
            return None

        self._stock[resource] -= self.spawn_threshold
        if self.spawner is None:
            return None

        spawned = self.spawner.spawn_collector(complementary(resource))
        logger.info("%d %s stocked, spawned %s collector %d",
                    self.spawn_threshold, resource.name,
                    complementary(resource).name, spawned.agent_id)
        return spawned

    def __len__(self) -> int:
        return len(self._ledger)
