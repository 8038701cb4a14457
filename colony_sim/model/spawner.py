"""Agent registry and factory."""

from typing import List

from .grid import Tile, Position
from .agent import Agent, Role, Capability, RESOURCE_CAPABILITIES


class SpawnController:
    """Creates agents at the station and keeps them in creation order."""

    def __init__(self, station: Position):
        self.station = station
        self.agents: List[Agent] = []
        self._next_id = 1

    def _register(self, role: Role, capability: Capability) -> Agent:
        agent = Agent(agent_id=self._next_id, position=self.station,
                      role=role, capabilities={capability})
        self._next_id += 1
        self.agents.append(agent)
        return agent

    def spawn_explorer(self) -> Agent:
        return self._register(Role.EXPLORER, Capability.HIGH_RES_IMAGING)

    def spawn_collector(self, resource: Tile) -> Agent:
        capability = RESOURCE_CAPABILITIES.get(resource)
        if capability is None:
            raise ValueError(f"No collector specialization for {resource.name}")
        return self._register(Role.COLLECTOR, capability)

    def collectors_for(self, resource: Tile) -> List[Agent]:
        return [a for a in self.agents
                if a.role == Role.COLLECTOR and a.specialization == resource]

    def __len__(self) -> int:
        return len(self.agents)
