"""Event records emitted by agents and the depot during a tick."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from .grid import Position


@dataclass(frozen=True)
class SimEvent:
    tick: int

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a CSV-compatible row (kind, tick, details)."""
        data = asdict(self)
        tick = data.pop('tick')
        details = ";".join(f"{k}={v}" for k, v in data.items())
        return {"tick": tick, "kind": self.kind, "details": details}


@dataclass(frozen=True)
class AgentMoved(SimEvent):
    agent_id: int
    origin: Position
    destination: Position


@dataclass(frozen=True)
class DiscoveryReported(SimEvent):
    agent_id: int
    resource: str
    position: Position


@dataclass(frozen=True)
class DiscoveryRegistered(SimEvent):
    resource: str
    position: Position
    outcome: str


@dataclass(frozen=True)
class LedgerConflict(SimEvent):
    position: Position
    reported: str
    kept: str


@dataclass(frozen=True)
class TargetClaimed(SimEvent):
    agent_id: int
    resource: str
    position: Position


@dataclass(frozen=True)
class TargetAbandoned(SimEvent):
    agent_id: int
    position: Position


@dataclass(frozen=True)
class ResourceCollected(SimEvent):
    agent_id: int
    resource: str
    position: Position


@dataclass(frozen=True)
class ResourceDeposited(SimEvent):
    agent_id: int
    resource: str
    stock: int


@dataclass(frozen=True)
class AgentSpawned(SimEvent):
    agent_id: int
    role: str
    specialization: Optional[str]


@dataclass(frozen=True)
class AgentStalled(SimEvent):
    agent_id: int
    position: Position
    destination: Position


class EventLog:
    """Append-only buffer of events, drained once per tick."""

    def __init__(self):
        self._events: List[SimEvent] = []
        self.total = 0

    def record(self, event: SimEvent) -> None:
        self._events.append(event)
        self.total += 1

    def drain(self) -> List[SimEvent]:
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)
