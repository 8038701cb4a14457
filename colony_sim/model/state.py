"""State snapshot dataclasses for the colony simulation."""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple
import numpy as np

from .events import SimEvent


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent's state at a given tick."""
    agent_id: int
    x: int
    y: int
    role: str            # "explorer", "collector"
    state: str           # "exploring", "returning"
    specialization: Optional[str]  # "ENERGY", "ORE" for collectors
    cargo: Optional[str]
    stalled: bool


@dataclass
class SimulationState:
    """Read-only view of the simulation handed to renderers and exporters."""
    step: int
    tiles: np.ndarray  # Copy of the tile grid, indexed [y, x]
    station: Tuple[int, int]
    agents: List[AgentSnapshot]
    stock: Dict[str, int]
    ledger_size: int
    events: List[SimEvent] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)

    def to_csv_rows(self) -> List[Dict]:
        """Convert to CSV-compatible format."""
        return [
            {
                "step": self.step,
                "agent_id": a.agent_id,
                "role": a.role,
                "specialization": a.specialization or "",
                "state": a.state,
                "x": a.x,
                "y": a.y,
                "cargo": a.cargo or "",
                "stalled": int(a.stalled)
            }
            for a in self.agents
        ]

    def event_rows(self) -> List[Dict]:
        return [event.to_row() for event in self.events]
