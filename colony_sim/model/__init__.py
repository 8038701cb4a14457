"""Model package for the colony simulation."""

from .grid import Grid, Tile
from .mapgen import GeneratedMap, MapGenerationError, generate_map, describe_map
from .pathfinding import find_path, PathfindingPool
from .agent import Agent, AgentState, Capability, Discovery, Role, UpdateContext
from .depot import RegistrationOutcome, StationDepot
from .spawner import SpawnController
from .events import EventLog, SimEvent
from .state import AgentSnapshot, SimulationState
from .engine import SimulationEngine

__all__ = [
    'Grid',
    'Tile',
    'GeneratedMap',
    'MapGenerationError',
    'generate_map',
    'describe_map',
    'find_path',
    'PathfindingPool',
    'Agent',
    'AgentState',
    'Capability',
    'Discovery',
    'Role',
    'UpdateContext',
    'RegistrationOutcome',
    'StationDepot',
    'SpawnController',
    'EventLog',
    'SimEvent',
    'AgentSnapshot',
    'SimulationState',
    'SimulationEngine',
]
