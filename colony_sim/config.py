"""Configuration dataclasses and YAML loader for the colony simulation."""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path
import yaml

from .model.grid import Tile


# Tile names accepted in the resource probability table
_RESOURCE_TILE_NAMES = {
    'energy': Tile.ENERGY,
    'ore': Tile.ORE,
    'science_site': Tile.SCIENCE_SITE,
}


def _default_resource_probabilities() -> Dict[Tile, int]:
    return {Tile.ENERGY: 6, Tile.ORE: 5, Tile.SCIENCE_SITE: 4}


@dataclass
class MapConfig:
    width: int = 50
    height: int = 30
    tile_size: float = 20.0          # pixels per tile, for renderers only
    obstacle_threshold: float = 0.5  # noise value above which a cell is an obstacle
    noise_scale: float = 0.1
    max_obstacle_run: int = 5
    # Percent chance (out of 100) for each tile drawn on an empty cell
    resource_probabilities: Dict[Tile, int] = field(
        default_factory=_default_resource_probabilities)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Map dimensions must be positive, got {self.width}x{self.height}")
        if not 0.0 < self.obstacle_threshold < 1.0:
            raise ValueError(
                f"obstacle_threshold must lie in (0, 1), got {self.obstacle_threshold}")
        if self.max_obstacle_run < 1:
            raise ValueError(
                f"max_obstacle_run must be at least 1, got {self.max_obstacle_run}")
        if any(p < 0 for p in self.resource_probabilities.values()):
            raise ValueError("Resource probabilities must be non-negative")
        total = sum(self.resource_probabilities.values())
        if total > 100:
            raise ValueError(f"Resource probabilities sum to {total}%, above 100%")


@dataclass
class RosterConfig:
    """Agents created at the station when the simulation starts."""
    explorers: int = 3
    energy_collectors: int = 1
    ore_collectors: int = 1


@dataclass
class BehaviorConfig:
    discovery_threshold: int = 2  # discoveries carried before returning
    spawn_threshold: int = 3      # stock units that buy a new collector
    async_pathfinding: bool = False
    pathfinding_workers: int = 1

    def validate(self) -> None:
        if self.discovery_threshold < 1:
            raise ValueError("discovery_threshold must be at least 1")
        if self.spawn_threshold < 1:
            raise ValueError("spawn_threshold must be at least 1")
        if self.pathfinding_workers < 1:
            raise ValueError("pathfinding_workers must be at least 1")


@dataclass
class SimulationConfig:
    map: MapConfig = field(default_factory=MapConfig)
    roster: RosterConfig = field(default_factory=RosterConfig)
    behavior: BehaviorConfig = field(default_factory=BehaviorConfig)
    max_steps: int = 500
    step_interval: float = 0.3  # seconds of wall-clock time per tick

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def validate(self) -> None:
        self.map.validate()
        self.behavior.validate()
        if self.step_interval < 0:
            raise ValueError("step_interval must be non-negative")
        if self.max_steps < 0:
            raise ValueError("max_steps must be non-negative")


def _parse_resource_probabilities(raw: Dict[str, Any]) -> Dict[Tile, int]:
    """Parse the probability table from raw YAML data."""
    table = {}
    for name, percent in raw.items():
        tile = _RESOURCE_TILE_NAMES.get(str(name).lower())
        if tile is None:
            raise ValueError(f"Unknown resource type: {name}")
        table[tile] = int(percent)
    return table


def _parse_map(map_raw: Dict[str, Any]) -> MapConfig:
    defaults = MapConfig()
    probabilities = map_raw.get('resource_probabilities')
    return MapConfig(
        width=map_raw.get('width', defaults.width),
        height=map_raw.get('height', defaults.height),
        tile_size=map_raw.get('tile_size', defaults.tile_size),
        obstacle_threshold=map_raw.get('obstacle_threshold',
                                       defaults.obstacle_threshold),
        noise_scale=map_raw.get('noise_scale', defaults.noise_scale),
        max_obstacle_run=map_raw.get('max_obstacle_run',
                                     defaults.max_obstacle_run),
        resource_probabilities=(
            _parse_resource_probabilities(probabilities)
            if probabilities is not None
            else defaults.resource_probabilities
        ),
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    map_config = _parse_map(raw.get('map', {}))

    roster_raw = raw.get('roster', {})
    roster = RosterConfig(
        explorers=roster_raw.get('explorers', 3),
        energy_collectors=roster_raw.get('energy_collectors', 1),
        ore_collectors=roster_raw.get('ore_collectors', 1)
    )

    behavior_raw = raw.get('behavior', {})
    behavior = BehaviorConfig(
        discovery_threshold=behavior_raw.get('discovery_threshold', 2),
        spawn_threshold=behavior_raw.get('spawn_threshold', 3),
        async_pathfinding=behavior_raw.get('async_pathfinding', False),
        pathfinding_workers=behavior_raw.get('pathfinding_workers', 1)
    )

    sim_raw = raw.get('simulation', {})

    # Parse export config (optional)
    export_raw = raw.get('export', {})

    config = SimulationConfig(
        map=map_config,
        roster=roster,
        behavior=behavior,
        max_steps=sim_raw.get('max_steps', 500),
        step_interval=sim_raw.get('step_interval', 0.3),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False)
    )
    config.validate()
    return config
