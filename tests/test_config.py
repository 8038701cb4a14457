"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from colony_sim.config import MapConfig, SimulationConfig, load_config
from colony_sim.model.grid import Tile

REPO_ROOT = Path(__file__).resolve().parent.parent


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestDefaults:
    def test_default_values(self) -> None:
        config = SimulationConfig()
        assert (config.map.width, config.map.height) == (50, 30)
        assert config.map.max_obstacle_run == 5
        assert config.map.resource_probabilities == {
            Tile.ENERGY: 6, Tile.ORE: 5, Tile.SCIENCE_SITE: 4}
        assert config.roster.explorers == 3
        assert config.behavior.discovery_threshold == 2
        assert config.behavior.spawn_threshold == 3
        assert config.step_interval == pytest.approx(0.3)
        config.validate()

    def test_shipped_default_config_loads(self) -> None:
        config = load_config(REPO_ROOT / "configs" / "default.yaml")
        assert config.map.width == 50
        assert config.max_steps == 1000
        assert config.seed is None


class TestLoadConfig:
    def test_partial_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, "map:\n  width: 12\n  height: 8\n"))
        assert (config.map.width, config.map.height) == (12, 8)
        assert config.map.obstacle_threshold == pytest.approx(0.5)
        assert config.roster.ore_collectors == 1
        assert config.csv_enabled is True

    def test_empty_file(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, ""))
        assert config.max_steps == 500

    def test_full_file(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, """
map:
  resource_probabilities:
    energy: 10
    ore: 0
roster:
  explorers: 1
behavior:
  discovery_threshold: 4
  async_pathfinding: true
simulation:
  max_steps: 25
  step_interval: 0.05
  seed: 1234
export:
  gif: true
  csv: false
"""))
        assert config.map.resource_probabilities == {Tile.ENERGY: 10, Tile.ORE: 0}
        assert config.roster.explorers == 1
        assert config.behavior.discovery_threshold == 4
        assert config.behavior.async_pathfinding is True
        assert config.max_steps == 25
        assert config.seed == 1234
        assert config.gif_enabled is True
        assert config.csv_enabled is False

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestValidation:
    def test_unknown_resource(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "map:\n  resource_probabilities:\n    gold: 5\n")
        with pytest.raises(ValueError, match="gold"):
            load_config(path)

    def test_probabilities_over_hundred(self) -> None:
        config = MapConfig(resource_probabilities={Tile.ENERGY: 60, Tile.ORE: 50})
        with pytest.raises(ValueError):
            config.validate()

    @pytest.mark.parametrize("threshold", [0.0, 1.0, 1.5, -0.2])
    def test_threshold_range(self, threshold: float) -> None:
        with pytest.raises(ValueError):
            MapConfig(obstacle_threshold=threshold).validate()

    def test_bad_dimensions(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, "map:\n  width: 0\n"))

    def test_bad_behavior(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, "behavior:\n  spawn_threshold: 0\n"))
