"""Tests for the simulation engine."""

from __future__ import annotations

import numpy as np
import pytest

from colony_sim.config import BehaviorConfig, MapConfig, RosterConfig, SimulationConfig
from colony_sim.model.agent import AgentState
from colony_sim.model.engine import SimulationEngine
from colony_sim.model.grid import Tile


def _config(seed: int = 7, **kwargs) -> SimulationConfig:
    config = SimulationConfig(
        map=MapConfig(width=30, height=20),
        max_steps=kwargs.pop("max_steps", 200),
        seed=seed,
        **kwargs,
    )
    return config


def _positions(engine: SimulationEngine):
    return [(a.agent_id, a.position, a.state) for a in engine.agents]


class TestEngineSetup:
    def test_initial_roster_at_station(self) -> None:
        engine = SimulationEngine(_config())
        assert len(engine.agents) == 5
        assert all(a.position == engine.station for a in engine.agents)
        roles = [a.role.value for a in engine.agents]
        assert roles.count("explorer") == 3
        assert roles.count("collector") == 2
        assert engine.grid.get(*engine.station) == Tile.STATION

    def test_custom_roster(self) -> None:
        engine = SimulationEngine(_config(
            roster=RosterConfig(explorers=1, energy_collectors=0, ore_collectors=2)))
        assert [a.specialization for a in engine.agents] == [None, Tile.ORE, Tile.ORE]

    def test_seed_is_resolved_when_missing(self) -> None:
        config = _config()
        config.seed = None
        engine = SimulationEngine(config)
        assert isinstance(engine.seed, int)


class TestStepping:
    def test_step_without_dt_runs_one_tick(self) -> None:
        engine = SimulationEngine(_config())
        state = engine.step()
        assert state.step == 1
        assert engine.current_step == 1

    def test_step_with_dt_is_rate_limited(self) -> None:
        engine = SimulationEngine(_config(step_interval=0.3))
        assert engine.step(0.1) is None
        assert engine.step(0.1) is None
        state = engine.step(0.15)
        assert state is not None and state.step == 1
        assert engine.step(0.1) is None
        assert engine.current_step == 1

    def test_zero_interval_ticks_every_call(self) -> None:
        engine = SimulationEngine(_config(step_interval=0.0))
        assert engine.step(0.0) is not None
        assert engine.step(0.0) is not None

    def test_is_finished_after_max_steps(self) -> None:
        engine = SimulationEngine(_config(max_steps=3))
        while not engine.is_finished():
            engine.step()
        assert engine.current_step == 3


class TestEngineRun:
    def test_same_seed_same_trajectory(self) -> None:
        first = SimulationEngine(_config(seed=31))
        second = SimulationEngine(_config(seed=31))
        for _ in range(60):
            first.step()
            second.step()
        assert _positions(first) == _positions(second)
        assert first.grid == second.grid

    def test_async_pathfinding_matches_sync(self) -> None:
        sync = SimulationEngine(_config(seed=12))
        with SimulationEngine(_config(
                seed=12, behavior=BehaviorConfig(async_pathfinding=True))) as pooled:
            for _ in range(40):
                sync.step()
                pooled.step()
            assert _positions(sync) == _positions(pooled)

    @pytest.mark.parametrize("seed", [3, 8, 21])
    def test_invariants_hold_over_long_run(self, seed: int) -> None:
        engine = SimulationEngine(_config(seed=seed, max_steps=300))
        while not engine.is_finished():
            state = engine.step()
            assert int(np.count_nonzero(state.tiles == Tile.STATION)) == 1
            for agent in state.agents:
                assert not engine.grid.is_obstacle(agent.x, agent.y)
            assert all(0 <= v < 3 for v in state.stock.values())
            positions = [d.position for d in engine.depot.ledger]
            assert len(positions) == len(set(positions))

    def test_agent_spawned_mid_tick_acts_next_tick(self) -> None:
        config = _config(seed=2, roster=RosterConfig(
            explorers=0, energy_collectors=1, ore_collectors=0))
        # Threshold above the noise range: open map, no resources
        config.map = MapConfig(width=12, height=8, obstacle_threshold=0.99,
                               resource_probabilities={})
        engine = SimulationEngine(config)
        station = engine.station

        ore_cell = engine.grid.reachable_neighbors(*station)[0]
        engine.grid.set(*ore_cell, Tile.ORE)
        engine.depot.register_discovery(Tile.ORE, ore_cell)

        engine.depot.deposit(Tile.ENERGY)
        engine.depot.deposit(Tile.ENERGY)
        hauler = engine.agents[0]
        hauler.cargo = (Tile.ENERGY, ore_cell)
        hauler.state = AgentState.RETURNING

        state = engine.step()
        assert [e.kind for e in state.events][-1] == "AgentSpawned"
        spawned = state.agents[-1]
        assert spawned.specialization == "ORE"
        assert (spawned.x, spawned.y) == station
        assert spawned.state == "exploring"
        assert engine.depot.entry_at(ore_cell) is not None

        state = engine.step()
        assert "TargetClaimed" in [e.kind for e in state.events]
        assert (state.agents[-1].x, state.agents[-1].y) == ore_cell
        assert engine.depot.entry_at(ore_cell) is None

    def test_agents_are_never_removed(self) -> None:
        engine = SimulationEngine(_config(seed=5))
        counts = []
        for _ in range(200):
            counts.append(len(engine.step().agents))
        assert counts == sorted(counts)
        assert counts[0] >= 5


class TestSnapshot:
    def test_snapshot_is_a_copy(self) -> None:
        engine = SimulationEngine(_config())
        state = engine.snapshot()
        state.tiles[:, :] = Tile.OBSTACLE
        assert engine.grid.count(Tile.OBSTACLE) < engine.grid.width * engine.grid.height

    def test_snapshot_contents(self) -> None:
        engine = SimulationEngine(_config())
        state = engine.step()
        assert state.station == engine.station
        assert set(state.stock) == {"energy", "ore"}
        assert state.metrics["total_agents"] == len(state.agents)
        assert {a.role for a in state.agents} == {"explorer", "collector"}
        rows = state.to_csv_rows()
        assert len(rows) == len(state.agents)
        assert rows[0]["step"] == 1

    def test_summary(self) -> None:
        engine = SimulationEngine(_config(seed=99))
        for _ in range(10):
            engine.step()
        summary = engine.get_summary()
        assert summary["seed"] == 99
        assert summary["total_steps"] == 10
        assert summary["map"]["station"] == 1
        assert summary["agents_spawned"] == summary["agents_total"] - 5
