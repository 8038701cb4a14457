"""Summary report generation for the colony simulation."""

from collections import Counter
from typing import Dict, Any, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: Optional[str], seed: int):
        self.config_path = config_path
        self.seed = seed
        self.event_counts: Counter = Counter()
        self.peak_agents = 0
        self.peak_stalled = 0
        self.peak_ledger = 0
        self.first_spawn_step: Optional[int] = None

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        for event in state.events:
            self.event_counts[event.kind] += 1
            if event.kind == 'AgentSpawned' and self.first_spawn_step is None:
                self.first_spawn_step = state.step

        self.peak_agents = max(self.peak_agents, len(state.agents))
        self.peak_stalled = max(self.peak_stalled,
                                int(state.metrics.get('stalled_agents', 0)))
        self.peak_ledger = max(self.peak_ledger, state.ledger_size)

    def generate_summary(self, final_state: "SimulationState",
                         summary: Dict[str, Any],
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        map_stats = summary.get('map', {})
        stock = ", ".join(f"{k}={v}" for k, v in final_state.stock.items())
        first_spawn = (f"step {self.first_spawn_step}"
                       if self.first_spawn_step is not None else "none")

        # Build report
        lines = [
            "",
            "=" * 80,
            "                      COLONY SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path or '(defaults)'}",
            f"Seed:          {self.seed}",
            "",
            "MAP",
            "-" * 40,
            f"Station:               {final_state.station}",
            f"Obstacles:             {map_stats.get('obstacle', 0)} cells in "
            f"{map_stats.get('obstacle_clusters', 0)} clusters "
            f"(largest {map_stats.get('largest_obstacle_cluster', 0)})",
            f"Energy / Ore at start: {map_stats.get('energy', 0)} / {map_stats.get('ore', 0)}",
            f"Energy / Ore left:     {int(metrics.get('energy_remaining', 0))} / "
            f"{int(metrics.get('ore_remaining', 0))}",
            f"Science sites:         {map_stats.get('science_site', 0)}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Steps:           {final_state.step}",
            f"Agents:                {summary.get('agents_total', 0)} "
            f"({summary.get('agents_spawned', 0)} spawned, first at {first_spawn})",
            f"Deposits:              {summary.get('deposits', 0)}",
            f"Stock:                 {stock}",
            f"Ledger Entries:        {final_state.ledger_size} (peak {self.peak_ledger})",
            f"Ledger Conflicts:      {summary.get('conflicts', 0)}",
            f"Stalled Agents:        {int(metrics.get('stalled_agents', 0))} "
            f"(peak {self.peak_stalled})",
            "",
            "EVENTS",
            "-" * 40,
        ]
        for kind, count in sorted(self.event_counts.items()):
            lines.append(f"{kind + ':':<23}{count}")

        lines += [
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
            lines.append(f"Event Log:  {output_dir / 'event_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
