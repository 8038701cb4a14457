#!/usr/bin/env python3
"""
Robot Colony Simulation

Explorers map a procedurally generated planet, collectors haul energy and ore
back to the station, and the station builds new collectors from its stock.

Usage:
    colony-sim [--config configs/default.yaml] [options]

Examples:
    colony-sim
    colony-sim --config configs/default.yaml --seed 42
    colony-sim --steps 2000 --gif --out-dir results/
    colony-sim --no-csv --no-snapshot --quiet
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import SimulationConfig, load_config
from .model.engine import SimulationEngine
from .model.mapgen import MapGenerationError, resolve_seed
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Robot Colony Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    colony-sim
    colony-sim --config configs/default.yaml --seed 42
    colony-sim --steps 2000 --gif --out-dir results/
    colony-sim --no-csv --no-snapshot --quiet
        """
    )

    parser.add_argument('--config', type=Path, default=None,
                        help='Path to YAML configuration file (default: built-in settings)')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max simulation steps')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--realtime', action='store_true', default=False,
                        help='Pace ticks by the configured step interval')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Log at INFO level')
    parser.add_argument('--log-level', default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Explicit log level (overrides --verbose)')

    # Kept as a string: malformed seeds fall back to a random one
    parser.add_argument('--seed', default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def _configure_logging(args: argparse.Namespace) -> None:
    level = args.log_level or ('INFO' if args.verbose else 'WARNING')
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


def _run_realtime(engine: SimulationEngine, on_state) -> None:
    """Feed wall-clock deltas into engine.step until the run is finished."""
    last = time.monotonic()
    pause = max(engine.config.step_interval / 10, 0.001)
    while not engine.is_finished():
        now = time.monotonic()
        state = engine.step(now - last)
        last = now
        if state is not None:
            on_state(state)
        else:
            time.sleep(pause)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    _configure_logging(args)

    # Load configuration
    if args.config is None:
        config = SimulationConfig()
    else:
        try:
            config = load_config(args.config)
        except FileNotFoundError:
            print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
            return 1
        except (ValueError, KeyError, TypeError) as e:
            print(f"Error loading config: {e}", file=sys.stderr)
            return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    config.seed = resolve_seed(args.seed if args.seed is not None else config.seed)
    config.out_dir = args.out_dir

    # Initialize engine
    if not config.quiet:
        print(f"Initializing simulation...")
        print(f"  Seed: {config.seed}")
        print(f"  Map: {config.map.width}x{config.map.height}")
        print(f"  Max steps: {config.max_steps}")

    try:
        engine = SimulationEngine(config)
    except MapGenerationError as e:
        print(f"Error generating map: {e}", file=sys.stderr)
        return 1
    logging.getLogger(__name__).info("Simulation seed: %d", engine.seed)

    if not config.quiet:
        print(f"  Station: {engine.station}")
        print(f"  Agents: {len(engine.agents)}")

    # Initialize exporters
    csv_writer = None
    event_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()
        event_writer = CSVWriter.for_events(config.out_dir / 'event_log.csv')
        event_writer.open()

    visualizer = Visualizer(config.map.width, config.map.height)
    reporter = Reporter(str(args.config) if args.config else None, engine.seed)

    final_state = engine.snapshot()

    def on_state(state):
        nonlocal final_state
        final_state = state

        if csv_writer:
            csv_writer.append(state)
            event_writer.append(state)

        # Buffer GIF frame (every N steps to reduce memory)
        if config.gif_enabled:
            if state.step % 5 == 0 or engine.is_finished():
                visualizer.buffer_frame(state)

        reporter.update(state)

        # Progress indicator
        if not config.quiet and state.step % 100 == 0:
            print(f"  Step {state.step}: {len(state.agents)} agents, "
                  f"{int(state.metrics.get('deposits', 0))} deposits, "
                  f"{state.ledger_size} ledger entries")

    # Main simulation loop
    if not config.quiet:
        print(f"\nRunning simulation...")

    try:
        if args.realtime:
            _run_realtime(engine, on_state)
        else:
            while not engine.is_finished():
                on_state(engine.step())
    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
    finally:
        engine.close()

    # Cleanup and final exports
    if csv_writer:
        csv_writer.close()
        event_writer.close()
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")
            print(f"Events saved: {config.out_dir / 'event_log.csv'}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    # Print summary report
    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            engine.get_summary(),
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
