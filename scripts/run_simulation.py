"""
Main simulation runner script.

Usage:
    python scripts/run_simulation.py configs/default_config.yaml

This script:
1. Loads configuration from YAML file
2. Runs the simulation from an empty system with a progress bar
3. Saves a snapshot plot and, optionally, an animation
"""

import sys
import argparse
import logging
import time
from pathlib import Path

# Add src to path so we can import the planetsim package
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from planetsim.config import SimulationParameters
from planetsim.diagnostics import check_system_health
from planetsim.evolution import PlanetarySystem, evolve_system
from planetsim.initialization import make_rng
from planetsim.visualization import animate_system, plot_system_snapshot

log = logging.getLogger("run_simulation")


def main():
    parser = argparse.ArgumentParser(
        description='Run planetary system simulation'
    )
    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--output-dir',
        type=str,
        default='./results',
        help='Directory for plots (default: ./results)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (default: from config)'
    )
    parser.add_argument(
        '--animate',
        type=int,
        default=0,
        metavar='FRAMES',
        help='After the run, tick FRAMES more times and save a GIF'
    )
    parser.add_argument(
        '--skip-plots',
        action='store_true',
        help='Skip plot generation'
    )

    args = parser.parse_args()

    params = SimulationParameters.from_yaml(args.config)

    logging.basicConfig(
        level=getattr(logging, params.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    log.info("Loaded configuration from %s", args.config)
    for line in repr(params).splitlines():
        log.info("  %s", line)

    for message in params.validate():
        log.warning(message)

    seed = params.seed if args.seed is None else args.seed
    system = PlanetarySystem(params, rng=make_rng(seed))

    start_time = time.time()
    stats = evolve_system(system, params.n_steps, show_progress=True, health_check_every=30)
    elapsed_time = time.time() - start_time

    log.info("Simulation completed in %.1f seconds", elapsed_time)
    log.info(
        "Bodies: %d | spawned: %d | merges: %d | escaped: %d | star collisions: %d",
        stats['final_count'], stats['total_spawned'], stats['total_merges'],
        stats['total_escaped'], stats['total_star_collisions'],
    )

    health = check_system_health(system.state, params)
    log.info("Total energy: %.4e kg·km²/s²", health['total_energy'])
    for message in health['warnings']:
        log.warning(message)

    if args.skip_plots:
        return

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    snapshot_path = output_dir / f"{params.simulation_name}_final.png"
    plot_system_snapshot(system, str(snapshot_path))
    log.info("Saved snapshot: %s", snapshot_path)

    if args.animate > 0:
        animation_path = output_dir / f"{params.simulation_name}.gif"
        animate_system(system, str(animation_path), n_frames=args.animate)
        log.info("Saved animation: %s", animation_path)


if __name__ == '__main__':
    main()
