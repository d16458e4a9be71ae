"""
Time evolution engine for the planetary system simulation.

PlanetarySystem owns the body population and advances it one UNIT_TIME per
tick. Each tick runs, in order:

  1. Spawn bodies with the configured policy
  2. Drift: x += dt × v (previous tick's velocities)
  3. Star gravity into a fresh acceleration accumulator
  4. Pairwise gravity, each pair visited once
  5. Kick: v += dt × a
  6. Flag escapes and stellar collisions
  7. Flag colliding pairs and build their merge products
  8. Append merge products, then remove every flagged body

Merge products are appended only after the detection pass, so they never
collide within the tick that created them.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable, List, Optional
import numpy as np
from tqdm import tqdm

from planetsim.body import Body, merge_bodies
from planetsim.config import SimulationParameters
from planetsim.diagnostics import check_state_finite, check_system_health
from planetsim.initialization import make_rng, spawn_bodies
from planetsim.physics import (
    calculate_accelerations,
    detect_boundary_events,
    detect_collisions,
    integrate_positions,
    integrate_velocities,
)
from planetsim.state import SystemState

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Event counts for one tick."""

    spawned: int = 0
    escaped: int = 0
    star_collisions: int = 0
    merges: int = 0
    removed: int = 0


class PlanetarySystem:
    """
    Gravitational N-body engine around a fixed central star.

    Args:
        params: Simulation parameters (defaults to the fixed constants)
        rng: Random source for spawning; anything with a NumPy-compatible
            random(size=None) method. Defaults to a generator seeded with
            params.seed.
        bodies: Optional initial population

    Raises:
        ValueError: If params fail validation
    """

    def __init__(
        self,
        params: Optional[SimulationParameters] = None,
        rng=None,
        bodies: Iterable[Body] = (),
    ):
        if params is None:
            params = SimulationParameters()

        errors = [w for w in params.validate() if w.startswith("ERROR")]
        if errors:
            raise ValueError("Invalid simulation parameters:\n" + "\n".join(errors))

        self.params = params
        self.rng = rng if rng is not None else make_rng(params.seed)
        self.state = SystemState(bodies)

    @classmethod
    def new(cls, params: Optional[SimulationParameters] = None, rng=None) -> 'PlanetarySystem':
        """Create an engine with an empty population."""
        return cls(params=params, rng=rng)

    def tick(self) -> TickReport:
        """
        Advance the simulation by one unit of time.

        Returns:
            TickReport with the event counts of this tick

        Raises:
            NonFiniteStateError: If integration produced NaN or Inf values
        """
        params = self.params
        state = self.state
        dt = params.unit_time
        report = TickReport()

        # 1. Spawn
        report.spawned = len(spawn_bodies(state, self.rng, params))

        # 2. Drift with the velocities from the previous tick
        integrate_positions(state.positions, state.velocities, dt)

        # 3-4. Star and pairwise gravity, built fresh every tick
        accelerations = calculate_accelerations(
            state.positions,
            state.masses,
            params.star_mass,
            params.gravity_constant,
            params.min_distance,
        )

        # 5. Kick
        integrate_velocities(state.velocities, accelerations, dt)
        check_state_finite(state)

        removed = set()

        # 6. Escapes and stellar collisions
        escaped, star_collided = detect_boundary_events(
            state.positions, state.radii, params.star_radius, params.escape_radius
        )
        for i in np.flatnonzero(escaped):
            logger.debug("Body %d escaped at %.3e km", i, np.linalg.norm(state.positions[i]))
            removed.add(int(i))
        for i in np.flatnonzero(star_collided):
            logger.debug("Body %d collided with the star", i)
            removed.add(int(i))
        report.escaped = int(np.sum(escaped))
        report.star_collisions = int(np.sum(star_collided))

        # 7. Body-body collisions; a body may merge with several partners
        merge_products: List[Body] = []
        pairs = detect_collisions(state.positions, state.radii, params.collision_coefficient)
        for i, j in pairs:
            i, j = int(i), int(j)
            product = merge_bodies(state.body(i), state.body(j))
            logger.debug(
                "Bodies %d and %d merged (mass %.3e kg, radius %.1f km)",
                i, j, product.mass, product.radius,
            )
            merge_products.append(product)
            removed.add(i)
            removed.add(j)
        report.merges = len(merge_products)

        # 8. Products go to the end, so the flagged original indices stay valid
        state.extend(merge_products)
        state.remove(removed)
        report.removed = len(removed)

        state.time += dt
        state.timestep_count += 1

        logger.debug(
            "Tick %d: %d bodies (+%d spawned, %d escaped, %d star collisions, %d merges)",
            state.timestep_count, state.n_bodies, report.spawned,
            report.escaped, report.star_collisions, report.merges,
        )
        return report

    # Read-only accessors. Each returns a copy so callers cannot mutate the state.

    @property
    def body_count(self) -> int:
        """Number of live bodies."""
        return self.state.n_bodies

    def get_positions(self) -> np.ndarray:
        """Flat array [x0, y0, z0, x1, ...] of body positions [km]."""
        return self.state.positions.ravel().copy()

    def get_masses(self) -> np.ndarray:
        """Body masses [kg], in the same order as get_positions."""
        return self.state.masses.copy()

    def get_radii(self) -> np.ndarray:
        """Body radii [km], in the same order as get_positions."""
        return self.state.radii.copy()

    def get_bodies(self) -> List[Body]:
        """Copies of every live body."""
        return self.state.bodies

    def __repr__(self) -> str:
        return f"PlanetarySystem(\n{self.state!r}\n)"


def evolve_system(
    system: PlanetarySystem,
    n_steps: int,
    show_progress: bool = True,
    health_check_every: int = 0,
) -> dict:
    """
    Evolve the simulation forward for n_steps ticks.

    Args:
        system: PlanetarySystem (modified in place)
        n_steps: Number of ticks to run
        show_progress: Whether to show progress bar (tqdm)
        health_check_every: Run check_system_health every this many ticks
            and emit its warnings (0 disables)

    Returns:
        Dictionary with simulation statistics:
        - total_spawned, total_escaped, total_star_collisions, total_merges
        - final_count: Population after the last tick
        - final_time: Final simulation time [s]
        - final_timestep: Final tick number
    """
    totals = {
        'total_spawned': 0,
        'total_escaped': 0,
        'total_star_collisions': 0,
        'total_merges': 0,
    }

    if show_progress:
        pbar = tqdm(total=n_steps, desc="Evolving system", unit="ticks")

    for step in range(n_steps):
        report = system.tick()

        totals['total_spawned'] += report.spawned
        totals['total_escaped'] += report.escaped
        totals['total_star_collisions'] += report.star_collisions
        totals['total_merges'] += report.merges

        if health_check_every > 0 and (step + 1) % health_check_every == 0:
            health = check_system_health(system.state, system.params)
            for message in health['warnings']:
                warnings.warn(f"{message} (tick {system.state.timestep_count})")

        if show_progress:
            pbar.update(1)
            if report.merges or report.escaped or report.star_collisions:
                pbar.set_postfix({
                    'bodies': system.body_count,
                    'merges': totals['total_merges'],
                })

    if show_progress:
        pbar.close()

    totals['final_count'] = system.body_count
    totals['final_time'] = system.state.time
    totals['final_timestep'] = system.state.timestep_count
    return totals


def run_simulation(
    params: SimulationParameters,
    seed: Optional[int] = None,
    show_progress: bool = True
) -> tuple:
    """
    Run a complete simulation from an empty system for params.n_steps ticks.

    Args:
        params: SimulationParameters object
        seed: Random seed (defaults to params.seed)
        show_progress: Whether to show progress bar

    Returns:
        (system, stats) tuple:
        - system: Final PlanetarySystem
        - stats: Dictionary with simulation statistics
    """
    if seed is None:
        seed = params.seed

    system = PlanetarySystem(params, rng=make_rng(seed))

    logger.info("Running simulation: %d ticks of %.0f s", params.n_steps, params.unit_time)
    stats = evolve_system(system, params.n_steps, show_progress=show_progress)

    logger.info("Simulation complete after %.1f days", system.state.time / 86400.0)
    logger.info(
        "  Bodies: %d, merges: %d, escaped: %d, star collisions: %d",
        stats['final_count'], stats['total_merges'],
        stats['total_escaped'], stats['total_star_collisions'],
    )

    return system, stats
