"""
Spawn policies that top up the population at the start of every tick.

Two policies are available:
- count: append new bodies until the population reaches target_count
- mass: append new bodies until the summed body mass reaches target_total_mass

The count policy is the default.
"""

import logging
from typing import List, Optional
import numpy as np

from planetsim.body import Body
from planetsim.config import SimulationParameters
from planetsim.state import SystemState

logger = logging.getLogger(__name__)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the NumPy generator used for spawning."""
    return np.random.default_rng(seed)


def spawn_to_count(state: SystemState, rng, params: SimulationParameters) -> List[Body]:
    """
    Append random bodies until the population holds params.target_count.

    Args:
        state: SystemState to top up (modified in place)
        rng: Random source for Body.random
        params: Simulation parameters

    Returns:
        The bodies that were appended
    """
    spawned = []
    while state.n_bodies < params.target_count:
        body = Body.random(rng, params)
        state.append(body)
        spawned.append(body)
    return spawned


def spawn_to_mass(state: SystemState, rng, params: SimulationParameters) -> List[Body]:
    """
    Append random bodies until the summed mass reaches params.target_total_mass.

    The last body appended may overshoot the target.

    Args:
        state: SystemState to top up (modified in place)
        rng: Random source for Body.random
        params: Simulation parameters

    Returns:
        The bodies that were appended
    """
    spawned = []
    total_mass = state.total_mass
    while total_mass < params.target_total_mass:
        body = Body.random(rng, params)
        state.append(body)
        spawned.append(body)
        total_mass += body.mass
    return spawned


SPAWNERS = {
    "count": spawn_to_count,
    "mass": spawn_to_mass,
}


def spawn_bodies(state: SystemState, rng, params: SimulationParameters) -> List[Body]:
    """
    Top up the population with the configured spawn policy.

    Raises:
        ValueError: If params.spawn_policy is unknown
    """
    try:
        spawner = SPAWNERS[params.spawn_policy]
    except KeyError:
        raise ValueError(
            f"spawn_policy must be one of {sorted(SPAWNERS)}, got '{params.spawn_policy}'"
        ) from None

    spawned = spawner(state, rng, params)
    if spawned:
        logger.debug("Spawned %d bodies (population %d)", len(spawned), state.n_bodies)
    return spawned
