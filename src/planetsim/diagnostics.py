"""
Runtime diagnostics for simulation health checks.

This module provides functions to detect:
- Non-finite positions or velocities (numerical blow-up)
- Total energy and momentum of the bodies
- Bodies moving faster than the spawn speed limit allows
"""

import numpy as np

from planetsim.config import SimulationParameters
from planetsim.physics import calculate_kinetic_energy, calculate_potential_energy


class NonFiniteStateError(ArithmeticError):
    """Raised when a tick produces a NaN or infinite position or velocity."""

    def __init__(self, quantity: str, indices):
        self.quantity = quantity
        self.indices = [int(i) for i in indices]
        super().__init__(
            f"Non-finite {quantity} for bodies {self.indices} - numerical instability"
        )


def check_state_finite(state) -> None:
    """
    Fail fast if any position or velocity is NaN or infinite.

    Args:
        state: SystemState

    Raises:
        NonFiniteStateError: Naming the first offending quantity and its bodies
    """
    for quantity, values in (("position", state.positions), ("velocity", state.velocities)):
        bad = ~np.all(np.isfinite(values), axis=1)
        if np.any(bad):
            raise NonFiniteStateError(quantity, np.flatnonzero(bad))


def calculate_total_energy(state, params: SimulationParameters) -> float:
    """
    Calculate total energy (kinetic + potential) of the bodies.

    The star is fixed at the origin and carries no kinetic energy.

    Returns:
        float: Total energy [kg·km²/s²]
    """
    kinetic = calculate_kinetic_energy(state.masses, state.velocities)
    potential = calculate_potential_energy(
        state.positions,
        state.masses,
        params.star_mass,
        params.gravity_constant,
        params.min_distance,
    )
    return kinetic + potential


def calculate_total_momentum(state) -> np.ndarray:
    """Total linear momentum Σ m v of the bodies [kg·km/s]."""
    if state.n_bodies == 0:
        return np.zeros(3)
    return np.sum(state.masses[:, None] * state.velocities, axis=0)


def check_system_health(state, params: SimulationParameters) -> dict:
    """
    Summarize the health of the current state.

    Args:
        state: SystemState
        params: SimulationParameters

    Returns:
        dict with:
            - is_stable: bool
            - total_energy: float
            - total_momentum: (3,) array
            - warnings: list of warning messages
    """
    warnings = []

    if state.n_bodies > 0 and not (
        np.all(np.isfinite(state.positions)) and np.all(np.isfinite(state.velocities))
    ):
        warnings.append("CRITICAL: Body positions or velocities are NaN or Inf - numerical instability!")
        return {
            'is_stable': False,
            'total_energy': np.nan,
            'total_momentum': np.full(3, np.nan),
            'warnings': warnings,
        }

    total_energy = calculate_total_energy(state, params)
    total_momentum = calculate_total_momentum(state)

    if state.n_bodies > 0:
        speeds = np.sqrt(np.sum(state.velocities ** 2, axis=1))
        max_speed = float(np.max(speeds))
        spawn_limit = params.max_axis_speed * np.sqrt(3.0)
        if max_speed > 10.0 * spawn_limit:
            warnings.append(
                f"WARNING: Body speed ({max_speed:.3e} km/s) is over ten times the spawn limit "
                f"({spawn_limit:.3e} km/s). A close encounter was under-resolved."
            )

    return {
        'is_stable': True,
        'total_energy': total_energy,
        'total_momentum': total_momentum,
        'warnings': warnings,
    }
