"""
Physics kernels for the planetary system simulation.

All per-tick work is JIT-compiled with Numba. These functions must stay
Numba-compatible (NumPy arrays and scalars, no Python objects).

Distances are clamped to a minimum before any division so coincident bodies,
or a body sitting exactly on the star, yield finite accelerations.
"""

import numpy as np
from numba import jit

from planetsim.vector import measure_distance


@jit(nopython=True)
def integrate_positions(positions, velocities, dt):
    """
    Explicit Euler drift: x += dt × v.

    Uses the velocities left by the previous tick, before this tick's
    accelerations are known.

    Args:
        positions: Body positions [km] (shape: (N, 3)), modified in place
        velocities: Body velocities [km/s] (shape: (N, 3))
        dt: Timestep [s]
    """
    n_bodies = len(positions)
    for i in range(n_bodies):
        for k in range(3):
            positions[i, k] += dt * velocities[i, k]


@jit(nopython=True)
def integrate_velocities(velocities, accelerations, dt):
    """Explicit Euler kick: v += dt × a (in place)."""
    n_bodies = len(velocities)
    for i in range(n_bodies):
        for k in range(3):
            velocities[i, k] += dt * accelerations[i, k]


@jit(nopython=True)
def star_accelerations(positions, star_mass, gravity_constant, min_distance):
    """
    Gravitational acceleration of every body toward the star at the origin.

    a = -G × M_star / r² × (x / r)

    Args:
        positions: Body positions [km] (shape: (N, 3))
        star_mass: Star mass [kg]
        gravity_constant: G [km³/(kg·s²)]
        min_distance: Distance clamp [km]

    Returns:
        accelerations: (N, 3) array [km/s²], a fresh accumulator for this tick
    """
    n_bodies = len(positions)
    accelerations = np.zeros((n_bodies, 3))
    origin = np.zeros(3)

    for i in range(n_bodies):
        r = measure_distance(origin, positions[i])
        if r < min_distance:
            r = min_distance

        accel_magnitude = gravity_constant * star_mass / (r * r)
        for k in range(3):
            accelerations[i, k] = -accel_magnitude * positions[i, k] / r

    return accelerations


@jit(nopython=True)
def accumulate_pairwise_accelerations(positions, masses, accelerations,
                                      gravity_constant, min_distance):
    """
    Add body-body attraction to the acceleration accumulator.

    Each unordered pair (i, j), i < j, is visited once. Body i accelerates
    toward j by G × m_j / r² and body j accelerates toward i by G × m_i / r²
    (Newton's third law; the mass on each side is the partner's).

    Args:
        positions: Body positions [km] (shape: (N, 3))
        masses: Body masses [kg] (shape: (N,))
        accelerations: Accumulator [km/s²] (shape: (N, 3)), modified in place
        gravity_constant: G [km³/(kg·s²)]
        min_distance: Distance clamp [km]
    """
    n_bodies = len(positions)

    for i in range(n_bodies - 1):
        for j in range(i + 1, n_bodies):
            r = measure_distance(positions[i], positions[j])
            if r < min_distance:
                r = min_distance

            r_squared = r * r
            i_accel = gravity_constant * masses[j] / r_squared
            j_accel = gravity_constant * masses[i] / r_squared

            for k in range(3):
                # Unit vector component from i toward j
                direction = (positions[j, k] - positions[i, k]) / r
                accelerations[i, k] += i_accel * direction
                accelerations[j, k] -= j_accel * direction


@jit(nopython=True)
def calculate_accelerations(positions, masses, star_mass, gravity_constant, min_distance):
    """
    Total acceleration of every body: star gravity plus pairwise attraction.

    Returns:
        accelerations: (N, 3) array [km/s²]
    """
    accelerations = star_accelerations(positions, star_mass, gravity_constant, min_distance)
    accumulate_pairwise_accelerations(
        positions, masses, accelerations, gravity_constant, min_distance
    )
    return accelerations


@jit(nopython=True)
def detect_boundary_events(positions, radii, star_radius, escape_radius):
    """
    Flag bodies that left the system or fell into the star.

    A body has escaped if |x| >= escape_radius. It has collided with the star
    if |x| < star_radius + radius. Escape is checked first.

    Args:
        positions: Body positions [km] (shape: (N, 3))
        radii: Body radii [km] (shape: (N,))
        star_radius: Star radius [km]
        escape_radius: Escape distance [km]

    Returns:
        (escaped, star_collided): boolean arrays of shape (N,)
    """
    n_bodies = len(positions)
    escaped = np.zeros(n_bodies, dtype=np.bool_)
    star_collided = np.zeros(n_bodies, dtype=np.bool_)
    origin = np.zeros(3)

    for i in range(n_bodies):
        r = measure_distance(origin, positions[i])
        if r >= escape_radius:
            escaped[i] = True
        elif r < star_radius + radii[i]:
            star_collided[i] = True

    return escaped, star_collided


@jit(nopython=True)
def detect_collisions(positions, radii, collision_coefficient):
    """
    Find every colliding unordered pair of bodies.

    Pair (i, j) collides when |x_i - x_j| < coefficient × (r_i + r_j). A body
    may appear in several pairs.

    Args:
        positions: Body positions [km] (shape: (N, 3))
        radii: Body radii [km] (shape: (N,))
        collision_coefficient: Contact distance multiplier

    Returns:
        pairs: (K, 2) int64 array of (i, j) with i < j, in scan order
    """
    n_bodies = len(positions)
    max_pairs = n_bodies * (n_bodies - 1) // 2
    pairs = np.empty((max_pairs, 2), dtype=np.int64)
    n_pairs = 0

    for i in range(n_bodies - 1):
        for j in range(i + 1, n_bodies):
            r = measure_distance(positions[i], positions[j])
            if r < collision_coefficient * (radii[i] + radii[j]):
                pairs[n_pairs, 0] = i
                pairs[n_pairs, 1] = j
                n_pairs += 1

    return pairs[:n_pairs]


@jit(nopython=True)
def calculate_kinetic_energy(masses, velocities):
    """
    Total kinetic energy Σ ½ m v².

    Returns:
        float: Kinetic energy [kg·km²/s²]
    """
    energy = 0.0
    for i in range(len(masses)):
        v_squared = velocities[i, 0]**2 + velocities[i, 1]**2 + velocities[i, 2]**2
        energy += 0.5 * masses[i] * v_squared
    return energy


@jit(nopython=True)
def calculate_potential_energy(positions, masses, star_mass, gravity_constant, min_distance):
    """
    Total gravitational potential energy of the bodies.

    PE = -Σ G × M_star × m_i / r_i - Σ_{i<j} G × m_i × m_j / r_ij

    Returns:
        float: Potential energy [kg·km²/s²] (negative)
    """
    n_bodies = len(positions)
    energy = 0.0
    origin = np.zeros(3)

    for i in range(n_bodies):
        r = measure_distance(origin, positions[i])
        if r < min_distance:
            r = min_distance
        energy -= gravity_constant * star_mass * masses[i] / r

    for i in range(n_bodies - 1):
        for j in range(i + 1, n_bodies):
            r = measure_distance(positions[i], positions[j])
            if r < min_distance:
                r = min_distance
            energy -= gravity_constant * masses[i] * masses[j] / r

    return energy
