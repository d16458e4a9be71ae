"""
Fixed-dimension (3-D) vector helpers.

measure_distance and scaled_difference are JIT-compiled so the physics
kernels can call them from nopython code.
"""

import numpy as np
from numba import jit

from planetsim import constants as const


@jit(nopython=True)
def measure_distance(a, b):
    """
    Euclidean distance between two 3-D points.

    Args:
        a: Point [x, y, z] in km (shape: (3,))
        b: Point [x, y, z] in km (shape: (3,))

    Returns:
        float: sqrt(Σ (b_i - a_i)²) in km
    """
    distance_squared = 0.0
    for i in range(3):
        diff = b[i] - a[i]
        distance_squared += diff * diff
    return np.sqrt(distance_squared)


@jit(nopython=True)
def scaled_difference(a, b, scale):
    """Return scale × (b - a)."""
    result = np.empty(3)
    for i in range(3):
        result[i] = scale * (b[i] - a[i])
    return result


def random_vector(rng, axis_min: float, axis_max: float) -> np.ndarray:
    """
    Sample a vector uniformly from the cube [axis_min, axis_max)^3.

    Args:
        rng: Random source with a NumPy-compatible random(size) method
        axis_min: Lower bound on every axis
        axis_max: Upper bound on every axis

    Returns:
        vector: (3,) float64 array
    """
    diff = axis_max - axis_min
    draws = np.asarray(rng.random(const.DIMENSION), dtype=np.float64)
    return diff * draws + axis_min
