"""
Host-facing calls for a rendering or animation loop.

The host creates one engine, calls tick() once per frame and reads positions
and masses back. Positions are in the engine's current internal order, which
is not stable across ticks.
"""

from typing import Optional
import numpy as np

from planetsim import constants as const
from planetsim.config import SimulationParameters
from planetsim.evolution import PlanetarySystem


def create_engine(params: Optional[SimulationParameters] = None, rng=None) -> PlanetarySystem:
    """Create an engine with an empty population."""
    return PlanetarySystem.new(params=params, rng=rng)


def tick(engine: PlanetarySystem) -> None:
    """Advance the engine by one unit of time."""
    engine.tick()


def get_positions(engine: PlanetarySystem) -> np.ndarray:
    """Flat float64 array of positions, three values per body [km]."""
    return engine.get_positions()


def get_body_count(engine: PlanetarySystem) -> int:
    return engine.body_count


def get_masses(engine: PlanetarySystem) -> np.ndarray:
    return engine.get_masses()


def get_system_radius(engine: PlanetarySystem) -> float:
    return engine.params.system_radius


def quantize_positions(positions: np.ndarray,
                       system_radius: float = const.SYSTEM_RADIUS) -> np.ndarray:
    """
    Scale positions onto int16 for compact transfer to a drawing surface.

    q = round(x × 32767 / system_radius), clipped to ±32767. Bodies between
    the spawn cube and the escape sphere saturate at the edge.

    Args:
        positions: Positions [km], any shape
        system_radius: Distance mapped to full scale [km]

    Returns:
        int16 array with the same shape as positions
    """
    coefficient = const.QUANTIZATION_MAX / system_radius
    scaled = np.rint(np.asarray(positions, dtype=np.float64) * coefficient)
    return np.clip(scaled, -const.QUANTIZATION_MAX, const.QUANTIZATION_MAX).astype(np.int16)


def get_quantized_positions(engine: PlanetarySystem) -> np.ndarray:
    """Flat int16 positions scaled to the engine's system radius."""
    return quantize_positions(engine.get_positions(), engine.params.system_radius)
