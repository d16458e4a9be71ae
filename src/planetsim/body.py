"""
Body data holder for one orbiting mass.

Bodies are created either at random (spawning) or by merging two colliding
bodies. The engine stores them in parallel arrays (see planetsim.state); this
class is the unit that enters and leaves those arrays.
"""

from dataclasses import dataclass
from typing import Optional
import numpy as np

from planetsim.config import SimulationParameters
from planetsim.vector import random_vector


def sphere_mass(radius: float, density: float) -> float:
    """Mass of a uniform sphere: 4/3 × π × r³ × ρ."""
    return 4.0 / 3.0 * np.pi * radius ** 3 * density


@dataclass
class Body:
    """
    One simulated mass.

    Attributes:
        position: [x, y, z] relative to the star [km]
        velocity: [vx, vy, vz] [km/s]
        radius: Radius [km], strictly positive
        mass: Mass [kg], strictly positive
    """

    position: np.ndarray
    velocity: np.ndarray
    radius: float
    mass: float

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float64)
        self.velocity = np.array(self.velocity, dtype=np.float64)
        self.radius = float(self.radius)
        self.mass = float(self.mass)

    @property
    def momentum(self) -> np.ndarray:
        """Linear momentum m × v [kg·km/s]."""
        return self.mass * self.velocity

    @classmethod
    def random(cls, rng, params: Optional[SimulationParameters] = None) -> 'Body':
        """
        Construct a randomized body.

        Draw order: radius, density, position (3), velocity (3). Every draw
        comes from rng.random(), so a scripted generator reproduces a body
        exactly.

        Args:
            rng: Random source with a NumPy-compatible random(size=None) method
            params: Simulation parameters (defaults to the fixed constants)

        Returns:
            Body with radius in (0, largest], density in [min, max],
            position in the spawn cube and velocity within the axis speed limit
        """
        if params is None:
            params = SimulationParameters()

        # 1 - u maps [0, 1) onto (0, 1] so the radius is never zero
        radius = params.new_planet_largest_radius * (1.0 - float(rng.random()))
        density = (
            params.min_planet_density
            + (params.max_planet_density - params.min_planet_density) * float(rng.random())
        )

        return cls(
            position=random_vector(rng, -params.system_radius, params.system_radius),
            velocity=random_vector(rng, -params.max_axis_speed, params.max_axis_speed),
            radius=radius,
            mass=sphere_mass(radius, density),
        )


def merge_bodies(a: Body, b: Body) -> Body:
    """
    Merge two colliding bodies inelastically.

    - position: midpoint of the two positions
    - mass: m_a + m_b
    - velocity: (m_a × v_a + m_b × v_b) / (m_a + m_b), conserving momentum
    - radius: (r_a³ + r_b³)^(1/3), conserving volume

    Args:
        a: First body
        b: Second body

    Returns:
        The merge product (a new Body; inputs are not modified)
    """
    total_mass = a.mass + b.mass
    return Body(
        position=(a.position + b.position) / 2.0,
        velocity=(a.mass * a.velocity + b.mass * b.velocity) / total_mass,
        radius=np.cbrt(a.radius ** 3 + b.radius ** 3),
        mass=total_mass,
    )
