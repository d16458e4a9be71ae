"""
Population state for the planetary system simulation.

The ordered body sequence is stored as parallel arrays so the physics kernels
can work on it directly. Index i refers to the same body in every array, but
indices are only stable within a single tick: appends and removals reorder
the population between ticks.
"""

import numpy as np
from typing import Iterable, List

from planetsim.body import Body


class SystemState:
    """
    Ordered population of bodies orbiting the central star.

    Physics arrays (units km, km/s, kg):
    - positions: (N, 3)
    - velocities: (N, 3)
    - radii: (N,)
    - masses: (N,)
    """

    def __init__(self, bodies: Iterable[Body] = ()):
        self.positions = np.zeros((0, 3), dtype=np.float64)  # [km]
        self.velocities = np.zeros((0, 3), dtype=np.float64)  # [km/s]
        self.radii = np.zeros(0, dtype=np.float64)  # [km]
        self.masses = np.zeros(0, dtype=np.float64)  # [kg]

        # Simulation metadata
        self.time = 0.0  # [s]
        self.timestep_count = 0

        self.extend(bodies)

    @property
    def n_bodies(self) -> int:
        """Number of live bodies."""
        return len(self.masses)

    def __len__(self) -> int:
        return self.n_bodies

    @property
    def total_mass(self) -> float:
        """Summed mass of all bodies, star excluded [kg]."""
        return float(np.sum(self.masses))

    def append(self, body: Body) -> int:
        """
        Append a body to the end of the population.

        Returns:
            Index of the appended body
        """
        self.extend([body])
        return self.n_bodies - 1

    def extend(self, bodies: Iterable[Body]) -> None:
        """Append several bodies, preserving their order."""
        bodies = list(bodies)
        if not bodies:
            return

        self.positions = np.vstack([self.positions] + [b.position.reshape(1, 3) for b in bodies])
        self.velocities = np.vstack([self.velocities] + [b.velocity.reshape(1, 3) for b in bodies])
        self.radii = np.concatenate([self.radii, [b.radius for b in bodies]])
        self.masses = np.concatenate([self.masses, [b.mass for b in bodies]])

    def remove(self, indices: Iterable[int]) -> None:
        """
        Remove bodies by index.

        Indices are deleted in descending order so earlier deletions do not
        shift the ones still pending. Duplicates are ignored.
        """
        for idx in sorted(set(indices), reverse=True):
            if idx < 0 or idx >= self.n_bodies:
                raise IndexError(f"body index {idx} out of range for {self.n_bodies} bodies")
            self.positions = np.delete(self.positions, idx, axis=0)
            self.velocities = np.delete(self.velocities, idx, axis=0)
            self.radii = np.delete(self.radii, idx)
            self.masses = np.delete(self.masses, idx)

    def body(self, index: int) -> Body:
        """Return a copy of body `index` as a Body."""
        return Body(
            position=self.positions[index].copy(),
            velocity=self.velocities[index].copy(),
            radius=self.radii[index],
            mass=self.masses[index],
        )

    @property
    def bodies(self) -> List[Body]:
        """Copies of every body in current order."""
        return [self.body(i) for i in range(self.n_bodies)]

    def __repr__(self) -> str:
        """String representation of simulation state."""
        lines = [
            f"SystemState(time={self.time / 86400.0:.1f} days, "
            f"step={self.timestep_count})",
            f"  Bodies: {self.n_bodies}",
            f"  Total mass: {self.total_mass:.3e} kg",
        ]
        if self.n_bodies > 0:
            distances = np.sqrt(np.sum(self.positions ** 2, axis=1))
            lines.append(
                f"  Distance from star: {distances.min():.3e} .. {distances.max():.3e} km"
            )
        return "\n".join(lines)
