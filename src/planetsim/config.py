"""
Configuration management for the planetary system simulation.

Every parameter defaults to the fixed constant in planetsim.constants. A YAML
file may override any of them; all values are kept in km, s and kg.
"""

from dataclasses import dataclass
from typing import Any
import yaml
import numpy as np
from pathlib import Path

from planetsim import constants as const

SPAWN_POLICIES = ("count", "mass")


@dataclass
class SimulationParameters:
    """
    Container for all simulation parameters.

    Internal units:
    - Distance: kilometers (km)
    - Time: seconds (s)
    - Mass: kilograms (kg)
    - Velocity: km/s
    """

    # Metadata
    simulation_name: str = "planetary_system"

    # Central star
    star_mass: float = const.STAR_MASS  # kg
    star_radius: float = const.STAR_RADIUS  # km

    # System geometry and time step
    system_radius: float = const.SYSTEM_RADIUS  # km
    unit_time: float = const.UNIT_TIME  # s

    # Spawning
    spawn_policy: str = "count"  # "count" or "mass"
    target_count: int = const.TARGET_COUNT
    target_total_mass: float = const.TARGET_TOTAL_MASS  # kg
    new_planet_largest_radius: float = const.NEW_PLANET_LARGEST_RADIUS  # km
    min_planet_density: float = const.MIN_PLANET_DENSITY  # kg/km³
    max_planet_density: float = const.MAX_PLANET_DENSITY  # kg/km³
    max_axis_speed: float = const.MAX_AXIS_SPEED  # km/s

    # Physics options
    gravity_constant: float = const.GRAVITY_CONSTANT  # km³/(kg·s²)
    collision_coefficient: float = const.COLLISION_COEFFICIENT
    min_distance: float = const.MIN_DISTANCE  # km

    # Simulation control
    n_steps: int = 365
    seed: int = 42

    # Diagnostics
    log_level: str = "INFO"

    @property
    def escape_radius(self) -> float:
        """Radius of the bounding sphere of the spawn cube [km]."""
        return self.system_radius * np.sqrt(3.0)

    @property
    def quantization_scale(self) -> float:
        """Factor mapping a position in km onto the int16 range."""
        return const.QUANTIZATION_MAX / self.system_radius

    def validate(self) -> list:
        """
        Perform sanity checks on configuration parameters.

        Returns:
            List of warning/error messages. Empty list if all checks pass.
        """
        warnings = []

        if self.star_mass <= 0:
            warnings.append(f"ERROR: star mass must be positive, got {self.star_mass}")

        if self.star_radius <= 0:
            warnings.append(f"ERROR: star radius must be positive, got {self.star_radius}")

        if self.system_radius <= 0:
            warnings.append(f"ERROR: system radius must be positive, got {self.system_radius}")
        elif self.star_radius >= self.system_radius:
            warnings.append(
                f"ERROR: star radius ({self.star_radius:.3e} km) must be smaller than "
                f"system radius ({self.system_radius:.3e} km)"
            )

        if self.unit_time <= 0:
            warnings.append(f"ERROR: unit_time must be positive, got {self.unit_time}")

        if self.spawn_policy not in SPAWN_POLICIES:
            warnings.append(
                f"ERROR: spawn_policy must be one of {SPAWN_POLICIES}, got '{self.spawn_policy}'"
            )

        if self.target_count < 0:
            warnings.append(f"ERROR: target_count must be non-negative, got {self.target_count}")

        if self.spawn_policy == "mass" and self.target_total_mass <= 0:
            warnings.append(
                f"ERROR: target_total_mass must be positive for mass spawning, "
                f"got {self.target_total_mass}"
            )

        if self.new_planet_largest_radius <= 0:
            warnings.append("ERROR: new_planet_largest_radius must be positive")

        if self.min_planet_density <= 0:
            warnings.append("ERROR: min_planet_density must be positive")

        if self.min_planet_density > self.max_planet_density:
            warnings.append(
                f"ERROR: min_planet_density ({self.min_planet_density:.3e}) must be <= "
                f"max_planet_density ({self.max_planet_density:.3e})"
            )

        if self.max_axis_speed < 0:
            warnings.append(f"ERROR: max_axis_speed must be non-negative, got {self.max_axis_speed}")

        if self.gravity_constant <= 0:
            warnings.append(f"ERROR: gravity_constant must be positive, got {self.gravity_constant}")

        if self.collision_coefficient < 0:
            warnings.append(
                f"ERROR: collision_coefficient must be non-negative, got {self.collision_coefficient}"
            )

        if self.min_distance <= 0:
            warnings.append(f"ERROR: min_distance must be positive, got {self.min_distance}")

        if self.n_steps <= 0:
            warnings.append(f"WARNING: n_steps ({self.n_steps}) runs no ticks")

        # A body moving at the axis speed limit should not cross the system in a single tick
        max_step = self.max_axis_speed * self.unit_time * np.sqrt(3.0)
        if self.system_radius > 0 and max_step > self.system_radius:
            warnings.append(
                f"WARNING: a body at max_axis_speed travels {max_step:.3e} km per tick, "
                f"more than the system radius. Orbits will be coarse."
            )

        if self.spawn_policy == "count" and self.target_count > 2000:
            warnings.append(
                f"WARNING: target_count ({self.target_count}) is large; "
                f"pairwise forces scale as N²."
            )

        return warnings

    @classmethod
    def from_yaml(cls, filepath: str) -> 'SimulationParameters':
        """
        Load configuration from a YAML file.

        Any section or key may be omitted; missing values keep their defaults.

        Args:
            filepath: Path to YAML configuration file

        Returns:
            SimulationParameters object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        def to_float(value: Any) -> float:
            """Convert value to float, handling YAML quirks with scientific notation."""
            return float(value)

        def to_int(value: Any) -> int:
            """Convert value to int."""
            return int(value)

        config_path = Path(filepath)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}

        params = cls()

        if 'simulation_name' in config:
            params.simulation_name = str(config['simulation_name'])

        star = config.get('star') or {}
        params.star_mass = to_float(star.get('mass_kg', params.star_mass))
        params.star_radius = to_float(star.get('radius_km', params.star_radius))

        system = config.get('system') or {}
        params.system_radius = to_float(system.get('radius_km', params.system_radius))
        params.unit_time = to_float(system.get('unit_time_s', params.unit_time))

        spawning = config.get('spawning') or {}
        spawn_policy = spawning.get('policy', params.spawn_policy)
        if spawn_policy not in SPAWN_POLICIES:
            raise ValueError(f"spawning: policy must be 'count' or 'mass', got '{spawn_policy}'")
        params.spawn_policy = spawn_policy
        params.target_count = to_int(spawning.get('target_count', params.target_count))
        params.target_total_mass = to_float(
            spawning.get('target_total_mass_kg', params.target_total_mass)
        )
        params.new_planet_largest_radius = to_float(
            spawning.get('largest_radius_km', params.new_planet_largest_radius)
        )
        params.min_planet_density = to_float(
            spawning.get('min_density_kg_km3', params.min_planet_density)
        )
        params.max_planet_density = to_float(
            spawning.get('max_density_kg_km3', params.max_planet_density)
        )
        params.max_axis_speed = to_float(spawning.get('max_axis_speed_km_s', params.max_axis_speed))

        collisions = config.get('collisions') or {}
        params.collision_coefficient = to_float(
            collisions.get('coefficient', params.collision_coefficient)
        )

        physics_opts = config.get('physics_options') or {}
        params.gravity_constant = to_float(
            physics_opts.get('gravity_constant', params.gravity_constant)
        )
        params.min_distance = to_float(physics_opts.get('min_distance_km', params.min_distance))

        sim_control = config.get('simulation_control') or {}
        params.n_steps = to_int(sim_control.get('n_steps', params.n_steps))
        params.seed = to_int(sim_control.get('seed', params.seed))

        diagnostics = config.get('diagnostics') or {}
        params.log_level = str(diagnostics.get('log_level', params.log_level)).upper()

        return params

    def __repr__(self):
        """Human-readable representation."""
        if self.spawn_policy == "mass":
            target = f"total mass {self.target_total_mass:.3e} kg"
        else:
            target = f"{self.target_count} bodies"
        return "\n".join([
            f"Simulation: {self.simulation_name}",
            f"Star: {self.star_mass:.3e} kg, radius {self.star_radius:.3e} km",
            f"System radius: {self.system_radius:.3e} km",
            f"Spawn target: {target}",
            f"Tick: {self.unit_time:.0f} s, {self.n_steps} steps",
            f"Collision coefficient: {self.collision_coefficient}",
        ])
