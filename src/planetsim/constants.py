"""
Physical constants used throughout the planetary system simulation.

UNITS:
- Distance: kilometers (km)
- Time: seconds (s)
- Mass: kilograms (kg)
- Velocity: km/s

The central star sits at the coordinate origin and never moves.
"""

import numpy as np

DIMENSION = 3

# Simulated seconds represented by one tick (one day)
UNIT_TIME = 60.0 * 60.0 * 24.0  # [s]

# Gravitational constant in km³/(kg·s²)
# G_SI = 6.6743015e-11 m³/(kg·s²) and 1 m³ = 1e-9 km³
GRAVITY_CONSTANT = 6.6743015e-20  # [km³/(kg·s²)]

# Central star (the Sun)
STAR_MASS = 1.989e30  # [kg]
STAR_RADIUS = 696000.0  # [km]

# Half-width of the spawn cube: orbital radius of Mars
SYSTEM_RADIUS = 227920000.0  # [km]

# Bodies at or beyond the bounding sphere of the spawn cube have escaped
ESCAPE_RADIUS = SYSTEM_RADIUS * np.sqrt(3.0)  # [km]

# Spawned bodies
NEW_PLANET_LARGEST_RADIUS = 2439.7  # radius of Mercury [km]
MIN_PLANET_DENSITY = 687.0e9 / 2.0  # half of Saturn's density [kg/km³]
MAX_PLANET_DENSITY = 2.0 * 5.51e12  # twice Earth's density [kg/km³]
MAX_AXIS_SPEED = 64.93 * 16.0  # 16x Mercury's orbital speed [km/s]

# Population targets
TARGET_COUNT = 128
MERCURY_MASS = 3.3011e23  # [kg]
TARGET_TOTAL_MASS = 64 * MERCURY_MASS  # [kg]

# Two bodies touch when closer than COLLISION_COEFFICIENT × (r_i + r_j)
COLLISION_COEFFICIENT = 1.0

# Distances are clamped to this value before dividing
MIN_DISTANCE = 1.0  # [km]

# Full scale of int16 quantized positions
QUANTIZATION_MAX = 32767
