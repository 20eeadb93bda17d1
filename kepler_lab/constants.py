#!/usr/bin/env python3
"""
Shared constants for Kepler Lab (simulation units unless stated otherwise).

Simulation units
- Lengths are in "view units": 100 units correspond to 1 AU.
- Masses are relative; the reference sun has a mass of 200.
- G is chosen so that a 200-mass sun holds a body at 150 units with a speed of
  roughly 115 units per time unit, which keeps the built-in presets readable.

Keeping constants in one place helps ensure values are consistent across the
codebase and makes tuning easier.
"""
import math

# Physical constants (simulation units)
G = 10000.0

# Unit scaling
AU = 100.0  # view units per astronomical unit
SUN_REFERENCE_MASS = 200.0
# One year is the period of a massless body at 1 AU around the reference sun
YEAR = 2.0 * math.pi * math.sqrt(AU ** 3 / (G * SUN_REFERENCE_MASS))

# Body geometry: radius = mass ** (1/3) + RADIUS_OFFSET
RADIUS_OFFSET = 5.0

# Paths
DEFAULT_PATH_LENGTH_LIMIT = 2000  # points
DEFAULT_PATH_DISTANCE_LIMIT = 1000.0  # view units of arclength

# Physics controls
DEFAULT_SUBSTEPS = 20  # velocity-Verlet sub-steps per advance() call
DEFAULT_MIN_SEPARATION = 1.0  # floor for |r| in the force law, view units
DEFAULT_SOFTENING = 0.0  # optional Plummer softening, view units
DEFAULT_ESCAPE_DISTANCE = 1200.0  # distance from the origin beyond which a body has escaped
DEFAULT_TIME_SCALE = 1.0

# System model
MAX_BODIES = 4
CENTERED_TOLERANCE = 0.01  # COM drift that clears the "system centered" flag

# Orbit engine
CIRCULAR_ECCENTRICITY_TOLERANCE = 1e-6
MIN_PERIOD_DIVISIONS = 2
MAX_PERIOD_DIVISIONS = 6
MAX_THIRD_LAW_POWER = 3  # a and T can be shown as x, x^2 or x^3

# Bodies added when the number of active bodies grows, one per slot:
# (mass, position, velocity)
DEFAULT_BODY_SLOTS = (
    (250.0, (0.0, 0.0), (0.0, -11.1)),
    (25.0, (200.0, 0.0), (0.0, 111.0)),
    (0.1, (100.0, 0.0), (0.0, 150.0)),
    (0.1, (-100.0, -100.0), (120.0, 0.0)),
)


def to_au(distance: float) -> float:
    """Convert a distance in view units to astronomical units."""
    return distance / AU


def to_years(duration: float) -> float:
    """Convert a duration in simulation time units to years."""
    return duration / YEAR
