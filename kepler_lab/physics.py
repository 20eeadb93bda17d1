#!/usr/bin/env python3
"""
Core Physics Engine for Kepler Lab

Responsibilities
- Compute pairwise gravitational accelerations for all participating bodies from a
  single snapshot of their positions.
- Advance body states with the velocity-Verlet integrator, split into sub-steps.
- Flag collisions after every sub-step (see collisions.py).
- Answer "has this body escaped?" for the model's return-bodies action.
- Provide small helpers for common orbital computations (circular and escape velocity,
  total energy and angular momentum).

Units and conventions
- Simulation units (see constants.py): G = 10000, lengths in view units.
- Vectors on Body are (x, y) tuples; internally the engine works on numpy arrays of
  shape (n, 2) built from those tuples at the start of each sub-step.

Numerical notes
- Velocity Verlet is symplectic: energy oscillates within a bounded band instead of
  drifting.
- Singularities: |r|^2 is floored at min_separation^2 before the inverse-cube law is
  applied, so accelerations stay finite until the collision check runs. An optional
  Plummer softening eps^2 can be added on top.
- Accelerations are recomputed from the bodies' current positions at the start of
  every advance() call. Nothing is cached across calls, so positions, velocities or
  masses written by the user between steps are picked up as-is.
- Complexity: acceleration computation is O(N^2) per evaluation (direct summation),
  fine for the handful of bodies a preset holds.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import numpy as np

from .collisions import CollisionSettings, handle_collisions
from .constants import (
    DEFAULT_ESCAPE_DISTANCE,
    DEFAULT_MIN_SEPARATION,
    DEFAULT_SOFTENING,
    DEFAULT_SUBSTEPS,
    G,
)
from .data_models import Body
from .vector_utils import vec_len

logger = logging.getLogger(__name__)


class EngineSettings:
    """Tuning knobs shared by all engine implementations."""

    def __init__(self,
                 g: float = G,
                 substeps: int = DEFAULT_SUBSTEPS,
                 min_separation: float = DEFAULT_MIN_SEPARATION,
                 softening: float = DEFAULT_SOFTENING,
                 escape_distance: float = DEFAULT_ESCAPE_DISTANCE):
        if int(substeps) < 1:
            raise ValueError(f"substeps must be at least 1, got {substeps}")
        if float(min_separation) < 0 or float(softening) < 0:
            raise ValueError("min_separation and softening must be non-negative")
        if float(escape_distance) <= 0:
            raise ValueError("escape_distance must be positive")
        self.g = float(g)
        self.substeps = int(substeps)
        self.min_separation = float(min_separation)
        self.softening = float(softening)
        self.escape_distance = float(escape_distance)

    def __repr__(self) -> str:
        return (f"EngineSettings(g={self.g}, substeps={self.substeps}, min_separation={self.min_separation}, "
                f"softening={self.softening}, escape_distance={self.escape_distance})")


class Engine(ABC):
    """
    Interface the system model is written against.

    Implementations mutate the kinematic state of the given bodies in place and must
    tolerate arbitrary external writes to that state between calls.
    """

    def __init__(self, settings: Optional[EngineSettings] = None,
                 collision_settings: Optional[CollisionSettings] = None):
        self.settings = settings or EngineSettings()
        self.collision_settings = collision_settings or CollisionSettings()
        logger.debug("%s with %r, %r", type(self).__name__, self.settings, self.collision_settings)

    @abstractmethod
    def advance(self, bodies: Sequence[Body], dt: float) -> None:
        """Advance all participating bodies by dt."""

    def is_body_escaped(self, body: Body) -> bool:
        return vec_len(body.position) > self.settings.escape_distance


class NumericalEngine(Engine):
    """
    N-body gravitational engine integrating with velocity Verlet.

    The gravitational acceleration of body i is:
    a_i = sum_j G * m_j * r_ij / (max(|r_ij|^2, s^2) + eps^2)^(3/2)

    Where s is the minimum separation and eps the softening parameter.
    """

    def compute_accelerations(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """
        Compute gravitational accelerations for all bodies.

        Args:
            positions: (n, 2) array of positions, one snapshot for all bodies.
            masses: (n,) array of masses in the same order.

        Returns:
            (n, 2) array of accelerations, same order as inputs.
        """
        # delta[i, j] is the vector from body i to body j
        delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
        r2 = np.sum(delta ** 2, axis=-1)
        r2 = np.maximum(r2, self.settings.min_separation ** 2) + self.settings.softening ** 2
        np.fill_diagonal(r2, 1.0)  # avoid dividing by zero on self-interaction

        inv_r3 = r2 ** -1.5
        np.fill_diagonal(inv_r3, 0.0)

        weights = self.settings.g * masses[np.newaxis, :] * inv_r3
        return np.sum(delta * weights[:, :, np.newaxis], axis=1)

    def update_forces(self, bodies: Sequence[Body]) -> None:
        """Refresh acceleration and force of the bodies without moving them."""
        if not bodies:
            return
        positions = np.array([b.position for b in bodies], dtype=float)
        masses = np.array([b.mass for b in bodies], dtype=float)
        self._store_accelerations(bodies, self.compute_accelerations(positions, masses))

    def verlet_step(self, bodies: Sequence[Body], timestep: float) -> None:
        """
        Perform one velocity-Verlet step.

        Workflow:
        1) a(t) from the position snapshot
        2) x(t + dt) = x + v dt + a dt^2 / 2 for every body
        3) a(t + dt) from the new snapshot
        4) v(t + dt) = v + (a(t) + a(t + dt)) dt / 2

        Body tuples are only written after all new positions and velocities exist.
        """
        positions = np.array([b.position for b in bodies], dtype=float)
        velocities = np.array([b.velocity for b in bodies], dtype=float)
        masses = np.array([b.mass for b in bodies], dtype=float)

        accelerations = self.compute_accelerations(positions, masses)
        positions = positions + velocities * timestep + 0.5 * accelerations * timestep * timestep
        new_accelerations = self.compute_accelerations(positions, masses)
        velocities = velocities + 0.5 * (accelerations + new_accelerations) * timestep

        for i, body in enumerate(bodies):
            body.position = (float(positions[i, 0]), float(positions[i, 1]))
            body.velocity = (float(velocities[i, 0]), float(velocities[i, 1]))
        self._store_accelerations(bodies, new_accelerations)

    def advance(self, bodies: Sequence[Body], dt: float) -> None:
        if dt <= 0:
            return
        active: List[Body] = [b for b in bodies if b.participates]
        if not active:
            return

        substeps = self.settings.substeps
        timestep = dt / substeps
        for _ in range(substeps):
            self.verlet_step(active, timestep)
            if handle_collisions(active, self.collision_settings):
                active = [b for b in active if b.participates]
                if not active:
                    break

    @staticmethod
    def _store_accelerations(bodies: Sequence[Body], accelerations: np.ndarray) -> None:
        for i, body in enumerate(bodies):
            ax, ay = float(accelerations[i, 0]), float(accelerations[i, 1])
            body.acceleration = (ax, ay)
            body.force = (ax * body.mass, ay * body.mass)


def compute_energy(bodies: Sequence[Body], g: float = G,
                   min_separation: float = DEFAULT_MIN_SEPARATION,
                   softening: float = DEFAULT_SOFTENING) -> float:
    """
    Total mechanical energy (kinetic + pairwise potential) of participating bodies.

    The potential uses the same floored and softened separation as the force law.
    """
    active = [b for b in bodies if b.participates]
    ke = sum(0.5 * b.mass * (b.velocity[0] ** 2 + b.velocity[1] ** 2) for b in active)

    pe = 0.0
    for i in range(len(active)):
        for j in range(i + 1, len(active)):
            bi, bj = active[i], active[j]
            r2 = (bj.position[0] - bi.position[0]) ** 2 + (bj.position[1] - bi.position[1]) ** 2
            r = math.sqrt(max(r2, min_separation ** 2) + softening ** 2)
            pe -= g * bi.mass * bj.mass / r
    return ke + pe


def compute_angular_momentum(bodies: Sequence[Body]) -> float:
    """z component of the total angular momentum about the origin."""
    return sum(
        b.mass * (b.position[0] * b.velocity[1] - b.position[1] * b.velocity[0])
        for b in bodies if b.participates
    )


def circular_orbit_velocity(central_mass: float, orbital_radius: float, g: float = G) -> float:
    """
    Calculate the speed needed for a circular orbit.

    For a circular orbit gravity provides exactly the centripetal force:
    G * M / r = v^2 / r, therefore v = sqrt(G * M / r)
    """
    if orbital_radius <= 0:
        return 0.0

    return math.sqrt(g * central_mass / orbital_radius)


def escape_velocity(total_mass: float, separation: float, g: float = G) -> float:
    """
    Calculate the escape velocity at a given separation: v_escape = sqrt(2 * G * M / r)
    """
    if separation <= 0 or total_mass <= 0:
        return 0.0

    return math.sqrt(2.0 * g * total_mass / separation)
