#!/usr/bin/env python3
"""
Data models for Kepler Lab.

This module defines the Body shared between the physics engine, the orbit
engine and the system model, plus the BodyState snapshot used by presets.

Units and usage
- position is in view units (100 = 1 AU), velocity in view units per time unit,
  mass is relative (reference sun = 200).
- radius is not stored independently: it is derived from mass every time the
  mass changes.
- path stores past positions for trails and swept-area geometry; it is
  appended to by the owning SolarSystemModel, never by the engine.
"""
import itertools
from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_PATH_DISTANCE_LIMIT,
    DEFAULT_PATH_LENGTH_LIMIT,
    RADIUS_OFFSET,
)
from .paths import BodyPath
from .vector_utils import ZERO, Vec2, as_vec

_body_ids = itertools.count(1)


def mass_to_radius(mass: float) -> float:
    return mass ** (1.0 / 3.0) + RADIUS_OFFSET


@dataclass(frozen=True)
class BodyState:
    """
    Immutable description of a body's initial conditions.

    Fields:
    - mass: relative mass (> 0)
    - position: (x, y) in view units
    - velocity: (vx, vy) in view units per time unit
    - active: whether the body takes part in the dynamics
    """
    mass: float
    position: Vec2
    velocity: Vec2
    active: bool = True

    def to_body(self, name: str = "Body", **kwargs) -> "Body":
        return Body(self.mass, self.position, self.velocity, name=name, active=self.active, **kwargs)


class Body:
    """
    A gravitating point mass.

    Kinematic state (position, velocity, acceleration, force) is held as plain
    tuples; the engine reads and writes them directly. External writers such as
    drag handlers go through set_position / set_velocity / set_mass.
    """

    def __init__(self, mass: float, position: Vec2, velocity: Vec2,
                 name: str = "Body",
                 active: bool = True,
                 path_length_limit: int = DEFAULT_PATH_LENGTH_LIMIT,
                 path_distance_limit: float = DEFAULT_PATH_DISTANCE_LIMIT):
        self.id = next(_body_ids)
        self.name = name
        self._mass = 0.0
        self.radius = 0.0
        self.set_mass(mass)
        self.position: Vec2 = as_vec(position)
        self.velocity: Vec2 = as_vec(velocity)
        self.acceleration: Vec2 = ZERO
        self.force: Vec2 = ZERO

        self.active = bool(active)
        self.collided = False

        # Set while the user is dragging the corresponding quantity
        self.position_dragged = False
        self.velocity_dragged = False
        self.mass_dragged = False

        self.path = BodyPath(path_length_limit, path_distance_limit)
        self._starting_state = self.state()

        # Adding the first point twice so a two-point polyline always exists
        self.path.force_add(self.position)
        self.path.force_add(self.position)

    def __repr__(self) -> str:
        return (f"Body(name={self.name!r}, mass={self._mass!r}, position={self.position!r}, "
                f"velocity={self.velocity!r}, active={self.active!r}, collided={self.collided!r})")

    # -- mass / radius ------------------------------------------------------

    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float) -> None:
        self.set_mass(value)

    def set_mass(self, mass: float) -> None:
        mass = float(mass)
        if not mass > 0:
            raise ValueError(f"body mass must be positive, got {mass}")
        self._mass = mass
        self.radius = mass_to_radius(mass)

    # -- external writes ------------------------------------------------------

    def set_position(self, position: Vec2) -> None:
        self.position = as_vec(position)

    def set_velocity(self, velocity: Vec2) -> None:
        self.velocity = as_vec(velocity)

    @property
    def user_controlled(self) -> bool:
        return self.position_dragged or self.velocity_dragged or self.mass_dragged

    @property
    def participates(self) -> bool:
        """True when the body is active and has not collided."""
        return self.active and not self.collided

    # -- path ---------------------------------------------------------------

    @property
    def path_points(self):
        return self.path.points

    @property
    def path_distance(self) -> float:
        return self.path.distance

    @property
    def path_length_limit(self) -> int:
        return self.path.length_limit

    @path_length_limit.setter
    def path_length_limit(self, value: int) -> None:
        self.path.length_limit = value

    @property
    def path_distance_limit(self) -> float:
        return self.path.distance_limit

    @path_distance_limit.setter
    def path_distance_limit(self, value: float) -> None:
        self.path.distance_limit = value

    def add_path_point(self) -> bool:
        """Record the current position; motionless bodies add nothing."""
        return self.path.add(self.position)

    def clear_path(self) -> None:
        self.path.clear()

    # -- starting state -----------------------------------------------------

    def state(self) -> BodyState:
        return BodyState(self._mass, self.position, self.velocity, self.active)

    @property
    def starting_state(self) -> BodyState:
        return self._starting_state

    def save_starting_state(self, state: Optional[BodyState] = None) -> None:
        """Make the current (or given) state the baseline restored by reset()."""
        self._starting_state = state if state is not None else self.state()

    def reset(self) -> None:
        start = self._starting_state
        self.set_mass(start.mass)
        self.position = start.position
        self.velocity = start.velocity
        self.acceleration = ZERO
        self.force = ZERO
        self.active = start.active
        self.collided = False
        self.clear_path()
