#!/usr/bin/env python3
"""
System model: the collection of bodies and everything derived from it.

What this module does
- Owns the ordered list of bodies and the engine that moves them. The engine is
  created through an engine factory so alternative integrators can be swapped in.
- Emits body_added / body_removed when the collection changes and `changed`
  after every step or external edit, so derived state (orbit engines, trails,
  any UI) can recompute in response. The engine itself knows nothing about these
  notifications.
- Keeps the center of mass, the simulation clock and the starting state used by
  restart/reset.

Threading model
- Single-threaded and synchronous: a driver calls step(dt) once per frame. Pausing
  is simply `playing = False`, which turns step() into a no-op. restart(), reset()
  and preset loading are safe between steps.
"""
import logging
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Sequence

from .center_of_mass import CenterOfMass
from .collisions import CollisionSettings
from .constants import (
    CENTERED_TOLERANCE,
    DEFAULT_BODY_SLOTS,
    DEFAULT_TIME_SCALE,
    MAX_BODIES,
)
from .data_models import Body, BodyState
from .events import Emitter
from .physics import Engine, EngineSettings, NumericalEngine
from .vector_utils import Vec2, vec_len

logger = logging.getLogger(__name__)

EngineFactory = Callable[[EngineSettings, CollisionSettings], Engine]


def default_body_states() -> List[BodyState]:
    return [BodyState(mass, position, velocity) for mass, position, velocity in DEFAULT_BODY_SLOTS]


class SolarSystemModel:
    """
    Ordered body collection plus engine, clock and center of mass.
    """

    def __init__(self,
                 initial_states: Optional[Sequence[BodyState]] = None,
                 engine_factory: EngineFactory = NumericalEngine,
                 engine_settings: Optional[EngineSettings] = None,
                 collision_settings: Optional[CollisionSettings] = None,
                 max_bodies: int = MAX_BODIES,
                 time_scale: float = DEFAULT_TIME_SCALE,
                 path_step_interval: int = 1):
        if int(max_bodies) < 1:
            raise ValueError("max_bodies must be at least 1")
        if int(path_step_interval) < 1:
            raise ValueError("path_step_interval must be at least 1")

        self.bodies: List[Body] = []
        self.engine = engine_factory(engine_settings or EngineSettings(),
                                     collision_settings or CollisionSettings())
        self.center_of_mass = CenterOfMass(self.bodies)

        self.body_added = Emitter("body added")
        self.body_removed = Emitter("body removed")
        self.changed = Emitter("system changed")

        self.max_bodies = int(max_bodies)
        self.time_scale = float(time_scale)
        self.path_step_interval = int(path_step_interval)
        self.playing = True
        self.paths_enabled = True
        self.system_centered = False
        self.time = 0.0
        self.last_collision_msg: Optional[str] = None

        self._step_counter = 0
        self._initial_states: List[BodyState] = list(
            initial_states if initial_states is not None else default_body_states()[:2]
        )
        self.load_preset(self._initial_states)

    # -- collection management ------------------------------------------------

    @property
    def active_bodies(self) -> List[Body]:
        """Bodies taking part in the dynamics (active and not collided)."""
        return [b for b in self.bodies if b.participates]

    def add_body(self, body: Body) -> Body:
        if len(self.bodies) >= self.max_bodies:
            raise ValueError(f"cannot hold more than {self.max_bodies} bodies")
        if any(b is body for b in self.bodies):
            raise ValueError(f"{body.name} is already part of the system")
        self.bodies.append(body)
        self.body_added.emit(body)
        return body

    def remove_body(self, body: Body) -> None:
        for i, b in enumerate(self.bodies):
            if b is body:
                del self.bodies[i]
                self.body_removed.emit(body)
                return
        raise ValueError(f"{body.name} is not part of the system")

    def clear_bodies(self) -> None:
        while self.bodies:
            self.remove_body(self.bodies[-1])

    def load_preset(self, states: Iterable[BodyState]) -> None:
        """
        Replace the whole collection with bodies built from `states`.
        The states also become the configuration reset() goes back to.

        The new list is built completely before the old one is touched, so a bad
        state leaves the current system as it was.
        """
        states = list(states)
        if len(states) > self.max_bodies:
            raise ValueError(f"preset has {len(states)} bodies, the system holds at most {self.max_bodies}")
        new_bodies = [state.to_body(name=f"Body {i + 1}") for i, state in enumerate(states)]

        self.clear_bodies()
        for body in new_bodies:
            self.add_body(body)
        self._initial_states = states

        self.time = 0.0
        self._step_counter = 0
        self.last_collision_msg = None
        self.system_centered = False
        self.center_of_mass.update()
        logger.info("Loaded %d bodies", len(new_bodies))
        self.changed.emit()

    @property
    def number_of_active_bodies(self) -> int:
        return sum(1 for b in self.bodies if b.active)

    @number_of_active_bodies.setter
    def number_of_active_bodies(self, count: int) -> None:
        self.set_number_of_active_bodies(count)

    def set_number_of_active_bodies(self, count: int) -> None:
        """
        Grow or shrink the number of active bodies to `count` (1..max_bodies).

        Shrinking removes the most recently added active bodies and leaves inactive
        slots alone. Growing first reactivates inactive bodies in list order, then
        appends bodies taken from the default slots for the indices being filled.
        """
        count = int(count)
        if not 1 <= count <= self.max_bodies:
            raise ValueError(f"number of bodies must be between 1 and {self.max_bodies}, got {count}")

        active = [b for b in self.bodies if b.active]
        for body in reversed(active[count:]):
            self.remove_body(body)

        for body in self.bodies:
            if self.number_of_active_bodies >= count:
                break
            if not body.active:
                body.active = True
                body.save_starting_state(replace(body.starting_state, active=True))
                logger.debug("Reactivated %s", body.name)

        slots = default_body_states()
        while self.number_of_active_bodies < count:
            index = len(self.bodies)
            state = slots[index % len(slots)]
            self.add_body(state.to_body(name=f"Body {index + 1}"))

        self.center_of_mass.update()
        self.changed.emit()

    # -- stepping -------------------------------------------------------------

    def step(self, dt: float) -> None:
        """Advance the system by dt (scaled by time_scale) unless paused."""
        if not self.playing or dt <= 0:
            return
        scaled_dt = dt * self.time_scale
        self.engine.advance(self.bodies, scaled_dt)
        self.time += scaled_dt

        collided = [b for b in self.bodies if b.collided]
        if collided:
            self.last_collision_msg = ", ".join(b.name for b in collided) + " collided"

        self._step_counter += 1
        if self.paths_enabled and self._step_counter % self.path_step_interval == 0:
            for body in self.active_bodies:
                body.add_path_point()

        self.center_of_mass.update()
        if (vec_len(self.center_of_mass.position) > CENTERED_TOLERANCE
                or vec_len(self.center_of_mass.velocity) > CENTERED_TOLERANCE):
            self.system_centered = False
        self.changed.emit()

    # -- user edits ----------------------------------------------------------

    def set_body_position(self, body: Body, position: Vec2) -> None:
        body.set_position(position)
        self.center_of_mass.update()
        self.changed.emit()

    def set_body_velocity(self, body: Body, velocity: Vec2) -> None:
        body.set_velocity(velocity)
        self.center_of_mass.update()
        self.changed.emit()

    def set_body_mass(self, body: Body, mass: float) -> None:
        body.set_mass(mass)
        self.center_of_mass.update()
        self.changed.emit()

    def clear_paths(self) -> None:
        for body in self.bodies:
            body.clear_path()

    # -- queries --------------------------------------------------------------

    def is_body_escaped(self, body: Body) -> bool:
        return self.engine.is_body_escaped(body)

    def is_any_body_escaped(self) -> bool:
        return any(self.is_body_escaped(b) for b in self.active_bodies)

    def is_any_body_collided(self) -> bool:
        return any(b.collided for b in self.bodies)

    @property
    def total_mass(self) -> float:
        return sum(b.mass for b in self.active_bodies)

    # -- frame operations -----------------------------------------------------

    def center_system(self) -> bool:
        """Move the origin to the center of mass and stop its drift."""
        if not self.center_of_mass.recenter():
            logger.warning("Cannot center a system without participating bodies")
            return False
        self.system_centered = True
        self.changed.emit()
        return True

    def follow_center_of_mass(self) -> bool:
        """Cancel the center-of-mass velocity without moving the origin."""
        if not self.center_of_mass.follow():
            logger.warning("Cannot follow the center of mass of an empty system")
            return False
        self.changed.emit()
        return True

    def return_escaped_bodies(self) -> List[Body]:
        """Put every escaped body back to its starting state; returns the bodies moved."""
        escaped = [b for b in self.active_bodies if self.is_body_escaped(b)]
        for body in escaped:
            body.reset()
        if escaped:
            logger.info("Returned %s", ", ".join(b.name for b in escaped))
            self.center_of_mass.update()
            self.changed.emit()
        return escaped

    def save_starting_state(self) -> None:
        for body in self.bodies:
            body.save_starting_state()

    def restart(self) -> None:
        """Return every body to its starting state and the clock to zero."""
        for body in self.bodies:
            body.reset()
        self.time = 0.0
        self._step_counter = 0
        self.last_collision_msg = None
        self.center_of_mass.update()
        self.changed.emit()

    def reset(self) -> None:
        """Reload the initial configuration."""
        self.playing = True
        self.load_preset(self._initial_states)
