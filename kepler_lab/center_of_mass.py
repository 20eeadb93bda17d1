#!/usr/bin/env python3
"""
Center of mass of the participating bodies.

The center of mass is derived state: update() has to be called explicitly after
any change that should be reflected. An empty (or massless) system has no center
of mass; update() then reports False and parks position and velocity at the origin
instead of dividing by zero.
"""
import logging
from typing import Sequence

from .data_models import Body
from .vector_utils import ZERO, Vec2, vec_sub

logger = logging.getLogger(__name__)


class CenterOfMass:
    def __init__(self, bodies: Sequence[Body]):
        # A live reference to the owning model's list
        self.bodies = bodies
        self.total_mass = 0.0
        self.position: Vec2 = ZERO
        self.velocity: Vec2 = ZERO
        self.defined = False
        self.update()

    def update(self) -> bool:
        """
        Recompute total mass, position and velocity.

        Returns False (and zero vectors) when there is no mass to average over.
        """
        active = [b for b in self.bodies if b.participates]
        total_mass = sum(b.mass for b in active)
        self.total_mass = total_mass

        if total_mass <= 0:
            if self.defined:
                logger.debug("No participating bodies; center of mass undefined")
            self.position = ZERO
            self.velocity = ZERO
            self.defined = False
            return False

        px = sum(b.mass * b.position[0] for b in active) / total_mass
        py = sum(b.mass * b.position[1] for b in active) / total_mass
        vx = sum(b.mass * b.velocity[0] for b in active) / total_mass
        vy = sum(b.mass * b.velocity[1] for b in active) / total_mass
        self.position = (px, py)
        self.velocity = (vx, vy)
        self.defined = True
        return True

    def recenter(self) -> bool:
        """
        Move the frame to the center of mass: subtract its position and velocity from
        every participating body, clear all paths and make the result the new
        starting state.
        """
        if not self.update():
            return False
        position, velocity = self.position, self.velocity
        for body in self.bodies:
            if not body.participates:
                continue
            body.position = vec_sub(body.position, position)
            body.velocity = vec_sub(body.velocity, velocity)
        for body in self.bodies:
            body.clear_path()
            body.save_starting_state()
        self.update()
        logger.debug("Recentered system on (%.3f, %.3f)", position[0], position[1])
        return True

    def follow(self) -> bool:
        """Remove the center-of-mass drift so it stays fixed (but not necessarily centered)."""
        if not self.update():
            return False
        velocity = self.velocity
        for body in self.bodies:
            if body.participates:
                body.velocity = vec_sub(body.velocity, velocity)
        self.update()
        return True
