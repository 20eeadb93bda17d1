#!/usr/bin/env python3
"""
Collision handling for Kepler Lab.

Supports two modes:
- Flag: both bodies of an overlapping pair are marked collided and drop out of
  the dynamics; the surrounding model decides what to show.
- Merge: perfectly inelastic merge conserving momentum; the heavier body absorbs
  the lighter one (whose radius follows from the combined mass) and the lighter
  body is marked collided.

Collided bodies are never deleted here. The engine calls handle_collisions()
after every integration sub-step and simply skips collided bodies afterwards.
"""
import logging
from typing import List, Optional

from .data_models import Body
from .vector_utils import vec_dist

logger = logging.getLogger(__name__)

COLLISION_MODES = ("Flag", "Merge")


class CollisionSettings:
    """Container for collision-related settings."""
    def __init__(self, enable: bool = True, mode: str = "Flag", radius_scale: float = 1.0):
        if mode not in COLLISION_MODES:
            raise ValueError(f"unknown collision mode {mode!r}, expected one of {COLLISION_MODES}")
        self.enable = enable
        self.mode = mode  # "Flag" | "Merge"
        self.radius_scale = max(0.01, float(radius_scale))

    def __repr__(self) -> str:
        return f"CollisionSettings(enable={self.enable}, mode={self.mode!r}, radius_scale={self.radius_scale})"


def bodies_overlap(bi: Body, bj: Body, radius_scale: float = 1.0) -> bool:
    """True when the separation is below the (scaled) sum of the radii."""
    return vec_dist(bi.position, bj.position) < (bi.radius + bj.radius) * radius_scale


def handle_collisions(bodies: List[Body], settings: CollisionSettings) -> Optional[str]:
    """
    Detect and resolve collisions between participating bodies.

    Returns a human-readable message if a collision occurred.
    """
    if not settings.enable or len(bodies) < 2:
        return None

    last_msg: Optional[str] = None
    n = len(bodies)
    for i in range(n):
        bi = bodies[i]
        if not bi.participates:
            continue
        for j in range(i + 1, n):
            bj = bodies[j]
            if not bj.participates:
                continue
            if not bodies_overlap(bi, bj, settings.radius_scale):
                continue

            if settings.mode == "Merge":
                survivor = merge_pair(bi, bj)
                last_msg = f"Merged {bi.name} + {bj.name} into {survivor.name}"
            else:
                bi.collided = True
                bj.collided = True
                last_msg = f"Collision: {bi.name} + {bj.name}"
            logger.info(last_msg)

            if not bi.participates:
                break

    return last_msg


def merge_pair(bi: Body, bj: Body) -> Body:
    """Merge the lighter of two bodies into the heavier one and return the survivor."""
    # Ensure bi is heavier for stable replacement
    if bj.mass > bi.mass:
        bi, bj = bj, bi

    m_total = bi.mass + bj.mass
    new_pos = ((bi.position[0] * bi.mass + bj.position[0] * bj.mass) / m_total,
               (bi.position[1] * bi.mass + bj.position[1] * bj.mass) / m_total)
    new_vel = ((bi.velocity[0] * bi.mass + bj.velocity[0] * bj.mass) / m_total,
               (bi.velocity[1] * bi.mass + bj.velocity[1] * bj.mass) / m_total)

    bi.set_mass(m_total)
    bi.position = new_pos
    bi.velocity = new_vel
    bi.clear_path()

    bj.collided = True
    return bi
