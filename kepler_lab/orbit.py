#!/usr/bin/env python3
"""
Elliptical orbit engine (two-body Keplerian elements).

Given a primary and a secondary body, the engine reduces the pair to a relative
two-body problem and reconstructs the conic the secondary is travelling on from
its instantaneous relative position r and velocity v:

    mu    = G * (m1 + m2)
    h     = r x v                              (specific angular momentum, z)
    e_vec = (v x h) / mu - r / |r|             (points at periapsis)
    eps   = |v|^2 / 2 - mu / |r|               (specific orbital energy)
    a     = -mu / (2 eps)                      (vis-viva)
    w     = atan2(e_vec)                       (argument of periapsis)
    nu    = angle from e_vec to r              (true anomaly)

Other bodies in the system are ignored. The orbit is "allowed" (closed) only when
e < 1 and a > 0; open orbits are a regular, queryable state.

The engine is push-based: whoever moves the governing bodies calls update(), and
update() notifies listeners on the `changed` emitter.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

from .constants import CIRCULAR_ECCENTRICITY_TOLERANCE, G
from .data_models import Body
from .events import Emitter
from .vector_utils import (
    ZERO,
    Vec2,
    vec_add,
    vec_angle,
    vec_cross,
    vec_dot,
    vec_len,
    vec_polar,
    vec_sub,
)

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class OrbitalElements:
    """Snapshot of the orbit at the time of the last update()."""
    a: float
    e: float
    w: float
    nu: float
    b: float
    c: float
    period: float
    center: Vec2
    allowed_orbit: bool


def solve_kepler(mean_anomaly: float, e: float, tol: float = 1e-12, max_iter: int = 50) -> float:
    """Solve Kepler's equation M = E - e sin E for the eccentric anomaly E (e < 1)."""
    E = mean_anomaly if e < 0.8 else math.pi
    for _ in range(max_iter):
        delta = E - e * math.sin(E) - mean_anomaly
        if abs(delta) < tol:
            break
        E -= delta / (1.0 - e * math.cos(E))
    return E


class EllipticalOrbitEngine:
    def __init__(self, primary: Body, secondary: Body, g: float = G):
        self.primary = primary
        self.secondary = secondary
        self.g = g
        self.changed = Emitter("orbit changed")

        self.mu = 0.0
        self.h = 0.0
        self.r: Vec2 = ZERO
        self.v: Vec2 = ZERO
        self.e_vector: Vec2 = ZERO
        self.a = 0.0
        self.e = 0.0
        self.w = 0.0
        self.nu = 0.0
        self.allowed_orbit = False
        self.update()

    # -- recomputation ------------------------------------------------------

    def set_bodies(self, primary: Body, secondary: Body) -> None:
        """Follow a new pair of bodies; listeners on `changed` are kept."""
        self.primary = primary
        self.secondary = secondary
        self.update()

    def update(self, *_args) -> None:
        """Recompute the elements from the current body states and notify listeners."""
        r = vec_sub(self.secondary.position, self.primary.position)
        v = vec_sub(self.secondary.velocity, self.primary.velocity)
        mu = self.g * (self.primary.mass + self.secondary.mass)
        self._compute(r, v, mu)
        self.changed.emit(self)

    def _compute(self, r: Vec2, v: Vec2, mu: float) -> None:
        self.r, self.v, self.mu = r, v, mu
        dist = vec_len(r)
        if dist == 0 or mu <= 0:
            logger.debug("Degenerate two-body state (|r|=%s, mu=%s)", dist, mu)
            self.h = 0.0
            self.e_vector = ZERO
            self.a = self.e = self.w = self.nu = 0.0
            self.allowed_orbit = False
            return

        h = vec_cross(r, v)
        # v x h with h along z is (vy * h, -vx * h)
        ex = v[1] * h / mu - r[0] / dist
        ey = -v[0] * h / mu - r[1] / dist
        e = math.hypot(ex, ey)
        if e < CIRCULAR_ECCENTRICITY_TOLERANCE:
            e, ex, ey = 0.0, 0.0, 0.0

        energy = vec_dot(v, v) / 2.0 - mu / dist
        a = -mu / (2.0 * energy) if energy != 0 else 0.0

        if e == 0:
            w = 0.0
            nu = vec_angle(r)
        else:
            w = math.atan2(ey, ex)
            e_vector = (ex, ey)
            nu = math.atan2(vec_cross(e_vector, r), vec_dot(e_vector, r))

        self.h = h
        self.e_vector = (ex, ey)
        self.a = a
        self.e = e
        self.w = w
        self.nu = nu
        self.allowed_orbit = e < 1.0 and a > 0.0

    # -- derived quantities -------------------------------------------------

    @property
    def is_circular(self) -> bool:
        return self.e == 0

    @property
    def retrograde(self) -> bool:
        return self.h < 0

    @property
    def c(self) -> float:
        """Distance from the center of the ellipse to each focus."""
        return self.e * self.a

    @property
    def b(self) -> float:
        if not self.allowed_orbit:
            return 0.0
        return self.a * math.sqrt(1.0 - self.e * self.e)

    @property
    def period(self) -> float:
        if not self.allowed_orbit:
            return 0.0
        return TWO_PI * math.sqrt(self.a ** 3 / self.mu)

    @property
    def third_law_ratio(self) -> float:
        """a^3 / T^2, which Kepler's third law says equals mu / (4 pi^2)."""
        period = self.period
        if period == 0:
            return 0.0
        return self.a ** 3 / period ** 2

    @property
    def center(self) -> Vec2:
        """Center of the ellipse in world coordinates."""
        return vec_sub(self.primary.position, vec_polar(self.c, self.w))

    @property
    def periapsis(self) -> Vec2:
        return vec_add(self.primary.position, self.create_polar(0.0, self.w))

    @property
    def apoapsis(self) -> Vec2:
        if not self.allowed_orbit:
            raise ValueError("open orbits have no apoapsis")
        return vec_add(self.primary.position, self.create_polar(math.pi, self.w))

    def elements(self) -> OrbitalElements:
        return OrbitalElements(
            a=self.a,
            e=self.e,
            w=self.w,
            nu=self.nu,
            b=self.b,
            c=self.c,
            period=self.period,
            center=self.center,
            allowed_orbit=self.allowed_orbit,
        )

    # -- conic geometry -----------------------------------------------------

    def radius_at(self, nu: float) -> float:
        """Focal distance r = a (1 - e^2) / (1 + e cos nu)."""
        denom = 1.0 + self.e * math.cos(nu)
        if denom <= 0:
            raise ValueError(f"true anomaly {nu} lies beyond the asymptote of an open orbit")
        return self.a * (1.0 - self.e * self.e) / denom

    def create_polar(self, nu: float, w: float = 0.0) -> Vec2:
        """Point on the conic at true anomaly nu, relative to the occupied focus, rotated by w."""
        return vec_polar(self.radius_at(nu), nu + w)

    def focal_distances(self) -> Tuple[float, float]:
        """
        Distances from the body to the occupied (d1) and empty (d2) focus.

        For a circular orbit both are the radius R = a.
        """
        if self.is_circular:
            return self.a, self.a
        position = self.create_polar(self.nu)
        d1 = vec_len(position)
        d2 = vec_len(vec_add(position, (2.0 * self.c, 0.0)))
        return d1, d2

    # -- Kepler's second law ------------------------------------------------

    def eccentric_anomaly(self, nu: float) -> float:
        e = self.e
        return 2.0 * math.atan2(math.sqrt(1.0 - e) * math.sin(nu / 2.0),
                                math.sqrt(1.0 + e) * math.cos(nu / 2.0))

    def mean_anomaly(self, nu: float) -> float:
        """Mean anomaly in [0, 2 pi) for a closed orbit."""
        if not self.allowed_orbit:
            raise ValueError("mean anomaly is only defined for closed orbits")
        E = self.eccentric_anomaly(nu)
        return (E - self.e * math.sin(E)) % TWO_PI

    def true_anomaly_from_mean(self, mean_anomaly: float) -> float:
        e = self.e
        E = solve_kepler(mean_anomaly, e)
        return 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(E / 2.0),
                                math.sqrt(1.0 - e) * math.cos(E / 2.0))

    def division_anomalies(self, divisions: int) -> List[float]:
        """
        True anomalies that split one revolution into `divisions` equal-time arcs,
        starting at periapsis and following the direction of motion.
        """
        if divisions < 1:
            raise ValueError("divisions must be at least 1")
        if not self.allowed_orbit:
            return []
        sign = -1.0 if self.retrograde else 1.0
        return [sign * self.true_anomaly_from_mean(TWO_PI * k / divisions) for k in range(divisions)]

    def area_per_division(self, divisions: int) -> float:
        if divisions < 1:
            raise ValueError("divisions must be at least 1")
        if not self.allowed_orbit:
            return 0.0
        return math.pi * self.a * self.b / divisions

    def sector_area(self, nu_start: float, nu_end: float) -> float:
        """Area swept by the focal radius going from nu_start to nu_end in the direction of motion."""
        if not self.allowed_orbit:
            return 0.0
        if self.retrograde:
            nu_start, nu_end = -nu_start, -nu_end
        swept = (self.mean_anomaly(nu_end) - self.mean_anomaly(nu_start)) % TWO_PI
        return 0.5 * self.a * self.b * swept

    def position_after(self, elapsed: float) -> Vec2:
        """World position of the secondary after `elapsed` time along the current ellipse."""
        if not self.allowed_orbit:
            raise ValueError("position_after is only defined for closed orbits")
        n = TWO_PI / self.period
        sign = -1.0 if self.retrograde else 1.0
        mean = self.mean_anomaly(sign * self.nu) + n * elapsed
        nu = sign * self.true_anomaly_from_mean(mean % TWO_PI)
        return vec_add(self.primary.position, self.create_polar(nu, self.w))
