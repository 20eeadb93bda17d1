#!/usr/bin/env python3
"""
Kepler's laws model: a sun and one planet with live orbital elements.

The model wraps a two-body SolarSystemModel and owns an
EllipticalOrbitEngine for (sun, planet). The engine is repointed when the bodies
are replaced and re-run on every `changed` notification of the system, so the
elements always describe the current state.
The second-law helpers split the orbit into `period_divisions` equal-time arcs.
"""
import logging
import math
from typing import List, Optional, Tuple

from .constants import G, MAX_PERIOD_DIVISIONS, MAX_THIRD_LAW_POWER, MIN_PERIOD_DIVISIONS, to_au, to_years
from .data_models import Body, BodyState
from .orbit import EllipticalOrbitEngine, OrbitalElements
from .physics import EngineSettings
from .system import SolarSystemModel
from .vector_utils import Vec2, vec_add

logger = logging.getLogger(__name__)

DEFAULT_SUN = BodyState(200.0, (0.0, 0.0), (0.0, 0.0))
DEFAULT_PLANET = BodyState(10.0, (150.0, 0.0), (0.0, 120.0))


class KeplersLawsModel:
    """Sun + planet system with an orbit engine that follows every change."""

    def __init__(self,
                 sun: BodyState = DEFAULT_SUN,
                 planet: BodyState = DEFAULT_PLANET,
                 engine_settings: Optional[EngineSettings] = None,
                 period_divisions: int = 4):
        self.system = SolarSystemModel([sun, planet], engine_settings=engine_settings, max_bodies=2)
        self._period_divisions = MIN_PERIOD_DIVISIONS
        self.period_divisions = period_divisions

        # One engine for the model's lifetime; it is repointed when the bodies change
        bodies = self.system.bodies
        self._engine = EllipticalOrbitEngine(bodies[0], bodies[1], g=self.system.engine.settings.g)
        self._tracking = True
        self.system.body_added.add_listener(self._on_bodies_changed)
        self.system.body_removed.add_listener(self._on_bodies_changed)
        self.system.changed.add_listener(self._on_system_changed)

    # -- wiring ---------------------------------------------------------------

    def _attach_orbit(self) -> bool:
        """Point the engine at the first two bodies. True if it was repointed."""
        bodies = self.system.bodies
        self._tracking = len(bodies) >= 2
        if not self._tracking:
            return False
        if self._engine.primary is bodies[0] and self._engine.secondary is bodies[1]:
            return False
        self._engine.set_bodies(bodies[0], bodies[1])
        logger.debug("Tracking orbit of %s around %s", bodies[1].name, bodies[0].name)
        return True

    def _on_bodies_changed(self, _body: Body) -> None:
        self._tracking = False

    def _on_system_changed(self) -> None:
        if not self._tracking and self._attach_orbit():
            return
        if self._tracking:
            self._engine.update()

    # -- accessors ------------------------------------------------------------

    @property
    def orbit(self) -> Optional[EllipticalOrbitEngine]:
        """The orbit engine, or None while fewer than two bodies exist."""
        return self._engine if self._tracking else None

    @property
    def sun(self) -> Optional[Body]:
        bodies = self.system.bodies
        return bodies[0] if bodies else None

    @property
    def planet(self) -> Optional[Body]:
        bodies = self.system.bodies
        return bodies[1] if len(bodies) >= 2 else None

    @property
    def period_divisions(self) -> int:
        return self._period_divisions

    @period_divisions.setter
    def period_divisions(self, value: int) -> None:
        value = int(value)
        if not MIN_PERIOD_DIVISIONS <= value <= MAX_PERIOD_DIVISIONS:
            raise ValueError(
                f"period divisions must be between {MIN_PERIOD_DIVISIONS} and {MAX_PERIOD_DIVISIONS}, got {value}"
            )
        self._period_divisions = value

    def elements(self) -> Optional[OrbitalElements]:
        return self.orbit.elements() if self.orbit is not None else None

    def step(self, dt: float) -> None:
        self.system.step(dt)

    # -- Kepler's second law -------------------------------------------------

    def division_points(self) -> List[Vec2]:
        """World positions where each equal-time arc starts, first one at periapsis."""
        if self.orbit is None:
            return []
        anomalies = self.orbit.division_anomalies(self.period_divisions)
        return [vec_add(self.sun.position, self.orbit.create_polar(nu, self.orbit.w)) for nu in anomalies]

    def division_areas(self) -> List[float]:
        """Area of every equal-time sector; all equal by Kepler's second law."""
        if self.orbit is None:
            return []
        anomalies = self.orbit.division_anomalies(self.period_divisions)
        if not anomalies:
            return []
        closed = anomalies + anomalies[:1]
        return [self.orbit.sector_area(start, end) for start, end in zip(closed, closed[1:])]

    def swept_path_area(self) -> float:
        """Area swept along the planet's recorded path, measured from the sun."""
        sun, planet = self.sun, self.planet
        if sun is None or planet is None:
            return 0.0
        return planet.path.swept_area(sun.position)

    def distances(self) -> Tuple[float, float]:
        """Focal string lengths (d1, d2), or (R, R) for a circular orbit."""
        if self.orbit is None:
            return 0.0, 0.0
        return self.orbit.focal_distances()

    def third_law(self) -> Tuple[float, float]:
        """(a, T) of the current orbit."""
        if self.orbit is None:
            return 0.0, 0.0
        return self.orbit.a, self.orbit.period

    def powered_third_law(self, axis_power: int = 3, period_power: int = 2) -> Tuple[float, float]:
        """
        (a^p in AU^p, T^q in years^q) for the third-law graph.

        With the default powers the two values agree for a light planet
        around a reference-mass sun.
        """
        for power in (axis_power, period_power):
            if not 1 <= power <= MAX_THIRD_LAW_POWER:
                raise ValueError(f"third law powers must be between 1 and {MAX_THIRD_LAW_POWER}, got {power}")
        a, period = self.third_law()
        return to_au(a) ** axis_power, to_years(period) ** period_power


def kepler_constant(sun_mass: float, planet_mass: float = 0.0, g: float = G) -> float:
    """The a^3 / T^2 ratio every closed orbit around the given pair shares."""
    return g * (sun_mass + planet_mass) / (4.0 * math.pi * math.pi)
