#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures for Kepler Lab.
"""

import math

import pytest

from kepler_lab.collisions import CollisionSettings
from kepler_lab.constants import G
from kepler_lab.data_models import Body, BodyState
from kepler_lab.physics import EngineSettings, NumericalEngine


def circular_speed(central_mass: float, orbiting_mass: float, radius: float) -> float:
    """Relative speed of a circular two-body orbit."""
    return math.sqrt(G * (central_mass + orbiting_mass) / radius)


@pytest.fixture
def engine():
    return NumericalEngine(EngineSettings(), CollisionSettings())


@pytest.fixture
def engine_no_collisions():
    return NumericalEngine(EngineSettings(), CollisionSettings(enable=False))


@pytest.fixture
def intro_bodies():
    """The intro screen's sun and planet: a bound, mildly eccentric pair."""
    return [
        Body(200.0, (0.0, 0.0), (0.0, -6.0), name="Sun"),
        Body(10.0, (150.0, 0.0), (0.0, 120.0), name="Planet"),
    ]


@pytest.fixture
def four_star_states():
    return [
        BodyState(120.0, (-100.0, 100.0), (-50.0, -50.0)),
        BodyState(120.0, (100.0, 100.0), (-50.0, 50.0)),
        BodyState(120.0, (100.0, -100.0), (50.0, 50.0)),
        BodyState(120.0, (-100.0, -100.0), (50.0, -50.0)),
    ]
