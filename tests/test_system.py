#!/usr/bin/env python3
"""
Tests for the system model: body collection, stepping, frame operations and
restart/reset behaviour.
"""

import logging
from dataclasses import replace

import pytest

from kepler_lab.collisions import CollisionSettings
from kepler_lab.constants import DEFAULT_BODY_SLOTS
from kepler_lab.data_models import Body, BodyState
from kepler_lab.physics import Engine, EngineSettings
from kepler_lab.system import SolarSystemModel, default_body_states

FRAME_DT = 1 / 60.0

SUN_AND_PLANET = [
    BodyState(200.0, (10.0, 10.0), (0.0, -6.0)),
    BodyState(10.0, (160.0, 10.0), (0.0, 120.0)),
]


class RecordingEngine(Engine):
    """Engine stand-in that only records what it was asked to do."""

    def __init__(self, settings=None, collision_settings=None):
        super().__init__(settings, collision_settings)
        self.calls = []

    def advance(self, bodies, dt):
        self.calls.append((len(bodies), dt))


@pytest.fixture
def model():
    return SolarSystemModel(SUN_AND_PLANET)


class TestCollection:
    def test_defaults_to_first_two_slots(self):
        model = SolarSystemModel()
        assert [b.state() for b in model.bodies] == default_body_states()[:2]
        assert model.number_of_active_bodies == 2

    def test_shrink_removes_last_bodies(self, four_star_states):
        model = SolarSystemModel(four_star_states)
        removed = []
        model.body_removed.add_listener(removed.append)
        first_two = model.bodies[:2]

        model.number_of_active_bodies = 2

        assert model.bodies == first_two
        assert [b.name for b in removed] == ["Body 4", "Body 3"]

    def test_grow_appends_default_slots(self, model):
        added = []
        model.body_added.add_listener(added.append)

        model.set_number_of_active_bodies(4)

        assert len(model.bodies) == 4
        assert len(added) == 2
        mass, position, velocity = DEFAULT_BODY_SLOTS[2]
        assert added[0].state() == BodyState(mass, position, velocity)
        assert added[1].name == "Body 4"

    def test_grow_reactivates_inactive_bodies_first(self, four_star_states):
        states = four_star_states[:2] + [replace(s, active=False) for s in four_star_states[2:]]
        model = SolarSystemModel(states)
        added = []
        model.body_added.add_listener(added.append)
        assert model.number_of_active_bodies == 2

        model.set_number_of_active_bodies(3)

        assert len(model.bodies) == 4
        assert added == []
        assert [b.active for b in model.bodies] == [True, True, True, False]
        assert model.number_of_active_bodies == 3

        # The reactivated body stays active across a restart
        model.restart()
        assert model.bodies[2].active

    def test_grow_appends_after_reactivating(self, four_star_states):
        states = [four_star_states[0], replace(four_star_states[1], active=False), four_star_states[2]]
        model = SolarSystemModel(states)
        added = []
        model.body_added.add_listener(added.append)

        model.set_number_of_active_bodies(4)

        assert model.bodies[1].active
        assert [b.name for b in added] == ["Body 4"]
        assert model.number_of_active_bodies == 4

    def test_shrink_keeps_inactive_bodies(self, four_star_states):
        states = four_star_states[:3] + [replace(four_star_states[3], active=False)]
        model = SolarSystemModel(states)
        removed = []
        model.body_removed.add_listener(removed.append)

        model.set_number_of_active_bodies(2)

        assert [b.name for b in removed] == ["Body 3"]
        assert [b.name for b in model.bodies] == ["Body 1", "Body 2", "Body 4"]
        assert model.number_of_active_bodies == 2

    @pytest.mark.parametrize("count", [0, 5, -1])
    def test_invalid_number_of_bodies(self, model, count):
        with pytest.raises(ValueError):
            model.set_number_of_active_bodies(count)
        assert len(model.bodies) == 2

    def test_add_and_remove_guards(self, model):
        extra = Body(1.0, (300.0, 0.0), (0.0, 0.0))
        with pytest.raises(ValueError):
            model.remove_body(extra)
        with pytest.raises(ValueError):
            model.add_body(model.bodies[0])

        model.add_body(extra)
        model.add_body(Body(1.0, (-300.0, 0.0), (0.0, 0.0)))
        with pytest.raises(ValueError):
            model.add_body(Body(1.0, (0.0, 300.0), (0.0, 0.0)))

    def test_load_preset_too_many_bodies_keeps_system(self, model):
        before = list(model.bodies)
        with pytest.raises(ValueError):
            model.load_preset(default_body_states() + [SUN_AND_PLANET[0]])
        assert model.bodies == before

    def test_load_preset_with_bad_body_keeps_system(self, model):
        before = list(model.bodies)
        with pytest.raises(ValueError):
            model.load_preset([SUN_AND_PLANET[0], BodyState(0.0, (1.0, 1.0), (0.0, 0.0))])
        assert model.bodies == before

    def test_load_preset_resets_clock(self, model, four_star_states):
        model.step(FRAME_DT)
        notified = []
        model.changed.add_listener(lambda: notified.append(True))

        model.load_preset(four_star_states)

        assert model.time == 0.0
        assert len(model.bodies) == 4
        assert notified == [True]
        assert model.center_of_mass.position == pytest.approx((0.0, 0.0))


class TestStepping:
    def test_step_moves_bodies_and_advances_clock(self, model):
        start = [b.position for b in model.bodies]
        notified = []
        model.changed.add_listener(lambda: notified.append(True))

        model.step(FRAME_DT)

        assert [b.position for b in model.bodies] != start
        assert model.time == pytest.approx(FRAME_DT)
        assert notified == [True]
        assert all(len(b.path_points) == 3 for b in model.bodies)

    def test_paused_model_does_not_move(self, model):
        start = [b.position for b in model.bodies]
        model.playing = False
        model.step(FRAME_DT)
        assert [b.position for b in model.bodies] == start
        assert model.time == 0.0

    def test_time_scale(self):
        engine_holder = []

        def factory(settings, collision_settings):
            engine_holder.append(RecordingEngine(settings, collision_settings))
            return engine_holder[0]

        model = SolarSystemModel(SUN_AND_PLANET, engine_factory=factory, time_scale=2.5)
        model.step(0.1)
        model.step(0.0)

        assert engine_holder[0].calls == [(2, pytest.approx(0.25))]
        assert model.time == pytest.approx(0.25)

    def test_path_step_interval(self):
        model = SolarSystemModel(SUN_AND_PLANET, path_step_interval=3)
        planet = model.bodies[1]
        model.step(FRAME_DT)
        model.step(FRAME_DT)
        assert len(planet.path_points) == 2
        model.step(FRAME_DT)
        assert len(planet.path_points) == 3

    def test_paths_can_be_disabled_and_cleared(self, model):
        model.paths_enabled = False
        model.step(FRAME_DT)
        assert len(model.bodies[1].path_points) == 2

        model.clear_paths()
        assert all(len(b.path_points) == 0 for b in model.bodies)

    def test_engine_settings_are_passed_to_factory(self):
        settings = EngineSettings(substeps=7)
        collisions = CollisionSettings(mode="Merge")
        model = SolarSystemModel(SUN_AND_PLANET, engine_factory=RecordingEngine,
                                 engine_settings=settings, collision_settings=collisions)
        assert model.engine.settings is settings
        assert model.engine.collision_settings is collisions


class TestUserEdits:
    def test_edits_update_center_of_mass(self, model):
        notified = []
        model.changed.add_listener(lambda: notified.append(True))
        sun, planet = model.bodies

        model.set_body_mass(planet, 200.0)
        assert model.center_of_mass.position == pytest.approx((85.0, 10.0))

        model.set_body_position(planet, (10.0, 10.0))
        assert model.center_of_mass.position == pytest.approx((10.0, 10.0))

        model.set_body_velocity(sun, (0.0, -120.0))
        assert model.center_of_mass.velocity == pytest.approx((0.0, 0.0))
        assert len(notified) == 3

    def test_bad_mass_is_rejected(self, model):
        with pytest.raises(ValueError):
            model.set_body_mass(model.bodies[0], 0.0)
        assert model.bodies[0].mass == 200.0

    def test_total_mass(self, model):
        assert model.total_mass == 210.0
        model.bodies[1].collided = True
        assert model.total_mass == 200.0


class TestFrameOperations:
    def test_center_system(self, model):
        assert model.center_system() is True
        assert model.system_centered
        assert model.center_of_mass.position == pytest.approx((0.0, 0.0), abs=1e-9)

        # Zero total momentum: stepping keeps the system centered
        for _ in range(10):
            model.step(FRAME_DT)
        assert model.system_centered

        model.set_body_velocity(model.bodies[0], (0.0, 50.0))
        model.step(FRAME_DT)
        assert not model.system_centered

    def test_center_system_makes_new_starting_state(self, model):
        model.center_system()
        centered = [b.position for b in model.bodies]
        model.step(FRAME_DT)
        model.restart()
        assert [b.position for b in model.bodies] == centered

    def test_follow_center_of_mass(self):
        model = SolarSystemModel([
            BodyState(200.0, (0.0, 0.0), (10.0, 0.0)),
            BodyState(10.0, (150.0, 0.0), (0.0, 120.0)),
        ])
        position = model.center_of_mass.position
        assert model.follow_center_of_mass() is True
        assert model.center_of_mass.velocity == pytest.approx((0.0, 0.0), abs=1e-9)
        assert model.center_of_mass.position == pytest.approx(position)

    def test_return_escaped_bodies(self, model):
        planet = model.bodies[1]
        assert not model.is_any_body_escaped()
        model.set_body_position(planet, (2000.0, 0.0))
        assert model.is_body_escaped(planet)
        assert model.is_any_body_escaped()

        returned = model.return_escaped_bodies()

        assert returned == [planet]
        assert planet.position == (160.0, 10.0)
        assert not model.is_any_body_escaped()
        assert model.return_escaped_bodies() == []

    def test_collisions_are_reported(self):
        model = SolarSystemModel([
            BodyState(10.0, (0.0, 0.0), (0.0, 0.0)),
            BodyState(10.0, (5.0, 0.0), (0.0, 0.0)),
        ])
        assert not model.is_any_body_collided()

        model.step(FRAME_DT)

        assert model.is_any_body_collided()
        assert model.active_bodies == []
        assert "Body 1" in model.last_collision_msg
        assert model.center_of_mass.defined is False

    def test_empty_system(self, model, caplog):
        caplog.set_level(logging.WARNING, logger="kepler_lab")
        model.clear_bodies()
        model.step(FRAME_DT)

        assert model.total_mass == 0.0
        assert model.center_system() is False
        assert model.follow_center_of_mass() is False
        assert "Cannot center" in caplog.text


class TestRestartAndReset:
    def test_restart_restores_bodies_and_clock(self, model):
        start = [b.state() for b in model.bodies]
        for _ in range(30):
            model.step(FRAME_DT)

        model.restart()

        assert [b.state() for b in model.bodies] == start
        assert model.time == 0.0

    def test_restart_revives_collided_bodies(self):
        model = SolarSystemModel([
            BodyState(10.0, (0.0, 0.0), (0.0, 0.0)),
            BodyState(10.0, (5.0, 0.0), (0.0, 0.0)),
        ])
        model.step(FRAME_DT)
        model.restart()
        assert not model.is_any_body_collided()
        assert model.last_collision_msg is None

    def test_reset_reloads_initial_configuration(self, model):
        model.set_number_of_active_bodies(4)
        model.playing = False

        model.reset()

        assert model.playing
        assert [b.state() for b in model.bodies] == SUN_AND_PLANET
