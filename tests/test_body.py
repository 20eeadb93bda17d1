#!/usr/bin/env python3
"""
Tests for Body state, derived radius and the bounded path.
"""

import math

import pytest

from kepler_lab.data_models import Body, BodyState, mass_to_radius


class TestMassAndRadius:
    def test_radius_follows_mass(self):
        body = Body(8.0, (0.0, 0.0), (0.0, 0.0))
        assert body.radius == pytest.approx(7.0)

        body.set_mass(27.0)
        assert body.radius == pytest.approx(8.0)

    def test_mass_assignment_recomputes_radius(self):
        body = Body(1.0, (0.0, 0.0), (0.0, 0.0))
        body.mass = 1000.0
        assert body.radius == pytest.approx(mass_to_radius(1000.0))
        assert body.radius == pytest.approx(15.0)

    @pytest.mark.parametrize("mass", [0.0, -5.0])
    def test_non_positive_mass_rejected(self, mass):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0))
        with pytest.raises(ValueError):
            body.set_mass(mass)
        assert body.mass == 10.0

        with pytest.raises(ValueError):
            Body(mass, (0.0, 0.0), (0.0, 0.0))

    def test_vectors_are_coerced_to_float_tuples(self):
        body = Body(1, [1, 2], [3, 4])
        assert body.position == (1.0, 2.0)
        assert body.velocity == (3.0, 4.0)
        assert body.acceleration == (0.0, 0.0)
        assert body.force == (0.0, 0.0)


class TestPath:
    def test_first_point_recorded_twice(self):
        body = Body(10.0, (3.0, 4.0), (0.0, 0.0))
        assert list(body.path_points) == [(3.0, 4.0), (3.0, 4.0)]
        assert body.path_distance == 0.0

    def test_stationary_body_does_not_grow_path(self):
        body = Body(10.0, (3.0, 4.0), (0.0, 0.0))
        for _ in range(50):
            assert body.add_path_point() is False
        assert len(body.path_points) == 2

    def test_moving_body_records_points(self):
        body = Body(10.0, (0.0, 0.0), (1.0, 0.0))
        body.set_position((3.0, 4.0))
        assert body.add_path_point() is True
        assert len(body.path_points) == 3
        assert body.path_distance == pytest.approx(5.0)

    def test_distance_limit_holds_for_straight_line(self):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0))
        assert body.path_distance_limit == 1000.0
        segment = 7.0
        for i in range(1, 1000):
            body.set_position((i * segment, 0.0))
            body.add_path_point()
            assert body.path_distance <= 1000.0 + segment

        # The tracked distance matches the polyline actually stored
        points = list(body.path_points)
        polyline = sum(math.dist(p, q) for p, q in zip(points, points[1:]))
        assert body.path_distance == pytest.approx(polyline)
        assert body.path_points[-1] == (999 * segment, 0.0)

    def test_length_limit_evicts_oldest(self):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0), path_length_limit=10)
        for i in range(1, 50):
            body.set_position((float(i), 0.0))
            body.add_path_point()
            assert len(body.path_points) <= 10
        assert body.path_points[0] == (40.0, 0.0)
        assert body.path_points[-1] == (49.0, 0.0)

    def test_limit_setters_validate_and_trim(self):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0))
        for i in range(1, 10):
            body.set_position((float(i), 0.0))
            body.add_path_point()

        body.path_length_limit = 4
        assert list(body.path_points) == [(6.0, 0.0), (7.0, 0.0), (8.0, 0.0), (9.0, 0.0)]
        assert body.path_distance == pytest.approx(3.0)

        with pytest.raises(ValueError):
            body.path_length_limit = 1
        with pytest.raises(ValueError):
            body.path_distance_limit = 0
        with pytest.raises(ValueError):
            body.path_distance_limit = -5.0
        assert body.path_length_limit == 4
        assert body.path_distance_limit == 1000.0

        body.path_distance_limit = 2.0
        assert list(body.path_points) == [(7.0, 0.0), (8.0, 0.0), (9.0, 0.0)]
        assert body.path_distance == pytest.approx(2.0)

    def test_clear_path(self):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0))
        body.set_position((10.0, 0.0))
        body.add_path_point()
        body.clear_path()
        assert len(body.path_points) == 0
        assert body.path_distance == 0.0

        # Recording resumes from an empty path
        assert body.add_path_point() is True
        assert list(body.path_points) == [(10.0, 0.0)]


class TestResetAndStartingState:
    def test_reset_restores_initial_values(self):
        body = Body(10.0, (1.0, 2.0), (3.0, 4.0))
        body.set_mass(50.0)
        body.set_position((100.0, 100.0))
        body.add_path_point()
        body.set_velocity((-1.0, -1.0))
        body.acceleration = (5.0, 5.0)
        body.force = (50.0, 50.0)
        body.collided = True

        body.reset()

        assert body.mass == 10.0
        assert body.radius == pytest.approx(mass_to_radius(10.0))
        assert body.position == (1.0, 2.0)
        assert body.velocity == (3.0, 4.0)
        assert body.acceleration == (0.0, 0.0)
        assert body.force == (0.0, 0.0)
        assert body.collided is False
        assert len(body.path_points) == 0

    def test_save_starting_state_moves_the_baseline(self):
        body = Body(10.0, (1.0, 2.0), (3.0, 4.0))
        body.set_position((7.0, 8.0))
        body.save_starting_state()
        body.set_position((0.0, 0.0))
        body.reset()
        assert body.position == (7.0, 8.0)

    def test_state_round_trip(self):
        state = BodyState(25.0, (200.0, 0.0), (0.0, 111.0), active=False)
        body = state.to_body(name="Planet")
        assert body.name == "Planet"
        assert body.active is False
        assert body.participates is False
        assert body.state() == state

    def test_user_controlled_flags(self):
        body = Body(10.0, (0.0, 0.0), (0.0, 0.0))
        assert body.user_controlled is False
        body.velocity_dragged = True
        assert body.user_controlled is True
