"""Tests for utils module (local frame and angle helpers)."""
import math

import numpy as np
import pytest

from ascent_sim import constants as C
from ascent_sim import utils


def test_local_frame_at_pad():
    up, east = utils.compute_local_frame(C.INITIAL_POSITION)
    assert np.allclose(up, [0.0, 1.0])
    assert np.allclose(east, [1.0, 0.0])


def test_local_frame_orthonormal():
    position = np.array([3.0e6, -5.0e6])
    up, east = utils.compute_local_frame(position)
    assert np.linalg.norm(up) == pytest.approx(1.0)
    assert np.linalg.norm(east) == pytest.approx(1.0)
    assert np.dot(up, east) == pytest.approx(0.0, abs=1e-12)


def test_local_up_at_origin():
    assert np.allclose(utils.compute_local_up(np.zeros(2)), [0.0, 1.0])


def test_atmosphere_co_rotates():
    v_atm = utils.compute_atmosphere_velocity(C.INITIAL_POSITION)
    assert np.allclose(v_atm, C.INITIAL_VELOCITY)
    assert np.allclose(utils.compute_relative_velocity(C.INITIAL_POSITION, C.INITIAL_VELOCITY), 0.0)


def test_velocity_components():
    position = np.array([0.0, C.R_EARTH])
    v_vert, v_horiz = utils.compute_velocity_components(position, np.array([30.0, 40.0]))
    assert v_vert == pytest.approx(40.0)
    assert v_horiz == pytest.approx(30.0)


@pytest.mark.parametrize("velocity,expected", [
    ((0.0, 100.0), 90.0),
    ((100.0, 0.0), 0.0),
    ((100.0, -100.0), -45.0),
])
def test_flight_path_angle(velocity, expected):
    position = np.array([0.0, C.R_EARTH])
    assert utils.compute_flight_path_angle(position, np.array(velocity)) == pytest.approx(expected)


def test_angle_direction_round_trip():
    position = np.array([1.0e6, 6.0e6])
    for angle in (-1.0, 0.0, 0.3, 1.5):
        direction = utils.angle_to_direction(angle, position)
        assert utils.direction_to_angle(direction, position) == pytest.approx(angle)


def test_pitch_conversion():
    assert utils.pitch_to_angle(90.0) == pytest.approx(0.0)
    assert utils.pitch_to_angle(0.0) == pytest.approx(math.pi / 2)
    assert utils.angle_to_pitch(math.pi / 2) == pytest.approx(0.0)


def test_wrap_helpers():
    assert utils.wrap_to_pi(3 * math.pi / 2) == pytest.approx(-math.pi / 2)
    assert utils.wrap_angle(5 * math.pi) == pytest.approx(math.pi)
    assert -2 * math.pi <= utils.wrap_angle(-7.0) <= 2 * math.pi


def test_unit_vector():
    assert np.allclose(utils.unit_vector(np.array([3.0, 4.0])), [0.6, 0.8])
    assert np.allclose(utils.unit_vector(np.zeros(2)), 0.0)


def test_cross2():
    assert utils.cross2(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == 1.0


def test_local_east_matches_frame():
    position = np.array([3.0e6, -5.5e6])
    _, east = utils.compute_local_frame(position)
    assert np.allclose(utils.compute_local_east(position), east)
    assert np.dot(east, utils.compute_local_up(position)) == pytest.approx(0.0, abs=1e-12)
