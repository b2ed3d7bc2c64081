"""Tests for dynamics module."""
import numpy as np
import pytest

from ascent_sim import constants as C
from ascent_sim import dynamics


def test_surface_gravity():
    g = dynamics.compute_gravity_magnitude(C.R_EARTH)
    assert g == pytest.approx(9.82, abs=0.01)


def test_gravity_points_down():
    position = np.array([C.R_EARTH, 0.0])
    g = dynamics.compute_gravity_acceleration(position)
    assert g[0] < 0.0
    assert g[1] == pytest.approx(0.0)


def test_gravity_zero_at_origin():
    assert dynamics.compute_gravity_magnitude(0.0) == 0.0
    assert np.allclose(dynamics.compute_gravity_acceleration(np.zeros(2)), 0.0)


def test_gravity_inverse_square():
    g1 = dynamics.compute_gravity_magnitude(C.R_EARTH)
    g2 = dynamics.compute_gravity_magnitude(2 * C.R_EARTH)
    assert g1 / g2 == pytest.approx(4.0)


def test_angular_acceleration():
    assert dynamics.compute_angular_acceleration(100.0, 50.0, 10.0) == pytest.approx(15.0)
    assert dynamics.compute_angular_acceleration(100.0, 50.0, 10.0, include_aero=False) == \
        pytest.approx(10.0)


def test_angular_acceleration_inertia_floor():
    alpha = dynamics.compute_angular_acceleration(1.0, 0.0, 0.0)
    assert alpha == pytest.approx(1.0 / C.MOI_FLOOR)


def test_integrate_attitude_semi_implicit():
    angle, rate = dynamics.integrate_attitude(0.0, 1.0, 2.0, 0.5)
    assert rate == pytest.approx(2.0)
    assert angle == pytest.approx(1.0)


def test_linear_acceleration_sums_terms():
    position = np.array([0.0, C.R_EARTH])
    acc = dynamics.compute_linear_acceleration(
        position, 1000.0, 20000.0, np.array([0.0, 1.0]),
        drag_force=np.array([0.0, -1000.0]), normal_force=np.array([500.0, 0.0]),
    )
    assert np.allclose(acc.thrust, [0.0, 20.0])
    assert np.allclose(acc.drag, [0.0, -1.0])
    assert np.allclose(acc.aero, [0.5, 0.0])
    assert np.allclose(acc.total, acc.gravity + acc.thrust + acc.drag + acc.aero)


def test_linear_acceleration_massless():
    position = np.array([0.0, C.R_EARTH])
    acc = dynamics.compute_linear_acceleration(position, 0.0, 1.0e6, np.array([0.0, 1.0]))
    assert np.allclose(acc.total, acc.gravity)
    assert np.allclose(acc.thrust, 0.0)
