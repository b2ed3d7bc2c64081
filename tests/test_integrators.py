"""Tests for integrators module."""
import math

import numpy as np
import pytest

from ascent_sim import constants as C
from ascent_sim import integrators
from ascent_sim.utils import cross2


def _circular_orbit(altitude=500000.0):
    r = C.R_EARTH + altitude
    return np.array([0.0, r]), np.array([math.sqrt(C.MU_EARTH / r), 0.0])


def _energy(position, velocity):
    return 0.5 * np.dot(velocity, velocity) - C.MU_EARTH / np.linalg.norm(position)


def test_symplectic_step_uses_updated_velocity():
    r, v = integrators.symplectic_euler_step(np.zeros(2), np.array([1.0, 0.0]),
                                             np.array([0.0, 2.0]), 0.5)
    assert np.allclose(v, [1.0, 1.0])
    assert np.allclose(r, [0.5, 0.5])


def test_euler_step_uses_old_velocity():
    r, v = integrators.euler_step(np.zeros(2), np.array([1.0, 0.0]), np.array([0.0, 2.0]), 0.5)
    assert np.allclose(v, [1.0, 1.0])
    assert np.allclose(r, [0.5, 0.0])


@pytest.mark.parametrize("dt", [0.0, -0.1])
def test_non_positive_dt_rejected(dt):
    with pytest.raises(ValueError):
        integrators.integrate(np.zeros(2), np.zeros(2), np.zeros(2), dt)


def test_nan_acceleration_rejected():
    with pytest.raises(ValueError):
        integrators.integrate(np.zeros(2), np.zeros(2), np.array([np.nan, 0.0]), 0.1)


def test_unknown_method_rejected():
    with pytest.raises(ValueError, match="Unknown integration method"):
        integrators.integrate(np.zeros(2), np.zeros(2), np.zeros(2), 0.1, method='rk4')


class TestOrbitConservation:
    """Unpowered orbit propagated for 10,000 steps of 0.01 s."""

    @classmethod
    def setup_class(cls):
        cls.r0, cls.v0 = _circular_orbit()
        cls.r1, cls.v1 = integrators.propagate_ballistic(cls.r0, cls.v0, 0.01, 10000)
        cls.re, cls.ve = integrators.propagate_ballistic(cls.r0, cls.v0, 0.01, 10000,
                                                         method='euler')

    def test_energy_bounded(self):
        e0 = _energy(self.r0, self.v0)
        assert _energy(self.r1, self.v1) == pytest.approx(e0, rel=1e-4)

    def test_angular_momentum_conserved(self):
        h0 = cross2(self.r0, self.v0)
        assert cross2(self.r1, self.v1) == pytest.approx(h0, rel=1e-9)

    def test_altitude_held(self):
        assert np.linalg.norm(self.r1) == pytest.approx(np.linalg.norm(self.r0), rel=1e-4)

    def test_explicit_euler_drifts_more(self):
        e0 = _energy(self.r0, self.v0)
        assert abs(_energy(self.re, self.ve) - e0) > abs(_energy(self.r1, self.v1) - e0)
