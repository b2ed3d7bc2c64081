"""Tests for state module."""
import numpy as np
import pytest

from ascent_sim import constants as C
from ascent_sim.state import VehicleState, create_launch_state, create_orbital_state
from ascent_sim.vehicle import create_default_vehicle_config


@pytest.fixture
def vehicle():
    return create_default_vehicle_config()


def test_default_state_on_surface():
    s = VehicleState()
    assert s.altitude == pytest.approx(0.0)
    assert s.speed == pytest.approx(C.EARTH_ROTATION_RATE * C.R_EARTH)
    assert s.position.dtype == np.float64


def test_launch_state(vehicle):
    s = create_launch_state(vehicle)
    assert s.current_stage == 0
    assert s.engine_on is False
    assert s.fairing_jettisoned is False
    assert s.rocket_angle == 0.0
    assert s.propellant_remaining == [st.propellant_mass for st in vehicle.stages]
    assert s.elapsed_time == 0.0


def test_orbital_state(vehicle):
    s = create_orbital_state(vehicle, 400000.0)
    assert s.altitude == pytest.approx(400000.0)
    assert s.speed == pytest.approx(np.sqrt(C.MU_EARTH / (C.R_EARTH + 400000.0)))
    assert s.current_stage == 1
    assert s.propellant_remaining[0] == 0.0
    assert s.fairing_jettisoned is True
    assert s.rocket_angle == pytest.approx(np.pi / 2.0)


def test_copy_is_independent(vehicle):
    s = create_launch_state(vehicle)
    c = s.copy()
    c.position[1] += 100.0
    c.propellant_remaining[0] = 0.0
    c.engine_on = True
    assert s.altitude == pytest.approx(0.0)
    assert s.propellant_remaining[0] == vehicle.stages[0].propellant_mass
    assert s.engine_on is False


def test_list_inputs_converted():
    s = VehicleState(position=[0.0, C.R_EARTH + 10.0], velocity=[1.0, 2.0],
                     propellant_remaining=[1, 2])
    assert isinstance(s.position, np.ndarray)
    assert s.altitude == pytest.approx(10.0)
    assert s.propellant_remaining == [1.0, 2.0]


def test_str_summary(vehicle):
    text = str(create_launch_state(vehicle))
    assert "t=0.00s" in text
    assert "stage=1" in text
