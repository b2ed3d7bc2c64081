import math

import pytest

from ascent_sim import actuator
from ascent_sim.vehicle import create_default_vehicle_config


@pytest.fixture
def stage():
    return create_default_vehicle_config().stages[0]


def test_limits_in_radians(stage):
    assert actuator.gimbal_limit(stage) == pytest.approx(math.radians(stage.gimbal_max_angle))
    assert actuator.gimbal_rate_limit(stage) == pytest.approx(math.radians(stage.gimbal_rate))


def test_clamp_gimbal_command(stage):
    limit = actuator.gimbal_limit(stage)
    assert actuator.clamp_gimbal_command(1.0, stage) == pytest.approx(limit)
    assert actuator.clamp_gimbal_command(-1.0, stage) == pytest.approx(-limit)
    assert actuator.clamp_gimbal_command(0.01, stage) == 0.01


def test_update_actuator_rate_limited(stage):
    dt = 0.1
    new, cmd = actuator.update_actuator(0.0, math.radians(5.0), stage, dt)
    assert cmd == pytest.approx(math.radians(5.0))
    assert new == pytest.approx(actuator.gimbal_rate_limit(stage) * dt)


def test_update_actuator_reaches_small_target(stage):
    new, _ = actuator.update_actuator(0.0, 0.001, stage, 0.1)
    assert new == pytest.approx(0.001)


def test_update_actuator_clamps_target(stage):
    angle = 0.0
    for _ in range(100):
        angle, cmd = actuator.update_actuator(angle, 1.0, stage, 0.1)
    assert angle == pytest.approx(actuator.gimbal_limit(stage))
    assert cmd == pytest.approx(actuator.gimbal_limit(stage))


def test_update_actuator_zero_dt(stage):
    new, _ = actuator.update_actuator(0.02, -0.05, stage, 0.0)
    assert new == 0.02


def test_gimbal_torque():
    assert actuator.compute_gimbal_torque(1000.0, math.pi / 6, 2.0) == pytest.approx(1000.0)
    assert actuator.compute_gimbal_torque(1000.0, 0.0, 2.0) == 0.0
