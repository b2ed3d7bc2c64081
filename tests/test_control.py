import math

import pytest

from ascent_sim import control
from ascent_sim.actuator import gimbal_limit
from ascent_sim.config import create_default_config, create_test_config
from ascent_sim.vehicle import create_default_vehicle_config


@pytest.fixture
def stage():
    return create_default_vehicle_config().stages[0]


def test_pd_control_law():
    cmd, rate = control.pd_control_law(0.1, 0.0, kp=1.5, kd=0.8, time_constant=2.0)
    assert rate == pytest.approx(0.05)
    assert cmd == pytest.approx(1.5 * 0.1 + 0.8 * 0.05)


def test_pd_control_law_zero_time_constant():
    cmd, rate = control.pd_control_law(0.1, 0.02, kp=1.0, kd=1.0, time_constant=0.0)
    assert rate == 0.0
    assert cmd == pytest.approx(0.1 - 0.02)


def test_zero_error_zero_rate(stage):
    out = control.compute_control_output(0.3, 0.3, 0.0, stage)
    assert out['angle_error'] == pytest.approx(0.0)
    assert out['commanded_gimbal'] == pytest.approx(0.0)
    assert out['saturated'] is False


def test_command_sign_follows_error(stage):
    assert control.compute_control_output(0.01, 0.0, 0.0, stage)['commanded_gimbal'] > 0.0
    assert control.compute_control_output(-0.01, 0.0, 0.0, stage)['commanded_gimbal'] < 0.0


def test_rate_damping(stage):
    out = control.compute_control_output(0.0, 0.0, 0.01, stage)
    assert out['commanded_gimbal'] < 0.0


def test_saturation(stage):
    out = control.compute_control_output(1.0, 0.0, 0.0, stage)
    assert out['saturated'] is True
    assert out['commanded_gimbal'] == pytest.approx(gimbal_limit(stage))


def test_error_wraps_shortest_way(stage):
    out = control.compute_control_output(3.1, -3.1, 0.0, stage)
    assert out['angle_error'] == pytest.approx(6.2 - 2 * math.pi)
    assert out['commanded_gimbal'] < 0.0


def test_gains_from_config(stage):
    soft = create_test_config(kp_attitude=0.1, kd_attitude=0.0)
    out = control.compute_control_output(0.01, 0.0, 0.0, stage, soft)
    assert out['commanded_gimbal'] == pytest.approx(0.001)
    default = control.compute_control_output(0.01, 0.0, 0.0, stage, create_default_config())
    assert default['commanded_gimbal'] > out['commanded_gimbal']


def test_pitch_control_vertical(stage):
    out = control.compute_pitch_control(90.0, 0.0, 0.0, stage)
    assert out['target_angle'] == pytest.approx(0.0)
    assert out['commanded_gimbal'] == pytest.approx(0.0)
