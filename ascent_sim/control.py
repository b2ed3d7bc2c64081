"""
Two-Stage Ascent Simulation - Attitude Control System

Outer attitude loop: turns a target body angle into a gimbal command.

    e       = wrap(θ_target − θ)
    ω_cmd   = e / τ
    g_cmd   = Kp·e + Kd·(ω_cmd − ω)

The command is clamped to the active stage's gimbal limit before it is
handed to the actuator.
"""

from .actuator import clamp_gimbal_command, gimbal_limit
from .config import SimulationConfig, create_default_config
from .types import ControlOutput
from .utils import wrap_to_pi, pitch_to_angle


def pd_control_law(angle_error: float, angular_velocity: float,
                   kp: float, kd: float, time_constant: float) -> tuple:
    """
    PD law on attitude error and rate error.

    Returns:
        (gimbal_command, rate_target) in rad and rad/s
    """
    rate_target = angle_error / time_constant if time_constant > 0.0 else 0.0
    command = kp * angle_error + kd * (rate_target - angular_velocity)
    return command, rate_target


def compute_control_output(target_angle: float, rocket_angle: float,
                           angular_velocity: float, stage,
                           config: SimulationConfig = None) -> ControlOutput:
    """
    Compute the gimbal command that steers the body toward target_angle.

    Args:
        target_angle: Desired body angle from local vertical (rad)
        rocket_angle: Current body angle (rad)
        angular_velocity: Current body rate (rad/s)
        stage: Active Stage (gimbal limits)
        config: Gains and time constant

    Returns:
        ControlOutput dict
    """
    if config is None:
        config = create_default_config()

    error = wrap_to_pi(target_angle - rocket_angle)
    command, rate_target = pd_control_law(
        error, angular_velocity,
        config.kp_attitude, config.kd_attitude, config.attitude_rate_time_constant,
    )
    clamped = clamp_gimbal_command(command, stage)
    return {
        'target_angle': target_angle,
        'angle_error': error,
        'rate_target': rate_target,
        'commanded_gimbal': clamped,
        'saturated': abs(command) >= gimbal_limit(stage),
    }


def compute_pitch_control(pitch_deg: float, rocket_angle: float, angular_velocity: float,
                          stage, config: SimulationConfig = None) -> ControlOutput:
    """compute_control_output for a pitch command in degrees above horizontal."""
    return compute_control_output(pitch_to_angle(pitch_deg), rocket_angle,
                                  angular_velocity, stage, config)
