"""
Engine gimbal actuator dynamics (clamped, rate-limited servo).

The commanded deflection is clamped to the active stage's gimbal limit and
the actual deflection slews toward it at no more than the stage's gimbal
rate. This is the only source of actuation lag in the attitude loop.
"""

import math

from . import constants as C


def gimbal_limit(stage) -> float:
    """Maximum deflection of the stage's engine (rad)."""
    return math.radians(stage.gimbal_max_angle)


def gimbal_rate_limit(stage) -> float:
    """Maximum slew rate of the stage's engine (rad/s)."""
    return math.radians(stage.gimbal_rate)


def clamp_gimbal_command(command: float, stage) -> float:
    """Clamp a gimbal command to ±gimbal_max_angle."""
    limit = gimbal_limit(stage)
    return min(limit, max(-limit, command))


def update_actuator(gimbal_angle: float, command: float, stage, dt: float) -> tuple:
    """
    Advance the gimbal toward the command with the stage's rate limit.

    Args:
        gimbal_angle: Current deflection (rad)
        command: Requested deflection (rad), clamped here
        stage: Active Stage
        dt: Step (s)

    Returns:
        (new_gimbal_angle, clamped_command)
    """
    target = clamp_gimbal_command(command, stage)
    if dt <= 0.0:
        return gimbal_angle, target
    max_step = gimbal_rate_limit(stage) * dt
    delta = target - gimbal_angle
    if abs(delta) <= max_step + C.ZERO_TOLERANCE:
        return target, target
    return gimbal_angle + math.copysign(max_step, delta), target


def compute_gimbal_torque(thrust: float, gimbal_angle: float, moment_arm: float) -> float:
    """Torque = thrust·sin(gimbal)·arm (N·m)."""
    return thrust * math.sin(gimbal_angle) * moment_arm
