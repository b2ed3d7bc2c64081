"""
Two-Stage Ascent Simulation - Dynamics Equations

This module implements the equations of motion in the orbital plane:
- Rotational dynamics: θ̈ = (τ_gimbal + τ_aero) / I
- Translational dynamics: r̈ = g(r) + (F_thrust + F_drag + F_normal) / m
"""

import math
from typing import NamedTuple

import numpy as np

from . import constants as C
from .utils import compute_local_up, wrap_angle


class AccelerationBreakdown(NamedTuple):
    """Container for translational acceleration terms (m/s²)."""
    gravity: np.ndarray
    thrust: np.ndarray
    drag: np.ndarray
    aero: np.ndarray
    total: np.ndarray


def compute_gravity_magnitude(r: float) -> float:
    """Central gravity μ/r² (m/s²), zero at the origin."""
    if r < C.ZERO_TOLERANCE:
        return 0.0
    return C.MU_EARTH / (r * r)


def compute_gravity_acceleration(position: np.ndarray) -> np.ndarray:
    """Gravity vector pointing toward the planet centre (m/s²)."""
    r = math.hypot(position[0], position[1])
    if r < C.ZERO_TOLERANCE:
        return np.zeros(2)
    return -compute_gravity_magnitude(r) * compute_local_up(position)


def compute_angular_acceleration(gimbal_torque: float, aero_torque: float,
                                 moment_of_inertia: float,
                                 include_aero: bool = True) -> float:
    """
    Angular acceleration from gimbal and (optionally) aerodynamic torque.

    The inertia is floored so an empty stack cannot divide by zero.
    """
    moi = max(moment_of_inertia, C.MOI_FLOOR)
    alpha = gimbal_torque / moi
    if include_aero:
        alpha += aero_torque / moi
    return alpha


def integrate_attitude(rocket_angle: float, angular_velocity: float,
                       angular_acceleration: float, dt: float) -> tuple:
    """
    Semi-implicit update of body rate then angle.

    The angle is wrapped into [-2π, 2π]; the wrap does not alter dynamics.

    Returns:
        (rocket_angle, angular_velocity)
    """
    angular_velocity = angular_velocity + angular_acceleration * dt
    rocket_angle = wrap_angle(rocket_angle + angular_velocity * dt)
    return rocket_angle, angular_velocity


def compute_linear_acceleration(position: np.ndarray, mass: float, thrust: float,
                                thrust_direction: np.ndarray,
                                drag_force: np.ndarray = None,
                                normal_force: np.ndarray = None) -> AccelerationBreakdown:
    """
    Compute linear acceleration from Newton's second law (inertial frame).

    r̈ = g + (F_thrust + F_drag + F_normal) / m

    Args:
        position: Inertial position (m)
        mass: Vehicle mass (kg)
        thrust: Thrust magnitude (N)
        thrust_direction: Unit thrust vector
        drag_force: Drag force vector (N), optional
        normal_force: Aerodynamic normal force vector (N), optional

    Returns:
        AccelerationBreakdown
    """
    gravity = compute_gravity_acceleration(position)
    if mass <= C.ZERO_TOLERANCE:
        zero = np.zeros(2)
        return AccelerationBreakdown(gravity, zero, zero, zero, gravity.copy())

    thrust_acc = (thrust / mass) * np.asarray(thrust_direction, dtype=np.float64)
    drag_acc = np.zeros(2) if drag_force is None else drag_force / mass
    aero_acc = np.zeros(2) if normal_force is None else normal_force / mass
    total = gravity + thrust_acc + drag_acc + aero_acc
    return AccelerationBreakdown(gravity, thrust_acc, drag_acc, aero_acc, total)
