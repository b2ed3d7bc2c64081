"""
Two-Stage Ascent Simulation - Numerical Integration

This module implements the translational integrators used by the stepper.
Accelerations are evaluated once per sub-step at the start-of-step state.

- symplectic: semi-implicit Euler, velocity first, then position with the
  updated velocity. Bounded energy error on orbits.
- euler: explicit Euler, kept for comparison; drifts outward on orbits.
"""

from typing import Callable, Tuple

import numpy as np

from .dynamics import compute_gravity_acceleration

INTEGRATION_METHODS = ('symplectic', 'euler')


def _check_step(dt: float):
    if dt <= 0:
        raise ValueError(f"Time step dt must be positive, got {dt}")


def symplectic_euler_step(position: np.ndarray, velocity: np.ndarray,
                          acceleration: np.ndarray, dt: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Perform a single semi-implicit Euler step.

    v_new = v + a·dt
    r_new = r + v_new·dt

    Returns:
        (new_position, new_velocity)

    Raises:
        ValueError: If dt <= 0 or acceleration contains NaN
    """
    _check_step(dt)
    if np.any(np.isnan(acceleration)):
        raise ValueError("Acceleration contains NaN values")
    new_velocity = velocity + acceleration * dt
    new_position = position + new_velocity * dt
    return new_position, new_velocity


def euler_step(position: np.ndarray, velocity: np.ndarray,
               acceleration: np.ndarray, dt: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Perform a single explicit Euler step (for comparison/debugging).

    r_new = r + v·dt
    v_new = v + a·dt
    """
    _check_step(dt)
    if np.any(np.isnan(acceleration)):
        raise ValueError("Acceleration contains NaN values")
    return position + velocity * dt, velocity + acceleration * dt


def integrate(position: np.ndarray, velocity: np.ndarray, acceleration: np.ndarray,
              dt: float, method: str = 'symplectic') -> Tuple[np.ndarray, np.ndarray]:
    """
    Integrate one step using the specified method.

    Args:
        method: 'symplectic' or 'euler'

    Returns:
        (new_position, new_velocity)
    """
    if method == 'symplectic':
        return symplectic_euler_step(position, velocity, acceleration, dt)
    elif method == 'euler':
        return euler_step(position, velocity, acceleration, dt)
    else:
        raise ValueError(f"Unknown integration method: {method}")


def propagate_ballistic(position: np.ndarray, velocity: np.ndarray, dt: float, steps: int,
                        method: str = 'symplectic',
                        acceleration_fn: Callable[[np.ndarray], np.ndarray] = None
                        ) -> Tuple[np.ndarray, np.ndarray]:
    """
    Propagate an unpowered trajectory for `steps` steps of `dt`.

    Gravity only unless acceleration_fn(position) is given.
    """
    if acceleration_fn is None:
        acceleration_fn = compute_gravity_acceleration
    position = np.asarray(position, dtype=np.float64)
    velocity = np.asarray(velocity, dtype=np.float64)
    for _ in range(steps):
        position, velocity = integrate(position, velocity, acceleration_fn(position), dt, method)
    return position, velocity
