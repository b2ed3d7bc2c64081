"""
Two-Stage Ascent Simulation - Utility Functions

This module contains shared 2D frame helpers used across multiple modules
to eliminate code duplication (DRY principle).

Frame conventions:
- Inertial x/y plane, planet centre at the origin
- local up = r / |r|; local east = (up.y, -up.x) (direction of planet rotation)
- Body angles are measured from local up toward local east
"""

import math

import numpy as np

from . import constants as C


def cross2(a: np.ndarray, b: np.ndarray) -> float:
    """z-component of the 2D cross product a × b."""
    return float(a[0] * b[1] - a[1] * b[0])


def compute_local_up(position: np.ndarray) -> np.ndarray:
    """Unit vector pointing radially outward (defaults to +y at the origin)."""
    r = math.hypot(position[0], position[1])
    if r < C.ZERO_TOLERANCE:
        return np.array([0.0, 1.0])
    return np.array([position[0] / r, position[1] / r])


def compute_local_east(position: np.ndarray) -> np.ndarray:
    """Unit horizontal vector in the direction of planet rotation."""
    up = compute_local_up(position)
    return np.array([up[1], -up[0]])


def compute_local_frame(position: np.ndarray) -> tuple:
    """Return (local_up, local_east)."""
    return compute_local_up(position), compute_local_east(position)


def compute_atmosphere_velocity(position: np.ndarray) -> np.ndarray:
    """Inertial velocity of air co-rotating with the planet at this position."""
    return np.array([C.EARTH_ROTATION_RATE * position[1],
                     -C.EARTH_ROTATION_RATE * position[0]])


def compute_relative_velocity(position: np.ndarray, velocity: np.ndarray) -> np.ndarray:
    """
    Compute air-relative velocity removing planet rotation.
    v_rel = v_inertial - v_atmosphere
    """
    return velocity - compute_atmosphere_velocity(position)


def compute_velocity_components(position: np.ndarray, velocity: np.ndarray) -> tuple:
    """
    Split inertial velocity into (vertical, horizontal) components.

    Horizontal is signed along local east.
    """
    up, east = compute_local_frame(position)
    return float(np.dot(velocity, up)), float(np.dot(velocity, east))


def compute_flight_path_angle(position: np.ndarray, velocity: np.ndarray) -> float:
    """
    Flight path angle above local horizontal (degrees).
    90 = straight up, 0 = horizontal, negative = descending.
    """
    v_vert, v_horiz = compute_velocity_components(position, velocity)
    return math.degrees(math.atan2(v_vert, v_horiz))


def angle_to_direction(angle: float, position: np.ndarray) -> np.ndarray:
    """Inertial unit vector at `angle` from local up toward local east."""
    up, east = compute_local_frame(position)
    return math.sin(angle) * east + math.cos(angle) * up


def direction_to_angle(direction: np.ndarray, position: np.ndarray) -> float:
    """Angle of an inertial direction from local up toward local east (rad)."""
    up, east = compute_local_frame(position)
    return math.atan2(float(np.dot(direction, east)), float(np.dot(direction, up)))


def pitch_to_angle(pitch_deg: float) -> float:
    """Pitch above horizontal (deg) -> body angle from vertical (rad)."""
    return math.radians(90.0 - pitch_deg)


def angle_to_pitch(angle: float) -> float:
    """Body angle from vertical (rad) -> pitch above horizontal (deg)."""
    return 90.0 - math.degrees(angle)


def wrap_angle(angle: float) -> float:
    """Keep an angle inside [-2π, 2π] without changing its direction."""
    return math.fmod(angle, 2.0 * math.pi)


def wrap_to_pi(angle: float) -> float:
    """Shortest equivalent angle in [-π, π)."""
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def unit_vector(vec: np.ndarray) -> np.ndarray:
    """Normalized copy of vec, zero vector if vec is (near) zero."""
    norm = float(np.hypot(vec[0], vec[1]))
    if norm < C.SMALL_VELOCITY_TOL:
        return np.zeros(2)
    return np.asarray(vec, dtype=np.float64) / norm
