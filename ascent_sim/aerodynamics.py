"""
Two-Stage Ascent Simulation - Aerodynamic Model

Mach-dependent aerodynamics of a slender launch vehicle:
- Drag coefficient curve fit to slender-body wind-tunnel data, scaled by
  fineness ratio
- Normal-force slope from Prandtl-Glauert (subsonic) and Ackeret
  (supersonic) theory with a linear transonic blend
- Centre-of-pressure travel from 50% to 60% of vehicle length
- Aerodynamic torque about the centre of gravity

Sign conventions follow utils.py: angles grow from local up toward local
east, so a positive angle of attack means the nose sits east of the airflow.
"""

import math

import numpy as np

from . import constants as C
from .atmosphere import compute_atmosphere_properties
from .types import AerodynamicLoads
from .utils import compute_relative_velocity, compute_local_frame, cross2


# =============================================================================
# COEFFICIENTS
# =============================================================================

def _smoothstep(x: float) -> float:
    x = min(1.0, max(0.0, x))
    return x * x * (3.0 - 2.0 * x)


def _lerp(a: float, b: float, x: float) -> float:
    return a + (b - a) * x


def drag_coefficient_curve(mach: float) -> float:
    """
    Unscaled Cd(M).

    Segments:
        M < 0.6       constant subsonic value
        0.6 - 0.8     linear rise
        0.8 - 1.0     smoothstep through the transonic drag rise
        1.0 - 1.2     short peak near M 1.05
        1.2 - 5.0     monotonic supersonic decrease
        M > 5         exponential decay toward the hypersonic asymptote

    Negative Mach is taken by magnitude.
    """
    m = abs(mach)
    if m < 0.6:
        return C.CD_SUBSONIC
    if m < 0.8:
        return _lerp(C.CD_SUBSONIC, C.CD_TRANSONIC_START, (m - 0.6) / 0.2)
    if m < 1.0:
        return _lerp(C.CD_TRANSONIC_START, C.CD_TRANSONIC_END, _smoothstep((m - 0.8) / 0.2))
    if m < 1.05:
        return _lerp(C.CD_TRANSONIC_END, C.CD_PEAK, (m - 1.0) / 0.05)
    if m < 1.2:
        return _lerp(C.CD_PEAK, C.CD_MACH_1_2, (m - 1.05) / 0.15)
    if m < 2.0:
        return _lerp(C.CD_MACH_1_2, C.CD_MACH_2, (m - 1.2) / 0.8)
    if m < 3.0:
        return _lerp(C.CD_MACH_2, C.CD_MACH_3, m - 2.0)
    if m < 5.0:
        return _lerp(C.CD_MACH_3, C.CD_MACH_5, (m - 3.0) / 2.0)
    return C.CD_HYPERSONIC + (C.CD_MACH_5 - C.CD_HYPERSONIC) * math.exp(-(m - 5.0) / 2.0)


def fineness_scale(vehicle) -> float:
    """min(1, 11 / (total length / first-stage diameter))."""
    fineness = vehicle.total_length / max(vehicle.stages[0].diameter, C.ZERO_TOLERANCE)
    if fineness <= C.ZERO_TOLERANCE:
        return 1.0
    return min(1.0, C.REFERENCE_FINENESS / fineness)


def compute_drag_coefficient(mach: float, vehicle, stage_index: int = 0) -> float:
    """
    Cd for the vehicle at Mach `mach`.

    The curve is scaled by fineness and by the active stage's drag
    coefficient relative to the curve's subsonic value.
    """
    stage_index = min(max(stage_index, 0), len(vehicle.stages) - 1)
    stage_scale = vehicle.stages[stage_index].drag_coeff / C.CD_SUBSONIC
    return drag_coefficient_curve(mach) * fineness_scale(vehicle) * stage_scale


def compute_cn_alpha(mach: float) -> float:
    """
    Normal-force coefficient slope (1/rad).

    2/√(1−M²) below M 0.8, 4/√(M²−1) above M 1.2, linear in between.
    """
    m = abs(mach)
    lo, hi = C.MACH_TRANSONIC_LOW, C.MACH_TRANSONIC_HIGH
    if m < lo:
        return 2.0 / math.sqrt(max(1.0 - m * m, 0.01))
    if m > hi:
        return 4.0 / math.sqrt(max(m * m - 1.0, 0.01))
    cn_lo = 2.0 / math.sqrt(1.0 - lo * lo)
    cn_hi = 4.0 / math.sqrt(hi * hi - 1.0)
    return _lerp(cn_lo, cn_hi, (m - lo) / (hi - lo))


def compute_cp_fraction(mach: float) -> float:
    """Centre-of-pressure position as a fraction of vehicle length."""
    m = abs(mach)
    lo, hi = C.MACH_TRANSONIC_LOW, C.MACH_TRANSONIC_HIGH
    if m <= lo:
        return C.CP_FRACTION_SUBSONIC
    if m >= hi:
        return C.CP_FRACTION_SUPERSONIC
    return _lerp(C.CP_FRACTION_SUBSONIC, C.CP_FRACTION_SUPERSONIC, (m - lo) / (hi - lo))


def compute_angle_of_attack(body_direction: np.ndarray, air_velocity: np.ndarray) -> float:
    """
    Signed angle from the relative airflow to the body axis (rad).

    Zero at zero airspeed.
    """
    speed = math.hypot(air_velocity[0], air_velocity[1])
    if speed < C.SMALL_VELOCITY_TOL:
        return 0.0
    v_hat = air_velocity / speed
    return math.atan2(-cross2(v_hat, body_direction), float(np.dot(v_hat, body_direction)))


# =============================================================================
# FORCES AND TORQUE
# =============================================================================

def compute_aerodynamic_loads(position: np.ndarray, velocity: np.ndarray,
                              body_angle: float, vehicle, stage_index: int,
                              cog: float, length: float) -> AerodynamicLoads:
    """
    Compute drag, normal force and aerodynamic torque.

    Args:
        position: Inertial position (m)
        velocity: Inertial velocity (m/s)
        body_angle: Body axis angle from local vertical (rad)
        vehicle: VehicleConfiguration
        stage_index: Active stage (sets reference area)
        cog: Centre of gravity from bottom of the current stack (m)
        length: Length of the current stack (m)

    Returns:
        AerodynamicLoads dict; all forces zero in vacuum or at rest
    """
    up, east = compute_local_frame(position)
    body = math.sin(body_angle) * east + math.cos(body_angle) * up

    altitude = math.hypot(position[0], position[1]) - C.R_EARTH
    atm = compute_atmosphere_properties(altitude)
    air_velocity = compute_relative_velocity(position, velocity)
    airspeed = math.hypot(air_velocity[0], air_velocity[1])

    mach = airspeed / max(atm['speed_of_sound'], C.SPEED_OF_SOUND_FLOOR)
    cd = compute_drag_coefficient(mach, vehicle, stage_index)
    cn_alpha = compute_cn_alpha(mach)
    cp = compute_cp_fraction(mach) * length

    loads = {
        'mach': mach,
        'drag_coefficient': cd,
        'cn_alpha': cn_alpha,
        'angle_of_attack': 0.0,
        'dynamic_pressure': 0.0,
        'drag': np.zeros(2),
        'normal_force': 0.0,
        'normal_force_vector': np.zeros(2),
        'cp_position': cp,
        'torque': 0.0,
    }
    if airspeed < C.SMALL_VELOCITY_TOL or atm['density'] <= 0.0:
        return loads

    stage_index = min(max(stage_index, 0), len(vehicle.stages) - 1)
    area = vehicle.stages[stage_index].cross_section_area
    q = 0.5 * atm['density'] * airspeed * airspeed
    aoa = compute_angle_of_attack(body, air_velocity)

    drag_mag = q * area * cd * abs(math.cos(aoa))
    normal = q * area * cn_alpha * aoa
    # Normal force acts on the side the nose has rotated toward
    normal_dir = math.sin(body_angle + math.pi / 2.0) * east + \
        math.cos(body_angle + math.pi / 2.0) * up

    loads['angle_of_attack'] = aoa
    loads['dynamic_pressure'] = q
    loads['drag'] = -drag_mag * air_velocity / airspeed
    loads['normal_force'] = normal
    loads['normal_force_vector'] = normal * normal_dir
    loads['torque'] = normal * (cp - cog)
    return loads
