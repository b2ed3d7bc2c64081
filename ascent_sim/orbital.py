"""
Two-Stage Ascent Simulation - Orbital Mechanics

Two-body predictions from the instantaneous state (vacuum assumption):
- Orbit shape from vis-viva: ε = v²/2 − μ/r, a = −μ/2ε
- Remaining and initial Δv from the Tsiolkovsky equation
- Circularization and apoapsis-trim burn estimates used by guidance and
  the next-event estimate
"""

import math

import numpy as np

from . import constants as C
from .mass import compute_total_mass
from .types import OrbitElements
from .utils import compute_velocity_components, cross2


def predict_orbit(position: np.ndarray, velocity: np.ndarray) -> OrbitElements:
    """
    Predict the orbit the vehicle would follow if the engine stopped now.

    Args:
        position: Inertial position (m)
        velocity: Inertial velocity (m/s)

    Returns:
        OrbitElements. On escape (ε ≥ 0) apoapsis and semi-major axis are
        inf, periapsis is the current altitude and eccentricity is 1.
    """
    r = max(math.hypot(position[0], position[1]), C.ZERO_TOLERANCE)
    v = math.hypot(velocity[0], velocity[1])
    h = cross2(position, velocity)
    energy = 0.5 * v * v - C.MU_EARTH / r

    if energy >= 0.0:
        return {
            'apoapsis': math.inf,
            'periapsis': r - C.R_EARTH,
            'semi_major_axis': math.inf,
            'eccentricity': 1.0,
            'specific_energy': energy,
            'angular_momentum': h,
            'is_escape': True,
        }

    a = -C.MU_EARTH / (2.0 * energy)
    e = math.sqrt(max(0.0, 1.0 + 2.0 * energy * h * h / (C.MU_EARTH * C.MU_EARTH)))
    return {
        'apoapsis': a * (1.0 + e) - C.R_EARTH,
        'periapsis': a * (1.0 - e) - C.R_EARTH,
        'semi_major_axis': a,
        'eccentricity': e,
        'specific_energy': energy,
        'angular_momentum': h,
        'is_escape': False,
    }


def compute_circular_velocity(radius: float) -> float:
    """√(μ/r) (m/s); zero at infinity."""
    if radius <= C.ZERO_TOLERANCE:
        return 0.0
    return math.sqrt(C.MU_EARTH / radius)


def compute_vis_viva_speed(radius: float, semi_major_axis: float) -> float:
    """
    Orbital speed at `radius` for the given semi-major axis (m/s).

    An infinite semi-major axis gives the parabolic (escape) speed.
    """
    if radius <= C.ZERO_TOLERANCE or semi_major_axis <= 0.0:
        return 0.0
    return math.sqrt(max(0.0, C.MU_EARTH * (2.0 / radius - 1.0 / semi_major_axis)))


def _tsiolkovsky(isp: float, mass_initial: float, mass_final: float) -> float:
    if mass_final <= C.ZERO_TOLERANCE or mass_initial <= mass_final:
        return 0.0
    return isp * C.G0 * math.log(mass_initial / mass_final)


def compute_remaining_delta_v(state, vehicle) -> float:
    """
    Vacuum Δv left in the propellant of the active and all later stages.

    The active stage burns with payload, the fairing (if still attached)
    and every later stage on top; later stages are assumed to burn after
    the fairing is gone.
    """
    stages = vehicle.stages
    n = len(stages)
    total = 0.0
    current = state.current_stage

    if 0 <= current < n:
        propellant = state.propellant_remaining[current]
        if propellant > 0.0:
            mass_initial = vehicle.payload.mass
            if not state.fairing_jettisoned:
                mass_initial += vehicle.fairing.mass
            mass_initial += stages[current].dry_mass + propellant
            for j in range(current + 1, n):
                mass_initial += stages[j].dry_mass + state.propellant_remaining[j]
            total += _tsiolkovsky(stages[current].isp_vac, mass_initial,
                                  mass_initial - propellant)

    for i in range(max(current + 1, 0), n):
        propellant = state.propellant_remaining[i]
        if propellant <= 0.0:
            continue
        mass_initial = vehicle.payload.mass + stages[i].dry_mass + propellant
        for j in range(i + 1, n):
            mass_initial += stages[j].dry_mass + state.propellant_remaining[j]
        total += _tsiolkovsky(stages[i].isp_vac, mass_initial, mass_initial - propellant)

    return total


def compute_initial_delta_v(vehicle) -> float:
    """Full-tank vacuum Δv budget of the vehicle at launch (m/s)."""
    total = 0.0
    stages = vehicle.stages
    for i, stage in enumerate(stages):
        mass_initial = vehicle.payload.mass + vehicle.fairing.mass
        mass_initial += stage.dry_mass + stage.propellant_mass
        for later in stages[i + 1:]:
            mass_initial += later.dry_mass + later.propellant_mass
        total += _tsiolkovsky(stage.isp_vac, mass_initial, mass_initial - stage.propellant_mass)
    return total


# =============================================================================
# BURN ESTIMATES
# =============================================================================

def compute_burn_time(delta_v: float, state, vehicle) -> float:
    """
    Impulsive-style burn duration Δv·m/T_vac with the current mass (s).

    Zero when there is no active stage or it has no vacuum thrust.
    """
    if delta_v <= 0.0 or not 0 <= state.current_stage < len(vehicle.stages):
        return 0.0
    thrust = vehicle.stages[state.current_stage].thrust_vac
    if thrust <= 0.0:
        return 0.0
    return delta_v * compute_total_mass(state, vehicle) / thrust


def estimate_time_to_apoapsis(altitude: float, v_vertical: float, orbit: OrbitElements) -> float:
    """Linear estimate of time to apoapsis; zero once descending."""
    to_apo = orbit['apoapsis'] - altitude
    if v_vertical > 0.0 and to_apo > 0.0:
        return to_apo / max(1.0, v_vertical)
    return 0.0


def estimate_time_to_periapsis(altitude: float, v_vertical: float, orbit: OrbitElements) -> float:
    """Linear estimate of time to periapsis; inf while ascending."""
    if v_vertical > 0.0:
        return math.inf
    to_peri = altitude - orbit['periapsis']
    if to_peri > 0.0:
        return to_peri / max(1.0, -v_vertical)
    return 0.0


def compute_circularization_burn(state, vehicle, orbit: OrbitElements = None) -> dict:
    """
    Prograde burn at apoapsis that raises periapsis to apoapsis.

    Returns:
        dict with delta_v (m/s), burn_time (s), time_to_apoapsis (s) and
        time_to_burn (s, time to apoapsis minus half the burn)
    """
    if orbit is None:
        orbit = predict_orbit(state.position, state.velocity)
    v_vert, _ = compute_velocity_components(state.position, state.velocity)

    a = orbit['semi_major_axis']
    r_apo = C.R_EARTH + orbit['apoapsis']
    v_apo = compute_vis_viva_speed(r_apo, a) if a > 0.0 else state.speed
    delta_v = max(0.0, compute_circular_velocity(r_apo) - v_apo)
    burn_time = compute_burn_time(delta_v, state, vehicle)
    time_to_apo = estimate_time_to_apoapsis(state.altitude, v_vert, orbit)
    return {
        'delta_v': delta_v,
        'burn_time': burn_time,
        'time_to_apoapsis': time_to_apo,
        'time_to_burn': time_to_apo - burn_time / 2.0,
    }


def compute_retrograde_burn(state, vehicle, target_altitude: float,
                            orbit: OrbitElements = None) -> dict:
    """
    Retrograde burn at periapsis that lowers apoapsis to target_altitude.

    Returns:
        dict with delta_v (m/s), burn_time (s), time_to_periapsis (s, inf
        while ascending) and time_to_burn (s)
    """
    if orbit is None:
        orbit = predict_orbit(state.position, state.velocity)
    v_vert, _ = compute_velocity_components(state.position, state.velocity)

    a = orbit['semi_major_axis']
    r_peri = C.R_EARTH + orbit['periapsis']
    r_target = C.R_EARTH + target_altitude
    v_peri = compute_vis_viva_speed(r_peri, a) if a > 0.0 else state.speed
    v_peri_target = compute_vis_viva_speed(r_peri, (r_peri + r_target) / 2.0)
    delta_v = max(0.0, v_peri - v_peri_target)
    burn_time = compute_burn_time(delta_v, state, vehicle)
    time_to_peri = estimate_time_to_periapsis(state.altitude, v_vert, orbit)
    return {
        'delta_v': delta_v,
        'burn_time': burn_time,
        'time_to_periapsis': time_to_peri,
        'time_to_burn': time_to_peri - burn_time / 2.0,
    }
