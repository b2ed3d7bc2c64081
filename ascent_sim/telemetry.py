"""
Two-Stage Ascent Simulation - Telemetry Projection

Read-only views of the simulation for displays and loggers. Nothing here
writes to VehicleState or GuidanceState.
"""

import math
from typing import List, Optional

import numpy as np

from . import constants as C
from .atmosphere import compute_atmosphere_properties
from .config import SimulationConfig, create_default_config
from .dynamics import compute_gravity_acceleration
from .mass import compute_mass_properties
from .orbital import compute_circularization_burn, compute_retrograde_burn, predict_orbit
from .propulsion import compute_mass_flow_rate
from .types import ForceDirections, NextEvent, OrbitElements
from .utils import (
    angle_to_pitch,
    compute_flight_path_angle,
    compute_relative_velocity,
    compute_velocity_components,
    unit_vector,
)


def get_state_snapshot(state) -> dict:
    """Plain-dict copy of the vehicle state."""
    snap = state.copy()
    return {
        'position': snap.position,
        'velocity': snap.velocity,
        'current_stage': snap.current_stage,
        'propellant_remaining': snap.propellant_remaining,
        'fairing_jettisoned': snap.fairing_jettisoned,
        'rocket_angle': snap.rocket_angle,
        'angular_velocity': snap.angular_velocity,
        'gimbal_angle': snap.gimbal_angle,
        'commanded_gimbal': snap.commanded_gimbal,
        'engine_on': snap.engine_on,
        'elapsed_time': snap.elapsed_time,
        'time_warp': snap.time_warp,
        'throttle': snap.throttle,
        'max_q': snap.max_q,
    }


def get_flight_telemetry(state) -> dict:
    """Altitude, speeds, flight-path angle, Mach and dynamic pressure."""
    v_vert, v_horiz = compute_velocity_components(state.position, state.velocity)
    air = compute_relative_velocity(state.position, state.velocity)
    airspeed = float(np.hypot(air[0], air[1]))
    atm = compute_atmosphere_properties(state.altitude)
    return {
        'altitude': state.altitude,
        'speed': state.speed,
        'vertical_velocity': v_vert,
        'horizontal_velocity': v_horiz,
        'airspeed': airspeed,
        'flight_path_angle': compute_flight_path_angle(state.position, state.velocity),
        'pitch': angle_to_pitch(state.rocket_angle),
        'mach': airspeed / max(atm['speed_of_sound'], C.SPEED_OF_SOUND_FLOOR),
        'dynamic_pressure': 0.5 * atm['density'] * airspeed * airspeed,
    }


def get_orbit(state) -> OrbitElements:
    return predict_orbit(state.position, state.velocity)


def get_mass_snapshot(state, vehicle) -> dict:
    """COG, MOI, total mass and fuel levels of the current stack."""
    props = compute_mass_properties(state, vehicle)
    return {
        'total_mass': props['total_mass'],
        'cog': props['cog'],
        'moment_of_inertia': props['moment_of_inertia'],
        'length': props['length'],
        'fuel_levels': props['fuel_levels'],
        'stage_cogs': props['stage_cogs'],
    }


def get_guidance_diagnostics(guidance_output: Optional[dict],
                             recommendation: Optional[float] = None) -> dict:
    """Phase, commands and debug fields of the last guidance evaluation."""
    if guidance_output is None:
        return {'phase': None, 'sub_phase': None, 'pitch': None, 'throttle': None,
                'is_retrograde': False, 'reason': None, 'recommendation': recommendation,
                'debug': {}}
    return {
        'phase': guidance_output['phase'],
        'sub_phase': guidance_output['sub_phase'],
        'pitch': guidance_output['pitch'],
        'throttle': guidance_output['throttle'],
        'is_retrograde': guidance_output['is_retrograde'],
        'reason': guidance_output['debug'].get('reason'),
        'recommendation': recommendation,
        'debug': dict(guidance_output['debug']),
    }


def compute_force_directions(state, thrust_direction: np.ndarray = None,
                             aero_loads: dict = None) -> ForceDirections:
    """Unit vectors of gravity, thrust, drag and aerodynamic normal force."""
    thrust = np.zeros(2) if thrust_direction is None else unit_vector(thrust_direction)
    if aero_loads is None:
        drag = np.zeros(2)
        aero = np.zeros(2)
    else:
        drag = unit_vector(aero_loads['drag'])
        aero = unit_vector(aero_loads['normal_force_vector'])
    return {
        'gravity': unit_vector(compute_gravity_acceleration(state.position)),
        'thrust': thrust,
        'drag': drag,
        'aero': aero,
    }


# =============================================================================
# NEXT EVENT
# =============================================================================

def _in_horizon(t: float) -> bool:
    return 0.0 < t < C.NEXT_EVENT_HORIZON


def _burn_candidates(state, vehicle, config: SimulationConfig) -> List[NextEvent]:
    """Predicted guidance burn starts above the atmosphere."""
    altitude = state.altitude
    if altitude < config.atmosphere_limit:
        return []

    orbit = predict_orbit(state.position, state.velocity)
    apo_error = orbit['apoapsis'] - config.target_altitude
    peri_error = orbit['periapsis'] - config.target_altitude
    tolerance = config.orbit_tolerance
    v_vert, _ = compute_velocity_components(state.position, state.velocity)
    candidates = []

    if peri_error < -tolerance and apo_error >= -tolerance and v_vert > 0.0:
        circ = compute_circularization_burn(state, vehicle, orbit)
        if circ['burn_time'] > 0.0 and _in_horizon(circ['time_to_burn']):
            candidates.append({'name': 'Circularization burn start',
                               'time_to_event': circ['time_to_burn']})

    if peri_error >= -tolerance and apo_error > tolerance and v_vert <= 0.0:
        retro = compute_retrograde_burn(state, vehicle, config.target_altitude, orbit)
        if (retro['burn_time'] > 0.0 and math.isfinite(retro['time_to_periapsis'])
                and _in_horizon(retro['time_to_burn'])):
            candidates.append({'name': 'Retrograde burn start',
                               'time_to_event': retro['time_to_burn']})
    return candidates


def compute_next_event(state, vehicle, config: SimulationConfig = None,
                       fired: frozenset = frozenset(),
                       pad_launch: bool = True) -> Optional[NextEvent]:
    """
    Earliest predicted mission event by linear extrapolation of current rates.

    Args:
        state: VehicleState
        vehicle: VehicleConfiguration
        config: Run configuration (pitch-kick time, target altitude)
        fired: Keys of once-per-run events already emitted (e.g. 'karman_line')
        pad_launch: False for an orbital spawn, which has no pitch program

    Returns:
        {name, time_to_event} or None when nothing is predicted within the
        horizon
    """
    if config is None:
        config = create_default_config()

    t = state.elapsed_time
    altitude = state.altitude
    v_vert, _ = compute_velocity_components(state.position, state.velocity)
    stage = state.current_stage
    last_stage = len(vehicle.stages) - 1
    candidates: List[NextEvent] = []

    def add(name, time_to_event):
        if _in_horizon(time_to_event):
            candidates.append({'name': name, 'time_to_event': time_to_event})

    if pad_launch and t < config.pitch_kick_start and altitude < config.atmosphere_limit:
        add('Pitch program start', config.pitch_kick_start - t)

    if altitude < C.KARMAN_LINE and 'karman_line' not in fired and v_vert > 0.0:
        add('Karman line', (C.KARMAN_LINE - altitude) / v_vert)

    if (not state.fairing_jettisoned and altitude < vehicle.fairing_jettison_altitude
            and v_vert > 0.0):
        add('Fairing jettison', (vehicle.fairing_jettison_altitude - altitude) / v_vert)

    burnout = None
    if state.engine_on and 0 <= stage <= last_stage and state.propellant_remaining[stage] > 0.0:
        mdot = compute_mass_flow_rate(state, vehicle, altitude, state.throttle or 1.0)
        if mdot > 0.0:
            burnout = state.propellant_remaining[stage] / mdot

    if burnout is not None and stage < last_stage:
        add('Stage separation', burnout)

    in_orbit = altitude >= C.ORBIT_ALTITUDE and not state.engine_on
    if not in_orbit and altitude < C.ORBIT_ALTITUDE and v_vert > 0.0:
        time_to_orbit = (C.ORBIT_ALTITUDE - altitude) / v_vert
        if _in_horizon(time_to_orbit):
            add('Orbit', max(time_to_orbit, burnout) if burnout is not None else time_to_orbit)

    if burnout is not None and stage == last_stage:
        add('SECO', burnout)

    candidates.extend(_burn_candidates(state, vehicle, config))

    if not candidates:
        return None
    return min(candidates, key=lambda e: e['time_to_event'])
