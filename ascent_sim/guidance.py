"""
Guidance module implementing the priority-based ascent state machine.

Priorities, highest first:
1. Height: climb out of the atmosphere (vertical rise, pitch kick,
   prograde-following gravity turn with an altitude pitch floor)
2. Max-Q: hold exactly prograde while dynamic pressure is high
3. Orbit shape: above the atmosphere, raise apoapsis, circularize at
   apoapsis or trim apoapsis with a retrograde burn at periapsis
4. Velocity: throttle down near the target to avoid overshoot

All mutable guidance state is encapsulated in GuidanceState; compute_guidance
returns the updated state alongside its output.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from . import constants as C
from .atmosphere import get_density
from .config import SimulationConfig, create_default_config
from .dynamics import compute_gravity_magnitude
from .orbital import (
    compute_circular_velocity,
    compute_circularization_burn,
    compute_remaining_delta_v,
    compute_retrograde_burn,
    predict_orbit,
)
from .types import GuidanceOutput, OrbitElements
from .utils import compute_local_frame, compute_relative_velocity, compute_velocity_components

logger = logging.getLogger(__name__)


class GuidancePhase(Enum):
    PRE_LAUNCH = 'pre-launch'
    VERTICAL_ASCENT = 'vertical-ascent'
    PITCH_KICK = 'pitch-kick'
    MAX_Q_PROTECTION = 'max-q-protection'
    ATMOSPHERIC_ASCENT = 'atmospheric-ascent'
    VACUUM_GUIDANCE = 'vacuum-guidance'


class VacuumSubPhase(Enum):
    RAISING_APOAPSIS = 'raising-apoapsis'
    COASTING_TO_APOAPSIS = 'coasting-to-apoapsis'
    CIRCULARIZING = 'circularizing'
    COASTING_TO_PERIAPSIS = 'coasting-to-periapsis'
    RETROGRADE_TRIMMING = 'retrograde-trimming'
    ORBIT_ACHIEVED = 'orbit-achieved'


# =============================================================================
# GUIDANCE STATE
# =============================================================================

@dataclass
class GuidanceState:
    """Guidance memory carried between evaluations.

    The two burn flags are one-shot: a guidance burn keeps being offered in
    debug['burn_started'] until mark_burn_announced() records that its
    event went out, then never again for the run.
    """
    phase: GuidancePhase = GuidancePhase.PRE_LAUNCH
    sub_phase: Optional[VacuumSubPhase] = None
    last_commanded_pitch: float = 90.0
    throttle: float = 1.0
    last_flight_path_angle: float = 90.0
    is_retrograde: bool = False
    circularization_burn_started: bool = False
    retrograde_burn_started: bool = False


def create_guidance_state() -> GuidanceState:
    """Create a fresh GuidanceState."""
    return GuidanceState()


def mark_burn_announced(gs: GuidanceState, burn: str) -> None:
    """Latch the one-shot flag for an announced guidance burn."""
    if burn == 'circularization':
        gs.circularization_burn_started = True
    elif burn == 'retrograde':
        gs.retrograde_burn_started = True
    else:
        raise ValueError(f"Unknown guidance burn: {burn}")


# =============================================================================
# HELPERS
# =============================================================================

def compute_pitch_kick(t: float, config: SimulationConfig) -> float:
    """Cosine-smoothed pitch from 90° to the initial pitch over the kick window."""
    span = config.pitch_kick_end - config.pitch_kick_start
    progress = (t - config.pitch_kick_start) / span if span > 0.0 else 1.0
    progress = min(1.0, max(0.0, progress))
    smooth = (1.0 - math.cos(progress * math.pi)) / 2.0
    return 90.0 - smooth * (90.0 - config.initial_pitch)


def compute_min_pitch_for_altitude(altitude: float, atmosphere_limit: float) -> float:
    """Quadratic pitch floor: 90° on the pad, 10° at the atmosphere limit."""
    fraction = min(1.0, max(0.0, altitude) / atmosphere_limit)
    return 90.0 - fraction * fraction * C.MIN_PITCH_SPAN


def compute_natural_turn_rate(r: float, speed: float, flight_path_angle: float) -> float:
    """Gravity-turn rate g·cosγ/v (deg/s); zero at rest."""
    if speed < C.SMALL_VELOCITY_TOL:
        return 0.0
    gamma = math.radians(flight_path_angle)
    return math.degrees(compute_gravity_magnitude(r) * math.cos(gamma) / speed)


def _ramp_throttle(remaining: float) -> float:
    """Full throttle beyond the ramp distance, linear down to the floor inside it."""
    if remaining < C.THROTTLE_RAMP_DISTANCE:
        return max(C.VACUUM_THROTTLE_FLOOR, remaining / C.THROTTLE_RAMP_DISTANCE)
    return 1.0


def pitch_to_direction(pitch_deg: float, position: np.ndarray) -> np.ndarray:
    """Unit vector `pitch_deg` above local horizontal, toward local east."""
    up, east = compute_local_frame(position)
    p = math.radians(pitch_deg)
    direction = math.cos(p) * east + math.sin(p) * up
    norm = float(np.hypot(direction[0], direction[1]))
    return direction / norm if norm > 0.0 else direction


def retrograde_direction(position: np.ndarray, velocity: np.ndarray) -> np.ndarray:
    """Unit vector against inertial velocity (local west at rest)."""
    speed = float(np.hypot(velocity[0], velocity[1]))
    if speed > 0.0:
        return -velocity / speed
    _, east = compute_local_frame(position)
    return -east


# =============================================================================
# PHASE LOGIC
# =============================================================================

def _atmospheric_guidance(t: float, r: float, altitude: float, speed: float,
                          flight_path_angle: float, q: float, dt: float,
                          gs: GuidanceState, config: SimulationConfig, debug: dict):
    """Pitch and phase below the atmosphere limit. Throttle is always full."""
    if t < config.pitch_kick_start:
        debug['reason'] = 'Clearing pad, vertical'
        return 90.0, GuidancePhase.VERTICAL_ASCENT

    if t < config.pitch_kick_end:
        debug['reason'] = 'Pitch kick, initiating gravity turn'
        return compute_pitch_kick(t, config), GuidancePhase.PITCH_KICK

    if q > config.max_q * config.max_q_protection_fraction:
        debug['reason'] = 'Max Q, following prograde exactly'
        debug['q'] = q
        return flight_path_angle, GuidancePhase.MAX_Q_PROTECTION

    min_pitch = compute_min_pitch_for_altitude(altitude, config.atmosphere_limit)
    base_pitch = flight_path_angle
    natural_rate = compute_natural_turn_rate(r, speed, flight_path_angle)
    actual_rate = (gs.last_flight_path_angle - flight_path_angle) / dt if dt > 0.0 else 0.0
    gs.last_flight_path_angle = flight_path_angle

    correction = 0.0
    excess = actual_rate - natural_rate
    if excess > C.TURN_RATE_EXCESS_THRESHOLD:
        correction = min(C.TURN_RATE_CORRECTION_MAX, excess * C.TURN_RATE_CORRECTION_GAIN)
        debug['reason'] = 'Turn rate excess, resisting'
        debug['turn_rate_excess'] = excess

    if base_pitch + correction < min_pitch:
        correction += (min_pitch - (base_pitch + correction)) * C.MIN_PITCH_RECOVERY_GAIN
        debug['reason'] = 'Altitude minimum pitch, gentle correction'

    debug.update(base_pitch=base_pitch, correction=correction,
                 min_pitch_for_altitude=min_pitch,
                 natural_turn_rate=natural_rate, actual_turn_rate=actual_rate)
    return max(min_pitch, base_pitch + correction), GuidancePhase.ATMOSPHERIC_ASCENT


def _vacuum_guidance(state, vehicle, altitude: float, v_vertical: float,
                     flight_path_angle: float, orbit: OrbitElements,
                     gs: GuidanceState, config: SimulationConfig, debug: dict):
    """
    Orbit shaping above the atmosphere.

    Returns:
        (pitch, throttle, sub_phase)
    """
    target = config.target_altitude
    tolerance = config.orbit_tolerance
    apo_error = orbit['apoapsis'] - target
    peri_error = orbit['periapsis'] - target
    is_ascending = v_vertical > 0.0

    circ = compute_circularization_burn(state, vehicle, orbit)
    time_to_apo = circ['time_to_apoapsis']
    circ_lead = circ['burn_time'] / 2.0
    should_circularize = (time_to_apo <= circ_lead and circ['burn_time'] > 0.0
                          and orbit['periapsis'] < target)
    near_apoapsis = ((orbit['apoapsis'] - altitude < C.NEAR_APOAPSIS_ALTITUDE
                      and not is_ascending)
                     or time_to_apo < C.NEAR_APOAPSIS_TIME)

    debug.update(apoapsis_error=apo_error, periapsis_error=peri_error,
                 eccentricity=orbit['eccentricity'], time_to_apoapsis=time_to_apo,
                 circ_delta_v=circ['delta_v'], circ_burn_time=circ['burn_time'],
                 burn_start_time=circ_lead, near_apoapsis=near_apoapsis,
                 is_ascending=is_ascending)

    correction = 0.0
    if apo_error < -tolerance:
        gs.is_retrograde = False
        deficit = -apo_error
        correction = max(-config.max_pitch_correction,
                         -deficit / C.THROTTLE_RAMP_DISTANCE * config.max_pitch_correction)
        throttle = _ramp_throttle(deficit)
        sub_phase = VacuumSubPhase.RAISING_APOAPSIS
        debug['reason'] = f"Raising apoapsis ({deficit / 1000:.0f}km to go)"

    elif peri_error < -tolerance:
        gs.is_retrograde = False
        if should_circularize or near_apoapsis or not is_ascending:
            throttle = _ramp_throttle(-peri_error)
            sub_phase = VacuumSubPhase.CIRCULARIZING
            if not gs.circularization_burn_started:
                debug['burn_started'] = {'burn': 'circularization',
                                         'delta_v': circ['delta_v'],
                                         'burn_time': circ['burn_time']}
            debug['reason'] = f"Circularizing ({-peri_error / 1000:.0f}km Pe to go)"
        else:
            throttle = 0.0
            sub_phase = VacuumSubPhase.COASTING_TO_APOAPSIS
            debug['reason'] = (f"Coasting to burn start (T-{time_to_apo:.0f}s, "
                               f"burn at T-{circ_lead:.0f}s)")

    elif apo_error > tolerance:
        retro = compute_retrograde_burn(state, vehicle, target, orbit)
        time_to_peri = retro['time_to_periapsis']
        retro_lead = retro['burn_time'] / 2.0
        should_retro = (not is_ascending and time_to_peri <= retro_lead
                        and math.isfinite(time_to_peri) and retro['burn_time'] > 0.0)

        debug.update(time_to_periapsis=time_to_peri, retro_delta_v=retro['delta_v'],
                     retro_burn_time=retro['burn_time'], retro_burn_start_time=retro_lead)

        if should_retro:
            gs.is_retrograde = True
            throttle = _ramp_throttle(apo_error)
            sub_phase = VacuumSubPhase.RETROGRADE_TRIMMING
            if not gs.retrograde_burn_started:
                debug['burn_started'] = {'burn': 'retrograde',
                                         'delta_v': retro['delta_v'],
                                         'burn_time': retro['burn_time']}
            debug['reason'] = f"Retrograde at periapsis ({apo_error / 1000:.0f}km Ap excess)"
        else:
            gs.is_retrograde = False
            throttle = 0.0
            sub_phase = VacuumSubPhase.COASTING_TO_PERIAPSIS
            debug['reason'] = (f"Coasting to retrograde burn (T-{time_to_peri:.0f}s, "
                               f"burn at T-{retro_lead:.0f}s)")

    else:
        gs.is_retrograde = False
        throttle = 0.0
        sub_phase = VacuumSubPhase.ORBIT_ACHIEVED
        debug['reason'] = 'Orbit achieved, coasting'

    debug['correction'] = correction
    return flight_path_angle + correction, throttle, sub_phase


def _precision_throttle(throttle: float, apo_error: float, orbit: OrbitElements,
                        velocity_deficit: float, remaining_dv: float,
                        config: SimulationConfig, debug: dict) -> float:
    """Scale an active vacuum throttle by velocity deficit over remaining Δv."""
    if throttle == 0.0:
        debug.setdefault('throttle_reason', 'Coasting')
        return 0.0
    orbit_is_close = abs(apo_error) < C.THROTTLE_RAMP_DISTANCE and orbit['periapsis'] > 0.0
    if orbit_is_close and remaining_dv > velocity_deficit * config.throttle_down_margin:
        debug['throttle_reason'] = 'Throttling down for precision'
        return max(config.min_throttle, velocity_deficit / remaining_dv)
    debug['throttle_reason'] = 'Full throttle'
    return 1.0


# =============================================================================
# MAIN GUIDANCE FUNCTION
# =============================================================================

def compute_guidance(state, vehicle, gs: GuidanceState = None, dt: float = 0.0,
                     config: SimulationConfig = None) -> Tuple[GuidanceOutput, GuidanceState]:
    """
    Evaluate the guidance state machine once.

    Args:
        state: VehicleState (read only)
        vehicle: VehicleConfiguration
        gs: Guidance state, created fresh if None
        dt: Time since the previous evaluation (s); zero disables the
            turn-rate and pitch-rate terms
        config: Run configuration

    Returns:
        (guidance_output_dict, updated_guidance_state)
    """
    if gs is None:
        gs = create_guidance_state()
    if config is None:
        config = create_default_config()

    position, velocity = state.position, state.velocity
    r = state.radius
    altitude = r - C.R_EARTH
    speed = state.speed
    v_vertical, v_horizontal = compute_velocity_components(position, velocity)
    flight_path_angle = math.degrees(math.atan2(v_vertical, v_horizontal))

    air = compute_relative_velocity(position, velocity)
    airspeed = float(np.hypot(air[0], air[1]))
    q = 0.5 * get_density(altitude) * airspeed * airspeed

    orbit = predict_orbit(position, velocity)
    velocity_deficit = compute_circular_velocity(C.R_EARTH + config.target_altitude) - v_horizontal
    remaining_dv = compute_remaining_delta_v(state, vehicle)

    debug = {}
    throttle = 1.0
    sub_phase = None

    if altitude < config.atmosphere_limit:
        gs.is_retrograde = False
        pitch, phase = _atmospheric_guidance(state.elapsed_time, r, altitude, speed,
                                             flight_path_angle, q, dt, gs, config, debug)
    else:
        phase = GuidancePhase.VACUUM_GUIDANCE
        pitch, throttle, sub_phase = _vacuum_guidance(state, vehicle, altitude, v_vertical,
                                                      flight_path_angle, orbit, gs,
                                                      config, debug)
        throttle = _precision_throttle(throttle, orbit['apoapsis'] - config.target_altitude,
                                       orbit, velocity_deficit, remaining_dv, config, debug)

    # Clamp, then rate-limit against the previous command
    pitch = max(C.MIN_PITCH_COMMAND, min(C.MAX_PITCH_COMMAND, pitch))
    if dt > 0.0:
        max_change = config.max_pitch_rate * dt
        change = pitch - gs.last_commanded_pitch
        if abs(change) > max_change:
            pitch = gs.last_commanded_pitch + math.copysign(max_change, change)

    if phase != gs.phase or sub_phase != gs.sub_phase:
        logger.debug(f"Guidance phase {phase.value}"
                     + (f"/{sub_phase.value}" if sub_phase else "")
                     + f" at t={state.elapsed_time:.1f}s")

    gs.last_commanded_pitch = pitch
    gs.phase = phase
    gs.sub_phase = sub_phase
    gs.throttle = throttle

    if gs.is_retrograde:
        thrust_direction = retrograde_direction(position, velocity)
    else:
        thrust_direction = pitch_to_direction(pitch, position)

    output = {
        'pitch': pitch,
        'throttle': throttle,
        'phase': phase.value,
        'sub_phase': sub_phase.value if sub_phase else None,
        'is_retrograde': gs.is_retrograde,
        'thrust_direction': thrust_direction,
        'flight_path_angle': flight_path_angle,
        'dynamic_pressure': q,
        'orbit': orbit,
        'velocity_deficit': velocity_deficit,
        'remaining_delta_v': remaining_dv,
        'debug': debug,
    }
    return output, gs
