"""
Two-Stage Ascent Simulation - Propulsion Model

Thrust and propellant mass flow of the active stage. Sea-level and vacuum
performance are blended by the ambient pressure ratio:

    ratio  = P(h) / P_sl
    thrust = T_sl·ratio + T_vac·(1 − ratio)
    isp    = Isp_sl·ratio + Isp_vac·(1 − ratio)
    mdot   = thrust / (isp·g0)

These functions are pure; the stepper applies propellant depletion.
"""

from . import constants as C
from .atmosphere import get_pressure


def compute_pressure_ratio(altitude: float) -> float:
    """Ambient-to-sea-level pressure ratio, clamped to [0, 1]."""
    return min(1.0, max(0.0, get_pressure(altitude) / C.SEA_LEVEL_PRESSURE))


def is_engine_available(state, vehicle) -> bool:
    """Engine armed, stage in range and propellant left."""
    if not state.engine_on:
        return False
    if state.current_stage < 0 or state.current_stage >= len(vehicle.stages):
        return False
    return state.propellant_remaining[state.current_stage] > 0.0


def compute_isp(stage, altitude: float) -> float:
    """Pressure-blended specific impulse (s)."""
    ratio = compute_pressure_ratio(altitude)
    return stage.isp * ratio + stage.isp_vac * (1.0 - ratio)


def compute_thrust(state, vehicle, altitude: float, throttle: float = 1.0) -> float:
    """
    Thrust of the active stage (N).

    Zero if the engine is off, the stage index is out of range or the stage
    has no propellant left.
    """
    if not is_engine_available(state, vehicle):
        return 0.0
    stage = vehicle.stages[state.current_stage]
    ratio = compute_pressure_ratio(altitude)
    base = stage.thrust * ratio + stage.thrust_vac * (1.0 - ratio)
    return base * min(1.0, max(0.0, throttle))


def compute_mass_flow_rate(state, vehicle, altitude: float, throttle: float = 1.0) -> float:
    """Propellant consumption of the active stage (kg/s, positive)."""
    thrust = compute_thrust(state, vehicle, altitude, throttle)
    if thrust <= 0.0:
        return 0.0
    stage = vehicle.stages[state.current_stage]
    isp = compute_isp(stage, altitude)
    return thrust / (isp * C.G0)
