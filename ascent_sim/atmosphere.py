"""
Two-Stage Ascent Simulation - Atmosphere Model

US Standard Atmosphere 1976 from 0 to 86 km geometric altitude, with
exponential extrapolation above the layer table ceiling.

Geometric altitude is converted to geopotential altitude; within each of
the seven layers temperature is linear and pressure follows either the
isothermal or the gradient formula anchored to the tabulated layer base
pressure. All functions are pure and defined for every real altitude.

PRIMARY REFERENCE: U.S. Standard Atmosphere, 1976 (NOAA-S/T 76-1562)
"""

import math

from . import constants as C
from .types import AtmosphereProperties

# Hydrostatic constant g0·M0/R* (K/m)
_HYDROSTATIC = C.G0 * C.ATM_M0 / C.R_STAR


def geometric_to_geopotential(z: float) -> float:
    """h = R·z / (R + z) with R the geopotential reference radius."""
    return C.R_GEOPOTENTIAL * z / (C.R_GEOPOTENTIAL + z)


def get_layer_index(h: float) -> int:
    """Index of the layer whose base lies at or below geopotential altitude h."""
    for i in range(len(C.ATMOSPHERE_LAYERS) - 1, -1, -1):
        if h >= C.ATMOSPHERE_LAYERS[i][0]:
            return i
    return 0


def _temperature_pressure_at(h: float) -> tuple:
    """(T, P, layer) at a geopotential altitude inside the layer table."""
    idx = get_layer_index(h)
    h_b, t_b, lapse, p_b = C.ATMOSPHERE_LAYERS[idx]
    dh = h - h_b
    temperature = t_b + lapse * dh

    if abs(lapse) < C.ISOTHERMAL_LAPSE_TOL:
        pressure = p_b * math.exp(-_HYDROSTATIC * dh / t_b)
    else:
        pressure = p_b * (t_b / temperature) ** (_HYDROSTATIC / lapse)
    return temperature, pressure, idx


def sutherland_viscosity(temperature: float) -> float:
    """
    Dynamic viscosity of air from Sutherland's law (Pa·s).

    μ = μ0 · (T/T0)^(3/2) · (T0 + S) / (T + S)
    """
    t0 = C.SUTHERLAND_T0
    return C.SUTHERLAND_MU0 * (temperature / t0) ** 1.5 * (t0 + C.SUTHERLAND_S) / (
        temperature + C.SUTHERLAND_S)


def speed_of_sound(temperature: float) -> float:
    """a = √(γ·R*·T/M0) (m/s)."""
    return math.sqrt(C.GAMMA * C.R_STAR * temperature / C.ATM_M0)


def compute_atmosphere_properties(altitude: float) -> AtmosphereProperties:
    """
    Compute atmospheric properties at a geometric altitude.

    Negative altitudes are treated as sea level. Above 84,852 m geopotential
    the top-of-table temperature is held and pressure decays with the local
    scale height R*·T/(M0·g0); the result is flagged as extrapolated.

    Args:
        altitude: Geometric altitude above sea level (m)

    Returns:
        AtmosphereProperties dict
    """
    z = max(0.0, float(altitude))
    h = geometric_to_geopotential(z)

    if h > C.MAX_GEOPOTENTIAL_ALTITUDE:
        temperature, p_top, _ = _temperature_pressure_at(C.MAX_GEOPOTENTIAL_ALTITUDE)
        scale_height = C.R_STAR * temperature / (C.ATM_M0 * C.G0)
        pressure = p_top * math.exp(-(h - C.MAX_GEOPOTENTIAL_ALTITUDE) / scale_height)
        layer = len(C.ATMOSPHERE_LAYERS) - 1
        extrapolated = True
    else:
        temperature, pressure, layer = _temperature_pressure_at(h)
        extrapolated = False

    density = pressure * C.ATM_M0 / (C.R_STAR * temperature)
    if density < C.DENSITY_FLOOR:
        density = 0.0

    return {
        'temperature': temperature,
        'pressure': pressure,
        'density': density,
        'speed_of_sound': speed_of_sound(temperature),
        'dynamic_viscosity': sutherland_viscosity(temperature),
        'geopotential_altitude': h,
        'layer_index': layer,
        'is_extrapolated': extrapolated,
    }


def get_density(altitude: float) -> float:
    """Air density at geometric altitude (kg/m^3)."""
    return compute_atmosphere_properties(altitude)['density']


def get_pressure(altitude: float) -> float:
    """Static pressure at geometric altitude (Pa)."""
    return compute_atmosphere_properties(altitude)['pressure']


def compute_dynamic_pressure(altitude: float, airspeed: float) -> float:
    """q = ½·ρ·v² (Pa)."""
    return 0.5 * get_density(altitude) * airspeed * airspeed


def compute_mach_number(airspeed: float, altitude: float) -> float:
    """Mach number with a floor on the speed of sound."""
    a = compute_atmosphere_properties(altitude)['speed_of_sound']
    return abs(airspeed) / max(a, C.SPEED_OF_SOUND_FLOOR)
