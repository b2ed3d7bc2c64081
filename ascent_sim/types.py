"""
Two-Stage Ascent Simulation - Type Definitions

This module provides TypedDict definitions for structured return types,
improving type safety and IDE support.
"""

from typing import Dict, List, Optional, TypedDict

import numpy as np
from numpy.typing import NDArray


class AtmosphereProperties(TypedDict):
    """Return type for atmosphere model output."""
    temperature: float  # Temperature (K)
    pressure: float  # Pressure (Pa)
    density: float  # Density (kg/m³)
    speed_of_sound: float  # Speed of sound (m/s)
    dynamic_viscosity: float  # Dynamic viscosity (Pa·s)
    geopotential_altitude: float  # Geopotential altitude (m)
    layer_index: int  # Index of the enclosing layer (0-6)
    is_extrapolated: bool  # True above the layer table ceiling


class AerodynamicLoads(TypedDict):
    """Return type for aerodynamic model output (2D, inertial frame)."""
    mach: float  # Mach number
    drag_coefficient: float  # Fineness-scaled Cd
    cn_alpha: float  # Normal-force slope (1/rad)
    angle_of_attack: float  # Signed AOA, body axis relative to airflow (rad)
    dynamic_pressure: float  # q = ½ρv² (Pa)
    drag: NDArray[np.float64]  # Axial drag force vector (N)
    normal_force: float  # Signed normal force (N)
    normal_force_vector: NDArray[np.float64]  # Normal force vector (N)
    cp_position: float  # Centre of pressure from vehicle bottom (m)
    torque: float  # Aerodynamic torque about COG (N·m)


class MassProperties(TypedDict):
    """Return type for mass properties model output."""
    total_mass: float  # Current vehicle mass (kg)
    cog: float  # Centre of gravity from vehicle bottom (m)
    moment_of_inertia: float  # Pitch MOI about COG (kg·m²)
    length: float  # Length of the surviving stack (m)
    fuel_levels: List[float]  # Fill fraction per stage (0-1)
    stage_cogs: List[Optional[float]]  # Per-stage COG from stack bottom, None if dropped


class OrbitElements(TypedDict):
    """Two-body orbit predicted from instantaneous position/velocity."""
    apoapsis: float  # Highest altitude above surface (m), inf on escape
    periapsis: float  # Lowest altitude above surface (m)
    semi_major_axis: float  # (m), inf on escape
    eccentricity: float
    specific_energy: float  # (J/kg)
    angular_momentum: float  # Specific angular momentum, 2D cross product (m²/s)
    is_escape: bool


class GuidanceOutput(TypedDict):
    """Return type for guidance system output."""
    pitch: float  # Commanded pitch above local horizontal (deg)
    throttle: float  # Throttle command (0.0 to 1.0)
    phase: str  # Guidance phase value, e.g. 'atmospheric-ascent'
    sub_phase: Optional[str]  # Vacuum-guidance sub-phase, None below the atmosphere limit
    is_retrograde: bool  # Thrust against velocity instead of along pitch
    thrust_direction: NDArray[np.float64]  # Unit steering vector (inertial)
    flight_path_angle: float  # Velocity angle above local horizontal (deg)
    dynamic_pressure: float  # Air-relative q (Pa)
    orbit: OrbitElements  # Predicted orbit
    velocity_deficit: float  # Circular speed at target minus horizontal speed (m/s)
    remaining_delta_v: float  # Tsiolkovsky budget left (m/s)
    debug: Dict[str, object]  # Diagnostic fields (reason, burn predictions, ...)


class ControlOutput(TypedDict):
    """Return type for the outer attitude loop."""
    target_angle: float  # Target body angle from local vertical (rad)
    angle_error: float  # Wrapped attitude error (rad)
    rate_target: float  # Angular rate demanded by the time constant (rad/s)
    commanded_gimbal: float  # Clamped gimbal command (rad)
    saturated: bool  # Command hit the gimbal limit


class ForceDirections(TypedDict):
    """Unit vectors of the forces acting on the vehicle, zero when absent."""
    gravity: NDArray[np.float64]
    thrust: NDArray[np.float64]
    drag: NDArray[np.float64]
    aero: NDArray[np.float64]


class NextEvent(TypedDict):
    """Closest predicted mission event."""
    name: str
    time_to_event: float  # (s)
