"""
Two-Stage Ascent Simulation - Run Configuration

This module provides a SimulationConfig dataclass for dependency injection,
allowing different simulation parameters to be passed without modifying
global constants.

The vehicle itself is described separately by VehicleConfiguration
(see vehicle.py); this config only covers how a run is flown and stepped.
"""

from dataclasses import dataclass

from . import constants as C


@dataclass(frozen=True)
class SimulationConfig:
    """
    Immutable configuration for simulation parameters.

    Using frozen=True ensures configs cannot be accidentally modified.
    Create new configs via dataclass replace() if needed.

    Section grouping:
      1. Simulation timing
      2. Guidance parameters
      3. Attitude control
      4. Physics feature toggles
      5. Misc
    """

    # ── 1. Simulation timing ─────────────────────────────────────────────
    dt: float = C.DT                      # host tick (s, before time warp)
    max_time: float = C.MAX_TIME
    time_warp: float = 1.0
    max_tick_dt: float = C.MAX_TICK_DT
    max_substep: float = C.MAX_SUBSTEP
    max_substep_orbital: float = C.MAX_SUBSTEP_ORBITAL
    max_substeps: int = C.MAX_SUBSTEPS
    integration_method: str = 'symplectic'

    # ── 2. Guidance parameters ───────────────────────────────────────────
    target_altitude: float = C.TARGET_ORBIT_ALTITUDE
    atmosphere_limit: float = C.ATMOSPHERE_LIMIT
    max_q: float = C.MAX_DYNAMIC_PRESSURE
    max_q_protection_fraction: float = C.MAX_Q_PROTECTION_FRACTION
    max_pitch_correction: float = C.MAX_PITCH_CORRECTION   # deg
    max_pitch_rate: float = C.MAX_PITCH_RATE               # deg/s
    throttle_down_margin: float = C.THROTTLE_DOWN_MARGIN
    min_throttle: float = C.MIN_THROTTLE
    initial_pitch: float = C.INITIAL_PITCH                 # deg
    pitch_kick_start: float = C.PITCH_KICK_START           # s
    pitch_kick_end: float = C.PITCH_KICK_END               # s
    orbit_tolerance: float = C.ORBIT_TOLERANCE             # m

    # ── 3. Attitude control ──────────────────────────────────────────────
    kp_attitude: float = C.KP_ATTITUDE
    kd_attitude: float = C.KD_ATTITUDE
    attitude_rate_time_constant: float = C.ATTITUDE_RATE_TIME_CONSTANT

    # ── 4. Physics feature toggles ───────────────────────────────────────
    # Attitude dynamics ON: thrust follows the body axis driven by the gimbal.
    # OFF: thrust follows the steering target directly.
    enable_attitude_dynamics: bool = True
    enable_aero_torque: bool = True

    # ── 5. Misc ──────────────────────────────────────────────────────────
    verbose: bool = True


def create_default_config() -> SimulationConfig:
    """Create a SimulationConfig with default values from constants."""
    return SimulationConfig()


def create_test_config(dt: float = 0.1, max_time: float = 10.0,
                       **overrides) -> SimulationConfig:
    """Create a fast config suitable for testing.

    Any keyword arg accepted by SimulationConfig can be passed as an override.
    """
    defaults = dict(dt=dt, max_time=max_time, verbose=False)
    defaults.update(overrides)
    return SimulationConfig(**defaults)
