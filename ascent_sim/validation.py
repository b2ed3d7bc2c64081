"""
Two-Stage Ascent Simulation - Validation Checks

This module implements the checks applied at the edges of the simulation:
- Vehicle configuration sanity (the only input the core may refuse)
- Vehicle state sanity (finite values, non-negative propellant)

Each check raises ValidationError (or its ConfigurationError subclass)
on violation; callers decide whether to abort or ignore.
"""

import math

import numpy as np


class ValidationError(Exception):
    """Raised when a physics validation check fails."""
    pass


class ConfigurationError(ValidationError):
    """Raised when a vehicle configuration is malformed or under-specified."""
    pass


def _as_float(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _require_positive(value, name: str):
    value = _as_float(value, name)
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigurationError(f"{name} must be positive and finite, got {value}")


def _require_non_negative(value, name: str):
    value = _as_float(value, name)
    if not math.isfinite(value) or value < 0.0:
        raise ConfigurationError(f"{name} must be non-negative and finite, got {value}")


def check_stage(stage, index: int) -> bool:
    """
    Check one stage record.

    Returns:
        True if valid, raises ConfigurationError otherwise
    """
    label = f"stage {index + 1}"
    _require_positive(stage.dry_mass, f"{label} dry_mass")
    _require_non_negative(stage.propellant_mass, f"{label} propellant_mass")
    _require_non_negative(stage.thrust, f"{label} thrust")
    _require_non_negative(stage.thrust_vac, f"{label} thrust_vac")
    _require_positive(stage.isp, f"{label} isp")
    _require_positive(stage.isp_vac, f"{label} isp_vac")
    _require_positive(stage.diameter, f"{label} diameter")
    _require_positive(stage.length, f"{label} length")
    _require_non_negative(stage.engine_length, f"{label} engine_length")
    _require_non_negative(stage.drag_coeff, f"{label} drag_coeff")
    _require_non_negative(stage.gimbal_max_angle, f"{label} gimbal_max_angle")
    _require_non_negative(stage.gimbal_rate, f"{label} gimbal_rate")
    _require_non_negative(stage.gimbal_point, f"{label} gimbal_point")

    if not 0.0 < _as_float(stage.tank_length_ratio, f"{label} tank_length_ratio") <= 1.0:
        raise ConfigurationError(
            f"{label} tank_length_ratio must be in (0, 1], got {stage.tank_length_ratio}"
        )
    if not 0.0 <= _as_float(stage.dry_mass_engine_fraction,
                            f"{label} dry_mass_engine_fraction") <= 1.0:
        raise ConfigurationError(
            f"{label} dry_mass_engine_fraction must be in [0, 1], "
            f"got {stage.dry_mass_engine_fraction}"
        )
    return True


def validate_vehicle_configuration(config) -> bool:
    """
    Validate a vehicle configuration as a unit.

    Requires at least two stages and both payload and fairing.

    Raises:
        ConfigurationError: On the first violation found
    """
    if config is None:
        raise ConfigurationError("No vehicle configuration given")

    stages = getattr(config, 'stages', None)
    if not stages or len(stages) < 2:
        raise ConfigurationError("Vehicle needs at least two stages")
    if getattr(config, 'payload', None) is None:
        raise ConfigurationError("Vehicle has no payload")
    if getattr(config, 'fairing', None) is None:
        raise ConfigurationError("Vehicle has no fairing")

    for i, stage in enumerate(stages):
        check_stage(stage, i)

    _require_non_negative(config.payload.mass, "payload mass")
    _require_non_negative(config.payload.length, "payload length")
    _require_non_negative(config.fairing.mass, "fairing mass")
    _require_non_negative(config.fairing.length, "fairing length")
    _require_non_negative(config.fairing_jettison_altitude, "fairing_jettison_altitude")
    _require_positive(config.propellant_density, "propellant_density")
    return True


def validate_state(state) -> bool:
    """
    Run sanity checks on a vehicle state.

    Raises:
        ValidationError: If position/velocity/attitude are not finite or a
            propellant load is negative
    """
    vectors = np.concatenate([state.position, state.velocity])
    if not np.all(np.isfinite(vectors)):
        raise ValidationError(f"Non-finite position/velocity at t={state.elapsed_time:.2f}s")

    for name in ('rocket_angle', 'angular_velocity', 'gimbal_angle'):
        value = getattr(state, name)
        if not math.isfinite(value):
            raise ValidationError(f"Non-finite {name} at t={state.elapsed_time:.2f}s")

    if any(p < 0.0 for p in state.propellant_remaining):
        raise ValidationError(
            f"Negative propellant {list(state.propellant_remaining)} "
            f"at t={state.elapsed_time:.2f}s"
        )
    return True
