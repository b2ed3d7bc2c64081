"""Tests for validation module."""
from dataclasses import replace

import numpy as np
import pytest

from ascent_sim.state import create_launch_state
from ascent_sim.validation import (
    ConfigurationError,
    ValidationError,
    validate_state,
    validate_vehicle_configuration,
)
from ascent_sim.vehicle import create_default_vehicle_config


@pytest.fixture
def vehicle():
    return create_default_vehicle_config()


def test_default_vehicle_is_valid(vehicle):
    assert validate_vehicle_configuration(vehicle) is True


def test_configuration_error_is_validation_error():
    assert issubclass(ConfigurationError, ValidationError)


def test_rejects_missing_config():
    with pytest.raises(ConfigurationError):
        validate_vehicle_configuration(None)


def test_rejects_single_stage(vehicle):
    single = replace(vehicle, stages=vehicle.stages[:1])
    with pytest.raises(ConfigurationError, match="two stages"):
        validate_vehicle_configuration(single)


@pytest.mark.parametrize("field,value", [
    ("dry_mass", 0.0),
    ("isp", -1.0),
    ("diameter", float('nan')),
    ("propellant_mass", -10.0),
    ("tank_length_ratio", 1.5),
    ("dry_mass_engine_fraction", -0.1),
    ("thrust", "lots"),
])
def test_rejects_bad_stage_field(vehicle, field, value):
    stages = (replace(vehicle.stages[0], **{field: value}), vehicle.stages[1])
    with pytest.raises(ConfigurationError):
        validate_vehicle_configuration(replace(vehicle, stages=stages))


def test_rejects_bad_density(vehicle):
    with pytest.raises(ConfigurationError):
        validate_vehicle_configuration(replace(vehicle, propellant_density=0.0))


def test_valid_state(vehicle):
    assert validate_state(create_launch_state(vehicle)) is True


def test_nan_position_rejected(vehicle):
    s = create_launch_state(vehicle)
    s.position[0] = np.nan
    with pytest.raises(ValidationError, match="Non-finite"):
        validate_state(s)


def test_infinite_rate_rejected(vehicle):
    s = create_launch_state(vehicle)
    s.angular_velocity = float('inf')
    with pytest.raises(ValidationError, match="angular_velocity"):
        validate_state(s)


def test_negative_propellant_rejected(vehicle):
    s = create_launch_state(vehicle)
    s.propellant_remaining[1] = -1.0
    with pytest.raises(ValidationError, match="Negative propellant"):
        validate_state(s)
