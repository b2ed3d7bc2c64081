"""
Two-Stage Ascent Simulation - Vehicle Configuration

This module describes the static geometry and performance of the launch
vehicle: two stages, a payload and a payload fairing. Configurations are
immutable; every edit produces a new, normalized configuration:

- derived total length is recomputed
- each stage's propellant load is clamped to its cylindrical tank capacity

Edits go through VehicleConfigBuilder (explicit per-component setters,
validated as a unit on build) or VehicleConfigStore (the get/set/reset
interface used by the simulation facade).
"""

import copy
import logging
from dataclasses import dataclass, field, fields, replace, asdict
from typing import Optional, Tuple

import numpy as np

from . import constants as C
from .validation import ConfigurationError, validate_vehicle_configuration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """One propulsive stage. Angles in degrees, lengths in metres."""
    dry_mass: float
    propellant_mass: float
    thrust: float              # sea-level thrust (N)
    thrust_vac: float          # vacuum thrust (N)
    isp: float                 # sea-level Isp (s)
    isp_vac: float             # vacuum Isp (s)
    diameter: float
    length: float
    tank_length_ratio: float = 0.85
    engine_length: float = 3.0
    dry_mass_engine_fraction: float = 0.6
    drag_coeff: float = 0.3
    gimbal_max_angle: float = 5.0   # deg
    gimbal_rate: float = 20.0       # deg/s
    gimbal_point: float = 0.5       # m above stage base

    @property
    def cross_section_area(self) -> float:
        return np.pi * (self.diameter / 2.0) ** 2

    @property
    def tank_length(self) -> float:
        return self.length * self.tank_length_ratio

    @property
    def wet_mass(self) -> float:
        return self.dry_mass + self.propellant_mass


@dataclass(frozen=True)
class Payload:
    mass: float
    length: float
    diameter: float


@dataclass(frozen=True)
class Fairing:
    mass: float
    length: float
    diameter: float


@dataclass(frozen=True)
class VehicleConfiguration:
    """
    Complete vehicle description, shared read-only by all force, mass and
    guidance components.

    Attributes:
        stages: Exactly two stages, bottom to top
        payload: Payload segment
        fairing: Payload fairing (conical nose segment)
        fairing_jettison_altitude: Altitude above which the fairing is dropped (m)
        propellant_density: Bulk propellant density used for tank sizing (kg/m^3)
        total_length: Derived sum of all segment lengths (m)
    """
    stages: Tuple[Stage, ...]
    payload: Payload
    fairing: Fairing
    fairing_jettison_altitude: float = C.FAIRING_JETTISON_ALTITUDE
    propellant_density: float = C.PROPELLANT_DENSITY
    total_length: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'stages', tuple(self.stages))
        object.__setattr__(self, 'total_length', compute_total_length(self))

    def to_dict(self) -> dict:
        """Plain nested-dict view (stages as a list)."""
        data = asdict(self)
        data['stages'] = list(data['stages'])
        data.pop('total_length')
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'VehicleConfiguration':
        """
        Build a configuration from a nested dict.

        Raises:
            ConfigurationError: On missing components or unknown fields
        """
        extras = {k: data[k] for k in ('fairing_jettison_altitude', 'propellant_density')
                  if k in data}
        try:
            stages = tuple(Stage(**s) for s in data['stages'])
            payload = Payload(**data['payload'])
            fairing = Fairing(**data['fairing'])
            return cls(stages=stages, payload=payload, fairing=fairing, **extras)
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed vehicle configuration: {e}") from e


def compute_total_length(config) -> float:
    """Sum of stage, payload and fairing lengths (m)."""
    total = sum(s.length for s in config.stages)
    if config.payload is not None:
        total += config.payload.length
    if config.fairing is not None:
        total += config.fairing.length
    return float(total)


def get_max_propellant_for_stage(stage: Stage,
                                 propellant_density: float = C.PROPELLANT_DENSITY) -> float:
    """
    Cylindrical tank capacity of a stage.

    capacity = π·(d/2)²·(length·tank_length_ratio)·ρ_prop
    """
    return float(stage.cross_section_area * stage.tank_length * propellant_density)


def normalize_config(config: VehicleConfiguration) -> VehicleConfiguration:
    """
    Return a deep-copied configuration with propellant clamped to tank
    capacity and total length recomputed.
    """
    config = copy.deepcopy(config)
    stages = []
    for i, stage in enumerate(config.stages):
        capacity = get_max_propellant_for_stage(stage, config.propellant_density)
        if stage.propellant_mass > capacity:
            logger.debug(f"Stage {i + 1} propellant clamped "
                         f"{stage.propellant_mass:.0f} -> {capacity:.0f} kg")
            stage = replace(stage, propellant_mass=capacity)
        stages.append(stage)
    return replace(config, stages=tuple(stages))


def create_default_vehicle_config() -> VehicleConfiguration:
    """The default two-stage medium-lift vehicle."""
    stage1 = Stage(
        dry_mass=C.STAGE1_DRY_MASS,
        propellant_mass=C.STAGE1_PROPELLANT_MASS,
        thrust=C.STAGE1_THRUST_SL,
        thrust_vac=C.STAGE1_THRUST_VAC,
        isp=C.STAGE1_ISP_SL,
        isp_vac=C.STAGE1_ISP_VAC,
        diameter=C.STAGE1_DIAMETER,
        length=C.STAGE1_LENGTH,
        tank_length_ratio=C.STAGE1_TANK_LENGTH_RATIO,
        engine_length=C.STAGE1_ENGINE_LENGTH,
        dry_mass_engine_fraction=C.STAGE1_ENGINE_MASS_FRACTION,
        drag_coeff=C.STAGE1_DRAG_COEFF,
        gimbal_max_angle=C.STAGE1_GIMBAL_MAX_ANGLE,
        gimbal_rate=C.STAGE1_GIMBAL_RATE,
        gimbal_point=C.STAGE1_GIMBAL_POINT,
    )
    stage2 = Stage(
        dry_mass=C.STAGE2_DRY_MASS,
        propellant_mass=C.STAGE2_PROPELLANT_MASS,
        thrust=C.STAGE2_THRUST_SL,
        thrust_vac=C.STAGE2_THRUST_VAC,
        isp=C.STAGE2_ISP_SL,
        isp_vac=C.STAGE2_ISP_VAC,
        diameter=C.STAGE2_DIAMETER,
        length=C.STAGE2_LENGTH,
        tank_length_ratio=C.STAGE2_TANK_LENGTH_RATIO,
        engine_length=C.STAGE2_ENGINE_LENGTH,
        dry_mass_engine_fraction=C.STAGE2_ENGINE_MASS_FRACTION,
        drag_coeff=C.STAGE2_DRAG_COEFF,
        gimbal_max_angle=C.STAGE2_GIMBAL_MAX_ANGLE,
        gimbal_rate=C.STAGE2_GIMBAL_RATE,
        gimbal_point=C.STAGE2_GIMBAL_POINT,
    )
    config = VehicleConfiguration(
        stages=(stage1, stage2),
        payload=Payload(C.PAYLOAD_MASS, C.PAYLOAD_LENGTH, C.PAYLOAD_DIAMETER),
        fairing=Fairing(C.FAIRING_MASS, C.FAIRING_LENGTH, C.FAIRING_DIAMETER),
        fairing_jettison_altitude=C.FAIRING_JETTISON_ALTITUDE,
        propellant_density=C.PROPELLANT_DENSITY,
    )
    return normalize_config(config)


# =============================================================================
# EDITING
# =============================================================================

class VehicleConfigBuilder:
    """
    Accumulates edits against a base configuration and commits them as a unit.

    Example:
        cfg = (VehicleConfigBuilder()
               .set_stage(0, length=50.0)
               .set_payload(mass=12000.0)
               .build())
    """

    _STAGE_FIELDS = frozenset(f.name for f in fields(Stage))
    _PAYLOAD_FIELDS = frozenset(f.name for f in fields(Payload))
    _FAIRING_FIELDS = frozenset(f.name for f in fields(Fairing))

    def __init__(self, base: Optional[VehicleConfiguration] = None):
        if base is None:
            base = create_default_vehicle_config()
        self._stages = list(base.stages)
        self._payload = base.payload
        self._fairing = base.fairing
        self._fairing_jettison_altitude = base.fairing_jettison_altitude
        self._propellant_density = base.propellant_density

    @staticmethod
    def _check_fields(changes: dict, allowed: frozenset, what: str):
        unknown = set(changes) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown {what} field(s): {sorted(unknown)}")

    def set_stage(self, index: int, **changes) -> 'VehicleConfigBuilder':
        if not 0 <= index < len(self._stages):
            raise ConfigurationError(f"Stage index {index} out of range")
        self._check_fields(changes, self._STAGE_FIELDS, 'stage')
        self._stages[index] = replace(self._stages[index], **changes)
        return self

    def set_payload(self, **changes) -> 'VehicleConfigBuilder':
        self._check_fields(changes, self._PAYLOAD_FIELDS, 'payload')
        self._payload = replace(self._payload, **changes)
        return self

    def set_fairing(self, **changes) -> 'VehicleConfigBuilder':
        self._check_fields(changes, self._FAIRING_FIELDS, 'fairing')
        self._fairing = replace(self._fairing, **changes)
        return self

    def set_fairing_jettison_altitude(self, altitude: float) -> 'VehicleConfigBuilder':
        self._fairing_jettison_altitude = float(altitude)
        return self

    def set_propellant_density(self, density: float) -> 'VehicleConfigBuilder':
        self._propellant_density = float(density)
        return self

    def build(self) -> VehicleConfiguration:
        """
        Validate and normalize the edited configuration.

        Raises:
            ConfigurationError: If the result is not a flyable vehicle
        """
        config = VehicleConfiguration(
            stages=tuple(self._stages),
            payload=self._payload,
            fairing=self._fairing,
            fairing_jettison_altitude=self._fairing_jettison_altitude,
            propellant_density=self._propellant_density,
        )
        validate_vehicle_configuration(config)
        return normalize_config(config)


class VehicleConfigStore:
    """
    Holds the current vehicle configuration.

    Writes are validated; rejected writes are logged and the prior
    configuration is retained.
    """

    def __init__(self, config: Optional[VehicleConfiguration] = None):
        self._config = create_default_vehicle_config()
        if config is not None:
            self.set(config)

    def get(self) -> VehicleConfiguration:
        return self._config

    def set(self, config) -> bool:
        """
        Replace the current configuration.

        Args:
            config: VehicleConfiguration or nested dict

        Returns:
            True if accepted, False if rejected (prior config retained)
        """
        try:
            if isinstance(config, dict):
                config = VehicleConfiguration.from_dict(config)
            validate_vehicle_configuration(config)
        except ConfigurationError as e:
            logger.warning(f"Vehicle configuration rejected: {e}")
            return False
        self._config = normalize_config(config)
        return True

    def reset_to_default(self) -> VehicleConfiguration:
        self._config = create_default_vehicle_config()
        return self._config
