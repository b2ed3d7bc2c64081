"""
Two-Stage Ascent Simulation - Vehicle State

This module defines the single state dataclass that holds everything the
stepper mutates during a run. No duplicated state is allowed anywhere:
guidance keeps its own GuidanceState and the vehicle description is the
read-only VehicleConfiguration.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from . import constants as C


@dataclass
class VehicleState:
    """
    Mutable state of the vehicle, exclusively owned by the stepper.

    Attributes:
        position: Planet-centred inertial position (m) [2]
        velocity: Inertial velocity (m/s) [2]
        current_stage: Index of the active stage
        propellant_remaining: Propellant per stage (kg)
        fairing_jettisoned: Fairing has been dropped
        rocket_angle: Body axis angle from local vertical, positive toward
            local east (rad)
        angular_velocity: d(rocket_angle)/dt (rad/s)
        gimbal_angle: Actual engine deflection (rad)
        commanded_gimbal: Gimbal command after clamping (rad)
        engine_on: Engine armed
        elapsed_time: Simulation time (s)
        time_warp: Multiplier applied to host ticks
        throttle: Throttle applied on the last sub-step
        max_q: Peak dynamic pressure seen so far (Pa)
    """

    position: np.ndarray = field(default_factory=lambda: C.INITIAL_POSITION.copy())
    velocity: np.ndarray = field(default_factory=lambda: C.INITIAL_VELOCITY.copy())
    current_stage: int = 0
    propellant_remaining: List[float] = field(default_factory=lambda: [0.0, 0.0])
    fairing_jettisoned: bool = False
    rocket_angle: float = 0.0
    angular_velocity: float = 0.0
    gimbal_angle: float = 0.0
    commanded_gimbal: float = 0.0
    engine_on: bool = False
    elapsed_time: float = 0.0
    time_warp: float = 1.0
    throttle: float = 0.0
    max_q: float = 0.0

    def __post_init__(self):
        """Ensure arrays are numpy arrays with correct dtype."""
        self.position = np.asarray(self.position, dtype=np.float64)
        self.velocity = np.asarray(self.velocity, dtype=np.float64)
        self.propellant_remaining = [float(p) for p in self.propellant_remaining]

    def copy(self) -> 'VehicleState':
        """Create a deep copy of the state."""
        return VehicleState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            current_stage=self.current_stage,
            propellant_remaining=list(self.propellant_remaining),
            fairing_jettisoned=self.fairing_jettisoned,
            rocket_angle=self.rocket_angle,
            angular_velocity=self.angular_velocity,
            gimbal_angle=self.gimbal_angle,
            commanded_gimbal=self.commanded_gimbal,
            engine_on=self.engine_on,
            elapsed_time=self.elapsed_time,
            time_warp=self.time_warp,
            throttle=self.throttle,
            max_q=self.max_q,
        )

    @property
    def radius(self) -> float:
        """Distance from the planet centre (m)."""
        return float(np.hypot(self.position[0], self.position[1]))

    @property
    def altitude(self) -> float:
        """Altitude above the planet surface (m)."""
        return self.radius - C.R_EARTH

    @property
    def speed(self) -> float:
        """Magnitude of inertial velocity (m/s)."""
        return float(np.hypot(self.velocity[0], self.velocity[1]))

    def __str__(self) -> str:
        """Human-readable state summary."""
        return (
            f"VehicleState(t={self.elapsed_time:.2f}s, "
            f"alt={self.altitude/1000:.2f}km, "
            f"v={self.speed:.1f}m/s, "
            f"stage={self.current_stage + 1}, "
            f"prop={[round(p) for p in self.propellant_remaining]}kg)"
        )


def create_launch_state(vehicle) -> VehicleState:
    """
    Create the launch-pad state: vehicle at rest on the surface, co-rotating
    with the planet, tanks full, engine off, attitude vertical.

    Args:
        vehicle: VehicleConfiguration

    Returns:
        VehicleState at T-0
    """
    return VehicleState(
        position=C.INITIAL_POSITION.copy(),
        velocity=C.INITIAL_VELOCITY.copy(),
        current_stage=0,
        propellant_remaining=[s.propellant_mass for s in vehicle.stages],
        fairing_jettisoned=False,
        engine_on=False,
    )


def create_orbital_state(vehicle, altitude: float = C.TARGET_ORBIT_ALTITUDE) -> VehicleState:
    """
    Create a state in a circular orbit with the upper stage active.

    The upper stage carries a fraction of its propellant for manual burns;
    the fairing is already gone and the engine is off.
    """
    r = C.R_EARTH + altitude
    v_circ = np.sqrt(C.MU_EARTH / r)
    last = len(vehicle.stages) - 1
    propellant = [0.0] * len(vehicle.stages)
    propellant[last] = vehicle.stages[last].propellant_mass * C.ORBITAL_SPAWN_PROPELLANT_FRACTION
    return VehicleState(
        position=np.array([0.0, r]),
        velocity=np.array([v_circ, 0.0]),
        current_stage=last,
        propellant_remaining=propellant,
        fairing_jettisoned=True,
        rocket_angle=np.pi / 2.0,
        engine_on=False,
    )
