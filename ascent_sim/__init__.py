"""
Two-Stage Ascent Simulation Package

A 2D simulation of a two-stage launch vehicle flying from the pad to a
circular target orbit, with closed-loop guidance, gimballed attitude
control and manual orbital burns.

Modules:
    - constants: Physical constants, default vehicle and tuning values
    - config: Run configuration
    - vehicle: Vehicle configuration, builder and store
    - state: Vehicle state dataclass
    - atmosphere: US Standard Atmosphere 1976
    - propulsion: Thrust, Isp and mass flow
    - aerodynamics: Drag and normal-force model
    - mass: Mass properties (COG, moment of inertia)
    - actuator, control, dynamics: Attitude loop and equations of motion
    - orbital: Orbit prediction and burn planning
    - guidance: Ascent guidance state machine
    - integrators: Symplectic Euler integration
    - stepper: Adaptive sub-step stepper
    - events: Structured mission events
    - simulation: Control/configuration/telemetry facade
    - telemetry: Read-only projections
    - main: Headless runner and log
"""

from .config import SimulationConfig, create_default_config, create_test_config
from .events import EventType, MissionEvent
from .guidance import GuidanceState, create_guidance_state
from .main import SimulationLog, run_mission
from .simulation import Simulation
from .state import VehicleState, create_launch_state, create_orbital_state
from .stepper import BurnMode, MissionMode
from .vehicle import VehicleConfiguration, create_default_vehicle_config

__version__ = "1.0.0"

__all__ = [
    'SimulationConfig',
    'create_default_config',
    'create_test_config',
    'EventType',
    'MissionEvent',
    'GuidanceState',
    'create_guidance_state',
    'SimulationLog',
    'run_mission',
    'Simulation',
    'VehicleState',
    'create_launch_state',
    'create_orbital_state',
    'BurnMode',
    'MissionMode',
    'VehicleConfiguration',
    'create_default_vehicle_config',
]
