"""
Two-Stage Ascent Simulation - Simulation Facade

The in-process control, configuration and telemetry surface used by a host
loop (renderer, CLI, tests). It owns the VehicleState, GuidanceState,
stepper and event queue for one run and exposes:

- control: launch, pause/resume, reset, mission mode, time warp, burn mode,
  manual pitch/gimbal, refuel, camera/zoom pass-through
- configuration: get/set/reset the VehicleConfiguration
- telemetry: read-only projections (see telemetry.py)

`tick(wall_dt)` advances one host tick and returns the events it produced.
"""

import logging
from dataclasses import replace
from typing import List, Optional

import numpy as np

from . import constants as C
from . import telemetry
from .config import SimulationConfig, create_default_config
from .events import EventQueue, EventType, MissionEvent
from .guidance import create_guidance_state
from .state import create_launch_state, create_orbital_state
from .stepper import BurnMode, MissionMode, SimulationStepper, StepCommands, is_burn_mode_available
from .vehicle import VehicleConfigStore, VehicleConfiguration

logger = logging.getLogger(__name__)


class Simulation:
    """
    One simulated mission driven by host ticks.

    Args:
        config: Run configuration
        vehicle: Initial vehicle configuration (default vehicle if None)
        mode: Initial mission mode
    """

    def __init__(self, config: SimulationConfig = None,
                 vehicle: Optional[VehicleConfiguration] = None,
                 mode: MissionMode = MissionMode.GUIDED):
        self.config = config or create_default_config()
        self.vehicle_store = VehicleConfigStore(vehicle)
        self.events = EventQueue()
        self.stepper = SimulationStepper(self.config, self.events)
        self.commands = StepCommands(mission_mode=MissionMode(mode))
        self.launched = False
        self.paused = False
        self.camera = 'follow'
        self.zoom = 1.0
        self.orbital_altitude = self.config.target_altitude
        self.state = None
        self.gs = None
        self.reset()

    # ── properties ──────────────────────────────────────────────────────

    @property
    def vehicle(self) -> VehicleConfiguration:
        return self.vehicle_store.get()

    @property
    def mission_mode(self) -> MissionMode:
        return self.commands.mission_mode

    @property
    def running(self) -> bool:
        """True while ticks advance the simulation."""
        return self.launched and not self.paused and not self.stepper.halted

    @property
    def halted(self) -> bool:
        return self.stepper.halted

    # ── control interface ───────────────────────────────────────────────

    def reset(self):
        """Rebuild vehicle and guidance state for the current mission mode."""
        self.stepper.reset()
        self.gs = create_guidance_state()
        self.commands.burn_mode = None
        self.commands.manual_gimbal = None
        warp = self.state.time_warp if self.state is not None else self.config.time_warp

        if self.commands.mission_mode is MissionMode.ORBITAL:
            self.state = create_orbital_state(self.vehicle, self.orbital_altitude)
            self.launched = True
        else:
            self.state = create_launch_state(self.vehicle)
            self.launched = False
        if self.commands.mission_mode is MissionMode.MANUAL:
            self.commands.manual_pitch = C.MAX_PITCH_COMMAND
        self.state.time_warp = warp
        self.paused = False
        logger.debug(f"Reset to {self.commands.mission_mode.value} mission: {self.state}")

    def start_mission(self, mode, target_altitude: float = None, altitude: float = None):
        """
        Switch mission mode and reset.

        Args:
            mode: MissionMode or its string value
            target_altitude: Guidance target orbit altitude (m), guided/manual
            altitude: Spawn orbit altitude (m), orbital mode
        """
        mode = MissionMode(mode)
        if target_altitude is not None:
            self.config = replace(self.config, target_altitude=float(target_altitude))
            self.stepper.config = self.config
        if altitude is not None:
            self.orbital_altitude = float(altitude)
        self.commands.mission_mode = mode
        self.reset()
        logger.info(f"Mission mode: {mode.value} "
                    f"(target {self.config.target_altitude / 1000:.0f} km)")

    def launch(self):
        """Ignite the first stage and start the clock."""
        if self.launched:
            logger.warning("Launch ignored: mission already running")
            return
        self.state.engine_on = True
        self.launched = True
        self.events.emit(EventType.ENGINE_IGNITION, self.state.elapsed_time, 'Liftoff',
                         stage=self.state.current_stage)

    def pause(self):
        self.paused = True

    def resume(self):
        self.paused = False

    def set_time_warp(self, factor) -> bool:
        """Set the time-warp multiplier; only the discrete warp factors are accepted."""
        if factor not in C.TIME_WARP_FACTORS:
            logger.warning(f"Time warp {factor} refused; allowed {C.TIME_WARP_FACTORS}")
            return False
        self.state.time_warp = float(factor)
        return True

    def set_burn_mode(self, mode) -> bool:
        """
        Select a burn mode, or release it with None.

        Returns:
            True if the mode is active (or was released)
        """
        if mode is None:
            self.commands.burn_mode = None
            if self.stepper.active_burn is not None:
                self.stepper.end_burn(self.state)
                self.state.engine_on = False
            return True
        mode = BurnMode(mode)
        if not is_burn_mode_available(self.state, self.commands.mission_mode):
            logger.warning(f"Burn mode {mode.value} unavailable at "
                           f"{self.state.altitude / 1000:.1f} km, t={self.state.elapsed_time:.1f}s")
            return False
        self.commands.burn_mode = mode
        return True

    def set_manual_pitch(self, pitch_deg: float) -> float:
        """Set the manual pitch (deg above horizontal), clamped to [-5, 90]."""
        pitch = float(np.clip(pitch_deg, C.MIN_PITCH_COMMAND, C.MAX_PITCH_COMMAND))
        self.commands.manual_pitch = pitch
        return pitch

    def set_manual_gimbal(self, gimbal: Optional[float]):
        """Set a direct gimbal target (rad); None hands control back to the attitude loop."""
        self.commands.manual_gimbal = None if gimbal is None else float(gimbal)

    def refuel(self) -> float:
        """Add a fixed propellant increment to the current stage, clamped to its load."""
        stage = self.state.current_stage
        if not 0 <= stage < len(self.vehicle.stages):
            return 0.0
        capacity = self.vehicle.stages[stage].propellant_mass
        before = self.state.propellant_remaining[stage]
        self.state.propellant_remaining[stage] = min(capacity, before + C.REFUEL_INCREMENT)
        added = self.state.propellant_remaining[stage] - before
        logger.info(f"Refueled stage {stage + 1}: +{added:.0f} kg")
        return added

    def set_camera(self, camera: str):
        self.camera = camera

    def set_zoom(self, zoom: float):
        self.zoom = float(zoom)

    # ── configuration interface ─────────────────────────────────────────

    def get_vehicle_config(self) -> VehicleConfiguration:
        return self.vehicle_store.get()

    def set_vehicle_config(self, config) -> bool:
        """Replace the vehicle configuration; takes effect on the next reset."""
        return self.vehicle_store.set(config)

    def reset_vehicle_config(self) -> VehicleConfiguration:
        return self.vehicle_store.reset_to_default()

    # ── stepping ────────────────────────────────────────────────────────

    def tick(self, wall_dt: float) -> List[MissionEvent]:
        """
        Advance one host tick of `wall_dt` seconds (before time warp).

        Returns:
            Events produced during the tick, in emission order
        """
        if self.running:
            self.stepper.step(self.state, self.gs, self.vehicle, wall_dt, self.commands)
        events = self.events.drain()
        for event in events:
            if event.type is EventType.MISSION_FAILURE:
                logger.error(str(event))
            else:
                logger.info(str(event))
        return events

    # ── telemetry interface ─────────────────────────────────────────────

    def get_state_snapshot(self) -> dict:
        return telemetry.get_state_snapshot(self.state)

    def get_flight_telemetry(self) -> dict:
        return telemetry.get_flight_telemetry(self.state)

    def get_orbit(self):
        return telemetry.get_orbit(self.state)

    def get_mass_snapshot(self) -> dict:
        return telemetry.get_mass_snapshot(self.state, self.vehicle)

    def get_guidance_diagnostics(self) -> dict:
        return telemetry.get_guidance_diagnostics(self.stepper.last_guidance,
                                                  self.stepper.guidance_recommendation)

    def get_force_directions(self):
        return telemetry.compute_force_directions(self.state,
                                                  self.stepper.last_thrust_direction,
                                                  self.stepper.last_aero)

    def get_next_event(self):
        fired = frozenset(k for k in ('karman_line',) if self.events.has_fired(k))
        pad_launch = self.mission_mode is not MissionMode.ORBITAL
        return telemetry.compute_next_event(self.state, self.vehicle, self.config, fired,
                                            pad_launch=pad_launch)
