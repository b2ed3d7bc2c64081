"""
Two-Stage Ascent Simulation - Headless Runner

This module implements the batch mission loop with:
- A Simulation facade driven at a fixed host tick
- Per-tick data logging
- Termination checks (orbit achieved, mission failure, propellant
  exhausted, time limit)
- Logging framework for diagnostics
"""

import csv
import logging
import math
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional

from . import constants as C
from .config import SimulationConfig, create_default_config
from .events import EventType
from .mass import compute_total_mass
from .simulation import Simulation
from .stepper import BurnMode, MissionMode
from .utils import angle_to_pitch
from .validation import ValidationError, validate_state

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class SimulationLog:
    """Container for logged simulation data."""
    time: List[float] = field(default_factory=list)
    altitude: List[float] = field(default_factory=list)             # km
    speed: List[float] = field(default_factory=list)                # m/s inertial
    velocity_horizontal: List[float] = field(default_factory=list)
    velocity_vertical: List[float] = field(default_factory=list)
    position_x: List[float] = field(default_factory=list)
    position_y: List[float] = field(default_factory=list)
    mass: List[float] = field(default_factory=list)
    pitch_command: List[float] = field(default_factory=list)        # deg above horizontal
    pitch_actual: List[float] = field(default_factory=list)
    gimbal_angle: List[float] = field(default_factory=list)         # deg
    throttle: List[float] = field(default_factory=list)
    dynamic_pressure: List[float] = field(default_factory=list)     # Pa
    mach_number: List[float] = field(default_factory=list)
    apoapsis: List[float] = field(default_factory=list)             # km
    periapsis: List[float] = field(default_factory=list)            # km
    stage: List[int] = field(default_factory=list)
    phase_name: List[str] = field(default_factory=list)

    def append(self, sim: Simulation):
        """Log data from the current tick."""
        state = sim.state
        flight = sim.get_flight_telemetry()
        orbit = sim.get_orbit()
        guidance = sim.stepper.last_guidance

        self.time.append(state.elapsed_time)
        self.altitude.append(state.altitude / 1000)
        self.speed.append(state.speed)
        self.velocity_horizontal.append(flight['horizontal_velocity'])
        self.velocity_vertical.append(flight['vertical_velocity'])
        self.position_x.append(float(state.position[0]))
        self.position_y.append(float(state.position[1]))
        self.mass.append(compute_total_mass(state, sim.vehicle))

        actual_pitch = angle_to_pitch(state.rocket_angle)
        if sim.mission_mode is MissionMode.MANUAL:
            command = sim.commands.manual_pitch
        elif guidance is not None:
            command = guidance['pitch']
        else:
            command = actual_pitch
        self.pitch_command.append(command)
        self.pitch_actual.append(actual_pitch)
        self.gimbal_angle.append(math.degrees(state.gimbal_angle))
        self.throttle.append(state.throttle if state.engine_on else 0.0)
        self.dynamic_pressure.append(flight['dynamic_pressure'])
        self.mach_number.append(flight['mach'])
        self.apoapsis.append(orbit['apoapsis'] / 1000)
        self.periapsis.append(orbit['periapsis'] / 1000)
        self.stage.append(state.current_stage + 1)

        if guidance is None:
            phase = sim.mission_mode.value
        elif guidance['sub_phase']:
            phase = f"{guidance['phase']}/{guidance['sub_phase']}"
        else:
            phase = guidance['phase']
        self.phase_name.append(phase)

    def to_csv(self, filename: str):
        """Write logged diagnostics to CSV for offline analysis."""
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        header = [
            'time', 'altitude_km', 'speed', 'vel_horiz', 'vel_vert',
            'pos_x', 'pos_y', 'mass',
            'pitch_cmd_deg', 'pitch_actual_deg', 'gimbal_deg', 'throttle',
            'dynamic_pressure_Pa', 'mach', 'apoapsis_km', 'periapsis_km',
            'stage', 'phase',
        ]

        with open(filename, 'w', newline='') as fh:
            writer = csv.writer(fh)
            writer.writerow(header)
            for i in range(len(self.time)):
                writer.writerow([
                    self.time[i], self.altitude[i], self.speed[i],
                    self.velocity_horizontal[i], self.velocity_vertical[i],
                    self.position_x[i], self.position_y[i], self.mass[i],
                    self.pitch_command[i], self.pitch_actual[i], self.gimbal_angle[i],
                    self.throttle[i], self.dynamic_pressure[i], self.mach_number[i],
                    self.apoapsis[i], self.periapsis[i], self.stage[i], self.phase_name[i],
                ])
        logger.info(f"Wrote {len(self.time)} rows to {filename}")


def check_termination(sim: Simulation, events, max_time: float) -> tuple:
    """
    Check if the run should terminate.

    Args:
        sim: Simulation after the latest tick
        events: Events emitted by the latest tick
        max_time: Maximum allowed simulation time (s)

    Returns:
        (should_terminate, reason) tuple
    """
    state = sim.state
    for event in events:
        if event.type is EventType.MISSION_FAILURE:
            return True, f"MISSION FAILURE - {event.message}"
        if event.type is EventType.ORBIT_ACHIEVED and sim.mission_mode is MissionMode.GUIDED:
            return True, "ORBIT ACHIEVED - Mission Complete"

    if sim.halted:
        return True, "MISSION FAILURE"

    stage = state.current_stage
    if (sim.launched and not state.engine_on and sim.mission_mode is not MissionMode.ORBITAL
            and state.propellant_remaining[stage] <= 0.0):
        return True, "PROPELLANT EXHAUSTED"

    if state.elapsed_time >= max_time:
        return True, f"MAX TIME reached ({max_time:.0f}s)"

    return False, ""


def run_mission(config: SimulationConfig = None, vehicle=None, mode='guided',
                target_altitude: float = None, burn: Optional[str] = None,
                burn_duration: float = 0.0, verbose: bool = None) -> tuple:
    """
    Run one mission headlessly until a termination condition.

    Args:
        config: SimulationConfig instance. If None a default is created.
        vehicle: VehicleConfiguration. If None the default vehicle is used.
        mode: 'guided', 'manual' or 'orbital'
        target_altitude: Target orbit (guided/manual) or spawn altitude
            (orbital) in m. Defaults to config.target_altitude.
        burn: Burn mode to hold from the start of an orbital run
        burn_duration: Simulated seconds to hold the burn
        verbose: Print progress updates. Defaults to config.verbose.

    Returns:
        (final_state, log, termination_reason) tuple
    """
    if config is None:
        config = create_default_config()
    if verbose is None:
        verbose = config.verbose
    mode = MissionMode(mode)
    if target_altitude is None:
        target_altitude = config.target_altitude

    sim = Simulation(config, vehicle, mode)
    if mode is MissionMode.ORBITAL:
        sim.start_mission(mode, altitude=target_altitude)
    else:
        sim.start_mission(mode, target_altitude=target_altitude)
    sim.set_time_warp(config.time_warp)
    log = SimulationLog()

    logger.info(f"Starting {mode.value} mission: dt={config.dt}s, "
                f"max_time={config.max_time}s, target={target_altitude / 1000:.0f} km")
    logger.debug(f"Initial state: {sim.state}")

    if verbose:
        print("\n" + "=" * 80)
        print(f"ASCENT SIMULATION    | mode={mode.value} | dt={config.dt}s | T_max={config.max_time}s")
        print("=" * 80)
        print(f"{'Time (s)':^10} | {'Alt (km)':^10} | {'Vel (m/s)':^10} | {'Stage':^6} | {'Phase':<30}")
        print("-" * 80)

    if mode is not MissionMode.ORBITAL:
        sim.launch()
    burn_start = None
    if burn:
        if sim.set_burn_mode(BurnMode(burn)):
            burn_start = sim.state.elapsed_time

    start_time = time.time()
    last_print_time = -C.MAX_TIME
    reason = ""

    log.append(sim)
    while True:
        events = sim.tick(config.dt)
        log.append(sim)

        if burn_start is not None and sim.state.elapsed_time - burn_start >= burn_duration:
            sim.set_burn_mode(None)
            burn_start = None

        try:
            validate_state(sim.state)
        except ValidationError as e:
            logger.error(f"Validation failed: {e}")
            reason = f"Validation failure: {e}"
            break

        if verbose and sim.state.elapsed_time - last_print_time >= 50.0:
            last_print_time = sim.state.elapsed_time
            print(f"{sim.state.elapsed_time:10.1f} | {sim.state.altitude / 1000:10.2f} | "
                  f"{sim.state.speed:10.1f} | {sim.state.current_stage + 1:^6} | "
                  f"{log.phase_name[-1]:<30}")

        should_terminate, reason = check_termination(sim, events, config.max_time)
        if should_terminate:
            break

    elapsed = time.time() - start_time
    logger.info(f"Simulation terminated: {reason} "
                f"(t={sim.state.elapsed_time:.1f}s, wall {elapsed:.1f}s)")
    if verbose:
        print(f"\nTermination: {reason}")
    return sim.state, log, reason
