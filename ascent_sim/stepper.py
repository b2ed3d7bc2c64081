"""
Two-Stage Ascent Simulation - Adaptive Sub-Step Stepper

One host tick:
1. Scale the host delta by time warp and cap it
2. Split it into equal sub-steps (finer while coasting in orbit)
3. Per sub-step: steering target -> attitude loop -> forces ->
   symplectic Euler -> propellant depletion
4. After the sub-steps: staging, burn bookkeeping, fairing jettison,
   max-Q tracking, milestone events and ground impact
5. Advance the clock

VehicleState is mutated in place and only here. Discrete occurrences are
queued on the stepper's EventQueue.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from . import constants as C
from .actuator import compute_gimbal_torque, update_actuator
from .aerodynamics import compute_aerodynamic_loads
from .atmosphere import compute_dynamic_pressure
from .config import SimulationConfig, create_default_config
from .control import compute_control_output
from .dynamics import compute_angular_acceleration, compute_linear_acceleration, integrate_attitude
from .events import EventQueue, EventType
from .guidance import (
    GuidanceState,
    VacuumSubPhase,
    compute_guidance,
    mark_burn_announced,
    pitch_to_direction,
)
from .integrators import integrate
from .mass import compute_mass_properties
from .propulsion import compute_mass_flow_rate, compute_thrust
from .utils import (
    angle_to_direction,
    compute_local_up,
    compute_relative_velocity,
    cross2,
    direction_to_angle,
)

logger = logging.getLogger(__name__)


class MissionMode(Enum):
    GUIDED = 'guided'
    MANUAL = 'manual'
    ORBITAL = 'orbital'


class BurnMode(Enum):
    PROGRADE = 'prograde'
    RETROGRADE = 'retrograde'
    NORMAL = 'normal'
    ANTI_NORMAL = 'anti-normal'
    RADIAL = 'radial'
    ANTI_RADIAL = 'anti-radial'


@dataclass
class StepCommands:
    """Operator inputs read by the stepper each tick."""
    mission_mode: MissionMode = MissionMode.GUIDED
    burn_mode: Optional[BurnMode] = None
    manual_pitch: float = 90.0                 # deg, used in MANUAL mode
    manual_gimbal: Optional[float] = None      # rad, bypasses the attitude loop


# =============================================================================
# HELPERS
# =============================================================================

def compute_substep_count(dt: float, altitude: float, engine_on: bool,
                          config: SimulationConfig = None) -> tuple:
    """
    Number and size of sub-steps for a tick of length dt.

    Returns:
        (count, substep_dt)
    """
    if config is None:
        config = create_default_config()
    coasting_in_orbit = altitude > C.ORBIT_ALTITUDE and not engine_on
    max_step = config.max_substep_orbital if coasting_in_orbit else config.max_substep
    count = max(1, math.ceil(dt / max_step))
    count = min(count, config.max_substeps)
    return count, dt / count


def is_burn_mode_available(state, mission_mode: MissionMode) -> bool:
    """Burn modes need altitude above 150 km and a finished pitch program."""
    altitude = state.altitude
    program_complete = (mission_mode is MissionMode.ORBITAL
                        or state.elapsed_time > C.PITCH_PROGRAM_DURATION
                        or (not state.engine_on and altitude > C.ORBIT_ALTITUDE))
    return program_complete and altitude > C.ORBIT_ALTITUDE


def compute_burn_direction(burn_mode: BurnMode, position: np.ndarray,
                           velocity: np.ndarray) -> np.ndarray:
    """
    Inertial unit thrust vector for a burn mode.

    Normal is the in-plane perpendicular to local up on the side given by
    the sign of the angular momentum.
    """
    up = compute_local_up(position)
    speed = float(np.hypot(velocity[0], velocity[1]))
    prograde = velocity / speed if speed > 0.0 else np.zeros(2)
    if cross2(position, velocity) > 0.0:
        normal = np.array([-up[1], up[0]])
    else:
        normal = np.array([up[1], -up[0]])

    directions = {
        BurnMode.PROGRADE: prograde,
        BurnMode.RETROGRADE: -prograde,
        BurnMode.NORMAL: normal,
        BurnMode.ANTI_NORMAL: -normal,
        BurnMode.RADIAL: up,
        BurnMode.ANTI_RADIAL: -up,
    }
    return directions[burn_mode]


# =============================================================================
# STEPPER
# =============================================================================

class SimulationStepper:
    """
    Advances a VehicleState/GuidanceState pair through host ticks.

    The last sub-step's guidance, control, aerodynamic and thrust values are
    kept for the telemetry projection.
    """

    def __init__(self, config: SimulationConfig = None, events: EventQueue = None):
        self.config = config or create_default_config()
        self.events = events if events is not None else EventQueue()
        self.halted = False
        self.burn_start_time: Optional[float] = None
        self.active_burn: Optional[BurnMode] = None
        self.last_guidance = None
        self.last_control = None
        self.last_aero = None
        self.last_thrust = 0.0
        self.last_thrust_direction = np.zeros(2)
        self.guidance_recommendation: Optional[float] = None

    def reset(self):
        self.events.clear()
        self.halted = False
        self.burn_start_time = None
        self.active_burn = None
        self.last_guidance = None
        self.last_control = None
        self.last_aero = None
        self.last_thrust = 0.0
        self.last_thrust_direction = np.zeros(2)
        self.guidance_recommendation = None

    # ── public ──────────────────────────────────────────────────────────

    def step(self, state, gs: GuidanceState, vehicle, host_dt: float,
             commands: StepCommands = None) -> float:
        """
        Advance the simulation by one host tick.

        Args:
            state: VehicleState, mutated in place
            gs: GuidanceState, mutated in place
            vehicle: VehicleConfiguration
            host_dt: Wall-clock delta of the tick (s, before time warp)
            commands: Operator inputs

        Returns:
            Simulated time advanced (s); zero once the run has halted
        """
        if self.halted or host_dt <= 0.0:
            return 0.0
        if commands is None:
            commands = StepCommands()

        dt = min(host_dt * state.time_warp, self.config.max_tick_dt)

        burn_active = (commands.burn_mode is not None
                       and is_burn_mode_available(state, commands.mission_mode))
        if burn_active:
            self._start_burn(state, vehicle, commands.burn_mode)

        count, sub_dt = compute_substep_count(dt, state.altitude, state.engine_on, self.config)
        for _ in range(count):
            self._substep(state, gs, vehicle, sub_dt, commands, burn_active)

        self._post_step(state, vehicle, commands, dt)
        state.elapsed_time += dt

        if state.radius < C.R_EARTH and state.elapsed_time > C.GROUND_IMPACT_GRACE_TIME:
            self.halted = True
            self.events.emit(EventType.MISSION_FAILURE, state.elapsed_time,
                             'Ground impact', altitude=state.altitude, speed=state.speed)
        return dt

    def end_burn(self, state, reason: str = '', time: float = None):
        """Close the active burn (if any) with a BURN_ENDED event at `time`."""
        if self.active_burn is None:
            return
        if time is None:
            time = state.elapsed_time
        start = self.burn_start_time if self.burn_start_time is not None else time
        duration = time - start
        message = f"{self.active_burn.name.replace('_', '-')} burn ended"
        if reason:
            message += f" - {reason}"
        self.events.emit(EventType.BURN_ENDED, time,
                         f"{message} ({duration:.1f}s)",
                         mode=self.active_burn.value, duration=duration)
        self.active_burn = None
        self.burn_start_time = None

    # ── internals ───────────────────────────────────────────────────────

    def _start_burn(self, state, vehicle, burn_mode: BurnMode):
        stage = state.current_stage
        if (not state.engine_on and 0 <= stage < len(vehicle.stages)
                and state.propellant_remaining[stage] > 0.0):
            state.engine_on = True
            self.events.emit(EventType.ENGINE_IGNITION, state.elapsed_time,
                             f"Engine ignition for {burn_mode.value} burn", stage=stage)
        if not state.engine_on:
            return
        if self.active_burn is not burn_mode:
            if self.active_burn is not None:
                self.end_burn(state, 'mode changed')
            self.active_burn = burn_mode
            self.burn_start_time = state.elapsed_time
            self.events.emit(EventType.BURN_STARTED, state.elapsed_time,
                             f"{burn_mode.name.replace('_', '-')} burn started",
                             mode=burn_mode.value)

    def _steering(self, state, gs, vehicle, dt, commands, burn_active):
        """
        Resolve the steering target for one sub-step.

        Returns:
            (target_direction or None, throttle)
        """
        if burn_active:
            return compute_burn_direction(commands.burn_mode, state.position, state.velocity), 1.0

        if commands.mission_mode is MissionMode.ORBITAL:
            return None, 0.0

        guidance, _ = compute_guidance(state, vehicle, gs, dt, self.config)
        self.last_guidance = guidance
        self._guidance_events(state, gs, guidance)

        if commands.mission_mode is MissionMode.MANUAL:
            self.guidance_recommendation = guidance['pitch']
            return pitch_to_direction(commands.manual_pitch, state.position), guidance['throttle']
        return guidance['thrust_direction'], guidance['throttle']

    def _guidance_events(self, state, gs, guidance):
        announcement = guidance['debug'].get('burn_started')
        if announcement and state.engine_on and guidance['throttle'] > 0.0:
            name = announcement['burn'].capitalize()
            self.events.emit(
                EventType.BURN_STARTED, state.elapsed_time,
                f"{name} burn start (dv {announcement['delta_v']:.0f} m/s, "
                f"{announcement['burn_time']:.1f}s)",
                **announcement,
            )
            mark_burn_announced(gs, announcement['burn'])
        if guidance['sub_phase'] == VacuumSubPhase.ORBIT_ACHIEVED.value:
            orbit = guidance['orbit']
            self.events.emit_once(
                'orbit_achieved', EventType.ORBIT_ACHIEVED, state.elapsed_time,
                f"Orbit achieved ({orbit['periapsis'] / 1000:.0f} x "
                f"{orbit['apoapsis'] / 1000:.0f} km)",
                apoapsis=orbit['apoapsis'], periapsis=orbit['periapsis'],
            )

    def _substep(self, state, gs, vehicle, dt, commands, burn_active):
        config = self.config
        position, velocity = state.position, state.velocity
        altitude = state.altitude
        stage_index = min(state.current_stage, len(vehicle.stages) - 1)
        stage = vehicle.stages[stage_index]

        target_direction, throttle = self._steering(state, gs, vehicle, dt, commands, burn_active)
        if target_direction is None:
            target_angle = state.rocket_angle
        else:
            target_angle = direction_to_angle(target_direction, position)

        mass_props = compute_mass_properties(state, vehicle)
        thrust = compute_thrust(state, vehicle, altitude, throttle)
        aero = compute_aerodynamic_loads(position, velocity, state.rocket_angle, vehicle,
                                         stage_index, mass_props['cog'], mass_props['length'])

        if config.enable_attitude_dynamics:
            if commands.manual_gimbal is not None:
                command = commands.manual_gimbal
            else:
                self.last_control = compute_control_output(
                    target_angle, state.rocket_angle, state.angular_velocity, stage, config)
                command = self.last_control['commanded_gimbal']
            state.gimbal_angle, state.commanded_gimbal = update_actuator(
                state.gimbal_angle, command, stage, dt)

            if thrust > 0.0:
                arm = mass_props['cog'] - stage.gimbal_point
                torque = compute_gimbal_torque(thrust, state.gimbal_angle, arm)
                alpha = compute_angular_acceleration(torque, aero['torque'],
                                                     mass_props['moment_of_inertia'],
                                                     config.enable_aero_torque)
                state.rocket_angle, state.angular_velocity = integrate_attitude(
                    state.rocket_angle, state.angular_velocity, alpha, dt)
            else:
                # No control authority without thrust: attitude held
                state.angular_velocity = 0.0
            thrust_direction = angle_to_direction(state.rocket_angle, position)
        else:
            state.rocket_angle = target_angle
            state.angular_velocity = 0.0
            thrust_direction = angle_to_direction(target_angle, position)

        acc = compute_linear_acceleration(position, mass_props['total_mass'], thrust,
                                          thrust_direction, aero['drag'],
                                          aero['normal_force_vector'])
        state.position, state.velocity = integrate(position, velocity, acc.total, dt,
                                                   config.integration_method)

        if thrust > 0.0:
            mdot = compute_mass_flow_rate(state, vehicle, altitude, throttle)
            current = state.current_stage
            state.propellant_remaining[current] = max(
                0.0, state.propellant_remaining[current] - mdot * dt)

        state.throttle = throttle
        self.last_aero = aero
        self.last_thrust = thrust
        self.last_thrust_direction = thrust_direction if thrust > 0.0 else np.zeros(2)

    def _post_step(self, state, vehicle, commands, dt):
        t = state.elapsed_time + dt
        n = len(vehicle.stages)
        stage = state.current_stage

        # Stage depletion: clamp, then stage or shut down exactly once
        if state.engine_on and 0 <= stage < n and state.propellant_remaining[stage] <= 0.0:
            state.propellant_remaining[stage] = 0.0
            if stage < n - 1:
                self.events.emit(EventType.ENGINE_CUTOFF, t, 'MECO', stage=stage)
                state.current_stage = stage + 1
                self.events.emit(EventType.STAGE_SEPARATION, t, 'Stage separation',
                                 stage=stage)
                self.events.emit(EventType.ENGINE_IGNITION, t, 'SES-1',
                                 stage=state.current_stage)
            else:
                self.events.emit(EventType.ENGINE_CUTOFF, t, 'SECO', stage=stage)
                state.engine_on = False
                if self.active_burn is not None:
                    self.end_burn(state, 'out of propellant', t)
                    commands.burn_mode = None

        if self.active_burn is not None and not state.engine_on:
            self.end_burn(state, time=t)
            commands.burn_mode = None

        altitude = state.altitude
        if not state.fairing_jettisoned and altitude > vehicle.fairing_jettison_altitude:
            state.fairing_jettisoned = True
            self.events.emit(EventType.FAIRING_JETTISON, t, 'Fairing jettison',
                             altitude=altitude)

        air = compute_relative_velocity(state.position, state.velocity)
        q = compute_dynamic_pressure(altitude, float(np.hypot(air[0], air[1])))
        state.max_q = max(state.max_q, q)
        if q > self.config.max_q:
            self.events.emit_once('max_q', EventType.MAX_Q_EXCEEDED, t,
                                  f"Max-Q limit exceeded ({q / 1000:.1f} kPa)", q=q)

        if commands.mission_mode is not MissionMode.ORBITAL:
            if t >= self.config.pitch_kick_start:
                self.events.emit_once('pitch_kick', EventType.PITCH_KICK, t,
                                      'Gravity turn kick')
            if altitude >= C.KARMAN_LINE:
                self.events.emit_once('karman_line', EventType.KARMAN_LINE, t,
                                      'Karman line crossed', altitude=altitude)
