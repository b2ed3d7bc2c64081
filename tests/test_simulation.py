"""Tests for the Simulation facade (control, configuration and telemetry surface)."""
from dataclasses import replace

import pytest

from ascent_sim import constants as C
from ascent_sim.events import EventType
from ascent_sim.simulation import Simulation
from ascent_sim.stepper import BurnMode, MissionMode
from ascent_sim.vehicle import create_default_vehicle_config


@pytest.fixture
def sim():
    return Simulation()


@pytest.fixture
def orbital():
    s = Simulation()
    s.start_mission('orbital', altitude=400000.0)
    return s


# =============================================================================
# CONTROL
# =============================================================================

def test_initial_state(sim):
    assert sim.mission_mode is MissionMode.GUIDED
    assert sim.launched is False
    assert sim.running is False
    assert sim.state.altitude == pytest.approx(0.0)


def test_tick_before_launch_does_nothing(sim):
    assert sim.tick(1.0) == []
    assert sim.state.elapsed_time == 0.0


def test_launch_emits_liftoff(sim):
    sim.launch()
    assert sim.state.engine_on is True
    events = sim.tick(1.0)
    assert events[0].type is EventType.ENGINE_IGNITION
    assert events[0].message == 'Liftoff'
    assert sim.state.altitude > 0.0


def test_second_launch_ignored(sim):
    sim.launch()
    sim.tick(1.0)
    sim.launch()
    assert sim.tick(0.0) == []


def test_pause_and_resume(sim):
    sim.launch()
    sim.pause()
    sim.tick(1.0)
    assert sim.state.elapsed_time == 0.0
    sim.resume()
    sim.tick(1.0)
    assert sim.state.elapsed_time == pytest.approx(1.0)


def test_reset_returns_to_pad(sim):
    sim.launch()
    for _ in range(5):
        sim.tick(1.0)
    sim.reset()
    assert sim.launched is False
    assert sim.state.elapsed_time == 0.0
    assert sim.state.propellant_remaining[0] == sim.vehicle.stages[0].propellant_mass
    assert sim.get_guidance_diagnostics()['phase'] is None


@pytest.mark.parametrize("factor", C.TIME_WARP_FACTORS)
def test_time_warp_accepted(sim, factor):
    assert sim.set_time_warp(factor) is True
    assert sim.state.time_warp == factor


@pytest.mark.parametrize("factor", [0, 3, 7.5, 2000])
def test_time_warp_refused(sim, factor):
    assert sim.set_time_warp(factor) is False
    assert sim.state.time_warp == 1.0


def test_time_warp_survives_reset(sim):
    sim.set_time_warp(10)
    sim.reset()
    assert sim.state.time_warp == 10.0


def test_time_warp_scales_tick(sim):
    sim.launch()
    sim.set_time_warp(5)
    sim.tick(0.1)
    assert sim.state.elapsed_time == pytest.approx(0.5)


def test_manual_pitch_clamped(sim):
    assert sim.set_manual_pitch(120.0) == 90.0
    assert sim.set_manual_pitch(-30.0) == C.MIN_PITCH_COMMAND
    assert sim.set_manual_pitch(45.0) == 45.0


def test_manual_mode_resets_pitch(sim):
    sim.set_manual_pitch(30.0)
    sim.start_mission('manual')
    assert sim.commands.manual_pitch == 90.0
    sim.launch()
    sim.set_manual_pitch(80.0)
    sim.tick(1.0)
    assert sim.get_guidance_diagnostics()['recommendation'] is not None


def test_manual_gimbal(sim):
    sim.set_manual_gimbal(0.01)
    assert sim.commands.manual_gimbal == 0.01
    sim.set_manual_gimbal(None)
    assert sim.commands.manual_gimbal is None


def test_refuel_clamped(sim):
    assert sim.refuel() == 0.0
    sim.state.propellant_remaining[0] -= 2000.0
    assert sim.refuel() == pytest.approx(2000.0)
    sim.state.propellant_remaining[0] -= 2.0 * C.REFUEL_INCREMENT
    assert sim.refuel() == pytest.approx(C.REFUEL_INCREMENT)


def test_camera_and_zoom(sim):
    sim.set_camera('planet')
    sim.set_zoom(2)
    assert sim.camera == 'planet'
    assert sim.zoom == 2.0


def test_start_mission_target_altitude(sim):
    sim.start_mission('guided', target_altitude=300000.0)
    assert sim.config.target_altitude == 300000.0
    assert sim.stepper.config.target_altitude == 300000.0


# =============================================================================
# BURN MODES
# =============================================================================

def test_burn_mode_unavailable_on_pad(sim):
    assert sim.set_burn_mode('prograde') is False
    assert sim.commands.burn_mode is None


def test_orbital_mode_spawns_in_orbit(orbital):
    assert orbital.launched is True
    assert orbital.state.altitude == pytest.approx(400000.0)
    assert orbital.state.current_stage == 1
    assert orbital.state.engine_on is False


def test_unknown_burn_mode_rejected(orbital):
    with pytest.raises(ValueError):
        orbital.set_burn_mode('sideways')


def test_retrograde_burn_lowers_periapsis(orbital):
    periapsis0 = orbital.get_orbit()['periapsis']
    assert orbital.set_burn_mode(BurnMode.RETROGRADE) is True
    types = []
    for _ in range(20):
        types += [e.type for e in orbital.tick(1.0)]
    assert EventType.BURN_STARTED in types
    assert orbital.set_burn_mode(None) is True
    types = [e.type for e in orbital.tick(1.0)]
    assert EventType.BURN_ENDED in types
    assert orbital.state.engine_on is False
    assert orbital.get_orbit()['periapsis'] < periapsis0 - 10000.0


def test_release_without_burn(orbital):
    assert orbital.set_burn_mode(None) is True
    assert orbital.state.engine_on is False


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_vehicle_config_round_trip(sim):
    heavier = create_default_vehicle_config()
    heavier = replace(heavier, payload=replace(heavier.payload, mass=20000.0))
    assert sim.set_vehicle_config(heavier) is True
    assert sim.get_vehicle_config().payload.mass == 20000.0
    sim.reset()
    assert sim.get_mass_snapshot()['total_mass'] == pytest.approx(
        create_default_vehicle_config().payload.mass + 5000.0
        + sum(s.wet_mass for s in sim.vehicle.stages) + sim.vehicle.fairing.mass)


def test_invalid_vehicle_config_rejected(sim):
    before = sim.get_vehicle_config()
    broken = replace(before, stages=before.stages[:1])
    assert sim.set_vehicle_config(broken) is False
    assert sim.get_vehicle_config() is before


def test_vehicle_config_from_dict(sim):
    data = sim.get_vehicle_config().to_dict()
    data['fairing']['mass'] = 2000.0
    assert sim.set_vehicle_config(data) is True
    assert sim.get_vehicle_config().fairing.mass == 2000.0
    default = sim.reset_vehicle_config()
    assert default.fairing.mass == C.FAIRING_MASS


# =============================================================================
# TELEMETRY
# =============================================================================

def test_telemetry_after_liftoff(sim):
    sim.launch()
    for _ in range(3):
        sim.tick(1.0)
    snap = sim.get_state_snapshot()
    assert snap['engine_on'] is True
    assert sim.get_flight_telemetry()['vertical_velocity'] > 0.0
    diag = sim.get_guidance_diagnostics()
    assert diag['phase'] == 'vertical-ascent'
    dirs = sim.get_force_directions()
    assert dirs['thrust'][1] > 0.99
    assert dirs['drag'][1] < 0.0
    assert sim.get_next_event()['name'] == 'Pitch program start'


def test_no_pitch_program_after_orbital_spawn(orbital):
    assert orbital.get_next_event() is None
    orbital.state.engine_on = True
    assert orbital.get_next_event()['name'] == 'SECO'


def test_ground_impact_reported(sim):
    sim.launched = True
    events = []
    for _ in range(3):
        events += sim.tick(1.0)
    assert sim.halted
    assert events[-1].type is EventType.MISSION_FAILURE
    assert sim.running is False
