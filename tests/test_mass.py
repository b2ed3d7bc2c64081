import pytest

from ascent_sim import mass
from ascent_sim import constants as C
from ascent_sim.state import create_launch_state, create_orbital_state
from ascent_sim.vehicle import create_default_vehicle_config

LIFTOFF_MASS = (C.PAYLOAD_MASS + C.FAIRING_MASS
                + C.STAGE1_DRY_MASS + C.STAGE1_PROPELLANT_MASS
                + C.STAGE2_DRY_MASS + C.STAGE2_PROPELLANT_MASS)


@pytest.fixture
def vehicle():
    return create_default_vehicle_config()


def test_total_mass_at_liftoff(vehicle):
    s = create_launch_state(vehicle)
    assert mass.compute_total_mass(s, vehicle) == pytest.approx(LIFTOFF_MASS)


def test_total_mass_after_staging_and_fairing(vehicle):
    s = create_launch_state(vehicle)
    s.current_stage = 1
    s.fairing_jettisoned = True
    expected = C.PAYLOAD_MASS + C.STAGE2_DRY_MASS + C.STAGE2_PROPELLANT_MASS
    assert mass.compute_total_mass(s, vehicle) == pytest.approx(expected)


def test_mass_properties_consistent(vehicle):
    s = create_launch_state(vehicle)
    props = mass.compute_mass_properties(s, vehicle)
    assert props['total_mass'] == pytest.approx(mass.compute_total_mass(s, vehicle))
    assert props['length'] == pytest.approx(vehicle.total_length)
    assert 0.0 < props['cog'] < props['length']
    assert props['moment_of_inertia'] > 0.0
    assert props['fuel_levels'] == [1.0, 1.0]


def test_cog_rises_as_first_stage_drains(vehicle):
    s = create_launch_state(vehicle)
    full = mass.compute_mass_properties(s, vehicle)['cog']
    s.propellant_remaining[0] *= 0.2
    drained = mass.compute_mass_properties(s, vehicle)['cog']
    assert drained > full


def test_stage_cogs_after_separation(vehicle):
    s = create_orbital_state(vehicle)
    props = mass.compute_mass_properties(s, vehicle)
    assert props['stage_cogs'][0] is None
    assert 0.0 < props['stage_cogs'][1] < C.STAGE2_LENGTH
    assert props['length'] == pytest.approx(C.STAGE2_LENGTH + C.PAYLOAD_LENGTH)
    assert props['fuel_levels'][1] == pytest.approx(C.ORBITAL_SPAWN_PROPELLANT_FRACTION)


def test_fill_height_capped(vehicle):
    stage = vehicle.stages[0]
    assert mass.compute_fill_height(stage, 0.0, C.PROPELLANT_DENSITY) == 0.0
    assert mass.compute_fill_height(stage, 1.0e9, C.PROPELLANT_DENSITY) == pytest.approx(
        stage.tank_length)


def test_empty_stage_cog(vehicle):
    stage = vehicle.stages[0]
    f = stage.dry_mass_engine_fraction
    expected = f * stage.engine_length / 2.0 + (1.0 - f) * stage.length / 2.0
    assert mass.compute_stage_cog(stage, 0.0, C.PROPELLANT_DENSITY) == pytest.approx(expected)


def test_inertia_formulas():
    assert mass.cylinder_inertia(12.0, 1.0, 0.0) == pytest.approx(1.0)
    assert mass.cone_inertia(10.0, 1.0, 1.0) == pytest.approx(3.0 + 1.0)
