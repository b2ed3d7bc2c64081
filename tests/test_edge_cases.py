"""Tests for edge cases and boundary conditions."""

import math
import unittest

import numpy as np

from ascent_sim import aerodynamics
from ascent_sim import atmosphere
from ascent_sim import constants as C
from ascent_sim import orbital
from ascent_sim import propulsion
from ascent_sim.events import EventQueue
from ascent_sim.guidance import compute_guidance
from ascent_sim.mass import compute_mass_properties
from ascent_sim.state import VehicleState, create_launch_state
from ascent_sim.stepper import SimulationStepper, StepCommands
from ascent_sim.guidance import create_guidance_state
from ascent_sim.vehicle import VehicleConfigBuilder, create_default_vehicle_config


class TestAtmosphereEdgeCases(unittest.TestCase):
    """Edge case tests for atmosphere model."""

    def test_negative_altitude(self):
        """Negative altitude should be treated as zero."""
        below = atmosphere.compute_atmosphere_properties(-1000.0)
        sea = atmosphere.compute_atmosphere_properties(0.0)
        self.assertAlmostEqual(below['temperature'], sea['temperature'])
        self.assertAlmostEqual(below['density'], sea['density'])

    def test_karman_line(self):
        """100 km should have very low density."""
        self.assertLess(atmosphere.get_density(100000.0), 1e-5)

    def test_space(self):
        self.assertEqual(atmosphere.compute_dynamic_pressure(1.0e6, 7000.0), 0.0)

    def test_nan_free_far_away(self):
        props = atmosphere.compute_atmosphere_properties(1.0e9)
        for value in props.values():
            self.assertTrue(math.isfinite(value))


class TestVehicleEdgeCases(unittest.TestCase):

    def setUp(self):
        self.vehicle = create_default_vehicle_config()

    def test_zero_payload(self):
        light = VehicleConfigBuilder(self.vehicle).set_payload(mass=0.0).build()
        props = compute_mass_properties(create_launch_state(light), light)
        self.assertGreater(props['total_mass'], 0.0)
        self.assertTrue(math.isfinite(props['cog']))

    def test_empty_tanks(self):
        s = create_launch_state(self.vehicle)
        s.propellant_remaining = [0.0, 0.0]
        s.engine_on = True
        self.assertEqual(propulsion.compute_thrust(s, self.vehicle, 0.0), 0.0)
        self.assertEqual(orbital.compute_remaining_delta_v(s, self.vehicle), 0.0)

    def test_stage_past_last(self):
        s = create_launch_state(self.vehicle)
        s.current_stage = 2
        s.propellant_remaining = [0.0, 0.0]
        props = compute_mass_properties(s, self.vehicle)
        self.assertAlmostEqual(props['total_mass'],
                               self.vehicle.payload.mass + self.vehicle.fairing.mass)


class TestAerodynamicsEdgeCases(unittest.TestCase):

    def test_negative_mach_uses_magnitude(self):
        self.assertAlmostEqual(aerodynamics.drag_coefficient_curve(-1.0), C.CD_TRANSONIC_END)
        self.assertAlmostEqual(aerodynamics.drag_coefficient_curve(-0.5), C.CD_SUBSONIC)
        for mach in (0.7, 1.1, 2.5, 7.0):
            self.assertAlmostEqual(aerodynamics.drag_coefficient_curve(-mach),
                                   aerodynamics.drag_coefficient_curve(mach))

    def test_huge_mach(self):
        self.assertAlmostEqual(aerodynamics.drag_coefficient_curve(1.0e6), C.CD_HYPERSONIC)

    def test_sideways_flight(self):
        vehicle = create_default_vehicle_config()
        position = np.array([0.0, C.R_EARTH + 3000.0])
        velocity = np.array([C.EARTH_ROTATION_RATE * position[1], 150.0])
        loads = aerodynamics.compute_aerodynamic_loads(position, velocity, math.pi / 2,
                                                       vehicle, 0, 20.0, 70.0)
        self.assertAlmostEqual(loads['angle_of_attack'], math.pi / 2)
        self.assertTrue(np.all(np.isfinite(loads['drag'])))


class TestGuidanceEdgeCases(unittest.TestCase):

    def test_escape_trajectory(self):
        """Guidance stays finite on a hyperbolic trajectory."""
        vehicle = create_default_vehicle_config()
        r = C.R_EARTH + 300000.0
        s = VehicleState(position=[0.0, r], velocity=[15000.0, 0.0], current_stage=1,
                         propellant_remaining=[0.0, 1000.0], fairing_jettisoned=True,
                         engine_on=True, elapsed_time=700.0)
        out, _ = compute_guidance(s, vehicle, None, 0.0)
        self.assertTrue(out['orbit']['is_escape'])
        self.assertTrue(math.isfinite(out['pitch']))
        self.assertGreaterEqual(out['throttle'], 0.0)


class TestStepperEdgeCases(unittest.TestCase):

    def test_halted_stepper_ignores_ticks(self):
        vehicle = create_default_vehicle_config()
        stepper = SimulationStepper(events=EventQueue())
        stepper.halted = True
        s = create_launch_state(vehicle)
        self.assertEqual(stepper.step(s, create_guidance_state(), vehicle, 1.0), 0.0)
        self.assertEqual(s.elapsed_time, 0.0)

    def test_manual_gimbal_clamped(self):
        vehicle = create_default_vehicle_config()
        stepper = SimulationStepper()
        s = create_launch_state(vehicle)
        s.engine_on = True
        stepper.step(s, create_guidance_state(), vehicle, 1.0, StepCommands(manual_gimbal=1.0))
        limit = math.radians(vehicle.stages[0].gimbal_max_angle)
        self.assertAlmostEqual(s.commanded_gimbal, limit)
        self.assertLessEqual(abs(s.gimbal_angle), limit + 1e-12)


if __name__ == '__main__':
    unittest.main()
