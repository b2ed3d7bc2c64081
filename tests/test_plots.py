"""
Unit tests for plot generation.

Plots are generated from a synthetic log so no simulation run is needed.
"""

import os
import tempfile
import unittest

import numpy as np

from ascent_sim import constants as C
from ascent_sim.plotting import (
    TrajectoryData,
    extract_log_data,
    find_staging_index,
    generate_all_plots,
)


class MockLog:
    """Mock simulation log with a plausible two-stage ascent."""

    def __init__(self, n_points: int = 100):
        t = np.linspace(0, 600, n_points)
        alt = 200.0 * (t / 600.0) ** 1.5
        self.time = list(t)
        self.altitude = list(alt)
        self.speed = list(12.0 * t)
        self.velocity_horizontal = list(11.0 * t)
        self.velocity_vertical = list(np.full(n_points, 300.0))
        angle = t / 6000.0
        r = C.R_EARTH + alt * 1000.0
        self.position_x = list(r * np.sin(angle))
        self.position_y = list(r * np.cos(angle))
        self.mass = list(np.linspace(531270.0, 30000.0, n_points))
        self.pitch_command = list(np.linspace(90.0, 0.0, n_points))
        self.pitch_actual = list(np.linspace(90.0, 0.0, n_points) - 0.5)
        self.gimbal_angle = list(np.sin(t / 20.0))
        self.throttle = list(np.ones(n_points))
        self.dynamic_pressure = list(30000.0 * np.exp(-((t - 70.0) / 30.0) ** 2))
        self.apoapsis = list(alt * 2.0)
        self.periapsis = list(np.linspace(-6000.0, 150.0, n_points))
        self.stage = [1 if x < 150.0 else 2 for x in t]


class TestPlotGeneration(unittest.TestCase):

    def setUp(self):
        self.output_dir = tempfile.mkdtemp()
        self.log = MockLog()

    def test_extract_log_data(self):
        data = extract_log_data(self.log)
        self.assertIsInstance(data, TrajectoryData)
        self.assertEqual(data.position.shape, (100, 2))
        self.assertEqual(len(data.time), 100)

    def test_staging_index(self):
        data = extract_log_data(self.log)
        idx = find_staging_index(data)
        self.assertIsNotNone(idx)
        self.assertGreaterEqual(data.time[idx], 150.0)
        self.assertLess(data.time[idx - 1], 150.0)

    def test_no_staging(self):
        self.log.stage = [1] * len(self.log.time)
        self.assertIsNone(find_staging_index(extract_log_data(self.log)))

    def test_generate_all_plots(self):
        paths = generate_all_plots(self.log, self.output_dir)
        self.assertEqual(len(paths), 7)
        for path in paths:
            self.assertTrue(os.path.exists(path), f"Missing {path}")
            self.assertGreater(os.path.getsize(path), 0)
        self.assertTrue(paths[-1].endswith('07_trajectory.png'))

    def test_escape_apoapsis_plots(self):
        self.log.apoapsis[-1] = float('inf')
        paths = generate_all_plots(self.log, self.output_dir)
        self.assertEqual(len(paths), 7)

    def test_empty_log(self):
        empty = MockLog(0)
        self.assertEqual(generate_all_plots(empty, self.output_dir), [])


if __name__ == '__main__':
    unittest.main()
