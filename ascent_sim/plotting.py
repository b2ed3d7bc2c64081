"""
Two-Stage Ascent Simulation - Trajectory Plots

Renders the histories recorded in a SimulationLog to PNG files using the
non-interactive Agg backend.
"""

import os
from dataclasses import dataclass
from typing import List, Optional

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for batch processing
import matplotlib.pyplot as plt
import numpy as np

from . import constants as C


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class TrajectoryData:
    """Container for log histories as numpy arrays.

    Attributes:
        time: Time (s)
        altitude: Altitude (km)
        speed: Inertial speed (m/s)
        velocity_horizontal, velocity_vertical: Local components (m/s)
        position: Planet-centred position [n x 2] (m)
        mass: Vehicle mass (kg)
        pitch_command, pitch_actual: Pitch above horizontal (deg)
        gimbal_angle: Engine deflection (deg)
        throttle: Applied throttle
        dynamic_pressure: q (Pa)
        apoapsis, periapsis: Predicted apsides (km)
        stage: Active stage (1-based)
    """
    time: np.ndarray
    altitude: np.ndarray
    speed: np.ndarray
    velocity_horizontal: np.ndarray
    velocity_vertical: np.ndarray
    position: np.ndarray
    mass: np.ndarray
    pitch_command: np.ndarray
    pitch_actual: np.ndarray
    gimbal_angle: np.ndarray
    throttle: np.ndarray
    dynamic_pressure: np.ndarray
    apoapsis: np.ndarray
    periapsis: np.ndarray
    stage: np.ndarray


# =============================================================================
# Configuration
# =============================================================================

def configure_plot_style() -> None:
    """Shared matplotlib defaults for all figures."""
    plt.rcParams.update({
        'figure.figsize': (10, 6),
        'savefig.dpi': 150,
        'axes.grid': True,
        'axes.axisbelow': True,
        'grid.alpha': 0.3,
        'font.size': 11,
        'axes.titlesize': 13,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'legend.framealpha': 0.95,
        'lines.linewidth': 1.8,
        'xtick.direction': 'in',
        'ytick.direction': 'in',
    })


# =============================================================================
# Data Processing
# =============================================================================

def extract_log_data(log) -> TrajectoryData:
    """Convert the log's lists to arrays."""
    return TrajectoryData(
        time=np.array(log.time),
        altitude=np.array(log.altitude),
        speed=np.array(log.speed),
        velocity_horizontal=np.array(log.velocity_horizontal),
        velocity_vertical=np.array(log.velocity_vertical),
        position=np.column_stack((log.position_x, log.position_y)),
        mass=np.array(log.mass),
        pitch_command=np.array(log.pitch_command),
        pitch_actual=np.array(log.pitch_actual),
        gimbal_angle=np.array(log.gimbal_angle),
        throttle=np.array(log.throttle),
        dynamic_pressure=np.array(log.dynamic_pressure),
        apoapsis=np.array(log.apoapsis),
        periapsis=np.array(log.periapsis),
        stage=np.array(log.stage),
    )


def find_staging_index(data: TrajectoryData) -> Optional[int]:
    """Index of the first sample flown on the second stage, if any."""
    later = np.nonzero(data.stage > data.stage[0])[0]
    return int(later[0]) if len(later) else None


def _mark_staging(ax, data: TrajectoryData, idx: Optional[int]):
    if idx is not None:
        ax.axvline(data.time[idx], color='gray', linestyle='--', linewidth=1.0,
                   label=f'Staging (T+{data.time[idx]:.0f}s)')


def _save(fig, output_dir: str, name: str) -> str:
    plt.tight_layout()
    path = os.path.join(output_dir, name)
    fig.savefig(path, bbox_inches='tight')
    plt.close(fig)
    return path


# =============================================================================
# Plots
# =============================================================================

def plot_altitude_profile(data: TrajectoryData, output_dir: str) -> str:
    """Altitude vs time with staging marked."""
    fig, ax = plt.subplots()
    ax.fill_between(data.time, 0, data.altitude, alpha=0.25, color='#1f77b4')
    ax.plot(data.time, data.altitude, 'b-', linewidth=2, label='Altitude')
    ax.axhline(C.KARMAN_LINE / 1000, color='purple', linestyle=':', label='Karman line')
    _mark_staging(ax, data, find_staging_index(data))

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (km)')
    ax.set_title('Altitude Profile', fontweight='bold')
    ax.legend(loc='lower right')
    ax.set_xlim(data.time[0], data.time[-1])
    return _save(fig, output_dir, '01_altitude_profile.png')


def plot_velocity_profile(data: TrajectoryData, output_dir: str) -> str:
    """Inertial speed and its local components."""
    fig, ax = plt.subplots()
    ax.plot(data.time, data.speed, 'k-', label='Inertial speed')
    ax.plot(data.time, data.velocity_horizontal, 'b--', label='Horizontal')
    ax.plot(data.time, data.velocity_vertical, 'r--', label='Vertical')
    _mark_staging(ax, data, find_staging_index(data))

    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Velocity (m/s)')
    ax.set_title('Velocity Profile', fontweight='bold')
    ax.legend(loc='upper left')
    return _save(fig, output_dir, '02_velocity_profile.png')


def plot_pitch_attitude(data: TrajectoryData, output_dir: str) -> str:
    """Commanded vs actual pitch, with gimbal deflection below."""
    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)
    ax1.plot(data.time, data.pitch_command, 'b-', label='Commanded')
    ax1.plot(data.time, data.pitch_actual, 'r--', label='Actual')
    ax1.set_ylabel('Pitch above horizontal (deg)')
    ax1.set_title('Pitch Program and Attitude', fontweight='bold')
    ax1.set_ylim(C.MIN_PITCH_COMMAND - 5, C.MAX_PITCH_COMMAND + 5)
    ax1.legend(loc='upper right')

    ax2.plot(data.time, data.gimbal_angle, 'g-')
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Gimbal (deg)')
    return _save(fig, output_dir, '03_pitch_attitude.png')


def plot_dynamic_pressure(data: TrajectoryData, output_dir: str) -> str:
    """Dynamic pressure with the max-Q point and throttle."""
    fig, ax = plt.subplots()
    q_kpa = data.dynamic_pressure / 1000
    ax.plot(data.time, q_kpa, 'b-', label='Dynamic pressure')
    if len(q_kpa):
        i_max = int(np.argmax(q_kpa))
        ax.scatter([data.time[i_max]], [q_kpa[i_max]], c='red', s=80, marker='x', zorder=5,
                   label=f'Max-Q ({q_kpa[i_max]:.1f} kPa at T+{data.time[i_max]:.0f}s)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('q (kPa)')
    ax.set_title('Dynamic Pressure', fontweight='bold')

    ax_t = ax.twinx()
    ax_t.plot(data.time, data.throttle, color='orange', alpha=0.6, label='Throttle')
    ax_t.set_ylabel('Throttle')
    ax_t.set_ylim(0, 1.05)
    ax_t.grid(False)
    ax.legend(loc='upper right')
    return _save(fig, output_dir, '04_dynamic_pressure.png')


def plot_mass_profile(data: TrajectoryData, output_dir: str) -> str:
    """Vehicle mass vs time."""
    fig, ax = plt.subplots()
    ax.plot(data.time, data.mass / 1000, 'b-')
    _mark_staging(ax, data, find_staging_index(data))
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Mass (t)')
    ax.set_title('Vehicle Mass', fontweight='bold')
    return _save(fig, output_dir, '05_mass_profile.png')


def plot_apsides(data: TrajectoryData, output_dir: str, target_km: float = None) -> str:
    """Predicted apoapsis and periapsis histories."""
    if target_km is None:
        target_km = C.TARGET_ORBIT_ALTITUDE / 1000
    fig, ax = plt.subplots()
    apo = np.where(np.isfinite(data.apoapsis), data.apoapsis, np.nan)
    ax.plot(data.time, apo, 'b-', label='Apoapsis')
    ax.plot(data.time, data.periapsis, 'r-', label='Periapsis')
    ax.axhline(target_km, color='green', linestyle='--', label=f'Target ({target_km:.0f} km)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Altitude (km)')
    ax.set_ylim(-C.R_EARTH / 1000 * 0.2, max(target_km * 2, 200.0))
    ax.set_title('Predicted Apsides', fontweight='bold')
    ax.legend(loc='lower right')
    return _save(fig, output_dir, '06_apsides.png')


def plot_trajectory(data: TrajectoryData, output_dir: str) -> str:
    """Ground-relative 2D trajectory around the planet."""
    fig, ax = plt.subplots(figsize=(8, 8))
    theta = np.linspace(0, 2 * np.pi, 720)
    r_km = C.R_EARTH / 1000
    ax.fill(r_km * np.cos(theta), r_km * np.sin(theta), color='#cfe3f5', zorder=1)
    ax.plot(data.position[:, 0] / 1000, data.position[:, 1] / 1000, 'r-', zorder=2,
            label='Trajectory')
    ax.scatter([data.position[0, 0] / 1000], [data.position[0, 1] / 1000],
               c='green', s=60, zorder=3, label='Start')

    extent = max(np.max(np.abs(data.position)) / 1000, r_km) * 1.05
    ax.set_xlim(-extent, extent)
    ax.set_ylim(-extent, extent)
    ax.set_aspect('equal')
    ax.set_xlabel('x (km)')
    ax.set_ylabel('y (km)')
    ax.set_title('Trajectory', fontweight='bold')
    ax.legend(loc='upper right')
    return _save(fig, output_dir, '07_trajectory.png')


def generate_all_plots(log, output_dir: str = "plots") -> List[str]:
    """Generate every trajectory and telemetry plot.

    Args:
        log: SimulationLog (or any object with the same list attributes)
        output_dir: Directory to save plots (created if it doesn't exist)

    Returns:
        List of paths to saved plot files
    """
    os.makedirs(output_dir, exist_ok=True)
    configure_plot_style()
    data = extract_log_data(log)
    if len(data.time) == 0:
        return []

    plot_functions = [
        plot_altitude_profile,
        plot_velocity_profile,
        plot_pitch_attitude,
        plot_dynamic_pressure,
        plot_mass_profile,
        plot_apsides,
        plot_trajectory,
    ]
    return [fn(data, output_dir) for fn in plot_functions]
