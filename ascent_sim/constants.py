"""
Two-Stage Ascent Simulation - Physical Constants and Vehicle Parameters

This module defines all physical constants, planet parameters, default vehicle
specifications, guidance tuning values and integrator limits used throughout
the simulation.

VALUES FROM: US Standard Atmosphere 1976 (NOAA-S/T 76-1562) and the default
two-stage medium-lift vehicle description.
"""

import numpy as np

# =============================================================================
# PLANET PARAMETERS
# =============================================================================

# Universal gravitational constant (m^3/(kg·s^2))
G = 6.67430e-11

# Planet mass (kg)
EARTH_MASS = 5.972e24

# Gravitational parameter (m^3/s^2)
MU_EARTH = G * EARTH_MASS

# Planet mean radius (m)
R_EARTH = 6.371e6

# Sidereal rotation rate (rad/s)
EARTH_ROTATION_RATE = 7.2921159e-5

# Standard gravitational acceleration at sea level (m/s^2)
G0 = 9.80665

# Edge of space (m)
KARMAN_LINE = 100000.0

# Altitude above which the vehicle is treated as orbital (m)
ORBIT_ALTITUDE = 150000.0

# =============================================================================
# ATMOSPHERE (US Standard Atmosphere 1976, Table 4)
# =============================================================================

# Effective radius for the geopotential altitude relationship (m)
R_GEOPOTENTIAL = 6356766.0

# Mean molar mass of dry air (kg/mol)
ATM_M0 = 0.0289644

# Universal gas constant (J/(mol·K))
R_STAR = 8.31447

# Ratio of specific heats for air
GAMMA = 1.4

# Sea-level reference values
SEA_LEVEL_TEMPERATURE = 288.15  # K
SEA_LEVEL_PRESSURE = 101325.0   # Pa
SEA_LEVEL_DENSITY = 1.225       # kg/m^3

# Layer bases: (geopotential altitude m, temperature K, lapse rate K/m, pressure Pa)
ATMOSPHERE_LAYERS = (
    (0.0,     288.15, -0.0065, 101325.0),   # Troposphere
    (11000.0, 216.65,  0.0,    22632.1),    # Tropopause
    (20000.0, 216.65,  0.0010, 5474.89),    # Stratosphere I
    (32000.0, 228.65,  0.0028, 868.019),    # Stratosphere II
    (47000.0, 270.65,  0.0,    110.906),    # Stratopause
    (51000.0, 270.65, -0.0028, 66.9389),    # Mesosphere I
    (71000.0, 214.65, -0.0020, 3.95642),    # Mesosphere II
)

# Upper validity limit of the layer table (geopotential m, ~86 km geometric)
MAX_GEOPOTENTIAL_ALTITUDE = 84852.0

# Lapse rates below this magnitude are treated as isothermal
ISOTHERMAL_LAPSE_TOL = 1e-10

# Sutherland's law for air
SUTHERLAND_MU0 = 1.716e-5  # Reference viscosity (Pa·s)
SUTHERLAND_T0 = 273.15     # Reference temperature (K)
SUTHERLAND_S = 110.4       # Sutherland constant (K)

# Densities below this are treated as vacuum (kg/m^3)
DENSITY_FLOOR = 1e-15

# =============================================================================
# DEFAULT VEHICLE - STAGE 1 (booster)
# =============================================================================

STAGE1_DRY_MASS = 22200.0          # kg
STAGE1_PROPELLANT_MASS = 395700.0  # kg
STAGE1_THRUST_SL = 7607000.0       # N
STAGE1_THRUST_VAC = 8227000.0      # N
STAGE1_ISP_SL = 282.0              # s
STAGE1_ISP_VAC = 311.0             # s
STAGE1_DIAMETER = 3.7              # m
STAGE1_LENGTH = 47.0               # m
STAGE1_TANK_LENGTH_RATIO = 0.85
STAGE1_ENGINE_LENGTH = 3.0         # m
STAGE1_ENGINE_MASS_FRACTION = 0.6
STAGE1_DRAG_COEFF = 0.3
STAGE1_GIMBAL_MAX_ANGLE = 5.0      # deg
STAGE1_GIMBAL_RATE = 20.0          # deg/s
STAGE1_GIMBAL_POINT = 0.5          # m above stage base

# =============================================================================
# DEFAULT VEHICLE - STAGE 2 (upper stage)
# =============================================================================

STAGE2_DRY_MASS = 4000.0           # kg
STAGE2_PROPELLANT_MASS = 92670.0   # kg
STAGE2_THRUST_SL = 981000.0        # N
STAGE2_THRUST_VAC = 981000.0       # N
STAGE2_ISP_SL = 348.0              # s
STAGE2_ISP_VAC = 348.0             # s
STAGE2_DIAMETER = 3.7              # m
STAGE2_LENGTH = 14.0               # m
STAGE2_TANK_LENGTH_RATIO = 0.80
STAGE2_ENGINE_LENGTH = 2.0         # m
STAGE2_ENGINE_MASS_FRACTION = 0.5
STAGE2_DRAG_COEFF = 0.25
STAGE2_GIMBAL_MAX_ANGLE = 5.0      # deg
STAGE2_GIMBAL_RATE = 15.0          # deg/s
STAGE2_GIMBAL_POINT = 0.3          # m above stage base

# =============================================================================
# DEFAULT VEHICLE - PAYLOAD, FAIRING, PROPELLANT
# =============================================================================

PAYLOAD_MASS = 15000.0    # kg
PAYLOAD_LENGTH = 5.0      # m
PAYLOAD_DIAMETER = 3.7    # m

FAIRING_MASS = 1700.0     # kg
FAIRING_LENGTH = 4.0      # m
FAIRING_DIAMETER = 3.7    # m

FAIRING_JETTISON_ALTITUDE = 110000.0  # m
PROPELLANT_DENSITY = 923.0            # kg/m^3 (bulk LOX/RP-1)

# Fairing centroid measured from its base (cone approximation)
FAIRING_COG_FRACTION = 1.0 / 3.0

# =============================================================================
# AERODYNAMICS
# =============================================================================

# Fineness ratio above which the drag curve is scaled down
REFERENCE_FINENESS = 11.0

# Cd curve anchor values
CD_SUBSONIC = 0.30
CD_TRANSONIC_START = 0.32   # at Mach 0.8
CD_TRANSONIC_END = 0.50     # at Mach 1.0
CD_PEAK = 0.52              # near Mach 1.05
CD_MACH_1_2 = 0.48
CD_MACH_2 = 0.38
CD_MACH_3 = 0.30
CD_MACH_5 = 0.25
CD_HYPERSONIC = 0.22        # asymptote above Mach 5

# Center-of-pressure position as a fraction of vehicle length
CP_FRACTION_SUBSONIC = 0.5
CP_FRACTION_SUPERSONIC = 0.6

# Mach numbers bounding the transonic blend
MACH_TRANSONIC_LOW = 0.8
MACH_TRANSONIC_HIGH = 1.2

# Speed of sound floor for Mach computation (m/s)
SPEED_OF_SOUND_FLOOR = 1.0

# Airspeed below which aerodynamic forces are zero (m/s)
SMALL_VELOCITY_TOL = 1e-6

# =============================================================================
# MASS PROPERTIES
# =============================================================================

# Moment of inertia floor (kg·m^2)
MOI_FLOOR = 1.0

# =============================================================================
# ATTITUDE CONTROL
# =============================================================================

# Outer attitude loop (gimbal command from pitch error)
KP_ATTITUDE = 1.5             # rad gimbal per rad pitch error
KD_ATTITUDE = 0.8             # rad gimbal per rad/s rate error
ATTITUDE_RATE_TIME_CONSTANT = 2.0  # s

# =============================================================================
# GUIDANCE
# =============================================================================

TARGET_ORBIT_ALTITUDE = 500000.0  # m
ATMOSPHERE_LIMIT = 70000.0        # m, switch to vacuum guidance above this
MAX_DYNAMIC_PRESSURE = 35000.0    # Pa
MAX_Q_PROTECTION_FRACTION = 0.8
MAX_PITCH_CORRECTION = 10.0       # deg
MAX_PITCH_RATE = 2.0              # deg/s
THROTTLE_DOWN_MARGIN = 1.15
MIN_THROTTLE = 0.4
INITIAL_PITCH = 85.0              # deg above horizontal after pitch kick
PITCH_KICK_START = 10.0           # s
PITCH_KICK_END = 15.0             # s
ORBIT_TOLERANCE = 10000.0         # m

# Pitch command limits (deg)
MIN_PITCH_COMMAND = -5.0
MAX_PITCH_COMMAND = 90.0

# Altitude-based minimum pitch: 90 - fraction^2 * span (deg)
MIN_PITCH_SPAN = 80.0

# Turn-rate limiter (deg/s and gains)
TURN_RATE_EXCESS_THRESHOLD = 0.5
TURN_RATE_CORRECTION_GAIN = 2.0
TURN_RATE_CORRECTION_MAX = 5.0
MIN_PITCH_RECOVERY_GAIN = 0.3

# Vacuum-phase throttling
THROTTLE_RAMP_DISTANCE = 50000.0  # m of apsis error over which throttle ramps
VACUUM_THROTTLE_FLOOR = 0.1
NEAR_APOAPSIS_ALTITUDE = 50000.0  # m
NEAR_APOAPSIS_TIME = 5.0          # s

# =============================================================================
# SIMULATION STEPPER
# =============================================================================

# Host tick used by the headless runner (s)
DT = 1.0

# Longest simulated interval accepted from one host tick (s)
MAX_TICK_DT = 1.0

# Sub-step limits (s)
MAX_SUBSTEP = 0.05
MAX_SUBSTEP_ORBITAL = 0.01
MAX_SUBSTEPS = 1000

# Ground impact is only checked after this much flight time (s)
GROUND_IMPACT_GRACE_TIME = 1.0

# Burn modes are available once the pitch program is over
PITCH_PROGRAM_DURATION = 600.0    # s

# Maximum simulation time for headless runs (s)
MAX_TIME = 3000.0

# Allowed time-warp multipliers
TIME_WARP_FACTORS = (1, 2, 5, 10, 25, 50, 100, 500, 1000)

# Propellant added by one refuel command (kg)
REFUEL_INCREMENT = 5000.0

# Share of upper-stage propellant loaded for an orbital spawn
ORBITAL_SPAWN_PROPELLANT_FRACTION = 0.1

# Next-event predictions outside (0, horizon) are discarded (s)
NEXT_EVENT_HORIZON = 10000.0

# =============================================================================
# NUMERICAL TOLERANCES
# =============================================================================

ZERO_TOLERANCE = 1e-10

# =============================================================================
# INITIAL CONDITIONS
# =============================================================================

# Launch site on top of the planet, vehicle co-rotating with the surface
INITIAL_POSITION = np.array([0.0, R_EARTH])
INITIAL_VELOCITY = np.array([EARTH_ROTATION_RATE * R_EARTH, 0.0])
