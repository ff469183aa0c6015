"""
M777 Howitzer Ballistics Simulator
==================================
Flight of a 155 mm M795 shell under altitude-dependent atmospheric
forces:
  - Gravity, decreasing with altitude
  - Mach-dependent aerodynamic drag
  - Tabulated air density and speed of sound (sea level to 80 km)

The core is a fixed-step integrator driving a projectile state machine
(Idle → Flying → Idle). Around it sit the howitzer firing platform, a
headless terrain/target game loop and matplotlib plots.
"""

from .errors import (
    BallisticsError, InvalidTimeStep, InvalidPhysicalParameter,
    MalformedLookupTable,
)
from .atmosphere import (
    LookupTable, linear_interpolation,
    gravity_from_altitude, density_from_altitude, speed_sound_from_altitude,
    mach_from_speed, atmosphere_profile,
)
from .drag_model import (
    M795_MASS, M795_RADIUS, drag_from_mach, area_from_radius,
    force_from_drag, acceleration_from_force, velocity_from_acceleration,
)
from .vectors import Angle, Position, Velocity, Acceleration, normalize
from .projectile import (
    Projectile, PositionVelocityTime, Trajectory,
    drag_acceleration, total_acceleration,
)
from .integrator import simulate_shot, ShotResult
from .howitzer import Howitzer, HowitzerConfig
from .terrain import Ground
from .simulation import Simulator
from .config import DisplayScale, SimulationConfig
from .firing_table import build_firing_table, FiringTableRow

__version__ = "1.0.0"
__all__ = [
    'BallisticsError', 'InvalidTimeStep', 'InvalidPhysicalParameter',
    'MalformedLookupTable',
    'LookupTable', 'linear_interpolation',
    'gravity_from_altitude', 'density_from_altitude',
    'speed_sound_from_altitude', 'mach_from_speed', 'atmosphere_profile',
    'M795_MASS', 'M795_RADIUS', 'drag_from_mach', 'area_from_radius',
    'force_from_drag', 'acceleration_from_force', 'velocity_from_acceleration',
    'Angle', 'Position', 'Velocity', 'Acceleration', 'normalize',
    'Projectile', 'PositionVelocityTime', 'Trajectory',
    'drag_acceleration', 'total_acceleration',
    'simulate_shot', 'ShotResult',
    'Howitzer', 'HowitzerConfig', 'Ground', 'Simulator',
    'DisplayScale', 'SimulationConfig',
    'build_firing_table', 'FiringTableRow',
]
