"""
Fixed-Step Flight Driver
========================
Runs a single shot to completion by calling ``Projectile.advance`` on a
fixed time grid, the same way the game loop does, and packages the
flight history for reporting and plotting.

Output: ShotResult dataclass with the full state history as numpy arrays.
"""

from dataclasses import dataclass

import numpy as np

from .atmosphere import DENSITY_TABLE, SPEED_OF_SOUND_TABLE
from .drag_model import drag_curve
from .errors import InvalidTimeStep
from .projectile import Projectile
from .vectors import Angle, Position


REFERENCE_TIME_STEP = 0.5     # s
DEFAULT_MAX_TIME    = 600.0   # s


@dataclass
class ShotResult:
    """Complete flight history of one shot."""
    mass: float
    radius: float
    muzzle_velocity: float
    elevation: Angle
    dt: float
    landed: bool              # False when max_time ran out first

    # Arrays — each has shape (N,)
    time: np.ndarray
    x: np.ndarray             # downrange
    y: np.ndarray             # altitude
    vx: np.ndarray
    vy: np.ndarray
    speed: np.ndarray
    mach_history: np.ndarray
    cd_history: np.ndarray
    density_history: np.ndarray

    @property
    def range_total(self) -> float:
        """Horizontal distance from launch to the last sample (m)."""
        return float(abs(self.x[-1] - self.x[0]))

    @property
    def max_altitude(self) -> float:
        return float(max(0.0, np.max(self.y)))

    @property
    def flight_time(self) -> float:
        return float(self.time[-1] - self.time[0])

    @property
    def impact_velocity(self) -> float:
        return float(self.speed[-1])

    @property
    def impact_angle_deg(self) -> float:
        """Angle of descent at impact (degrees below horizontal)."""
        return float(np.degrees(np.arctan2(-self.vy[-1], abs(self.vx[-1]))))

    def summary(self) -> str:
        """Human-readable summary string."""
        status = 'IMPACT' if self.landed else 'TIMEOUT'
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  SHOT SUMMARY — M795 {self.mass:.1f} kg{'':<23s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Muzzle vel   : {self.muzzle_velocity:>10.1f} m/s{'':<22s} ║",
            f"║  Angle        : {self.elevation.degrees:>10.1f} °{'':<24s} ║",
            f"║  Timestep     : {self.dt:>10.3f} s{'':<24s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Range        : {self.range_total:>10.1f} m  ({self.range_total/1000:>7.2f} km){'':<6s} ║",
            f"║  Max altitude : {self.max_altitude:>10.1f} m  ({self.max_altitude/1000:>7.2f} km){'':<6s} ║",
            f"║  Flight time  : {self.flight_time:>10.2f} s{'':<24s} ║",
            f"║  Impact vel   : {self.impact_velocity:>10.1f} m/s{'':<22s} ║",
            f"║  Impact angle : {self.impact_angle_deg:>10.1f} °{'':<24s} ║",
            f"║  Status       : {status:>10s}{'':<26s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def simulate_shot(projectile: Projectile, position: Position, angle: Angle,
                  muzzle_velocity: float, dt: float = REFERENCE_TIME_STEP,
                  max_time: float = DEFAULT_MAX_TIME,
                  launch_time: float = 0.0) -> ShotResult:
    """
    Fire ``projectile`` and advance it every ``dt`` seconds until it
    drops below the launch plane or ``max_time`` seconds have elapsed.
    """
    if dt <= 0.0:
        raise InvalidTimeStep(f"time step must be positive, got {dt}")

    projectile.fire(position, angle, muzzle_velocity, launch_time)

    # integer tick count keeps the time grid free of accumulated rounding
    tick = 0
    while projectile.is_flying and tick * dt < max_time:
        tick += 1
        projectile.advance(launch_time + tick * dt)

    return _build_result(projectile, angle, muzzle_velocity, dt,
                         landed=not projectile.is_flying)


def _build_result(projectile, angle, muzzle_velocity, dt, landed):
    """Convert the projectile's trajectory to a ShotResult."""
    columns = projectile.trajectory.as_arrays()

    altitude = np.clip(columns['y'], 0.0, None)
    mach = columns['speed'] / SPEED_OF_SOUND_TABLE.sample(altitude)

    return ShotResult(
        mass=projectile.mass,
        radius=projectile.radius,
        muzzle_velocity=muzzle_velocity,
        elevation=angle,
        dt=dt,
        landed=landed,
        time=columns['time'],
        x=columns['x'],
        y=columns['y'],
        vx=columns['vx'],
        vy=columns['vy'],
        speed=columns['speed'],
        mach_history=mach,
        cd_history=drag_curve(mach),
        density_history=DENSITY_TABLE.sample(altitude),
    )
