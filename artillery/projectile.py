"""
Projectile Kinetic State Machine
================================
An M795 shell and its flight history.

States:
  Idle    constructed or reset: inactive, empty trajectory
  Flying  fired: active, trajectory holds at least one sample

Each call to ``advance`` appends one sample computed with a single
Euler-style step. The acceleration (gravity + drag) is evaluated once,
at the start of the step, and held constant over Δt:

    s' = s + v·Δt + ½·a·Δt²
    v' = v + a·Δt

There is no substepping, so callers should keep Δt small (the
orchestrator uses 0.5 s). The shell returns to Idle when a sample
lands below the launch plane (y < 0).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

import numpy as np

from .atmosphere import (
    density_from_altitude, gravity_from_altitude, mach_from_speed,
)
from .drag_model import (
    M795_MASS, M795_RADIUS,
    acceleration_from_force, drag_from_mach, force_from_drag,
)
from .errors import InvalidPhysicalParameter, InvalidTimeStep
from .vectors import Acceleration, Angle, Position, Velocity


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionVelocityTime:
    """Snapshot of the shell at one instant."""
    position: Position = field(default_factory=Position)
    velocity: Velocity = field(default_factory=Velocity)
    time: float = 0.0

    @property
    def altitude(self) -> float:
        return self.position.y


class Trajectory:
    """
    Append-only flight history with strictly increasing timestamps.
    """

    def __init__(self):
        self._samples: List[PositionVelocityTime] = []

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PositionVelocityTime]:
        return iter(self._samples)

    def __getitem__(self, index) -> PositionVelocityTime:
        return self._samples[index]

    def __bool__(self) -> bool:
        return bool(self._samples)

    def append(self, sample: PositionVelocityTime):
        if self._samples and not sample.time > self._samples[-1].time:
            raise InvalidTimeStep(
                f"sample at t={sample.time} does not follow t={self._samples[-1].time}"
            )
        self._samples.append(sample)

    def clear(self):
        self._samples.clear()

    def copy(self) -> 'Trajectory':
        duplicate = Trajectory()
        duplicate._samples = list(self._samples)
        return duplicate

    @property
    def first(self) -> Optional[PositionVelocityTime]:
        return self._samples[0] if self._samples else None

    @property
    def last(self) -> Optional[PositionVelocityTime]:
        return self._samples[-1] if self._samples else None

    @property
    def times(self) -> List[float]:
        return [s.time for s in self._samples]

    @property
    def flight_time(self) -> float:
        """Last minus first timestamp (s)."""
        if len(self._samples) < 2:
            return 0.0
        return self._samples[-1].time - self._samples[0].time

    @property
    def max_altitude(self) -> float:
        """Highest y reached, never below zero (m)."""
        return max([0.0] + [s.position.y for s in self._samples])

    @property
    def total_distance(self) -> float:
        """Horizontal distance between first and last sample (m)."""
        if len(self._samples) < 2:
            return 0.0
        return abs(self._samples[-1].position.x - self._samples[0].position.x)

    def as_arrays(self) -> Dict[str, np.ndarray]:
        """Columns 'time', 'x', 'y', 'vx', 'vy', 'speed' for plotting."""
        samples = self._samples
        vx = np.array([s.velocity.dx for s in samples], dtype=float)
        vy = np.array([s.velocity.dy for s in samples], dtype=float)
        return {
            'time': np.array([s.time for s in samples], dtype=float),
            'x': np.array([s.position.x for s in samples], dtype=float),
            'y': np.array([s.position.y for s in samples], dtype=float),
            'vx': vx,
            'vy': vy,
            'speed': np.hypot(vx, vy),
        }


# ══════════════════════════════════════════════════════════════════════════
#  Forces
# ══════════════════════════════════════════════════════════════════════════

def drag_acceleration(sample: PositionVelocityTime, mass: float,
                      radius: float) -> Acceleration:
    """
    Deceleration due to air resistance, opposite the current velocity.

    Returns a zero vector when the shell is exactly at rest.
    """
    speed = sample.velocity.speed
    if speed == 0.0:
        return Acceleration(0.0, 0.0)

    altitude = max(0.0, sample.position.y)
    density = density_from_altitude(altitude)
    mach = mach_from_speed(speed, altitude)
    drag_coefficient = drag_from_mach(mach)

    force = force_from_drag(density, drag_coefficient, radius, speed)
    magnitude = acceleration_from_force(force, mass)

    return Acceleration(-magnitude * sample.velocity.dx / speed,
                        -magnitude * sample.velocity.dy / speed)


def total_acceleration(sample: PositionVelocityTime, mass: float,
                       radius: float) -> Acceleration:
    """Gravity (always straight down) plus drag."""
    altitude = max(0.0, sample.position.y)
    gravity = Acceleration(0.0, -gravity_from_altitude(altitude))
    return gravity.add(drag_acceleration(sample, mass, radius))


# ══════════════════════════════════════════════════════════════════════════
#  Projectile
# ══════════════════════════════════════════════════════════════════════════

class Projectile:
    """
    A shell with mass, radius and a single-shot flight history.
    """

    def __init__(self, mass: float = M795_MASS, radius: float = M795_RADIUS):
        if mass <= 0.0 or radius <= 0.0:
            raise InvalidPhysicalParameter(
                f"mass and radius must be positive, got mass={mass} radius={radius}"
            )
        self._mass = mass
        self._radius = radius
        self._active = False
        self._trajectory = Trajectory()

    def __repr__(self) -> str:
        state = 'flying' if self.is_flying else 'idle'
        return (f"Projectile(mass={self._mass}, radius={self._radius}, "
                f"{state}, samples={len(self._trajectory)})")

    # ── Shell parameters ──────────────────────────────────────────────────
    @property
    def mass(self) -> float:
        return self._mass

    @mass.setter
    def mass(self, value: float):
        if value > 0.0:
            self._mass = value

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float):
        if value > 0.0:
            self._radius = value

    # ── Lifecycle ─────────────────────────────────────────────────────────
    def reset(self):
        """Back to a default M795, idle with no history."""
        self._mass = M795_MASS
        self._radius = M795_RADIUS
        self._active = False
        self._trajectory.clear()

    def fire(self, position: Position, angle: Angle, muzzle_velocity: float,
             time: float):
        """
        Launch from ``position`` along ``angle`` at ``muzzle_velocity`` m/s.

        Any previous flight history is discarded.
        """
        if muzzle_velocity < 0.0:
            raise InvalidPhysicalParameter(
                f"muzzle velocity cannot be negative, got {muzzle_velocity}"
            )
        self.launch(PositionVelocityTime(
            position, Velocity.from_angle(angle, muzzle_velocity), time,
        ))

    def launch(self, sample: PositionVelocityTime):
        """Start a flight from an arbitrary initial state."""
        if sample.time < 0.0:
            raise InvalidTimeStep(f"launch time cannot be negative, got {sample.time}")
        self._trajectory.clear()
        self._trajectory.append(sample)
        self._active = True
        logger.debug("fired from %s at %.1f m/s, t=%.2f",
                     sample.position, sample.velocity.speed, sample.time)

    def advance(self, simulation_time: float) -> bool:
        """
        Step the flight forward to ``simulation_time``.

        Returns False, leaving the trajectory untouched, when the shell is
        idle or ``simulation_time`` is not after the last sample.
        """
        if not self.is_flying:
            return False

        current = self._trajectory.last
        dt = simulation_time - current.time
        if dt <= 0.0:
            return False

        acceleration = total_acceleration(current, self._mass, self._radius)
        sample = PositionVelocityTime(
            current.position.advanced(current.velocity, acceleration, dt),
            current.velocity.accelerated(acceleration, dt),
            simulation_time,
        )
        self._trajectory.append(sample)

        if sample.position.y < 0.0:
            self._active = False
            logger.debug("impact at %s after %.1f s",
                         sample.position, self._trajectory.flight_time)
        return True

    # ── Queries ───────────────────────────────────────────────────────────
    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_flying(self) -> bool:
        return self._active and bool(self._trajectory)

    @property
    def trajectory(self) -> Trajectory:
        """A snapshot of the flight so far; changing it leaves the shell alone."""
        return self._trajectory.copy()

    @property
    def position(self) -> Position:
        last = self._trajectory.last
        return last.position if last else Position()

    @property
    def velocity(self) -> Velocity:
        last = self._trajectory.last
        return last.velocity if last else Velocity()

    @property
    def speed(self) -> float:
        return self.velocity.speed

    @property
    def altitude(self) -> float:
        return max(0.0, self.position.y) if self._trajectory else 0.0

    @property
    def flight_time(self) -> float:
        return self._trajectory.flight_time

    @property
    def max_altitude(self) -> float:
        return self._trajectory.max_altitude

    @property
    def total_distance(self) -> float:
        return self._trajectory.total_distance
