"""
Vector Primitives
=================
Two-dimensional kinematic quantities used by the ballistic core:

  - Angle         direction in radians, normalized to [0, 2π)
  - Position      (x, y) meters
  - Velocity      (dx, dy) meters/second
  - Acceleration  (ddx, ddy) meters/second²

Coordinate system:
  x = horizontal range (right positive)
  y = altitude above the launch plane (up positive)

Angles are measured from straight up, clockwise positive:

            dx
        +-------/
        |      /
     dy |     /  magnitude
        |  θ /
        |   /
        |  /
        | /

    dx = magnitude · sin θ
    dy = magnitude · cos θ

All values are immutable; arithmetic returns new instances. Equality is
tolerance based, so the types are deliberately unhashable and cannot be
set members or dict keys.
"""

import math
from dataclasses import dataclass
from typing import Iterator, Tuple

from .errors import InvalidPhysicalParameter, InvalidTimeStep


TWO_PI = 2.0 * math.pi

VECTOR_EPSILON = 1e-10   # component tolerance for Position/Velocity/Acceleration
ANGLE_EPSILON  = 1e-6    # radians


def normalize(radians: float) -> float:
    """Wrap any finite angle into [0, 2π)."""
    if not math.isfinite(radians):
        raise ValueError(f"cannot normalize non-finite angle {radians}")
    radians = math.fmod(radians, TWO_PI)
    if radians < 0.0:
        radians += TWO_PI
    # a tiny negative remainder rounds up to exactly 2π
    if radians >= TWO_PI:
        radians = 0.0
    return radians + 0.0   # folds -0.0 into 0.0


def _check_dt(dt: float):
    if dt < 0.0:
        raise InvalidTimeStep(f"time delta cannot be negative, got {dt}")


def _check_magnitude(magnitude: float):
    if magnitude < 0.0:
        raise InvalidPhysicalParameter(f"magnitude cannot be negative, got {magnitude}")


# ══════════════════════════════════════════════════════════════════════════
#  Angle
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class Angle:
    """Direction in radians; 0 is straight up, increasing clockwise."""
    radians: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'radians', normalize(float(self.radians)))

    @classmethod
    def from_degrees(cls, degrees: float) -> 'Angle':
        return cls(math.radians(degrees))

    @classmethod
    def from_components(cls, dx: float, dy: float) -> 'Angle':
        """Direction of the (dx, dy) vector."""
        return cls(math.atan2(dx, dy))

    @classmethod
    def up(cls) -> 'Angle':
        return cls(0.0)

    @classmethod
    def right(cls) -> 'Angle':
        return cls(math.pi / 2.0)

    @classmethod
    def down(cls) -> 'Angle':
        return cls(math.pi)

    @classmethod
    def left(cls) -> 'Angle':
        return cls(1.5 * math.pi)

    @property
    def degrees(self) -> float:
        return math.degrees(self.radians)

    @property
    def dx(self) -> float:
        return math.sin(self.radians)

    @property
    def dy(self) -> float:
        return math.cos(self.radians)

    def is_right(self) -> bool:
        return 0.0 < self.radians < math.pi

    def is_left(self) -> bool:
        return math.pi < self.radians < TWO_PI

    def rotated(self, delta_radians: float) -> 'Angle':
        return Angle(self.radians + delta_radians)

    def add_degrees(self, delta_degrees: float) -> 'Angle':
        return Angle(self.radians + math.radians(delta_degrees))

    def add(self, other: 'Angle') -> 'Angle':
        return Angle(self.radians + other.radians)

    def difference(self, other: 'Angle') -> 'Angle':
        return Angle(self.radians - other.radians)

    def reversed(self) -> 'Angle':
        """The opposite direction."""
        return Angle(self.radians + math.pi)

    def opposite(self) -> 'Angle':
        return self.reversed()

    def shortest_rotation_to(self, target: 'Angle') -> float:
        """
        Signed rotation in radians, wrapped to [-π, π].
        Positive means turning clockwise.
        """
        diff = target.radians - self.radians
        while diff > math.pi:
            diff -= TWO_PI
        while diff < -math.pi:
            diff += TWO_PI
        return diff

    def is_clockwise_to(self, target: 'Angle') -> bool:
        return self.shortest_rotation_to(target) > 0.0

    def is_counterclockwise_to(self, target: 'Angle') -> bool:
        return self.shortest_rotation_to(target) < 0.0

    def __eq__(self, other):
        if not isinstance(other, Angle):
            return NotImplemented
        return abs(self.shortest_rotation_to(other)) < ANGLE_EPSILON

    # no hash is consistent with tolerance equality
    __hash__ = None

    def __str__(self) -> str:
        return f"{self.degrees:.1f}°"


# ══════════════════════════════════════════════════════════════════════════
#  Cartesian quantities
# ══════════════════════════════════════════════════════════════════════════

class _Components:
    """Shared arithmetic for the two-component value types."""

    def _pair(self) -> Tuple[float, float]:
        raise NotImplementedError

    def __iter__(self) -> Iterator[float]:
        return iter(self._pair())

    def add(self, other):
        a0, a1 = self._pair()
        b0, b1 = other._pair()
        return type(self)(a0 + b0, a1 + b1)

    def difference(self, other):
        a0, a1 = self._pair()
        b0, b1 = other._pair()
        return type(self)(a0 - b0, a1 - b1)

    def scale(self, factor: float):
        a0, a1 = self._pair()
        return type(self)(a0 * factor, a1 * factor)

    def reversed(self):
        return self.scale(-1.0)

    def is_zero(self) -> bool:
        a0, a1 = self._pair()
        return abs(a0) < VECTOR_EPSILON and abs(a1) < VECTOR_EPSILON

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        a0, a1 = self._pair()
        b0, b1 = other._pair()
        return abs(a0 - b0) < VECTOR_EPSILON and abs(a1 - b1) < VECTOR_EPSILON

    __hash__ = None


@dataclass(frozen=True, eq=False)
class Acceleration(_Components):
    """Acceleration in m/s²."""
    ddx: float = 0.0
    ddy: float = 0.0

    def _pair(self):
        return self.ddx, self.ddy

    @classmethod
    def from_angle(cls, angle: Angle, magnitude: float) -> 'Acceleration':
        _check_magnitude(magnitude)
        return cls(magnitude * angle.dx, magnitude * angle.dy)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.ddx, self.ddy)


@dataclass(frozen=True, eq=False)
class Velocity(_Components):
    """Velocity in m/s."""
    dx: float = 0.0
    dy: float = 0.0

    def _pair(self):
        return self.dx, self.dy

    @classmethod
    def from_angle(cls, angle: Angle, magnitude: float) -> 'Velocity':
        """Polar to Cartesian: dx = |v| sin θ, dy = |v| cos θ."""
        _check_magnitude(magnitude)
        return cls(magnitude * angle.dx, magnitude * angle.dy)

    @property
    def speed(self) -> float:
        return math.sqrt(self.dx * self.dx + self.dy * self.dy)

    @property
    def angle(self) -> Angle:
        return Angle.from_components(self.dx, self.dy)

    def kinetic_energy(self, mass: float) -> float:
        """½ m v² (J)."""
        if mass <= 0.0:
            raise InvalidPhysicalParameter(f"mass must be positive, got {mass}")
        return 0.5 * mass * (self.dx * self.dx + self.dy * self.dy)

    def accelerated(self, acceleration: Acceleration, dt: float) -> 'Velocity':
        """v' = v + a·Δt"""
        _check_dt(dt)
        return Velocity(self.dx + acceleration.ddx * dt,
                        self.dy + acceleration.ddy * dt)


@dataclass(frozen=True, eq=False)
class Position(_Components):
    """Location in meters; y is altitude."""
    x: float = 0.0
    y: float = 0.0

    def _pair(self):
        return self.x, self.y

    def add_meters(self, dx: float, dy: float) -> 'Position':
        return Position(self.x + dx, self.y + dy)

    def distance_to(self, other: 'Position') -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def is_origin(self) -> bool:
        return self.is_zero()

    def advanced(self, velocity: Velocity, acceleration: Acceleration,
                 dt: float) -> 'Position':
        """
        s' = s + v·Δt + ½·a·Δt²
        """
        _check_dt(dt)
        return Position(
            self.x + velocity.dx * dt + 0.5 * acceleration.ddx * dt * dt,
            self.y + velocity.dy * dt + 0.5 * acceleration.ddy * dt * dt,
        )

    def __str__(self) -> str:
        return f"({self.x:.1f}m, {self.y:.1f}m)"
