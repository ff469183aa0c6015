"""
Firing Platform — M777 Howitzer
===============================
Holds the gun's position, elevation and muzzle velocity and hands a
firing solution to ``Projectile.fire``.

Elevation is an Angle in the core's convention (0 = barrel straight up,
clockwise positive, so the gun points down-range to the right). It is
restricted to a configured sub-range, [0°, 85°] by default. Every
change is a clamped addition: moving past a bound stops exactly at the
bound, never wraps and never fails.

Range estimation re-uses the fixed-step flight driver, so the numbers
reported here are the ones the game loop will actually produce.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from scipy.optimize import brentq, minimize_scalar

from .integrator import REFERENCE_TIME_STEP, simulate_shot
from .projectile import Projectile
from .vectors import Angle, Position, Velocity


logger = logging.getLogger(__name__)


# ── M777 defaults ─────────────────────────────────────────────────────────
DEFAULT_MUZZLE_VELOCITY = 827.0    # m/s
DEFAULT_ELEVATION_ANGLE = 45.0     # degrees
MIN_ELEVATION_ANGLE     = 0.0      # degrees
MAX_ELEVATION_ANGLE     = 85.0     # degrees
BARREL_LENGTH           = 6.0      # m


@dataclass(frozen=True)
class HowitzerConfig:
    """Operational limits of the gun."""
    min_elevation: float = MIN_ELEVATION_ANGLE
    max_elevation: float = MAX_ELEVATION_ANGLE
    default_elevation: float = DEFAULT_ELEVATION_ANGLE
    default_muzzle_velocity: float = DEFAULT_MUZZLE_VELOCITY
    barrel_length: float = BARREL_LENGTH

    def __post_init__(self):
        if not 0.0 <= self.min_elevation <= self.max_elevation < 180.0:
            raise ValueError(
                f"elevation limits must satisfy 0 <= min <= max < 180, "
                f"got [{self.min_elevation}, {self.max_elevation}]"
            )
        if self.default_muzzle_velocity <= 0.0:
            raise ValueError(
                f"default muzzle velocity must be positive, "
                f"got {self.default_muzzle_velocity}"
            )

    def clamp(self, degrees: float) -> float:
        return min(max(degrees, self.min_elevation), self.max_elevation)


def _signed_degrees(angle: Angle) -> float:
    """Angle in degrees on (-180, 180], so a few degrees left of up is negative."""
    degrees = angle.degrees
    return degrees - 360.0 if degrees > 180.0 else degrees


class Howitzer:
    """
    An M777 155 mm howitzer.

    Parameters
    ----------
    muzzle_velocity : float, optional
        Initial muzzle velocity in m/s (default from config).
    elevation : float, optional
        Initial elevation in degrees (default from config), clamped.
    position : Position, optional
        Location of the gun in meters.
    config : HowitzerConfig, optional
        Elevation limits and defaults.
    """

    def __init__(self, muzzle_velocity: Optional[float] = None,
                 elevation: Optional[float] = None,
                 position: Optional[Position] = None,
                 config: Optional[HowitzerConfig] = None):
        self.config = config or HowitzerConfig()
        self._position = position if position is not None else Position()
        self._muzzle_velocity = self.config.default_muzzle_velocity
        self._elevation = Angle.from_degrees(self.config.default_elevation)
        self._last_fire_time = -1.0
        self._rounds_fired = 0

        if muzzle_velocity is not None:
            self.set_muzzle_velocity(muzzle_velocity)
        self.set_elevation(self.config.default_elevation
                           if elevation is None else elevation)

    def __repr__(self) -> str:
        return (f"Howitzer(position={self._position}, "
                f"elevation={self._elevation}, "
                f"muzzle_velocity={self._muzzle_velocity:.1f} m/s)")

    # ── Position ──────────────────────────────────────────────────────────
    @property
    def position(self) -> Position:
        return self._position

    @position.setter
    def position(self, value: Position):
        self._position = value

    def generate_position(self, field_width_m: float,
                          rng: Optional[np.random.Generator] = None) -> Position:
        """Pick a new ground-level spot between 10 % and 90 % of the field."""
        rng = rng if rng is not None else np.random.default_rng()
        x = rng.uniform(0.1 * field_width_m, 0.9 * field_width_m)
        self._position = Position(float(x), 0.0)
        return self._position

    # ── Muzzle velocity ───────────────────────────────────────────────────
    @property
    def muzzle_velocity(self) -> float:
        return self._muzzle_velocity

    def set_muzzle_velocity(self, velocity: float):
        """Non-positive values are ignored."""
        if velocity > 0.0:
            self._muzzle_velocity = velocity

    def can_fire(self) -> bool:
        return self._muzzle_velocity > 0.0

    # ── Elevation ─────────────────────────────────────────────────────────
    @property
    def elevation(self) -> Angle:
        return self._elevation

    def set_elevation(self, value: Union[Angle, float]):
        """Set from an Angle or from degrees, clamped to the allowed range."""
        if isinstance(value, Angle):
            degrees = _signed_degrees(value)
        else:
            degrees = float(value)
        self._elevation = Angle.from_degrees(self.config.clamp(degrees))

    def rotate(self, delta_radians: float):
        """Turn the barrel clockwise by ``delta_radians`` (clamped)."""
        self.raise_elevation(math.degrees(delta_radians))

    def raise_elevation(self, delta_degrees: float):
        """Add ``delta_degrees`` to the elevation (clamped)."""
        self.set_elevation(_signed_degrees(self._elevation) + delta_degrees)

    def set_max_elevation(self):
        self.set_elevation(self.config.max_elevation)

    def set_min_elevation(self):
        self.set_elevation(self.config.min_elevation)

    def set_horizontal(self):
        # as close to 0° as the limits allow
        self.set_elevation(0.0)

    # ── Firing bookkeeping ────────────────────────────────────────────────
    @property
    def rounds_fired(self) -> int:
        return self._rounds_fired

    @property
    def last_fire_time(self) -> float:
        """Time of the last shot, -1.0 if the gun has never fired."""
        return self._last_fire_time

    def record_firing(self, time: float):
        self._last_fire_time = time
        self._rounds_fired += 1

    def firing_solution(self) -> Tuple[Position, Angle, float]:
        """(position, elevation, muzzle velocity) for ``Projectile.fire``."""
        return self._position, self._elevation, self._muzzle_velocity

    # ── Geometry ──────────────────────────────────────────────────────────
    @property
    def barrel_length(self) -> float:
        return self.config.barrel_length

    @property
    def muzzle_position(self) -> Position:
        """Tip of the barrel."""
        return self._position.add_meters(
            self.config.barrel_length * self._elevation.dx,
            self.config.barrel_length * self._elevation.dy,
        )

    @property
    def muzzle_velocity_vector(self) -> Velocity:
        return Velocity.from_angle(self._elevation, self._muzzle_velocity)

    # ── Range estimation ──────────────────────────────────────────────────
    def _flat_range(self, degrees: float, dt: float) -> float:
        """Down-range distance where the shell crosses the launch plane."""
        result = simulate_shot(Projectile(), Position(0.0, 0.0),
                               Angle.from_degrees(degrees),
                               self._muzzle_velocity, dt=dt)
        x, y = result.x, result.y
        if len(x) < 2 or not result.landed:
            return float(abs(x[-1]))
        # interpolate between the last sample above and the first below
        fraction = y[-2] / (y[-2] - y[-1]) if y[-2] != y[-1] else 1.0
        return float(abs(x[-2] + fraction * (x[-1] - x[-2])))

    def estimate_range(self, dt: float = REFERENCE_TIME_STEP) -> float:
        """Flat-ground range at the current elevation and muzzle velocity (m)."""
        return self._flat_range(self._elevation.degrees, dt)

    def estimate_angle_for_range(self, range_m: float,
                                 dt: float = REFERENCE_TIME_STEP) -> Optional[Angle]:
        """
        Elevation that lands a shell ``range_m`` meters down-range on flat
        ground.

        Range rises from zero (barrel straight up) to a peak and falls
        again toward the flattest allowed elevation, so there are usually
        two answers. The flatter one (shorter flight) is preferred.

        Returns
        -------
        Angle or None
            None when ``range_m`` is negative or beyond the maximum range.
        """
        lo, hi = self.config.min_elevation, self.config.max_elevation
        if range_m < 0.0:
            return None

        def miss(degrees: float) -> float:
            return self._flat_range(degrees, dt) - range_m

        peak = minimize_scalar(lambda d: -self._flat_range(d, dt),
                               bounds=(lo, hi), method='bounded',
                               options={'xatol': 0.05})
        peak_deg = float(peak.x)
        peak_miss = miss(peak_deg)
        if peak_miss < 0.0:
            logger.debug("range %.0f m beyond maximum %.0f m",
                         range_m, peak_miss + range_m)
            return None
        if peak_miss == 0.0:
            return Angle.from_degrees(peak_deg)

        # flat branch first, then the lob
        for edge in (hi, lo):
            miss_edge = miss(edge)
            if miss_edge == 0.0:
                return Angle.from_degrees(edge)
            if miss_edge < 0.0:
                degrees = brentq(miss, min(edge, peak_deg), max(edge, peak_deg),
                                 xtol=1e-3)
                return Angle.from_degrees(degrees)
        return None

    # ── Lifecycle ─────────────────────────────────────────────────────────
    def reset(self):
        """Default elevation and muzzle velocity, no rounds fired."""
        self._elevation = Angle.from_degrees(self.config.default_elevation)
        self._muzzle_velocity = self.config.default_muzzle_velocity
        self._last_fire_time = -1.0
        self._rounds_fired = 0
