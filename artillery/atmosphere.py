"""
Standard Atmosphere Lookup Tables
=================================
Gravity, air density and speed of sound as functions of altitude,
read from fixed empirical tables (sea level through 80 km) with
piecewise-linear interpolation.

Below the first knot or above the last knot the value clamps to the
nearest endpoint; no extrapolation is performed.

Reference: U.S. Standard Atmosphere, 1976 (rounded values)
"""

from bisect import bisect_right
from typing import Dict, Iterable, Iterator, Sequence, Tuple

import numpy as np

from .errors import InvalidPhysicalParameter, MalformedLookupTable


# ══════════════════════════════════════════════════════════════════════════
#  Piecewise-linear lookup
# ══════════════════════════════════════════════════════════════════════════

def linear_interpolation(d0: float, r0: float, d1: float, r1: float,
                         d: float) -> float:
    """
    Two-point linear interpolation.

        r = r0 + (r1 - r0) * (d - d0) / (d1 - d0)
    """
    if d1 == d0:
        raise MalformedLookupTable(f"degenerate interval at domain {d0}")
    return r0 + (r1 - r0) * (d - d0) / (d1 - d0)


class LookupTable:
    """
    Immutable ordered table of (domain, range) pairs.

    Calling the table with a domain value returns the interpolated range.
    Results are exact at knot points and clamp outside the table.
    """

    __slots__ = ('_domains', '_ranges', 'name')

    def __init__(self, pairs: Iterable[Tuple[float, float]], name: str = ''):
        pairs = [(float(d), float(r)) for d, r in pairs]
        if not pairs:
            raise MalformedLookupTable(f"lookup table {name!r} is empty")
        for (d0, _), (d1, _) in zip(pairs, pairs[1:]):
            if not d1 > d0:
                raise MalformedLookupTable(
                    f"lookup table {name!r} domains must be strictly "
                    f"increasing ({d0} followed by {d1})"
                )
        self._domains = tuple(d for d, _ in pairs)
        self._ranges = tuple(r for _, r in pairs)
        self.name = name

    @property
    def domains(self) -> Tuple[float, ...]:
        return self._domains

    @property
    def ranges(self) -> Tuple[float, ...]:
        return self._ranges

    def __len__(self) -> int:
        return len(self._domains)

    def __iter__(self) -> Iterator[Tuple[float, float]]:
        return iter(zip(self._domains, self._ranges))

    def __repr__(self) -> str:
        return (f"LookupTable({self.name!r}, {len(self)} knots, "
                f"{self._domains[0]}..{self._domains[-1]})")

    def __call__(self, domain: float) -> float:
        domains, ranges = self._domains, self._ranges
        if domain <= domains[0]:
            return ranges[0]
        if domain >= domains[-1]:
            return ranges[-1]

        # domains[left] <= domain < domains[left + 1]
        left = bisect_right(domains, domain) - 1
        return linear_interpolation(domains[left], ranges[left],
                                    domains[left + 1], ranges[left + 1],
                                    domain)

    def sample(self, domain_array: Sequence[float]) -> np.ndarray:
        """Vectorized lookup for plotting and reports."""
        return np.interp(np.asarray(domain_array, dtype=float),
                         self._domains, self._ranges)


# ══════════════════════════════════════════════════════════════════════════
#  Atmospheric tables — (altitude m, value)
# ══════════════════════════════════════════════════════════════════════════

GRAVITY_TABLE = LookupTable([
    (0.0,     9.807),
    (1000.0,  9.804),
    (2000.0,  9.801),
    (3000.0,  9.797),
    (4000.0,  9.794),
    (5000.0,  9.791),
    (6000.0,  9.788),
    (7000.0,  9.785),
    (8000.0,  9.782),
    (9000.0,  9.779),
    (10000.0, 9.776),
    (15000.0, 9.761),
    (20000.0, 9.745),
    (25000.0, 9.730),
    (30000.0, 9.715),
    (40000.0, 9.684),
    (50000.0, 9.654),
    (60000.0, 9.624),
    (70000.0, 9.594),
    (80000.0, 9.564),
], name='gravity')

# Falls off roughly exponentially
DENSITY_TABLE = LookupTable([
    (0.0,     1.225),
    (1000.0,  1.112),
    (2000.0,  1.007),
    (3000.0,  0.9093),
    (4000.0,  0.8194),
    (5000.0,  0.7364),
    (6000.0,  0.6601),
    (7000.0,  0.5900),
    (8000.0,  0.5258),
    (9000.0,  0.4671),
    (10000.0, 0.4135),
    (15000.0, 0.1948),
    (20000.0, 0.08891),
    (25000.0, 0.04008),
    (30000.0, 0.01841),
    (40000.0, 0.003996),
    (50000.0, 0.001027),
    (60000.0, 0.0003097),
    (70000.0, 0.0000828),
    (80000.0, 0.0000185),
], name='density')

# Dips through the tropopause, rises in the stratosphere, falls again
SPEED_OF_SOUND_TABLE = LookupTable([
    (0.0,     340.0),
    (1000.0,  336.0),
    (2000.0,  332.0),
    (3000.0,  328.0),
    (4000.0,  324.0),
    (5000.0,  320.0),
    (6000.0,  316.0),
    (7000.0,  312.0),
    (8000.0,  308.0),
    (9000.0,  303.0),
    (10000.0, 299.0),
    (15000.0, 295.0),
    (20000.0, 295.0),
    (25000.0, 295.0),
    (30000.0, 305.0),
    (40000.0, 324.0),
    (50000.0, 337.0),
    (60000.0, 319.0),
    (70000.0, 289.0),
    (80000.0, 269.0),
], name='speed_of_sound')


def gravity_from_altitude(altitude: float) -> float:
    """Gravitational acceleration (m/s²), 9.807 at sea level."""
    return GRAVITY_TABLE(altitude)


def density_from_altitude(altitude: float) -> float:
    """Air density (kg/m³)."""
    return DENSITY_TABLE(altitude)


def speed_sound_from_altitude(altitude: float) -> float:
    """Local speed of sound (m/s)."""
    return SPEED_OF_SOUND_TABLE(altitude)


def mach_from_speed(speed: float, altitude: float) -> float:
    """
    Mach number = speed / a(h).
    """
    a = speed_sound_from_altitude(altitude)
    if a <= 0.0:
        raise InvalidPhysicalParameter(
            f"speed of sound must be positive, got {a} at {altitude} m"
        )
    return speed / a


# ── Vectorized profile for plotting ───────────────────────────────────────
def atmosphere_profile(alt_array: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Compute the atmospheric profile for an array of altitudes.
    Returns dict with keys: 'altitude', 'gravity', 'density', 'speed_of_sound'.
    """
    alt_array = np.asarray(alt_array, dtype=float)
    return {
        'altitude': alt_array,
        'gravity': GRAVITY_TABLE.sample(alt_array),
        'density': DENSITY_TABLE.sample(alt_array),
        'speed_of_sound': SPEED_OF_SOUND_TABLE.sample(alt_array),
    }


if __name__ == "__main__":
    print("Standard Atmosphere Tables")
    print("=" * 48)
    print(f"{'Alt (m)':>10} {'g (m/s²)':>10} {'ρ (kg/m³)':>12} {'a (m/s)':>10}")
    print("-" * 48)
    for h in [0, 1000, 5000, 10000, 20000, 40000, 80000]:
        print(f"{h:>10.0f} {gravity_from_altitude(h):>10.3f} "
              f"{density_from_altitude(h):>12.5f} {speed_sound_from_altitude(h):>10.1f}")
