"""
Firing Tables
=============
Range, apex and time of flight for a sweep of elevations at a fixed
muzzle velocity, the way a gun crew's printed table reads.

Each row is one full simulated shot on flat ground using the reference
0.5 s step. A second table at a finer step shows how much the coarse
step costs.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

from .howitzer import DEFAULT_MUZZLE_VELOCITY
from .integrator import REFERENCE_TIME_STEP, ShotResult, simulate_shot
from .projectile import Projectile
from .vectors import Angle, Position


# 0° is straight up, so the useful part of the table starts well away from it
DEFAULT_ELEVATIONS = (15.0, 25.0, 35.0, 45.0, 55.0, 65.0, 75.0, 85.0)


@dataclass
class FiringTableRow:
    """One elevation of a firing table."""
    elevation_deg: float
    range_m: float
    max_altitude_m: float
    flight_time_s: float
    impact_velocity: float
    impact_angle_deg: float


def build_firing_table(muzzle_velocity: float = DEFAULT_MUZZLE_VELOCITY,
                       elevations: Sequence[float] = DEFAULT_ELEVATIONS,
                       dt: float = REFERENCE_TIME_STEP,
                       verbose: bool = True) -> List[FiringTableRow]:
    """
    Simulate one shot per elevation and tabulate the results.

    Returns list of FiringTableRow, in the order of ``elevations``.
    """
    projectile = Projectile()
    rows = []

    if verbose:
        print(f"\n{'='*70}")
        print(f"  FIRING TABLE: M795 HE from M777")
        print(f"  Muzzle velocity: {muzzle_velocity:.0f} m/s | Step: {dt} s")
        print(f"{'='*70}")
        print(f"{'Elev°':>6} {'Range (m)':>11} {'Apex (m)':>10} {'ToF (s)':>9} "
              f"{'Impact v':>10} {'Impact °':>9}")
        print("-" * 70)

    for elev in elevations:
        result = simulate_shot(projectile, Position(0.0, 0.0),
                               Angle.from_degrees(elev), muzzle_velocity, dt=dt)
        row = FiringTableRow(
            elevation_deg=elev,
            range_m=result.range_total,
            max_altitude_m=result.max_altitude,
            flight_time_s=result.flight_time,
            impact_velocity=result.impact_velocity,
            impact_angle_deg=result.impact_angle_deg,
        )
        rows.append(row)
        projectile.reset()

        if verbose:
            print(f"{elev:>6.0f} {row.range_m:>11.0f} {row.max_altitude_m:>10.0f} "
                  f"{row.flight_time_s:>9.1f} {row.impact_velocity:>10.1f} "
                  f"{row.impact_angle_deg:>9.1f}")

    if verbose:
        best = max(rows, key=lambda r: r.range_m)
        print("-" * 70)
        print(f"  Maximum range: {best.range_m/1000:.2f} km at {best.elevation_deg:.0f}°")
        print(f"{'='*70}\n")

    return rows


def sweep_shots(muzzle_velocity: float = DEFAULT_MUZZLE_VELOCITY,
                elevations: Sequence[float] = DEFAULT_ELEVATIONS,
                dt: float = REFERENCE_TIME_STEP) -> Dict[float, ShotResult]:
    """Full ShotResult per elevation, for plotting."""
    results = {}
    for elev in elevations:
        results[elev] = simulate_shot(Projectile(), Position(0.0, 0.0),
                                      Angle.from_degrees(elev),
                                      muzzle_velocity, dt=dt)
    return results


def compare_time_steps(muzzle_velocity: float = DEFAULT_MUZZLE_VELOCITY,
                       elevation_deg: float = 45.0,
                       steps: Sequence[float] = (2.0, 1.0, 0.5, 0.1, 0.02),
                       verbose: bool = True) -> Dict[float, ShotResult]:
    """
    The same shot at several step sizes.

    The finest step is the reference the others are measured against.
    """
    results = {dt: simulate_shot(Projectile(), Position(0.0, 0.0),
                                 Angle.from_degrees(elevation_deg),
                                 muzzle_velocity, dt=dt)
               for dt in steps}
    reference = results[min(steps)]

    if verbose:
        print(f"  {'dt (s)':>8} {'Range (m)':>11} {'Δ Range':>9} {'Apex (m)':>10} {'Samples':>8}")
        for dt in sorted(steps, reverse=True):
            r = results[dt]
            print(f"  {dt:>8.2f} {r.range_total:>11.0f} "
                  f"{r.range_total - reference.range_total:>+9.0f} "
                  f"{r.max_altitude:>10.0f} {len(r.time):>8d}")
        spread = np.ptp([r.range_total for r in results.values()])
        print(f"  Range spread across steps: {spread:.0f} m")

    return results
