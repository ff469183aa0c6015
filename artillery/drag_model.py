"""
Aerodynamic Drag Model
======================
Mach-dependent drag coefficient for the M795 155 mm high-explosive
shell, and the point-mass force helpers that turn it into a
deceleration.

The Cd vs Mach curve is empirical and non-monotonic: it climbs through
the subsonic range, peaks just above Mach 1 (0.4483 at Mach 1.06) and
settles back down in the supersonic regime.

    F_drag = ½ ρ Cd A v²
    a_drag = F_drag / m
"""

import math

import numpy as np

from .atmosphere import LookupTable
from .errors import InvalidPhysicalParameter, InvalidTimeStep


# ══════════════════════════════════════════════════════════════════════════
#  Cd vs Mach — M795 (Mach, Cd)
# ══════════════════════════════════════════════════════════════════════════

M795_DRAG_TABLE = LookupTable([
    (0.0,  0.0),
    (0.1,  0.0543),
    (0.3,  0.1629),
    (0.5,  0.1659),
    (0.7,  0.2031),
    (0.89, 0.2597),
    (0.92, 0.3010),
    (0.96, 0.3287),
    (0.98, 0.4002),
    (1.00, 0.4258),    # sonic
    (1.02, 0.4335),
    (1.06, 0.4483),    # transonic peak
    (1.24, 0.4064),
    (1.53, 0.3663),
    (1.99, 0.2897),
    (2.87, 0.2297),
    (2.89, 0.2306),
    (5.00, 0.2656),
], name='m795_drag')

# M795 shell specification
M795_MASS   = 46.7        # kg
M795_RADIUS = 0.077545    # m  (155 mm caliber)


def drag_from_mach(mach: float) -> float:
    """Drag coefficient (dimensionless) at the given Mach number."""
    return M795_DRAG_TABLE(mach)


def drag_curve(mach_array: np.ndarray) -> np.ndarray:
    """Vectorized Cd lookup."""
    return M795_DRAG_TABLE.sample(mach_array)


def area_from_radius(radius: float) -> float:
    """Cross-sectional area π r² (m²)."""
    if radius < 0.0:
        raise InvalidPhysicalParameter(f"radius cannot be negative, got {radius}")
    return math.pi * radius * radius


def force_from_drag(density: float, drag: float, radius: float,
                    speed: float) -> float:
    """
    Drag force magnitude (N).

    Parameters
    ----------
    density : float
        Air density (kg/m³)
    drag : float
        Drag coefficient (dimensionless)
    radius : float
        Shell radius (m)
    speed : float
        Speed magnitude (m/s), never a signed component

    Returns
    -------
    float
        ½ ρ Cd π r² v²
    """
    for label, value in (('density', density), ('drag coefficient', drag),
                         ('radius', radius), ('speed', speed)):
        if value < 0.0:
            raise InvalidPhysicalParameter(f"{label} cannot be negative, got {value}")
    return 0.5 * density * drag * area_from_radius(radius) * (speed * speed)


def acceleration_from_force(force: float, mass: float) -> float:
    """a = F / m."""
    if mass <= 0.0:
        raise InvalidPhysicalParameter(f"mass must be positive, got {mass}")
    return force / mass


def velocity_from_acceleration(acceleration: float, time: float) -> float:
    """Velocity imparted by a constant acceleration over ``time`` seconds."""
    if time < 0.0:
        raise InvalidTimeStep(f"time cannot be negative, got {time}")
    return acceleration * time
