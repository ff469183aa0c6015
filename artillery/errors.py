"""
Error Types
===========
Precondition violations raised by the ballistic core.

All of them derive from ``ValueError`` so callers that already guard
argument validation with ``except ValueError`` keep working.
"""


class BallisticsError(ValueError):
    """Base class for every contract violation in the simulator."""


class InvalidTimeStep(BallisticsError):
    """A negative (or, where required, non-positive) time delta or timestamp."""


class InvalidPhysicalParameter(BallisticsError):
    """Negative mass, radius, density, speed or similar physical quantity."""


class MalformedLookupTable(BallisticsError):
    """Empty table, or domains that are not strictly increasing."""
