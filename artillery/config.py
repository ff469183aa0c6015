"""
Simulation Configuration
========================
Process-wide settings for the orchestrator and the rendering boundary.

The physics core never imports this module: it works in meters and
seconds only. The display scale is applied exclusively by the drawing
code, and is expected to be chosen once at start-up.
"""

from dataclasses import dataclass, field
from typing import Tuple

from .vectors import Position


# ── Simulation constants ──────────────────────────────────────────────────
TIME_STEP         = 0.5      # s   simulated time per orchestrator tick
HIT_TOLERANCE     = 175.0    # m   impact distance that counts as a hit
TRAIL_LENGTH      = 20       # positions kept for the tracer trail
METERS_PER_PIXEL  = 40.0     # m   one screen pixel
FIELD_WIDTH_PX    = 700.0
FIELD_HEIGHT_PX   = 500.0


@dataclass(frozen=True)
class DisplayScale:
    """
    Conversion between physics meters and screen pixels.
    """
    meters_per_pixel: float = METERS_PER_PIXEL

    def __post_init__(self):
        if self.meters_per_pixel <= 0.0:
            raise ValueError(
                f"meters_per_pixel must be positive, got {self.meters_per_pixel}"
            )

    def to_pixels(self, position: Position) -> Tuple[float, float]:
        return (position.x / self.meters_per_pixel,
                position.y / self.meters_per_pixel)

    def from_pixels(self, x_pixels: float, y_pixels: float) -> Position:
        return Position(x_pixels * self.meters_per_pixel,
                        y_pixels * self.meters_per_pixel)

    def meters(self, pixels: float) -> float:
        return pixels * self.meters_per_pixel


@dataclass
class SimulationConfig:
    """
    Everything the orchestrator needs to run a game.
    """
    time_step: float = TIME_STEP
    hit_tolerance: float = HIT_TOLERANCE
    trail_length: int = TRAIL_LENGTH
    field_width_px: float = FIELD_WIDTH_PX
    field_height_px: float = FIELD_HEIGHT_PX
    scale: DisplayScale = field(default_factory=DisplayScale)

    @property
    def field_width_m(self) -> float:
        return self.scale.meters(self.field_width_px)

    @property
    def field_height_m(self) -> float:
        return self.scale.meters(self.field_height_px)

    @property
    def upper_right(self) -> Position:
        """Top-right corner of the play field, in meters."""
        return self.scale.from_pixels(self.field_width_px, self.field_height_px)
