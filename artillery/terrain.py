"""
Terrain and Target
==================
A one-dimensional ground profile across the play field with a target
somewhere down-range of the howitzer.

The profile is stored in meters, one sample per horizontal pixel column
of the display. Pixels only decide the sampling density; every query
takes and returns meters.
"""

import logging
from typing import Optional

import numpy as np

from .config import DisplayScale
from .vectors import Position


logger = logging.getLogger(__name__)


MAX_RELIEF_FRACTION = 0.12    # tallest hill as a share of the field height
MIN_TARGET_FRACTION = 0.25    # closest target as a share of the field width
SMOOTHING_COLUMNS   = 25      # moving-average window for the hills
PAD_COLUMNS         = 10      # flattened ground each side of the gun and target


class Ground:
    """
    Random rolling terrain with a howitzer emplacement and a target.

    Parameters
    ----------
    width_px, height_px : float
        Size of the play field in pixels.
    scale : DisplayScale
        Meters per pixel.
    rng : np.random.Generator, optional
        Source of randomness; pass a seeded generator for repeatable
        terrain.
    """

    def __init__(self, width_px: float, height_px: float,
                 scale: Optional[DisplayScale] = None,
                 rng: Optional[np.random.Generator] = None):
        if width_px < 2 or height_px <= 0:
            raise ValueError(
                f"field must be at least 2 px wide and have positive height, "
                f"got {width_px}x{height_px}"
            )
        self.scale = scale or DisplayScale()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.width = int(width_px)
        self.height_m = self.scale.meters(height_px)

        self._heights = np.zeros(self.width)
        self._i_howitzer = 0
        self._i_target = self.width - 1

    # ── Generation ────────────────────────────────────────────────────────
    def _column(self, x_meters: float) -> int:
        column = int(round(x_meters / self.scale.meters_per_pixel))
        return min(max(column, 0), self.width - 1)

    def _generate_profile(self) -> np.ndarray:
        """Smoothed random walk, shifted to start at zero and scaled."""
        slopes = self.rng.normal(0.0, 1.0, self.width + SMOOTHING_COLUMNS)
        walk = np.cumsum(slopes)
        kernel = np.ones(SMOOTHING_COLUMNS) / SMOOTHING_COLUMNS
        smooth = np.convolve(walk, kernel, mode='valid')[:self.width]
        smooth -= smooth.min()
        relief = smooth.max()
        if relief > 0.0:
            smooth *= MAX_RELIEF_FRACTION * self.height_m / relief
        return smooth

    def _pick_target(self) -> int:
        """A column down-range (to the right) of the howitzer."""
        gap = max(1, int(MIN_TARGET_FRACTION * self.width))
        first = self._i_howitzer + gap
        if first >= self.width - 1:
            return self.width - 1
        return int(self.rng.integers(first, self.width))

    def _level(self, column: int):
        """Flat pad centred on ``column``."""
        lo = max(0, column - PAD_COLUMNS)
        hi = min(self.width, column + PAD_COLUMNS + 1)
        self._heights[lo:hi] = self._heights[column]

    def reset(self, howitzer_position: Position) -> Position:
        """
        Generate new terrain around the howitzer.

        Returns the howitzer position moved onto the ground surface.
        """
        self._heights = self._generate_profile()
        self._i_howitzer = self._column(howitzer_position.x)
        self._i_target = self._pick_target()

        self._level(self._i_howitzer)
        self._level(self._i_target)

        logger.debug("terrain reset: howitzer column %d, target column %d",
                     self._i_howitzer, self._i_target)
        return Position(howitzer_position.x,
                        float(self._heights[self._i_howitzer]))

    # ── Queries ───────────────────────────────────────────────────────────
    @property
    def heights(self) -> np.ndarray:
        """Ground elevation (m) per pixel column; a read-only view."""
        view = self._heights.view()
        view.flags.writeable = False
        return view

    @property
    def width_m(self) -> float:
        return self.scale.meters(self.width - 1)

    @property
    def target(self) -> Position:
        return Position(self.scale.meters(self._i_target),
                        float(self._heights[self._i_target]))

    @property
    def howitzer_column(self) -> int:
        return self._i_howitzer

    @property
    def target_column(self) -> int:
        return self._i_target

    def ground_height(self, column: int) -> float:
        """Elevation (m) of one pixel column, clamped to the field."""
        column = min(max(int(column), 0), self.width - 1)
        return float(self._heights[column])

    def elevation_at(self, position: Position) -> float:
        """Ground elevation (m) below ``position``, linear between columns."""
        column = position.x / self.scale.meters_per_pixel
        return float(np.interp(column, np.arange(self.width), self._heights))

    def height_above_ground(self, position: Position) -> float:
        return position.y - self.elevation_at(position)

    def is_valid_position(self, position: Position) -> bool:
        """Inside the field horizontally, not underground, not above the top."""
        return (0.0 <= position.x <= self.width_m
                and self.elevation_at(position) <= position.y <= self.height_m)
