"""
Simulation Orchestrator
=======================
One game of artillery: a howitzer on random terrain, a target, and a
single shell in flight at a time.

The orchestrator owns the clock. Each ``update`` advances simulated
time by a fixed tick (0.5 s by default), steps the shell, records the
tracer trail and checks for ground contact. On contact a shell within
HIT_TOLERANCE meters of the target scores a hit and new terrain is
generated.

Keyboard handling is outside this package; ``handle_command`` accepts
the command names an input layer would translate key presses into.
"""

import logging
import math
from collections import deque
from typing import Optional, Tuple

import numpy as np

from .config import SimulationConfig
from .errors import InvalidTimeStep
from .howitzer import Howitzer
from .projectile import Projectile
from .terrain import Ground
from .vectors import Position


logger = logging.getLogger(__name__)


ROTATE_STEP = 0.05     # radians per 'left' / 'right' command
RAISE_STEP  = 0.003    # radians per 'up' / 'down' command

COMMANDS = ('left', 'right', 'up', 'down', 'fire')


class Simulator:
    """
    Headless game state: ground, howitzer, projectile, score.

    Parameters
    ----------
    config : SimulationConfig, optional
        Tick length, hit tolerance, trail length and field size.
    rng : np.random.Generator, optional
        Randomness for terrain and emplacement.
    """

    def __init__(self, config: Optional[SimulationConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

        self.ground = Ground(self.config.field_width_px,
                             self.config.field_height_px,
                             self.config.scale, self.rng)
        self.howitzer = Howitzer()
        self.projectile = Projectile()

        self._time = 0.0
        self._firing = False
        self._hit = False
        self._score = 0
        self._shots_attempted = 0
        self._last_impact: Optional[Position] = None
        self._trail = deque(maxlen=self.config.trail_length)

        # start in the middle of the field
        start = Position(self.config.field_width_m / 2.0, 0.0)
        self.howitzer.position = self.ground.reset(start)

    # ── State ─────────────────────────────────────────────────────────────
    @property
    def time(self) -> float:
        """Simulated seconds since the current shell was fired."""
        return self._time

    @property
    def is_firing(self) -> bool:
        return self._firing

    @property
    def is_hit(self) -> bool:
        """Whether the last completed shot hit the target."""
        return self._hit

    @property
    def score(self) -> int:
        return self._score

    @property
    def shots_attempted(self) -> int:
        return self._shots_attempted

    @property
    def hit_rate(self) -> float:
        if self._shots_attempted == 0:
            return 0.0
        return self._score / self._shots_attempted

    @property
    def last_impact(self) -> Optional[Position]:
        return self._last_impact

    @property
    def trail(self) -> Tuple[Position, ...]:
        """Most recent shell positions, newest first."""
        return tuple(self._trail)

    # ── Commands ──────────────────────────────────────────────────────────
    def fire(self) -> bool:
        """Fire a new shell. Ignored while one is already in flight."""
        if self._firing or not self.howitzer.can_fire():
            return False

        self._time = 0.0
        self._shots_attempted += 1
        position, elevation, muzzle_velocity = self.howitzer.firing_solution()
        self.projectile.fire(position, elevation, muzzle_velocity, self._time)
        self.howitzer.record_firing(self._time)
        self._firing = True
        self._hit = False
        self._trail.clear()
        logger.debug("shot %d fired at %s", self._shots_attempted, elevation)
        return True

    def handle_command(self, name: str):
        """Apply one input command: left, right, up, down or fire."""
        if name == 'right':
            self.howitzer.rotate(ROTATE_STEP)
        elif name == 'left':
            self.howitzer.rotate(-ROTATE_STEP)
        elif name == 'up':
            # toward vertical
            self.howitzer.raise_elevation(-math.degrees(RAISE_STEP))
        elif name == 'down':
            self.howitzer.raise_elevation(math.degrees(RAISE_STEP))
        elif name == 'fire':
            self.fire()
        else:
            raise ValueError(f"unknown command {name!r}, expected one of {COMMANDS}")

    # ── Clock ─────────────────────────────────────────────────────────────
    def update(self, time_step: Optional[float] = None):
        """Advance the shell by one tick and resolve ground contact."""
        if time_step is None:
            time_step = self.config.time_step
        if time_step <= 0.0:
            raise InvalidTimeStep(f"time step must be positive, got {time_step}")
        if not self._firing:
            return

        self._time += time_step
        self.projectile.advance(self._time)
        self._trail.appendleft(self.projectile.position)

        if self._check_ground_collision():
            self._resolve_impact()

    def run_shot(self, max_ticks: int = 10_000) -> bool:
        """Tick until the shell in flight comes down. Returns ``is_hit``."""
        ticks = 0
        while self._firing and ticks < max_ticks:
            self.update()
            ticks += 1
        return self._hit

    def _check_ground_collision(self) -> bool:
        position = self.projectile.position
        return (not self.projectile.is_flying
                or position.y <= self.ground.elevation_at(position))

    def _check_target_hit(self, impact: Position) -> bool:
        return impact.distance_to(self.ground.target) < self.config.hit_tolerance

    def _resolve_impact(self):
        impact = self.projectile.position
        self._firing = False
        self._last_impact = impact
        self._hit = self._check_target_hit(impact)

        if self._hit:
            self._score += 1
            logger.debug("hit at %s after %.1f s", impact, self._time)
            self.howitzer.position = self.ground.reset(self.howitzer.position)
        else:
            logger.debug("miss at %s, %.0f m from target",
                         impact, impact.distance_to(self.ground.target))

        self.projectile.reset()
        self._trail.clear()

    # ── Game lifecycle ────────────────────────────────────────────────────
    def reset(self):
        """Abandon any shell in flight and regenerate the terrain."""
        self._time = 0.0
        self._firing = False
        self._hit = False
        self.projectile.reset()
        self._trail.clear()
        self.howitzer.position = self.ground.reset(self.howitzer.position)

    def new_game(self):
        """Zero the score, move the howitzer and start over."""
        self._score = 0
        self._shots_attempted = 0
        self._last_impact = None
        self.howitzer.generate_position(self.config.field_width_m, self.rng)
        self.howitzer.reset()
        self.reset()

    def status_text(self) -> str:
        """The lines the on-screen status panel shows."""
        lines = [
            f"Flight time: {self._time:.1f}s",
            f"Angle: {self.howitzer.elevation.degrees:.1f}°",
        ]
        score = f"Score: {self._score}/{self._shots_attempted}"
        if self._shots_attempted > 0:
            score += f" ({self.hit_rate * 100.0:.0f}%)"
        lines.append(score)

        if self._firing:
            lines.append("Projectile in flight...")
        elif self._shots_attempted == 0:
            lines.append("Press SPACE to fire")
        else:
            lines.append("Target: HIT!" if self._hit else "Target: Miss")
        return '\n'.join(lines)
