"""A world of bouncing balls sharing one playfield."""
from __future__ import annotations

import colorsys
import logging
from typing import Any, List, Optional, Tuple

import numpy as np

from .ball import EXPLOSION_FRAGMENTS, Ball, RandomSource
from .config import SimConfig

logger = logging.getLogger(__name__)

PALETTE_SIZE = 12


def generate_colors(n: int) -> List[str]:
    """Generate n distinct '#rrggbb' color tokens."""
    colors = []
    for i in range(n):
        hue = i / n
        rgb = colorsys.hsv_to_rgb(hue, 0.8, 0.9)
        colors.append("#{:02x}{:02x}{:02x}".format(*(int(c * 255) for c in rgb)))
    return colors


def playfield_limits(size: float, radius: float) -> Tuple[float, float]:
    """
    Return (lower, upper) limits keeping a ball of this radius on the field.

    A ball wider than the field is pinned to the centre line.
    """
    lower, upper = radius, size - radius
    if lower > upper:
        lower = upper = size / 2
    return lower, upper


class World:
    """
    Bouncing balls inside a rectangular playfield.

    The world plays the part of the driver: it moves every ball once per tick,
    keeps the walls in sync with the playfield size and replaces exploded
    balls with their fragments.
    """

    def __init__(self, config: SimConfig, rng: Optional[RandomSource] = None):
        config.validate()
        self.config = config

        # Initialize RNG
        self._injected_rng = rng is not None
        self.rng: RandomSource = rng if rng is not None else np.random.default_rng(config.seed)

        self.palette = generate_colors(PALETTE_SIZE)
        self.balls: List[Ball] = []
        self.ticks = 0
        self.explosions = 0
        self._spawned = 0

        self._spawn(config.n_balls)

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    def _uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.rng.random()

    def _next_color(self) -> str:
        color = self.palette[self._spawned % len(self.palette)]
        self._spawned += 1
        return color

    def _spawn(self, count: int) -> None:
        """Add count balls with random radius, position and speed."""
        cfg = self.config
        for _ in range(count):
            radius = self._uniform(cfg.min_radius, cfg.max_radius)
            x = self._uniform(*playfield_limits(cfg.width, radius))
            y = self._uniform(*playfield_limits(cfg.height, radius))
            speed = (
                self._uniform(-cfg.max_initial_speed, cfg.max_initial_speed),
                self._uniform(-cfg.max_initial_speed, cfg.max_initial_speed),
            )
            self.add_ball(radius, x=x, y=y, speed=speed)

    def _configure(self, ball: Ball) -> None:
        """Apply the world's bounce factor and walls to a ball."""
        ball.set_bounce_factor(self.config.bounce_factor)
        lower_x, upper_x = playfield_limits(self.config.width, ball.radius)
        lower_y, upper_y = playfield_limits(self.config.height, ball.radius)
        ball.set_lower_limit_x(lower_x)
        ball.set_upper_limit_x(upper_x)
        ball.set_lower_limit_y(lower_y)
        ball.set_upper_limit_y(upper_y)

    def add_ball(
        self,
        radius: float,
        x: Optional[float] = None,
        y: Optional[float] = None,
        speed: Tuple[float, float] = (0.0, 0.0),
        color: Optional[Any] = None,
    ) -> Ball:
        """
        Create a ball, place it and put it under gravity.

        Raises:
            ValueError: If the radius is negative or the world is full
        """
        if len(self.balls) >= self.config.max_balls:
            raise ValueError(f"World is full ({self.config.max_balls} balls)")

        ball = Ball(color if color is not None else self._next_color(), radius)
        ball.move_to(
            self.config.width / 2 if x is None else x,
            self.config.height / 2 if y is None else y,
        )
        ball.set_acceleration(0.0, self.config.gravity)
        ball.set_speed(*speed)
        self._configure(ball)
        self.balls.append(ball)
        return ball

    # ------------------------------------------------------------------
    # Time stepping
    # ------------------------------------------------------------------

    def step(self) -> None:
        """Advance every ball by one step."""
        for ball in self.balls:
            ball.move()
        self.ticks += 1

        if self.config.explode_every is not None:
            self._explode_due()

    def _can_explode(self, ball: Ball) -> bool:
        return ball.radius >= self.config.min_explode_radius

    def _explode_due(self) -> None:
        """Explode balls old enough to go off, as long as there is room."""
        every = self.config.explode_every
        population = len(self.balls)
        result: List[Ball] = []
        for ball in self.balls:
            due = ball.steps >= every and self._can_explode(ball)
            if due and population + EXPLOSION_FRAGMENTS - 1 <= self.config.max_balls:
                result.extend(self._fragments(ball))
                population += EXPLOSION_FRAGMENTS - 1
            else:
                result.append(ball)
        self.balls = result

    def _fragments(self, ball: Ball) -> List[Ball]:
        children = ball.explode(self.rng)
        for child in children:
            self._configure(child)
        self.explosions += 1
        logger.debug(
            f"Ball at ({ball.x:.1f}, {ball.y:.1f}) r={ball.radius:.2f} exploded "
            f"into {len(children)} fragments"
        )
        return children

    def explode(self, index: int) -> List[Ball]:
        """
        Replace the ball at index with its fragments.

        Raises:
            IndexError: If there is no ball at index
            ValueError: If the ball is too small or the world has no room
        """
        if index < 0 or index >= len(self.balls):
            raise IndexError(f"No ball at index {index} ({len(self.balls)} balls)")
        ball = self.balls[index]
        if not self._can_explode(ball):
            raise ValueError(
                f"Ball radius {ball.radius} is below the explosion minimum "
                f"{self.config.min_explode_radius}"
            )
        if len(self.balls) + EXPLOSION_FRAGMENTS - 1 > self.config.max_balls:
            raise ValueError(f"World is full ({self.config.max_balls} balls)")

        children = self._fragments(ball)
        self.balls[index:index + 1] = children
        return children

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def resize(self, width: float, height: float) -> None:
        """Change the playfield size and move every ball's walls with it."""
        config = self.config.replace(width=width, height=height)
        config.validate()
        self.config = config
        for ball in self.balls:
            self._configure(ball)

    def halt_all(self) -> None:
        for ball in self.balls:
            ball.halt()

    def reset(self) -> None:
        """Reset the world to a fresh population."""
        if self.config.seed is not None and not self._injected_rng:
            self.rng = np.random.default_rng(self.config.seed)

        self.balls = []
        self.ticks = 0
        self.explosions = 0
        self._spawned = 0
        self._spawn(self.config.n_balls)
        logger.debug(f"World reset with {len(self.balls)} balls")

    def get_state(self) -> dict:
        """Get current state for API/visualization."""
        return {
            "width": self.config.width,
            "height": self.config.height,
            "ticks": self.ticks,
            "explosions": self.explosions,
            "balls": [
                {"id": i, **ball.as_dict()}
                for i, ball in enumerate(self.balls)
            ],
        }
