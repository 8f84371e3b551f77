"""Bouncing ball built from two independent axis motions."""
from __future__ import annotations

from typing import Any, List, Optional, Protocol

import numpy as np

from .motion import DEFAULT_BOUNCE_FACTOR, Motion

EXPLOSION_FRAGMENTS = 8


class RandomSource(Protocol):
    """Anything with a random() method returning a float in [0, 1)."""

    def random(self) -> float:
        ...


class Ball:
    """
    A ball with a size, a color and a motion along x and y.

    Balls move according to speed and acceleration in both directions. Limits
    (floor, ceiling, walls) can be set per axis so that the ball bounces
    instead of leaving the playfield. The color is an opaque token handed
    back to whoever draws the ball.
    """

    def __init__(self, color: Any, radius: float):
        if radius < 0:
            raise ValueError(f"Radius should not be negative, got {radius}")
        self.color = color
        self.radius = radius
        self.bounce_factor = DEFAULT_BOUNCE_FACTOR
        self.steps = 0
        self.x_motion = Motion()
        self.y_motion = Motion()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def x(self) -> float:
        return self.x_motion.position

    @property
    def y(self) -> float:
        return self.y_motion.position

    @property
    def width(self) -> float:
        return 2 * self.radius

    @property
    def height(self) -> float:
        return 2 * self.radius

    @property
    def delta_x(self) -> float:
        """Current x speed, in units per move."""
        return self.x_motion.speed

    @property
    def delta_y(self) -> float:
        """Current y speed, in units per move. Positive y is down."""
        return self.y_motion.speed

    @property
    def acceleration_x(self) -> float:
        return self.x_motion.acceleration

    @property
    def acceleration_y(self) -> float:
        return self.y_motion.acceleration

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_bounce_factor(self, bounce_factor: float) -> None:
        """Set how much speed survives a bounce. Not range-checked."""
        self.bounce_factor = bounce_factor

    def move_to(self, x: float, y: float) -> None:
        self.x_motion.position = x
        self.y_motion.position = y

    def set_speed(self, x_speed: float, y_speed: float) -> None:
        self.x_motion.speed = x_speed
        self.y_motion.speed = y_speed

    def set_acceleration(self, x_acceleration: float, y_acceleration: float) -> None:
        """Set the acceleration added to the speed on every move."""
        self.x_motion.acceleration = x_acceleration
        self.y_motion.acceleration = y_acceleration

    def accelerate(self, x_boost: float, y_boost: float) -> None:
        """One-time boost to the speed, leaving the acceleration unchanged."""
        self.x_motion.accelerate(x_boost)
        self.y_motion.accelerate(y_boost)

    def halt(self) -> None:
        self.x_motion.halt()
        self.y_motion.halt()

    def set_lower_limit_x(self, limit: float) -> None:
        self.x_motion.set_lower_limit(limit)

    def set_lower_limit_y(self, limit: float) -> None:
        self.y_motion.set_lower_limit(limit)

    def set_upper_limit_x(self, limit: float) -> None:
        self.x_motion.set_upper_limit(limit)

    def set_upper_limit_y(self, limit: float) -> None:
        self.y_motion.set_upper_limit(limit)

    def move(self) -> None:
        """Perform one time step on both axes."""
        self.x_motion.move(self.bounce_factor)
        self.y_motion.move(self.bounce_factor)
        self.steps += 1

    # ------------------------------------------------------------------
    # Explosion
    # ------------------------------------------------------------------

    def explode(self, rng: Optional[RandomSource] = None) -> List["Ball"]:
        """
        Split this ball into eight smaller balls with half the radius.

        Every child starts at this ball's position. Its acceleration and speed
        on each axis are the parent's value plus an independent draw from
        ``rng.random()``. The parent is not modified.

        Args:
            rng: Random source, defaults to a fresh numpy Generator

        Returns:
            The eight new balls
        """
        if rng is None:
            rng = np.random.default_rng()

        children = []
        child_radius = self.radius / 2
        for _ in range(EXPLOSION_FRAGMENTS):
            child = Ball(self.color, child_radius)
            child.move_to(self.x, self.y)

            speed_x = rng.random() + self.delta_x
            speed_y = rng.random() + self.delta_y
            acceleration_x = rng.random() + self.acceleration_x
            acceleration_y = rng.random() + self.acceleration_y

            child.set_acceleration(acceleration_x, acceleration_y)
            child.set_speed(speed_x, speed_y)
            children.append(child)

        return children

    def as_dict(self) -> dict:
        """Snapshot for rendering/serialization."""
        return {
            "x": float(self.x),
            "y": float(self.y),
            "radius": float(self.radius),
            "color": self.color,
            "dx": float(self.delta_x),
            "dy": float(self.delta_y),
            "steps": self.steps,
        }

    def __repr__(self) -> str:
        return (
            f"Ball(color={self.color!r}, radius={self.radius}, x={self.x}, "
            f"y={self.y}, steps={self.steps})"
        )
