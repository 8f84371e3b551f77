"""Single-axis motion with acceleration and reflective limits."""
from __future__ import annotations

from typing import Optional

DEFAULT_BOUNCE_FACTOR = 0.99


class Motion:
    """
    Position, speed and acceleration along one axis.

    Each call to move() adds the acceleration to the speed and the speed to
    the position. Optional lower/upper limits act as walls: a ball that ends
    up outside a limit is put back on it and its speed is reversed and
    scaled by the bounce factor.
    """

    def __init__(self) -> None:
        self.position = 0.0
        self.speed = 0.0
        self.acceleration = 0.0
        self.lower_limit: Optional[float] = None
        self.upper_limit: Optional[float] = None

    @property
    def has_lower_limit(self) -> bool:
        return self.lower_limit is not None

    @property
    def has_upper_limit(self) -> bool:
        return self.upper_limit is not None

    def set_lower_limit(self, limit: float) -> None:
        """Activate the lower wall. Not checked against the upper one."""
        self.lower_limit = limit

    def set_upper_limit(self, limit: float) -> None:
        """Activate the upper wall. Not checked against the lower one."""
        self.upper_limit = limit

    def accelerate(self, delta: float) -> None:
        """One-time boost to the speed; the acceleration is left alone."""
        self.speed += delta

    def halt(self) -> None:
        self.speed = 0.0
        self.acceleration = 0.0

    def move(self, bounce_factor: float = DEFAULT_BOUNCE_FACTOR) -> None:
        """
        Advance one step.

        Only one wall is handled per step, the lower one first.

        Args:
            bounce_factor: Fraction of the speed kept after hitting a wall
        """
        self.speed += self.acceleration
        self.position += self.speed

        if self.lower_limit is not None and self.position < self.lower_limit:
            self.position = self.lower_limit
            self.speed = -self.speed * bounce_factor
        elif self.upper_limit is not None and self.position > self.upper_limit:
            self.position = self.upper_limit
            self.speed = -self.speed * bounce_factor

    def __repr__(self) -> str:
        return (
            f"Motion(position={self.position}, speed={self.speed}, "
            f"acceleration={self.acceleration}, lower_limit={self.lower_limit}, "
            f"upper_limit={self.upper_limit})"
        )
