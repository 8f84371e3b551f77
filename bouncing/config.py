"""Simple configuration for the bouncing ball world."""
from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class SimConfig:
    """Configuration for the bouncing ball world."""

    # World
    width: float = 800.0
    height: float = 600.0

    # Balls spawned on reset
    n_balls: int = 6
    min_radius: float = 10.0
    max_radius: float = 30.0
    max_initial_speed: float = 6.0

    # Dynamics (per step, positive y is down)
    gravity: float = 0.4
    bounce_factor: float = 0.99

    # Explosions
    explode_every: Optional[int] = None  # steps before a ball explodes by itself
    min_explode_radius: float = 2.0
    max_balls: int = 2000

    # Simulation
    frame_interval: float = 0.03  # Time between WebSocket frames
    seed: Optional[int] = None

    def validate(self) -> None:
        """Raise ValueError when the configuration cannot build a world."""
        try:
            if self.width <= 0 or self.height <= 0:
                raise ValueError(f"World size must be positive, got {self.width}x{self.height}")
            if self.min_radius < 0 or self.min_radius > self.max_radius:
                raise ValueError(
                    f"Invalid radius range [{self.min_radius}, {self.max_radius}]"
                )
            if self.n_balls < 0:
                raise ValueError(f"n_balls must be >= 0, got {self.n_balls}")
            if self.max_balls < 1:
                raise ValueError(f"max_balls must be >= 1, got {self.max_balls}")
            if self.n_balls > self.max_balls:
                raise ValueError(
                    f"n_balls ({self.n_balls}) exceeds max_balls ({self.max_balls})"
                )
            if self.explode_every is not None and self.explode_every < 1:
                raise ValueError(f"explode_every must be >= 1, got {self.explode_every}")
            if self.frame_interval <= 0:
                raise ValueError(f"frame_interval must be > 0, got {self.frame_interval}")
        except TypeError as e:
            raise ValueError(f"Config values have the wrong type: {e}") from e

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **changes: Any) -> "SimConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise ValueError(f"Config must be a JSON object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def save(self, filepath: str) -> None:
        """Save configuration to a JSON file."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, "w") as f:
            json.dump(self.as_dict(), f, indent=2)
        logger.info(f"Configuration saved to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "SimConfig":
        """Load configuration from a JSON file."""
        with open(filepath, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


DEFAULT_CONFIG = SimConfig()
