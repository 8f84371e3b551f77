"""Preset scenarios with different gravity, bounciness and explosion policies."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import SimConfig


@dataclass
class Preset:
    """A preset scenario applied on top of the current configuration."""
    name: str
    description: str
    gravity: float
    bounce_factor: float
    n_balls: int
    explode_every: Optional[int] = None

    def apply(self, config: SimConfig) -> SimConfig:
        """Return a copy of config with this preset's settings."""
        return config.replace(
            gravity=self.gravity,
            bounce_factor=self.bounce_factor,
            n_balls=self.n_balls,
            explode_every=self.explode_every,
        )


# ============================================================================
# Preset Definitions
# ============================================================================

GRAVITY = Preset(
    name="gravity",
    description="Earth-like gravity, balls slowly lose energy on every bounce",
    gravity=0.4,
    bounce_factor=0.99,
    n_balls=6,
)

ZERO_G = Preset(
    name="zero_g",
    description="No gravity and perfectly elastic walls",
    gravity=0.0,
    bounce_factor=1.0,
    n_balls=12,
)

MOON = Preset(
    name="moon",
    description="Weak gravity with long, floaty arcs",
    gravity=0.07,
    bounce_factor=0.9,
    n_balls=6,
)

SUPER_BALL = Preset(
    name="super_ball",
    description="Strong gravity, no energy lost on bounces",
    gravity=0.8,
    bounce_factor=1.0,
    n_balls=4,
)

FIREWORKS = Preset(
    name="fireworks",
    description="Every ball explodes after 60 steps until fragments get too small",
    gravity=0.2,
    bounce_factor=0.8,
    n_balls=3,
    explode_every=60,
)


# ============================================================================
# Preset Registry
# ============================================================================

PRESETS: Dict[str, Preset] = {
    "gravity": GRAVITY,
    "zero_g": ZERO_G,
    "moon": MOON,
    "super_ball": SUPER_BALL,
    "fireworks": FIREWORKS,
}


def list_presets() -> List[Preset]:
    """Return list of all available presets."""
    return list(PRESETS.values())


def get_preset(name: str) -> Preset:
    """Get preset by name."""
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}'. Available: {list(PRESETS.keys())}")
    return PRESETS[name]
