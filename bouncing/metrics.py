"""Reductions over a world for monitoring and run summaries."""
from __future__ import annotations

import math
from collections import Counter
from typing import Dict, Optional

import numpy as np

from .world import World


def _velocities(world: World) -> np.ndarray:
    if not world.balls:
        return np.zeros((0, 2))
    return np.array([[b.delta_x, b.delta_y] for b in world.balls], dtype=float)


def kinetic_energy(world: World) -> float:
    # 0.5 * mean(|v|^2) with m=1
    V = _velocities(world)
    if len(V) == 0:
        return 0.0
    return 0.5 * float((V * V).sum(axis=1).mean())


def mean_speed(world: World) -> float:
    V = _velocities(world)
    if len(V) == 0:
        return 0.0
    return float(np.linalg.norm(V, axis=1).mean())


def mean_height(world: World) -> float:
    """Mean distance above the floor; y grows downwards."""
    if not world.balls:
        return float("nan")
    Y = np.array([b.y for b in world.balls], dtype=float)
    return float((world.config.height - Y).mean())


def radius_histogram(world: World) -> Dict[float, int]:
    """Count balls per radius; explosions halve the radius each generation."""
    return dict(Counter(float(b.radius) for b in world.balls))


def summarize(world: World) -> Dict[str, Optional[float]]:
    """JSON-safe snapshot of the world metrics (NaN becomes None)."""
    height = mean_height(world)
    return {
        "tick": world.ticks,
        "balls": len(world.balls),
        "kinetic_energy": kinetic_energy(world),
        "mean_speed": mean_speed(world),
        "mean_height": None if math.isnan(height) else height,
    }
