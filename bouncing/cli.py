"""Run a bouncing ball world headless and write a JSON summary."""
from __future__ import annotations

import argparse
import json
import logging
import os
from typing import List, Optional

from tqdm import tqdm

from .config import SimConfig
from .logging_config import setup_logging
from .metrics import summarize
from .presets import PRESETS, get_preset
from .world import World

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bouncing",
        description="Run a bouncing ball world without a display",
    )
    parser.add_argument("--steps", type=int, default=1000, help="Number of ticks to run")
    parser.add_argument("--balls", type=int, default=None, help="Balls spawned at start")
    parser.add_argument("--preset", choices=sorted(PRESETS), default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--explode-every", type=int, default=None,
                        help="Explode balls after this many steps")
    parser.add_argument("--config", default=None, help="JSON config file to start from")
    parser.add_argument("--output", default=None, help="Write the JSON summary here")
    parser.add_argument("--sample-stride", type=int, default=50,
                        help="Record metrics every N ticks")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def build_config(args: argparse.Namespace) -> SimConfig:
    """Config file first, then preset, then individual flags."""
    cfg = SimConfig.load(args.config) if args.config else SimConfig()
    if args.preset:
        cfg = get_preset(args.preset).apply(cfg)
    if args.balls is not None:
        cfg = cfg.replace(n_balls=args.balls)
    if args.seed is not None:
        cfg = cfg.replace(seed=args.seed)
    if args.explode_every is not None:
        cfg = cfg.replace(explode_every=args.explode_every)
    return cfg


def run(world: World, steps: int, sample_stride: int, progress: bool = False) -> List[dict]:
    """Step the world and return metric samples (first and last tick included)."""
    samples = [summarize(world)]
    ticks = range(steps)
    if progress:
        ticks = tqdm(ticks, desc="Simulating", leave=False)
    for _ in ticks:
        world.step()
        if world.ticks % sample_stride == 0:
            samples.append(summarize(world))
    if samples[-1]["tick"] != world.ticks:
        samples.append(summarize(world))
    return samples


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level))

    if args.steps < 0 or args.sample_stride < 1:
        logger.error("--steps must be >= 0 and --sample-stride >= 1")
        return 2

    try:
        cfg = build_config(args)
        world = World(cfg)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    logger.info(f"Running {args.steps} steps with {len(world.balls)} balls")
    samples = run(world, args.steps, args.sample_stride, progress=args.progress)
    logger.info(
        f"Finished at tick {world.ticks}: {len(world.balls)} balls, "
        f"{world.explosions} explosions"
    )

    summary = {
        "config": world.config.as_dict(),
        "balls": len(world.balls),
        "explosions": world.explosions,
        "samples": samples,
    }
    if args.output:
        directory = os.path.dirname(args.output)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump(summary, f, indent=2)
        logger.info(f"Summary saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
