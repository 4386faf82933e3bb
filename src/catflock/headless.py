from __future__ import annotations

import argparse
import csv
import logging
from pathlib import Path
from typing import Optional

from .config import SimulationConfig
from .loop import RenderLoop
from .universe import Universe

logger = logging.getLogger(__name__)

_HEADER = ["tick", "population", "neighbor_checks", "avg_speed", "tick_ms"]


def run_headless(
    frames: int,
    seed: Optional[int],
    log_path: Optional[Path],
    frame_delta: float = 16.0,
    width: Optional[float] = None,
    height: Optional[float] = None,
    config_path: Optional[Path] = None,
    deterministic_log: bool = False,
    warm_up: bool = False,
) -> Universe:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    universe = Universe(config)
    if width is not None or height is not None:
        current_width, current_height = universe.size
        universe.resize(current_width if width is None else width, current_height if height is None else height)
    if warm_up:
        universe.warm_up()

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    def on_frame(delta: float) -> None:
        metrics = universe.update(delta)
        if metrics is None or writer is None:
            return
        tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
        writer.writerow(
            [
                metrics.tick,
                metrics.population,
                metrics.neighbor_checks,
                f"{metrics.average_speed:.6f}",
                f"{tick_ms:.3f}",
            ]
        )

    loop = RenderLoop(on_frame, config.max_delta)
    try:
        for _ in range(frames):
            loop.tick(frame_delta)
    finally:
        if csv_file:
            csv_file.close()
    logger.info("ran %d frames, %d hard updates, %d cats", loop.frames, universe.tick, len(universe.cats))
    return universe


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless cat flocking simulation")
    parser.add_argument("--frames", type=int, default=3000)
    parser.add_argument("--frame-delta", type=float, default=16.0, help="Milliseconds per simulated frame")
    parser.add_argument("--width", type=float, default=None)
    parser.add_argument("--height", type=float, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-hard-update metrics")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--warm-up", action="store_true", help="Run the warm-up hard updates before the first frame")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_headless(
        args.frames,
        args.seed,
        args.log,
        frame_delta=args.frame_delta,
        width=args.width,
        height=args.height,
        config_path=args.config,
        deterministic_log=args.deterministic_log,
        warm_up=args.warm_up,
    )


if __name__ == "__main__":
    main()
