from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "population",
    "dirty_agents",
    "occupied_cells",
    "neighbor_checks",
    "avg_speed",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "dirty_agents",
    "occupied_cells",
    "neighbor_checks",
    "avg_speed",
    "tick_ms",
    "dirty_ratio",
    "neighbor_checks_per_agent",
    "tick_ms_per_agent",
    "avg_agents_per_cell",
    "max_cell_occupancy",
    "avg_distance_to_target",
    "max_distance_to_target",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.dirty_agents,
        metrics.occupied_cells,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        dirty_ratio = 0.0
        neighbor_checks_per_agent = 0.0
        tick_ms_per_agent = 0.0
        avg_agents_per_cell = 0.0
        max_cell_occupancy = 0
        avg_distance = 0.0
        max_distance = 0.0
    else:
        dirty_ratio = metrics.dirty_agents / population
        neighbor_checks_per_agent = metrics.neighbor_checks / population
        tick_ms_per_agent = tick_ms / population

        occupancy = [len(bucket) for _cell, bucket in world.index]
        if occupancy:
            avg_agents_per_cell = sum(occupancy) / len(occupancy)
            max_cell_occupancy = max(occupancy)
        else:
            avg_agents_per_cell = 0.0
            max_cell_occupancy = 0

        target = world.seek_target
        distance_sum = 0.0
        max_distance = 0.0
        for agent in world.agents:
            distance = math.hypot(agent.position.x - target.x, agent.position.z - target.z)
            distance_sum += distance
            if distance > max_distance:
                max_distance = distance
        avg_distance = distance_sum / population

    return [
        *_format_basic_row(metrics, tick_ms),
        f"{dirty_ratio:.4f}",
        f"{neighbor_checks_per_agent:.4f}",
        f"{tick_ms_per_agent:.4f}",
        f"{avg_agents_per_cell:.4f}",
        max_cell_occupancy,
        f"{avg_distance:.4f}",
        f"{max_distance:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    count = len(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / count),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config: Optional[SimulationConfig] = None,
) -> World:
    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config = replace(config, seed=seed)
    world = World(config)
    logger.info("running %d steps with seed %d and %d agents", steps, config.seed, len(world))

    tick_ms_series: list[float] = []
    neighbor_checks_series: list[float] = []
    dirty_series: list[float] = []
    occupied_series: list[float] = []

    csv_file = Path(log_path).open("w", newline="") if log_path else None
    try:
        writer = None
        if csv_file is not None:
            writer = csv.writer(csv_file)
            writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            neighbor_checks_series.append(float(metrics.neighbor_checks))
            dirty_series.append(float(metrics.dirty_agents))
            occupied_series.append(float(metrics.occupied_cells))

            if writer is not None:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file is not None:
            csv_file.close()

    if log_path:
        logger.info("wrote %s metrics to %s", log_mode, log_path)

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "population": len(world),
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "neighbor_checks": _summary_stats(neighbor_checks_series),
            "dirty_agents": _summary_stats(dirty_series),
            "occupied_cells": _summary_stats(occupied_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "neighbor_checks": _summary_stats(neighbor_checks_series[tail_slice]),
                "dirty_agents": _summary_stats(dirty_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
        logger.info("wrote summary to %s", summary_path)

    return world


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML file with simulation settings")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )


if __name__ == "__main__":
    main()
