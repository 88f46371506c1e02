from __future__ import annotations

from typing import Iterable, Tuple

from ..core.agent import Agent
from ..types.metrics import TickMetrics


def population_stats(agents: Iterable[Agent]) -> Tuple[int, float]:
    population = 0
    speed_sum = 0.0
    for agent in agents:
        population += 1
        speed_sum += agent.velocity.length()
    return population, (speed_sum / population if population else 0.0)


def create_metrics(
    tick: int,
    dirty_agents: int,
    occupied_cells: int,
    neighbor_checks: int,
    duration_ms: float,
    stats: Tuple[int, float],
) -> TickMetrics:
    population, average_speed = stats
    return TickMetrics(
        tick=tick,
        population=population,
        dirty_agents=dirty_agents,
        occupied_cells=occupied_cells,
        neighbor_checks=neighbor_checks,
        average_speed=average_speed,
        tick_duration_ms=duration_ms,
    )
