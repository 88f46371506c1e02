from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    dirty_agents: int
    occupied_cells: int
    neighbor_checks: int
    average_speed: float
    tick_duration_ms: float = 0.0
