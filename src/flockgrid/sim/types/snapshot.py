from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics | None
    agents: List[Dict[str, Any]]
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotMetadata:
    cell_size: float
    sim_dt: float
    tick_rate: float
    seed: int
    config_version: str
    seek_target: tuple[float, float]
