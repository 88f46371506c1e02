from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from pygame.math import Vector3

Cell = Tuple[int, int]


@dataclass(slots=True)
class CellAssociation:
    """Committed and freshly computed grid cell of one agent.

    ``None`` marks an agent that has never been placed in the index, so the first
    real cell computed for it always counts as a change.
    """

    cell: Optional[Cell] = None
    pending_cell: Optional[Cell] = None
    dirty: bool = False

    @property
    def assigned(self) -> bool:
        return self.cell is not None


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector3
    velocity: Vector3
    max_speed: float = 10.0
    max_steering_force: float = 1.0
    turn_rate: float = 1.0
    heading: float = 0.0
    acceleration: Vector3 = field(default_factory=Vector3)
    cell: CellAssociation = field(default_factory=CellAssociation)
