from __future__ import annotations

import math
import random

from pygame.math import Vector3


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_unit_circle(self) -> Vector3:
        angle = self._random.uniform(0, 2 * math.pi)
        return Vector3(math.cos(angle), 0.0, math.sin(angle))
