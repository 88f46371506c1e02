from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from pygame.math import Vector3

from ..core.agent import Agent
from ..core.config import FlockingConfig
from . import steering

if TYPE_CHECKING:
    from ..core.world import World

_MIN_NEIGHBOR_DISTANCE = 1e-3


class NeighborAccumulator:
    """Running separation, alignment and cohesion sums for one focal agent."""

    __slots__ = (
        "agent",
        "config",
        "separation_sum",
        "separation_count",
        "alignment_sum",
        "alignment_count",
        "cohesion_sum",
        "cohesion_count",
    )

    def __init__(self, agent: Agent, config: FlockingConfig) -> None:
        self.agent = agent
        self.config = config
        self.separation_sum = Vector3()
        self.separation_count = 0
        self.alignment_sum = Vector3()
        self.alignment_count = 0
        self.cohesion_sum = Vector3()
        self.cohesion_count = 0

    def add_neighbor(self, other: Agent) -> bool:
        """Fold ``other`` into the sums. Returns False when it is out of range or coincident."""

        position = self.agent.position
        delta = Vector3(position.x - other.position.x, 0.0, position.z - other.position.z)
        distance = delta.length()
        config = self.config
        if distance > config.interaction_radius or distance < _MIN_NEIGHBOR_DISTANCE:
            return False

        if distance < config.separation_radius:
            # delta / distance is the unit direction; dividing once more weights by 1 / distance.
            self.separation_sum += delta / (distance * distance)
            self.separation_count += 1
        if distance < config.alignment_radius:
            self.alignment_sum += other.velocity
            self.alignment_count += 1
        if distance < config.cohesion_radius:
            self.cohesion_sum += other.position
            self.cohesion_count += 1
        return True

    @property
    def neighbor_count(self) -> int:
        return max(self.separation_count, self.alignment_count, self.cohesion_count)

    def separation(self) -> Vector3:
        if self.separation_count == 0:
            return Vector3()
        return steering.steer(self.agent, self.separation_sum / self.separation_count)

    def alignment(self) -> Vector3:
        if self.alignment_count == 0:
            return Vector3()
        return steering.steer(self.agent, self.alignment_sum / self.alignment_count)

    def cohesion(self) -> Vector3:
        if self.cohesion_count == 0:
            return Vector3()
        return steering.seek(self.agent, self.cohesion_sum / self.cohesion_count)

    def acceleration(self) -> Vector3:
        config = self.config
        return (
            self.separation() * config.separation_weight
            + self.alignment() * config.alignment_weight
            + self.cohesion() * config.cohesion_weight
        )


def seek_force(agent: Agent, target: Vector3, config: FlockingConfig) -> Vector3:
    if config.seek_mode == "arrive":
        return steering.arrive(agent, target, config.braking_radius)
    return steering.seek(agent, target)


def compute_acceleration(world: World, agent: Agent) -> Tuple[Vector3, int]:
    """Flocking plus seek-to-target acceleration for ``agent``, capped at its steering force.

    Returns the acceleration and the number of index candidates visited.
    """

    config = world.config.flocking
    accumulator = NeighborAccumulator(agent, config)
    lookup = world.get_or_none
    visited = 0

    def _visit(handle: int) -> None:
        nonlocal visited
        visited += 1
        if handle == agent.id:
            return
        other = lookup(handle)
        if other is not None:
            accumulator.add_neighbor(other)

    world.index.query(agent.position, config.interaction_radius, _visit)

    total = accumulator.acceleration() + seek_force(agent, world.seek_target, config) * config.seek_weight
    return steering.limit(total, agent.max_steering_force), visited
