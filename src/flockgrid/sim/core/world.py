from __future__ import annotations

import logging
from time import perf_counter
from typing import Dict, List

from pygame.math import Vector3

from .agent import Agent
from .config import SimulationConfig
from .rng import DeterministicRng
from .spatial_index import SpatialIndex
from ..systems import cells, flocking, motion
from ..systems import metrics as metrics_system
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata
from ..utils.math3d import _planar

logger = logging.getLogger(__name__)


class World:
    """Agent registry plus the tick that keeps the spatial index in step with motion.

    Every tick runs, in order: cell detection for all agents, the index commit for
    the agents that changed cells, steering for all agents against the committed
    index, and finally integration. Steering only reads other agents, so all
    accelerations are computed before anyone moves.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config.validate()
        self._rng = DeterministicRng(config.seed)
        self._index = SpatialIndex(config.cell_size)
        self._agents: Dict[int, Agent] = {}
        self._seek_target = Vector3(config.seek_target[0], 0.0, config.seek_target[1])
        self._next_id = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def index(self) -> SpatialIndex:
        return self._index

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents.values())

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def seek_target(self) -> Vector3:
        return self._seek_target

    @seek_target.setter
    def seek_target(self, target: Vector3) -> None:
        self._seek_target = _planar(Vector3(target))

    def __len__(self) -> int:
        return len(self._agents)

    def get(self, agent_id: int) -> Agent:
        return self._agents[agent_id]

    def get_or_none(self, agent_id: int) -> Agent | None:
        return self._agents.get(agent_id)

    def spawn(self, position: Vector3, velocity: Vector3 | None = None) -> Agent:
        boid = self._config.boid
        agent = Agent(
            id=self._next_id,
            position=_planar(Vector3(position)),
            velocity=_planar(Vector3(velocity)) if velocity is not None else Vector3(),
            max_speed=boid.max_speed,
            max_steering_force=boid.max_steering_force,
            turn_rate=boid.turn_rate,
        )
        self._next_id += 1
        self._agents[agent.id] = agent
        logger.debug("spawned agent %d at (%.2f, %.2f)", agent.id, agent.position.x, agent.position.z)
        return agent

    def despawn(self, agent_id: int) -> Agent:
        agent = self._agents.pop(agent_id)
        cells.release(agent, self._index)
        logger.debug("despawned agent %d", agent_id)
        return agent

    def reset(self) -> None:
        self._agents.clear()
        self._index.clear()
        self._rng.reset()
        self._next_id = 0
        self._metrics = None
        self._seek_target = Vector3(self._config.seek_target[0], 0.0, self._config.seek_target[1])
        self._bootstrap_population()

    def update_cell_association(self) -> int:
        return cells.update_cell_association(self._agents.values(), self._index)

    def update_spatial_index(self) -> int:
        return cells.update_spatial_index(self._agents.values(), self._index)

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        dt = self._config.time_step
        agents = list(self._agents.values())

        dirty_agents = self.update_cell_association()
        self.update_spatial_index()

        neighbor_checks = 0
        accelerations: List[Vector3] = []
        for agent in agents:
            acceleration, visited = flocking.compute_acceleration(self, agent)
            accelerations.append(acceleration)
            neighbor_checks += visited

        for agent, acceleration in zip(agents, accelerations):
            agent.acceleration = acceleration
            motion.integrate(agent, dt)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(
            tick,
            dirty_agents,
            len(self._index),
            neighbor_checks,
            duration_ms,
            metrics_system.population_stats(agents),
        )
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        config = self._config
        agents = []
        for agent in self._agents.values():
            cell = agent.cell.cell
            agents.append(
                {
                    "id": agent.id,
                    "x": agent.position.x,
                    "z": agent.position.z,
                    "vx": agent.velocity.x,
                    "vz": agent.velocity.z,
                    "speed": agent.velocity.length(),
                    "heading": agent.heading,
                    "cell": list(cell) if cell is not None else None,
                }
            )
        metadata = SnapshotMetadata(
            cell_size=config.cell_size,
            sim_dt=config.time_step,
            tick_rate=1.0 / config.time_step,
            seed=config.seed,
            config_version=config.config_version,
            seek_target=(self._seek_target.x, self._seek_target.z),
        )
        return Snapshot(tick=tick, metrics=self._metrics, agents=agents, metadata=metadata)

    def _bootstrap_population(self) -> None:
        config = self._config
        half_extent = config.spawn_extent * 0.5
        for _ in range(config.initial_population):
            position = Vector3(
                self._rng.next_range(-half_extent, half_extent),
                0.0,
                self._rng.next_range(-half_extent, half_extent),
            )
            velocity = self._rng.next_unit_circle() * (self._rng.next_float() * config.max_initial_speed)
            self.spawn(position, velocity)
        logger.info("bootstrapped %d agents (cell size %.2f)", config.initial_population, config.cell_size)
