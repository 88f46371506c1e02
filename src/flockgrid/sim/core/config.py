from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

SEEK_MODES = ("steer", "arrive")


@dataclass
class BoidConfig:
    max_speed: float = 10.0
    max_steering_force: float = 1.0
    turn_rate: float = 1.0


@dataclass
class FlockingConfig:
    interaction_radius: float = 20.0
    # Separation reacts only to close neighbors; alignment and cohesion share the outer radius.
    separation_radius: float = 10.0
    alignment_radius: float = 20.0
    cohesion_radius: float = 20.0
    separation_weight: float = 1.0
    alignment_weight: float = 1.0
    cohesion_weight: float = 1.0
    seek_weight: float = 1.0
    seek_mode: str = "steer"
    braking_radius: float = 50.0


@dataclass
class SimulationConfig:
    time_step: float = 1.0 / 60.0
    initial_population: int = 100
    spawn_extent: float = 100.0
    max_initial_speed: float = 10.0
    cell_size: float = 20.0
    seed: int = 42
    seek_target: tuple[float, float] = (0.0, 0.0)
    config_version: str = "v1"
    boid: BoidConfig = field(default_factory=BoidConfig)
    flocking: FlockingConfig = field(default_factory=FlockingConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text())
        return load_config(data or {})

    def validate(self) -> "SimulationConfig":
        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.time_step <= 0:
            raise ValueError(f"time_step must be positive, got {self.time_step}")
        if self.initial_population < 0:
            raise ValueError(f"initial_population must not be negative, got {self.initial_population}")
        flocking = self.flocking
        for name in ("interaction_radius", "separation_radius", "alignment_radius", "cohesion_radius", "braking_radius"):
            value = getattr(flocking, name)
            if value < 0:
                raise ValueError(f"flocking.{name} must not be negative, got {value}")
        for name in ("separation_radius", "alignment_radius", "cohesion_radius"):
            value = getattr(flocking, name)
            if value > flocking.interaction_radius:
                raise ValueError(
                    f"flocking.{name} must not exceed flocking.interaction_radius "
                    f"({value} > {flocking.interaction_radius})"
                )
        if flocking.seek_mode not in SEEK_MODES:
            raise ValueError(f"flocking.seek_mode must be one of {SEEK_MODES}, got {flocking.seek_mode!r}")
        return self


def load_config(raw: dict) -> SimulationConfig:
    def _pair(value: tuple[float, float] | list[float] | None, default: tuple[float, float]) -> tuple[float, float]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return default

    boid = BoidConfig(**raw.get("boid", {}))
    flocking = FlockingConfig(**raw.get("flocking", {}))
    seek_target = _pair(raw.get("seek_target"), SimulationConfig.seek_target)
    sim_values = {k: v for k, v in raw.items() if k not in {"boid", "flocking", "seek_target"}}
    config = SimulationConfig(boid=boid, flocking=flocking, seek_target=seek_target, **sim_values)
    return config.validate()
