from __future__ import annotations

from ..core.agent import Agent
from ..utils.math3d import _clamp_length, _clamp_value, _heading_from_velocity, _planar, _wrap_angle


def integrate(agent: Agent, dt: float) -> None:
    """Explicit Euler step on the x/z plane, turning the heading at ``turn_rate``."""

    velocity = _planar(agent.velocity + agent.acceleration * dt)
    agent.velocity = _clamp_length(velocity, agent.max_speed)
    position = agent.position + agent.velocity * dt
    position.y = 0.0
    agent.position = position
    update_heading(agent, dt)


def update_heading(agent: Agent, dt: float) -> None:
    velocity = agent.velocity
    if velocity.x * velocity.x + velocity.z * velocity.z < 1e-12:
        return
    target = _heading_from_velocity(velocity)
    fraction = _clamp_value(agent.turn_rate * dt, 0.0, 1.0)
    agent.heading = _wrap_angle(agent.heading + _wrap_angle(target - agent.heading) * fraction)
