from __future__ import annotations

from pygame.math import Vector3

from ..core.agent import Agent
from ..utils.math3d import _clamp_length, _planar

_STEER_EPSILON = 1e-6


def limit(vector: Vector3, max_length: float) -> Vector3:
    """Scale ``vector`` down to ``max_length`` if it is longer; shorter vectors pass through."""

    return _clamp_length(vector, max_length)


def steer(agent: Agent, desired: Vector3) -> Vector3:
    """Force turning the agent's velocity toward ``desired`` at full speed.

    Reynolds' steering: the direction is rescaled to ``max_speed``, the current
    velocity is subtracted, and the difference is capped at ``max_steering_force``.
    """

    direction = _planar(desired)
    length = direction.length()
    if length < _STEER_EPSILON:
        return Vector3()
    desired_velocity = direction * (agent.max_speed / length)
    return limit(desired_velocity - _planar(agent.velocity), agent.max_steering_force)


def seek(agent: Agent, target: Vector3) -> Vector3:
    return steer(agent, target - agent.position)


def arrive(agent: Agent, target: Vector3, braking_radius: float = 50.0) -> Vector3:
    """Seek that slows down linearly inside ``braking_radius`` and stops at the target."""

    offset = _planar(target - agent.position)
    distance = offset.length()
    if distance < _STEER_EPSILON:
        return Vector3()
    desired_velocity = offset * (braking_speed(agent, distance, braking_radius) / distance)
    return limit(desired_velocity - _planar(agent.velocity), agent.max_steering_force)


def braking_speed(agent: Agent, distance: float, braking_radius: float) -> float:
    if braking_radius <= 0 or distance >= braking_radius:
        return agent.max_speed
    return agent.max_speed * distance / braking_radius
