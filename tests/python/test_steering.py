from __future__ import annotations

from pygame.math import Vector3
from pytest import approx

from flockgrid.sim.core.agent import Agent
from flockgrid.sim.systems.steering import arrive, limit, seek, steer


def _agent(max_speed: float = 10.0, max_force: float = 1.0, velocity: Vector3 | None = None) -> Agent:
    return Agent(
        id=0,
        position=Vector3(),
        velocity=velocity if velocity is not None else Vector3(),
        max_speed=max_speed,
        max_steering_force=max_force,
    )


def test_limit_leaves_short_vectors_untouched():
    vector = Vector3(0.3, 0.0, 0.4)

    assert limit(vector, 1.0) == Vector3(0.3, 0.0, 0.4)


def test_limit_rescales_long_vectors_preserving_direction():
    clamped = limit(Vector3(3.0, 0.0, 4.0), 2.0)

    assert clamped.length() == approx(2.0)
    assert clamped.x == approx(1.2)
    assert clamped.z == approx(1.6)


def test_limit_with_non_positive_max_is_zero():
    assert limit(Vector3(1.0, 0.0, 1.0), 0.0) == Vector3()


def test_steer_zero_direction_returns_zero():
    agent = _agent(velocity=Vector3(4.0, 0.0, 0.0))

    assert steer(agent, Vector3()) == Vector3()
    assert steer(agent, Vector3(1e-9, 0.0, 0.0)) == Vector3()


def test_steer_ignores_vertical_component():
    assert steer(_agent(), Vector3(0.0, 5.0, 0.0)) == Vector3()


def test_steer_is_desired_minus_current_velocity():
    agent = _agent(max_speed=10.0, max_force=100.0, velocity=Vector3(0.0, 0.0, 2.0))

    force = steer(agent, Vector3(0.0, 0.0, 5.0))

    assert force.z == approx(8.0)
    assert force.x == approx(0.0)


def test_steer_clamps_to_max_force():
    agent = _agent(max_speed=10.0, max_force=1.0)

    force = steer(agent, Vector3(3.0, 0.0, 0.0))

    assert force.x == approx(1.0)
    assert force.length() == approx(1.0)


def test_seek_steers_toward_target_offset():
    agent = _agent(max_force=100.0)
    agent.position = Vector3(5.0, 0.0, 5.0)
    target = Vector3(5.0, 0.0, -20.0)

    assert seek(agent, target) == steer(agent, target - agent.position)
    assert seek(agent, target).z == approx(-10.0)


def test_arrive_slows_inside_braking_radius():
    agent = _agent(max_speed=10.0, max_force=100.0)

    inside = arrive(agent, Vector3(25.0, 0.0, 0.0), braking_radius=50.0)
    outside = arrive(agent, Vector3(80.0, 0.0, 0.0), braking_radius=50.0)

    assert inside.x == approx(5.0)
    assert outside.x == approx(10.0)


def test_arrive_at_target_is_zero_and_result_is_clamped():
    agent = _agent(max_speed=10.0, max_force=1.0, velocity=Vector3(3.0, 0.0, 0.0))

    assert arrive(agent, Vector3()) == Vector3()
    assert arrive(agent, Vector3(0.0, 0.0, 200.0)).length() == approx(1.0)


def test_arrive_brakes_against_current_velocity():
    agent = _agent(max_speed=10.0, max_force=100.0, velocity=Vector3(10.0, 0.0, 0.0))

    force = arrive(agent, Vector3(10.0, 0.0, 0.0), braking_radius=50.0)

    assert force.x == approx(-8.0)
