from __future__ import annotations

import random

from pygame.math import Vector3

from flockgrid.sim.core.agent import Agent
from flockgrid.sim.core.spatial_index import SpatialIndex
from flockgrid.sim.systems.cells import release, update_cell_association, update_spatial_index


def _agent(agent_id: int, x: float, z: float) -> Agent:
    return Agent(id=agent_id, position=Vector3(x, 0.0, z), velocity=Vector3())


def _assert_index_matches(agents: list[Agent], index: SpatialIndex) -> None:
    by_id = {agent.id: agent for agent in agents}
    seen: list[int] = []
    for cell, bucket in index:
        assert bucket, f"empty bucket left at {cell}"
        for handle in bucket:
            assert by_id[handle].cell.cell == cell
            seen.append(handle)
    assert len(seen) == len(set(seen))
    assigned = sorted(agent.id for agent in agents if agent.cell.cell is not None)
    assert sorted(seen) == assigned


def test_first_pass_marks_every_agent_dirty():
    index = SpatialIndex(cell_size=20.0)
    # (0, 0) is a real cell and still counts as a change from unassigned.
    agents = [_agent(0, 0.0, 0.0), _agent(1, 45.0, -5.0)]

    marked = update_cell_association(agents, index)

    assert marked == 2
    assert all(agent.cell.dirty for agent in agents)
    assert agents[1].cell.pending_cell == (2, -1)
    assert len(index) == 0


def test_commit_inserts_dirty_agents_and_clears_mark():
    index = SpatialIndex(cell_size=20.0)
    agents = [_agent(0, 5.0, 5.0), _agent(1, 6.0, 7.0), _agent(2, -30.0, 10.0)]

    update_cell_association(agents, index)
    committed = update_spatial_index(agents, index)

    assert committed == 3
    assert sorted(index.bucket((0, 0))) == [0, 1]
    assert index.bucket((-2, 0)) == (2,)
    assert not any(agent.cell.dirty for agent in agents)
    _assert_index_matches(agents, index)


def test_second_commit_without_motion_mutates_nothing():
    index = SpatialIndex(cell_size=20.0)
    agents = [_agent(0, 5.0, 5.0), _agent(1, 25.0, 5.0)]
    update_cell_association(agents, index)
    update_spatial_index(agents, index)
    before = dict(index)

    assert update_cell_association(agents, index) == 0
    assert update_spatial_index(agents, index) == 0
    assert update_spatial_index(agents, index) == 0
    assert dict(index) == before


def test_crossing_a_boundary_moves_the_handle():
    index = SpatialIndex(cell_size=20.0)
    mover = _agent(0, 19.0, 5.0)
    stayer = _agent(1, 2.0, 2.0)
    agents = [mover, stayer]
    update_cell_association(agents, index)
    update_spatial_index(agents, index)

    mover.position.x = 21.0
    marked = update_cell_association(agents, index)
    committed = update_spatial_index(agents, index)

    assert marked == 1
    assert committed == 1
    assert index.bucket((0, 0)) == (1,)
    assert index.bucket((1, 0)) == (0,)
    assert mover.cell.cell == (1, 0)
    _assert_index_matches(agents, index)


def test_leaving_a_cell_drops_its_bucket():
    index = SpatialIndex(cell_size=20.0)
    agent = _agent(0, 5.0, 5.0)
    update_cell_association([agent], index)
    update_spatial_index([agent], index)

    agent.position = Vector3(-5.0, 0.0, 5.0)
    update_cell_association([agent], index)
    update_spatial_index([agent], index)

    assert list(index.cells) == [(-1, 0)]


def test_motion_inside_a_cell_is_not_dirty():
    index = SpatialIndex(cell_size=20.0)
    agent = _agent(0, 5.0, 5.0)
    update_cell_association([agent], index)
    update_spatial_index([agent], index)

    agent.position = Vector3(15.0, 3.0, 19.5)

    assert update_cell_association([agent], index) == 0
    assert not agent.cell.dirty


def test_dirty_agent_keeps_pending_cell_until_commit():
    index = SpatialIndex(cell_size=20.0)
    agent = _agent(0, 5.0, 5.0)
    update_cell_association([agent], index)

    agent.position = Vector3(65.0, 0.0, 5.0)
    assert update_cell_association([agent], index) == 0
    assert agent.cell.pending_cell == (0, 0)

    update_spatial_index([agent], index)
    assert index.bucket((0, 0)) == (0,)

    update_cell_association([agent], index)
    update_spatial_index([agent], index)
    assert list(index.cells) == [(3, 0)]


def test_release_removes_handle_and_resets_association():
    index = SpatialIndex(cell_size=20.0)
    agents = [_agent(0, 5.0, 5.0), _agent(1, 8.0, 8.0)]
    update_cell_association(agents, index)
    update_spatial_index(agents, index)

    release(agents[0], index)

    assert index.bucket((0, 0)) == (1,)
    assert agents[0].cell.cell is None
    assert not agents[0].cell.dirty

    release(agents[0], index)
    assert index.bucket((0, 0)) == (1,)


def test_invariant_holds_over_random_walk():
    rng = random.Random(7)
    index = SpatialIndex(cell_size=7.5)
    agents = [_agent(i, rng.uniform(-50, 50), rng.uniform(-50, 50)) for i in range(40)]

    for _ in range(30):
        for agent in agents:
            agent.position += Vector3(rng.uniform(-6, 6), 0.0, rng.uniform(-6, 6))
        update_cell_association(agents, index)
        update_spatial_index(agents, index)
        _assert_index_matches(agents, index)
        for agent in agents:
            assert agent.cell.cell == index.cell_of(agent.position)
