from __future__ import annotations

import logging
from typing import Iterable

from ..core.agent import Agent
from ..core.spatial_index import SpatialIndex

logger = logging.getLogger(__name__)


def update_cell_association(agents: Iterable[Agent], index: SpatialIndex) -> int:
    """Recompute each agent's cell and mark the ones that crossed a cell boundary.

    Agents still dirty from an uncommitted pass keep their pending cell until
    ``update_spatial_index`` runs. Returns the number of agents newly marked dirty.
    """

    marked = 0
    cell_of = index.cell_of
    for agent in agents:
        association = agent.cell
        if association.dirty:
            continue
        association.pending_cell = cell_of(agent.position)
        if association.pending_cell != association.cell:
            association.dirty = True
            marked += 1
    return marked


def update_spatial_index(agents: Iterable[Agent], index: SpatialIndex) -> int:
    """Move dirty agents to their pending cell in the index and clear the mark."""

    committed = 0
    for agent in agents:
        association = agent.cell
        if not association.dirty:
            continue
        if association.cell is not None:
            index.remove(association.cell, agent.id)
        index.insert(association.pending_cell, agent.id)
        association.cell = association.pending_cell
        association.dirty = False
        committed += 1
    if committed:
        logger.debug("committed %d cell changes (%d occupied cells)", committed, len(index))
    return committed


def release(agent: Agent, index: SpatialIndex) -> None:
    association = agent.cell
    if association.cell is not None:
        index.remove(association.cell, agent.id)
    association.cell = None
    association.pending_cell = None
    association.dirty = False
