from __future__ import annotations

import math
from typing import Callable, Dict, Iterator, KeysView, List, Tuple

from pygame.math import Vector3

from .agent import Cell


class SpatialIndex:
    """Uniform grid over the x/z plane mapping cells to agent handles.

    The index only stores handles; the registry owning the agents is the source of
    truth. Buckets are created on first insert and dropped as soon as they empty, so
    the mapping stays proportional to the occupied area rather than the world size.
    """

    def __init__(self, cell_size: float) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self._cell_size = float(cell_size)
        self._cells: Dict[Cell, List[int]] = {}

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def cells(self) -> KeysView[Cell]:
        return self._cells.keys()

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __iter__(self) -> Iterator[Tuple[Cell, Tuple[int, ...]]]:
        for cell, bucket in self._cells.items():
            yield cell, tuple(bucket)

    def bucket(self, cell: Cell) -> Tuple[int, ...]:
        return tuple(self._cells.get(cell, ()))

    def clear(self) -> None:
        self._cells.clear()

    def cell_of(self, position: Vector3) -> Cell:
        return (math.floor(position.x / self._cell_size), math.floor(position.z / self._cell_size))

    def insert(self, cell: Cell, handle: int) -> None:
        bucket = self._cells.get(cell)
        if bucket is None:
            bucket = []
            self._cells[cell] = bucket
        bucket.append(handle)

    def remove(self, cell: Cell, handle: int) -> None:
        bucket = self._cells.get(cell)
        if bucket is None or handle not in bucket:
            return
        bucket.remove(handle)
        if not bucket:
            del self._cells[cell]

    def query(self, position: Vector3, radius: float, visit: Callable[[int], object]) -> None:
        """Call ``visit`` for every handle in a cell that may hold a point within ``radius``.

        Cells are whole units, so handles farther than ``radius`` can be visited too;
        callers filter by exact distance.
        """

        cells = self._cells

        def _visit_cell(cell: Cell) -> None:
            bucket = cells.get(cell)
            if bucket:
                for handle in bucket:
                    visit(handle)

        self.query_cells(position, radius, _visit_cell)

    def query_cells(self, position: Vector3, radius: float, visit: Callable[[Cell], object]) -> None:
        """Call ``visit`` once for each cell intersecting the disc around ``position``.

        Rows are scanned over the disc's z extent. For each row the point of the row
        nearest the center along z fixes how wide the disc is there, which bounds the
        x range of cells emitted for that row. The disc is closed: a cell whose edge or
        corner lies exactly on the circle is visited too.
        """

        if radius <= 0:
            visit(self.cell_of(position))
            return

        cx = position.x / self._cell_size
        cz = position.z / self._cell_size
        r = radius / self._cell_size
        r_sq = r * r
        min_z = math.ceil(cz - r) - 1
        max_z = math.floor(cz + r)

        for z in range(min_z, max_z + 1):
            if z + 1 < cz:
                z_test = float(z + 1)
            elif z > cz:
                z_test = float(z)
            else:
                z_test = cz
            dz = z_test - cz
            x_diff = math.sqrt(max(0.0, r_sq - dz * dz))
            min_x = math.ceil(cx - x_diff) - 1
            max_x = math.floor(cx + x_diff)
            for x in range(min_x, max_x + 1):
                visit((x, z))
