"""
Toroidal spatial index over grid cells.

Dense occupancy array indexed by col + row * cols. Each cell stores the
entity_id of its occupant or EMPTY_CELL. The index stores identifiers only;
the simulation's entity store owns the entities.
"""

import numpy as np
from typing import List, Optional, Set, Tuple

from .entity import Entity
from .constants import EMPTY_CELL, NEIGHBOR_OFFSETS


Cell = Tuple[int, int]


class SpatialIndex:
    """
    Fixed-size toroidal grid mapping each cell to at most one entity id.

    All coordinate arguments are expected pre-wrapped (0 <= col < cols,
    0 <= row < rows). Neighbor queries return wrapped coordinates.
    """

    def __init__(self, cols: int, rows: int):
        """
        Args:
            cols: Grid width in cells (> 0)
            rows: Grid height in cells (> 0)
        """
        if cols <= 0 or rows <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {cols}x{rows}")

        self._cols = cols
        self._rows = rows
        self._cells: np.ndarray = np.full(cols * rows, EMPTY_CELL, dtype=np.int64)

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def size(self) -> int:
        return self._cells.size

    def _flat(self, col: int, row: int) -> int:
        return col + row * self._cols

    def wrap(self, col: int, row: int) -> Cell:
        """Wrap arbitrary integer coordinates onto the torus"""
        return (col % self._cols, row % self._rows)

    def occupant(self, col: int, row: int) -> Optional[int]:
        """
        Get entity id recorded at a cell.

        Returns:
            entity_id, or None if the cell is empty
        """
        value = int(self._cells[self._flat(col, row)])
        if value == EMPTY_CELL:
            return None
        return value

    def is_empty(self, col: int, row: int) -> bool:
        return self._cells[self._flat(col, row)] == EMPTY_CELL

    def place(self, entity: Entity):
        """
        Record entity at its own position.

        Overwrites whatever was recorded there. Callers guarantee the cell is
        empty, except predation which deliberately replaces the consumed prey.
        """
        self._cells[self._flat(entity.col, entity.row)] = entity.entity_id

    def clear(self, col: int, row: int):
        self._cells[self._flat(col, row)] = EMPTY_CELL

    def neighbors8(self, col: int, row: int) -> List[Cell]:
        """
        Moore neighborhood in fixed clockwise order: N, NE, E, SE, S, SW, W, NW.

        Order defines tie-break priority for food and free-space scans.
        On grids narrower than 3 cells, entries repeat and may be (col, row).
        """
        cols = self._cols
        rows = self._rows
        return [((col + dc) % cols, (row + dr) % rows) for dc, dr in NEIGHBOR_OFFSETS]

    def empty_neighbors(self, col: int, row: int) -> List[Cell]:
        """Subsequence of neighbors8 whose cells are empty, same order"""
        cells = self._cells
        cols = self._cols
        return [
            (c, r) for c, r in self.neighbors8(col, row)
            if cells[c + r * cols] == EMPTY_CELL
        ]

    def occupied_count(self) -> int:
        return int(np.count_nonzero(self._cells != EMPTY_CELL))

    def occupied_cells(self) -> Set[Cell]:
        """All occupied coordinates"""
        flat = np.flatnonzero(self._cells != EMPTY_CELL)
        return {(int(i % self._cols), int(i // self._cols)) for i in flat}

    def dump(self) -> str:
        """
        Text dump of every cell, row-major: "col,row <entity_id|empty>".

        Intended for small grids (CLI --test mode).
        """
        lines = []
        for row in range(self._rows):
            for col in range(self._cols):
                occupant = self.occupant(col, row)
                lines.append(f"{col},{row} {occupant if occupant is not None else 'empty'}")
        return "\n".join(lines)
