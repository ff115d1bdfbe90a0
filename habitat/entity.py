"""
Entity runtime representation.

Entities are created from species traits and exist in the simulation.
Each entity has a unique integer entity_id, a grid position and an energy
counter. Species behavior is resolved from the species tag, not subclassing.
"""

from dataclasses import dataclass
from typing import Tuple

from .data_types import Species, EntityView


@dataclass
class Entity:
    """
    Runtime entity in simulation.

    Attributes:
        entity_id: Unique identifier, assigned in creation order
        species: Species tag (immutable after creation)
        col: Grid column
        row: Grid row
        energy: Health/energy counter (may go to zero or below before reaping)
        reproduction_threshold: Energy at which the entity may reproduce
        move_rate: Movement attempts per tick (0 = stationary)
        alive: False once consumed or starved; reaped at end of tick
    """
    entity_id: int
    species: Species
    col: int
    row: int
    energy: int
    reproduction_threshold: int
    move_rate: int
    alive: bool = True

    @property
    def position(self) -> Tuple[int, int]:
        return (self.col, self.row)

    def move_to(self, col: int, row: int):
        """Update stored position (caller keeps the SpatialIndex in sync)"""
        self.col = col
        self.row = row

    def view(self) -> EntityView:
        """Read-only copy for snapshots"""
        return EntityView(
            entity_id=self.entity_id,
            species=self.species,
            col=self.col,
            row=self.row,
            energy=self.energy
        )

    def describe(self) -> str:
        """One-line dump: (col,row) species energy"""
        return f"({self.col},{self.row}) {self.species.value} {self.energy}"
