"""
Entity spawning system.

Factory for species entities plus random-cell placement used for the
initial population and for per-tick vegetation injection. Placement draws
a random cell and skips it when occupied; there is no retry.
"""

import numpy as np
from typing import Callable, Dict, Optional

from .entity import Entity
from .data_types import Species, SpeciesTraits, WorldConfig, SPAWN_ORDER
from .rng import random_cell, random_energy


# spawn_at(species, col, row) -> created Entity, or None if the cell is occupied
SpawnFn = Callable[[Species, int, int], Optional[Entity]]


def create_entity(
    entity_id: int,
    traits: SpeciesTraits,
    col: int,
    row: int,
    rng: np.random.Generator,
    energy: Optional[int] = None
) -> Entity:
    """
    Build a new entity of a species.

    Args:
        entity_id: Identifier to assign
        traits: Species constant table entry
        col: Grid column (pre-wrapped)
        row: Grid row (pre-wrapped)
        rng: Generator for the randomized starting energy
        energy: Explicit energy (offspring, tests); drawn from
                [0, traits.initial_energy_max) when None

    Returns:
        Entity (not yet registered anywhere)
    """
    if energy is None:
        energy = random_energy(rng, traits.initial_energy_max)

    return Entity(
        entity_id=entity_id,
        species=traits.kind,
        col=col,
        row=row,
        energy=int(energy),
        reproduction_threshold=traits.reproduction_threshold,
        move_rate=traits.move_rate
    )


def spawn_initial_population(
    world: WorldConfig,
    spawn_at: SpawnFn,
    rng: np.random.Generator
) -> Dict[Species, int]:
    """
    Place starting populations: vegetation, then herbivores, then carnivores.

    Each species makes initial_count random draws. Draws that land on an
    occupied cell are skipped, so the placed count may fall short of the quota.

    Args:
        world: World definition with species table
        spawn_at: Placement callback owned by the simulation
        rng: Generator for cell draws

    Returns:
        Dict of species -> number actually placed
    """
    placed = {}

    for species in SPAWN_ORDER:
        traits = world.species.get(species)
        if traits is None:
            print(f"[WARN] Species {species.value} missing from species table, skipping")
            placed[species] = 0
            continue

        count = 0
        for _ in range(traits.initial_count):
            col, row = random_cell(rng, world.cols, world.rows)
            if spawn_at(species, col, row) is not None:
                count += 1

        placed[species] = count

    return placed


def inject_vegetation(
    world: WorldConfig,
    spawn_at: SpawnFn,
    rng: np.random.Generator
) -> int:
    """
    Exogenous energy source: try resource_injection_count random vegetation spawns.

    Returns:
        Number of vegetation entities created
    """
    created = 0
    for _ in range(world.resource_injection_count):
        col, row = random_cell(rng, world.cols, world.rows)
        if spawn_at(Species.VEGETATION, col, row) is not None:
            created += 1
    return created
