"""
Data types mirroring YAML data pack structures.

These dataclasses are populated by loader.py from YAML files, or built
from constants.py defaults via default_world_config().
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from enum import Enum

from .constants import (
    GRID_COLS,
    GRID_ROWS,
    DEFAULT_SEED,
    RESOURCE_INJECTION_COUNT,
    TICK_INTERVAL_MS,
    GRASS_AT_START,
    GRASS_REPRODUCTION_THRESHOLD,
    GRASS_INITIAL_ENERGY_MAX,
    GNUS_AT_START,
    GNU_DURATION,
    GNU_REPRODUCTION_THRESHOLD,
    LIONS_AT_START,
    LION_DURATION,
    LION_REPRODUCTION_THRESHOLD,
    MOBILE_MOVE_RATE,
)


# ============================================================================
# Species
# ============================================================================

class Species(Enum):
    """Closed set of species tags carried by every entity"""
    VEGETATION = "vegetation"
    HERBIVORE = "herbivore"
    CARNIVORE = "carnivore"


# Valid prey per eater; vegetation does not hunt
PREY_OF = {
    Species.HERBIVORE: Species.VEGETATION,
    Species.CARNIVORE: Species.HERBIVORE,
}

# Order in which initial populations are placed
SPAWN_ORDER = (Species.VEGETATION, Species.HERBIVORE, Species.CARNIVORE)


@dataclass
class SpeciesTraits:
    """Per-species constants, resolved by species tag"""
    kind: Species
    name: str  # Display name (grass, gnu, lion)
    reproduction_threshold: int
    move_rate: int
    initial_energy_max: int  # Factory energy drawn from [0, initial_energy_max)
    initial_count: int = 0
    color: Tuple[int, int, int] = (255, 255, 255)  # RGB, renderer concern
    description: Optional[str] = None


# ============================================================================
# World Definition
# ============================================================================

@dataclass
class SimulationConfig:
    """Driver settings (not read by the engine)"""
    tick_interval_ms: int = TICK_INTERVAL_MS


@dataclass
class WorldConfig:
    """Complete world definition consumed by HabitatSimulation"""
    cols: int
    rows: int
    species: Dict[Species, SpeciesTraits]
    seed: int = DEFAULT_SEED
    resource_injection_count: int = RESOURCE_INJECTION_COUNT
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    world_id: str = "habitat-default"
    name: str = "Habitat"
    description: Optional[str] = None

    def traits(self, species: Species) -> SpeciesTraits:
        """Look up the constant table for a species"""
        return self.species[species]


def default_species_table() -> Dict[Species, SpeciesTraits]:
    """Species table built from constants.py"""
    return {
        Species.VEGETATION: SpeciesTraits(
            kind=Species.VEGETATION,
            name="grass",
            reproduction_threshold=GRASS_REPRODUCTION_THRESHOLD,
            move_rate=0,
            initial_energy_max=GRASS_INITIAL_ENERGY_MAX,
            initial_count=GRASS_AT_START,
            color=(0, 255, 0),
        ),
        Species.HERBIVORE: SpeciesTraits(
            kind=Species.HERBIVORE,
            name="gnu",
            reproduction_threshold=GNU_REPRODUCTION_THRESHOLD,
            move_rate=MOBILE_MOVE_RATE,
            initial_energy_max=GNU_DURATION,
            initial_count=GNUS_AT_START,
            color=(0, 0, 0),
        ),
        Species.CARNIVORE: SpeciesTraits(
            kind=Species.CARNIVORE,
            name="lion",
            reproduction_threshold=LION_REPRODUCTION_THRESHOLD,
            move_rate=MOBILE_MOVE_RATE,
            initial_energy_max=LION_DURATION,
            initial_count=LIONS_AT_START,
            color=(255, 255, 0),
        ),
    }


def default_world_config(
    cols: int = GRID_COLS,
    rows: int = GRID_ROWS,
    seed: int = DEFAULT_SEED
) -> WorldConfig:
    """
    Build a world from built-in defaults.

    Args:
        cols: Grid width in cells
        rows: Grid height in cells
        seed: World seed

    Returns:
        WorldConfig with the default species table
    """
    return WorldConfig(cols=cols, rows=rows, species=default_species_table(), seed=seed)


# ============================================================================
# Snapshot Views
# ============================================================================

@dataclass(frozen=True)
class EntityView:
    """Immutable copy of entity state handed to presentation"""
    entity_id: int
    species: Species
    col: int
    row: int
    energy: int

    @property
    def position(self) -> Tuple[int, int]:
        return (self.col, self.row)

    def to_dict(self) -> dict:
        return {
            'entity_id': self.entity_id,
            'species': self.species.value,
            'position': [self.col, self.row],
            'energy': self.energy,
        }
