"""
Habitat simulation kernel.

Main simulation class that owns the entity population and the toroidal
spatial index, and advances the ecology one tick at a time.
"""

import time
from typing import Dict, List, Optional
from pathlib import Path

from .entity import Entity
from .grid import SpatialIndex
from .data_types import Species, WorldConfig, EntityView, PREY_OF, SPAWN_ORDER
from .spawning import create_entity, spawn_initial_population, inject_vegetation
from .loader import load_all_data
from .rng import make_generator, choose
from .constants import TICK_TIME_WINDOW


PHASES = ('feed', 'reproduce', 'move', 'reap', 'inject')


class IndexConsistencyError(Exception):
    """Raised by check_invariants when the index and population disagree"""
    pass


class HabitatSimulation:
    """
    Main simulation class for the habitat ecosystem.

    Owns entities in a single insertion-ordered store keyed by entity_id.
    The SpatialIndex records ids only, so reaping an entity never leaves a
    dangling reference behind.

    Not thread-safe: tick() and snapshot() must not run concurrently.
    """

    def __init__(self, world: WorldConfig):
        """
        Args:
            world: World definition (grid size, seed, species table)
        """
        self.world: WorldConfig = world
        self.grid = SpatialIndex(world.cols, world.rows)
        self.rng = make_generator(world.seed, "engine")

        # Population in creation order (processing order for every phase)
        self._entities: Dict[int, Entity] = {}
        self._next_id: int = 0
        self.tick_count: int = 0

        # Performance metrics
        self._tick_times: List[float] = []
        self._tick_time_sum: float = 0.0
        self._tick_time_window: int = TICK_TIME_WINDOW
        self._phase_times: Dict[str, List[float]] = {phase: [] for phase in PHASES}

        # Ecology telemetry
        self._telemetry: Dict[str, int] = {
            'kills_this_tick': 0,
            'births_this_tick': 0,
            'starved_this_tick': 0,
            'deaths_this_tick': 0,
            'injected_this_tick': 0,
            'total_births': 0,
            'total_deaths': 0,
        }

    @classmethod
    def from_data_pack(
        cls,
        data_root: Path,
        schema_dir: Optional[Path] = None,
        seed: Optional[int] = None
    ) -> 'HabitatSimulation':
        """
        Build simulation from YAML data pack.

        Args:
            data_root: Path to data directory
            schema_dir: Optional path to JSON schemas
            seed: Optional override of the world seed
        """
        print("Loading data pack...")
        world = load_all_data(data_root, schema_dir)
        if seed is not None:
            world.seed = seed

        print(f"[OK] Loaded world: {world.name} ({world.world_id}) "
              f"{world.cols}x{world.rows}, seed={world.seed}")
        return cls(world)

    # ------------------------------------------------------------------
    # Population store
    # ------------------------------------------------------------------

    @property
    def entities(self) -> List[Entity]:
        """Live entities in population order"""
        return [e for e in self._entities.values() if e.alive]

    def get_entity(self, entity_id: int) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def __len__(self) -> int:
        return len(self._entities)

    def _register(self, entity: Entity):
        """Append to population and record in index (cell must be free)"""
        self._entities[entity.entity_id] = entity
        self.grid.place(entity)

    def _allocate_id(self) -> int:
        entity_id = self._next_id
        self._next_id += 1
        return entity_id

    def spawn(self, species: Species, col: int, row: int, energy: Optional[int] = None) -> Optional[Entity]:
        """
        Create an entity of a species at a cell.

        Args:
            species: Species tag
            col: Grid column (wrapped onto the torus)
            row: Grid row (wrapped onto the torus)
            energy: Starting energy; randomized from species traits when None

        Returns:
            New entity, or None if the cell is occupied
        """
        col, row = self.grid.wrap(col, row)
        if not self.grid.is_empty(col, row):
            return None

        entity = create_entity(
            entity_id=self._allocate_id(),
            traits=self.world.traits(species),
            col=col,
            row=row,
            rng=self.rng,
            energy=energy
        )
        self._register(entity)
        return entity

    def initialize(self) -> int:
        """
        Populate the grid with the configured starting counts.

        Returns:
            Number of entities placed (may be below the configured total)
        """
        placed = spawn_initial_population(self.world, self.spawn, self.rng)
        total = sum(placed.values())

        summary = ", ".join(
            f"{self.world.traits(s).name}={placed[s]}/{self.world.traits(s).initial_count}"
            for s in SPAWN_ORDER if s in self.world.species
        )
        print(f"[OK] Simulation initialized: {total} entities ({summary}), "
              f"grid={self.world.cols}x{self.world.rows}, seed={self.world.seed}")
        return total

    # ------------------------------------------------------------------
    # Tick pipeline
    # ------------------------------------------------------------------

    def tick(self):
        """
        Advance simulation by one tick.

        Five phases, each iterating the whole population before the next
        begins: feed, reproduce, move, reap, inject. Entities created by
        reproduce or inject take part in later phases of the same tick only.
        """
        start_time = time.perf_counter()

        kills = self._timed('feed', self._feed)
        births = self._timed('reproduce', self._reproduce)
        starved = self._timed('move', self._move)
        deaths = self._timed('reap', self._reap)
        injected = self._timed('inject', self._inject_resources)

        self.tick_count += 1

        telemetry = self._telemetry
        telemetry['kills_this_tick'] = kills
        telemetry['births_this_tick'] = births
        telemetry['starved_this_tick'] = starved
        telemetry['deaths_this_tick'] = deaths
        telemetry['injected_this_tick'] = injected
        telemetry['total_births'] += births + injected
        telemetry['total_deaths'] += deaths

        self._record_tick_time(time.perf_counter() - start_time)

    def _timed(self, phase: str, fn):
        start = time.perf_counter()
        result = fn()
        times = self._phase_times[phase]
        times.append(time.perf_counter() - start)
        if len(times) > self._tick_time_window:
            times.pop(0)
        return result

    def _feed(self) -> int:
        """
        Phase 1: vegetation grows, animals eat the first prey in neighbor order.

        Predation is migratory: the eater moves into the prey's cell. The prey
        is only marked dead here; it leaves the population in _reap.

        Returns:
            Number of kills
        """
        grid = self.grid
        entities = self._entities
        kills = 0

        for entity in list(entities.values()):
            if not entity.alive:
                continue

            if entity.species is Species.VEGETATION:
                entity.energy += 1
                continue

            prey_species = PREY_OF.get(entity.species)
            if prey_species is None:
                continue

            for col, row in grid.neighbors8(entity.col, entity.row):
                prey_id = grid.occupant(col, row)
                if prey_id is None:
                    continue
                prey = entities[prey_id]
                if prey.species is not prey_species or not prey.alive:
                    continue

                entity.energy += prey.energy
                prey.alive = False
                grid.clear(entity.col, entity.row)
                entity.move_to(col, row)
                grid.place(entity)  # replaces the prey's record
                kills += 1
                break

        return kills

    def _reproduce(self) -> int:
        """
        Phase 2: entities at or above threshold split into an empty neighbor.

        Iterates the population as it stood when the phase began, so offspring
        never reproduce in the tick that created them. Without an empty
        neighbor the parent keeps its energy and tries again next tick.

        Returns:
            Number of offspring
        """
        grid = self.grid
        births = 0

        for parent in list(self._entities.values()):
            if not parent.alive or parent.energy < parent.reproduction_threshold:
                continue

            free = grid.empty_neighbors(parent.col, parent.row)
            if not free:
                continue

            col, row = choose(self.rng, free)
            parent.energy //= 2

            child = Entity(
                entity_id=self._allocate_id(),
                species=parent.species,
                col=col,
                row=row,
                energy=parent.energy,
                reproduction_threshold=parent.reproduction_threshold,
                move_rate=parent.move_rate
            )
            self._register(child)
            births += 1

        return births

    def _move(self) -> int:
        """
        Phase 3: each mobile entity takes move_rate steps.

        Every step costs one energy. An entity at or below zero energy is
        marked dead and stops; otherwise it hops to a random empty neighbor
        when one exists. Dead entities keep their cell until _reap.

        Returns:
            Number of entities that starved
        """
        grid = self.grid
        rng = self.rng
        starved = 0

        for entity in list(self._entities.values()):
            if not entity.alive:
                continue

            for _ in range(entity.move_rate):
                entity.energy -= 1
                if entity.energy <= 0:
                    entity.alive = False
                    starved += 1
                    break

                free = grid.empty_neighbors(entity.col, entity.row)
                if free:
                    col, row = choose(rng, free)
                    grid.clear(entity.col, entity.row)
                    entity.move_to(col, row)
                    grid.place(entity)

        return starved

    def _reap(self) -> int:
        """
        Phase 4: drop dead entities from population and index.

        A consumed prey's cell already holds its eater, so a cell is cleared
        only when it still records the dead entity.

        Returns:
            Number of entities removed
        """
        grid = self.grid
        dead = [e for e in self._entities.values() if not e.alive]

        for entity in dead:
            if grid.occupant(entity.col, entity.row) == entity.entity_id:
                grid.clear(entity.col, entity.row)
            del self._entities[entity.entity_id]

        return len(dead)

    def _inject_resources(self) -> int:
        """Phase 5: seed-fly, random vegetation spawns on empty cells"""
        return inject_vegetation(self.world, self.spawn, self.rng)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def snapshot(self) -> List[EntityView]:
        """Immutable copies of every live entity, population order"""
        return [e.view() for e in self._entities.values() if e.alive]

    def population_counts(self) -> Dict[Species, int]:
        counts = {species: 0 for species in SPAWN_ORDER}
        for entity in self._entities.values():
            if entity.alive:
                counts[entity.species] += 1
        return counts

    def check_invariants(self):
        """
        Verify index/population bijection.

        Raises:
            IndexConsistencyError: on the first violation found
        """
        grid = self.grid
        live = [e for e in self._entities.values() if e.alive]

        positions = {}
        for entity in live:
            if entity.position in positions:
                other = positions[entity.position]
                raise IndexConsistencyError(
                    f"Entities {other} and {entity.entity_id} share cell {entity.position}")
            positions[entity.position] = entity.entity_id

            recorded = grid.occupant(entity.col, entity.row)
            if recorded != entity.entity_id:
                raise IndexConsistencyError(
                    f"Entity {entity.entity_id} at {entity.position} missing from index "
                    f"(cell holds {recorded})")

        orphaned = grid.occupied_cells() - set(positions)
        if orphaned:
            cell = sorted(orphaned)[0]
            raise IndexConsistencyError(
                f"{len(orphaned)} orphaned index cell(s), e.g. {cell} -> {grid.occupant(*cell)}")

    def get_tick_stats(self) -> dict:
        """
        Get current tick timing statistics.

        Returns:
            Dict with tick_count, avg_tick_time_ms, last_tick_time_ms and
            per-phase averages in ms
        """
        phase_ms = {
            phase: (sum(times) / len(times) * 1000.0 if times else 0.0)
            for phase, times in self._phase_times.items()
        }

        if not self._tick_times:
            return {
                'tick_count': self.tick_count,
                'avg_tick_time_ms': 0.0,
                'last_tick_time_ms': 0.0,
                'phase_ms': phase_ms
            }

        avg_time = self._tick_time_sum / len(self._tick_times)
        last_time = self._tick_times[-1]

        return {
            'tick_count': self.tick_count,
            'avg_tick_time_ms': avg_time * 1000.0,
            'last_tick_time_ms': last_time * 1000.0,
            'phase_ms': phase_ms
        }

    def get_telemetry(self) -> dict:
        return dict(self._telemetry)

    def _record_tick_time(self, elapsed: float):
        """
        Record tick timing for rolling average.

        Args:
            elapsed: Tick time in seconds
        """
        self._tick_times.append(elapsed)
        self._tick_time_sum += elapsed

        # Maintain rolling window
        if len(self._tick_times) > self._tick_time_window:
            removed = self._tick_times.pop(0)
            self._tick_time_sum -= removed

    def get_snapshot(self) -> dict:
        """
        Get complete simulation state snapshot.

        Returns:
            Dict with tick_count, entity_count, entities, counts, timing
        """
        views = self.snapshot()
        return {
            'tick_count': self.tick_count,
            'entity_count': len(views),
            'entities': [v.to_dict() for v in views],
            'counts': {s.value: n for s, n in self.population_counts().items()},
            'timing': self.get_tick_stats()
        }

    def format_population(self) -> str:
        """One line per live entity, population order"""
        return "\n".join(e.describe() for e in self._entities.values() if e.alive)

    def print_tick_summary(self):
        """Print tick summary to console (lightweight monitoring)"""
        stats = self.get_tick_stats()
        counts = self.population_counts()
        census = " ".join(
            f"{self.world.traits(s).name}={counts[s]}" for s in SPAWN_ORDER if s in self.world.species
        )
        print(f"Tick {stats['tick_count']:5d} | "
              f"Avg: {stats['avg_tick_time_ms']:6.3f} ms | "
              f"Last: {stats['last_tick_time_ms']:6.3f} ms | "
              f"Entities: {len(self._entities)} | {census}")
