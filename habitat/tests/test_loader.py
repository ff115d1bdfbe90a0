"""
Test data loading system

Verifies YAML -> Python dataclass conversion and schema validation for the
bundled data pack, and DataLoadError reporting for broken packs.
"""

import sys
import pytest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from habitat.loader import (
    load_species, load_species_registry, load_world, load_all_data, DataLoadError
)
from habitat.data_types import Species
from habitat.simulation import HabitatSimulation


DATA_ROOT = Path(__file__).parent.parent / "data"
SCHEMA_DIR = DATA_ROOT / "schemas"


def write_pack(root: Path, world_yaml: str, species_files: dict):
    """Write a minimal data pack under root"""
    (root / "world").mkdir(parents=True)
    (root / "species").mkdir()
    (root / "world" / "habitat.yaml").write_text(world_yaml)
    for name, body in species_files.items():
        (root / "species" / f"{name}.yaml").write_text(body)


WORLD_YAML = """\
world_id: tiny
name: Tiny
grid:
  cols: 6
  rows: 4
parameters:
  seed: 99
  resource_injection_count: 1
"""

GRASS_YAML = """\
species: vegetation
name: grass
reproduction_threshold: 40
move_rate: 0
initial_energy_max: 20
initial_count: 5
"""

GNU_YAML = """\
species: herbivore
name: gnu
reproduction_threshold: 140
move_rate: 1
initial_energy_max: 100
initial_count: 2
"""

LION_YAML = """\
species: carnivore
name: lion
reproduction_threshold: 300
move_rate: 1
initial_energy_max: 200
initial_count: 1
"""


def full_species():
    return {'grass': GRASS_YAML, 'gnu': GNU_YAML, 'lion': LION_YAML}


def test_load_species():
    """Test loading the gnu species table"""
    traits = load_species(DATA_ROOT / "species" / "gnu.yaml", SCHEMA_DIR)

    print(f"[OK] Loaded species: {traits.name} ({traits.kind.value})")
    print(f"  Threshold: {traits.reproduction_threshold}, move rate: {traits.move_rate}")

    assert traits.kind is Species.HERBIVORE
    assert traits.reproduction_threshold == 140
    assert traits.move_rate == 1
    assert traits.initial_energy_max == 100
    assert traits.initial_count == 20
    assert traits.color == (0, 0, 0)


def test_load_species_registry_covers_all_species():
    registry = load_species_registry(DATA_ROOT / "species", SCHEMA_DIR)

    assert set(registry) == set(Species)
    assert registry[Species.VEGETATION].move_rate == 0
    assert registry[Species.CARNIVORE].reproduction_threshold == 300


def test_load_all_data():
    """Test loading the bundled world"""
    world = load_all_data(DATA_ROOT, SCHEMA_DIR)

    print(f"[OK] Loaded world: {world.name} ({world.world_id})")
    print(f"  Grid: {world.cols}x{world.rows}, seed={world.seed}")

    assert (world.cols, world.rows) == (300, 280)
    assert world.seed == 12345
    assert world.resource_injection_count == 3
    assert world.simulation.tick_interval_ms == 2000
    assert world.traits(Species.VEGETATION).initial_count == 1000


def test_from_data_pack_with_seed_override():
    sim = HabitatSimulation.from_data_pack(DATA_ROOT, SCHEMA_DIR, seed=5)
    assert sim.world.seed == 5

    placed = sim.initialize()
    assert 0 < placed <= 1040
    sim.check_invariants()


def test_custom_pack(tmp_path):
    write_pack(tmp_path, WORLD_YAML, full_species())

    world = load_all_data(tmp_path, SCHEMA_DIR)

    assert (world.cols, world.rows) == (6, 4)
    assert world.seed == 99
    assert world.resource_injection_count == 1
    assert world.traits(Species.CARNIVORE).initial_count == 1
    assert world.traits(Species.VEGETATION).color == (255, 255, 255)  # default


class TestLoadErrors:
    """DataLoadError for broken packs"""

    def test_missing_world_file(self, tmp_path):
        (tmp_path / "species").mkdir()
        for name, body in full_species().items():
            (tmp_path / "species" / f"{name}.yaml").write_text(body)

        with pytest.raises(DataLoadError, match="File not found"):
            load_all_data(tmp_path)

    def test_missing_species_directory(self, tmp_path):
        with pytest.raises(DataLoadError, match="Species directory not found"):
            load_all_data(tmp_path)

    def test_yaml_parse_error(self, tmp_path):
        species = full_species()
        species['gnu'] = "species: herbivore\nname: [unclosed\n"
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="YAML parse error"):
            load_all_data(tmp_path)

    def test_schema_rejects_negative_move_rate(self, tmp_path):
        species = full_species()
        species['gnu'] = GNU_YAML.replace("move_rate: 1", "move_rate: -1")
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="Validation error"):
            load_all_data(tmp_path, SCHEMA_DIR)

    def test_negative_value_rejected_without_schema(self, tmp_path):
        species = full_species()
        species['gnu'] = GNU_YAML.replace("move_rate: 1", "move_rate: -1")
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="move_rate"):
            load_all_data(tmp_path)

    def test_unknown_species_tag(self, tmp_path):
        species = full_species()
        species['gnu'] = GNU_YAML.replace("species: herbivore", "species: fungus")
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="Unknown species"):
            load_all_data(tmp_path)

    def test_missing_species_in_table(self, tmp_path):
        species = full_species()
        del species['lion']
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="missing: carnivore"):
            load_all_data(tmp_path)

    def test_duplicate_species(self, tmp_path):
        species = full_species()
        species['gnu2'] = GNU_YAML
        write_pack(tmp_path, WORLD_YAML, species)

        with pytest.raises(DataLoadError, match="Duplicate"):
            load_all_data(tmp_path)

    def test_non_positive_grid(self, tmp_path):
        write_pack(tmp_path, WORLD_YAML.replace("cols: 6", "cols: 0"), full_species())

        with pytest.raises(DataLoadError, match="Grid dimensions"):
            load_all_data(tmp_path)

    def test_unknown_simulation_key(self, tmp_path):
        write_pack(tmp_path, WORLD_YAML + "simulation:\n  fps: 60\n", full_species())

        with pytest.raises(DataLoadError, match="simulation"):
            load_all_data(tmp_path)

    def test_world_schema_rejects_extra_keys(self, tmp_path):
        write_pack(tmp_path, WORLD_YAML + "window:\n  width: 1200\n", full_species())

        with pytest.raises(DataLoadError, match="Validation error"):
            load_world(tmp_path / "world" / "habitat.yaml",
                       load_species_registry(tmp_path / "species"), SCHEMA_DIR)

    def test_null_blocks_without_schema(self, tmp_path):
        """Empty parameters/simulation blocks fall back to defaults"""
        world_yaml = WORLD_YAML.split("parameters:")[0] + "parameters:\nsimulation:\n"
        write_pack(tmp_path, world_yaml, full_species())

        world = load_all_data(tmp_path)

        assert world.seed == 12345
        assert world.resource_injection_count == 3
        assert world.simulation.tick_interval_ms == 2000
