"""
YAML data loader with schema validation.

Loads the world definition and species tables from YAML files and
validates against JSON schemas.
"""

import yaml
import json
from pathlib import Path
from typing import Dict, Optional
import jsonschema

from .data_types import Species, SpeciesTraits, WorldConfig, SimulationConfig, SPAWN_ORDER


class DataLoadError(Exception):
    """Raised when data loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DataLoadError(f"YAML parse error in {file_path}: {e}")

    if not isinstance(data, dict):
        raise DataLoadError(f"Expected a mapping at top level of {file_path}")
    return data


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    if not schema_path.exists():
        # Schema validation optional when the schema file is absent
        return

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON schema {schema_path}: {e}")


def _require_non_negative(value: int, field_name: str, source: Path) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise DataLoadError(f"{field_name} must be a non-negative integer in {source}, got {value!r}")
    return value


def load_species(file_path: Path, schema_dir: Optional[Path] = None) -> SpeciesTraits:
    """Load one species constant table from YAML"""
    data = load_yaml(file_path)

    # Validate if schema available
    if schema_dir:
        schema_path = schema_dir / "species.schema.json"
        validate_against_schema(data, schema_path, file_path)

    try:
        kind = Species(data['species'])
    except KeyError:
        raise DataLoadError(f"Missing 'species' tag in {file_path}")
    except ValueError:
        raise DataLoadError(f"Unknown species '{data['species']}' in {file_path}")

    try:
        color = tuple(int(c) for c in data.get('color', (255, 255, 255)))
        traits = SpeciesTraits(
            kind=kind,
            name=data['name'],
            reproduction_threshold=_require_non_negative(
                data['reproduction_threshold'], 'reproduction_threshold', file_path),
            move_rate=_require_non_negative(data['move_rate'], 'move_rate', file_path),
            initial_energy_max=_require_non_negative(
                data['initial_energy_max'], 'initial_energy_max', file_path),
            initial_count=_require_non_negative(data.get('initial_count', 0), 'initial_count', file_path),
            color=color,
            description=data.get('description')
        )
    except KeyError as e:
        raise DataLoadError(f"Missing field {e} in {file_path}")

    if len(traits.color) != 3:
        raise DataLoadError(f"color must be an RGB triple in {file_path}")

    return traits


def load_species_registry(species_dir: Path, schema_dir: Optional[Path] = None) -> Dict[Species, SpeciesTraits]:
    """Load all species from directory; every species tag must be covered exactly once"""
    species_dir = Path(species_dir)
    if not species_dir.exists():
        raise DataLoadError(f"Species directory not found: {species_dir}")

    registry = {}
    for yaml_file in sorted(species_dir.glob("*.yaml")):
        traits = load_species(yaml_file, schema_dir)
        if traits.kind in registry:
            raise DataLoadError(f"Duplicate definition of species '{traits.kind.value}' in {yaml_file}")
        registry[traits.kind] = traits

    if not registry:
        raise DataLoadError(f"No species files found in {species_dir}")

    missing = [s.value for s in SPAWN_ORDER if s not in registry]
    if missing:
        raise DataLoadError(f"Species table in {species_dir} is missing: {', '.join(missing)}")

    return registry


def load_world(
    file_path: Path,
    species: Dict[Species, SpeciesTraits],
    schema_dir: Optional[Path] = None
) -> WorldConfig:
    """Load world configuration from YAML"""
    data = load_yaml(file_path)

    # Validate if schema available
    if schema_dir:
        schema_path = schema_dir / "world.schema.json"
        validate_against_schema(data, schema_path, file_path)

    try:
        grid = data['grid']
        cols = grid['cols']
        rows = grid['rows']
    except KeyError as e:
        raise DataLoadError(f"Missing grid field {e} in {file_path}")

    if not isinstance(cols, int) or not isinstance(rows, int) or cols <= 0 or rows <= 0:
        raise DataLoadError(f"Grid dimensions must be positive integers in {file_path}, got {cols!r}x{rows!r}")

    parameters = data.get('parameters') or {}
    try:
        simulation = SimulationConfig(**(data.get('simulation') or {}))
    except TypeError as e:
        raise DataLoadError(f"Invalid simulation block in {file_path}: {e}")
    _require_non_negative(simulation.tick_interval_ms, 'tick_interval_ms', file_path)

    world = WorldConfig(
        cols=cols,
        rows=rows,
        species=species,
        simulation=simulation,
        world_id=data.get('world_id', 'habitat'),
        name=data.get('name', 'Habitat'),
        description=data.get('description')
    )

    if 'seed' in parameters:
        world.seed = int(parameters['seed'])
    if 'resource_injection_count' in parameters:
        world.resource_injection_count = _require_non_negative(
            parameters['resource_injection_count'], 'resource_injection_count', file_path)

    return world


def load_all_data(data_root: Path, schema_dir: Optional[Path] = None) -> WorldConfig:
    """Load all simulation data from data directory

    Layout: world/habitat.yaml plus species/*.yaml
    """
    data_root = Path(data_root)
    if schema_dir is not None:
        schema_dir = Path(schema_dir)

    species = load_species_registry(data_root / "species", schema_dir)
    return load_world(data_root / "world" / "habitat.yaml", species, schema_dir)
