"""
Deterministic RNG utilities for habitat simulation.

Uses SHA256 hashing to derive stable seeds from hierarchical components
(world_seed, stream name, ...). All randomness uses
numpy.random.Generator(PCG64) for reproducible cross-session results.
"""

import hashlib
import numpy as np
from typing import Any, Sequence, Tuple


def make_seed(*components: Any) -> int:
    """
    Generate deterministic 64-bit seed from hierarchical components.

    Uses SHA256 to hash components into stable seed value.

    Args:
        *components: Seed components (world_seed, stream name, etc.)

    Returns:
        64-bit integer seed for numpy RNG

    Example:
        engine_seed = make_seed(world_seed, "engine")
    """
    # Join all components with colon separator
    hash_input = ":".join(str(c) for c in components)

    # SHA256 hash and extract 64-bit integer
    hash_bytes = hashlib.sha256(hash_input.encode('utf-8')).digest()
    seed = int.from_bytes(hash_bytes[:8], byteorder='big')

    return seed


def make_generator(*components: Any) -> np.random.Generator:
    """PCG64 generator seeded from make_seed(*components)"""
    return np.random.Generator(np.random.PCG64(make_seed(*components)))


def random_cell(rng: np.random.Generator, cols: int, rows: int) -> Tuple[int, int]:
    """
    Draw a uniformly random grid cell.

    Args:
        rng: Generator to draw from
        cols: Grid width
        rows: Grid height

    Returns:
        (col, row)
    """
    col = int(rng.integers(0, cols))
    row = int(rng.integers(0, rows))
    return (col, row)


def random_energy(rng: np.random.Generator, upper: int) -> int:
    """Energy drawn from [0, upper); 0 when upper <= 0"""
    if upper <= 0:
        return 0
    return int(rng.integers(0, upper))


def choose(rng: np.random.Generator, options: Sequence):
    """Uniform pick from a non-empty sequence"""
    return options[int(rng.integers(0, len(options)))]
