"""
Multi-N performance validation for the tick pipeline.

Runs the full pipeline on square worlds of increasing size with the default
species table and reports median/p90 tick time per population.
"""

# Pin threading for stable measurement
import os
os.environ.update({
    'OPENBLAS_NUM_THREADS': '1',
    'MKL_NUM_THREADS': '1',
    'NUMEXPR_NUM_THREADS': '1',
    'OMP_NUM_THREADS': '1'
})

import numpy as np
import time
import gc

from habitat.simulation import HabitatSimulation
from habitat.data_types import Species, default_world_config


def build_world(side: int, seed: int = 42) -> HabitatSimulation:
    """Square world with quotas scaled to the default 300x280 density."""
    world = default_world_config(cols=side, rows=side, seed=seed)
    scale = (side * side) / (300 * 280)
    for traits in world.species.values():
        traits.initial_count = max(1, int(round(traits.initial_count * scale)))

    sim = HabitatSimulation(world)
    sim.initialize()
    return sim


def run_tick_perf_test(side: int, warmup: int = 20, runs: int = 50) -> dict:
    """
    Run tick performance test on a side x side world.

    Args:
        side: Grid edge length in cells
        warmup: Ticks run before measuring (lets grass spread)
        runs: Number of measured ticks

    Returns:
        Dict with p50, p90, min, max, final population
    """
    sim = build_world(side)

    for _ in range(warmup):
        sim.tick()

    # Measure (GC disabled for stable timing)
    gc.collect()
    gc.disable()

    times_ns = []
    try:
        for _ in range(runs):
            start = time.perf_counter_ns()
            sim.tick()
            times_ns.append(time.perf_counter_ns() - start)
    finally:
        gc.enable()

    times_ms = np.array(times_ns) / 1_000_000
    counts = sim.population_counts()

    return {
        'side': side,
        'entities': len(sim),
        'grass': counts[Species.VEGETATION],
        'gnus': counts[Species.HERBIVORE],
        'lions': counts[Species.CARNIVORE],
        'p50_ms': np.percentile(times_ms, 50),
        'p90_ms': np.percentile(times_ms, 90),
        'min_ms': np.min(times_ms),
        'max_ms': np.max(times_ms),
    }


def main():
    """Run multi-N tick performance validation."""
    print("=" * 80)
    print("Tick Pipeline Multi-N Performance")
    print("=" * 80)
    print()

    test_sides = [50, 100, 200, 300]

    results = []

    for side in test_sides:
        print(f"[{side} x {side}]")

        result = run_tick_perf_test(side)

        print(f"  p50: {result['p50_ms']:.3f}ms")
        print(f"  p90: {result['p90_ms']:.3f}ms")
        print(f"  min: {result['min_ms']:.3f}ms, max: {result['max_ms']:.3f}ms")
        print(f"  Population: {result['entities']} "
              f"(grass={result['grass']} gnus={result['gnus']} lions={result['lions']})")

        results.append(result)
        print()

    print("=" * 80)
    print("Summary Table")
    print("=" * 80)
    print()
    print("| Grid      | Entities | p50 (ms) | p90 (ms) |")
    print("|-----------|----------|----------|----------|")
    for r in results:
        grid = f"{r['side']}x{r['side']}"
        print(f"| {grid:9s} | {r['entities']:8d} | {r['p50_ms']:8.3f} | {r['p90_ms']:8.3f} |")

    print()
    print("=" * 80)


if __name__ == '__main__':
    main()
