"""
Command-line entry point: python -m habitat

Runs the simulation headless from a data pack, or with --test builds a
small default world and dumps its population and spatial index.
"""

import argparse
import queue
import signal
import sys
from pathlib import Path
from typing import List, Optional

from .simulation import HabitatSimulation, IndexConsistencyError
from .data_types import default_world_config
from .loader import DataLoadError
from .runner import run, StopRequest
from .constants import TICK_SUMMARY_INTERVAL, TEST_GRID_SIZE


DEFAULT_DATA_ROOT = Path(__file__).parent / "data"


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitat", description="Headless grass/gnu/lion ecology simulation")
    parser.add_argument("--data-root", type=Path, default=DEFAULT_DATA_ROOT,
                        help="Data pack directory (world/ and species/)")
    parser.add_argument("--schema-dir", type=Path, default=None,
                        help="JSON schema directory (default: <data-root>/schemas)")
    parser.add_argument("--ticks", type=non_negative_int, default=0,
                        help="Number of ticks to run (0 = until interrupted)")
    parser.add_argument("--interval-ms", type=non_negative_int, default=None,
                        help="Pause between ticks (default: world file setting)")
    parser.add_argument("--seed", type=int, default=None, help="Override world seed")
    parser.add_argument("--summary-every", type=non_negative_int, default=TICK_SUMMARY_INTERVAL,
                        help="Print a tick summary every N ticks (0 = never)")
    parser.add_argument("--test", action="store_true",
                        help="Dump a small default world and exit")
    return parser


def run_dump_test(seed: Optional[int] = None) -> int:
    """Build a TEST_GRID_SIZE world, print entities and index, verify consistency"""
    world = default_world_config(cols=TEST_GRID_SIZE, rows=TEST_GRID_SIZE)
    if seed is not None:
        world.seed = seed

    sim = HabitatSimulation(world)
    sim.initialize()

    print(sim.format_population())
    print()
    print(sim.grid.dump())

    try:
        sim.check_invariants()
    except IndexConsistencyError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 1

    print("[OK] Spatial index consistent with population")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.test:
        return run_dump_test(args.seed)

    schema_dir = args.schema_dir if args.schema_dir is not None else args.data_root / "schemas"

    try:
        sim = HabitatSimulation.from_data_pack(args.data_root, schema_dir, seed=args.seed)
    except DataLoadError as e:
        print(f"[FAIL] {e}", file=sys.stderr)
        return 2

    sim.initialize()

    interval_ms = args.interval_ms
    if interval_ms is None:
        interval_ms = sim.world.simulation.tick_interval_ms

    # Ctrl-C only posts a message; the loop stops between ticks.
    # put() runs inside the signal handler and must be reentrant: SimpleQueue
    control: queue.SimpleQueue = queue.SimpleQueue()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: control.put(StopRequest("interrupt")))
    try:
        result = run(
            sim,
            control=control,
            max_ticks=args.ticks,
            tick_interval_ms=interval_ms,
            summary_every=args.summary_every
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    sim.print_tick_summary()
    reason = result.stop_reason or "tick limit"
    print(f"[OK] Stopped after {result.ticks_run} ticks ({reason})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
