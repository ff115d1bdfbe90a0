"""
Habitat Simulation

A headless ecology simulator on a toroidal grid: grass grows, gnus graze,
lions hunt. Each tick runs feed, reproduce, move, reap and seed-fly phases.

Architecture: HabitatSimulation is the source of truth. Renderers consume snapshots.
"""

__version__ = "0.1.0"
