"""
Central configuration constants for habitat simulation.

Defines default values used when no data pack is supplied, and the
fixed parameters of the tick pipeline and console reporting.
"""

# ============================================================================
# Grid Configuration
# ============================================================================

GRID_COLS = 300
GRID_ROWS = 280

# Sentinel stored in empty SpatialIndex cells (entity ids start at 0)
EMPTY_CELL = -1

# Moore neighborhood offsets (d_col, d_row), clockwise from north.
# Row index grows southward, so north is row - 1.
NEIGHBOR_OFFSETS = (
    (0, -1),   # N
    (1, -1),   # NE
    (1, 0),    # E
    (1, 1),    # SE
    (0, 1),    # S
    (-1, 1),   # SW
    (-1, 0),   # W
    (-1, -1),  # NW
)


# ============================================================================
# Species Defaults
# ============================================================================

GRASS_AT_START = 1000
GRASS_REPRODUCTION_THRESHOLD = 40
GRASS_INITIAL_ENERGY_MAX = 20

GNUS_AT_START = 20
GNU_DURATION = 100  # Initial energy is drawn from [0, GNU_DURATION)
GNU_REPRODUCTION_THRESHOLD = GNU_DURATION + 40

LIONS_AT_START = 20
LION_DURATION = 200  # Initial energy is drawn from [0, LION_DURATION)
LION_REPRODUCTION_THRESHOLD = LION_DURATION + 100

MOBILE_MOVE_RATE = 1


# ============================================================================
# Resource Injection
# ============================================================================

# Vegetation spawn attempts per tick (occupied picks are skipped)
RESOURCE_INJECTION_COUNT = 3


# ============================================================================
# Determinism
# ============================================================================

DEFAULT_SEED = 12345


# ============================================================================
# Driver / Performance Configuration
# ============================================================================

# Wall-clock pause between ticks in the headless driver (milliseconds)
TICK_INTERVAL_MS = 2000

# Tick timing window for rolling average
TICK_TIME_WINDOW = 100  # Number of ticks to average

# Default tick summary interval (print every N ticks)
TICK_SUMMARY_INTERVAL = 100

# World size used by the CLI --test dump mode
TEST_GRID_SIZE = 10
