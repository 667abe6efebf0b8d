"""
Tunable constants for the layout engine.

Defaults that generators, the settings model and the command line share live
here, grouped by the part of the engine that reads them.
"""

# =============================================================================
# GENERAL
# =============================================================================

# Master seed used when the caller does not pass one. None means a fresh,
# non-reproducible seed every run.
# RANDOM_SEED = None
RANDOM_SEED = "tumbleweed"

# Format used by the command line entry point when configuring logging.
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# =============================================================================
# SETTINGS
# =============================================================================

# Integer options default to the signed 32-bit range when Min/Max are unset.
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

# Separator between a node kind and its id, e.g. "Option@Density".
NODE_ID_SEPARATOR = "@"

# =============================================================================
# MAP GRID
# =============================================================================

DEFAULT_MAP_WIDTH = 64
DEFAULT_MAP_HEIGHT = 40

# Generator selected by the command line entry point unless told otherwise.
DEFAULT_GENERATOR = "scatter"

# =============================================================================
# BRUSHES
# =============================================================================

# Weight given to a MultiBrush that does not specify one.
DEFAULT_BRUSH_WEIGHT = 1000

# =============================================================================
# PLAYERS
# =============================================================================

NEUTRAL_PLAYER = "Neutral"
CREEPS_PLAYER = "Creeps"

# =============================================================================
# SCATTER GENERATOR
# =============================================================================

SCATTER_DEFAULT_COLLECTION = "Obstacles"
SCATTER_DEFAULT_DENSITY = 0.3
