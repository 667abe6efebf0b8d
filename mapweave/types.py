from __future__ import annotations

# =============================================================================
# GRID COORDINATES (Always integers)
# =============================================================================

CellCoord = int  # Always integer cell position

# Absolute cell position on a grid, indexed as (x, y)
CellPos = tuple[CellCoord, CellCoord]  # Example: (5, 3) = cell 5,3 on the grid

# Relative offset from an anchor cell
CellVec = tuple[CellCoord, CellCoord]  # Example: (-1, 0) = one cell to the left

# =============================================================================
# GENERATION-RELATED TYPES
# =============================================================================

# Random seed for deterministic generation.
# Can be an int for numeric seeds or a descriptive string like "tumbleweed".
RandomSeed = int | str | None

# Identifier of a terrain (tileset), e.g. "TEMPERAT"
TerrainId = str

# Numeric identifier of a terrain template
TemplateId = int
