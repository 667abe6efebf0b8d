"""The target grid that generators populate.

A MapGrid holds one numpy layer per kind of cell data. All layers have shape
(width, height) and are indexed [x, y], like the rest of the engine.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

import numpy as np

from mapweave.environment.terrain import TerrainTile

if TYPE_CHECKING:
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.types import CellCoord, CellPos


class MapGrid:
    """Tile, resource and height layers of a rectangular map.

    Attributes:
        width: Width of the grid in cells.
        height: Height of the grid in cells.
        terrain: The terrain the grid's tiles come from.
        tile_types: Template id of the tile at each cell (uint16).
        tile_indices: Index of the tile within its template (uint8).
        resource_types: Resource type at each cell, 0 for none (uint8).
        resource_densities: Resource density at each cell (uint8).
        heights: Terrain height at each cell (uint8).
    """

    def __init__(
        self,
        width: CellCoord,
        height: CellCoord,
        terrain: TerrainInfo,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.terrain = terrain

        self.tile_types = np.zeros((width, height), dtype=np.uint16, order="F")
        self.tile_indices = np.zeros((width, height), dtype=np.uint8, order="F")
        self.resource_types = np.zeros((width, height), dtype=np.uint8, order="F")
        self.resource_densities = np.zeros((width, height), dtype=np.uint8, order="F")
        self.heights = np.zeros((width, height), dtype=np.uint8, order="F")

    @classmethod
    def create_empty(
        cls,
        width: CellCoord,
        height: CellCoord,
        terrain: TerrainInfo,
        fill_tile: TerrainTile | None = None,
    ) -> MapGrid:
        """Create a grid with every cell set to fill_tile.

        Args:
            width: Grid width in cells.
            height: Grid height in cells.
            terrain: Terrain the tiles belong to.
            fill_tile: Initial tile. Defaults to the terrain's default tile.
        """
        grid = cls(width, height, terrain)
        tile = terrain.default_tile if fill_tile is None else fill_tile
        grid.tile_types[:, :] = tile.type
        grid.tile_indices[:, :] = tile.index
        return grid

    @property
    def shape(self) -> tuple[int, int]:
        return (self.width, self.height)

    def contains(self, pos: CellPos) -> bool:
        """Check if a cell position lies within the grid."""
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, pos: CellPos) -> TerrainTile:
        x, y = pos
        return TerrainTile(int(self.tile_types[x, y]), int(self.tile_indices[x, y]))

    def set_tile(self, pos: CellPos, tile: TerrainTile) -> None:
        x, y = pos
        self.tile_types[x, y] = tile.type
        self.tile_indices[x, y] = tile.index

    def cells(self) -> Iterator[CellPos]:
        """Iterate over every cell in row-major order (y outer, x inner)."""
        for y in range(self.height):
            for x in range(self.width):
                yield (x, y)

    def copy(self) -> MapGrid:
        """Return an independent copy of all layers (terrain is shared)."""
        other = MapGrid(self.width, self.height, self.terrain)
        other.tile_types[:, :] = self.tile_types
        other.tile_indices[:, :] = self.tile_indices
        other.resource_types[:, :] = self.resource_types
        other.resource_densities[:, :] = self.resource_densities
        other.heights[:, :] = self.heights
        return other

    def same_layers(self, other: MapGrid) -> bool:
        """True if every layer of other is identical to this grid's."""
        return (
            self.shape == other.shape
            and np.array_equal(self.tile_types, other.tile_types)
            and np.array_equal(self.tile_indices, other.tile_indices)
            and np.array_equal(self.resource_types, other.resource_types)
            and np.array_equal(self.resource_densities, other.resource_densities)
            and np.array_equal(self.heights, other.heights)
        )
