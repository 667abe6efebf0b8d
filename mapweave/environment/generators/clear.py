"""A map generator that clears a map."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mapweave.environment.actors import default_players
from mapweave.environment.generators.base import GeneratedMapData, MapGeneratorInfo
from mapweave.environment.terrain import TerrainTile
from mapweave.errors import GenerationFailure, SchemaError
from mapweave.settings.nodes import ConfigNode
from mapweave.util.rng import next_int

if TYPE_CHECKING:
    from mapweave.environment.map import MapGrid
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.settings.model import SettingsDocument
    from mapweave.types import TemplateId
    from mapweave.util.rng import RNG


def clear_settings_node(tile_type: TemplateId) -> ConfigNode:
    """Settings schema offering a single tile type option."""
    return ConfigNode.from_mapping(
        "Settings",
        {
            "Option@Tile": {
                "Label": "label-clear-map-generator-option-tile",
                "Integer": "Tile",
                "Default": tile_type,
                "Min": 0,
                "Max": 0xFFFF,
            },
        },
    )


def settings_for(terrain: TerrainInfo) -> ConfigNode:
    return clear_settings_node(terrain.default_tile.type)


def parse_tile_type(settings: SettingsDocument, key: str = "Tile") -> TerrainTile:
    """Read a tile type setting as the first tile of that template.

    Raises:
        SchemaError: If the setting is missing or not a tile type.
    """
    text = settings.require(key).strip()
    if not text.isdigit() or int(text) > 0xFFFF:
        raise SchemaError("Illegal tile type")
    return TerrainTile(int(text), 0)


def fill_grid(grid: MapGrid, tile: TerrainTile, rng: RNG) -> None:
    """Set every cell to tile and remove resources and heights.

    If the tile belongs to a pick-any template, each cell gets a random
    variant of it.

    Raises:
        GenerationFailure: If the terrain does not have the tile.
    """
    terrain = grid.terrain
    if not terrain.has_tile(tile):
        raise GenerationFailure("Illegal tile type")

    template = terrain.template(tile.type)
    for pos in grid.cells():
        if template.pick_any:
            index = next_int(rng, 0, template.tiles_count)
            grid.set_tile(pos, TerrainTile(tile.type, index))
        else:
            grid.set_tile(pos, tile)

    grid.resource_types[:, :] = 0
    grid.resource_densities[:, :] = 0
    grid.heights[:, :] = 0


def generate(grid: MapGrid, settings: SettingsDocument, rng: RNG) -> GeneratedMapData:
    """Clear the map to the Tile setting. No actors are produced."""
    fill_grid(grid, parse_tile_type(settings), rng)
    return GeneratedMapData(grid, {}, default_players())


INFO = MapGeneratorInfo(
    type="clear",
    name="label-clear-map-generator",
    settings=settings_for,
    generate=generate,
)
