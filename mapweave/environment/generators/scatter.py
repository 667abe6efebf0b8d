"""Scatter generator for obstacle-strewn maps.

Clears the map to a base tile, marks a random share of its cells as
replaceable and paints one of the terrain's MultiBrush collections over them.
Bigger brushes (rock formations, tree clumps) are placed first and single
trees fill in what is left.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from mapweave import config
from mapweave.environment.actors import default_players, name_actors
from mapweave.environment.generators.area_fill import paint_area
from mapweave.environment.generators.base import GeneratedMapData, MapGeneratorInfo
from mapweave.environment.generators.clear import fill_grid, parse_tile_type
from mapweave.environment.generators.multibrush import Replaceability, load_collection
from mapweave.errors import GenerationFailure, SchemaError
from mapweave.settings.nodes import ConfigNode

if TYPE_CHECKING:
    from mapweave.environment.actors import ActorPlan
    from mapweave.environment.map import MapGrid
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.settings.model import SettingsDocument
    from mapweave.util.rng import RNG

logger = logging.getLogger(__name__)


def scatter_settings_node(
    tile_type: int, collection: str = config.SCATTER_DEFAULT_COLLECTION
) -> ConfigNode:
    """Settings schema for the scatter generator."""
    return ConfigNode.from_mapping(
        "Settings",
        {
            "Option@Tile": {
                "Integer": "Tile",
                "Default": tile_type,
                "Min": 0,
                "Max": 0xFFFF,
            },
            "Option@Trees": {
                "Label": "label-scatter-map-generator-option-trees",
                "Checkbox": "Obstacles",
                "Default": True,
                "Random": True,
            },
            "Option@Density": {
                "Label": "label-scatter-map-generator-option-density",
                "Float": "Density",
                "Default": config.SCATTER_DEFAULT_DENSITY,
                "Min": 0,
                "Max": 1,
                "Random": True,
            },
            "Option@Replaceability": {
                "Label": "label-scatter-map-generator-option-replaceability",
                "Default": "Either",
                "Choice@Either": {
                    "Label": "label-scatter-map-generator-choice-either",
                    "Settings": {"Replaceability": "Either"},
                },
                "Choice@Tile": {
                    "Label": "label-scatter-map-generator-choice-tile",
                    "Settings": {"Replaceability": "Tile"},
                },
                "Choice@Actor": {
                    "Label": "label-scatter-map-generator-choice-actor",
                    "Settings": {"Replaceability": "Actor"},
                },
            },
            "Option@PreferLarger": {
                "Label": "label-scatter-map-generator-option-prefer-larger",
                "Checkbox": "PreferLarger",
            },
            "Option@Collection": {
                f"Choice@{collection}": {
                    "Settings": {"Collection": collection},
                },
            },
        },
    )


def settings_for(terrain: TerrainInfo) -> ConfigNode:
    return scatter_settings_node(terrain.default_tile.type)


def parse_replaceability(text: str) -> Replaceability:
    """Parse "Tile", "Actor" or "Either".

    Raises:
        SchemaError: For anything else, including "None".
    """
    match text.strip().lower():
        case "tile":
            return Replaceability.TILE
        case "actor":
            return Replaceability.ACTOR
        case "either":
            return Replaceability.EITHER
        case _:
            raise SchemaError(f"Illegal replaceability `{text}`")


def generate(grid: MapGrid, settings: SettingsDocument, rng: RNG) -> GeneratedMapData:
    """Clear the map and scatter the configured brush collection over it.

    Raises:
        SchemaError: If a setting is missing or malformed.
        GenerationFailure: If the tile or collection is not in the terrain.
    """
    tile = parse_tile_type(settings)
    obstacles = settings.get_bool("Obstacles", False)
    collection = settings.get("Collection", config.SCATTER_DEFAULT_COLLECTION)
    density = settings.get_float("Density", config.SCATTER_DEFAULT_DENSITY)
    prefer_larger = settings.get_bool("PreferLarger", False)
    contract = parse_replaceability(settings.get("Replaceability", "Either"))
    if not 0.0 <= density <= 1.0:
        raise GenerationFailure(f"Density must be between 0 and 1, got {density}")

    fill_grid(grid, tile, rng)
    actor_plans: list[ActorPlan] = []

    if obstacles:
        try:
            brushes = load_collection(grid, collection)
        except KeyError:
            raise GenerationFailure(
                f"Terrain has no `{collection}` brush collection"
            ) from None

        replace = np.zeros(grid.shape, dtype=np.uint8, order="F")
        for x, y in grid.cells():
            if rng.random() < density:
                replace[x, y] = contract

        remaining = paint_area(
            grid, actor_plans, replace, brushes, rng, prefer_larger=prefer_larger
        )
        logger.debug(
            f"Scattered {len(actor_plans)} actor(s), "
            f"{np.count_nonzero(remaining)} of {np.count_nonzero(replace)} "
            "replaceable cell(s) left unpainted"
        )

    return GeneratedMapData(grid, name_actors(actor_plans), default_players())


INFO = MapGeneratorInfo(
    type="scatter",
    name="label-scatter-map-generator",
    settings=settings_for,
    generate=generate,
)
