from __future__ import annotations

import pytest

from mapweave.environment.map import MapGrid
from mapweave.environment.terrain import TerrainInfo, TerrainTemplate, TerrainTile
from mapweave.localization import MessageCatalog
from tests.helpers import WATER, make_terrain


@pytest.fixture
def terrain() -> TerrainInfo:
    return make_terrain()


@pytest.fixture
def desert_terrain() -> TerrainInfo:
    """A terrain without brush collections, used for tileset filtering."""
    return TerrainInfo.create("DESERT", [TerrainTemplate(WATER, (1, 1), ("Water",))])


@pytest.fixture
def grid(terrain: TerrainInfo) -> MapGrid:
    return MapGrid.create_empty(8, 6, terrain, fill_tile=TerrainTile(WATER, 0))


@pytest.fixture
def catalog() -> MessageCatalog:
    return MessageCatalog(
        {
            "label-size": "Size",
            "label-trees": "Trees",
            "label-small.label": "Small",
            "label-small.description": "A small map",
            "label-large.label": "Large",
        }
    )
