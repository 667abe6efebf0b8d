"""Shared test data: a small terrain and brush helpers."""

from __future__ import annotations

import numpy as np

from mapweave.environment.generators.multibrush import MultiBrushInfo, Replaceability
from mapweave.environment.terrain import TerrainInfo, TerrainTemplate, TerrainTile

CLEAR = 255
WATER = 1
ROUGH = 2
ROCKS = 3


def make_terrain(terrain_id: str = "TEMPERAT") -> TerrainInfo:
    """A terrain with a pick-any clear template and two brush collections."""
    templates = [
        TerrainTemplate(CLEAR, (2, 2), ("Clear",) * 4, pick_any=True),
        TerrainTemplate(WATER, (1, 1), ("Water",)),
        TerrainTemplate(ROUGH, (2, 2), ("Rough",) * 4),
        TerrainTemplate(ROCKS, (3, 2), (None, "Rock", "Rock", "Rock", "Rock", None)),
    ]
    collections = {
        "Obstacles": (
            MultiBrushInfo(weight=1000, actors=("tree",)),
            MultiBrushInfo(weight=200, actors=("tree.big",)),
            MultiBrushInfo(weight=100, templates=(ROCKS,)),
        ),
        "Trees": (MultiBrushInfo(weight=1000, actors=("tree",)),),
    }
    return TerrainInfo.create(
        terrain_id,
        templates,
        default_tile=TerrainTile(CLEAR, 0),
        multibrush_collections=collections,
        actor_footprints={"tree.big": (2, 2)},
    )


def replace_grid(
    width: int, height: int, fill: Replaceability = Replaceability.EITHER
) -> np.ndarray:
    """A replaceability layer with every cell set to fill."""
    return np.full((width, height), int(fill), dtype=np.uint8, order="F")
