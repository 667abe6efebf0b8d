"""Map generators and the brushes they paint with.

This package provides the generator registry, the MultiBrush model and the
area-fill painter that lays brushes over replaceable cells.
"""

from .area_fill import paint_area
from .base import (
    GeneratedMapData,
    GeneratorRegistry,
    MapGeneratorInfo,
    create_default_registry,
)
from .multibrush import MultiBrush, MultiBrushInfo, Replaceability, load_collection

__all__ = [
    "GeneratedMapData",
    "GeneratorRegistry",
    "MapGeneratorInfo",
    "MultiBrush",
    "MultiBrushInfo",
    "Replaceability",
    "create_default_registry",
    "load_collection",
    "paint_area",
]
