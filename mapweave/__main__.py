"""Command line entry point: run a map generator on a built-in demo terrain.

Usage:
    python -m mapweave --list
    python -m mapweave --generator scatter --seed 42 --set Density=0.5
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

import numpy as np

from mapweave import config
from mapweave.environment.generators.base import create_default_registry
from mapweave.environment.generators.multibrush import parse_collections
from mapweave.environment.terrain import TerrainInfo, TerrainTemplate, TerrainTile
from mapweave.settings.nodes import ConfigNode
from mapweave.tool import MapGeneratorTool

if TYPE_CHECKING:
    from mapweave.environment.generators.base import GeneratedMapData

DEMO_TERRAIN_ID = "DEMO"


def build_demo_terrain() -> TerrainInfo:
    """A small temperate terrain with one obstacle brush collection."""
    templates = [
        TerrainTemplate(255, (4, 4), ("Clear",) * 16, pick_any=True),
        TerrainTemplate(1, (1, 1), ("Water",)),
        TerrainTemplate(2, (2, 2), ("Rough",) * 4),
        TerrainTemplate(3, (3, 2), ("Rock", "Rock", None, "Rock", "Rock", "Rock")),
    ]
    collections = parse_collections(
        [
            ConfigNode.from_mapping(
                config.SCATTER_DEFAULT_COLLECTION,
                {
                    "MultiBrush@Tree": {"Actor": "t01"},
                    "MultiBrush@TreeBig": {"Weight": 200, "Actor": "t05"},
                    "MultiBrush@Boulder": {
                        "Weight": 250,
                        "Actor": "boulder1",
                        "BackingTile": "2,0",
                    },
                    "MultiBrush@Rocks": {"Weight": 150, "Template": 3},
                },
            )
        ]
    )
    return TerrainInfo.create(
        DEMO_TERRAIN_ID,
        templates,
        default_tile=TerrainTile(255, 0),
        multibrush_collections=collections,
        actor_footprints={"t05": (2, 2)},
    )


def _print_generators(tool: MapGeneratorTool) -> None:
    for generator_type, info in tool.generators.items():
        print(f"{generator_type}: {info.name}")
        choices = tool.choices[generator_type]
        for option in tool.settings[generator_type].options:
            choice = choices[option]
            flags = " (random)" if option.random else ""
            print(f"  {option.id} [{option.ui.name.lower()}] = {choice.id}{flags}")


def _print_summary(generator_type: str, data: GeneratedMapData) -> None:
    grid = data.grid
    print(f"Generated {grid.width}x{grid.height} map with {generator_type!r}")
    types, counts = np.unique(grid.tile_types, return_counts=True)
    for tile_type, count in zip(types, counts, strict=True):
        print(f"  tile {int(tile_type):>5}: {int(count)} cell(s)")
    print(f"  actors: {len(data.actors)}")
    print(f"  players: {', '.join(data.players)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="mapweave", description="Run a map generator on a demo terrain"
    )
    parser.add_argument(
        "--generator",
        default=config.DEFAULT_GENERATOR,
        help=f"Generator type to run (default: {config.DEFAULT_GENERATOR})",
    )
    parser.add_argument("--width", type=int, default=config.DEFAULT_MAP_WIDTH)
    parser.add_argument("--height", type=int, default=config.DEFAULT_MAP_HEIGHT)
    parser.add_argument(
        "--seed",
        default=config.RANDOM_SEED,
        help=f"Master random seed (default: {config.RANDOM_SEED})",
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="OPTION=VALUE",
        help="Override an option of the selected generator (repeatable)",
    )
    parser.add_argument(
        "--random",
        action="store_true",
        help="Randomize every randomizable option before generating",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the available generators and their options, then exit",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=config.LOG_FORMAT,
    )

    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")

    tool = MapGeneratorTool(
        create_default_registry(), build_demo_terrain(), seed=args.seed
    )
    if args.list:
        _print_generators(tool)
        return 0

    try:
        tool.select(args.generator)
    except KeyError:
        parser.error(f"unknown generator {args.generator!r}")

    if args.random:
        tool.randomize()

    for assignment in args.set:
        option_id, sep, value = assignment.partition("=")
        if not sep:
            parser.error(f"--set expects OPTION=VALUE, got {assignment!r}")
        try:
            tool.set_value(option_id.strip(), value.strip())
        except KeyError:
            parser.error(f"cannot set {assignment!r} for {args.generator!r}")

    outcome = tool.generate(args.width, args.height)
    if outcome.data is None:
        print(f"Map generation failed: {outcome.message}", file=sys.stderr)
        return 1

    _print_summary(args.generator, outcome.data)
    return 0


if __name__ == "__main__":
    sys.exit(main())
