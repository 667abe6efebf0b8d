"""Caller-side driver for map generators.

MapGeneratorTool owns the mutable state a front end needs: which generator is
selected and which choice each of its options currently holds. It is also the
one place where generation failures are caught and turned into a message.

Usage:
    tool = MapGeneratorTool(create_default_registry(), terrain, seed=42)
    tool.select("scatter")
    tool.set_value("Density", "0.5")
    outcome = tool.generate(64, 40)
    if outcome.ok:
        ...
    else:
        print(outcome.message)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mapweave import config
from mapweave.environment.map import MapGrid
from mapweave.errors import GenerationFailure, SchemaError
from mapweave.util.rng import RNGProvider

if TYPE_CHECKING:
    from mapweave.environment.generators.base import (
        GeneratedMapData,
        GeneratorRegistry,
        MapGeneratorInfo,
    )
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.localization import MessageCatalog
    from mapweave.settings.model import GeneratorSettings
    from mapweave.settings.options import Choice, Option
    from mapweave.types import CellCoord, RandomSeed

logger = logging.getLogger(__name__)


@dataclass
class GenerationOutcome:
    """Result of one generate() call: either data or a failure message."""

    data: GeneratedMapData | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None


class MapGeneratorTool:
    """Selects a generator, tracks its choices and runs it.

    Only generators whose settings load for the terrain are offered. Having
    none at all is a normal state; `selected` is then None.
    """

    def __init__(
        self,
        registry: GeneratorRegistry,
        terrain: TerrainInfo,
        catalog: MessageCatalog | None = None,
        seed: RandomSeed = config.RANDOM_SEED,
    ) -> None:
        self.terrain = terrain
        self.rng = RNGProvider(seed)
        self.generators: dict[str, MapGeneratorInfo] = {}
        self.settings: dict[str, GeneratorSettings] = {}
        self.choices: dict[str, dict[Option, Choice]] = {}

        for info, settings in registry.compatible(terrain, catalog):
            self.generators[info.type] = info
            self.settings[info.type] = settings
            self.choices[info.type] = settings.default_choices()

        self.selected: MapGeneratorInfo | None = next(
            iter(self.generators.values()), None
        )
        if self.selected is None:
            logger.info(f"No map generator is compatible with terrain {terrain.id!r}")

    def select(self, generator_type: str) -> MapGeneratorInfo:
        """Select a compatible generator by type.

        Raises:
            KeyError: If no compatible generator has that type.
        """
        self.selected = self.generators[generator_type]
        return self.selected

    @property
    def selected_settings(self) -> GeneratorSettings:
        return self.settings[self._require_selected().type]

    @property
    def selected_choices(self) -> dict[Option, Choice]:
        return self.choices[self._require_selected().type]

    def set_choice(self, option_id: str, choice: Choice) -> None:
        """Set the current choice of an option of the selected generator."""
        option = self.selected_settings.option(option_id)
        self.selected_choices[option] = choice

    def set_value(self, option_id: str, text: str) -> None:
        """Set an option of the selected generator from text.

        Freeform options take the text as their new value. Other options pick
        the choice whose id is the text.

        Raises:
            KeyError: If there is no such option, or no choice with that id.
        """
        option = self.selected_settings.option(option_id)
        if option.ui.is_freeform():
            self.selected_choices[option] = self.selected_choices[option].new_value(
                text
            )
            return
        for choice in option.choices:
            if choice.id == text:
                self.selected_choices[option] = choice
                return
        raise KeyError(f"Option `{option_id}` has no choice `{text}`")

    def randomize(self) -> None:
        """Re-roll every randomizable option of the selected generator."""
        generator_type = self._require_selected().type
        self.choices[generator_type] = self.settings[generator_type].randomize(
            self.choices[generator_type], self.rng.get("settings.randomize")
        )

    def generate(self, width: CellCoord, height: CellCoord) -> GenerationOutcome:
        """Run the selected generator on a fresh grid.

        Generation failures and schema errors are caught here and reported
        through the outcome's message. Anything else propagates.
        """
        try:
            return GenerationOutcome(data=self._generate(width, height))
        except (GenerationFailure, SchemaError) as e:
            # Generation failures are meant for the user. Everything else gets
            # its type too, for debugging purposes.
            if isinstance(e, GenerationFailure):
                message = str(e)
            else:
                message = f"{type(e).__name__}: {e}"
            logger.warning(f"Map generation failed: {message}", exc_info=e)
            return GenerationOutcome(message=message)

    def _generate(self, width: CellCoord, height: CellCoord) -> GeneratedMapData:
        info = self._require_selected()
        settings = self.settings[info.type]
        choices = self.choices[info.type]

        for option, choice in choices.items():
            if not option.validate_choice(choice):
                raise GenerationFailure(
                    f"Option `{option.display_name}` has an invalid value"
                )

        document = settings.compile(choices)
        grid = MapGrid.create_empty(width, height, self.terrain)

        logger.debug(
            f"Running {info.type!r} map generator with settings:\n"
            f"{document.to_text()}"
        )
        start = time.perf_counter()
        data = info.generate(grid, document, self.rng.get("map.generate"))
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Generator finished, taking {elapsed_ms:.1f}ms")

        data.validate()
        return data

    def _require_selected(self) -> MapGeneratorInfo:
        if self.selected is None:
            raise GenerationFailure("No map generator is available")
        return self.selected
