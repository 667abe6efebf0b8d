"""Generator descriptors and the registry they are looked up in."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from mapweave.errors import MismatchedPlayerActorError
from mapweave.settings.model import GeneratorSettings

if TYPE_CHECKING:
    from mapweave.environment.actors import ActorDefinition, PlayerDefinition
    from mapweave.environment.map import MapGrid
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.localization import MessageCatalog
    from mapweave.settings.model import SettingsDocument
    from mapweave.settings.nodes import ConfigNode
    from mapweave.util.rng import RNG


@dataclass
class GeneratedMapData:
    """A container for everything a map generator produces.

    Attributes:
        grid: The populated grid (tiles, resources and heights).
        actors: Actor definitions by name.
        players: Player definitions by name.
    """

    grid: MapGrid
    actors: dict[str, ActorDefinition] = field(default_factory=dict)
    players: dict[str, PlayerDefinition] = field(default_factory=dict)

    def validate(self) -> None:
        """Check that every actor is owned by a generated player.

        Raises:
            MismatchedPlayerActorError: If an actor's owner is unknown.
        """
        for actor in self.actors.values():
            if actor.owner not in self.players:
                raise MismatchedPlayerActorError()


GenerateFn: TypeAlias = (
    "Callable[[MapGrid, SettingsDocument, RNG], GeneratedMapData]"
)
SettingsFn: TypeAlias = "Callable[[TerrainInfo], ConfigNode]"


@dataclass(frozen=True)
class MapGeneratorInfo:
    """Descriptor of one generator kind.

    Attributes:
        type: Unique type tag, e.g. "clear".
        name: Human-readable name.
        settings: Builds the settings schema for a terrain.
        generate: Populates a grid from a compiled settings document.
    """

    type: str
    name: str
    settings: SettingsFn
    generate: GenerateFn

    def get_settings(
        self, terrain: TerrainInfo, catalog: MessageCatalog | None = None
    ) -> GeneratorSettings | None:
        """Load this generator's settings for terrain, or None if incompatible."""
        return GeneratorSettings.load(self.settings(terrain), terrain, catalog)


class GeneratorRegistry:
    """Closed set of generator descriptors, keyed by type."""

    def __init__(self) -> None:
        self._generators: dict[str, MapGeneratorInfo] = {}

    def register(self, info: MapGeneratorInfo) -> None:
        """Add a generator.

        Raises:
            ValueError: If a generator with the same type is already registered.
        """
        if info.type in self._generators:
            raise ValueError(f"Generator type {info.type!r} is already registered")
        self._generators[info.type] = info

    def get(self, generator_type: str) -> MapGeneratorInfo:
        """Return the generator with this type.

        Raises:
            KeyError: If no such generator is registered.
        """
        return self._generators[generator_type]

    def __contains__(self, generator_type: str) -> bool:
        return generator_type in self._generators

    def __iter__(self) -> Iterator[MapGeneratorInfo]:
        return iter(self._generators.values())

    def __len__(self) -> int:
        return len(self._generators)

    def compatible(
        self, terrain: TerrainInfo, catalog: MessageCatalog | None = None
    ) -> Iterator[tuple[MapGeneratorInfo, GeneratorSettings]]:
        """Yield (info, settings) for every generator usable with terrain."""
        for info in self:
            settings = info.get_settings(terrain, catalog)
            if settings is not None:
                yield info, settings


def create_default_registry() -> GeneratorRegistry:
    """Create a registry holding the built-in generators."""
    from mapweave.environment.generators import clear, scatter

    registry = GeneratorRegistry()
    registry.register(clear.INFO)
    registry.register(scatter.INFO)
    return registry
