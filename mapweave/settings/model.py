"""Generator settings: loading, compiling and randomizing option choices.

GeneratorSettings is built once per (schema, terrain) pair. Callers keep their
own Option -> Choice mapping (starting from default_choices()), may replace it
with randomize(), and finally turn it into a flat SettingsDocument with
compile(). Neither compile() nor randomize() mutates its input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, TypeVar

from mapweave.errors import InvalidChoiceError, SchemaError
from mapweave.localization import EMPTY_CATALOG
from mapweave.settings.options import Choice, Option

T = TypeVar("T")

if TYPE_CHECKING:
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.localization import MessageCatalog
    from mapweave.settings.nodes import ConfigNode
    from mapweave.util.rng import RNG

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


class SettingsDocument:
    """An ordered, key-unique list of settings ready for a generator.

    Merging keeps the position where a key first appeared and the value it
    was last given.
    """

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self._entries: dict[str, str] = {}
        self.merge(entries)

    def merge(self, entries: Iterable[tuple[str, str]]) -> None:
        """Layer entries on top of the current ones (last write wins)."""
        for key, value in entries:
            self._entries[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SettingsDocument):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        return f"SettingsDocument({list(self.items())!r})"

    def items(self) -> Iterator[tuple[str, str]]:
        return iter(self._entries.items())

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._entries.get(key, default)

    def require(self, key: str) -> str:
        """Return the value for key.

        Raises:
            SchemaError: If the key is missing.
        """
        try:
            return self._entries[key]
        except KeyError:
            raise SchemaError(f"Missing required setting `{key}`") from None

    def get_int(self, key: str, default: int | None = None) -> int:
        text = self._text_or_default(key, default)
        if isinstance(text, int):
            return text
        try:
            return int(text.strip())
        except ValueError:
            raise SchemaError(f"Setting `{key}` is not an integer: `{text}`") from None

    def get_float(self, key: str, default: float | None = None) -> float:
        text = self._text_or_default(key, default)
        if isinstance(text, float | int):
            return float(text)
        try:
            return float(text)
        except ValueError:
            raise SchemaError(f"Setting `{key}` is not a number: `{text}`") from None

    def get_bool(self, key: str, default: bool | None = None) -> bool:
        text = self._text_or_default(key, default)
        if isinstance(text, bool):
            return text
        lowered = text.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise SchemaError(f"Setting `{key}` is not a boolean: `{text}`")

    def to_text(self) -> str:
        """Render as one `key: value` line per entry."""
        return "\n".join(f"{key}: {value}" for key, value in self.items())

    def _text_or_default(self, key: str, default: T | None) -> str | T:
        if key in self._entries:
            return self._entries[key]
        if default is None:
            raise SchemaError(f"Missing required setting `{key}`")
        return default


class GeneratorSettings:
    """The options of one generator, as offered for one terrain."""

    def __init__(self, options: Iterable[Option]) -> None:
        self.options: tuple[Option, ...] = tuple(options)

    @classmethod
    def load(
        cls,
        node: ConfigNode,
        terrain: TerrainInfo,
        catalog: MessageCatalog | None = None,
    ) -> GeneratorSettings | None:
        """Parse settings from a schema node.

        Returns:
            The settings, or None if the terrain is not compatible with the
            generator (some option ended up with no choices).

        Raises:
            SchemaError: If the schema is malformed.
        """
        catalog = catalog or EMPTY_CATALOG
        options = []
        for child in node.nodes_of_kind("Option"):
            option = Option.from_node(child.split_key()[1], child, terrain, catalog)
            if not option.compatible:
                logger.debug(
                    f"Option {option.id!r} has no choices for terrain {terrain.id!r}"
                )
                return None
            options.append(option)
        return cls(options)

    def option(self, option_id: str) -> Option:
        """Return the option with this id.

        Raises:
            KeyError: If there is no such option.
        """
        for option in self.options:
            if option.id == option_id:
                return option
        raise KeyError(option_id)

    def default_choices(self) -> dict[Option, Choice]:
        """Map every option to its default choice.

        Raises:
            SchemaError: If an option has no choices to default to.
        """
        choices: dict[Option, Choice] = {}
        for option in self.options:
            if option.default is None:
                raise SchemaError(f"Option `{option.id}` has no default choice")
            choices[option] = option.default
        return choices

    def ordered_options(self) -> list[Option]:
        """Options in canonical merge order: priority, then declaration order."""
        return sorted(self.options, key=lambda option: option.priority)

    def compile(self, choices: Mapping[Option, Choice]) -> SettingsDocument:
        """Merge the chosen settings of every option into one document.

        Raises:
            InvalidChoiceError: If an option has no choice or an illegal one.
        """
        document = SettingsDocument()
        for option in self.ordered_options():
            choice = choices.get(option)
            if choice is None:
                raise InvalidChoiceError(
                    option.display_name, f"Option `{option.id}` has no choice"
                )
            if not option.validate_choice(choice):
                raise InvalidChoiceError(option.display_name)
            document.merge(choice.settings)
        return document

    def randomize(
        self, choices: Mapping[Option, Choice], rng: RNG
    ) -> dict[Option, Choice]:
        """Return a copy of choices with every randomizable option re-rolled.

        Raises:
            NotRandomizableError: If a randomizable option cannot be randomized.
        """
        randomized = dict(choices)
        for option in self.options:
            if option.random:
                randomized[option] = option.random_choice(rng)
        return randomized


def fluent_references(node: ConfigNode) -> list[str]:
    """List every message key the schema in node would look up."""
    references: list[str] = []
    for option_node in node.nodes_of_kind("Option"):
        label = option_node.value_of("Label")
        if label is not None:
            references.append(label)
        for choice_node in option_node.nodes_of_kind("Choice"):
            choice_label = choice_node.value_of("Label")
            if choice_label is not None:
                references.append(f"{choice_label}.label")
                references.append(f"{choice_label}.description")
    return references
