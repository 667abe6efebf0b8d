"""Options and choices of a generator's settings.

An Option is one independently tunable axis of a generator's configuration.
It resolves to exactly one Choice, and each Choice contributes a small list of
key/value settings to the compiled settings document.

Options come in two families:
- Discrete options (dropdowns, checkboxes, hidden options) offer a fixed list
  of choices and only accept members of that list.
- Freeform options (integer, float, string) hold a single template choice that
  is re-valued on demand with Choice.new_value().
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from mapweave import config
from mapweave.errors import NotRandomizableError, SchemaError
from mapweave.localization import EMPTY_CATALOG

if TYPE_CHECKING:
    from mapweave.environment.terrain import TerrainInfo
    from mapweave.localization import MessageCatalog
    from mapweave.settings.nodes import ConfigNode
    from mapweave.util.rng import RNG

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")

# Keys that may appear directly under an Option node. Choice@<id> children are
# matched separately by kind.
_OPTION_KEYS = frozenset(
    {
        "Integer",
        "Float",
        "String",
        "Checkbox",
        "SimpleChoice",
        "Label",
        "Default",
        "Min",
        "Max",
        "Random",
        "Priority",
    }
)
_CHOICE_KEYS = frozenset({"Label", "Tileset", "Settings"})


class UiType(Enum):
    """How an option should be treated for UI purposes."""

    HIDDEN = auto()
    DROPDOWN = auto()
    CHECKBOX = auto()
    INTEGER = auto()
    FLOAT = auto()
    STRING = auto()

    def is_freeform(self) -> bool:
        """Whether the option takes free text rather than a listed choice."""
        return self in (UiType.INTEGER, UiType.FLOAT, UiType.STRING)


@dataclass(frozen=True, eq=False)
class Choice:
    """One concrete value for an Option.

    Choices compare by identity: two choices with the same settings are still
    different choices unless they are the same object.

    Attributes:
        id: Identifies the choice within its option. For freeform options this
            is the value itself.
        label: Display label, already localized. None for unlabelled choices.
        description: Tooltip text, already localized. None means no tooltip.
        tileset: Terrain ids the choice is offered for. None means all.
        settings: Ordered (key, value) fragment merged into compiled settings.
    """

    id: str | None
    label: str | None = None
    description: str | None = None
    tileset: frozenset[str] | None = None
    settings: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def from_node(
        cls,
        choice_id: str | None,
        node: ConfigNode,
        catalog: MessageCatalog = EMPTY_CATALOG,
    ) -> Choice:
        """Parse a `Choice@<id>` node.

        Raises:
            SchemaError: On unknown keys or a missing Settings node.
        """
        for child in node.nodes:
            if child.key not in _CHOICE_KEYS:
                raise SchemaError(f"Unknown key `{child.key}` in choice `{choice_id}`")

        label = description = None
        label_key = node.value_of("Label")
        if label_key is not None:
            label = catalog.get_message(f"{label_key}.label")
            description = catalog.try_get_message(f"{label_key}.description")

        tileset_value = node.value_of("Tileset")
        tileset = None
        if tileset_value is not None:
            tileset = frozenset(part.strip() for part in tileset_value.split(","))

        settings_node = node.node_with_key("Settings")
        settings = tuple(
            (child.key, child.value if child.value is not None else "")
            for child in settings_node.nodes
        )
        return cls(choice_id, label, description, tileset, settings)

    @classmethod
    def for_setting(cls, setting: str, value: str) -> Choice:
        """Create a choice that sets one top-level setting to value."""
        return cls(value, value, None, None, ((setting, value),))

    def allowed(self, terrain: TerrainInfo) -> bool:
        """Check whether this choice is permitted for this terrain."""
        return self.tileset is None or terrain.id in self.tileset

    def new_value(self, value: str) -> Choice:
        """For single-setting choices, create a new choice with a different value.

        Raises:
            ValueError: If the choice does not consist of exactly one setting.
        """
        if len(self.settings) != 1:
            raise ValueError("new_value can only be used on single-setting choices")
        return Choice.for_setting(self.settings[0][0], value)


@dataclass(frozen=True, eq=False)
class Option:
    """One tunable axis of a generator's settings.

    Attributes:
        id: Unique identifier within the settings.
        label: Display label, already localized. None for unlabelled options.
        choices: For discrete options, the allowed choices. For freeform
            options, the single template choice holding the default value.
        default: The default choice.
        ui: How the option is presented.
        min: Inclusive lower bound for numeric options.
        max: Inclusive upper bound for numeric options.
        random: Whether the option may be randomized.
        priority: Settings layering priority. Higher overrides lower.
    """

    id: str | None
    label: str | None
    choices: tuple[Choice, ...]
    default: Choice | None
    ui: UiType
    min: float = -math.inf
    max: float = math.inf
    random: bool = False
    priority: int = 0

    @property
    def display_name(self) -> str:
        """Name used in user-facing messages."""
        return self.label or self.id or "?"

    @property
    def compatible(self) -> bool:
        """False if no choice survived the terrain filter."""
        return len(self.choices) > 0

    @classmethod
    def from_node(
        cls,
        option_id: str | None,
        node: ConfigNode,
        terrain: TerrainInfo,
        catalog: MessageCatalog = EMPTY_CATALOG,
    ) -> Option:
        """Parse an `Option@<id>` node.

        Options whose choices are all filtered out by the terrain come back
        with no choices; check Option.compatible.

        Raises:
            SchemaError: If the declaration is malformed.
        """
        for child in node.nodes:
            if child.kind != "Choice" and child.key not in _OPTION_KEYS:
                raise SchemaError(f"Unknown key `{child.key}` in option `{option_id}`")

        label_key = node.value_of("Label")
        label = catalog.get_message(label_key) if label_key is not None else None
        minimum = _parse_float(node, "Min", -math.inf, option_id)
        maximum = _parse_float(node, "Max", math.inf, option_id)
        random = _parse_bool(node, "Random", False, option_id)
        priority = _parse_int(node, "Priority", 0, option_id)
        default_value = node.value_of("Default")

        text_node = (
            node.node_with_key_or_default("Integer")
            or node.node_with_key_or_default("Float")
            or node.node_with_key_or_default("String")
        )
        checkbox_node = node.node_with_key_or_default("Checkbox")

        if text_node is not None:
            setting = _setting_name(text_node, option_id)
            choice = Choice.for_setting(setting, default_value or "")
            ui = {
                "Integer": UiType.INTEGER,
                "Float": UiType.FLOAT,
                "String": UiType.STRING,
            }[text_node.key]
            if ui is UiType.INTEGER:
                if minimum == -math.inf:
                    minimum = config.INT_MIN
                if maximum == math.inf:
                    maximum = config.INT_MAX
            option = cls(
                option_id,
                label,
                (choice,),
                choice,
                ui,
                minimum,
                maximum,
                random,
                priority,
            )
            if not option.validate_choice(choice):
                raise SchemaError(
                    f"Option `{option_id}` has invalid Default `{default_value}`"
                )
            return option

        if checkbox_node is not None:
            setting = _setting_name(checkbox_node, option_id)
            false_choice = Choice.for_setting(setting, "False")
            true_choice = Choice.for_setting(setting, "True")
            enabled = (default_value or "False") == "True"
            return cls(
                option_id,
                label,
                (false_choice, true_choice),
                true_choice if enabled else false_choice,
                UiType.CHECKBOX,
                minimum,
                maximum,
                random,
                priority,
            )

        simple_node = node.node_with_key_or_default("SimpleChoice")
        if simple_node is not None:
            setting = _setting_name(simple_node, option_id)
            values_node = simple_node.node_with_key("Values")
            values = (values_node.value or "").split(",")
            choices = tuple(Choice.for_setting(setting, value) for value in values)
        else:
            choices = tuple(
                choice
                for choice in (
                    Choice.from_node(child.split_key()[1], child, catalog)
                    for child in node.nodes_of_kind("Choice")
                )
                if choice.allowed(terrain)
            )

        default = _resolve_default(choices, default_value, option_id)
        ui = UiType.HIDDEN if label is None else UiType.DROPDOWN
        return cls(
            option_id,
            label,
            choices,
            default,
            ui,
            minimum,
            maximum,
            random,
            priority,
        )

    def validate_choice(self, choice: Choice) -> bool:
        """Check whether choice is a legal value for this option."""
        match self.ui:
            case UiType.INTEGER:
                text = (choice.id or "").strip()
                if not _INTEGER_PATTERN.fullmatch(text):
                    return False
                return self.min <= int(text) <= self.max
            case UiType.FLOAT:
                try:
                    value = float(choice.id or "")
                except ValueError:
                    return False
                return not math.isnan(value) and self.min <= value <= self.max
            case UiType.STRING:
                return True
            case _:
                return any(choice is candidate for candidate in self.choices)

    def random_choice(self, rng: RNG) -> Choice:
        """Return a uniformly random legal choice, or the default if not random.

        Raises:
            NotRandomizableError: If the option cannot produce a random value.
        """
        if not self.random:
            if self.default is None:
                raise NotRandomizableError(f"Option `{self.id}` has no default")
            return self.default

        match self.ui:
            case UiType.INTEGER:
                low, high = math.ceil(self.min), math.floor(self.max)
                if low > high:
                    raise NotRandomizableError(
                        f"Option `{self.id}` has no integer between Min and Max"
                    )
                value = rng.randint(low, high)
                return self._template().new_value(str(value))
            case UiType.FLOAT:
                if not (math.isfinite(self.min) and math.isfinite(self.max)):
                    raise NotRandomizableError(
                        f"Option `{self.id}` needs finite Min and Max to be randomized"
                    )
                value = rng.uniform(self.min, self.max)
                return self._template().new_value(repr(value))
            case UiType.CHECKBOX | UiType.DROPDOWN:
                if not self.choices:
                    raise NotRandomizableError(
                        f"Map is not compatible with option `{self.id}`"
                    )
                return self.choices[rng.randrange(0, len(self.choices))]
            case _:
                raise NotRandomizableError(
                    f"Option `{self.id}` does not have a randomizable type"
                )

    def _template(self) -> Choice:
        if self.default is None:
            raise NotRandomizableError(f"Option `{self.id}` has no default")
        return self.default


def _setting_name(node: ConfigNode, option_id: str | None) -> str:
    if not node.value:
        raise SchemaError(f"`{node.key}` in option `{option_id}` needs a setting name")
    return node.value


def _resolve_default(
    choices: tuple[Choice, ...], default_value: str | None, option_id: str | None
) -> Choice | None:
    if not choices:
        return None
    if default_value is None:
        return choices[0]
    for candidate in default_value.split(","):
        for choice in choices:
            if choice.id == candidate:
                return choice
    raise SchemaError(
        f"None of option `{option_id}`'s default choices `{default_value}` are valid"
    )


def _parse_float(
    node: ConfigNode, key: str, default: float, option_id: str | None
) -> float:
    text = node.value_of(key)
    if text is None:
        return default
    try:
        value = float(text)
    except ValueError:
        raise SchemaError(
            f"Option `{option_id}` has invalid {key} `{text}`"
        ) from None
    if math.isnan(value):
        raise SchemaError(f"Option `{option_id}` has invalid {key} `{text}`")
    return value


def _parse_int(node: ConfigNode, key: str, default: int, option_id: str | None) -> int:
    text = node.value_of(key)
    if text is None:
        return default
    if not _INTEGER_PATTERN.fullmatch(text.strip()):
        raise SchemaError(f"Option `{option_id}` has invalid {key} `{text}`")
    return int(text)


def _parse_bool(
    node: ConfigNode, key: str, default: bool, option_id: str | None
) -> bool:
    text = node.value_of(key)
    if text is None:
        return default
    match text.strip().lower():
        case "true":
            return True
        case "false":
            return False
        case _:
            raise SchemaError(f"Option `{option_id}` has invalid {key} `{text}`")
