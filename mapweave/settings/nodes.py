"""Generic declarative configuration tree.

Generator schemas arrive as an already-parsed tree of nodes. Each node has a
key (optionally suffixed with `@<id>`, e.g. `Option@Density`), an optional
scalar value and ordered child nodes. This module only models that tree; the
text format it is read from is handled elsewhere.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from mapweave import config
from mapweave.errors import SchemaError


@dataclass(frozen=True)
class ConfigNode:
    """One `key[@id] -> (value, children)` node of a configuration tree.

    Attributes:
        key: The full key, including any `@<id>` suffix.
        value: Scalar value as written, or None.
        nodes: Ordered child nodes.
    """

    key: str
    value: str | None = None
    nodes: tuple[ConfigNode, ...] = field(default_factory=tuple)

    def split_key(self) -> tuple[str, str | None]:
        """Split the key into its kind and optional id.

        "Option@Density" -> ("Option", "Density"), "Label" -> ("Label", None).
        """
        kind, sep, node_id = self.key.partition(config.NODE_ID_SEPARATOR)
        return kind, (node_id if sep else None)

    @property
    def kind(self) -> str:
        return self.split_key()[0]

    def node_with_key_or_default(self, key: str) -> ConfigNode | None:
        """Return the first child whose full key equals key, or None."""
        for node in self.nodes:
            if node.key == key:
                return node
        return None

    def node_with_key(self, key: str) -> ConfigNode:
        """Return the first child whose full key equals key.

        Raises:
            SchemaError: If there is no such child.
        """
        node = self.node_with_key_or_default(key)
        if node is None:
            raise SchemaError(f"`{self.key}` is missing required key `{key}`")
        return node

    def value_of(self, key: str) -> str | None:
        """Return the scalar value of the child with this key, if present."""
        node = self.node_with_key_or_default(key)
        return None if node is None else node.value

    def nodes_of_kind(self, kind: str) -> Iterator[ConfigNode]:
        """Iterate over children whose key kind (before `@`) equals kind."""
        return (node for node in self.nodes if node.kind == kind)

    @classmethod
    def from_mapping(cls, key: str, mapping: Mapping[str, Any]) -> ConfigNode:
        """Build a node tree from nested mappings.

        Each mapping entry becomes a child node:
        - a scalar (str, int, float, bool) becomes the child's value,
        - a mapping becomes the child's children,
        - a (value, mapping) pair supplies both,
        - None produces a bare key.

        Non-string scalars are converted with str(), so True becomes "True".

        Example:
            ConfigNode.from_mapping("Settings", {
                "Option@Trees": {"Label": "trees", "Checkbox": "Trees"},
            })
        """
        return cls(key=key, value=None, nodes=_children_from_mapping(mapping))


def _children_from_mapping(mapping: Mapping[str, Any]) -> tuple[ConfigNode, ...]:
    return tuple(_node_from_entry(key, entry) for key, entry in mapping.items())


def _node_from_entry(key: str, entry: Any) -> ConfigNode:
    if entry is None:
        return ConfigNode(key)
    if isinstance(entry, Mapping):
        return ConfigNode(key, None, _children_from_mapping(entry))
    if isinstance(entry, tuple):
        if len(entry) != 2 or not isinstance(entry[1], Mapping):
            raise SchemaError(f"`{key}` must be a (value, children) pair")
        value, children = entry
        return ConfigNode(
            key,
            None if value is None else str(value),
            _children_from_mapping(children),
        )
    return ConfigNode(key, str(entry))
