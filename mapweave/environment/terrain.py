"""Terrain (tileset) information consumed by generators.

A terrain is read-only context for generation: it names the tileset (so that
choices can be filtered by it), defines the templates that tiles come from and
holds the MultiBrush collections generators can paint with.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from mapweave.types import TemplateId, TerrainId

if TYPE_CHECKING:
    from mapweave.environment.generators.multibrush import MultiBrushInfo


class TerrainTile(NamedTuple):
    """A single tile: the template it belongs to and its index in that template."""

    type: TemplateId
    index: int = 0

    @classmethod
    def parse(cls, text: str) -> TerrainTile:
        """Parse "type" or "type,index".

        Raises:
            ValueError: If the text is not one or two non-negative integers.
        """
        parts = [part.strip() for part in text.split(",")]
        if len(parts) not in (1, 2) or not all(part.isdigit() for part in parts):
            raise ValueError(f"Invalid terrain tile `{text}`")
        tile_type = int(parts[0])
        index = int(parts[1]) if len(parts) == 2 else 0
        if tile_type > 0xFFFF or index > 0xFF:
            raise ValueError(f"Terrain tile `{text}` is out of range")
        return cls(tile_type, index)

    def __str__(self) -> str:
        return f"{self.type},{self.index}"


@dataclass(frozen=True)
class TerrainTemplate:
    """A rectangular template of tiles.

    Attributes:
        id: Template id, shared by every tile cut from this template.
        size: (width, height) of the template in cells.
        cells: Row-major cell list of length width * height. None marks a hole.
            Other values are opaque terrain type names.
        pick_any: True if the template is a set of interchangeable single-cell
            variants rather than one multi-cell picture.
    """

    id: TemplateId
    size: tuple[int, int]
    cells: tuple[str | None, ...]
    pick_any: bool = False

    def __post_init__(self) -> None:
        width, height = self.size
        if len(self.cells) != width * height:
            raise ValueError(
                f"Template {self.id} has {len(self.cells)} cells, "
                f"expected {width * height}"
            )

    @property
    def tiles_count(self) -> int:
        return len(self.cells)

    def cell(self, index: int) -> str | None:
        return self.cells[index]


@dataclass
class TerrainInfo:
    """Read-only description of one terrain.

    Attributes:
        id: Terrain identifier, matched against Choice tileset filters.
        templates: Templates by id.
        default_tile: Tile used for empty maps.
        multibrush_collections: Named MultiBrush definitions.
        actor_footprints: (width, height) footprint of each actor type that
            brushes may place. Unlisted actor types occupy a single cell.
    """

    id: TerrainId
    templates: dict[TemplateId, TerrainTemplate]
    default_tile: TerrainTile = TerrainTile(0, 0)
    multibrush_collections: dict[str, tuple[MultiBrushInfo, ...]] = field(
        default_factory=dict
    )
    actor_footprints: dict[str, tuple[int, int]] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        terrain_id: TerrainId,
        templates: Iterable[TerrainTemplate],
        default_tile: TerrainTile | None = None,
        multibrush_collections: Mapping[str, Sequence[MultiBrushInfo]] | None = None,
        actor_footprints: Mapping[str, tuple[int, int]] | None = None,
    ) -> TerrainInfo:
        """Build a TerrainInfo from a template list.

        If no default tile is given, the first cell of the first template is used.
        """
        by_id: dict[TemplateId, TerrainTemplate] = {}
        for template in templates:
            if template.id in by_id:
                raise ValueError(f"Duplicate template id {template.id}")
            by_id[template.id] = template
        if default_tile is None:
            if not by_id:
                raise ValueError("A terrain needs at least one template")
            default_tile = TerrainTile(next(iter(by_id)), 0)
        collections = {
            name: tuple(infos) for name, infos in (multibrush_collections or {}).items()
        }
        return cls(
            terrain_id,
            by_id,
            default_tile,
            collections,
            dict(actor_footprints or {}),
        )

    def actor_footprint(self, actor_type: str) -> tuple[int, int]:
        return self.actor_footprints.get(actor_type, (1, 1))

    def template(self, template_id: TemplateId) -> TerrainTemplate:
        """Return the template with this id.

        Raises:
            KeyError: If the terrain does not define it.
        """
        return self.templates[template_id]

    def has_tile(self, tile: TerrainTile) -> bool:
        """Whether tile refers to a defined, non-hole cell of a known template."""
        template = self.templates.get(tile.type)
        if template is None or not 0 <= tile.index < template.tiles_count:
            return False
        return template.cell(tile.index) is not None
