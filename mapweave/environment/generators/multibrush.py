"""Composite brushes that paint tiles and/or actors onto a grid.

A MultiBrush is a reusable stamp made of (offset, tile) pairs and
offset-anchored actor plans. It is assembled with chainable with_*() calls,
then frozen with finalize() (or implicitly by the first paint()). A frozen
brush never changes again, so its shape and contract can be relied upon by
the area-fill painter.

MultiBrushInfo is the schema-level definition of a brush. It can be turned
into a MultiBrush once the target grid (and therefore its terrain) is known.

Usage:
    brush = (
        MultiBrush()
        .with_actor(ActorPlan.with_footprint_size(grid, "tree", (2, 2)))
        .with_backing_tile(TerrainTile(255, 0))
        .with_weight(500)
        .finalize()
    )
    brush.paint(grid, actor_plans, (10, 4), Replaceability.EITHER)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import IntFlag
from typing import TYPE_CHECKING

from mapweave import config
from mapweave.environment.actors import ActorPlan
from mapweave.environment.terrain import TerrainTile
from mapweave.errors import BrushUsageError, SchemaError

if TYPE_CHECKING:
    from mapweave.environment.map import MapGrid
    from mapweave.environment.terrain import TerrainInfo, TerrainTemplate
    from mapweave.settings.nodes import ConfigNode
    from mapweave.types import CellPos, CellVec, TemplateId


class Replaceability(IntFlag):
    """What may replace a cell, or what a brush needs to place.

    Combining a brush contract with a cell's replaceability is a bitwise AND.
    A result of NONE means the brush cannot be painted there.
    """

    # Area cannot be replaced by a tile or obstructing actor.
    NONE = 0
    # Area must be replaced by a different tile, and may optionally be given an actor.
    TILE = 1
    # Area must be given an actor, but the underlying tile must not change.
    ACTOR = 2
    # Area can be replaced by a tile and/or actor.
    EITHER = 3


_ORIGIN: tuple[CellVec, ...] = ((0, 0),)


class MultiBrush:
    """A super template that can be used to paint both tiles and actors.

    Attributes:
        weight: Relative selection frequency. Always positive.
    """

    def __init__(self) -> None:
        self.weight: int = config.DEFAULT_BRUSH_WEIGHT
        self._tiles: list[tuple[CellVec, TerrainTile]] = []
        self._actor_plans: list[ActorPlan] = []
        self._shape: tuple[CellVec, ...] = _ORIGIN
        self._frozen = False

    # -------------------------------------------------------------------------
    # Derived properties
    # -------------------------------------------------------------------------

    @property
    def tiles(self) -> tuple[tuple[CellVec, TerrainTile], ...]:
        return tuple(self._tiles)

    @property
    def actor_plans(self) -> tuple[ActorPlan, ...]:
        return tuple(self._actor_plans)

    @property
    def has_tiles(self) -> bool:
        return bool(self._tiles)

    @property
    def has_actors(self) -> bool:
        return bool(self._actor_plans)

    @property
    def shape(self) -> tuple[CellVec, ...]:
        """Covered offsets, deduplicated and sorted row-major (y, then x).

        A brush that covers nothing has the origin as its shape.
        """
        return self._shape

    @property
    def area(self) -> int:
        return len(self._shape)

    @property
    def contract(self) -> Replaceability:
        """What the brush needs to place: TILE, ACTOR, EITHER or NONE (unusable)."""
        contract = Replaceability.NONE
        if self._tiles:
            contract |= Replaceability.TILE
        if self._actor_plans:
            contract |= Replaceability.ACTOR
        return contract

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __repr__(self) -> str:
        return (
            f"MultiBrush(weight={self.weight}, area={self.area}, "
            f"contract={self.contract.name}, tiles={len(self._tiles)}, "
            f"actors={len(self._actor_plans)})"
        )

    # -------------------------------------------------------------------------
    # Builder
    # -------------------------------------------------------------------------

    def with_tile(self, tile: TerrainTile, offset: CellVec = (0, 0)) -> MultiBrush:
        """Add a single tile, by default positioned under the origin."""
        self._check_mutable()
        self._tiles.append((offset, tile))
        self._update_shape()
        return self

    def with_template(
        self, template: TerrainTemplate, offset: CellVec | None = None
    ) -> MultiBrush:
        """Add every tile of a template, optionally with a given offset.

        By default the template is offset so that its first defined cell, in
        row-major order, lands on the origin.

        Raises:
            BrushUsageError: If the template is a pick-any template. Those
                should be split into separate single-tile brushes instead.
        """
        self._check_mutable()
        if template.pick_any:
            raise BrushUsageError(
                "PickAny not supported - create separate MultiBrushes "
                "using with_tile instead."
            )

        width, height = template.size
        for y in range(height):
            for x in range(width):
                i = y * width + x
                if template.cell(i) is None:
                    continue
                if offset is None:
                    offset = (-x, -y)
                self._tiles.append(
                    ((x + offset[0], y + offset[1]), TerrainTile(template.id, i))
                )

        self._update_shape()
        return self

    def with_template_id(
        self,
        terrain: TerrainInfo,
        template_id: TemplateId,
        offset: CellVec | None = None,
    ) -> MultiBrush:
        """Look a template up in terrain and add it (see with_template).

        Raises:
            BrushUsageError: If the terrain does not define the template.
        """
        try:
            template = terrain.template(template_id)
        except KeyError:
            raise BrushUsageError(
                f"Terrain {terrain.id!r} does not contain template with ID "
                f"{template_id}."
            ) from None
        return self.with_template(template, offset)

    def with_actor(self, plan: ActorPlan) -> MultiBrush:
        """Add an actor, using the plan's location as its offset."""
        self._check_mutable()
        self._actor_plans.append(plan)
        self._update_shape()
        return self

    def with_backing_tile(self, tile: TerrainTile) -> MultiBrush:
        """Add tile under every cell the brush already covers.

        This is useful for adding a backing tile for actors.

        Raises:
            BrushUsageError: If the brush does not cover anything yet.
        """
        self._check_mutable()
        if not self._tiles and not self._actor_plans:
            raise BrushUsageError("Cannot add a backing tile: brush has no area")
        for offset in self._shape:
            self._tiles.append((offset, tile))
        return self

    def with_weight(self, weight: int) -> MultiBrush:
        """Update the weight.

        Raises:
            BrushUsageError: If weight is not positive.
        """
        self._check_mutable()
        if weight <= 0:
            raise BrushUsageError(f"Weight was not > 0: {weight}")
        self.weight = weight
        return self

    def finalize(self) -> MultiBrush:
        """Freeze the brush. Further with_*() calls raise BrushUsageError."""
        self._frozen = True
        return self

    def clone(self) -> MultiBrush:
        """Return an unfrozen copy. Actor plans are shared, not deep-copied."""
        other = MultiBrush()
        other.weight = self.weight
        other._tiles = list(self._tiles)
        other._actor_plans = list(self._actor_plans)
        other._shape = self._shape
        return other

    def _check_mutable(self) -> None:
        if self._frozen:
            raise BrushUsageError("MultiBrush cannot be modified after finalize()")

    def _update_shape(self) -> None:
        offsets: set[CellVec] = {offset for offset, _ in self._tiles}
        for plan in self._actor_plans:
            offsets.update(plan.footprint_cells())

        if offsets:
            self._shape = tuple(sorted(offsets, key=lambda xy: (xy[1], xy[0])))
        else:
            self._shape = _ORIGIN

    # -------------------------------------------------------------------------
    # Painting
    # -------------------------------------------------------------------------

    def paint(
        self,
        grid: MapGrid,
        actor_plans: list[ActorPlan],
        anchor: CellPos,
        contract: Replaceability,
    ) -> None:
        """Paint tiles onto grid and/or append actors to actor_plans at anchor.

        contract says what may be painted:
        - TILE paints tiles only,
        - ACTOR paints actors only,
        - EITHER paints actors if the brush has any, otherwise tiles.

        Painting freezes the brush.

        Raises:
            BrushUsageError: If contract is NONE, or the brush has nothing
                the contract allows it to paint.
        """
        self._frozen = True
        match contract:
            case Replaceability.NONE:
                raise BrushUsageError("Cannot paint: Replaceability.NONE")
            case Replaceability.EITHER:
                if self._actor_plans:
                    self._paint_actors(grid, actor_plans, anchor)
                elif self._tiles:
                    self._paint_tiles(grid, anchor)
                else:
                    raise BrushUsageError("Cannot paint: no tiles or actors")
            case Replaceability.TILE:
                if not self._tiles:
                    raise BrushUsageError("Cannot paint: no tiles")
                self._paint_tiles(grid, anchor)
            case Replaceability.ACTOR:
                if not self._actor_plans:
                    raise BrushUsageError("Cannot paint: no actors")
                self._paint_actors(grid, actor_plans, anchor)

    def _paint_tiles(self, grid: MapGrid, anchor: CellPos) -> None:
        ax, ay = anchor
        for (dx, dy), tile in self._tiles:
            pos = (ax + dx, ay + dy)
            if grid.contains(pos):
                grid.set_tile(pos, tile)

    def _paint_actors(
        self, grid: MapGrid, actor_plans: list[ActorPlan], anchor: CellPos
    ) -> None:
        ax, ay = anchor
        for template_plan in self._actor_plans:
            if template_plan.grid is not grid:
                raise BrushUsageError("ActorPlan is for a different grid")
            plan = template_plan.clone()
            dx, dy = plan.location
            plan.location = (ax + dx, ay + dy)
            actor_plans.append(plan)

    # -------------------------------------------------------------------------
    # Construction from definitions
    # -------------------------------------------------------------------------

    @classmethod
    def from_info(cls, grid: MapGrid, info: MultiBrushInfo) -> MultiBrush:
        """Build a finalized brush for grid from a MultiBrushInfo.

        Raises:
            BrushUsageError: If the info references templates the grid's
                terrain does not define.
        """
        terrain = grid.terrain
        brush = cls().with_weight(info.weight)
        for actor_type in info.actors:
            plan = ActorPlan.with_footprint_size(
                grid, actor_type, terrain.actor_footprint(actor_type)
            )
            brush.with_actor(plan.align_footprint())
        if info.backing_tile is not None:
            brush.with_backing_tile(info.backing_tile)
        for template_id in info.templates:
            brush.with_template_id(terrain, template_id)
        for tile in info.tiles:
            brush.with_tile(tile)
        return brush.finalize()


def load_collection(grid: MapGrid, name: str) -> list[MultiBrush]:
    """Build the named MultiBrush collection of the grid's terrain.

    Raises:
        KeyError: If the terrain has no collection with that name.
    """
    infos = grid.terrain.multibrush_collections[name]
    return [MultiBrush.from_info(grid, info) for info in infos]


@dataclass(frozen=True)
class MultiBrushInfo:
    """Schema-level definition of a MultiBrush.

    Offsets cannot be specified: actors are aligned to the origin and
    templates are auto-offset.
    """

    weight: int = config.DEFAULT_BRUSH_WEIGHT
    actors: tuple[str, ...] = ()
    backing_tile: TerrainTile | None = None
    templates: tuple[TemplateId, ...] = ()
    tiles: tuple[TerrainTile, ...] = ()

    @classmethod
    def from_node(cls, node: ConfigNode) -> MultiBrushInfo:
        """Parse a `MultiBrush@<id>` node.

        Keys may repeat using `@` suffixes, e.g. `Actor@1`, `Actor@2`.

        Raises:
            SchemaError: On unknown keys or malformed values.
        """
        weight = config.DEFAULT_BRUSH_WEIGHT
        actors: list[str] = []
        backing_tile: TerrainTile | None = None
        templates: list[TemplateId] = []
        tiles: list[TerrainTile] = []

        for child in node.nodes:
            value = (child.value or "").strip()
            match child.kind:
                case "Weight":
                    if not value.lstrip("+-").isdigit():
                        raise SchemaError(f"Invalid MultiBrush Weight `{value}`")
                    weight = int(value)
                    if weight <= 0:
                        raise SchemaError(f"Invalid MultiBrush Weight `{value}`")
                case "Actor":
                    if not value:
                        raise SchemaError("MultiBrush Actor needs an actor type")
                    actors.append(value)
                case "BackingTile":
                    backing_tile = _parse_tile(value, "BackingTile")
                case "Template":
                    if not value.isdigit() or int(value) > 0xFFFF:
                        raise SchemaError(f"Invalid MultiBrush Template `{value}`")
                    templates.append(int(value))
                case "Tile":
                    tiles.append(_parse_tile(value, "Tile"))
                case other:
                    raise SchemaError(f"Unrecognized MultiBrush key {other}")

        return cls(weight, tuple(actors), backing_tile, tuple(templates), tuple(tiles))

    @classmethod
    def parse_collection(cls, node: ConfigNode) -> tuple[MultiBrushInfo, ...]:
        """Parse a node whose children are all `MultiBrush@<id>` nodes.

        Raises:
            SchemaError: If any child is something else.
        """
        infos = []
        for child in node.nodes:
            if child.kind != "MultiBrush":
                raise SchemaError(f"Expected `MultiBrush@*` but got `{child.key}`")
            infos.append(cls.from_node(child))
        return tuple(infos)


def parse_collections(
    nodes: Mapping[str, ConfigNode] | Sequence[ConfigNode],
) -> dict[str, tuple[MultiBrushInfo, ...]]:
    """Parse several named collections, keyed by node key."""
    items = nodes.values() if isinstance(nodes, Mapping) else nodes
    return {node.key: MultiBrushInfo.parse_collection(node) for node in items}


def _parse_tile(value: str, key: str) -> TerrainTile:
    try:
        return TerrainTile.parse(value)
    except ValueError:
        raise SchemaError(f"Invalid MultiBrush {key} `{value}`") from None
