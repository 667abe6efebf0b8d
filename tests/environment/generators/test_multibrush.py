"""Tests for the MultiBrush builder, painting and schema parsing."""

from __future__ import annotations

import pytest

from mapweave.environment.actors import ActorPlan
from mapweave.environment.generators.multibrush import (
    MultiBrush,
    MultiBrushInfo,
    Replaceability,
    load_collection,
    parse_collections,
)
from mapweave.environment.map import MapGrid
from mapweave.environment.terrain import TerrainInfo, TerrainTemplate, TerrainTile
from mapweave.errors import BrushUsageError, SchemaError
from mapweave.settings.nodes import ConfigNode
from tests.helpers import CLEAR, ROCKS, ROUGH, WATER

# =============================================================================
# Replaceability
# =============================================================================


class TestReplaceability:
    def test_either_is_tile_and_actor(self) -> None:
        assert Replaceability.EITHER == Replaceability.TILE | Replaceability.ACTOR

    def test_intersection(self) -> None:
        assert Replaceability.EITHER & Replaceability.TILE == Replaceability.TILE
        assert Replaceability.ACTOR & Replaceability.TILE == Replaceability.NONE


# =============================================================================
# Builder
# =============================================================================


class TestBuilder:
    def test_empty_brush(self) -> None:
        brush = MultiBrush()
        assert brush.shape == ((0, 0),)
        assert brush.area == 1
        assert brush.contract == Replaceability.NONE
        assert brush.weight == 1000

    def test_tile_brush(self) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 0), (1, 0))
        assert brush.shape == ((1, 0),)
        assert brush.contract == Replaceability.TILE
        assert brush.has_tiles
        assert not brush.has_actors

    def test_shape_is_deduplicated_and_row_major(self) -> None:
        brush = (
            MultiBrush()
            .with_tile(TerrainTile(ROUGH, 0), (1, 1))
            .with_tile(TerrainTile(ROUGH, 1), (0, 1))
            .with_tile(TerrainTile(ROUGH, 2), (2, 0))
            .with_tile(TerrainTile(ROUGH, 3), (1, 1))
        )
        assert brush.shape == ((2, 0), (0, 1), (1, 1))
        assert brush.area == 3

    def test_actor_brush_covers_footprint(self, grid: MapGrid) -> None:
        plan = ActorPlan.with_footprint_size(grid, "tree.big", (2, 2))
        brush = MultiBrush().with_actor(plan)
        assert brush.shape == ((0, 0), (1, 0), (0, 1), (1, 1))
        assert brush.contract == Replaceability.ACTOR

    def test_actor_and_tile_brush_is_either(self, grid: MapGrid) -> None:
        brush = (
            MultiBrush()
            .with_actor(ActorPlan(grid, "tree"))
            .with_backing_tile(TerrainTile(ROUGH, 0))
        )
        assert brush.contract == Replaceability.EITHER
        assert brush.tiles == (((0, 0), TerrainTile(ROUGH, 0)),)

    def test_backing_tile_covers_whole_shape(self, grid: MapGrid) -> None:
        brush = (
            MultiBrush()
            .with_actor(ActorPlan.with_footprint_size(grid, "tree.big", (2, 1)))
            .with_backing_tile(TerrainTile(ROUGH, 0))
        )
        assert [offset for offset, _ in brush.tiles] == [(0, 0), (1, 0)]

    def test_backing_tile_on_empty_brush_raises(self) -> None:
        with pytest.raises(BrushUsageError):
            MultiBrush().with_backing_tile(TerrainTile(ROUGH, 0))

    @pytest.mark.parametrize("weight", [0, -5])
    def test_non_positive_weight_raises(self, weight: int) -> None:
        with pytest.raises(BrushUsageError):
            MultiBrush().with_weight(weight)

    def test_with_weight(self) -> None:
        assert MultiBrush().with_weight(250).weight == 250


class TestTemplates:
    def test_template_auto_offset_uses_first_cell_row_major(
        self, terrain: TerrainInfo
    ) -> None:
        brush = MultiBrush().with_template(terrain.template(ROCKS))

        # The first defined cell is (1, 0), which lands on the origin.
        assert brush.tiles == (
            ((0, 0), TerrainTile(ROCKS, 1)),
            ((1, 0), TerrainTile(ROCKS, 2)),
            ((-1, 1), TerrainTile(ROCKS, 3)),
            ((0, 1), TerrainTile(ROCKS, 4)),
        )
        assert brush.shape == ((0, 0), (1, 0), (-1, 1), (0, 1))

    def test_template_explicit_offset(self, terrain: TerrainInfo) -> None:
        brush = MultiBrush().with_template(terrain.template(ROUGH), (2, 3))
        assert [offset for offset, _ in brush.tiles] == [
            (2, 3),
            (3, 3),
            (2, 4),
            (3, 4),
        ]

    def test_pick_any_template_raises(self, terrain: TerrainInfo) -> None:
        with pytest.raises(BrushUsageError, match="PickAny"):
            MultiBrush().with_template(terrain.template(CLEAR))

    def test_template_id_lookup(self, terrain: TerrainInfo) -> None:
        brush = MultiBrush().with_template_id(terrain, WATER)
        assert brush.tiles == (((0, 0), TerrainTile(WATER, 0)),)

    def test_unknown_template_id_raises(self, terrain: TerrainInfo) -> None:
        with pytest.raises(BrushUsageError):
            MultiBrush().with_template_id(terrain, 999)


class TestFreezing:
    def test_builder_calls_after_finalize_raise(self) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 0)).finalize()
        assert brush.frozen
        with pytest.raises(BrushUsageError):
            brush.with_tile(TerrainTile(ROUGH, 1))
        with pytest.raises(BrushUsageError):
            brush.with_weight(5)

    def test_paint_freezes(self, grid: MapGrid) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 0))
        brush.paint(grid, [], (0, 0), Replaceability.TILE)
        with pytest.raises(BrushUsageError):
            brush.with_tile(TerrainTile(ROUGH, 1))

    def test_clone_is_unfrozen_copy(self) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 0)).with_weight(7).finalize()
        copy = brush.clone().with_tile(TerrainTile(ROUGH, 1), (1, 0))
        assert copy.weight == 7
        assert copy.area == 2
        assert brush.area == 1


# =============================================================================
# Painting
# =============================================================================


class TestPaint:
    def _either_brush(self, grid: MapGrid) -> MultiBrush:
        return (
            MultiBrush()
            .with_actor(ActorPlan.with_footprint_size(grid, "tree.big", (2, 2)))
            .with_backing_tile(TerrainTile(ROUGH, 0))
            .finalize()
        )

    def test_tile_contract_paints_tiles_only(self, grid: MapGrid) -> None:
        plans: list[ActorPlan] = []
        self._either_brush(grid).paint(grid, plans, (3, 2), Replaceability.TILE)

        assert plans == []
        assert grid.get_tile((3, 2)) == TerrainTile(ROUGH, 0)
        assert grid.get_tile((4, 3)) == TerrainTile(ROUGH, 0)
        assert grid.get_tile((5, 2)) == TerrainTile(WATER, 0)

    def test_actor_contract_paints_actors_only(self, grid: MapGrid) -> None:
        plans: list[ActorPlan] = []
        self._either_brush(grid).paint(grid, plans, (3, 2), Replaceability.ACTOR)

        assert len(plans) == 1
        assert plans[0].location == (3, 2)
        assert plans[0].footprint_cells() == [(3, 2), (4, 2), (3, 3), (4, 3)]
        assert grid.get_tile((3, 2)) == TerrainTile(WATER, 0)

    def test_either_prefers_actors(self, grid: MapGrid) -> None:
        plans: list[ActorPlan] = []
        self._either_brush(grid).paint(grid, plans, (0, 0), Replaceability.EITHER)
        assert len(plans) == 1
        assert grid.get_tile((0, 0)) == TerrainTile(WATER, 0)

    def test_either_falls_back_to_tiles(self, grid: MapGrid) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 2))
        brush.paint(grid, [], (1, 1), Replaceability.EITHER)
        assert grid.get_tile((1, 1)) == TerrainTile(ROUGH, 2)

    def test_painted_plans_are_clones(self, grid: MapGrid) -> None:
        brush = self._either_brush(grid)
        plans: list[ActorPlan] = []
        brush.paint(grid, plans, (1, 1), Replaceability.ACTOR)
        brush.paint(grid, plans, (5, 3), Replaceability.ACTOR)

        assert [plan.location for plan in plans] == [(1, 1), (5, 3)]
        assert brush.actor_plans[0].location == (0, 0)

    def test_tiles_are_clipped_to_grid(self, grid: MapGrid) -> None:
        brush = self._either_brush(grid)
        brush.paint(grid, [], (7, 5), Replaceability.TILE)
        assert grid.get_tile((7, 5)) == TerrainTile(ROUGH, 0)

    def test_none_contract_raises(self, grid: MapGrid) -> None:
        with pytest.raises(BrushUsageError):
            self._either_brush(grid).paint(grid, [], (0, 0), Replaceability.NONE)

    def test_unsatisfiable_contract_raises(self, grid: MapGrid) -> None:
        brush = MultiBrush().with_tile(TerrainTile(ROUGH, 0))
        with pytest.raises(BrushUsageError):
            brush.paint(grid, [], (0, 0), Replaceability.ACTOR)

    def test_plan_for_other_grid_raises(
        self, grid: MapGrid, terrain: TerrainInfo
    ) -> None:
        other = MapGrid.create_empty(4, 4, terrain)
        brush = MultiBrush().with_actor(ActorPlan(other, "tree"))
        with pytest.raises(BrushUsageError):
            brush.paint(grid, [], (0, 0), Replaceability.ACTOR)


# =============================================================================
# Schema
# =============================================================================


class TestMultiBrushInfo:
    def test_from_node(self) -> None:
        node = ConfigNode.from_mapping(
            "MultiBrush@Boulder",
            {
                "Weight": 250,
                "Actor@1": "boulder1",
                "Actor@2": "boulder2",
                "BackingTile": "2,1",
                "Template": 3,
                "Tile": "1",
            },
        )
        info = MultiBrushInfo.from_node(node)
        assert info == MultiBrushInfo(
            weight=250,
            actors=("boulder1", "boulder2"),
            backing_tile=TerrainTile(2, 1),
            templates=(3,),
            tiles=(TerrainTile(1, 0),),
        )

    def test_defaults(self) -> None:
        info = MultiBrushInfo.from_node(ConfigNode("MultiBrush@Empty"))
        assert info.weight == 1000
        assert info.actors == ()

    @pytest.mark.parametrize(
        "body",
        [
            {"Weight": 0},
            {"Weight": "heavy"},
            {"Tile": "x"},
            {"BackingTile": "1,2,3"},
            {"Template": "-1"},
            {"Actor": ""},
            {"Offset": "1,1"},
        ],
    )
    def test_malformed_nodes_raise(self, body: dict[str, object]) -> None:
        with pytest.raises(SchemaError):
            MultiBrushInfo.from_node(ConfigNode.from_mapping("MultiBrush@X", body))

    def test_parse_collection_requires_multibrush_children(self) -> None:
        node = ConfigNode.from_mapping("Obstacles", {"Brush@1": {"Actor": "t01"}})
        with pytest.raises(SchemaError, match="MultiBrush"):
            MultiBrushInfo.parse_collection(node)

    def test_parse_collections(self) -> None:
        collections = parse_collections(
            [
                ConfigNode.from_mapping(
                    "Trees",
                    {
                        "MultiBrush@1": {"Actor": "t01"},
                        "MultiBrush@2": {"Actor": "t02", "Weight": 10},
                    },
                )
            ]
        )
        assert list(collections) == ["Trees"]
        assert [info.weight for info in collections["Trees"]] == [1000, 10]


class TestFromInfo:
    def test_build_order_and_freeze(self, grid: MapGrid) -> None:
        info = MultiBrushInfo(
            weight=300,
            actors=("tree.big",),
            backing_tile=TerrainTile(ROUGH, 0),
            tiles=(TerrainTile(WATER, 0),),
        )
        brush = MultiBrush.from_info(grid, info)

        assert brush.frozen
        assert brush.weight == 300
        assert brush.area == 4
        assert brush.contract == Replaceability.EITHER
        # Backing tile covers the actor footprint, plain tiles come last.
        assert brush.tiles[-1] == ((0, 0), TerrainTile(WATER, 0))
        assert len(brush.tiles) == 5
        assert brush.actor_plans[0].grid is grid

    def test_unknown_template_raises(self, grid: MapGrid) -> None:
        with pytest.raises(BrushUsageError):
            MultiBrush.from_info(grid, MultiBrushInfo(templates=(999,)))

    def test_load_collection(self, grid: MapGrid) -> None:
        brushes = load_collection(grid, "Obstacles")
        assert [brush.area for brush in brushes] == [1, 4, 4]
        assert [brush.contract for brush in brushes] == [
            Replaceability.ACTOR,
            Replaceability.ACTOR,
            Replaceability.TILE,
        ]

    def test_load_unknown_collection_raises(self, grid: MapGrid) -> None:
        with pytest.raises(KeyError):
            load_collection(grid, "Nope")

    def test_brush_without_content_from_info(self) -> None:
        lonely = TerrainInfo.create(
            "T", [TerrainTemplate(1, (1, 1), ("A",))], multibrush_collections={}
        )
        grid = MapGrid.create_empty(2, 2, lonely)
        brush = MultiBrush.from_info(grid, MultiBrushInfo())
        assert brush.contract == Replaceability.NONE
