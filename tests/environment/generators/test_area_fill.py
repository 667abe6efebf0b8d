"""Tests for the area-fill painter."""

from __future__ import annotations

from random import Random

import numpy as np
import pytest

from mapweave.environment.actors import ActorPlan
from mapweave.environment.generators.area_fill import _bucket_by_area, paint_area
from mapweave.environment.generators.multibrush import (
    MultiBrush,
    Replaceability,
    load_collection,
)
from mapweave.environment.map import MapGrid
from mapweave.environment.terrain import TerrainInfo, TerrainTile
from mapweave.util.rng import RNGProvider
from tests.helpers import ROUGH, WATER, replace_grid


def _water_grid(terrain: TerrainInfo, width: int, height: int) -> MapGrid:
    return MapGrid.create_empty(width, height, terrain, fill_tile=TerrainTile(WATER, 0))


def _tree(
    grid: MapGrid, size: tuple[int, int] = (1, 1), weight: int = 1000
) -> MultiBrush:
    plan = ActorPlan.with_footprint_size(grid, "tree", size)
    return MultiBrush().with_actor(plan).with_weight(weight).finalize()


def _rough(weight: int = 1000) -> MultiBrush:
    return MultiBrush().with_tile(TerrainTile(ROUGH, 0)).with_weight(weight).finalize()


def _random_replace(width: int, height: int, seed: int) -> np.ndarray:
    rng = Random(seed)
    values = [
        Replaceability.NONE,
        Replaceability.TILE,
        Replaceability.ACTOR,
        Replaceability.EITHER,
    ]
    replace = replace_grid(width, height, Replaceability.NONE)
    for x in range(width):
        for y in range(height):
            replace[x, y] = rng.choice(values)
    return replace


# =============================================================================
# Basics
# =============================================================================


class TestPaintAreaBasics:
    def test_shape_mismatch_raises(self, grid: MapGrid) -> None:
        with pytest.raises(ValueError):
            paint_area(grid, [], replace_grid(3, 3), [_rough()], Random(0))

    def test_empty_pool_is_a_no_op(self, grid: MapGrid) -> None:
        replace = replace_grid(*grid.shape)
        replace[0, 0] = Replaceability.NONE
        before = grid.copy()

        remaining = paint_area(grid, [], replace, [], Random(0))

        assert grid.same_layers(before)
        assert remaining.dtype == bool
        assert not remaining[0, 0]
        assert remaining.sum() == grid.width * grid.height - 1

    def test_non_replaceable_grid_is_untouched(self, grid: MapGrid) -> None:
        before = grid.copy()
        plans: list[ActorPlan] = []
        replace = replace_grid(*grid.shape, Replaceability.NONE)

        remaining = paint_area(grid, plans, replace, [_rough(), _tree(grid)], Random(0))

        assert grid.same_layers(before)
        assert plans == []
        assert not remaining.any()

    def test_replace_is_not_modified(self, grid: MapGrid) -> None:
        replace = replace_grid(*grid.shape)
        paint_area(grid, [], replace, [_tree(grid)], Random(0))
        assert np.all(replace == Replaceability.EITHER)


# =============================================================================
# Invariants
# =============================================================================


class TestPaintAreaInvariants:
    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_coverage_and_contracts(self, terrain: TerrainInfo, seed: int) -> None:
        """Every cell is claimed at most once, and only in ways it allows."""
        grid = _water_grid(terrain, 12, 10)
        before = grid.copy()
        replace = _random_replace(12, 10, seed)
        brushes = [*load_collection(grid, "Obstacles"), _rough(300)]
        plans: list[ActorPlan] = []

        remaining = paint_area(
            grid, plans, replace, brushes, RNGProvider(seed).get("map.area_fill")
        )

        claimed_by_actor: set[tuple[int, int]] = set()
        for plan in plans:
            for cell in plan.footprint_cells():
                if not grid.contains(cell):
                    continue
                assert cell not in claimed_by_actor
                assert replace[cell] & Replaceability.ACTOR
                claimed_by_actor.add(cell)

        for x, y in grid.cells():
            tile_changed = grid.get_tile((x, y)) != before.get_tile((x, y))
            if tile_changed:
                assert replace[x, y] & Replaceability.TILE
                assert (x, y) not in claimed_by_actor
            if remaining[x, y]:
                assert not tile_changed
                assert (x, y) not in claimed_by_actor
            if replace[x, y] == Replaceability.NONE:
                assert not remaining[x, y]
                assert not tile_changed
                assert (x, y) not in claimed_by_actor

    def test_tile_only_cells_never_get_actors(self, grid: MapGrid) -> None:
        plans: list[ActorPlan] = []
        replace = replace_grid(*grid.shape, Replaceability.TILE)

        remaining = paint_area(grid, plans, replace, [_tree(grid)], Random(0))

        assert plans == []
        assert remaining.all()

    def test_either_brush_on_tile_cells_paints_tiles(self, grid: MapGrid) -> None:
        brush = (
            MultiBrush()
            .with_actor(ActorPlan(grid, "tree"))
            .with_backing_tile(TerrainTile(ROUGH, 0))
            .finalize()
        )
        plans: list[ActorPlan] = []
        replace = replace_grid(*grid.shape, Replaceability.TILE)

        remaining = paint_area(grid, plans, replace, [brush], Random(0))

        assert plans == []
        assert not remaining.any()
        assert np.all(grid.tile_types == ROUGH)

    def test_single_cell_actors_fill_everything_left(
        self, terrain: TerrainInfo
    ) -> None:
        grid = _water_grid(terrain, 6, 6)
        plans: list[ActorPlan] = []
        brushes = [_tree(grid, (2, 2), weight=500), _tree(grid)]

        remaining = paint_area(grid, plans, replace_grid(6, 6), brushes, Random(4))

        assert not remaining.any()
        covered = [
            cell
            for plan in plans
            for cell in plan.footprint_cells()
            if grid.contains(cell)
        ]
        assert len(covered) == 36

    def test_out_of_grid_offsets_are_ignored(self, terrain: TerrainInfo) -> None:
        grid = _water_grid(terrain, 1, 1)
        plans: list[ActorPlan] = []

        remaining = paint_area(
            grid, plans, replace_grid(1, 1), [_tree(grid, (2, 2))], Random(0)
        )

        assert len(plans) == 1
        assert plans[0].location == (0, 0)
        assert not remaining.any()

    def test_quota_limits_large_brushes(self, terrain: TerrainInfo) -> None:
        grid = _water_grid(terrain, 6, 6)
        plans: list[ActorPlan] = []
        brushes = [_tree(grid, (2, 2), weight=1), _rough(999)]

        # The large bucket gets ceil(36 * 1 / 1000) = 1 attempt.
        remaining = paint_area(grid, plans, replace_grid(6, 6), brushes, Random(0))

        assert len(plans) <= 1
        assert not remaining.any()


# =============================================================================
# Ordering and determinism
# =============================================================================


class TestPaintAreaOrdering:
    def test_buckets_are_area_descending_then_single_cell_actors(
        self, grid: MapGrid
    ) -> None:
        small_tile = _rough()
        small_actor = _tree(grid)
        big = _tree(grid, (2, 2))
        wide = _tree(grid, (3, 1))

        buckets = _bucket_by_area([small_tile, big, small_actor, wide])

        assert [area for area, _ in buckets] == [4, 3, 1, 1]
        assert buckets[0][1] == [big]
        assert buckets[2][1] == [small_tile, small_actor]
        assert buckets[-1][1] == [small_actor]

    def test_same_seed_same_output(self, terrain: TerrainInfo) -> None:
        def run(seed: int) -> tuple[MapGrid, list[tuple[str, tuple[int, int]]]]:
            grid = _water_grid(terrain, 16, 12)
            plans: list[ActorPlan] = []
            replace = _random_replace(16, 12, 99)
            brushes = [*load_collection(grid, "Obstacles"), _rough(300)]
            paint_area(grid, plans, replace, brushes, RNGProvider(seed).get("fill"))
            return grid, [(plan.actor_type, plan.location) for plan in plans]

        grid1, actors1 = run(7)
        grid2, actors2 = run(7)

        assert grid1.same_layers(grid2)
        assert actors1 == actors2


def test_single_large_brush_claims_whole_block(terrain: TerrainInfo) -> None:
    """A 2x2 replaceable block gets exactly one 2x2 brush, anchored at its corner."""
    grid = _water_grid(terrain, 4, 4)
    replace = replace_grid(4, 4, Replaceability.NONE)
    replace[1:3, 1:3] = Replaceability.EITHER
    plans: list[ActorPlan] = []

    remaining = paint_area(
        grid, plans, replace, [_tree(grid, (2, 2))], Random(0), prefer_larger=True
    )

    assert len(plans) == 1
    assert plans[0].location == (1, 1)
    assert not remaining.any()
