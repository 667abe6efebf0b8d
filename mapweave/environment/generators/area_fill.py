"""Fill replaceable cells of a grid with MultiBrushes.

paint_area makes a single greedy pass per brush size. Larger brushes go first,
so that smaller brushes fill in the gaps they leave. Every replaceable cell
ends up painted by at most one brush placement; cells that nothing fits are
simply left alone.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from mapweave.environment.generators.multibrush import Replaceability
from mapweave.util.rng import pick_weighted, shuffle_in_place

if TYPE_CHECKING:
    from mapweave.environment.actors import ActorPlan
    from mapweave.environment.generators.multibrush import MultiBrush
    from mapweave.environment.map import MapGrid
    from mapweave.types import CellPos, CellVec
    from mapweave.util.rng import RNG

logger = logging.getLogger(__name__)


def paint_area(
    grid: MapGrid,
    actor_plans: list[ActorPlan],
    replace: np.ndarray,
    brushes: Sequence[MultiBrush],
    rng: RNG,
    prefer_larger: bool = False,
) -> np.ndarray:
    """Paint brushes over the replaceable cells of grid.

    Brushes are bucketed by area and processed largest first. Single-cell
    brushes with actors get one more pass at the very end, as they are the
    most flexible filler. Within a bucket, every remaining cell (in shuffled
    order) gets one weighted brush pick, which is painted only if all of its
    in-grid cells are still unclaimed and compatible with the brush.

    Unless prefer_larger is set, each bucket except single-cell ones stops
    once it has attempted its share of the replaceable area, proportional to
    the bucket's share of the total brush weight.

    Args:
        grid: Grid to paint tiles onto.
        actor_plans: Receives the actors painted by brushes.
        replace: Replaceability of each cell, shape (width, height).
        brushes: The brush pool.
        rng: Random source.
        prefer_larger: Let larger brushes claim as much as they can.

    Returns:
        Boolean array, True for replaceable cells no brush was painted over.

    Raises:
        ValueError: If replace does not match the grid's shape.
    """
    if replace.shape != grid.shape:
        raise ValueError(
            f"Replaceability shape {replace.shape} does not match grid {grid.shape}"
        )

    remaining = replace != Replaceability.NONE
    if not brushes:
        return remaining

    buckets = _bucket_by_area(brushes)
    total_weight = sum(brush.weight for brush in brushes)
    target_count = int(np.count_nonzero(remaining))
    replace_cells = [(x, y) for (x, y) in grid.cells() if remaining[x, y]]

    for area, bucket in buckets:
        if not bucket:
            continue

        weights = [brush.weight for brush in bucket]
        if area == 1 or prefer_larger:
            quota = None
        else:
            bucket_weight = sum(weights)
            # Integer ceil of target_count * bucket_weight / total_weight.
            quota = (target_count * bucket_weight + total_weight - 1) // total_weight

        candidates = [(x, y) for (x, y) in replace_cells if remaining[x, y]]
        shuffle_in_place(rng, candidates)
        quota_text = "unbounded" if quota is None else str(quota)
        logger.debug(
            f"Painting {len(bucket)} brush(es) of area {area} over "
            f"{len(candidates)} cell(s), quota {quota_text}"
        )

        painted = 0
        for anchor in candidates:
            brush = bucket[pick_weighted(rng, weights)]
            contract = _reserve(
                replace, remaining, anchor, brush.shape, brush.contract
            )
            if contract != Replaceability.NONE:
                brush.paint(grid, actor_plans, anchor, contract)
                painted += 1

            if quota is not None:
                quota -= area
                if quota <= 0:
                    break

        logger.debug(f"Painted {painted} brush(es) of area {area}")

    return remaining


def _bucket_by_area(
    brushes: Sequence[MultiBrush],
) -> list[tuple[int, list[MultiBrush]]]:
    by_area: dict[int, list[MultiBrush]] = {}
    for brush in brushes:
        by_area.setdefault(brush.area, []).append(brush)

    buckets = sorted(by_area.items(), key=lambda item: -item[0])
    # Give 1x1 actors the final pass.
    buckets.append(
        (1, [brush for brush in brushes if brush.area == 1 and brush.has_actors])
    )
    return buckets


def _reserve(
    replace: np.ndarray,
    remaining: np.ndarray,
    anchor: CellPos,
    shape: Sequence[CellVec],
    contract: Replaceability,
) -> Replaceability:
    """Claim the cells under shape at anchor, all or nothing.

    Offsets that fall outside the grid are ignored.

    Returns:
        The contract narrowed by every covered cell's replaceability, or NONE
        if the shape does not fit (nothing is claimed in that case).
    """
    width, height = remaining.shape
    ax, ay = anchor
    covered: list[CellPos] = []
    for dx, dy in shape:
        x, y = ax + dx, ay + dy
        if not (0 <= x < width and 0 <= y < height):
            continue
        if not remaining[x, y]:
            return Replaceability.NONE
        contract &= Replaceability(int(replace[x, y]))
        if contract == Replaceability.NONE:
            return Replaceability.NONE
        covered.append((x, y))

    for x, y in covered:
        remaining[x, y] = False
    return contract
