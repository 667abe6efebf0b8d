"""Actor placements and player definitions produced by generators.

An ActorPlan is a mutable, grid-bound description of an actor a generator
intends to place. Once generation finishes, plans are turned into plain
ActorDefinitions which, together with PlayerDefinitions, are what a
generator hands back to its caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mapweave import config

if TYPE_CHECKING:
    from mapweave.environment.map import MapGrid
    from mapweave.types import CellPos, CellVec


@dataclass(frozen=True)
class ActorDefinition:
    """A placed actor as reported to the caller."""

    actor_type: str
    location: CellPos
    owner: str


@dataclass(frozen=True)
class PlayerDefinition:
    """A player slot as reported to the caller.

    Attributes:
        name: Internal player name, referenced by ActorDefinition.owner.
        playable: Whether a human or bot may take this slot.
        owns_world: Whether this player owns the world actor.
        non_combatant: Whether this player never takes part in combat.
        enemies: Names of players this player is hostile to.
    """

    name: str
    playable: bool = False
    owns_world: bool = False
    non_combatant: bool = False
    enemies: tuple[str, ...] = ()


def default_players(playable: int = 0) -> dict[str, PlayerDefinition]:
    """Return the player definitions of a map with `playable` player slots.

    Every map has the world-owning Neutral player and the Creeps player, who is
    hostile to all playable slots.
    """
    slots = [f"Multi{i}" for i in range(playable)]
    players = [
        PlayerDefinition(config.NEUTRAL_PLAYER, owns_world=True, non_combatant=True),
        PlayerDefinition(config.CREEPS_PLAYER, enemies=tuple(slots)),
        *(
            PlayerDefinition(slot, playable=True, enemies=(config.CREEPS_PLAYER,))
            for slot in slots
        ),
    ]
    return {player.name: player for player in players}


@dataclass
class ActorPlan:
    """An actor a generator intends to place on a specific grid.

    Attributes:
        grid: The grid this plan was made for.
        actor_type: Name of the actor type, e.g. "tree".
        location: Cell of the actor's origin.
        owner: Name of the owning player.
        footprint: Cells the actor occupies, relative to location.
    """

    grid: MapGrid
    actor_type: str
    location: CellPos = (0, 0)
    owner: str = config.NEUTRAL_PLAYER
    footprint: tuple[CellVec, ...] = field(default=((0, 0),))

    @classmethod
    def with_footprint_size(
        cls,
        grid: MapGrid,
        actor_type: str,
        size: tuple[int, int],
        owner: str = config.NEUTRAL_PLAYER,
    ) -> ActorPlan:
        """Create a plan whose footprint is a solid width x height rectangle."""
        width, height = size
        footprint = tuple((x, y) for y in range(height) for x in range(width))
        return cls(grid, actor_type, (0, 0), owner, footprint)

    def footprint_cells(self) -> list[CellPos]:
        """Absolute cells covered by the actor at its current location."""
        x, y = self.location
        return [(x + dx, y + dy) for dx, dy in self.footprint]

    def align_footprint(self) -> ActorPlan:
        """Move the plan so the top-left of its footprint sits at the origin.

        Returns:
            self, for chaining.
        """
        if self.footprint:
            min_x = min(dx for dx, _ in self.footprint)
            min_y = min(dy for _, dy in self.footprint)
            self.location = (-min_x, -min_y)
        else:
            self.location = (0, 0)
        return self

    def clone(self) -> ActorPlan:
        return ActorPlan(
            self.grid, self.actor_type, self.location, self.owner, self.footprint
        )

    def to_definition(self) -> ActorDefinition:
        return ActorDefinition(self.actor_type, self.location, self.owner)


def name_actors(plans: Sequence[ActorPlan]) -> dict[str, ActorDefinition]:
    """Turn plans into definitions keyed "Actor0", "Actor1", ..."""
    return {f"Actor{i}": plan.to_definition() for i, plan in enumerate(plans)}
