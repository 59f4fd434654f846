"""Units that occupy the grid: ships, monsters, mines, headquarters."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel

from .types import Position


class EntityKind(str, Enum):
    """Closed set of unit variants."""

    SUBMARINE = "submarine"
    SHIP = "ship"
    MONSTER = "monster"
    MINE = "mine"
    HEADQUARTERS = "headquarters"

    @property
    def symbol(self) -> str:
        """Map character for this kind of unit."""
        return _SYMBOLS[self]


_SYMBOLS: dict[EntityKind, str] = {
    EntityKind.SUBMARINE: "X",
    EntityKind.SHIP: "S",
    EntityKind.MONSTER: "M",
    EntityKind.MINE: "$",
    EntityKind.HEADQUARTERS: "H",
}


class Entity(BaseModel):
    """Mutable unit state.

    Units are updated in place during a turn. `alive` only ever goes from
    True to False; dead units stay in the world until the end-of-turn prune.
    """

    entity_id: str
    kind: EntityKind
    position: Position
    alive: bool = True

    @property
    def symbol(self) -> str:
        return self.kind.symbol

    def kill(self) -> None:
        self.alive = False


class Ship(Entity):
    """Enemy surface ship. Drifts each turn and drops depth charges."""

    kind: Literal[EntityKind.SHIP] = EntityKind.SHIP


class Monster(Entity):
    """Sea monster. Drifts each turn and eats whatever it can."""

    kind: Literal[EntityKind.MONSTER] = EntityKind.MONSTER


class Mine(Entity):
    kind: Literal[EntityKind.MINE] = EntityKind.MINE


class Headquarters(Entity):
    kind: Literal[EntityKind.HEADQUARTERS] = EntityKind.HEADQUARTERS
