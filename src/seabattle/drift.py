"""Drift movement of ships and monsters, and collision resolution."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, assert_never

import structlog

from .console import Console
from .entities import Entity, EntityKind
from .exceptions import GameOver
from .session import GameSession, Heading, random_deltas
from .types import Position

logger = structlog.get_logger()

SHIP_RAM_DEPTH = 50
SHIP_RAMS_HEADQUARTERS_CHANCE = 0.15
SHIP_EATEN_CHANCE = 0.8
MONSTER_SKIPS_SHIP_CHANCE = 0.2
MONSTER_AVOIDS_MONSTER_CHANCE = 0.75
MONSTER_FIGHT_TIE_CHANCE = 0.8


class DriftOutcome(str, Enum):
    """What happened to a mover on its drift step."""

    MOVED = "moved"
    HELD = "held"
    RETRY = "retry"
    RAMMED_SUBMARINE = "rammed_submarine"
    RAMMED_HEADQUARTERS = "rammed_headquarters"
    SUNK_BY_MINE = "sunk_by_mine"
    EATEN_BY_MONSTER = "eaten_by_monster"
    ATE_SHIP = "ate_ship"
    ATE_HEADQUARTERS = "ate_headquarters"
    WON_FIGHT = "won_fight"
    STUCK = "stuck"


@dataclass
class DriftResult:
    """Result of one mover's drift step."""

    entity_id: str
    outcome: DriftOutcome
    from_pos: Position
    to_pos: Position  # Same as from_pos if it didn't move
    retries: int = 0


def reflect(coord: int, bound: int) -> int:
    """Bounce a coordinate that left 0..bound back onto the grid."""
    if coord > bound:
        return bound + 1 - coord
    if coord < 0:
        return -coord
    return coord


class DriftResolver:
    """
    Advances ships and monsters one cell per turn.

    Every mover of a class steps along that class's session heading. The
    destination is resolved against a per-class table keyed by what sits
    there: island terrain first, then the first live unit other than the
    mover. A RETRY outcome re-rolls a one-off random direction, at most
    retry_limit times; after that the mover stays put.
    """

    def __init__(self, session: GameSession, console: Console, retry_limit: int = 8):
        self.session = session
        self.world = session.world
        self.rng = session.rng
        self.console = console
        self.retry_limit = retry_limit

    def move_ship(self, ship: Entity) -> DriftResult:
        return self._drift(ship, self.session.ship_heading, self._ship_into)

    def move_monster(self, monster: Entity) -> DriftResult:
        return self._drift(monster, self.session.monster_heading, self._monster_into)

    def destination(self, position: Position, heading: Heading) -> Position:
        dx, dy = heading
        return position.move(
            x=reflect(position.x + dx, self.world.max_x),
            y=reflect(position.y + dy, self.world.max_y),
        )

    def _drift(
        self,
        mover: Entity,
        heading: Heading,
        table: Callable[[Entity, Position], DriftOutcome],
    ) -> DriftResult:
        from_pos = mover.position
        for attempt in range(self.retry_limit + 1):
            dest = self.destination(mover.position, heading)
            outcome = table(mover, dest)
            if outcome is not DriftOutcome.RETRY:
                return DriftResult(
                    entity_id=mover.entity_id,
                    outcome=outcome,
                    from_pos=from_pos,
                    to_pos=mover.position,
                    retries=attempt,
                )
            heading = random_deltas(self.rng)

        logger.warning(
            "drift_retry_limit", entity_id=mover.entity_id, limit=self.retry_limit
        )
        return DriftResult(
            entity_id=mover.entity_id,
            outcome=DriftOutcome.STUCK,
            from_pos=from_pos,
            to_pos=mover.position,
            retries=self.retry_limit,
        )

    def _occupant(self, mover: Entity, dest: Position) -> Entity | None:
        for entity in self.world.entities_at(dest):
            if entity is not mover:
                return entity
        return None

    def _step(self, mover: Entity, dest: Position) -> None:
        mover.position = mover.position.move(x=dest.x, y=dest.y)

    def _ship_into(self, ship: Entity, dest: Position) -> DriftOutcome:
        if self.world.is_island(dest):
            return DriftOutcome.RETRY
        occupant = self._occupant(ship, dest)
        if occupant is None:
            self._step(ship, dest)
            return DriftOutcome.MOVED

        captain = self.session.captain
        match occupant.kind:
            case EntityKind.SUBMARINE:
                if self.session.submarine.depth > SHIP_RAM_DEPTH:
                    return DriftOutcome.HELD
                self.console.say(f"*** You've been rammed by a ship {captain}!!!")
                self._step(ship, dest)
                return DriftOutcome.RAMMED_SUBMARINE
            case EntityKind.HEADQUARTERS:
                if self.rng.random() > SHIP_RAMS_HEADQUARTERS_CHANCE:
                    return DriftOutcome.RETRY
                self.console.say(f"*** Your headquarters was rammed {captain}!!!")
                occupant.kill()
                self.session.disable_headquarters()
                self._step(ship, dest)
                return DriftOutcome.RAMMED_HEADQUARTERS
            case EntityKind.MINE:
                self.console.say(f"*** Ship destroyed by a mine {captain}!!!")
                ship.kill()
                occupant.kill()
                self.session.check_victory()
                return DriftOutcome.SUNK_BY_MINE
            case EntityKind.MONSTER:
                if self.rng.random() >= SHIP_EATEN_CHANCE:
                    return DriftOutcome.RETRY
                self.console.say(f"*** Ship eaten by a sea monster {captain}!!")
                ship.kill()
                self.session.check_victory()
                return DriftOutcome.EATEN_BY_MONSTER
            case EntityKind.SHIP:
                return DriftOutcome.HELD
            case _:
                assert_never(occupant.kind)

    def _monster_into(self, monster: Entity, dest: Position) -> DriftOutcome:
        if self.world.is_island(dest):
            return DriftOutcome.RETRY
        occupant = self._occupant(monster, dest)
        if occupant is None:
            self._step(monster, dest)
            return DriftOutcome.MOVED

        captain = self.session.captain
        match occupant.kind:
            case EntityKind.SUBMARINE:
                raise GameOver(
                    won=False,
                    reason="eaten_by_monster",
                    message=f"*** You've been eaten by a sea monster {captain}!!",
                )
            case EntityKind.SHIP:
                if self.rng.random() > MONSTER_SKIPS_SHIP_CHANCE:
                    return DriftOutcome.RETRY
                self.console.say(f"*** Ship eaten by a sea monster {captain}!!")
                occupant.kill()
                self._step(monster, dest)
                self.session.check_victory()
                return DriftOutcome.ATE_SHIP
            case EntityKind.HEADQUARTERS:
                self.console.say(f"A sea monster ate your headquarters {captain}!!")
                occupant.kill()
                self.session.disable_headquarters()
                self._step(monster, dest)
                return DriftOutcome.ATE_HEADQUARTERS
            case EntityKind.MINE:
                # Mines don't go off under monsters
                self._step(monster, dest)
                return DriftOutcome.MOVED
            case EntityKind.MONSTER:
                if self.rng.random() < MONSTER_AVOIDS_MONSTER_CHANCE:
                    return DriftOutcome.RETRY
                self.console.say(f"*** A sea monster fight {captain}!!!")
                if self.rng.random() < MONSTER_FIGHT_TIE_CHANCE:
                    self.console.say("It's a tie!!")
                    return DriftOutcome.RETRY
                self.console.say("And one dies!!")
                occupant.kill()
                self._step(monster, dest)
                return DriftOutcome.WON_FIGHT
            case _:
                assert_never(occupant.kind)


def process_drift_phase(
    session: GameSession, console: Console, retry_limit: int = 8
) -> list[DriftResult]:
    """
    Move every live ship, then every live monster.

    Movers are snapshotted up front; a unit killed earlier in the phase is
    skipped when its turn comes.

    Raises:
        GameOver: A monster reached the submarine, or the last ship sank.
    """
    resolver = DriftResolver(session, console, retry_limit)
    results: list[DriftResult] = []

    for ship in session.world.live_entities(EntityKind.SHIP):
        if ship.alive:
            results.append(resolver.move_ship(ship))
    for monster in session.world.live_entities(EntityKind.MONSTER):
        if monster.alive:
            results.append(resolver.move_monster(monster))

    moved = sum(1 for r in results if r.from_pos != r.to_pos)
    logger.debug("drift_phase_complete", movers=len(results), moved=moved)
    return results
