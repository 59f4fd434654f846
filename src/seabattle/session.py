"""Game session: everything one game needs, bundled in one place."""

from dataclasses import dataclass

import numpy as np
import structlog

from .config import Config
from .entities import EntityKind, Headquarters, Mine, Monster, Ship
from .exceptions import GameOver
from .submarine import Submarine
from .types import Position
from .world import World, build_terrain

logger = structlog.get_logger()

Heading = tuple[int, int]


def random_deltas(rng: np.random.Generator) -> Heading:
    """Uniform (dx, dy) with each component in -1..1. May be (0, 0)."""
    dx = int(rng.integers(-1, 2))
    dy = int(rng.integers(-1, 2))
    return dx, dy


def random_heading(rng: np.random.Generator) -> Heading:
    """Uniform nonzero (dx, dy) heading."""
    while True:
        dx, dy = random_deltas(rng)
        if abs(dx) + abs(dy) > 0:
            return dx, dy


@dataclass
class GameSession:
    """State for one game.

    Attributes:
        world: Terrain and units.
        submarine: The player's boat (also registered in world).
        rng: Source of every random draw in the game.
        ship_heading: Drift heading shared by all ships for the session.
        monster_heading: Drift heading shared by all monsters for the session.
        captain: Name used in narration.
        resupply_charges: Remaining headquarters resupplies.
        day: Current turn number, starting at 1.
    """

    world: World
    submarine: Submarine
    rng: np.random.Generator
    ship_heading: Heading = (1, 0)
    monster_heading: Heading = (0, 1)
    captain: str = "Captain"
    resupply_charges: int = 2
    day: int = 1

    def ships_remaining(self) -> int:
        return self.world.count(EntityKind.SHIP)

    def disable_headquarters(self) -> None:
        """Headquarters is gone: no more resupplies this game."""
        self.resupply_charges = 0
        logger.info("headquarters_lost", day=self.day)

    def check_victory(self) -> None:
        """End the game in a win once no live enemy ship is left.

        Raises:
            GameOver: If the last ship has been destroyed.
        """
        if self.ships_remaining() == 0:
            raise GameOver(won=True, reason="all_ships_destroyed")


def new_session(
    config: Config, rng: np.random.Generator, captain: str = "Captain"
) -> GameSession:
    """Set up a fresh game: island, submarine, fleet, minefield and monsters.

    Raises:
        PlacementError: If the grid is too crowded for the configured fleet.
    """
    grid = config.grid
    world = World(max_x=grid.max_x, max_y=grid.max_y)
    world.set_terrain(build_terrain(grid.max_x, grid.max_y))

    sub_cfg = config.submarine
    submarine = Submarine(
        entity_id="submarine",
        position=Position(x=sub_cfg.x, y=sub_cfg.y, z=sub_cfg.depth),
        power=sub_cfg.power,
        fuel=sub_cfg.fuel,
        torpedoes=sub_cfg.torpedoes,
        missiles=sub_cfg.missiles,
        crew=sub_cfg.crew,
    )
    world.add_entity(submarine)

    fleet = config.fleet
    attempts = config.rules.placement_attempts

    ship_count = int(rng.integers(fleet.min_ships, fleet.max_ships + 1))
    for i in range(ship_count):
        pos = world.random_unused_location(rng, attempts)
        world.add_entity(Ship(entity_id=f"ship-{i}", position=pos))

    ship_heading = random_heading(rng)
    monster_heading = random_heading(rng)

    for i in range(fleet.headquarters):
        pos = world.random_unused_location(rng, attempts)
        world.add_entity(Headquarters(entity_id=f"headquarters-{i}", position=pos))

    mine_count = int(rng.integers(fleet.min_mines, fleet.max_mines + 1))
    for i in range(mine_count):
        pos = world.random_unused_location(rng, attempts)
        world.add_entity(Mine(entity_id=f"mine-{i}", position=pos))

    for i in range(fleet.monsters):
        pos = world.random_unused_location(rng, attempts)
        world.add_entity(Monster(entity_id=f"monster-{i}", position=pos))

    logger.info(
        "session_created",
        ships=ship_count,
        mines=mine_count,
        monsters=fleet.monsters,
        ship_heading=ship_heading,
        monster_heading=monster_heading,
    )

    return GameSession(
        world=world,
        submarine=submarine,
        rng=rng,
        ship_heading=ship_heading,
        monster_heading=monster_heading,
        captain=captain,
        resupply_charges=config.rules.resupply_charges,
    )
