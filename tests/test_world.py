"""Tests for world state: terrain, units, placement and rendering."""

import numpy as np
import pytest

from seabattle.entities import EntityKind, Headquarters, Mine, Monster, Ship
from seabattle.exceptions import EntityAlreadyExistsError, PlacementError
from seabattle.types import Position
from seabattle.world import ISLAND, ISLAND_ROWS, OPEN, World, build_terrain


class TestTerrain:
    """Tests for the island terrain."""

    def test_island_stamped_at_origin(self):
        terrain = build_terrain(19, 19)
        assert terrain.shape == (20, 20)
        assert terrain[6, 6] == OPEN
        assert terrain[6, 7] == ISLAND
        assert terrain[12, 8] == ISLAND
        assert int(terrain.sum()) == sum(sum(row) for row in ISLAND_ROWS)

    def test_submarine_start_is_open_water(self, island_world: World):
        assert not island_world.is_island(Position(x=9, y=9))

    def test_island_must_fit(self):
        with pytest.raises(ValueError):
            build_terrain(9, 9)

    def test_set_terrain_shape_checked(self, empty_world: World):
        with pytest.raises(ValueError):
            empty_world.set_terrain(np.zeros((5, 5), dtype=np.uint8))

    def test_bounds(self, empty_world: World):
        assert empty_world.in_bounds(Position(x=0, y=19, z=5000))
        assert not empty_world.in_bounds(Position(x=20, y=0))
        assert not empty_world.in_bounds(Position(x=0, y=-1))
        assert not empty_world.is_island(Position(x=-1, y=-1))

    def test_positions_within_clipped(self, empty_world: World):
        cells = list(empty_world.positions_within(Position(x=0, y=0), 1))
        assert len(cells) == 4


class TestEntities:
    """Tests for the unit registry."""

    def test_duplicate_id_rejected(self, empty_world: World):
        empty_world.add_entity(Ship(entity_id="ship-0", position=Position(x=1, y=1)))
        with pytest.raises(EntityAlreadyExistsError):
            empty_world.add_entity(
                Ship(entity_id="ship-0", position=Position(x=2, y=2))
            )

    def test_entities_at_live_only(self, empty_world: World):
        ship = Ship(entity_id="ship-0", position=Position(x=1, y=1))
        mine = Mine(entity_id="mine-0", position=Position(x=1, y=1, z=40))
        empty_world.add_entity(ship)
        empty_world.add_entity(mine)
        assert empty_world.entities_at(Position(x=1, y=1)) == [ship, mine]
        ship.kill()
        assert empty_world.entities_at(Position(x=1, y=1)) == [mine]

    def test_collision(self, island_world: World):
        ship = Ship(entity_id="ship-0", position=Position(x=1, y=1))
        island_world.add_entity(ship)
        assert island_world.collision(Position(x=1, y=1))
        assert island_world.collision(Position(x=6, y=7))
        assert not island_world.collision(Position(x=2, y=2))
        ship.kill()
        assert not island_world.collision(Position(x=1, y=1))

    def test_count_and_live_entities(self, empty_world: World):
        empty_world.add_entity(Ship(entity_id="a", position=Position(x=1, y=1)))
        empty_world.add_entity(Ship(entity_id="b", position=Position(x=2, y=1)))
        empty_world.add_entity(Monster(entity_id="m", position=Position(x=3, y=1)))
        empty_world.entities[0].kill()
        assert empty_world.count(EntityKind.SHIP) == 1
        assert [e.entity_id for e in empty_world.live_entities()] == ["b", "m"]

    def test_entities_within_scan_order(self, empty_world: World):
        far = Ship(entity_id="far", position=Position(x=6, y=6))
        near = Ship(entity_id="near", position=Position(x=4, y=4))
        empty_world.add_entity(far)
        empty_world.add_entity(near)
        found = empty_world.entities_within(Position(x=5, y=5), 1)
        assert [e.entity_id for e in found] == ["near", "far"]

    def test_prune_dead(self, empty_world: World):
        keep = Ship(entity_id="keep", position=Position(x=1, y=1))
        gone = Mine(entity_id="gone", position=Position(x=2, y=2))
        empty_world.add_entity(keep)
        empty_world.add_entity(gone)
        gone.kill()

        pruned = empty_world.prune_dead()

        assert pruned == [gone]
        assert list(empty_world.entities) == [keep]
        # The id is free again once pruned
        empty_world.add_entity(Mine(entity_id="gone", position=Position(x=3, y=3)))


class TestPlacement:
    """Tests for random_unused_location."""

    def test_skips_island_and_units(self, island_world: World, make_rng):
        island_world.add_entity(Ship(entity_id="s", position=Position(x=0, y=0)))
        rng = make_rng(ints=[6, 7, 0, 0, 3, 4])
        pos = island_world.random_unused_location(rng)
        assert (pos.x, pos.y, pos.z) == (3, 4, 0)

    def test_gives_up_on_full_grid(self, make_rng):
        world = World(max_x=0, max_y=0)
        world.add_entity(Mine(entity_id="m", position=Position(x=0, y=0)))
        with pytest.raises(PlacementError):
            world.random_unused_location(make_rng(), max_attempts=5)


class TestRenderMap:
    def test_symbols(self):
        world = World(max_x=2, max_y=2)
        terrain = np.zeros((3, 3), dtype=np.uint8)
        terrain[1, 1] = ISLAND
        world.set_terrain(terrain)
        world.add_entity(Ship(entity_id="s", position=Position(x=0, y=1)))
        world.add_entity(Headquarters(entity_id="h", position=Position(x=2, y=2)))
        world.add_entity(Monster(entity_id="m", position=Position(x=2, y=2)))

        assert world.render_map() == [".S.", ".#.", "..H"]
