"""Tests for submarine subsystems, damage and reactor rules."""

import pytest

from seabattle.exceptions import GameOver
from seabattle.submarine import (
    SYSTEM_MANNING,
    SYSTEMS,
    VITAL_SYSTEMS,
    Submarine,
    System,
    round_half_away,
)
from seabattle.types import Position


def make_sub(depth: int = 100, **fields) -> Submarine:
    return Submarine(
        entity_id="submarine", position=Position(x=9, y=9, z=depth), **fields
    )


class TestDefaults:
    def test_starting_stores(self):
        sub = make_sub()
        assert (sub.power, sub.fuel, sub.torpedoes, sub.missiles, sub.crew) == (
            6000,
            2500,
            10,
            3,
            30,
        )
        assert sub.symbol == "X"

    def test_every_system_undamaged_and_operable(self):
        sub = make_sub()
        assert set(sub.damage) == set(System)
        for system in SYSTEMS:
            assert sub.damage[system] == 0.0
            assert sub.system_ok(system)

    def test_damage_is_per_instance(self):
        a, b = make_sub(), make_sub()
        a.damage[System.SONAR] = -5.0
        assert b.damage[System.SONAR] == 0.0


class TestRounding:
    @pytest.mark.parametrize(
        "value,expected",
        [(0.49, 0), (0.5, 1), (2.5, 3), (-0.4, 0), (-0.5, -1), (-2.5, -3)],
    )
    def test_half_away_from_zero(self, value: float, expected: int):
        assert round_half_away(value) == expected

    def test_operable_threshold(self):
        sub = make_sub()
        sub.damage[System.ENGINES] = -0.4
        assert sub.system_ok(System.ENGINES)
        sub.damage[System.ENGINES] = -0.5
        assert not sub.system_ok(System.ENGINES)


class TestManning:
    """Manning compares total crew against one system at a time."""

    def test_requirements(self):
        assert SYSTEM_MANNING[System.MISSILES] == 24
        assert SYSTEM_MANNING[System.HEADQUARTERS] == 0

    def test_partial_crew(self):
        sub = make_sub(crew=11)
        assert sub.system_manned(System.TORPEDOES)
        assert sub.system_manned(System.SABOTAGE)
        assert not sub.system_manned(System.MANEUVERING)
        assert not sub.system_manned(System.MISSILES)

    def test_systems_manned_simultaneously(self):
        """The same 13 men count as crew for every system they cover."""
        sub = make_sub(crew=13)
        manned = [s for s in SYSTEMS if sub.system_manned(s)]
        assert System.MISSILES not in manned
        assert len(manned) == len(SYSTEMS) - 1


class TestFatalDamage:
    def test_all_vitals_broken(self):
        sub = make_sub()
        for system in SYSTEMS:
            sub.damage[system] = -1.0
        assert sub.fatally_damaged()

    def test_headquarters_is_not_vital(self):
        sub = make_sub()
        for system in VITAL_SYSTEMS:
            sub.damage[system] = -1.0
        sub.damage[System.HEADQUARTERS] = 5.0
        assert sub.fatally_damaged()

    def test_one_vital_working(self):
        sub = make_sub()
        for system in VITAL_SYSTEMS:
            sub.damage[system] = -1.0
        sub.damage[System.SONAR] = -0.4
        assert not sub.fatally_damaged()


class TestDamageAndRepair:
    def test_damage_random_system(self, make_rng):
        sub = make_sub()
        rng = make_rng(ints=[2])
        hit = sub.damage_random_system(rng, 1.5)
        assert hit is System.TORPEDOES
        assert sub.damage[System.TORPEDOES] == -1.5

    def test_damage_goes_arbitrarily_negative(self, make_rng):
        sub = make_sub()
        rng = make_rng(ints=[0, 0])
        sub.damage_random_system(rng, 8.0)
        sub.damage_random_system(rng, 8.0)
        assert sub.damage[System.ENGINES] == -16.0

    def test_repair_in_safe_band(self, make_rng):
        sub = make_sub(depth=100)
        sub.damage[System.SONAR] = -2.0
        rng = make_rng(randoms=[0.5, 0.5], ints=[1])
        amount = sub.repair_random_system(rng)
        assert amount == pytest.approx(1.5)
        assert sub.damage[System.SONAR] == pytest.approx(-0.5)

    @pytest.mark.parametrize("depth", [50, 2000, 10])
    def test_no_repair_outside_band(self, depth: int, make_rng):
        sub = make_sub(depth=depth)
        sub.damage[System.SONAR] = -2.0
        rng = make_rng(randoms=[0.5, 0.5], ints=[1])
        assert sub.repair_random_system(rng) == 0
        assert sub.damage[System.SONAR] == -2.0

    def test_no_repair_above_ceiling(self, make_rng):
        sub = make_sub(depth=100)
        sub.damage[System.SONAR] = 3.5
        rng = make_rng(randoms=[0.5, 0.5], ints=[1])
        assert sub.repair_random_system(rng) == 0
        assert sub.damage[System.SONAR] == 3.5


class TestReactor:
    def test_overload_ends_game_before_deduction(self, make_rng):
        sub = make_sub()
        rng = make_rng(randoms=[0.1])
        with pytest.raises(GameOver) as exc:
            sub.spend_power(1500, rng)
        assert not exc.value.won
        assert exc.value.reason == "reactor_overload"
        assert "supercritical" in exc.value.message
        assert sub.power == 6000

    def test_large_draw_survives_roll(self, make_rng):
        sub = make_sub()
        rng = make_rng(randoms=[0.43])
        sub.spend_power(1500, rng)
        assert sub.power == 4500

    def test_small_draw_never_rolls(self, make_rng):
        sub = make_sub()
        rng = make_rng(randoms=[0.0])
        sub.spend_power(1000, rng)
        assert sub.power == 5000
        assert rng.randoms == [0.0]

    def test_dead_pile(self, rng):
        sub = make_sub(power=100)
        with pytest.raises(GameOver) as exc:
            sub.spend_power(100, rng)
        assert exc.value.reason == "reactor_dead"
        assert sub.power == 0

    def test_power_rounded(self, rng):
        sub = make_sub()
        sub.spend_power(75.5, rng)
        assert sub.power == 5924
        sub.add_power(10.4)
        assert sub.power == 5934

    def test_fuel(self):
        sub = make_sub()
        sub.spend_fuel(500)
        sub.add_fuel(1.5)
        assert sub.fuel == 2002

    def test_missile_depth_band(self):
        assert not make_sub(depth=50).at_missile_depth()
        assert make_sub(depth=51).at_missile_depth()
        assert make_sub(depth=2000).at_missile_depth()
        assert not make_sub(depth=2001).at_missile_depth()
