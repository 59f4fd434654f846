"""Submarine subsystems: crew, reactor, ordnance and damage."""

import math
from enum import Enum
from typing import Literal

import numpy as np
import structlog
from pydantic import Field

from .entities import Entity, EntityKind
from .exceptions import GameOver

logger = structlog.get_logger()


class System(str, Enum):
    """Shipboard systems, each with its own damage value and crew requirement."""

    ENGINES = "engines"
    SONAR = "sonar"
    TORPEDOES = "torpedoes"
    MISSILES = "missiles"
    MANEUVERING = "maneuvering"
    STATUS = "status"
    HEADQUARTERS = "headquarters"
    SABOTAGE = "sabotage"
    CONVERTER = "converter"


SYSTEMS: tuple[System, ...] = tuple(System)

# Crew needed aboard before a system can be worked
SYSTEM_MANNING: dict[System, int] = {
    System.ENGINES: 9,
    System.SONAR: 6,
    System.TORPEDOES: 11,
    System.MISSILES: 24,
    System.MANEUVERING: 13,
    System.STATUS: 4,
    System.HEADQUARTERS: 0,
    System.SABOTAGE: 11,
    System.CONVERTER: 6,
}

VITAL_SYSTEMS: frozenset[System] = frozenset(
    s for s in System if s is not System.HEADQUARTERS
)

REACTOR_OVERLOAD_THRESHOLD = 1000
REACTOR_OVERLOAD_CHANCE = 0.43
REPAIR_DEPTH_RANGE = (50, 2000)  # exclusive on both ends
REPAIR_DAMAGE_CEILING = 3.0
MISSILE_DEPTH_RANGE = (51, 2000)  # inclusive


def round_half_away(value: float) -> int:
    """Round to nearest integer, halves away from zero (-0.5 -> -1)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _default_damage() -> dict[System, float]:
    return {system: 0.0 for system in SYSTEMS}


class Submarine(Entity):
    """The player's submarine.

    Damage values start at 0.0; positive is healthy, negative is broken.
    A system is operable while its rounded damage is >= 0.
    """

    kind: Literal[EntityKind.SUBMARINE] = EntityKind.SUBMARINE
    power: int = 6000
    fuel: int = 2500
    torpedoes: int = 10
    missiles: int = 3
    crew: int = 30
    damage: dict[System, float] = Field(default_factory=_default_damage)

    @property
    def depth(self) -> int:
        return self.position.z

    # --- Readiness ---

    def system_manned(self, system: System) -> bool:
        """Whether total crew covers the system's requirement.

        Checks the whole crew against one system at a time; crew is not
        allocated between systems.
        """
        return self.crew >= SYSTEM_MANNING[system]

    def system_ok(self, system: System) -> bool:
        """Whether the system is operable (rounded damage >= 0)."""
        return round_half_away(self.damage[system]) >= 0

    def fatally_damaged(self) -> bool:
        """Whether every vital system is out of action."""
        return all(round_half_away(self.damage[s]) < 0 for s in VITAL_SYSTEMS)

    def at_missile_depth(self) -> bool:
        low, high = MISSILE_DEPTH_RANGE
        return low <= self.depth <= high

    # --- Damage and repair ---

    def damage_random_system(self, rng: np.random.Generator, magnitude: float) -> System:
        """Subtract magnitude from one uniformly chosen system.

        Returns:
            The system that took the damage.
        """
        system = SYSTEMS[int(rng.integers(len(SYSTEMS)))]
        self.damage[system] -= magnitude
        logger.debug("system_damaged", system=system.value, magnitude=magnitude)
        return system

    def repair_random_system(self, rng: np.random.Generator) -> float:
        """Make one repair attempt on a uniformly chosen system.

        Repairs only happen inside the safe depth band, and only on systems
        whose damage value is at most 3.

        Returns:
            Amount added to the system's damage value (0.0 when gated off).
        """
        system = SYSTEMS[int(rng.integers(len(SYSTEMS)))]
        low, high = REPAIR_DEPTH_RANGE
        depth_factor = 1 if low < self.depth < high else 0
        damage_factor = 0 if self.damage[system] > REPAIR_DAMAGE_CEILING else 1
        amount = rng.random() * (2 + rng.random() * 2) * depth_factor * damage_factor
        self.damage[system] += amount
        return amount

    # --- Reactor and stores ---

    def spend_power(self, amount: float, rng: np.random.Generator) -> None:
        """Draw power from the reactor.

        Raises:
            GameOver: If a large draw overloads the pile (checked before the
                deduction) or the reactor is left with no power.
        """
        if amount > REACTOR_OVERLOAD_THRESHOLD and rng.random() < REACTOR_OVERLOAD_CHANCE:
            logger.info("reactor_overload", amount=amount, power=self.power)
            raise GameOver(
                won=False,
                reason="reactor_overload",
                message=(
                    "Atomic pile goes supercritical!!! Headquarters\n"
                    "will warn all subs to stay from radioactive area!!!"
                ),
            )
        self.power -= round_half_away(amount)
        if self.power <= 0:
            logger.info("reactor_dead", amount=amount, power=self.power)
            raise GameOver(
                won=False,
                reason="reactor_dead",
                message="Atomic pile has gone dead!!! Sub sinks, crew suffocates",
            )

    def spend_fuel(self, amount: int) -> None:
        self.fuel -= amount

    def add_power(self, amount: float) -> None:
        self.power += round_half_away(amount)

    def add_fuel(self, amount: float) -> None:
        self.fuel += round_half_away(amount)
