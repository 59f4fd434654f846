"""Command handlers: one function per order the captain can give."""

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

import structlog

from .console import Console
from .entities import EntityKind
from .exceptions import GameOver
from .session import GameSession
from .submarine import System
from .types import Position

logger = structlog.get_logger()

SURFACE_DEPTH = 50
NAVIGATION_DRAG = 0.23
NAVIGATION_STEP_COST = 100
MONSTER_COLLISION_SURVIVAL = 0.21
MONSTER_PROXIMITY_RADIUS = 2
MONSTER_PROXIMITY_CHANCE = 0.25
SONAR_MAP_COST = 50
TORPEDO_COST = 150
TORPEDO_IMPLOSION_DEPTH = 2000
MISSILE_COST = 300
MISSILE_FUEL_PER_STEP = 75
CRUSH_DEPTH = 3000
HEADQUARTERS_RANGE = 2.5
SABOTAGE_RADIUS = 2
MIN_CREW_ABOARD = 10


class Command(IntEnum):
    NAVIGATION = 0
    SONAR = 1
    TORPEDO = 2
    MISSILE = 3
    MANEUVERING = 4
    STATUS = 5
    HEADQUARTERS = 6
    SABOTAGE = 7
    CONVERSION = 8
    SURRENDER = 9


@dataclass
class CommandResult:
    """Outcome of a command: whether it used up the turn, and why not."""

    command: Command
    consumed: bool
    failure_reason: str | None = None


def _rejected(command: Command, reason: str) -> CommandResult:
    logger.debug("command_rejected", command=command.name, reason=reason)
    return CommandResult(command=command, consumed=False, failure_reason=reason)


def _unavailable(
    session: GameSession,
    console: Console,
    command: Command,
    system: System,
    damaged: str,
    unmanned: str,
) -> CommandResult | None:
    """Reject the command if its system is damaged or undermanned."""
    sub = session.submarine
    if not sub.system_ok(system):
        console.say(damaged)
        return _rejected(command, f"{system.value}_damaged")
    if not sub.system_manned(system):
        console.say(unmanned)
        return _rejected(command, f"{system.value}_unmanned")
    return None


def navigate(session: GameSession, console: Console) -> CommandResult:
    """Move along a course, spending 100 power per cell."""
    cmd = Command.NAVIGATION
    sub = session.submarine
    world = session.world
    rng = session.rng
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.ENGINES,
        f"Engines are under repair {n}.",
        f"Not enough crew to man the engines {n}.",
    ):
        return rejected

    drag = 1 - NAVIGATION_DRAG * rng.random() if sub.depth > SURFACE_DEPTH else 1
    direction = console.ask_course()
    budget = console.ask_amount(
        f"Power available: {sub.power} units.  Power to use? ", sub.power
    )
    steps = int((budget // NAVIGATION_STEP_COST) * drag)

    near_miss_reported = False
    for _ in range(steps):
        dest = sub.position.offset(direction)
        if not world.in_bounds(dest):
            console.say(f"You cannot leave the area {n}!!")
            break
        if world.is_island(dest):
            console.say(f"You almost ran aground {n}!!")
            break

        for unit in world.entities_at(dest):
            match unit.kind:
                case EntityKind.SHIP:
                    raise GameOver(
                        won=False,
                        reason="rammed_ship",
                        message=f"You rammed a ship!!! You're both sunk {n}!!",
                    )
                case EntityKind.HEADQUARTERS:
                    if sub.depth <= SURFACE_DEPTH:
                        raise GameOver(
                            won=False,
                            reason="rammed_headquarters",
                            message="You rammed your headquarters!! You're sunk!!",
                        )
                case EntityKind.MINE:
                    raise GameOver(
                        won=False,
                        reason="mine",
                        message=f"You've been blown up by a mine {n}!!",
                    )
                case EntityKind.MONSTER:
                    if rng.random() >= MONSTER_COLLISION_SURVIVAL:
                        raise GameOver(
                            won=False,
                            reason="eaten_by_monster",
                            message=f"You were eaten by a sea monster {n}!!",
                        )
                case EntityKind.SUBMARINE:
                    pass

        sub.position = dest
        sub.spend_power(NAVIGATION_STEP_COST, rng)

        for pos in world.positions_within(sub.position, MONSTER_PROXIMITY_RADIUS):
            if not any(u.kind is EntityKind.MONSTER for u in world.entities_at(pos)):
                continue
            if rng.random() < MONSTER_PROXIMITY_CHANCE:
                raise GameOver(
                    won=False,
                    reason="eaten_by_monster",
                    message=f"You were eaten by a sea monster {n}!!",
                )
            if not near_miss_reported:
                console.say(f"You just had a narrow escape with a sea monster {n}!!")
                near_miss_reported = True

    console.say(f"Navigation complete.  Power left={sub.power}.")
    logger.debug("navigation_complete", position=str(sub.position), power=sub.power)
    return CommandResult(command=cmd, consumed=True)


def sonar(session: GameSession, console: Console) -> CommandResult:
    """Full map (option 0) or the directional report header (option 1)."""
    cmd = Command.SONAR
    n = session.captain
    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.SONAR,
        f"Sonar is under repair {n}.",
        f"Not enough crew to work sonar {n}.",
    ):
        return rejected

    option = console.ask_choice("Option #? ", (0, 1))
    if option == 0:
        for row in session.world.render_map():
            console.say(row)
        console.say()
        session.submarine.spend_power(SONAR_MAP_COST, session.rng)
    else:
        console.say("%10s %10s %12s" % ("Direction", "# of Ships", "Distances"))
        console.say()
    return CommandResult(command=cmd, consumed=False)


def torpedo(session: GameSession, console: Console) -> CommandResult:
    """Fire one torpedo along a course. Only ships stop it."""
    cmd = Command.TORPEDO
    sub = session.submarine
    world = session.world
    rng = session.rng
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.TORPEDOES,
        f"Torpedo tubes are under repair {n}.",
        f"Not enough crew to fire torpedo {n}.",
    ):
        return rejected
    if sub.torpedoes <= 0:
        console.say(f"No torpedoes left {n}.")
        return _rejected(cmd, "no_torpedoes")

    if sub.depth >= TORPEDO_IMPLOSION_DEPTH and rng.random() <= 0.5:
        raise GameOver(
            won=False,
            reason="torpedo_implosion",
            message="Pressure implodes sub upon firing....You're crushed!!",
        )

    direction = console.ask_course()
    torpedo_range = 7 - (5 if sub.depth > SURFACE_DEPTH else 0) - int(rng.integers(1, 5))
    sub.torpedoes -= 1
    sub.spend_power(TORPEDO_COST, rng)

    pos = sub.position
    for _ in range(torpedo_range):
        pos = pos.offset(direction)
        if not world.in_bounds(pos):
            console.say(f"Torpedo out of sonar range....ineffectual {n}")
            return CommandResult(command=cmd, consumed=True)
        ships = [u for u in world.entities_at(pos) if u.kind is EntityKind.SHIP]
        if ships:
            for ship in ships:
                ship.kill()
            console.say(f"Ouch!!! You got one {n}!!!")
            logger.info("torpedo_hit", position=str(pos), ships=len(ships))
            return CommandResult(command=cmd, consumed=True)

    console.say("dud.")
    return CommandResult(command=cmd, consumed=True)


def missile(session: GameSession, console: Console) -> CommandResult:
    """Launch a missile; its fuel sets the range, it blasts a 3x3 block."""
    cmd = Command.MISSILE
    sub = session.submarine
    world = session.world
    rng = session.rng
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.MISSILES,
        f"Missile silos are under repair {n}.",
        f"Not enough crew to launch a missile {n}.",
    ):
        return rejected
    if sub.missiles <= 0:
        console.say(f"No missiles left {n}.")
        return _rejected(cmd, "no_missiles")

    if not sub.at_missile_depth():
        if not console.confirm("Recommend that you not fire at this depth...Proceed? "):
            return _rejected(cmd, "launch_aborted")
        if rng.random() >= 0.5:
            raise GameOver(
                won=False,
                reason="missile_misfire",
                message=f"Missile explodes upon firing {n}!!  You're dead!!",
            )

    direction = console.ask_course()
    fuel = console.ask_amount(
        f"Fuel available: {sub.fuel} pounds.  Fuel to use? ", sub.fuel
    )
    sub.missiles -= 1
    sub.spend_fuel(fuel)
    sub.spend_power(MISSILE_COST, rng)

    pos = sub.position
    for _ in range(max(1, fuel // MISSILE_FUEL_PER_STEP)):
        pos = pos.offset(direction)
        if not world.in_bounds(pos):
            console.say(f"Missile out of sonar tracking {n}. Missile lost.")
            return CommandResult(command=cmd, consumed=True)

    detonate_missile(session, console, pos)
    return CommandResult(command=cmd, consumed=True)


def detonate_missile(
    session: GameSession, console: Console, impact: Position
) -> Counter[EntityKind]:
    """Kill every live unit in the 3x3 block around impact.

    Returns:
        Kill tally by kind.

    Raises:
        GameOver: If the submarine was inside the blast.
    """
    n = session.captain
    kills: Counter[EntityKind] = Counter()
    for unit in session.world.entities_within(impact, 1):
        unit.kill()
        kills[unit.kind] += 1
    logger.info(
        "missile_detonated",
        impact=str(impact),
        kills={k.value: v for k, v in kills.items()},
    )

    if kills[EntityKind.MINE]:
        console.say(f"You destroyed {kills[EntityKind.MINE]} mines {n}.")
    if kills[EntityKind.MONSTER]:
        console.say(
            f"You got {kills[EntityKind.MONSTER]} sea monsters {n}!!! Good work!!"
        )
    if kills[EntityKind.HEADQUARTERS]:
        console.say(f"You blew up your headquarters {n}!!")
        session.disable_headquarters()
    console.say(f"You destroyed {kills[EntityKind.SHIP]} enemy ships {n}!!!")

    if kills[EntityKind.SUBMARINE]:
        raise GameOver(won=False, reason="self_destruct", message="You blew yourself up!!")
    return kills


def maneuver(session: GameSession, console: Console) -> CommandResult:
    """Change depth. Cost is half the depth change."""
    cmd = Command.MANEUVERING
    sub = session.submarine
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.MANEUVERING,
        f"Ballast controls are being repaired {n}.",
        f"There are not enough crew to work the controls {n}.",
    ):
        return rejected

    depth = console.ask_number("New depth? ", 1)
    if depth >= CRUSH_DEPTH:
        raise GameOver(
            won=False,
            reason="hull_crushed",
            message=f"Hull crushed by pressure {n}!!",
        )
    cost = abs(sub.depth - depth) // 2
    sub.spend_power(cost, session.rng)
    sub.position = sub.position.move(z=depth)
    console.say(f"Maneuver complete.  Power loss={cost}")
    return CommandResult(command=cmd, consumed=True)


def status(session: GameSession, console: Console) -> CommandResult:
    cmd = Command.STATUS
    sub = session.submarine
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.STATUS,
        f"No reports are able to get through {n}.",
        f"No one left to give the report {n}.",
    ):
        return rejected

    console.say(f"# of enemy ships left.......{session.ships_remaining()}")
    console.say(f"# of power units left.......{sub.power}")
    console.say(f"# of torpedoes left.........{sub.torpedoes}")
    console.say(f"# of crewmen left...........{sub.crew}")
    console.say(f"lbs. of fuel left...........{sub.fuel}")
    console.say()
    console.say("%12s %6s (+ good, 0 neutral, - bad)" % ("ITEM", "DAMAGE"))
    console.say("%12s %6s" % ("-" * 12, "-" * 6))
    for system, value in sub.damage.items():
        console.say("%12s %2.3f" % (system.value.capitalize(), value))
    console.say(f"You are at {sub.position}")
    console.say()
    return CommandResult(command=cmd, consumed=False)


def headquarters(session: GameSession, console: Console) -> CommandResult:
    """Resupply from any headquarters within range, if shallow enough to dock."""
    cmd = Command.HEADQUARTERS
    sub = session.submarine
    n = session.captain

    if not sub.system_ok(System.HEADQUARTERS):
        console.say(f"Headquarters is damaged. Unable to help {n}.")
        return _rejected(cmd, "headquarters_damaged")
    if session.resupply_charges <= 0:
        console.say(f"Headquarters is deserted {n}.")
        return _rejected(cmd, "headquarters_deserted")

    for hq in session.world.live_entities(EntityKind.HEADQUARTERS):
        if hq.position.distance_to(sub.position) >= HEADQUARTERS_RANGE:
            continue
        if sub.depth > SURFACE_DEPTH:
            console.say(
                f"Unable to comply with docking orders for headquarters at {hq.position}"
            )
            continue
        console.say("Divers from headquarters bring out supplies and men.")
        sub.add_power(4000)
        sub.add_fuel(1500)
        sub.torpedoes = 8
        sub.missiles = 2
        sub.crew = 25
        # Not clamped: two headquarters in range both draw a charge
        session.resupply_charges -= 1
        logger.info("resupplied", charges_left=session.resupply_charges)

    return CommandResult(command=cmd, consumed=True)


def sabotage(session: GameSession, console: Console) -> CommandResult:
    """Send a landing party against ships within two cells."""
    cmd = Command.SABOTAGE
    sub = session.submarine
    rng = session.rng
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.SABOTAGE,
        f"Hatches inaccessible {n}. No sabotages possible.",
        f"Not enough crew to go on a mission {n}.",
    ):
        return rejected

    nearby = session.world.entities_within(sub.position, SABOTAGE_RADIUS)
    ships = [u for u in nearby if u.kind is EntityKind.SHIP]
    monsters = [u for u in nearby if u.kind is EntityKind.MONSTER]
    console.say(f"There are {len(ships)} ships in range {n}.")

    while True:
        party = console.ask_number(f"How many men are going {n}? ", 1)
        if sub.crew - party >= MIN_CREW_ABOARD:
            break
        console.say(f"You must leave at least {MIN_CREW_ABOARD} men on board {n}.")

    ratio = len(ships) / party
    destroyed = 0
    for ship in ships:
        if ratio > (1 - rng.random()) and (rng.random() + ratio) < 0.9:
            continue
        ship.kill()
        destroyed += 1
    console.say(f"{destroyed} ships were destroyed {n}.")

    accidents = sum(1 for _ in range(party) if rng.random() > 0.6)
    if monsters:
        meals = sum(1 for _ in range(party - accidents) if rng.random() < 0.15)
        console.say("A sea monster smells the men on the way back!!!")
        console.say(f"{meals} men were eaten {n}!!")
        sub.crew -= meals
    console.say(f"{accidents} men were lost through accidents {n}.")
    sub.crew -= accidents

    logger.info("sabotage", party=party, destroyed=destroyed, crew=sub.crew)
    sub.spend_power(10 * party + rng.random() * 10, rng)
    return CommandResult(command=cmd, consumed=True)


def convert_power(session: GameSession, console: Console) -> CommandResult:
    """Trade fuel for power at 3:1, or power for fuel at 1:3."""
    cmd = Command.CONVERSION
    sub = session.submarine
    n = session.captain

    if rejected := _unavailable(
        session,
        console,
        cmd,
        System.CONVERTER,
        f"Power converter is damaged {n}.",
        f"Not enough men to work the converter {n}.",
    ):
        return rejected

    option = console.ask_choice("Option? (1 = fuel to power, 2 = power to fuel)? ", (1, 2))
    if option == 1:
        amount = console.ask_amount(
            f"Fuel available: {sub.fuel} pounds.  Fuel to use? ", sub.fuel
        )
        sub.spend_fuel(amount)
        sub.add_power(amount / 3)
    else:
        amount = console.ask_amount(
            f"Power available: {sub.power} units.  Power to use? ", sub.power
        )
        sub.spend_power(amount, session.rng)
        sub.add_fuel(amount * 3)

    console.say(f"Conversion complete. Power={sub.power}, fuel={sub.fuel}")
    return CommandResult(command=cmd, consumed=True)


def surrender(session: GameSession, console: Console) -> CommandResult:
    raise GameOver(
        won=False,
        reason="surrendered",
        message=f"Coward!! You're not very patriotic {session.captain}!!!",
    )


CommandHandler = Callable[[GameSession, Console], CommandResult]

COMMAND_HANDLERS: dict[Command, CommandHandler] = {
    Command.NAVIGATION: navigate,
    Command.SONAR: sonar,
    Command.TORPEDO: torpedo,
    Command.MISSILE: missile,
    Command.MANEUVERING: maneuver,
    Command.STATUS: status,
    Command.HEADQUARTERS: headquarters,
    Command.SABOTAGE: sabotage,
    Command.CONVERSION: convert_power,
    Command.SURRENDER: surrender,
}


def execute(session: GameSession, console: Console, command: Command) -> CommandResult:
    """Run the handler for a command.

    Raises:
        GameOver: If the command ended the game.
    """
    result = COMMAND_HANDLERS[command](session, console)
    logger.debug(
        "command_executed",
        command=command.name,
        consumed=result.consumed,
        failure_reason=result.failure_reason,
    )
    return result
