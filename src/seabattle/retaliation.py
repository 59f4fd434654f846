"""Enemy retaliation: depth charges scaled by nearby ship threat."""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np
import structlog

from .console import Console
from .entities import EntityKind
from .exceptions import GameOver
from .session import GameSession
from .submarine import Submarine, System
from .world import World

logger = structlog.get_logger()

THREAT_RADIUS = 4
CHALLENGE_CODE_MIN = 1000
CHALLENGE_CODE_MAX = int("zzzz", 36)


class Severity(str, Enum):
    NONE = "none"
    NO_DAMAGE = "no_damage"
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    CRITICAL = "critical"


# (score ceiling, secondary chance, severity), ascending. Anything above the
# last ceiling is critical.
TIERS: tuple[tuple[float, float, Severity], ...] = (
    (0.13, 0.92, Severity.NO_DAMAGE),
    (0.36, 0.96, Severity.LIGHT),
    (0.60, 0.975, Severity.MODERATE),
    (0.90, 0.983, Severity.HEAVY),
)


@dataclass
class RetaliationResult:
    """What one round of depth charging did."""

    score: float
    severity: Severity
    side: str | None = None
    # Secondary tier roll. Recorded, but the tier's effect applies either way.
    decisive: bool | None = None
    power_spent: float = 0.0
    damaged: list[System] = field(default_factory=list)


def threat_score(
    world: World,
    submarine: Submarine,
    rng: np.random.Generator,
    radius: int = THREAT_RADIUS,
) -> float:
    """Sum rand() / distance over live ships around the submarine.

    Ships at distance 0 are left out of the sum.
    """
    score = 0.0
    for pos in world.positions_within(submarine.position, radius):
        for unit in world.entities_at(pos):
            if unit.kind is not EntityKind.SHIP:
                continue
            distance = submarine.position.distance_to(unit.position)
            if distance == 0:
                continue
            score += rng.random() / distance
    return score


def classify(score: float, rng: np.random.Generator) -> tuple[Severity, bool | None]:
    """Map a threat score to a severity tier plus its secondary roll."""
    if score == 0:
        return Severity.NONE, None
    for ceiling, chance, severity in TIERS:
        if score <= ceiling:
            return severity, bool(rng.random() <= chance)
    return Severity.CRITICAL, None


def retaliate(
    session: GameSession, console: Console, timeout_s: float = 30.0
) -> RetaliationResult:
    """Run the retaliation phase of a turn.

    Raises:
        GameOver: If the pile dies from the power drain, or the critical
            challenge is failed or answered too late.
    """
    sub = session.submarine
    rng = session.rng
    captain = session.captain

    score = threat_score(session.world, sub, rng)
    if score == 0:
        console.say(f"No ships in range to depth charge you {captain}!!")
        return RetaliationResult(score=score, severity=Severity.NONE)

    side = "port" if rng.random() > 0.5 else "starboard"
    console.say(f"Depth charges off {side} side {captain}!!!")

    severity, decisive = classify(score, rng)
    result = RetaliationResult(
        score=score, severity=severity, side=side, decisive=decisive
    )
    logger.info(
        "retaliation", score=round(score, 3), severity=severity.value, day=session.day
    )

    match severity:
        case Severity.NO_DAMAGE:
            console.say(f"No real damage sustained {captain}.")
        case Severity.LIGHT:
            console.say(f"Light, superficial damage {captain}.")
            _drain(result, sub, rng, 50)
            result.damaged.append(sub.damage_random_system(rng, rng.random() * 2))
        case Severity.MODERATE:
            console.say("Moderate damage.  Repairs needed.")
            _drain(result, sub, rng, 75 + int(rng.integers(1, 31)))
            for _ in range(2):
                result.damaged.append(sub.damage_random_system(rng, rng.random() * 8))
        case Severity.HEAVY:
            console.say(f"Heavy damage!! Repairs immediate {captain}!!!")
            _drain(result, sub, rng, 200 + rng.random() * 76)
            for _ in range(int(rng.integers(4, 7))):
                result.damaged.append(sub.damage_random_system(rng, rng.random() * 11))
        case Severity.CRITICAL:
            _challenge(session, console, timeout_s)

    return result


def _drain(
    result: RetaliationResult, sub: Submarine, rng: np.random.Generator, amount: float
) -> None:
    result.power_spent = amount
    sub.spend_power(amount, rng)


def _challenge(session: GameSession, console: Console, timeout_s: float) -> None:
    captain = session.captain
    code = int(session.rng.integers(CHALLENGE_CODE_MIN, CHALLENGE_CODE_MAX + 1))
    console.say("Damage critical!!!! We need help!!!")
    console.say(
        f"Send 'HELP' in code.  Here is the code: {np.base_repr(code, 36).lower()}"
    )
    answer = console.ask_code("Enter code: ", timeout_s)

    accepted = False
    if answer is not None:
        try:
            accepted = int(answer, 36) == code
        except ValueError:
            accepted = False

    if not accepted:
        logger.info("challenge_failed", timed_out=answer is None)
        raise GameOver(
            won=False,
            reason="help_not_arrived",
            message=f"Message garbled {captain}... No help arrives!!!",
        )
    console.say(f"Fast work {captain}!! Help arrives in time to save you!!!")
