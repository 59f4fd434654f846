"""Turn loop: command, retaliation, damage check, drift, repair, cleanup."""

from dataclasses import dataclass, field

import structlog

from .commands import Command, CommandResult, execute
from .config import RulesConfig
from .console import Console
from .drift import DriftResult, process_drift_phase
from .entities import Entity
from .exceptions import GameOver
from .retaliation import RetaliationResult, retaliate
from .session import GameSession

logger = structlog.get_logger()

COMMAND_HELP = """\
The commands are:
#0: Navigation
#1: Sonar
#2: Torpedo control
#3: Polaris missile control
#4: Maneuvering
#5: Status/Damage report
#6: Headquarters
#7: Sabotage
#8: Power conversion
#9: Surrender"""


@dataclass
class TurnResult:
    """Everything that happened during one day."""

    day: int
    command: CommandResult
    retaliation: RetaliationResult
    drift: list[DriftResult] = field(default_factory=list)
    repaired: float = 0.0
    pruned: list[Entity] = field(default_factory=list)


@dataclass
class GameResult:
    won: bool
    reason: str
    days: int


class GameLoop:
    """
    Drives a session one turn at a time until a GameOver surfaces.

    Turn phases:
    1. Prompt until a command consumes the turn
    2. Win check (the command may have sunk the last ship)
    3. Retaliation
    4. Fatal damage check
    5. Drift of ships and monsters
    6. Repairs
    7. Prune dead units, win check
    """

    def __init__(
        self,
        session: GameSession,
        console: Console,
        rules: RulesConfig | None = None,
    ):
        self.session = session
        self.console = console
        self.rules = rules or RulesConfig()

    def next_command(self) -> CommandResult:
        """Prompt for orders until one consumes the turn."""
        while True:
            choice = self.console.ask_command(self.session.captain)
            if choice is None:
                self.console.say(COMMAND_HELP)
                continue
            try:
                command = Command(choice)
            except ValueError:
                logger.debug("unknown_command", choice=choice)
                continue
            result = execute(self.session, self.console, command)
            if result.consumed:
                return result

    def check_damage(self) -> None:
        """
        Raises:
            GameOver: If every vital system is out of action.
        """
        if self.session.submarine.fatally_damaged():
            raise GameOver(
                won=False,
                reason="fatal_damage",
                message=f"Damage too much {self.session.captain}!!! You're sunk!!",
            )

    def play_turn(self) -> TurnResult:
        """Play one full day.

        Raises:
            GameOver: From whichever phase ended the game.
        """
        session = self.session
        sub = session.submarine

        command = self.next_command()
        session.check_victory()

        retaliation = retaliate(session, self.console, self.rules.challenge_timeout_s)
        self.check_damage()

        self.console.say()
        self.console.say("---*** Result of last enemy maneuver ***---")
        drift = process_drift_phase(session, self.console, self.rules.drift_retry_limit)

        repaired = sum(
            sub.repair_random_system(session.rng)
            for _ in range(self.rules.repairs_per_turn)
        )

        pruned = session.world.prune_dead()
        session.check_victory()

        result = TurnResult(
            day=session.day,
            command=command,
            retaliation=retaliation,
            drift=drift,
            repaired=repaired,
            pruned=pruned,
        )
        logger.debug(
            "turn_complete",
            day=session.day,
            command=command.command.name,
            severity=retaliation.severity.value,
            pruned=len(pruned),
        )
        session.day += 1
        return result

    def run(self) -> GameResult:
        """Play until the game ends and report how it ended."""
        session = self.session
        self.console.say(
            f"You must destroy {session.ships_remaining()} enemy ships to win, "
            f"{session.captain}."
        )
        logger.info("game_started", ships=session.ships_remaining())

        try:
            while True:
                self.play_turn()
        except GameOver as e:
            if e.message:
                self.console.say(e.message)
            logger.info("game_over", won=e.won, reason=e.reason, day=session.day)
            return GameResult(won=e.won, reason=e.reason, days=session.day)
