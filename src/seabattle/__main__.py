"""CLI entry point for the game."""

import argparse
import sys

import numpy as np
import structlog

from .config import Config, find_config, load_config
from .console import TerminalConsole
from .game import GameLoop
from .session import new_session


def configure_logging(verbose: bool) -> None:
    """Send structured logs to stderr, keeping stdout for the game itself."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if verbose else 30),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def main() -> None:
    """Play one game of sea battle."""
    parser = argparse.ArgumentParser(
        description="Sea Battle - command a submarine against an enemy fleet"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path or name of game TOML config file",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides config)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug events to stderr",
    )

    args = parser.parse_args()
    configure_logging(args.verbose)
    logger = structlog.get_logger()

    if args.config:
        try:
            config_path = find_config(args.config)
        except FileNotFoundError as e:
            logger.error("config_not_found", path=args.config, error=str(e))
            raise SystemExit(1)
        config = load_config(config_path)
        logger.info("config_loaded", path=str(config_path))
    else:
        config = Config()

    seed = args.seed if args.seed is not None else config.seed
    rng = np.random.default_rng(seed)

    console = TerminalConsole()
    captain = console.ask_name()
    session = new_session(config, rng, captain)

    try:
        result = GameLoop(session, console, config.rules).run()
    except (KeyboardInterrupt, EOFError):
        console.say()
        logger.info("game_abandoned", day=session.day)
        raise SystemExit(130)

    console.say("Game over.")
    console.say("You win" if result.won else "You lose")


if __name__ == "__main__":
    main()
