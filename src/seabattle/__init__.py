"""Sea battle: a turn-based submarine combat simulation."""

from .commands import COMMAND_HANDLERS, Command, CommandResult, detonate_missile, execute
from .config import Config, find_config, list_configs, load_config
from .console import Console, TerminalConsole
from .drift import DriftOutcome, DriftResolver, DriftResult, process_drift_phase
from .entities import Entity, EntityKind, Headquarters, Mine, Monster, Ship
from .exceptions import (
    EntityAlreadyExistsError,
    GameOver,
    PlacementError,
    SeaBattleError,
)
from .game import GameLoop, GameResult, TurnResult
from .retaliation import RetaliationResult, Severity, retaliate, threat_score
from .session import GameSession, new_session
from .submarine import SYSTEM_MANNING, SYSTEMS, Submarine, System
from .types import DIRECTION_DELTAS, Direction, Position
from .world import World, build_terrain

__all__ = [
    # Types
    "Direction",
    "Position",
    "DIRECTION_DELTAS",
    # Units
    "Entity",
    "EntityKind",
    "Ship",
    "Monster",
    "Mine",
    "Headquarters",
    "Submarine",
    "System",
    "SYSTEMS",
    "SYSTEM_MANNING",
    # World
    "World",
    "build_terrain",
    # Session
    "GameSession",
    "new_session",
    # Commands
    "Command",
    "CommandResult",
    "COMMAND_HANDLERS",
    "execute",
    "detonate_missile",
    # Retaliation
    "Severity",
    "RetaliationResult",
    "retaliate",
    "threat_score",
    # Drift
    "DriftOutcome",
    "DriftResult",
    "DriftResolver",
    "process_drift_phase",
    # Game loop
    "GameLoop",
    "GameResult",
    "TurnResult",
    # Console
    "Console",
    "TerminalConsole",
    # Config
    "Config",
    "load_config",
    "find_config",
    "list_configs",
    # Exceptions
    "SeaBattleError",
    "GameOver",
    "PlacementError",
    "EntityAlreadyExistsError",
]
