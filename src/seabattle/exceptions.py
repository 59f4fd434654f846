"""Custom exceptions for the sea battle simulation."""


class SeaBattleError(Exception):
    """Base exception for sea battle errors."""

    pass


class GameOver(SeaBattleError):
    """Raised when the session ends, from whatever command or phase ended it.

    Attributes:
        won: True if the captain won.
        reason: Machine-readable cause, e.g. "reactor_dead".
        message: Narration for the operator describing how it ended.
    """

    def __init__(self, won: bool, reason: str, message: str = ""):
        self.won = won
        self.reason = reason
        self.message = message
        outcome = "won" if won else "lost"
        super().__init__(f"Game {outcome}: {reason}")


class PlacementError(SeaBattleError):
    """Raised when no free cell could be found for a new unit."""

    pass


class EntityAlreadyExistsError(SeaBattleError):
    """Raised when trying to add an entity that already exists."""

    pass
