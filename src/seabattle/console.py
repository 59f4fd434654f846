"""Operator console: the input/output boundary of the game."""

import time
from typing import Collection, Protocol

from .types import Direction


class Console(Protocol):
    """Everything the game asks of, or tells, the operator.

    Implementations do their own parsing and range checks; the game only
    ever sees validated values.
    """

    def say(self, message: str = "") -> None: ...

    def ask_name(self) -> str: ...

    def ask_command(self, captain: str) -> int | None:
        """Read an order. None means the answer was not a number."""
        ...

    def ask_course(self) -> Direction: ...

    def ask_amount(self, prompt: str, maximum: int) -> int:
        """Read an integer in 0..maximum, re-prompting until it is."""
        ...

    def ask_number(self, prompt: str, minimum: int) -> int:
        """Read an integer >= minimum, re-prompting until it is."""
        ...

    def ask_choice(self, prompt: str, choices: Collection[int]) -> int: ...

    def confirm(self, prompt: str) -> bool: ...

    def ask_code(self, prompt: str, timeout_s: float) -> str | None:
        """Read a code word. None if the answer came after the deadline."""
        ...


def _parse_int(text: str) -> int | None:
    try:
        return int(text.strip())
    except ValueError:
        return None


class TerminalConsole:
    """Console over stdin/stdout."""

    def say(self, message: str = "") -> None:
        print(message)

    def _read(self, prompt: str) -> str:
        return input(prompt)

    def ask_name(self) -> str:
        name = self._read("What is your name? ").strip()
        print()
        return name or "Captain"

    def ask_command(self, captain: str) -> int | None:
        return _parse_int(self._read(f"What are your orders {captain}? "))

    def ask_course(self) -> Direction:
        while True:
            course = _parse_int(self._read("Course (1-8)? "))
            if course is not None and 1 <= course <= 8:
                return Direction(course)

    def ask_amount(self, prompt: str, maximum: int) -> int:
        while True:
            amount = _parse_int(self._read(prompt))
            if amount is not None and 0 <= amount <= maximum:
                return amount

    def ask_number(self, prompt: str, minimum: int) -> int:
        while True:
            number = _parse_int(self._read(prompt))
            if number is not None and number >= minimum:
                return number

    def ask_choice(self, prompt: str, choices: Collection[int]) -> int:
        while True:
            choice = _parse_int(self._read(prompt))
            if choice is not None and choice in choices:
                return choice

    def confirm(self, prompt: str) -> bool:
        return "n" not in self._read(prompt).lower()

    def ask_code(self, prompt: str, timeout_s: float) -> str | None:
        started = time.monotonic()
        answer = self._read(prompt)
        if time.monotonic() - started > timeout_s:
            return None
        return answer.strip()
