"""Shared test fixtures for sea battle tests."""

from typing import Any, Collection

import pytest

from seabattle.session import GameSession
from seabattle.submarine import Submarine
from seabattle.types import Direction, Position
from seabattle.world import World, build_terrain


class ScriptedRng:
    """Stand-in for np.random.Generator that replays queued draws.

    random() pops from `randoms`, integers() pops from `ints`. An empty
    queue falls back to `default_random` and to the low end of the range.
    """

    def __init__(
        self,
        randoms: list[float] | None = None,
        ints: list[int] | None = None,
        default_random: float = 0.5,
    ):
        self.randoms = list(randoms or [])
        self.ints = list(ints or [])
        self.default_random = default_random

    def random(self) -> float:
        if self.randoms:
            return self.randoms.pop(0)
        return self.default_random

    def integers(self, low: int, high: int | None = None) -> int:
        if high is None:
            low, high = 0, low
        if self.ints:
            value = self.ints.pop(0)
            assert low <= value < high, f"scripted {value} outside [{low}, {high})"
            return value
        return low


class ScriptedConsole:
    """Console that answers from a queue and records everything said."""

    def __init__(self, answers: list[Any] | None = None):
        self.answers = list(answers or [])
        self.lines: list[str] = []
        self.prompts: list[str] = []

    @property
    def transcript(self) -> str:
        return "\n".join(self.lines)

    def _next(self, prompt: str) -> Any:
        self.prompts.append(prompt)
        assert self.answers, f"no scripted answer for prompt {prompt!r}"
        return self.answers.pop(0)

    def say(self, message: str = "") -> None:
        self.lines.append(message)

    def ask_name(self) -> str:
        return self._next("name")

    def ask_command(self, captain: str) -> int | None:
        return self._next("command")

    def ask_course(self) -> Direction:
        return Direction(self._next("course"))

    def ask_amount(self, prompt: str, maximum: int) -> int:
        amount = self._next(prompt)
        assert 0 <= amount <= maximum
        return amount

    def ask_number(self, prompt: str, minimum: int) -> int:
        number = self._next(prompt)
        assert number >= minimum
        return number

    def ask_choice(self, prompt: str, choices: Collection[int]) -> int:
        choice = self._next(prompt)
        assert choice in choices
        return choice

    def confirm(self, prompt: str) -> bool:
        return self._next(prompt)

    def ask_code(self, prompt: str, timeout_s: float) -> str | None:
        return self._next(prompt)


@pytest.fixture
def rng() -> ScriptedRng:
    return ScriptedRng()


@pytest.fixture
def make_rng() -> type[ScriptedRng]:
    """Build a ScriptedRng with its own queues."""
    return ScriptedRng


@pytest.fixture
def console() -> ScriptedConsole:
    return ScriptedConsole()


@pytest.fixture
def empty_world() -> World:
    """20x20 open sea, no island."""
    return World(max_x=19, max_y=19)


@pytest.fixture
def island_world() -> World:
    """20x20 sea with the standard island."""
    world = World(max_x=19, max_y=19)
    world.set_terrain(build_terrain(19, 19))
    return world


@pytest.fixture
def sub() -> Submarine:
    """Default submarine at (9, 9) depth 100."""
    return Submarine(entity_id="submarine", position=Position(x=9, y=9, z=100))


@pytest.fixture
def session(empty_world: World, sub: Submarine, rng: ScriptedRng) -> GameSession:
    """Session on open sea with only the submarine placed."""
    empty_world.add_entity(sub)
    return GameSession(world=empty_world, submarine=sub, rng=rng, captain="Nemo")
