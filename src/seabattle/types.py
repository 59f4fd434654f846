"""Core spatial types for the sea battle simulation."""

import math
from enum import IntEnum
from typing import Iterator

from pydantic import BaseModel


class Direction(IntEnum):
    """8-direction compass course, numbered as the helm enters it (1-8)."""

    NORTH = 1
    NORTHEAST = 2
    EAST = 3
    SOUTHEAST = 4
    SOUTH = 5
    SOUTHWEST = 6
    WEST = 7
    NORTHWEST = 8


# Direction deltas for movement calculation
# Coordinate system: x is the map row (+X is South), y is the column (+Y is East)
DIRECTION_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (-1, 0),
    Direction.NORTHEAST: (-1, 1),
    Direction.EAST: (0, 1),
    Direction.SOUTHEAST: (1, 1),
    Direction.SOUTH: (1, 0),
    Direction.SOUTHWEST: (1, -1),
    Direction.WEST: (0, -1),
    Direction.NORTHWEST: (-1, -1),
}


class Position(BaseModel, frozen=True):
    """Immutable grid cell plus depth.

    Equality and hashing only look at the horizontal cell (x, y): two units
    at different depths in the same cell are co-located.
    """

    x: int
    y: int
    z: int = 0

    @property
    def depth(self) -> int:
        return self.z

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def move(
        self,
        *,
        x: int | None = None,
        y: int | None = None,
        z: int | None = None,
        dx: int = 0,
        dy: int = 0,
        dz: int = 0,
    ) -> "Position":
        """Return a new position from absolute values and/or deltas.

        An absolute component wins over its delta; a component given neither
        way keeps its current value.
        """
        return Position(
            x=x if x is not None else self.x + dx,
            y=y if y is not None else self.y + dy,
            z=z if z is not None else self.z + dz,
        )

    def offset(self, direction: Direction) -> "Position":
        """Return new position one cell along direction, same depth."""
        dx, dy = DIRECTION_DELTAS[direction]
        return self.move(dx=dx, dy=dy)

    def within_radius(self, radius: int) -> Iterator["Position"]:
        """Yield the (2r+1)^2 cells of the square around this position.

        Row-major order: dx outer, dy inner. No bounds checking.
        """
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                yield self.move(dx=dx, dy=dy)

    def distance_to(self, other: "Position") -> float:
        """Range to another position as the fire-control tables compute it.

        Both terms use the x displacement; the y displacement is ignored.
        """
        dx = other.x - self.x
        return math.sqrt(dx**2 + dx**2)

    def __str__(self) -> str:
        return f"({self.x}, {self.y}) depth {self.z}"

    def __repr__(self) -> str:
        return f"Position(x={self.x}, y={self.y}, z={self.z})"
