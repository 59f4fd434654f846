"""World state: terrain grid and the live unit list."""

from typing import Iterator, Sequence

import numpy as np
import structlog
from numpy.typing import NDArray
from pydantic import BaseModel, PrivateAttr

from .entities import Entity, EntityKind
from .exceptions import EntityAlreadyExistsError, PlacementError
from .types import Position

logger = structlog.get_logger()

OPEN = 0
ISLAND = 1

# The central island, stamped with its top-left cell at ISLAND_ORIGIN.
# One row per x (6..12), one column per y (6..11).
ISLAND_ORIGIN = (6, 6)
ISLAND_ROWS: tuple[tuple[int, ...], ...] = (
    (0, 1, 1, 1, 0, 0),
    (0, 1, 1, 1, 1, 0),
    (1, 1, 1, 0, 1, 1),
    (1, 1, 0, 0, 0, 1),
    (1, 1, 0, 0, 1, 1),
    (0, 1, 1, 0, 1, 0),
    (0, 0, 1, 0, 0, 0),
)


def build_terrain(
    max_x: int,
    max_y: int,
    island: Sequence[Sequence[int]] = ISLAND_ROWS,
    origin: tuple[int, int] = ISLAND_ORIGIN,
) -> NDArray[np.uint8]:
    """Build a terrain array of open sea with one island stamped in.

    Args:
        max_x: Largest x coordinate (inclusive).
        max_y: Largest y coordinate (inclusive).
        island: Rows of OPEN/ISLAND values.
        origin: (x, y) of the island's first cell.

    Returns:
        uint8 array of shape (max_x + 1, max_y + 1).

    Raises:
        ValueError: If the island does not fit inside the grid.
    """
    terrain = np.full((max_x + 1, max_y + 1), OPEN, dtype=np.uint8)
    block = np.asarray(island, dtype=np.uint8)
    ox, oy = origin
    rows, cols = block.shape
    if ox < 0 or oy < 0 or ox + rows > max_x + 1 or oy + cols > max_y + 1:
        raise ValueError(
            f"Island of shape {block.shape} at {origin} doesn't fit "
            f"grid ({max_x + 1}, {max_y + 1})"
        )
    terrain[ox : ox + rows, oy : oy + cols] = block
    return terrain


class World(BaseModel):
    """
    Mutable world state container.

    Terrain is fixed once set. Units are kept in insertion order; dead units
    remain visible until prune_dead() runs at the end of the turn.
    """

    max_x: int = 19
    max_y: int = 19

    # Shape: (max_x + 1, max_y + 1), values OPEN or ISLAND
    _terrain: NDArray[np.uint8] = PrivateAttr()

    # Unit registry, in insertion order
    _entities: list[Entity] = PrivateAttr(default_factory=list)
    _entity_ids: set[str] = PrivateAttr(default_factory=set)

    def model_post_init(self, __context: object) -> None:
        self._terrain = np.full((self.max_x + 1, self.max_y + 1), OPEN, dtype=np.uint8)

    # --- Terrain operations ---

    def set_terrain(self, terrain: NDArray[np.uint8]) -> None:
        """Replace the terrain array.

        Args:
            terrain: 2D array of OPEN/ISLAND values, shape (max_x + 1, max_y + 1).
        """
        expected = (self.max_x + 1, self.max_y + 1)
        if terrain.shape != expected:
            raise ValueError(
                f"Terrain shape {terrain.shape} doesn't match world dimensions {expected}"
            )
        self._terrain = terrain

    @property
    def terrain(self) -> NDArray[np.uint8]:
        return self._terrain

    def in_bounds(self, position: Position) -> bool:
        """Check if position is on the grid. Depth is not checked."""
        return 0 <= position.x <= self.max_x and 0 <= position.y <= self.max_y

    def is_island(self, position: Position) -> bool:
        if not self.in_bounds(position):
            return False
        return int(self._terrain[position.x, position.y]) == ISLAND

    def positions_within(self, center: Position, radius: int) -> Iterator[Position]:
        """In-bounds cells of the square around center, row-major."""
        for pos in center.within_radius(radius):
            if self.in_bounds(pos):
                yield pos

    # --- Entity operations ---

    def add_entity(self, entity: Entity) -> None:
        """Add entity to world.

        Raises:
            EntityAlreadyExistsError: If entity with same ID already exists.
        """
        if entity.entity_id in self._entity_ids:
            raise EntityAlreadyExistsError(f"Entity {entity.entity_id} already exists")
        self._entities.append(entity)
        self._entity_ids.add(entity.entity_id)

    @property
    def entities(self) -> Sequence[Entity]:
        """All units still held by the world, dead or alive, in insertion order."""
        return self._entities

    def live_entities(self, kind: EntityKind | None = None) -> list[Entity]:
        """Live units, optionally filtered by kind."""
        return [
            e for e in self._entities if e.alive and (kind is None or e.kind is kind)
        ]

    def count(self, kind: EntityKind) -> int:
        """Number of live units of a kind."""
        return sum(1 for e in self._entities if e.alive and e.kind is kind)

    def entities_at(self, position: Position) -> list[Entity]:
        """Live units in the cell (horizontal match only)."""
        return [e for e in self._entities if e.alive and e.position == position]

    def entities_within(self, center: Position, radius: int) -> list[Entity]:
        """Live units in the square around center, in scan order."""
        found: list[Entity] = []
        for pos in self.positions_within(center, radius):
            found.extend(self.entities_at(pos))
        return found

    def collision(self, position: Position) -> bool:
        """Whether the cell holds a live unit or is island."""
        return bool(self.entities_at(position)) or self.is_island(position)

    def random_unused_location(
        self, rng: np.random.Generator, max_attempts: int = 10_000
    ) -> Position:
        """Rejection-sample a free cell at depth 0.

        Callers must leave enough free cells on the grid.

        Raises:
            PlacementError: If no free cell turned up within max_attempts.
        """
        for _ in range(max_attempts):
            x = int(rng.integers(0, self.max_x + 1))
            y = int(rng.integers(0, self.max_y + 1))
            pos = Position(x=x, y=y)
            if not self.collision(pos):
                return pos
        raise PlacementError(f"No free cell found after {max_attempts} attempts")

    def prune_dead(self) -> list[Entity]:
        """Drop dead units from the world and return them."""
        live: list[Entity] = []
        dead: list[Entity] = []
        for entity in self._entities:
            (live if entity.alive else dead).append(entity)
        self._entities = live
        for entity in dead:
            self._entity_ids.discard(entity.entity_id)
        if dead:
            logger.debug("entities_pruned", count=len(dead))
        return dead

    # --- Rendering ---

    def render_map(self) -> list[str]:
        """Map rows for the sonar display.

        '.' open sea, '#' island, otherwise the symbol of the first unit in
        the cell.
        """
        rows: list[str] = []
        for x in range(self.max_x + 1):
            cells: list[str] = []
            for y in range(self.max_y + 1):
                pos = Position(x=x, y=y)
                if self.is_island(pos):
                    cells.append("#")
                    continue
                units = self.entities_at(pos)
                cells.append(units[0].symbol if units else ".")
            rows.append("".join(cells))
        return rows
