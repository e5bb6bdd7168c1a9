"""
Flood-fill decision engine for light-cycle bots.

Every tick the engine looks at the four cardinal moves, throws away the ones
that hit a wall or a trail, measures how much free space is reachable behind
each remaining move and returns the move with the most room. Ties are broken
at random with the caller's generator.

The engine never touches the arena directly. It only needs something that
looks like a ``GridView``: grid dimensions, a bounds check and a cell lookup.
"""

import logging
import random
from collections import deque
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

FREE = 0


class Direction(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    def __str__(self) -> str:
        return self.value


MOVE_VECTORS: Dict[Direction, Tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# Canonical evaluation order.
DIRECTIONS: List[Direction] = list(MOVE_VECTORS.keys())


class GridView(Protocol):
    """Read-only view of the board the engine needs."""

    grid_width: int
    grid_height: int

    def is_inside_grid(self, position: Position) -> bool:
        ...

    def get_grid_cell(self, position: Position) -> int:
        ...


# -------------------- Errors --------------------
class EngineError(Exception):
    """Base class for decision engine failures."""


class NoLegalMove(EngineError):
    """Raised when every direction leaves the grid or runs into a trail."""

    def __init__(self, position: Position):
        super().__init__(f"no legal move from {position}")
        self.position = position


class MalformedState(EngineError):
    """Raised when the state snapshot does not contain this bot."""

    def __init__(self, name: str):
        super().__init__(f"player {name!r} not found in game state")
        self.name = name


# -------------------- Helpers --------------------
def step(position: Position, direction: Direction) -> Position:
    dx, dy = MOVE_VECTORS[direction]
    return (position[0] + dx, position[1] + dy)


def find_player_position(players: Iterable, name: str) -> Position:
    """Return the position of the player called ``name``.

    ``players`` is any iterable of objects with ``name`` and ``position``
    attributes. Raises ``MalformedState`` when nobody matches, so a caller
    never keeps playing from a stale position.
    """
    for player in players:
        if player.name == name:
            return tuple(player.position)
    raise MalformedState(name)


# -------------------- Move validation --------------------
def is_valid_move(grid: GridView, position: Position, direction: Direction) -> bool:
    new_pos = step(position, direction)
    if not grid.is_inside_grid(new_pos):
        return False
    return grid.get_grid_cell(new_pos) == FREE


def valid_moves(grid: GridView, position: Position) -> List[Direction]:
    return [d for d in DIRECTIONS if is_valid_move(grid, position, d)]


# -------------------- Reachability --------------------
def new_visited(grid: GridView) -> np.ndarray:
    return np.zeros((grid.grid_height, grid.grid_width), dtype=bool)


def flood_fill(
    grid: GridView,
    start: Position,
    visited: Optional[np.ndarray] = None,
    order: Sequence[Direction] = DIRECTIONS,
) -> int:
    """Count the free cells 4-connected to ``start``, ``start`` included.

    Neighbours are queued without any checks; bounds, occupancy and the
    visited mark are tested when a cell is popped. ``visited`` is a boolean
    array of shape (height, width) owned by the caller and must be all False
    on entry. ``order`` only changes the order cells are queued in.
    """
    if visited is None:
        visited = new_visited(grid)

    queue = deque([start])
    area = 0
    while queue:
        pos = queue.popleft()
        if not grid.is_inside_grid(pos):
            continue
        x, y = pos
        if visited[y, x]:
            continue
        if grid.get_grid_cell(pos) != FREE:
            continue
        visited[y, x] = True
        area += 1
        for direction in order:
            queue.append(step(pos, direction))
    return area


# -------------------- Move selection --------------------
def score_moves(grid: GridView, position: Position) -> List[Tuple[Direction, int]]:
    """Reachable area behind every legal move, in canonical order."""
    moves: List[Tuple[Direction, int]] = []
    visited = new_visited(grid)
    for direction in DIRECTIONS:
        if not is_valid_move(grid, position, direction):
            continue
        visited.fill(False)
        area = flood_fill(grid, step(position, direction), visited)
        moves.append((direction, area))
        logger.debug("Direction %s from %s has area %d", direction, position, area)
    return moves


def decide_move(grid: GridView, position: Position, rng: random.Random) -> Direction:
    """Pick the legal move with the largest reachable area.

    Raises ``NoLegalMove`` when the bot is boxed in.
    """
    moves = score_moves(grid, position)
    if not moves:
        logger.error("No valid moves available from %s", position)
        raise NoLegalMove(position)

    max_area = max(area for _, area in moves)
    best_moves = [d for d, area in moves if area == max_area]
    choice = rng.choice(best_moves)
    logger.debug("Selected direction %s with area %d", choice, max_area)
    return choice
