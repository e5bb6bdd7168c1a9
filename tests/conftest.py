import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from cycles_arena import GameState, Player

WALL_ID = 99


def state_from_rows(rows, you="A", turn=0, max_turns=100):
    """Build a GameState from a picture of the board.

    '.' is free, '#' is trail and an upper-case letter is a player head
    (A gets id 1, B gets id 2, ...). The head cell counts as occupied.
    """
    height = len(rows)
    width = len(rows[0])
    grid = np.zeros((height, width), dtype=int)
    players = []
    for y, row in enumerate(rows):
        assert len(row) == width, "ragged board"
        for x, ch in enumerate(row):
            if ch == "#":
                grid[y, x] = WALL_ID
            elif ch.isupper():
                player_id = ord(ch) - ord("A") + 1
                grid[y, x] = player_id
                players.append(Player(name=ch, player_id=player_id, position=(x, y)))
    players.sort(key=lambda p: p.player_id)
    return GameState(
        grid_width=width,
        grid_height=height,
        grid=grid,
        players=tuple(players),
        you=you,
        turn=turn,
        max_turns=max_turns,
    )


def random_state(rng, width, height, density=0.35):
    """Random board without players; roughly ``density`` of the cells are trail."""
    grid = np.zeros((height, width), dtype=int)
    for y in range(height):
        for x in range(width):
            if rng.random() < density:
                grid[y, x] = WALL_ID
    return GameState(
        grid_width=width,
        grid_height=height,
        grid=grid,
        players=(),
        you="A",
        turn=0,
        max_turns=100,
    )


@pytest.fixture
def board():
    return state_from_rows


@pytest.fixture
def random_board():
    return random_state
