"""Tests for the flood-fill decision engine."""

import itertools
import logging
from collections import Counter
from random import Random

import pytest

from cycles_arena import Player
from decision_engine import (
    DIRECTIONS,
    FREE,
    MOVE_VECTORS,
    Direction,
    EngineError,
    MalformedState,
    NoLegalMove,
    decide_move,
    find_player_position,
    flood_fill,
    is_valid_move,
    new_visited,
    score_moves,
    step,
    valid_moves,
)


def component_sizes(state):
    """Union-find labelling of the free cells, independent of flood_fill."""
    parent = {}

    def find(c):
        while parent[c] != c:
            parent[c] = parent[parent[c]]
            c = parent[c]
        return c

    free = [
        (x, y)
        for y in range(state.grid_height)
        for x in range(state.grid_width)
        if state.grid[y, x] == FREE
    ]
    for c in free:
        parent[c] = c
    for x, y in free:
        for nb in ((x + 1, y), (x, y + 1)):
            if nb in parent:
                ra, rb = find((x, y)), find(nb)
                if ra != rb:
                    parent[ra] = rb
    sizes = Counter(find(c) for c in free)
    return {c: sizes[find(c)] for c in free}


class TestDirections:
    def test_canonical_order(self) -> None:
        assert DIRECTIONS == [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]

    def test_unit_displacements(self) -> None:
        for dx, dy in MOVE_VECTORS.values():
            assert abs(dx) + abs(dy) == 1

    def test_up_decreases_y(self) -> None:
        assert step((3, 3), Direction.UP) == (3, 2)
        assert step((3, 3), Direction.RIGHT) == (4, 3)

    def test_compares_equal_to_move_string(self) -> None:
        assert Direction.LEFT == "LEFT"
        assert str(Direction.LEFT) == "LEFT"


class TestMoveValidator:
    def test_free_neighbour_is_legal(self, board) -> None:
        state = board(["...", ".A.", "..."])
        assert valid_moves(state, (1, 1)) == DIRECTIONS

    def test_leaving_grid_is_illegal_not_an_error(self, board) -> None:
        state = board(["A.", ".."])
        assert not is_valid_move(state, (0, 0), Direction.UP)
        assert not is_valid_move(state, (0, 0), Direction.LEFT)
        assert is_valid_move(state, (0, 0), Direction.RIGHT)

    def test_trail_and_other_players_are_illegal(self, board) -> None:
        state = board([".#.", "BA.", "..."])
        assert not is_valid_move(state, (1, 1), Direction.UP)
        assert not is_valid_move(state, (1, 1), Direction.LEFT)
        assert is_valid_move(state, (1, 1), Direction.DOWN)

    def test_matches_definition_on_random_boards(self, random_board) -> None:
        rng = Random(7)
        for _ in range(20):
            state = random_board(rng, rng.randint(1, 7), rng.randint(1, 7))
            for x, y in itertools.product(range(state.grid_width), range(state.grid_height)):
                for d in DIRECTIONS:
                    nx, ny = step((x, y), d)
                    expected = (
                        0 <= nx < state.grid_width
                        and 0 <= ny < state.grid_height
                        and state.grid[ny, nx] == FREE
                    )
                    assert is_valid_move(state, (x, y), d) == expected


class TestFloodFill:
    def test_single_cell_counts_itself(self, board) -> None:
        state = board(["#.#", "###"])
        assert flood_fill(state, (1, 0)) == 1

    def test_blocked_or_outside_start_is_zero(self, board) -> None:
        state = board(["#.", ".."])
        assert flood_fill(state, (0, 0)) == 0
        assert flood_fill(state, (5, 0)) == 0

    def test_does_not_cross_diagonals(self, board) -> None:
        state = board([".#", "#."])
        assert flood_fill(state, (0, 0)) == 1

    def test_open_board(self, board) -> None:
        state = board(["....", "....", "...."])
        assert flood_fill(state, (0, 0)) == 12

    def test_marks_caller_buffer(self, board) -> None:
        state = board(["..#", "#.#"])
        visited = new_visited(state)
        assert flood_fill(state, (0, 0), visited) == 3
        assert visited.sum() == 3
        assert visited[1, 1]
        assert not visited[1, 0]

    def test_matches_brute_force_components(self, random_board) -> None:
        rng = Random(3)
        for _ in range(25):
            state = random_board(rng, rng.randint(1, 9), rng.randint(1, 9))
            expected = component_sizes(state)
            for cell, size in expected.items():
                area = flood_fill(state, cell)
                assert area >= 1
                assert area == size

    def test_independent_of_expansion_order(self, random_board) -> None:
        rng = Random(11)
        for _ in range(15):
            state = random_board(rng, 8, 6, density=0.3)
            free = list(component_sizes(state))
            if not free:
                continue
            start = rng.choice(free)
            reference = flood_fill(state, start)
            for _ in range(6):
                order = list(DIRECTIONS)
                rng.shuffle(order)
                assert flood_fill(state, start, order=order) == reference

    def test_idempotent(self, random_board) -> None:
        state = random_board(Random(5), 10, 10, density=0.25)
        before = state.grid.copy()
        for cell in component_sizes(state):
            assert flood_fill(state, cell) == flood_fill(state, cell)
        assert (state.grid == before).all()


class TestMoveSelector:
    def test_open_board_scores_every_direction(self, board) -> None:
        state = board([".....", ".....", "..A..", ".....", "....."])
        assert score_moves(state, (2, 2)) == [(d, 24) for d in DIRECTIONS]

    def test_open_board_picks_all_directions(self, board) -> None:
        state = board([".....", ".....", "..A..", ".....", "....."])
        rng = Random(0)
        picks = Counter(decide_move(state, (2, 2), rng) for _ in range(400))
        assert set(picks) == set(DIRECTIONS)
        for d in DIRECTIONS:
            assert 60 <= picks[d] <= 140

    def test_only_exit_into_pocket_is_taken(self, board) -> None:
        state = board([
            "#####",
            ".A###",
            "#####",
        ])
        assert score_moves(state, (1, 1)) == [(Direction.LEFT, 1)]
        assert decide_move(state, (1, 1), Random(0)) == Direction.LEFT

    def test_prefers_open_space_over_pocket(self, board) -> None:
        state = board([
            "#####....",
            ".A.......",
            "#####....",
        ])
        moves = dict(score_moves(state, (1, 1)))
        assert moves == {Direction.LEFT: 1, Direction.RIGHT: 15}
        for seed in range(50):
            assert decide_move(state, (1, 1), Random(seed)) == Direction.RIGHT

    def test_boxed_in_raises(self, board) -> None:
        state = board(["#B#", "#A#", "###"])
        with pytest.raises(NoLegalMove) as excinfo:
            decide_move(state, (1, 1), Random(0))
        assert excinfo.value.position == (1, 1)
        assert isinstance(excinfo.value, EngineError)

    def test_corner_boxed_by_walls_and_trail_raises(self, board) -> None:
        state = board(["A#", "#."])
        with pytest.raises(NoLegalMove):
            decide_move(state, (0, 0), Random(0))

    def test_no_legal_move_is_logged(self, board, caplog) -> None:
        state = board(["#", "A", "#"])
        with caplog.at_level(logging.ERROR, logger="decision_engine"):
            with pytest.raises(NoLegalMove):
                decide_move(state, (0, 1), Random(0))
        assert "No valid moves" in caplog.text

    def test_equal_regions_split_fairly(self, board) -> None:
        state = board([
            "...#...",
            "...A...",
            "...#...",
        ])
        assert dict(score_moves(state, (3, 1))) == {Direction.LEFT: 9, Direction.RIGHT: 9}
        picks = Counter(decide_move(state, (3, 1), Random(seed)) for seed in range(1000))
        assert set(picks) == {Direction.LEFT, Direction.RIGHT}
        assert 400 <= picks[Direction.LEFT] <= 600

    def test_fixed_seed_is_reproducible(self, board) -> None:
        state = board(["...#...", "...A...", "...#..."])
        first = [decide_move(state, (3, 1), Random(42)) for _ in range(5)]
        second = [decide_move(state, (3, 1), Random(42)) for _ in range(5)]
        assert first == second

    def test_never_returns_illegal_move(self, random_board) -> None:
        rng = Random(19)
        for _ in range(40):
            state = random_board(rng, rng.randint(2, 8), rng.randint(2, 8), density=0.4)
            for x, y in itertools.product(range(state.grid_width), range(state.grid_height)):
                try:
                    move = decide_move(state, (x, y), rng)
                except NoLegalMove:
                    assert valid_moves(state, (x, y)) == []
                    continue
                assert is_valid_move(state, (x, y), move)
                scores = dict(score_moves(state, (x, y)))
                assert scores[move] == max(scores.values())


class TestFindPlayerPosition:
    def test_matches_by_name(self) -> None:
        players = [Player("red", 1, (0, 3)), Player("blue", 2, (4, 1))]
        assert find_player_position(players, "blue") == (4, 1)

    def test_missing_player_is_malformed(self) -> None:
        players = [Player("red", 1, (0, 3))]
        with pytest.raises(MalformedState) as excinfo:
            find_player_position(players, "blue")
        assert excinfo.value.name == "blue"
