"""
Tests for four-in-a-row detection.
"""
import numpy as np
import pytest

from connect_four.game.board import Board
from connect_four.game.win import (find_winners, has_four_in_row, has_four_in_row_full_scan,
                                   winning_line)
from connect_four.utils import COLS, Side
from tests.helpers import DRAW_SEQUENCE, board_from_rows, play_columns


def test_horizontal_win():
    board = board_from_rows([
        ".......",
        ".......",
        ".......",
        ".......",
        "OOO....",
        "XXXX...",
    ])
    assert has_four_in_row(board, 5, 3, Side.ONE)
    assert has_four_in_row(board, 5, 0, Side.ONE)
    assert has_four_in_row_full_scan(board, Side.ONE)
    assert not has_four_in_row_full_scan(board, Side.TWO)


def test_vertical_win():
    board = board_from_rows([
        ".......",
        ".......",
        "......O",
        "......O",
        "X.....O",
        "XX....O",
    ])
    assert has_four_in_row(board, 2, 6, Side.TWO)
    assert has_four_in_row_full_scan(board, Side.TWO)


def test_down_right_diagonal_win():
    board = board_from_rows([
        ".......",
        ".......",
        "X......",
        "OX.....",
        "OOX....",
        "XOOX...",
    ])
    assert has_four_in_row(board, 2, 0, Side.ONE)
    assert has_four_in_row(board, 4, 2, Side.ONE)
    assert has_four_in_row_full_scan(board, Side.ONE)


def test_up_right_diagonal_win():
    board = board_from_rows([
        ".......",
        ".......",
        "......O",
        ".....OX",
        "....OXX",
        "...OXXX",
    ])
    assert has_four_in_row(board, 5, 3, Side.TWO)
    assert has_four_in_row_full_scan(board, Side.TWO)
    assert not has_four_in_row_full_scan(board, Side.ONE)


def test_three_is_not_a_win():
    board = board_from_rows([
        ".......",
        ".......",
        ".......",
        ".......",
        ".......",
        "XXX.XXX",
    ])
    assert not has_four_in_row(board, 5, 2, Side.ONE)
    assert not has_four_in_row_full_scan(board, Side.ONE)


def test_more_than_four_is_a_win():
    board = board_from_rows([
        ".......",
        ".......",
        ".......",
        ".......",
        ".......",
        "XXXXXXX",
    ])
    assert has_four_in_row(board, 5, 6, Side.ONE)


def test_incremental_check_ignores_other_side_and_empty_cells():
    board = play_columns([0, 1, 0, 1, 0, 1, 0])
    assert has_four_in_row(board, 2, 0, Side.ONE)
    assert not has_four_in_row(board, 2, 0, Side.TWO)
    assert not has_four_in_row(board, 0, 0, Side.ONE)
    assert not has_four_in_row(board, -1, 0, Side.ONE)


def test_empty_and_drawn_boards_have_no_winner():
    assert find_winners(Board.empty()) == set()
    assert find_winners(play_columns(DRAW_SEQUENCE)) == set()


@pytest.mark.parametrize("seed", range(40))
def test_incremental_and_full_scan_agree(seed):
    """On every placement of a legal game both detectors give the same answer."""
    rng = np.random.default_rng(seed)

    board = Board.empty()
    side = Side.ONE
    while board.open_columns():
        column = int(rng.choice(board.open_columns()))
        board, row = board.drop(column, side)

        incremental = has_four_in_row(board, row, column, side)
        assert incremental == has_four_in_row_full_scan(board, side)
        if incremental:
            break
        side = side.other()


def test_winning_line_cells():
    board = play_columns([0, 6, 1, 6, 2, 6, 3])
    assert winning_line(board, 5, 3) == [(5, 0), (5, 1), (5, 2), (5, 3)]
    assert winning_line(board, 5, 6) == []
    assert winning_line(board, 0, 0) == []


def test_find_winners_reports_every_side_with_a_line():
    board = board_from_rows([
        ".......",
        ".......",
        "O.....X",
        "O.....X",
        "O.....X",
        "O.....X",
    ])
    assert find_winners(board) == {Side.ONE, Side.TWO}
    assert len(board.open_columns()) == COLS
