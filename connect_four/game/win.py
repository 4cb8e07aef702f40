"""
win.py - Four-in-a-row detection

Two detectors are provided. has_four_in_row() only looks at the lines through
the cell that was just played and is the primitive used during play.
has_four_in_row_full_scan() slides a window over the whole board and is used
when the last move is unknown, e.g. for a board received from a remote peer.
Both agree on every board reachable through legal drops.
"""

from typing import List, Set, Tuple

import numpy as np

from connect_four.debug import debug
from connect_four.game.board import Board
from connect_four.utils import (ROWS, COLS, CONNECT_N, DIRECTION_VECTORS, Side,
                                is_valid_position)


def _run_length(board: Board, row: int, col: int, dr: int, dc: int, side: Side) -> int:
    """Count contiguous `side` cells starting one step away from (row, col)."""
    count = 0
    r, c = row + dr, col + dc
    while is_valid_position(r, c) and board.cell(r, c) is side:
        count += 1
        r += dr
        c += dc
    return count


def has_four_in_row(board: Board, last_row: int, last_col: int, side: Side) -> bool:
    """
    Check whether the piece at (last_row, last_col) completes a line for `side`.

    Counts outwards in both senses of each direction and adds the cell itself.

    Args:
        board: Board after the move was played
        last_row: Row of the most recent placement
        last_col: Column of the most recent placement
        side: Side that made the placement

    Returns:
        True if CONNECT_N or more contiguous cells belong to `side`
    """
    if not is_valid_position(last_row, last_col) or board.cell(last_row, last_col) is not side:
        return False

    for direction, (dr, dc) in DIRECTION_VECTORS.items():
        count = 1
        count += _run_length(board, last_row, last_col, dr, dc, side)
        count += _run_length(board, last_row, last_col, -dr, -dc, side)
        if count >= CONNECT_N:
            debug.debug(f"{side.name} connects {count} {direction.name.lower()} "
                        f"through ({last_row}, {last_col})", "win")
            return True

    return False


def has_four_in_row_full_scan(board: Board, side: Side) -> bool:
    """
    Check the whole board for a line of CONNECT_N `side` pieces.

    Args:
        board: Any board, including one whose move history is unknown
        side: Side to check

    Returns:
        True if any horizontal, vertical or diagonal window is all `side`
    """
    mine = board.as_array() == side.value
    n = CONNECT_N

    # Horizontal
    for r in range(ROWS):
        for c in range(COLS - n + 1):
            if mine[r, c:c + n].all():
                return True

    # Vertical
    for r in range(ROWS - n + 1):
        for c in range(COLS):
            if mine[r:r + n, c].all():
                return True

    # Diagonal (down-right) and anti-diagonal (up-right)
    for r in range(ROWS - n + 1):
        for c in range(COLS - n + 1):
            window = mine[r:r + n, c:c + n]
            if np.diagonal(window).all() or np.diagonal(np.fliplr(window)).all():
                return True

    return False


def winning_line(board: Board, row: int, col: int) -> List[Tuple[int, int]]:
    """
    Get the cells of a winning line through (row, col).

    Returns:
        List of (row, col) positions forming the line, or an empty list
    """
    if not is_valid_position(row, col):
        return []
    side = board.cell(row, col)
    if side is None:
        return []

    for dr, dc in DIRECTION_VECTORS.values():
        positions = [(row, col)]
        for sign in (1, -1):
            r, c = row + sign * dr, col + sign * dc
            while is_valid_position(r, c) and board.cell(r, c) is side:
                positions.append((r, c))
                r += sign * dr
                c += sign * dc
        if len(positions) >= CONNECT_N:
            return sorted(positions)

    return []


def find_winners(board: Board) -> Set[Side]:
    """Sides that have a line anywhere on the board (more than one means corrupt data)."""
    return {side for side in Side if has_four_in_row_full_scan(board, side)}
