"""
opponent.py - Move selection for the computer-controlled side

The HeuristicOpponent looks one ply ahead only:
1. Win now if any open column completes a line
2. Otherwise block a column where the other side would win now
3. Otherwise pick uniformly among the open columns
Columns are scanned in ascending order, so the lowest winning or blocking
column is preferred.
"""

from typing import Optional

import numpy as np

from connect_four.debug import debug
from connect_four.errors import NoLegalMoveError
from connect_four.game.board import Board
from connect_four.game.win import has_four_in_row
from connect_four.utils import Side


class HeuristicOpponent:
    """
    A Connect Four player that takes immediate wins, blocks immediate losses
    and otherwise plays randomly.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None):
        """
        Initialize the opponent.

        Args:
            seed: Seed for the random fallback (ignored if rng is given)
            rng: Random generator to draw fallback moves from
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def find_winning_column(self, board: Board, side: Side) -> Optional[int]:
        """
        Lowest open column where dropping a `side` piece wins immediately.

        Returns:
            The column index, or None if no immediate win exists
        """
        for column in board.open_columns():
            row = board.lowest_open_row(column)
            simulated = board.place(row, column, side)
            if has_four_in_row(simulated, row, column, side):
                return column
        return None

    def choose_column(self, board: Board, me: Side, opponent: Optional[Side] = None) -> int:
        """
        Choose the column to play.

        Args:
            board: Current board
            me: Side this opponent plays
            opponent: The other side (defaults to me.other())

        Returns:
            An open column index

        Raises:
            NoLegalMoveError: If the board has no open column
        """
        opponent = opponent or me.other()
        candidates = board.open_columns()
        if not candidates:
            raise NoLegalMoveError("board is full")

        column = self.find_winning_column(board, me)
        if column is not None:
            debug.debug(f"{me.name} wins in column {column}", "opponent")
            return column

        column = self.find_winning_column(board, opponent)
        if column is not None:
            debug.debug(f"{me.name} blocks {opponent.name} in column {column}", "opponent")
            return column

        column = int(self.rng.choice(candidates))
        debug.debug(f"{me.name} plays random column {column} of {candidates}", "opponent")
        return column
