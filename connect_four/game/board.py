"""
board.py - Immutable board representation for Connect Four

This module implements the Board value: a fixed ROWS x COLS grid with row 0 at
the top and row ROWS-1 at the bottom. Boards are never modified in place;
placing a piece returns a new Board backed by a fresh array, so every
snapshot handed to an observer stays valid forever.
"""

from typing import List, Optional, Tuple

import numpy as np

from connect_four.debug import debug
from connect_four.errors import IllegalPlacementError
from connect_four.utils import (ROWS, COLS, EMPTY, Side, is_valid_column,
                                is_valid_position, render_board_ascii)


class Board:
    """
    Represents a Connect Four game board.

    A cell is either empty (None) or occupied by a Side. Internally the grid is
    a read-only int8 numpy array holding 0, 1 or 2.
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Initialize a board.

        Args:
            grid: Optional ROWS x COLS array of 0/1/2 values. It is copied, so
                the caller keeps ownership of the original.
        """
        if grid is None:
            grid = np.zeros((ROWS, COLS), dtype=np.int8)
        else:
            grid = np.array(grid, dtype=np.int8, copy=True)
            if grid.shape != (ROWS, COLS):
                raise ValueError(f"board grid must be {ROWS}x{COLS}, got {grid.shape}")

        grid.setflags(write=False)
        self._grid = grid

    @classmethod
    def empty(cls) -> 'Board':
        """Create a board with every cell empty."""
        return cls()

    @classmethod
    def from_array(cls, grid) -> 'Board':
        """Create a board from any ROWS x COLS array-like of 0/1/2 values."""
        return cls(np.asarray(grid))

    def cell(self, row: int, column: int) -> Optional[Side]:
        """
        Get the occupant of a cell.

        Returns:
            The Side occupying the cell, or None if it is empty
        """
        value = int(self._grid[row, column])
        return None if value == EMPTY else Side(value)

    def lowest_open_row(self, column: int) -> Optional[int]:
        """
        Find the row a piece dropped into `column` would land in.

        Scans from the bottom row upwards. Out-of-range columns are not an
        error; they simply have no open row.

        Returns:
            The largest empty row index in the column, or None if it is full
        """
        if not is_valid_column(column):
            return None

        for row in range(ROWS - 1, -1, -1):
            if self._grid[row, column] == EMPTY:
                return row
        return None

    def place(self, row: int, column: int, side: Side) -> 'Board':
        """
        Return a new board with `side` placed at (row, column).

        The row must come from lowest_open_row(); placing anywhere else is a
        programming error.

        Raises:
            IllegalPlacementError: If the cell is off the board or occupied
        """
        if not is_valid_position(row, column):
            raise IllegalPlacementError(row, column, "off the board")
        if self._grid[row, column] != EMPTY:
            raise IllegalPlacementError(row, column, "cell is occupied")

        grid = self._grid.copy()
        grid[row, column] = side.value
        debug.trace(f"Placed {side.name} at ({row}, {column})", "board")
        return Board(grid)

    def drop(self, column: int, side: Side) -> Optional[Tuple['Board', int]]:
        """
        Drop a piece into a column.

        Returns:
            (new board, landing row), or None if the column is invalid or full
        """
        row = self.lowest_open_row(column)
        if row is None:
            return None
        return self.place(row, column, side), row

    def is_full(self) -> bool:
        """True if the top row has no empty cell, which means the whole board is full."""
        return not bool(np.any(self._grid[0] == EMPTY))

    def open_columns(self) -> List[int]:
        """Columns that can still take a piece, in ascending order."""
        return [col for col in range(COLS) if self._grid[0, col] == EMPTY]

    def count(self, side: Optional[Side]) -> int:
        """Number of cells held by `side` (None counts empty cells)."""
        value = EMPTY if side is None else side.value
        return int(np.count_nonzero(self._grid == value))

    def satisfies_gravity(self) -> bool:
        """True if no empty cell sits below an occupied cell in any column."""
        occupied = self._grid != EMPTY
        # Once a column is occupied at some row, every row below it must be too
        return bool(np.all(occupied[:-1] <= occupied[1:]))

    def as_array(self) -> np.ndarray:
        """Get a writable copy of the grid."""
        return self._grid.copy()

    def to_flat(self) -> List[int]:
        """Row-major list of ROWS*COLS ints, the canonical wire form."""
        return [int(v) for v in self._grid.ravel()]

    def to_grid(self) -> List[List[int]]:
        """Nested ROWS x COLS list form."""
        return [[int(v) for v in row] for row in self._grid]

    def render(self) -> str:
        """Render the board as a string."""
        return render_board_ascii(self._grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self._grid, other._grid))

    def __hash__(self) -> int:
        return hash(self._grid.tobytes())

    def __repr__(self) -> str:
        return f"Board({self.to_flat()!r})"

    def __str__(self) -> str:
        return self.render()
