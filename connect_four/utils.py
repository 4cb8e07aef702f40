"""
utils.py - Constants, enumerations and helpers for the Connect Four engine

This module provides the board dimensions, the Side and GameResult enumerations,
direction vectors used by win detection, and ASCII rendering of a board grid.
"""

from enum import Enum, auto
from typing import Optional, Sequence

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win
CELL_COUNT = ROWS * COLS

EMPTY = 0  # Wire/grid value of an empty cell

# Seconds the local opponent "thinks" before replying
DEFAULT_THINKING_DELAY = 0.8


class Side(Enum):
    """
    The two competing identities of a game.

    Locally ONE is the human and TWO the CPU; online ONE is Player1 and TWO
    is Player2. The value is the integer stored in the board grid.
    """
    ONE = 1
    TWO = 2

    def other(self) -> 'Side':
        """Get the other side."""
        return Side.TWO if self is Side.ONE else Side.ONE

    def __str__(self):
        return "X" if self is Side.ONE else "O"


class GameResult(Enum):
    """Enumeration representing the game outcome."""
    IN_PROGRESS = auto()
    PLAYER_ONE_WIN = auto()
    PLAYER_TWO_WIN = auto()
    DRAW = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self is not GameResult.IN_PROGRESS

    @property
    def winner(self) -> Optional[Side]:
        """The winning side, or None for a draw or a game in progress."""
        if self is GameResult.PLAYER_ONE_WIN:
            return Side.ONE
        if self is GameResult.PLAYER_TWO_WIN:
            return Side.TWO
        return None

    @classmethod
    def won_by(cls, side: Side) -> 'GameResult':
        return cls.PLAYER_ONE_WIN if side is Side.ONE else cls.PLAYER_TWO_WIN


class Direction(Enum):
    """Enumeration representing directions for win checking."""
    HORIZONTAL = auto()
    VERTICAL = auto()
    DIAGONAL_DOWN = auto()  # Diagonal from top-left to bottom-right
    DIAGONAL_UP = auto()  # Diagonal from bottom-left to top-right


# Direction vectors (row, col) for each direction
DIRECTION_VECTORS = {
    Direction.HORIZONTAL: (0, 1),
    Direction.VERTICAL: (1, 0),
    Direction.DIAGONAL_DOWN: (1, 1),
    Direction.DIAGONAL_UP: (-1, 1)
}


def is_valid_position(row: int, col: int) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        row: Row index
        col: Column index

    Returns:
        True if position is valid, False otherwise
    """
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_column(column) -> bool:
    """True for an integer column index inside [0, COLS)."""
    if isinstance(column, bool) or not isinstance(column, (int, np.integer)):
        return False
    return 0 <= column < COLS


def render_board_ascii(grid: Sequence[Sequence[int]]) -> str:
    """
    Render a board grid as ASCII art.

    Args:
        grid: ROWS x COLS values (0 empty, 1 side ONE, 2 side TWO)

    Returns:
        ASCII representation of the board
    """
    symbols = {EMPTY: " ", Side.ONE.value: "X", Side.TWO.value: "O"}
    border = "|" + "-" * (COLS * 2 - 1) + "|"

    result = [border]
    for row in range(ROWS):
        result.append("|" + " ".join(symbols[int(grid[row][col])] for col in range(COLS)) + "|")
    result.append(border)
    result.append("|" + " ".join(str(i) for i in range(COLS)) + "|")

    return "\n".join(result)
