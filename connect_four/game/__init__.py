"""
connect_four.game - Core game mechanics for Connect Four

This package contains the immutable board, win detection, the local turn
engine (connect_four.game.rules) and its scheduling helpers. The engine is
not imported here because it depends on connect_four.ai, which in turn
depends on the board.
"""

from connect_four.game.board import Board
from connect_four.game.win import has_four_in_row, has_four_in_row_full_scan

__all__ = ['Board', 'has_four_in_row', 'has_four_in_row_full_scan']
