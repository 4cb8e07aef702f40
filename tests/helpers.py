"""
Helpers shared by the Connect Four tests.
"""
from typing import Iterable, List, Optional

from connect_four.ai.opponent import HeuristicOpponent
from connect_four.errors import PersistenceError
from connect_four.game.board import Board
from connect_four.online.memory_store import InMemoryGameStore
from connect_four.utils import Side

# Row-pair fill order that alternates X and O and never connects four.
# Rows read X X O O X X O / O O X X O O X from the bottom up.
DRAW_SEQUENCE = [0, 2, 1, 3, 4, 6, 5] * 6


def board_from_rows(rows: Iterable[str]) -> Board:
    """
    Build a board from six strings, top row first: '.' empty, 'X' side ONE, 'O' side TWO.
    """
    values = {'.': 0, 'X': 1, 'O': 2}
    return Board.from_array([[values[ch] for ch in row] for row in rows])


def play_columns(columns: Iterable[int], first: Side = Side.ONE) -> Board:
    """Drop pieces for alternating sides and return the resulting board."""
    board = Board.empty()
    side = first
    for column in columns:
        board, _ = board.drop(column, side)
        side = side.other()
    return board


class ScriptedOpponent(HeuristicOpponent):
    """Plays a fixed list of columns."""

    def __init__(self, columns: Iterable[int]):
        super().__init__(seed=0)
        self.columns: List[int] = list(columns)
        self.calls = 0

    def choose_column(self, board, me, opponent=None):
        self.calls += 1
        return self.columns.pop(0)


class RecordingStore(InMemoryGameStore):
    """In-memory store that records writes and can be told to fail them."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.updates = []
        self.quiz_requests = 0
        self.fail_next_writes = 0
        self.vocabulary_error: Optional[Exception] = None

    def submit_update(self, game_id, update, expected_version=None, expected_current_side_id=None):
        self.updates.append(update)
        if self.fail_next_writes:
            self.fail_next_writes -= 1
            raise PersistenceError("write failed")
        super().submit_update(game_id, update, expected_version, expected_current_side_id)

    def request_quiz_challenge(self):
        self.quiz_requests += 1
        if self.vocabulary_error is not None:
            raise self.vocabulary_error
        return super().request_quiz_challenge()
