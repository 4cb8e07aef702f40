"""
protocol.py - Wire types and the persistence collaborator interface for online play

A remote game is stored as a document shaped like:

    {"id": "g1", "player1Id": "u1", "player1Name": "Ana",
     "player2Id": "u2", "player2Name": "Ben",
     "board": [0, 0, ..., 0],          # 42 ints, row-major, 0/1/2
     "currentPlayerId": "u1", "status": "IN_PROGRESS",
     "winnerId": null, "version": 7}

The flat board is the canonical form; older documents holding a nested 6x7
grid decode to the same Board.
"""

import abc
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from connect_four.errors import BoardDecodeError
from connect_four.game.board import Board
from connect_four.utils import ROWS, COLS, CELL_COUNT, Side


class RemoteStatus(Enum):
    WAITING = "WAITING"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


def encode_board(board: Board) -> list:
    """Encode a board in the canonical flat form."""
    return board.to_flat()


def decode_board(data: Any, check_gravity: bool = True) -> Board:
    """
    Decode a flat list of 42 ints or a nested 6x7 grid into a Board.

    Args:
        data: Wire representation of the board
        check_gravity: Reject boards with an empty cell below a piece

    Raises:
        BoardDecodeError: If the data has the wrong shape or cell values
    """
    if isinstance(data, Board):
        board = data
    else:
        if data is None or isinstance(data, (str, bytes)):
            raise BoardDecodeError(f"board must be a sequence of ints, got {type(data).__name__}")
        try:
            cells = np.asarray(data)
        except ValueError as e:  # ragged nested lists
            raise BoardDecodeError(f"board is not rectangular: {e}") from e

        if cells.ndim == 1 and cells.size == CELL_COUNT:
            cells = cells.reshape(ROWS, COLS)
        elif cells.shape != (ROWS, COLS):
            raise BoardDecodeError(
                f"board must have {CELL_COUNT} cells or shape {ROWS}x{COLS}, got shape {cells.shape}")

        if cells.dtype.kind not in "iu" or not np.isin(cells, (0, 1, 2)).all():
            raise BoardDecodeError("board cells must be integers in {0, 1, 2}")
        board = Board.from_array(cells)

    if check_gravity and not board.satisfies_gravity():
        raise BoardDecodeError("board has an empty cell below an occupied one")
    return board


@dataclass(frozen=True)
class QuizChallenge:
    """A vocabulary word to translate before a move is allowed."""
    prompt_word: str
    expected_answer: str

    def check(self, answer: str) -> bool:
        """Case-insensitive exact match, ignoring surrounding whitespace."""
        if answer is None:
            return False
        return answer.strip().casefold() == self.expected_answer.strip().casefold()


class RemoteGameState(BaseModel):
    """
    One snapshot of a remote game as pushed by the persistence collaborator.

    Fields are populated from the stored camelCase keys (`currentPlayerId`,
    `player1Id`, ...) or from their snake_case field names.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    board: Board = Field(default_factory=Board.empty)
    current_side_id: Optional[str] = Field(default=None, alias="currentPlayerId")
    status: RemoteStatus = RemoteStatus.WAITING
    winner_id: Optional[str] = Field(default=None, alias="winnerId")
    game_id: str = Field(default="", alias="id")
    player1_id: str = Field(default="", alias="player1Id")
    player2_id: Optional[str] = Field(default=None, alias="player2Id")
    player1_name: str = Field(default="Player 1", alias="player1Name")
    player2_name: Optional[str] = Field(default=None, alias="player2Name")
    version: int = Field(default=0, ge=0)

    @field_validator("board", mode="before")
    @classmethod
    def parse_board(cls, value: Any) -> Board:
        # BoardDecodeError propagates unwrapped
        if value is None:
            return Board.empty()
        return decode_board(value)

    @field_serializer("board")
    def dump_board(self, board: Board) -> list:
        return encode_board(board)

    def side_of(self, player_id: Optional[str]) -> Optional[Side]:
        """Map a player id to the Side whose pieces it owns."""
        if player_id is None:
            return None
        if player_id == self.player1_id:
            return Side.ONE
        if player_id == self.player2_id:
            return Side.TWO
        return None

    def player_id_of(self, side: Side) -> Optional[str]:
        return self.player1_id if side is Side.ONE else self.player2_id

    def other_player_id(self, player_id: str) -> Optional[str]:
        side = self.side_of(player_id)
        if side is None:
            return None
        return self.player_id_of(side.other())

    def same_position(self, other: 'RemoteGameState') -> bool:
        """True if both snapshots describe the same board, turn and result."""
        return (self.board == other.board
                and self.current_side_id == other.current_side_id
                and self.status is other.status
                and self.winner_id == other.winner_id)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], game_id: Optional[str] = None) -> 'RemoteGameState':
        """
        Build a snapshot from a stored document.

        Raises:
            BoardDecodeError: If the board is malformed
            pydantic.ValidationError: If any other field has the wrong type
        """
        data = dict(doc)
        if game_id is not None:
            data.pop("game_id", None)
            data["id"] = game_id
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the stored document form with a flat board."""
        return self.model_dump(mode="json", by_alias=True)


class GameUpdate(BaseModel):
    """Fields a participant asks the collaborator to write."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    current_side_id: Optional[str] = Field(alias="currentPlayerId")
    board: Optional[Board] = None
    status: Optional[RemoteStatus] = None
    winner_id: Optional[str] = Field(default=None, alias="winnerId")

    @field_serializer("board")
    def dump_board(self, board: Optional[Board]) -> Optional[list]:
        return None if board is None else encode_board(board)

    def to_fields(self) -> Dict[str, Any]:
        """Stored keys to overwrite; unset fields are left alone."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GameStore(abc.ABC):
    """
    The persistence collaborator used by OnlineTurnCoordinator.

    Implementations wrap whatever document database hosts the games.
    """

    @abc.abstractmethod
    def subscribe(self, game_id: str,
                  callback: Callable[[RemoteGameState], None]) -> Callable[[], None]:
        """
        Push every new snapshot of `game_id` to `callback`.

        Returns:
            A function that stops the subscription
        """

    @abc.abstractmethod
    def submit_update(self, game_id: str, update: GameUpdate,
                      expected_version: Optional[int] = None,
                      expected_current_side_id: Optional[str] = None) -> None:
        """
        Write `update` to the game.

        When expectations are given the write must only happen if the stored
        game still has that version and current player.

        Raises:
            PersistenceError: If the write failed
            ConflictError: If an expectation did not hold
        """

    @abc.abstractmethod
    def request_quiz_challenge(self) -> Optional[QuizChallenge]:
        """Pick a vocabulary challenge, or None if there is no vocabulary."""
