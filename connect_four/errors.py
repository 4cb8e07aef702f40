"""
errors.py - Exception types raised by the Connect Four engine

Normal play never raises: invalid columns and out-of-turn actions are rejected
silently. Exceptions are reserved for programming errors, corrupted remote
data and collaborator failures.
"""


class ConnectFourError(Exception):
    """Base class for all engine errors."""


class IllegalPlacementError(ConnectFourError):
    """A piece was placed on an occupied or out-of-range cell."""

    def __init__(self, row: int, column: int, reason: str):
        super().__init__(f"cannot place at ({row}, {column}): {reason}")
        self.row = row
        self.column = column
        self.reason = reason


class NoLegalMoveError(ConnectFourError):
    """A move was requested on a board without open columns."""


class BoardDecodeError(ConnectFourError):
    """A board received over the wire is malformed."""


class PersistenceError(ConnectFourError):
    """The persistence collaborator failed to store an update."""


class ConflictError(PersistenceError):
    """A conditional update was rejected because the stored game moved on."""

    def __init__(self, message: str, expected_version=None, actual_version=None):
        super().__init__(message)
        self.expected_version = expected_version
        self.actual_version = actual_version


class GameNotFoundError(PersistenceError):
    """The persistence collaborator has no game with the requested id."""
