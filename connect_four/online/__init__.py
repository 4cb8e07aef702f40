"""
connect_four.online - Quiz-gated two-player games over a shared game store

The coordinator talks to storage only through the GameStore interface in
connect_four.online.protocol.
"""

from connect_four.online.coordinator import CoordinatorState, OnlineTurnCoordinator, Outcome, Phase
from connect_four.online.memory_store import InMemoryGameStore
from connect_four.online.protocol import (GameStore, GameUpdate, QuizChallenge, RemoteGameState,
                                          RemoteStatus, decode_board, encode_board)

__all__ = ['CoordinatorState', 'OnlineTurnCoordinator', 'Outcome', 'Phase', 'InMemoryGameStore',
           'GameStore', 'GameUpdate', 'QuizChallenge', 'RemoteGameState', 'RemoteStatus',
           'decode_board', 'encode_board']
