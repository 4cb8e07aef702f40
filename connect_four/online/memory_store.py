"""
memory_store.py - In-process GameStore

InMemoryGameStore keeps game documents in a dict and pushes every change to
subscribers synchronously, on the thread that made the write. It is meant for
hot-seat play on one machine and for exercising OnlineTurnCoordinator; a real
deployment implements GameStore on top of its document database instead.

Writes are conditional: a stale expected_version or expected_current_side_id
raises ConflictError, so two participants cannot both claim the same turn.
"""

import itertools
import threading
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from connect_four.debug import debug
from connect_four.errors import ConflictError, GameNotFoundError
from connect_four.game.board import Board
from connect_four.online.protocol import (GameStore, GameUpdate, QuizChallenge,
                                          RemoteGameState, RemoteStatus)

DEFAULT_VOCABULARY: Tuple[Tuple[str, str], ...] = (
    ("perro", "dog"),
    ("gato", "cat"),
    ("casa", "house"),
    ("libro", "book"),
    ("agua", "water"),
    ("rojo", "red"),
    ("manzana", "apple"),
    ("ventana", "window"),
)


class InMemoryGameStore(GameStore):
    """
    A GameStore holding games in memory.

    Args:
        vocabulary: (prompt word, expected answer) pairs for quizzes
        seed: Seed for picking quiz words
    """

    def __init__(self, vocabulary: Optional[Sequence[Tuple[str, str]]] = DEFAULT_VOCABULARY,
                 seed: Optional[int] = None):
        self._lock = threading.RLock()
        self._games: Dict[str, RemoteGameState] = {}
        self._listeners: Dict[str, List[Callable[[RemoteGameState], None]]] = defaultdict(list)
        self._ids = itertools.count(1)
        self.vocabulary = [QuizChallenge(prompt, answer) for prompt, answer in (vocabulary or ())]
        self.rng = np.random.default_rng(seed)

    def create_game(self, player_id: str, player_name: str = "Player 1") -> str:
        """Open a game with `player_id` as Player1; it waits for a second player."""
        with self._lock:
            game_id = f"game-{next(self._ids)}"
            self._games[game_id] = RemoteGameState(
                board=Board.empty(), current_side_id=player_id, status=RemoteStatus.WAITING,
                game_id=game_id, player1_id=player_id, player1_name=player_name)
            debug.info(f"{player_name} created {game_id}", "store")
            return game_id

    def join_game(self, game_id: str, player_id: str, player_name: str = "Player 2") -> None:
        """
        Take the Player2 seat and start the game.

        Raises:
            GameNotFoundError: If the game does not exist
            ConflictError: If the game is no longer waiting for a player
        """
        with self._lock:
            game = self._get(game_id)
            if game.status is not RemoteStatus.WAITING:
                raise ConflictError(f"{game_id} is not waiting for a player")
            if player_id == game.player1_id:
                raise ConflictError(f"{player_id} already plays in {game_id}")
            game = self._store(game.model_copy(update=dict(
                player2_id=player_id, player2_name=player_name,
                status=RemoteStatus.IN_PROGRESS, version=game.version + 1)))
            debug.info(f"{player_name} joined {game_id}", "store")
        self._notify(game)

    def list_waiting_games(self) -> List[RemoteGameState]:
        with self._lock:
            return [g for g in self._games.values() if g.status is RemoteStatus.WAITING]

    def get_game(self, game_id: str) -> RemoteGameState:
        with self._lock:
            return self._get(game_id)

    def subscribe(self, game_id: str,
                  callback: Callable[[RemoteGameState], None]) -> Callable[[], None]:
        with self._lock:
            game = self._get(game_id)
            self._listeners[game_id].append(callback)
        callback(game)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners[game_id]:
                    self._listeners[game_id].remove(callback)

        return unsubscribe

    def submit_update(self, game_id: str, update: GameUpdate,
                      expected_version: Optional[int] = None,
                      expected_current_side_id: Optional[str] = None) -> None:
        with self._lock:
            game = self._get(game_id)
            if expected_version is not None and game.version != expected_version:
                raise ConflictError(f"{game_id} is at version {game.version}",
                                    expected_version, game.version)
            if expected_current_side_id is not None and game.current_side_id != expected_current_side_id:
                raise ConflictError(f"it is not {expected_current_side_id}'s turn in {game_id}",
                                    expected_version, game.version)

            fields = {"current_side_id": update.current_side_id, "version": game.version + 1}
            if update.board is not None:
                fields["board"] = update.board
            if update.status is not None:
                fields["status"] = update.status
            if update.winner_id is not None:
                fields["winner_id"] = update.winner_id
            game = self._store(game.model_copy(update=fields))
            debug.debug(f"{game_id} v{game.version}: {update.to_fields()}", "store")
        self._notify(game)

    def request_quiz_challenge(self) -> Optional[QuizChallenge]:
        if not self.vocabulary:
            return None
        return self.vocabulary[int(self.rng.integers(len(self.vocabulary)))]

    def _get(self, game_id: str) -> RemoteGameState:
        try:
            return self._games[game_id]
        except KeyError:
            raise GameNotFoundError(f"no game {game_id!r}") from None

    def _store(self, game: RemoteGameState) -> RemoteGameState:
        self._games[game.game_id] = game
        return game

    def _notify(self, game: RemoteGameState) -> None:
        with self._lock:
            listeners = list(self._listeners[game.game_id])
        for callback in listeners:
            try:
                callback(game)
            except Exception as e:
                # The write is already stored
                debug.error(f"Listener for {game.game_id} failed on v{game.version}: {e!r}", "store")
