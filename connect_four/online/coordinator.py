"""
coordinator.py - Quiz-gated turn coordination for online games

OnlineTurnCoordinator turns the snapshots pushed by a GameStore into the phase
a player's UI should show, and turns the player's actions (quiz answers and
column taps) into conditional writes back to the store.

Every snapshot newer than the last accepted one is the source of truth. The
only local state that survives a snapshot is whether this turn's quiz has
already been answered correctly.
"""

import threading
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable, List, Optional

from connect_four.debug import debug
from connect_four.errors import BoardDecodeError, PersistenceError
from connect_four.game.win import find_winners, has_four_in_row
from connect_four.online.protocol import (GameStore, GameUpdate, QuizChallenge,
                                          RemoteGameState, RemoteStatus)


class Phase(Enum):
    WAITING_FOR_OPPONENT = auto()
    QUIZ_PENDING = auto()
    MY_TURN_UNLOCKED = auto()
    OPPONENT_TURN = auto()
    FINISHED = auto()


class Outcome(Enum):
    WON = auto()
    LOST = auto()
    DRAW = auto()


@dataclass(frozen=True)
class CoordinatorState:
    """
    Snapshot published to the UI.

    `challenge` is set only in QUIZ_PENDING and `outcome` only in FINISHED.
    """
    phase: Phase
    challenge: Optional[QuizChallenge] = None
    outcome: Optional[Outcome] = None
    remote: Optional[RemoteGameState] = None

    @property
    def can_move(self) -> bool:
        return self.phase is Phase.MY_TURN_UNLOCKED


class OnlineTurnCoordinator:
    """
    Drives one participant's view of an online game.

    Args:
        store: Persistence collaborator hosting the game
        game_id: Id of the game document
        my_id: Player id of this participant
    """

    def __init__(self, store: GameStore, game_id: str, my_id: str):
        self.store = store
        self.game_id = game_id
        self.my_id = my_id

        self._lock = threading.RLock()
        self._state = CoordinatorState(Phase.WAITING_FOR_OPPONENT)
        self._remote: Optional[RemoteGameState] = None
        self._quiz_resolved = False
        # Snapshot the in-flight write was computed from
        self._pending_base: Optional[RemoteGameState] = None
        self._subscribers: List[Callable[[CoordinatorState], None]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def remote(self) -> Optional[RemoteGameState]:
        """Last accepted remote snapshot."""
        return self._remote

    def subscribe(self, callback: Callable[[CoordinatorState], None]) -> Callable[[], None]:
        """Call `callback` now and on every state change; returns an unsubscribe function."""
        with self._lock:
            self._subscribers.append(callback)
            callback(self._state)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def attach(self) -> None:
        """Start receiving snapshots from the store."""
        with self._lock:
            if self._unsubscribe is None:
                debug.info(f"Attaching {self.my_id} to game {self.game_id}", "online")
                self._unsubscribe = self.store.subscribe(self.game_id, self.on_remote_state)

    def detach(self) -> None:
        with self._lock:
            if self._unsubscribe is not None:
                self._unsubscribe()
                self._unsubscribe = None

    def _publish(self, state: CoordinatorState) -> None:
        self._state = state
        for callback in list(self._subscribers):
            callback(state)

    def on_remote_state(self, remote: RemoteGameState) -> CoordinatorState:
        """
        Reconcile a snapshot pushed by the store.

        Raises:
            BoardDecodeError: If the snapshot's board cannot be a real game
        """
        with self._lock:
            if self._remote is not None and remote.version < self._remote.version:
                debug.debug(f"Discarding stale snapshot v{remote.version} "
                            f"(have v{self._remote.version})", "online")
                return self._state

            base = self._pending_base
            if base is not None:
                if remote.version <= base.version and remote.same_position(base):
                    debug.trace("Ignoring redelivery of the snapshot a pending write was based on",
                                "online")
                    return self._state
                self._pending_base = None

            self._validate(remote)
            self._remote = remote
            self._reconcile()
            return self._state

    def _validate(self, remote: RemoteGameState) -> None:
        if not remote.board.satisfies_gravity():
            debug.error(f"Game {self.game_id} has a floating piece:\n{remote.board}", "online")
            raise BoardDecodeError("remote board has an empty cell below an occupied one")

        marker = f"validate:{self.game_id}:{self.my_id}"
        debug.start_timer(marker)
        winners = find_winners(remote.board)
        debug.end_timer(marker, "online")

        if len(winners) > 1:
            raise BoardDecodeError("remote board has a line for both sides")
        if winners and remote.status is RemoteStatus.IN_PROGRESS:
            debug.warning(f"Game {self.game_id} is in progress but {winners.pop().name} "
                          f"already has four in a row", "online")

    def _reconcile(self) -> None:
        remote = self._remote

        if remote.status is RemoteStatus.FINISHED:
            self._quiz_resolved = False
            self._publish(CoordinatorState(Phase.FINISHED, outcome=self._outcome(remote),
                                           remote=remote))
        elif remote.status is RemoteStatus.WAITING:
            self._publish(CoordinatorState(Phase.WAITING_FOR_OPPONENT, remote=remote))
        elif remote.current_side_id != self.my_id:
            self._quiz_resolved = False
            self._publish(CoordinatorState(Phase.OPPONENT_TURN, remote=remote))
        elif self._state.phase is Phase.QUIZ_PENDING:
            # Same turn, keep the challenge already shown
            self._publish(replace(self._state, remote=remote))
        elif self._quiz_resolved:
            self._publish(CoordinatorState(Phase.MY_TURN_UNLOCKED, remote=remote))
        else:
            self._start_quiz(remote)

    def _start_quiz(self, remote: RemoteGameState) -> None:
        try:
            challenge = self.store.request_quiz_challenge()
        except Exception as e:
            debug.warning(f"Vocabulary unavailable, skipping quiz: {e}", "online")
            challenge = None

        if challenge is None:
            self._quiz_resolved = True
            self._publish(CoordinatorState(Phase.MY_TURN_UNLOCKED, remote=remote))
        else:
            debug.debug(f"Quiz for {self.my_id}: {challenge.prompt_word!r}", "online")
            self._publish(CoordinatorState(Phase.QUIZ_PENDING, challenge=challenge, remote=remote))

    def _outcome(self, remote: RemoteGameState) -> Outcome:
        if remote.winner_id is None:
            return Outcome.DRAW
        return Outcome.WON if remote.winner_id == self.my_id else Outcome.LOST

    def submit_quiz_answer(self, answer: str) -> CoordinatorState:
        """
        Answer the pending quiz.

        A correct answer unlocks the turn. A wrong one forfeits it: the store
        is asked to hand the turn to the other player without a move.
        Ignored unless a quiz is pending.
        """
        with self._lock:
            state = self._state
            if state.phase is not Phase.QUIZ_PENDING:
                debug.debug("Ignoring quiz answer: no quiz pending", "online")
                return state

            if state.challenge.check(answer):
                debug.info(f"{self.my_id} answered correctly", "online")
                self._quiz_resolved = True
                self._publish(CoordinatorState(Phase.MY_TURN_UNLOCKED, remote=self._remote))
                return self._state

            remote = self._remote
            debug.info(f"{self.my_id} answered {answer!r}, expected "
                       f"{state.challenge.expected_answer!r}; passing turn", "online")
            self._quiz_resolved = False
            update = GameUpdate(current_side_id=remote.other_player_id(self.my_id))
            self._write(remote, update)
            return self._state

    def submit_move(self, column: int) -> CoordinatorState:
        """
        Drop a piece into `column` and persist the result.

        Ignored unless the turn is unlocked and the column can take a piece.
        If the store rejects the write the turn stays unlocked for a retry.
        """
        with self._lock:
            remote = self._remote
            if (self._state.phase is not Phase.MY_TURN_UNLOCKED or remote is None
                    or remote.status is not RemoteStatus.IN_PROGRESS
                    or remote.current_side_id != self.my_id):
                debug.debug(f"Ignoring move in column {column}: turn not unlocked", "online")
                return self._state

            side = remote.side_of(self.my_id)
            dropped = remote.board.drop(column, side) if side is not None else None
            if dropped is None:
                debug.debug(f"Ignoring move in column {column}: invalid or full", "online")
                return self._state
            board, row = dropped

            status, winner_id = RemoteStatus.IN_PROGRESS, None
            if has_four_in_row(board, row, column, side):
                status, winner_id = RemoteStatus.FINISHED, self.my_id
            elif board.is_full():
                status = RemoteStatus.FINISHED

            update = GameUpdate(current_side_id=remote.other_player_id(self.my_id), board=board,
                                status=status, winner_id=winner_id)
            debug.debug(f"{self.my_id} plays column {column} -> {status.value}", "online")
            if self._write(remote, update):
                self._quiz_resolved = False
            return self._state

    def _write(self, base: RemoteGameState, update: GameUpdate) -> bool:
        """
        Optimistically hand the turn over and send `update`.

        On failure the optimistic state is dropped and the last snapshot is
        reconciled again: an unlocked move stays unlocked, a forfeited turn
        gets a fresh quiz.

        Returns:
            True if the store accepted the write
        """
        if update.current_side_id is None:
            debug.error(f"Game {self.game_id} has no second player to pass the turn to", "online")
            return False

        self._pending_base = base
        self._publish(CoordinatorState(Phase.OPPONENT_TURN, remote=base))
        try:
            self.store.submit_update(self.game_id, update,
                                     expected_version=base.version,
                                     expected_current_side_id=self.my_id)
        except PersistenceError as e:
            debug.error(f"Could not update game {self.game_id}: {e}", "online")
            self._rollback(base)
            return False
        except Exception:
            self._rollback(base)
            raise
        return True

    def _rollback(self, base: RemoteGameState) -> None:
        if self._pending_base is base:
            self._pending_base = None
        # A newer snapshot has already been reconciled
        if self._remote is base:
            self._reconcile()

    def status_message(self) -> str:
        """Short status line for the current phase."""
        state = self._state
        if state.phase is Phase.FINISHED:
            return {Outcome.WON: "You won!", Outcome.LOST: "You lost.",
                    Outcome.DRAW: "Draw!"}[state.outcome]
        if state.phase is Phase.WAITING_FOR_OPPONENT:
            return "Waiting for opponent..."
        if state.phase is Phase.OPPONENT_TURN:
            return "Opponent's turn."
        return "Your turn!"
