"""
Tests for the in-memory game store.
"""
import pytest

from connect_four.errors import ConflictError, GameNotFoundError, PersistenceError
from connect_four.game.board import Board
from connect_four.online.memory_store import DEFAULT_VOCABULARY, InMemoryGameStore
from connect_four.online.protocol import GameUpdate, QuizChallenge, RemoteStatus
from connect_four.utils import Side


def test_create_and_join():
    store = InMemoryGameStore()
    game_id = store.create_game("a", "Ana")

    game = store.get_game(game_id)
    assert game.status is RemoteStatus.WAITING
    assert game.current_side_id == "a"
    assert game.board == Board.empty()
    assert [g.game_id for g in store.list_waiting_games()] == [game_id]

    store.join_game(game_id, "b", "Ben")
    game = store.get_game(game_id)
    assert game.status is RemoteStatus.IN_PROGRESS
    assert game.player2_name == "Ben"
    assert game.side_of("b") is Side.TWO
    assert game.version == 1
    assert store.list_waiting_games() == []


def test_game_ids_are_unique():
    store = InMemoryGameStore()
    assert store.create_game("a") != store.create_game("a")


def test_cannot_join_twice_or_own_game():
    store = InMemoryGameStore()
    game_id = store.create_game("a")

    with pytest.raises(ConflictError):
        store.join_game(game_id, "a")

    store.join_game(game_id, "b")
    with pytest.raises(ConflictError):
        store.join_game(game_id, "c")


def test_unknown_game():
    store = InMemoryGameStore()
    with pytest.raises(GameNotFoundError):
        store.get_game("nope")
    with pytest.raises(PersistenceError):
        store.submit_update("nope", GameUpdate(current_side_id="a"))


def test_subscribe_delivers_current_and_future_snapshots():
    store = InMemoryGameStore()
    game_id = store.create_game("a")
    seen = []

    unsubscribe = store.subscribe(game_id, seen.append)
    assert [g.status for g in seen] == [RemoteStatus.WAITING]

    store.join_game(game_id, "b")
    assert seen[-1].status is RemoteStatus.IN_PROGRESS

    unsubscribe()
    store.submit_update(game_id, GameUpdate(current_side_id="b"))
    assert len(seen) == 2


def test_update_keeps_unset_fields():
    store = InMemoryGameStore()
    game_id = store.create_game("a")
    store.join_game(game_id, "b")
    board, _ = Board.empty().drop(2, Side.ONE)

    store.submit_update(game_id, GameUpdate(current_side_id="b", board=board))
    store.submit_update(game_id, GameUpdate(current_side_id="a"))

    game = store.get_game(game_id)
    assert game.board == board
    assert game.status is RemoteStatus.IN_PROGRESS
    assert game.winner_id is None
    assert game.version == 3


def test_conditional_update_rejects_stale_version():
    store = InMemoryGameStore()
    game_id = store.create_game("a")
    store.join_game(game_id, "b")

    with pytest.raises(ConflictError) as excinfo:
        store.submit_update(game_id, GameUpdate(current_side_id="b"), expected_version=0)
    assert excinfo.value.expected_version == 0
    assert excinfo.value.actual_version == 1
    assert store.get_game(game_id).current_side_id == "a"


def test_conditional_update_rejects_wrong_mover():
    store = InMemoryGameStore()
    game_id = store.create_game("a")
    store.join_game(game_id, "b")

    with pytest.raises(ConflictError):
        store.submit_update(game_id, GameUpdate(current_side_id="a"),
                            expected_current_side_id="b")

    store.submit_update(game_id, GameUpdate(current_side_id="b"),
                        expected_version=1, expected_current_side_id="a")
    assert store.get_game(game_id).current_side_id == "b"


def test_quiz_challenges_come_from_vocabulary():
    store = InMemoryGameStore(seed=1)
    pairs = {QuizChallenge(prompt, answer) for prompt, answer in DEFAULT_VOCABULARY}

    for _ in range(20):
        assert store.request_quiz_challenge() in pairs


def test_empty_vocabulary_has_no_quiz():
    assert InMemoryGameStore(vocabulary=()).request_quiz_challenge() is None
    assert InMemoryGameStore(vocabulary=None).request_quiz_challenge() is None


def test_failing_listener_does_not_stop_delivery():
    store = InMemoryGameStore()
    game_id = store.create_game("a")
    store.join_game(game_id, "b")
    seen = []

    def broken(game):
        if game.version > 1:
            raise RuntimeError("listener bug")

    store.subscribe(game_id, broken)
    store.subscribe(game_id, seen.append)

    store.submit_update(game_id, GameUpdate(current_side_id="b"))

    assert [g.version for g in seen] == [1, 2]
    assert store.get_game(game_id).current_side_id == "b"
