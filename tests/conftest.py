"""
Shared fixtures for the Connect Four tests.
"""
import numpy as np
import pytest

from connect_four.debug import DebugLevel, debug
from connect_four.game.rules import LocalTurnEngine
from connect_four.game.scheduling import ManualScheduler
from tests.helpers import RecordingStore


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the shared debug manager at its default between tests."""
    debug.configure(level=DebugLevel.WARNING, enabled=True, components=[])
    yield
    debug.configure(level=DebugLevel.WARNING, enabled=True, components=[], log_file="")


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def engine(scheduler):
    return LocalTurnEngine(scheduler=scheduler, seed=1234)


@pytest.fixture
def store():
    return RecordingStore(vocabulary=[("perro", "dog")], seed=0)


@pytest.fixture
def started_game(store):
    """A game between p1 (side ONE, to move) and p2."""
    game_id = store.create_game("p1", "Ana")
    store.join_game(game_id, "p2", "Ben")
    return game_id


@pytest.fixture
def rng():
    return np.random.default_rng(2024)
