"""
rules.py - Local turn engine and Gymnasium environment for Connect Four

This module provides:
1. TurnState, the immutable snapshot observed by a local game UI
2. LocalTurnEngine, the human-versus-heuristic state machine with a
   simulated thinking delay before every opponent reply
3. A gymnasium-compatible environment where an agent plays the human side
"""

import threading
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from connect_four.ai.opponent import HeuristicOpponent
from connect_four.debug import debug
from connect_four.game.board import Board
from connect_four.game.scheduling import ManualScheduler, ScheduledCall, Scheduler, ThreadingScheduler
from connect_four.game.win import has_four_in_row, winning_line
from connect_four.utils import ROWS, COLS, DEFAULT_THINKING_DELAY, GameResult, Side

HUMAN = Side.ONE
CPU = Side.TWO


@dataclass(frozen=True)
class TurnState:
    """
    Snapshot of a local game.

    can_act is False only while the opponent is thinking; it is the lock that
    keeps human input out until the reply has been played.
    """
    board: Board
    side_to_move: Side = HUMAN
    status: GameResult = GameResult.IN_PROGRESS
    can_act: bool = True
    last_move: Optional[Tuple[int, int]] = None
    moves_made: int = 0

    @classmethod
    def initial(cls) -> 'TurnState':
        return cls(board=Board.empty())

    @property
    def is_terminal(self) -> bool:
        return self.status.is_game_over()

    def winning_line(self) -> List[Tuple[int, int]]:
        """Cells of the winning line, or an empty list if nobody has won."""
        if self.status.winner is None or self.last_move is None:
            return []
        return winning_line(self.board, *self.last_move)


def apply_drop(state: TurnState, column: int) -> Optional[TurnState]:
    """
    Play `column` for state.side_to_move and resolve the outcome.

    Win is checked at the placed cell first, then a full top row means a
    draw, otherwise the turn passes. can_act is left for the caller to set.

    Returns:
        The next state, or None if the game is over or the column is
        invalid or full
    """
    if state.is_terminal:
        return None

    side = state.side_to_move
    dropped = state.board.drop(column, side)
    if dropped is None:
        return None
    board, row = dropped

    moved = replace(state, board=board, last_move=(row, column), moves_made=state.moves_made + 1)
    if has_four_in_row(board, row, column, side):
        return replace(moved, status=GameResult.won_by(side), can_act=False)
    if board.is_full():
        return replace(moved, status=GameResult.DRAW, can_act=False)
    return replace(moved, side_to_move=side.other())


class LocalTurnEngine:
    """
    Human-versus-computer game manager.

    The human plays Side.ONE and always moves first. After each human move the
    opponent's reply is scheduled `thinking_delay` seconds later; until it
    runs, submit_move() is ignored. Observers either poll `state` or
    subscribe() to be called with every new snapshot.
    """

    def __init__(self, opponent: Optional[HeuristicOpponent] = None,
                 scheduler: Optional[Scheduler] = None,
                 thinking_delay: float = DEFAULT_THINKING_DELAY,
                 seed: Optional[int] = None):
        """
        Initialize a new local game.

        Args:
            opponent: Move selector for the computer side
            scheduler: Runs the delayed reply (threading timers by default)
            thinking_delay: Seconds between a human move and the reply
            seed: Seed for the default opponent's random fallback
        """
        debug.debug("Initializing LocalTurnEngine", "engine")
        self.opponent = opponent or HeuristicOpponent(seed=seed)
        self.scheduler = scheduler or ThreadingScheduler()
        self.thinking_delay = thinking_delay

        self._lock = threading.RLock()
        self._state = TurnState.initial()
        self._pending: Optional[ScheduledCall] = None
        self._generation = 0
        self._subscribers: List[Callable[[TurnState], None]] = []

    @property
    def state(self) -> TurnState:
        """The latest snapshot."""
        return self._state

    @property
    def reply_pending(self) -> bool:
        return self._pending is not None and self._pending.pending

    def subscribe(self, callback: Callable[[TurnState], None]) -> Callable[[], None]:
        """
        Register `callback` for every new snapshot; it is called once right away.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
            callback(self._state)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, state: TurnState) -> None:
        # Called with the lock held so a timer thread cannot publish out of order
        self._state = state
        for callback in list(self._subscribers):
            callback(state)

    def submit_move(self, column: int) -> TurnState:
        """
        Drop a human piece into `column`.

        Silently ignored when the game is over, it is not the human's turn,
        the opponent is thinking, or the column is invalid or full.

        Returns:
            The resulting snapshot (the unchanged one if the move was ignored)
        """
        with self._lock:
            state = self._state
            if state.is_terminal or state.side_to_move is not HUMAN or not state.can_act:
                debug.debug(f"Ignoring move in column {column}: human may not act", "engine")
                return state

            next_state = apply_drop(state, column)
            if next_state is None:
                debug.debug(f"Ignoring move in column {column}: invalid or full", "engine")
                return state

            debug.trace(f"Board after human move:\n{next_state.board}", "engine")
            if next_state.is_terminal:
                debug.info(f"Game over after human move: {next_state.status.name}", "engine")
                self._publish(next_state)
                return next_state

            next_state = replace(next_state, can_act=False)
            self._publish(next_state)
            generation = self._generation
            self._pending = self.scheduler.call_later(
                self.thinking_delay, lambda: self._opponent_reply(generation))
            return next_state

    def _opponent_reply(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
            state = self._state
            if state.is_terminal or state.side_to_move is not CPU:
                return

            column = self.opponent.choose_column(state.board, CPU, HUMAN)
            next_state = apply_drop(state, column)
            if next_state is None:
                # choose_column only returns open columns
                raise RuntimeError(f"opponent chose unplayable column {column}")

            debug.debug(f"Opponent played column {column}", "engine")
            if next_state.is_terminal:
                debug.info(f"Game over after opponent move: {next_state.status.name}", "engine")
            else:
                next_state = replace(next_state, can_act=True)
            self._publish(next_state)

    def reset(self) -> TurnState:
        """Cancel any pending reply and start a fresh game."""
        with self._lock:
            debug.debug("Resetting game", "engine")
            self._generation += 1
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
            fresh = TurnState.initial()
            self._publish(fresh)
            return fresh


class ConnectFourEnv(gym.Env):
    """
    Connect Four environment following the Gymnasium interface.

    The agent plays the human side of a LocalTurnEngine; the heuristic
    opponent replies immediately inside step().
    """

    metadata = {'render_modes': ['ascii', 'human'], 'render_fps': 4}

    def __init__(self, render_mode: Optional[str] = None):
        """
        Initialize the Connect Four environment.

        Args:
            render_mode: Mode for rendering the environment
        """
        debug.debug("Initializing ConnectFourEnv", "env")

        self.action_space = spaces.Discrete(COLS)
        # Observation space: 6x7 board with 3 possible values (0, 1, 2)
        self.observation_space = spaces.Box(low=0, high=2, shape=(ROWS, COLS), dtype=np.int8)

        self.render_mode = render_mode
        self._scheduler = ManualScheduler()
        self.engine = LocalTurnEngine(scheduler=self._scheduler, thinking_delay=0.0)

        self.reward_win = 1.0
        self.reward_lose = -1.0
        self.reward_draw = 0.1
        self.reward_invalid_move = -0.5
        self.reward_step = -0.01

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """
        Reset the environment to initial state.

        Returns:
            Initial observation and info dictionary
        """
        super().reset(seed=seed)
        self.engine.opponent.rng = self.np_random
        self.engine.reset()

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Play `action` for the agent, then let the opponent reply.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        before = self.engine.state
        after = self.engine.submit_move(int(action))

        if after is before:
            debug.warning(f"Invalid action: {action}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, False, info

        self._scheduler.run_all()
        status = self.engine.state.status

        reward = self.reward_step
        if status is GameResult.won_by(HUMAN):
            reward = self.reward_win
        elif status is GameResult.won_by(CPU):
            reward = self.reward_lose
        elif status is GameResult.DRAW:
            reward = self.reward_draw

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), reward, status.is_game_over(), False, self._get_info()

    def render(self) -> Optional[str]:
        if self.render_mode == "ascii":
            return self.engine.state.board.render()
        if self.render_mode == "human":
            print(self.engine.state.board.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.engine.state.board.as_array()

    def _get_info(self) -> Dict:
        state = self.engine.state
        valid_moves = [] if state.is_terminal else state.board.open_columns()
        return {
            'valid_moves': valid_moves,
            'num_valid_moves': len(valid_moves),
            'game_result': state.status.name,
            'moves_made': state.moves_made,
            'last_move': state.last_move,
            'winning_line': state.winning_line(),
        }
