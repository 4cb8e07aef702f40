"""
cli.py - Command-line interface for Connect Four

This module provides a small terminal front end: a local game against the
heuristic opponent, a hot-seat quiz game played through the in-memory game
store, and a position checker for boards in wire form.
"""

import argparse
import sys
import time
from typing import List, Optional

from connect_four.ai.opponent import HeuristicOpponent
from connect_four.debug import debug
from connect_four.errors import BoardDecodeError
from connect_four.game.rules import CPU, HUMAN, LocalTurnEngine
from connect_four.game.scheduling import ManualScheduler
from connect_four.game.win import find_winners
from connect_four.online.coordinator import OnlineTurnCoordinator, Phase
from connect_four.online.memory_store import InMemoryGameStore
from connect_four.online.protocol import decode_board
from connect_four.utils import COLS, DEFAULT_THINKING_DELAY, GameResult, Side

QUIT = -1
RESTART = -2


def non_negative_float(value: str) -> float:
    """argparse type for delays."""
    number = float(value)
    if not number >= 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


class SimpleCLI:
    """Simple command-line interface for Connect Four."""

    def __init__(self):
        self.args = None

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='Connect Four CLI')
        parser.add_argument('--debug-level', default=None,
                            choices=['none', 'error', 'warning', 'info', 'debug', 'trace'],
                            help='Logging level (overrides CONNECT_FOUR_DEBUG)')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        play_parser = subparsers.add_parser('play', help='Play against the computer')
        play_parser.add_argument('--seed', type=int, default=None,
                                 help='Seed for the opponent\'s random moves')
        play_parser.add_argument('--delay', type=non_negative_float, default=DEFAULT_THINKING_DELAY,
                                 help='Seconds the opponent thinks before replying')

        hotseat_parser = subparsers.add_parser('hotseat',
                                               help='Two players, one terminal, vocabulary quiz each turn')
        hotseat_parser.add_argument('--seed', type=int, default=None,
                                    help='Seed for picking quiz words')

        check_parser = subparsers.add_parser('check', help='Inspect a board given as 42 comma-separated cells')
        check_parser.add_argument('--position', type=str, required=True,
                                  help='Row-major cells, 0 empty, 1 and 2 for the sides')

        self.args = parser.parse_args(argv)

        debug.configure_from_env()
        if self.args.debug_level:
            debug.set_from_string(self.args.debug_level)
        return self.args

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI based on the parsed arguments."""
        if not self.args:
            self.parse_args(argv)

        if self.args.command == 'play':
            return self.play_game()
        if self.args.command == 'hotseat':
            return self.play_hotseat()
        if self.args.command == 'check':
            return self.check_position()

        print("Please specify a command. Use --help for options.")
        return 1

    def play_game(self) -> int:
        """Play a local game against the heuristic opponent."""
        scheduler = ManualScheduler()
        engine = LocalTurnEngine(opponent=HeuristicOpponent(seed=self.args.seed),
                                 scheduler=scheduler, thinking_delay=self.args.delay)

        print("Starting a new Connect Four game! You are X.")
        print(f"Enter a column number (0-{COLS - 1}); 'q' quits, 'r' restarts.")
        print(engine.state.board)

        while not engine.state.is_terminal:
            move = self.get_human_move()
            if move is None:
                continue
            if move == QUIT:
                print("Quitting game.")
                return 0
            if move == RESTART:
                print("Game restarted.")
                print(engine.reset().board)
                continue

            before = engine.state
            state = engine.submit_move(move)
            if state is before:
                print(f"Column {move} is full.")
                continue
            print(state.board)

            if engine.reply_pending:
                print("Computer is thinking...")
                time.sleep(engine.thinking_delay)
                scheduler.advance(engine.thinking_delay)
                state = engine.state
                print(f"Computer plays column {state.last_move[1]}")
                print(state.board)

        print("Game over!")
        status = engine.state.status
        if status is GameResult.won_by(HUMAN):
            print("You win! Congratulations!")
        elif status is GameResult.won_by(CPU):
            print("The computer wins! Better luck next time.")
        else:
            print("It's a draw!")
        return 0

    def get_human_move(self, prompt: str = "Your move") -> Optional[int]:
        """
        Read a column or a command from the terminal.

        Returns:
            Column index, QUIT, RESTART, or None for unreadable input
        """
        try:
            user_input = input(f"{prompt} (columns 0-{COLS - 1}, q/r): ").strip().lower()
        except EOFError:
            return QUIT

        if user_input == 'q':
            return QUIT
        if user_input == 'r':
            return RESTART

        try:
            move = int(user_input)
        except ValueError:
            print("Invalid input. Please enter a column number or a command.")
            return None

        if not 0 <= move < COLS:
            print(f"Column must be between 0 and {COLS - 1}.")
            return None
        return move

    def play_hotseat(self) -> int:
        """Two players share the terminal; each turn starts with a vocabulary quiz."""
        store = InMemoryGameStore(seed=self.args.seed)
        game_id = store.create_game("p1", "Player 1")
        store.join_game(game_id, "p2", "Player 2")

        players = {pid: OnlineTurnCoordinator(store, game_id, pid) for pid in ("p1", "p2")}
        for coordinator in players.values():
            coordinator.attach()

        try:
            while True:
                remote = store.get_game(game_id)
                if players["p1"].phase is Phase.FINISHED:
                    print(remote.board)
                    for pid, coordinator in players.items():
                        print(f"{pid}: {coordinator.status_message()}")
                    return 0

                coordinator = players[remote.current_side_id]
                name = (remote.player1_name if remote.side_of(coordinator.my_id) is Side.ONE
                        else remote.player2_name)

                if coordinator.phase is Phase.QUIZ_PENDING:
                    challenge = coordinator.state.challenge
                    try:
                        answer = input(f"{name}, translate '{challenge.prompt_word}': ")
                    except EOFError:
                        return 0
                    coordinator.submit_quiz_answer(answer)
                    if coordinator.phase is not Phase.MY_TURN_UNLOCKED:
                        print(f"Wrong! The answer was '{challenge.expected_answer}'. Turn passed.")
                    continue

                print(remote.board)
                move = self.get_human_move(f"{name} ({remote.side_of(coordinator.my_id)})")
                if move == QUIT:
                    return 0
                if move is None or move == RESTART:
                    continue
                if coordinator.submit_move(move).phase is Phase.MY_TURN_UNLOCKED:
                    print(f"Column {move} is full.")
        finally:
            for coordinator in players.values():
                coordinator.detach()

    def check_position(self) -> int:
        """Decode a board, report winners and the computer's choice for each side."""
        try:
            cells = [int(c) for c in self.args.position.split(',')]
            board = decode_board(cells)
        except (ValueError, BoardDecodeError) as e:
            print(f"Invalid position: {e}")
            return 1

        print(board)
        winners = find_winners(board)
        if winners:
            print("Four in a row for: " + ", ".join(str(side) for side in sorted(winners, key=lambda s: s.value)))
        elif board.is_full():
            print("Board is full: draw.")
        else:
            opponent = HeuristicOpponent(seed=0)
            for side in Side:
                print(f"{side} would play column {opponent.choose_column(board, side)}")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    return SimpleCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
