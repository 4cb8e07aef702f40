"""
Tests for the command-line interface.
"""
import pytest

from connect_four.interfaces.cli import QUIT, RESTART, SimpleCLI, main
from tests.helpers import DRAW_SEQUENCE, ScriptedOpponent, play_columns


def feed_input(monkeypatch, lines):
    answers = iter(lines)

    def fake_input(prompt=""):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


def position_arg(board):
    return ",".join(str(v) for v in board.to_flat())


@pytest.mark.parametrize("line,expected", [
    ("3", 3),
    (" 0 ", 0),
    ("q", QUIT),
    ("R", RESTART),
    ("7", None),
    ("abc", None),
])
def test_get_human_move(monkeypatch, line, expected):
    feed_input(monkeypatch, [line])
    assert SimpleCLI().get_human_move() == expected


def test_get_human_move_eof_quits(monkeypatch):
    feed_input(monkeypatch, [])
    assert SimpleCLI().get_human_move() == QUIT


def test_no_command(capsys):
    assert main([]) == 1
    assert "--help" in capsys.readouterr().out


def test_check_reports_suggestions(capsys):
    board = play_columns([3, 0, 3, 0, 3])
    assert main(["check", "--position", position_arg(board)]) == 0

    out = capsys.readouterr().out
    # X threatens column 3, so both sides look there
    assert "X would play column 3" in out
    assert "O would play column 3" in out


def test_check_reports_winner(capsys):
    board = play_columns([3, 0, 3, 0, 3, 0, 3])
    assert main(["check", "--position", position_arg(board)]) == 0
    assert "Four in a row for: X" in capsys.readouterr().out


def test_check_reports_draw(capsys):
    assert main(["check", "--position", position_arg(play_columns(DRAW_SEQUENCE))]) == 0
    assert "draw" in capsys.readouterr().out


@pytest.mark.parametrize("position", ["1,2,3", "a,b", ",".join(["0"] * 41 + ["9"])])
def test_check_rejects_bad_positions(capsys, position):
    assert main(["check", "--position", position]) == 1
    assert "Invalid position" in capsys.readouterr().out


def test_play_until_quit(monkeypatch, capsys):
    feed_input(monkeypatch, ["3", "r", "9", "q"])
    assert main(["play", "--seed", "1", "--delay", "0"]) == 0

    out = capsys.readouterr().out
    assert "Computer plays column" in out
    assert "Game restarted." in out
    assert "Quitting game." in out


def test_play_to_a_win(monkeypatch, capsys):
    monkeypatch.setattr("connect_four.interfaces.cli.HeuristicOpponent",
                        lambda seed=None: ScriptedOpponent([6, 6, 6]))
    feed_input(monkeypatch, ["0"] * 4)

    assert main(["play", "--delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "Computer plays column 6" in out
    assert "You win! Congratulations!" in out


def test_hotseat_wrong_answer_passes_turn(monkeypatch, capsys):
    cli = SimpleCLI()
    cli.parse_args(["hotseat", "--seed", "0"])
    feed_input(monkeypatch, ["no idea"])

    assert cli.run() == 0
    assert "Turn passed." in capsys.readouterr().out


@pytest.mark.parametrize("delay", ["-1", "nan"])
def test_play_rejects_bad_delay(capsys, delay):
    with pytest.raises(SystemExit) as excinfo:
        main(["play", "--delay", delay])
    assert excinfo.value.code == 2
    assert "--delay" in capsys.readouterr().err
