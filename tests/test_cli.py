"""Tests for the terminal driver."""

from __future__ import annotations

import pytest

from battlegrid import cli
from battlegrid.engine.board import Board
from battlegrid.engine.config import GameConfig, load_game_config
from battlegrid.engine.instrumented_game import InstrumentedBattleshipGame


def _scripted_input(lines: list[str]):
    remaining = iter(lines)

    def _input(prompt: str) -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    return _input


@pytest.fixture(autouse=True)
def _no_telemetry(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cli, "init_telemetry", lambda *args, **kwargs: None)
    for name in (
        "BATTLEGRID_BOARD_WIDTH",
        "BATTLEGRID_BOARD_HEIGHT",
        "BATTLEGRID_SHIP_COUNT",
        "BATTLEGRID_MAX_PLACEMENT_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    load_game_config.cache_clear()
    yield
    load_game_config.cache_clear()


def test_format_board_layout() -> None:
    board = Board(width=3, height=2)
    board.place_ship(3)
    board.fire("A2")
    board.fire("C1")

    expected = "\n".join(
        [
            "Ships alive: 1",
            "     A  B  C ",
            " 1  -|--|--o-",
            "",
            " 2  -x--&--&-",
            "",
        ]
    )
    assert cli._format_board(board) == expected
    assert " 2  -x--|--|-" in cli._format_board(board, show_ships=False)


def test_play_game_reports_each_turn() -> None:
    game = InstrumentedBattleshipGame(GameConfig(width=3, height=2, ship_count=1), rng_seed=4)
    game.setup_random()
    row = 1 if game.board.cell(0).state.has_ship else 2
    miss_row = 3 - row
    shots = ["", "Z9", f"a{miss_row}", f"A{row}", f"b{row}", f"B{row} ", f" C{row}"]
    output: list[str] = []

    finished = cli.play_game(
        game, input_fn=_scripted_input(shots), print_fn=lambda *a, **k: output.append(a[0])
    )

    assert finished is True
    messages = [line for line in output if "\n" not in line]
    assert messages == [
        "Invalid input",
        "Invalid input",
        "Missed",
        "Hit",
        "Hit",
        "Hit",
        "Ship sunk!",
        "All ships sunk in 5 shots.",
    ]
    assert output[-2].startswith("Ships alive: 0")


def test_play_game_stops_on_quit_and_eof() -> None:
    game = InstrumentedBattleshipGame(rng_seed=1)
    game.setup_random()
    output: list[str] = []
    assert cli.play_game(game, input_fn=_scripted_input(["Q"]), print_fn=output.append) is False
    assert output[-1] == "Goodbye!"
    assert cli.play_game(game, input_fn=_scripted_input([]), print_fn=output.append) is False
    assert output[-1] == "\nGoodbye!"


def test_main_plays_a_scripted_game(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    shots = iter(["A1", "B1", "C1"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(shots))

    code = cli.main(["--width", "3", "--height", "1", "--ships", "1", "--seed", "2"])

    out = capsys.readouterr().out
    assert code == 0
    results = [line for line in out.splitlines() if line in cli.RESULT_MESSAGES.values()]
    assert results == ["Hit", "Hit", "Ship sunk!"]
    assert "All ships sunk in 3 shots." in out


def test_main_reports_infeasible_board(capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["--width", "2", "--height", "2", "--ships", "1"])
    assert code == 2
    assert "Cannot start the game" in capsys.readouterr().err


def test_main_rejects_invalid_config() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--width", "0"])
    assert excinfo.value.code == 2


def test_main_takes_defaults_from_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("BATTLEGRID_BOARD_WIDTH", "3")
    monkeypatch.setenv("BATTLEGRID_BOARD_HEIGHT", "1")
    monkeypatch.setenv("BATTLEGRID_SHIP_COUNT", "1")
    shots = iter(["A1", "B1", "C1"])
    monkeypatch.setattr("builtins.input", lambda prompt: next(shots))

    assert cli.main(["--seed", "0"]) == 0
    assert "All ships sunk in 3 shots." in capsys.readouterr().out
    assert load_game_config().width == 3
