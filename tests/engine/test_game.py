"""High-level gameplay tests."""

import pytest

from battlegrid.engine.board import Board, FireResult, column_label
from battlegrid.engine.config import GameConfig
from battlegrid.engine.errors import PlacementInfeasible
from battlegrid.engine.game import BattleshipGame, GamePhase


def _all_coordinates(board: Board) -> list[str]:
    return [
        f"{column_label(col)}{row + 1}" for row in range(board.height) for col in range(board.width)
    ]


def test_game_flow_until_every_ship_sinks() -> None:
    game = BattleshipGame(GameConfig(ship_count=3), rng_seed=42)
    game.setup_random()
    assert game.phase is GamePhase.IN_PROGRESS
    assert game.get_state().alive_ships == 3

    sinks = 0
    for coords in _all_coordinates(game.board):
        if game.phase is GamePhase.FINISHED:
            break
        sinks += game.take_shot(coords) is FireResult.SINK

    state = game.get_state()
    assert state.phase is GamePhase.FINISHED
    assert sinks == 3
    assert state.alive_ships == 0
    assert state.total_ships == 3
    assert state.shots_fired <= game.board.size


def test_take_shot_requires_in_progress_game() -> None:
    game = BattleshipGame()
    with pytest.raises(RuntimeError):
        game.take_shot("A1")


def test_invalid_input_is_counted_but_not_a_shot() -> None:
    game = BattleshipGame(rng_seed=1)
    game.setup_random()
    assert game.take_shot("Z99") is None
    assert game.take_shot("") is None
    state = game.get_state()
    assert state.invalid_inputs == 2
    assert state.shots_fired == 0
    assert state.phase is GamePhase.IN_PROGRESS


def test_finished_game_rejects_more_shots() -> None:
    game = BattleshipGame(GameConfig(width=3, height=1, ship_count=1), rng_seed=0)
    game.setup_random()
    assert [game.take_shot(c) for c in ("A1", "B1", "C1")] == [
        FireResult.HIT,
        FireResult.HIT,
        FireResult.SINK,
    ]
    assert game.phase is GamePhase.FINISHED
    with pytest.raises(RuntimeError):
        game.take_shot("A1")


def test_zero_ship_game_is_over_immediately() -> None:
    game = BattleshipGame(GameConfig(ship_count=0))
    game.setup_random()
    assert game.phase is GamePhase.FINISHED


def test_setup_reports_infeasible_fleet() -> None:
    game = BattleshipGame(GameConfig(width=2, height=2, ship_count=1))
    with pytest.raises(PlacementInfeasible):
        game.setup_random()
    assert game.phase is GamePhase.SETUP


def test_same_seed_gives_same_layout() -> None:
    first = BattleshipGame(rng_seed=5)
    second = BattleshipGame(rng_seed=5)
    first.setup_random()
    second.setup_random()
    assert first.get_state().cells == second.get_state().cells


def test_game_state_snapshot_reflects_shots() -> None:
    game = BattleshipGame(rng_seed=5)
    game.setup_random()
    game.take_shot("A1")
    state = game.get_state()
    assert state.shots_fired == 1
    assert state.cells[0].state.is_hit
    assert (state.width, state.height) == (10, 10)
