"""Command-line driver for playing battlegrid in a terminal."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Sequence

from pydantic import ValidationError

from battlegrid.engine.board import Board, Cell, CellState, FireResult, column_label
from battlegrid.engine.config import GameConfig, load_game_config
from battlegrid.engine.errors import PlacementInfeasible
from battlegrid.engine.game import GamePhase
from battlegrid.engine.instrumented_game import InstrumentedBattleshipGame
from battlegrid.telemetry import configure_console_logging, init_telemetry

GLYPHS = {
    CellState.EMPTY: "-|-",
    CellState.EMPTY_HIT: "-o-",
    CellState.OCCUPIED: "-&-",
    CellState.OCCUPIED_HIT: "-x-",
}

RESULT_MESSAGES = {
    FireResult.HIT: "Hit",
    FireResult.MISS: "Missed",
    FireResult.SINK: "Ship sunk!",
}
INVALID_INPUT_MESSAGE = "Invalid input"

PROMPT = "Next shot: "
QUIT_COMMANDS = {"q", "quit"}


def _glyph(cell: Cell, show_ships: bool) -> str:
    if cell.state is CellState.OCCUPIED and not show_ships:
        return GLYPHS[CellState.EMPTY]
    return GLYPHS[cell.state]


def _format_board(board: Board, show_ships: bool = True) -> str:
    lines = [f"Ships alive: {board.alive_ships}"]
    lines.append("    " + "".join(f" {column_label(col)} " for col in range(board.width)))
    for row in range(board.height):
        start = row * board.width
        glyphs = "".join(
            _glyph(board.cell(index), show_ships) for index in range(start, start + board.width)
        )
        lines.append(f"{row + 1:2}  {glyphs}")
        lines.append("")
    return "\n".join(lines)


def _describe_result(result: FireResult | None) -> str:
    if result is None:
        return INVALID_INPUT_MESSAGE
    return RESULT_MESSAGES[result]


def play_game(
    game: InstrumentedBattleshipGame,
    show_ships: bool = True,
    input_fn: Callable[[str], str] | None = None,
    print_fn: Callable[..., None] | None = None,
) -> bool:
    """Run the turn loop until every ship is sunk; returns False if the player quit."""
    input_fn = input_fn or input
    print_fn = print_fn or print
    while game.phase is GamePhase.IN_PROGRESS:
        print_fn(_format_board(game.board, show_ships))
        try:
            raw = input_fn(PROMPT).strip()
        except EOFError:
            print_fn("\nGoodbye!")
            return False
        if raw.lower() in QUIT_COMMANDS:
            print_fn("Goodbye!")
            return False
        print_fn(_describe_result(game.take_shot(raw)))

    print_fn(_format_board(game.board, show_ships))
    print_fn(f"All ships sunk in {game.shots_fired} shots.")
    return True


def _build_parser(defaults: GameConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sink the hidden fleet, one shot at a time.")
    parser.add_argument("--width", type=int, default=defaults.width, help="Board columns.")
    parser.add_argument("--height", type=int, default=defaults.height, help="Board rows.")
    parser.add_argument(
        "--ships", type=int, default=defaults.ship_count, help="Number of 3-cell ships."
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=defaults.max_placement_attempts,
        help="Random draws allowed when placing the fleet.",
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument(
        "--hide-ships", action="store_true", help="Draw unhit ship cells as open water."
    )
    parser.add_argument("--verbose", action="store_true", help="Log engine events to stderr.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    try:
        defaults = load_game_config()
    except ValidationError as exc:
        print(f"Invalid BATTLEGRID_* environment settings:\n{exc}", file=sys.stderr)
        return 2

    parser = _build_parser(defaults)
    args = parser.parse_args(argv)
    try:
        config = GameConfig(
            width=args.width,
            height=args.height,
            ship_count=args.ships,
            max_placement_attempts=args.max_attempts,
        )
    except ValidationError as exc:
        parser.error(str(exc))

    if args.verbose:
        configure_console_logging(logging.DEBUG)
    init_telemetry()

    game = InstrumentedBattleshipGame(config, rng_seed=args.seed)
    try:
        game.setup_random()
    except PlacementInfeasible as exc:
        print(f"Cannot start the game: {exc}", file=sys.stderr)
        return 2

    play_game(game, show_ships=not args.hide_ships)
    return 0


if __name__ == "__main__":
    sys.exit(main())
