"""Single-player game controller driving one board through setup and firing."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum

from battlegrid.telemetry import get_tracer

from .board import Board, Cell, FireResult
from .config import GameConfig

logger = logging.getLogger(__name__)
tracer = get_tracer("battlegrid.engine.game")


class GamePhase(Enum):
    """High-level lifecycle of a game."""

    SETUP = "setup"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True)
class GameState:
    """Immutable snapshot of the current game."""

    phase: GamePhase
    width: int
    height: int
    total_ships: int
    alive_ships: int
    shots_fired: int
    invalid_inputs: int
    cells: tuple[Cell, ...]


class BattleshipGame:
    """Owns the board for the lifetime of one game and applies one shot per turn."""

    def __init__(self, config: GameConfig | None = None, rng_seed: int | None = None) -> None:
        self.config = config or GameConfig()
        self.board = Board(self.config.width, self.config.height)
        self.phase: GamePhase = GamePhase.SETUP
        self.shots_fired = 0
        self.invalid_inputs = 0
        self._rng = random.Random(rng_seed)

    def setup_random(self) -> None:
        """Place the configured fleet on a fresh board and start the game."""
        with tracer.start_as_current_span("game.setup_random") as span:
            board = Board(self.config.width, self.config.height)
            board.place_ships(
                self.config.ship_count,
                rng=self._rng,
                max_attempts=self.config.max_placement_attempts,
            )
            self.board = board
            self.shots_fired = 0
            self.invalid_inputs = 0
            self.phase = GamePhase.FINISHED if board.is_game_over() else GamePhase.IN_PROGRESS
            span.set_attribute("phase", self.phase.value)
            logger.info(
                "game_setup_random_complete",
                extra={"phase": self.phase.value, "ships": len(board.ships)},
            )

    def take_shot(self, coords: str) -> FireResult | None:
        """Fire at `coords`; None reports invalid input and leaves the board untouched."""
        if self.phase is not GamePhase.IN_PROGRESS:
            logger.error("shot_rejected_game_not_in_progress", extra={"phase": self.phase.value})
            raise RuntimeError("Game is not in progress.")

        result = self.board.fire(coords)
        if result is None:
            self.invalid_inputs += 1
            return None

        self.shots_fired += 1
        if self.board.is_game_over():
            self.phase = GamePhase.FINISHED
            logger.info("game_finished", extra={"shots_fired": self.shots_fired})
        return result

    def get_state(self) -> GameState:
        """Return an immutable view of the current game."""
        return GameState(
            phase=self.phase,
            width=self.board.width,
            height=self.board.height,
            total_ships=len(self.board.ships),
            alive_ships=self.board.alive_ships,
            shots_fired=self.shots_fired,
            invalid_inputs=self.invalid_inputs,
            cells=self.board.cells,
        )
