"""BattleshipGame with per-game tracing, metrics and logging."""

from __future__ import annotations

import time

from battlegrid.engine.board import FireResult
from battlegrid.engine.game import BattleshipGame, GamePhase
from battlegrid.telemetry import get_logger, get_tracer, record_distribution, record_metric


class InstrumentedBattleshipGame(BattleshipGame):
    """Wraps BattleshipGame with tracing, metrics, and logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("battlegrid.engine")
        self._tracer = get_tracer("battlegrid.engine")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0

    def setup_random(self) -> None:
        self._start_game_span()
        with self._tracer.start_as_current_span("battlegrid.engine.setup_random") as span:
            self._logger.info("Random setup started")
            try:
                super().setup_random()
            except Exception as exc:
                span.record_exception(exc)
                span.set_attribute("error", True)
                self._logger.error("Random setup failed: %s", exc)
                self._close_game_span()
                raise
            ships = len(self.board.ships)
            span.set_attribute("ships", ships)
            span.set_attribute("board.width", self.board.width)
            span.set_attribute("board.height", self.board.height)
            record_metric("battlegrid_game_setup_total", 1, {"ships": ships})
            self._logger.info(
                "Random setup finished: %d ships on %dx%d",
                ships,
                self.board.width,
                self.board.height,
            )

        if self.phase is GamePhase.FINISHED:
            self._finish_game()

    def take_shot(self, coords: str) -> FireResult | None:
        with self._tracer.start_as_current_span("battlegrid.engine.take_shot") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("coords", coords)

            result = super().take_shot(coords)

            if result is None:
                span.set_attribute("invalid_input", True)
                self._logger.info("take_shot coords=%r rejected as invalid input", coords)
                return None

            span.set_attribute("shot_outcome", result.name)
            span.set_attribute("alive_ships", self.board.alive_ships)
            self._logger.info(
                "take_shot coords=%s outcome=%s alive_ships=%d",
                coords,
                result.name,
                self.board.alive_ships,
            )

            if self.phase is GamePhase.FINISHED:
                self._finish_game()

            return result

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("battlegrid.engine.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0

        record_metric("battlegrid_game_completed_total", 1)
        record_distribution("battlegrid_game_duration_seconds", duration, unit="s")
        record_distribution("battlegrid_game_shots", self.shots_fired)

        with self._tracer.start_as_current_span("battlegrid.engine.game_complete") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("shots", self.shots_fired)
            span.set_attribute("invalid_inputs", self.invalid_inputs)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("shots", self.shots_fired)
            self._game_span.set_attribute("duration_ms", duration * 1000)

        self._logger.info(
            "Game finished. shots=%d invalid_inputs=%d duration_s=%.3f",
            self.shots_fired,
            self.invalid_inputs,
            duration,
        )
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
