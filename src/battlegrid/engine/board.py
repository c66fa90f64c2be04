"""Single-player board ("field") holding cells, ships and the fire state machine."""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import cast

from battlegrid.telemetry import get_meter, get_tracer

from .errors import InvalidPlacement, PlacementInfeasible
from .ship import SHIP_LENGTH, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("battlegrid.engine.board")
meter = get_meter("battlegrid.engine.board")

PLACEMENT_COUNTER = meter.create_counter(
    "battlegrid_engine_ship_placements",
    unit="1",
    description="Number of ship placements by outcome",
)

PLACEMENT_ATTEMPTS = meter.create_histogram(
    "battlegrid_engine_placement_attempts",
    unit="1",
    description="Random draws needed to place a fleet",
)

SHOT_COUNTER = meter.create_counter(
    "battlegrid_engine_shots",
    unit="1",
    description="Shots received by a board",
)

DEFAULT_WIDTH = 10
DEFAULT_HEIGHT = 10
DEFAULT_MAX_ATTEMPTS = 10_000

_COORDINATE_RE = re.compile(r"([A-Za-z])([0-9]+)")


class CellState(Enum):
    """Status of a single grid cell."""

    EMPTY = "empty"
    EMPTY_HIT = "empty_hit"
    OCCUPIED = "occupied"
    OCCUPIED_HIT = "occupied_hit"

    @property
    def is_hit(self) -> bool:
        return self in (CellState.EMPTY_HIT, CellState.OCCUPIED_HIT)

    @property
    def has_ship(self) -> bool:
        return self in (CellState.OCCUPIED, CellState.OCCUPIED_HIT)


@dataclass(frozen=True)
class Cell:
    """Immutable cell value; `ship_id` is set exactly for the occupied states."""

    state: CellState = CellState.EMPTY
    ship_id: int | None = None

    def __post_init__(self) -> None:
        if self.state.has_ship != (self.ship_id is not None):
            raise ValueError(f"{self.state.name} cell with ship_id={self.ship_id!r}")


EMPTY_CELL = Cell()
EMPTY_HIT_CELL = Cell(CellState.EMPTY_HIT)


class FireResult(Enum):
    """Outcome of firing at a valid coordinate."""

    MISS = "miss"
    HIT = "hit"
    SINK = "sink"


def column_label(col: int) -> str:
    """Return the letter used for column `col` (0 -> 'A')."""
    return chr(ord("A") + col)


@dataclass
class Board:
    """A `width` x `height` grid stored row-major, plus the ships placed on it."""

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    ships: list[Ship] = field(default_factory=list, init=False)
    _cells: list[Cell] = field(init=False, repr=False)
    _alive_ships: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError("Board dimensions must be at least 1x1.")
        self._cells = [EMPTY_CELL] * (self.width * self.height)

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def alive_ships(self) -> int:
        """Number of ships with hit points left."""
        return self._alive_ships

    @property
    def cells(self) -> tuple[Cell, ...]:
        return tuple(self._cells)

    def cell(self, index: int) -> Cell:
        self._check_index(index)
        return self._cells[index]

    def is_game_over(self) -> bool:
        return self._alive_ships == 0

    # Coordinates

    def coordinates_to_index(self, text: str) -> int | None:
        """Translate text like ``"B4"`` into a flat cell index.

        The letter picks the column and the number the 1-based row. Returns
        None for malformed text or a cell outside the board.
        """
        match = _COORDINATE_RE.fullmatch(text)
        if match is None:
            return None
        col = ord(match.group(1).upper()) - ord("A")
        row = int(match.group(2)) - 1
        if not (0 <= col < self.width and 0 <= row < self.height):
            return None
        return row * self.width + col

    def index_to_coordinates(self, index: int) -> str:
        """Inverse of :meth:`coordinates_to_index`."""
        self._check_index(index)
        row, col = divmod(index, self.width)
        return f"{column_label(col)}{row + 1}"

    # Placement

    def can_place_ship(self, start: int) -> bool:
        """Check that a ship starting at `start` stays in one row on empty cells."""
        if not 0 <= start < self.size:
            return False
        if start % self.width > self.width - SHIP_LENGTH:
            return False
        return all(
            self._cells[index].state is CellState.EMPTY
            for index in range(start, start + SHIP_LENGTH)
        )

    def place_ship(self, start: int) -> int:
        """Place one ship on the cells `start`..`start + 2` and return its id."""
        if not self.can_place_ship(start):
            PLACEMENT_COUNTER.add(1, attributes={"result": "failed", "mode": "manual"})
            logger.warning("ship_placement_failed", extra={"start": start})
            raise InvalidPlacement(f"A ship cannot start at cell {start}.")
        ship_id = self._occupy(start)
        PLACEMENT_COUNTER.add(1, attributes={"result": "success", "mode": "manual"})
        logger.info("ship_placed", extra={"ship_id": ship_id, "start": start})
        return ship_id

    def place_ships(
        self,
        count: int,
        rng: random.Random | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        """Randomly place `count` ships by rejection sampling.

        Raises PlacementInfeasible when the board is too small or when
        `max_attempts` draws are used up; ships placed by a failed call are
        removed again.
        """
        if count < 0:
            raise ValueError("Ship count cannot be negative.")
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive.")
        rng = rng or random.Random()

        with tracer.start_as_current_span("board.place_ships") as span:
            span.set_attribute("board.width", self.width)
            span.set_attribute("board.height", self.height)
            span.set_attribute("ships.requested", count)
            if count == 0:
                return

            capacity = self.height * (self.width // SHIP_LENGTH) - len(self.ships)
            if self.width < SHIP_LENGTH or count > capacity:
                PLACEMENT_COUNTER.add(1, attributes={"result": "infeasible", "mode": "random"})
                logger.error(
                    "ship_placement_infeasible",
                    extra={"requested": count, "capacity": max(capacity, 0)},
                )
                raise PlacementInfeasible(count, 0, "the board is too small")

            starts: list[int] = []
            attempts = 0
            while len(starts) < count:
                if attempts >= max_attempts:
                    self._remove_ships(starts)
                    span.set_attribute("placement.attempts", attempts)
                    PLACEMENT_COUNTER.add(
                        1, attributes={"result": "exhausted", "mode": "random"}
                    )
                    logger.error(
                        "ship_placement_exhausted",
                        extra={"requested": count, "placed": len(starts), "attempts": attempts},
                    )
                    raise PlacementInfeasible(
                        count, len(starts), f"no free run found in {attempts} attempts"
                    )
                attempts += 1
                start = rng.randrange(self.size - (SHIP_LENGTH - 1))
                if not self.can_place_ship(start):
                    continue
                self._occupy(start)
                starts.append(start)
                logger.debug("random_ship_placed", extra={"start": start, "attempts": attempts})

            span.set_attribute("placement.attempts", attempts)
            PLACEMENT_COUNTER.add(count, attributes={"result": "success", "mode": "random"})
            PLACEMENT_ATTEMPTS.record(attempts, attributes={"ships": count})
            logger.info("fleet_placed", extra={"ships": count, "attempts": attempts})

    def _occupy(self, start: int) -> int:
        ship_id = len(self.ships)
        for index in range(start, start + SHIP_LENGTH):
            self._cells[index] = Cell(CellState.OCCUPIED, ship_id)
        self.ships.append(Ship())
        self._alive_ships += 1
        return ship_id

    def _remove_ships(self, starts: list[int]) -> None:
        """Undo the most recent placements at `starts` (still unhit)."""
        for start in starts:
            for index in range(start, start + SHIP_LENGTH):
                self._cells[index] = EMPTY_CELL
        del self.ships[len(self.ships) - len(starts):]
        self._alive_ships -= len(starts)

    # Firing

    def fire(self, coords: str) -> FireResult | None:
        """Fire at a text coordinate; None means the coordinate was invalid."""
        index = self.coordinates_to_index(coords)
        if index is None:
            SHOT_COUNTER.add(1, attributes={"outcome": "invalid"})
            logger.debug("shot_invalid", extra={"coords": coords})
            return None
        return self.fire_at(index)

    def fire_at(self, index: int) -> FireResult:
        self._check_index(index)
        with tracer.start_as_current_span("board.fire") as span:
            span.set_attribute("shot.index", index)
            cell = self._cells[index]

            if cell.state is CellState.OCCUPIED:
                ship_id = cast(int, cell.ship_id)
                self._cells[index] = Cell(CellState.OCCUPIED_HIT, ship_id)
                if self.ships[ship_id].take_hit():
                    self._alive_ships -= 1
                    result = FireResult.SINK
                else:
                    result = FireResult.HIT
            elif cell.state is CellState.OCCUPIED_HIT:
                result = FireResult.HIT
            else:
                self._cells[index] = EMPTY_HIT_CELL
                result = FireResult.MISS

            span.set_attribute("shot.outcome", result.value)
            SHOT_COUNTER.add(1, attributes={"outcome": result.value})
            logger.info(
                "shot_fired",
                extra={
                    "index": index,
                    "outcome": result.value,
                    "ship_id": cell.ship_id,
                    "alive_ships": self._alive_ships,
                },
            )
            return result

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.size:
            raise IndexError(f"Cell index {index} outside a board of {self.size} cells.")
