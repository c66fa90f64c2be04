"""Tests for Ship domain logic."""

import pytest
from battlegrid.engine.ship import SHIP_LENGTH, Ship


def test_ship_starts_at_full_health() -> None:
    ship = Ship()
    assert ship.hit_points == ship.max_hit_points == SHIP_LENGTH
    assert not ship.is_sunk()


def test_ship_hit_and_sink() -> None:
    ship = Ship()
    for idx in range(1, SHIP_LENGTH + 1):
        assert ship.take_hit() is (idx == SHIP_LENGTH)
        assert ship.hit_points == SHIP_LENGTH - idx
    assert ship.is_sunk()


def test_sunk_ship_cannot_be_hit_again() -> None:
    ship = Ship(max_hit_points=1)
    ship.take_hit()
    with pytest.raises(ValueError):
        ship.take_hit()
    assert ship.hit_points == 0


def test_ship_needs_hit_points() -> None:
    with pytest.raises(ValueError):
        Ship(max_hit_points=0)
