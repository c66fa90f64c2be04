"""Ship domain model for the battlegrid engine."""

from __future__ import annotations

from dataclasses import dataclass, field

SHIP_LENGTH = 3


@dataclass
class Ship:
    """A horizontal ship; its id is its position in the board's ship list."""

    max_hit_points: int = SHIP_LENGTH
    hit_points: int = field(init=False)

    def __post_init__(self) -> None:
        if self.max_hit_points < 1:
            raise ValueError("A ship needs at least one hit point.")
        self.hit_points = self.max_hit_points

    def is_sunk(self) -> bool:
        return self.hit_points == 0

    def take_hit(self) -> bool:
        """Remove one hit point and return True if this sank the ship."""
        if self.is_sunk():
            raise ValueError("Ship is already sunk.")
        self.hit_points -= 1
        return self.hit_points == 0
