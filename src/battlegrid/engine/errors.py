"""Exceptions raised by the battlegrid engine."""


class BattlegridError(Exception):
    pass


class InvalidPlacement(BattlegridError, ValueError):
    """A ship cannot be put on the requested cells."""


class PlacementInfeasible(BattlegridError):
    """Random placement could not fit the requested number of ships."""

    def __init__(self, requested: int, placed: int, reason: str) -> None:
        super().__init__(f"Could not place {requested} ships ({placed} placed): {reason}")
        self.requested = requested
        self.placed = placed
        self.reason = reason
