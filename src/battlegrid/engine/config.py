"""Game configuration: board dimensions, fleet size and placement budget."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from .board import DEFAULT_HEIGHT, DEFAULT_MAX_ATTEMPTS, DEFAULT_WIDTH

DEFAULT_SHIP_COUNT = 2

_ENV_NAMES = {
    "width": "BATTLEGRID_BOARD_WIDTH",
    "height": "BATTLEGRID_BOARD_HEIGHT",
    "ship_count": "BATTLEGRID_SHIP_COUNT",
    "max_placement_attempts": "BATTLEGRID_MAX_PLACEMENT_ATTEMPTS",
}


class GameConfig(BaseModel):
    """Settings for a single game."""

    width: int = Field(default=DEFAULT_WIDTH, ge=1, le=26)
    height: int = Field(default=DEFAULT_HEIGHT, ge=1)
    ship_count: int = Field(default=DEFAULT_SHIP_COUNT, ge=0)
    max_placement_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Build a config from `BATTLEGRID_*` env vars; None-valued overrides are ignored."""
        data: Dict[str, Any] = {}
        for field, env_name in _ENV_NAMES.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field] = value.strip()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache the game config from the environment."""

    return GameConfig.from_env()
