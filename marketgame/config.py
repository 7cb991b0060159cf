"""Game configuration.

Defaults match the classic game. Every field can be overridden with a
``MARKET_<FIELD>`` environment variable, e.g. ``MARKET_MAX_ROUNDS=8``.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

ENV_PREFIX = "MARKET_"


class GameSettings(BaseModel):
    """Tunable rules for one game session."""

    max_rounds: int = Field(
        default=6,
        ge=1,
        description="The game ends after this round's end-of-round sequence.",
    )
    actions_per_turn: int = Field(
        default=2,
        ge=1,
        description="Actions granted at the start of each player's turn.",
    )
    max_board_stocks: int = Field(
        default=6,
        ge=1,
        description="Upper bound on stocks offered for purchase at once.",
    )
    new_stocks_per_round: int = Field(
        default=2,
        ge=0,
        description="Fresh stocks dealt to the board at each round boundary.",
    )
    initial_board_stocks: int = Field(
        default=3,
        ge=1,
        description="Stocks dealt to the board when the game starts.",
    )
    starting_cash: int = Field(
        default=40,
        ge=0,
        description="Cash each player starts with.",
    )
    max_hand_size: int = Field(
        default=4,
        ge=0,
        description="Maximum action cards a player may hold.",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the session's random source. None draws a fresh seed.",
    )

    @classmethod
    def from_env(cls, **overrides) -> GameSettings:
        """Build settings from ``MARKET_*`` environment variables plus explicit overrides."""
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
