"""
Action System - Player requests and their results.

Actions represent:
1. Trading requests (purchase, sell)
2. Action card requests (draw, play)
3. Turn control (end turn)

Every request produces an ActionResult. Invalid requests are reported
as a failed result with an error code; they never raise and never change
state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of player requests."""
    PURCHASE_STOCK = "purchase_stock"
    SELL_STOCK = "sell_stock"
    DRAW_ACTION_CARD = "draw_action_card"
    PLAY_ACTION_CARD = "play_action_card"
    END_TURN = "end_turn"


class ErrorCode(str, Enum):
    """Structured error codes for rejected requests."""
    NO_ACTIONS = "NO_ACTIONS"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    DUPLICATE_ACTION = "DUPLICATE_ACTION"
    CONFLICTING_ACTION = "CONFLICTING_ACTION"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    STOCK_NOT_FOUND = "STOCK_NOT_FOUND"
    CARD_NOT_FOUND = "CARD_NOT_FOUND"
    HAND_FULL = "HAND_FULL"
    EMPTY_DECK = "EMPTY_DECK"
    INDEX_NOT_FOUND = "INDEX_NOT_FOUND"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_OVER = "GAME_OVER"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"


@dataclass
class ActionPayload:
    """
    Parameters of a player request.

    Different action types use different fields; validation happens
    where the request is applied.
    """
    player_name: str
    stock_name: str | None = None

    # Identifies one owned unit when selling
    purchase_price: int | None = None
    purchase_round: int | None = None

    card_id: str | None = None


@dataclass
class Action:
    """A complete player request."""
    action_type: ActionType
    payload: ActionPayload

    @classmethod
    def purchase(cls, player_name: str, stock_name: str) -> Action:
        """Factory for a stock purchase."""
        return cls(
            action_type=ActionType.PURCHASE_STOCK,
            payload=ActionPayload(player_name=player_name, stock_name=stock_name),
        )

    @classmethod
    def sell(
        cls, player_name: str, stock_name: str, purchase_price: int, purchase_round: int
    ) -> Action:
        """Factory for selling one specific owned unit."""
        return cls(
            action_type=ActionType.SELL_STOCK,
            payload=ActionPayload(
                player_name=player_name,
                stock_name=stock_name,
                purchase_price=purchase_price,
                purchase_round=purchase_round,
            ),
        )

    @classmethod
    def draw_card(cls, player_name: str) -> Action:
        """Factory for drawing an action card."""
        return cls(
            action_type=ActionType.DRAW_ACTION_CARD,
            payload=ActionPayload(player_name=player_name),
        )

    @classmethod
    def play_card(cls, player_name: str, card_id: str, stock_name: str | None = None) -> Action:
        """Factory for playing an action card, optionally at a board stock."""
        return cls(
            action_type=ActionType.PLAY_ACTION_CARD,
            payload=ActionPayload(
                player_name=player_name, card_id=card_id, stock_name=stock_name
            ),
        )

    @classmethod
    def end_turn(cls, player_name: str) -> Action:
        """Factory for ending the turn early."""
        return cls(
            action_type=ActionType.END_TURN,
            payload=ActionPayload(player_name=player_name),
        )


@dataclass
class ActionResult:
    """
    Result of a player request or an action card.

    Contains:
    - Whether it succeeded
    - A human-readable message (the reason when it failed)
    - An error code when it failed
    - Extra data for the client (new cash, portfolio, price moves, ...)
    """
    success: bool
    message: str = ""
    error_code: ErrorCode | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, message: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, message=message, error_code=error_code)

    @classmethod
    def ok(cls, message: str = "", **data: Any) -> ActionResult:
        """Create a success result."""
        return cls(success=True, message=message, data=data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "error_code": self.error_code.value if self.error_code else None,
            "data": self.data,
        }
