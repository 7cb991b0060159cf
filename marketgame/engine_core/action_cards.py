"""
Action Cards - Dispatch table and deck for player action cards.

Each card type maps to one handler with the signature

    handler(card, context) -> ActionResult

The context carries only what a card may touch: the event engine, the
trading engine, the indexes and the optional target stock. Handlers never
consume actions or remove cards from hands; the session layer does that
once a handler reports success.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
from uuid import uuid4
import logging

from ..catalog.definitions import (
    ActionCardDefinition,
    ActionCardType,
    EventTiming,
)
from .action import ActionResult, ErrorCode
from .deck import ShuffledDeck
from .events import EventEngine
from .random_source import RandomSource
from .state import ActionCard, BoardStock, MarketIndex
from .trading import TradingEngine

logger = logging.getLogger(__name__)


@dataclass
class ActionContext:
    """Everything an action card handler is allowed to read or mutate."""
    player_name: str
    events: EventEngine
    trading: TradingEngine
    indexes: dict[str, MarketIndex]
    round_number: int
    stock: BoardStock | None = None


# =============================================================================
# Handlers
# =============================================================================

def _format_effects(effects) -> str:
    return "\n".join(
        f"  {e.sector}: {'+' if e.delta >= 0 else ''}{e.delta}" for e in effects
    )


def forecast(card: ActionCard, ctx: ActionContext) -> ActionResult:
    """Reveal the next event without dealing it."""
    upcoming = ctx.events.peek_next_event()
    if upcoming is None:
        return ActionResult.failure("No upcoming events to forecast", ErrorCode.EMPTY_DECK)

    message = f"Market Forecast reveals: {upcoming.name}"
    if upcoming.effects:
        message += "\n\n📊 Price Movements:\n" + _format_effects(upcoming.effects)

    cond = upcoming.conditional_effects
    if cond is not None and cond.effects:
        when = "End of round" if cond.timing == EventTiming.END else "Next round"
        chance = round(cond.trigger.chance * 100)
        message += (
            f"\n\n⚠️ Potential Bubble ({when}, {chance}%):\n" + _format_effects(cond.effects)
        )

    return ActionResult.ok(message, event=upcoming.to_dict())


def shuffle(card: ActionCard, ctx: ActionContext) -> ActionResult:
    """Reshuffle the remaining event deck."""
    if not ctx.events.shuffle_event_deck():
        return ActionResult.failure("Event deck cannot be shuffled", ErrorCode.EMPTY_DECK)
    return ActionResult.ok("Event deck shuffled! Forecasts are now useless.")


def insider_trading(card: ActionCard, ctx: ActionContext) -> ActionResult:
    """
    Buy the target stock at a discount.

    The purchase itself spends the player's action, so the result is
    flagged with action_consumed=True.
    """
    if ctx.stock is None:
        return ActionResult.failure(
            "Must select a stock for insider trading", ErrorCode.STOCK_NOT_FOUND
        )

    result = ctx.trading.purchase_with_discount(
        ctx.player_name,
        ctx.stock,
        ctx.indexes,
        ctx.round_number,
        discount=card.effect_value,
    )
    if result.success:
        result.data["action_type"] = card.action_type.value
        result.data["action_consumed"] = True
        result.message = (
            f"{card.name}: bought {ctx.stock.name} for ${result.data['price']}"
        )
    return result


def manipulate(card: ActionCard, ctx: ActionContext) -> ActionResult:
    """Shift the target stock's sector index by the card's signed value."""
    if ctx.stock is None:
        return ActionResult.failure(
            "Must select a stock to manipulate", ErrorCode.STOCK_NOT_FOUND
        )

    index = ctx.indexes.get(ctx.stock.sector)
    if index is None:
        return ActionResult.failure(
            "Could not find related market index", ErrorCode.INDEX_NOT_FOUND
        )

    change = card.effect_value
    old_price = index.price
    new_price = index.apply_delta(change)
    verb = "increased" if change > 0 else "decreased"

    ctx.trading.log.add(
        f"🎴 {ctx.player_name} played {card.name} on {ctx.stock.name}: "
        f"{index.name} {old_price}→{new_price}"
    )

    return ActionResult.ok(
        f"{card.name} on {ctx.stock.name}! Stock price {verb} by {abs(change)}",
        index_name=index.name,
        stock_name=ctx.stock.name,
        old_price=old_price,
        new_price=new_price,
        change=change,
        action_type=card.action_type.value,
        direction="up" if change > 0 else "down",
    )


ACTION_HANDLERS: dict[ActionCardType, Callable[[ActionCard, ActionContext], ActionResult]] = {
    ActionCardType.FORECAST: forecast,
    ActionCardType.SHUFFLE: shuffle,
    ActionCardType.INSIDER_TRADING: insider_trading,
    ActionCardType.MANIPULATE: manipulate,
}


def execute_action_card(card: ActionCard, ctx: ActionContext) -> ActionResult:
    """Run the handler registered for the card's type."""
    handler = ACTION_HANDLERS.get(card.action_type)
    if handler is None:
        return ActionResult.failure(
            f"Unknown action type: {card.action_type}", ErrorCode.UNKNOWN_ACTION
        )
    logger.debug("Executing %s (%s) for %s", card.name, card.card_id, ctx.player_name)
    return handler(card, ctx)


# =============================================================================
# Deck
# =============================================================================

def new_card_id(action_type: ActionCardType) -> str:
    return f"{action_type.value}_{uuid4().hex[:9]}"


class ActionDeck:
    """The action card draw pile. Unlike the stock deck it does not regenerate."""

    def __init__(self, definitions: list[ActionCardDefinition], rng: RandomSource):
        self.definitions = list(definitions)
        self.rng = rng
        self.deck: ShuffledDeck[ActionCard] | None = None

    def initialize(self) -> None:
        cards = [
            ActionCard(definition=d, card_id=new_card_id(d.action_type))
            for d in self.definitions
        ]
        self.deck = ShuffledDeck(cards, rng=self.rng)
        logger.debug("Action deck initialized with %d cards", len(self.deck))

    def draw(self) -> ActionCard | None:
        if self.deck is None or self.deck.is_empty:
            return None
        return self.deck.deal()

    def draw_many(self, count: int) -> list[ActionCard]:
        cards = []
        for _ in range(count):
            card = self.draw()
            if card is not None:
                cards.append(card)
        return cards

    @property
    def is_empty(self) -> bool:
        return self.deck is None or self.deck.is_empty

    def __len__(self) -> int:
        return len(self.deck) if self.deck else 0
