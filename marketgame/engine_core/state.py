"""
Game State - Mutable runtime state for one game session.

Design principles:
- One instance of each structure per session, mutated in place
- Engines receive references to the same objects, never copies
- Runtime wrappers (ActiveEvent, OwnedStock, BoardStock, ActionCard)
  hold an immutable catalog definition plus their own mutable fields
- Serializable via to_dict() for snapshots and broadcasts
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..catalog.definitions import (
    ActionCardDefinition,
    EventDefinition,
    EventTiming,
    IndexDefinition,
    PriceEffect,
    ProbabilityTrigger,
    StockDefinition,
)
from .random_source import RandomSource


class GamePhase(Enum):
    """High-level game phases."""
    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class EventStatus(Enum):
    """Lifecycle of a drawn event."""
    PENDING = "pending"  # Drawn, initial effects not yet applied
    ACTIVE = "active"  # Initial effects applied, conditional effects outstanding
    RESOLVED = "resolved"  # All effects done


class StockAction(Enum):
    """Per-turn lock recorded against a stock name."""
    BUY = "buy"
    SELL = "sell"


# =============================================================================
# Market indexes
# =============================================================================

@dataclass
class MarketIndex:
    """A sector index. Its price never drops below 1."""
    name: str
    price: int
    emoji: str = "📈"
    description: str = "Market Index"

    def __post_init__(self):
        if self.price < 1:
            self.price = 1

    def apply_delta(self, delta: int) -> int:
        """Shift the price by `delta`, clamped to a floor of 1. Returns the new price."""
        self.price = max(1, self.price + delta)
        return self.price

    @classmethod
    def from_definition(cls, definition: IndexDefinition, rng: RandomSource) -> MarketIndex:
        price = rng.next_int(definition.min_start_price, definition.max_start_price)
        return cls(
            name=definition.name,
            price=price,
            emoji=definition.emoji,
            description=definition.description,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "price": self.price,
            "emoji": self.emoji,
            "description": self.description,
        }


@dataclass
class IndexChange:
    """Outcome of applying one price effect to the indexes."""
    sector: str
    delta: int
    old_price: int | None = None
    new_price: int | None = None
    error: str | None = None

    def describe(self) -> str:
        if self.error:
            return f"{self.sector}: ERROR"
        sign = "+" if self.delta >= 0 else ""
        return f"{self.sector} {sign}{self.delta} ({self.old_price}→{self.new_price})"

    def to_dict(self) -> dict[str, Any]:
        data = {"sector": self.sector, "delta": self.delta}
        if self.error:
            data["error"] = self.error
        else:
            data["old_price"] = self.old_price
            data["new_price"] = self.new_price
        return data


def apply_price_effects(
    effects: tuple[PriceEffect, ...] | list[PriceEffect],
    indexes: dict[str, MarketIndex],
) -> list[IndexChange]:
    """Apply each effect to the matching index by name."""
    changes = []
    for effect in effects:
        index = indexes.get(effect.sector)
        if index is None:
            changes.append(IndexChange(
                sector=effect.sector,
                delta=effect.delta,
                error="Index not found",
            ))
            continue
        old_price = index.price
        new_price = index.apply_delta(effect.delta)
        changes.append(IndexChange(
            sector=effect.sector,
            delta=effect.delta,
            old_price=old_price,
            new_price=new_price,
        ))
    return changes


# =============================================================================
# Events
# =============================================================================

@dataclass
class ConditionalOutcome:
    """Result of evaluating an event's conditional trigger."""
    event: ActiveEvent
    triggered: bool
    roll: float | int | None = None
    changes: list[IndexChange] = field(default_factory=list)
    rounds_active: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event.to_dict(),
            "triggered": self.triggered,
            "roll": self.roll,
            "changes": [c.to_dict() for c in self.changes],
            "rounds_active": self.rounds_active,
        }


@dataclass(eq=False)
class ActiveEvent:
    """
    A drawn event card with its lifecycle state.

    PENDING -> ACTIVE    first application, event has conditional effects
    PENDING -> RESOLVED  first application, no conditional effects
    ACTIVE  -> RESOLVED  conditional trigger fired
    """
    definition: EventDefinition
    status: EventStatus = EventStatus.PENDING
    rounds_active: int = 0

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def description(self) -> str:
        return self.definition.description

    @property
    def timing(self) -> EventTiming:
        return self.definition.timing

    @property
    def effects(self) -> tuple[PriceEffect, ...]:
        return self.definition.effects

    @property
    def conditional_effects(self):
        return self.definition.conditional_effects

    def apply_effects(self, indexes: dict[str, MarketIndex]) -> list[IndexChange]:
        """Apply the initial effects and advance out of PENDING."""
        changes = apply_price_effects(self.effects, indexes)
        if self.status == EventStatus.PENDING:
            self.status = (
                EventStatus.ACTIVE if self.conditional_effects else EventStatus.RESOLVED
            )
        return changes

    def apply_conditional_effects(
        self, indexes: dict[str, MarketIndex], rng: RandomSource
    ) -> ConditionalOutcome:
        """Roll the trigger; on success apply the follow-on effects and resolve."""
        cond = self.conditional_effects
        if cond is None or self.status != EventStatus.ACTIVE:
            return ConditionalOutcome(event=self, triggered=False, rounds_active=self.rounds_active)

        trigger = cond.trigger
        if isinstance(trigger, ProbabilityTrigger):
            roll = rng.next_float()
            triggered = roll < trigger.probability
        else:
            roll = rng.next_int(trigger.min_value, trigger.max_value)
            triggered = roll in trigger.success

        if not triggered:
            return ConditionalOutcome(
                event=self, triggered=False, roll=roll, rounds_active=self.rounds_active
            )

        changes = apply_price_effects(cond.effects, indexes)
        self.status = EventStatus.RESOLVED
        return ConditionalOutcome(
            event=self,
            triggered=True,
            roll=roll,
            changes=changes,
            rounds_active=self.rounds_active,
        )

    def should_discard(self) -> bool:
        return (
            self.status == EventStatus.RESOLVED
            and self.definition.discard_on_conditional_trigger
        )

    def __str__(self) -> str:
        status = f" [{self.status.value.upper()}]" if self.status != EventStatus.PENDING else ""
        return (
            f"{self.name} [{self.timing.value.upper()}]{status} — "
            f"{self.definition.effects_summary()} — {self.description}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = self.definition.to_dict()
        data["status"] = self.status.value
        data["rounds_active"] = self.rounds_active
        return data


# =============================================================================
# Stocks
# =============================================================================

@dataclass
class BoardStock:
    """A stock currently offered for purchase."""
    definition: StockDefinition
    is_carryover: bool = False

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def base_cost(self) -> int:
        return self.definition.base_cost

    @property
    def growth(self) -> int:
        return self.definition.growth

    @property
    def dividend(self) -> int:
        return self.definition.dividend

    @property
    def sector(self) -> str:
        return self.definition.sector

    def to_dict(self) -> dict[str, Any]:
        data = self.definition.to_dict()
        data["is_carryover"] = self.is_carryover
        return data


@dataclass
class OwnedStock:
    """
    One unit of a stock in a player's portfolio.

    A player may hold several units of the same stock bought at different
    prices; a unit is identified by (name, purchase_price, purchase_round).
    """
    definition: StockDefinition
    purchase_price: int
    purchase_round: int

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def base_cost(self) -> int:
        return self.definition.base_cost

    @property
    def growth(self) -> int:
        return self.definition.growth

    @property
    def dividend(self) -> int:
        return self.definition.dividend

    @property
    def sector(self) -> str:
        return self.definition.sector

    def matches(self, ref: OwnedStockRef | OwnedStock) -> bool:
        return (
            self.name == ref.name
            and self.purchase_price == ref.purchase_price
            and self.purchase_round == ref.purchase_round
        )

    def to_dict(self) -> dict[str, Any]:
        data = self.definition.to_dict()
        data["purchase_price"] = self.purchase_price
        data["purchase_round"] = self.purchase_round
        return data


@dataclass(frozen=True)
class OwnedStockRef:
    """Reference to a specific owned unit, as sent by a client."""
    name: str
    purchase_price: int
    purchase_round: int


# =============================================================================
# Action cards
# =============================================================================

@dataclass
class ActionCard:
    """An action card instance held in a hand."""
    definition: ActionCardDefinition
    card_id: str

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def action_type(self):
        return self.definition.action_type

    @property
    def effect_value(self) -> int:
        return self.definition.effect_value

    def to_dict(self) -> dict[str, Any]:
        data = self.definition.to_dict()
        data["id"] = self.card_id
        return data


# =============================================================================
# Players
# =============================================================================

@dataclass
class DividendPayment:
    """Dividends credited to one player at a round boundary."""
    player_name: str
    total: int
    by_stock: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "player_name": self.player_name,
            "total": self.total,
            "by_stock": [{"stock_name": n, "dividend": d} for n, d in self.by_stock],
        }


@dataclass
class PlayerLedger:
    """Cash, holdings, per-turn budget and identity of one player."""
    name: str
    cash: int
    portfolio: list[OwnedStock] = field(default_factory=list)
    actions_remaining: int = 0
    stock_actions: dict[str, StockAction] = field(default_factory=dict)
    action_cards: list[ActionCard] = field(default_factory=list)
    color: str = "#666666"
    emoji: str = "🎮"

    @property
    def has_actions(self) -> bool:
        return self.actions_remaining > 0

    def consume_action(self) -> bool:
        """Spend one action. Returns False (and changes nothing) when none are left."""
        if self.actions_remaining <= 0:
            return False
        self.actions_remaining -= 1
        return True

    def reset_turn(self, actions_per_turn: int) -> None:
        """Start of this player's turn: refill actions and clear stock locks."""
        self.actions_remaining = actions_per_turn
        self.stock_actions = {}

    def stock_action(self, stock_name: str) -> StockAction | None:
        return self.stock_actions.get(stock_name)

    def record_stock_action(self, stock_name: str, action: StockAction) -> None:
        self.stock_actions[stock_name] = action

    def find_owned(self, ref: OwnedStockRef | OwnedStock) -> OwnedStock | None:
        for owned in self.portfolio:
            if owned.matches(ref):
                return owned
        return None

    def remove_owned(self, ref: OwnedStockRef | OwnedStock) -> OwnedStock | None:
        """Remove the first unit matching `ref`. Returns it, or None if not held."""
        for i, owned in enumerate(self.portfolio):
            if owned.matches(ref):
                return self.portfolio.pop(i)
        return None

    def find_card(self, card_id: str) -> ActionCard | None:
        for card in self.action_cards:
            if card.card_id == card_id:
                return card
        return None

    def remove_card(self, card_id: str) -> bool:
        card = self.find_card(card_id)
        if card is None:
            return False
        self.action_cards.remove(card)
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cash": self.cash,
            "portfolio": [s.to_dict() for s in self.portfolio],
            "actions_remaining": self.actions_remaining,
            "action_cards": [c.to_dict() for c in self.action_cards],
            "color": self.color,
            "emoji": self.emoji,
        }


PLAYER_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A", "#98D8C8",
    "#F7DC6F", "#BB8FCE", "#85C1E2", "#F8B739", "#52BE80",
]

PLAYER_EMOJIS = [
    "🎮", "🎯", "🎲", "🎪", "🎨", "🎭", "🎸", "🎺", "🎻", "🎤",
    "🏆", "⚽", "🏀", "🏈", "⚾", "🎾", "🏐", "🏉", "🎱", "🏓",
    "🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼", "🐨", "🐯",
]


class PlayerRegistry:
    """
    All player ledgers of a session.

    Ownership counts are computed live across every portfolio, so stock
    prices always reflect current scarcity.
    """

    def __init__(self, rng: RandomSource):
        self.rng = rng
        self._ledgers: dict[str, PlayerLedger] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._ledgers

    def __len__(self) -> int:
        return len(self._ledgers)

    @property
    def names(self) -> list[str]:
        return list(self._ledgers)

    @property
    def ledgers(self) -> list[PlayerLedger]:
        return list(self._ledgers.values())

    def get(self, name: str) -> PlayerLedger | None:
        return self._ledgers.get(name)

    def add_player(self, name: str, starting_cash: int) -> PlayerLedger:
        """Add a player, or return the existing ledger if already present."""
        if name in self._ledgers:
            return self._ledgers[name]
        ledger = PlayerLedger(
            name=name,
            cash=starting_cash,
            color=self._pick_unused([p.color for p in self.ledgers], PLAYER_COLORS),
            emoji=self._pick_unused([p.emoji for p in self.ledgers], PLAYER_EMOJIS),
        )
        self._ledgers[name] = ledger
        return ledger

    def remove_player(self, name: str) -> PlayerLedger | None:
        return self._ledgers.pop(name, None)

    def _pick_unused(self, used: list[str], pool: list[str]) -> str:
        unused = [item for item in pool if item not in used]
        return self.rng.choice(unused or pool)

    def ownership_count(self, stock_name: str) -> int:
        """How many units of `stock_name` are held across all players."""
        return sum(
            1
            for ledger in self._ledgers.values()
            for owned in ledger.portfolio
            if owned.name == stock_name
        )

    def ownership_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for ledger in self._ledgers.values():
            for owned in ledger.portfolio:
                counts[owned.name] = counts.get(owned.name, 0) + 1
        return counts

    def pay_dividends(self, round_number: int) -> list[DividendPayment]:
        """Credit dividends on even rounds. Odd rounds pay nothing."""
        if round_number % 2 != 0:
            return []

        payments = []
        for ledger in self._ledgers.values():
            by_stock = [(s.name, s.dividend) for s in ledger.portfolio if s.dividend > 0]
            total = sum(d for _, d in by_stock)
            if total > 0:
                ledger.cash += total
                payments.append(DividendPayment(
                    player_name=ledger.name,
                    total=total,
                    by_stock=by_stock,
                ))
        return payments


# =============================================================================
# Rounds
# =============================================================================

@dataclass
class RoundState:
    """Round counter and turn order. The order rotates, it is never reshuffled mid-game."""
    round_number: int = 1
    current_turn_index: int = 0
    turn_order: list[str] = field(default_factory=list)
    phase: GamePhase = GamePhase.SETUP

    @property
    def current_player(self) -> str | None:
        if not self.turn_order:
            return None
        return self.turn_order[self.current_turn_index % len(self.turn_order)]

    def rotate(self) -> list[str]:
        """First player moves to the end."""
        if len(self.turn_order) > 1:
            self.turn_order.append(self.turn_order.pop(0))
        return self.turn_order

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "current_turn_index": self.current_turn_index,
            "current_player": self.current_player,
            "turn_order": list(self.turn_order),
            "phase": self.phase.value,
        }
