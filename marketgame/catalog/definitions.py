"""
Catalog Definitions - The static data a game is played with.

A catalog holds:
- The four sector indexes and their starting prices
- Stock definitions (base cost, dividend, growth, sector)
- Market event definitions, including bubble follow-on effects
- Action card definitions

Definitions are immutable. Runtime state (owned stocks, active events,
cards in hand) wraps a definition instead of mutating it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class EventTiming(Enum):
    """When an event (or its follow-on) takes effect within a round."""
    START = "start"
    END = "end"


class ActionCardType(Enum):
    """Closed set of action card kinds. Each has exactly one handler."""
    FORECAST = "forecast"
    SHUFFLE = "shuffle"
    INSIDER_TRADING = "insider_trading"
    MANIPULATE = "manipulate"


@dataclass(frozen=True)
class IndexDefinition:
    """A sector index and the range its starting price is drawn from."""
    name: str
    emoji: str = "📈"
    description: str = "Market Index"
    min_start_price: int = 6
    max_start_price: int = 7


@dataclass(frozen=True)
class PriceEffect:
    """A signed price change applied to one sector index."""
    sector: str
    delta: int

    def describe(self) -> str:
        sign = "+" if self.delta >= 0 else ""
        return f"{self.sector} {sign}{self.delta}"

    def to_dict(self) -> dict[str, Any]:
        return {"sector": self.sector, "delta": self.delta}


@dataclass(frozen=True)
class ProbabilityTrigger:
    """Triggers when a uniform draw in [0, 1) is below `probability`."""
    probability: float

    @property
    def chance(self) -> float:
        return self.probability

    def describe(self) -> str:
        return f"{round(self.probability * 100)}%"

    def to_dict(self) -> dict[str, Any]:
        return {"probability": self.probability}


@dataclass(frozen=True)
class DieRollTrigger:
    """Triggers when a uniform integer roll in [min_value, max_value] is in `success`."""
    min_value: int
    max_value: int
    success: tuple[int, ...]

    @property
    def sides(self) -> int:
        return self.max_value - self.min_value + 1

    @property
    def chance(self) -> float:
        return len(set(self.success)) / self.sides

    def describe(self) -> str:
        return f"roll {'/'.join(str(s) for s in self.success)} on d{self.sides}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "die_roll": {
                "min": self.min_value,
                "max": self.max_value,
                "success": list(self.success),
            }
        }


Trigger = Union[ProbabilityTrigger, DieRollTrigger]


@dataclass(frozen=True)
class ConditionalEffects:
    """Follow-on effects of an event that fire only when the trigger succeeds."""
    timing: EventTiming
    trigger: Trigger
    effects: tuple[PriceEffect, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "timing": self.timing.value,
            "effects": [e.to_dict() for e in self.effects],
        }
        data.update(self.trigger.to_dict())
        return data


@dataclass(frozen=True)
class EventDefinition:
    """
    A market event card.

    `effects` are the initial effects. Events with `conditional_effects`
    are bubbles: their initial effects are reapplied every round until
    the trigger fires.
    """
    name: str
    description: str = "Market Event"
    timing: EventTiming = EventTiming.END
    effects: tuple[PriceEffect, ...] = ()
    conditional_effects: ConditionalEffects | None = None
    discard_on_conditional_trigger: bool = False

    @property
    def is_bubble(self) -> bool:
        return self.conditional_effects is not None

    def effects_summary(self) -> str:
        """One-line summary of what the event does."""
        if not self.effects:
            return "No effects"
        summary = ", ".join(e.describe() for e in self.effects)
        if self.conditional_effects:
            cond = ", ".join(e.describe() for e in self.conditional_effects.effects)
            summary += f" | THEN {cond} ({self.conditional_effects.trigger.describe()})"
        return summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "timing": self.timing.value,
            "effects": [e.to_dict() for e in self.effects],
            "conditional_effects": (
                self.conditional_effects.to_dict() if self.conditional_effects else None
            ),
            "discard_on_conditional_trigger": self.discard_on_conditional_trigger,
        }


@dataclass(frozen=True)
class StockDefinition:
    """A company that can be offered on the board and bought by players."""
    name: str
    base_cost: int
    dividend: int
    growth: int
    sector: str
    description: str = "Stock"
    archetype: str = "None"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "base_cost": self.base_cost,
            "dividend": self.dividend,
            "growth": self.growth,
            "sector": self.sector,
            "description": self.description,
            "archetype": self.archetype,
        }


@dataclass(frozen=True)
class ActionCardDefinition:
    """
    An action card.

    `effect_value` is the discount for insider trading and the signed
    index change for manipulation cards.
    """
    name: str
    action_type: ActionCardType
    description: str = "Action Card"
    target_type: str = "none"  # "none" or "stock"
    effect_value: int = 0

    @property
    def needs_target(self) -> bool:
        return self.target_type != "none"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "action_type": self.action_type.value,
            "target_type": self.target_type,
            "effect_value": self.effect_value,
        }


@dataclass
class Catalog:
    """
    Complete catalog for one game.

    Duplicate entries are meaningful: the action card list holds one
    entry per physical card.
    """
    catalog_id: str
    indexes: list[IndexDefinition] = field(default_factory=list)
    stocks: list[StockDefinition] = field(default_factory=list)
    events: list[EventDefinition] = field(default_factory=list)
    action_cards: list[ActionCardDefinition] = field(default_factory=list)

    @property
    def sector_names(self) -> set[str]:
        return {index.name for index in self.indexes}
