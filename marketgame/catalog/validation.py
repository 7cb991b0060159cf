"""
Catalog Validation - Load-time checks for catalog data.

Validates that:
1. Exactly four uniquely named sector indexes exist
2. Stocks have integer costs, non-negative dividends and positive growth
3. Event effects reference known sectors with integer deltas
4. Conditional triggers are well-formed (probability in [0, 1],
   die roll bounds with min < max and success values inside the range)
5. Action cards carry a known action type

Malformed catalogs must be rejected before any session starts, never
during play.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any
import json
import logging
import math

from .definitions import (
    ActionCardDefinition,
    ActionCardType,
    Catalog,
    ConditionalEffects,
    DieRollTrigger,
    EventDefinition,
    EventTiming,
    IndexDefinition,
    PriceEffect,
    ProbabilityTrigger,
    StockDefinition,
)

logger = logging.getLogger(__name__)

REQUIRED_INDEX_COUNT = 4


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_catalog(catalog: Catalog) -> ValidationResult:
    """
    Validate a complete catalog.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not catalog.catalog_id:
        errors.append("catalog_id is required")

    # Indexes
    index_names = [index.name for index in catalog.indexes]
    if len(catalog.indexes) != REQUIRED_INDEX_COUNT:
        errors.append(
            f"Catalog must define exactly {REQUIRED_INDEX_COUNT} indexes, "
            f"got {len(catalog.indexes)}"
        )
    if len(set(index_names)) != len(index_names):
        errors.append("Index names must be unique")
    for index in catalog.indexes:
        errors.extend(_validate_index(index))

    sectors = set(index_names)

    for stock in catalog.stocks:
        errors.extend(_validate_stock(stock, sectors))

    for event in catalog.events:
        errors.extend(_validate_event(event, sectors))

    for card in catalog.action_cards:
        errors.extend(_validate_action_card(card))

    if not catalog.stocks:
        errors.append("No stocks defined")
    if not catalog.events:
        errors.append("No events defined")
    if not catalog.action_cards:
        warnings.append("No action cards defined - draw action will always fail")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_index(index: IndexDefinition) -> list[str]:
    errors = []
    if not index.name:
        errors.append("Index has empty name")
    if not (_is_int(index.min_start_price) and _is_int(index.max_start_price)):
        errors.append(f"Index '{index.name}': start prices must be integers")
    elif index.min_start_price < 1 or index.max_start_price < index.min_start_price:
        errors.append(
            f"Index '{index.name}': start price range must satisfy 1 <= min <= max"
        )
    return errors


def _validate_stock(stock: StockDefinition, sectors: set[str]) -> list[str]:
    errors = []
    if not stock.name:
        errors.append("Stock has empty name")
    if not _is_int(stock.base_cost):
        errors.append(f"Stock '{stock.name}': base_cost must be an integer")
    if not _is_int(stock.dividend) or stock.dividend < 0:
        errors.append(f"Stock '{stock.name}': dividend must be a non-negative integer")
    if not _is_int(stock.growth) or stock.growth <= 0:
        errors.append(f"Stock '{stock.name}': growth must be a positive integer")
    if stock.sector not in sectors:
        errors.append(f"Stock '{stock.name}' references unknown sector '{stock.sector}'")
    return errors


def _validate_effects(effects, sectors: set[str], owner: str) -> list[str]:
    errors = []
    for effect in effects:
        if effect.sector not in sectors:
            errors.append(f"{owner}: effect references unknown sector '{effect.sector}'")
        if not _is_int(effect.delta):
            errors.append(f"{owner}: price delta must be an integer, got {effect.delta!r}")
    return errors


def _validate_event(event: EventDefinition, sectors: set[str]) -> list[str]:
    owner = f"Event '{event.name}'"
    errors = []
    if not event.name:
        errors.append("Event has empty name")
    errors.extend(_validate_effects(event.effects, sectors, owner))

    cond = event.conditional_effects
    if cond is None:
        if event.discard_on_conditional_trigger:
            errors.append(f"{owner}: discard flag set without conditional effects")
        return errors

    errors.extend(_validate_effects(cond.effects, sectors, f"{owner} (conditional)"))

    trigger = cond.trigger
    if isinstance(trigger, ProbabilityTrigger):
        p = trigger.probability
        if isinstance(p, bool) or not isinstance(p, (int, float)) or not math.isfinite(p):
            errors.append(f"{owner}: probability must be a finite number")
        elif not 0 <= p <= 1:
            errors.append(f"{owner}: probability must be between 0 and 1, got {p}")
    elif isinstance(trigger, DieRollTrigger):
        if not (_is_int(trigger.min_value) and _is_int(trigger.max_value)):
            errors.append(f"{owner}: die roll bounds must be integers")
        elif trigger.min_value >= trigger.max_value:
            errors.append(f"{owner}: die roll requires min < max")
        elif not trigger.success:
            errors.append(f"{owner}: die roll needs at least one success value")
        elif not all(
            _is_int(s) and trigger.min_value <= s <= trigger.max_value
            for s in trigger.success
        ):
            errors.append(f"{owner}: die roll success values must be integers within min-max")
    else:
        errors.append(f"{owner}: conditional effects need a probability or a die roll")
    return errors


TARGETED_ACTIONS = frozenset({ActionCardType.INSIDER_TRADING, ActionCardType.MANIPULATE})


def _validate_action_card(card: ActionCardDefinition) -> list[str]:
    errors = []
    if not card.name:
        errors.append("Action card has empty name")
    if not isinstance(card.action_type, ActionCardType):
        errors.append(f"Action card '{card.name}' has unknown action type")
    if card.target_type not in {"none", "stock"}:
        errors.append(f"Action card '{card.name}' has unknown target type '{card.target_type}'")
    elif card.action_type in TARGETED_ACTIONS and card.target_type != "stock":
        errors.append(f"Action card '{card.name}' ({card.action_type.value}) must target a stock")
    if not _is_int(card.effect_value):
        errors.append(f"Action card '{card.name}': effect_value must be an integer")
    return errors


# =============================================================================
# Loading from raw data (JSON)
# =============================================================================

def load_catalog(data: dict[str, Any]) -> Catalog:
    """
    Build and validate a catalog from raw (JSON-like) data.

    Raises CatalogValidationError listing every problem found.
    """
    errors: list[str] = []

    def parse(items, builder, kind):
        parsed = []
        for i, raw in enumerate(items or []):
            try:
                parsed.append(builder(raw))
            except (KeyError, TypeError, ValueError) as e:
                errors.append(f"{kind} #{i}: {e}")
        return parsed

    catalog = Catalog(
        catalog_id=str(data.get("catalog_id", "")),
        indexes=parse(data.get("indexes"), _index_from_dict, "Index"),
        stocks=parse(data.get("stocks"), _stock_from_dict, "Stock"),
        events=parse(data.get("events"), _event_from_dict, "Event"),
        action_cards=parse(data.get("action_cards"), _action_card_from_dict, "Action card"),
    )

    result = validate_catalog(catalog)
    errors.extend(result.errors)
    if errors:
        raise CatalogValidationError(errors)

    for warning in result.warnings:
        logger.warning("Catalog %s: %s", catalog.catalog_id, warning)
    return catalog


def load_catalog_file(path: str | Path) -> Catalog:
    """Load and validate a catalog from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_catalog(data)


def _index_from_dict(raw: dict[str, Any]) -> IndexDefinition:
    return IndexDefinition(
        name=str(raw["name"]),
        emoji=str(raw.get("emoji", "📈")),
        description=str(raw.get("description", "Market Index")),
        min_start_price=raw.get("min_start_price", 6),
        max_start_price=raw.get("max_start_price", 7),
    )


def _stock_from_dict(raw: dict[str, Any]) -> StockDefinition:
    return StockDefinition(
        name=str(raw["name"]),
        base_cost=raw.get("base_cost", 0),
        dividend=raw.get("dividend", 0),
        growth=raw.get("growth", 1),
        sector=str(raw["sector"]),
        description=str(raw.get("description", "Stock")),
        archetype=str(raw.get("archetype", "None")),
    )


def _effects_from_list(raw_effects) -> tuple[PriceEffect, ...]:
    if not isinstance(raw_effects, list):
        raise TypeError("effects must be a list")
    return tuple(
        PriceEffect(sector=str(e["sector"]), delta=e["delta"]) for e in raw_effects
    )


def _conditional_from_dict(raw: dict[str, Any]) -> ConditionalEffects:
    timing = EventTiming(str(raw.get("timing", "end")).lower())
    has_probability = raw.get("probability") is not None
    has_die_roll = raw.get("die_roll") is not None
    if has_probability == has_die_roll:
        raise ValueError("conditional effects need exactly one of probability or die_roll")

    if has_probability:
        trigger = ProbabilityTrigger(probability=raw["probability"])
    else:
        die = raw["die_roll"]
        success = die.get("success", [])
        if not isinstance(success, list):
            success = [success]
        trigger = DieRollTrigger(
            min_value=die["min"],
            max_value=die["max"],
            success=tuple(success),
        )

    return ConditionalEffects(
        timing=timing,
        trigger=trigger,
        effects=_effects_from_list(raw.get("effects")),
    )


def _event_from_dict(raw: dict[str, Any]) -> EventDefinition:
    cond = raw.get("conditional_effects")
    return EventDefinition(
        name=str(raw["name"]),
        description=str(raw.get("description", "Market Event")),
        timing=EventTiming(str(raw.get("timing", "end")).lower()),
        effects=_effects_from_list(raw.get("effects", [])),
        conditional_effects=_conditional_from_dict(cond) if cond is not None else None,
        discard_on_conditional_trigger=bool(raw.get("discard_on_conditional_trigger", False)),
    )


def _action_card_from_dict(raw: dict[str, Any]) -> ActionCardDefinition:
    return ActionCardDefinition(
        name=str(raw["name"]),
        action_type=ActionCardType(raw["action_type"]),
        description=str(raw.get("description", "Action Card")),
        target_type=str(raw.get("target_type", "none")),
        effect_value=raw.get("effect_value", 0),
    )
