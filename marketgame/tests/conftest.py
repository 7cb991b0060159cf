"""
Pytest fixtures for market game tests.
"""

import pytest

from ..catalog.definitions import (
    ActionCardDefinition,
    ActionCardType,
    Catalog,
    ConditionalEffects,
    DieRollTrigger,
    EventDefinition,
    EventTiming,
    IndexDefinition,
    PriceEffect,
    StockDefinition,
)
from ..config import GameSettings
from ..engine_core.game_log import GameLog
from ..engine_core.random_source import RandomSource
from ..engine_core.state import MarketIndex, PlayerRegistry
from ..engine_core.trading import TradingEngine
from ..session import GameLoop, SessionManager


class ScriptedRandom(RandomSource):
    """
    Deterministic random source.

    Returns queued values first. Unscripted ints return `high`, which makes
    every shuffle a no-op (decks deal from the end of their list);
    unscripted floats return 0.99.
    """

    def __init__(self, floats=(), ints=()):
        self.floats = list(floats)
        self.ints = list(ints)

    def next_float(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return 0.99

    def next_int(self, low: int, high: int) -> int:
        if self.ints:
            return self.ints.pop(0)
        return high


SECTORS = ["tech", "finance", "industrial", "health"]


def make_stock(name, base_cost=6, dividend=1, growth=3, sector="tech"):
    return StockDefinition(
        name=name, base_cost=base_cost, dividend=dividend, growth=growth, sector=sector
    )


def make_bubble(name="Crypto Craze", discard=True):
    return EventDefinition(
        name=name,
        description="Up, up, and away",
        timing=EventTiming.START,
        effects=(PriceEffect("tech", 1),),
        conditional_effects=ConditionalEffects(
            timing=EventTiming.END,
            trigger=DieRollTrigger(min_value=1, max_value=6, success=(1, 2)),
            effects=(PriceEffect("tech", -3),),
        ),
        discard_on_conditional_trigger=discard,
    )


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def small_catalog() -> Catalog:
    """Four fixed-price sectors, a handful of stocks, events and cards."""
    return Catalog(
        catalog_id="test",
        indexes=[
            IndexDefinition(name=s, min_start_price=7, max_start_price=7) for s in SECTORS
        ],
        stocks=[
            make_stock("Alpha", base_cost=6, dividend=1, growth=3, sector="tech"),
            make_stock("Beta", base_cost=4, dividend=2, growth=2, sector="finance"),
            make_stock("Gamma", base_cost=2, dividend=0, growth=1, sector="industrial"),
            make_stock("Delta", base_cost=8, dividend=3, growth=2, sector="health"),
        ],
        events=[
            EventDefinition(
                name="Rate Hike",
                description="Money gets expensive",
                timing=EventTiming.START,
                effects=(PriceEffect("finance", 2),),
            ),
            make_bubble(),
        ],
        action_cards=[
            ActionCardDefinition(name="Market Forecast", action_type=ActionCardType.FORECAST),
            ActionCardDefinition(name="Uncertainty", action_type=ActionCardType.SHUFFLE),
            ActionCardDefinition(
                name="Insider Trading",
                action_type=ActionCardType.INSIDER_TRADING,
                target_type="stock",
                effect_value=3,
            ),
            ActionCardDefinition(
                name="Hype",
                action_type=ActionCardType.MANIPULATE,
                target_type="stock",
                effect_value=2,
            ),
        ],
    )


@pytest.fixture
def indexes() -> dict:
    return {s: MarketIndex(name=s, price=7) for s in SECTORS}


@pytest.fixture
def players(rng) -> PlayerRegistry:
    registry = PlayerRegistry(rng)
    registry.add_player("alice", 40).reset_turn(2)
    registry.add_player("bob", 40).reset_turn(2)
    return registry


@pytest.fixture
def trading(players) -> TradingEngine:
    return TradingEngine(players, GameLog("test"))


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings(seed=7)


@pytest.fixture
def session(settings, small_catalog):
    """A lobby session with the small catalog."""
    return SessionManager(settings).create_session(catalog=small_catalog, session_id="room")


@pytest.fixture
def started_loop(session) -> GameLoop:
    """A started two-player game."""
    loop = GameLoop(session)
    loop.join("alice")
    loop.join("bob")
    result = loop.start_game()
    assert result.success
    return loop
