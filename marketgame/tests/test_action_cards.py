"""
Tests for action card handlers and the action deck.
"""

import pytest

from ..catalog.definitions import (
    ActionCardDefinition,
    ActionCardType,
    EventDefinition,
    EventTiming,
    PriceEffect,
)
from ..engine_core.action import ErrorCode
from ..engine_core.action_cards import (
    ACTION_HANDLERS,
    ActionContext,
    ActionDeck,
    execute_action_card,
)
from ..engine_core.events import EventEngine
from ..engine_core.state import ActionCard, BoardStock
from .conftest import ScriptedRandom, make_bubble, make_stock


def card(action_type, value=0, target="none", name="Card"):
    definition = ActionCardDefinition(
        name=name, action_type=action_type, target_type=target, effect_value=value
    )
    return ActionCard(definition=definition, card_id=f"{action_type.value}_test")


@pytest.fixture
def events():
    engine = EventEngine(
        [
            EventDefinition(
                name="Rate Hike",
                timing=EventTiming.START,
                effects=(PriceEffect("finance", 2),),
            ),
            make_bubble(),
        ],
        ScriptedRandom(),
    )
    engine.initialize()
    return engine


@pytest.fixture
def board_alpha():
    return BoardStock(definition=make_stock("Alpha", base_cost=6, growth=3, sector="tech"))


@pytest.fixture
def ctx(events, trading, indexes, board_alpha):
    return ActionContext(
        player_name="alice",
        events=events,
        trading=trading,
        indexes=indexes,
        round_number=1,
        stock=board_alpha,
    )


class TestDispatch:

    def test_every_card_type_has_a_handler(self):
        assert set(ACTION_HANDLERS) == set(ActionCardType)


class TestForecast:

    def test_reveals_next_event_without_dealing(self, ctx, events):
        result = execute_action_card(card(ActionCardType.FORECAST), ctx)

        assert result.success
        assert "Crypto Craze" in result.message
        assert "📊 Price Movements" in result.message
        assert "⚠️ Potential Bubble" in result.message
        assert result.data["event"]["name"] == "Crypto Craze"
        assert len(events.event_deck) == 2

    def test_empty_deck(self, ctx):
        ctx.events = EventEngine([], ScriptedRandom())
        result = execute_action_card(card(ActionCardType.FORECAST), ctx)
        assert result.error_code == ErrorCode.EMPTY_DECK


class TestShuffle:

    def test_shuffles_remaining_deck(self, ctx):
        result = execute_action_card(card(ActionCardType.SHUFFLE), ctx)
        assert result.success

    def test_no_deck(self, ctx):
        ctx.events = EventEngine([], ScriptedRandom())
        result = execute_action_card(card(ActionCardType.SHUFFLE), ctx)
        assert result.error_code == ErrorCode.EMPTY_DECK


class TestInsiderTrading:

    def test_discounted_purchase(self, ctx, players):
        insider = card(ActionCardType.INSIDER_TRADING, value=3, target="stock")
        result = execute_action_card(insider, ctx)

        assert result.success
        assert result.data["price"] == 10
        assert result.data["action_consumed"] is True
        ledger = players.get("alice")
        assert ledger.cash == 30
        assert ledger.actions_remaining == 1

    def test_requires_target(self, ctx):
        ctx.stock = None
        insider = card(ActionCardType.INSIDER_TRADING, value=3, target="stock")
        assert execute_action_card(insider, ctx).error_code == ErrorCode.STOCK_NOT_FOUND

    def test_respects_turn_locks(self, ctx, trading, indexes, board_alpha):
        trading.purchase("alice", board_alpha, indexes, 1)
        insider = card(ActionCardType.INSIDER_TRADING, value=3, target="stock")
        assert execute_action_card(insider, ctx).error_code == ErrorCode.DUPLICATE_ACTION


class TestManipulate:

    def test_pushes_sector_index(self, ctx, indexes):
        hype = card(ActionCardType.MANIPULATE, value=2, target="stock", name="Create Hype")
        result = execute_action_card(hype, ctx)

        assert result.success
        assert indexes["tech"].price == 9
        assert result.data["old_price"] == 7
        assert result.data["new_price"] == 9
        assert result.data["direction"] == "up"

    def test_negative_change_floors_at_one(self, ctx, indexes):
        indexes["tech"].price = 3
        scandal = card(ActionCardType.MANIPULATE, value=-4, target="stock", name="Scandal")
        result = execute_action_card(scandal, ctx)

        assert indexes["tech"].price == 1
        assert result.data["direction"] == "down"

    def test_missing_index(self, ctx):
        ctx.stock = BoardStock(definition=make_stock("Orphan", sector="space"))
        hype = card(ActionCardType.MANIPULATE, value=2, target="stock")
        assert execute_action_card(hype, ctx).error_code == ErrorCode.INDEX_NOT_FOUND


class TestActionDeck:

    def test_cards_get_unique_ids(self):
        definition = ActionCardDefinition(name="Hype", action_type=ActionCardType.MANIPULATE)
        deck = ActionDeck([definition] * 5, ScriptedRandom())
        deck.initialize()

        cards = deck.draw_many(5)
        assert len({c.card_id for c in cards}) == 5
        assert all(c.card_id.startswith("manipulate_") for c in cards)

    def test_empty_deck_does_not_regenerate(self):
        definition = ActionCardDefinition(name="Hype", action_type=ActionCardType.MANIPULATE)
        deck = ActionDeck([definition], ScriptedRandom())
        deck.initialize()

        assert deck.draw() is not None
        assert deck.draw() is None
        assert deck.is_empty

    def test_draw_before_initialize(self):
        deck = ActionDeck([], ScriptedRandom())
        assert deck.draw() is None
        assert len(deck) == 0
