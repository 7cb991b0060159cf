"""
Tests for pricing, purchase, sale and board rotation.
"""

import pytest

from ..engine_core.action import ErrorCode
from ..engine_core.state import BoardStock, OwnedStockRef
from ..engine_core.trading import StockDeck
from .conftest import ScriptedRandom, make_stock


@pytest.fixture
def alpha():
    return make_stock("Alpha", base_cost=6, growth=3, sector="tech")


def ref_of(owned):
    return OwnedStockRef(owned.name, owned.purchase_price, owned.purchase_round)


class TestPricing:

    def test_price_formula(self, trading, indexes, alpha):
        assert trading.calculate_price(alpha, indexes) == 13
        assert trading.calculate_price(alpha, indexes, ownership_count=2) == 19

    @pytest.mark.parametrize("count", [0, 1, 4])
    def test_sell_tax(self, trading, indexes, alpha, count):
        price = trading.calculate_price(alpha, indexes, count)
        assert trading.calculate_sell_price(alpha, indexes, count) == max(1, price - alpha.growth)

    def test_price_floor(self, trading, indexes):
        cheap = make_stock("Penny", base_cost=-20, growth=1, sector="tech")
        assert trading.calculate_price(cheap, indexes) == 1
        assert trading.calculate_sell_price(cheap, indexes) == 1

    def test_missing_index_prices_as_zero(self, trading, indexes):
        orphan = make_stock("Orphan", base_cost=5, growth=2, sector="space")
        assert trading.calculate_price(orphan, indexes) == 5


class TestPurchase:

    def test_second_buyer_pays_more(self, trading, players, indexes, alpha):
        first = trading.purchase("alice", alpha, indexes, round_number=1)
        second = trading.purchase("bob", alpha, indexes, round_number=1)

        assert first.success and second.success
        assert first.data["price"] == 13
        assert second.data["price"] == 16
        assert players.get("alice").cash == 27
        assert players.get("bob").cash == 24
        assert players.ownership_count("Alpha") == 2

    def test_purchase_consumes_action(self, trading, players, indexes, alpha):
        result = trading.purchase("alice", alpha, indexes, 1)
        assert result.data["actions_remaining"] == 1
        owned = players.get("alice").portfolio[0]
        assert (owned.purchase_price, owned.purchase_round) == (13, 1)

    def test_insufficient_funds(self, trading, players, indexes, alpha):
        players.get("alice").cash = 12
        result = trading.purchase("alice", alpha, indexes, 1)

        assert not result.success
        assert result.error_code == ErrorCode.INSUFFICIENT_FUNDS
        assert result.message == "Insufficient funds. Need $13, have $12"
        assert players.get("alice").cash == 12
        assert players.get("alice").actions_remaining == 2

    def test_no_actions(self, trading, players, indexes, alpha):
        players.get("alice").actions_remaining = 0
        result = trading.purchase("alice", alpha, indexes, 1)
        assert result.error_code == ErrorCode.NO_ACTIONS

    def test_unknown_player(self, trading, indexes, alpha):
        result = trading.purchase("mallory", alpha, indexes, 1)
        assert result.error_code == ErrorCode.PLAYER_NOT_FOUND

    def test_buy_same_stock_twice_rejected(self, trading, indexes, alpha):
        trading.purchase("alice", alpha, indexes, 1)
        result = trading.purchase("alice", alpha, indexes, 1)
        assert result.error_code == ErrorCode.DUPLICATE_ACTION

    def test_missing_index_rejected(self, trading, indexes):
        orphan = make_stock("Orphan", sector="space")
        result = trading.purchase("alice", orphan, indexes, 1)
        assert result.error_code == ErrorCode.INDEX_NOT_FOUND

    def test_discount(self, trading, players, indexes, alpha):
        result = trading.purchase_with_discount("alice", alpha, indexes, 1, discount=3)
        assert result.data["price"] == 10
        assert players.get("alice").cash == 30

    def test_discount_never_below_one(self, trading, indexes, alpha):
        result = trading.purchase_with_discount("alice", alpha, indexes, 1, discount=50)
        assert result.data["price"] == 1


class TestSell:

    def test_sell_after_buy_same_turn_rejected(self, trading, players, indexes, alpha):
        trading.purchase("alice", alpha, indexes, 1)
        owned = players.get("alice").portfolio[0]

        result = trading.sell("alice", ref_of(owned), indexes)

        assert not result.success
        assert result.error_code == ErrorCode.CONFLICTING_ACTION
        assert len(players.get("alice").portfolio) == 1

    def test_sell_next_turn(self, trading, players, indexes, alpha):
        trading.purchase("alice", alpha, indexes, 1)
        ledger = players.get("alice")
        ledger.reset_turn(2)

        result = trading.sell("alice", ref_of(ledger.portfolio[0]), indexes)

        assert result.success
        # Priced after the unit leaves: 6 + 7 + 3*0 - 3
        assert result.data["sale_price"] == 10
        assert result.data["profit_loss"] == -3
        assert ledger.cash == 27 + 10
        assert ledger.portfolio == []

    def test_buy_after_sell_rejected(self, trading, players, indexes, alpha):
        trading.purchase("alice", alpha, indexes, 1)
        ledger = players.get("alice")
        ledger.reset_turn(2)
        trading.sell("alice", ref_of(ledger.portfolio[0]), indexes)

        result = trading.purchase("alice", alpha, indexes, 2)
        assert result.error_code == ErrorCode.CONFLICTING_ACTION

    def test_sell_unit_not_owned(self, trading, indexes):
        result = trading.sell("alice", OwnedStockRef("Alpha", 13, 1), indexes)
        assert result.error_code == ErrorCode.STOCK_NOT_FOUND

    def test_sells_the_matching_unit(self, trading, players, indexes, alpha):
        ledger = players.get("alice")
        trading.purchase("alice", alpha, indexes, 1)
        ledger.reset_turn(2)
        trading.purchase("alice", alpha, indexes, 2)
        ledger.reset_turn(2)

        result = trading.sell("alice", OwnedStockRef("Alpha", 16, 2), indexes)

        assert result.success
        assert [(s.purchase_price, s.purchase_round) for s in ledger.portfolio] == [(13, 1)]


class TestBoard:

    def stock_deck(self, count=8):
        defs = [make_stock(f"S{i}", sector="tech") for i in range(count)]
        deck = StockDeck(defs, ScriptedRandom())
        deck.initialize()
        return deck

    def test_initial_board(self, trading):
        board = trading.deal_initial_board(self.stock_deck(), 3)
        assert [s.name for s in board] == ["S7", "S6", "S5"]
        assert not any(s.is_carryover for s in board)

    def test_unowned_stocks_leave(self, trading, indexes):
        deck = self.stock_deck()
        trading.deal_initial_board(deck, 3)
        trading.purchase("alice", trading.find_board_stock("S6"), indexes, 1)

        update = trading.update_board_stocks(deck, max_board_size=6, new_per_round=2)

        assert [s.name for s in update.kept] == ["S6"]
        assert {s.name for s in update.removed} == {"S7", "S5"}
        assert [s.name for s in update.added] == ["S4", "S3"]
        assert update.kept[0].is_carryover

    def test_board_rotation_invariant(self, trading, players, indexes):
        deck = self.stock_deck(12)
        trading.deal_initial_board(deck, 3)
        for round_number in range(2, 8):
            for name in ("alice", "bob"):
                players.get(name).reset_turn(2)
                players.get(name).cash = 1000
                for stock in list(trading.board_stocks)[:2]:
                    trading.purchase(name, stock, indexes, round_number)

            trading.update_board_stocks(deck, max_board_size=4, new_per_round=2)

            assert len(trading.board_stocks) <= 4
            for stock in trading.board_stocks:
                if stock.is_carryover:
                    assert players.ownership_count(stock.name) >= 1

    def test_full_board_deals_nothing(self, trading, players, indexes):
        deck = self.stock_deck()
        trading.board_stocks = [BoardStock(definition=d) for d in deck.deal_stocks(3)]
        players.get("alice").cash = 1000
        players.get("alice").reset_turn(5)
        for stock in trading.board_stocks:
            trading.purchase("alice", stock, indexes, 1)

        update = trading.update_board_stocks(deck, max_board_size=3, new_per_round=2)
        assert update.added == []
        assert len(update.board) == 3

    def test_stock_deck_regenerates_when_short(self):
        deck = StockDeck([make_stock("A"), make_stock("B")], ScriptedRandom())
        deck.initialize()
        deck.deal_stocks(1)
        dealt = deck.deal_stocks(2)
        assert [d.name for d in dealt] == ["B", "A"]

    def test_opening_deal_capped(self, trading):
        board = trading.deal_initial_board(self.stock_deck(), 3, max_board_size=2)
        assert [s.name for s in board] == ["S7", "S6"]

    def test_owned_stocks_trimmed_to_cap(self, trading, indexes):
        deck = self.stock_deck()
        trading.deal_initial_board(deck, 3)
        for stock in list(trading.board_stocks):
            trading.players.get("alice").reset_turn(1)
            trading.purchase("alice", stock, indexes, 1)

        update = trading.update_board_stocks(deck, max_board_size=2, new_per_round=2)

        assert [s.name for s in update.kept] == ["S7", "S6"]
        assert [s.name for s in update.removed] == ["S5"]
        assert update.added == []
        assert len(trading.board_stocks) == 2
