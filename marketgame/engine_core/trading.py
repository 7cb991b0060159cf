"""
Trading Engine - Stock pricing, purchase, sale and board rotation.

Pricing:
    price      = base_cost + sector index price + growth * units held by everyone
    sell price = price - growth, never below 1

Every unit bought raises the price for the next buyer. The sell price
subtracts one growth step so flipping a stock does not pay.

Per-turn locks: a player may buy a given stock name once and sell it
once per turn, never both.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol
import logging

from ..catalog.definitions import StockDefinition
from .action import ActionResult, ErrorCode
from .deck import ShuffledDeck
from .game_log import GameLog
from .random_source import RandomSource
from .state import (
    BoardStock,
    MarketIndex,
    OwnedStock,
    OwnedStockRef,
    PlayerRegistry,
    StockAction,
)

logger = logging.getLogger(__name__)


class PricedStock(Protocol):
    """Anything with the attributes the pricing formula reads."""
    name: str
    base_cost: int
    growth: int
    sector: str


class StockDeck:
    """Deals stock definitions, regenerating a fresh shuffled deck when it runs short."""

    def __init__(self, definitions: list[StockDefinition], rng: RandomSource):
        self.definitions = list(definitions)
        self.rng = rng
        self.deck: ShuffledDeck[StockDefinition] | None = None

    def initialize(self) -> None:
        self.deck = ShuffledDeck(self.definitions, rng=self.rng)

    def deal_stocks(self, count: int) -> list[StockDefinition]:
        if self.deck is None or len(self.deck) < count:
            logger.debug("Stock deck short (%s left), regenerating", len(self.deck or []))
            self.initialize()

        stocks = []
        for _ in range(count):
            stock = self.deck.deal()
            if stock is None:
                break
            stocks.append(stock)
        return stocks

    def __len__(self) -> int:
        return len(self.deck) if self.deck else 0


@dataclass
class BoardUpdate:
    """What changed on the stock board at a round boundary."""
    kept: list[BoardStock] = field(default_factory=list)
    removed: list[BoardStock] = field(default_factory=list)
    added: list[BoardStock] = field(default_factory=list)
    board: list[BoardStock] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kept": [s.to_dict() for s in self.kept],
            "removed": [s.to_dict() for s in self.removed],
            "added": [s.to_dict() for s in self.added],
            "board": [s.to_dict() for s in self.board],
        }


class TradingEngine:
    """
    Applies the trading rules to the shared player ledgers.

    Holds the board (stocks currently offered for purchase).
    """

    def __init__(self, players: PlayerRegistry, log: GameLog):
        self.players = players
        self.log = log
        self.board_stocks: list[BoardStock] = []

    # =========================================================================
    # Pricing
    # =========================================================================

    def calculate_price(
        self,
        stock: PricedStock,
        indexes: dict[str, MarketIndex],
        ownership_count: int | None = None,
    ) -> int:
        """Current market price. `ownership_count` defaults to the live global count."""
        index = indexes.get(stock.sector)
        index_price = index.price if index else 0
        if ownership_count is None:
            ownership_count = self.players.ownership_count(stock.name)
        return max(1, stock.base_cost + index_price + stock.growth * ownership_count)

    def calculate_sell_price(
        self,
        stock: PricedStock,
        indexes: dict[str, MarketIndex],
        ownership_count: int | None = None,
    ) -> int:
        return max(1, self.calculate_price(stock, indexes, ownership_count) - stock.growth)

    # =========================================================================
    # Purchase / sale
    # =========================================================================

    def purchase(
        self,
        player_name: str,
        stock: StockDefinition | BoardStock,
        indexes: dict[str, MarketIndex],
        round_number: int,
    ) -> ActionResult:
        """Buy one unit of `stock` at the current market price."""
        return self._purchase(player_name, stock, indexes, round_number, discount=0)

    def purchase_with_discount(
        self,
        player_name: str,
        stock: StockDefinition | BoardStock,
        indexes: dict[str, MarketIndex],
        round_number: int,
        discount: int,
    ) -> ActionResult:
        """Buy one unit at market price minus `discount` (never below 1)."""
        return self._purchase(player_name, stock, indexes, round_number, discount=discount)

    def _purchase(
        self,
        player_name: str,
        stock: StockDefinition | BoardStock,
        indexes: dict[str, MarketIndex],
        round_number: int,
        discount: int,
    ) -> ActionResult:
        definition = stock.definition if isinstance(stock, BoardStock) else stock

        ledger = self.players.get(player_name)
        if ledger is None:
            return ActionResult.failure("Player not in game", ErrorCode.PLAYER_NOT_FOUND)

        if not ledger.has_actions:
            return ActionResult.failure("No actions left this turn", ErrorCode.NO_ACTIONS)

        existing = ledger.stock_action(definition.name)
        if existing == StockAction.BUY:
            return ActionResult.failure(
                "You cannot buy the same stock twice in one turn",
                ErrorCode.DUPLICATE_ACTION,
            )
        if existing == StockAction.SELL:
            return ActionResult.failure(
                "You cannot buy a stock you sold this turn",
                ErrorCode.CONFLICTING_ACTION,
            )

        if definition.sector not in indexes:
            return ActionResult.failure(
                f"No market index for sector '{definition.sector}'",
                ErrorCode.INDEX_NOT_FOUND,
            )

        price = max(1, self.calculate_price(definition, indexes) - discount)
        if ledger.cash < price:
            return ActionResult.failure(
                f"Insufficient funds. Need ${price}, have ${ledger.cash}",
                ErrorCode.INSUFFICIENT_FUNDS,
            )

        ledger.cash -= price
        ledger.consume_action()
        ledger.record_stock_action(definition.name, StockAction.BUY)
        ledger.portfolio.append(OwnedStock(
            definition=definition,
            purchase_price=price,
            purchase_round=round_number,
        ))

        suffix = f" (${discount} discount)" if discount else ""
        self.log.add(f"💰 {player_name} purchased {definition.name} for ${price}{suffix}")

        return ActionResult.ok(
            stock_name=definition.name,
            price=price,
            player_cash=ledger.cash,
            owned_stocks=[s.to_dict() for s in ledger.portfolio],
            actions_remaining=ledger.actions_remaining,
        )

    def sell(
        self,
        player_name: str,
        owned: OwnedStockRef | OwnedStock,
        indexes: dict[str, MarketIndex],
    ) -> ActionResult:
        """
        Sell one specific owned unit.

        The unit is matched by (name, purchase_price, purchase_round). The
        sale price is computed after the unit leaves the portfolio.
        """
        ledger = self.players.get(player_name)
        if ledger is None:
            return ActionResult.failure("Player not in game", ErrorCode.PLAYER_NOT_FOUND)

        if not ledger.has_actions:
            return ActionResult.failure("No actions left this turn", ErrorCode.NO_ACTIONS)

        existing = ledger.stock_action(owned.name)
        if existing == StockAction.SELL:
            return ActionResult.failure(
                "You cannot sell the same stock twice in one turn",
                ErrorCode.DUPLICATE_ACTION,
            )
        if existing == StockAction.BUY:
            return ActionResult.failure(
                "You cannot sell a stock you bought this turn",
                ErrorCode.CONFLICTING_ACTION,
            )

        unit = ledger.find_owned(owned)
        if unit is None:
            return ActionResult.failure(
                "Stock not found in your portfolio", ErrorCode.STOCK_NOT_FOUND
            )
        if unit.sector not in indexes:
            return ActionResult.failure(
                f"No market index for sector '{unit.sector}'",
                ErrorCode.INDEX_NOT_FOUND,
            )

        ledger.remove_owned(unit)
        sale_price = self.calculate_sell_price(unit, indexes)
        profit_loss = sale_price - unit.purchase_price

        ledger.cash += sale_price
        ledger.consume_action()
        ledger.record_stock_action(unit.name, StockAction.SELL)

        indicator = "📈" if profit_loss > 0 else "📉" if profit_loss < 0 else "➖"
        self.log.add(
            f"💰 {player_name} sold {unit.name} for ${sale_price} "
            f"({indicator} {'+' if profit_loss >= 0 else ''}{profit_loss})"
        )

        return ActionResult.ok(
            stock_name=unit.name,
            sale_price=sale_price,
            profit_loss=profit_loss,
            player_cash=ledger.cash,
            owned_stocks=[s.to_dict() for s in ledger.portfolio],
            actions_remaining=ledger.actions_remaining,
        )

    # =========================================================================
    # Board
    # =========================================================================

    def find_board_stock(self, stock_name: str) -> BoardStock | None:
        for stock in self.board_stocks:
            if stock.name == stock_name:
                return stock
        return None

    def deal_initial_board(
        self,
        stock_source: StockDeck,
        count: int,
        max_board_size: int = 6,
    ) -> list[BoardStock]:
        """Round 1: deal the opening board, at most `max_board_size` stocks."""
        self.board_stocks = [
            BoardStock(definition=d, is_carryover=False)
            for d in stock_source.deal_stocks(min(count, max_board_size))
        ]
        self.log.add(
            "📥 Opening stocks: " + ", ".join(s.name for s in self.board_stocks)
        )
        return self.board_stocks

    def update_board_stocks(
        self,
        stock_source: StockDeck,
        max_board_size: int = 6,
        new_per_round: int = 2,
    ) -> BoardUpdate:
        """
        Rotate the board at a round boundary.

        Stocks owned by at least one player stay (tagged carryover), the
        rest leave, and up to `new_per_round` fresh stocks are dealt
        without exceeding `max_board_size`.
        """
        kept = []
        removed = []
        for stock in self.board_stocks:
            if self.players.ownership_count(stock.name) > 0:
                stock.is_carryover = True
                kept.append(stock)
            else:
                removed.append(stock)
        removed.extend(kept[max_board_size:])
        kept = kept[:max_board_size]

        if removed:
            self.log.add(
                "📤 Removed from board: " + ", ".join(s.name for s in removed)
            )

        to_deal = min(new_per_round, max(0, max_board_size - len(kept)))
        added = [
            BoardStock(definition=d, is_carryover=False)
            for d in (stock_source.deal_stocks(to_deal) if to_deal > 0 else [])
        ]

        self.board_stocks = kept + added

        if added:
            self.log.add("📥 New stocks available: " + ", ".join(s.name for s in added))
        if len(self.board_stocks) >= max_board_size:
            self.log.add(f"📊 Stock board at maximum capacity ({max_board_size} stocks)")

        return BoardUpdate(
            kept=kept,
            removed=removed,
            added=added,
            board=list(self.board_stocks),
        )
