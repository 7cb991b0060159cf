"""
Score Engine - Net worth, rankings and the end-of-game summary.

Net worth = cash + market price of every owned unit, priced with the
live global ownership count. Unrealized holdings are valued at market
price, not at the (lower) sell price.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from .state import MarketIndex, PlayerRegistry
from .trading import TradingEngine


@dataclass
class PlayerStanding:
    """One row of the final rankings."""
    name: str
    cash: int
    net_worth: int
    stock_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cash": self.cash,
            "net_worth": self.net_worth,
            "stock_count": self.stock_count,
        }


class ScoreEngine:
    def __init__(self, players: PlayerRegistry, trading: TradingEngine):
        self.players = players
        self.trading = trading

    def net_worth(self, player_name: str, indexes: dict[str, MarketIndex]) -> int:
        ledger = self.players.get(player_name)
        if ledger is None:
            return 0
        counts = self.players.ownership_counts()
        holdings = sum(
            self.trading.calculate_price(owned, indexes, counts.get(owned.name, 0))
            for owned in ledger.portfolio
        )
        return ledger.cash + holdings

    def all_net_worths(self, indexes: dict[str, MarketIndex]) -> dict[str, int]:
        return {name: self.net_worth(name, indexes) for name in self.players.names}

    def rankings(self, indexes: dict[str, MarketIndex]) -> list[PlayerStanding]:
        """Players sorted by net worth, highest first. Ties keep join order."""
        standings = [
            PlayerStanding(
                name=ledger.name,
                cash=ledger.cash,
                net_worth=self.net_worth(ledger.name, indexes),
                stock_count=len(ledger.portfolio),
            )
            for ledger in self.players.ledgers
        ]
        return sorted(standings, key=lambda s: s.net_worth, reverse=True)

    def winners(self, indexes: dict[str, MarketIndex]) -> list[PlayerStanding]:
        """Every player tied at the highest net worth."""
        standings = self.rankings(indexes)
        if not standings:
            return []
        top = standings[0].net_worth
        return [s for s in standings if s.net_worth == top]

    def end_game_message(self, indexes: dict[str, MarketIndex]) -> str:
        standings = self.rankings(indexes)
        winners = self.winners(indexes)

        lines = ["🎉 GAME OVER - Rounds Complete! 🎉", ""]
        if len(winners) == 1:
            lines.append(f"👑 WINNER: {winners[0].name} 👑")
        elif winners:
            lines.append(f"👑 TIE - Winners: {', '.join(w.name for w in winners)} 👑")
        if winners:
            lines.append(f"Net Worth: ${winners[0].net_worth}")
            lines.append("")

        lines.append("📊 Final Standings:")
        medals = ["🥇", "🥈", "🥉"]
        for position, standing in enumerate(standings):
            medal = medals[position] if position < len(medals) else f"{position + 1}."
            lines.append(
                f"{medal} {standing.name}: ${standing.net_worth} "
                f"(Cash: ${standing.cash}, Stocks: {standing.stock_count})"
            )
        return "\n".join(lines)
