"""
Round Orchestrator - Turn and round sequencing.

State machine:

    AWAITING_TURN --turn over--> AWAITING_TURN (next player)
    AWAITING_TURN --last player done--> END_OF_ROUND
    END_OF_ROUND --round < max--> START_OF_ROUND --> AWAITING_TURN (first player)
    END_OF_ROUND --round >= max--> GAME_ENDED

End of round:
1. Dividends (even rounds only)
2. Purge resolved one-shot events
3. END-timing conditional events roll (bubbles may pop)
4. Surviving bubbles grow
5. Game-end check, else next round number

Start of round (round 1 deals the opening board instead):
1. Turn order rotates
2. Board stocks rotate
3. A new event is drawn, START effects apply
4. START-timing conditional events roll
5. The first player's actions and stock locks reset

The orchestrator holds references to the session's engines and state and
mutates them in place.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any
import logging

from ..catalog.definitions import EventTiming
from .events import BubbleGrowth, DrawResult, EventEngine
from .game_log import GameLog, build_round_summary
from .scoring import PlayerStanding, ScoreEngine
from .state import (
    ConditionalOutcome,
    DividendPayment,
    GamePhase,
    MarketIndex,
    PlayerRegistry,
    RoundState,
)
from .trading import BoardUpdate, StockDeck, TradingEngine

if TYPE_CHECKING:
    from ..config import GameSettings

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    AWAITING_TURN = "awaiting_turn"
    END_OF_ROUND = "end_of_round"
    START_OF_ROUND = "start_of_round"
    GAME_ENDED = "game_ended"


@dataclass
class GameOverSummary:
    """Final standings. Every player tied at the top is a winner."""
    rankings: list[PlayerStanding]
    winners: list[PlayerStanding]
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "rankings": [s.to_dict() for s in self.rankings],
            "winners": [w.name for w in self.winners],
            "message": self.message,
        }


@dataclass
class RoundReport:
    """Everything that happened at one round boundary."""
    round_number: int
    dividend_payments: list[DividendPayment] = field(default_factory=list)
    events_cleaned: int = 0
    end_rolls: list[ConditionalOutcome] = field(default_factory=list)
    bubble_growth: list[BubbleGrowth] = field(default_factory=list)
    board_update: BoardUpdate | None = None
    new_event: DrawResult | None = None
    start_rolls: list[ConditionalOutcome] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "round_number": self.round_number,
            "dividend_payments": [p.to_dict() for p in self.dividend_payments],
            "events_cleaned": self.events_cleaned,
            "end_rolls": [r.to_dict() for r in self.end_rolls],
            "bubble_growth": [
                {"event": g.event.name, "changes": [c.to_dict() for c in g.changes]}
                for g in self.bubble_growth
            ],
            "board_update": self.board_update.to_dict() if self.board_update else None,
            "new_event": self.new_event.to_dict() if self.new_event else None,
            "start_rolls": [r.to_dict() for r in self.start_rolls],
            "summary": self.summary,
        }


@dataclass
class TurnAdvance:
    """Result of a turn-over signal."""
    current_player: str | None
    actions_remaining: int = 0
    round_ended: bool = False
    report: RoundReport | None = None
    game_over: GameOverSummary | None = None


class RoundOrchestrator:
    """Drives rounds and turns for one session."""

    def __init__(
        self,
        settings: GameSettings,
        round_state: RoundState,
        players: PlayerRegistry,
        indexes: dict[str, MarketIndex],
        events: EventEngine,
        trading: TradingEngine,
        scoring: ScoreEngine,
        stock_deck: StockDeck,
        log: GameLog,
    ):
        self.settings = settings
        self.round_state = round_state
        self.players = players
        self.indexes = indexes
        self.events = events
        self.trading = trading
        self.scoring = scoring
        self.stock_deck = stock_deck
        self.log = log
        self.state = OrchestratorState.AWAITING_TURN
        self.game_over: GameOverSummary | None = None

    @property
    def is_game_over(self) -> bool:
        return self.state == OrchestratorState.GAME_ENDED

    def start_round(self) -> RoundReport:
        """
        Begin round 1.

        Deals the opening board and hands the first turn to the first
        player in the turn order.
        """
        rs = self.round_state
        rs.round_number = 1
        rs.current_turn_index = 0
        rs.phase = GamePhase.PLAYING
        self.log.set_round(1)

        self.trading.deal_initial_board(
            self.stock_deck,
            self.settings.initial_board_stocks,
            self.settings.max_board_stocks,
        )
        self._reset_current_player()
        self.state = OrchestratorState.AWAITING_TURN

        report = RoundReport(round_number=1)
        report.summary = build_round_summary(1, None, [], self.events.active_events)
        self.log.add("Round 1 started")
        logger.info("Game started with turn order %s", rs.turn_order)
        return report

    def process_round_cycle(self) -> TurnAdvance:
        """
        Handle a turn-over signal from the current player.

        Advances to the next player. When the last player of the round
        finishes, runs the end-of-round sequence and either ends the game
        or starts the next round.
        """
        if self.is_game_over:
            return TurnAdvance(current_player=None, game_over=self.game_over)

        rs = self.round_state
        if not rs.turn_order:
            return TurnAdvance(current_player=None)

        outgoing = self.players.get(rs.current_player)
        if outgoing is not None:
            outgoing.actions_remaining = 0

        rs.current_turn_index += 1
        if rs.current_turn_index < len(rs.turn_order):
            ledger = self._reset_current_player()
            return TurnAdvance(
                current_player=rs.current_player,
                actions_remaining=ledger.actions_remaining if ledger else 0,
            )

        report = self._end_of_round()
        if rs.round_number >= self.settings.max_rounds:
            self.game_over = self._end_game()
            report.summary = self.game_over.message
            return TurnAdvance(
                current_player=None,
                round_ended=True,
                report=report,
                game_over=self.game_over,
            )

        rs.round_number += 1
        self.log.set_round(rs.round_number)
        self._start_of_round(report)

        ledger = self.players.get(rs.current_player)
        return TurnAdvance(
            current_player=rs.current_player,
            actions_remaining=ledger.actions_remaining if ledger else 0,
            round_ended=True,
            report=report,
        )

    def remove_player(self, player_name: str) -> TurnAdvance | None:
        """
        Drop a departing player from the turn order.

        Returns a TurnAdvance when the departing player held the turn,
        None otherwise.
        """
        rs = self.round_state
        if player_name not in rs.turn_order:
            return None

        position = rs.turn_order.index(player_name)
        was_current = position == rs.current_turn_index
        rs.turn_order.remove(player_name)

        if not rs.turn_order:
            rs.current_turn_index = 0
            return None
        if position < rs.current_turn_index:
            rs.current_turn_index -= 1
        if not was_current or self.is_game_over:
            return None

        if rs.current_turn_index >= len(rs.turn_order):
            # They were last to act this round: close the round
            rs.current_turn_index = len(rs.turn_order) - 1
            return self.process_round_cycle()

        ledger = self._reset_current_player()
        return TurnAdvance(
            current_player=rs.current_player,
            actions_remaining=ledger.actions_remaining if ledger else 0,
        )

    # =========================================================================
    # Sequences
    # =========================================================================

    def _end_of_round(self) -> RoundReport:
        self.state = OrchestratorState.END_OF_ROUND
        round_number = self.round_state.round_number
        report = RoundReport(round_number=round_number)

        report.dividend_payments = self.players.pay_dividends(round_number)
        for payment in report.dividend_payments:
            self.log.add(f"💰 {payment.player_name} received ${payment.total} in dividends")

        report.events_cleaned = self.events.cleanup_resolved_start_events()
        if report.events_cleaned:
            self.log.add(f"✓ {report.events_cleaned} event(s) completed")

        report.end_rolls = self.events.process_conditional_events(EventTiming.END, self.indexes)
        self._log_rolls(report.end_rolls)

        report.bubble_growth = self.events.reapply_bubble_effects(self.indexes)
        for growth in report.bubble_growth:
            if growth.changes:
                self.log.log_index_changes(growth.event, growth.changes, "Bubble Growth")
                self.log.add(f"📈 {growth.event.name} continues (Round {growth.event.rounds_active})")

        return report

    def _start_of_round(self, report: RoundReport) -> None:
        self.state = OrchestratorState.START_OF_ROUND
        rs = self.round_state

        rs.rotate()
        rs.current_turn_index = 0

        report.round_number = rs.round_number
        report.board_update = self.trading.update_board_stocks(
            self.stock_deck,
            max_board_size=self.settings.max_board_stocks,
            new_per_round=self.settings.new_stocks_per_round,
        )

        report.new_event = self.events.draw_and_activate(self.indexes)
        if report.new_event is not None:
            event = report.new_event.event
            self.log.add(f"📰 Event: {event.name} - {event.description}")
            if report.new_event.changes:
                self.log.log_index_changes(event, report.new_event.changes, "Initial")

        report.start_rolls = self.events.process_conditional_events(
            EventTiming.START, self.indexes
        )
        self._log_rolls(report.start_rolls)

        self._reset_current_player()
        self.state = OrchestratorState.AWAITING_TURN

        report.summary = build_round_summary(
            rs.round_number,
            report.new_event.event if report.new_event else None,
            report.end_rolls,
            self.events.active_events,
            report.dividend_payments,
        )
        self.log.add(f"Round {rs.round_number} started")

    def _end_game(self) -> GameOverSummary:
        self.state = OrchestratorState.GAME_ENDED
        self.round_state.phase = GamePhase.GAME_OVER

        summary = GameOverSummary(
            rankings=self.scoring.rankings(self.indexes),
            winners=self.scoring.winners(self.indexes),
            message=self.scoring.end_game_message(self.indexes),
        )
        self.log.add(
            "🏁 Game over. Winner(s): " + ", ".join(w.name for w in summary.winners)
        )
        return summary

    def _reset_current_player(self):
        ledger = self.players.get(self.round_state.current_player)
        if ledger is not None:
            ledger.reset_turn(self.settings.actions_per_turn)
        return ledger

    def _log_rolls(self, outcomes: list[ConditionalOutcome]) -> None:
        for outcome in outcomes:
            if outcome.triggered:
                self.log.log_index_changes(
                    outcome.event, outcome.changes, "Bubble Pop", outcome.roll
                )
                self.log.add(f"💥 {outcome.event.name} popped!")
            else:
                self.log.add(f"✓ {outcome.event.name} held (remains active)")
