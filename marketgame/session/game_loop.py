"""
Game Loop - Applies player requests to a session.

The loop:
1. Players join the lobby
2. start_game fixes the turn order and begins round 1
3. The current player buys, sells, draws or plays cards
4. When their actions run out (or they end the turn) the turn passes
5. Round boundaries run through the orchestrator
6. Repeat until the game ends

Every call returns a TurnResult listing the GameEvents it produced. The
transport layer forwards them; a GameEvent with a target goes only to
that player, the rest go to everyone in the session.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING
import logging

from ..catalog.definitions import ActionCardType
from ..engine_core.action import Action, ActionResult, ActionType, ErrorCode
from ..engine_core.action_cards import ActionContext, execute_action_card
from ..engine_core.orchestrator import TurnAdvance
from ..engine_core.state import GamePhase, OwnedStockRef
from .manager import SessionState

if TYPE_CHECKING:
    from .manager import GameSession

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2


@dataclass
class GameEvent:
    """One logical notification for the transport layer."""
    type: str
    payload: dict[str, Any] = field(default_factory=dict)

    # Player name for private notifications, None to broadcast
    target: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload, "target": self.target}


@dataclass
class TurnResult:
    """
    Result of a session operation.

    Contains the events to deliver and, on failure, the reason.
    """
    success: bool
    events: list[GameEvent] = field(default_factory=list)
    error: str | None = None
    error_code: ErrorCode | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(
        cls, error: str, error_code: ErrorCode | None = None, target: str | None = None
    ) -> TurnResult:
        """Failed request, reported privately to the acting player."""
        events = []
        if target is not None:
            events.append(GameEvent(
                type="action_result",
                payload={
                    "success": False,
                    "message": error,
                    "error_code": error_code.value if error_code else None,
                },
                target=target,
            ))
        return cls(success=False, events=events, error=error, error_code=error_code)


class GameLoop:
    """
    The session's request handler.

    Usage:
        loop = GameLoop(session)
        loop.join("alice")
        loop.join("bob")
        loop.start_game()

        result = loop.apply(Action.purchase("alice", "TechTitan"))
        for event in result.events:
            deliver(event)
    """

    def __init__(self, session: GameSession):
        self.session = session

    # =========================================================================
    # Lobby
    # =========================================================================

    def join(self, player_name: str) -> TurnResult:
        """
        Add a player. Joining mid-game appends them to the end of the
        turn order.
        """
        s = self.session
        with s.lock:
            if s.state == SessionState.GAME_OVER:
                return TurnResult.failure("Game is over", ErrorCode.GAME_OVER, player_name)
            if not player_name:
                return TurnResult.failure("Player name is required", ErrorCode.PLAYER_NOT_FOUND)

            rejoining = player_name in s.players
            ledger = s.players.add_player(player_name, s.settings.starting_cash)
            if s.state == SessionState.PLAYING and player_name not in s.round_state.turn_order:
                s.round_state.turn_order.append(player_name)

            if not rejoining:
                s.log.add(f"👋 {player_name} joined")

            return TurnResult(
                success=True,
                events=[
                    GameEvent(type="player_joined", payload=ledger.to_dict()),
                    GameEvent(type="state_snapshot", payload=self._snapshot(), target=player_name),
                ],
                data={"player": ledger.to_dict()},
            )

    def leave(self, player_name: str) -> TurnResult:
        """Remove a player and their holdings. Passes the turn if it was theirs."""
        s = self.session
        with s.lock:
            if player_name not in s.players:
                return TurnResult.failure("Player not in game", ErrorCode.PLAYER_NOT_FOUND)

            # Final standings stay intact once the game is over
            if s.state == SessionState.GAME_OVER:
                return TurnResult(
                    success=True,
                    events=[GameEvent(type="player_left", payload={"player_name": player_name})],
                )

            s.players.remove_player(player_name)
            s.log.add(f"👋 {player_name} left")
            events = [GameEvent(type="player_left", payload={"player_name": player_name})]

            if s.state == SessionState.PLAYING:
                advance = s.orchestrator.remove_player(player_name)
                if advance is not None:
                    events.extend(self._advance_events(advance))
                if not s.round_state.turn_order:
                    s.state = SessionState.ABANDONED
                    logger.info("Session %s abandoned", s.session_id)

            return TurnResult(success=True, events=events)

    def start_game(self) -> TurnResult:
        """
        Begin the game.

        Draws the index prices, shuffles every deck, fixes the turn
        order and runs the round 1 setup.
        """
        s = self.session
        with s.lock:
            if s.state != SessionState.LOBBY:
                return TurnResult.failure(
                    "Game already started", ErrorCode.GAME_ALREADY_STARTED
                )
            if len(s.players) < MIN_PLAYERS:
                return TurnResult.failure(
                    f"Need at least {MIN_PLAYERS} players to start",
                    ErrorCode.NOT_ENOUGH_PLAYERS,
                )

            s.reset_indexes()
            s.events.initialize()
            s.stock_deck.initialize()
            s.action_deck.initialize()

            order = s.players.names
            s.rng.shuffle(order)
            s.round_state.turn_order = order

            report = s.orchestrator.start_round()
            s.state = SessionState.PLAYING

            first = s.round_state.current_player
            return TurnResult(
                success=True,
                events=[
                    GameEvent(type="game_started", payload=self._snapshot()),
                    GameEvent(
                        type="round_message",
                        payload={"round": 1, "message": report.summary},
                    ),
                    self._turn_event(first),
                ],
                data={"turn_order": list(order)},
            )

    # =========================================================================
    # Player requests
    # =========================================================================

    def apply(self, action: Action) -> TurnResult:
        """
        Apply a player request.

        Rejected requests change nothing and produce a private
        action_result event for the acting player.
        """
        s = self.session
        player_name = action.payload.player_name

        with s.lock:
            if s.round_state.phase == GamePhase.SETUP:
                return TurnResult.failure(
                    "Game has not started", ErrorCode.GAME_NOT_STARTED, player_name
                )
            if s.round_state.phase == GamePhase.GAME_OVER:
                return TurnResult.failure("Game is over", ErrorCode.GAME_OVER, player_name)
            if player_name not in s.players:
                return TurnResult.failure(
                    "Player not in game", ErrorCode.PLAYER_NOT_FOUND, player_name
                )
            if s.round_state.current_player != player_name:
                return TurnResult.failure(
                    "It's not your turn", ErrorCode.NOT_YOUR_TURN, player_name
                )

            handler = self._get_handler(action.action_type)
            if handler is None:
                return TurnResult.failure(
                    f"No handler for action type: {action.action_type}",
                    ErrorCode.UNKNOWN_ACTION,
                    player_name,
                )

            result = handler(action)
            if not result.success:
                logger.debug(
                    "Rejected %s from %s: %s",
                    action.action_type.value, player_name, result.error,
                )
                return result

            # Out of actions: the turn passes automatically
            ledger = s.players.get(player_name)
            if (
                action.action_type != ActionType.END_TURN
                and ledger is not None
                and not ledger.has_actions
                and s.round_state.current_player == player_name
            ):
                result.events.extend(self._advance_events(s.orchestrator.process_round_cycle()))
            return result

    def turn_over(self, player_name: str) -> TurnResult:
        """Explicit end of the player's turn."""
        return self.apply(Action.end_turn(player_name))

    def _get_handler(self, action_type: ActionType):
        handlers = {
            ActionType.PURCHASE_STOCK: self._handle_purchase,
            ActionType.SELL_STOCK: self._handle_sell,
            ActionType.DRAW_ACTION_CARD: self._handle_draw_card,
            ActionType.PLAY_ACTION_CARD: self._handle_play_card,
            ActionType.END_TURN: self._handle_end_turn,
        }
        return handlers.get(action_type)

    def _handle_purchase(self, action: Action) -> TurnResult:
        s = self.session
        player_name = action.payload.player_name
        stock = s.trading.find_board_stock(action.payload.stock_name or "")
        if stock is None:
            return TurnResult.failure(
                "Stock is not on the board", ErrorCode.STOCK_NOT_FOUND, player_name
            )

        result = s.trading.purchase(player_name, stock, s.indexes, s.round_state.round_number)
        return self._trade_result(player_name, result, "stock_purchased")

    def _handle_sell(self, action: Action) -> TurnResult:
        s = self.session
        payload = action.payload
        if payload.stock_name is None or payload.purchase_price is None or payload.purchase_round is None:
            return TurnResult.failure(
                "Sell requests need stock name, purchase price and purchase round",
                ErrorCode.STOCK_NOT_FOUND,
                payload.player_name,
            )

        ref = OwnedStockRef(
            name=payload.stock_name,
            purchase_price=payload.purchase_price,
            purchase_round=payload.purchase_round,
        )
        result = s.trading.sell(payload.player_name, ref, s.indexes)
        return self._trade_result(payload.player_name, result, "stock_sold")

    def _handle_draw_card(self, action: Action) -> TurnResult:
        s = self.session
        player_name = action.payload.player_name
        ledger = s.players.get(player_name)

        if not ledger.has_actions:
            return TurnResult.failure("No actions left this turn", ErrorCode.NO_ACTIONS, player_name)
        if len(ledger.action_cards) >= s.settings.max_hand_size:
            return TurnResult.failure(
                f"Hand is full ({s.settings.max_hand_size} cards)", ErrorCode.HAND_FULL, player_name
            )

        card = s.action_deck.draw()
        if card is None:
            return TurnResult.failure("Action deck is empty", ErrorCode.EMPTY_DECK, player_name)

        ledger.action_cards.append(card)
        ledger.consume_action()
        s.log.add(f"🎴 {player_name} drew an action card")

        return TurnResult(
            success=True,
            events=[
                GameEvent(
                    type="action_result",
                    payload=ActionResult.ok(
                        f"Drew {card.name}",
                        card=card.to_dict(),
                        action_cards=[c.to_dict() for c in ledger.action_cards],
                        actions_remaining=ledger.actions_remaining,
                    ).to_dict(),
                    target=player_name,
                ),
                GameEvent(
                    type="action_card_drawn",
                    payload={
                        "player_name": player_name,
                        "hand_size": len(ledger.action_cards),
                        "deck_size": len(s.action_deck),
                        "actions_remaining": ledger.actions_remaining,
                    },
                ),
            ],
            data={"card": card.to_dict()},
        )

    def _handle_play_card(self, action: Action) -> TurnResult:
        s = self.session
        payload = action.payload
        player_name = payload.player_name
        ledger = s.players.get(player_name)

        if not ledger.has_actions:
            return TurnResult.failure("No actions left this turn", ErrorCode.NO_ACTIONS, player_name)

        card = ledger.find_card(payload.card_id or "")
        if card is None:
            return TurnResult.failure("Card not in your hand", ErrorCode.CARD_NOT_FOUND, player_name)

        stock = None
        if card.definition.needs_target:
            stock = s.trading.find_board_stock(payload.stock_name or "")

        ctx = ActionContext(
            player_name=player_name,
            events=s.events,
            trading=s.trading,
            indexes=s.indexes,
            round_number=s.round_state.round_number,
            stock=stock,
        )
        result = execute_action_card(card, ctx)
        if not result.success:
            return TurnResult.failure(result.message, result.error_code, player_name)

        ledger.remove_card(card.card_id)
        if not result.data.get("action_consumed"):
            ledger.consume_action()
        s.log.add(f"🎴 {player_name} played {card.name}")

        result.data["actions_remaining"] = ledger.actions_remaining
        result.data["action_cards"] = [c.to_dict() for c in ledger.action_cards]

        # Forecasts stay private; everything else moved the market for everyone
        events = [GameEvent(type="action_result", payload=result.to_dict(), target=player_name)]
        events.append(GameEvent(
            type="action_card_played",
            payload={
                "player_name": player_name,
                "card": card.to_dict(),
                "message": result.message if card.action_type != ActionCardType.FORECAST else "",
                "indexes": self._indexes_view(),
                "board_stocks": self._board_view(),
                "players": [l.to_dict() for l in s.players.ledgers],
                "net_worths": s.scoring.all_net_worths(s.indexes),
            },
        ))
        return TurnResult(success=True, events=events, data=result.data)

    def _handle_end_turn(self, action: Action) -> TurnResult:
        s = self.session
        s.log.add(f"⏭️ {action.payload.player_name} ended their turn")
        events = self._advance_events(s.orchestrator.process_round_cycle())
        return TurnResult(success=True, events=events)

    def _trade_result(self, player_name: str, result: ActionResult, event_type: str) -> TurnResult:
        if not result.success:
            return TurnResult.failure(result.message, result.error_code, player_name)

        s = self.session
        return TurnResult(
            success=True,
            events=[
                GameEvent(type="action_result", payload=result.to_dict(), target=player_name),
                GameEvent(
                    type=event_type,
                    payload={
                        "player_name": player_name,
                        "stock_name": result.data.get("stock_name"),
                        "player_cash": result.data.get("player_cash"),
                        "actions_remaining": result.data.get("actions_remaining"),
                        "board_stocks": self._board_view(),
                        "players": [l.to_dict() for l in s.players.ledgers],
                        "net_worths": s.scoring.all_net_worths(s.indexes),
                    },
                ),
            ],
            data=result.data,
        )

    # =========================================================================
    # Turn passing
    # =========================================================================

    def _advance_events(self, advance: TurnAdvance) -> list[GameEvent]:
        s = self.session
        events: list[GameEvent] = []

        if advance.report is not None:
            report = advance.report
            if report.dividend_payments:
                events.append(GameEvent(
                    type="dividends_paid",
                    payload={"payments": [p.to_dict() for p in report.dividend_payments]},
                ))
            events.append(GameEvent(
                type="round_update",
                payload={
                    "round": s.round_state.round_number,
                    "message": report.summary,
                    "report": report.to_dict(),
                    "indexes": self._indexes_view(),
                    "board_stocks": self._board_view(),
                    "active_events": s.events.active_events_json(),
                    "visual_effects": [e.to_dict() for e in s.events.visual_effects()],
                    "turn_order": list(s.round_state.turn_order),
                    "players": [l.to_dict() for l in s.players.ledgers],
                    "recent_log": [e.to_dict() for e in s.log.recent(5)],
                },
            ))

        if advance.game_over is not None:
            if s.state != SessionState.GAME_OVER:
                s.state = SessionState.GAME_OVER
                logger.info("Session %s finished", s.session_id)
            events.append(GameEvent(type="game_over", payload=advance.game_over.to_dict()))
            return events

        if advance.current_player is not None:
            events.append(self._turn_event(advance.current_player))
        return events

    def _turn_event(self, player_name: str | None) -> GameEvent:
        ledger = self.session.players.get(player_name) if player_name else None
        return GameEvent(
            type="your_turn",
            payload={
                "player_name": player_name,
                "actions_remaining": ledger.actions_remaining if ledger else 0,
                "round": self.session.round_state.round_number,
            },
        )

    # =========================================================================
    # Views
    # =========================================================================

    def snapshot(self) -> dict[str, Any]:
        """Full public state of the session."""
        with self.session.lock:
            return self._snapshot()

    def _snapshot(self) -> dict[str, Any]:
        s = self.session
        data = {
            "session_id": s.session_id,
            "state": s.state.value,
            "round": s.round_state.to_dict(),
            "max_rounds": s.settings.max_rounds,
            "players": [l.to_dict() for l in s.players.ledgers],
            "indexes": self._indexes_view(),
            "board_stocks": self._board_view(),
            "active_events": s.events.active_events_json(),
            "visual_effects": [e.to_dict() for e in s.events.visual_effects()],
            "action_deck_size": len(s.action_deck),
            "recent_log": [e.to_dict() for e in s.log.recent(5)],
        }
        if s.orchestrator.game_over is not None:
            data["game_over"] = s.orchestrator.game_over.to_dict()
        return data

    def _indexes_view(self) -> list[dict[str, Any]]:
        return [index.to_dict() for index in self.session.indexes.values()]

    def _board_view(self) -> list[dict[str, Any]]:
        s = self.session
        counts = s.players.ownership_counts()
        view = []
        for stock in s.trading.board_stocks:
            owned = counts.get(stock.name, 0)
            data = stock.to_dict()
            data["ownership_count"] = owned
            data["price"] = s.trading.calculate_price(stock, s.indexes, owned)
            data["sell_price"] = s.trading.calculate_sell_price(stock, s.indexes, owned)
            view.append(data)
        return view
