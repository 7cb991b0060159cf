"""
Engine Core - Round/turn orchestration for the market game.

The engine:
1. Holds per-session market state (indexes, ledgers, events, board)
2. Prices, buys and sells stocks
3. Draws and resolves market events and bubbles
4. Dispatches action cards
5. Sequences turns and rounds through to final scoring
"""

from .random_source import RandomSource, SeededRandom
from .deck import ShuffledDeck
from .state import (
    GamePhase,
    EventStatus,
    StockAction,
    MarketIndex,
    ActiveEvent,
    BoardStock,
    OwnedStock,
    OwnedStockRef,
    ActionCard,
    PlayerLedger,
    PlayerRegistry,
    RoundState,
)
from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .game_log import GameLog
from .events import EventEngine
from .trading import TradingEngine, StockDeck, BoardUpdate
from .action_cards import ActionContext, ActionDeck, execute_action_card
from .scoring import ScoreEngine, PlayerStanding
from .orchestrator import RoundOrchestrator, OrchestratorState, TurnAdvance, RoundReport

__all__ = [
    "RandomSource",
    "SeededRandom",
    "ShuffledDeck",
    "GamePhase",
    "EventStatus",
    "StockAction",
    "MarketIndex",
    "ActiveEvent",
    "BoardStock",
    "OwnedStock",
    "OwnedStockRef",
    "ActionCard",
    "PlayerLedger",
    "PlayerRegistry",
    "RoundState",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "GameLog",
    "EventEngine",
    "TradingEngine",
    "StockDeck",
    "BoardUpdate",
    "ActionContext",
    "ActionDeck",
    "execute_action_card",
    "ScoreEngine",
    "PlayerStanding",
    "RoundOrchestrator",
    "OrchestratorState",
    "TurnAdvance",
    "RoundReport",
]
