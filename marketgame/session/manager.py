"""
Session Manager - Creates and manages game sessions.

One GameSession owns every piece of state for one game: the player
ledgers, the sector indexes, the event engine, the board and the decks.
Engines receive references to these objects, never copies.

LIFECYCLE:
1. Session created (lobby): players join and leave freely
2. start_game: indexes drawn, decks shuffled, turn order fixed, round 1 begins
3. Turns and rounds play out until max_rounds
4. Game over: final standings broadcast, further mutations rejected
5. Session ended and removed from memory

Sessions are in-memory only. No persistence.

Every mutating operation on a session runs under the session's lock.
Sessions share no state with each other.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import threading
import time
import uuid

from ..catalog import Catalog
from ..config import GameSettings
from ..engine_core.action_cards import ActionDeck
from ..engine_core.events import EventEngine
from ..engine_core.game_log import GameLog
from ..engine_core.orchestrator import RoundOrchestrator
from ..engine_core.random_source import RandomSource, SeededRandom
from ..engine_core.scoring import ScoreEngine
from ..engine_core.state import MarketIndex, PlayerRegistry, RoundState
from ..engine_core.trading import StockDeck, TradingEngine
from ..games.classic import create_classic_catalog

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    LOBBY = "lobby"  # Waiting for players
    PLAYING = "playing"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Everyone left or the session was closed


@dataclass(eq=False)
class GameSession:
    """
    All state for one game.

    Contains:
    - Settings and the (validated) catalog
    - The session's random source
    - Player ledgers, sector indexes and round state
    - The engines wired to those objects
    - The player-visible game log
    """
    session_id: str
    settings: GameSettings
    catalog: Catalog
    rng: RandomSource
    created_at: float

    state: SessionState = SessionState.LOBBY

    players: PlayerRegistry | None = None
    indexes: dict[str, MarketIndex] = field(default_factory=dict)
    round_state: RoundState = field(default_factory=RoundState)
    log: GameLog | None = None

    events: EventEngine | None = None
    trading: TradingEngine | None = None
    scoring: ScoreEngine | None = None
    stock_deck: StockDeck | None = None
    action_deck: ActionDeck | None = None
    orchestrator: RoundOrchestrator | None = None

    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def __post_init__(self):
        if self.players is None:
            self.players = PlayerRegistry(self.rng)
        if self.log is None:
            self.log = GameLog(self.session_id)
        if self.events is None:
            self.events = EventEngine(self.catalog.events, self.rng)
        if self.trading is None:
            self.trading = TradingEngine(self.players, self.log)
        if self.scoring is None:
            self.scoring = ScoreEngine(self.players, self.trading)
        if self.stock_deck is None:
            self.stock_deck = StockDeck(self.catalog.stocks, self.rng)
        if self.action_deck is None:
            self.action_deck = ActionDeck(self.catalog.action_cards, self.rng)
        if self.orchestrator is None:
            self.orchestrator = RoundOrchestrator(
                settings=self.settings,
                round_state=self.round_state,
                players=self.players,
                indexes=self.indexes,
                events=self.events,
                trading=self.trading,
                scoring=self.scoring,
                stock_deck=self.stock_deck,
                log=self.log,
            )

    def is_active(self) -> bool:
        return self.state in {SessionState.LOBBY, SessionState.PLAYING}

    def reset_indexes(self) -> None:
        """Draw fresh starting prices. The dict is refilled in place."""
        self.indexes.clear()
        for definition in self.catalog.indexes:
            self.indexes[definition.name] = MarketIndex.from_definition(definition, self.rng)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with their catalog and settings
    - Track active sessions
    - Clean up finished sessions
    """

    def __init__(self, default_settings: GameSettings | None = None):
        self.default_settings = default_settings or GameSettings()
        self._sessions: dict[str, GameSession] = {}
        self._lock = threading.Lock()

    def create_session(
        self,
        settings: GameSettings | None = None,
        catalog: Catalog | None = None,
        session_id: str | None = None,
    ) -> GameSession:
        """
        Create a new session in the lobby state.

        Args:
            settings: Game rules, defaults to the manager's settings
            catalog: Card catalog, defaults to the classic catalog
            session_id: Optional explicit ID (a room name)

        Returns:
            New GameSession waiting for players
        """
        settings = settings or self.default_settings
        rng = SeededRandom(settings.seed)
        session = GameSession(
            session_id=session_id or str(uuid.uuid4()),
            settings=settings,
            catalog=catalog or create_classic_catalog(rng),
            rng=rng,
            created_at=time.time(),
        )

        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Created session %s (catalog %s)", session.session_id, session.catalog.catalog_id)
        return session

    def get_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> None:
        """Remove a session from memory."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session:
            with session.lock:
                if reason == "completed":
                    session.state = SessionState.GAME_OVER
                else:
                    session.state = SessionState.ABANDONED
            logger.info("Ended session %s (%s)", session_id, reason)

    def list_active_sessions(self) -> list[str]:
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End finished sessions older than max_age.

        Returns how many were removed.
        """
        current_time = time.time()
        stale = [
            session_id for session_id, session in list(self._sessions.items())
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in stale:
            self.end_session(session_id, reason="stale")
        return len(stale)
