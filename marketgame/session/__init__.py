"""
Session Module - Manages in-memory game sessions.

A session represents one play-through of the market game:
- Created when a room opens
- Owns every ledger, index, deck and engine for that game
- Serializes all mutations behind its own lock
- Destroyed when the game ends or everyone leaves

Sessions are independent and never persisted.
"""

from .manager import SessionManager, GameSession, SessionState
from .game_loop import GameLoop, GameEvent, TurnResult

__all__ = [
    "SessionManager",
    "GameSession",
    "SessionState",
    "GameLoop",
    "GameEvent",
    "TurnResult",
]
