"""
API Module - Network interface for game sessions.

Exposes the engine via REST and WebSocket. Clients:
1. Create a session (optionally with a custom catalog)
2. Join it by player name
3. Start the game
4. Submit trades and action cards on their turn
5. Receive round updates and the final standings

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    JoinRequest,
    PlayerRequest,
    PurchaseRequest,
    SellRequest,
    PlayCardRequest,
    # Responses
    ActionResponse,
    SessionResponse,
    GameStateResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    IndexInfo,
    BoardStockInfo,
    GameEventInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "JoinRequest",
    "PlayerRequest",
    "PurchaseRequest",
    "SellRequest",
    "PlayCardRequest",
    # Responses
    "ActionResponse",
    "SessionResponse",
    "GameStateResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "IndexInfo",
    "BoardStockInfo",
    "GameEventInfo",
    # Service
    "APIService",
    "create_app",
]
