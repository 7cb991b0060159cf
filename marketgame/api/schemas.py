"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between game clients and the engine.

Error Codes (transport level):
- SESSION_NOT_FOUND: Session does not exist or has ended
- VALIDATION_ERROR: Request body or settings are invalid
- INVALID_CATALOG: A supplied catalog failed validation
- INTERNAL_ERROR: Unexpected failure

Rejected game actions are not transport errors: they come back as an
ActionResponse with success=false and the engine's error code
(NO_ACTIONS, NOT_YOUR_TURN, INSUFFICIENT_FUNDS, ...).
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    LOBBY = "lobby"
    PLAYING = "playing"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured transport error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CATALOG = "INVALID_CATALOG"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class IndexInfo(BaseModel):
    """A sector index."""
    name: str
    price: int = Field(ge=1)
    emoji: str = "📈"
    description: str = ""


class BoardStockInfo(BaseModel):
    """A stock offered for purchase, with its live prices."""
    name: str
    sector: str
    base_cost: int
    dividend: int
    growth: int
    description: str = ""
    archetype: str = ""
    is_carryover: bool = False
    ownership_count: int = 0
    price: int
    sell_price: int


class PlayerInfo(BaseModel):
    """A player's public ledger."""
    name: str
    cash: int
    actions_remaining: int = 0
    color: str = ""
    emoji: str = ""
    is_current_turn: bool = False
    portfolio: list[dict[str, Any]] = Field(default_factory=list)
    action_cards: list[dict[str, Any]] = Field(default_factory=list)


class StandingInfo(BaseModel):
    """One row of the final rankings."""
    name: str
    cash: int
    net_worth: int
    stock_count: int


class GameOverInfo(BaseModel):
    """End-of-game summary."""
    rankings: list[StandingInfo] = Field(default_factory=list)
    winners: list[str] = Field(default_factory=list)
    message: str = ""


class LogEntryInfo(BaseModel):
    round: int
    timestamp: str
    message: str


class GameEventInfo(BaseModel):
    """A logical notification; `target` is set for private messages."""
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    target: Optional[str] = None


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session. Unset fields use server defaults."""
    session_id: Optional[str] = Field(None, description="Explicit session/room name")
    max_rounds: Optional[int] = Field(None, ge=1, description="Rounds before the game ends")
    actions_per_turn: Optional[int] = Field(None, ge=1)
    starting_cash: Optional[int] = Field(None, ge=0)
    max_board_stocks: Optional[int] = Field(None, ge=1)
    new_stocks_per_round: Optional[int] = Field(None, ge=0)
    seed: Optional[int] = Field(None, description="Seed for reproducible games")
    catalog: Optional[dict[str, Any]] = Field(
        None, description="Custom catalog (JSON); the classic catalog when omitted"
    )


class JoinRequest(BaseModel):
    player_name: str = Field(..., min_length=1, description="Display name, unique per session")


class PlayerRequest(BaseModel):
    """Request carrying only the acting player (draw card, end turn)."""
    player_name: str


class PurchaseRequest(BaseModel):
    player_name: str
    stock_name: str = Field(..., description="Name of a stock on the board")


class SellRequest(BaseModel):
    """Sell one specific owned unit, identified by name, price and round bought."""
    player_name: str
    stock_name: str
    purchase_price: int
    purchase_round: int


class PlayCardRequest(BaseModel):
    player_name: str
    card_id: str
    stock_name: Optional[str] = Field(None, description="Target board stock, for targeted cards")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    players: list[str] = Field(default_factory=list)
    current_player: Optional[str] = None
    round_number: int = 1
    max_rounds: int = 6
    created_at: float = 0.0
    api_version: str = "v1"


class ActionResponse(BaseModel):
    """Result of a session operation, with the events it produced."""
    success: bool
    message: str = ""
    error_code: Optional[str] = Field(None, description="Engine error code when rejected")
    data: dict[str, Any] = Field(default_factory=dict)
    events: list[GameEventInfo] = Field(default_factory=list)
    api_version: str = "v1"


class GameStateResponse(BaseModel):
    """Complete public game state."""
    session_id: str
    status: SessionStatus
    round_number: int
    max_rounds: int
    current_player: Optional[str] = None
    turn_order: list[str] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    indexes: list[IndexInfo] = Field(default_factory=list)
    board_stocks: list[BoardStockInfo] = Field(default_factory=list)
    active_events: list[dict[str, Any]] = Field(default_factory=list)
    action_deck_size: int = 0
    recent_log: list[LogEntryInfo] = Field(default_factory=list)
    game_over: Optional[GameOverInfo] = None
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
