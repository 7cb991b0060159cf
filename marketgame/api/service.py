"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session operations
2. Owns the session manager and one GameLoop per session
3. Formats engine results as response schemas

This layer is framework-agnostic (usable from FastAPI, a CLI, or tests).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging

from ..catalog import CatalogValidationError, load_catalog
from ..config import GameSettings
from ..engine_core.action import Action
from ..session import GameLoop, GameSession, SessionManager, TurnResult
from .schemas import (
    ActionResponse,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    GameEventInfo,
    GameStateResponse,
    SessionResponse,
    SessionStatus,
)

logger = logging.getLogger(__name__)

SETTINGS_OVERRIDES = (
    "max_rounds",
    "actions_per_turn",
    "starting_cash",
    "max_board_stocks",
    "new_stocks_per_round",
    "seed",
)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest())
        service.join(session.session_id, "alice")
        service.join(session.session_id, "bob")
        service.start_game(session.session_id)

        response = service.apply_action(
            session.session_id, Action.purchase("alice", "TechTitan")
        )
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Create a session in the lobby state."""
        overrides = {
            name: getattr(request, name)
            for name in SETTINGS_OVERRIDES
            if getattr(request, name) is not None
        }
        settings = self.session_manager.default_settings.model_copy(update=overrides)

        catalog = None
        if request.catalog is not None:
            try:
                catalog = load_catalog(request.catalog)
            except CatalogValidationError as e:
                return ErrorResponse(
                    error=str(e),
                    error_code=ErrorCode.INVALID_CATALOG,
                    details={"errors": e.errors},
                )

        if request.session_id and self.session_manager.get_session(request.session_id):
            return ErrorResponse(
                error=f"Session {request.session_id} already exists",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        session = self.session_manager.create_session(
            settings=settings,
            catalog=catalog,
            session_id=request.session_id,
        )
        self._game_loops[session.session_id] = GameLoop(session)
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        if not self.session_manager.get_session(session_id):
            return False
        self.session_manager.end_session(session_id, reason)
        self._game_loops.pop(session_id, None)
        return True

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def get_loop(self, session_id: str) -> GameLoop | None:
        return self._game_loops.get(session_id)

    # =========================================================================
    # Game operations
    # =========================================================================

    def join(self, session_id: str, player_name: str) -> ActionResponse | ErrorResponse:
        loop = self.get_loop(session_id)
        if not loop:
            return self._not_found(session_id)
        return self._action_response(loop.join(player_name))

    def leave(self, session_id: str, player_name: str) -> ActionResponse | ErrorResponse:
        loop = self.get_loop(session_id)
        if not loop:
            return self._not_found(session_id)
        return self._action_response(loop.leave(player_name))

    def start_game(self, session_id: str) -> ActionResponse | ErrorResponse:
        loop = self.get_loop(session_id)
        if not loop:
            return self._not_found(session_id)
        return self._action_response(loop.start_game())

    def apply_action(self, session_id: str, action: Action) -> ActionResponse | ErrorResponse:
        loop = self.get_loop(session_id)
        if not loop:
            return self._not_found(session_id)
        return self._action_response(loop.apply(action))

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        loop = self.get_loop(session_id)
        if not loop:
            return self._not_found(session_id)

        snapshot = loop.snapshot()
        current = snapshot["round"]["current_player"]
        players = []
        for player in snapshot["players"]:
            info = dict(player)
            info["is_current_turn"] = player["name"] == current
            players.append(info)

        return GameStateResponse(
            session_id=session_id,
            status=SessionStatus(snapshot["state"]),
            round_number=snapshot["round"]["round_number"],
            max_rounds=snapshot["max_rounds"],
            current_player=current,
            turn_order=snapshot["round"]["turn_order"],
            players=players,
            indexes=snapshot["indexes"],
            board_stocks=snapshot["board_stocks"],
            active_events=snapshot["active_events"],
            action_deck_size=snapshot["action_deck_size"],
            recent_log=snapshot["recent_log"],
            game_over=snapshot.get("game_over"),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _session_response(self, session: GameSession) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            players=session.players.names,
            current_player=session.round_state.current_player,
            round_number=session.round_state.round_number,
            max_rounds=session.settings.max_rounds,
            created_at=session.created_at,
        )

    def _action_response(self, result: TurnResult) -> ActionResponse:
        return ActionResponse(
            success=result.success,
            message=result.error or "",
            error_code=result.error_code.value if result.error_code else None,
            data=_jsonable(result.data),
            events=[GameEventInfo(**event.to_dict()) for event in result.events],
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )


def _jsonable(data: dict[str, Any]) -> dict[str, Any]:
    """Result data may carry engine objects; keep only plain values."""
    return {k: v for k, v in data.items() if isinstance(v, (str, int, float, bool, list, dict, type(None)))}


def default_service() -> APIService:
    """Service configured from MARKET_* environment variables."""
    return APIService(session_manager=SessionManager(GameSettings.from_env()))
