"""
FastAPI Application - REST and WebSocket transport for game sessions.

Endpoints:
    POST   /api/v1/sessions                         Create game session
    GET    /api/v1/sessions                         List active sessions
    GET    /api/v1/sessions/{id}                    Get session status
    DELETE /api/v1/sessions/{id}                    End session
    POST   /api/v1/sessions/{id}/players            Join
    DELETE /api/v1/sessions/{id}/players/{name}     Leave
    POST   /api/v1/sessions/{id}/start              Start the game
    POST   /api/v1/sessions/{id}/purchase           Buy a board stock
    POST   /api/v1/sessions/{id}/sell               Sell an owned unit
    POST   /api/v1/sessions/{id}/cards/draw         Draw an action card
    POST   /api/v1/sessions/{id}/cards/play         Play an action card
    POST   /api/v1/sessions/{id}/end-turn           End the current turn
    GET    /api/v1/sessions/{id}/state              Get game state
    WS     /api/v1/sessions/{id}/ws?player_name=..  Real-time events

Every game operation returns an ActionResponse. The same events are pushed
to the session's WebSocket clients; events with a target go only to the
connection registered for that player.

Rejected game actions are normal responses (success=false with the
engine's error code), not HTTP errors.
"""

from typing import Optional, Union
import json
import logging
import os

logger = logging.getLogger(__name__)

# Environment configuration
MARKET_ENV = os.getenv("MARKET_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

WS_ACTIONS = {
    "purchase_stock",
    "sell_stock",
    "draw_action_card",
    "play_action_card",
    "end_turn",
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (configured from the
            environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..engine_core.action import Action
    from .service import default_service
    from .schemas import (
        # Request models
        CreateSessionRequest,
        JoinRequest,
        PlayerRequest,
        PurchaseRequest,
        SellRequest,
        PlayCardRequest,
        # Response models
        ActionResponse,
        SessionResponse,
        GameStateResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Market Game API",
        description="""
Turn-based stock market game for 2+ players.

## Game flow

1. `POST /sessions` then each player `POST /sessions/{id}/players`
2. `POST /sessions/{id}/start`
3. The current player buys, sells, draws or plays cards; the turn passes
   when their actions run out or they call `end-turn`
4. After the last round a `game_over` event carries the final rankings

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `VALIDATION_ERROR` | Invalid request |
| `INVALID_CATALOG` | Supplied catalog failed validation |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or default_service()

    # WebSocket connections: session_id -> [(socket, player_name)]
    ws_connections: dict[str, list[tuple[WebSocket, Optional[str]]]] = {}

    # =========================================================================
    # Helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_for(response: ErrorResponse) -> JSONResponse:
        status_code = 404 if response.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return make_error_response(
            response.error_code, response.error, status_code, response.details
        )

    async def broadcast_to_session(session_id: str, response: ActionResponse):
        """Deliver a response's events to the session's WebSocket clients."""
        if session_id not in ws_connections or not response.events:
            return
        dead_connections = []
        for ws, player_name in ws_connections[session_id]:
            for event in response.events:
                if event.target is not None and event.target != player_name:
                    continue
                try:
                    await ws.send_json(event.model_dump(mode="json"))
                except (RuntimeError, WebSocketDisconnect) as e:
                    logger.debug("Dropping websocket for %s: %s", player_name, e)
                    dead_connections.append((ws, player_name))
                    break
        for conn in dead_connections:
            if conn in ws_connections[session_id]:
                ws_connections[session_id].remove(conn)

    async def respond(session_id: str, response):
        if isinstance(response, ErrorResponse):
            return error_for(response)
        await broadcast_to_session(session_id, response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: CreateSessionRequest) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session in the lobby state.

        Omitted settings fall back to the server defaults; omitting
        `catalog` uses the classic catalog.
        """
        response = api_service.create_session(body)
        if isinstance(response, ErrorResponse):
            return error_for(response)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return error_for(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Lobby Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/players",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Join a session",
    )
    async def join(session_id: str, body: JoinRequest):
        return await respond(session_id, api_service.join(session_id, body.player_name))

    @app.delete(
        "/api/v1/sessions/{session_id}/players/{player_name}",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Leave a session",
    )
    async def leave(session_id: str, player_name: str):
        return await respond(session_id, api_service.leave(session_id, player_name))

    @app.post(
        "/api/v1/sessions/{session_id}/start",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Lobby"],
        summary="Start the game",
    )
    async def start_game(session_id: str):
        return await respond(session_id, api_service.start_game(session_id))

    # =========================================================================
    # Game Loop Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/purchase",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Buy one unit of a board stock",
    )
    async def purchase(session_id: str, body: PurchaseRequest):
        action = Action.purchase(body.player_name, body.stock_name)
        return await respond(session_id, api_service.apply_action(session_id, action))

    @app.post(
        "/api/v1/sessions/{session_id}/sell",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Sell one owned unit",
    )
    async def sell(session_id: str, body: SellRequest):
        action = Action.sell(
            body.player_name, body.stock_name, body.purchase_price, body.purchase_round
        )
        return await respond(session_id, api_service.apply_action(session_id, action))

    @app.post(
        "/api/v1/sessions/{session_id}/cards/draw",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Draw an action card",
    )
    async def draw_card(session_id: str, body: PlayerRequest):
        action = Action.draw_card(body.player_name)
        return await respond(session_id, api_service.apply_action(session_id, action))

    @app.post(
        "/api/v1/sessions/{session_id}/cards/play",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Play an action card",
    )
    async def play_card(session_id: str, body: PlayCardRequest):
        action = Action.play_card(body.player_name, body.card_id, body.stock_name)
        return await respond(session_id, api_service.apply_action(session_id, action))

    @app.post(
        "/api/v1/sessions/{session_id}/end-turn",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="End the current turn",
    )
    async def end_turn(session_id: str, body: PlayerRequest):
        action = Action.end_turn(body.player_name)
        return await respond(session_id, api_service.apply_action(session_id, action))

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Get the full game state",
    )
    async def get_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return error_for(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    def action_from_message(message: dict) -> Action:
        payload = message.get("payload") or {}
        player_name = str(payload.get("player_name", ""))
        kind = message.get("type")
        if kind == "purchase_stock":
            return Action.purchase(player_name, str(payload.get("stock_name", "")))
        if kind == "sell_stock":
            return Action.sell(
                player_name,
                str(payload.get("stock_name", "")),
                int(payload["purchase_price"]),
                int(payload["purchase_round"]),
            )
        if kind == "draw_action_card":
            return Action.draw_card(player_name)
        if kind == "play_action_card":
            return Action.play_card(
                player_name, str(payload.get("card_id", "")), payload.get("stock_name")
            )
        return Action.end_turn(player_name)

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(
        websocket: WebSocket,
        session_id: str,
        player_name: Optional[str] = None,
    ):
        """
        WebSocket for real-time updates.

        Messages from server: every GameEvent of the session (player_joined,
        game_started, your_turn, stock_purchased, stock_sold, round_update,
        dividends_paid, action_result, game_over, ...).

        Messages from client:
        - ping: Keep-alive
        - purchase_stock / sell_stock / draw_action_card /
          play_action_card / end_turn: {"type": ..., "payload": {...}}
        """
        await websocket.accept()

        conn = (websocket, player_name)
        ws_connections.setdefault(session_id, []).append(conn)

        try:
            # Send initial state
            response = api_service.get_game_state(session_id)
            if not isinstance(response, ErrorResponse):
                await websocket.send_json({
                    "type": "state_snapshot",
                    "payload": response.model_dump(mode="json"),
                })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue

                kind = message.get("type") if isinstance(message, dict) else None
                if kind == "ping":
                    await websocket.send_json({"type": "pong"})
                elif kind in WS_ACTIONS:
                    try:
                        action = action_from_message(message)
                    except (KeyError, TypeError, ValueError) as e:
                        await websocket.send_json({
                            "type": "error",
                            "payload": {"message": f"Malformed {kind}: {e}"},
                        })
                        continue
                    await respond(session_id, api_service.apply_action(session_id, action))
                else:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": f"Unknown message type: {kind}"},
                    })

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for %s in %s", player_name, session_id)
        finally:
            if session_id in ws_connections and conn in ws_connections[session_id]:
                ws_connections[session_id].remove(conn)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="marketgame",
            version="1.0.0",
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Market Game API",
            "version": "1.0.0",
            "env": MARKET_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# Create default app instance for uvicorn
app = None


def get_app():
    """Get or create the default app instance."""
    global app
    if app is None:
        app = create_app()
    return app
