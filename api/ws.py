"""WebSocket endpoint for a game's broadcast channel."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from config import STATE_UPDATE_EVENT

router = APIRouter()
logger = logging.getLogger(__name__)

# Close code sent when the hub stops delivering to a lagging socket.
CLOSE_DROPPED = 1011


@router.websocket("/games/{game_id}/ws")
async def websocket_endpoint(websocket: WebSocket, game_id: str) -> None:
    """Subscribe to a game's channel.

    Every message broadcast for the game is forwarded to the socket.
    State updates sent by the client are rebroadcast to all subscribers,
    the sender included. If the hub drops the socket for failing or timing
    out on a delivery, the socket is closed so the client can reconnect.
    """
    hub = websocket.app.state.hub
    await websocket.accept()

    async def forward(message: dict[str, Any]) -> None:
        await websocket.send_json(message)

    async def dropped() -> None:
        logger.warning("Closing lagging socket for game %s", game_id)
        if websocket.application_state == WebSocketState.CONNECTED:
            await websocket.close(code=CLOSE_DROPPED)

    unsubscribe = hub.subscribe(game_id, forward, on_drop=dropped)
    try:
        await websocket.send_json({"type": "connected", "game_id": game_id})

        while websocket.application_state == WebSocketState.CONNECTED:
            try:
                data = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            if isinstance(data, dict) and data.get("type") == STATE_UPDATE_EVENT:
                status = await hub.send(game_id, data)
                if status != "ok" and websocket.application_state == WebSocketState.CONNECTED:
                    await websocket.send_json({"type": "error", "status": status})
    finally:
        unsubscribe()
