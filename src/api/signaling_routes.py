"""WebSocket endpoint carrying the call-signaling protocol.

Each client keeps one socket open, registers its user id with `register-user`
and then exchanges call-control frames. Closing the socket tears down the
user's presence and any call it was part of.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, WebSocket
from fastapi.websockets import WebSocketState

from api.dependencies import get_hub
from signaling.hub import ConnectionHub

router = APIRouter(tags=["signaling"])


@router.websocket("/ws")
async def signaling_socket(
    websocket: WebSocket,
    hub: ConnectionHub = Depends(get_hub),
) -> None:
    connection_id = await hub.connect(websocket)
    try:
        while websocket.client_state == WebSocketState.CONNECTED:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            text = message.get("text")
            if text is None:
                await hub.reject(connection_id, "Binary frames are not supported")
                continue
            await hub.dispatch(connection_id, text)
    finally:
        await hub.disconnect(connection_id)
