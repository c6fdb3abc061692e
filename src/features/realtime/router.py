"""Realtime WebSocket endpoint."""

import logging

from fastapi import APIRouter, Depends, WebSocket

from .hub import ChannelHub, get_hub

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, hub: ChannelHub = Depends(get_hub)):
    """JSON text frames: ``authenticate``, ``chat_message`` and ``ping``."""
    await websocket.accept()
    connection = await hub.connect(websocket)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes") or b""
            await hub.handle_message(connection, raw)
    finally:
        await hub.disconnect(connection)
