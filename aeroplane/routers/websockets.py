from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..state import manager, registry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["ws"])


def _decode(message: dict) -> Any:
    text = message.get("text")
    if text is None:
        text = (message.get("bytes") or b"").decode("utf-8")
    return json.loads(text)


# The bundled client opens its socket on the bare host, so "/" is the primary
# route; "/ws" is kept for clients served from elsewhere.
@router.websocket("/")
@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    connection = registry.register(ws)
    writer = asyncio.create_task(connection.pump())
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            try:
                data = _decode(message)
            except (UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.warning("Unparseable message from %s: %s", connection.connection_id, exc)
                continue
            manager.submit(connection, data)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning("WebSocket error on %s: %s", connection.connection_id, e)
    finally:
        registry.on_close(connection)
        manager.submit_disconnect(connection)
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass
