"""Live websocket connections and non-blocking outbound delivery."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import WebSocket

from .schemas import WireModel

logger = logging.getLogger(__name__)


class Connection:
    """One client channel plus the identity it claimed in a room."""

    def __init__(self, websocket: Any):
        self.connection_id = uuid.uuid4().hex
        self.websocket = websocket
        self.open = True
        # Set once a create/join request is accepted for this connection.
        self.player_id: Optional[str] = None
        self.room_id: Optional[str] = None
        self.outbox: asyncio.Queue[dict] = asyncio.Queue()

    @property
    def seated(self) -> bool:
        return self.room_id is not None

    async def pump(self) -> None:
        """Drain the outbox to the websocket until the connection closes."""
        while True:
            payload = await self.outbox.get()
            try:
                await self.websocket.send_json(payload)
            except Exception as exc:
                logger.info("Write to connection %s failed: %s", self.connection_id, exc)
                self.open = False
                return

    def __repr__(self) -> str:
        return f"<Connection {self.connection_id} player={self.player_id!r} room={self.room_id!r}>"


class ConnectionRegistry:
    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}

    def register(self, websocket: WebSocket) -> Connection:
        """Track an already-accepted websocket."""
        connection = Connection(websocket)
        self._connections[connection.connection_id] = connection
        logger.info("Client connected: %s", connection.connection_id)
        return connection

    def send(self, connection: Connection, message: WireModel) -> None:
        """Queue *message* for *connection*; dropped if the connection has closed."""
        if not connection.open:
            logger.debug(
                "Dropping %s for closed connection %s",
                getattr(message, "type", type(message).__name__),
                connection.connection_id,
            )
            return
        connection.outbox.put_nowait(message.to_wire())

    def on_close(self, connection: Connection) -> None:
        connection.open = False
        self._connections.pop(connection.connection_id, None)
        logger.info("Client disconnected: %s", connection.connection_id)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return isinstance(connection, Connection) and connection.connection_id in self._connections


__all__ = ["Connection", "ConnectionRegistry"]
