"""Room matchmaking.

``RoomManager`` owns every live room. All mutations flow through a single
``asyncio.Queue`` inbox consumed by :meth:`RoomManager.run`; each command is
handled synchronously to completion, and outbound messages only ever land on
per-connection queues, so no handler awaits and room state has one writer.

:meth:`RoomManager.handle`, :meth:`RoomManager.disconnect` and
:meth:`RoomManager.expire_idle` are plain functions and can be driven without a
running event loop.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from .connections import Connection, ConnectionRegistry
from .constants import (
    MAX_PLAYERS,
    PALETTE,
    REASON_ALREADY_SEATED,
    REASON_BAD_ROOM_CODE,
    REASON_DUPLICATE_PLAYER,
    REASON_GAME_STARTED,
    REASON_ROOM_EXISTS,
    REASON_ROOM_FULL,
    REASON_ROOM_NOT_FOUND,
    ROOM_CODE_LENGTH,
)
from .room import Player, Room, RoomStatus
from .schemas import (
    REQUEST_TYPES,
    CreateRoomMessage,
    GameStarted,
    JoinRoomMessage,
    PlayerJoined,
    RoomCreated,
    RoomJoined,
    RoomSummary,
    StartGameMessage,
    WireModel,
)

logger = logging.getLogger(__name__)

# Inbox command kinds
_MESSAGE = "message"
_DISCONNECT = "disconnect"
_EXPIRE = "expire"

Command = Tuple[str, Optional[Connection], Any]


class RoomManager:
    def __init__(self, registry: ConnectionRegistry, max_players: int = MAX_PLAYERS):
        self.registry = registry
        self.max_players = max_players
        self._rooms: Dict[str, Room] = {}
        self._inbox: asyncio.Queue[Command] = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None

    # ---------------------------------------------------------------------
    # Inbox
    # ---------------------------------------------------------------------

    def submit(self, connection: Connection, data: Any) -> None:
        self._inbox.put_nowait((_MESSAGE, connection, data))

    def submit_disconnect(self, connection: Connection) -> None:
        self._inbox.put_nowait((_DISCONNECT, connection, None))

    def submit_expire(self, ttl_seconds: float) -> None:
        self._inbox.put_nowait((_EXPIRE, None, ttl_seconds))

    def start(self) -> asyncio.Task:
        """Reset to an empty registry and spawn the consumer on the running loop."""
        self._rooms.clear()
        self._inbox = asyncio.Queue()
        self._consumer = asyncio.create_task(self.run())
        return self._consumer

    async def stop(self) -> None:
        if self._consumer is None:
            return
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None

    async def run(self) -> None:
        """Consume the inbox forever, one command at a time."""
        logger.info("Room manager started")
        while True:
            kind, connection, payload = await self._inbox.get()
            try:
                if kind == _MESSAGE:
                    self.handle(connection, payload)
                elif kind == _DISCONNECT:
                    self.disconnect(connection)
                elif kind == _EXPIRE:
                    self.expire_idle(payload)
            except Exception:
                logger.exception("Unhandled error processing %s from %r", kind, connection)
            finally:
                self._inbox.task_done()

    # ---------------------------------------------------------------------
    # Dispatch
    # ---------------------------------------------------------------------

    def handle(self, connection: Connection, data: Any) -> None:
        """Process one decoded client envelope."""
        if not isinstance(data, dict):
            logger.warning("Malformed message from %s: expected object, got %s",
                           connection.connection_id, type(data).__name__)
            return

        msg_type = data.get("type")
        model = REQUEST_TYPES.get(msg_type) if isinstance(msg_type, str) else None
        if model is None:
            logger.info("Unknown message type from %s: %r", connection.connection_id, msg_type)
            return

        try:
            message = model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Malformed %s from %s: %s", msg_type, connection.connection_id,
                           exc.errors(include_url=False))
            return

        if isinstance(message, CreateRoomMessage):
            self.create_room(connection, message)
        elif isinstance(message, JoinRoomMessage):
            self.join_room(connection, message)
        elif isinstance(message, StartGameMessage):
            self.start_game(connection, message)

    # ---------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------

    def create_room(self, connection: Connection, message: CreateRoomMessage) -> None:
        room_id = message.room_id

        if len(room_id) != ROOM_CODE_LENGTH:
            logger.info("Rejected create with bad room code %r from %s", room_id, connection.connection_id)
            self._reply(connection, RoomCreated(success=False, room_id=room_id, reason=REASON_BAD_ROOM_CODE))
            return
        if connection.seated:
            self._reply(connection, RoomCreated(success=False, room_id=room_id, reason=REASON_ALREADY_SEATED))
            return
        if room_id in self._rooms:
            logger.info("Rejected create of existing room %s by %s", room_id, message.player_id)
            self._reply(connection, RoomCreated(success=False, room_id=room_id, reason=REASON_ROOM_EXISTS))
            return

        owner = Player(message.player_id, connection, is_owner=True, color=PALETTE[0])
        self._rooms[room_id] = Room(room_id, owner, max_players=self.max_players)
        connection.player_id = message.player_id
        connection.room_id = room_id

        self._reply(connection, RoomCreated(room_id=room_id))
        logger.info("Room %s created, owner: %s", room_id, message.player_id)

    def join_room(self, connection: Connection, message: JoinRoomMessage) -> None:
        room_id = message.room_id
        room = self._rooms.get(room_id)

        reason: Optional[str] = None
        if room is None:
            reason = REASON_ROOM_NOT_FOUND
        elif room.is_full:
            reason = REASON_ROOM_FULL
        elif room.status is not RoomStatus.WAITING:
            reason = REASON_GAME_STARTED
        elif connection.seated:
            reason = REASON_ALREADY_SEATED
        elif room.has_player(message.player_id):
            reason = REASON_DUPLICATE_PLAYER

        if reason is not None:
            logger.info("Player %s could not join room %s: %s", message.player_id, room_id, reason)
            self._reply(connection, RoomJoined(success=False, room_id=room_id, reason=reason))
            return

        room.add_player(message.player_id, connection)
        room.touch()
        connection.player_id = message.player_id
        connection.room_id = room_id

        players = room.player_summaries()
        self._reply(connection, RoomJoined(success=True, room_id=room_id, players=players))
        self._broadcast(room, PlayerJoined(room_id=room_id, player_id=message.player_id, players=players))
        logger.info("Player %s joined room %s", message.player_id, room_id)

    def start_game(self, connection: Connection, message: StartGameMessage) -> None:
        room = self._rooms.get(message.room_id)
        if room is None:
            logger.info("start_game for unknown room %s ignored", message.room_id)
            return

        claimed = message.player_id if message.player_id is not None else connection.player_id
        if (
            connection.room_id != room.room_id
            or connection.player_id != room.owner_id
            or claimed != room.owner_id
        ):
            logger.info("start_game for room %s by non-owner %s ignored", room.room_id, claimed)
            return

        if room.status is not RoomStatus.WAITING:
            logger.info("start_game for room %s ignored: already %s", room.room_id, room.status.value)
            return

        room.status = RoomStatus.PLAYING
        room.touch()
        self._broadcast(room, GameStarted(room_id=room.room_id))
        logger.info("Room %s game started", room.room_id)

    def disconnect(self, connection: Connection) -> None:
        """Seats held by *connection* stay in their rooms; there is no leave."""
        if connection.room_id is None:
            return
        room = self._rooms.get(connection.room_id)
        if room is None:
            return
        for player in room.seats_of(connection):
            logger.info("Player %s in room %s disconnected; seat left orphaned",
                        player.player_id, room.room_id)

    def expire_idle(self, ttl_seconds: float, now: Optional[float] = None) -> List[str]:
        """Drop rooms idle for longer than *ttl_seconds*; returns removed ids."""
        if ttl_seconds <= 0:
            return []
        now = time.monotonic() if now is None else now
        stale = [rid for rid, room in self._rooms.items() if now - room.last_activity > ttl_seconds]
        for rid in stale:
            room = self._rooms.pop(rid)
            for player in room.players:
                if player.connection.room_id == rid:
                    player.connection.room_id = None
            logger.info("Room %s expired after %.0fs idle", rid, now - room.last_activity)
        return stale

    # ---------------------------------------------------------------------
    # Read-only views
    # ---------------------------------------------------------------------

    def snapshot(self, room_id: str) -> Optional[RoomSummary]:
        room = self._rooms.get(room_id)
        return room.summary() if room else None

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    # ---------------------------------------------------------------------
    # Delivery helpers
    # ---------------------------------------------------------------------

    def _reply(self, connection: Connection, message: WireModel) -> None:
        self.registry.send(connection, message)

    def _broadcast(self, room: Room, message: WireModel) -> None:
        """Send *message* to every seat in join order."""
        for player in room.players:
            self.registry.send(player.connection, message)


__all__ = ["RoomManager"]
