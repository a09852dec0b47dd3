"""Pydantic data schemas for the matchmaking wire protocol.

Every message exchanged over the websocket is a JSON object with a ``type``
discriminator. Field names are snake_case in Python and camelCase on the wire
(``room_id`` <-> ``roomId``), so outbound models must always be dumped with
``by_alias=True``.
"""
from __future__ import annotations

from typing import Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# -----------------------------
# Base
# -----------------------------


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# -----------------------------
# Client -> Server
# -----------------------------


class CreateRoomMessage(WireModel):
    type: Literal["create_room"] = "create_room"
    # Length is checked by the manager so a bad code still gets a reply.
    room_id: str
    player_id: str = Field(min_length=1)


class JoinRoomMessage(WireModel):
    type: Literal["join_room"] = "join_room"
    room_id: str
    player_id: str = Field(min_length=1)


class StartGameMessage(WireModel):
    type: Literal["start_game"] = "start_game"
    room_id: str
    # Optional claim of identity; must match the owner if present.
    player_id: Optional[str] = None


REQUEST_TYPES: Dict[str, Type[WireModel]] = {
    "create_room": CreateRoomMessage,
    "join_room": JoinRoomMessage,
    "start_game": StartGameMessage,
}

# -----------------------------
# Server -> Client
# -----------------------------


class PlayerSummary(WireModel):
    id: str
    is_owner: bool
    color: str


class RoomCreated(WireModel):
    type: Literal["room_created"] = "room_created"
    success: bool = True
    room_id: str
    reason: Optional[str] = None


class RoomJoined(WireModel):
    type: Literal["room_joined"] = "room_joined"
    success: bool
    room_id: str
    players: Optional[List[PlayerSummary]] = None
    reason: Optional[str] = None


class PlayerJoined(WireModel):
    type: Literal["player_joined"] = "player_joined"
    room_id: str
    player_id: str
    players: List[PlayerSummary]


class GameStarted(WireModel):
    type: Literal["game_started"] = "game_started"
    room_id: str


# -----------------------------
# REST
# -----------------------------


class RoomSummary(WireModel):
    room_id: str
    status: str  # waiting | playing
    max_players: int
    players: List[PlayerSummary]


__all__ = [
    "WireModel",
    "CreateRoomMessage",
    "JoinRoomMessage",
    "StartGameMessage",
    "REQUEST_TYPES",
    "PlayerSummary",
    "RoomCreated",
    "RoomJoined",
    "PlayerJoined",
    "GameStarted",
    "RoomSummary",
]
